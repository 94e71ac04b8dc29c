from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = [
            "id",
            "title",
            "message",
            "type",
            "related_id",
            "related_type",
            "action_url",
            "is_read",
            "read_at",
            "created_at",
        ]
        read_only_fields = fields


class AdminNotificationCreateSerializer(serializers.Serializer):
    """Body of the admin endpoint that sends a notification to one user"""

    user_id = serializers.UUIDField()
    title = serializers.CharField(max_length=200)
    message = serializers.CharField()
    type = serializers.ChoiceField(choices=Notification.TYPE_CHOICES, default="system")
    reference_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    reference_type = serializers.CharField(max_length=40, required=False, allow_blank=True)
    action_url = serializers.CharField(max_length=500, required=False, allow_blank=True)
