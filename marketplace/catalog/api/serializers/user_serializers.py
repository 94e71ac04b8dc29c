from django.contrib.auth import get_user_model
from rest_framework import serializers


User = get_user_model()


class MinimalUserSerializer(serializers.ModelSerializer):
    """Public identity of a buyer, seller or reviewer"""

    class Meta:
        model = User
        fields = ["id", "username", "full_name"]
        read_only_fields = fields
