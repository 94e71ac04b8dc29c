from rest_framework import serializers

from backoffice.models import Announcement, PlatformSettings
from utils.rbac import ROLES


class PlatformSettingsSerializer(serializers.ModelSerializer):
    commission_rate = serializers.DecimalField(
        max_digits=5, decimal_places=4, min_value=0, max_value=1, required=False
    )

    class Meta:
        model = PlatformSettings
        fields = [
            "site_name",
            "site_description",
            "contact_email",
            "contact_phone",
            "maintenance_mode",
            "allow_registrations",
            "allow_seller_applications",
            "commission_rate",
            "min_order_amount",
            "max_products_per_store",
            "featured_product_limit",
            "updated_at",
        ]
        read_only_fields = ["updated_at"]


class DashboardStatsSerializer(serializers.Serializer):
    users = serializers.DictField(child=serializers.IntegerField())
    stores = serializers.DictField(child=serializers.IntegerField())
    products = serializers.DictField(child=serializers.IntegerField())
    orders = serializers.JSONField()
    pending_seller_applications = serializers.IntegerField()
    gross_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    platform_commission = serializers.DecimalField(max_digits=14, decimal_places=2)


class ChangeRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=ROLES)


class AnnouncementSerializer(serializers.ModelSerializer):
    class Meta:
        model = Announcement
        fields = [
            "id",
            "title",
            "content",
            "type",
            "position",
            "start_date",
            "end_date",
            "is_active",
            "background_color",
            "text_color",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
