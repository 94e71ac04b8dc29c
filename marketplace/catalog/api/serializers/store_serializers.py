from rest_framework import serializers

from marketplace.catalog.domain.models.store import Store

from .user_serializers import MinimalUserSerializer


class MinimalStoreSerializer(serializers.ModelSerializer):
    class Meta:
        model = Store
        fields = ["id", "name", "slug"]
        read_only_fields = fields


class StoreSerializer(serializers.ModelSerializer):
    """Public storefront data"""

    class Meta:
        model = Store
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "contact_email",
            "contact_phone",
            "city",
            "country",
            "is_verified",
            "is_featured",
            "created_at",
        ]
        read_only_fields = fields


class AdminStoreSerializer(serializers.ModelSerializer):
    """Store as seen in the back-office"""

    owner = MinimalUserSerializer(read_only=True)
    product_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Store
        fields = [
            "id",
            "owner",
            "name",
            "slug",
            "description",
            "contact_email",
            "contact_phone",
            "address",
            "city",
            "country",
            "tax_id",
            "commission_rate",
            "is_active",
            "is_verified",
            "is_featured",
            "product_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AdminStoreCreateSerializer(serializers.Serializer):
    owner_id = serializers.UUIDField()
    name = serializers.CharField(max_length=200)
    slug = serializers.CharField(max_length=220, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    contact_email = serializers.EmailField(required=False, allow_blank=True)
    contact_phone = serializers.CharField(required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(required=False, allow_blank=True)
    country = serializers.CharField(required=False, allow_blank=True)
    is_verified = serializers.BooleanField(required=False)


class AdminStoreUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)
    is_verified = serializers.BooleanField(required=False)
    is_featured = serializers.BooleanField(required=False)
    commission_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )
