import logging

from rest_framework import serializers

from marketplace.catalog.domain.models.catalog import Product

from .category_serializers import MinimalCategorySerializer
from .image_serializers import ProductImageSerializer
from .store_serializers import MinimalStoreSerializer
from .user_serializers import MinimalUserSerializer


logger = logging.getLogger(__name__)


class ProductListSerializer(serializers.ModelSerializer):
    """Minimal product serializer for list/search - just the essentials for product cards"""

    store = MinimalStoreSerializer(read_only=True)
    effective_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    primary_image = serializers.SerializerMethodField()
    is_on_sale = serializers.SerializerMethodField()
    is_in_stock = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "brand",
            "price",
            "discount_price",
            "effective_price",
            "stock_quantity",
            "store",
            "primary_image",
            "is_featured",
            "is_on_sale",
            "is_in_stock",
            "approval_status",
        ]
        read_only_fields = fields

    def get_primary_image(self, obj):
        images = getattr(obj, "_prefetched_objects_cache", {}).get("images", obj.images.all())
        primary_image = None
        first_image = None
        for image in images:
            if first_image is None:
                first_image = image
            if image.is_primary:
                primary_image = image
                break
        target_image = primary_image or first_image
        if target_image:
            return target_image.get_url()
        return None

    def get_is_on_sale(self, obj):
        return obj.discount_price is not None and obj.discount_price < obj.price

    def get_is_in_stock(self, obj):
        return obj.stock_quantity > 0


class ProductDetailSerializer(serializers.ModelSerializer):
    """Full product page, including the moderation state the owner and admins see"""

    store = MinimalStoreSerializer(read_only=True)
    seller = MinimalUserSerializer(read_only=True)
    category = MinimalCategorySerializer(read_only=True)
    images = ProductImageSerializer(many=True, read_only=True)
    effective_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "brand",
            "store",
            "seller",
            "category",
            "price",
            "discount_price",
            "effective_price",
            "stock_quantity",
            "images",
            "is_active",
            "is_featured",
            "approval_status",
            "reject_reason",
            "submitted_at",
            "approved_at",
            "rejected_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if instance.approval_status != "rejected":
            data.pop("reject_reason", None)
        return data


class ProductWriteSerializer(serializers.Serializer):
    """Fields a seller may send when creating or editing a product"""

    store_id = serializers.UUIDField(required=False, help_text="Store the product belongs to (create only)")
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    brand = serializers.CharField(max_length=100, required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    discount_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    stock_quantity = serializers.IntegerField(min_value=0, required=False, default=0)
    category_id = serializers.IntegerField(required=False, allow_null=True)

    def validate(self, attrs):
        price = attrs.get("price")
        discount_price = attrs.get("discount_price")
        if price is not None and discount_price is not None and discount_price > price:
            raise serializers.ValidationError({"discount_price": "Discount price cannot exceed the price"})
        return attrs


class ModerationQueueSerializer(serializers.ModelSerializer):
    """Product row in the admin moderation queue"""

    store = MinimalStoreSerializer(read_only=True)
    seller = MinimalUserSerializer(read_only=True)
    approved_by = MinimalUserSerializer(read_only=True)
    rejected_by = MinimalUserSerializer(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "store",
            "seller",
            "price",
            "discount_price",
            "stock_quantity",
            "approval_status",
            "reject_reason",
            "submitted_at",
            "approved_at",
            "approved_by",
            "rejected_at",
            "rejected_by",
            "is_active",
            "is_featured",
        ]
        read_only_fields = fields
