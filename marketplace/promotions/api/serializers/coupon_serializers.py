from rest_framework import serializers

from marketplace.catalog.api.serializers.user_serializers import MinimalUserSerializer
from marketplace.promotions.domain.models import Coupon, UserCoupon


class PublicCouponSerializer(serializers.ModelSerializer):
    """Coupon as a buyer sees it"""

    class Meta:
        model = Coupon
        fields = [
            "id",
            "code",
            "description",
            "discount_type",
            "discount_value",
            "min_purchase_amount",
            "expiry_date",
            "applicable_to",
        ]
        read_only_fields = fields


class UserCouponSerializer(serializers.ModelSerializer):
    coupon = PublicCouponSerializer(read_only=True)

    class Meta:
        model = UserCoupon
        fields = ["id", "coupon", "created_at"]
        read_only_fields = fields


class AdminCouponSerializer(serializers.ModelSerializer):
    """Coupon as seen in the back-office"""

    created_by = MinimalUserSerializer(read_only=True)
    applicable_products = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    applicable_categories = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    redemption_count = serializers.SerializerMethodField()

    class Meta:
        model = Coupon
        fields = [
            "id",
            "code",
            "description",
            "discount_type",
            "discount_value",
            "min_purchase_amount",
            "expiry_date",
            "max_uses",
            "uses_per_user",
            "current_uses",
            "applicable_to",
            "applicable_products",
            "applicable_categories",
            "is_active",
            "redemption_count",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_redemption_count(self, obj) -> int:
        return obj.redemptions.count()


class CouponWriteSerializer(serializers.Serializer):
    """Request body for creating or updating a coupon"""

    code = serializers.CharField(max_length=50)
    description = serializers.CharField(required=False, allow_blank=True)
    discount_type = serializers.ChoiceField(choices=Coupon.DISCOUNT_TYPE_CHOICES, required=False)
    discount_value = serializers.DecimalField(max_digits=10, decimal_places=2)
    min_purchase_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    expiry_date = serializers.DateTimeField(required=False, allow_null=True)
    max_uses = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    uses_per_user = serializers.IntegerField(required=False, min_value=1)
    applicable_to = serializers.ChoiceField(choices=Coupon.APPLICABLE_TO_CHOICES, required=False)
    product_ids = serializers.ListField(child=serializers.UUIDField(), required=False)
    category_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    is_active = serializers.BooleanField(required=False)


class ClaimCouponRequestSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)


class CouponItemRequestSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class PreviewCouponRequestSerializer(serializers.Serializer):
    """Request body for checking a coupon against the items about to be ordered"""

    code = serializers.CharField(max_length=50)
    items = CouponItemRequestSerializer(many=True, allow_empty=False)


class CouponPreviewSerializer(serializers.Serializer):
    code = serializers.CharField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
