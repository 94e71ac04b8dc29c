from rest_framework import serializers

from marketplace.catalog.api.serializers.store_serializers import MinimalStoreSerializer
from marketplace.catalog.api.serializers.user_serializers import MinimalUserSerializer
from marketplace.ordering.domain.models.order import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    commission_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "product_name",
            "quantity",
            "price",
            "total_price",
            "seller_amount",
            "commission_amount",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    buyer = MinimalUserSerializer(read_only=True)
    store = MinimalStoreSerializer(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "buyer",
            "store",
            "status",
            "payment_status",
            "payment_method",
            "subtotal_amount",
            "shipping_fee",
            "discount_amount",
            "coupon_code",
            "total_amount",
            "address",
            "shipping_address",
            "billing_address",
            "tracking_number",
            "shipping_carrier",
            "order_note",
            "cancellation_reason",
            "items",
            "created_at",
            "updated_at",
            "shipped_at",
            "delivered_at",
            "cancelled_at",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Order row for listings; items are summarised"""

    store = MinimalStoreSerializer(read_only=True)
    items_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = ["id", "store", "status", "payment_status", "total_amount", "items_count", "created_at"]
        read_only_fields = fields

    def get_items_count(self, obj):
        return len(obj.items.all())
