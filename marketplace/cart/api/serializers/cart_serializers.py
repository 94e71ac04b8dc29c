from rest_framework import serializers

from marketplace.catalog.api.serializers.product_serializers import ProductListSerializer


class CartItemServiceOutputSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    product = ProductListSerializer(read_only=True)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    added_at = serializers.DateTimeField(read_only=True)


class CartServiceOutputSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    user_id = serializers.UUIDField(read_only=True)
    items = CartItemServiceOutputSerializer(many=True, read_only=True)
    items_count = serializers.IntegerField(read_only=True)
    totals = serializers.JSONField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)
