"""
Response Serializers for Marketplace API Documentation

These serializers define the structure of API requests and responses for
OpenAPI schema generation. Views use the request serializers for input
validation; the response ones only feed Swagger/ReDoc.
"""

from rest_framework import serializers

# ===== Common Response Serializers =====


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error response"""

    detail = serializers.CharField(help_text="Human-readable error message")
    code = serializers.CharField(help_text="Error code identifier, e.g. price_mismatch")


class PaginatedResponseSerializer(serializers.Serializer):
    """Paginated list response"""

    count = serializers.IntegerField(help_text="Total number of results")
    page = serializers.IntegerField(help_text="Current page number")
    page_size = serializers.IntegerField(help_text="Items per page")
    num_pages = serializers.IntegerField(help_text="Total number of pages")
    has_next = serializers.BooleanField(help_text="Whether there is a next page")
    has_previous = serializers.BooleanField(help_text="Whether there is a previous page")
    results = serializers.ListField(child=serializers.DictField(), help_text="Page of results")


# ===== Product Requests =====


class RejectProductRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(help_text="Why the product was rejected (at least 5 characters)")


class BulkModerationRequestSerializer(serializers.Serializer):
    product_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    reason = serializers.CharField(required=False, allow_blank=True, help_text="Required for bulk reject")


class BulkModerationResponseSerializer(serializers.Serializer):
    results = serializers.ListField(child=serializers.DictField(), help_text="Per-id outcome: id, ok, error, detail")
    succeeded = serializers.IntegerField()
    failed = serializers.IntegerField()


class FeatureProductRequestSerializer(serializers.Serializer):
    is_featured = serializers.BooleanField(default=True)


# ===== Cart Requests =====


class AddToCartRequestSerializer(serializers.Serializer):
    """Request body for adding item to cart"""

    product_id = serializers.UUIDField(help_text="Product UUID to add")
    quantity = serializers.IntegerField(min_value=1, default=1, help_text="Quantity to add (default: 1)")


class UpdateCartRequestSerializer(serializers.Serializer):
    """Request body for updating cart item"""

    product_id = serializers.UUIDField(help_text="Product UUID to update")
    quantity = serializers.IntegerField(min_value=1, help_text="New quantity")


class RemoveFromCartRequestSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(help_text="Product UUID to remove")


# ===== Order Requests =====


class OrderItemRequestSerializer(serializers.Serializer):
    product_id = serializers.CharField(help_text="Product UUID")
    quantity = serializers.IntegerField(help_text="Units ordered")
    price = serializers.DecimalField(max_digits=10, decimal_places=2, help_text="Unit price the buyer saw")


class CreateOrderRequestSerializer(serializers.Serializer):
    """Request body for placing an order"""

    store_id = serializers.UUIDField(help_text="Store the order is placed with")
    order_items = OrderItemRequestSerializer(many=True)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    shipping_fee = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, default=0)
    discount_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, default=0)
    coupon_code = serializers.CharField(
        required=False, allow_blank=True, max_length=50, help_text="Coupon to apply; the discount is computed from it"
    )
    address_id = serializers.IntegerField(required=False, help_text="Saved address of the buyer")
    shipping_address_full = serializers.CharField(required=False, help_text="Inline single-line address")
    billing_address_full = serializers.CharField(required=False)
    order_note = serializers.CharField(required=False, allow_blank=True)
    payment_method = serializers.CharField(required=False, allow_blank=True)
    user_id = serializers.UUIDField(required=False, help_text="Admins only: place the order for this user")


class UpdateOrderRequestSerializer(serializers.Serializer):
    status = serializers.CharField(required=False)
    payment_status = serializers.CharField(required=False)
    tracking_number = serializers.CharField(required=False, allow_blank=True)
    shipping_carrier = serializers.CharField(required=False, allow_blank=True)
    order_note = serializers.CharField(required=False, allow_blank=True)
    cancellation_reason = serializers.CharField(required=False, allow_blank=True)


# ===== Reviews & Questions =====


class CreateReviewRequestSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    title = serializers.CharField(max_length=200)
    comment = serializers.CharField()


class TextRequestSerializer(serializers.Serializer):
    text = serializers.CharField(help_text="Question, answer or response text")


class ModerateQuestionRequestSerializer(serializers.Serializer):
    is_approved = serializers.BooleanField(allow_null=True)
