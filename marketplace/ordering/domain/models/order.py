import uuid

from django.conf import settings
from django.db import models

from marketplace.catalog.domain.models.catalog import Product
from marketplace.catalog.domain.models.store import Store


class Order(models.Model):
    STATUS_CHOICES = [
        ("pending", "Pending"),  # Default status after placement
        ("awaiting_payment", "Awaiting Payment"),
        ("paid", "Paid"),
        ("processing", "Processing"),
        ("shipped", "Shipped"),
        ("delivered", "Delivered"),
        ("cancelled", "Cancelled"),
        ("cancellation_requested", "Cancellation Requested"),  # Buyer asked, seller/admin decides
        ("refunded", "Refunded"),
    ]

    PAYMENT_STATUS_CHOICES = [
        ("pending", "Pending"),
        ("paid", "Paid"),
        ("failed", "Failed"),
        ("refunded", "Refunded"),
    ]

    # Orders in these states block a second order for the same products
    OPEN_STATUSES = ("pending", "awaiting_payment")
    # A buyer may ask to cancel only from these states
    BUYER_CANCELLABLE_STATUSES = ("pending", "paid", "processing")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    buyer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="orders")
    store = models.ForeignKey(Store, on_delete=models.PROTECT, related_name="orders")

    # Order Details
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default="pending", db_index=True)
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default="pending")
    payment_method = models.CharField(max_length=50, blank=True)

    # Pricing
    subtotal_amount = models.DecimalField(max_digits=12, decimal_places=2)
    shipping_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    coupon_code = models.CharField(max_length=50, blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)

    # Shipping Information
    address = models.ForeignKey(
        "authentication.Address", on_delete=models.SET_NULL, null=True, blank=True, related_name="orders"
    )
    shipping_address = models.TextField()
    billing_address = models.TextField(blank=True)
    tracking_number = models.CharField(max_length=100, blank=True)
    shipping_carrier = models.CharField(max_length=100, blank=True)

    # Notes
    order_note = models.TextField(blank=True)
    cancellation_reason = models.TextField(blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["buyer", "status"], name="order_buyer_status_idx"),
            models.Index(fields=["store", "-created_at"], name="order_store_created_idx"),
        ]

    def __str__(self):
        return f"Order {str(self.id)[:8]}"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="order_items")

    quantity = models.PositiveIntegerField(default=1)
    price = models.DecimalField(max_digits=10, decimal_places=2, help_text="Unit price at time of purchase")
    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    seller_amount = models.DecimalField(
        max_digits=12, decimal_places=2, help_text="Amount owed to the seller after platform commission"
    )

    # Product snapshot at time of purchase
    product_name = models.CharField(max_length=200)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "marketplace"

    @property
    def commission_amount(self):
        return self.total_price - self.seller_amount

    def __str__(self):
        return f"{self.quantity}x {self.product_name} in order {str(self.order_id)[:8]}"
