import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from marketplace.catalog.domain.models.catalog import Product
from marketplace.catalog.domain.models.category import Category


class Coupon(models.Model):
    DISCOUNT_TYPE_CHOICES = [
        ("percentage", "Percentage"),
        ("fixed_amount", "Fixed Amount"),
    ]

    APPLICABLE_TO_CHOICES = [
        ("all_products", "All Products"),
        ("specific_products", "Specific Products"),
        ("specific_categories", "Specific Categories"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=50, unique=True, help_text="Stored upper-case")
    description = models.TextField(blank=True)

    discount_type = models.CharField(max_length=20, choices=DISCOUNT_TYPE_CHOICES, default="percentage")
    discount_value = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    min_purchase_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    expiry_date = models.DateTimeField(null=True, blank=True)

    # Usage limits; a null max_uses means unlimited
    max_uses = models.PositiveIntegerField(null=True, blank=True)
    uses_per_user = models.PositiveIntegerField(default=1)
    current_uses = models.PositiveIntegerField(default=0)

    applicable_to = models.CharField(max_length=30, choices=APPLICABLE_TO_CHOICES, default="all_products")
    applicable_products = models.ManyToManyField(Product, blank=True, related_name="coupons")
    applicable_categories = models.ManyToManyField(Category, blank=True, related_name="coupons")

    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="created_coupons"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "marketplace"
        ordering = ["-created_at"]

    def __str__(self):
        return self.code

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)


class UserCoupon(models.Model):
    """A coupon a user added to their account."""

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="user_coupons")
    coupon = models.ForeignKey(Coupon, on_delete=models.CASCADE, related_name="holders")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "marketplace"
        unique_together = ["user", "coupon"]
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.coupon.code} held by {self.user_id}"


class CouponRedemption(models.Model):
    coupon = models.ForeignKey(Coupon, on_delete=models.CASCADE, related_name="redemptions")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="coupon_redemptions")
    order = models.OneToOneField("marketplace.Order", on_delete=models.CASCADE, related_name="coupon_redemption")
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["coupon", "user"], name="coupon_redemption_user_idx"),
        ]

    def __str__(self):
        return f"{self.coupon.code} on order {self.order_id}"
