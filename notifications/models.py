from django.conf import settings
from django.db import models


class Notification(models.Model):
    """In-app notification shown in the user's notification center."""

    TYPE_CHOICES = [
        ("new_product", "New product awaiting approval"),
        ("product_approved", "Product approved"),
        ("product_rejected", "Product rejected"),
        ("new_order", "New order"),
        ("order_status_changed", "Order status changed"),
        ("new_seller_application", "New seller application"),
        ("seller_application_approved", "Seller application approved"),
        ("seller_application_rejected", "Seller application rejected"),
        ("question_answered", "Question answered"),
        ("system", "System"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    title = models.CharField(max_length=200)
    message = models.TextField()
    type = models.CharField(max_length=40, choices=TYPE_CHOICES, default="system")
    related_id = models.CharField(max_length=64, blank=True)
    related_type = models.CharField(max_length=40, blank=True)
    action_url = models.CharField(max_length=500, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["user", "is_read", "-created_at"], name="notif_user_read_created_idx")]

    def __str__(self):
        return f"{self.type} for {self.user_id}: {self.title}"
