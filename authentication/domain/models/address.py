from django.conf import settings
from django.db import models


class Address(models.Model):
    """Saved shipping / billing address of a user."""

    TYPE_CHOICES = [
        ("shipping", "Shipping"),
        ("billing", "Billing"),
    ]

    # Order in which parts are joined into a single-line address
    FORMAT_FIELDS = (
        "full_name",
        "address_line1",
        "address_line2",
        "district",
        "city",
        "postal_code",
        "country",
        "phone",
    )

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="addresses")
    title = models.CharField(max_length=100, blank=True, help_text="Label such as 'Home' or 'Office'")
    full_name = models.CharField(max_length=150)
    phone = models.CharField(max_length=30, blank=True)
    address_line1 = models.CharField(max_length=255)
    address_line2 = models.CharField(max_length=255, blank=True)
    district = models.CharField(max_length=100, blank=True)
    city = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20, blank=True)
    country = models.CharField(max_length=100, default="Türkiye")
    address_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="shipping")
    is_default = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "authentication"
        ordering = ["-is_default", "-created_at"]
        indexes = [models.Index(fields=["user", "address_type", "is_default"], name="address_user_default_idx")]

    def as_single_line(self) -> str:
        parts = [str(getattr(self, name) or "").strip() for name in self.FORMAT_FIELDS]
        return ", ".join(part for part in parts if part)

    def __str__(self):
        return f"{self.title or self.address_type} address of {self.user_id}"
