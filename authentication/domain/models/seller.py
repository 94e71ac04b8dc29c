from django.conf import settings
from django.db import models
from django.utils import timezone


class SellerApplication(models.Model):
    """Application of a user to open a store on the marketplace"""

    STATUS_CHOICES = [
        ("pending", "Pending Review"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="seller_applications")

    # Store details requested by the application form
    store_name = models.CharField(max_length=200)
    store_description = models.TextField(blank=True)
    slug = models.SlugField(max_length=220, blank=True)
    contact_email = models.EmailField()
    contact_phone = models.CharField(max_length=30, blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, blank=True)
    tax_id = models.CharField(max_length=50, blank=True)
    website = models.URLField(blank=True)
    owner_name = models.CharField(max_length=150, blank=True)
    business_address = models.TextField(blank=True)

    # Review state
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending", db_index=True)
    rejection_reason = models.TextField(blank=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_seller_applications",
    )

    submitted_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "authentication"
        verbose_name = "Seller Application"
        verbose_name_plural = "Seller Applications"
        ordering = ["-submitted_at"]

    def mark_approved(self, admin_user):
        self.status = "approved"
        self.reviewed_at = timezone.now()
        self.reviewed_by = admin_user
        self.rejection_reason = ""
        self.save(update_fields=["status", "reviewed_at", "reviewed_by", "rejection_reason", "updated_at"])

    def mark_rejected(self, admin_user, reason):
        self.status = "rejected"
        self.reviewed_at = timezone.now()
        self.reviewed_by = admin_user
        self.rejection_reason = reason
        self.save(update_fields=["status", "reviewed_at", "reviewed_by", "rejection_reason", "updated_at"])

    def __str__(self):
        return f"Seller application '{self.store_name}' by {self.user_id}"
