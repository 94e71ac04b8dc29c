from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models
from django.utils import timezone


class PlatformSettings(models.Model):
    """Single row of marketplace-wide settings edited from the back-office."""

    site_name = models.CharField(max_length=255, default="Pazar")
    site_description = models.TextField(blank=True)
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=50, blank=True)
    maintenance_mode = models.BooleanField(default=False)
    allow_registrations = models.BooleanField(default=True)
    allow_seller_applications = models.BooleanField(default=True)
    # Fraction of each order line kept by the platform (0.10 == 10%)
    commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal("0.10"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
    )
    min_order_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    max_products_per_store = models.PositiveIntegerField(default=1000)
    featured_product_limit = models.PositiveIntegerField(default=20)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Platform settings"
        verbose_name_plural = "Platform settings"

    @classmethod
    def load(cls):
        """Return the settings row, or None when it was never created."""
        return cls.objects.order_by("pk").first()

    @classmethod
    def load_or_create(cls):
        instance = cls.load()
        if instance is None:
            instance = cls.objects.create()
        return instance

    def __str__(self):
        return self.site_name


hex_color = RegexValidator(r"^#[0-9A-Fa-f]{6}$", "Use a #RRGGBB colour")


class Announcement(models.Model):
    """Site-wide banner shown to every visitor while it is active and inside its date window."""

    TYPE_CHOICES = [
        ("info", "Info"),
        ("warning", "Warning"),
        ("success", "Success"),
        ("error", "Error"),
    ]

    POSITION_CHOICES = [
        ("top", "Top"),
        ("bottom", "Bottom"),
    ]

    title = models.CharField(max_length=200)
    content = models.TextField()
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="info")
    position = models.CharField(max_length=10, choices=POSITION_CHOICES, default="top")
    start_date = models.DateTimeField(default=timezone.now)
    # Open-ended when null
    end_date = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    background_color = models.CharField(max_length=7, default="#3B82F6", validators=[hex_color])
    text_color = models.CharField(max_length=7, default="#FFFFFF", validators=[hex_color])
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="announcements"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["is_active", "start_date"], name="announcement_active_idx"),
        ]

    def __str__(self):
        return self.title
