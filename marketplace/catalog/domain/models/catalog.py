import logging
import uuid

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.text import slugify

from .category import Category
from .store import Store

logger = logging.getLogger(__name__)


class Product(models.Model):
    APPROVAL_STATUS_CHOICES = [
        ("pending", "Pending Approval"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
    ]

    # Basic Information
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True, blank=True)
    description = models.TextField(blank=True)
    brand = models.CharField(max_length=100, blank=True)

    # Store, seller and category
    store = models.ForeignKey(Store, on_delete=models.CASCADE, related_name="products")
    seller = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="products")
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name="products")

    # Pricing and Inventory
    price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0.01), MaxValueValidator(1000000)]
    )
    discount_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    stock_quantity = models.PositiveIntegerField(default=0)

    # Status and Visibility
    is_active = models.BooleanField(default=False)
    is_featured = models.BooleanField(default=False)

    # Approval workflow
    approval_status = models.CharField(max_length=20, choices=APPROVAL_STATUS_CHOICES, default="pending")
    reject_reason = models.TextField(blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="approved_products"
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="rejected_products"
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["approval_status", "is_active", "-created_at"], name="prod_approval_active_idx"),
            models.Index(fields=["approval_status", "-submitted_at"], name="prod_moderation_queue_idx"),
            models.Index(fields=["store", "-created_at"], name="prod_store_created_idx"),
            models.Index(fields=["seller", "-created_at"], name="prod_seller_created_idx"),
            models.Index(fields=["category", "is_active"], name="prod_category_active_idx"),
            models.Index(fields=["is_featured", "is_active"], name="prod_featured_active_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(f"{self.name}-{str(self.id)[:8]}")
        super().save(*args, **kwargs)

    @property
    def effective_price(self):
        """Price the buyer pays: discount_price when set, else price."""
        return self.discount_price if self.discount_price is not None else self.price

    @property
    def is_publicly_visible(self) -> bool:
        return self.approval_status == "approved" and self.is_active

    def __str__(self):
        return self.name


class ProductImage(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="images")
    storage_key = models.CharField(max_length=500, help_text="Object key in the configured storage backend")
    original_filename = models.CharField(max_length=255, blank=True)
    file_size = models.PositiveIntegerField(null=True, blank=True, help_text="File size in bytes")
    content_type = models.CharField(max_length=100, blank=True)
    alt_text = models.CharField(max_length=200, blank=True)
    is_primary = models.BooleanField(default=False)
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-is_primary", "order", "created_at"]
        app_label = "marketplace"

    def get_url(self, expires_in: int = None):
        """Signed URL for the image, generated on read through the storage adapter."""
        from infrastructure.container import container
        from infrastructure.storage import StorageException

        expires_in = expires_in or getattr(settings, "PRODUCT_IMAGE_URL_EXPIRY_SECONDS", 3600)
        try:
            return container.storage().get_url(self.storage_key, expires_in=expires_in)
        except StorageException as e:
            logger.warning(f"Could not build URL for product image {self.pk}: {e}")
            return None

    def __str__(self):
        return f"Image for {self.product.name}"
