from django.contrib import admin

from .models import (
    Cart,
    CartItem,
    Category,
    Coupon,
    CouponRedemption,
    Order,
    OrderItem,
    Product,
    ProductAnswer,
    ProductImage,
    ProductQuestion,
    ProductReview,
    ReviewResponse,
    Store,
)


class ProductImageInline(admin.TabularInline):
    model = ProductImage
    extra = 0
    fields = ("storage_key", "alt_text", "is_primary", "order")
    readonly_fields = ("storage_key",)


class ProductReviewInline(admin.TabularInline):
    model = ProductReview
    extra = 0
    fields = ("user", "rating", "title", "created_at")
    readonly_fields = ("user", "rating", "title", "created_at")


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "parent", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "description")
    prepopulated_fields = {"slug": ("name",)}


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "is_active", "is_verified", "is_featured", "commission_rate", "created_at")
    list_filter = ("is_active", "is_verified", "is_featured")
    search_fields = ("name", "owner__email", "contact_email")
    readonly_fields = ("created_at", "updated_at")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "store", "price", "stock_quantity", "approval_status", "is_active", "is_featured")
    list_filter = ("approval_status", "is_active", "is_featured", "category")
    search_fields = ("name", "description", "brand", "store__name")
    readonly_fields = ("submitted_at", "approved_at", "approved_by", "rejected_at", "rejected_by", "created_at")
    inlines = [ProductImageInline, ProductReviewInline]

    fieldsets = (
        (None, {"fields": ("name", "slug", "description", "brand", "store", "seller", "category")}),
        ("Pricing & Inventory", {"fields": ("price", "discount_price", "stock_quantity")}),
        ("Status", {"fields": ("is_active", "is_featured")}),
        (
            "Moderation",
            {
                "fields": (
                    "approval_status",
                    "reject_reason",
                    "submitted_at",
                    "approved_at",
                    "approved_by",
                    "rejected_at",
                    "rejected_by",
                )
            },
        ),
    )


@admin.register(ProductReview)
class ProductReviewAdmin(admin.ModelAdmin):
    list_display = ("product", "user", "rating", "title", "created_at")
    list_filter = ("rating",)
    search_fields = ("title", "comment", "product__name")


admin.site.register(ReviewResponse)


@admin.register(ProductQuestion)
class ProductQuestionAdmin(admin.ModelAdmin):
    list_display = ("product", "user", "is_approved", "is_answered", "created_at")
    list_filter = ("is_approved", "is_answered")
    search_fields = ("question_text", "product__name")


admin.site.register(ProductAnswer)


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ("user", "created_at", "updated_at")
    inlines = [CartItemInline]


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "product_name", "quantity", "price", "total_price", "seller_amount")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "buyer", "store", "status", "payment_status", "total_amount", "created_at")
    list_filter = ("status", "payment_status", "created_at")
    search_fields = ("id", "buyer__email", "store__name", "tracking_number")
    readonly_fields = ("created_at", "updated_at", "shipped_at", "delivered_at", "cancelled_at")
    inlines = [OrderItemInline]


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ("code", "discount_type", "discount_value", "current_uses", "max_uses", "expiry_date", "is_active")
    list_filter = ("discount_type", "applicable_to", "is_active")
    search_fields = ("code", "description")
    filter_horizontal = ("applicable_products", "applicable_categories")
    readonly_fields = ("current_uses", "created_by", "created_at", "updated_at")


@admin.register(CouponRedemption)
class CouponRedemptionAdmin(admin.ModelAdmin):
    list_display = ("coupon", "user", "order", "amount", "created_at")
    search_fields = ("coupon__code", "user__email")
    readonly_fields = ("coupon", "user", "order", "amount", "created_at")
