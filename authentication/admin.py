from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import Address, CustomUser, SellerApplication


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    list_display = ("email", "username", "full_name", "role", "is_active", "date_joined")
    list_filter = ("role", "is_active", "is_staff", "is_superuser")
    search_fields = ("email", "username", "full_name")
    ordering = ("-date_joined",)
    fieldsets = UserAdmin.fieldsets + (("Marketplace", {"fields": ("role", "full_name", "phone")}),)


@admin.register(Address)
class AddressAdmin(admin.ModelAdmin):
    list_display = ("user", "address_type", "city", "country", "is_default")
    list_filter = ("address_type", "is_default", "country")
    search_fields = ("user__email", "full_name", "city", "address_line1")


@admin.register(SellerApplication)
class SellerApplicationAdmin(admin.ModelAdmin):
    list_display = ("store_name", "user", "status", "submitted_at", "reviewed_at", "reviewed_by")
    list_filter = ("status",)
    search_fields = ("store_name", "user__email", "contact_email")
    readonly_fields = ("submitted_at", "reviewed_at", "reviewed_by", "updated_at")
