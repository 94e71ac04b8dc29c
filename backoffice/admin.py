from django.contrib import admin

from .models import Announcement, PlatformSettings


@admin.register(PlatformSettings)
class PlatformSettingsAdmin(admin.ModelAdmin):
    list_display = ("site_name", "commission_rate", "allow_registrations", "allow_seller_applications", "updated_at")


@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
    list_display = ("title", "type", "position", "start_date", "end_date", "is_active")
    list_filter = ("type", "position", "is_active")
    search_fields = ("title", "content")
