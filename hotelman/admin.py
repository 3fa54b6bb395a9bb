"""Hotelman admin."""

from django.contrib import admin
from django.utils.html import format_html

from hotelman.models import ActivityLog, Branch, Guest, Notification

TIER_COLORS = {
    "bronze": "#cd7f32",
    "silver": "#c0c0c0",
    "gold": "#ffd700",
    "platinum": "#e5e4e2",
}


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ["code", "name", "is_active", "guest_count"]
    list_filter = ["is_active"]
    search_fields = ["code", "name"]

    def guest_count(self, obj):
        return obj.guests.count()

    guest_count.short_description = "Guests"


@admin.register(Guest)
class GuestAdmin(admin.ModelAdmin):
    list_display = [
        "code",
        "name",
        "branch",
        "loyalty_points",
        "tier_badge",
        "total_stays",
        "total_spent",
        "last_visit",
        "is_vip",
    ]
    list_filter = ["loyalty_tier", "branch", "is_vip", "is_active"]
    search_fields = ["code", "first_name", "last_name", "email", "phone"]
    raw_id_fields = ["branch"]
    # Balance and tier only change through LoyaltyService
    readonly_fields = [
        "loyalty_points",
        "loyalty_tier",
        "total_stays",
        "total_spent",
        "last_visit",
        "version",
        "created_at",
        "updated_at",
    ]

    def tier_badge(self, obj):
        color = TIER_COLORS.get(obj.loyalty_tier, "#6c757d")
        text_color = "#000" if obj.loyalty_tier in ("gold", "silver", "platinum") else "#fff"
        return format_html(
            '<span style="background:{}; color:{}; padding:2px 8px; '
            'border-radius:3px; font-size:11px;">{}</span>',
            color,
            text_color,
            obj.get_loyalty_tier_display(),
        )

    tier_badge.short_description = "Tier"


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ["created_at", "action", "entity", "entity_id", "actor", "branch"]
    list_filter = ["action", "branch"]
    search_fields = ["entity_id", "actor"]
    readonly_fields = ["actor", "branch", "action", "entity", "entity_id", "details", "created_at"]
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["created_at", "recipient", "kind", "title", "is_read"]
    list_filter = ["kind", "is_read"]
    search_fields = ["recipient", "title"]
    readonly_fields = ["created_at"]
