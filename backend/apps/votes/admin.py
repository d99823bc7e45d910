"""
Admin configuration for Votes app.

Both models are append-only, so the admin is read-only.
"""

from django.contrib import admin

from .models import Vote, VoteAttempt


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Vote)
class VoteAdmin(ReadOnlyAdmin):
    """Admin interface for Vote model."""

    list_display = ["candidate", "fingerprint", "ip_address", "created_at"]
    list_filter = ["candidate", "created_at"]
    search_fields = ["fingerprint", "ip_address"]
    fieldsets = (
        ("Vote Details", {"fields": ("candidate",)}),
        ("Tracking", {"fields": ("ip_address", "user_agent", "fingerprint")}),
        ("Timestamp", {"fields": ("created_at",)}),
    )


@admin.register(VoteAttempt)
class VoteAttemptAdmin(ReadOnlyAdmin):
    """Admin interface for VoteAttempt model (audit log)."""

    list_display = ["candidate", "success", "reason", "ip_address", "timestamp"]
    list_filter = ["success", "reason", "timestamp"]
    search_fields = ["ip_address", "fingerprint_prefix", "reason"]
    fieldsets = (
        ("Attempt Details", {"fields": ("candidate", "fingerprint_prefix")}),
        ("Tracking", {"fields": ("ip_address",)}),
        ("Outcome", {"fields": ("success", "reason")}),
        ("Timestamp", {"fields": ("timestamp",)}),
    )
