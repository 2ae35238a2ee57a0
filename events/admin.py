"""Admin interface for demo days."""

from collections.abc import Sequence
from typing import Any, ClassVar

from django.contrib import admin, messages
from django.db.models import Count, Q, QuerySet
from django.http import HttpRequest

from demodays.lifecycle import soft_delete_demo_day, update_demo_day

from .models import DemoDay


@admin.register(DemoDay)
class DemoDayAdmin(admin.ModelAdmin):
    """Admin configuration for the DemoDay model."""

    list_display = (
        "title",
        "slug",
        "status",
        "start_date",
        "end_date",
        "participant_count",
        "notifications_enabled",
        "is_deleted",
    )
    list_filter = ("status", "notifications_enabled", "is_deleted")
    search_fields = ("title", "slug", "host")
    readonly_fields = ("uid", "created_at", "updated_at")
    prepopulated_fields: ClassVar[dict[str, Sequence[str]]] = {"slug": ("title",)}
    actions: ClassVar[list[str]] = ["open_registration", "activate", "complete", "soft_delete"]
    fieldsets: ClassVar[list[Any]] = [
        (
            None,
            {
                "fields": (
                    "uid",
                    "title",
                    "slug",
                    "description",
                    "host",
                ),
            },
        ),
        (
            "Schedule",
            {"fields": ("start_date", "end_date", "status")},
        ),
        (
            "Notifications",
            {"fields": ("notifications_enabled",)},
        ),
        (
            "Housekeeping",
            {"fields": ("is_deleted", "created_at", "updated_at")},
        ),
    ]

    def get_queryset(self, request: HttpRequest) -> QuerySet[DemoDay]:
        """Annotate demo days with their live participant count."""
        return (
            super()
            .get_queryset(request)
            .annotate(
                participants_total=Count("participants", filter=Q(participants__is_deleted=False)),
            )
        )

    @admin.display(description="Participants", ordering="participants_total")
    def participant_count(self, obj: DemoDay) -> int:
        """Show how many live participants the demo day has."""
        return getattr(obj, "participants_total", 0)

    def _move_to(self, request: HttpRequest, queryset: QuerySet[DemoDay], status: str) -> None:
        for demo_day in queryset:
            update_demo_day(demo_day, actor=request.user, status=status)
        messages.success(request, f"Moved {queryset.count()} demo day(s) to {status}.")

    @admin.action(description="Open registration")
    def open_registration(self, request: HttpRequest, queryset: QuerySet[DemoDay]) -> None:
        """Move the selected demo days to REGISTRATION_OPEN."""
        self._move_to(request, queryset, DemoDay.Status.REGISTRATION_OPEN)

    @admin.action(description="Activate")
    def activate(self, request: HttpRequest, queryset: QuerySet[DemoDay]) -> None:
        """Move the selected demo days to ACTIVE."""
        self._move_to(request, queryset, DemoDay.Status.ACTIVE)

    @admin.action(description="Complete")
    def complete(self, request: HttpRequest, queryset: QuerySet[DemoDay]) -> None:
        """Move the selected demo days to COMPLETED."""
        self._move_to(request, queryset, DemoDay.Status.COMPLETED)

    @admin.action(description="Soft-delete")
    def soft_delete(self, request: HttpRequest, queryset: QuerySet[DemoDay]) -> None:
        """Hide the selected demo days without removing them."""
        for demo_day in queryset:
            soft_delete_demo_day(demo_day)
        messages.success(request, f"Deleted {queryset.count()} demo day(s).")
