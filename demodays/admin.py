"""Admin interface for demo day participation and fundraising materials."""

from typing import ClassVar

from django.contrib import admin, messages
from django.db.models import QuerySet
from django.http import HttpRequest

from demodays.fundraising import recompute_fundraising_profile_status
from demodays.participants import update_participant

from .models import FundraisingProfile, Participant, Upload


@admin.register(Upload)
class UploadAdmin(admin.ModelAdmin):
    """Admin configuration for the Upload model."""

    list_display = ("filename", "kind", "url", "created_at")
    list_filter = ("kind",)
    search_fields = ("filename", "url", "uid")
    readonly_fields = ("uid", "created_at")


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    """Admin configuration for the Participant model."""

    list_display = (
        "identity",
        "demo_day",
        "type",
        "status",
        "team",
        "has_early_access",
        "team_lead_request_status",
        "is_deleted",
    )
    list_filter = ("demo_day", "type", "status", "team_lead_request_status", "is_deleted")
    search_fields = ("identity__email", "identity__name", "team__name")
    autocomplete_fields: ClassVar[list[str]] = ["identity", "team"]
    readonly_fields = ("uid", "status", "status_updated_at", "created_at", "updated_at")
    actions: ClassVar[list[str]] = ["enable_participants", "disable_participants"]

    def _set_status(
        self,
        request: HttpRequest,
        queryset: QuerySet[Participant],
        status: str,
    ) -> None:
        for participant in queryset.select_related("demo_day"):
            update_participant(
                participant.demo_day,
                participant.uid,
                status=status,
                actor=request.user,
            )
        messages.success(request, f"Set {queryset.count()} participant(s) to {status}.")

    @admin.action(description="Enable selected participants")
    def enable_participants(self, request: HttpRequest, queryset: QuerySet[Participant]) -> None:
        """Grant access to the selected participants."""
        self._set_status(request, queryset, Participant.Status.ENABLED)

    @admin.action(description="Disable selected participants")
    def disable_participants(self, request: HttpRequest, queryset: QuerySet[Participant]) -> None:
        """Revoke access from the selected participants."""
        self._set_status(request, queryset, Participant.Status.DISABLED)


@admin.register(FundraisingProfile)
class FundraisingProfileAdmin(admin.ModelAdmin):
    """Admin configuration for the FundraisingProfile model."""

    list_display = ("team", "demo_day", "status", "updated_at")
    list_filter = ("demo_day", "status")
    search_fields = ("team__name",)
    autocomplete_fields: ClassVar[list[str]] = ["team"]
    raw_id_fields = ("one_pager_upload", "video_upload")
    readonly_fields = ("uid", "status", "created_at", "updated_at")
    actions: ClassVar[list[str]] = ["recompute_status"]

    @admin.action(description="Recompute publication status")
    def recompute_status(
        self,
        request: HttpRequest,
        queryset: QuerySet[FundraisingProfile],
    ) -> None:
        """Re-derive the status of the selected profiles."""
        for profile in queryset.select_related("team", "demo_day"):
            recompute_fundraising_profile_status(profile.team, profile.demo_day)
        messages.success(request, f"Recomputed {queryset.count()} profile(s).")
