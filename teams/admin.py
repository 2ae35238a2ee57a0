"""Admin interface for teams, memberships and investor profiles."""

from typing import ClassVar

from django.contrib import admin
from django.db.models import Count, QuerySet
from django.http import HttpRequest

from .models import InvestorProfile, Team, TeamMemberRole


class TeamMemberRoleInline(admin.TabularInline):
    """Inline admin interface for memberships of a team."""

    model = TeamMemberRole
    extra = 0
    autocomplete_fields: ClassVar[list[str]] = ["identity"]
    fields = ("identity", "role", "team_lead", "main_team", "investment_team")


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    """Admin configuration for the Team model."""

    list_display = ("name", "industry", "stage", "is_fund", "member_count")
    list_filter = ("is_fund", "stage")
    search_fields = ("name", "website")
    readonly_fields = ("uid", "created_at", "updated_at")
    inlines: ClassVar[list[type[admin.TabularInline]]] = [TeamMemberRoleInline]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Team]:
        """Annotate teams with their membership count."""
        return super().get_queryset(request).annotate(members_total=Count("member_roles"))

    @admin.display(description="Members", ordering="members_total")
    def member_count(self, obj: Team) -> int:
        """Show how many identities belong to the team."""
        return getattr(obj, "members_total", 0)


@admin.register(TeamMemberRole)
class TeamMemberRoleAdmin(admin.ModelAdmin):
    """Admin configuration for the TeamMemberRole model."""

    list_display = ("identity", "team", "role", "team_lead", "main_team", "investment_team")
    list_filter = ("team_lead", "main_team", "investment_team")
    search_fields = ("identity__email", "identity__name", "team__name", "role")
    autocomplete_fields: ClassVar[list[str]] = ["identity", "team"]


@admin.register(InvestorProfile)
class InvestorProfileAdmin(admin.ModelAdmin):
    """Admin configuration for the InvestorProfile model."""

    list_display = ("__str__", "investment_type", "typical_check_size", "sec_rules_accepted")
    list_filter = ("investment_type", "sec_rules_accepted")
    search_fields = ("identity__email", "team__name")
    autocomplete_fields: ClassVar[list[str]] = ["identity", "team"]
