"""Admin interface for identities."""

from typing import Any, ClassVar

from allauth.account.models import EmailAddress
from django.contrib import admin, messages
from django.db.models.query import QuerySet
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _

from .models import AccessLevel, CustomUser


class EmailVerificationListFilter(admin.SimpleListFilter):
    """Filter identities by email verification status."""

    title = _("Email verification")
    parameter_name = "verified"

    def lookups(self, request: HttpRequest, model_admin: Any) -> list[tuple[str, str]]:  # noqa: ARG002
        """Return filter options."""
        return [
            ("yes", _("Verified")),
            ("no", _("Not verified")),
        ]

    def queryset(self, request: HttpRequest, queryset: QuerySet) -> QuerySet:  # noqa: ARG002
        """Filter queryset based on selected option."""
        if self.value() == "yes":
            return queryset.filter(emailaddress__verified=True)
        if self.value() == "no":
            return queryset.filter(emailaddress__verified=False)
        return queryset


class EmailAddressInline(admin.TabularInline):
    """Inline admin interface for EmailAddress objects."""

    model = EmailAddress
    extra = 0
    readonly_fields: ClassVar[list[str]] = ["email", "verified", "primary"]
    can_delete = False
    verbose_name = _("Email Address")
    verbose_name_plural = _("Email Addresses")
    fields = ("email", "verified", "primary")

    def has_add_permission(self, request: HttpRequest, obj: CustomUser | None = None) -> bool:  # noqa: ARG002
        """Prevent adding email addresses directly through admin."""
        return False


@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    """Admin configuration for identities."""

    list_display = (
        "email",
        "name",
        "access_level",
        "telegram_handle",
        "is_staff",
        "date_joined",
    )
    list_filter = (EmailVerificationListFilter, "access_level", "is_staff", "is_active")
    search_fields = ("email", "name", "twitter_handle", "linkedin_handle", "telegram_handle")
    ordering = ("-date_joined",)
    readonly_fields = ("uid", "date_joined", "updated_at", "last_login")
    inlines: ClassVar[list[type[admin.TabularInline]]] = [EmailAddressInline]
    actions: ClassVar[list[str]] = ["verify_email", "reject_identities"]
    fieldsets = (
        (None, {"fields": ("uid", "email", "name", "access_level")}),
        (_("Handles"), {"fields": ("twitter_handle", "linkedin_handle", "telegram_handle")}),
        (
            _("Permissions"),
            {
                "fields": ("is_active", "is_staff", "is_superuser"),
                "description": _(
                    "Only superusers and staff members can log in to the admin site. "
                    "Everyone else logs in through the passwordless authentication.",
                ),
            },
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined", "updated_at")}),
    )

    @admin.action(description=_("Mark selected identities' emails as verified"))
    def verify_email(self, request: HttpRequest, queryset: QuerySet) -> None:
        """Mark selected identity emails as verified."""
        count = EmailAddress.objects.filter(user__in=queryset, verified=False).update(
            verified=True,
        )
        if count:
            messages.success(
                request,
                _("Successfully verified %(count)d email addresses.") % {"count": count},
            )
        else:
            messages.info(request, _("No unverified email addresses found."))

    @admin.action(description=_("Reject selected identities"))
    def reject_identities(self, request: HttpRequest, queryset: QuerySet) -> None:
        """Move selected identities to the rejected tier."""
        count = queryset.exclude(access_level=AccessLevel.REJECTED).update(
            access_level=AccessLevel.REJECTED,
        )
        messages.success(request, _("Rejected %(count)d identities.") % {"count": count})
