"""AppConfig subclass for the teams application."""

from django.apps import AppConfig


class TeamsConfig(AppConfig):
    """Configuration class for the team store."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "teams"
    verbose_name = "Teams"
