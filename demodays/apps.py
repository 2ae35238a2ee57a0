"""AppConfig subclass for the demodays application."""

from django.apps import AppConfig


class DemoDaysConfig(AppConfig):
    """Configuration class for demo day participation and fundraising."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "demodays"
    verbose_name = "Demo day participation"

    def ready(self) -> None:
        """Django app initialization hook: connect signal handlers."""
        from . import signals  # noqa: F401, PLC0415

        return super().ready()
