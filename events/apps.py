"""AppConfig subclass for the events application."""

from django.apps import AppConfig


class EventsConfig(AppConfig):
    """Configuration class for demo day events."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "events"
    verbose_name = "Demo days"
