"""Small assertion helpers shared by the demodays tests."""

from demodays.analytics import AnalyticsEvent


def event_names(events: list[AnalyticsEvent]) -> list[str]:
    """Return the names of *events* in delivery order."""
    return [event.name for event in events]
