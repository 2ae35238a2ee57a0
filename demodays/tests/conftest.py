"""Shared test fixtures for the demodays app."""

from collections.abc import Callable
from datetime import timedelta
from typing import Any

import pytest
from django.utils import timezone
from model_bakery import baker
from pytest_django.fixtures import SettingsWrapper

from demodays import analytics
from demodays.models import FundraisingProfile, Participant, Upload
from events.models import DemoDay
from teams.models import Team, TeamMemberRole
from users.models import AccessLevel, CustomUser


@pytest.fixture(autouse=True)
def analytics_outbox(settings: SettingsWrapper) -> list[analytics.AnalyticsEvent]:
    """
    Route analytics to the in-memory sink and start every test with an empty outbox.

    Events are only delivered on commit, so tests that inspect the outbox wrap the action in
    ``django_capture_on_commit_callbacks(execute=True)``.
    """
    settings.ANALYTICS_SINK = "demodays.analytics.LocMemAnalyticsSink"
    analytics.outbox.clear()
    yield analytics.outbox
    analytics.outbox.clear()


@pytest.fixture()
def demo_day() -> DemoDay:
    """Create an active demo day."""
    now = timezone.now()
    return baker.make(
        DemoDay,
        slug="spring-2026",
        title="Spring Demo Day",
        start_date=now,
        end_date=now + timedelta(days=2),
        status=DemoDay.Status.ACTIVE,
    )


@pytest.fixture()
def make_identity() -> Callable[..., CustomUser]:
    """Return a factory for identities with a verified email address."""

    def _make(email: str, **extra: Any) -> CustomUser:
        extra.setdefault("name", email.split("@")[0].title())
        return CustomUser.objects.create_user(email=email, **extra)

    return _make


@pytest.fixture()
def identity(make_identity: Callable[..., CustomUser]) -> CustomUser:
    """Create a verified community member."""
    return make_identity("member@example.com", access_level=AccessLevel.L3)


@pytest.fixture()
def staff() -> CustomUser:
    """Create a staff identity."""
    return CustomUser.objects.create_superuser(email="staff@example.com", password="hunter2")


@pytest.fixture()
def team() -> Team:
    """Create a startup team."""
    return baker.make(Team, name="Rocket Labs", industry="Fintech", stage="Seed")


@pytest.fixture()
def one_pager() -> Upload:
    """Create a one-pager upload."""
    return baker.make(Upload, kind=Upload.Kind.SLIDE, url="https://files.example.com/deck.pdf")


@pytest.fixture()
def video() -> Upload:
    """Create a pitch video upload."""
    return baker.make(Upload, kind=Upload.Kind.VIDEO, url="https://files.example.com/pitch.mp4")


@pytest.fixture()
def make_founder(
    demo_day: DemoDay,
    make_identity: Callable[..., CustomUser],
) -> Callable[..., Participant]:
    """Return a factory for founder participants of *team* at the demo day."""

    def _make(
        team: Team,
        email: str,
        status: str = Participant.Status.ENABLED,
        **extra: Any,
    ) -> Participant:
        founder = make_identity(email, access_level=AccessLevel.L3)
        TeamMemberRole.objects.create(identity=founder, team=team, main_team=True)
        return Participant.objects.create(
            demo_day=demo_day,
            identity=founder,
            type=Participant.Type.FOUNDER,
            team=team,
            status=status,
            **extra,
        )

    return _make


@pytest.fixture()
def published_team(
    demo_day: DemoDay,
    make_founder: Callable[..., Participant],
    one_pager: Upload,
    video: Upload,
) -> Team:
    """Create a team with an enabled founder and a complete, published profile."""
    listed = baker.make(Team, name="Listed Co", industry="Health", stage="Series A")
    make_founder(listed, "founder@listed.example.com")
    FundraisingProfile.objects.create(
        team=listed,
        demo_day=demo_day,
        one_pager_upload=one_pager,
        video_upload=video,
        status=FundraisingProfile.Status.PUBLISHED,
    )
    return listed


@pytest.fixture()
def make_viewer(
    demo_day: DemoDay,
    make_identity: Callable[..., CustomUser],
) -> Callable[..., CustomUser]:
    """Return a factory for identities that take part in the demo day as investors."""

    def _make(
        email: str,
        status: str = Participant.Status.ENABLED,
        **extra: Any,
    ) -> CustomUser:
        viewer = make_identity(email, access_level=AccessLevel.L6)
        Participant.objects.create(
            demo_day=demo_day,
            identity=viewer,
            type=Participant.Type.INVESTOR,
            status=status,
            **extra,
        )
        return viewer

    return _make


@pytest.fixture()
def viewer(make_viewer: Callable[..., CustomUser]) -> CustomUser:
    """Create an enabled investor participant."""
    return make_viewer("investor@fund.example.com")
