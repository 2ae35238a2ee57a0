"""Tests for demo day creation, edits and status transitions."""

from collections.abc import Callable
from datetime import timedelta

import pytest
from django.core import mail
from django.utils import timezone
from model_bakery import baker

from demodays.exceptions import ConflictError, NotFoundError, ValidationError
from demodays.lifecycle import (
    create_demo_day,
    get_current_demo_day,
    get_demo_day,
    soft_delete_demo_day,
    update_demo_day,
)
from demodays.models import Participant
from demodays.tests.helpers import event_names
from events.models import DemoDay
from users.models import CustomUser


@pytest.mark.django_db
class TestCreateDemoDay:
    """Verify demo day creation."""

    def test_create(
        self,
        staff: CustomUser,
        analytics_outbox: list,
        django_capture_on_commit_callbacks: Callable,
    ) -> None:
        """A demo day is created and reported."""
        now = timezone.now()
        with django_capture_on_commit_callbacks(execute=True):
            demo_day = create_demo_day(
                slug="autumn-2026",
                title="Autumn Demo Day",
                start_date=now,
                end_date=now + timedelta(hours=6),
                host="Community",
                actor=staff,
            )
        assert demo_day.status == DemoDay.Status.UPCOMING
        assert demo_day.host == "Community"
        assert event_names(analytics_outbox) == ["demo-day-created"]
        assert analytics_outbox[0].distinct_id == str(staff.uid)

    def test_inverted_window(self) -> None:
        """A demo day cannot end before it starts."""
        now = timezone.now()
        with pytest.raises(ValidationError):
            create_demo_day(slug="x", title="X", start_date=now, end_date=now - timedelta(days=1))

    def test_duplicate_slug(self, demo_day: DemoDay) -> None:
        """Slugs are unique."""
        with pytest.raises(ConflictError):
            create_demo_day(
                slug=demo_day.slug,
                title="Copy",
                start_date=demo_day.start_date,
                end_date=demo_day.end_date,
            )

    def test_unknown_field(self) -> None:
        """Unknown detail fields are refused."""
        now = timezone.now()
        with pytest.raises(ValidationError):
            create_demo_day(slug="y", title="Y", start_date=now, end_date=now, venue="Berlin")


@pytest.mark.django_db
class TestUpdateDemoDay:
    """Verify detail edits and status transitions."""

    def test_status_change_is_reported_once(
        self,
        demo_day: DemoDay,
        analytics_outbox: list,
        django_capture_on_commit_callbacks: Callable,
    ) -> None:
        """A real status change emits one event; repeating it emits nothing."""
        with django_capture_on_commit_callbacks(execute=True):
            update_demo_day(demo_day, status=DemoDay.Status.COMPLETED)
            update_demo_day(demo_day, status=DemoDay.Status.COMPLETED)

        assert event_names(analytics_outbox) == ["demo-day-status-updated"]
        properties = analytics_outbox[0].properties
        assert properties["fromStatus"] == DemoDay.Status.ACTIVE
        assert properties["toStatus"] == DemoDay.Status.COMPLETED

    def test_detail_change_lists_fields(
        self,
        demo_day: DemoDay,
        analytics_outbox: list,
        django_capture_on_commit_callbacks: Callable,
    ) -> None:
        """Detail edits report only the fields that changed."""
        with django_capture_on_commit_callbacks(execute=True):
            update_demo_day(demo_day, title="Renamed", host="")
        assert event_names(analytics_outbox) == ["demo-day-details-updated"]
        assert analytics_outbox[0].properties["fields"] == ["title"]

    def test_unknown_status(self, demo_day: DemoDay) -> None:
        """Unknown statuses are refused."""
        with pytest.raises(ValidationError):
            update_demo_day(demo_day, status="PAUSED")

    def test_inverted_window(self, demo_day: DemoDay) -> None:
        """Moving the end before the start is refused."""
        with pytest.raises(ValidationError):
            update_demo_day(demo_day, end_date=demo_day.start_date - timedelta(minutes=1))

    def test_notifies_enabled_participants(
        self,
        demo_day: DemoDay,
        make_identity: Callable[..., CustomUser],
        django_capture_on_commit_callbacks: Callable,
    ) -> None:
        """With notifications on, enabled participants are emailed after commit."""
        demo_day.notifications_enabled = True
        demo_day.save()
        for email, status in (
            ("on@example.com", Participant.Status.ENABLED),
            ("off@example.com", Participant.Status.DISABLED),
        ):
            baker.make(
                Participant,
                demo_day=demo_day,
                identity=make_identity(email),
                type=Participant.Type.INVESTOR,
                status=status,
            )

        with django_capture_on_commit_callbacks(execute=True):
            update_demo_day(demo_day, status=DemoDay.Status.COMPLETED)

        assert [message.to for message in mail.outbox] == [["on@example.com"]]
        assert "Completed" in mail.outbox[0].subject

    def test_notifications_off(
        self,
        demo_day: DemoDay,
        django_capture_on_commit_callbacks: Callable,
    ) -> None:
        """Nothing is sent when notifications are disabled."""
        with django_capture_on_commit_callbacks(execute=True):
            update_demo_day(demo_day, status=DemoDay.Status.COMPLETED)
        assert mail.outbox == []


@pytest.mark.django_db
class TestLookups:
    """Verify demo day lookups and soft deletion."""

    def test_get_by_slug(self, demo_day: DemoDay) -> None:
        """Live demo days are found by slug."""
        assert get_demo_day("spring-2026") == demo_day

    def test_soft_deleted_is_hidden(self, demo_day: DemoDay) -> None:
        """Soft-deleted demo days are not found."""
        soft_delete_demo_day(demo_day)
        with pytest.raises(NotFoundError):
            get_demo_day(demo_day.slug)
        assert get_current_demo_day() is None

    def test_current_skips_archived(self, demo_day: DemoDay) -> None:
        """Archived demo days are never current."""
        baker.make(
            DemoDay,
            slug="archived",
            start_date=demo_day.start_date + timedelta(days=30),
            end_date=demo_day.end_date + timedelta(days=30),
            status=DemoDay.Status.ARCHIVED,
        )
        assert get_current_demo_day() == demo_day
