"""Tests for the notification sender."""

from django.core import mail
from django.test import override_settings

from demodays.notifications import NotificationRequest, send_notification


class TestSendNotification:
    """Verify messages are rendered and sent one per recipient."""

    @override_settings(DEFAULT_FROM_EMAIL="demoday@example.com")
    def test_one_message_per_recipient(self) -> None:
        """Every recipient gets a separate message."""
        sent = send_notification(
            NotificationRequest(
                template_id="demo-day-status-updated",
                recipients=["a@example.com", "b@example.com"],
                payload={"title": "Spring Demo Day", "status": "Active", "slug": "spring"},
            ),
        )

        assert sent == 2  # noqa: PLR2004
        assert [message.to for message in mail.outbox] == [["a@example.com"], ["b@example.com"]]
        assert mail.outbox[0].subject == "Spring Demo Day is now Active"
        assert mail.outbox[0].from_email == "demoday@example.com"
        assert "slug: spring" in mail.outbox[0].body

    def test_no_recipients(self) -> None:
        """Nothing is sent without recipients."""
        assert send_notification(NotificationRequest("demo-day-invitation", [])) == 0
        assert mail.outbox == []

    def test_unknown_template_uses_id_as_subject(self) -> None:
        """Templates without a subject line fall back to their id."""
        send_notification(NotificationRequest("custom-note", ["a@example.com"]))
        assert mail.outbox[0].subject == "custom-note"
