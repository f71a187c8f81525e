"""
Tests for Artisan signal handlers (artisan.signals.handlers).

Verifies that:
- notify_status_change writes one status notification per real change
- A notification failure never undoes the status change
- Signals carry the expected arguments
"""

from unittest.mock import patch

import pytest
from django.db import DatabaseError

from artisan.models import Intervention, Notification, NotificationType
from artisan.signals import intervention_status_changed, notification_created
from artisan.signals.handlers import notify_status_change


@pytest.fixture
def intervention(now, make_intervention):
    return make_intervention(now, title="Pose robinet")


# ═══════════════════════════════════════════════════════════════════
# notify_status_change
# ═══════════════════════════════════════════════════════════════════


class TestNotifyStatusChange:
    """Tests for notify_status_change handler."""

    def test_creates_notification(self, intervention):
        note = notify_status_change(
            sender=Intervention,
            intervention=intervention,
            old_status="todo",
            new_status="cancelled",
        )

        assert note.type == NotificationType.INTERVENTION_STATUS
        assert "a été annulée" in note.message

    def test_same_status_is_noop(self, intervention):
        result = notify_status_change(
            sender=Intervention,
            intervention=intervention,
            old_status="todo",
            new_status="todo",
        )

        assert result is None
        assert not Notification.objects.exists()

    def test_database_error_is_logged_not_raised(self, intervention, caplog):
        with patch(
            "artisan.services.escalation.EscalationScheduler.on_status_change",
            side_effect=DatabaseError("locked"),
        ):
            result = notify_status_change(
                sender=Intervention,
                intervention=intervention,
                old_status="todo",
                new_status="completed",
            )

        assert result is None
        assert "Failed to notify status change" in caplog.text

    def test_status_kept_when_notification_fails(self, now, intervention):
        with patch(
            "artisan.services.escalation.EscalationScheduler.on_status_change",
            side_effect=DatabaseError("locked"),
        ):
            intervention.change_status("completed", now=now)

        intervention.refresh_from_db()
        assert intervention.status == "completed"
        assert not Notification.objects.exists()


# ═══════════════════════════════════════════════════════════════════
# Signal payloads
# ═══════════════════════════════════════════════════════════════════


class TestSignals:
    def test_status_changed_payload(self, now, artisan, intervention):
        received = []

        def listener(sender, **kwargs):
            received.append(kwargs)

        intervention_status_changed.connect(listener)
        try:
            intervention.change_status("completed", now=now, user=artisan)
        finally:
            intervention_status_changed.disconnect(listener)

        assert len(received) == 1
        kwargs = received[0]
        assert kwargs["intervention"] == intervention
        assert kwargs["old_status"] == "todo"
        assert kwargs["new_status"] == "completed"
        assert kwargs["user"] == artisan

    def test_notification_created_sent(self, now, intervention):
        received = []

        def listener(sender, notification, **kwargs):
            received.append(notification)

        notification_created.connect(listener)
        try:
            intervention.change_status("cancelled", now=now)
        finally:
            notification_created.disconnect(listener)

        assert [n.intervention for n in received] == [intervention]
