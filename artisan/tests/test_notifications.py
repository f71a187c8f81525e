"""
Tests for the notification store (artisan.services.notifications).
"""

from datetime import timedelta

import pytest
from django.db import IntegrityError, transaction

from artisan.models import Notification, NotificationStatus, NotificationType
from artisan.services.notifications import NotificationStore
from artisan.tags import TODAY, TWENTY_FOUR_HOUR, EscalationTag


@pytest.fixture
def intervention(now, make_intervention):
    return make_intervention(now)


def remind(artisan, intervention, tag, day):
    return NotificationStore.record_once(
        artisan,
        NotificationType.INTERVENTION_REMINDER,
        tag,
        day,
        title="Rappel",
        message="...",
        intervention=intervention,
    )


class TestRecordOnce:
    def test_second_insert_is_ignored(self, artisan, intervention, today):
        first = remind(artisan, intervention, TODAY, today)
        second = remind(artisan, intervention, TODAY, today)

        assert first is not None
        assert second is None
        assert Notification.objects.count() == 1

    def test_other_tag_or_day_is_new(self, artisan, intervention, today):
        remind(artisan, intervention, TODAY, today)

        assert remind(artisan, intervention, TWENTY_FOUR_HOUR, today) is not None
        assert remind(artisan, intervention, TODAY, today + timedelta(days=1)) is not None

    def test_constraint_enforced_by_database(self, artisan, intervention, today):
        fields = dict(
            artisan=artisan,
            type=NotificationType.INTERVENTION_REMINDER,
            title="Rappel",
            message="...",
            intervention=intervention,
            tag="today",
            day_bucket=today,
        )
        Notification.objects.create(**fields)

        with pytest.raises(IntegrityError), transaction.atomic():
            Notification.objects.create(**fields)

    def test_untagged_rows_not_deduplicated(self, artisan, intervention):
        for _ in range(2):
            NotificationStore.create(
                artisan,
                NotificationType.INTERVENTION_STATUS,
                title="Intervention est terminée",
                message="...",
                intervention=intervention,
            )

        assert Notification.objects.count() == 2


class TestAlreadyNotified:
    def test_tagged_row(self, artisan, intervention, today):
        remind(artisan, intervention, TODAY, today)

        assert NotificationStore.already_notified(
            artisan, NotificationType.INTERVENTION_REMINDER, TODAY, today,
            intervention=intervention,
        )
        assert not NotificationStore.already_notified(
            artisan, NotificationType.INTERVENTION_REMINDER, TWENTY_FOUR_HOUR, today,
            intervention=intervention,
        )

    def test_legacy_row_before_today_ignored(self, artisan, intervention, now, today):
        Notification.objects.create(
            artisan=artisan,
            type=NotificationType.INTERVENTION_REMINDER,
            title="Rappel",
            message="importé",
            intervention=intervention,
            metadata={"reminderType": "today"},
            created_at=now - timedelta(days=1),
        )

        assert not NotificationStore.already_notified(
            artisan, NotificationType.INTERVENTION_REMINDER, TODAY, today,
            intervention=intervention,
        )

    def test_escalation_tag_property(self, artisan, intervention, today):
        tagged = remind(artisan, intervention, EscalationTag.for_tier(2), today)
        legacy = Notification.objects.create(
            artisan=artisan,
            type=NotificationType.INTERVENTION_REMINDER,
            title="Rappel",
            message="importé",
            metadata={"reminderNumber": 1},
        )

        assert tagged.escalation_tag == EscalationTag.for_tier(2)
        assert legacy.escalation_tag == EscalationTag.for_tier(1)


class TestReadState:
    def test_mark_read(self, artisan, intervention, today):
        note = remind(artisan, intervention, TODAY, today)

        note.mark_read()

        note.refresh_from_db()
        assert note.is_read
        assert note.read_at is not None

    def test_unread_count_and_mark_all(self, artisan, other_artisan, intervention, today):
        remind(artisan, intervention, TODAY, today)
        remind(artisan, intervention, TWENTY_FOUR_HOUR, today)
        NotificationStore.create(other_artisan, NotificationType.INVOICE_OVERDUE, "x", "y")

        assert NotificationStore.unread_count(artisan) == 2
        assert NotificationStore.mark_all_read(artisan) == 2
        assert NotificationStore.unread_count(artisan) == 0
        assert NotificationStore.unread_count(other_artisan) == 1
        assert not Notification.objects.filter(
            artisan=artisan, status=NotificationStatus.UNREAD
        ).exists()

    def test_queries(self, artisan, intervention, today):
        remind(artisan, intervention, TODAY, today)

        assert NotificationStore.for_subject(artisan, intervention=intervention).count() == 1
        assert NotificationStore.for_day(artisan, today).count() == 1
        assert NotificationStore.for_day(artisan, today - timedelta(days=1)).count() == 0
