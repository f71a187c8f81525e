"""
Notification store -- append-only notification log for an artisan.

Escalation notifications are written with `record_once()`: the insert runs
in a savepoint against the (subject, type, tag, day_bucket) unique
constraint, and a conflict means another run already handled it. There is
no read-then-write window, so two concurrent scans cannot both insert.
"""

import logging
from datetime import date

from django.db import IntegrityError, transaction
from django.utils import timezone

from artisan.dates import start_of_day
from artisan.models import Notification, NotificationStatus
from artisan.tags import EscalationTag

logger = logging.getLogger(__name__)


class NotificationStore:
    """Create and query notifications."""

    @classmethod
    def create(
        cls,
        artisan,
        type: str,
        title: str,
        message: str,
        client=None,
        intervention=None,
        invoice=None,
        tag: EscalationTag | None = None,
        day: date | None = None,
        metadata: dict | None = None,
    ) -> Notification:
        """Insert a notification. Raises IntegrityError on a tag conflict."""
        notification = Notification.objects.create(
            artisan=artisan,
            type=type,
            title=title,
            message=message,
            client=client,
            intervention=intervention,
            invoice=invoice,
            tag=tag.key if tag else "",
            day_bucket=day or timezone.localdate(),
            metadata=metadata or {},
        )

        logger.info(
            f"Notification created: {title}",
            extra={
                "notification": notification.pk,
                "type": type,
                "tag": notification.tag,
                "artisan": getattr(artisan, "pk", None),
            },
        )

        from artisan.signals import notification_created

        notification_created.send(sender=cls, notification=notification)

        return notification

    @classmethod
    def record_once(cls, artisan, type: str, tag: EscalationTag, day: date, **fields):
        """
        Insert, ignoring a conflict on (subject, type, tag, day).

        Returns the new Notification, or None if one already existed.
        """
        try:
            with transaction.atomic():
                return cls.create(artisan, type, tag=tag, day=day, **fields)
        except IntegrityError:
            logger.info(
                f"Notification {type}/{tag} already recorded for {day}, skipping",
                extra={"type": type, "tag": tag.key, "day": str(day)},
            )
            return None

    @classmethod
    def already_notified(
        cls,
        artisan,
        type: str,
        tag: EscalationTag,
        day: date,
        intervention=None,
        invoice=None,
    ) -> bool:
        """
        True if a notification with this tag exists for the subject on `day`.

        Untagged rows created since the start of `day` are matched through
        their metadata; rows whose metadata cannot be interpreted count as
        no match.
        """
        qs = Notification.objects.filter(artisan=artisan, type=type)
        if intervention is not None:
            qs = qs.filter(intervention=intervention)
        if invoice is not None:
            qs = qs.filter(invoice=invoice)

        if qs.filter(tag=tag.key, day_bucket=day).exists():
            return True

        legacy = qs.filter(tag="", created_at__gte=start_of_day(day))
        for metadata in legacy.values_list("metadata", flat=True):
            if EscalationTag.from_metadata(metadata) == tag:
                return True

        return False

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def for_artisan(cls, artisan):
        return Notification.objects.filter(artisan=artisan).select_related(
            "client", "intervention", "invoice"
        )

    @classmethod
    def for_subject(cls, artisan, intervention=None, invoice=None):
        qs = cls.for_artisan(artisan)
        if intervention is not None:
            qs = qs.filter(intervention=intervention)
        if invoice is not None:
            qs = qs.filter(invoice=invoice)
        return qs

    @classmethod
    def for_day(cls, artisan, day: date):
        return cls.for_artisan(artisan).filter(day_bucket=day)

    @classmethod
    def unread_count(cls, artisan) -> int:
        return Notification.objects.filter(
            artisan=artisan, status=NotificationStatus.UNREAD
        ).count()

    @classmethod
    def mark_all_read(cls, artisan) -> int:
        """Mark every unread notification as read. Returns rows updated."""
        updated = Notification.objects.filter(
            artisan=artisan, status=NotificationStatus.UNREAD
        ).update(status=NotificationStatus.READ, read_at=timezone.now())

        logger.info(f"Marked {updated} notifications as read", extra={"count": updated})
        return updated
