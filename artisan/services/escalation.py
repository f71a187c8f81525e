"""
Escalation scheduler -- turns overdue invoices and upcoming interventions
into reminders and notifications.

Both scans are triggered on demand (page load, "check now" action,
management command) and are idempotent:

- invoice reminders are unique per (invoice, tier), one tier per day
- intervention reminders are unique per (intervention, tag, day)

Each candidate is processed on its own; a failing record is logged and
reported in the result, and the scan moves on.
"""

import logging
from datetime import date, timedelta

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from artisan.conf import get_setting
from artisan.dates import day_bucket, end_of_day, start_of_day
from artisan.exceptions import ArtisanError
from artisan.models import (
    Intervention,
    InterventionStatus,
    Invoice,
    InvoiceReminder,
    Notification,
    NotificationType,
)
from artisan.results import InterventionReminderResult, ReminderOutcome, ScanResult
from artisan.services.notifications import NotificationStore
from artisan.services.reminders import (
    days_overdue,
    is_urgent,
    next_manual_tier,
    next_tier,
    render_message,
    render_title,
)
from artisan.tags import TODAY, TWENTY_FOUR_HOUR, EscalationTag

logger = logging.getLogger(__name__)


STATUS_MESSAGES = {
    "in_progress": "a commencé",
    "completed": "est terminée",
    "cancelled": "a été annulée",
}


class EscalationScheduler:
    """
    Reminder and notification emission.

    All methods are @classmethod so the class can be composed into the
    Agenda facade without instantiation.
    """

    # ══════════════════════════════════════════════════════════════
    # INVOICE REMINDERS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def overdue_candidates(cls, artisan, today: date):
        statuses = list(get_setting("OVERDUE_INVOICE_STATUSES"))
        return (
            Invoice.objects.filter(
                artisan=artisan,
                status__in=statuses,
                due_date__isnull=False,
                due_date__lte=today,
            )
            .select_related("client")
            .prefetch_related("reminders")
            .order_by("due_date", "pk")
        )

    @classmethod
    def reminded_on(cls, artisan, day: date) -> set:
        """Invoice ids that already received a reminder on `day`."""
        return set(
            Notification.objects.filter(
                artisan=artisan,
                type=NotificationType.INVOICE_OVERDUE,
                day_bucket=day,
                invoice__isnull=False,
            )
            .exclude(tag="")
            .values_list("invoice_id", flat=True)
        )

    @classmethod
    def run_overdue_invoice_scan(cls, artisan, today: date | None = None) -> ScanResult:
        """
        Send the next due reminder tier for every overdue invoice.

        An invoice gets at most one tier per scan day, so running the scan
        again on the same day leaves the reminder state unchanged.

        Returns:
            ScanResult with created/skipped counts and per-invoice outcomes
        """
        today = today or timezone.localdate()
        method = get_setting("REMINDER_METHOD")
        result = ScanResult()
        handled = cls.reminded_on(artisan, today)

        for invoice in cls.overdue_candidates(artisan, today):
            if invoice.pk in handled:
                result.skipped += 1
                continue

            tier = next_tier(invoice.due_date, today, invoice.reminders.all())

            if tier is None:
                result.skipped += 1
                continue

            try:
                reminder, notification = cls._issue_reminder(invoice, tier, method, today)
            except IntegrityError:
                # Concurrent run already wrote this tier
                logger.info(
                    f"Reminder {tier} for invoice {invoice.number} already exists, skipping",
                    extra={"invoice": invoice.pk, "tier": tier},
                )
                result.skipped += 1
                continue
            except (DatabaseError, ArtisanError) as e:
                logger.exception(
                    f"Failed to create reminder {tier} for invoice {invoice.number}",
                    extra={"invoice": invoice.pk, "tier": tier},
                )
                result.outcomes.append(
                    ReminderOutcome(
                        invoice_id=invoice.pk,
                        invoice_number=invoice.number,
                        tier=tier,
                        success=False,
                        error=str(e),
                    )
                )
                continue

            result.created += 1
            result.outcomes.append(
                ReminderOutcome(
                    invoice_id=invoice.pk,
                    invoice_number=invoice.number,
                    tier=tier,
                    success=True,
                    reminder=reminder,
                    notification=notification,
                )
            )
            cls._announce_reminder(reminder, notification)

        logger.info(
            f"Overdue invoice scan: {result.created} created, {result.skipped} skipped, "
            f"{len(result.failures)} failed",
            extra={
                "artisan": getattr(artisan, "pk", None),
                "date": str(today),
                **result.as_dict(),
            },
        )

        return result

    @classmethod
    def send_invoice_reminder(
        cls, invoice: Invoice, method: str | None = None, today: date | None = None
    ) -> InvoiceReminder:
        """
        Envoie manuellement la relance suivante.

        The invoice must be past its due date. Tiers still go 1 → 2 → 3,
        regardless of the day thresholds.

        Raises:
            ArtisanError: NOT_OVERDUE, MAX_REMINDERS_REACHED, REMINDER_ALREADY_SENT
        """
        today = today or timezone.localdate()
        method = method or get_setting("REMINDER_METHOD")

        if invoice.due_date is None or invoice.due_date >= today:
            raise ArtisanError(
                "NOT_OVERDUE",
                invoice=invoice.number,
                due_date=str(invoice.due_date) if invoice.due_date else None,
            )

        tier = next_manual_tier(invoice.reminders.all())

        try:
            reminder, notification = cls._issue_reminder(invoice, tier, method, today)
        except IntegrityError:
            raise ArtisanError("REMINDER_ALREADY_SENT", invoice=invoice.number, tier=tier)

        cls._announce_reminder(reminder, notification)
        return reminder

    @classmethod
    def _issue_reminder(cls, invoice: Invoice, tier: int, method: str, today: date):
        """Write the reminder and its notification atomically."""
        late = days_overdue(invoice.due_date, today)
        message = render_message(
            tier,
            invoice.client.full_name,
            invoice.number,
            invoice.total,
            late,
        )

        with transaction.atomic():
            reminder = InvoiceReminder.objects.create(
                invoice=invoice,
                artisan=invoice.artisan,
                tier=tier,
                method=method,
                message=message,
            )
            notification = NotificationStore.create(
                invoice.artisan,
                NotificationType.INVOICE_OVERDUE,
                title=render_title(tier, invoice.number),
                message=message,
                client=invoice.client,
                invoice=invoice,
                tag=EscalationTag.for_tier(tier),
                day=today,
                metadata={
                    "daysOverdue": late,
                    "invoiceNumber": invoice.number,
                    "amount": str(invoice.total),
                    "method": method,
                    "urgent": is_urgent(tier),
                },
            )

        logger.info(
            f"Reminder {tier} sent for invoice {invoice.number} ({late} days overdue)",
            extra={
                "invoice": invoice.pk,
                "tier": tier,
                "days_overdue": late,
                "method": method,
            },
        )

        return reminder, notification

    @classmethod
    def _announce_reminder(cls, reminder, notification):
        """Send invoice_reminder_created; receiver errors are logged, never raised."""
        from artisan.signals import invoice_reminder_created

        responses = invoice_reminder_created.send_robust(
            sender=cls, reminder=reminder, notification=notification
        )
        for receiver, response in responses:
            if isinstance(response, Exception):
                logger.error(
                    f"Receiver {receiver!r} failed for reminder {reminder.tier} "
                    f"of invoice {reminder.invoice_id}",
                    exc_info=response,
                    extra={"invoice": reminder.invoice_id, "tier": reminder.tier},
                )

    # ══════════════════════════════════════════════════════════════
    # INTERVENTION REMINDERS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def upcoming_interventions(cls, artisan, day: date):
        return (
            Intervention.objects.filter(
                artisan=artisan,
                status=InterventionStatus.TODO,
                scheduled_at__gte=start_of_day(day),
                scheduled_at__lt=end_of_day(day),
            )
            .select_related("client")
            .order_by("scheduled_at")
        )

    @classmethod
    def run_intervention_reminder_scan(cls, artisan, now=None) -> InterventionReminderResult:
        """
        Remind the artisan of today's and tomorrow's interventions.

        At most one notification per (intervention, "today"/"24h", day).
        """
        now = now or timezone.now()
        today = day_bucket(now)
        tomorrow = today + timedelta(days=1)

        today_list = list(cls.upcoming_interventions(artisan, today))
        tomorrow_list = list(cls.upcoming_interventions(artisan, tomorrow))

        result = InterventionReminderResult(
            reminders_today=len(today_list),
            reminders_24h=len(tomorrow_list),
        )

        for tag, interventions in ((TWENTY_FOUR_HOUR, tomorrow_list), (TODAY, today_list)):
            for intervention in interventions:
                try:
                    notification = cls._remind_intervention(artisan, intervention, tag, today)
                except DatabaseError:
                    logger.exception(
                        f"Failed to create {tag} reminder for intervention {intervention.pk}",
                        extra={"intervention": intervention.pk, "tag": tag.key},
                    )
                    result.failed += 1
                    continue

                if notification is not None:
                    result.created += 1
                    result.notifications.append(notification)

        logger.info(
            f"Intervention reminder scan: {result.created} created",
            extra={"artisan": getattr(artisan, "pk", None), **result.as_dict()},
        )

        return result

    @classmethod
    def _remind_intervention(cls, artisan, intervention, tag: EscalationTag, today: date):
        if NotificationStore.already_notified(
            artisan,
            NotificationType.INTERVENTION_REMINDER,
            tag,
            today,
            intervention=intervention,
        ):
            return None

        when = "demain" if tag == TWENTY_FOUR_HOUR else "aujourd'hui"
        time_str = timezone.localtime(intervention.scheduled_at).strftime("%H:%M")
        message = (
            f'L\'intervention "{intervention.title}" pour {intervention.client.full_name} '
            f"est prévue {when} à {time_str}."
        )
        if intervention.address:
            message += f" Adresse : {intervention.address}"

        return NotificationStore.record_once(
            artisan,
            NotificationType.INTERVENTION_REMINDER,
            tag,
            today,
            title=f"Rappel intervention {when} - {intervention.title}",
            message=message,
            client=intervention.client,
            intervention=intervention,
            metadata={
                "interventionDate": intervention.scheduled_at.isoformat(),
                "interventionTitle": intervention.title,
            },
        )

    # ══════════════════════════════════════════════════════════════
    # STATUS CHANGES
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def on_status_change(cls, intervention, old_status: str, new_status: str):
        """
        Notify a status change.

        Returns the Notification, or None for same-status transitions and
        statuses without a message.
        """
        if old_status == new_status:
            logger.debug(f"Intervention {intervention.pk}: same status, no notification")
            return None

        verb = STATUS_MESSAGES.get(new_status)
        if verb is None:
            logger.debug(f"Intervention {intervention.pk}: no message for {new_status!r}")
            return None

        return NotificationStore.create(
            intervention.artisan,
            NotificationType.INTERVENTION_STATUS,
            title=f"Intervention {verb}",
            message=(
                f'L\'intervention "{intervention.title}" pour '
                f"{intervention.client.full_name} {verb}."
            ),
            client=intervention.client,
            intervention=intervention,
            metadata={
                "oldStatus": old_status,
                "newStatus": new_status,
                "interventionTitle": intervention.title,
            },
        )
