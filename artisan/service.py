"""
Artisan Service - Thin wrapper over services and models.

Usage:
    from artisan import agenda, ArtisanError

    # Status guard
    check = agenda.validate_status(scheduled_at, "todo")
    if not check.ok:
        print(check.error.reason, check.suggested_fallback)

    # Calendar layout (one day)
    slots = agenda.layout(interventions)

    # Escalation (on demand)
    result = agenda.run_overdue_invoice_scan(user)
    agenda.run_intervention_reminder_scan(user)

    # Status change (guarded, notifies)
    agenda.change_status(intervention, "completed")
"""

import logging
from datetime import date

from django.db import transaction
from django.utils import timezone

from artisan.dates import day_bucket, end_of_day, start_of_day
from artisan.models import Intervention
from artisan.results import StatusCheck
from artisan.services import guard
from artisan.services.escalation import EscalationScheduler
from artisan.services.layout import LayoutEvent, LayoutSlot, layout, layout_by_day

logger = logging.getLogger(__name__)


class Agenda(EscalationScheduler):
    """
    Main API for Artisan (thin wrapper).

    Escalation methods are inherited from EscalationScheduler:
    run_overdue_invoice_scan, run_intervention_reminder_scan,
    send_invoice_reminder, on_status_change.
    """

    # ══════════════════════════════════════════════════════════════
    # STATUS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def validate_status(cls, scheduled_at, proposed_status: str, now=None) -> StatusCheck:
        """Validate before persisting an intervention create/update."""
        return guard.validate_status(scheduled_at, proposed_status, now or timezone.now())

    @classmethod
    def change_status(cls, intervention: Intervention, new_status: str, now=None, user=None):
        """Guarded status change; emits a status notification on change."""
        intervention.change_status(new_status, now=now, user=user)
        return intervention

    @classmethod
    def repair_statuses(cls, artisan, now=None, dry_run: bool = False) -> list[tuple]:
        """
        Bring stored interventions back in line with the status guard.

        Past "todo" becomes completed, future "completed" becomes todo.
        No notification is emitted for repairs.

        Returns:
            [(intervention, old_status, new_status), ...]
        """
        now = now or timezone.now()
        qs = Intervention.objects.filter(artisan=artisan)
        changes = []

        with transaction.atomic():
            for intervention, check in guard.find_inconsistent(qs, now):
                old_status = intervention.status
                new_status = check.suggested_fallback
                changes.append((intervention, old_status, new_status))

                logger.warning(
                    f"Intervention {intervention.pk}: inconsistent status "
                    f"{old_status} -> {new_status}",
                    extra={
                        "intervention": intervention.pk,
                        "scheduled_at": str(intervention.scheduled_at),
                        "dry_run": dry_run,
                    },
                )

                if not dry_run:
                    intervention.status = new_status
                    intervention.save(update_fields=["status", "updated_at"])

        return changes

    # ══════════════════════════════════════════════════════════════
    # CALENDAR
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def layout(cls, interventions, buffer_minutes: int | None = None) -> list[LayoutSlot]:
        """Layout for one rendered day (interventions or LayoutEvents)."""
        events = [cls._as_event(item) for item in interventions]
        return layout(events, buffer_minutes=buffer_minutes)

    @classmethod
    def layout_range(cls, artisan, start: date, end: date) -> dict[date, list[LayoutSlot]]:
        """Per-day layouts for every intervention in [start, end], keyed by uuid."""
        qs = Intervention.objects.filter(
            artisan=artisan,
            scheduled_at__gte=start_of_day(start),
            scheduled_at__lt=end_of_day(end),
        )
        return layout_by_day(LayoutEvent.from_intervention(i, key="uuid") for i in qs)

    @staticmethod
    def _as_event(item) -> LayoutEvent:
        if isinstance(item, LayoutEvent):
            return item
        return LayoutEvent.from_intervention(item)

    # ══════════════════════════════════════════════════════════════
    # ESCALATION
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def check_all(cls, artisan, now=None) -> dict:
        """Run both scans, as a page-load hook would."""
        now = now or timezone.now()
        invoices = cls.run_overdue_invoice_scan(artisan, today=day_bucket(now))
        interventions = cls.run_intervention_reminder_scan(artisan, now=now)
        return {
            "invoices": invoices.as_dict(),
            "interventions": interventions.as_dict(),
        }


agenda = Agenda
