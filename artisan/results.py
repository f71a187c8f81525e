"""
Artisan Result Types.

Structured results for status checks and escalation scans.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from artisan.exceptions import InvalidTransition
    from artisan.models import InvoiceReminder, Notification


@dataclass
class StatusCheck:
    """
    Résultat de la validation d'un statut.

    Si ok=True : le statut proposé est accepté tel quel
    Si ok=False : error contient le motif et le statut de repli suggéré
    """

    ok: bool
    status: str
    error: InvalidTransition | None = None

    @property
    def suggested_fallback(self) -> str | None:
        return self.error.suggested_fallback if self.error else None


@dataclass
class ReminderOutcome:
    """Outcome of one invoice in an overdue scan."""

    invoice_id: int
    invoice_number: str
    tier: int | None
    success: bool
    reminder: InvoiceReminder | None = None
    notification: Notification | None = None
    error: str | None = None


@dataclass
class ScanResult:
    """
    Résultat d'un scan des factures en retard.

    created: reminders written this run
    skipped: invoices with nothing to send (or already handled concurrently)
    failures: invoices whose write failed; the scan continued past them
    """

    created: int = 0
    skipped: int = 0
    outcomes: list[ReminderOutcome] = field(default_factory=list)

    @property
    def failures(self) -> list[ReminderOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def has_failures(self) -> bool:
        return len(self.failures) > 0

    def as_dict(self) -> dict:
        return {
            "created": self.created,
            "skipped": self.skipped,
            "failures": [
                {
                    "invoice_id": o.invoice_id,
                    "invoice_number": o.invoice_number,
                    "tier": o.tier,
                    "error": o.error,
                }
                for o in self.failures
            ],
        }


@dataclass
class InterventionReminderResult:
    """
    Résultat d'un scan des rappels d'intervention.

    reminders_today / reminders_24h count the candidate interventions;
    created counts notifications actually written this run.
    """

    reminders_today: int = 0
    reminders_24h: int = 0
    created: int = 0
    failed: int = 0
    notifications: list[Notification] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "reminders_today": self.reminders_today,
            "reminders_24h": self.reminders_24h,
            "created": self.created,
            "failed": self.failed,
        }
