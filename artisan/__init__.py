"""
Django Artisan - Scheduling & escalation engine for independent tradespeople.

Keeps interventions consistent with the calendar, lays them out for
day/week views and escalates overdue invoices and upcoming jobs into
reminders and notifications.

Usage:
    from artisan import agenda, ArtisanError

    # Status guard
    check = agenda.validate_status(intervention.scheduled_at, "todo")
    if not check.ok:
        print(check.error.reason, "->", check.suggested_fallback)

    # Calendar (one rendered day)
    for slot in agenda.layout(day_interventions):
        print(slot.event_id, slot.column, slot.left_fraction, slot.width_fraction)

    # Escalation, triggered on demand
    result = agenda.run_overdue_invoice_scan(user)
    print(result.created, result.skipped, len(result.failures))
    agenda.run_intervention_reminder_scan(user)
"""

from artisan.exceptions import ArtisanError, InvalidTransition


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name in ("agenda", "Agenda"):
        from artisan.service import Agenda

        return Agenda
    if name == "ScanResult":
        from artisan.results import ScanResult

        return ScanResult
    if name == "StatusCheck":
        from artisan.results import StatusCheck

        return StatusCheck
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "agenda",
    "Agenda",
    "ArtisanError",
    "InvalidTransition",
    "ScanResult",
    "StatusCheck",
]
__version__ = "0.1.0"
