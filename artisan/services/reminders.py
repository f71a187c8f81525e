"""
Reminder policy -- which escalation tier an overdue invoice is due for.

Cadence is measured from the due date only:

    tier 1  ->  0 days after due date
    tier 2  ->  7 days after due date
    tier 3  -> 14 days after due date

The next tier is the smallest tier whose threshold is reached and that
is higher than every tier already sent, so tiers go 1 → 2 → 3 in order,
each at most once. An invoice found 10 days late with no history gets
tier 1, not tier 2.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from artisan.conf import get_reminder_thresholds
from artisan.dates import days_between
from artisan.exceptions import ArtisanError
from artisan.tags import MAX_TIER


def days_overdue(due_date: date, today: date) -> int:
    """Whole days from due date to today (0 on the due date itself)."""
    return days_between(due_date, today)


def _tiers(history: Iterable) -> list[int]:
    """Accept reminder rows or raw tier numbers."""
    return [getattr(item, "tier", item) for item in history]


def next_tier(due_date: date | None, today: date, history: Iterable = ()) -> int | None:
    """
    Return the tier to send now, or None.

    Args:
        due_date: Invoice due date (None means never overdue)
        today: The scan's day
        history: Existing reminders (or their tiers), any order

    Returns:
        1, 2 or 3, or None when not overdue or nothing left to send
    """
    if due_date is None:
        return None

    overdue = days_overdue(due_date, today)
    if overdue < 0:
        return None

    sent = _tiers(history)
    last_sent = max(sent) if sent else 0

    for tier, threshold in get_reminder_thresholds().items():
        if overdue >= threshold and tier > last_sent:
            return tier

    return None


def next_manual_tier(history: Iterable = ()) -> int:
    """
    Tier for a manual "send next reminder" action: last tier + 1.

    Raises ArtisanError('MAX_REMINDERS_REACHED') once tier 3 is sent.
    """
    sent = _tiers(history)
    tier = (max(sent) if sent else 0) + 1
    if tier > MAX_TIER:
        raise ArtisanError("MAX_REMINDERS_REACHED", maximum=MAX_TIER)
    return tier


def format_amount(amount) -> str:
    """French money format: 1234.5 -> '1234,50'."""
    return f"{Decimal(str(amount)):.2f}".replace(".", ",")


def _days_label(days: int) -> str:
    return f"{days} jour{'s' if days > 1 else ''}"


REMINDER_TEMPLATES = {
    1: "Rappel : la facture #{number} de {client} ({amount} €) est échue depuis {days}.",
    2: (
        "Relance 2 : la facture #{number} de {client} ({amount} €) est en retard "
        "de {days}. Merci de régulariser rapidement."
    ),
    3: (
        "Relance 3 - URGENT : la facture #{number} de {client} ({amount} €) est en "
        "retard de {days}. Veuillez contacter le client immédiatement."
    ),
}


def render_message(
    tier: int,
    client_name: str,
    invoice_number: str,
    amount,
    days_late: int,
) -> str:
    """Tier-specific reminder text. Tier 3 is marked URGENT."""
    template = REMINDER_TEMPLATES.get(tier, REMINDER_TEMPLATES[1])
    return template.format(
        number=invoice_number,
        client=client_name,
        amount=format_amount(amount),
        days=_days_label(days_late),
    )


def render_title(tier: int, invoice_number: str) -> str:
    return f"Relance {tier} - Facture {invoice_number}"


def is_urgent(tier: int) -> bool:
    return tier >= MAX_TIER
