"""
Tests for the reminder policy (artisan.services.reminders).
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.test import override_settings

from artisan.exceptions import ArtisanError
from artisan.services.reminders import (
    days_overdue,
    format_amount,
    is_urgent,
    next_manual_tier,
    next_tier,
    render_message,
    render_title,
)

TODAY = date(2026, 3, 2)


def due(days_ago):
    return TODAY - timedelta(days=days_ago)


class TestNextTier:
    def test_ten_days_late_no_history_gets_tier_one(self):
        """Lowest unsent tier wins, whatever the elapsed days."""
        assert next_tier(due(10), TODAY, []) == 1

    def test_due_today_gets_tier_one(self):
        assert next_tier(due(0), TODAY) == 1

    def test_not_yet_due(self):
        assert next_tier(due(-1), TODAY) is None

    def test_no_due_date(self):
        assert next_tier(None, TODAY) is None

    @pytest.mark.parametrize(
        "days_late, history, expected",
        [
            (3, [1], None),
            (7, [1], 2),
            (13, [1, 2], None),
            (14, [1, 2], 3),
            (30, [1, 2, 3], None),
            (30, [1], 2),
            (30, [2, 1], 3),
        ],
    )
    def test_progression(self, days_late, history, expected):
        assert next_tier(due(days_late), TODAY, history) == expected

    def test_never_goes_backwards(self):
        """A tier 3 already sent blocks tiers 1 and 2."""
        assert next_tier(due(20), TODAY, [3]) is None

    def test_accepts_reminder_rows(self):
        class Row:
            def __init__(self, tier):
                self.tier = tier

        assert next_tier(due(8), TODAY, [Row(1)]) == 2

    def test_daily_scan_sends_each_tier_once_in_order(self):
        due_date = due(0)
        sent = []

        for offset in range(30):
            tier = next_tier(due_date, due_date + timedelta(days=offset), sent)
            if tier is not None:
                sent.append(tier)

        assert sent == [1, 2, 3]

    @override_settings(ARTISAN={"REMINDER_THRESHOLDS": {3: 20, 1: 0, 2: 10}})
    def test_thresholds_from_settings(self):
        assert next_tier(due(9), TODAY, [1]) is None
        assert next_tier(due(10), TODAY, [1]) == 2


class TestManualTier:
    def test_first_manual_reminder(self):
        assert next_manual_tier([]) == 1

    def test_ignores_thresholds(self):
        assert next_manual_tier([1]) == 2
        assert next_manual_tier([1, 2]) == 3

    def test_cap_at_three(self):
        with pytest.raises(ArtisanError) as exc:
            next_manual_tier([1, 2, 3])
        assert exc.value.code == "MAX_REMINDERS_REACHED"


class TestMessages:
    def test_days_overdue(self):
        assert days_overdue(due(10), TODAY) == 10
        assert days_overdue(due(-2), TODAY) == -2

    def test_format_amount(self):
        assert format_amount(Decimal("1234.5")) == "1234,50"
        assert format_amount(80) == "80,00"

    def test_tier_one_message(self):
        message = render_message(1, "Jeanne Moreau", "F-001", Decimal("1234.50"), 10)

        assert "F-001" in message
        assert "Jeanne Moreau" in message
        assert "1234,50 €" in message
        assert "10 jours" in message
        assert "URGENT" not in message

    def test_singular_day(self):
        assert "1 jour." in render_message(1, "A", "F-1", 10, 1)

    def test_tier_three_is_urgent(self):
        assert "URGENT" in render_message(3, "A", "F-1", 10, 20)
        assert is_urgent(3)
        assert not is_urgent(2)

    def test_title(self):
        assert render_title(2, "F-001") == "Relance 2 - Facture F-001"
