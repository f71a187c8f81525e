"""
Tests for the status guard (artisan.services.guard).
"""

from datetime import datetime, timedelta

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import override_settings
from django.utils import timezone

from artisan.exceptions import ArtisanError, InvalidTransition
from artisan.models import Intervention
from artisan.services.guard import (
    clamp_duration,
    coerce_status,
    ensure_status,
    find_inconsistent,
    validate_duration,
    validate_status,
)


def at(now, days=0, hour=10, minute=0):
    """Local datetime `days` away from `now` at the given wall-clock time."""
    local = timezone.localtime(now) + timedelta(days=days)
    return local.replace(hour=hour, minute=minute, second=0, microsecond=0)


class TestValidateStatus:
    def test_past_todo_rejected_with_completed_fallback(self, now):
        """Yesterday 10:00 + todo -> InvalidTransition, fallback completed."""
        check = validate_status(at(now, days=-1), "todo", now)

        assert check.ok is False
        assert isinstance(check.error, InvalidTransition)
        assert check.error.code == "INVALID_TRANSITION"
        assert check.suggested_fallback == "completed"
        assert check.error.details["day_relation"] == "past"
        assert "terminées ou annulées" in check.error.reason

    @pytest.mark.parametrize("status", ["completed", "cancelled"])
    def test_past_allowed_statuses(self, now, status):
        assert validate_status(at(now, days=-3), status, now).ok

    def test_future_completed_rejected_with_todo_fallback(self, now):
        check = validate_status(at(now, days=1), "completed", now)

        assert check.ok is False
        assert check.suggested_fallback == "todo"
        assert check.error.details["day_relation"] == "future"

    @pytest.mark.parametrize("status", ["todo", "cancelled"])
    def test_future_allowed_statuses(self, now, status):
        assert validate_status(at(now, days=5), status, now).ok

    @pytest.mark.parametrize("status", ["todo", "completed", "cancelled"])
    def test_today_accepts_everything(self, now, status):
        """Same calendar day: time of day is ignored in both directions."""
        assert validate_status(at(now, hour=0, minute=5), status, now).ok
        assert validate_status(at(now, hour=23, minute=55), status, now).ok

    def test_day_boundary_uses_local_date(self, now):
        """23:59 the previous evening is already "past"."""
        late_yesterday = at(now, days=-1, hour=23, minute=59)
        assert validate_status(late_yesterday, "todo", now).ok is False

    def test_unknown_status_raises(self, now):
        with pytest.raises(ArtisanError) as exc:
            validate_status(now, "in_progress", now)
        assert exc.value.code == "INVALID_STATUS"

    def test_ok_check_has_no_fallback(self, now):
        check = validate_status(now, "todo", now)
        assert check.error is None
        assert check.suggested_fallback is None


class TestEnsureAndCoerce:
    def test_ensure_returns_status(self, now):
        assert ensure_status(at(now, days=2), "todo", now) == "todo"

    def test_ensure_raises(self, now):
        with pytest.raises(InvalidTransition) as exc:
            ensure_status(at(now, days=-1), "todo", now)
        assert exc.value.as_dict()["suggested_fallback"] == "completed"

    def test_coerce_returns_fallback(self, now, caplog):
        assert coerce_status(at(now, days=-1), "todo", now) == "completed"
        assert coerce_status(at(now, days=1), "completed", now) == "todo"
        assert "not allowed" in caplog.text

    def test_coerce_keeps_valid_status(self, now):
        assert coerce_status(at(now, days=1), "cancelled", now) == "cancelled"


class TestDuration:
    @pytest.mark.parametrize("minutes", [1, 60, 120])
    def test_valid_durations(self, minutes):
        assert validate_duration(minutes) == minutes

    @pytest.mark.parametrize("minutes", [0, -5, 121, 180])
    def test_out_of_range(self, minutes):
        with pytest.raises(ArtisanError) as exc:
            validate_duration(minutes)
        assert exc.value.code == "INVALID_DURATION"

    @pytest.mark.parametrize("minutes", ["60", 1.5, None, True])
    def test_non_integer(self, minutes):
        with pytest.raises(ArtisanError):
            validate_duration(minutes)

    def test_clamp(self):
        assert clamp_duration(None) == 60
        assert clamp_duration("abc") == 60
        assert clamp_duration(0) == 1
        assert clamp_duration(500) == 120
        assert clamp_duration(45) == 45

    @override_settings(ARTISAN={"MAX_DURATION_MINUTES": 240})
    def test_bounds_follow_settings(self):
        assert validate_duration(180) == 180
        assert clamp_duration(500) == 240


class TestModelIntegration:
    def test_find_inconsistent(self, now, make_intervention):
        stale = make_intervention(at(now, days=-2), status="todo")
        early = make_intervention(at(now, days=2), status="completed")
        make_intervention(at(now, days=-2), status="completed")
        make_intervention(at(now, days=2), status="todo")

        candidates = list(Intervention.objects.all())
        found = {
            i.pk: check.suggested_fallback
            for i, check in find_inconsistent(candidates, now)
        }

        assert found == {stale.pk: "completed", early.pk: "todo"}

    def test_clean_rejects_past_todo(self, make_intervention):
        intervention = make_intervention(timezone.now() - timedelta(days=2))

        with pytest.raises(ValidationError) as exc:
            intervention.clean()
        assert "status" in exc.value.message_dict

    def test_clean_rejects_long_duration(self, make_intervention):
        intervention = make_intervention(timezone.now() + timedelta(days=2))
        intervention.duration_minutes = 150

        with pytest.raises(ValidationError) as exc:
            intervention.clean()
        assert "duration_minutes" in exc.value.message_dict

    def test_change_status_guarded(self, now, make_intervention):
        intervention = make_intervention(at(now, days=3))

        with pytest.raises(InvalidTransition):
            intervention.change_status("completed", now=now)

        intervention.refresh_from_db()
        assert intervention.status == "todo"

    def test_effective_duration_default(self, now, make_intervention):
        intervention = make_intervention(now, duration_minutes=None)

        assert intervention.effective_duration == 60
        assert intervention.ends_at == now + timedelta(minutes=60)


@pytest.mark.django_db
def test_duration_check_constraint(artisan, customer):
    with pytest.raises(IntegrityError), transaction.atomic():
        Intervention.objects.create(
            artisan=artisan,
            client=customer,
            title="Trop long",
            scheduled_at=timezone.make_aware(datetime(2026, 3, 2, 9, 0)),
            duration_minutes=500,
        )
