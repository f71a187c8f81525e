"""
Status guard -- keeps an intervention's status consistent with its day.

    day <  today  -> completed, cancelled       (todo rejected, fallback completed)
    day >  today  -> todo, cancelled            (completed rejected, fallback todo)
    day == today  -> todo, completed, cancelled

Pure functions: "now" is always passed in, nothing is written.
"""

import logging
from collections.abc import Iterable, Iterator

from artisan.conf import get_duration_bounds, get_setting
from artisan.dates import day_bucket
from artisan.exceptions import ArtisanError, InvalidTransition
from artisan.models.intervention import InterventionStatus
from artisan.results import StatusCheck

logger = logging.getLogger(__name__)

PAST_ALLOWED = frozenset(
    {InterventionStatus.COMPLETED.value, InterventionStatus.CANCELLED.value}
)
FUTURE_ALLOWED = frozenset(
    {InterventionStatus.TODO.value, InterventionStatus.CANCELLED.value}
)

PAST_TODO_REASON = (
    "Les interventions passées ne peuvent pas être marquées comme « à faire ». "
    "Elles doivent être terminées ou annulées."
)
FUTURE_COMPLETED_REASON = (
    "Les interventions futures ne peuvent pas être marquées comme « terminées ». "
    "Elles doivent être « à faire » ou annulées."
)


def validate_status(scheduled_at, proposed_status: str, now) -> StatusCheck:
    """
    Check a (scheduled_at, status) pair against `now`.

    Returns a StatusCheck; on rejection `error` is an InvalidTransition
    carrying the reason and the suggested fallback status.
    """
    if proposed_status not in InterventionStatus.values:
        raise ArtisanError("INVALID_STATUS", status=proposed_status)

    today = day_bucket(now)
    day = day_bucket(scheduled_at)

    if day < today and proposed_status not in PAST_ALLOWED:
        error = InvalidTransition(
            PAST_TODO_REASON,
            InterventionStatus.COMPLETED.value,
            day_relation="past",
            status=proposed_status,
        )
        return StatusCheck(ok=False, status=proposed_status, error=error)

    if day > today and proposed_status not in FUTURE_ALLOWED:
        error = InvalidTransition(
            FUTURE_COMPLETED_REASON,
            InterventionStatus.TODO.value,
            day_relation="future",
            status=proposed_status,
        )
        return StatusCheck(ok=False, status=proposed_status, error=error)

    return StatusCheck(ok=True, status=proposed_status)


def ensure_status(scheduled_at, proposed_status: str, now) -> str:
    """Hard-fail variant: return the status or raise InvalidTransition."""
    check = validate_status(scheduled_at, proposed_status, now)
    if not check.ok:
        raise check.error
    return check.status


def coerce_status(scheduled_at, proposed_status: str, now) -> str:
    """Auto-correct variant: return the suggested fallback on rejection."""
    check = validate_status(scheduled_at, proposed_status, now)
    if check.ok:
        return check.status

    logger.warning(
        f"Status {proposed_status!r} not allowed, using {check.error.suggested_fallback!r}",
        extra={
            "scheduled_at": str(scheduled_at),
            "proposed_status": proposed_status,
            "fallback": check.error.suggested_fallback,
        },
    )
    return check.error.suggested_fallback


def validate_duration(minutes: int) -> int:
    """Raise ArtisanError('INVALID_DURATION') outside the allowed range."""
    minimum, maximum = get_duration_bounds()
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise ArtisanError("INVALID_DURATION", duration=minutes)
    if not minimum <= minutes <= maximum:
        raise ArtisanError(
            "INVALID_DURATION", duration=minutes, minimum=minimum, maximum=maximum
        )
    return minutes


def clamp_duration(minutes) -> int:
    """Clamp a duration into range; None or non-numeric gives the default."""
    minimum, maximum = get_duration_bounds()
    try:
        minutes = int(minutes)
    except (TypeError, ValueError):
        return int(get_setting("DEFAULT_DURATION_MINUTES"))
    return max(minimum, min(maximum, minutes))


def find_inconsistent(interventions: Iterable, now) -> Iterator[tuple]:
    """Yield (intervention, StatusCheck) for every pair the guard rejects."""
    for intervention in interventions:
        check = validate_status(intervention.scheduled_at, intervention.status, now)
        if not check.ok:
            yield intervention, check
