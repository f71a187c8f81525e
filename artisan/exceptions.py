"""
Artisan Exceptions.

All artisan errors are wrapped in ArtisanError for consistent handling.
"""

from typing import Any


class ArtisanError(Exception):
    """
    Base exception for all Artisan errors.

    Usage:
        raise ArtisanError('INVALID_DURATION', duration=180, maximum=120)

    Attributes:
        code: Error code (INVALID_TRANSITION, INVALID_DURATION, etc.)
        details: Additional context as keyword arguments
    """

    def __init__(self, code: str, **details: Any):
        self.code = code
        self.details = details
        message = f"{code}: {details}" if details else code
        super().__init__(message)

    def as_dict(self) -> dict:
        """Return error as dictionary for API responses."""
        return {"code": self.code, **self.details}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"ArtisanError({self.code}: {details_str})"
        return f"ArtisanError({self.code})"


class InvalidTransition(ArtisanError):
    """
    Status not allowed for the intervention's day.

    Carries a human-readable reason and the status the caller may fall
    back to (completed for past days, todo for future days).
    """

    def __init__(self, reason: str, suggested_fallback: str, **details: Any):
        self.reason = reason
        self.suggested_fallback = suggested_fallback
        super().__init__(
            "INVALID_TRANSITION",
            reason=reason,
            suggested_fallback=suggested_fallback,
            **details,
        )


# Common error codes
# INVALID_TRANSITION: Status not allowed for the scheduled day
# INVALID_DURATION: Duration outside the allowed range
# INVALID_STATUS: Unknown status value
# NOT_OVERDUE: Invoice has no due date or is not overdue yet
# MAX_REMINDERS_REACHED: Tier 3 already sent
# REMINDER_IMMUTABLE: Attempt to modify or delete a sent reminder
