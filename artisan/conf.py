"""
Artisan Settings.

Supports two formats (dict takes priority):

    # Option 1: Dict
    ARTISAN = {
        "LAYOUT_BUFFER_MINUTES": 90,
        "REMINDER_THRESHOLDS": {1: 0, 2: 10, 3: 20},
    }

    # Option 2: Flat
    ARTISAN_LAYOUT_BUFFER_MINUTES = 90

All settings have defaults, so no configuration is required.
"""

from django.conf import settings


# ── Defaults ──

DEFAULTS = {
    # Calendar layout
    "LAYOUT_BUFFER_MINUTES": 120,
    "LAYOUT_COLUMN_MARGIN": 1,
    "MIN_EVENT_HEIGHT_MINUTES": 30,
    "MONTH_PREVIEW_LIMIT": 4,
    # Interventions
    "DEFAULT_DURATION_MINUTES": 60,
    "MIN_DURATION_MINUTES": 1,
    "MAX_DURATION_MINUTES": 120,
    # Invoice reminders (tier -> days after due date)
    "REMINDER_THRESHOLDS": {1: 0, 2: 7, 3: 14},
    "REMINDER_METHOD": "notification",
    "OVERDUE_INVOICE_STATUSES": ("sent", "draft", "overdue"),
}


# ── Accessors ──

_sentinel = object()


def get_setting(name, default=_sentinel):
    """
    Get an artisan setting.

    Looks up in order:
    1. ARTISAN dict (e.g. ARTISAN = {"LAYOUT_BUFFER_MINUTES": 90})
    2. Flat setting (e.g. ARTISAN_LAYOUT_BUFFER_MINUTES = 90)
    3. DEFAULTS
    """
    artisan_dict = getattr(settings, "ARTISAN", {})
    if name in artisan_dict:
        return artisan_dict[name]

    flat_value = getattr(settings, f"ARTISAN_{name}", _sentinel)
    if flat_value is not _sentinel:
        return flat_value

    if default is not _sentinel:
        return default

    return DEFAULTS.get(name)


def get_reminder_thresholds() -> dict[int, int]:
    """Return tier thresholds as {tier: days_after_due}, ordered by tier."""
    raw = get_setting("REMINDER_THRESHOLDS")
    return {int(tier): int(days) for tier, days in sorted(raw.items())}


def get_duration_bounds() -> tuple[int, int]:
    """Return (min, max) allowed intervention duration in minutes."""
    return (
        int(get_setting("MIN_DURATION_MINUTES")),
        int(get_setting("MAX_DURATION_MINUTES")),
    )
