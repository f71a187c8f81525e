"""
Artisan Services.

Business logic that doesn't belong in models:
- guard: Status/date consistency of interventions
- layout: Calendar column packing
- reminders: Invoice reminder tier policy and messages
- notifications: Notification log (create, dedup, queries)
- escalation: Overdue invoice and intervention reminder scans
"""

from artisan.services.escalation import EscalationScheduler
from artisan.services.guard import (
    clamp_duration,
    coerce_status,
    ensure_status,
    validate_duration,
    validate_status,
)
from artisan.services.layout import LayoutEvent, LayoutSlot, layout, layout_by_day
from artisan.services.notifications import NotificationStore
from artisan.services.reminders import next_tier, render_message

__all__ = [
    "EscalationScheduler",
    "NotificationStore",
    "LayoutEvent",
    "LayoutSlot",
    "layout",
    "layout_by_day",
    "validate_status",
    "ensure_status",
    "coerce_status",
    "validate_duration",
    "clamp_duration",
    "next_tier",
    "render_message",
]
