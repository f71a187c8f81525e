"""
Artisan Models.

Core models for scheduling and escalation:
- Client: Client d'un artisan
- Intervention: Scheduled on-site job, status guarded against its day
- Invoice: Amount owed, optionally with a due date
- InvoiceReminder: Append-only escalation history (tiers 1..3)
- Notification: Log of messages shown to the artisan
"""

from artisan.models.client import Client
from artisan.models.intervention import Intervention, InterventionStatus
from artisan.models.invoice import (
    Invoice,
    InvoiceReminder,
    InvoiceStatus,
    ReminderMethod,
)
from artisan.models.notification import (
    Notification,
    NotificationStatus,
    NotificationType,
)

__all__ = [
    "Client",
    "Intervention",
    "InterventionStatus",
    "Invoice",
    "InvoiceReminder",
    "InvoiceStatus",
    "ReminderMethod",
    "Notification",
    "NotificationStatus",
    "NotificationType",
]
