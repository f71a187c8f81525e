"""
Artisan Signals.

Communication with the rest of the application happens via signals.
This keeps the scheduling core decoupled and easy to test.

Signals:
    intervention_status_changed: Intervention status saved with a new value
    invoice_reminder_created: Reminder tier written for an invoice
    notification_created: Notification written to the log
"""

from django.dispatch import Signal

# Intervention status changed
# Sent by Intervention.change_status() after the save
# Args: intervention, old_status, new_status, user
intervention_status_changed = Signal()

# Invoice reminder created
# Sent by EscalationScheduler once the reminder and its notification are saved
# Args: reminder, notification
invoice_reminder_created = Signal()

# Notification created
# Sent by NotificationStore.create()
# Args: notification
notification_created = Signal()

__all__ = [
    "intervention_status_changed",
    "invoice_reminder_created",
    "notification_created",
]
