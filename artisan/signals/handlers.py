"""
Artisan Signal Handlers.

Connects intervention status changes to the notification log.

This module is imported in apps.py to register handlers.
"""

import logging

from django.db import DatabaseError, transaction
from django.dispatch import receiver

from artisan.signals import intervention_status_changed

logger = logging.getLogger(__name__)


@receiver(intervention_status_changed)
def notify_status_change(sender, intervention, old_status, new_status, **kwargs):
    """
    When an intervention changes status, log a notification.

    The status is already saved; a failure here must not undo it, so
    errors are logged and the handler returns None.
    """
    from artisan.services.escalation import EscalationScheduler

    try:
        with transaction.atomic():
            return EscalationScheduler.on_status_change(
                intervention, old_status, new_status
            )
    except DatabaseError as e:
        logger.error(
            f"Failed to notify status change for intervention {intervention.pk}: {e}",
            extra={
                "intervention": intervention.pk,
                "old_status": old_status,
                "new_status": new_status,
            },
        )
        # Don't raise - the status change is already committed
        return None
