"""
Notification model.

Append-only log of messages shown to the artisan. Escalation notifications
carry a typed `tag` and a `day_bucket`; the pair, together with the subject
and type, is unique so a reminder variant is emitted at most once per day.
"""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from artisan.tags import EscalationTag, tag_choices


class NotificationType(models.TextChoices):
    INTERVENTION_STATUS = "intervention_status", _("Statut d'intervention")
    INVOICE_OVERDUE = "invoice_overdue", _("Facture en retard")
    INTERVENTION_REMINDER = "intervention_reminder", _("Rappel d'intervention")


class NotificationStatus(models.TextChoices):
    UNREAD = "unread", _("Non lue")
    READ = "read", _("Lue")


class Notification(models.Model):
    """
    Notification pour l'artisan.

    Metadata structure (informational only, never used for dedup):
        intervention_status:   {"oldStatus", "newStatus", "interventionTitle"}
        intervention_reminder: {"interventionDate", "interventionTitle"}
        invoice_overdue:       {"daysOverdue", "invoiceNumber", "amount", "method"}
    """

    uuid = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        verbose_name=_("UUID"),
    )

    artisan = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="artisan_notifications",
        verbose_name=_("Artisan"),
    )

    type = models.CharField(
        max_length=30,
        choices=NotificationType.choices,
        db_index=True,
        verbose_name=_("Type"),
    )
    title = models.CharField(max_length=255, verbose_name=_("Titre"))
    message = models.TextField(verbose_name=_("Message"))

    status = models.CharField(
        max_length=10,
        choices=NotificationStatus.choices,
        default=NotificationStatus.UNREAD,
        db_index=True,
        verbose_name=_("Statut"),
    )

    client = models.ForeignKey(
        "artisan.Client",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
        verbose_name=_("Client"),
    )
    intervention = models.ForeignKey(
        "artisan.Intervention",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notifications",
        verbose_name=_("Intervention"),
    )
    invoice = models.ForeignKey(
        "artisan.Invoice",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notifications",
        verbose_name=_("Facture"),
    )

    tag = models.CharField(
        max_length=10,
        blank=True,
        default="",
        choices=tag_choices(),
        verbose_name=_("Étiquette d'escalade"),
    )
    day_bucket = models.DateField(
        default=timezone.localdate,
        db_index=True,
        verbose_name=_("Jour"),
    )

    metadata = models.JSONField(
        default=dict,
        blank=True,
        verbose_name=_("Métadonnées"),
    )

    created_at = models.DateTimeField(default=timezone.now, verbose_name=_("créée le"))
    read_at = models.DateTimeField(null=True, blank=True, verbose_name=_("lue le"))

    class Meta:
        db_table = "artisan_notification"
        verbose_name = _("Notification")
        verbose_name_plural = _("Notifications")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["artisan", "status"], name="artisan_not_artisan_8a3f1d_idx"),
            models.Index(
                fields=["artisan", "type", "day_bucket"],
                name="artisan_not_artisan_e5b720_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["intervention", "type", "tag", "day_bucket"],
                condition=~Q(tag="") & Q(intervention__isnull=False),
                name="artisan_notification_unique_intervention_tag",
            ),
            models.UniqueConstraint(
                fields=["invoice", "type", "tag", "day_bucket"],
                condition=~Q(tag="") & Q(invoice__isnull=False),
                name="artisan_notification_unique_invoice_tag",
            ),
        ]

    def __str__(self) -> str:
        return self.title

    @property
    def escalation_tag(self) -> EscalationTag | None:
        """Typed tag, falling back to legacy metadata for untagged rows."""
        if self.tag:
            return EscalationTag.parse(self.tag)
        return EscalationTag.from_metadata(self.metadata)

    @property
    def is_read(self) -> bool:
        return self.status == NotificationStatus.READ

    def mark_read(self):
        if self.is_read:
            return
        self.status = NotificationStatus.READ
        self.read_at = timezone.now()
        self.save(update_fields=["status", "read_at"])
