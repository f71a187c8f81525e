"""
Invoice and InvoiceReminder models.

Invoice = amount owed by a client, optionally with a due date.
InvoiceReminder = append-only escalation history (tiers 1 → 2 → 3).
"""

import logging
import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Max, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from artisan.exceptions import ArtisanError

logger = logging.getLogger(__name__)


class InvoiceStatus(models.TextChoices):
    """Invoice lifecycle status."""

    DRAFT = "draft", _("Brouillon")
    SENT = "sent", _("Envoyée")
    OVERDUE = "overdue", _("En retard")
    PAID = "paid", _("Payée")
    CANCELLED = "cancelled", _("Annulée")


class ReminderMethod(models.TextChoices):
    NOTIFICATION = "notification", _("Notification")
    EMAIL = "email", _("E-mail")
    SMS = "sms", _("SMS")


class Invoice(models.Model):
    """Facture client."""

    uuid = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        verbose_name=_("UUID"),
    )

    artisan = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="invoices",
        verbose_name=_("Artisan"),
    )

    client = models.ForeignKey(
        "artisan.Client",
        on_delete=models.CASCADE,
        related_name="invoices",
        verbose_name=_("Client"),
    )

    number = models.CharField(max_length=50, verbose_name=_("Numéro"))

    due_date = models.DateField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_("Échéance"),
    )

    status = models.CharField(
        max_length=20,
        choices=InvoiceStatus.choices,
        default=InvoiceStatus.DRAFT,
        db_index=True,
        verbose_name=_("Statut"),
    )

    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        verbose_name=_("Total TTC"),
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("créée le"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("mise à jour le"))

    class Meta:
        db_table = "artisan_invoice"
        verbose_name = _("Facture")
        verbose_name_plural = _("Factures")
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["artisan", "number"],
                name="artisan_invoice_unique_number",
            ),
        ]

    def __str__(self) -> str:
        return f"Facture {self.number}"

    @property
    def last_tier(self) -> int:
        """Highest reminder tier already sent (0 if none)."""
        return self.reminders.aggregate(last=Max("tier"))["last"] or 0

    @property
    def reminder_tiers(self) -> list[int]:
        return list(self.reminders.order_by("tier").values_list("tier", flat=True))


class InvoiceReminder(models.Model):
    """
    Relance de facture.

    Immutable once created: rows can be inserted, never updated or deleted
    individually. (invoice, tier) is unique so a tier is sent at most once.
    """

    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name="reminders",
        verbose_name=_("Facture"),
    )

    artisan = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="invoice_reminders",
        verbose_name=_("Artisan"),
    )

    tier = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(3)],
        verbose_name=_("Niveau"),
    )

    method = models.CharField(
        max_length=20,
        choices=ReminderMethod.choices,
        default=ReminderMethod.NOTIFICATION,
        verbose_name=_("Canal"),
    )

    status = models.CharField(max_length=20, default="sent", verbose_name=_("Statut"))
    message = models.TextField(verbose_name=_("Message"))

    sent_at = models.DateTimeField(default=timezone.now, verbose_name=_("envoyée le"))

    class Meta:
        db_table = "artisan_invoice_reminder"
        verbose_name = _("Relance")
        verbose_name_plural = _("Relances")
        ordering = ["invoice", "tier"]
        constraints = [
            models.UniqueConstraint(
                fields=["invoice", "tier"],
                name="artisan_reminder_unique_tier",
            ),
            models.CheckConstraint(
                condition=Q(tier__gte=1, tier__lte=3),
                name="artisan_reminder_tier_range",
            ),
        ]

    def __str__(self) -> str:
        return f"Relance {self.tier} - {self.invoice.number}"

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ArtisanError("REMINDER_IMMUTABLE", reminder=self.pk)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ArtisanError("REMINDER_IMMUTABLE", reminder=self.pk)
