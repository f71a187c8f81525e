"""
Intervention model.

Intervention = a scheduled on-site job for a client.

Status changes go through `change_status()`, which runs the status guard
before writing and emits `intervention_status_changed` afterwards.
"""

import logging
import uuid
from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

from artisan.exceptions import ArtisanError

logger = logging.getLogger(__name__)


class InterventionStatus(models.TextChoices):
    """Intervention lifecycle status."""

    TODO = "todo", _("À faire")
    COMPLETED = "completed", _("Terminée")
    CANCELLED = "cancelled", _("Annulée")


class Intervention(models.Model):
    """
    Intervention planifiée chez un client.

    Invariants (checked by the status guard, relative to "today"):
        - scheduled before today  -> status is completed or cancelled
        - scheduled after today   -> status is todo or cancelled
        - duration_minutes in 1..120 when set
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
        related_name="interventions",
        verbose_name=_("Artisan"),
    )

    client = models.ForeignKey(
        "artisan.Client",
        on_delete=models.CASCADE,
        related_name="interventions",
        verbose_name=_("Client"),
    )

    title = models.CharField(max_length=200, verbose_name=_("Titre"))
    description = models.TextField(blank=True, verbose_name=_("Description"))

    scheduled_at = models.DateTimeField(
        db_index=True,
        verbose_name=_("Date prévue"),
    )
    duration_minutes = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(120)],
        verbose_name=_("Durée (minutes)"),
        help_text=_("Entre 1 et 120 minutes"),
    )

    status = models.CharField(
        max_length=20,
        choices=InterventionStatus.choices,
        default=InterventionStatus.TODO,
        db_index=True,
        verbose_name=_("Statut"),
    )

    address = models.CharField(max_length=255, blank=True, verbose_name=_("Adresse"))
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name=_("Prix"),
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("créée le"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("mise à jour le"))

    history = HistoricalRecords()

    class Meta:
        db_table = "artisan_intervention"
        verbose_name = _("Intervention")
        verbose_name_plural = _("Interventions")
        ordering = ["scheduled_at"]
        indexes = [
            models.Index(
                fields=["artisan", "status", "scheduled_at"],
                name="artisan_int_artisan_4c1e2b_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(duration_minutes__isnull=True)
                | Q(duration_minutes__gte=1, duration_minutes__lte=120),
                name="artisan_intervention_duration_range",
            ),
        ]

    def __str__(self) -> str:
        when = timezone.localtime(self.scheduled_at).strftime("%d/%m/%y %H:%M")
        return f"{self.title} ({when})"

    def clean(self):
        from artisan.services.guard import validate_duration, validate_status

        super().clean()

        if self.duration_minutes is not None:
            try:
                validate_duration(self.duration_minutes)
            except ArtisanError as e:
                raise ValidationError({"duration_minutes": str(e)})

        if self.scheduled_at:
            check = validate_status(self.scheduled_at, self.status, timezone.now())
            if not check.ok:
                raise ValidationError({"status": check.error.reason})

    def change_status(self, new_status: str, now=None, user=None):
        """
        Change le statut après validation.

        Raises InvalidTransition if the status is not allowed for the
        intervention's day. Same-status calls are a no-op.
        """
        from artisan.services.guard import ensure_status

        if new_status not in InterventionStatus.values:
            raise ArtisanError("INVALID_STATUS", status=new_status)

        ensure_status(self.scheduled_at, new_status, now or timezone.now())

        old_status = self.status
        if old_status == new_status:
            return self

        self.status = new_status
        self.save(update_fields=["status", "updated_at"])

        logger.info(
            f"Intervention {self.pk}: {old_status} -> {new_status}",
            extra={
                "intervention": self.pk,
                "old_status": old_status,
                "new_status": new_status,
                "user": user.get_username() if user else None,
            },
        )

        from artisan.signals import intervention_status_changed

        intervention_status_changed.send(
            sender=self.__class__,
            intervention=self,
            old_status=old_status,
            new_status=new_status,
            user=user,
        )

        return self

    @property
    def effective_duration(self) -> int:
        """Duration used for display and layout (clamped, default when unset)."""
        from artisan.services.guard import clamp_duration

        return clamp_duration(self.duration_minutes)

    @property
    def ends_at(self):
        return self.scheduled_at + timedelta(minutes=self.effective_duration)
