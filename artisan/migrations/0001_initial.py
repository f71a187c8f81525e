"""
Initial schema.

- Client, Intervention (+ history), Invoice, InvoiceReminder, Notification
- Dedup constraints: one reminder per (invoice, tier), one tagged
  notification per (subject, type, tag, day)
"""

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import simple_history.models
from django.conf import settings
from django.db import migrations, models

TAG_CHOICES = [
    ("", "-"),
    ("24h", "24h"),
    ("today", "today"),
    ("tier:1", "tier:1"),
    ("tier:2", "tier:2"),
    ("tier:3", "tier:3"),
]

INTERVENTION_STATUS_CHOICES = [
    ("todo", "À faire"),
    ("completed", "Terminée"),
    ("cancelled", "Annulée"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # ══════════════════════════════════════════════════════════════
        # CLIENT
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="Client",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, unique=True, verbose_name="UUID"
                    ),
                ),
                ("first_name", models.CharField(max_length=100, verbose_name="Prénom")),
                ("last_name", models.CharField(max_length=100, verbose_name="Nom")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="E-mail")),
                ("phone", models.CharField(blank=True, max_length=30, verbose_name="Téléphone")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="créé le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="mis à jour le")),
                (
                    "artisan",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="clients",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Artisan",
                    ),
                ),
            ],
            options={
                "verbose_name": "Client",
                "verbose_name_plural": "Clients",
                "db_table": "artisan_client",
                "ordering": ["last_name", "first_name"],
            },
        ),
        # ══════════════════════════════════════════════════════════════
        # INTERVENTION
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="Intervention",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, unique=True, verbose_name="UUID"
                    ),
                ),
                ("title", models.CharField(max_length=200, verbose_name="Titre")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("scheduled_at", models.DateTimeField(db_index=True, verbose_name="Date prévue")),
                (
                    "duration_minutes",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        help_text="Entre 1 et 120 minutes",
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(120),
                        ],
                        verbose_name="Durée (minutes)",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=INTERVENTION_STATUS_CHOICES,
                        db_index=True,
                        default="todo",
                        max_length=20,
                        verbose_name="Statut",
                    ),
                ),
                ("address", models.CharField(blank=True, max_length=255, verbose_name="Adresse")),
                (
                    "price",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=10, null=True, verbose_name="Prix"
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="créée le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="mise à jour le")),
                (
                    "artisan",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="interventions",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Artisan",
                    ),
                ),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="interventions",
                        to="artisan.client",
                        verbose_name="Client",
                    ),
                ),
            ],
            options={
                "verbose_name": "Intervention",
                "verbose_name_plural": "Interventions",
                "db_table": "artisan_intervention",
                "ordering": ["scheduled_at"],
                "indexes": [
                    models.Index(
                        fields=["artisan", "status", "scheduled_at"],
                        name="artisan_int_artisan_4c1e2b_idx",
                    )
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(duration_minutes__isnull=True)
                        | models.Q(duration_minutes__gte=1, duration_minutes__lte=120),
                        name="artisan_intervention_duration_range",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="HistoricalIntervention",
            fields=[
                (
                    "id",
                    models.BigIntegerField(
                        auto_created=True, blank=True, db_index=True, verbose_name="ID"
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        db_index=True, default=uuid.uuid4, editable=False, verbose_name="UUID"
                    ),
                ),
                ("title", models.CharField(max_length=200, verbose_name="Titre")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("scheduled_at", models.DateTimeField(db_index=True, verbose_name="Date prévue")),
                (
                    "duration_minutes",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        help_text="Entre 1 et 120 minutes",
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(120),
                        ],
                        verbose_name="Durée (minutes)",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=INTERVENTION_STATUS_CHOICES,
                        db_index=True,
                        default="todo",
                        max_length=20,
                        verbose_name="Statut",
                    ),
                ),
                ("address", models.CharField(blank=True, max_length=255, verbose_name="Adresse")),
                (
                    "price",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=10, null=True, verbose_name="Prix"
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(blank=True, editable=False, verbose_name="créée le"),
                ),
                (
                    "updated_at",
                    models.DateTimeField(blank=True, editable=False, verbose_name="mise à jour le"),
                ),
                ("history_id", models.AutoField(primary_key=True, serialize=False)),
                ("history_date", models.DateTimeField(db_index=True)),
                ("history_change_reason", models.CharField(max_length=100, null=True)),
                (
                    "history_type",
                    models.CharField(
                        choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")],
                        max_length=1,
                    ),
                ),
                (
                    "artisan",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Artisan",
                    ),
                ),
                (
                    "client",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="artisan.client",
                        verbose_name="Client",
                    ),
                ),
                (
                    "history_user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "historical Intervention",
                "verbose_name_plural": "historical Interventions",
                "ordering": ("-history_date", "-history_id"),
                "get_latest_by": ("history_date", "history_id"),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        # ══════════════════════════════════════════════════════════════
        # INVOICE
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="Invoice",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, unique=True, verbose_name="UUID"
                    ),
                ),
                ("number", models.CharField(max_length=50, verbose_name="Numéro")),
                (
                    "due_date",
                    models.DateField(blank=True, db_index=True, null=True, verbose_name="Échéance"),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Brouillon"),
                            ("sent", "Envoyée"),
                            ("overdue", "En retard"),
                            ("paid", "Payée"),
                            ("cancelled", "Annulée"),
                        ],
                        db_index=True,
                        default="draft",
                        max_length=20,
                        verbose_name="Statut",
                    ),
                ),
                (
                    "total",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=12,
                        verbose_name="Total TTC",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="créée le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="mise à jour le")),
                (
                    "artisan",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="invoices",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Artisan",
                    ),
                ),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="invoices",
                        to="artisan.client",
                        verbose_name="Client",
                    ),
                ),
            ],
            options={
                "verbose_name": "Facture",
                "verbose_name_plural": "Factures",
                "db_table": "artisan_invoice",
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("artisan", "number"), name="artisan_invoice_unique_number"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="InvoiceReminder",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "tier",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(3),
                        ],
                        verbose_name="Niveau",
                    ),
                ),
                (
                    "method",
                    models.CharField(
                        choices=[
                            ("notification", "Notification"),
                            ("email", "E-mail"),
                            ("sms", "SMS"),
                        ],
                        default="notification",
                        max_length=20,
                        verbose_name="Canal",
                    ),
                ),
                ("status", models.CharField(default="sent", max_length=20, verbose_name="Statut")),
                ("message", models.TextField(verbose_name="Message")),
                (
                    "sent_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now, verbose_name="envoyée le"
                    ),
                ),
                (
                    "artisan",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="invoice_reminders",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Artisan",
                    ),
                ),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reminders",
                        to="artisan.invoice",
                        verbose_name="Facture",
                    ),
                ),
            ],
            options={
                "verbose_name": "Relance",
                "verbose_name_plural": "Relances",
                "db_table": "artisan_invoice_reminder",
                "ordering": ["invoice", "tier"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("invoice", "tier"), name="artisan_reminder_unique_tier"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(tier__gte=1, tier__lte=3),
                        name="artisan_reminder_tier_range",
                    ),
                ],
            },
        ),
        # ══════════════════════════════════════════════════════════════
        # NOTIFICATION
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="Notification",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, unique=True, verbose_name="UUID"
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("intervention_status", "Statut d'intervention"),
                            ("invoice_overdue", "Facture en retard"),
                            ("intervention_reminder", "Rappel d'intervention"),
                        ],
                        db_index=True,
                        max_length=30,
                        verbose_name="Type",
                    ),
                ),
                ("title", models.CharField(max_length=255, verbose_name="Titre")),
                ("message", models.TextField(verbose_name="Message")),
                (
                    "status",
                    models.CharField(
                        choices=[("unread", "Non lue"), ("read", "Lue")],
                        db_index=True,
                        default="unread",
                        max_length=10,
                        verbose_name="Statut",
                    ),
                ),
                (
                    "tag",
                    models.CharField(
                        blank=True,
                        choices=TAG_CHOICES,
                        default="",
                        max_length=10,
                        verbose_name="Étiquette d'escalade",
                    ),
                ),
                (
                    "day_bucket",
                    models.DateField(
                        db_index=True,
                        default=django.utils.timezone.localdate,
                        verbose_name="Jour",
                    ),
                ),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="Métadonnées")),
                (
                    "created_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now, verbose_name="créée le"
                    ),
                ),
                ("read_at", models.DateTimeField(blank=True, null=True, verbose_name="lue le")),
                (
                    "artisan",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="artisan_notifications",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Artisan",
                    ),
                ),
                (
                    "client",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="notifications",
                        to="artisan.client",
                        verbose_name="Client",
                    ),
                ),
                (
                    "intervention",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to="artisan.intervention",
                        verbose_name="Intervention",
                    ),
                ),
                (
                    "invoice",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to="artisan.invoice",
                        verbose_name="Facture",
                    ),
                ),
            ],
            options={
                "verbose_name": "Notification",
                "verbose_name_plural": "Notifications",
                "db_table": "artisan_notification",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["artisan", "status"], name="artisan_not_artisan_8a3f1d_idx"
                    ),
                    models.Index(
                        fields=["artisan", "type", "day_bucket"],
                        name="artisan_not_artisan_e5b720_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(
                            models.Q(("tag", ""), _negated=True),
                            ("intervention__isnull", False),
                        ),
                        fields=("intervention", "type", "tag", "day_bucket"),
                        name="artisan_notification_unique_intervention_tag",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(
                            models.Q(("tag", ""), _negated=True),
                            ("invoice__isnull", False),
                        ),
                        fields=("invoice", "type", "tag", "day_bucket"),
                        name="artisan_notification_unique_invoice_tag",
                    ),
                ],
            },
        ),
    ]
