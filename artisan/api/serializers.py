"""
Artisan API Serializers.
"""

from django.utils import timezone
from rest_framework import serializers

from artisan.models import (
    Client,
    Intervention,
    InterventionStatus,
    Invoice,
    InvoiceReminder,
    Notification,
    ReminderMethod,
)
from artisan.services.guard import ensure_status
from artisan.services.reminders import next_tier


class ClientSerializer(serializers.ModelSerializer):
    """Serializer for Client model."""

    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Client
        fields = ["id", "uuid", "first_name", "last_name", "full_name", "email", "phone"]
        read_only_fields = ["uuid", "full_name"]


class InterventionSerializer(serializers.ModelSerializer):
    """
    Serializer for Intervention model.

    The (scheduled_at, status) pair is checked by the status guard; a
    rejected pair raises InvalidTransition, rendered as HTTP 400 by the
    viewset with the reason and suggested fallback.
    """

    client_name = serializers.CharField(source="client.full_name", read_only=True)
    ends_at = serializers.DateTimeField(read_only=True)

    class Meta:
        model = Intervention
        fields = [
            "uuid",
            "title",
            "description",
            "scheduled_at",
            "duration_minutes",
            "ends_at",
            "status",
            "client",
            "client_name",
            "address",
            "price",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["uuid", "ends_at", "client_name", "created_at", "updated_at"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        request = self.context.get("request")
        if request is not None and "client" in self.fields:
            self.fields["client"].queryset = Client.objects.filter(artisan=request.user)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        instance = self.instance

        scheduled_at = attrs.get("scheduled_at", getattr(instance, "scheduled_at", None))
        status = attrs.get(
            "status", getattr(instance, "status", InterventionStatus.TODO.value)
        )

        if scheduled_at is not None:
            ensure_status(scheduled_at, status, timezone.now())

        return attrs


class InterventionStatusSerializer(serializers.Serializer):
    """Serializer for the status change action."""

    status = serializers.ChoiceField(choices=InterventionStatus.choices)


class InvoiceReminderSerializer(serializers.ModelSerializer):
    """Serializer for InvoiceReminder model (read-only history)."""

    class Meta:
        model = InvoiceReminder
        fields = ["id", "tier", "method", "status", "message", "sent_at"]
        read_only_fields = fields


class ReminderHistorySerializer(InvoiceReminderSerializer):
    """Reminder with its invoice and client, for the artisan-wide history."""

    invoice = serializers.UUIDField(source="invoice.uuid", read_only=True)
    invoice_number = serializers.CharField(source="invoice.number", read_only=True)
    client_name = serializers.CharField(source="invoice.client.full_name", read_only=True)

    class Meta(InvoiceReminderSerializer.Meta):
        fields = InvoiceReminderSerializer.Meta.fields + [
            "invoice",
            "invoice_number",
            "client_name",
        ]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    """Serializer for Invoice model."""

    client_name = serializers.CharField(source="client.full_name", read_only=True)
    reminders = InvoiceReminderSerializer(many=True, read_only=True)
    next_tier = serializers.SerializerMethodField()

    class Meta:
        model = Invoice
        fields = [
            "uuid",
            "number",
            "client",
            "client_name",
            "due_date",
            "status",
            "total",
            "reminders",
            "next_tier",
            "created_at",
        ]
        read_only_fields = fields

    def get_next_tier(self, obj) -> int | None:
        return next_tier(obj.due_date, timezone.localdate(), obj.reminders.all())


class SendReminderSerializer(serializers.Serializer):
    """Serializer for the manual reminder action."""

    method = serializers.ChoiceField(
        choices=ReminderMethod.choices,
        default=ReminderMethod.NOTIFICATION,
        help_text="Canal de la relance",
    )


class NotificationSerializer(serializers.ModelSerializer):
    """Serializer for Notification model."""

    intervention = serializers.UUIDField(source="intervention.uuid", read_only=True, default=None)
    invoice = serializers.UUIDField(source="invoice.uuid", read_only=True, default=None)
    client_name = serializers.CharField(source="client.full_name", read_only=True, default=None)

    class Meta:
        model = Notification
        fields = [
            "uuid",
            "type",
            "title",
            "message",
            "status",
            "tag",
            "day_bucket",
            "intervention",
            "invoice",
            "client_name",
            "metadata",
            "created_at",
            "read_at",
        ]
        read_only_fields = fields
