"""
Artisan API ViewSets.

Every queryset is scoped to request.user (the artisan).
"""

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from artisan.exceptions import ArtisanError
from artisan.models import Intervention, Invoice, InvoiceReminder, Notification
from artisan.service import Agenda
from artisan.services.notifications import NotificationStore
from .serializers import (
    InterventionSerializer,
    InterventionStatusSerializer,
    InvoiceReminderSerializer,
    InvoiceSerializer,
    NotificationSerializer,
    ReminderHistorySerializer,
    SendReminderSerializer,
)


class ArtisanViewSetMixin:
    """Scope to the current artisan and render ArtisanError as HTTP 400."""

    permission_classes = [IsAuthenticated]
    lookup_field = "uuid"

    def get_queryset(self):
        return super().get_queryset().filter(artisan=self.request.user)

    def handle_exception(self, exc):
        if isinstance(exc, ArtisanError):
            return Response(
                {"error": str(exc), **exc.as_dict()},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return super().handle_exception(exc)


class InterventionViewSet(ArtisanViewSetMixin, viewsets.ModelViewSet):
    """
    ViewSet for Intervention.

    list: List interventions
    create: Create an intervention (status guarded)
    retrieve: Get an intervention by UUID
    update: Update an intervention (status guarded, notifies on status change)
    destroy: Delete an intervention
    set_status: Change status only
    layout: Calendar columns per day
    """

    queryset = Intervention.objects.select_related("client")
    serializer_class = InterventionSerializer

    def perform_create(self, serializer):
        serializer.save(artisan=self.request.user)

    def perform_update(self, serializer):
        new_status = serializer.validated_data.pop("status", None)

        with transaction.atomic():
            intervention = serializer.save()
            if new_status is not None:
                intervention.change_status(new_status, user=self.request.user)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, uuid=None):
        """
        Change the intervention status.

        POST /api/artisan/interventions/{uuid}/status/
        {
            "status": "completed"
        }
        """
        intervention = self.get_object()
        serializer = InterventionStatusSerializer(data=request.data)

        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        Agenda.change_status(
            intervention, serializer.validated_data["status"], user=request.user
        )
        serializer = InterventionSerializer(intervention, context={"request": request})
        return Response(serializer.data)

    @action(detail=False, methods=["get"])
    def layout(self, request):
        """
        Column layout per calendar day.

        GET /api/artisan/interventions/layout/?date=2026-03-02
        GET /api/artisan/interventions/layout/?start=2026-03-02&end=2026-03-08
        """
        params = request.query_params
        try:
            start = parse_date(params.get("start") or params.get("date") or "")
            end = parse_date(params.get("end") or "") or start
        except ValueError:
            return Response(
                {"error": "invalid date"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if start is None:
            start = end = timezone.localdate()
        if end < start:
            return Response(
                {"error": "end must not be before start"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        days = Agenda.layout_range(request.user, start, end)
        return Response(
            {
                day.isoformat(): [slot.as_dict() for slot in slots]
                for day, slots in days.items()
            }
        )


class InvoiceViewSet(ArtisanViewSetMixin, viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for Invoice (read-only here; invoices are managed elsewhere).

    reminders: Reminder history (GET) or send the next tier manually (POST)
    all_reminders: Reminder history across all invoices
    check_reminders: Run the overdue invoice scan now
    """

    queryset = Invoice.objects.select_related("client").prefetch_related("reminders")
    serializer_class = InvoiceSerializer

    @action(detail=True, methods=["get", "post"])
    def reminders(self, request, uuid=None):
        """
        GET  /api/artisan/invoices/{uuid}/reminders/
        POST /api/artisan/invoices/{uuid}/reminders/
        {
            "method": "notification"  // optional
        }
        """
        invoice = self.get_object()

        if request.method == "GET":
            reminders = invoice.reminders.order_by("-sent_at")
            return Response(InvoiceReminderSerializer(reminders, many=True).data)

        serializer = SendReminderSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        reminder = Agenda.send_invoice_reminder(
            invoice, method=serializer.validated_data["method"]
        )
        return Response(
            InvoiceReminderSerializer(reminder).data, status=status.HTTP_201_CREATED
        )

    @action(detail=False, methods=["get"], url_path="reminders")
    def all_reminders(self, request):
        """
        Every reminder sent by the current artisan, newest first.

        GET /api/artisan/invoices/reminders/
        """
        reminders = (
            InvoiceReminder.objects.filter(artisan=request.user)
            .select_related("invoice__client")
            .order_by("-sent_at", "-pk")
        )
        return Response(ReminderHistorySerializer(reminders, many=True).data)

    @action(detail=False, methods=["post"], url_path="check-reminders")
    def check_reminders(self, request):
        """
        Run the overdue invoice scan for the current artisan.

        POST /api/artisan/invoices/check-reminders/
        """
        result = Agenda.run_overdue_invoice_scan(request.user)
        return Response({"success": True, **result.as_dict()})


class NotificationViewSet(
    ArtisanViewSetMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for Notification.

    list / retrieve / destroy
    read: Mark one notification as read
    read_all: Mark all as read
    unread_count: Number of unread notifications
    check_reminders: Run the intervention reminder scan now
    """

    queryset = Notification.objects.select_related("client", "intervention", "invoice")
    serializer_class = NotificationSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        notification_status = self.request.query_params.get("status")
        if notification_status:
            qs = qs.filter(status=notification_status)
        return qs

    @action(detail=True, methods=["post"])
    def read(self, request, uuid=None):
        """POST /api/artisan/notifications/{uuid}/read/"""
        notification = self.get_object()
        notification.mark_read()
        return Response(NotificationSerializer(notification).data)

    @action(detail=False, methods=["post"], url_path="read-all")
    def read_all(self, request):
        """POST /api/artisan/notifications/read-all/"""
        updated = NotificationStore.mark_all_read(request.user)
        return Response({"updated": updated})

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        """GET /api/artisan/notifications/unread-count/"""
        return Response({"count": NotificationStore.unread_count(request.user)})

    @action(detail=False, methods=["post"], url_path="check-reminders")
    def check_reminders(self, request):
        """
        Run the intervention reminder scan for the current artisan.

        POST /api/artisan/notifications/check-reminders/
        """
        result = Agenda.run_intervention_reminder_scan(request.user)
        return Response({"success": True, **result.as_dict()})
