"""
Artisan Admin - Django admin for interventions, invoices and notifications.

Reminders are append-only: they show up as a read-only inline on the
invoice and cannot be edited or deleted from the admin.
"""

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _
from simple_history.admin import SimpleHistoryAdmin

from artisan.exceptions import ArtisanError
from artisan.models import Client, Intervention, Invoice, InvoiceReminder, Notification
from artisan.service import Agenda


# ── Client ──


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("last_name", "first_name", "email", "phone", "artisan")
    search_fields = ("last_name", "first_name", "email")
    readonly_fields = ("uuid", "created_at", "updated_at")


# ── Intervention ──


@admin.register(Intervention)
class InterventionAdmin(SimpleHistoryAdmin):
    """Admin for interventions, with status history."""

    list_display = ("title", "client", "scheduled_at", "duration_minutes", "status", "artisan")
    list_filter = ("status", "scheduled_at")
    search_fields = ("title", "client__last_name", "address")
    date_hierarchy = "scheduled_at"
    raw_id_fields = ("client",)
    readonly_fields = ("uuid", "created_at", "updated_at")
    actions = ["mark_completed", "mark_cancelled"]

    def _change_status(self, request, queryset, new_status):
        changed = 0
        for intervention in queryset:
            try:
                Agenda.change_status(intervention, new_status, user=request.user)
            except ArtisanError as e:
                self.message_user(request, f"{intervention}: {e}", messages.WARNING)
                continue
            changed += 1
        self.message_user(request, _("%d intervention(s) mise(s) à jour.") % changed)

    @admin.action(description=_("Marquer comme terminées"))
    def mark_completed(self, request, queryset):
        self._change_status(request, queryset, "completed")

    @admin.action(description=_("Marquer comme annulées"))
    def mark_cancelled(self, request, queryset):
        self._change_status(request, queryset, "cancelled")


# ── Invoice ──


class InvoiceReminderInline(admin.TabularInline):
    """Read-only reminder history."""

    model = InvoiceReminder
    extra = 0
    fields = ("tier", "method", "status", "sent_at", "message")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("number", "client", "due_date", "status", "total", "last_tier")
    list_filter = ("status", "due_date")
    search_fields = ("number", "client__last_name")
    raw_id_fields = ("client",)
    readonly_fields = ("uuid", "created_at", "updated_at")
    inlines = [InvoiceReminderInline]
    actions = ["send_next_reminder"]

    @admin.display(description=_("Dernière relance"))
    def last_tier(self, obj):
        return obj.last_tier or "-"

    @admin.action(description=_("Envoyer la relance suivante"))
    def send_next_reminder(self, request, queryset):
        for invoice in queryset.select_related("client"):
            try:
                reminder = Agenda.send_invoice_reminder(invoice)
            except ArtisanError as e:
                self.message_user(request, f"{invoice}: {e}", messages.WARNING)
                continue
            self.message_user(request, str(reminder))


@admin.register(InvoiceReminder)
class InvoiceReminderAdmin(admin.ModelAdmin):
    list_display = ("invoice", "tier", "method", "sent_at")
    list_filter = ("tier", "method")
    search_fields = ("invoice__number",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ── Notification ──


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "type", "tag", "day_bucket", "status", "created_at")
    list_filter = ("type", "status", "tag", "day_bucket")
    search_fields = ("title", "message")
    raw_id_fields = ("client", "intervention", "invoice")
    readonly_fields = ("uuid", "created_at", "read_at")
