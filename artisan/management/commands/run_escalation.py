"""
Run the escalation scans on demand.

Sends due invoice reminders and today's / tomorrow's intervention reminders
for every artisan (or a single one). Safe to run repeatedly: already sent
reminders are skipped.

Usage:
    python manage.py run_escalation
    python manage.py run_escalation --user dupont --date 2026-03-02
    python manage.py run_escalation --skip-interventions
    python manage.py run_escalation --repair
"""

from datetime import datetime, time

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db.models import Q
from django.utils import timezone
from django.utils.dateparse import parse_date

from artisan.service import Agenda

User = get_user_model()


class Command(BaseCommand):
    help = "Envoie les relances de factures et les rappels d'interventions"

    def add_arguments(self, parser):
        parser.add_argument(
            "--user",
            help="Nom d'utilisateur de l'artisan (par défaut : tous)",
        )
        parser.add_argument(
            "--date",
            help="Jour de référence AAAA-MM-JJ (par défaut : aujourd'hui)",
        )
        parser.add_argument(
            "--skip-invoices",
            action="store_true",
            help="Ne pas traiter les factures en retard",
        )
        parser.add_argument(
            "--skip-interventions",
            action="store_true",
            help="Ne pas traiter les rappels d'interventions",
        )
        parser.add_argument(
            "--repair",
            action="store_true",
            help="Corrige d'abord les statuts incohérents avec la date",
        )

    def handle(self, *args, **options):
        now = self._reference_time(options["date"])
        today = timezone.localdate(now)
        failures = 0

        for artisan in self._artisans(options["user"]):
            self.stdout.write(f"\n{artisan.get_username()} ({today.isoformat()})")

            if options["repair"]:
                changes = Agenda.repair_statuses(artisan, now=now)
                for intervention, old_status, new_status in changes:
                    self.stdout.write(f"   • {intervention}: {old_status} -> {new_status}")

            if not options["skip_invoices"]:
                result = Agenda.run_overdue_invoice_scan(artisan, today=today)
                failures += len(result.failures)
                self.stdout.write(
                    f"   • Relances : {result.created} envoyées, {result.skipped} ignorées"
                )
                for outcome in result.failures:
                    self.stdout.write(
                        self.style.ERROR(
                            f"   ✗ Facture {outcome.invoice_number} "
                            f"(relance {outcome.tier}) : {outcome.error}"
                        )
                    )

            if not options["skip_interventions"]:
                reminders = Agenda.run_intervention_reminder_scan(artisan, now=now)
                failures += reminders.failed
                self.stdout.write(
                    f"   • Rappels : {reminders.created} créés "
                    f"({reminders.reminders_today} aujourd'hui, "
                    f"{reminders.reminders_24h} demain)"
                )

        if failures:
            self.stdout.write(self.style.WARNING(f"\n{failures} échec(s)"))
        else:
            self.stdout.write(self.style.SUCCESS("\nTerminé"))

    def _reference_time(self, raw):
        if not raw:
            return timezone.now()

        try:
            day = parse_date(raw)
        except ValueError:
            day = None
        if day is None:
            raise CommandError(f"Date invalide : {raw!r} (attendu AAAA-MM-JJ)")

        # Keep the current wall-clock time so "today" reminders still
        # compare against a realistic hour.
        current = timezone.localtime().time()
        return timezone.make_aware(datetime.combine(day, time(current.hour, current.minute)))

    def _artisans(self, username):
        if username:
            try:
                return [User.objects.get(**{User.USERNAME_FIELD: username})]
            except User.DoesNotExist:
                raise CommandError(f"Utilisateur introuvable : {username}")

        return User.objects.filter(
            Q(invoices__isnull=False) | Q(interventions__isnull=False),
            is_active=True,
        ).distinct().order_by("pk")
