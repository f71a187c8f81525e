"""
Shared fixtures for Artisan tests.
"""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from artisan.models import Client, Intervention, Invoice, InvoiceStatus

User = get_user_model()


@pytest.fixture
def now():
    """Monday 2 March 2026, 10:00 local time."""
    return timezone.make_aware(datetime(2026, 3, 2, 10, 0))


@pytest.fixture
def today(now):
    return timezone.localdate(now)


@pytest.fixture
def artisan(db):
    return User.objects.create_user(username="dupont", password="test123")


@pytest.fixture
def other_artisan(db):
    return User.objects.create_user(username="martin", password="test123")


@pytest.fixture
def customer(db, artisan):
    return Client.objects.create(
        artisan=artisan,
        first_name="Jeanne",
        last_name="Moreau",
        email="jeanne@example.com",
    )


@pytest.fixture
def make_intervention(artisan, customer):
    """Factory: make_intervention(scheduled_at, status="todo", **fields)."""

    def _make(scheduled_at, status="todo", **fields):
        fields.setdefault("title", "Réparation fuite")
        fields.setdefault("duration_minutes", 60)
        return Intervention.objects.create(
            artisan=artisan,
            client=customer,
            scheduled_at=scheduled_at,
            status=status,
            **fields,
        )

    return _make


@pytest.fixture
def make_invoice(artisan, customer):
    """Factory: make_invoice(number, due_date, **fields)."""

    def _make(number, due_date, **fields):
        fields.setdefault("status", InvoiceStatus.SENT)
        fields.setdefault("total", Decimal("1234.50"))
        return Invoice.objects.create(
            artisan=artisan,
            client=customer,
            number=number,
            due_date=due_date,
            **fields,
        )

    return _make


@pytest.fixture
def overdue_invoice(make_invoice, today):
    """Invoice due 10 days ago, no reminder yet."""
    return make_invoice("F-2026-001", today - timedelta(days=10))
