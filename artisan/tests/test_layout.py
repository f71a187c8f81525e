"""
Tests for the calendar layout engine (artisan.services.layout).
"""

from datetime import date, datetime, timedelta
from itertools import combinations

import pytest
from django.utils import timezone

from artisan import agenda
from artisan.services.layout import (
    LayoutEvent,
    column_geometry,
    conflict_clusters,
    layout,
    layout_by_day,
    month_preview,
)


def ev(event_id, hour, minute=0, duration=60, day=2):
    start = timezone.make_aware(datetime(2026, 3, day, hour, minute))
    return LayoutEvent(event_id, start, duration)


def by_id(slots):
    return {slot.event_id: slot for slot in slots}


# ═══════════════════════════════════════════════════════════════════
# Columns
# ═══════════════════════════════════════════════════════════════════


class TestColumns:
    def test_three_events_two_clusters(self):
        """09:00-10:00 and 09:30-10:30 conflict; 13:00 is clear of 12:00."""
        slots = by_id(layout([ev(1, 9), ev(2, 9, 30), ev(3, 13)], buffer_minutes=120))

        assert slots[1].column != slots[2].column
        assert slots[1].column_count == slots[2].column_count == 2
        assert slots[3].column == 0
        assert slots[3].column_count == 1
        assert slots[3].cluster != slots[1].cluster

    def test_buffer_separates_non_overlapping_events(self):
        """10:00 end + 120 min buffer still blocks an 11:30 start."""
        slots = by_id(layout([ev(1, 9), ev(2, 11, 30)], buffer_minutes=120))

        assert slots[1].column == 0
        assert slots[2].column == 1

    def test_zero_buffer_is_plain_overlap(self):
        slots = by_id(layout([ev(1, 9), ev(2, 11, 30)], buffer_minutes=0))

        assert slots[1].column_count == 1
        assert slots[2].column_count == 1

    def test_start_at_buffered_end_does_not_conflict(self):
        slots = by_id(layout([ev(1, 9), ev(2, 12)], buffer_minutes=120))

        assert slots[2].column == 0
        assert slots[2].cluster == 1

    def test_first_fit_reuses_freed_column(self):
        """12:00 fits after event 1 (buffered end 12:00) but not event 2 (12:30)."""
        slots = by_id(layout([ev(1, 9), ev(2, 9, 30), ev(3, 12)], buffer_minutes=120))

        assert slots[3].column == 0
        assert slots[3].column_count == 2

    def test_shorter_event_first_on_same_start(self):
        slots = by_id(layout([ev("long", 9, duration=90), ev("short", 9, duration=30)]))

        assert slots["short"].column == 0
        assert slots["long"].column == 1

    def test_no_buffered_overlap_within_a_column(self):
        events = [
            ev(1, 8),
            ev(2, 8, 15, duration=20),
            ev(3, 9, 45),
            ev(4, 10, 30, duration=120),
            ev(5, 12),
            ev(6, 14, 45),
            ev(7, 17),
        ]
        buffer = timedelta(minutes=120)
        slots = by_id(layout(events, buffer_minutes=120))
        events_by_id = {e.id: e for e in events}

        for a, b in combinations(events, 2):
            if slots[a.id].column != slots[b.id].column:
                continue
            first, second = sorted((a, b), key=lambda e: e.start)
            assert first.end + buffer <= second.start, (first.id, second.id)

        assert set(slots) == set(events_by_id)

    def test_clusters_are_transitive(self):
        """1 conflicts with 2, 2 with 3: one cluster even if 1 and 3 don't."""
        clusters = conflict_clusters(
            [ev(1, 8), ev(2, 10, 30), ev(3, 13, 15)], timedelta(minutes=120)
        )
        assert [[e.id for e in c] for c in clusters] == [[1, 2, 3]]

    def test_empty_day(self):
        assert layout([]) == []


# ═══════════════════════════════════════════════════════════════════
# Geometry
# ═══════════════════════════════════════════════════════════════════


class TestGeometry:
    def test_single_column_full_width(self):
        assert column_geometry(0, 1, 1) == (0, 100)

    def test_two_columns_with_margin(self):
        slots = by_id(layout([ev(1, 9), ev(2, 9, 30)], margin=1))

        assert slots[1].width_fraction == pytest.approx(49.5)
        assert slots[1].left_fraction == pytest.approx(0)
        assert slots[2].left_fraction == pytest.approx(50.5)

    def test_zero_margin(self):
        slots = by_id(layout([ev(1, 9), ev(2, 9, 30)], margin=0))

        assert slots[2].width_fraction == pytest.approx(50)
        assert slots[2].left_fraction == pytest.approx(50)

    def test_columns_fit_the_day(self):
        slots = layout([ev(i, 9, i * 5) for i in range(5)])

        for slot in slots:
            assert slot.left_fraction + slot.width_fraction <= 100 + 1e-9

    def test_vertical_position(self):
        slot = layout([ev(1, 9)])[0]

        assert slot.top_fraction == pytest.approx(37.5)
        assert slot.height_fraction == pytest.approx(60 / 1440 * 100)

    def test_minimum_height(self):
        slot = layout([ev(1, 9, duration=10)])[0]
        assert slot.height_fraction == pytest.approx(30 / 1440 * 100)

    def test_duration_defaults_and_clamps(self):
        assert ev(1, 9, duration=None).duration == 60
        assert ev(1, 9, duration=500).duration == 120

    def test_as_dict(self):
        data = layout([ev(1, 9), ev(2, 9, 30)])[1].as_dict()

        assert data == {
            "id": 2,
            "column": 1,
            "column_count": 2,
            "left": 50.5,
            "width": 49.5,
            "top": 39.5833,
            "height": 4.1667,
        }


# ═══════════════════════════════════════════════════════════════════
# Day / month views
# ═══════════════════════════════════════════════════════════════════


class TestViews:
    def test_days_are_independent(self):
        days = layout_by_day([ev(1, 9, day=2), ev(2, 9, 30, day=3)])

        assert list(days) == [date(2026, 3, 2), date(2026, 3, 3)]
        assert days[date(2026, 3, 2)][0].column_count == 1
        assert days[date(2026, 3, 3)][0].column_count == 1

    def test_month_preview_truncates(self):
        events = [ev(i, 8 + i) for i in range(6)]
        cells = month_preview(reversed(events), limit=4)

        cell = cells[date(2026, 3, 2)]
        assert [e.id for e in cell.visible] == [0, 1, 2, 3]
        assert cell.hidden == 2

    def test_month_preview_short_day(self):
        cell = month_preview([ev(1, 9)])[date(2026, 3, 2)]
        assert cell.hidden == 0


class TestAgendaLayout:
    def test_layout_from_interventions(self, make_intervention):
        first = make_intervention(ev(0, 9).start)
        second = make_intervention(ev(0, 9, 30).start, duration_minutes=None)

        slots = by_id(agenda.layout([first, second]))

        assert slots[first.pk].column == 0
        assert slots[second.pk].column == 1

    def test_layout_range(self, artisan, other_artisan, make_intervention):
        monday = make_intervention(ev(0, 9, day=2).start)
        make_intervention(ev(0, 9, day=4).start)
        make_intervention(ev(0, 9, day=9).start)

        days = agenda.layout_range(artisan, date(2026, 3, 2), date(2026, 3, 8))

        assert list(days) == [date(2026, 3, 2), date(2026, 3, 4)]
        assert [slot.event_id for slot in days[date(2026, 3, 2)]] == [monday.uuid]
        assert agenda.layout_range(other_artisan, date(2026, 3, 2), date(2026, 3, 8)) == {}
