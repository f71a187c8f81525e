"""
Timeline layout -- packs one day's events into side-by-side columns.

Two events conflict when the later one starts before the earlier one's
buffer-extended end (end + LAYOUT_BUFFER_MINUTES). Conflicting events
never share a column.

Algorithm (greedy interval colouring, per conflict cluster):
    1. Sort by start, shorter duration first on ties.
    2. Split into conflict clusters: an event whose start is at or after
       the furthest buffered end seen so far starts a new cluster.
    3. Inside a cluster, put each event in the first column whose last
       buffered end is <= the event's start, else open a new column.
    4. Size every event of a cluster with the cluster's final column count:
           width = (100 - margin * (count - 1)) / count
           left  = column * (width + margin)

Events outside a cluster keep full width, whatever happened earlier in
the day. Horizontal and vertical positions are percentages of the day
column (0..100).

Usage:
    slots = layout([LayoutEvent(1, start, 60), LayoutEvent(2, start2, 30)])
    by_day = layout_by_day(LayoutEvent.from_intervention(i) for i in qs)
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

from artisan.conf import get_setting
from artisan.dates import day_bucket, minutes_since_midnight
from artisan.services.guard import clamp_duration

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class LayoutEvent:
    """A timed event to place on a day column."""

    id: Any
    start: datetime
    duration_minutes: int | None = None

    @property
    def duration(self) -> int:
        return clamp_duration(self.duration_minutes)

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration)

    @classmethod
    def from_intervention(cls, intervention, key: str = "pk") -> LayoutEvent:
        return cls(
            id=getattr(intervention, key),
            start=intervention.scheduled_at,
            duration_minutes=intervention.duration_minutes,
        )


@dataclass
class LayoutSlot:
    """Position of one event. Derived data, recomputed on every call."""

    event_id: Any
    column: int
    column_count: int
    left_fraction: float
    width_fraction: float
    top_fraction: float
    height_fraction: float
    cluster: int

    def as_dict(self) -> dict:
        return {
            "id": self.event_id,
            "column": self.column,
            "column_count": self.column_count,
            "left": round(self.left_fraction, 4),
            "width": round(self.width_fraction, 4),
            "top": round(self.top_fraction, 4),
            "height": round(self.height_fraction, 4),
        }


@dataclass
class MonthCell:
    """Month view cell: first N events of a day plus how many are hidden."""

    day: date
    visible: list[LayoutEvent] = field(default_factory=list)
    hidden: int = 0


def _sorted(events: Iterable[LayoutEvent]) -> list[LayoutEvent]:
    return sorted(events, key=lambda e: (e.start, e.duration))


def conflict_clusters(
    events: Iterable[LayoutEvent], buffer: timedelta
) -> list[list[LayoutEvent]]:
    """Group events (sorted) into maximal clusters of transitive conflicts."""
    clusters: list[list[LayoutEvent]] = []
    reach = None

    for event in _sorted(events):
        if clusters and event.start < reach:
            clusters[-1].append(event)
            reach = max(reach, event.end + buffer)
        else:
            clusters.append([event])
            reach = event.end + buffer

    return clusters


def pack_columns(cluster: list[LayoutEvent], buffer: timedelta) -> list[int]:
    """First-fit column index for each event of a sorted cluster."""
    column_ends: list[datetime] = []
    assigned = []

    for event in cluster:
        for index, buffered_end in enumerate(column_ends):
            if buffered_end <= event.start:
                break
        else:
            index = len(column_ends)
            column_ends.append(None)

        column_ends[index] = event.end + buffer
        assigned.append(index)

    return assigned


def column_geometry(column: int, column_count: int, margin: float) -> tuple[float, float]:
    """Return (left, width) percentages for a column."""
    gap = margin if column_count > 1 else 0
    width = (100 - gap * (column_count - 1)) / column_count
    return column * (width + gap), width


def vertical_geometry(event: LayoutEvent) -> tuple[float, float]:
    """Return (top, height) percentages of a 24h day column."""
    min_height = int(get_setting("MIN_EVENT_HEIGHT_MINUTES"))
    top = minutes_since_midnight(event.start) / MINUTES_PER_DAY * 100
    height = max(min_height, event.duration) / MINUTES_PER_DAY * 100
    return top, height


def layout(
    events: Iterable[LayoutEvent],
    buffer_minutes: int | None = None,
    margin: float | None = None,
) -> list[LayoutSlot]:
    """
    Lay out one day's events.

    Args:
        events: Events of a single rendered day
        buffer_minutes: Minimum separation (default LAYOUT_BUFFER_MINUTES)
        margin: Gap between columns in percent (default LAYOUT_COLUMN_MARGIN)

    Returns:
        One LayoutSlot per event, in start order
    """
    if buffer_minutes is None:
        buffer_minutes = get_setting("LAYOUT_BUFFER_MINUTES")
    if margin is None:
        margin = get_setting("LAYOUT_COLUMN_MARGIN")

    buffer = timedelta(minutes=buffer_minutes)
    slots = []

    for cluster_index, cluster in enumerate(conflict_clusters(events, buffer)):
        columns = pack_columns(cluster, buffer)
        column_count = max(columns) + 1

        for event, column in zip(cluster, columns):
            left, width = column_geometry(column, column_count, margin)
            top, height = vertical_geometry(event)
            slots.append(
                LayoutSlot(
                    event_id=event.id,
                    column=column,
                    column_count=column_count,
                    left_fraction=left,
                    width_fraction=width,
                    top_fraction=top,
                    height_fraction=height,
                    cluster=cluster_index,
                )
            )

    return slots


def group_by_day(events: Iterable[LayoutEvent]) -> dict[date, list[LayoutEvent]]:
    days: dict[date, list[LayoutEvent]] = defaultdict(list)
    for event in events:
        days[day_bucket(event.start)].append(event)
    return dict(sorted(days.items()))


def layout_by_day(
    events: Iterable[LayoutEvent],
    buffer_minutes: int | None = None,
    margin: float | None = None,
) -> dict[date, list[LayoutSlot]]:
    """Day and week views: one independent layout per calendar day."""
    return {
        day: layout(day_events, buffer_minutes=buffer_minutes, margin=margin)
        for day, day_events in group_by_day(events).items()
    }


def month_preview(
    events: Iterable[LayoutEvent], limit: int | None = None
) -> dict[date, MonthCell]:
    """Month view: ordered top-N truncation per day, no column packing."""
    if limit is None:
        limit = int(get_setting("MONTH_PREVIEW_LIMIT"))

    cells = {}
    for day, day_events in group_by_day(events).items():
        ordered = _sorted(day_events)
        cells[day] = MonthCell(
            day=day,
            visible=ordered[:limit],
            hidden=max(0, len(ordered) - limit),
        )
    return cells
