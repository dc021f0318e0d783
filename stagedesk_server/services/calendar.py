# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Month calendar grid for the events view."""

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any

from stagedesk_server.api.schemas import ensure_utc


@dataclass
class CalendarDay:
    day: date
    in_month: bool
    events: list[Any] = field(default_factory=list)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """UTC [start, end) of a month."""
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def event_days(event) -> list[date]:
    """Every calendar day (UTC) an event covers, from start to end date inclusive."""
    first = ensure_utc(event.start_date).date()
    last = ensure_utc(event.end_date).date() if event.end_date else first
    if last < first:
        last = first
    return [first + timedelta(days=i) for i in range((last - first).days + 1)]


def build_month_grid(year: int, month: int, events) -> list[list[CalendarDay]]:
    """Weeks (Monday first) of the month with events placed on each day they span."""
    weeks = [
        [CalendarDay(day=d, in_month=d.month == month) for d in week]
        for week in calendar.Calendar(firstweekday=calendar.MONDAY).monthdatescalendar(year, month)
    ]
    by_day = {cell.day: cell for week in weeks for cell in week}
    for event in events:
        for d in event_days(event):
            cell = by_day.get(d)
            if cell is not None:
                cell.events.append(event)
    return weeks
