# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Month grid tests."""

from datetime import date, datetime, timezone
from types import SimpleNamespace

from stagedesk_server.services.calendar import build_month_grid, event_days, month_bounds, shift_month


def _event(start: datetime, end: datetime | None = None):
    return SimpleNamespace(title="Show", start_date=start, end_date=end)


def test_month_bounds():
    assert month_bounds(2030, 5) == (
        datetime(2030, 5, 1, tzinfo=timezone.utc),
        datetime(2030, 6, 1, tzinfo=timezone.utc),
    )
    assert month_bounds(2030, 12)[1] == datetime(2031, 1, 1, tzinfo=timezone.utc)


def test_shift_month():
    assert shift_month(2030, 1, -1) == (2029, 12)
    assert shift_month(2030, 12, 1) == (2031, 1)
    assert shift_month(2030, 5, 0) == (2030, 5)


def test_event_days_spans_range():
    event = _event(datetime(2030, 4, 30, 12), datetime(2030, 5, 2, 1))
    assert event_days(event) == [date(2030, 4, 30), date(2030, 5, 1), date(2030, 5, 2)]
    assert event_days(_event(datetime(2030, 5, 3, 9))) == [date(2030, 5, 3)]


def test_grid_weeks_start_monday():
    weeks = build_month_grid(2030, 5, [])
    assert all(len(week) == 7 for week in weeks)
    assert all(week[0].day.weekday() == 0 for week in weeks)
    # 1 May 2030 is a Wednesday
    assert weeks[0][0].day == date(2030, 4, 29)
    assert not weeks[0][0].in_month
    assert weeks[0][2].day == date(2030, 5, 1)
    assert weeks[0][2].in_month


def test_grid_places_event_on_each_day():
    festival = _event(
        datetime(2030, 4, 30, 12, tzinfo=timezone.utc),
        datetime(2030, 5, 2, 23, tzinfo=timezone.utc),
    )
    weeks = build_month_grid(2030, 5, [festival])
    days = [cell.day for week in weeks for cell in week if festival in cell.events]
    assert days == [date(2030, 4, 30), date(2030, 5, 1), date(2030, 5, 2)]
