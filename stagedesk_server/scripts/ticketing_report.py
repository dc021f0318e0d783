#!/usr/bin/env python3
# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Print ticketing numbers per event. Run: python -m stagedesk_server.scripts.ticketing_report"""

import asyncio
import sys

from sqlalchemy import select

from stagedesk_server.database import async_session_maker, init_db
from stagedesk_server.models import Event
from stagedesk_server.services.stats import collect_dashboard_stats


def format_event_line(event: Event) -> str:
    price = float(event.ticket_price or 0)
    sold = event.tickets_sold or 0
    return (
        f"{event.start_date:%Y-%m-%d}  {event.title[:40]:<40}  {event.status:<10}"
        f"  {sold:>6}/{event.capacity or 0:<6}  {price:>9.2f}  {sold * price:>11.2f}"
    )


async def main():
    await init_db()
    async with async_session_maker() as session:
        result = await session.execute(select(Event).order_by(Event.start_date.asc(), Event.id.asc()))
        events = result.scalars().all()
        stats = await collect_dashboard_stats(session)

    print(f"Artists: {stats.artists.total} ({stats.artists.active} active)")
    print(f"Announcements: {stats.announcements.total} ({stats.announcements.active} active)")
    print(f"Events: {stats.events.total} ({stats.events.upcoming} upcoming)")
    if not events:
        print("No events found.")
        sys.exit(0)
    print()
    print(f"{'Date':<10}  {'Title':<40}  {'Status':<10}  {'Sold/Cap':^13}  {'Price':>9}  {'Revenue':>11}")
    for event in events:
        print(format_event_line(event))
    t = stats.events.ticketing
    print()
    print(f"Upcoming: {t.sold}/{t.capacity} tickets sold, projected revenue {t.revenue:.2f}")


if __name__ == "__main__":
    asyncio.run(main())
