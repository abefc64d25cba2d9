"""Walk through the stores on whichever engine the environment selects.

Set `DATABASE_URL` for PostgreSQL; otherwise a SQLite file at
`DATABASE_PATH` (default `updates.db`) is used.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "church_updates").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from church_updates import AlreadyExistsError, DataAccess, Settings, configure_logging
from church_updates.models import (
    Announcement,
    AnnouncementStore,
    Church,
    ChurchStore,
    Event,
    EventPatch,
    EventStore,
    FavoriteStore,
    UserRole,
    UserStore,
    apply_schema,
    to_dict,
)


async def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    db = DataAccess(settings)
    await db.initialize()
    try:
        await apply_schema(db)

        churches = ChurchStore(db)
        events = EventStore(db)
        announcements = AnnouncementStore(db)
        users = UserStore(db)
        favorites = FavoriteStore(db)

        church = await churches.create(Church(name="Grace Fellowship", city="Austin"))
        picnic = await events.create(
            church.id, Event(title="Parish Picnic", start_datetime="2024-07-04T12:00:00Z")
        )
        await events.update(picnic.id, EventPatch(location="Zilker Park"))
        await announcements.create(
            church.id,
            Announcement(title="Sunday Service", type="weekly", day="0", start_time="10:00"),
        )

        fan = await users.get_by_email("fan@example.com")
        if fan is None:
            fan = await users.create("fan@example.com", "<hashed>", "Fan", role=UserRole.USER)
        await favorites.follow_church(fan.id, church.id)
        try:
            await favorites.like_event(fan.id, picnic.id)
        except AlreadyExistsError:
            print("Already liked.")

        print("Church:", to_dict(await churches.get(church.id)))
        print("Weekly:", [a.title for a in await announcements.list_weekly_by_church(church.id)])
        print("Favorites:", (await favorites.summary(fan.id)).to_dict())

        removal = await churches.remove(church.id)
        print("Removed church:", removal)
    finally:
        await db.aclose()


if __name__ == "__main__":
    asyncio.run(main())
