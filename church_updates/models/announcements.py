"""Announcement store: weekly schedule items and special notices."""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from ..errors import ModelError
from .base import Store
from .patches import AnnouncementPatch
from .records import Announcement

_WITH_CHURCH = """
    SELECT a.*, c.name AS church_name, c.logo_url AS church_logo
    FROM announcements a
    JOIN churches c ON a.church_id = c.id
"""

_NEWEST_FIRST = " ORDER BY a.posted_at DESC, a.created_at DESC"


class AnnouncementStore(Store[Announcement]):
    record = Announcement

    async def list_all(self) -> List[Announcement]:
        return await self._many(_WITH_CHURCH + _NEWEST_FIRST)

    async def list_by_church(self, church_id: int) -> List[Announcement]:
        return await self._many(_WITH_CHURCH + "WHERE a.church_id = ?" + _NEWEST_FIRST, [church_id])

    async def list_weekly_by_church(self, church_id: int) -> List[Announcement]:
        """Weekly schedule for a church.

        Includes `weekly` announcements and non-special recurring ones.
        Entries without a day sort last, the rest by day then start time.
        """

        return await self._many(
            _WITH_CHURCH
            + """
            WHERE a.church_id = ?
              AND (a.type = 'weekly' OR (a.is_special = ? AND a.recurrence_rule IS NOT NULL))
            ORDER BY
              CASE WHEN a.day IS NULL THEN 1 ELSE 0 END,
              a.day ASC,
              a.start_time ASC
            """,
            [church_id, False],
        )

    async def list_by_type(self, type: str) -> List[Announcement]:
        return await self._many(_WITH_CHURCH + "WHERE a.type = ?" + _NEWEST_FIRST, [type])

    async def list_special(self) -> List[Announcement]:
        return await self._many(_WITH_CHURCH + "WHERE a.is_special = ?" + _NEWEST_FIRST, [True])

    async def get(self, id: int) -> Optional[Announcement]:
        return await self._one(_WITH_CHURCH + "WHERE a.id = ?", [id])

    async def create(self, church_id: int, announcement: Announcement) -> Announcement:
        result = await self._insert_record(replace(announcement, church_id=church_id))
        created = await self.get(result.last_id)
        if created is None:
            raise ModelError(f"Inserted announcement {result.last_id} not found.")
        return created

    async def update(self, id: int, patch: AnnouncementPatch) -> Optional[Announcement]:
        """Apply a patch and bump `updated_at`; returns the row with church info."""

        await self._apply_patch(id, patch)
        return await self.get(id)

    async def remove(self, id: int) -> bool:
        return await self._delete_by_id(id)
