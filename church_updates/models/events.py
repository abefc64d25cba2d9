"""Event store: church events with like counts."""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from .base import Store
from .patches import UNSET, EventPatch
from .records import Event, parse_datetime

_EVENT_WITH_CHURCH = """
    SELECT e.*, c.name AS church_name, c.logo_url AS church_logo,
           COUNT(uel.id) AS like_count
    FROM events e
    JOIN churches c ON e.church_id = c.id
    LEFT JOIN user_event_likes uel ON e.id = uel.event_id
"""

_DATETIME_FIELDS = ("start_datetime", "end_datetime")


class EventStore(Store[Event]):
    record = Event

    async def list_all(self) -> List[Event]:
        """All events with church name, logo and like count, earliest first."""

        return await self._many(
            _EVENT_WITH_CHURCH + "GROUP BY e.id, c.id ORDER BY e.start_datetime ASC"
        )

    async def list_by_church(self, church_id: int) -> List[Event]:
        return await self._many(
            "SELECT * FROM events WHERE church_id = ? ORDER BY start_datetime", [church_id]
        )

    async def get(self, id: int) -> Optional[Event]:
        return await self._one(_EVENT_WITH_CHURCH + "WHERE e.id = ? GROUP BY e.id, c.id", [id])

    async def create(self, church_id: int, event: Event) -> Event:
        """Insert an event for a church.

        Raises:
            InvalidFieldError: `start_datetime` or `end_datetime` is not a
                valid ISO-8601 timestamp.
        """

        event = replace(
            event,
            church_id=church_id,
            **{
                name: parse_datetime(getattr(event, name), field_name=name)
                for name in _DATETIME_FIELDS
            },
        )
        return await self._reload_created(await self._insert_record(event))

    async def update(self, id: int, patch: EventPatch) -> Optional[Event]:
        changes = {
            name: parse_datetime(getattr(patch, name), field_name=name)
            for name in _DATETIME_FIELDS
            if getattr(patch, name) is not UNSET
        }
        await self._apply_patch(id, replace(patch, **changes))
        return await self._get_plain(id)

    async def remove(self, id: int) -> bool:
        return await self._delete_by_id(id)
