"""Per-user church follows and event likes."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..core.contracts import DataAccessPort
from ..errors import AlreadyExistsError, is_unique_violation
from .records import Church, Event, row_to_record, to_dict


@dataclass
class FavoritesSummary:
    followed_churches: List[Church] = field(default_factory=list)
    liked_events: List[Event] = field(default_factory=list)

    @property
    def total_follows(self) -> int:
        return len(self.followed_churches)

    @property
    def total_likes(self) -> int:
        return len(self.liked_events)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "followed_churches": [to_dict(church) for church in self.followed_churches],
            "liked_events": [to_dict(event) for event in self.liked_events],
            "counts": {"churches": self.total_follows, "events": self.total_likes},
        }


class FavoriteStore:
    """Follow/like bookkeeping; each pair is stored at most once."""

    def __init__(self, db: DataAccessPort):
        self.db = db

    async def _insert_pair(self, sql: str, params: List[Any], conflict: str) -> Any:
        try:
            result = await self.db.insert(sql, params)
        except Exception as exc:
            if is_unique_violation(exc):
                raise AlreadyExistsError(conflict) from exc
            raise
        return result.last_id

    async def follow_church(self, user_id: int, church_id: int) -> Any:
        """Follow a church; returns the follow id.

        Raises:
            AlreadyExistsError: The user already follows the church.
        """

        return await self._insert_pair(
            "INSERT INTO user_church_follows (user_id, church_id) VALUES (?, ?)",
            [user_id, church_id],
            "User is already following this church.",
        )

    async def unfollow_church(self, user_id: int, church_id: int) -> bool:
        result = await self.db.run(
            "DELETE FROM user_church_follows WHERE user_id = ? AND church_id = ?",
            [user_id, church_id],
        )
        return result.changes > 0

    async def followed_churches(self, user_id: int) -> List[Church]:
        rows = await self.db.all(
            """
            SELECT c.*, ucf.created_at AS followed_at
            FROM churches c
            JOIN user_church_follows ucf ON c.id = ucf.church_id
            WHERE ucf.user_id = ?
            ORDER BY ucf.created_at DESC, ucf.id DESC
            """,
            [user_id],
        )
        return [row_to_record(Church, row) for row in rows]

    async def is_following_church(self, user_id: int, church_id: int) -> bool:
        row = await self.db.get(
            "SELECT id FROM user_church_follows WHERE user_id = ? AND church_id = ? LIMIT 1",
            [user_id, church_id],
        )
        return row is not None

    async def like_event(self, user_id: int, event_id: int) -> Any:
        """Like an event; returns the like id.

        Raises:
            AlreadyExistsError: The user already likes the event.
        """

        return await self._insert_pair(
            "INSERT INTO user_event_likes (user_id, event_id) VALUES (?, ?)",
            [user_id, event_id],
            "User has already liked this event.",
        )

    async def unlike_event(self, user_id: int, event_id: int) -> bool:
        result = await self.db.run(
            "DELETE FROM user_event_likes WHERE user_id = ? AND event_id = ?",
            [user_id, event_id],
        )
        return result.changes > 0

    async def liked_events(self, user_id: int) -> List[Event]:
        rows = await self.db.all(
            """
            SELECT e.*, c.name AS church_name, c.logo_url AS church_logo,
                   uel.created_at AS liked_at
            FROM events e
            JOIN churches c ON e.church_id = c.id
            JOIN user_event_likes uel ON e.id = uel.event_id
            WHERE uel.user_id = ?
            ORDER BY uel.created_at DESC, uel.id DESC
            """,
            [user_id],
        )
        return [row_to_record(Event, row) for row in rows]

    async def is_liking_event(self, user_id: int, event_id: int) -> bool:
        row = await self.db.get(
            "SELECT id FROM user_event_likes WHERE user_id = ? AND event_id = ? LIMIT 1",
            [user_id, event_id],
        )
        return row is not None

    async def summary(self, user_id: int) -> FavoritesSummary:
        """Followed churches and liked events, fetched concurrently."""

        churches, events = await asyncio.gather(
            self.followed_churches(user_id), self.liked_events(user_id)
        )
        return FavoritesSummary(followed_churches=churches, liked_events=events)
