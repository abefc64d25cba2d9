"""Church directory store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .base import Store
from .patches import ChurchPatch
from .records import Church, EnrollmentStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChurchRemoval:
    removed: bool
    removed_assignments: int


class ChurchStore(Store[Church]):
    record = Church

    async def list_all(self) -> List[Church]:
        return await self._many("SELECT * FROM churches ORDER BY id")

    async def get(self, id: int) -> Optional[Church]:
        """Fetch one church with its follower count."""

        return await self._one(
            """
            SELECT c.*, COUNT(ucf.id) AS follower_count
            FROM churches c
            LEFT JOIN user_church_follows ucf ON c.id = ucf.church_id
            WHERE c.id = ?
            GROUP BY c.id
            """,
            [id],
        )

    async def create(self, church: Church) -> Church:
        return await self._reload_created(await self._insert_record(church))

    async def update(self, id: int, patch: ChurchPatch) -> Optional[Church]:
        await self._apply_patch(id, patch)
        return await self._get_plain(id)

    async def remove(self, id: int) -> ChurchRemoval:
        """Delete a church after releasing its admins.

        Admin assignments for the church are dropped and the affected users
        go back to enrollment status `none` so they can enroll elsewhere.
        """

        assigned = await self.db.all(
            "SELECT user_id FROM church_admin_assignments WHERE church_id = ?", [id]
        )
        await self.db.run("DELETE FROM church_admin_assignments WHERE church_id = ?", [id])
        for row in assigned:
            await self.db.run(
                "UPDATE users SET enrollment_status = ? WHERE id = ?",
                [EnrollmentStatus.NONE.value, row["user_id"]],
            )
        removed = await self._delete_by_id(id)
        logger.info(
            "Removed church %s (%d admin assignment(s) released)", id, len(assigned)
        )
        return ChurchRemoval(removed=removed, removed_assignments=len(assigned))
