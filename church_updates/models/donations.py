"""Donation methods published by a church."""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from .base import Store
from .patches import DonationPatch
from .records import Donation


class DonationStore(Store[Donation]):
    record = Donation

    async def list_by_church(self, church_id: int) -> List[Donation]:
        return await self._many(
            "SELECT * FROM donations WHERE church_id = ? ORDER BY method", [church_id]
        )

    async def get(self, id: int) -> Optional[Donation]:
        return await self._get_plain(id)

    async def create(self, church_id: int, donation: Donation) -> Donation:
        result = await self._insert_record(replace(donation, church_id=church_id))
        return await self._reload_created(result)

    async def update(self, id: int, patch: DonationPatch) -> Optional[Donation]:
        await self._apply_patch(id, patch)
        return await self._get_plain(id)

    async def remove(self, id: int) -> bool:
        return await self._delete_by_id(id)
