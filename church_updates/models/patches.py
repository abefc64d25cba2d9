"""Explicit partial-update types, one per mutable record.

A patch lists only the columns callers may change. Primary keys, tenant
keys and timestamps are never patchable, so an UPDATE built from a patch
cannot rewrite them whatever the caller sends.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from ..errors import InvalidPatchError
from .records import Announcement, Church, Donation, Event, User, table_name, to_db_value


class _UnsetType:
    _instance: Optional[_UnsetType] = None

    def __new__(cls) -> _UnsetType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _UnsetType()

P = TypeVar("P", bound="Patch")


class Patch:
    """Base for patch dataclasses; unset fields hold `UNSET`."""

    __record__: ClassVar[Type[Any]]
    __key__: ClassVar[str] = "id"

    def changes(self) -> Dict[str, Any]:
        """Return the set fields in declaration order."""

        return {
            f.name: getattr(self, f.name)
            for f in fields(self)  # type: ignore[arg-type]
            if getattr(self, f.name) is not UNSET
        }

    @classmethod
    def from_mapping(cls: Type[P], data: Mapping[str, Any]) -> P:
        """Build a patch from a loose payload, rejecting anything not patchable."""

        allowed = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        if cls.__key__ in data:
            raise InvalidPatchError(f"{cls.__key__!r} cannot be updated.")
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise InvalidPatchError(
                f"{cls.__name__} does not accept field(s): {', '.join(unknown)}."
            )
        return cls(**dict(data))

    def update_statement(self, key_value: Any) -> Tuple[str, List[Any]]:
        """Build `UPDATE ... SET ... WHERE id = ?` and its parameters.

        Raises:
            InvalidPatchError: No field is set.
        """

        changes = self.changes()
        if not changes:
            raise InvalidPatchError("No valid fields to update.")
        assignments = [f"{name} = ?" for name in changes]
        assignments.append("updated_at = CURRENT_TIMESTAMP")
        sql = (
            f"UPDATE {table_name(self.__record__)} SET {', '.join(assignments)} "
            f"WHERE {self.__key__} = ?"
        )
        return sql, [to_db_value(value) for value in changes.values()] + [key_value]


@dataclass
class ChurchPatch(Patch):
    __record__: ClassVar[Type[Any]] = Church

    name: Any = UNSET
    senior_pastor: Any = UNSET
    senior_pastor_avatar: Any = UNSET
    pastor: Any = UNSET
    pastor_avatar: Any = UNSET
    assistant_pastor: Any = UNSET
    assistant_pastor_avatar: Any = UNSET
    address: Any = UNSET
    city: Any = UNSET
    state: Any = UNSET
    zip: Any = UNSET
    contact_email: Any = UNSET
    contact_phone: Any = UNSET
    website: Any = UNSET
    logo_url: Any = UNSET
    banner_url: Any = UNSET
    description: Any = UNSET


@dataclass
class EventPatch(Patch):
    __record__: ClassVar[Type[Any]] = Event

    title: Any = UNSET
    description: Any = UNSET
    location: Any = UNSET
    start_datetime: Any = UNSET
    end_datetime: Any = UNSET
    image_url: Any = UNSET
    price: Any = UNSET
    contact_email: Any = UNSET
    contact_phone: Any = UNSET
    website: Any = UNSET
    favorites_count: Any = UNSET


@dataclass
class AnnouncementPatch(Patch):
    __record__: ClassVar[Type[Any]] = Announcement

    title: Any = UNSET
    description: Any = UNSET
    image_url: Any = UNSET
    posted_at: Any = UNSET
    type: Any = UNSET
    subcategory: Any = UNSET
    start_time: Any = UNSET
    end_time: Any = UNSET
    recurrence_rule: Any = UNSET
    is_special: Any = UNSET
    day: Any = UNSET


@dataclass
class DonationPatch(Patch):
    __record__: ClassVar[Type[Any]] = Donation

    method: Any = UNSET
    contact_name: Any = UNSET
    contact_info: Any = UNSET
    note: Any = UNSET


@dataclass
class UserPatch(Patch):
    """User fields an admin may change; the password hash is set by the caller."""

    __record__: ClassVar[Type[Any]] = User

    email: Any = UNSET
    name: Any = UNSET
    role: Any = UNSET
    enrollment_status: Any = UNSET
    avatar: Any = UNSET
    password_hash: Any = UNSET
