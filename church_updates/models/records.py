"""Typed row records, one dataclass per table, and row-to-record mapping.

Field metadata drives schema generation and writes:

- `pk` / `auto`: primary key, auto-generated on insert.
- `fk`: `(Record, column)` reference; `on_delete` sets the FK action.
- `unique`, `index`: single-column unique constraint / secondary index.
- `default_sql`: SQL default expression, column omitted from inserts when unset.
- `sql_type`: explicit column type overriding annotation inference.
- `computed`: joined or aggregated column, never written nor part of the table.
"""

from __future__ import annotations

from dataclasses import Field, dataclass, field, fields, is_dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Protocol, Type, TypeVar, get_args, get_origin, get_type_hints

from ..core.types import RowMapping
from ..errors import InvalidFieldError


class RecordModel(Protocol):
    """Protocol for table record dataclasses."""

    __dataclass_fields__: ClassVar[dict[str, Any]]
    __table__: ClassVar[str]


T = TypeVar("T", bound=RecordModel)


class UserRole(str, Enum):
    SUPERUSER = "superuser"
    CHURCH_ADMIN = "church_admin"
    USER = "user"


class EnrollmentStatus(str, Enum):
    NONE = "none"
    PENDING = "pending"
    ASSIGNED = "assigned"


def _created_at() -> Any:
    return field(default=None, metadata={"default_sql": "CURRENT_TIMESTAMP"})


def _computed() -> Any:
    return field(default=None, metadata={"computed": True})


@dataclass
class Church:
    __table__: ClassVar[str] = "churches"

    id: Optional[int] = field(default=None, metadata={"pk": True, "auto": True})
    name: str = ""
    senior_pastor: Optional[str] = None
    senior_pastor_avatar: Optional[str] = None
    pastor: Optional[str] = None
    pastor_avatar: Optional[str] = None
    assistant_pastor: Optional[str] = None
    assistant_pastor_avatar: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = _created_at()
    updated_at: Optional[datetime] = _created_at()
    follower_count: Optional[int] = _computed()
    followed_at: Optional[datetime] = _computed()


@dataclass
class User:
    __table__: ClassVar[str] = "users"

    id: Optional[int] = field(default=None, metadata={"pk": True, "auto": True})
    email: str = field(default="", metadata={"unique": True})
    password_hash: Optional[str] = None
    name: Optional[str] = None
    role: str = field(default=UserRole.CHURCH_ADMIN.value, metadata={"default_sql": "'church_admin'"})
    enrollment_status: str = field(
        default=EnrollmentStatus.NONE.value, metadata={"default_sql": "'none'"}
    )
    avatar: Optional[str] = None
    password_reset_token: Optional[str] = field(default=None, metadata={"index": True})
    password_reset_expires: Optional[int] = field(default=None, metadata={"sql_type": "BIGINT"})
    password_reset_requested_at: Optional[int] = field(
        default=None, metadata={"sql_type": "BIGINT"}
    )
    created_at: Optional[datetime] = _created_at()
    updated_at: Optional[datetime] = _created_at()


@dataclass
class ChurchAdminAssignment:
    __table__: ClassVar[str] = "church_admin_assignments"
    __unique_together__: ClassVar[tuple] = (("user_id", "church_id"),)

    id: Optional[int] = field(default=None, metadata={"pk": True, "auto": True})
    user_id: int = field(default=0, metadata={"fk": (User, "id"), "on_delete": "CASCADE"})
    church_id: int = field(default=0, metadata={"fk": (Church, "id"), "on_delete": "CASCADE"})
    assigned_by: Optional[int] = field(default=None, metadata={"fk": (User, "id")})
    created_at: Optional[datetime] = _created_at()
    church_name: Optional[str] = _computed()


@dataclass
class Event:
    __table__: ClassVar[str] = "events"

    id: Optional[int] = field(default=None, metadata={"pk": True, "auto": True})
    church_id: int = field(
        default=0, metadata={"fk": (Church, "id"), "on_delete": "CASCADE", "index": True}
    )
    title: str = ""
    description: Optional[str] = None
    location: Optional[str] = None
    start_datetime: Optional[datetime] = None
    end_datetime: Optional[datetime] = None
    image_url: Optional[str] = None
    price: Optional[float] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    website: Optional[str] = None
    favorites_count: int = field(default=0, metadata={"default_sql": "0"})
    created_at: Optional[datetime] = _created_at()
    updated_at: Optional[datetime] = _created_at()
    church_name: Optional[str] = _computed()
    church_logo: Optional[str] = _computed()
    like_count: Optional[int] = _computed()
    liked_at: Optional[datetime] = _computed()


@dataclass
class Announcement:
    __table__: ClassVar[str] = "announcements"

    id: Optional[int] = field(default=None, metadata={"pk": True, "auto": True})
    church_id: int = field(
        default=0, metadata={"fk": (Church, "id"), "on_delete": "CASCADE", "index": True}
    )
    title: str = ""
    description: Optional[str] = None
    image_url: Optional[str] = None
    posted_at: Optional[datetime] = None
    type: Optional[str] = None
    subcategory: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    recurrence_rule: Optional[str] = None
    is_special: bool = field(default=False, metadata={"default_sql": "FALSE"})
    day: Optional[str] = None
    created_at: Optional[datetime] = _created_at()
    updated_at: Optional[datetime] = _created_at()
    church_name: Optional[str] = _computed()
    church_logo: Optional[str] = _computed()


@dataclass
class Donation:
    __table__: ClassVar[str] = "donations"

    id: Optional[int] = field(default=None, metadata={"pk": True, "auto": True})
    church_id: int = field(
        default=0, metadata={"fk": (Church, "id"), "on_delete": "CASCADE", "index": True}
    )
    method: str = ""
    contact_name: Optional[str] = None
    contact_info: Optional[str] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = _created_at()
    updated_at: Optional[datetime] = _created_at()


@dataclass
class ChurchFollow:
    __table__: ClassVar[str] = "user_church_follows"
    __unique_together__: ClassVar[tuple] = (("user_id", "church_id"),)

    id: Optional[int] = field(default=None, metadata={"pk": True, "auto": True})
    user_id: int = field(
        default=0, metadata={"fk": (User, "id"), "on_delete": "CASCADE", "index": True}
    )
    church_id: int = field(
        default=0, metadata={"fk": (Church, "id"), "on_delete": "CASCADE", "index": True}
    )
    created_at: Optional[datetime] = _created_at()


@dataclass
class EventLike:
    __table__: ClassVar[str] = "user_event_likes"
    __unique_together__: ClassVar[tuple] = (("user_id", "event_id"),)

    id: Optional[int] = field(default=None, metadata={"pk": True, "auto": True})
    user_id: int = field(
        default=0, metadata={"fk": (User, "id"), "on_delete": "CASCADE", "index": True}
    )
    event_id: int = field(
        default=0, metadata={"fk": (Event, "id"), "on_delete": "CASCADE", "index": True}
    )
    created_at: Optional[datetime] = _created_at()


# Creation order respects foreign keys.
ALL_RECORDS: tuple[Type[Any], ...] = (
    Church,
    User,
    ChurchAdminAssignment,
    Event,
    Announcement,
    Donation,
    ChurchFollow,
    EventLike,
)


def require_record_model(cls: Type[Any]) -> None:
    """Validate that a class is a dataclass record."""

    if not is_dataclass(cls):
        raise TypeError(f"{cls.__name__} must be a dataclass.")


def table_name(model_or_cls: Any) -> str:
    """Resolve table name from record class or instance.

    Uses `__table__` when present, otherwise the lowercased class name.
    """

    cls = model_or_cls if isinstance(model_or_cls, type) else type(model_or_cls)
    name = getattr(cls, "__table__", None)
    return name if isinstance(name, str) and name else cls.__name__.lower()


def model_fields(cls: Type[Any]) -> List[Field[Any]]:
    """Return dataclass fields for a record type."""

    require_record_model(cls)
    return list(fields(cls))


def column_fields(cls: Type[Any]) -> List[Field[Any]]:
    """Return fields stored as table columns (computed fields excluded)."""

    return [f for f in model_fields(cls) if not f.metadata.get("computed")]


def writable_columns(record: Any) -> List[str]:
    """Columns an INSERT should name for this record.

    Auto primary keys and unset SQL-defaulted columns are left to the database.
    """

    names = []
    for f in column_fields(type(record)):
        if f.metadata.get("auto"):
            continue
        if "default_sql" in f.metadata and getattr(record, f.name) is None:
            continue
        names.append(f.name)
    return names


def column_type(cls: Type[Any], name: str) -> Any:
    """Resolved annotation for one field, with `Optional[...]` unwrapped."""

    hints = get_type_hints(cls)
    return unwrap_optional(hints[name])


def unwrap_optional(annotation: Any) -> Any:
    """Extract wrapped type from `Optional[T]` style annotations."""

    origin = get_origin(annotation)
    if origin is None:
        return annotation

    args = [arg for arg in get_args(annotation) if arg is not type(None)]
    if len(args) == 1:
        return args[0]
    return annotation


def parse_datetime(value: Any, *, field_name: str = "value") -> Optional[datetime]:
    """Parse ISO-8601 text (a trailing `Z` allowed) or pass a datetime through."""

    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidFieldError(field_name, f"invalid datetime {value!r}") from exc
    raise InvalidFieldError(field_name, f"invalid datetime {value!r}")


def to_db_value(value: Any) -> Any:
    """Convert a Python value to a bind value both engines accept.

    Aware datetimes are shifted to UTC and bound without an offset.
    """

    if isinstance(value, datetime):
        # TIMESTAMP columns hold naive UTC on both engines.
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value.isoformat(sep=" ")
    if isinstance(value, Enum):
        return value.value
    return value


def _coerce(annotation: Any, value: Any, name: str) -> Any:
    if value is None:
        return None
    if annotation is bool:
        return bool(value)
    if annotation is datetime:
        return parse_datetime(value, field_name=name)
    if annotation is int and isinstance(value, (Decimal, str)):
        return int(value)
    if annotation is float and isinstance(value, (Decimal, int, str)):
        return float(value)
    return value


def row_to_record(cls: Type[T], row: RowMapping) -> T:
    """Map one engine row to a record, normalizing engine-specific typing.

    Columns the record does not declare are ignored.
    """

    hints = get_type_hints(cls)
    values: Dict[str, Any] = {}
    for f in model_fields(cls):
        if f.name in row:
            values[f.name] = _coerce(unwrap_optional(hints[f.name]), row[f.name], f.name)
    return cls(**values)


def to_dict(record: Any, *, include_computed: bool = True) -> Dict[str, Any]:
    """Serialize a record with datetimes as ISO-8601 strings."""

    out: Dict[str, Any] = {}
    for f in model_fields(type(record)):
        if f.metadata.get("computed") and not include_computed:
            continue
        value = getattr(record, f.name)
        out[f.name] = value.isoformat() if isinstance(value, datetime) else value
    return out
