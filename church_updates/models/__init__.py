"""Typed records, patches, schema bootstrap and entity stores."""

from .announcements import AnnouncementStore
from .base import Store
from .churches import ChurchRemoval, ChurchStore
from .donations import DonationStore
from .events import EventStore
from .favorites import FavoritesSummary, FavoriteStore
from .patches import (
    UNSET,
    AnnouncementPatch,
    ChurchPatch,
    DonationPatch,
    EventPatch,
    Patch,
    UserPatch,
)
from .records import (
    ALL_RECORDS,
    Announcement,
    Church,
    ChurchAdminAssignment,
    ChurchFollow,
    Donation,
    EnrollmentStatus,
    Event,
    EventLike,
    User,
    UserRole,
    row_to_record,
    to_dict,
)
from .schema import apply_schema, create_schema_sql
from .users import UserStore

__all__ = [
    "ALL_RECORDS",
    "Announcement",
    "AnnouncementPatch",
    "AnnouncementStore",
    "Church",
    "ChurchAdminAssignment",
    "ChurchFollow",
    "ChurchPatch",
    "ChurchRemoval",
    "ChurchStore",
    "Donation",
    "DonationPatch",
    "DonationStore",
    "EnrollmentStatus",
    "Event",
    "EventLike",
    "EventPatch",
    "EventStore",
    "FavoriteStore",
    "FavoritesSummary",
    "Patch",
    "Store",
    "UNSET",
    "User",
    "UserPatch",
    "UserRole",
    "UserStore",
    "apply_schema",
    "create_schema_sql",
    "row_to_record",
    "to_dict",
]
