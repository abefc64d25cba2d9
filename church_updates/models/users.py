"""User accounts, church admin assignments and password-reset bookkeeping.

Passwords arrive already hashed; this store never sees plain text.
Password-reset timestamps are epoch milliseconds.
"""

from __future__ import annotations

import logging
import time
from typing import Any, List, Optional, Union

from ..errors import AlreadyExistsError, ModelError, is_unique_violation
from .base import Store, params_of
from .patches import UserPatch
from .records import ChurchAdminAssignment, EnrollmentStatus, User, UserRole, row_to_record

logger = logging.getLogger(__name__)

PUBLIC_COLUMNS = "id, email, name, role, enrollment_status, avatar, created_at, updated_at"

# One reset request per 12 minutes (five per hour).
PASSWORD_RESET_INTERVAL_MS = 12 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


class UserStore(Store[User]):
    record = User

    async def list_all(self) -> List[User]:
        return await self._many(f"SELECT {PUBLIC_COLUMNS} FROM users ORDER BY id")

    async def get(self, id: int) -> Optional[User]:
        """Public view of one user, without the password hash."""

        return await self._one(f"SELECT {PUBLIC_COLUMNS} FROM users WHERE id = ?", [id])

    async def get_with_password(self, id: int) -> Optional[User]:
        return await self._one(
            f"SELECT {PUBLIC_COLUMNS}, password_hash FROM users WHERE id = ?", [id]
        )

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self._one("SELECT * FROM users WHERE email = ? LIMIT 1", [email])

    async def create(
        self,
        email: str,
        password_hash: str,
        name: Optional[str] = None,
        role: Union[UserRole, str] = UserRole.CHURCH_ADMIN,
    ) -> User:
        """Create an account.

        Raises:
            AlreadyExistsError: The email is already registered.
        """

        try:
            result = await self.db.insert(
                "INSERT INTO users (email, password_hash, name, role) VALUES (?, ?, ?, ?)",
                params_of(email, password_hash, name, role),
            )
        except Exception as exc:
            if is_unique_violation(exc):
                raise AlreadyExistsError(f"User with email {email!r} already exists.") from exc
            raise
        created = await self.get(result.last_id)
        if created is None:
            raise ModelError(f"Inserted user {result.last_id} not found.")
        return created

    async def update(self, id: int, patch: UserPatch) -> Optional[User]:
        await self._apply_patch(id, patch)
        return await self.get(id)

    async def remove(self, id: int) -> bool:
        return await self._delete_by_id(id)

    async def church_assignments(self, user_id: int) -> List[ChurchAdminAssignment]:
        rows = await self.db.all(
            """
            SELECT ca.*, c.name AS church_name
            FROM church_admin_assignments ca
            JOIN churches c ON ca.church_id = c.id
            WHERE ca.user_id = ?
            ORDER BY ca.id
            """,
            [user_id],
        )
        return [row_to_record(ChurchAdminAssignment, row) for row in rows]

    async def assign_to_church(
        self,
        user_id: int,
        church_id: int,
        assigned_by: Optional[int] = None,
    ) -> Any:
        """Make a user admin of a church and mark them `assigned`.

        Returns the new assignment id.

        Raises:
            AlreadyExistsError: The user already administers this church.
        """

        try:
            result = await self.db.insert(
                "INSERT INTO church_admin_assignments (user_id, church_id, assigned_by) "
                "VALUES (?, ?, ?)",
                [user_id, church_id, assigned_by],
            )
        except Exception as exc:
            if is_unique_violation(exc):
                raise AlreadyExistsError(
                    f"User {user_id} is already assigned to church {church_id}."
                ) from exc
            raise
        await self.update_enrollment_status(user_id, EnrollmentStatus.ASSIGNED)
        logger.info("Assigned user %s to church %s", user_id, church_id)
        return result.last_id

    async def remove_church_assignment(self, user_id: int, church_id: int) -> bool:
        result = await self.db.run(
            "DELETE FROM church_admin_assignments WHERE user_id = ? AND church_id = ?",
            [user_id, church_id],
        )
        return result.changes > 0

    async def update_enrollment_status(
        self, user_id: int, status: Union[EnrollmentStatus, str]
    ) -> bool:
        result = await self.db.run(
            "UPDATE users SET enrollment_status = ? WHERE id = ?",
            params_of(EnrollmentStatus(status), user_id),
        )
        return result.changes > 0

    async def update_password(self, id: int, password_hash: str) -> bool:
        result = await self.db.run(
            "UPDATE users SET password_hash = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            [password_hash, id],
        )
        return result.changes > 0

    async def set_password_reset_token(
        self,
        email: str,
        token: str,
        expires_at: int,
        *,
        now: Optional[int] = None,
    ) -> bool:
        """Store a reset token and record when it was requested."""

        requested_at = _now_ms() if now is None else now
        result = await self.db.run(
            "UPDATE users SET password_reset_token = ?, password_reset_expires = ?, "
            "password_reset_requested_at = ?, updated_at = CURRENT_TIMESTAMP WHERE email = ?",
            [token, expires_at, requested_at, email],
        )
        return result.changes > 0

    async def get_by_password_reset_token(self, token: str) -> Optional[User]:
        return await self._one(
            "SELECT id, email, name, role, password_reset_token, password_reset_expires "
            "FROM users WHERE password_reset_token = ? LIMIT 1",
            [token],
        )

    async def clear_password_reset_token(self, id: int) -> bool:
        result = await self.db.run(
            "UPDATE users SET password_reset_token = NULL, password_reset_expires = NULL, "
            "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            [id],
        )
        return result.changes > 0

    async def can_request_password_reset(self, email: str, *, now: Optional[int] = None) -> bool:
        """Whether a new reset may be requested for `email`.

        Unknown emails and users with no previous request are allowed.
        """

        row = await self.db.get(
            "SELECT password_reset_requested_at FROM users WHERE email = ? LIMIT 1", [email]
        )
        if row is None or not row["password_reset_requested_at"]:
            return True
        current = _now_ms() if now is None else now
        return int(row["password_reset_requested_at"]) < current - PASSWORD_RESET_INTERVAL_MS
