from __future__ import annotations

import unittest
from datetime import datetime

from church_updates import AlreadyExistsError, DataAccess, InvalidFieldError, InvalidPatchError, Settings
from church_updates.models import (
    Announcement,
    AnnouncementPatch,
    AnnouncementStore,
    Church,
    ChurchPatch,
    ChurchStore,
    Donation,
    DonationPatch,
    DonationStore,
    EnrollmentStatus,
    Event,
    EventPatch,
    EventStore,
    FavoriteStore,
    UserPatch,
    UserRole,
    UserStore,
    apply_schema,
)
from church_updates.models.users import PASSWORD_RESET_INTERVAL_MS


class _StoreTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.db = DataAccess(Settings(database_path=":memory:"))
        await self.db.initialize()
        await apply_schema(self.db)
        self.churches = ChurchStore(self.db)
        self.events = EventStore(self.db)
        self.announcements = AnnouncementStore(self.db)
        self.donations = DonationStore(self.db)
        self.users = UserStore(self.db)
        self.favorites = FavoriteStore(self.db)

    async def asyncTearDown(self) -> None:
        await self.db.aclose()

    async def _church(self, name: str = "Grace Fellowship") -> Church:
        return await self.churches.create(Church(name=name, city="Austin", logo_url="/logo.png"))


class ChurchStoreTests(_StoreTestCase):
    async def test_create_get_update_list(self) -> None:
        church = await self._church()

        self.assertIsNotNone(church.id)
        self.assertEqual(church.city, "Austin")
        self.assertIsInstance(church.created_at, datetime)

        fetched = await self.churches.get(church.id)
        self.assertEqual(fetched.name, "Grace Fellowship")
        self.assertEqual(fetched.follower_count, 0)

        updated = await self.churches.update(church.id, ChurchPatch(city="Waco", website=None))
        self.assertEqual(updated.city, "Waco")
        self.assertIsNone(updated.website)

        await self._church("Hope Chapel")
        self.assertEqual([c.name for c in await self.churches.list_all()], ["Grace Fellowship", "Hope Chapel"])

    async def test_get_missing_church_is_none(self) -> None:
        self.assertIsNone(await self.churches.get(404))

    async def test_empty_patch_is_rejected(self) -> None:
        church = await self._church()

        with self.assertRaises(InvalidPatchError):
            await self.churches.update(church.id, ChurchPatch())

    async def test_remove_releases_assigned_admins(self) -> None:
        church = await self._church()
        admin = await self.users.create("admin@example.com", "hash", "Admin")
        await self.users.assign_to_church(admin.id, church.id)

        removal = await self.churches.remove(church.id)

        self.assertTrue(removal.removed)
        self.assertEqual(removal.removed_assignments, 1)
        self.assertIsNone(await self.churches.get(church.id))
        self.assertEqual((await self.users.get(admin.id)).enrollment_status, EnrollmentStatus.NONE.value)
        self.assertEqual(await self.users.church_assignments(admin.id), [])


class EventStoreTests(_StoreTestCase):
    async def test_create_and_list_with_church_details(self) -> None:
        church = await self._church()
        later = await self.events.create(
            church.id, Event(title="Picnic", start_datetime="2024-07-04T12:00:00Z")
        )
        earlier = await self.events.create(
            church.id, Event(title="Revival", start_datetime=datetime(2024, 6, 1, 18, 0))
        )

        self.assertEqual(later.church_id, church.id)
        self.assertEqual(later.favorites_count, 0)

        listed = await self.events.list_all()
        self.assertEqual([e.title for e in listed], ["Revival", "Picnic"])
        self.assertEqual(listed[0].church_name, "Grace Fellowship")
        self.assertEqual(listed[0].church_logo, "/logo.png")
        self.assertEqual(listed[0].like_count, 0)

        by_church = await self.events.list_by_church(church.id)
        self.assertEqual([e.id for e in by_church], [earlier.id, later.id])

    async def test_aware_datetimes_are_stored_as_naive_utc(self) -> None:
        church = await self._church()
        created = await self.events.create(
            church.id, Event(title="Vigil", start_datetime="2024-07-04T19:00:00-05:00")
        )

        fetched = await self.events.get(created.id)
        self.assertEqual(fetched.start_datetime, datetime(2024, 7, 5, 0, 0))
        self.assertIsNone(fetched.start_datetime.tzinfo)

        row = await self.db.get("SELECT start_datetime FROM events WHERE id = ? LIMIT 1", [created.id])
        self.assertEqual(row["start_datetime"], "2024-07-05 00:00:00")

    async def test_invalid_datetime_is_rejected(self) -> None:
        church = await self._church()

        with self.assertRaises(InvalidFieldError) as ctx:
            await self.events.create(church.id, Event(title="Bad", end_datetime="tomorrow-ish"))
        self.assertEqual(ctx.exception.field, "end_datetime")

        event = await self.events.create(church.id, Event(title="Good"))
        with self.assertRaises(InvalidFieldError):
            await self.events.update(event.id, EventPatch(start_datetime="13/45/2024"))

    async def test_update_get_and_remove(self) -> None:
        church = await self._church()
        event = await self.events.create(church.id, Event(title="Picnic"))

        updated = await self.events.update(
            event.id, EventPatch(title="Parish Picnic", start_datetime="2024-07-04T12:00:00")
        )
        self.assertEqual(updated.title, "Parish Picnic")
        self.assertEqual(updated.start_datetime, datetime(2024, 7, 4, 12, 0))

        user = await self.users.create("fan@example.com", "hash", role=UserRole.USER)
        await self.favorites.like_event(user.id, event.id)
        self.assertEqual((await self.events.get(event.id)).like_count, 1)

        self.assertTrue(await self.events.remove(event.id))
        self.assertFalse(await self.events.remove(event.id))
        self.assertIsNone(await self.events.get(event.id))


class AnnouncementStoreTests(_StoreTestCase):
    async def test_weekly_schedule_ordering(self) -> None:
        church = await self._church()
        create = self.announcements.create
        await create(church.id, Announcement(title="No day", type="weekly"))
        await create(church.id, Announcement(title="Tuesday late", type="weekly", day="2", start_time="19:00"))
        await create(church.id, Announcement(title="Sunday", type="weekly", day="0", start_time="10:00"))
        await create(
            church.id,
            Announcement(title="Recurring", type="event", day="2", start_time="07:00", recurrence_rule="FREQ=WEEKLY"),
        )
        await create(
            church.id,
            Announcement(title="Special recurring", type="event", is_special=True, recurrence_rule="FREQ=WEEKLY"),
        )
        await create(church.id, Announcement(title="One-off", type="event"))

        weekly = await self.announcements.list_weekly_by_church(church.id)

        self.assertEqual([a.title for a in weekly], ["Sunday", "Recurring", "Tuesday late", "No day"])

    async def test_special_type_and_church_listings(self) -> None:
        grace = await self._church()
        hope = await self._church("Hope Chapel")
        special = await self.announcements.create(
            grace.id, Announcement(title="Easter", type="special", is_special=True, posted_at="2024-03-31T08:00:00")
        )
        await self.announcements.create(hope.id, Announcement(title="Bible study", type="weekly"))

        self.assertEqual([a.id for a in await self.announcements.list_special()], [special.id])
        self.assertIs(special.is_special, True)
        self.assertEqual(special.church_name, "Grace Fellowship")
        self.assertEqual([a.title for a in await self.announcements.list_by_type("weekly")], ["Bible study"])
        self.assertEqual([a.title for a in await self.announcements.list_by_church(hope.id)], ["Bible study"])
        self.assertEqual(len(await self.announcements.list_all()), 2)

    async def test_update_and_remove(self) -> None:
        church = await self._church()
        item = await self.announcements.create(church.id, Announcement(title="Choir", type="weekly"))

        updated = await self.announcements.update(item.id, AnnouncementPatch(title="Choir practice", day="3"))

        self.assertEqual(updated.title, "Choir practice")
        self.assertEqual(updated.day, "3")
        self.assertEqual(updated.church_logo, "/logo.png")
        self.assertTrue(await self.announcements.remove(item.id))
        self.assertIsNone(await self.announcements.get(item.id))


class DonationStoreTests(_StoreTestCase):
    async def test_crud_ordered_by_method(self) -> None:
        church = await self._church()
        zelle = await self.donations.create(church.id, Donation(method="Zelle", contact_info="give@grace.org"))
        await self.donations.create(church.id, Donation(method="Check", note="Mail to office"))

        self.assertEqual([d.method for d in await self.donations.list_by_church(church.id)], ["Check", "Zelle"])

        updated = await self.donations.update(zelle.id, DonationPatch(note="Memo: tithe"))
        self.assertEqual(updated.note, "Memo: tithe")
        self.assertEqual(updated.contact_info, "give@grace.org")

        self.assertTrue(await self.donations.remove(zelle.id))
        self.assertEqual(len(await self.donations.list_by_church(church.id)), 1)


class UserStoreTests(_StoreTestCase):
    async def test_create_hides_password_hash(self) -> None:
        user = await self.users.create("pastor@example.com", "bcrypt-hash", "Pastor")

        self.assertEqual(user.role, UserRole.CHURCH_ADMIN.value)
        self.assertEqual(user.enrollment_status, EnrollmentStatus.NONE.value)
        self.assertIsNone(user.password_hash)
        self.assertEqual((await self.users.get_with_password(user.id)).password_hash, "bcrypt-hash")
        self.assertEqual((await self.users.get_by_email("pastor@example.com")).id, user.id)
        self.assertIsNone(await self.users.get_by_email("nobody@example.com"))

    async def test_duplicate_email_raises_already_exists(self) -> None:
        await self.users.create("dup@example.com", "hash")

        with self.assertLogs("church_updates.core.data_access", level="ERROR"):
            with self.assertRaises(AlreadyExistsError):
                await self.users.create("dup@example.com", "other")

    async def test_update_list_and_remove(self) -> None:
        first = await self.users.create("a@example.com", "hash", "A")
        second = await self.users.create("b@example.com", "hash", "B", role="user")

        updated = await self.users.update(first.id, UserPatch(name="Alice", role=UserRole.SUPERUSER))

        self.assertEqual(updated.name, "Alice")
        self.assertEqual(updated.role, "superuser")
        self.assertEqual([u.email for u in await self.users.list_all()], ["a@example.com", "b@example.com"])
        self.assertTrue(await self.users.remove(second.id))
        self.assertIsNone(await self.users.get(second.id))

    async def test_assignments(self) -> None:
        church = await self._church()
        superuser = await self.users.create("root@example.com", "hash", role=UserRole.SUPERUSER)
        admin = await self.users.create("admin@example.com", "hash")

        assignment_id = await self.users.assign_to_church(admin.id, church.id, assigned_by=superuser.id)

        assignments = await self.users.church_assignments(admin.id)
        self.assertEqual([a.id for a in assignments], [assignment_id])
        self.assertEqual(assignments[0].church_name, "Grace Fellowship")
        self.assertEqual(assignments[0].assigned_by, superuser.id)
        self.assertEqual((await self.users.get(admin.id)).enrollment_status, "assigned")

        with self.assertLogs("church_updates.core.data_access", level="ERROR"):
            with self.assertRaises(AlreadyExistsError):
                await self.users.assign_to_church(admin.id, church.id)

        self.assertTrue(await self.users.remove_church_assignment(admin.id, church.id))
        self.assertFalse(await self.users.remove_church_assignment(admin.id, church.id))

    async def test_enrollment_status_is_validated(self) -> None:
        user = await self.users.create("u@example.com", "hash")

        self.assertTrue(await self.users.update_enrollment_status(user.id, "pending"))
        self.assertEqual((await self.users.get(user.id)).enrollment_status, "pending")
        with self.assertRaises(ValueError):
            await self.users.update_enrollment_status(user.id, "banned")

    async def test_password_reset_flow(self) -> None:
        user = await self.users.create("reset@example.com", "old-hash")
        now = 1_700_000_000_000

        self.assertTrue(await self.users.can_request_password_reset("reset@example.com", now=now))
        self.assertTrue(await self.users.can_request_password_reset("ghost@example.com", now=now))

        stored = await self.users.set_password_reset_token(
            "reset@example.com", "tok-123", now + 3_600_000, now=now
        )
        self.assertTrue(stored)
        self.assertFalse(await self.users.can_request_password_reset("reset@example.com", now=now + 60_000))
        self.assertTrue(
            await self.users.can_request_password_reset(
                "reset@example.com", now=now + PASSWORD_RESET_INTERVAL_MS + 1
            )
        )

        holder = await self.users.get_by_password_reset_token("tok-123")
        self.assertEqual(holder.id, user.id)
        self.assertEqual(holder.password_reset_expires, now + 3_600_000)

        self.assertTrue(await self.users.update_password(user.id, "new-hash"))
        self.assertTrue(await self.users.clear_password_reset_token(user.id))
        self.assertIsNone(await self.users.get_by_password_reset_token("tok-123"))
        self.assertEqual((await self.users.get_with_password(user.id)).password_hash, "new-hash")


class FavoriteStoreTests(_StoreTestCase):
    async def test_follow_and_unfollow(self) -> None:
        church = await self._church()
        user = await self.users.create("fan@example.com", "hash", role=UserRole.USER)

        follow_id = await self.favorites.follow_church(user.id, church.id)

        self.assertIsNotNone(follow_id)
        self.assertTrue(await self.favorites.is_following_church(user.id, church.id))
        self.assertEqual((await self.churches.get(church.id)).follower_count, 1)
        followed = await self.favorites.followed_churches(user.id)
        self.assertEqual([c.id for c in followed], [church.id])
        self.assertIsInstance(followed[0].followed_at, datetime)

        with self.assertLogs("church_updates.core.data_access", level="ERROR"):
            with self.assertRaises(AlreadyExistsError):
                await self.favorites.follow_church(user.id, church.id)

        self.assertTrue(await self.favorites.unfollow_church(user.id, church.id))
        self.assertFalse(await self.favorites.unfollow_church(user.id, church.id))
        self.assertFalse(await self.favorites.is_following_church(user.id, church.id))

    async def test_like_and_summary(self) -> None:
        church = await self._church()
        user = await self.users.create("fan@example.com", "hash", role=UserRole.USER)
        first = await self.events.create(church.id, Event(title="Picnic"))
        second = await self.events.create(church.id, Event(title="Revival"))

        await self.favorites.like_event(user.id, first.id)
        await self.favorites.like_event(user.id, second.id)
        await self.favorites.follow_church(user.id, church.id)

        with self.assertLogs("church_updates.core.data_access", level="ERROR"):
            with self.assertRaises(AlreadyExistsError):
                await self.favorites.like_event(user.id, first.id)

        liked = await self.favorites.liked_events(user.id)
        self.assertEqual([e.title for e in liked], ["Revival", "Picnic"])
        self.assertEqual(liked[0].church_name, "Grace Fellowship")
        self.assertTrue(await self.favorites.is_liking_event(user.id, first.id))

        summary = await self.favorites.summary(user.id)
        self.assertEqual((summary.total_follows, summary.total_likes), (1, 2))
        self.assertEqual(summary.to_dict()["counts"], {"churches": 1, "events": 2})

        self.assertTrue(await self.favorites.unlike_event(user.id, first.id))
        self.assertFalse(await self.favorites.is_liking_event(user.id, first.id))

    async def test_deleting_user_cascades_favorites(self) -> None:
        church = await self._church()
        user = await self.users.create("fan@example.com", "hash", role=UserRole.USER)
        await self.favorites.follow_church(user.id, church.id)

        await self.users.remove(user.id)

        self.assertEqual((await self.churches.get(church.id)).follower_count, 0)


if __name__ == "__main__":
    unittest.main()
