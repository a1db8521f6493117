# SPDX-License-Identifier: MIT

import asyncio

import pendulum
import pytest

from conftest import FakeNotificationCenter
from geonotes.application import GeoNotes
from geonotes.model.reminder import PermissionAnswer, PermissionState, ReminderKind
from geonotes.service.location import StaticLocationProvider
from geonotes.service.reminder import (
    MAX_NOTIFICATION_ID,
    RESERVED_NOTIFICATION_IDS,
    WELCOME_NOTIFICATION_ID,
    ReminderScheduler,
    excerpt,
    notification_id_for,
)


def make_note(id, text="Lunch spot", lat=10.823, lng=106.630):
    return {
        "id": id,
        "text": text,
        "lat": lat,
        "lng": lng,
        "image_url": None,
        "timestamp": pendulum.now("UTC"),
    }


NOTE_ID = "3f2a9c1e-0000-4000-8000-000000000001"
OTHER_NOTE_ID = "3f2a9c1e-0000-4000-8000-000000000002"


def test_notification_ids_are_stable_and_in_range():
    first = notification_id_for(NOTE_ID, ReminderKind.TIME_DELAYED)
    again = notification_id_for(NOTE_ID, ReminderKind.TIME_DELAYED)

    assert first == again
    assert RESERVED_NOTIFICATION_IDS <= first < MAX_NOTIFICATION_ID


def test_notification_ids_differ_by_kind_and_note():
    ids = {
        notification_id_for(NOTE_ID, ReminderKind.TIME_DELAYED),
        notification_id_for(NOTE_ID, ReminderKind.PROXIMITY),
        notification_id_for(OTHER_NOTE_ID, ReminderKind.TIME_DELAYED),
    }
    assert len(ids) == 3


def test_notification_ids_do_not_collide_for_shared_uuid_prefixes():
    # Ids sharing their first eight hex digits must still spread out
    note_ids = [f"3f2a9c1e-{i:04x}-4000-8000-000000000000" for i in range(500)]
    ids = {notification_id_for(id, ReminderKind.TIME_DELAYED) for id in note_ids}
    assert len(ids) == len(note_ids)


def test_excerpt_truncates_long_text():
    assert excerpt("short") == "short"
    assert excerpt("x" * 50) == "x" * 50
    assert excerpt("x" * 51) == "x" * 50 + "..."


def test_schedule_while_denied_returns_false_and_schedules_nothing():
    center = FakeNotificationCenter(permission=PermissionAnswer.DENIED)
    scheduler = ReminderScheduler(center)

    async def scenario():
        before = await center.list_pending()
        scheduled = await scheduler.schedule_time_reminder(make_note("a"), 10)
        after = await center.list_pending()
        return before, scheduled, after

    before, scheduled, after = asyncio.run(scenario())
    assert scheduled is False
    assert before == after == []
    assert scheduler.permission == PermissionState.DENIED
    assert center.request_count == 0


def test_schedule_while_unrequested_does_not_prompt():
    center = FakeNotificationCenter(permission=PermissionAnswer.UNSET)
    scheduler = ReminderScheduler(center)

    scheduled = asyncio.run(scheduler.schedule_time_reminder(make_note("a")))

    assert scheduled is False
    assert center.request_count == 0
    assert scheduler.permission == PermissionState.UNREQUESTED


def test_schedule_time_reminder(granted_center, clock):
    scheduler = ReminderScheduler(granted_center, clock=clock)
    note = make_note("a", text="y" * 80)

    scheduled = asyncio.run(scheduler.schedule_time_reminder(note, 30))

    id = notification_id_for("a", ReminderKind.TIME_DELAYED)
    assert scheduled is True
    assert list(granted_center.pending) == [id]
    pending = granted_center.pending[id]
    assert pending["at"] == clock.now.add(minutes=30)
    assert pending["body"] == f'Remember your note: "{"y" * 50}..."'
    assert pending["metadata"] == {"noteId": "a", "lat": 10.823, "lng": 106.630}


def test_schedule_uses_default_delay(granted_center, clock):
    scheduler = ReminderScheduler(granted_center, clock=clock, default_delay_minutes=60)

    asyncio.run(scheduler.schedule_time_reminder(make_note("a")))

    (pending,) = granted_center.pending.values()
    assert pending["at"] == clock.now.add(minutes=60)


def test_cancel_for_note_leaves_the_other_reminder(granted_center):
    scheduler = ReminderScheduler(granted_center)

    async def scenario():
        await scheduler.schedule_time_reminder(make_note("a"), 10)
        await scheduler.schedule_time_reminder(make_note("b"), 10)
        await scheduler.cancel_for_note("a")
        await scheduler.cancel_for_note("a")
        await scheduler.cancel_for_note("unknown")
        return await granted_center.list_pending()

    pending = asyncio.run(scenario())
    assert pending == [notification_id_for("b", ReminderKind.TIME_DELAYED)]


def test_cancel_all_is_idempotent(granted_center):
    scheduler = ReminderScheduler(granted_center)

    async def scenario():
        await scheduler.cancel_all()
        await scheduler.schedule_time_reminder(make_note("a"), 10)
        await scheduler.schedule_welcome_reminder()
        await scheduler.cancel_all()
        await scheduler.cancel_all()
        return await granted_center.list_pending()

    assert asyncio.run(scenario()) == []


def test_welcome_reminder_uses_fixed_id(granted_center, clock):
    scheduler = ReminderScheduler(granted_center, clock=clock, welcome_delay_seconds=2)

    assert asyncio.run(scheduler.schedule_welcome_reminder()) is True
    assert granted_center.pending[WELCOME_NOTIFICATION_ID]["at"] == clock.now.add(
        seconds=2
    )


def test_proximity_reminder_announces_first_match_only(granted_center):
    scheduler = ReminderScheduler(granted_center)
    notes = [
        make_note("far", lat=0, lng=0),
        make_note("near-1", text="first nearby"),
        make_note("near-2", text="second nearby", lat=10.8231),
    ]

    scheduled = asyncio.run(
        scheduler.schedule_proximity_reminder(10.823, 106.630, notes)
    )

    assert scheduled is True
    assert list(granted_center.pending) == [
        notification_id_for("near-1", ReminderKind.PROXIMITY)
    ]
    (pending,) = granted_center.pending.values()
    assert pending["body"] == 'Remember: "first nearby"'


def test_proximity_reminder_respects_radius(granted_center):
    scheduler = ReminderScheduler(granted_center, proximity_radius_km=0.1)
    # Roughly 150 m north of the user
    notes = [make_note("a", lat=10.82435)]

    scheduled = asyncio.run(
        scheduler.schedule_proximity_reminder(10.823, 106.630, notes)
    )

    assert scheduled is False
    assert granted_center.pending == {}


def test_proximity_reminder_without_location_is_skipped(granted_center):
    scheduler = ReminderScheduler(granted_center)

    scheduled = asyncio.run(
        scheduler.schedule_proximity_reminder(None, None, [make_note("a")])
    )

    assert scheduled is False
    assert granted_center.pending == {}


def test_request_permission_transitions():
    center = FakeNotificationCenter(request_answer=PermissionAnswer.DENIED)
    scheduler = ReminderScheduler(center)

    async def scenario():
        assert await scheduler.check_permission() == PermissionState.UNREQUESTED
        assert await scheduler.request_permission() == PermissionState.DENIED
        center.request_answer = PermissionAnswer.GRANTED
        assert await scheduler.request_permission() == PermissionState.GRANTED
        assert await scheduler.request_permission() == PermissionState.GRANTED

    asyncio.run(scenario())
    assert center.request_count == 2


def test_concurrent_requests_share_one_prompt():
    center = FakeNotificationCenter()
    scheduler = ReminderScheduler(center)

    async def scenario():
        return await asyncio.gather(
            scheduler.request_permission(), scheduler.request_permission()
        )

    assert asyncio.run(scenario()) == [PermissionState.GRANTED] * 2
    assert center.request_count == 1


def test_abandoned_request_still_records_the_outcome():
    center = FakeNotificationCenter()
    scheduler = ReminderScheduler(center)

    async def scenario():
        center.release = asyncio.Event()
        caller = asyncio.create_task(scheduler.request_permission())
        await asyncio.sleep(0)
        assert scheduler.permission == PermissionState.REQUESTING

        caller.cancel()
        with pytest.raises(asyncio.CancelledError):
            await caller

        center.release.set()
        for _ in range(10):
            await asyncio.sleep(0)

    asyncio.run(scenario())
    assert scheduler.permission == PermissionState.GRANTED
    assert center.request_count == 1


def test_disable_cancels_and_keeps_permission(granted_center):
    scheduler = ReminderScheduler(granted_center)

    async def scenario():
        await scheduler.schedule_time_reminder(make_note("a"), 10)
        await scheduler.disable()
        disabled_attempt = await scheduler.schedule_time_reminder(make_note("b"), 10)
        pending_while_disabled = await granted_center.list_pending()
        enabled = await scheduler.enable()
        return disabled_attempt, pending_while_disabled, enabled

    disabled_attempt, pending_while_disabled, enabled = asyncio.run(scenario())
    assert disabled_attempt is False
    assert pending_while_disabled == []
    assert enabled is True
    assert scheduler.permission == PermissionState.GRANTED
    assert granted_center.request_count == 0


def test_enable_prompts_when_not_granted():
    center = FakeNotificationCenter()
    scheduler = ReminderScheduler(center, enabled=False)

    assert asyncio.run(scheduler.enable()) is True
    assert center.request_count == 1
    assert scheduler.enabled is True


def test_delivery_failure_returns_false(granted_center):
    granted_center.fail = True
    scheduler = ReminderScheduler(granted_center)

    assert asyncio.run(scheduler.schedule_time_reminder(make_note("a"))) is False
    assert asyncio.run(scheduler.reminders()) == []


def test_reminders_are_marked_delivered_once_due(granted_center, clock):
    scheduler = ReminderScheduler(granted_center, clock=clock)
    time_id = notification_id_for("a", ReminderKind.TIME_DELAYED)

    async def scenario():
        await scheduler.schedule_time_reminder(make_note("a"), 10)
        before = await scheduler.reminders()

        # The platform delivers the notification and drops it from pending
        clock.advance(minutes=11)
        await granted_center.cancel(time_id)
        after = await scheduler.reminders()
        return before, after

    before, after = asyncio.run(scenario())
    assert [(r["note_id"], r["delivered"]) for r in before] == [("a", False)]
    assert [(r["note_id"], r["delivered"]) for r in after] == [("a", True)]
    assert after[0]["kind"] == ReminderKind.TIME_DELAYED
    assert after[0]["scheduled_at"] == clock.now.subtract(minutes=1)


def test_reminders_cancelled_elsewhere_are_forgotten(granted_center, clock):
    scheduler = ReminderScheduler(granted_center, clock=clock)

    async def scenario():
        await scheduler.schedule_time_reminder(make_note("a"), 10)
        time_id = notification_id_for("a", ReminderKind.TIME_DELAYED)
        await granted_center.cancel(time_id)
        return await scheduler.reminders()

    assert asyncio.run(scenario()) == []


def test_deleting_a_note_cancels_its_reminders(store, granted_center):
    scheduler = ReminderScheduler(granted_center)
    geo_notes = GeoNotes(store, scheduler, StaticLocationProvider(None))

    async def scenario():
        kept = await store.add_note("kept", 10.823, 106.630)
        dropped = await store.add_note("dropped", 10.823, 106.630)
        await scheduler.schedule_time_reminder(kept, 10)
        await scheduler.schedule_time_reminder(dropped, 10)
        await scheduler.schedule_proximity_reminder(10.823, 106.630, [dropped])
        await geo_notes.store.delete_note(dropped["id"])
        return kept, await granted_center.list_pending()

    kept, pending = asyncio.run(scenario())
    assert pending == [notification_id_for(kept["id"], ReminderKind.TIME_DELAYED)]
    assert all(r["note_id"] == kept["id"] for r in asyncio.run(scheduler.reminders()))


def test_delivered_reminders_are_reported_once(granted_center, clock):
    scheduler = ReminderScheduler(granted_center, clock=clock)

    async def scenario():
        await scheduler.schedule_proximity_reminder(10.823, 106.630, [make_note("a")])
        first = await scheduler.reminders()
        second = await scheduler.reminders()
        return first, second

    first, second = asyncio.run(scenario())
    assert [(r["kind"], r["delivered"]) for r in first] == [
        (ReminderKind.PROXIMITY, True)
    ]
    assert second == []


def test_enabling_with_an_empty_store_schedules_the_welcome(store):
    center = FakeNotificationCenter()
    geo_notes = GeoNotes(
        store, ReminderScheduler(center, enabled=False), StaticLocationProvider(None)
    )

    assert asyncio.run(geo_notes.enable_notifications()) is True
    assert list(center.pending) == [WELCOME_NOTIFICATION_ID]


def test_enabling_with_notes_skips_the_welcome(store):
    center = FakeNotificationCenter()
    geo_notes = GeoNotes(
        store, ReminderScheduler(center, enabled=False), StaticLocationProvider(None)
    )

    async def scenario():
        await store.add_note("already here", 0, 0)
        return await geo_notes.enable_notifications()

    assert asyncio.run(scenario()) is True
    assert center.pending == {}


def test_restoring_a_backup_cancels_reminders_of_dropped_notes(store, granted_center):
    geo_notes = GeoNotes(
        store, ReminderScheduler(granted_center), StaticLocationProvider(None)
    )

    async def scenario():
        kept = await store.add_note("kept", 0, 0)
        dropped = await store.add_note("dropped", 0, 0)
        await geo_notes.scheduler.schedule_time_reminder(kept, 10)
        await geo_notes.scheduler.schedule_time_reminder(dropped, 10)
        backup = {
            "notes": [
                {
                    "id": kept["id"],
                    "text": kept["text"],
                    "lat": kept["lat"],
                    "lng": kept["lng"],
                }
            ]
        }
        await geo_notes.restore_backup(backup)
        return kept, dropped, await granted_center.list_pending()

    kept, dropped, pending = asyncio.run(scenario())
    assert notification_id_for(dropped["id"], ReminderKind.TIME_DELAYED) not in pending
    assert pending == [notification_id_for(kept["id"], ReminderKind.TIME_DELAYED)]
