"""
ScanPlant Backend — Notification Service Tests
================================================

Test Strategy:
    ✅ Pending → Sent on create, Read / unread toggling
    ✅ Dispatch happens after the Pending row is persisted; failures propagate
    ✅ Admin targeting and plant-ownership checks against the recipient
    ✅ Filters: unread, type (case-insensitive), created_at range
    ✅ Recipient-or-admin for update/delete, recipient-only for reads
"""

import uuid
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy import event, select

from app.database import utcnow
from app.exceptions import NotificationDispatchError, ValidationError
from app.models.notification import Notification
from app.models.plant import Plant
from app.schemas.notification import NotificationCreate, NotificationUpdate
from app.services.notification_sender import NotificationSender
from app.services.notification_service import NotificationService


class RecordingSender(NotificationSender):
    """Records the status each notification had when it was dispatched."""

    channel = "test"

    def __init__(self):
        self.seen = []

    async def dispatch(self, notification: Notification) -> None:
        self.seen.append((notification.id, notification.status, notification.user_id))


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def service(sender) -> NotificationService:
    return NotificationService(sender=sender)


@pytest_asyncio.fixture
async def alice_plant(db_session, users) -> Plant:
    row = Plant(image_url="http://test/files/rose.jpg", scientific_name="Rosa", common_name="Rose", user_id="alice")
    db_session.add(row)
    await db_session.flush()
    return row


def notice(title="Watering due", **fields) -> NotificationCreate:
    return NotificationCreate(title=title, message="Your fern is thirsty", **fields)


class TestCreateAndDispatch:

    @pytest.mark.asyncio
    async def test_pending_then_sent(self, service, sender, db_session, users):
        created = await service.create_notification(db_session, users.alice, notice())

        assert sender.seen == [(created.id, "Pending", "alice")]
        assert created.status == "Sent"
        assert created.sent_at is not None
        assert created.read_at is None
        assert created.user_id == "alice"
        assert created.user_name == "Alice"
        assert created.type == "info"

    @pytest.mark.asyncio
    async def test_read_then_unread_reverts_to_sent(self, service, db_session, users):
        created = await service.create_notification(db_session, users.alice, notice())

        read = await service.mark_read(db_session, users.alice, created.id, True)
        assert read.status == "Read"
        assert read.read_at is not None

        unread = await service.mark_read(db_session, users.alice, created.id, False)
        assert unread.status == "Sent"
        assert unread.read_at is None

    @pytest.mark.asyncio
    async def test_unread_never_sent_reverts_to_pending(self, service, db_session, users):
        row = Notification(title="Draft", message="m", user_id="alice")
        db_session.add(row)
        await db_session.flush()

        await service.mark_read(db_session, users.alice, row.id, True)
        reverted = await service.mark_read(db_session, users.alice, row.id, False)
        assert reverted.status == "Pending"

    @pytest.mark.asyncio
    async def test_sender_failure_propagates(self, db_session, users):
        failing = AsyncMock(spec=NotificationSender)
        failing.dispatch.side_effect = NotificationDispatchError("push gateway down", channel="push")
        service = NotificationService(sender=failing)

        with pytest.raises(NotificationDispatchError):
            await service.create_notification(db_session, users.alice, notice())

        await db_session.rollback()
        remaining = (await db_session.execute(select(Notification))).scalars().all()
        assert remaining == []

    @pytest.mark.asyncio
    async def test_non_admin_target_is_ignored(self, service, db_session, users):
        created = await service.create_notification(db_session, users.bob, notice(target_user_id="alice"))
        assert created.user_id == "bob"

    @pytest.mark.asyncio
    async def test_admin_targets_another_user(self, service, db_session, users):
        created = await service.create_notification(db_session, users.admin, notice(target_user_id="alice"))
        assert created.user_id == "alice"

    @pytest.mark.asyncio
    async def test_admin_unknown_target_rejected(self, service, sender, db_session, users):
        with pytest.raises(ValidationError, match="Target user does not exist"):
            await service.create_notification(db_session, users.admin, notice(target_user_id="ghost"))
        assert sender.seen == []

    @pytest.mark.asyncio
    async def test_plant_must_belong_to_recipient(self, service, db_session, users, alice_plant):
        with pytest.raises(ValidationError, match="plant reference is invalid"):
            await service.create_notification(db_session, users.bob, notice(plant_id=alice_plant.id))

        linked = await service.create_notification(
            db_session, users.admin, notice(target_user_id="alice", plant_id=alice_plant.id)
        )
        assert linked.plant_id == alice_plant.id
        assert linked.plant_common_name == "Rose"


class TestReads:

    @pytest.mark.asyncio
    async def test_recipient_only(self, service, db_session, users):
        created = await service.create_notification(db_session, users.alice, notice())

        assert await service.get_notification(db_session, users.alice, created.id) is not None
        assert await service.get_notification(db_session, users.bob, created.id) is None
        assert await service.get_notification(db_session, users.admin, created.id) is None
        assert await service.list_notifications(db_session, users.bob) == []

    @pytest.mark.asyncio
    async def test_filters(self, service, db_session, users):
        alert = await service.create_notification(db_session, users.alice, notice("Frost", type="Alert"))
        info = await service.create_notification(db_session, users.alice, notice("Tip"))
        await service.mark_read(db_session, users.alice, info.id, True)

        unread = await service.list_notifications(db_session, users.alice, unread=True)
        read = await service.list_notifications(db_session, users.alice, unread=False)
        alerts = await service.list_notifications(db_session, users.alice, type_="ALERT")

        assert [n.id for n in unread] == [alert.id]
        assert [n.id for n in read] == [info.id]
        assert [n.id for n in alerts] == [alert.id]

    @pytest.mark.asyncio
    async def test_date_range_is_inclusive(self, service, db_session, users):
        created = await service.create_notification(db_session, users.alice, notice())
        at = created.created_at

        assert len(await service.list_notifications(db_session, users.alice, start_date=at, end_date=at)) == 1
        assert await service.list_notifications(db_session, users.alice, start_date=at + timedelta(seconds=1)) == []
        assert await service.list_notifications(db_session, users.alice, end_date=at - timedelta(seconds=1)) == []

    @pytest.mark.asyncio
    async def test_newest_first(self, service, db_session, users):
        older = await service.create_notification(db_session, users.alice, notice("older"))
        newer = await service.create_notification(db_session, users.alice, notice("newer"))
        row = await db_session.get(Notification, older.id)
        row.created_at = utcnow() - timedelta(hours=1)
        await db_session.flush()

        assert [n.id for n in await service.list_notifications(db_session, users.alice)] == [newer.id, older.id]


class TestMutations:

    @pytest.mark.asyncio
    async def test_update_keeps_status(self, service, db_session, users):
        created = await service.create_notification(db_session, users.alice, notice())

        updated = await service.update_notification(
            db_session, users.alice, created.id,
            NotificationUpdate(title="Edited", message="New text", type="reminder"),
        )

        assert updated.title == "Edited"
        assert updated.type == "reminder"
        assert updated.status == "Sent"
        assert updated.sent_at == created.sent_at

    @pytest.mark.asyncio
    async def test_update_checks_plant_against_recipient(self, service, db_session, users, alice_plant):
        created = await service.create_notification(db_session, users.admin, notice(target_user_id="alice"))

        updated = await service.update_notification(
            db_session, users.admin, created.id,
            NotificationUpdate(title="t", message="m", plant_id=alice_plant.id),
        )
        assert updated.plant_id == alice_plant.id

    @pytest.mark.asyncio
    async def test_foreign_update_and_delete_look_like_missing(self, service, db_session, users):
        created = await service.create_notification(db_session, users.alice, notice())
        payload = NotificationUpdate(title="x", message="y")

        assert await service.update_notification(db_session, users.bob, created.id, payload) is None
        assert await service.update_notification(db_session, users.bob, uuid.uuid4(), payload) is None
        assert await service.delete_notification(db_session, users.bob, created.id) is False
        assert await service.delete_notification(db_session, users.bob, uuid.uuid4()) is False
        assert await service.mark_read(db_session, users.bob, created.id) is None

    @pytest.mark.asyncio
    async def test_admin_deletes(self, service, db_session, users):
        created = await service.create_notification(db_session, users.alice, notice())
        assert await service.delete_notification(db_session, users.admin, created.id) is True
        assert await service.get_notification(db_session, users.alice, created.id) is None

    @pytest.mark.asyncio
    async def test_mark_all_read(self, service, db_session, users):
        first = await service.create_notification(db_session, users.alice, notice("one"))
        await service.create_notification(db_session, users.alice, notice("two"))
        await service.create_notification(db_session, users.bob, notice("bob's"))
        await service.mark_read(db_session, users.alice, first.id, True)

        assert await service.mark_all_read(db_session, users.alice) == 1
        assert await service.list_notifications(db_session, users.alice, unread=True) == []
        assert len(await service.list_notifications(db_session, users.bob, unread=True)) == 1
        assert await service.mark_all_read(db_session, users.alice) == 0

    @pytest.mark.asyncio
    async def test_mark_all_read_is_one_statement(self, service, db_session, db_engine, users):
        for i in range(40):
            await service.create_notification(db_session, users.alice, notice(f"n{i}"))
        row = await db_session.get(Notification, (await service.list_notifications(db_session, users.alice))[0].id)

        statements = []

        def record(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        event.listen(db_engine.sync_engine, "before_cursor_execute", record)
        try:
            updated = await service.mark_all_read(db_session, users.alice)
        finally:
            event.remove(db_engine.sync_engine, "before_cursor_execute", record)

        assert updated == 40
        assert len(statements) == 1
        assert statements[0].lstrip().upper().startswith("UPDATE")
        assert row.status == "Read"
