"""
ScanPlant Backend — Plant Catalog Service Tests
=================================================

What:  PlantService against an in-memory database and a tmp-dir blob store.

Test Strategy:
    ✅ Create: name required before storage, photo required, owner from caller
    ✅ Update: owner/admin only, photo swap deletes the old object
    ✅ Delete: photo + comments removed, reminder/notification refs cleared
    ✅ Proximity search (Paris / London / Eiffel Tower) and radius rules
    ✅ Name search is case-insensitive; blank term lists everything
"""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.exceptions import DatabaseError, ValidationError
from app.models.comment import Comment
from app.models.notification import Notification
from app.models.plant import Plant
from app.models.reminder import Reminder
from app.schemas.plant import PlantData
from app.services.plant_service import PlantService

PARIS = (48.8566, 2.3522)
LONDON = (51.5074, -0.1278)
EIFFEL_TOWER = (48.8584, 2.2945)


@pytest.fixture
def service(storage) -> PlantService:
    return PlantService(storage=storage)


async def _create(service, db, caller, jpeg_bytes, name="Nephrolepis exaltata", **fields):
    data = PlantData(scientific_name=name, **fields)
    return await service.create_plant(db, caller, data, "plant.jpg", jpeg_bytes)


class TestCreatePlant:

    @pytest.mark.asyncio
    async def test_create_stores_photo_and_sets_owner(self, service, db_session, users, jpeg_bytes, storage):
        plant = await _create(service, db_session, users.alice, jpeg_bytes, common_name="Boston fern")

        assert plant.user_id == "alice"
        assert plant.scientific_name == "Nephrolepis exaltata"
        assert plant.common_name == "Boston fern"
        assert plant.image_url.startswith("http://test/files/")
        assert storage.path_for(storage.name_from_reference(plant.image_url)).exists()
        assert plant.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_blank_scientific_name_rejected_before_storage(self, db_session, users, jpeg_bytes):
        store = AsyncMock()
        service = PlantService(storage=store)

        with pytest.raises(ValidationError, match="Scientific name is required"):
            await service.create_plant(db_session, users.alice, PlantData(scientific_name="   "), "p.jpg", jpeg_bytes)
        store.store.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_photo_rejected(self, service, db_session, users):
        with pytest.raises(ValidationError, match="photo is required"):
            await service.create_plant(db_session, users.alice, PlantData(scientific_name="Ficus"), None, None)

    @pytest.mark.asyncio
    async def test_non_image_upload_rejected(self, service, db_session, users):
        with pytest.raises(ValidationError):
            await service.create_plant(db_session, users.alice, PlantData(scientific_name="Ficus"), "x.jpg", b"nope")

    @pytest.mark.asyncio
    async def test_reference_is_stored_verbatim(self, db_session, users, jpeg_bytes):
        store = AsyncMock()
        store.store.return_value = "https://blobs.example/container/abc.jpg"
        service = PlantService(storage=store)

        plant = await service.create_plant(db_session, users.alice, PlantData(scientific_name="Ficus"), "p.jpg", jpeg_bytes)
        assert plant.image_url == "https://blobs.example/container/abc.jpg"
        store.store.assert_awaited_once_with(jpeg_bytes, "p.jpg")


class TestReadPlants:

    @pytest.mark.asyncio
    async def test_list_plants_newest_first(self, service, db_session, users, jpeg_bytes):
        older = await _create(service, db_session, users.alice, jpeg_bytes, name="Older")
        newer = await _create(service, db_session, users.bob, jpeg_bytes, name="Newer")
        row = await db_session.get(Plant, older.id)
        row.created_at = datetime.now(timezone.utc) - timedelta(days=1)
        await db_session.flush()

        plants = await service.list_plants(db_session)
        assert [p.id for p in plants] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_list_by_owner(self, service, db_session, users, jpeg_bytes):
        await _create(service, db_session, users.alice, jpeg_bytes)
        await _create(service, db_session, users.bob, jpeg_bytes)

        mine = await service.list_by_owner(db_session, "alice")
        assert [p.user_id for p in mine] == ["alice"]

    @pytest.mark.asyncio
    async def test_get_plant_missing_returns_none(self, service, db_session):
        assert await service.get_plant(db_session, uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_plant_exists_for_owner(self, service, db_session, users, jpeg_bytes):
        plant = await _create(service, db_session, users.alice, jpeg_bytes)

        assert await service.plant_exists_for_owner(db_session, plant.id, "alice") is True
        assert await service.plant_exists_for_owner(db_session, plant.id, "bob") is False


class TestProximitySearch:

    @pytest.mark.asyncio
    async def test_paris_excludes_london_includes_eiffel_tower(self, service, db_session, users, jpeg_bytes):
        london = await _create(service, db_session, users.alice, jpeg_bytes, latitude=LONDON[0], longitude=LONDON[1])
        eiffel = await _create(service, db_session, users.alice, jpeg_bytes, latitude=EIFFEL_TOWER[0], longitude=EIFFEL_TOWER[1])

        nearby = {p.id for p in await service.list_near(db_session, *PARIS)}

        assert eiffel.id in nearby
        assert london.id not in nearby

    @pytest.mark.asyncio
    async def test_radius_bounds_results(self, service, db_session, users, jpeg_bytes):
        eiffel = await _create(service, db_session, users.alice, jpeg_bytes, latitude=EIFFEL_TOWER[0], longitude=EIFFEL_TOWER[1])

        assert await service.list_near(db_session, *PARIS, radius_km=1.0) == []
        assert [p.id for p in await service.list_near(db_session, *PARIS, radius_km=500.0)] == [eiffel.id]

    @pytest.mark.asyncio
    async def test_zero_radius_matches_exact_point(self, service, db_session, users, jpeg_bytes):
        here = await _create(service, db_session, users.alice, jpeg_bytes, latitude=PARIS[0], longitude=PARIS[1])
        assert [p.id for p in await service.list_near(db_session, *PARIS, radius_km=0.0)] == [here.id]

    @pytest.mark.asyncio
    async def test_negative_radius_rejected(self, service, db_session):
        with pytest.raises(ValidationError, match="must not be negative"):
            await service.list_near(db_session, *PARIS, radius_km=-1.0)


class TestNameSearch:

    @pytest.mark.asyncio
    async def test_case_insensitive_substring(self, service, db_session, users, jpeg_bytes):
        fern = await _create(service, db_session, users.alice, jpeg_bytes, name="Nephrolepis exaltata", common_name="Boston Fern")
        await _create(service, db_session, users.alice, jpeg_bytes, name="Ficus lyrata", common_name="Fiddle-leaf fig")

        assert [p.id for p in await service.search_by_name(db_session, "FERN")] == [fern.id]
        assert [p.id for p in await service.search_by_name(db_session, "nephro")] == [fern.id]

    @pytest.mark.asyncio
    async def test_blank_term_lists_all(self, service, db_session, users, jpeg_bytes):
        await _create(service, db_session, users.alice, jpeg_bytes)
        await _create(service, db_session, users.bob, jpeg_bytes)

        assert len(await service.search_by_name(db_session, "  ")) == 2
        assert len(await service.search_by_name(db_session, None)) == 2

    @pytest.mark.asyncio
    async def test_wildcards_are_literal(self, service, db_session, users, jpeg_bytes):
        await _create(service, db_session, users.alice, jpeg_bytes, name="Ficus")
        assert await service.search_by_name(db_session, "%") == []


class TestUpdatePlant:

    @pytest.mark.asyncio
    async def test_owner_updates_fields_and_keeps_photo(self, service, db_session, users, jpeg_bytes):
        plant = await _create(service, db_session, users.alice, jpeg_bytes)

        updated = await service.update_plant(
            db_session, users.alice, plant.id,
            PlantData(scientific_name="Nephrolepis cordifolia", city_name="Lyon"),
        )

        assert updated.scientific_name == "Nephrolepis cordifolia"
        assert updated.city_name == "Lyon"
        assert updated.image_url == plant.image_url
        assert updated.user_id == plant.user_id
        assert updated.created_at == plant.created_at

    @pytest.mark.asyncio
    async def test_new_photo_replaces_and_deletes_old(self, service, db_session, users, jpeg_bytes, png_bytes, storage):
        plant = await _create(service, db_session, users.alice, jpeg_bytes)
        old_name = storage.name_from_reference(plant.image_url)

        updated = await service.update_plant(
            db_session, users.alice, plant.id, PlantData(scientific_name="Ficus"), "new.png", png_bytes
        )

        assert updated.image_url != plant.image_url
        assert updated.image_url.endswith(".png")
        assert not storage.path_for(old_name).exists()
        assert storage.path_for(storage.name_from_reference(updated.image_url)).exists()

    @pytest.mark.asyncio
    async def test_new_photo_stored_before_old_deleted(self, db_session, users, jpeg_bytes):
        calls = []
        names = iter(["first.jpg", "second.jpg"])
        store = AsyncMock()
        store.store.side_effect = lambda content, name: calls.append("store") or f"http://test/files/{next(names)}"
        store.delete.side_effect = lambda name: calls.append(f"delete:{name}") or True
        store.name_from_reference = lambda ref: ref.rsplit("/", 1)[-1]
        service = PlantService(storage=store)

        plant = await service.create_plant(db_session, users.alice, PlantData(scientific_name="Ficus"), "a.jpg", jpeg_bytes)
        calls.clear()
        await service.update_plant(db_session, users.alice, plant.id, PlantData(scientific_name="Ficus"), "b.jpg", jpeg_bytes)

        assert calls == ["store", "delete:first.jpg"]

    @pytest.mark.asyncio
    async def test_failed_save_removes_new_photo_and_keeps_old(
        self, service, db_session, users, jpeg_bytes, png_bytes, storage
    ):
        plant = await _create(service, db_session, users.alice, jpeg_bytes)
        old_name = storage.name_from_reference(plant.image_url)

        with patch.object(db_session, "flush", AsyncMock(side_effect=SQLAlchemyError("disk I/O error"))):
            with pytest.raises(DatabaseError):
                await service.update_plant(
                    db_session, users.alice, plant.id, PlantData(scientific_name="Ficus"), "new.png", png_bytes
                )

        assert sorted(p.name for p in storage.path_for(old_name).parent.iterdir()) == [old_name]

    @pytest.mark.asyncio
    async def test_non_owner_gets_none(self, service, db_session, users, jpeg_bytes):
        plant = await _create(service, db_session, users.alice, jpeg_bytes)

        result = await service.update_plant(db_session, users.bob, plant.id, PlantData(scientific_name="Hacked"))
        missing = await service.update_plant(db_session, users.bob, uuid.uuid4(), PlantData(scientific_name="Hacked"))

        assert result is None
        assert missing is None
        assert (await service.get_plant(db_session, plant.id)).scientific_name == "Nephrolepis exaltata"

    @pytest.mark.asyncio
    async def test_admin_may_update(self, service, db_session, users, jpeg_bytes):
        plant = await _create(service, db_session, users.alice, jpeg_bytes)
        updated = await service.update_plant(db_session, users.admin, plant.id, PlantData(scientific_name="Fixed"))
        assert updated.scientific_name == "Fixed"
        assert updated.user_id == "alice"


class TestDeletePlant:

    @pytest.mark.asyncio
    async def test_delete_removes_photo_comments_and_clears_refs(self, service, db_session, users, jpeg_bytes, storage):
        plant = await _create(service, db_session, users.alice, jpeg_bytes)
        name = storage.name_from_reference(plant.image_url)
        db_session.add(Comment(text="Lovely", plant_id=plant.id, user_id="bob"))
        reminder = Reminder(title="Water", scheduled_at=datetime.now(timezone.utc), plant_id=plant.id, user_id="alice")
        notification = Notification(title="Hi", message="Check it", plant_id=plant.id, user_id="alice")
        db_session.add_all([reminder, notification])
        await db_session.flush()

        assert await service.delete_plant(db_session, users.alice, plant.id) is True

        assert await service.get_plant(db_session, plant.id) is None
        assert not storage.path_for(name).exists()
        comments = (await db_session.execute(select(Comment).where(Comment.plant_id == plant.id))).scalars().all()
        assert comments == []
        await db_session.refresh(reminder)
        await db_session.refresh(notification)
        assert reminder.plant_id is None
        assert notification.plant_id is None

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete(self, service, db_session, users, jpeg_bytes):
        plant = await _create(service, db_session, users.alice, jpeg_bytes)

        assert await service.delete_plant(db_session, users.bob, plant.id) is False
        assert await service.delete_plant(db_session, users.bob, uuid.uuid4()) is False
        assert await service.get_plant(db_session, plant.id) is not None

    @pytest.mark.asyncio
    async def test_admin_may_delete(self, service, db_session, users, jpeg_bytes):
        plant = await _create(service, db_session, users.alice, jpeg_bytes)
        assert await service.delete_plant(db_session, users.admin, plant.id) is True
