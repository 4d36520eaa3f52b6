"""Tests for profiles, search, completeness and photo management."""
import io
import threading
from datetime import date
from unittest.mock import MagicMock

import pytest
from PIL import Image

from app.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.models.user import User
from app.services.user_service import UserService, age_from_dob, completeness
from app.utils.images import MAX_DIMENSION, process_photo
from app.utils.storage import LocalStorage


def _image_bytes(size=(1600, 1200), fmt="PNG"):
    buf = io.BytesIO()
    Image.new("RGB", size, (200, 80, 40)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "photos"), "http://localhost:5050")


@pytest.fixture
def users(storage):
    return UserService(storage)


class TestHelpers:
    def test_age_from_dob_before_and_after_birthday(self):
        assert age_from_dob(date(1995, 6, 15), today=date(2025, 6, 14)) == 29
        assert age_from_dob(date(1995, 6, 15), today=date(2025, 6, 15)) == 30

    def test_completeness_lists_missing_fields(self):
        user = User(name="Asha", gender="female", email="a@example.com", photos=[])
        result = completeness(user)
        assert result["missing_fields"] == ["age", "city", "religion", "photos"]
        assert result["percentage"] == 43
        assert result["is_profile_complete"] is False

    def test_complete_profile(self):
        user = User(
            name="Asha", gender="female", age=27, city="Jhansi", religion="Hindu",
            phone="9999999999", photos=[{"url": "x", "order": 0, "is_primary": True}],
        )
        assert completeness(user) == {"percentage": 100, "missing_fields": [], "is_profile_complete": True}


class TestProcessPhoto:
    def test_resizes_within_bounds_and_reencodes_jpeg(self):
        out = process_photo(_image_bytes(), watermark="EK Gahoi")
        img = Image.open(io.BytesIO(out))
        assert img.format == "JPEG"
        assert max(img.size) == MAX_DIMENSION
        assert img.size == (800, 600)

    def test_small_images_are_not_enlarged(self):
        img = Image.open(io.BytesIO(process_photo(_image_bytes((300, 200)))))
        assert img.size == (300, 200)

    def test_rejects_non_images(self):
        with pytest.raises(ValidationError):
            process_photo(b"definitely not an image")


class TestProfiles:
    @pytest.mark.asyncio
    async def test_update_recomputes_age_and_completeness(self, db, users, alice):
        updated = await users.update_profile(
            alice.id, alice, {"date_of_birth": date(1990, 1, 1), "city": "Datia"}, db
        )
        assert updated.age == age_from_dob(date(1990, 1, 1))
        assert updated.city == "Datia"
        assert updated.is_profile_complete is False  # still no photos

    @pytest.mark.asyncio
    async def test_only_owner_or_admin_may_update(self, db, users, alice, bob, make_user):
        with pytest.raises(AuthorizationError):
            await users.update_profile(alice.id, bob, {"city": "Agra"}, db)

        admin = await make_user(is_admin=True)
        updated = await users.update_profile(alice.id, admin, {"city": "Agra"}, db)
        assert updated.city == "Agra"

    @pytest.mark.asyncio
    async def test_email_clash_is_conflict(self, db, users, alice, bob):
        with pytest.raises(ConflictError):
            await users.update_profile(alice.id, alice, {"email": bob.email}, db)

    @pytest.mark.asyncio
    async def test_soft_delete_hides_profile_from_others(self, db, users, alice, bob):
        await users.delete_profile(alice.id, db)
        with pytest.raises(NotFoundError):
            await users.get_profile(alice.id, db, requester_id=bob.id)
        assert (await users.get_profile(alice.id, db, requester_id=alice.id)).is_active is False


class TestSearch:
    @pytest.mark.asyncio
    async def test_filters(self, db, users, make_user):
        viewer = await make_user(name="Viewer", gender="male")
        await make_user(name="Asha", gender="female", age=26, city="Jhansi")
        await make_user(name="Bela", gender="female", age=31, city="Gwalior")
        await make_user(name="Chandra", gender="male", age=28, city="Jhansi")
        await make_user(name="Hidden", gender="female", age=27, is_active=False)

        result = await users.search_users(viewer.id, {"gender": "female", "max_age": 30}, db)
        assert [u.name for u in result["users"]] == ["Asha"]
        assert result["total"] == 1

        result = await users.search_users(viewer.id, {"city": "jhan"}, db)
        assert {u.name for u in result["users"]} == {"Asha", "Chandra"}

    @pytest.mark.asyncio
    async def test_viewer_excluded(self, db, users, alice):
        result = await users.search_users(alice.id, {}, db)
        assert alice.id not in [u.id for u in result["users"]]


class TestPhotos:
    @pytest.mark.asyncio
    async def test_upload_processes_and_stores(self, db, users, storage, alice):
        result = await users.add_photos(alice, [_image_bytes(), _image_bytes((400, 400))], db)

        assert len(result) == 2
        assert result[0]["is_primary"] is True
        assert all(storage.file_exists(p["url"]) for p in result)
        assert alice.is_profile_complete is True

    @pytest.mark.asyncio
    async def test_limit_checked_before_storage_write(self, db, alice):
        storage = MagicMock()
        service = UserService(storage)
        with pytest.raises(ValidationError):
            await service.add_photos(alice, [_image_bytes()] * 4, db)
        storage.upload_file.assert_not_called()

    @pytest.mark.asyncio
    async def test_storage_calls_run_off_the_event_loop(self, db, alice):
        threads = []
        storage = MagicMock()
        storage.upload_file.side_effect = lambda data, name, owner_id=None: (
            threads.append(threading.get_ident()) or {"url": f"http://cdn.test/{name}"}
        )
        storage.delete_file.side_effect = lambda url: threads.append(threading.get_ident())
        service = UserService(storage)

        await service.add_photos(alice, [_image_bytes((300, 300))], db)
        await service.delete_photo(alice, 0, db)

        assert len(threads) == 2
        assert threading.get_ident() not in threads

    @pytest.mark.asyncio
    async def test_delete_primary_promotes_next_and_removes_file(self, db, users, storage, alice):
        await users.add_photos(alice, [_image_bytes(), _image_bytes()], db)
        first_url = alice.photos[0]["url"]

        remaining = await users.delete_photo(alice, 0, db)

        assert len(remaining) == 1
        assert remaining[0]["is_primary"] is True
        assert not storage.file_exists(first_url)

    @pytest.mark.asyncio
    async def test_set_primary(self, db, users, alice):
        await users.add_photos(alice, [_image_bytes(), _image_bytes()], db)
        second_url = alice.photos[1]["url"]

        result = await users.set_primary_photo(alice, 1, db)
        assert result[0]["url"] == second_url
        assert result[0]["is_primary"] is True
