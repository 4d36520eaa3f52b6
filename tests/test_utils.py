"""Tests for photo-list, conversation id and credential helpers."""
import uuid

import pytest

from app.errors import NotFoundError, ValidationError
from app.utils import photos
from app.utils.conversation import conversation_id, other_participant
from app.utils.security import generate_token, hash_password, hash_token, verify_password


def _photo(url, order, primary=False):
    return {"url": url, "order": order, "is_primary": primary}


class TestPhotoList:
    def test_sort_puts_primary_first(self):
        ordered = photos.sort_photos([_photo("a", 0), _photo("b", 1), _photo("c", 2, primary=True)])
        assert [p["url"] for p in ordered] == ["c", "a", "b"]

    def test_sort_without_primary_follows_order(self):
        ordered = photos.sort_photos([_photo("c", 2), _photo("a", 0), _photo("b", 1)])
        assert [p["url"] for p in ordered] == ["a", "b", "c"]

    def test_sort_shuffled_with_primary(self):
        ordered = photos.sort_photos(
            [_photo("d", 3), _photo("b", 1, primary=True), _photo("c", 2), _photo("a", 0)]
        )
        assert [p["url"] for p in ordered] == ["b", "a", "c", "d"]

    def test_first_upload_becomes_primary(self):
        result = photos.add_photos([], ["a", "b"], max_photos=3)
        assert [(p["url"], p["is_primary"], p["order"]) for p in result] == [
            ("a", True, 0),
            ("b", False, 1),
        ]

    def test_new_photos_do_not_steal_primary(self):
        existing = [_photo("a", 0, primary=True)]
        result = photos.add_photos(existing, ["b"], max_photos=3)
        assert [p["url"] for p in result if p["is_primary"]] == ["a"]
        assert result[-1]["order"] == 1

    def test_limit_enforced(self):
        existing = [_photo("a", 0, primary=True), _photo("b", 1)]
        with pytest.raises(ValidationError, match="Maximum 3 photos allowed. You have 2 photos."):
            photos.add_photos(existing, ["c", "d"], max_photos=3)

    def test_no_uploads(self):
        with pytest.raises(ValidationError, match="No photos uploaded"):
            photos.add_photos([], [], max_photos=3)

    def test_removing_primary_promotes_next(self):
        existing = [_photo("a", 0, primary=True), _photo("b", 1), _photo("c", 2)]
        remaining, removed = photos.remove_photo(existing, 0)
        assert removed["url"] == "a"
        assert [(p["url"], p["is_primary"], p["order"]) for p in remaining] == [
            ("b", True, 0),
            ("c", False, 1),
        ]

    def test_remove_out_of_range(self):
        with pytest.raises(NotFoundError):
            photos.remove_photo([_photo("a", 0, primary=True)], 3)

    def test_set_primary_keeps_single_primary(self):
        existing = [_photo("a", 0, primary=True), _photo("b", 1), _photo("c", 2)]
        result = photos.set_primary(existing, 2)
        assert [p["url"] for p in result] == ["c", "a", "b"]
        assert sum(p["is_primary"] for p in result) == 1

    def test_helpers_do_not_mutate_input(self):
        existing = [_photo("a", 0, primary=True), _photo("b", 1)]
        photos.set_primary(existing, 1)
        assert existing[0]["is_primary"] is True


class TestConversationId:
    def test_order_independent(self):
        a, b = uuid.uuid4(), uuid.uuid4()
        assert conversation_id(a, b) == conversation_id(b, a)

    def test_other_participant(self):
        a, b = uuid.uuid4(), uuid.uuid4()
        conv = conversation_id(a, b)
        assert other_participant(conv, a) == str(b)
        with pytest.raises(ValueError):
            other_participant(conv, uuid.uuid4())


class TestCredentials:
    def test_password_roundtrip(self):
        hashed = hash_password("correct horse", rounds=4)
        assert hashed.startswith("$2b$04$")
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_hashes_are_salted(self):
        assert hash_password("same", rounds=4) != hash_password("same", rounds=4)

    def test_overlong_password_rejected(self):
        with pytest.raises(ValidationError):
            hash_password("अ" * 25, rounds=4)

    @pytest.mark.parametrize("encoded", [None, "", "plain-text", "md5$1$salt$abc"])
    def test_malformed_hash_never_verifies(self, encoded):
        assert not verify_password("anything", encoded)

    def test_token_digest_is_stable(self):
        token = generate_token()
        assert hash_token(token) == hash_token(token)
        assert hash_token(token) != token
