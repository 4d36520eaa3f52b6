"""End-to-end tests through the FastAPI app."""
import io
import uuid

import pytest
from PIL import Image
from sqlalchemy import update

from app.models.user import User


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


async def _register(api, email, name, gender="female", **extra):
    payload = {"email": email, "password": "s3cret-pass", "name": name, "gender": gender, **extra}
    resp = await api.post("/api/auth/register", json=payload)
    assert resp.status_code == 201, resp.text
    data = resp.json()
    return data["user"]["id"], data["token"]


class TestErrors:
    @pytest.mark.asyncio
    async def test_health(self, api):
        resp = await api.get("/api/health")
        assert resp.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_unknown_route_names_the_path(self, api):
        resp = await api.get("/api/nowhere")
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Route /api/nowhere not found"}

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, api):
        resp = await api.get("/api/users/me")
        assert resp.status_code == 401
        assert resp.json() == {"detail": "Authentication required"}

    @pytest.mark.asyncio
    async def test_push_key_unavailable_without_vapid(self, api):
        resp = await api.get("/api/push/vapid-key")
        assert resp.status_code == 503


class TestAuthFlow:
    @pytest.mark.asyncio
    async def test_register_login_logout(self, api):
        user_id, _ = await _register(api, "asha@example.com", "Asha", age=27)

        resp = await api.post(
            "/api/auth/login", json={"identifier": "asha@example.com", "password": "s3cret-pass"}
        )
        assert resp.status_code == 200
        token = resp.json()["token"]

        me = await api.get("/api/users/me", headers=_auth(token))
        assert me.json()["id"] == user_id
        assert me.json()["email"] == "asha@example.com"

        assert (await api.post("/api/auth/logout", headers=_auth(token))).status_code == 200
        assert (await api.get("/api/users/me", headers=_auth(token))).status_code == 401

    @pytest.mark.asyncio
    async def test_register_requires_contact(self, api):
        resp = await api.post(
            "/api/auth/register",
            json={"password": "s3cret-pass", "name": "No Contact", "gender": "male"},
        )
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_duplicate_registration_is_409(self, api):
        await _register(api, "dup@example.com", "Dup")
        resp = await api.post(
            "/api/auth/register",
            json={"email": "dup@example.com", "password": "s3cret-pass", "name": "Dup", "gender": "male"},
        )
        assert resp.status_code == 409


class TestProfiles:
    @pytest.mark.asyncio
    async def test_update_and_completeness(self, api):
        _, token = await _register(api, "asha@example.com", "Asha")
        resp = await api.put(
            "/api/users/me", json={"city": "Jhansi", "religion": "Hindu", "age": 27}, headers=_auth(token)
        )
        assert resp.status_code == 200
        assert resp.json()["city"] == "Jhansi"

        score = (await api.get("/api/users/me/completeness", headers=_auth(token))).json()
        assert score["missing_fields"] == ["photos"]

    @pytest.mark.asyncio
    async def test_photo_upload(self, api):
        _, token = await _register(api, "asha@example.com", "Asha")
        buf = io.BytesIO()
        Image.new("RGB", (1000, 500), "white").save(buf, format="PNG")

        resp = await api.post(
            "/api/photos/upload",
            files=[("photos", ("a.png", buf.getvalue(), "image/png"))],
            headers=_auth(token),
        )
        assert resp.status_code == 201, resp.text
        (photo,) = resp.json()["photos"]
        assert photo["is_primary"] is True
        assert "/uploads/photos/" in photo["url"]

    @pytest.mark.asyncio
    async def test_photo_upload_rejects_other_types(self, api):
        _, token = await _register(api, "asha@example.com", "Asha")
        resp = await api.post(
            "/api/photos/upload",
            files=[("photos", ("a.gif", b"GIF89a", "image/gif"))],
            headers=_auth(token),
        )
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_search_and_unknown_profile(self, api):
        _, token = await _register(api, "asha@example.com", "Asha")
        await _register(api, "ravi@example.com", "Ravi", gender="male", city="Gwalior")

        resp = await api.get("/api/users/", params={"gender": "male"}, headers=_auth(token))
        assert [u["name"] for u in resp.json()["users"]] == ["Ravi"]

        missing = await api.get(f"/api/users/{uuid.uuid4()}", headers=_auth(token))
        assert missing.status_code == 404
        assert missing.json() == {"detail": "User not found"}


class TestMatchmakingFlow:
    @pytest.mark.asyncio
    async def test_view_interest_accept_and_message(self, api):
        asha_id, asha = await _register(api, "asha@example.com", "Asha")
        ravi_id, ravi = await _register(api, "ravi@example.com", "Ravi", gender="male")

        tracked = await api.post(
            "/api/profile-views/track", json={"viewed_user_id": asha_id}, headers=_auth(ravi)
        )
        assert tracked.json()["tracked"] is True
        assert tracked.json()["view"]["viewer"]["name"] == "Ravi"

        sent = await api.post("/api/interests/send", json={"to_user_id": asha_id}, headers=_auth(ravi))
        assert sent.status_code == 201
        assert sent.json()["to_user"]["name"] == "Asha"

        again = await api.post("/api/interests/send", json={"to_user_id": asha_id}, headers=_auth(ravi))
        assert again.status_code == 409

        accepted = await api.post(
            "/api/interests/respond",
            json={"from_user_id": ravi_id, "decision": "accept"},
            headers=_auth(asha),
        )
        assert accepted.json()["status"] == "accepted"

        msg = await api.post(
            "/api/messages/send", json={"receiver_id": asha_id, "content": "Namaste!"}, headers=_auth(ravi)
        )
        assert msg.status_code == 201

        inbox = (await api.get("/api/messages/conversations", headers=_auth(asha))).json()
        (entry,) = inbox["conversations"]
        assert entry["other_user"]["id"] == ravi_id
        assert entry["unread_count"] == 1

        page = (await api.get(f"/api/messages/conversation/{ravi_id}", headers=_auth(asha))).json()
        assert [m["content"] for m in page["messages"]] == ["Namaste!"]

        read = await api.post(f"/api/messages/conversation/{ravi_id}/read", headers=_auth(asha))
        assert read.json() == {"updated": 1}

        notes = (await api.get("/api/notifications/", headers=_auth(asha))).json()
        assert [n["type"] for n in notes["notifications"]] == [
            "message_received",
            "interest_received",
            "profile_view",
        ]
        assert notes["unread_count"] == 3

        ravi_notes = (await api.get("/api/notifications/", headers=_auth(ravi))).json()
        assert [n["type"] for n in ravi_notes["notifications"]] == ["interest_accepted"]

    @pytest.mark.asyncio
    async def test_empty_message_is_422(self, api):
        asha_id, _ = await _register(api, "asha@example.com", "Asha")
        _, ravi = await _register(api, "ravi@example.com", "Ravi", gender="male")
        resp = await api.post(
            "/api/messages/send", json={"receiver_id": asha_id, "content": ""}, headers=_auth(ravi)
        )
        assert resp.status_code == 422


class TestCommunity:
    @pytest.mark.asyncio
    async def test_question_answer_vote(self, api):
        _, asha = await _register(api, "asha@example.com", "Asha")
        _, ravi = await _register(api, "ravi@example.com", "Ravi", gender="male")

        created = await api.post(
            "/api/questions/",
            json={"title": "Kundli matching?", "content": "How important is it?", "tags": [" Astrology "]},
            headers=_auth(asha),
        )
        assert created.status_code == 201
        question = created.json()
        assert question["tags"] == ["astrology"]
        assert question["author"]["name"] == "Asha"

        answer = await api.post(
            f"/api/answers/question/{question['id']}",
            json={"content": "Talk to both families first."},
            headers=_auth(ravi),
        )
        assert answer.status_code == 201, answer.text

        vote = await api.post(
            f"/api/questions/{question['id']}/vote", json={"vote_type": "upvote"}, headers=_auth(ravi)
        )
        assert vote.json() == {"upvotes": 1, "downvotes": 0, "user_vote": "upvote"}

        detail = (await api.get(f"/api/questions/{question['id']}", headers=_auth(ravi))).json()
        assert detail["question"]["answers_count"] == 1
        assert detail["user_vote"] == "upvote"

        anonymous = (await api.get("/api/questions/", params={"search": "kundli"})).json()
        assert anonymous["pagination"]["total"] == 1

        forbidden = await api.delete(f"/api/questions/{question['id']}", headers=_auth(ravi))
        assert forbidden.status_code == 403


class TestShortlistAndReports:
    @pytest.mark.asyncio
    async def test_shortlist_round_trip(self, api):
        _, asha = await _register(api, "asha@example.com", "Asha")
        ravi_id, ravi = await _register(api, "ravi@example.com", "Ravi", gender="male")

        added = await api.post(
            "/api/shortlist/add", json={"shortlisted_user_id": ravi_id}, headers=_auth(asha)
        )
        assert added.status_code == 201, added.text
        assert added.json()["shortlisted_user"]["name"] == "Ravi"

        again = await api.post(
            "/api/shortlist/add", json={"shortlisted_user_id": ravi_id}, headers=_auth(asha)
        )
        assert again.status_code == 409

        listed = (await api.get("/api/shortlist/", headers=_auth(asha))).json()
        assert listed["total"] == 1
        check = await api.get(f"/api/shortlist/check/{ravi_id}", headers=_auth(asha))
        assert check.json() == {"is_shortlisted": True}

        notes = (await api.get("/api/notifications/", headers=_auth(ravi))).json()
        assert [n["type"] for n in notes["notifications"]] == ["shortlist"]

        removed = await api.delete(f"/api/shortlist/remove/{ravi_id}", headers=_auth(asha))
        assert removed.status_code == 204
        missing = await api.delete(f"/api/shortlist/remove/{ravi_id}", headers=_auth(asha))
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_report_review_is_admin_only(self, api, session_factory):
        _, asha = await _register(api, "asha@example.com", "Asha")
        ravi_id, _ = await _register(api, "ravi@example.com", "Ravi", gender="male")
        admin_id, admin = await _register(api, "admin@example.com", "Admin", gender="male")

        async with session_factory() as session:
            await session.execute(
                update(User).where(User.id == uuid.UUID(admin_id)).values(is_admin=True)
            )
            await session.commit()

        filed = await api.post(
            "/api/reports/",
            json={"reported_user_id": ravi_id, "reason": "fake-profile", "description": "Stock photos"},
            headers=_auth(asha),
        )
        assert filed.status_code == 201, filed.text
        report_id = filed.json()["id"]

        bad_reason = await api.post(
            "/api/reports/", json={"reported_user_id": ravi_id, "reason": "rude"}, headers=_auth(admin)
        )
        assert bad_reason.status_code == 422

        assert (await api.get("/api/reports/", headers=_auth(asha))).status_code == 403

        listed = (await api.get("/api/reports/", params={"status": "pending"}, headers=_auth(admin))).json()
        assert listed["pagination"]["total"] == 1

        reviewed = await api.patch(
            f"/api/reports/{report_id}",
            json={"status": "resolved", "admin_notes": "Profile suspended"},
            headers=_auth(admin),
        )
        assert reviewed.status_code == 200, reviewed.text
        assert reviewed.json()["reviewed_by"] == admin_id
        assert reviewed.json()["status"] == "resolved"

        against_ravi = (await api.get(f"/api/reports/user/{ravi_id}", headers=_auth(admin))).json()
        assert [r["id"] for r in against_ravi] == [report_id]
