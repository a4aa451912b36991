"""
Forum posts, classes and trainer slots.
"""
import pytest
from datetime import datetime, timedelta

from core.db import CLASSES, FORUMS, SLOTS
from tests.conftest import MEMBER_EMAIL, auth_headers, seed_user


class TestForum:

    @pytest.mark.asyncio
    async def test_pagination_newest_first(self, test_client, mongo_db):
        start = datetime(2024, 1, 1)
        for day in range(8):
            await mongo_db[FORUMS].insert_one({"title": f"post {day}", "postedDate": start + timedelta(days=day)})

        first = await test_client.get("/forum")
        second = await test_client.get("/forum", params={"page": 2})

        body = first.json()
        assert body["totalPosts"] == 8
        assert body["totalPages"] == 2
        assert body["currentPage"] == 1
        assert [post["title"] for post in body["posts"]][:2] == ["post 7", "post 6"]
        assert len(body["posts"]) == 6
        assert [post["title"] for post in second.json()["posts"]] == ["post 1", "post 0"]

    @pytest.mark.asyncio
    async def test_votes_increment_counters(self, test_client, mongo_db):
        post = await mongo_db[FORUMS].insert_one({"title": "hello", "upvotes": 2})
        headers = auth_headers(MEMBER_EMAIL)

        up = await test_client.patch(f"/forum/upvote/{post.inserted_id}", headers=headers)
        down = await test_client.patch(f"/forum/downvote/{post.inserted_id}", headers=headers)

        assert up.json()["message"] == "Upvote successful"
        assert down.json()["message"] == "Downvote successful"
        stored = await mongo_db[FORUMS].find_one({"_id": post.inserted_id})
        assert stored["upvotes"] == 3
        assert stored["downvotes"] == 1

    @pytest.mark.asyncio
    async def test_create_post_requires_token(self, test_client):
        response = await test_client.post("/forum", json={"title": "hello"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_trainer_forum_filters_author_type(self, test_client, mongo_db, trainer_headers):
        await mongo_db[FORUMS].insert_many([
            {"title": "from coach", "authorType": "trainer"},
            {"title": "from admin", "authorType": "admin"},
        ])

        response = await test_client.get("/trainer-forum", headers=trainer_headers)

        assert [post["title"] for post in response.json()] == ["from coach"]


class TestClasses:

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, test_client, mongo_db):
        await mongo_db[CLASSES].insert_many([
            {"className": "Power Yoga"}, {"className": "yoga flow"}, {"className": "Boxing"},
        ])

        response = await test_client.get("/classes", params={"search": "YOGA", "limit": 1})

        body = response.json()
        assert body["totalPages"] == 2
        assert body["currentPage"] == 1
        assert len(body["classes"]) == 1

    @pytest.mark.asyncio
    async def test_top_classes_by_bookings(self, test_client, mongo_db):
        await mongo_db[CLASSES].insert_many([
            {"className": "A", "bookings": 1}, {"className": "B", "bookings": 7}, {"className": "C", "bookings": 3},
        ])

        response = await test_client.get("/top-classes")

        assert [c["className"] for c in response.json()] == ["B", "C", "A"]


class TestSlots:

    @pytest.mark.asyncio
    async def test_add_slot_tags_classes_with_trainer(self, test_client, mongo_db, trainer_headers):
        yoga = await mongo_db[CLASSES].insert_one({"className": "Yoga", "trainerId": ["other"]})
        body = {
            "trainerId": "trainer-1",
            "slotName": "Morning",
            "selectedClasses": [{"value": str(yoga.inserted_id), "label": "Yoga"}],
        }

        response = await test_client.post("/add-slot", json=body, headers=trainer_headers)
        again = await test_client.post("/add-slot", json=body, headers=trainer_headers)

        assert response.status_code == 200
        assert response.json()["modifiedCount"] == 1
        assert again.json()["modifiedCount"] == 0
        stored = await mongo_db[CLASSES].find_one({"_id": yoga.inserted_id})
        assert stored["trainerId"] == ["other", "trainer-1"]
        assert await mongo_db[SLOTS].count_documents({"trainerId": "trainer-1"}) == 2

    @pytest.mark.asyncio
    async def test_add_slot_with_unknown_class(self, test_client, mongo_db, trainer_headers):
        body = {"trainerId": "trainer-1", "selectedClasses": [{"value": "65a000000000000000000000"}]}

        response = await test_client.post("/add-slot", json=body, headers=trainer_headers)

        assert response.status_code == 404
        assert await mongo_db[SLOTS].count_documents({}) == 0

    @pytest.mark.asyncio
    async def test_add_slot_requires_trainer(self, test_client, mongo_db):
        await seed_user(mongo_db, MEMBER_EMAIL)

        response = await test_client.post(
            "/add-slot", json={"trainerId": "x", "selectedClasses": []}, headers=auth_headers(MEMBER_EMAIL)
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_trainer_deletes_slot(self, test_client, mongo_db, trainer_headers):
        slot = await mongo_db[SLOTS].insert_one({"trainerId": "trainer-1"})

        listed = await test_client.get("/slots/trainer-1")
        fetched = await test_client.get(f"/slot/{slot.inserted_id}")
        deleted = await test_client.delete(f"/slots/{slot.inserted_id}", headers=trainer_headers)

        assert len(listed.json()) == 1
        assert fetched.json()["trainerId"] == "trainer-1"
        assert deleted.json()["deletedCount"] == 1
        assert await mongo_db[SLOTS].count_documents({}) == 0
