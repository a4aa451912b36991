"""
Users, trainers, subscribers and dashboard counters.
"""
import pytest

from core.db import SUBSCRIBERS, USERS
from tests.conftest import MEMBER_EMAIL, auth_headers, seed_user


class TestUsers:

    @pytest.mark.asyncio
    async def test_first_login_creates_member(self, test_client, mongo_db):
        response = await test_client.post(
            "/users", json={"email": MEMBER_EMAIL, "displayName": "A", "authMethod": "google"}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User created successfully"
        assert body["user"]["role"] == "member"
        assert isinstance(body["user"]["_id"], str)
        assert await mongo_db[USERS].count_documents({"email": MEMBER_EMAIL}) == 1

    @pytest.mark.asyncio
    async def test_repeat_login_updates_auth_method(self, test_client, mongo_db):
        await seed_user(mongo_db, MEMBER_EMAIL, authMethod="google")

        response = await test_client.post("/users", json={"email": MEMBER_EMAIL, "authMethod": "password"})

        assert response.status_code == 200
        assert response.json()["message"] == "User already exists"
        user = await mongo_db[USERS].find_one({"email": MEMBER_EMAIL})
        assert user["authMethod"] == "password"
        assert await mongo_db[USERS].count_documents({"email": MEMBER_EMAIL}) == 1

    @pytest.mark.asyncio
    async def test_touch_last_login(self, test_client, mongo_db):
        await seed_user(mongo_db, MEMBER_EMAIL)

        found = await test_client.patch(f"/users/{MEMBER_EMAIL}")
        missing = await test_client.patch("/users/nobody@x.com")

        assert found.status_code == 200
        assert found.json()["result"]["matchedCount"] == 1
        assert found.json()["user"]["lastLogin"]
        assert missing.status_code == 404
        assert missing.json() == {"message": "User not found"}

    @pytest.mark.asyncio
    async def test_profile_update_writes_only_sent_fields(self, test_client, mongo_db):
        await seed_user(mongo_db, MEMBER_EMAIL, photoURL="a.png")

        response = await test_client.patch(
            f"/user/{MEMBER_EMAIL}", json={"displayName": "Alice", "bio": "runner"}, headers=auth_headers(MEMBER_EMAIL)
        )

        assert response.status_code == 200
        user = response.json()
        assert user["displayName"] == "Alice"
        assert user["bio"] == "runner"
        assert user["photoURL"] == "a.png"

    @pytest.mark.asyncio
    async def test_role_lookup(self, test_client, mongo_db):
        await seed_user(mongo_db, MEMBER_EMAIL)
        headers = auth_headers(MEMBER_EMAIL)

        found = await test_client.get(f"/users/role/{MEMBER_EMAIL}", headers=headers)
        missing = await test_client.get("/users/role/nobody@x.com", headers=headers)

        assert found.json() == {"role": "member"}
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_path_email_matches_regardless_of_domain_case(self, test_client, mongo_db):
        created = await test_client.post("/users", json={"email": "Pat@TrueFit.IO", "displayName": "Pat"})

        profile = await test_client.get("/users/Pat@TRUEFIT.io")
        touched = await test_client.patch("/users/Pat@TrueFit.IO")

        assert created.json()["user"]["email"] == "Pat@truefit.io"
        assert profile.json()["displayName"] == "Pat"
        assert touched.status_code == 200


class TestTrainers:

    @pytest.mark.asyncio
    async def test_top_trainers_sorted_by_remaining_slots(self, test_client, mongo_db):
        for index, slots in enumerate([5, 1, 9]):
            await seed_user(mongo_db, f"coach{index}@truefit.io", role="trainer", slots=slots)
        await seed_user(mongo_db, MEMBER_EMAIL)

        response = await test_client.get("/top-trainers")

        assert [trainer["slots"] for trainer in response.json()] == [1, 5, 9]

    @pytest.mark.asyncio
    async def test_admin_demotes_trainer(self, test_client, mongo_db, admin_headers):
        trainer_id = await seed_user(mongo_db, "coach@truefit.io", role="trainer")

        response = await test_client.patch(f"/trainers/{trainer_id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["modifiedCount"] == 1
        trainer = await mongo_db[USERS].find_one({"_id": trainer_id})
        assert trainer["role"] == "member"

    @pytest.mark.asyncio
    async def test_trainer_by_malformed_id(self, test_client):
        response = await test_client.get("/trainers/not-an-id")

        assert response.status_code == 400


class TestSubscribers:

    @pytest.mark.asyncio
    async def test_subscribers_vs_members(self, test_client, mongo_db, admin_headers):
        await test_client.post("/subscribers", json={"email": "news@x.com"})
        await seed_user(mongo_db, MEMBER_EMAIL, subscription="Gold")
        await seed_user(mongo_db, "b@x.com", subscription=None)

        response = await test_client.get("/subscribers-vs-members", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"totalSubscribers": 1, "totalPaidMembers": 1}
        assert await mongo_db[SUBSCRIBERS].count_documents({}) == 1
