"""
Tests for the /users/* endpoints.

Covers registration, duplicate and malformed ids, bans, admin promotion
and account removal with everything the account owned.
"""

import pytest


class TestUserRegistration:

    @pytest.mark.asyncio
    async def test_add_user_returns_fresh_account(self, test_client):
        response = await test_client.post("/users/add", json={"userId": 42})

        assert response.status_code == 200
        assert response.json() == {"user": {"id": 42, "admin": False, "bans": []}}

    @pytest.mark.asyncio
    async def test_duplicate_user_rejected(self, test_client, seed):
        await seed.user(42)

        response = await test_client.post("/users/add", json={"userId": 42})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert "already exists" in body["message"]

    @pytest.mark.asyncio
    async def test_negative_user_id_rejected(self, test_client):
        response = await test_client.post("/users/add", json={"userId": -1})

        assert response.status_code == 400
        assert response.json()["message"] == "Parameter 'userId' may not be negative."

    @pytest.mark.asyncio
    async def test_missing_user_id_rejected(self, test_client):
        response = await test_client.post("/users/add", json={})

        assert response.status_code == 400
        assert response.json()["message"] == (
            "Missing required 'userId' parameter in request body."
        )

    @pytest.mark.asyncio
    async def test_non_integer_user_id_rejected(self, test_client):
        response = await test_client.post("/users/add", json={"userId": "abc"})

        assert response.status_code == 400
        assert response.json()["message"] == "Parameter 'userId' is invalid."

    @pytest.mark.asyncio
    async def test_boolean_user_id_rejected(self, test_client, seed):
        await seed.user(1)

        response = await test_client.post("/users/byId", json={"userId": True})

        assert response.status_code == 400
        assert response.json()["message"] == "Parameter 'userId' is invalid."

    @pytest.mark.asyncio
    async def test_user_id_beyond_integer_column_rejected(self, test_client):
        response = await test_client.post("/users/byId", json={"userId": 2**63})

        assert response.status_code == 400
        assert response.json()["message"] == "Parameter 'userId' is invalid."

    @pytest.mark.asyncio
    async def test_get_unknown_user_is_404(self, test_client):
        response = await test_client.post("/users/byId", json={"userId": 7})

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestBans:

    @pytest.mark.asyncio
    async def test_admin_can_ban_permanently(self, test_client, seed):
        await seed.admin(1)
        await seed.user(2)

        response = await test_client.post("/users/ban", json={"adminId": 1, "userId": 2})

        assert response.status_code == 200
        ban = response.json()["ban"]
        assert ban["userId"] == 2
        assert ban["adminId"] == 1
        assert ban["expirationDate"] is None

        user = (await test_client.post("/users/byId", json={"userId": 2})).json()["user"]
        assert [b["id"] for b in user["bans"]] == [ban["id"]]

    @pytest.mark.asyncio
    async def test_ban_with_expiration(self, test_client, seed):
        await seed.admin(1)
        await seed.user(2)

        response = await test_client.post(
            "/users/ban",
            json={"adminId": 1, "userId": 2, "expirationDate": "2030-01-01T00:00:00Z"},
        )

        assert response.status_code == 200
        assert response.json()["ban"]["expirationDate"].startswith("2030-01-01T00:00:00")

    @pytest.mark.asyncio
    async def test_non_admin_cannot_ban(self, test_client, seed):
        await seed.user(1)
        await seed.user(2)

        response = await test_client.post("/users/ban", json={"adminId": 1, "userId": 2})

        assert response.status_code == 401
        assert response.json()["message"] == "User is not authorized to perform this action."

    @pytest.mark.asyncio
    async def test_ban_unknown_user_is_404(self, test_client, seed):
        await seed.admin(1)

        response = await test_client.post("/users/ban", json={"adminId": 1, "userId": 99})

        assert response.status_code == 404


class TestAdminManagement:

    @pytest.mark.asyncio
    async def test_make_admin_preserves_ban_history(self, test_client, seed):
        await seed.admin(1)
        await seed.user(2)
        ban_id = await seed.ban(2, 1)

        response = await test_client.post("/users/makeAdmin", json={"adminId": 1, "userId": 2})

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["admin"] is True
        assert [b["id"] for b in user["bans"]] == [ban_id]

    @pytest.mark.asyncio
    async def test_promoted_admin_passes_admin_checks(self, test_client, seed):
        await seed.admin(1)
        await seed.user(2)
        await seed.user(3)
        await test_client.post("/users/makeAdmin", json={"adminId": 1, "userId": 2})

        response = await test_client.post("/users/ban", json={"adminId": 2, "userId": 3})

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_non_admin_cannot_promote(self, test_client, seed):
        await seed.user(1)
        await seed.user(2)

        response = await test_client.post("/users/makeAdmin", json={"adminId": 1, "userId": 2})

        assert response.status_code == 401


class TestUserRemoval:

    @pytest.mark.asyncio
    async def test_remove_user_deletes_their_content(self, test_client, seed):
        await seed.admin(1)
        await seed.user(2)
        await seed.user(3)
        plant_id = await seed.plant()
        own_photo = await seed.photo(plant_id, 2)
        other_photo = await seed.photo(plant_id, 3, minutes=1)
        await seed.vote(other_photo, 2, 1)
        report_id = await seed.report(other_photo, 2)
        await seed.ban(2, 1)

        response = await test_client.post("/users/remove", json={"adminId": 1, "userId": 2})

        assert response.status_code == 200
        assert response.json() == {}
        assert (await test_client.post("/users/byId", json={"userId": 2})).status_code == 404
        assert (
            await test_client.post("/photos/byId", json={"photoId": own_photo})
        ).status_code == 404
        assert (
            await test_client.post("/photoReports/byId", json={"photoReportId": report_id})
        ).status_code == 404

        remaining = (
            await test_client.post("/photos/byId", json={"photoId": other_photo})
        ).json()["photo"]
        assert remaining["upvoteIds"] == []

    @pytest.mark.asyncio
    async def test_remove_unknown_user_is_404(self, test_client, seed):
        await seed.admin(1)

        response = await test_client.post("/users/remove", json={"adminId": 1, "userId": 5})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_non_admin_cannot_remove(self, test_client, seed):
        await seed.user(1)
        await seed.user(2)

        response = await test_client.post("/users/remove", json={"adminId": 1, "userId": 2})

        assert response.status_code == 401
