"""
Tests for the /photoReports/* endpoints.

Covers filing reports, the three moderation actions, the one-way
unhandled → handled transition, listing filters and admin gating.
"""

import pytest

from greenthumb.exceptions import DatabaseError
from greenthumb.services.database_interface import DatabaseInterface


async def _arrange(seed):
    """Admin 1, uploader 2, reporter 3, one photo by 2, one report by 3."""
    await seed.admin(1)
    await seed.user(2)
    await seed.user(3)
    plant_id = await seed.plant()
    photo_id = await seed.photo(plant_id, 2)
    report_id = await seed.report(photo_id, 3)
    return plant_id, photo_id, report_id


class TestFilingReports:

    @pytest.mark.asyncio
    async def test_add_report_starts_unhandled(self, test_client, seed):
        await seed.user(1)
        await seed.user(2)
        plant_id = await seed.plant()
        photo_id = await seed.photo(plant_id, 1)

        response = await test_client.post(
            "/photoReports/add",
            json={"userId": 2, "photoId": photo_id, "reportText": "Blurry and off-topic"},
        )

        assert response.status_code == 200
        report = response.json()["photoReport"]
        assert report["photoId"] == photo_id
        assert report["userId"] == 2
        assert report["reportText"] == "Blurry and off-topic"
        assert report["reportDate"]
        assert report["adminAction"] is None
        assert report["adminId"] is None
        assert report["handleDate"] is None

    @pytest.mark.asyncio
    async def test_report_on_unknown_photo_is_404(self, test_client, seed):
        await seed.user(1)

        response = await test_client.post(
            "/photoReports/add", json={"userId": 1, "photoId": 12, "reportText": "spam"}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_empty_report_text_rejected(self, test_client):
        response = await test_client.post(
            "/photoReports/add", json={"userId": 1, "photoId": 1, "reportText": ""}
        )

        assert response.status_code == 400
        assert response.json()["message"] == (
            "Parameter 'reportText' must be a non-empty String."
        )

    @pytest.mark.asyncio
    async def test_banned_reporter_rejected(self, test_client, seed):
        _, photo_id, _ = await _arrange(seed)
        await seed.ban(3, 1)

        response = await test_client.post(
            "/photoReports/add", json={"userId": 3, "photoId": photo_id, "reportText": "spam"}
        )

        assert response.status_code == 401


class TestHandlingReports:

    @pytest.mark.asyncio
    async def test_dismiss_keeps_photo(self, test_client, seed):
        _, photo_id, report_id = await _arrange(seed)

        response = await test_client.post(
            "/photoReports/handle",
            json={"photoReportId": report_id, "adminId": 1, "adminAction": 0},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["photoReport"]["adminAction"] == 0
        assert body["photoReport"]["adminId"] == 1
        assert body["photoReport"]["handleDate"] is not None
        assert body["ban"] is None
        assert (
            await test_client.post("/photos/byId", json={"photoId": photo_id})
        ).status_code == 200

    @pytest.mark.asyncio
    async def test_remove_photo_keeps_handled_report(self, test_client, seed):
        _, photo_id, report_id = await _arrange(seed)

        response = await test_client.post(
            "/photoReports/handle",
            json={"photoReportId": report_id, "adminId": 1, "adminAction": 1},
        )

        assert response.status_code == 200
        assert (
            await test_client.post("/photos/byId", json={"photoId": photo_id})
        ).status_code == 404

        report = await test_client.post("/photoReports/byId", json={"photoReportId": report_id})
        assert report.status_code == 200
        assert report.json()["photoReport"]["photoId"] == photo_id
        assert report.json()["photoReport"]["adminAction"] == 1

    @pytest.mark.asyncio
    async def test_remove_and_ban_uploader(self, test_client, seed):
        plant_id, photo_id, report_id = await _arrange(seed)

        response = await test_client.post(
            "/photoReports/handle",
            json={
                "photoReportId": report_id,
                "adminId": 1,
                "adminAction": 2,
                "banExpirationDate": "2099-06-01T00:00:00Z",
            },
        )

        assert response.status_code == 200
        ban = response.json()["ban"]
        assert ban["userId"] == 2
        assert ban["adminId"] == 1
        assert ban["expirationDate"].startswith("2099-06-01T00:00:00")

        user = (await test_client.post("/users/byId", json={"userId": 2})).json()["user"]
        assert [b["id"] for b in user["bans"]] == [ban["id"]]

        upload = await test_client.post(
            "/photos/add", json={"userId": 2, "plantId": plant_id, "image": "again"}
        )
        assert upload.status_code == 401

    @pytest.mark.asyncio
    async def test_ban_without_expiration_is_permanent(self, test_client, seed):
        _, _, report_id = await _arrange(seed)

        response = await test_client.post(
            "/photoReports/handle",
            json={"photoReportId": report_id, "adminId": 1, "adminAction": 2},
        )

        assert response.json()["ban"]["expirationDate"] is None

    @pytest.mark.asyncio
    async def test_failed_ban_rolls_back_whole_handling(self, test_client, seed, monkeypatch):
        _, photo_id, report_id = await _arrange(seed)

        async def failing_add_ban(self, ban):
            raise DatabaseError()

        monkeypatch.setattr(DatabaseInterface, "add_ban", failing_add_ban)

        response = await test_client.post(
            "/photoReports/handle",
            json={"photoReportId": report_id, "adminId": 1, "adminAction": 2},
        )

        assert response.status_code == 500
        assert (
            await test_client.post("/photos/byId", json={"photoId": photo_id})
        ).status_code == 200
        report = await test_client.post("/photoReports/byId", json={"photoReportId": report_id})
        assert report.json()["photoReport"]["adminAction"] is None
        assert report.json()["photoReport"]["handleDate"] is None

    @pytest.mark.asyncio
    async def test_handling_twice_rejected(self, test_client, seed):
        _, _, report_id = await _arrange(seed)
        body = {"photoReportId": report_id, "adminId": 1, "adminAction": 0}
        await test_client.post("/photoReports/handle", json=body)

        response = await test_client.post("/photoReports/handle", json=body)

        assert response.status_code == 400
        assert "already been handled" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_non_admin_cannot_handle(self, test_client, seed):
        _, photo_id, report_id = await _arrange(seed)

        response = await test_client.post(
            "/photoReports/handle",
            json={"photoReportId": report_id, "adminId": 3, "adminAction": 1},
        )

        assert response.status_code == 401
        assert (
            await test_client.post("/photos/byId", json={"photoId": photo_id})
        ).status_code == 200

    @pytest.mark.asyncio
    async def test_invalid_action_rejected(self, test_client):
        response = await test_client.post(
            "/photoReports/handle",
            json={"photoReportId": 1, "adminId": 1, "adminAction": 3},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Parameter 'adminAction' is invalid."

    @pytest.mark.asyncio
    async def test_unknown_report_is_404(self, test_client, seed):
        await seed.admin(1)

        response = await test_client.post(
            "/photoReports/handle",
            json={"photoReportId": 40, "adminId": 1, "adminAction": 0},
        )

        assert response.status_code == 404


class TestListingReports:

    async def _arrange_many(self, seed):
        await seed.admin(1)
        await seed.admin(4)
        await seed.user(2)
        await seed.user(3)
        plant_id = await seed.plant()
        photo_id = await seed.photo(plant_id, 2)
        first = await seed.report(photo_id, 3, minutes=0)
        second = await seed.report(photo_id, 3, minutes=5)
        third = await seed.report(photo_id, 3, minutes=10)
        return first, second, third

    async def _list(self, test_client, **extra):
        body = {"adminId": 1, "startIndex": 0, "max": 10, **extra}
        return await test_client.post("/photoReports/list/byDate", json=body)

    @pytest.mark.asyncio
    async def test_all_reports_oldest_first(self, test_client, seed):
        first, second, third = await self._arrange_many(seed)

        response = await self._list(test_client)

        assert response.status_code == 200
        assert [r["id"] for r in response.json()["photoReports"]] == [first, second, third]

    @pytest.mark.asyncio
    async def test_unhandled_only_and_handled_by(self, test_client, seed):
        first, second, third = await self._arrange_many(seed)
        await test_client.post(
            "/photoReports/handle",
            json={"photoReportId": second, "adminId": 4, "adminAction": 0},
        )

        unhandled = await self._list(test_client, unhandledOnly=True)
        by_admin_4 = await self._list(test_client, handledBy=4)
        by_admin_1 = await self._list(test_client, handledBy=1)

        assert [r["id"] for r in unhandled.json()["photoReports"]] == [first, third]
        assert [r["id"] for r in by_admin_4.json()["photoReports"]] == [second]
        assert by_admin_1.json()["photoReports"] == []

    @pytest.mark.asyncio
    async def test_handled_by_with_unhandled_only_rejected(self, test_client, seed):
        await seed.admin(1)

        response = await self._list(test_client, handledBy=1, unhandledOnly=True)

        assert response.status_code == 400
        assert response.json()["message"] == (
            "Parameter 'unhandledOnly' must be false if parameter 'handledBy' is not undefined."
        )

    @pytest.mark.asyncio
    async def test_non_admin_cannot_list(self, test_client, seed):
        await seed.user(1)

        response = await self._list(test_client)

        assert response.status_code == 401


class TestRemovingReports:

    @pytest.mark.asyncio
    async def test_admin_removes_report(self, test_client, seed):
        _, _, report_id = await _arrange(seed)

        response = await test_client.post(
            "/photoReports/remove", json={"photoReportId": report_id, "adminId": 1}
        )

        assert response.status_code == 200
        assert (
            await test_client.post("/photoReports/byId", json={"photoReportId": report_id})
        ).status_code == 404

    @pytest.mark.asyncio
    async def test_non_admin_cannot_remove(self, test_client, seed):
        _, _, report_id = await _arrange(seed)

        response = await test_client.post(
            "/photoReports/remove", json={"photoReportId": report_id, "adminId": 3}
        )

        assert response.status_code == 401
