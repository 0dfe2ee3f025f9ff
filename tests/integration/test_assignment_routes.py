"""Integration tests for the assignment and case pool endpoints."""

from __future__ import annotations

import pytest
from fastapi import status
from httpx import AsyncClient
from src.core.auth import Role
from src.domain.errors import PersistenceError
from src.domain.services.allocation import AllocationService

from tests.utils import auth_headers


class TestManualAssignment:
    @pytest.mark.asyncio
    async def test_admin_assigns_and_duplicates_are_filtered(
        self, async_client: AsyncClient, admin_headers: dict, seed_cases, seed_user
    ) -> None:
        first, second = await seed_cases(2)
        user_id = await seed_user()
        await async_client.post(
            "/assignments", json={"user_id": user_id, "case_ids": [first]}, headers=admin_headers
        )

        response = await async_client.post(
            "/assignments",
            json={"user_id": user_id, "case_ids": [first, second, "missing"]},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["assigned"] == 1
        assert data["assigned_case_ids"] == [second]
        assert data["already_assigned"] == [first]
        assert data["unknown_case_ids"] == ["missing"]

    @pytest.mark.asyncio
    async def test_unknown_user_returns_404(
        self, async_client: AsyncClient, admin_headers: dict, seed_cases
    ) -> None:
        (case_id,) = await seed_cases(1)

        response = await async_client.post(
            "/assignments",
            json={"user_id": "ghost", "case_ids": [case_id]},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_reviewer_cannot_assign(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/assignments",
            json={"user_id": "someone", "case_ids": ["c1"]},
            headers=auth_headers(role=Role.REVIEWER),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestTopUp:
    @pytest.mark.asyncio
    async def test_top_up_is_idempotent(
        self, async_client: AsyncClient, admin_headers: dict, seed_cases, seed_user
    ) -> None:
        await seed_cases(30)
        user_id = await seed_user()

        first = await async_client.post(
            "/assignments/top-up",
            json={"user_id": user_id, "target_count": 12},
            headers=admin_headers,
        )
        second = await async_client.post(
            "/assignments/top-up",
            json={"user_id": user_id, "target_count": 12},
            headers=admin_headers,
        )

        assert first.status_code == status.HTTP_200_OK
        assert first.json() == {"user_id": user_id, "assigned": 12}
        assert second.json()["assigned"] == 0

    @pytest.mark.asyncio
    async def test_top_up_unknown_user_returns_404(
        self, async_client: AsyncClient, admin_headers: dict
    ) -> None:
        response = await async_client.post(
            "/assignments/top-up", json={"user_id": "ghost"}, headers=admin_headers
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_storage_failure_returns_503(
        self,
        async_client: AsyncClient,
        admin_headers: dict,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        async def failing_top_up(self, user_id, target_count=None):
            raise PersistenceError("Storage failure: OperationalError")

        monkeypatch.setattr(AllocationService, "top_up", failing_top_up)

        response = await async_client.post(
            "/assignments/top-up", json={"user_id": "u1"}, headers=admin_headers
        )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert "Storage failure" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_negative_target_rejected(
        self, async_client: AsyncClient, admin_headers: dict
    ) -> None:
        response = await async_client.post(
            "/assignments/top-up",
            json={"user_id": "u1", "target_count": -1},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestRebalance:
    @pytest.mark.asyncio
    async def test_rebalance_tops_up_every_user(
        self, async_client: AsyncClient, admin_headers: dict, seed_cases, seed_user
    ) -> None:
        await seed_cases(50)
        users = [await seed_user(f"r{index}@example.com") for index in range(2)]

        response = await async_client.post(
            "/assignments/rebalance",
            json={"min_target": 20, "max_target": 25},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["users_processed"] == 2
        assert data["failures"] == []
        assert set(data["assigned"]) == set(users)
        assert all(20 <= count <= 25 for count in data["assigned"].values())
        assert data["total_assigned"] == sum(data["assigned"].values())

    @pytest.mark.asyncio
    async def test_inverted_range_rejected(
        self, async_client: AsyncClient, admin_headers: dict
    ) -> None:
        response = await async_client.post(
            "/assignments/rebalance",
            json={"min_target": 25, "max_target": 20},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestListings:
    @pytest.mark.asyncio
    async def test_admin_lists_all_and_reviewer_lists_own(
        self, async_client: AsyncClient, admin_headers: dict, seed_cases, seed_user
    ) -> None:
        first, second, third = await seed_cases(3)
        alice = await seed_user("alice@example.com")
        bob = await seed_user("bob@example.com")
        await async_client.post(
            "/assignments", json={"user_id": alice, "case_ids": [first, second]},
            headers=admin_headers,
        )
        await async_client.post(
            "/assignments", json={"user_id": bob, "case_ids": [third]}, headers=admin_headers
        )

        everything = await async_client.get("/assignments", headers=admin_headers)
        mine = await async_client.get("/assignments/me", headers=auth_headers(alice))

        assert everything.status_code == status.HTTP_200_OK
        assert len(everything.json()) == 3
        assert mine.status_code == status.HTTP_200_OK
        rows = mine.json()
        assert {row["case_id"] for row in rows} == {first, second}
        assert all(row["case"]["id"] == row["case_id"] for row in rows)

    @pytest.mark.asyncio
    async def test_reviewer_cannot_list_all(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/assignments", headers=auth_headers())

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestCases:
    @pytest.mark.asyncio
    async def test_list_and_get_cases(self, async_client: AsyncClient, seed_cases) -> None:
        case_ids = await seed_cases(4)
        headers = auth_headers()

        listing = await async_client.get("/cases?limit=3", headers=headers)
        single = await async_client.get(f"/cases/{case_ids[0]}", headers=headers)
        missing = await async_client.get("/cases/not-a-case", headers=headers)

        assert listing.status_code == status.HTTP_200_OK
        assert listing.json()["total"] == 4
        assert len(listing.json()["items"]) == 3
        assert single.json()["id"] == case_ids[0]
        assert missing.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_cases_require_token(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/cases")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
