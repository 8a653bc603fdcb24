"""Tests for group and membership endpoints."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.services import group_services


def plan(client: TestClient, group_id: int) -> list[tuple[int, int, Decimal]]:
    res = client.get(f"/api/v1/settlements/{group_id}")
    assert res.status_code == 200, res.text
    return [(d["from_user"], d["to_user"], Decimal(d["amount"])) for d in res.json()]


def add_expense(client: TestClient, group_id: int, amount, paid_by: int, beneficiaries=()) -> dict:
    res = client.post(
        f"/api/v1/expenses/{group_id}/add",
        json={
            "title": "Dinner",
            "amount": str(amount),
            "paid_by": paid_by,
            "beneficiaries": list(beneficiaries),
        },
    )
    assert res.status_code == 201, res.text
    return res.json()


class TestCreateGroup:
    def test_creator_becomes_member(self, client: TestClient) -> None:
        res = client.post("/api/v1/groups/", json={"name": "Flat 4B", "created_by": 10})
        assert res.status_code == 201
        body = res.json()
        assert body["name"] == "Flat 4B"
        assert body["created_by"] == 10
        assert body["currency"] == "INR"

        detail = client.get(f"/api/v1/groups/{body['id']}").json()
        assert detail["members"] == [10]
        assert detail["debts"] == []

    def test_empty_name_rejected(self, client: TestClient) -> None:
        res = client.post("/api/v1/groups/", json={"name": "", "created_by": 10})
        assert res.status_code == 422

    def test_missing_group_is_404(self, client: TestClient) -> None:
        assert client.get("/api/v1/groups/999").status_code == 404


class TestListGroups:
    def test_only_groups_the_user_belongs_to(self, client: TestClient, make_group) -> None:
        trip = make_group(1, 2, name="Trip")
        flat = make_group(2, 3, name="Flat")
        make_group(4, name="Solo")

        ids = [g["id"] for g in client.get("/api/v1/groups/", params={"user_id": 2}).json()]
        assert sorted(ids) == sorted([trip, flat])

        assert client.get("/api/v1/groups/", params={"user_id": 99}).json() == []


class TestMembership:
    def test_roster_in_join_order(self, client: TestClient, make_group) -> None:
        group_id = make_group(5, 3, 8)
        assert client.get(f"/api/v1/groups/{group_id}").json()["members"] == [5, 3, 8]

    def test_duplicate_member_rejected(self, client: TestClient, make_group) -> None:
        group_id = make_group(1, 2)
        res = client.post(f"/api/v1/groups/{group_id}/members", json={"user_id": 2})
        assert res.status_code == 400

    def test_duplicate_member_caught_by_unique_constraint(
        self, client: TestClient, make_group, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        group_id = make_group(1, 2)

        # roster read comes back stale, as it would when two adds race
        async def stale_roster(db, gid):
            return [1]

        monkeypatch.setattr(group_services, "fetch_roster", stale_roster)
        res = client.post(f"/api/v1/groups/{group_id}/members", json={"user_id": 2})

        assert res.status_code == 400
        assert res.json() == {"detail": "User already in group"}
        monkeypatch.undo()
        assert client.get(f"/api/v1/groups/{group_id}").json()["members"] == [1, 2]

    def test_adding_member_to_missing_group(self, client: TestClient) -> None:
        res = client.post("/api/v1/groups/42/members", json={"user_id": 2})
        assert res.status_code == 404

    def test_new_member_joins_even_splits(self, client: TestClient, make_group) -> None:
        group_id = make_group(1, 2)
        add_expense(client, group_id, 90, paid_by=1)
        assert plan(client, group_id) == [(2, 1, Decimal("45"))]

        client.post(f"/api/v1/groups/{group_id}/members", json={"user_id": 3})
        assert plan(client, group_id) == [(2, 1, Decimal("30")), (3, 1, Decimal("30"))]

    def test_leaving_member_drops_out_of_even_splits(self, client: TestClient, make_group) -> None:
        group_id = make_group(1, 2, 3)
        add_expense(client, group_id, 90, paid_by=1)

        res = client.delete(f"/api/v1/groups/{group_id}/members/3")
        assert res.status_code == 200
        assert plan(client, group_id) == [(2, 1, Decimal("45"))]

    def test_leaving_member_keeps_explicit_debts(self, client: TestClient, make_group) -> None:
        group_id = make_group(1, 2, 3)
        add_expense(client, group_id, 60, paid_by=1, beneficiaries=[2, 3])

        client.delete(f"/api/v1/groups/{group_id}/members/3")
        assert client.get(f"/api/v1/groups/{group_id}").json()["members"] == [1, 2]
        assert plan(client, group_id) == [(2, 1, Decimal("30")), (3, 1, Decimal("30"))]

    def test_creator_leaving_hands_over_group(self, client: TestClient, make_group) -> None:
        group_id = make_group(1, 2, 3)
        client.delete(f"/api/v1/groups/{group_id}/members/1")
        assert client.get(f"/api/v1/groups/{group_id}").json()["created_by"] == 2

    def test_last_member_leaving_clears_plan(self, client: TestClient, make_group) -> None:
        group_id = make_group(1, 2)
        add_expense(client, group_id, 50, paid_by=1)

        client.delete(f"/api/v1/groups/{group_id}/members/2")
        client.delete(f"/api/v1/groups/{group_id}/members/1")
        detail = client.get(f"/api/v1/groups/{group_id}").json()
        assert detail["members"] == []
        assert detail["debts"] == []

    def test_removing_non_member(self, client: TestClient, make_group) -> None:
        group_id = make_group(1, 2)
        assert client.delete(f"/api/v1/groups/{group_id}/members/7").status_code == 404


class TestDeleteGroup:
    def test_removes_group_and_expenses(self, client: TestClient, make_group) -> None:
        group_id = make_group(1, 2)
        expense = add_expense(client, group_id, 50, paid_by=1)

        res = client.delete(f"/api/v1/groups/{group_id}")
        assert res.status_code == 200

        assert client.get(f"/api/v1/groups/{group_id}").status_code == 404
        assert client.get(f"/api/v1/expenses/{expense['id']}").status_code == 404
        assert client.get(f"/api/v1/settlements/{group_id}").status_code == 404

    def test_missing_group(self, client: TestClient) -> None:
        assert client.delete("/api/v1/groups/5").status_code == 404
