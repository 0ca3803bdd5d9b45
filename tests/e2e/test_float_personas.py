"""
E2E tests for a month of float activity, driven through the API by each persona.

User personas:
- custodian: Holds the cash box, submits expenses and top-up requests
- accountant: Reviews and decides submissions
- admin: Registers staff roles and tunes the low balance threshold
"""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient


def _expense(client: TestClient, headers: dict, amount: str, description: str, on: date | None = None) -> int:
    response = client.post(
        "/v1/transactions",
        json={
            "date": (on or date.today()).isoformat(),
            "description": description,
            "amount": amount,
            "received_by": "Local vendor",
            "payment_method": "cash",
        },
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.integration
def test_month_of_float_activity(client: TestClient, headers):
    """
    Custodian spends, accountant approves in order, admin tops up the float.
    Expected: balances chain in approval order and the physical count reconciles
    """
    custodian, accountant, admin = headers["custodian"], headers["accountant"], headers["admin"]

    coffee = _expense(client, custodian, "-45.50", "Coffee beans")
    taxi = _expense(client, custodian, "-10.00", "Taxi to bank")
    lunch = _expense(client, custodian, "-30.00", "Team lunch")

    stats = client.get("/v1/transactions/stats", headers=custodian).json()
    assert stats["pending_count"] == 3
    assert Decimal(stats["current_balance"]) == 0

    # Approval order, not submission order, fixes the ledger
    assert client.patch(f"/v1/transactions/{taxi}/status", json={"status": "approved"}, headers=accountant).status_code == 200
    assert client.patch(f"/v1/transactions/{coffee}/status", json={"status": "approved"}, headers=accountant).status_code == 200
    rejected = client.patch(
        f"/v1/transactions/{lunch}/status",
        json={"status": "rejected", "comments": "Not a business expense"},
        headers=accountant,
    )
    assert rejected.json()["running_balance"] is None

    request_id = client.post(
        "/v1/replenishments",
        json={"requested_amount": "500.00", "reason": "Weekly top-up"},
        headers=custodian,
    ).json()["id"]
    topped_up = client.patch(f"/v1/replenishments/{request_id}/status", json={"status": "approved"}, headers=admin)
    assert Decimal(topped_up.json()["running_balance"]) == Decimal("444.50")

    ledger = client.get("/v1/ledger", headers=accountant).json()
    assert [Decimal(e["amount"]) for e in ledger["entries"]] == [Decimal("-10.00"), Decimal("-45.50"), Decimal("500.00")]
    assert [Decimal(e["running_balance"]) for e in ledger["entries"]] == [
        Decimal("-10.00"),
        Decimal("-55.50"),
        Decimal("444.50"),
    ]
    assert Decimal(ledger["month"]["replenishments"]) == Decimal("500.00")
    assert Decimal(ledger["month"]["opening_float"]) == Decimal("0.00")

    stats = client.get("/v1/transactions/stats", headers=custodian).json()
    assert stats["pending_count"] == 0
    assert stats["total_transactions"] == 3
    assert Decimal(stats["monthly_total"]) == Decimal("55.50")
    assert Decimal(stats["average_transaction"]) == Decimal("185.17")
    assert stats["is_low_balance"] is True

    count = client.post("/v1/reconciliation", json={"physical_count": "444.50"}, headers=custodian).json()
    assert count["balanced"] is True
    assert Decimal(count["variance"]) == 0


@pytest.mark.integration
def test_new_staff_member_onboarding(client: TestClient, headers):
    """
    A newcomer registers as a custodian and is promoted by the admin.
    Expected: decisions are refused until the promotion lands
    """
    newcomer = {"X-User-Id": "u_newcomer"}
    registered = client.post(
        "/v1/users",
        json={"email": "noor@example.com", "first_name": "Noor", "last_name": "Nash"},
        headers=newcomer,
    )
    assert registered.json()["role"] == "custodian"

    expense = _expense(client, headers["custodian"], "-8.25", "Postage")
    denied = client.patch(f"/v1/transactions/{expense}/status", json={"status": "approved"}, headers=newcomer)
    assert denied.status_code == 403

    client.patch("/v1/users/u_newcomer/role", json={"role": "accountant"}, headers=headers["admin"])
    approved = client.patch(f"/v1/transactions/{expense}/status", json={"status": "approved"}, headers=newcomer)

    assert approved.status_code == 200
    assert approved.json()["approved_by"] == "u_newcomer"
    assert Decimal(approved.json()["running_balance"]) == Decimal("-8.25")


@pytest.mark.integration
def test_admin_lowers_threshold_and_exports(client: TestClient, headers):
    """
    Admin lowers the low balance threshold; the accountant exports last month.
    Expected: stats stop flagging the float and the export only holds last month's rows
    """
    request_id = client.post(
        "/v1/replenishments",
        json={"requested_amount": "200.00", "reason": "Opening float"},
        headers=headers["custodian"],
    ).json()["id"]
    client.patch(f"/v1/replenishments/{request_id}/status", json={"status": "approved"}, headers=headers["accountant"])

    assert client.get("/v1/transactions/stats", headers=headers["custodian"]).json()["is_low_balance"] is True
    client.put("/v1/settings/low_balance_threshold", json={"value": "150"}, headers=headers["admin"])
    assert client.get("/v1/transactions/stats", headers=headers["custodian"]).json()["is_low_balance"] is False

    _expense(client, headers["custodian"], "-19.99", "Printer paper", on=date(2024, 2, 29))
    export = client.get(
        "/v1/export/transactions?start_date=2024-02-01&end_date=2024-02-29",
        headers=headers["accountant"],
    )
    rows = export.text.strip().split("\n")
    assert len(rows) == 2
    assert rows[1].startswith("2024-02-29,Printer paper,-19.99,")
