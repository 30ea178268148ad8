import pytest

USER = {"X-User-Id": "user-1"}
ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}

WITHDRAWAL = {
    "amount": 5000,
    "bank_name": "State Bank",
    "account_number": "123456789012",
    "ifsc_code": "sbin0001234",
    "account_holder_name": "Asha Rao",
}


@pytest.fixture
def pending_id(client, fund):
    fund("user-1", balance=7000)
    response = client.post("/api/v1/withdrawals", json=WITHDRAWAL, headers=USER)
    assert response.status_code == 201
    return response.json()["id"]


def test_submit_masks_account(client, pending_id):
    listing = client.get("/api/v1/withdrawals", headers=USER).json()

    assert listing["total_count"] == 1
    item = listing["withdrawals"][0]
    assert item["id"] == pending_id
    assert item["account_number_masked"].endswith("9012")
    assert "account_number" not in item


def test_submit_below_minimum(client, fund):
    fund("user-1", balance=7000)

    response = client.post("/api/v1/withdrawals", json={**WITHDRAWAL, "amount": 100}, headers=USER)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "LEDGER_BELOW_MINIMUM"


def test_admin_role_required(client, pending_id):
    response = client.post(
        f"/api/v1/admin/withdrawals/{pending_id}/approve", json={}, headers=USER
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "AUTH_002"


def test_approve_then_conflict(client, pending_id):
    approved = client.post(
        f"/api/v1/admin/withdrawals/{pending_id}/approve",
        json={"admin_notes": "paid via NEFT"},
        headers=ADMIN,
    )
    again = client.post(f"/api/v1/admin/withdrawals/{pending_id}/reject", json={}, headers=ADMIN)
    wallet = client.get("/api/v1/wallet", headers=USER).json()

    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "WITHDRAWAL_STATUS"
    assert wallet["balance"] == 2000
    assert wallet["total_withdrawn"] == 5000


def test_list_pending_and_integrity(client, pending_id):
    pending = client.get("/api/v1/admin/withdrawals", params={"status": "pending"}, headers=ADMIN)
    integrity = client.get("/api/v1/admin/integrity/user-1", headers=ADMIN)

    assert [item["id"] for item in pending.json()["withdrawals"]] == [pending_id]
    assert integrity.json()["status"] == "OK"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "ok"}
