import pytest


async def _register(client, username: str, email: str | None = None) -> dict:
    response = await client.post(
        "/api/auth/register",
        json={"username": username, "password": "secret123", "email": email},
    )
    assert response.status_code == 201, response.text
    return response.json()


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin_token(api_client, admin) -> str:
    response = await api_client.post(
        "/api/auth/admin/login",
        json={"username": admin.username, "password": "secret123"},
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["is_super_admin"] is True
    return body["access_token"]


@pytest.fixture
async def funded_alice(api_client, admin_token) -> dict:
    alice = await _register(api_client, "alice", "alice@example.com")
    response = await api_client.post(
        "/api/admin/commands",
        json={
            "action": "adjust_balance",
            "account_id": alice["account_id"],
            "delta_cents": 100_00,
            "reason": "opening balance",
        },
        headers=_auth(admin_token),
    )
    assert response.status_code == 200, response.text
    assert response.json()["data"]["balance_cents"] == 100_00
    return alice


async def test_health(api_client):
    response = await api_client.get("/health")

    assert response.status_code == 200
    assert response.json()["services"]["database"] == "healthy"


async def test_register_rejects_duplicate_username(api_client):
    await _register(api_client, "alice")

    response = await api_client.post("/api/auth/register", json={"username": "alice", "password": "secret123"})

    assert response.status_code == 400
    assert "alice" in response.json()["error"]


async def test_login_with_wrong_password(api_client):
    await _register(api_client, "alice")

    response = await api_client.post("/api/auth/login", json={"username": "alice", "password": "wrong-pass"})

    assert response.status_code == 401


async def test_transfer_and_settlement_flow(api_client, admin_token, funded_alice):
    bob = await _register(api_client, "bob", "bob@example.com")
    alice_headers = _auth(funded_alice["access_token"])

    sent = await api_client.post(
        "/api/customer/transfers",
        json={"recipient": "bob", "amount_cents": 25_00, "note": "tickets"},
        headers=alice_headers,
    )
    assert sent.status_code == 201, sent.text
    transaction_id = sent.json()["transaction_id"]
    assert sent.json()["balance_cents"] == 75_00

    pending = await api_client.get(
        "/api/admin/transactions",
        params={"status": "pending"},
        headers=_auth(admin_token),
    )
    assert [row["id"] for row in pending.json()["transactions"]] == [transaction_id]
    assert pending.json()["transactions"][0]["owner_username"] == "alice"

    settled = await api_client.post(
        "/api/admin/transactions/settle",
        json={"transactionId": transaction_id, "targetStatus": "completed", "reasonNote": "verified"},
        headers=_auth(admin_token),
    )
    assert settled.status_code == 200, settled.text
    body = settled.json()
    assert body["success"] is True
    assert body["status"] == "completed"
    assert body["match_strategy"] == "linked"
    assert body["credited_account_id"] == bob["account_id"]

    wallet = await api_client.get("/api/customer/wallet", headers=_auth(bob["access_token"]))
    assert wallet.json()["balance_cents"] == 25_00

    history = await api_client.get("/api/customer/transactions", headers=alice_headers)
    transfer_row = next(row for row in history.json()["transactions"] if row["id"] == transaction_id)
    assert transfer_row["status"] == "completed"
    assert transfer_row["note"] == "tickets\nverified"

    replay = await api_client.post(
        "/api/admin/transactions/settle",
        json={"transactionId": transaction_id, "targetStatus": "completed"},
        headers=_auth(admin_token),
    )
    assert replay.json()["replayed"] is True

    runs = await api_client.get("/api/admin/settlements", headers=_auth(admin_token))
    [run] = runs.json()
    assert run["state"] == "done"
    detail = await api_client.get(f"/api/admin/settlements/{run['id']}", headers=_auth(admin_token))
    assert detail.json()["events"][0]["to_state"] == "initiated"

    stats = await api_client.get("/api/admin/stats", headers=_auth(admin_token))
    assert stats.json()["completed_transactions"] == 2
    assert stats.json()["total_balance_cents"] == 100_00


async def test_settle_errors_are_rendered_as_error_payload(api_client, admin_token, funded_alice):
    missing = await api_client.post(
        "/api/admin/transactions/settle",
        json={"transactionId": "nope", "targetStatus": "completed"},
        headers=_auth(admin_token),
    )
    assert missing.status_code == 404
    assert missing.json() == {"error": "transaction not found: nope"}

    await _register(api_client, "bob")
    sent = await api_client.post(
        "/api/customer/transfers",
        json={"recipient": "bob", "amount_cents": 5_00},
        headers=_auth(funded_alice["access_token"]),
    )
    invalid = await api_client.post(
        "/api/admin/transactions/settle",
        json={"transactionId": sent.json()["transaction_id"], "targetStatus": "approved"},
        headers=_auth(admin_token),
    )
    assert invalid.status_code == 400
    assert "error" in invalid.json()


async def test_insufficient_funds_is_a_bad_request(api_client, funded_alice):
    await _register(api_client, "bob")

    response = await api_client.post(
        "/api/customer/transfers",
        json={"recipient": "bob", "amount_cents": 100_01},
        headers=_auth(funded_alice["access_token"]),
    )

    assert response.status_code == 400
    assert response.json()["error"].startswith("insufficient funds")


async def test_customer_cannot_use_admin_endpoints(api_client):
    alice = await _register(api_client, "alice")

    response = await api_client.get("/api/admin/transactions", headers=_auth(alice["access_token"]))

    assert response.status_code == 403


async def test_freeze_command_blocks_transfers(api_client, admin_token, funded_alice):
    await _register(api_client, "bob")
    frozen = await api_client.post(
        "/api/admin/commands",
        json={"action": "freeze_wallet", "account_id": funded_alice["account_id"], "reason": "review"},
        headers=_auth(admin_token),
    )
    assert frozen.json()["data"] == {"is_frozen": True}

    response = await api_client.post(
        "/api/customer/transfers",
        json={"recipient": "bob", "amount_cents": 1_00},
        headers=_auth(funded_alice["access_token"]),
    )
    assert response.status_code == 400

    logs = await api_client.get(
        "/api/admin/activity-logs",
        params={"action": "freeze_wallet"},
        headers=_auth(admin_token),
    )
    assert logs.json()[0]["target_id"] == funded_alice["account_id"]


async def test_unknown_command_action_is_rejected(api_client, admin_token):
    response = await api_client.post(
        "/api/admin/commands",
        json={"action": "drop_tables"},
        headers=_auth(admin_token),
    )

    assert response.status_code == 422


async def test_topup_review_flow(api_client, admin_token):
    alice = await _register(api_client, "alice")
    created = await api_client.post(
        "/api/customer/topups",
        json={"amount_cents": 30_00, "payment_channel": "card"},
        headers=_auth(alice["access_token"]),
    )
    assert created.status_code == 201
    order_id = created.json()["id"]

    reviewed = await api_client.post(
        f"/api/admin/topups/{order_id}/review",
        json={"decision": "approve"},
        headers=_auth(admin_token),
    )
    assert reviewed.json()["status"] == "success"

    again = await api_client.post(
        f"/api/admin/topups/{order_id}/review",
        json={"decision": "reject"},
        headers=_auth(admin_token),
    )
    assert again.status_code == 400

    wallet = await api_client.get("/api/customer/wallet", headers=_auth(alice["access_token"]))
    assert wallet.json()["balance_cents"] == 30_00


async def test_super_admin_manages_accounts(api_client, admin_token):
    created = await api_client.post(
        "/api/admin/accounts",
        json={"username": "support1", "password": "secret123", "role": "admin"},
        headers=_auth(admin_token),
    )
    assert created.status_code == 201, created.text

    updated = await api_client.patch(
        f"/api/admin/accounts/{created.json()['id']}",
        json={"is_active": False},
        headers=_auth(admin_token),
    )
    assert updated.json()["is_active"] is False

    listed = await api_client.get("/api/admin/accounts", headers=_auth(admin_token))
    assert {row["username"] for row in listed.json()} == {"ops_admin", "support1"}


async def test_verify_account_command(api_client, admin_token):
    alice = await _register(api_client, "alice")

    response = await api_client.post(
        "/api/admin/commands",
        json={"action": "verify_account", "account_id": alice["account_id"]},
        headers=_auth(admin_token),
    )
    assert response.status_code == 200, response.text
    assert response.json()["data"] == {"is_verified": True}

    listed = await api_client.get("/api/admin/accounts", headers=_auth(admin_token))
    verified = {row["username"]: row["is_verified"] for row in listed.json()}
    assert verified == {"ops_admin": False, "alice": True}
