"""
Integration tests for the Core Ledger API
Tests end-to-end workflows using FastAPI TestClient
"""

import pytest
from fastapi.testclient import TestClient

from core_ledger.api import create_app
from core_ledger.bank import Bank


@pytest.fixture
def bank(clock, make_config):
    return Bank(config=make_config(), clock=clock, seed_demo=False)


@pytest.fixture
def client(bank):
    """Test client around a fresh, empty bank"""
    return TestClient(create_app(bank))


def register(client, client_id="DNI001", name="Juan Pérez", email="juan@email.com", tier="premium"):
    r = client.post("/clients", json={"client_id": client_id, "name": name, "email": email, "tier": tier})
    assert r.status_code == 201
    return client_id


def open_account(client, client_id, account_type, initial_balance="0"):
    r = client.post("/accounts", json={
        "client_id": client_id,
        "account_type": account_type,
        "initial_balance": initial_balance
    })
    assert r.status_code == 201
    return r.json()["account_number"]


class TestHealthEndpoints:
    """Test basic health and root endpoints"""

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"

    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        data = r.json()
        assert data["name"] == "Core Ledger API"
        assert "endpoints" in data


class TestClientFlow:
    """End-to-end client management tests"""

    def test_register_client(self, client):
        register(client)

        r = client.get("/clients/DNI001")
        assert r.status_code == 200
        data = r.json()
        assert data["name"] == "Juan Pérez"
        assert data["tier"] == "premium"
        assert data["accounts"] == []

    def test_duplicate_client(self, client):
        register(client)
        r = client.post("/clients", json={"client_id": "DNI001", "name": "Other", "email": "o@email.com"})
        assert r.status_code == 409
        assert r.json()["detail"]["error"] == "DuplicateClientId"

    def test_unknown_client(self, client):
        r = client.get("/clients/nobody")
        assert r.status_code == 404
        assert r.json()["detail"]["error"] == "ClientNotFound"

    def test_invalid_email(self, client):
        r = client.post("/clients", json={"client_id": "X1", "name": "Ana", "email": "nope"})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "InvalidClientData"

    def test_list_clients(self, client):
        register(client)
        register(client, "DNI002", "María García", "maria@email.com", "regular")

        r = client.get("/clients")
        assert [c["client_id"] for c in r.json()["clients"]] == ["DNI001", "DNI002"]


class TestAccountFlow:
    """Account opening, lookup and lifecycle"""

    def test_open_account(self, client):
        client_id = register(client)
        number = open_account(client, client_id, "savings", "1000.00")
        assert number == "ES00001000"

        r = client.get(f"/accounts/{number}")
        assert r.status_code == 200
        data = r.json()
        assert data["account_type"] == "savings"
        assert data["balance"] == "1000.00"
        assert data["state"] == "active"

        r = client.get(f"/clients/{client_id}")
        assert [a["account_number"] for a in r.json()["accounts"]] == [number]

    def test_invalid_variant(self, client):
        client_id = register(client)
        r = client.post("/accounts", json={"client_id": client_id, "account_type": "pension"})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "InvalidVariant"

    def test_unknown_account(self, client):
        r = client.get("/accounts/ES99999999")
        assert r.status_code == 404
        assert r.json()["detail"]["error"] == "AccountNotFound"

    def test_change_state(self, client):
        number = open_account(client, register(client), "checking", "100")

        r = client.put(f"/accounts/{number}/state", json={"state": "blocked", "reason": "review"})
        assert r.status_code == 200
        assert r.json()["state"] == "blocked"

        r = client.post(f"/operations/{number}/deposit", json={"amount": "10"})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "AccountNotActive"

    def test_closed_is_terminal(self, client):
        number = open_account(client, register(client), "checking")
        client.put(f"/accounts/{number}/state", json={"state": "closed"})

        r = client.put(f"/accounts/{number}/state", json={"state": "active"})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "InvalidStateTransition"


class TestOperationsFlow:
    """Deposits, withdrawals, transfers and the monthly cycle"""

    def test_deposit_and_withdraw(self, client):
        number = open_account(client, register(client), "savings", "100")

        r = client.post(f"/operations/{number}/deposit", json={"amount": "50.25"})
        assert r.status_code == 200
        assert r.json()["balance"] == "150.25"
        assert r.json()["transaction"]["kind"] == "deposit"

        r = client.post(f"/operations/{number}/withdraw", json={"amount": "25.25"})
        assert r.status_code == 200
        assert r.json()["balance"] == "125.00"

        r = client.get(f"/accounts/{number}/transactions")
        kinds = [t["kind"] for t in r.json()["transactions"]]
        assert kinds == ["deposit", "withdrawal"]

    @pytest.mark.parametrize("amount,error", [
        ("0", "InvalidAmount"),
        ("-5", "InvalidAmount"),
        ("abc", "InvalidAmount"),
        ("600", "DailyLimitExceeded"),
        ("200", "InsufficientFunds"),
    ])
    def test_rejected_withdrawal(self, client, amount, error):
        number = open_account(client, register(client), "savings", "100")

        r = client.post(f"/operations/{number}/withdraw", json={"amount": amount})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == error

    @pytest.mark.parametrize("amount", ["1e27", "99999999999999999999999999"])
    def test_oversized_deposit_rejected(self, client, amount):
        number = open_account(client, register(client), "savings", "100")

        r = client.post(f"/operations/{number}/deposit", json={"amount": amount})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "InvalidAmount"
        assert client.get(f"/accounts/{number}").json()["balance"] == "100.00"

    def test_investment_withdrawal_rejected(self, client):
        number = open_account(client, register(client), "investment", "1000")
        r = client.post(f"/operations/{number}/withdraw", json={"amount": "1"})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "WithdrawalNotPermitted"

    def test_transfer(self, client):
        client_id = register(client)
        a = open_account(client, client_id, "savings", "100")
        b = open_account(client, client_id, "savings", "50")

        r = client.post("/operations/transfer", json={"from_account": a, "to_account": b, "amount": "30"})
        assert r.status_code == 200
        assert r.json()["amount"] == "30.00"
        assert len(r.json()["records"]) == 4

        assert client.get(f"/accounts/{a}").json()["balance"] == "70.00"
        assert client.get(f"/accounts/{b}").json()["balance"] == "80.00"

    def test_failed_transfer_changes_nothing(self, client):
        client_id = register(client)
        a = open_account(client, client_id, "savings", "100")
        b = open_account(client, client_id, "savings", "50")

        r = client.post("/operations/transfer", json={"from_account": a, "to_account": b, "amount": "1000"})
        assert r.status_code == 400

        assert client.get(f"/accounts/{a}").json()["balance"] == "100.00"
        assert client.get(f"/accounts/{b}").json()["balance"] == "50.00"

    def test_same_account_transfer(self, client):
        a = open_account(client, register(client), "savings", "100")
        r = client.post("/operations/transfer", json={"from_account": a, "to_account": a, "amount": "1"})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "SameAccountTransfer"

    def test_report(self, client):
        number = open_account(client, register(client), "savings", "100")
        for amount in ("1", "2", "3"):
            client.post(f"/operations/{number}/deposit", json={"amount": amount})

        r = client.get(f"/accounts/{number}/report", params={"recent": 2})
        assert r.status_code == 200
        data = r.json()
        assert data["client_name"] == "Juan Pérez"
        assert [t["amount"] for t in data["recent_transactions"]] == ["3.00", "2.00"]
        assert data["statistics"]["deposit_count"] == 3
        assert data["statistics"]["total_deposited"] == "6.00"

    def test_monthly_cycle(self, client):
        client_id = register(client)
        savings = open_account(client, client_id, "savings", "1000")
        checking = open_account(client, client_id, "checking", "500")

        r = client.post("/admin/monthly-cycle")
        assert r.status_code == 200
        data = r.json()
        assert data["processed"] == [savings, checking]
        assert data["records_created"] == 2

        assert client.get(f"/accounts/{savings}").json()["balance"] == "1002.50"
        assert client.get(f"/accounts/{checking}").json()["balance"] == "490.00"
