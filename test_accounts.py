from datetime import timedelta
from unittest.mock import MagicMock

import pytest
import requests
from fastapi.testclient import TestClient

from app import manage
from app.errors import PaymentFailed
from app.main import app
from app.models.user import AuthToken, User
from app.services.admin_service import AdminService
from app.services.notifications import EmailSender
from app.services.payment_gateway import StripeGateway
from app.services.saga import Saga
from app.utils import utcnow
from conftest import ADDRESS, client, create_account, create_product, engine, session_scope, TestingSessionLocal

REGISTRATION = {"name": "Meera", "email": "Meera@Example.com", "password": "secret123", "mobile": "9123456780"}


def test_register_and_me():
    response = client.post("/api/auth/register", json=REGISTRATION)
    assert response.status_code == 201
    data = response.json()
    assert data["user"]["email"] == "meera@example.com"
    assert data["user"]["role"] == "user"
    assert data["user"]["wallet_balance"] == 0

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == 200
    assert me.json()["name"] == "Meera"


def test_register_duplicate_email():
    client.post("/api/auth/register", json=REGISTRATION)
    response = client.post("/api/auth/register", json=dict(REGISTRATION, email="meera@example.com"))
    assert response.status_code == 409
    assert response.json()["message"] == "User already exists"


def test_register_validation():
    response = client.post("/api/auth/register", json=dict(REGISTRATION, mobile="12345"))
    assert response.status_code == 400
    assert response.json()["message"].startswith("mobile:")


def test_login():
    client.post("/api/auth/register", json=REGISTRATION)

    response = client.post("/api/auth/login", json={"email": "meera@example.com", "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Meera"

    response = client.post("/api/auth/login", json={"email": "meera@example.com", "password": "wrong"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


def test_blocked_user(user):
    with session_scope() as db:
        db.get(User, user["id"]).is_blocked = True
        db.commit()

    response = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "secret123"})
    assert response.status_code == 403
    assert client.get("/api/auth/me", headers=user["headers"]).status_code == 401


def test_bad_and_expired_tokens(user):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized, token failed"

    with session_scope() as db:
        for token in db.query(AuthToken).filter(AuthToken.user_id == user["id"]):
            token.expires_at = utcnow() - timedelta(minutes=1)
        db.commit()

    response = client.get("/api/auth/me", headers=user["headers"])
    assert response.status_code == 401
    assert response.json()["message"] == "Token expired"


def test_admin_stats(user, admin):
    product_id = create_product(stock=10)
    body = {
        "items": [{"product_id": product_id, "quantity": 2, "size": "M"}],
        "address": ADDRESS,
        "payment_method": "Card",
        "payment_method_id": "pm_card_visa",
    }
    client.post("/api/orders/checkout", json=body, headers=user["headers"])
    client.post("/api/orders/checkout", json=dict(body, payment_method="COD"), headers=user["headers"])

    assert client.get("/api/admin/stats", headers=user["headers"]).status_code == 403

    response = client.get("/api/admin/stats", headers=admin["headers"])
    assert response.status_code == 200
    assert response.json() == {
        "total_users": 1,
        "total_orders": 2,
        "total_products": 1,
        "total_revenue": 1180.0,
        "orders_by_status": {"confirmed": 1, "pending": 1},
    }


def test_admin_lists_customers(user, other_user, admin):
    response = client.get("/api/admin/users", headers=admin["headers"])
    assert response.status_code == 200
    emails = sorted(u["email"] for u in response.json())
    assert emails == ["asha@example.com", "ravi@example.com"]
    assert all(u["is_blocked"] is False for u in response.json())


def test_admin_user_routes_require_admin(user, other_user):
    assert client.get("/api/admin/users", headers=user["headers"]).status_code == 403
    assert client.put(f"/api/admin/users/{other_user['id']}/block", headers=user["headers"]).status_code == 403
    response = client.put(f"/api/admin/users/{other_user['id']}/role", json={"role": "admin"}, headers=user["headers"])
    assert response.status_code == 403
    assert client.delete(f"/api/admin/users/{other_user['id']}", headers=user["headers"]).status_code == 403
    assert client.get("/api/admin/users").status_code == 401


def test_admin_blocks_and_unblocks_user(user, admin):
    response = client.put(f"/api/admin/users/{user['id']}/block", json={"reason": "Chargeback abuse"}, headers=admin["headers"])
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "User blocked successfully"
    assert data["user"]["is_blocked"] is True
    assert data["user"]["blocked_reason"] == "Chargeback abuse"

    response = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "secret123"})
    assert response.status_code == 403
    assert client.get("/api/auth/me", headers=user["headers"]).status_code == 401

    response = client.put(f"/api/admin/users/{user['id']}/block", headers=admin["headers"])
    assert response.json()["message"] == "User unblocked successfully"
    assert response.json()["user"]["is_blocked"] is False
    assert response.json()["user"]["blocked_reason"] is None
    assert client.get("/api/auth/me", headers=user["headers"]).status_code == 200


def test_admin_cannot_block_or_delete_admins(admin):
    other_admin = create_account("ops@example.com", role="admin")

    response = client.put(f"/api/admin/users/{other_admin['id']}/block", headers=admin["headers"])
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot block admin users"

    response = client.delete(f"/api/admin/users/{other_admin['id']}", headers=admin["headers"])
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot delete admin users"


def test_admin_updates_role(user, admin):
    response = client.put(f"/api/admin/users/{user['id']}/role", json={"role": "manager"}, headers=admin["headers"])
    assert response.status_code == 200
    assert response.json()["message"] == "User role updated successfully"
    assert response.json()["user"]["role"] == "manager"

    response = client.put(f"/api/admin/users/{user['id']}/role", json={"role": "owner"}, headers=admin["headers"])
    assert response.status_code == 400
    assert response.json()["message"].startswith("role:")


def test_admin_user_not_found(admin):
    assert client.put("/api/admin/users/999999/block", headers=admin["headers"]).status_code == 404
    response = client.put("/api/admin/users/999999/role", json={"role": "user"}, headers=admin["headers"])
    assert response.status_code == 404
    assert response.json()["message"] == "User not found"
    assert client.delete("/api/admin/users/999999", headers=admin["headers"]).status_code == 404


def test_admin_deletes_user(user, admin):
    response = client.delete(f"/api/admin/users/{user['id']}", headers=admin["headers"])
    assert response.status_code == 200
    assert response.json()["message"] == "User deleted successfully"

    with session_scope() as db:
        assert db.get(User, user["id"]) is None
        assert db.query(AuthToken).filter(AuthToken.user_id == user["id"]).count() == 0
    assert client.get("/api/auth/me", headers=user["headers"]).status_code == 401
    assert client.get("/api/admin/users", headers=admin["headers"]).json() == []


def test_user_with_orders_cannot_be_deleted(user, admin):
    product_id = create_product(stock=10)
    body = {
        "items": [{"product_id": product_id, "quantity": 1, "size": "M"}],
        "address": ADDRESS,
        "payment_method": "COD",
    }
    assert client.post("/api/orders/checkout", json=body, headers=user["headers"]).status_code == 201

    response = client.delete(f"/api/admin/users/{user['id']}", headers=admin["headers"])
    assert response.status_code == 409
    with session_scope() as db:
        assert db.get(User, user["id"]) is not None


def test_unknown_route_returns_message():
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}


def test_unexpected_error_returns_500(admin, monkeypatch):
    def explode(db):
        raise RuntimeError("stats backend down")

    monkeypatch.setattr(AdminService, "dashboard_stats", staticmethod(explode))
    quiet_client = TestClient(app, raise_server_exceptions=False)

    response = quiet_client.get("/api/admin/stats", headers=admin["headers"])
    assert response.status_code == 500
    assert response.json()["message"] == "stats backend down"
    assert "RuntimeError" in response.json()["stack"]


@pytest.fixture
def cli_db(monkeypatch):
    monkeypatch.setattr(manage, "SessionLocal", TestingSessionLocal)
    monkeypatch.setattr(manage, "engine", engine)


def test_cli_create_admin(cli_db, capsys):
    code = manage.main([
        "create-admin", "--name", "Root", "--email", "root@example.com",
        "--password", "secret123", "--mobile", "9000000000",
    ])
    assert code == 0
    assert "Created admin root@example.com" in capsys.readouterr().out

    with session_scope() as db:
        assert db.query(User).filter(User.email == "root@example.com").one().role == "admin"


def test_cli_make_admin(cli_db, user, capsys):
    assert manage.main(["make-admin", "--email", "asha@example.com"]) == 0
    with session_scope() as db:
        assert db.get(User, user["id"]).role == "admin"

    assert manage.main(["make-admin", "--email", "nobody@example.com"]) == 1
    assert "User not found" in capsys.readouterr().err


def test_saga_compensates_in_reverse_order():
    calls = []

    def fail():
        raise ValueError("boom")

    with pytest.raises(ValueError):
        with Saga("test", on_abort=lambda: calls.append("abort")) as saga:
            saga.step("first", lambda: 1, compensate=lambda v: calls.append(("undo first", v)))
            saga.step("second", lambda: 2, compensate=lambda v: calls.append(("undo second", v)))
            saga.step("third", fail, compensate=lambda v: calls.append("never"))

    assert calls == ["abort", ("undo second", 2), ("undo first", 1)]


def test_saga_keeps_compensating_after_a_failure():
    undone = []

    def broken(_):
        raise RuntimeError("cannot undo")

    saga = Saga("test")
    saga.step("first", lambda: "a", compensate=undone.append)
    saga.step("second", lambda: "b", compensate=broken)

    assert saga.compensate() == (1, 1)
    assert undone == ["a"]


def test_saga_success_runs_no_compensation():
    undone = []
    with Saga("test") as saga:
        assert saga.step("only", lambda: 42, compensate=undone.append) == 42
    assert undone == []


def fake_response(status_code, body):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    return response


def test_stripe_charge():
    session = MagicMock()
    session.post.return_value = fake_response(200, {"id": "pi_123", "status": "succeeded"})
    gateway = StripeGateway("sk_test", "https://stripe.test/v1/", session=session)

    auth = gateway.authorize_and_capture(118000, "inr", "pm_card_visa", {"user_id": "7"})
    assert auth.id == "pi_123"
    assert auth.succeeded

    args, kwargs = session.post.call_args
    assert args[0] == "https://stripe.test/v1/payment_intents"
    assert kwargs["auth"] == ("sk_test", "")
    assert kwargs["data"]["amount"] == 118000
    assert kwargs["data"]["confirm"] == "true"
    assert kwargs["data"]["metadata[user_id]"] == "7"


def test_stripe_decline():
    session = MagicMock()
    session.post.return_value = fake_response(402, {"error": {"message": "Your card was declined."}})
    gateway = StripeGateway("sk_test", "https://stripe.test/v1", session=session)

    with pytest.raises(PaymentFailed) as exc_info:
        gateway.authorize_and_capture(100, "inr", "pm_card_chargeDeclined")
    assert exc_info.value.message == "Payment failed: Your card was declined."


def test_stripe_network_error():
    session = MagicMock()
    session.post.side_effect = requests.ConnectionError("connection refused")
    gateway = StripeGateway("sk_test", "https://stripe.test/v1", session=session)

    with pytest.raises(PaymentFailed):
        gateway.refund("pi_123")


def test_stripe_not_configured():
    session = MagicMock()
    gateway = StripeGateway(None, "https://stripe.test/v1", session=session)

    with pytest.raises(PaymentFailed):
        gateway.authorize_and_capture(100, "inr", "pm_card_visa")
    session.post.assert_not_called()


def test_stripe_refund():
    session = MagicMock()
    session.post.return_value = fake_response(200, {"id": "re_1", "status": "succeeded"})
    gateway = StripeGateway("sk_test", "https://stripe.test/v1", session=session)

    gateway.refund("pi_123")
    args, kwargs = session.post.call_args
    assert args[0] == "https://stripe.test/v1/refunds"
    assert kwargs["data"] == {"payment_intent": "pi_123"}


def test_email_skipped_without_smtp(monkeypatch):
    monkeypatch.setattr("app.services.notifications.settings.smtp_host", None)
    assert EmailSender.order_placed("asha@example.com", "Asha", 1, 1180) is False
