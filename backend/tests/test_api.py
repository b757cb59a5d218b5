"""
Card Activation Backend — HTTP API Tests
==========================================

What:  End-to-end tests through the FastAPI app with its lifespan running.
How:   HTTPX AsyncClient over ASGITransport against a seeded SQLite file.

What we test:
    ✅ /validate-digits and /activate status codes and messages
    ✅ Admin login → bearer token → fee replacement
    ✅ Protected endpoint rejects missing/bad tokens without side effects
    ✅ Error body shape, X-Request-ID, X-Forwarded-For audit capture
    ✅ /health
"""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from cardactivation.exceptions import PersistenceError
from cardactivation.models.activation import Activation
from cardactivation.models.admin import AdminPrincipal
from cardactivation.models.fee import FEE_LABELS
from cardactivation.services.activation_service import activation_service
from cardactivation.services.fee_service import fee_ledger_service
from cardactivation.services.session_service import SessionService

from conftest import ADMIN_PASSWORD, ADMIN_USERNAME, TEST_JWT_SECRET

NEW_FEES = {"vat": 7.5, "cardActivation": 10, "cardMaintenance": "2.5", "secureConnection": 0}


async def _failing_commit(self):
    raise OperationalError("COMMIT", {}, Exception("database is locked"))


async def _activations(app):
    async with app.state.database.session() as session:
        return list((await session.execute(select(Activation))).scalars().all())


class TestValidateDigits:

    @pytest.mark.asyncio
    async def test_valid_digits(self, test_client):
        response = await test_client.post("/validate-digits", json={"lastSixDigits": "123456"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Digits validated successfully"}

    @pytest.mark.asyncio
    async def test_short_digits(self, test_client):
        response = await test_client.post("/validate-digits", json={"lastSixDigits": "12345"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "The last 6 digits must be exactly 6 numbers."

    @pytest.mark.asyncio
    async def test_missing_digits(self, test_client):
        response = await test_client.post("/validate-digits", json={})

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide the last 6 digits of your card."

    @pytest.mark.asyncio
    async def test_no_body(self, test_client):
        response = await test_client.post("/validate-digits")
        assert response.status_code == 400


class TestActivate:

    @pytest.mark.asyncio
    async def test_activation_is_stored(self, app, test_client, valid_activation):
        response = await test_client.post("/activate", json=valid_activation)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Card activated successfully"}
        assert "4321" not in response.text

        rows = await _activations(app)
        assert len(rows) == 1
        assert rows[0].last_six_digits == "123456"
        assert rows[0].pin_hash != "4321"
        assert rows[0].created_at is not None

    @pytest.mark.asyncio
    async def test_forwarded_for_is_recorded(self, app, test_client, valid_activation):
        response = await test_client.post(
            "/activate",
            json=valid_activation,
            headers={"X-Forwarded-For": "203.0.113.77, 10.0.0.1"},
        )

        assert response.status_code == 200
        assert (await _activations(app))[0].user_ip == "203.0.113.77"

    @pytest.mark.asyncio
    async def test_daily_limit_out_of_range(self, app, test_client, valid_activation):
        response = await test_client.post("/activate", json={**valid_activation, "dailyLimit": 6000})

        assert response.status_code == 400
        assert response.json()["message"] == "Daily limit must be between 0 and 5000."
        assert await _activations(app) == []

    @pytest.mark.asyncio
    async def test_terms_not_accepted(self, app, test_client, valid_activation):
        response = await test_client.post("/activate", json={**valid_activation, "accept": False})

        assert response.status_code == 400
        assert response.json()["message"] == "You must accept the terms to proceed."
        assert await _activations(app) == []

    @pytest.mark.asyncio
    async def test_missing_field(self, test_client, valid_activation):
        data = dict(valid_activation)
        del data["holderName"]

        response = await test_client.post("/activate", json=data)

        assert response.status_code == 400
        assert response.json()["message"] == "All fields are required to activate your card."

    @pytest.mark.asyncio
    async def test_malformed_json(self, test_client):
        response = await test_client.post(
            "/activate",
            content=b'{"cardType": ',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_failed_commit_is_500_and_nothing_is_stored(self, app, test_client, valid_activation, monkeypatch):
        monkeypatch.setattr(AsyncSession, "commit", _failing_commit)

        response = await test_client.post("/activate", json=valid_activation)
        monkeypatch.undo()

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Unexpected error occurred.",
            "request_id": response.headers["X-Request-ID"],
        }
        assert await _activations(app) == []

    @pytest.mark.asyncio
    async def test_long_holder_name_is_stored_whole(self, app, test_client, valid_activation):
        name = "B" * 300

        response = await test_client.post("/activate", json={**valid_activation, "holderName": name})

        assert response.status_code == 200
        assert (await _activations(app))[0].holder_name == name

    @pytest.mark.asyncio
    async def test_non_string_holder_name_is_rejected(self, app, test_client, valid_activation):
        response = await test_client.post("/activate", json={**valid_activation, "holderName": {"a": 1}})

        assert response.status_code == 400
        assert response.json()["message"] == "All fields are required to activate your card."
        assert await _activations(app) == []

    @pytest.mark.asyncio
    async def test_store_failure_is_500_with_generic_message(self, test_client, valid_activation, monkeypatch):
        async def failing_activate(**kwargs):
            raise PersistenceError(message="Unexpected error occurred.", context={"error_type": "OperationalError"})

        monkeypatch.setattr(activation_service, "activate", failing_activate)

        response = await test_client.post("/activate", json=valid_activation)

        assert response.status_code == 500
        assert response.json()["message"] == "Unexpected error occurred."
        assert "OperationalError" not in response.text


class TestAdminLogin:

    @pytest.mark.asyncio
    async def test_login_returns_verifiable_token(self, test_client):
        response = await test_client.post(
            "/admin/login",
            json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login successful"

        claims = SessionService(secret=TEST_JWT_SECRET).verify(body["token"])
        assert claims.username == ADMIN_USERNAME
        assert claims.exp - claims.iat == 3600

    @pytest.mark.asyncio
    async def test_login_records_ip(self, app, test_client):
        await test_client.post(
            "/admin/login",
            json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
            headers={"X-Forwarded-For": "198.51.100.23"},
        )

        async with app.state.database.session() as session:
            admin = (await session.execute(select(AdminPrincipal))).scalar_one()
        assert admin.ip_address == "198.51.100.23"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "credentials",
        [
            {"username": ADMIN_USERNAME, "password": "wrong"},
            {"username": "nobody", "password": ADMIN_PASSWORD},
        ],
    )
    async def test_bad_credentials_are_indistinguishable(self, test_client, credentials):
        response = await test_client.post("/admin/login", json=credentials)

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"
        assert "token" not in response.json()

    @pytest.mark.asyncio
    async def test_missing_credentials(self, test_client):
        response = await test_client.post("/admin/login", json={"username": ADMIN_USERNAME})

        assert response.status_code == 400
        assert response.json()["message"] == "Username and password are required"


class TestFees:

    @pytest.mark.asyncio
    async def test_seeded_fee_list(self, test_client):
        response = await test_client.get("/api/payments")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [item["label"] for item in body["payments"]] == list(FEE_LABELS)
        assert all(item["price"] == 0 for item in body["payments"])
        assert "updatedAt" in body["payments"][0]

    @pytest.mark.asyncio
    async def test_update_fees_then_list(self, test_client, admin_token):
        response = await test_client.post(
            "/admin/update-fees",
            json=NEW_FEES,
            headers={"Authorization": f"Bearer {admin_token}"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Fees updated successfully"

        listed = (await test_client.get("/api/payments")).json()["payments"]
        assert [(item["label"], item["price"]) for item in listed] == [
            ("VAT (value added tax)", 7.5),
            ("Card activation", 10.0),
            ("Card maintenance", 2.5),
            ("3D visa/master/verve secure connection", 0.0),
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "authorization, message",
        [
            (None, "No token provided"),
            ("Token abc", "Malformed token header"),
            ("Bearer not-a-real-token", "Invalid or expired token"),
        ],
    )
    async def test_update_fees_rejects_bad_auth_without_mutation(self, test_client, authorization, message):
        headers = {"Authorization": authorization} if authorization else {}

        response = await test_client.post("/admin/update-fees", json=NEW_FEES, headers=headers)

        assert response.status_code == 401
        assert response.json()["message"] == message
        assert response.headers["WWW-Authenticate"] == "Bearer"

        listed = (await test_client.get("/api/payments")).json()["payments"]
        assert all(item["price"] == 0 for item in listed)

    @pytest.mark.asyncio
    async def test_update_fees_rejects_expired_token(self, test_client):
        expired = SessionService(secret=TEST_JWT_SECRET).issue(
            "00000000-0000-4000-8000-000000000000", ADMIN_USERNAME, now=0
        )

        response = await test_client.post(
            "/admin/update-fees",
            json=NEW_FEES,
            headers={"Authorization": f"Bearer {expired}"},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_update_fees_missing_field(self, test_client, admin_token):
        response = await test_client.post(
            "/admin/update-fees",
            json={"vat": 1, "cardActivation": 2, "cardMaintenance": 3},
            headers={"Authorization": f"Bearer {admin_token}"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "All fee fields are required"

    @pytest.mark.asyncio
    async def test_failed_commit_on_update_is_500_and_ledger_unchanged(self, test_client, admin_token, monkeypatch):
        monkeypatch.setattr(AsyncSession, "commit", _failing_commit)

        response = await test_client.post(
            "/admin/update-fees",
            json=NEW_FEES,
            headers={"Authorization": f"Bearer {admin_token}"},
        )
        monkeypatch.undo()

        assert response.status_code == 500
        assert response.json()["message"] == "Error occurred while updating fees."

        listed = (await test_client.get("/api/payments")).json()["payments"]
        assert all(item["price"] == 0 for item in listed)

    @pytest.mark.asyncio
    async def test_list_failure_is_500(self, test_client, monkeypatch):
        async def failing_list(db):
            raise PersistenceError(message="Error occurred while fetching payments.")

        monkeypatch.setattr(fee_ledger_service, "list_fees", failing_list)

        response = await test_client.get("/api/payments")

        assert response.status_code == 500
        assert response.json()["message"] == "Error occurred while fetching payments."


class TestCrossCutting:

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, test_client):
        response = await test_client.get("/api/payments")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_client_request_id_is_echoed_in_errors(self, test_client):
        response = await test_client.post(
            "/validate-digits",
            json={"lastSixDigits": "abc"},
            headers={"X-Request-ID": "trace-42"},
        )

        assert response.headers["X-Request-ID"] == "trace-42"
        assert response.json()["request_id"] == "trace-42"

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_closed_database_is_500(self, app, test_client):
        await app.state.database.close()

        response = await test_client.get("/api/payments")

        assert response.status_code == 500
        assert response.json()["message"] == "Database is not connected."

    @pytest.mark.asyncio
    async def test_health_reports_lost_database(self, app, test_client):
        await app.state.database.close()

        response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
