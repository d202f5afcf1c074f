"""API tests for the order wizard and admin reliability endpoints"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from spaceseller import models
from spaceseller.database import get_db
from spaceseller.domain.orders import router as orders_router
from spaceseller.domain.orders.wizard import WizardSessionStore
from spaceseller.main import app
from spaceseller.services.location import LocationCheckResult


class StubLocationValidator:
    async def validate(self, address):
        return LocationCheckResult(
            valid=True,
            message="ok",
            travel_cost=Decimal("10"),
            distance_km=25.0,
            photography_available=True,
        )


@pytest.fixture
def queued_webhooks(monkeypatch):
    calls = []

    async def fake_enqueue(order_id, user_id, category):
        calls.append((order_id, user_id, category))

    monkeypatch.setattr(orders_router, "enqueue_order_webhook", fake_enqueue)
    return calls


@pytest.fixture
def client(session_factory, queued_webhooks):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    previous_store = app.state.wizard_sessions
    app.dependency_overrides[get_db] = override_get_db
    app.state.wizard_sessions = WizardSessionStore(
        session_factory=session_factory,
        location_validator=StubLocationValidator(),
        autosave_enabled=False,
    )
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.wizard_sessions = previous_store


HEADERS = {"X-User-Id": "user-1"}


class TestAuth:
    def test_missing_user(self, client):
        assert client.post("/orders/wizard").status_code == 401

    def test_unknown_user(self, client, customer):
        assert client.post("/orders/wizard", headers={"X-User-Id": "ghost"}).status_code == 401

    def test_admin_route_requires_admin(self, client, customer):
        assert client.get("/admin/providers/reliability", headers=HEADERS).status_code == 403


class TestCatalog:
    def test_packages_filtered_by_type(self, client):
        response = client.get("/orders/catalog/packages", params={"type": "drone"})
        assert response.status_code == 200
        assert {p["id"] for p in response.json()} == {"drone_basic", "drone_premium"}

    def test_unknown_package_type(self, client):
        response = client.get("/orders/catalog/packages", params={"type": "video"})
        assert response.status_code == 400

    def test_add_ons(self, client):
        assert len(client.get("/orders/catalog/add-ons").json()) == 3

    def test_stateless_quote(self, client):
        response = client.post(
            "/orders/quote",
            json={
                "category": "virtual_staging",
                "lineItems": [{"serviceId": "svc", "quantity": 3, "unitPrice": "50", "unit": "room"}],
                "stagingVariations": 3,
            },
        )
        assert response.status_code == 200
        assert Decimal(response.json()["subtotal"]) == Decimal("300")
        assert Decimal(response.json()["total"]) == Decimal("357.00")

    def test_quote_unknown_package(self, client):
        response = client.post("/orders/quote", json={"category": "onsite", "packageId": "nope"})
        assert response.status_code == 400


class TestWizardFlow:
    def test_full_flow(self, client, db, customer, admins, catalog, queued_webhooks):
        state = client.post("/orders/wizard", headers=HEADERS).json()
        session_id = state["sessionId"]
        assert state["step"] == 1
        assert state["canAdvance"] is False
        base = f"/orders/wizard/{session_id}"

        state = client.patch(
            f"{base}/address",
            headers=HEADERS,
            json={"street": "Hauptstraße", "houseNumber": "12", "postalCode": "10115", "city": "Berlin"},
        ).json()
        assert state["address"]["city"] == "Berlin"
        assert state["locationValidated"] is False

        check = client.post(f"{base}/location/validate", headers=HEADERS).json()
        assert check["valid"] is True
        assert client.post(f"{base}/next", headers=HEADERS).json()["step"] == 2

        client.put(f"{base}/category", headers=HEADERS, json={"category": "onsite"})
        client.put(f"{base}/package", headers=HEADERS, json={"packageId": "photo_standard"})
        state = client.post(f"{base}/add-ons/drone/toggle", headers=HEADERS).json()
        assert state["selectedAddOns"] == ["drone"]
        client.put(
            f"{base}/schedule",
            headers=HEADERS,
            json={"requestedDate": "2026-11-03", "requestedTime": "10:00"},
        )

        quote = client.get(f"{base}/quote", headers=HEADERS).json()
        assert Decimal(quote["subtotal"]) == Decimal("298")  # 199 + 89 + 10 travel

        validation = client.get(f"{base}/validation", headers=HEADERS).json()
        assert validation == {"isValid": True, "errors": []}

        assert client.post(f"{base}/next", headers=HEADERS).json()["step"] == 3

        response = client.post(f"{base}/submit", headers=HEADERS)
        assert response.status_code == 200, response.text
        body = response.json()
        assert body["success"] is True

        order = db.query(models.Order).filter(models.Order.id == body["orderId"]).one()
        assert order.status == "submitted"
        assert order.total_amount == Decimal("354.62")
        assert queued_webhooks == [(order.id, "user-1", "onsite")]

        assert body["orderNumber"] == order.order_number

        # Submitted sessions are closed
        assert client.post(f"{base}/submit", headers=HEADERS).status_code == 404
        assert client.get(base, headers=HEADERS).status_code == 404

    def test_submit_invalid_draft(self, client, customer, queued_webhooks):
        session_id = client.post("/orders/wizard", headers=HEADERS).json()["sessionId"]
        response = client.post(f"/orders/wizard/{session_id}/submit", headers=HEADERS)
        assert response.status_code == 400
        assert "Street is required" in response.json()["detail"]
        assert queued_webhooks == []

    def test_unknown_session(self, client, customer):
        assert client.get("/orders/wizard/missing", headers=HEADERS).status_code == 404

    def test_invalid_postal_code(self, client, customer):
        session_id = client.post("/orders/wizard", headers=HEADERS).json()["sessionId"]
        response = client.patch(f"/orders/wizard/{session_id}/address", headers=HEADERS, json={"postalCode": "12"})
        assert response.status_code == 422

    def test_close_session(self, client, customer):
        session_id = client.post("/orders/wizard", headers=HEADERS).json()["sessionId"]
        assert client.delete(f"/orders/wizard/{session_id}", headers=HEADERS).status_code == 200
        assert client.get(f"/orders/wizard/{session_id}", headers=HEADERS).status_code == 404


class TestReliabilityEndpoint:
    def test_admin_report(self, client, db, admins, draft_order):
        db.add(models.Profile(id="ph-1", first_name="Pia", last_name="Foto", email="pia@example.com"))
        db.add(models.UserRole(user_id="ph-1", role="photographer"))
        db.add(models.OrderAssignment(order_id=draft_order.id, photographer_id="ph-1", assigned_by="admin-1", status="completed"))
        db.commit()

        response = client.get("/admin/providers/reliability", headers={"X-User-Id": "admin-1"})

        assert response.status_code == 200
        [row] = response.json()
        assert row["providerName"] == "Pia Foto"
        assert row["reliabilityScore"] == pytest.approx(100)
        assert row["label"] == "very reliable"
        assert row["badgeVariant"] == "default"
