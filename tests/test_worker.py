"""Tests for background jobs"""

import asyncio
from datetime import datetime, timedelta

import httpx

from spaceseller import config, models, worker


class TestDraftCleanup:
    def test_only_stale_drafts_removed(self, monkeypatch, db, session_factory, customer):
        monkeypatch.setattr(worker, "SessionLocal", session_factory)
        old = datetime.utcnow() - timedelta(days=45)
        db.add_all(
            [
                models.Order(id="stale", user_id=customer.id, order_number="SS-2026-00001", status="draft", updated_at=old),
                models.Order(id="fresh", user_id=customer.id, order_number="SS-2026-00002", status="draft"),
                models.Order(id="old-submitted", user_id=customer.id, order_number="SS-2026-00003", status="submitted", updated_at=old),
            ]
        )
        db.add(models.Address(id="addr", user_id=customer.id, order_id="stale", address_type="shooting_location", street="A", postal_code="10115", city="Berlin"))
        db.commit()

        result = asyncio.run(worker.cleanup_abandoned_drafts_task({}, retention_days=30))

        assert result == {"deleted": 1}
        db.expire_all()
        assert {o.id for o in db.query(models.Order)} == {"fresh", "old-submitted"}
        assert db.query(models.Address).count() == 0

    def test_default_retention_from_config(self, monkeypatch, db, session_factory, customer):
        monkeypatch.setattr(worker, "SessionLocal", session_factory)
        monkeypatch.setattr(config, "DRAFT_RETENTION_DAYS", 7)
        ten_days_ago = datetime.utcnow() - timedelta(days=10)
        db.add(models.Order(id="stale", user_id=customer.id, order_number="SS-2026-00001", status="draft", updated_at=ten_days_ago))
        db.commit()

        assert asyncio.run(worker.cleanup_abandoned_drafts_task({})) == {"deleted": 1}


class TestOrderWebhook:
    def test_skipped_without_url(self, monkeypatch):
        monkeypatch.setattr(config, "ORDER_WEBHOOK_URL", None)
        result = asyncio.run(worker.trigger_order_webhook_task({}, "order-1", "user-1", "onsite"))
        assert result == {"sent": False, "reason": "not_configured"}

    def test_posts_new_order_event(self, monkeypatch):
        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(200)

        real_client = httpx.AsyncClient
        monkeypatch.setattr(config, "ORDER_WEBHOOK_URL", "https://hooks.test/new-order")
        monkeypatch.setattr(
            worker.httpx,
            "AsyncClient",
            lambda *a, **kw: real_client(transport=httpx.MockTransport(handler)),
        )

        result = asyncio.run(worker.trigger_order_webhook_task({}, "order-1", "user-1", "onsite"))

        assert result["sent"] is True
        [request] = sent
        body = request.read()
        assert b'"event":"new_order"' in body.replace(b" ", b"")
        assert b'"order_id":"order-1"' in body.replace(b" ", b"")

    def test_failure_is_reported_not_raised(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        real_client = httpx.AsyncClient
        monkeypatch.setattr(config, "ORDER_WEBHOOK_URL", "https://hooks.test/new-order")
        monkeypatch.setattr(
            worker.httpx,
            "AsyncClient",
            lambda *a, **kw: real_client(transport=httpx.MockTransport(handler)),
        )

        result = asyncio.run(worker.trigger_order_webhook_task({}, "order-1", "user-1", "onsite"))
        assert result["sent"] is False
