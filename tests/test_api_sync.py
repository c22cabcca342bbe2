"""Tests for the POST /api/sync/* endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from catalog_sync.api.auth import verify_sync_token
from catalog_sync.api.routes.sync import router
from catalog_sync.delivery.summary import DeliveryOutcome, DeliverySummary
from catalog_sync.errors import ApplicationError, SourceError, TotalFailureError
from catalog_sync.pipeline.pipeline import SyncResult


def _make_app(pipeline=None) -> FastAPI:
    """Build a test app with a mocked pipeline."""
    app = FastAPI()
    app.include_router(router)

    # Override auth dependency so it never hits real Settings
    async def _noop_auth():
        return None

    app.dependency_overrides[verify_sync_token] = _noop_auth
    app.state.pipeline = pipeline or MagicMock()
    return app


def _result(domain="products", **kwargs) -> SyncResult:
    return SyncResult(domain=domain, run_id="run-1", **kwargs)


class TestSyncRoutes:
    def test_products_success(self):
        pipeline = MagicMock()
        pipeline.sync_products = AsyncMock(
            return_value=_result(
                message="Product Sync Completed Successfully",
                fetched=3,
                mapped=2,
                succeeded=2,
            )
        )
        client = TestClient(_make_app(pipeline))

        response = client.post("/api/sync/products")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Product Sync Completed Successfully"
        assert body["total_fetched"] == 3
        assert body["total_success"] == 2
        assert body["failed_identifiers"] == []

    def test_partial_failure_is_200(self):
        pipeline = MagicMock()
        pipeline.sync_products = AsyncMock(
            return_value=_result(
                message="Product Sync Completed with some failures",
                succeeded=1,
                failed=1,
                failed_identifiers=["B"],
            )
        )
        client = TestClient(_make_app(pipeline))

        response = client.post("/api/sync/products")

        assert response.status_code == 200
        assert response.json()["failed_identifiers"] == ["B"]
        assert response.json()["success"] is False

    def test_pricelists_route(self):
        pipeline = MagicMock()
        pipeline.sync_price_lists = AsyncMock(
            return_value=_result(domain="price_lists", message="No price data found.")
        )
        client = TestClient(_make_app(pipeline))

        response = client.post("/api/sync/pricelists")

        assert response.status_code == 200
        assert response.json()["message"] == "No price data found."
        pipeline.sync_price_lists.assert_awaited_once()

    def test_images_route(self):
        pipeline = MagicMock()
        pipeline.sync_images = AsyncMock(
            return_value=_result(domain="images", message="Image Sync Success", succeeded=2)
        )
        client = TestClient(_make_app(pipeline))

        response = client.post("/api/sync/images")

        assert response.status_code == 200
        assert response.json()["total_success"] == 2

    def test_source_failure_returns_500(self):
        pipeline = MagicMock()
        pipeline.sync_products = AsyncMock(
            side_effect=SourceError("SQL source connection failed", context={"model": "ProductRow"})
        )
        client = TestClient(_make_app(pipeline))

        response = client.post("/api/sync/products")

        assert response.status_code == 500
        assert response.json() == {
            "message": "Product Sync Failed",
            "error": "SQL source connection failed",
            "details": {"model": "ProductRow"},
        }

    def test_total_failure_details_carry_summary(self):
        summary = DeliverySummary(
            failed_count=1,
            failed_identifiers=["P1"],
            batches=[
                DeliveryOutcome(
                    index=0,
                    identifiers=("P1",),
                    success=False,
                    status_code=503,
                    error="HTTP 503",
                    attempts=3,
                )
            ],
        )
        pipeline = MagicMock()
        pipeline.sync_price_lists = AsyncMock(
            side_effect=TotalFailureError("All 1 delivery unit(s) failed", summary=summary)
        )
        client = TestClient(_make_app(pipeline))

        response = client.post("/api/sync/pricelists")

        assert response.status_code == 500
        body = response.json()
        assert body["message"] == "PriceList Sync Failed"
        assert body["details"]["failed_identifiers"] == ["P1"]

    def test_application_error_details_carry_body(self):
        pipeline = MagicMock()
        pipeline.sync_images = AsyncMock(
            side_effect=ApplicationError(
                "CRM reported failure",
                status_code=200,
                body={"errorCode": "LIMIT_EXCEEDED"},
            )
        )
        client = TestClient(_make_app(pipeline))

        response = client.post("/api/sync/images")

        assert response.status_code == 500
        assert response.json()["details"] == {"errorCode": "LIMIT_EXCEEDED"}

    def test_unexpected_error_returns_500(self):
        pipeline = MagicMock()
        pipeline.sync_products = AsyncMock(side_effect=RuntimeError("boom"))
        client = TestClient(_make_app(pipeline))

        response = client.post("/api/sync/products")

        assert response.status_code == 500
        assert response.json()["error"] == "boom"
        assert response.json()["details"] is None

    def test_get_not_allowed(self):
        client = TestClient(_make_app())
        assert client.get("/api/sync/products").status_code == 405
