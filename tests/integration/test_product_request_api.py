"""
Integration tests for the product request and admin review routes.

Repositories and the sequence allocator are replaced with in-memory fakes
through FastAPI dependency overrides; no database or broker is needed.
"""
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from fakes import (
    CountingSequenceAllocator,
    InMemoryCatalogRepository,
    InMemoryProductRequestRepository,
    InMemoryReviewHistoryRepository,
    RecordingEventPublisher,
)
from src.api.dependencies import (
    get_catalog_repo,
    get_event_publisher,
    get_history_repo,
    get_media_use_case,
    get_projector,
    get_request_repo,
    get_stats_memo,
)
from src.api.main import app
from src.application.interfaces.blob_store import BlobRef
from src.application.services.catalog_projector import CatalogProjector
from src.application.services.reference_allocator import ReferenceNumberAllocator
from src.application.services.ttl_memo import TTLMemo
from src.application.use_cases.upload_request_media import UploadRequestMedia
from src.domain.enums.request_status import RequestStatus

DEALER = {"X-User-Id": "dealer-1", "X-User-Role": "dealer", "X-Account-Status": "active"}
ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}

VEHICLE_BODY = {
    "requestType": "vehicle",
    "productData": {
        "title": "toyota hiace",
        "price": 12000,
        "stockNo": "ab-12",
        "images": ["https://cdn/1.jpg"],
        "auctionGrade": "4.5",
    },
}


class _Backend:
    def __init__(self) -> None:
        self.requests = InMemoryProductRequestRepository()
        self.history = InMemoryReviewHistoryRepository()
        self.catalog = InMemoryCatalogRepository()
        self.allocator = CountingSequenceAllocator()
        self.publisher = RecordingEventPublisher()
        self.memo = TTLMemo(ttl_seconds=60)

    def install(self) -> None:
        app.dependency_overrides[get_request_repo] = lambda: self.requests
        app.dependency_overrides[get_history_repo] = lambda: self.history
        app.dependency_overrides[get_catalog_repo] = lambda: self.catalog
        app.dependency_overrides[get_event_publisher] = lambda: self.publisher
        app.dependency_overrides[get_stats_memo] = lambda: self.memo
        app.dependency_overrides[get_projector] = lambda: CatalogProjector(
            ReferenceNumberAllocator(self.allocator)
        )


@pytest.fixture()
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def backend() -> _Backend:
    backend = _Backend()
    backend.install()
    return backend


def _submit(client: TestClient, body: dict | None = None) -> str:  # type: ignore[type-arg]
    response = client.post("/product-requests", json=body or VEHICLE_BODY, headers=DEALER)
    assert response.status_code == 201, response.text
    return response.json()["id"]


class TestSubmitProductRequest:
    def test_creates_pending_request(self, client: TestClient, backend: _Backend) -> None:
        response = client.post("/product-requests", json=VEHICLE_BODY, headers=DEALER)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"

        stored = next(iter(backend.requests.rows.values()))
        assert stored.product_data["title"] == "toyota hiace"
        assert stored.product_data["price"] == "12000"
        assert stored.product_data["price_original"] == "12000"
        assert stored.product_data["stock_no"] == "ab-12"
        assert stored.product_data["auction_grade"] == "4.5"
        assert len(backend.history.records) == 1
        assert len(backend.publisher.events) == 1

    def test_part_request(self, client: TestClient, backend: _Backend) -> None:
        response = client.post(
            "/product-requests",
            json={
                "requestType": "part",
                "productData": {"model": "Alternator", "make": "Denso", "stock": "4"},
            },
            headers=DEALER,
        )

        assert response.status_code == 201
        stored = next(iter(backend.requests.rows.values()))
        assert stored.product_data["brand"] == "Denso"
        assert stored.product_data["name"] == "Alternator"

    def test_unauthenticated_is_401(self, client: TestClient, backend: _Backend) -> None:
        response = client.post("/product-requests", json=VEHICLE_BODY)

        assert response.status_code == 401

    def test_inactive_account_is_403(self, client: TestClient, backend: _Backend) -> None:
        headers = {**DEALER, "X-Account-Status": "pending"}

        response = client.post("/product-requests", json=VEHICLE_BODY, headers=headers)

        assert response.status_code == 403
        assert backend.requests.rows == {}

    def test_unknown_role_is_403(self, client: TestClient, backend: _Backend) -> None:
        headers = {**DEALER, "X-User-Role": "superuser"}

        response = client.post("/product-requests", json=VEHICLE_BODY, headers=headers)

        assert response.status_code == 403

    def test_missing_title_and_model_is_422(self, client: TestClient, backend: _Backend) -> None:
        response = client.post(
            "/product-requests",
            json={"requestType": "vehicle", "productData": {"price": "100"}},
            headers=DEALER,
        )

        assert response.status_code == 422
        assert "title" in response.json()["detail"]

    def test_unknown_request_type_is_422(self, client: TestClient, backend: _Backend) -> None:
        response = client.post(
            "/product-requests",
            json={"requestType": "boat", "productData": {"title": "Dinghy"}},
            headers=DEALER,
        )

        assert response.status_code == 422

    def test_list_mine(self, client: TestClient, backend: _Backend) -> None:
        request_id = _submit(client)

        response = client.get("/product-requests/mine", headers=DEALER)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["requests"][0]["id"] == request_id


class TestAdminReview:
    def test_admin_routes_refuse_dealers(self, client: TestClient, backend: _Backend) -> None:
        response = client.get("/admin/product-requests", headers=DEALER)

        assert response.status_code == 403

    def test_list_and_filter(self, client: TestClient, backend: _Backend) -> None:
        _submit(client)
        _submit(client, {"requestType": "part", "productData": {"model": "Mirror"}})

        response = client.get(
            "/admin/product-requests",
            params={"status": "pending", "requestType": "part"},
            headers=ADMIN,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["requests"][0]["request_type"] == "part"
        assert data["total_pages"] == 1

    def test_approve_creates_catalog_entity(self, client: TestClient, backend: _Backend) -> None:
        request_id = _submit(client)

        response = client.post(
            f"/admin/product-requests/{request_id}/approve", json={"notes": "ok"}, headers=ADMIN
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approved"
        assert data["entity_kind"] == "vehicle"
        assert data["ref_no"] == "VEH-000001"
        assert backend.catalog.entities[0].title == "Toyota Hiace"

    def test_approve_without_body(self, client: TestClient, backend: _Backend) -> None:
        request_id = _submit(client)

        response = client.post(f"/admin/product-requests/{request_id}/approve", headers=ADMIN)

        assert response.status_code == 200

    def test_second_review_is_409(self, client: TestClient, backend: _Backend) -> None:
        request_id = _submit(client)
        client.post(f"/admin/product-requests/{request_id}/approve", headers=ADMIN)

        response = client.post(
            f"/admin/product-requests/{request_id}/reject",
            json={"reason": "duplicate"},
            headers=ADMIN,
        )

        assert response.status_code == 409
        assert len(backend.catalog.entities) == 1

    def test_reject_requires_reason(self, client: TestClient, backend: _Backend) -> None:
        request_id = _submit(client)

        response = client.post(
            f"/admin/product-requests/{request_id}/reject", json={"reason": " "}, headers=ADMIN
        )

        assert response.status_code == 422

    def test_reject(self, client: TestClient, backend: _Backend) -> None:
        request_id = _submit(client)

        response = client.post(
            f"/admin/product-requests/{request_id}/reject",
            json={"reason": "Photos missing"},
            headers=ADMIN,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "rejected"
        assert backend.catalog.entities == []

    def test_edit_and_approve_with_camel_case_patch(
        self, client: TestClient, backend: _Backend
    ) -> None:
        request_id = _submit(client)

        response = client.post(
            f"/admin/product-requests/{request_id}/edit-approve",
            json={"productData": {"totalPrice": "11500", "mileage": "80000"}},
            headers=ADMIN,
        )

        assert response.status_code == 200
        vehicle = backend.catalog.entities[0]
        assert vehicle.total_price == "11500"
        assert vehicle.mileage == "80000"
        stored = next(iter(backend.requests.rows.values()))
        assert stored.status is RequestStatus.APPROVED
        assert stored.product_data["total_price"] == "11500"

    def test_unknown_request_is_404(self, client: TestClient, backend: _Backend) -> None:
        response = client.get(f"/admin/product-requests/{uuid4()}", headers=ADMIN)

        assert response.status_code == 404

    def test_get_request(self, client: TestClient, backend: _Backend) -> None:
        request_id = _submit(client)

        response = client.get(f"/admin/product-requests/{request_id}", headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["requester_id"] == "dealer-1"

    def test_pending_count_tracks_reviews(self, client: TestClient, backend: _Backend) -> None:
        first = _submit(client)
        _submit(client)

        assert client.get("/admin/product-requests/pending-count", headers=ADMIN).json() == {
            "pending_count": 2
        }

        client.post(f"/admin/product-requests/{first}/approve", headers=ADMIN)

        assert client.get("/admin/product-requests/pending-count", headers=ADMIN).json() == {
            "pending_count": 1
        }

    def test_history(self, client: TestClient, backend: _Backend) -> None:
        request_id = _submit(client)
        client.post(
            f"/admin/product-requests/{request_id}/reject", json={"reason": "dup"}, headers=ADMIN
        )

        response = client.get(f"/admin/product-requests/{request_id}/history", headers=ADMIN)

        assert response.status_code == 200
        actions = [entry["action"] for entry in response.json()["history"]]
        assert actions == ["submitted", "rejected"]


class TestRequestMedia:
    def _install_store(self) -> MagicMock:
        store = MagicMock()
        store.upload = AsyncMock(
            return_value=BlobRef(url="https://cdn/requests/x.jpg", public_id="requests/x.jpg")
        )
        store.delete = AsyncMock()
        app.dependency_overrides[get_media_use_case] = lambda: UploadRequestMedia(store)
        return store

    def test_upload_images(self, client: TestClient) -> None:
        store = self._install_store()

        response = client.post(
            "/product-requests/media/images",
            files=[
                ("images", ("a.jpg", b"\xff\xd8", "image/jpeg")),
                ("images", ("b.jpg", b"\xff\xd8", "image/jpeg")),
            ],
            headers=DEALER,
        )

        assert response.status_code == 200
        assert len(response.json()["images"]) == 2
        assert store.upload.await_count == 2

    def test_upload_non_image_is_422(self, client: TestClient) -> None:
        self._install_store()

        response = client.post(
            "/product-requests/media/images",
            files=[("images", ("a.txt", b"hello", "text/plain"))],
            headers=DEALER,
        )

        assert response.status_code == 422

    def test_delete_request_media(self, client: TestClient) -> None:
        store = self._install_store()

        response = client.delete("/product-requests/media/requests/x.jpg", headers=DEALER)

        assert response.status_code == 204
        store.delete.assert_awaited_once_with("requests/x.jpg")

    def test_delete_other_media_is_403(self, client: TestClient) -> None:
        self._install_store()

        response = client.delete("/product-requests/media/vehicles/x.jpg", headers=DEALER)

        assert response.status_code == 403
