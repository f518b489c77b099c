"""Unit tests for the approve / reject / edit-and-approve use cases."""
from copy import deepcopy
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from fakes import (
    CountingSequenceAllocator,
    InMemoryCatalogRepository,
    InMemoryProductRequestRepository,
    InMemoryReviewHistoryRepository,
    RecordingEventPublisher,
)
from src.application.services.catalog_projector import CatalogProjector
from src.application.services.reference_allocator import ReferenceNumberAllocator
from src.application.services.ttl_memo import PENDING_COUNT_KEY, TTLMemo
from src.application.use_cases.review_product_request import (
    ApproveProductRequest,
    ApproveProductRequestInput,
    EditAndApproveProductRequest,
    EditAndApproveProductRequestInput,
    RejectProductRequest,
    RejectProductRequestInput,
)
from src.domain.entities.catalog import Part, Vehicle
from src.domain.entities.identity import Identity
from src.domain.entities.product_request import ProductRequest, RequestAlreadyReviewedError
from src.domain.enums.product_kind import ProductKind
from src.domain.enums.request_status import RequestStatus
from src.domain.enums.user_role import AccountStatus, UserRole
from src.domain.events.domain_events import (
    CatalogEntityCreatedEvent,
    ProductRequestReviewedEvent,
)
from src.domain.exceptions import NotFoundError, PermissionDeniedError, ValidationError

ADMIN = Identity(user_id="admin-1", role=UserRole.ADMIN, name="Root")


def _make_request(
    request_type: ProductKind = ProductKind.VEHICLE, **product_data: object
) -> ProductRequest:
    dealer = Identity(
        user_id="dealer-1", role=UserRole.DEALER, account_status=AccountStatus.ACTIVE
    )
    request = ProductRequest.submit(
        requester=dealer,
        request_type=request_type,
        product_data=product_data or {"title": "toyota hiace", "price": "12000"},
    )
    request.collect_events()
    return request


class _Harness:
    def __init__(self, *requests: ProductRequest, broken_allocator: bool = False) -> None:
        self.repo = InMemoryProductRequestRepository(*requests)
        self.history = InMemoryReviewHistoryRepository()
        self.catalog = InMemoryCatalogRepository()
        self.allocator = CountingSequenceAllocator(broken=broken_allocator)
        self.projector = CatalogProjector(ReferenceNumberAllocator(self.allocator))
        self.publisher = RecordingEventPublisher()
        self.memo = MagicMock(spec=TTLMemo)

    def approve(self) -> ApproveProductRequest:
        return ApproveProductRequest(
            self.repo, self.history, self.catalog, self.projector, self.publisher, self.memo
        )

    def edit_and_approve(self) -> EditAndApproveProductRequest:
        return EditAndApproveProductRequest(
            self.repo, self.history, self.catalog, self.projector, self.publisher, self.memo
        )

    def reject(self) -> RejectProductRequest:
        return RejectProductRequest(self.repo, self.history, self.publisher, self.memo)


class TestApproveProductRequest:
    @pytest.mark.asyncio
    async def test_creates_vehicle_and_links_request(self) -> None:
        request = _make_request()
        h = _Harness(request)

        output = await h.approve().execute(
            ApproveProductRequestInput(request_id=request.id, reviewer=ADMIN, notes="ok")
        )

        assert output.to_status is RequestStatus.APPROVED
        assert output.entity_kind is ProductKind.VEHICLE
        assert output.ref_no == "VEH-000001"
        assert output.reference_degraded is False

        assert len(h.catalog.entities) == 1
        vehicle = h.catalog.entities[0]
        assert isinstance(vehicle, Vehicle)
        assert vehicle.id == output.entity_id
        assert vehicle.title == "Toyota Hiace"
        assert vehicle.source_request_id == request.id

        stored = h.repo.rows[request.id]
        assert stored.status is RequestStatus.APPROVED
        assert stored.reviewed_by == "admin-1"
        assert stored.admin_notes == "ok"
        assert stored.approved_product_id == vehicle.id
        assert stored.approved_product_kind is ProductKind.VEHICLE

    @pytest.mark.asyncio
    async def test_creates_part(self) -> None:
        request = _make_request(ProductKind.PART, model="alternator", price="150", stock="2")
        h = _Harness(request)

        output = await h.approve().execute(
            ApproveProductRequestInput(request_id=request.id, reviewer=ADMIN)
        )

        assert output.ref_no == "APT-000001"
        assert isinstance(h.catalog.entities[0], Part)
        assert h.catalog.entities[0].stock == 2

    @pytest.mark.asyncio
    async def test_records_history_events_and_invalidates_count(self) -> None:
        request = _make_request()
        h = _Harness(request)

        output = await h.approve().execute(
            ApproveProductRequestInput(request_id=request.id, reviewer=ADMIN)
        )

        assert len(h.history.records) == 1
        record = h.history.records[0]
        assert record.from_status is RequestStatus.PENDING
        assert record.to_status is RequestStatus.APPROVED
        assert record.action == "approved"
        assert record.metadata == {"entity_id": str(output.entity_id), "ref_no": "VEH-000001"}

        kinds = [type(e) for e in h.publisher.events]
        assert kinds == [ProductRequestReviewedEvent, CatalogEntityCreatedEvent]
        h.memo.invalidate.assert_called_once_with(PENDING_COUNT_KEY)
        assert h.repo.commits == 1

    @pytest.mark.asyncio
    async def test_failed_commit_publishes_nothing(self) -> None:
        request = _make_request()
        h = _Harness(request)
        h.repo.fail_commit = True

        with pytest.raises(ConnectionError):
            await h.approve().execute(
                ApproveProductRequestInput(request_id=request.id, reviewer=ADMIN)
            )

        assert h.publisher.events == []
        h.memo.invalidate.assert_not_called()

    @pytest.mark.asyncio
    async def test_degraded_reference_still_approves(self) -> None:
        request = _make_request()
        h = _Harness(request, broken_allocator=True)

        output = await h.approve().execute(
            ApproveProductRequestInput(request_id=request.id, reviewer=ADMIN)
        )

        assert output.reference_degraded is True
        assert h.repo.rows[request.id].status is RequestStatus.APPROVED

    @pytest.mark.asyncio
    async def test_failed_catalog_write_leaves_request_pending(self) -> None:
        request = _make_request()
        h = _Harness(request)
        before = deepcopy(h.repo.rows[request.id])
        h.catalog.fail_next = True

        with pytest.raises(ValidationError):
            await h.approve().execute(
                ApproveProductRequestInput(request_id=request.id, reviewer=ADMIN)
            )

        assert h.repo.rows[request.id] == before
        assert h.catalog.entities == []
        assert h.history.records == []
        assert h.publisher.events == []

        output = await h.approve().execute(
            ApproveProductRequestInput(request_id=request.id, reviewer=ADMIN)
        )
        # The number consumed by the failed attempt is never handed out again
        assert output.ref_no == "VEH-000002"

    @pytest.mark.asyncio
    async def test_second_approval_conflicts_without_side_effects(self) -> None:
        request = _make_request()
        h = _Harness(request)
        await h.approve().execute(ApproveProductRequestInput(request_id=request.id, reviewer=ADMIN))
        before = deepcopy(h.repo.rows[request.id])
        allocations = h.allocator.calls

        with pytest.raises(RequestAlreadyReviewedError):
            await h.approve().execute(
                ApproveProductRequestInput(request_id=request.id, reviewer=ADMIN)
            )

        assert h.repo.rows[request.id] == before
        assert h.allocator.calls == allocations
        assert len(h.catalog.entities) == 1
        assert len(h.history.records) == 1

    @pytest.mark.asyncio
    async def test_missing_request_not_found(self) -> None:
        h = _Harness()

        with pytest.raises(NotFoundError):
            await h.approve().execute(ApproveProductRequestInput(request_id=uuid4(), reviewer=ADMIN))

    @pytest.mark.asyncio
    async def test_non_admin_refused(self) -> None:
        request = _make_request()
        h = _Harness(request)
        dealer = Identity(user_id="dealer-1", role=UserRole.DEALER)

        with pytest.raises(PermissionDeniedError):
            await h.approve().execute(
                ApproveProductRequestInput(request_id=request.id, reviewer=dealer)
            )

        assert h.repo.rows[request.id].status is RequestStatus.PENDING


class TestEditAndApproveProductRequest:
    @pytest.mark.asyncio
    async def test_projects_merged_payload(self) -> None:
        request = _make_request(title="toyota hiace", price="12000", color="white")
        h = _Harness(request)

        output = await h.edit_and_approve().execute(
            EditAndApproveProductRequestInput(
                request_id=request.id,
                reviewer=ADMIN,
                patch={"price": "11500", "ref_no": "VEH-000777"},
            )
        )

        vehicle = h.catalog.entities[0]
        assert vehicle.price == "11500"
        assert vehicle.color == "White"
        assert output.ref_no == "VEH-000777"
        assert h.allocator.calls == 0

        stored = h.repo.rows[request.id]
        assert stored.status is RequestStatus.APPROVED
        assert stored.product_data["price"] == "11500"
        assert stored.product_data["color"] == "white"

    @pytest.mark.asyncio
    async def test_history_keeps_patch(self) -> None:
        request = _make_request()
        h = _Harness(request)

        await h.edit_and_approve().execute(
            EditAndApproveProductRequestInput(
                request_id=request.id, reviewer=ADMIN, patch={"mileage": "90000"}
            )
        )

        record = h.history.records[0]
        assert record.action == "edited_and_approved"
        assert record.to_status is RequestStatus.APPROVED
        assert record.metadata["patch"] == {"mileage": "90000"}
        reviewed = [e for e in h.publisher.events if isinstance(e, ProductRequestReviewedEvent)]
        assert reviewed[0].edited is True

    @pytest.mark.asyncio
    async def test_conflict_on_rejected_request(self) -> None:
        request = _make_request()
        h = _Harness(request)
        await h.reject().execute(
            RejectProductRequestInput(request_id=request.id, reviewer=ADMIN, reason="duplicate")
        )
        before = deepcopy(h.repo.rows[request.id])

        with pytest.raises(RequestAlreadyReviewedError):
            await h.edit_and_approve().execute(
                EditAndApproveProductRequestInput(
                    request_id=request.id, reviewer=ADMIN, patch={"price": "1"}
                )
            )

        assert h.repo.rows[request.id] == before
        assert h.catalog.entities == []


class TestRejectProductRequest:
    @pytest.mark.asyncio
    async def test_rejects_with_reason(self) -> None:
        request = _make_request()
        h = _Harness(request)

        output = await h.reject().execute(
            RejectProductRequestInput(
                request_id=request.id, reviewer=ADMIN, reason="Photos missing", notes="resubmit"
            )
        )

        assert output.to_status is RequestStatus.REJECTED
        assert output.entity_id is None
        stored = h.repo.rows[request.id]
        assert stored.status is RequestStatus.REJECTED
        assert stored.rejection_reason == "Photos missing"
        assert stored.admin_notes == "resubmit"
        assert h.catalog.entities == []
        assert h.history.records[0].metadata == {"reason": "Photos missing"}
        h.memo.invalidate.assert_called_once_with(PENDING_COUNT_KEY)

    @pytest.mark.asyncio
    async def test_blank_reason_is_invalid(self) -> None:
        request = _make_request()
        h = _Harness(request)

        with pytest.raises(ValidationError):
            await h.reject().execute(
                RejectProductRequestInput(request_id=request.id, reviewer=ADMIN, reason="  ")
            )

        assert h.repo.rows[request.id].status is RequestStatus.PENDING
        assert h.history.records == []

    @pytest.mark.asyncio
    async def test_cannot_reject_approved_request(self) -> None:
        request = _make_request()
        h = _Harness(request)
        await h.approve().execute(ApproveProductRequestInput(request_id=request.id, reviewer=ADMIN))

        with pytest.raises(RequestAlreadyReviewedError):
            await h.reject().execute(
                RejectProductRequestInput(request_id=request.id, reviewer=ADMIN, reason="late")
            )

        assert h.repo.rows[request.id].status is RequestStatus.APPROVED
