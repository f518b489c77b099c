import json
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog

from src.application.interfaces.event_publisher import EventPublisher
from src.application.interfaces.product_request_repository import ProductRequestRepository
from src.application.interfaces.review_history_repository import ReviewHistoryRepository
from src.application.services.ttl_memo import PENDING_COUNT_KEY, TTLMemo
from src.domain.entities.identity import Identity
from src.domain.entities.product_request import ProductRequest
from src.domain.enums.product_kind import ProductKind
from src.domain.enums.request_status import RequestStatus
from src.domain.enums.user_role import AccountStatus
from src.domain.exceptions import PermissionDeniedError
from src.domain.services.lenient_numbers import parse_leniently

logger = structlog.get_logger(__name__)

# Stored in place of an unparseable price / stock so downstream numeric columns stay populated
NUMERIC_PLACEHOLDER = 1


def _string_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(v) for v in value if v is not None]
    if value is None or value == "":
        return []
    return [str(value)]


def _image_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str)]
    if isinstance(value, str) and value:
        try:
            parsed = json.loads(value)
        except ValueError:
            return [value]
        if isinstance(parsed, list):
            return [v for v in parsed if isinstance(v, str)]
        return [value]
    return []


def _numeric_text(value: Any) -> str:
    parsed = parse_leniently(value)
    return str(parsed if parsed is not None else NUMERIC_PLACEHOLDER)


def sanitize_product_data(request_type: ProductKind, data: dict[str, Any]) -> dict[str, Any]:
    """
    Normalize a seller payload before it is stored.

    Raw price / stock text survives in ``*_original``. Unknown keys pass
    through untouched.
    """
    sanitized = dict(data)

    for key in ("stock", "price"):
        if sanitized.get(key) is not None:
            raw = sanitized[key]
            sanitized[f"{key}_original"] = str(raw)
            sanitized[key] = _numeric_text(raw)

    if request_type is ProductKind.PART:
        make = sanitized.get("make")
        if make and not sanitized.get("brand"):
            if str(make).lower() == "custom" and sanitized.get("custom_maker"):
                sanitized["brand"] = sanitized["custom_maker"]
            else:
                sanitized["brand"] = make
        if sanitized.get("model") and not sanitized.get("name"):
            sanitized["name"] = sanitized["model"]
        if sanitized.get("year") is not None:
            sanitized["year"] = str(sanitized["year"])

    sanitized["compatible_vehicles"] = _string_list(sanitized.get("compatible_vehicles"))

    images = _image_list(sanitized.get("images"))
    if not images and isinstance(sanitized.get("image"), str) and sanitized["image"]:
        images = [sanitized["image"]]
    if images:
        sanitized["images"] = images
    else:
        sanitized.pop("images", None)
    if "image" in sanitized and not isinstance(sanitized["image"], str):
        del sanitized["image"]

    return sanitized


@dataclass
class SubmitProductRequestInput:
    identity: Identity
    request_type: ProductKind
    product_data: dict[str, Any]


@dataclass
class SubmitProductRequestOutput:
    request_id: UUID
    status: RequestStatus


class SubmitProductRequest:
    """
    Use case: A dealer or agent submits a listing for administrator review.

    Only active seller accounts may submit. The request is stored pending;
    nothing is written to the live catalog until an administrator approves.
    """

    def __init__(
        self,
        request_repo: ProductRequestRepository,
        history_repo: ReviewHistoryRepository,
        event_publisher: EventPublisher,
        stats_memo: TTLMemo,
    ) -> None:
        self._request_repo = request_repo
        self._history_repo = history_repo
        self._event_publisher = event_publisher
        self._stats_memo = stats_memo

    async def execute(self, input_data: SubmitProductRequestInput) -> SubmitProductRequestOutput:
        identity = input_data.identity
        if identity.role.is_seller and identity.account_status is not AccountStatus.ACTIVE:
            raise PermissionDeniedError("Your account must be active to submit product requests.")

        request = ProductRequest.submit(
            requester=identity,
            request_type=input_data.request_type,
            product_data=sanitize_product_data(input_data.request_type, input_data.product_data),
        )

        await self._request_repo.save(request)
        await self._history_repo.save(
            request_id=request.id,
            from_status=None,
            to_status=RequestStatus.PENDING,
            action="submitted",
            reviewed_by=identity.user_id,
        )
        await self._request_repo.commit()

        await self._event_publisher.publish_many(request.collect_events())
        self._stats_memo.invalidate(PENDING_COUNT_KEY)

        logger.info(
            "product_request_submitted",
            request_id=str(request.id),
            request_type=request.request_type.value,
            requester_id=identity.user_id,
            requester_role=identity.role.value,
        )

        return SubmitProductRequestOutput(request_id=request.id, status=request.status)
