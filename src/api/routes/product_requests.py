from fastapi import APIRouter, Body, Depends, File, Query, UploadFile, status

from src.api.dependencies import (
    get_identity,
    get_list_my_requests_use_case,
    get_media_use_case,
    get_submit_use_case,
)
from src.api.schemas.product_requests import (
    ImageUploadResponse,
    MediaResponse,
    PaginatedProductRequestsResponse,
    ProductRequestCreate,
    ProductRequestCreatedResponse,
    ProductRequestResponse,
)
from src.application.use_cases.get_product_requests import ListMyProductRequests
from src.application.use_cases.submit_product_request import (
    SubmitProductRequest,
    SubmitProductRequestInput,
)
from src.application.use_cases.upload_request_media import MediaFile, UploadRequestMedia
from src.domain.entities.identity import Identity
from src.domain.enums.product_kind import ProductKind

router = APIRouter(prefix="/product-requests", tags=["product-requests"])


async def _read(upload: UploadFile) -> MediaFile:
    return MediaFile(
        data=await upload.read(),
        content_type=upload.content_type or "application/octet-stream",
        filename=upload.filename,
    )


@router.post("", response_model=ProductRequestCreatedResponse, status_code=status.HTTP_201_CREATED)
async def submit_product_request(
    body: ProductRequestCreate = Body(...),
    identity: Identity = Depends(get_identity),
    use_case: SubmitProductRequest = Depends(get_submit_use_case),
) -> ProductRequestCreatedResponse:
    """Submit a vehicle or part listing for administrator review."""
    result = await use_case.execute(
        SubmitProductRequestInput(
            identity=identity,
            request_type=ProductKind(body.request_type),
            product_data=body.product_data.to_payload(),
        )
    )
    return ProductRequestCreatedResponse(id=result.request_id, status=result.status)


@router.get("/mine", response_model=PaginatedProductRequestsResponse)
async def list_my_product_requests(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    identity: Identity = Depends(get_identity),
    use_case: ListMyProductRequests = Depends(get_list_my_requests_use_case),
) -> PaginatedProductRequestsResponse:
    result = await use_case.execute(identity, page=page, limit=limit)
    return PaginatedProductRequestsResponse(
        requests=[ProductRequestResponse.from_entity(r) for r in result.requests],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.post("/media/images", response_model=ImageUploadResponse)
async def upload_request_images(
    images: list[UploadFile] = File(...),
    identity: Identity = Depends(get_identity),
    use_case: UploadRequestMedia = Depends(get_media_use_case),
) -> ImageUploadResponse:
    refs = await use_case.upload_images(identity, [await _read(image) for image in images])
    return ImageUploadResponse(
        images=[MediaResponse(url=ref.url, public_id=ref.public_id) for ref in refs]
    )


@router.post("/media/video", response_model=MediaResponse)
async def upload_request_video(
    video: UploadFile = File(...),
    identity: Identity = Depends(get_identity),
    use_case: UploadRequestMedia = Depends(get_media_use_case),
) -> MediaResponse:
    ref = await use_case.upload_video(identity, await _read(video))
    return MediaResponse(url=ref.url, public_id=ref.public_id)


@router.delete("/media/{public_id:path}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_request_media(
    public_id: str,
    identity: Identity = Depends(get_identity),
    use_case: UploadRequestMedia = Depends(get_media_use_case),
) -> None:
    await use_case.delete(identity, public_id)
