from dataclasses import dataclass

import structlog

from src.application.interfaces.blob_store import BlobRef, BlobStore
from src.domain.entities.identity import Identity
from src.domain.exceptions import PermissionDeniedError, UpstreamError, ValidationError

logger = structlog.get_logger(__name__)

MEDIA_FOLDER = "requests"
MAX_IMAGES_PER_UPLOAD = 25


@dataclass
class MediaFile:
    data: bytes
    content_type: str
    filename: str | None = None


class UploadRequestMedia:
    """
    Use case: Store images / video a seller attaches to a product request.

    The blob store is mandatory here; failures surface as UpstreamError.
    Submitting the request itself only carries the returned URLs.
    """

    def __init__(self, blob_store: BlobStore) -> None:
        self._blob_store = blob_store

    async def upload_images(self, identity: Identity, files: list[MediaFile]) -> list[BlobRef]:
        self._check_seller(identity)
        if not files:
            raise ValidationError("No images provided.")
        if len(files) > MAX_IMAGES_PER_UPLOAD:
            raise ValidationError(f"At most {MAX_IMAGES_PER_UPLOAD} images per upload.")
        for file in files:
            if not file.content_type.startswith("image/"):
                raise ValidationError(f"{file.filename or 'file'} is not an image.")

        refs: list[BlobRef] = []
        try:
            for file in files:
                refs.append(
                    await self._blob_store.upload(
                        file.data,
                        folder=MEDIA_FOLDER,
                        content_type=file.content_type,
                        filename=file.filename,
                    )
                )
        except Exception:
            await self._discard(refs)
            raise
        logger.info("request_images_uploaded", user_id=identity.user_id, count=len(refs))
        return refs

    async def upload_video(self, identity: Identity, file: MediaFile | None) -> BlobRef:
        self._check_seller(identity)
        if file is None or not file.data:
            raise ValidationError("No video provided.")
        if not file.content_type.startswith("video/"):
            raise ValidationError(f"{file.filename or 'file'} is not a video.")

        ref = await self._blob_store.upload(
            file.data,
            folder=MEDIA_FOLDER,
            content_type=file.content_type,
            filename=file.filename,
        )
        logger.info("request_video_uploaded", user_id=identity.user_id, public_id=ref.public_id)
        return ref

    async def delete(self, identity: Identity, public_id: str) -> None:
        self._check_seller(identity)
        if not public_id.startswith(f"{MEDIA_FOLDER}/"):
            raise PermissionDeniedError("Only request media can be deleted.")
        await self._blob_store.delete(public_id)
        logger.info("request_media_deleted", user_id=identity.user_id, public_id=public_id)

    async def _discard(self, refs: list[BlobRef]) -> None:
        """Remove the part of a batch that was stored before a later image failed."""
        for ref in refs:
            try:
                await self._blob_store.delete(ref.public_id)
            except UpstreamError as exc:
                logger.warning("request_media_orphaned", public_id=ref.public_id, error=str(exc))

    @staticmethod
    def _check_seller(identity: Identity) -> None:
        if not (identity.role.is_seller or identity.is_admin):
            raise PermissionDeniedError("Only dealers and agents can upload request media.")
