"""Document endpoints - POST/GET /api/fileupload, DELETE /api/fileupload/{blobName}."""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from askdocs.config import Settings, get_settings
from askdocs.errors import InputValidationError, NotFoundError, PayloadTooLargeError
from askdocs.gateways.factory import get_storage_gateway
from askdocs.gateways.storage import StorageGateway
from askdocs.models.documents import StoredDocument, UploadedBlob

router = APIRouter(prefix="/api/fileupload", tags=["documents"])
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadPayload:
    """Validated upload ready for the storage gateway."""

    data: bytes
    filename: str
    content_type: str | None


async def read_upload(
    settings: Annotated[Settings, Depends(get_settings)],
    file: Annotated[UploadFile | None, File()] = None,
) -> UploadPayload:
    """Read and validate the multipart ``file`` field.

    max_upload_bytes applies to the file contents, not the request body;
    UploadLimitMiddleware only rejects bodies beyond the ceiling plus the
    multipart allowance, so a file of exactly the ceiling is accepted.

    Raises:
        InputValidationError: If the file is missing or empty
        PayloadTooLargeError: If the file exceeds max_upload_bytes
    """
    if file is None:
        raise InputValidationError("File is empty.")

    data = await file.read()
    if not data:
        raise InputValidationError("File is empty.")

    if len(data) > settings.max_upload_bytes:
        raise PayloadTooLargeError(
            f"File exceeds the upload limit of {settings.max_upload_bytes} bytes."
        )

    return UploadPayload(
        data=data,
        filename=file.filename or "document",
        content_type=file.content_type,
    )


def require_blob_name(blob_name: str) -> str:
    """Reject blank blob names before the storage gateway is built."""
    if not blob_name.strip():
        raise InputValidationError("Blob name is required.")
    return blob_name


@router.post("", response_model=UploadedBlob)
async def upload_document(
    payload: Annotated[UploadPayload, Depends(read_upload)],
    storage: Annotated[StorageGateway, Depends(get_storage_gateway)],
) -> UploadedBlob:
    """Upload a document to blob storage.

    Returns:
        Generated blob name and its URI
    """
    logger.info(f"[POST /api/fileupload] filename={payload.filename} size={len(payload.data)}")
    return await storage.upload(payload.data, payload.filename, payload.content_type)


@router.get("", response_model=list[StoredDocument])
async def list_documents(
    storage: Annotated[StorageGateway, Depends(get_storage_gateway)],
) -> list[StoredDocument]:
    """List stored documents (empty when nothing was uploaded yet)."""
    return await storage.list_documents()


@router.delete("", status_code=status.HTTP_400_BAD_REQUEST)
async def delete_without_name() -> Response:
    """DELETE without a blob name is always a client error."""
    raise InputValidationError("Blob name is required.")


@router.delete("/{blob_name:path}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    blob_name: Annotated[str, Depends(require_blob_name)],
    storage: Annotated[StorageGateway, Depends(get_storage_gateway)],
) -> Response:
    """Delete a document and its snapshots.

    Raises:
        NotFoundError: If the blob (or its container) does not exist
    """
    if not await storage.delete(blob_name):
        raise NotFoundError("Document not found.")

    logger.info(f"[DELETE /api/fileupload] blob_name={blob_name} deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
