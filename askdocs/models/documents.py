"""Document domain models."""

from datetime import datetime

from pydantic import Field

from askdocs.models.common import CamelModel


class StoredDocument(CamelModel):
    """Blob metadata as listed from the storage container."""

    name: str = Field(..., description="Blob name, <random-id>-<original filename>")
    size_bytes: int = Field(0, ge=0)
    format: str = Field("application/octet-stream", description="Stored content type")
    uploaded_on: datetime | None = None


class UploadedBlob(CamelModel):
    """Identity and address of a freshly uploaded blob."""

    blob_name: str
    blob_uri: str
