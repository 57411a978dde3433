"""Storage gateway - blob container wrapper for uploaded documents."""

import logging
import uuid
from pathlib import PureWindowsPath
from typing import Protocol

from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import ContainerClient

from askdocs.config import Settings, require_setting
from askdocs.errors import BackendError, ConfigurationError
from askdocs.models.documents import StoredDocument, UploadedBlob
from askdocs.utils.metrics import track_gateway_call

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def make_blob_name(filename: str) -> str:
    """Build a collision-free blob name from the client's file name.

    Directory components (either separator) are dropped; the random hex
    prefix keeps two uploads of the same file apart.
    """
    basename = PureWindowsPath(filename).name or "document"
    return f"{uuid.uuid4().hex}-{basename}"


class StorageGateway(Protocol):
    """Protocol for document storage backends."""

    async def upload(self, data: bytes, filename: str, content_type: str | None) -> UploadedBlob:
        """Persist a payload under a freshly generated blob name."""
        ...

    async def list_documents(self) -> list[StoredDocument]:
        """List stored documents; empty when the container does not exist."""
        ...

    async def delete(self, blob_name: str) -> bool:
        """Delete a blob and its snapshots; False when it does not exist."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...


class AzureBlobStorageGateway:
    """Azure Blob Storage implementation of StorageGateway."""

    def __init__(self, container_client: ContainerClient) -> None:
        """Initialize gateway.

        Args:
            container_client: Async container client (injected for testing)
        """
        self._container = container_client

    @staticmethod
    def validate_settings(settings: Settings) -> tuple[str, str]:
        """Return (container name, connection string).

        Raises:
            ConfigurationError: If container name or connection string is absent
        """
        container_name = require_setting(
            settings.azure_storage_container_name, "Container name is required."
        )
        connection_string = require_setting(
            settings.azure_storage_connection_string,
            "Storage connection string is not configured.",
        )
        return container_name, connection_string

    @classmethod
    def from_settings(cls, settings: Settings) -> "AzureBlobStorageGateway":
        """Build gateway from settings."""
        container_name, connection_string = cls.validate_settings(settings)
        try:
            client = ContainerClient.from_connection_string(connection_string, container_name)
        except ValueError as e:
            raise ConfigurationError(f"Storage connection string is invalid: {e}") from e
        return cls(client)

    async def upload(self, data: bytes, filename: str, content_type: str | None) -> UploadedBlob:
        blob_name = make_blob_name(filename)
        with track_gateway_call("storage", "upload", blob_name=blob_name, size_bytes=len(data)):
            try:
                await self._ensure_container()
                blob_client = self._container.get_blob_client(blob_name)
                await blob_client.upload_blob(
                    data,
                    content_settings=ContentSettings(content_type=content_type or DEFAULT_CONTENT_TYPE),
                    overwrite=False,
                )
            except AzureError as e:
                raise BackendError(f"Upload failed: {e.message}") from e

        return UploadedBlob(blob_name=blob_name, blob_uri=blob_client.url)

    async def list_documents(self) -> list[StoredDocument]:
        documents: list[StoredDocument] = []
        with track_gateway_call("storage", "list"):
            try:
                if not await self._container.exists():
                    logger.info("Container does not exist yet, returning empty document list")
                    return documents

                async for blob in self._container.list_blobs():
                    content_type = blob.content_settings.content_type if blob.content_settings else None
                    documents.append(
                        StoredDocument(
                            name=blob.name,
                            size_bytes=blob.size or 0,
                            format=content_type or DEFAULT_CONTENT_TYPE,
                            uploaded_on=blob.creation_time,
                        )
                    )
            except AzureError as e:
                raise BackendError(f"Listing documents failed: {e.message}") from e

        return documents

    async def delete(self, blob_name: str) -> bool:
        with track_gateway_call("storage", "delete", blob_name=blob_name):
            try:
                if not await self._container.exists():
                    return False
                await self._container.delete_blob(blob_name, delete_snapshots="include")
            except ResourceNotFoundError:
                return False
            except AzureError as e:
                raise BackendError(f"Delete failed: {e.message}") from e
        return True

    async def close(self) -> None:
        await self._container.close()

    async def _ensure_container(self) -> None:
        """Create the container on first upload."""
        try:
            await self._container.create_container()
            logger.info("Created storage container")
        except ResourceExistsError:
            pass
