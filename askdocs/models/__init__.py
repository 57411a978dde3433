"""Models package - re-exports for convenience."""

from askdocs.models.chat import ChatRequest, ChatResponse
from askdocs.models.documents import StoredDocument, UploadedBlob

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "StoredDocument",
    "UploadedBlob",
]
