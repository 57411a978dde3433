"""In-memory gateway fakes shared by unit and integration tests."""

from typing import Any

from askdocs.errors import BackendError
from askdocs.gateways.storage import DEFAULT_CONTENT_TYPE, make_blob_name
from askdocs.models.documents import StoredDocument, UploadedBlob


class AsyncIterator:
    """Async iterator over a fixed list, standing in for SDK pagers."""

    def __init__(self, items: list[Any]) -> None:
        self._items = iter(items)

    def __aiter__(self) -> "AsyncIterator":
        return self

    async def __anext__(self) -> Any:
        try:
            return next(self._items)
        except StopIteration:
            raise StopAsyncIteration from None


class InMemoryStorageGateway:
    """In-memory StorageGateway for route tests."""

    def __init__(self) -> None:
        self.documents: dict[str, StoredDocument] = {}
        self.payloads: dict[str, bytes] = {}
        self.calls: list[str] = []

    async def upload(self, data: bytes, filename: str, content_type: str | None) -> UploadedBlob:
        self.calls.append("upload")
        blob_name = make_blob_name(filename)
        self.payloads[blob_name] = data
        self.documents[blob_name] = StoredDocument(
            name=blob_name,
            size_bytes=len(data),
            format=content_type or DEFAULT_CONTENT_TYPE,
        )
        return UploadedBlob(blob_name=blob_name, blob_uri=f"https://storage.test/documents/{blob_name}")

    async def list_documents(self) -> list[StoredDocument]:
        self.calls.append("list")
        return list(self.documents.values())

    async def delete(self, blob_name: str) -> bool:
        self.calls.append("delete")
        self.payloads.pop(blob_name, None)
        return self.documents.pop(blob_name, None) is not None

    async def close(self) -> None:
        pass


class StaticSearchGateway:
    """SearchGateway returning canned chunks, capped like the real index."""

    def __init__(self, chunks: list[str], max_results: int = 1) -> None:
        self.chunks = chunks
        self.max_results = max_results
        self.queries: list[str] = []

    async def search(self, query: str) -> list[str]:
        self.queries.append(query)
        return self.chunks[: self.max_results]

    async def close(self) -> None:
        pass


class RecordingAnswerGateway:
    """AnswerGateway that records its inputs and returns a fixed answer."""

    def __init__(self, answer: str = "The warranty lasts **two years**.", error: str | None = None) -> None:
        self.answer = answer
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def ask(self, context: str, question: str) -> str:
        self.calls.append((context, question))
        if self.error:
            raise BackendError(self.error)
        return self.answer

    async def close(self) -> None:
        pass

