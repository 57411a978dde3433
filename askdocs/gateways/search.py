"""Retrieval gateway - managed search index wrapper."""

from typing import Protocol

from azure.core.credentials import AzureKeyCredential
from azure.core.exceptions import AzureError
from azure.search.documents.aio import SearchClient

from askdocs.config import Settings, require_setting
from askdocs.errors import BackendError
from askdocs.utils.metrics import track_gateway_call


class SearchGateway(Protocol):
    """Protocol for chunk retrieval backends."""

    async def search(self, query: str) -> list[str]:
        """Return at most max_results chunk texts in backend-ranked order."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...


class AzureSearchGateway:
    """Azure AI Search implementation of SearchGateway.

    No re-ranking, filtering or deduplication happens here; hits without a
    string value in the content field are skipped.
    """

    def __init__(
        self,
        search_client: SearchClient,
        max_results: int = 1,
        content_field: str = "content",
    ) -> None:
        self._client = search_client
        self.max_results = max_results
        self.content_field = content_field

    @staticmethod
    def validate_settings(settings: Settings) -> tuple[str, str, str]:
        """Return (endpoint, index name, api key).

        Raises:
            ConfigurationError: If endpoint, index name or API key is absent
        """
        endpoint = require_setting(
            settings.azure_search_endpoint, "Search endpoint is not configured."
        )
        index_name = require_setting(
            settings.azure_search_index_name, "Search index name is not configured."
        )
        api_key = require_setting(settings.azure_search_api_key, "Search API key is not configured.")
        return endpoint, index_name, api_key

    @classmethod
    def from_settings(cls, settings: Settings) -> "AzureSearchGateway":
        """Build gateway from settings."""
        endpoint, index_name, api_key = cls.validate_settings(settings)
        client = SearchClient(endpoint, index_name, AzureKeyCredential(api_key))
        return cls(
            client,
            max_results=settings.azure_search_max_results,
            content_field=settings.azure_search_content_field,
        )

    async def search(self, query: str) -> list[str]:
        chunks: list[str] = []
        with track_gateway_call("search", "query", max_results=self.max_results):
            try:
                results = await self._client.search(
                    search_text=query,
                    select=[self.content_field],
                    top=self.max_results,
                    include_total_count=True,
                )
                async for result in results:
                    value = result.get(self.content_field)
                    if isinstance(value, str):
                        chunks.append(value)
                    if len(chunks) >= self.max_results:
                        break
            except AzureError as e:
                raise BackendError(f"Search failed: {e.message}") from e

        return chunks

    async def close(self) -> None:
        await self._client.close()
