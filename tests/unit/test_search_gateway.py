"""Tests for the search gateway."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from azure.core.exceptions import AzureError

from askdocs.config import Settings
from askdocs.errors import BackendError, ConfigurationError
from askdocs.gateways.search import AzureSearchGateway
from tests.fakes import AsyncIterator


def make_search_client(hits: list[dict]) -> MagicMock:
    client = MagicMock()
    client.search = AsyncMock(return_value=AsyncIterator(hits))
    client.close = AsyncMock()
    return client


class TestSearch:
    """Test AzureSearchGateway.search."""

    @pytest.mark.asyncio
    async def test_queries_content_field_with_top(self) -> None:
        client = make_search_client([{"content": "Warranty is two years."}])
        gateway = AzureSearchGateway(client, max_results=3)

        chunks = await gateway.search("How long is the warranty?")

        assert chunks == ["Warranty is two years."]
        client.search.assert_awaited_once_with(
            search_text="How long is the warranty?",
            select=["content"],
            top=3,
            include_total_count=True,
        )

    @pytest.mark.asyncio
    async def test_skips_hits_without_string_content(self) -> None:
        client = make_search_client(
            [
                {"content": "first"},
                {"title": "no content"},
                {"content": 42},
                {"content": "second"},
            ]
        )
        gateway = AzureSearchGateway(client, max_results=3)

        assert await gateway.search("q") == ["first", "second"]

    @pytest.mark.asyncio
    async def test_never_returns_more_than_max_results(self) -> None:
        client = make_search_client([{"content": f"chunk {i}"} for i in range(5)])
        gateway = AzureSearchGateway(client, max_results=2)

        assert await gateway.search("q") == ["chunk 0", "chunk 1"]

    @pytest.mark.asyncio
    async def test_custom_content_field(self) -> None:
        client = make_search_client([{"chunk": "text", "content": "ignored"}])
        gateway = AzureSearchGateway(client, content_field="chunk")

        assert await gateway.search("q") == ["text"]
        assert client.search.call_args.kwargs["select"] == ["chunk"]

    @pytest.mark.asyncio
    async def test_no_hits_returns_empty_list(self) -> None:
        gateway = AzureSearchGateway(make_search_client([]))

        assert await gateway.search("q") == []

    @pytest.mark.asyncio
    async def test_backend_failure_raises_backend_error(self) -> None:
        client = make_search_client([])
        client.search.side_effect = AzureError("index unavailable")
        gateway = AzureSearchGateway(client)

        with pytest.raises(BackendError, match="Search failed: index unavailable"):
            await gateway.search("q")


class TestFromSettings:
    """Test gateway construction from settings."""

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({}, "Search endpoint is not configured."),
            ({"azure_search_endpoint": "https://search.test"}, "Search index name is not configured."),
            (
                {"azure_search_endpoint": "https://search.test", "azure_search_index_name": "docs"},
                "Search API key is not configured.",
            ),
        ],
    )
    def test_missing_settings_raise(self, overrides: dict[str, str], message: str) -> None:
        settings = Settings(_env_file=None, **overrides)  # type: ignore[call-arg]

        with pytest.raises(ConfigurationError) as exc_info:
            AzureSearchGateway.from_settings(settings)

        assert exc_info.value.message == message

    def test_validate_settings_returns_values(self) -> None:
        settings = Settings(  # type: ignore[call-arg]
            _env_file=None,
            azure_search_endpoint="https://search.test",
            azure_search_index_name="docs",
            azure_search_api_key="secret",
        )

        assert AzureSearchGateway.validate_settings(settings) == (
            "https://search.test",
            "docs",
            "secret",
        )
