"""Gateway construction from settings and FastAPI dependency providers.

Each provider builds its gateway per request from the injected Settings and
closes it once the response is produced. Missing configuration surfaces as
ConfigurationError (HTTP 500) before any route logic runs.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends

from askdocs.config import Settings, get_settings
from askdocs.errors import ConfigurationError
from askdocs.gateways.answer import AnswerGateway, AzureOpenAIAnswerGateway
from askdocs.gateways.search import AzureSearchGateway, SearchGateway
from askdocs.gateways.storage import AzureBlobStorageGateway, StorageGateway


async def get_storage_gateway(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncGenerator[StorageGateway, None]:
    """Provide a storage gateway for one request."""
    gateway = AzureBlobStorageGateway.from_settings(settings)
    try:
        yield gateway
    finally:
        await gateway.close()


async def get_search_gateway(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncGenerator[SearchGateway, None]:
    """Provide a search gateway for one request."""
    gateway = AzureSearchGateway.from_settings(settings)
    try:
        yield gateway
    finally:
        await gateway.close()


async def get_answer_gateway(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncGenerator[AnswerGateway, None]:
    """Provide an answer gateway for one request."""
    gateway = AzureOpenAIAnswerGateway.from_settings(settings)
    try:
        yield gateway
    finally:
        await gateway.close()


def check_configuration(settings: Settings) -> dict[str, str]:
    """Report which gateways have their required settings.

    Builds no SDK clients; only runs the same validation the factories use.

    Returns:
        Mapping gateway name -> "configured" | "not_configured: <reason>"
    """
    validators = {
        "storage": AzureBlobStorageGateway.validate_settings,
        "search": AzureSearchGateway.validate_settings,
        "answer": AzureOpenAIAnswerGateway.validate_settings,
    }

    status: dict[str, str] = {}
    for gateway, validate in validators.items():
        try:
            validate(settings)
            status[gateway] = "configured"
        except ConfigurationError as e:
            status[gateway] = f"not_configured: {e.message}"
    return status
