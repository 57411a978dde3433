"""Shared pytest fixtures for all test suites."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from askdocs.config import Settings, get_settings
from askdocs.gateways.factory import get_answer_gateway, get_search_gateway, get_storage_gateway
from askdocs.main import create_app
from tests.fakes import InMemoryStorageGateway, RecordingAnswerGateway, StaticSearchGateway


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment's .env file."""
    return Settings(_env_file=None, max_upload_bytes=1024)  # type: ignore[call-arg]


@pytest.fixture
def storage() -> InMemoryStorageGateway:
    return InMemoryStorageGateway()


@pytest.fixture
def search() -> StaticSearchGateway:
    return StaticSearchGateway(
        chunks=[
            "The warranty covers two years from purchase.",
            "Returns are accepted within 30 days.",
            "Support is available on weekdays.",
        ],
        max_results=2,
    )


@pytest.fixture
def answer() -> RecordingAnswerGateway:
    return RecordingAnswerGateway()


@pytest.fixture
def api(test_settings: Settings) -> FastAPI:
    """App assembled from test settings, which every route also receives."""
    application = create_app(test_settings)
    application.dependency_overrides[get_settings] = lambda: test_settings
    return application


@pytest.fixture
def client(
    api: FastAPI,
    storage: InMemoryStorageGateway,
    search: StaticSearchGateway,
    answer: RecordingAnswerGateway,
) -> TestClient:
    """Test client with every gateway replaced by an in-memory fake."""
    api.dependency_overrides[get_storage_gateway] = lambda: storage
    api.dependency_overrides[get_search_gateway] = lambda: search
    api.dependency_overrides[get_answer_gateway] = lambda: answer
    return TestClient(api)


@pytest.fixture
def unconfigured_client(api: FastAPI) -> TestClient:
    """Test client using the real gateway factories with no Azure settings."""
    return TestClient(api)
