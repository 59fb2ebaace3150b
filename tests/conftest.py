"""Shared pytest fixtures for assistant core tests."""

import pytest

from assistant_core.core import config as config_module
from assistant_core.data.api_client import CIRCUIT_BREAKER_NAME
from assistant_core.data.fixtures import MockProvider
from assistant_core.data.gateway import AssistantGateway
from assistant_core.store.products import ERIKA, MARVIN
from assistant_core.store.store import Store
from assistant_core.utils.reliability import reset_circuit_breaker

ASSISTANT_ENV_VARS = (
    "ASSISTANT_API_URL",
    "ASSISTANT_GATEWAY_URL",
    "ASSISTANT_API_KEY",
    "ASSISTANT_REQUEST_TIMEOUT",
    "ASSISTANT_MAX_RETRIES",
    "ASSISTANT_FALLBACK_TO_MOCK",
    "ASSISTANT_PRODUCT",
    "ASSISTANT_DATA_MODE",
    "ASSISTANT_SNAPSHOT_PATH",
    "ASSISTANT_AUTOSAVE",
    "ENVIRONMENT",
    "DEBUG",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep tests independent of the developer's shell and .env file."""
    for name in ASSISTANT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    config_module.reset_settings()
    reset_circuit_breaker(CIRCUIT_BREAKER_NAME)
    yield
    config_module.reset_settings()
    reset_circuit_breaker(CIRCUIT_BREAKER_NAME)


@pytest.fixture
def erika_store():
    return Store(ERIKA)


@pytest.fixture
def marvin_store():
    return Store(MARVIN)


@pytest.fixture
def mock_gateway():
    return AssistantGateway(mock=MockProvider())
