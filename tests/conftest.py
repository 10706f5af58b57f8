# SPDX-License-Identifier: Apache-2.0
"""
Shared fixtures for the puffer SDK test suite.

Orchestrator tests run against `RecordingTransport`, so every request body
can be inspected and no test needs a network. Transport, client and CLI
tests mock httpx with respx instead.
"""

from __future__ import annotations

import pytest

from puffer_sdk.config import API_KEY_ENV, BASE_URL_ENV, REGION_ENV, TIMEOUT_ENV, ClientConfig
from puffer_sdk.namespace import Namespace
from tests.mock.mock_transport import RecordingMetrics, RecordingTransport

TEST_BASE_URL = "https://puffer.test"
TEST_API_KEY = "tpuf_test_key"


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def metrics() -> RecordingMetrics:
    return RecordingMetrics()


@pytest.fixture
def ns(transport: RecordingTransport, metrics: RecordingMetrics) -> Namespace:
    return Namespace("docs", transport, metrics=metrics)


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(api_key=TEST_API_KEY, base_url=TEST_BASE_URL)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's real credentials out of every test."""
    for name in (API_KEY_ENV, REGION_ENV, BASE_URL_ENV, TIMEOUT_ENV):
        monkeypatch.delenv(name, raising=False)
