"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from prometheus_tasks.core.config.settings import Settings, reload_settings  # noqa: E402
from prometheus_tasks.core.logging.logger import clear_invocation_id  # noqa: E402
from tests.test_fixtures.response_factory import (  # noqa: E402
    PrometheusResponseFactory,
    RecordingTransport,
)

# ============================================================================
# Settings Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """
    Fresh settings for every test.

    Storage goes to the test's tmp_path; everything else uses defaults.
    """
    for name in (
        "PROMETHEUS_URL",
        "PUSHGATEWAY_URL",
        "HTTP_TIMEOUT",
        "TRIGGER_DEFAULT_INTERVAL",
        "TRIGGER_MIN_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("RESULT_STORAGE_DIR", str(tmp_path / "results"))

    settings = reload_settings()
    yield settings

    clear_invocation_id()
    monkeypatch.undo()
    reload_settings()


@pytest.fixture
def fast_retry_settings(tmp_path):
    """Settings with zero backoff so scheduler retries run instantly."""
    return Settings(
        RESULT_STORAGE_DIR=tmp_path / "results",
        TRIGGER_MAX_ATTEMPTS=3,
        TRIGGER_RETRY_BASE_DELAY=0,
        TRIGGER_RETRY_MAX_DELAY=0,
    )


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def responses():
    """Prometheus response body factory."""
    return PrometheusResponseFactory


@pytest.fixture
def sample_vector_body():
    """
    Two-series vector response.

    Mirrors a typical ``up`` query against two scrape targets.
    """
    return PrometheusResponseFactory.vector(
        ({"__name__": "up", "job": "prometheus", "instance": "localhost:9090"}, 1700000000.123, "1"),
        ({"__name__": "up", "job": "node", "instance": "localhost:9100"}, 1700000000.123, "0"),
    )


@pytest.fixture
def vector_transport(sample_vector_body):
    """Transport serving the two-series vector response."""
    return RecordingTransport.json(sample_vector_body)


@pytest.fixture
def empty_transport():
    """Transport serving an empty vector."""
    return RecordingTransport.json(PrometheusResponseFactory.empty_vector())
