"""
Module: conftest.py
Description: Shared pytest fixtures for event shipper tests.

Provides settings, events and channel/transaction doubles. The channel
is a MagicMock so tests can assert the begin/commit/rollback/close
order the sink drives. pytest-httpx's httpx_mock fixture stands in for
the remote endpoint.
"""

import pytest
from unittest.mock import MagicMock

from event_shipper.config.settings import (
    load_delivery_settings,
    load_extractor_settings,
    load_runner_settings,
)
from event_shipper.models.event import Event

ENDPOINT = "http://localhost:8080/endpoint"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """
    Keep settings independent of the developer environment.

    Runs every test from an empty directory (no .env file) with the
    component environment variables removed.
    """
    monkeypatch.chdir(tmp_path)
    for name in (
        "EXTRACTOR_PROPERTY_NAME",
        "HTTP_SINK_ENDPOINT",
        "HTTP_SINK_CONNECT_TIMEOUT",
        "HTTP_SINK_REQUEST_TIMEOUT",
        "HTTP_SINK_CONTENT_TYPE_HEADER",
        "HTTP_SINK_ACCEPT_HEADER",
        "SINK_RUNNER_BACKOFF_INCREMENT_MS",
        "SINK_RUNNER_MAX_BACKOFF_MS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def extractor_settings():
    """Extractor settings pulling the 'one' property."""
    return load_extractor_settings(property_name="one")


@pytest.fixture
def delivery_settings():
    """Delivery settings pointing at a local test endpoint."""
    return load_delivery_settings(
        endpoint=ENDPOINT,
        connect_timeout=1000,
        request_timeout=1000,
        content_type_header="test/content",
        accept_header="test/accept"
    )


@pytest.fixture
def runner_settings():
    """Runner settings with short, predictable backoff."""
    return load_runner_settings(backoff_increment_ms=100, max_backoff_ms=250)


@pytest.fixture
def sample_event():
    """Event with a plain text body ready for delivery."""
    return Event(body=b"audit event", headers={"source": "test"})


@pytest.fixture
def transaction():
    """Transaction double recording calls."""
    return MagicMock(name="transaction")


@pytest.fixture
def channel(transaction):
    """
    Channel double handing out the transaction fixture.

    Tests set channel.take.return_value (or side_effect) to control
    which events are available.
    """
    ch = MagicMock(name="channel")
    ch.get_transaction.return_value = transaction
    ch.take.return_value = None
    return ch
