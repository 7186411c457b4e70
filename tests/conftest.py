"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import pytest

from tests.fixtures.callbacks import RecordingCallback
from tests.fixtures.webhook_payloads import create_push_payload

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def reset_env() -> Generator[None]:
    """Reset environment variables after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_env() -> dict[str, str]:
    """Standard environment variables for testing."""
    return {
        "SHOVE_CONFIG": "/etc/shove/shove.yaml",
        "SHOVE_SECRET": "verysecret",
        "SHOVE_PORT": "8080",
        "LOG_LEVEL": "DEBUG",
    }


@pytest.fixture
def webhook_secret() -> str:
    """Webhook secret for testing."""
    return "verysecret"


@pytest.fixture
def sample_push_payload() -> dict[str, Any]:
    """Sample GitHub push webhook payload."""
    return create_push_payload()


@pytest.fixture
def recording_callback() -> RecordingCallback:
    """Event callback that records (delivery_id, event) pairs."""
    return RecordingCallback()
