"""
Test configuration for ordbit server tests.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from ordbit_server.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, http_host="127.0.0.1", http_port=0)


@pytest.fixture
def service() -> MagicMock:
    mock = MagicMock()
    mock.deploy = AsyncMock()
    mock.mint = AsyncMock()
    mock.transfer = AsyncMock()
    mock.close = AsyncMock()
    return mock
