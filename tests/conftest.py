# tests/conftest.py
"""Shared fixtures for token store tests"""
from unittest.mock import patch

import pytest

from cinema_tokens.core.config import RedisStoreSettings
from cinema_tokens.services.token_store import EphemeralTokenStore
from tests.redis_mocks import REDIS_PATCH_TARGET, make_mock_redis_client


@pytest.fixture
def store_config():
    """Test configuration with a long probe interval"""
    return RedisStoreSettings(host="localhost", port=6379, db=0, timer=60)


@pytest.fixture
def mock_redis_client():
    return make_mock_redis_client()


@pytest.fixture
async def token_store(store_config, mock_redis_client):
    """Initialized store on top of the mock client"""
    store = EphemeralTokenStore(store_config, name="test-store")

    with patch(REDIS_PATCH_TARGET, return_value=mock_redis_client):
        await store.initialize()

    yield store

    await store.shutdown()
