# tests/core/conftest.py
"""Fixtures for use-case tests: one mocked store per backend"""
from unittest.mock import patch

import pytest

from cinema_tokens.core.auth_core import AuthCore
from cinema_tokens.services.token_store import EphemeralTokenStore
from tests.redis_mocks import REDIS_PATCH_TARGET, make_mock_redis_client


async def _open_mocked(config, name, client) -> EphemeralTokenStore:
    store = EphemeralTokenStore(config, name=name)
    with patch(REDIS_PATCH_TARGET, return_value=client):
        await store.initialize()
    return store


@pytest.fixture
def sessions_client():
    return make_mock_redis_client()


@pytest.fixture
def csrf_client():
    return make_mock_redis_client()


@pytest.fixture
def near_films_client():
    return make_mock_redis_client()


@pytest.fixture
async def sessions_store(store_config, sessions_client):
    store = await _open_mocked(store_config, "sessions", sessions_client)
    yield store
    await store.shutdown()


@pytest.fixture
async def csrf_store(store_config, csrf_client):
    store = await _open_mocked(store_config, "csrf", csrf_client)
    yield store
    await store.shutdown()


@pytest.fixture
async def near_films_store(store_config, near_films_client):
    store = await _open_mocked(store_config, "near_films", near_films_client)
    yield store
    await store.shutdown()


@pytest.fixture
def auth_core(sessions_store, csrf_store):
    return AuthCore(sessions_store, csrf_store)
