# tests/core/test_viewing_history.py
"""Tests for the recently-viewed use case"""
import pytest
from unittest.mock import AsyncMock

from cinema_tokens.core.exceptions import SessionNotFoundError
from cinema_tokens.core.viewing_history import ViewingHistory
from cinema_tokens.models.identity import Identity
from cinema_tokens.services.identity import IdentityLookup
from tests.redis_mocks import drop_connection


@pytest.fixture
def identity_lookup():
    """Lookup that knows two sessions"""
    users = {
        "sid-alice": Identity(user_id=1, login="alice"),
        "sid-bob": Identity(user_id=2, login="bob"),
    }

    async def get_identity(sid):
        if sid not in users:
            raise SessionNotFoundError(sid)
        return users[sid]

    lookup = AsyncMock(spec=IdentityLookup)
    lookup.get_identity.side_effect = get_identity
    return lookup


@pytest.fixture
def history(identity_lookup, near_films_store):
    return ViewingHistory(identity_lookup, near_films_store)


class TestViewingHistory:

    async def test_record_and_list(self, history, near_films_client):
        assert await history.record_view("sid-alice", 42) is True
        assert await history.record_view("sid-alice", 43) is True

        assert await history.recent_films("sid-alice") == {42, 43}
        assert near_films_client.hashes["nearfilms:1"] == {"42": "1", "43": "1"}

    async def test_users_do_not_share_history(self, history):
        await history.record_view("sid-bob", 7)
        await history.record_view("sid-alice", 42)

        assert await history.recent_films("sid-alice") == {42}
        assert await history.recent_films("sid-bob") == {7}

    async def test_forget_film(self, history):
        await history.record_view("sid-alice", 42)

        assert await history.forget_film("sid-alice", 42) is True
        assert await history.recent_films("sid-alice") == set()

    async def test_unknown_session_propagates(self, history, near_films_client):
        with pytest.raises(SessionNotFoundError):
            await history.record_view("sid-nobody", 42)

        near_films_client.hset.assert_not_called()

    async def test_store_down(self, history, near_films_store, near_films_client):
        await history.record_view("sid-alice", 42)
        await drop_connection(near_films_store, near_films_client)

        assert await history.record_view("sid-alice", 43) is False
        assert await history.recent_films("sid-alice") == set()
