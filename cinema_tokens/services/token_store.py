# cinema_tokens/services/token_store.py
"""
Ephemeral token store on top of Redis.

Holds session tokens, CSRF tokens and per-user "recently viewed" hashes.
Every instance owns one client, one connectivity flag and one probe loop;
the application opens one instance per backend (sessions, CSRF, near films).

Failure model:
- create/check/get/list are gated on the connectivity flag and return a
  zero value without touching Redis when the flag is down (soft fail)
- deletes are never gated
- a Redis error while the flag is (possibly stale) up raises BackendError
"""
import logging
from typing import Any, Dict, Optional, Set

import redis.asyncio as redis
from redis.exceptions import RedisError

from cinema_tokens.core.config import RedisStoreSettings
from cinema_tokens.core.exceptions import BackendError, SessionNotFoundError
from cinema_tokens.core.liveness import ConnectivityMonitor
from cinema_tokens.core.service_base import BaseService
from cinema_tokens.models.tokens import CSRF_TTL, SESSION_TTL

logger = logging.getLogger(__name__)

NEAR_FILMS_PREFIX = "nearfilms:"
NEAR_FILMS_MARKER = "1"


def near_films_key(user_id: int) -> str:
    return f"{NEAR_FILMS_PREFIX}{user_id}"


class EphemeralTokenStore(BaseService[RedisStoreSettings]):
    """
    Short-lived tokens and recently-viewed sets with soft failure.

    Create operations write and then read back to compute their result.
    The two round-trips are not atomic: a delete landing in between makes
    the create report False.
    """

    def __init__(self, config: Optional[RedisStoreSettings] = None, name: str = "token-store"):
        super().__init__(config or RedisStoreSettings(), logging.getLogger(f"{__name__}.{name}"), name)
        self._monitor: Optional[ConnectivityMonitor] = None
        self._soft_failures = 0
        self._backend_errors = 0

    async def _initialize_client(self) -> redis.Redis:
        client = redis.Redis(
            host=self.config.host,
            port=self.config.port,
            password=self.config.password,
            db=self.config.db,
            decode_responses=True,
            socket_timeout=self.config.socket_timeout
        )

        try:
            await client.ping()
        except Exception:
            await client.aclose()
            raise

        self.logger.info(f"Redis connection successful ({self.config.host}:{self.config.port}/{self.config.db})")
        return client

    async def _on_initialized(self) -> None:
        self._monitor = ConnectivityMonitor(self._client.ping, self.config.timer, self.service_name)
        self._monitor.start()

    async def _cleanup(self) -> None:
        if self._monitor:
            await self._monitor.stop()
            self._monitor = None
        if self._client:
            try:
                await self._client.aclose()
            except Exception as e:
                self.logger.warning(f"Error closing Redis client: {e}")

    @property
    def monitor(self) -> Optional[ConnectivityMonitor]:
        return self._monitor

    async def is_connected(self) -> bool:
        """Current (possibly stale) belief about backend reachability"""
        if self._client is None or self._monitor is None:
            return False
        return await self._monitor.is_connected()

    async def _gate(self, operation: str) -> bool:
        if await self.is_connected():
            return True
        self._soft_failures += 1
        self.logger.error(f"Redis {self.service_name} connection lost, {operation} skipped")
        return False

    def _backend_error(self, error: Exception, key: str, operation: str) -> BackendError:
        self._backend_errors += 1
        self.logger.error(f"Redis {operation} failed for key '{key}': {error}")
        return BackendError(f"Redis {operation} failed: {error}", key=key, operation=operation)

    # Sessions

    async def create_session(self, token: str, login: str) -> bool:
        """
        Store token -> login for 24 hours.

        Returns:
            True if the token is readable right after the write,
            False on soft failure
        """
        if not await self._gate("create_session"):
            return False

        try:
            await self._client.setex(token, int(SESSION_TTL.total_seconds()), login)
        except RedisError as e:
            raise self._backend_error(e, token, "setex") from e

        return await self.check_session(token)

    async def check_session(self, token: str) -> bool:
        """True if the session token exists. A missing key is not an error."""
        return await self._check_token(token, "check_session")

    async def get_session_owner(self, token: str) -> str:
        """
        Login that owns the session.

        Raises:
            SessionNotFoundError: If the token does not exist
            BackendError: If Redis fails
        """
        if not await self._gate("get_session_owner"):
            return ""

        try:
            value = await self._client.get(token)
        except RedisError as e:
            raise self._backend_error(e, token, "get") from e

        if value is None:
            self.logger.error(f"Cannot find session {token[:8]}...")
            raise SessionNotFoundError(token)

        return value

    async def delete_session(self, token: str) -> bool:
        return await self._delete_token(token)

    # CSRF tokens

    async def create_csrf_token(self, token: str) -> bool:
        """Store the token under itself for 3 hours"""
        if not await self._gate("create_csrf_token"):
            return False

        try:
            await self._client.setex(token, int(CSRF_TTL.total_seconds()), token)
        except RedisError as e:
            raise self._backend_error(e, token, "setex") from e

        return await self.check_csrf_token(token)

    async def check_csrf_token(self, token: str) -> bool:
        return await self._check_token(token, "check_csrf_token")

    async def delete_csrf_token(self, token: str) -> bool:
        return await self._delete_token(token)

    async def _check_token(self, token: str, operation: str) -> bool:
        if not await self._gate(operation):
            return False

        try:
            value = await self._client.get(token)
        except RedisError as e:
            raise self._backend_error(e, token, "get") from e

        if value is None:
            self.logger.info(f"Key {token[:8]}... not found")
            return False

        return True

    def _require_client(self, key: str, operation: str) -> None:
        # Deletes skip the connectivity gate but still need an open client
        if self._client is None:
            self._backend_errors += 1
            raise BackendError(
                f"{self.service_name} is not initialized", key=key, operation=operation
            )

    async def _delete_token(self, token: str) -> bool:
        self._require_client(token, "delete")
        try:
            await self._client.delete(token)
        except RedisError as e:
            raise self._backend_error(e, token, "delete") from e
        return True

    # Recently viewed

    async def add_recently_viewed(self, user_id: int, item_id: int) -> bool:
        """Add item_id to the user's set, then confirm membership"""
        if not await self._gate("add_recently_viewed"):
            return False

        key = near_films_key(user_id)
        try:
            await self._client.hset(key, str(item_id), NEAR_FILMS_MARKER)
        except RedisError as e:
            raise self._backend_error(e, key, "hset") from e

        return await self.has_recently_viewed(user_id, item_id)

    async def has_recently_viewed(self, user_id: int, item_id: int) -> bool:
        if not await self._gate("has_recently_viewed"):
            return False

        key = near_films_key(user_id)
        try:
            return bool(await self._client.hexists(key, str(item_id)))
        except RedisError as e:
            raise self._backend_error(e, key, "hexists") from e

    async def list_recently_viewed(self, user_id: int) -> Set[int]:
        """All item ids the user has viewed. No order."""
        if not await self._gate("list_recently_viewed"):
            return set()

        key = near_films_key(user_id)
        try:
            fields = await self._client.hgetall(key)
        except RedisError as e:
            raise self._backend_error(e, key, "hgetall") from e

        items: Set[int] = set()
        for field in fields:
            try:
                items.add(int(field))
            except ValueError:
                self.logger.error(f"Skipping malformed item id '{field}' in {key}")
        return items

    async def remove_recently_viewed(self, user_id: int, item_id: int) -> bool:
        key = near_films_key(user_id)
        self._require_client(key, "hdel")
        try:
            removed = await self._client.hdel(key, str(item_id))
        except RedisError as e:
            raise self._backend_error(e, key, "hdel") from e

        if not removed:
            self.logger.info(f"Field {item_id} does not exist in {key}")
        return True

    # Monitoring

    async def health_check(self) -> Dict[str, Any]:
        if not self._client:
            return {
                "healthy": False,
                "status": "not_connected",
                "details": {"store": self.service_name, "error": "Client not initialized"}
            }

        try:
            await self._client.ping()
            info = await self._client.info()
            return {
                "healthy": True,
                "status": "connected",
                "details": {
                    "store": self.service_name,
                    "flag": await self.is_connected(),
                    "redis_version": info.get("redis_version", "unknown"),
                    "connected_clients": info.get("connected_clients", 0)
                }
            }
        except Exception as e:
            return {
                "healthy": False,
                "status": "error",
                "details": {
                    "store": self.service_name,
                    "flag": await self.is_connected(),
                    "error": str(e)
                }
            }

    def get_metrics(self) -> Dict[str, Any]:
        metrics = super().get_metrics()
        metrics.update({
            "soft_failures": self._soft_failures,
            "backend_errors": self._backend_errors,
            "probe_running": bool(self._monitor and self._monitor.running)
        })
        return metrics


async def open_token_store(
    config: Optional[RedisStoreSettings] = None,
    name: str = "token-store"
) -> EphemeralTokenStore:
    """
    Connect, probe once and start the liveness loop.

    Raises:
        StoreConnectionError: If the first probe fails
    """
    store = EphemeralTokenStore(config, name=name)
    await store.initialize()
    return store
