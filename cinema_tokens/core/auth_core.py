# cinema_tokens/core/auth_core.py
"""
Session and CSRF use cases of the authorization service.

Sits between the HTTP layer and the token stores: generates token values,
translates soft failures into empty results and leaves hard failures to
propagate.
"""

import logging
from typing import Optional, Tuple

from cinema_tokens.core.exceptions import TokenStoreError
from cinema_tokens.core.tokens import generate_token
from cinema_tokens.models.tokens import CsrfToken, Session
from cinema_tokens.services.token_store import EphemeralTokenStore

logger = logging.getLogger(__name__)


class AuthCore:
    """Session lifecycle and CSRF protection over two token stores"""

    def __init__(self, sessions: EphemeralTokenStore, csrf_tokens: EphemeralTokenStore):
        self.sessions = sessions
        self.csrf_tokens = csrf_tokens

    async def create_session(self, login: str) -> Tuple[str, Optional[Session]]:
        """
        Sign a user in.

        Returns:
            (sid, Session), or ("", None) when the session store is
            unavailable and nothing was written
        """
        session = Session(login=login, sid=generate_token())

        added = await self.sessions.create_session(session.sid, login)
        if not added:
            logger.warning(f"Session for {login} was not created")
            return "", None

        logger.info(f"Created session {session.sid[:8]}... for {login}")
        return session.sid, session

    async def kill_session(self, sid: str) -> None:
        await self.sessions.delete_session(sid)
        logger.debug(f"Deleted session {sid[:8]}...")

    async def find_active_session(self, sid: str) -> bool:
        if not sid:
            return False
        return await self.sessions.check_session(sid)

    async def get_user_name(self, sid: str) -> str:
        """Login behind a session. Raises SessionNotFoundError if absent."""
        return await self.sessions.get_session_owner(sid)

    async def create_csrf_token(self) -> str:
        """New CSRF token, or "" when the CSRF store is unavailable"""
        token = CsrfToken(sid=generate_token())

        added = await self.csrf_tokens.create_csrf_token(token.sid)
        if not added:
            logger.warning("CSRF token was not created")
            return ""

        return token.sid

    async def check_csrf_token(self, token: str) -> bool:
        if not token:
            return False
        return await self.csrf_tokens.check_csrf_token(token)

    async def ensure_csrf_token(self, presented: Optional[str]) -> str:
        """
        Token the client should use from now on.

        A presented token that is still active is handed back unchanged;
        otherwise a fresh one is issued. "" means the CSRF store is down.
        """
        if presented and await self.check_csrf_token(presented):
            return presented
        return await self.create_csrf_token()


# Global instance - initialized in main.py
auth_core: Optional[AuthCore] = None


def get_auth_core() -> AuthCore:
    """FastAPI dependency for the global AuthCore"""
    if auth_core is None:
        raise TokenStoreError("AuthCore not initialized")
    return auth_core


def init_auth_core(sessions: EphemeralTokenStore, csrf_tokens: EphemeralTokenStore) -> AuthCore:
    global auth_core
    auth_core = AuthCore(sessions, csrf_tokens)
    logger.info("Initialized AuthCore")
    return auth_core
