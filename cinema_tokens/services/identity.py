# cinema_tokens/services/identity.py
"""
Identity lookup boundary.

The comments and films services ask the authorization service who is
behind a session token, and for display data of a batch of users. The
transport (gRPC in production) is not part of this package; callers
depend on IdentityLookup and get an implementation injected.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from cinema_tokens.core.exceptions import IdentityNotFoundError
from cinema_tokens.models.identity import Identity, ProfileCard
from cinema_tokens.services.token_store import EphemeralTokenStore

logger = logging.getLogger(__name__)


class UserDirectory(ABC):
    """Read access to user profiles in the relational store"""

    @abstractmethod
    async def get_user(self, login: str) -> Optional[Tuple[int, str]]:
        """(user_id, role) for a login, or None"""

    @abstractmethod
    async def get_cards(self, user_ids: List[int]) -> List[ProfileCard]:
        """Display cards in the same order as user_ids"""


class IdentityLookup(ABC):
    """Resolve callers by session token. Failures propagate to the caller."""

    @abstractmethod
    async def get_identity(self, sid: str) -> Identity:
        ...

    @abstractmethod
    async def get_profile_cards(self, user_ids: List[int]) -> List[ProfileCard]:
        ...


class SessionIdentityLookup(IdentityLookup):
    """Server side of the lookup: session store plus user directory"""

    def __init__(self, sessions: EphemeralTokenStore, users: UserDirectory):
        self.sessions = sessions
        self.users = users

    async def get_identity(self, sid: str) -> Identity:
        """
        Raises:
            SessionNotFoundError: If the session does not exist
            BackendError: If the session store fails
            IdentityNotFoundError: If the session store is down or the
                login has no profile
        """
        login = await self.sessions.get_session_owner(sid)
        if not login:
            # Soft fail of the session store, nobody to resolve
            raise IdentityNotFoundError("Session store unavailable, cannot resolve caller")

        user = await self.users.get_user(login)
        if user is None:
            logger.error(f"Failed to get user profile id for {login}")
            raise IdentityNotFoundError("No profile for session owner", login=login)

        user_id, role = user
        return Identity(user_id=user_id, login=login, role=role)

    async def get_profile_cards(self, user_ids: List[int]) -> List[ProfileCard]:
        if not user_ids:
            return []
        return await self.users.get_cards(user_ids)
