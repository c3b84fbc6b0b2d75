# cinema_tokens/core/viewing_history.py

import logging
from typing import Optional, Set

from cinema_tokens.core.exceptions import TokenStoreError
from cinema_tokens.services.identity import IdentityLookup
from cinema_tokens.services.token_store import EphemeralTokenStore

logger = logging.getLogger(__name__)


class ViewingHistory:
    """Recently viewed films of the calling user"""

    def __init__(self, identity: IdentityLookup, near_films: EphemeralTokenStore):
        self.identity = identity
        self.near_films = near_films

    async def record_view(self, sid: str, film_id: int) -> bool:
        caller = await self.identity.get_identity(sid)
        added = await self.near_films.add_recently_viewed(caller.user_id, film_id)
        if not added:
            logger.warning(f"View of film {film_id} by user {caller.user_id} not recorded")
        return added

    async def recent_films(self, sid: str) -> Set[int]:
        caller = await self.identity.get_identity(sid)
        return await self.near_films.list_recently_viewed(caller.user_id)

    async def forget_film(self, sid: str, film_id: int) -> bool:
        caller = await self.identity.get_identity(sid)
        return await self.near_films.remove_recently_viewed(caller.user_id, film_id)


# Global instance - initialized in main.py
viewing_history: Optional[ViewingHistory] = None


def get_viewing_history() -> ViewingHistory:
    """FastAPI dependency for the global ViewingHistory"""
    if viewing_history is None:
        raise TokenStoreError("ViewingHistory not initialized")
    return viewing_history


def init_viewing_history(identity: IdentityLookup, near_films: EphemeralTokenStore) -> ViewingHistory:
    global viewing_history
    viewing_history = ViewingHistory(identity, near_films)
    logger.info("Initialized ViewingHistory")
    return viewing_history
