# cinema_tokens/models/tokens.py

from datetime import datetime, timedelta, timezone
from pydantic import BaseModel, Field

SESSION_TTL = timedelta(hours=24)
CSRF_TTL = timedelta(hours=3)


def _expires_in(ttl: timedelta):
    return lambda: datetime.now(timezone.utc) + ttl


class Session(BaseModel):
    """
    Signed-in session. Expiry is enforced by the store's key TTL,
    expires_at only mirrors it for the caller (cookie lifetime).
    """
    login: str
    sid: str
    expires_at: datetime = Field(default_factory=_expires_in(SESSION_TTL))


class CsrfToken(BaseModel):
    sid: str
    expires_at: datetime = Field(default_factory=_expires_in(CSRF_TTL))
