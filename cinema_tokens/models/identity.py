# cinema_tokens/models/identity.py

from typing import Optional
from pydantic import BaseModel


class Identity(BaseModel):
    """Who is behind a session token"""
    user_id: int
    login: str
    role: str = "user"


class ProfileCard(BaseModel):
    """Display data for comment authors and similar lists"""
    user_id: int
    name: str
    photo: Optional[str] = None
