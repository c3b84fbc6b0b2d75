# cinema_tokens/core/tokens.py
import secrets
import string

TOKEN_ALPHABET = string.ascii_letters + string.digits
TOKEN_LENGTH = 32


def generate_token(length: int = TOKEN_LENGTH) -> str:
    """Random opaque token for sessions and CSRF protection"""
    return ''.join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))
