# cinema_tokens/core/exceptions.py
"""
Core exceptions for the token store and the services built on it.

Soft failures (backend believed unreachable) are NOT exceptions: they come
back as zero values. Everything defined here is a hard failure that the
caller has to map to a response.
"""

from typing import Optional, Dict, Any


class TokenStoreError(Exception):
    """Base exception for all token store errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class StoreConnectionError(TokenStoreError):
    """The backend could not be reached when the store was opened"""

    def __init__(
        self,
        message: str,
        store_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.store_name = store_name

        if store_name:
            self.details['store'] = store_name


class BackendError(TokenStoreError):
    """A backend call failed while the connection was believed up"""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize backend error.

        Args:
            message: Error description
            key: Redis key that failed
            operation: Redis operation that failed
            details: Additional backend context
        """
        super().__init__(message, details)
        self.key = key
        self.operation = operation

        if key:
            self.details['key'] = key
        if operation:
            self.details['operation'] = operation


class SessionNotFoundError(BackendError):
    """Get-style lookup of a session token that does not exist"""

    def __init__(self, token: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"Session {token[:8]}... not found",
            key=token,
            operation="get",
            details=details
        )


class ConfigurationError(TokenStoreError):
    """Errors in configuration and initialization"""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.component = component

        if component:
            self.details['component'] = component


class IdentityNotFoundError(TokenStoreError):
    """No user behind a session or user id"""

    def __init__(
        self,
        message: str,
        login: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.login = login

        if login:
            self.details['login'] = login

