# cinema_tokens/core/service_base.py
"""
Base service class for backend-wrapping services.

All stores inherit from BaseService to get the same:
- Initialization pattern
- Error handling on startup
- Health check interface
- Resource cleanup
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, TypeVar, Generic
import logging
from cinema_tokens.core.exceptions import StoreConnectionError, ConfigurationError

# Type variable for service configuration
ConfigType = TypeVar('ConfigType')


class BaseService(ABC, Generic[ConfigType]):
    """
    Abstract base class for services that own a backend client.

    Unlike a lazily-connected cache, a store that cannot reach its backend
    at startup is unusable, so initialize() raises instead of degrading.
    """

    def __init__(
        self,
        config: Optional[ConfigType] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None
    ):
        """
        Initialize the service.

        Args:
            config: Service-specific configuration
            logger: Optional logger instance
            name: Optional instance name used in logs and errors
        """
        self.config = config
        self.service_name = name or self.__class__.__name__
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self._initialized = False
        self._client = None

    @abstractmethod
    async def _initialize_client(self) -> Any:
        """
        Create the underlying client and verify it can talk to the backend.

        Raises:
            ConfigurationError: If configuration is invalid
            Exception: Any client error, wrapped by initialize()
        """
        pass

    async def initialize(self) -> None:
        """
        Initialize the service. Idempotent.

        Raises:
            ConfigurationError: If configuration is invalid
            StoreConnectionError: If the backend cannot be reached
        """
        if self._initialized:
            self.logger.debug(f"{self.service_name} already initialized")
            return

        try:
            self.logger.info(f"Initializing {self.service_name}...")

            self._validate_config()
            self._client = await self._initialize_client()
            await self._on_initialized()

            self._initialized = True
            self.logger.info(f"{self.service_name} initialized successfully")

        except ConfigurationError:
            raise
        except Exception as e:
            error_msg = f"Failed to initialize {self.service_name}"
            self.logger.error(f"{error_msg}: {e}")
            raise StoreConnectionError(
                error_msg,
                store_name=self.service_name,
                details={'original_error': str(e), 'error_type': type(e).__name__}
            ) from e

    def _validate_config(self) -> None:
        """
        Validate service configuration.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.config is None:
            raise ConfigurationError(
                f"No configuration provided for {self.service_name}",
                component=self.service_name
            )

    async def _on_initialized(self) -> None:
        """Hook run after the client is ready, before the service is marked initialized"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """
        Perform a health check on the service.

        Returns:
            Dict containing:
            - healthy: bool indicating if service is healthy
            - status: string status message
            - details: optional additional information
        """
        pass

    @property
    def is_initialized(self) -> bool:
        """Check if the service is initialized"""
        return self._initialized

    async def shutdown(self) -> None:
        """
        Gracefully shutdown the service and cleanup resources.
        """
        if not self._initialized:
            return

        try:
            self.logger.info(f"Shutting down {self.service_name}...")
            await self._cleanup()
            self.logger.info(f"{self.service_name} shut down successfully")
        except Exception:
            self.logger.error(f"Error during {self.service_name} shutdown", exc_info=True)
        finally:
            self._client = None
            self._initialized = False

    async def _cleanup(self) -> None:
        """Service-specific cleanup logic"""
        pass

    def get_metrics(self) -> Dict[str, Any]:
        """
        Get service metrics for monitoring.

        Returns:
            Dict of metric name to value
        """
        return {
            "service_name": self.service_name,
            "initialized": self._initialized,
        }
