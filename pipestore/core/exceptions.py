"""
Custom exceptions for pipestore.

Configuration errors are raised synchronously at setup or call time and
indicate programmer error. Storage and transform errors happen while bytes
are moving and reach the caller through the awaited transfer result.
"""
from typing import Optional


class PipestoreException(Exception):
    """Base exception for all pipestore errors."""


class ConfigurationError(PipestoreException):
    """Exception raised for invalid setup or invalid call arguments."""


class InitializationError(ConfigurationError):
    """Exception raised when a component is built without a required collaborator."""


class InvalidAdapterError(ConfigurationError, TypeError):
    """Exception raised when something that is not an adapter is given as one."""


class DeclarationError(ConfigurationError):
    """Exception raised when an adapter or transform does not declare its identity."""

    def __init__(self, message: str, component: Optional[object] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            component: The offending class or instance
        """
        self.component = component
        super().__init__(message)


class NotRegisteredError(ConfigurationError, LookupError):
    """Exception raised when a transform identity is not registered."""

    def __init__(self, message: str, identity: Optional[str] = None) -> None:
        self.identity = identity
        super().__init__(message)


class AdapterNotFoundError(ConfigurationError, LookupError):
    """Exception raised when an adapter identity cannot be resolved."""

    def __init__(self, message: str, identity: Optional[str] = None) -> None:
        self.identity = identity
        super().__init__(message)


class DuplicateTransformError(ConfigurationError):
    """Exception raised when a pipeline already uses a transform identity."""

    def __init__(self, message: str, identity: Optional[str] = None) -> None:
        self.identity = identity
        super().__init__(message)


class InvalidArgumentError(ConfigurationError, TypeError):
    """Exception raised for invalid location, stream or option arguments."""


class StorageError(PipestoreException):
    """Exception raised by storage adapters for backend failures."""

    def __init__(
        self,
        message: str,
        location: Optional[str] = None,
        status: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            location: Location the failing operation targeted
            status: Backend status code (if available)
        """
        self.location = location
        self.status = status
        super().__init__(message)


class StorageFileNotFoundError(StorageError, FileNotFoundError):
    """Exception raised when a location does not exist on the backend."""


class TransformError(PipestoreException):
    """Exception raised by built-in transforms for invalid options or data."""

    def __init__(self, message: str, identity: Optional[str] = None) -> None:
        self.identity = identity
        super().__init__(message)
