"""
Base classes for adapters and transforms.

Implementations may satisfy the protocols structurally; these ABCs only
supply the shared plumbing.
"""
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Optional

from ..streams import ReadableStream, WritableStream


class BaseAdapter(ABC):
    """Abstract base class for storage adapters."""

    identity: ClassVar[str]

    @abstractmethod
    def create_write_stream(self, location: str, options: Optional[Dict[str, Any]] = None) -> WritableStream:
        """Create a sink writing to a location."""
        pass

    @abstractmethod
    def create_read_stream(self, location: str, options: Optional[Dict[str, Any]] = None) -> ReadableStream:
        """Create a source reading from a location."""
        pass

    @abstractmethod
    async def remove(self, location: str) -> Any:
        """Remove a location."""
        pass

    async def close(self) -> None:
        """Release connections held by the adapter."""
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} identity={getattr(self, 'identity', None)!r}>"


class BaseTransform(ABC):
    """
    Abstract base class for transforms.

    Keeps the registration-time options and merges per-call options over
    them key by key.
    """

    identity: ClassVar[str]

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self._options: Dict[str, Any] = dict(options or {})

    @property
    def options(self) -> Dict[str, Any]:
        """Registration-time options."""
        return dict(self._options)

    def resolve_options(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Per-call options override registration-time options, key by key."""
        merged = dict(self._options)
        merged.update(overrides or {})
        return merged

    @abstractmethod
    def transform(self, stream: ReadableStream, options: Optional[Dict[str, Any]] = None) -> ReadableStream:
        """Wrap a stream."""
        pass

    @abstractmethod
    def results(self) -> Any:
        """Returns the accumulated results."""
        pass
