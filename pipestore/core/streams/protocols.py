"""
Protocol definitions for byte streams.

A readable stream is anything that can be iterated with ``async for`` and
yields ``bytes`` chunks. A writable stream accepts chunks through an
awaitable ``write`` and signals completion when ``close`` returns.
"""
import inspect
from typing import Protocol, Any, AsyncIterator, runtime_checkable


@runtime_checkable
class ReadableStream(Protocol):
    """Protocol for byte sources."""

    def __aiter__(self) -> AsyncIterator[bytes]:
        """Iterate over the stream's chunks."""
        ...


@runtime_checkable
class WritableStream(Protocol):
    """Protocol for byte sinks."""

    async def write(self, data: bytes) -> Any:
        """
        Write a chunk.

        Args:
            data: Chunk to write

        Raises:
            Exception: Any failure of the sink or of its preparation
        """
        ...

    async def close(self) -> None:
        """
        Flush and close the sink.

        Returning without error is the sink's completion signal.
        """
        ...


def is_readable(obj: Any) -> bool:
    """Check whether an object can be used as a readable stream."""
    if isinstance(obj, (str, bytes, bytearray, memoryview)):
        return False
    return isinstance(obj, ReadableStream)


def is_writable(obj: Any) -> bool:
    """Check whether an object has coroutine write() and close() methods."""
    return (
        inspect.iscoroutinefunction(getattr(obj, 'write', None))
        and inspect.iscoroutinefunction(getattr(obj, 'close', None))
    )
