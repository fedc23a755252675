"""
Protocol definitions for the pipeline's collaborators.

Defines the two capability contracts the pipeline depends on: storage
adapters and transforms. Both declare a class-level ``identity`` string
used for registry lookup and for namespacing per-call options and results.
"""
from typing import Protocol, Any, ClassVar, Dict, Optional, runtime_checkable

from ..streams import ReadableStream, WritableStream


@runtime_checkable
class StorageAdapter(Protocol):
    """
    Protocol for storage backends.

    Stream creation is synchronous; any failure while preparing or using
    the backend must surface on the returned stream, not on this call.
    """

    identity: ClassVar[str]

    def create_write_stream(
        self,
        location: str,
        options: Dict[str, Any]
    ) -> WritableStream:
        """
        Create a sink writing to a location.

        Args:
            location: Relative POSIX path within the backend
            options: Adapter-specific per-call options

        Returns:
            Writable stream; closing it successfully means the data is stored
        """
        ...

    def create_read_stream(
        self,
        location: str,
        options: Dict[str, Any]
    ) -> ReadableStream:
        """
        Create a source reading from a location.

        Args:
            location: Relative POSIX path within the backend
            options: Adapter-specific per-call options

        Returns:
            Readable stream of the stored bytes
        """
        ...

    async def remove(self, location: str) -> Any:
        """
        Remove a location from the backend.

        Args:
            location: Relative POSIX path within the backend
        """
        ...


@runtime_checkable
class Transform(Protocol):
    """
    Protocol for stream transforms.

    A new instance is created for every stage of every transfer, with the
    options given at registration time.
    """

    identity: ClassVar[str]

    def __init__(self, options: Optional[Dict[str, Any]] = None) -> None:
        ...

    def transform(
        self,
        stream: ReadableStream,
        options: Dict[str, Any]
    ) -> ReadableStream:
        """
        Wrap a stream.

        Args:
            stream: Output of the previous stage
            options: Per-call options for this transform

        Returns:
            A new readable stream performing the transformation
        """
        ...

    def results(self) -> Any:
        """Returns the data accumulated while the stream was processed."""
        ...

