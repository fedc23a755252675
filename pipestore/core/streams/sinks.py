"""
Writable stream implementations.

Single Responsibility: each sink only knows how to store bytes somewhere.
"""
import inspect
import io
from pathlib import Path
from typing import Any, Callable, Optional, Union

import aiofiles
import aiofiles.os

from ..logging import get_logger

logger = get_logger('pipestore.streams')


class BufferSink:
    """
    Writable stream collecting bytes in memory.

    Example:
        >>> sink = BufferSink()
        >>> await sink.write(b"hello")
        >>> await sink.close()
        >>> sink.getvalue()
        b'hello'
    """

    def __init__(self, on_close: Optional[Callable[[bytes], Any]] = None):
        """
        Initialize buffer sink.

        Args:
            on_close: Optional callback (sync or async) receiving the
                collected bytes once the sink is closed
        """
        self._buffer = io.BytesIO()
        self._on_close = on_close
        self._closed = False
        self._aborted = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def bytes_written(self) -> int:
        return self._buffer.tell()

    def getvalue(self) -> bytes:
        return self._buffer.getvalue()

    async def write(self, data: bytes) -> int:
        if self._closed or self._aborted:
            raise ValueError("Cannot write to a closed sink")
        return self._buffer.write(data)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            result = self._on_close(self.getvalue())
            if inspect.isawaitable(result):
                await result

    async def abort(self, exc: Optional[BaseException] = None) -> None:
        """Discard the sink without committing its contents."""
        self._aborted = True


class FileSink:
    """
    Writable stream into a local file.

    Parent directories are created and the file is opened lazily on the
    first write (or on close for empty files), so failures of that
    preparation surface on the stream itself.
    """

    def __init__(self, path: Union[str, Path], make_parents: bool = True):
        """
        Initialize file sink.

        Args:
            path: Destination file path
            make_parents: Create missing parent directories
        """
        self._path = Path(path)
        self._make_parents = make_parents
        self._handle = None
        self._closed = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    async def _ensure_open(self):
        if self._handle is None:
            if self._make_parents:
                await aiofiles.os.makedirs(self._path.parent, exist_ok=True)
            self._handle = await aiofiles.open(self._path, 'wb')
            logger.debug(f"Opened {self._path} for writing")
        return self._handle

    async def write(self, data: bytes) -> int:
        if self._closed:
            raise ValueError(f"Cannot write to closed file {self._path}")
        handle = await self._ensure_open()
        return await handle.write(data)

    async def close(self) -> None:
        if self._closed:
            return
        handle = await self._ensure_open()
        self._closed = True
        await handle.close()

    async def abort(self, exc: Optional[BaseException] = None) -> None:
        """Release the file handle, leaving the partial file in place."""
        self._closed = True
        if self._handle is not None:
            await self._handle.close()
