"""
Readable stream implementations.

Uses aiofiles for non-blocking file I/O.
"""
from pathlib import Path
from typing import AsyncIterator, Optional, Union

import aiofiles

from ..config import DEFAULT_CHUNK_SIZE
from ..exceptions import StorageFileNotFoundError
from ..logging import get_logger

logger = get_logger('pipestore.streams')


class BytesSource:
    """
    Readable stream over an in-memory buffer.

    Example:
        >>> source = BytesSource(b"hello world", chunk_size=5)
        >>> [chunk async for chunk in source]
        [b'hello', b' worl', b'd']
    """

    def __init__(self, data: Union[bytes, bytearray, str], chunk_size: int = DEFAULT_CHUNK_SIZE):
        if isinstance(data, str):
            data = data.encode()
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self._data = bytes(data)
        self._chunk_size = chunk_size

    def __len__(self) -> int:
        return len(self._data)

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for position in range(0, len(self._data), self._chunk_size):
            yield self._data[position:position + self._chunk_size]


class FileSource:
    """
    Readable stream over a local file.

    The file is opened when iteration starts, so a missing file surfaces
    as an error on the stream rather than at construction time.
    """

    def __init__(
        self,
        path: Union[str, Path],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        start: int = 0,
        end: Optional[int] = None,
        location: Optional[str] = None
    ):
        """
        Initialize file source.

        Args:
            path: Path to the file
            chunk_size: Maximum size of each chunk
            start: First byte to read
            end: Byte position to stop at (exclusive), None for EOF
            location: Storage location reported in errors
        """
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        if start < 0 or (end is not None and end < start):
            raise ValueError(f"Invalid byte range: {start}-{end}")
        self._path = Path(path)
        self._chunk_size = chunk_size
        self._start = start
        self._end = end
        self._location = location or str(path)

    @property
    def path(self) -> Path:
        return self._path

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            handle = await aiofiles.open(self._path, 'rb')
        except FileNotFoundError as e:
            raise StorageFileNotFoundError(
                f"File not found: {self._location}",
                location=self._location
            ) from e

        try:
            if self._start:
                await handle.seek(self._start)
            remaining = None if self._end is None else self._end - self._start

            while remaining is None or remaining > 0:
                size = self._chunk_size if remaining is None else min(self._chunk_size, remaining)
                chunk = await handle.read(size)
                if not chunk:
                    break
                if remaining is not None:
                    remaining -= len(chunk)
                yield chunk
        finally:
            await handle.close()

        logger.debug(f"Finished reading {self._path}")
