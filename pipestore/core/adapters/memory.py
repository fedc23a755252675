"""
In-memory storage adapter.

Provides non-persistent storage for testing and temporary use.
"""
from typing import Any, AsyncIterator, Dict, List, Optional

from ..config import DEFAULT_CHUNK_SIZE
from ..exceptions import StorageFileNotFoundError
from ..pipeline.base import BaseAdapter
from ..streams import BufferSink
from ..logging import get_logger

logger = get_logger('pipestore.adapters.memory')


class MemoryAdapter(BaseAdapter):
    """
    Storage adapter keeping files in a dict.

    Data is committed when the write stream closes, so a failed upload
    leaves nothing behind. Data is lost when the object is destroyed.

    Example:
        >>> storage = Storage('memory')
        >>> await storage.upload(BytesSource(b"hi"), {'name': 'a.txt'})
        >>> storage.adapter.files
        {'a.txt': b'hi'}
    """

    identity = 'memory'

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        self._files: Dict[str, bytes] = dict(config.get('files', {}))
        self._chunk_size = config.get('chunk_size', DEFAULT_CHUNK_SIZE)

    @property
    def files(self) -> Dict[str, bytes]:
        """Snapshot of the stored files."""
        return dict(self._files)

    def exists(self, location: str) -> bool:
        return location in self._files

    def list(self, prefix: str = '') -> List[str]:
        return sorted(location for location in self._files if location.startswith(prefix))

    def create_write_stream(self, location: str, options: Optional[Dict[str, Any]] = None) -> BufferSink:
        def commit(data: bytes) -> None:
            self._files[location] = data
            logger.debug(f"Stored {location} ({len(data)} bytes)")

        return BufferSink(on_close=commit)

    def create_read_stream(self, location: str, options: Optional[Dict[str, Any]] = None) -> AsyncIterator[bytes]:
        chunk_size = (options or {}).get('chunk_size', self._chunk_size)
        return self._read(location, chunk_size)

    async def _read(self, location: str, chunk_size: int) -> AsyncIterator[bytes]:
        if location not in self._files:
            raise StorageFileNotFoundError(f"File not found: {location}", location=location)

        data = self._files[location]
        for position in range(0, len(data), chunk_size):
            yield data[position:position + chunk_size]

    async def remove(self, location: str) -> str:
        if self._files.pop(location, None) is None:
            raise StorageFileNotFoundError(f"File not found: {location}", location=location)
        return location
