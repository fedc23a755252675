"""
Filesystem storage adapter.

Stores files below a root directory using aiofiles for non-blocking I/O.
"""
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional, Union

import aiofiles.os

from ..config import FilesystemConfig
from ..exceptions import StorageError, StorageFileNotFoundError
from ..pipeline.base import BaseAdapter
from ..streams import FileSink, FileSource
from ..logging import get_logger

logger = get_logger('pipestore.adapters.filesystem')


class _DeferredError:
    """Readable/writable stream that fails as soon as it is used."""

    def __init__(self, error: Exception):
        self._error = error

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self

    async def __anext__(self) -> bytes:
        raise self._error

    async def write(self, data: bytes) -> None:
        raise self._error

    async def close(self) -> None:
        raise self._error


class FilesystemAdapter(BaseAdapter):
    """
    Storage adapter for a local directory.

    Locations are POSIX paths relative to the configured root. Parent
    directories are created on upload.

    Example:
        >>> storage = Storage('filesystem', {'root': '/srv/files'})
        >>> result = await storage.upload(FileSource('report.pdf'), {'directory': 'reports'})
    """

    identity = 'filesystem'

    def __init__(self, config: Optional[Union[FilesystemConfig, Dict[str, Any]]] = None):
        """
        Initialize filesystem adapter.

        Args:
            config: FilesystemConfig or dict with ``root`` (absolute path,
                or sequence of parts) and ``chunk_size``

        Raises:
            ConfigurationError: If the root is not absolute
        """
        if not isinstance(config, FilesystemConfig):
            config = FilesystemConfig.from_dict(config)
        self._config = config
        self._root: Path = config.root

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, location: str) -> Path:
        """
        Map a location to a path below the root.

        Raises:
            StorageError: If the location escapes the root
        """
        path = (self._root / location).resolve()
        root = self._root.resolve()
        if path != root and root not in path.parents:
            raise StorageError(f"Location escapes storage root: {location}", location=location)
        return path

    def create_write_stream(self, location: str, options: Optional[Dict[str, Any]] = None):
        try:
            path = self.resolve(location)
        except StorageError as e:
            return _DeferredError(e)

        logger.debug(f"Writing {location} to {path}")
        return FileSink(path, make_parents=True)

    def create_read_stream(self, location: str, options: Optional[Dict[str, Any]] = None):
        options = options or {}
        try:
            path = self.resolve(location)
        except StorageError as e:
            return _DeferredError(e)

        return FileSource(
            path,
            chunk_size=options.get('chunk_size', self._config.chunk_size),
            start=options.get('start', 0),
            end=options.get('end'),
            location=location
        )

    async def remove(self, location: str) -> str:
        path = self.resolve(location)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError as e:
            raise StorageFileNotFoundError(f"File not found: {location}", location=location) from e

        logger.debug(f"Removed {path}")
        return location
