"""
HTTP object store adapter.

Stores files on any server accepting PUT, GET and DELETE on
``{base_url}/{location}`` (WebDAV shares, pre-authorised object store
gateways, simple blob services). Uses a single aiohttp session, created
on first use.
"""
import asyncio
import time
from typing import Any, AsyncIterator, Dict, Optional, Union
from urllib.parse import quote

import aiohttp

from ..config import HttpConfig
from ..exceptions import StorageError, StorageFileNotFoundError
from ..pipeline.base import BaseAdapter
from ..streams import ErrorSignal
from ..logging import get_logger

logger = get_logger('pipestore.adapters.http')


class HttpUploadStream(ErrorSignal):
    """
    Writable stream feeding a streaming PUT request.

    Chunks go through a bounded queue to a request running in a background
    task. A failure of that task is reported through ``on_error`` and is
    raised by the next ``write``/``close``.
    """

    def __init__(
        self,
        adapter: 'HttpAdapter',
        location: str,
        headers: Optional[Dict[str, str]] = None,
        queue_size: int = 8
    ):
        super().__init__()
        self._adapter = adapter
        self._location = location
        self._headers = headers or {}
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def location(self) -> str:
        return self._location

    def _start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.ensure_future(self._run())
            self._task.add_done_callback(self._on_done)
        return self._task

    def _on_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.debug(f"Upload of {self._location} failed: {exc!r}")
            self.fail(exc)

    async def _body(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                return
            yield chunk

    async def _run(self) -> None:
        session = await self._adapter.session()
        start = time.time()
        async with session.put(
            self._adapter.url(self._location),
            data=self._body(),
            headers=self._headers
        ) as response:
            self._adapter.check(response, 'PUT', self._location)
        logger.debug(f"PUT {self._location} completed in {time.time() - start:.2f}s")

    async def _put(self, item: Optional[bytes]) -> None:
        task = self._start()
        put = asyncio.ensure_future(self._queue.put(item))
        done, _ = await asyncio.wait({put, task}, return_when=asyncio.FIRST_COMPLETED)
        if put not in done:
            put.cancel()
        self._raise_if_failed()

    def _raise_if_failed(self) -> None:
        if self.error is not None:
            raise self.error
        if self._task is not None and self._task.done() and not self._task.cancelled():
            exc = self._task.exception()
            if exc is not None:
                raise exc

    async def write(self, data: bytes) -> int:
        if self._closed:
            raise ValueError(f"Cannot write to closed upload stream for {self._location}")
        self._raise_if_failed()
        await self._put(bytes(data))
        return len(data)

    async def close(self) -> None:
        if self._closed:
            return
        self._raise_if_failed()
        await self._put(None)
        self._closed = True
        await self._task

    async def abort(self, exc: Optional[BaseException] = None) -> None:
        """Cancel the request if it is still running."""
        self._closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)


class HttpAdapter(BaseAdapter):
    """
    Storage adapter for an HTTP object store.

    Per-call options:
        headers: Extra headers for this request (e.g. Content-Type, Range)
        chunk_size: Read size for downloads

    Example:
        >>> storage = Storage('http', {'base_url': 'https://files.example.com/bucket'})
        >>> await storage.upload(FileSource('photo.jpg'), {'http': {'headers': {'Content-Type': 'image/jpeg'}}})
    """

    identity = 'http'

    def __init__(self, config: Optional[Union[HttpConfig, Dict[str, Any]]] = None):
        """
        Initialize HTTP adapter.

        Args:
            config: HttpConfig or dict with at least ``base_url``
        """
        if not isinstance(config, HttpConfig):
            config = HttpConfig.from_dict(config)
        self._config = config
        self._session: Optional[aiohttp.ClientSession] = None
        self._connecting: Optional[asyncio.Future] = None

    @property
    def config(self) -> HttpConfig:
        return self._config

    def url(self, location: str) -> str:
        return f"{self._config.base_url}/{quote(location)}"

    async def _connect(self) -> aiohttp.ClientSession:
        connector = aiohttp.TCPConnector(
            limit=100,
            keepalive_timeout=30,
            ssl=self._config.ssl.create_ssl_context()
        )
        session = aiohttp.ClientSession(
            connector=connector,
            timeout=self._config.timeout.to_aiohttp_timeout(),
            headers=self._config.headers
        )
        logger.info(f"HTTP session opened for {self._config.base_url}")
        return session

    async def session(self) -> aiohttp.ClientSession:
        """
        Get the shared HTTP session, creating it on first use.

        Concurrent first calls wait for the same connection attempt.
        """
        if self._session is not None and not self._session.closed:
            return self._session

        if self._connecting is None:
            self._connecting = asyncio.ensure_future(self._connect())

        connecting = self._connecting
        try:
            session = await asyncio.shield(connecting)
        except Exception:
            if self._connecting is connecting:
                self._connecting = None
            raise

        self._session = session
        self._connecting = None
        return session

    def check(self, response: aiohttp.ClientResponse, method: str, location: str) -> None:
        """
        Map an error response to a storage error.

        Raises:
            StorageFileNotFoundError: On 404
            StorageError: On any other status >= 400
        """
        if response.status == 404:
            raise StorageFileNotFoundError(
                f"File not found: {location}", location=location, status=404
            )
        if response.status >= 400:
            raise StorageError(
                f"{method} {location} failed: HTTP {response.status} {response.reason}",
                location=location,
                status=response.status
            )

    def create_write_stream(self, location: str, options: Optional[Dict[str, Any]] = None) -> HttpUploadStream:
        options = options or {}
        return HttpUploadStream(
            self,
            location,
            headers=options.get('headers'),
            queue_size=self._config.queue_size
        )

    def create_read_stream(self, location: str, options: Optional[Dict[str, Any]] = None) -> AsyncIterator[bytes]:
        options = options or {}
        return self._read(
            location,
            options.get('headers') or {},
            options.get('chunk_size', self._config.chunk_size)
        )

    async def _read(self, location: str, headers: Dict[str, str], chunk_size: int) -> AsyncIterator[bytes]:
        session = await self.session()
        async with session.get(self.url(location), headers=headers) as response:
            self.check(response, 'GET', location)
            async for chunk in response.content.iter_chunked(chunk_size):
                yield chunk

    async def remove(self, location: str) -> str:
        session = await self.session()
        async with session.delete(self.url(location)) as response:
            self.check(response, 'DELETE', location)
        return location

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
            logger.info(f"HTTP session closed for {self._config.base_url}")
        self._session = None
