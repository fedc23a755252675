"""
Pipeline - an adapter and an ordered set of transforms.

Builds a fresh stream chain for every transfer and settles it to a single
result or a single error.
"""
import asyncio
import inspect
import posixpath
import uuid
from collections.abc import Mapping
from typing import Any, Callable, Coroutine, Dict, Optional, Tuple

from ..exceptions import (
    DuplicateTransformError,
    InitializationError,
    InvalidArgumentError,
)
from ..logging import get_logger
from ..registry import TransformRegistry, declared_identity
from ..streams import ReadableStream, WritableStream, is_readable, is_writable
from .chain import StreamChain
from .models import Middleware, OperationContext, TransferResult
from .outcome import Outcome

logger = get_logger('pipestore.pipeline')

TransferCoroutine = Coroutine[Any, Any, TransferResult]


def validate_location(location: Any) -> str:
    """
    Validate a backend location.

    Raises:
        InvalidArgumentError: If the location is not a non-empty relative path
    """
    if not location or not isinstance(location, str):
        raise InvalidArgumentError(
            f"Location must be string, got: {location!r} ({type(location).__name__})"
        )
    if posixpath.isabs(location):
        raise InvalidArgumentError(f"Location must be relative, got: {location!r}")
    return location


def _validate_options(options: Any) -> Dict[str, Any]:
    if options is None:
        return {}
    if not isinstance(options, Mapping):
        raise InvalidArgumentError(
            f"Options must be a mapping, got: {type(options).__name__}"
        )
    return dict(options)


def _validate_namespaced(options: Dict[str, Any], identities) -> None:
    for identity in identities:
        value = options.get(identity)
        if value is not None and not isinstance(value, Mapping):
            raise InvalidArgumentError(
                f"Options for {identity} must be a mapping, got: {type(value).__name__}"
            )


def _path_part(options: Dict[str, Any], key: str) -> str:
    value = options.get(key)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise InvalidArgumentError(f"Option '{key}' must be string, got: {type(value).__name__}")
    if posixpath.isabs(value):
        raise InvalidArgumentError(f"Option '{key}' must be relative, got: {value!r}")
    return value


class Pipeline:
    """
    A set of ordered transforms bound to a storage adapter.

    You normally get one from ``Storage.pipeline()``. Transforms run in the
    order they were added with ``use()``, in both directions: for uploads
    the caller's stream passes T1, T2, ... before reaching the backend, for
    downloads the backend's stream passes T1, T2, ... before reaching the
    caller's destination.

    Validation errors are raised by the call itself. Everything that goes
    wrong while bytes are moving is raised by awaiting the returned
    coroutine, unwrapped.

    Example:
        >>> pipeline = storage.pipeline().use('checksum', {'algorithm': 'sha1'})
        >>> result = await pipeline.upload(BytesSource(b"hello"), {'directory': 'docs'})
        >>> result['checksum']['value']
    """

    def __init__(
        self,
        adapter: Any,
        transforms: Optional[TransformRegistry] = None
    ):
        """
        Create a new pipeline.

        Args:
            adapter: Configured storage adapter instance
            transforms: Registry of transforms which can be use()d

        Raises:
            InitializationError: If no adapter is given
            DeclarationError: If the adapter does not declare its identity
        """
        if adapter is None:
            raise InitializationError("Pipeline requires a configured adapter to operate with")

        self._identity = declared_identity(adapter, 'Adapter')
        self._adapter = adapter
        self._transforms = transforms if transforms is not None else TransformRegistry()
        self._middleware: list = []

    @property
    def adapter(self) -> Any:
        return self._adapter

    @property
    def transforms(self) -> TransformRegistry:
        return self._transforms

    @property
    def middleware(self) -> Tuple[Middleware, ...]:
        """Transforms used by this pipeline, in execution order."""
        return tuple(self._middleware)

    def use(self, identity: str, options: Optional[Dict[str, Any]] = None) -> 'Pipeline':
        """
        Use a registered transform in this pipeline.

        Args:
            identity: The transform's identity
            options: Options passed to the transform's constructor for every file

        Returns:
            self, for chaining

        Raises:
            NotRegisteredError: If the identity is not registered
            DuplicateTransformError: If the identity is already used here
        """
        transformer = self._transforms.get(identity)

        if options is not None and not isinstance(options, Mapping):
            raise InvalidArgumentError(
                f"Options for transform {identity} must be a mapping, got: {type(options).__name__}"
            )
        if any(entry.identity == identity for entry in self._middleware):
            raise DuplicateTransformError(
                f"Transform {identity} is already used by this pipeline", identity
            )

        self._middleware.append(Middleware(identity, transformer, options or {}))
        logger.debug(f"Pipeline now uses: {[entry.identity for entry in self._middleware]}")

        return self

    def upload(
        self,
        source: ReadableStream,
        options: Optional[Dict[str, Any]] = None
    ) -> TransferCoroutine:
        """
        Upload a stream to the storage.

        Args:
            source: Readable stream with the file contents
            options: Options for the upload:
                directory: Directory to upload the file to
                name: File name; a random UUID4 string when omitted
                <adapter identity>: Options for the adapter's write stream
                <transform identity>: Per-call options for that transform

        Returns:
            Coroutine resolving to the TransferResult

        Raises:
            InvalidArgumentError: Immediately, if the source is not a
                readable stream or the options are invalid
        """
        if not is_readable(source):
            raise InvalidArgumentError("Only readable streams can be uploaded")

        options = _validate_options(options)
        _validate_namespaced(options, self._namespaces())
        directory = _path_part(options, 'directory')
        name = _path_part(options, 'name') or str(uuid.uuid4())

        context = OperationContext(
            operation='upload',
            location=posixpath.join(directory, name),
            adapter_identity=self._identity,
            options=options
        )

        return self._transfer(
            context,
            open_source=lambda: source,
            open_sink=lambda: self._adapter.create_write_stream(
                context.location, context.adapter_options
            )
        )

    def download(
        self,
        location: str,
        destination: WritableStream,
        options: Optional[Dict[str, Any]] = None
    ) -> TransferCoroutine:
        """
        Download a file from the storage into a destination stream.

        Args:
            location: Location of the file on the storage
            destination: Writable stream receiving the data; it is closed
                when the transfer completes
            options: Options for the download:
                <adapter identity>: Options for the adapter's read stream
                <transform identity>: Per-call options for that transform

        Returns:
            Coroutine resolving to the TransferResult

        Raises:
            InvalidArgumentError: Immediately, if the location, the
                destination or the options are invalid
        """
        validate_location(location)
        if not is_writable(destination):
            raise InvalidArgumentError("Destination must be a writable stream")

        options = _validate_options(options)
        _validate_namespaced(options, self._namespaces())

        context = OperationContext(
            operation='download',
            location=location,
            adapter_identity=self._identity,
            options=options
        )

        return self._transfer(
            context,
            open_source=lambda: self._adapter.create_read_stream(
                context.location, context.adapter_options
            ),
            open_sink=lambda: destination
        )

    def _namespaces(self):
        return [self._identity] + [entry.identity for entry in self._middleware]

    def remove(self, location: str) -> Coroutine[Any, Any, str]:
        """
        Remove a file from the storage.

        Args:
            location: Location of the file on the storage

        Returns:
            Coroutine resolving to the location, whatever the adapter returned

        Raises:
            InvalidArgumentError: Immediately, if the location is invalid
        """
        validate_location(location)
        return self._remove(location)

    async def _remove(self, location: str) -> str:
        result = self._adapter.remove(location)
        if inspect.isawaitable(result):
            await result
        logger.info(f"Removed {location} from {self._identity}")
        return location

    async def _transfer(
        self,
        context: OperationContext,
        open_source: Callable[[], ReadableStream],
        open_sink: Callable[[], WritableStream]
    ) -> TransferResult:
        label = f"{context.operation} {context.location}"
        outcome = Outcome(label)
        chain = StreamChain(outcome)
        sink = None
        pump = None

        logger.debug(f"Starting {label} via {self._identity}")

        try:
            sink = open_sink()
            source = open_source()
            chain.start(source)
            for entry in self._middleware:
                transformer = entry.instantiate()
                context.transformers.append(transformer)
                chain.link(transformer, context.options_for(entry.identity))
        except Exception as e:
            outcome.reject(e)
        else:
            pump = asyncio.ensure_future(chain.drain(sink))

        try:
            await outcome
        except BaseException as e:
            await self._stop(pump)
            if sink is not None:
                await chain.abort(sink, e)
            logger.warning(f"{label} failed: {e!r}")
            raise

        await pump
        result = context.collect()
        logger.info(f"Finished {label} via {self._identity}, transforms: {result.transforms}")
        return result

    @staticmethod
    async def _stop(pump: Optional[asyncio.Future]) -> None:
        if pump is None or pump.done():
            return
        pump.cancel()
        await asyncio.gather(pump, return_exceptions=True)

    def __repr__(self) -> str:
        return f"<Pipeline adapter={self._identity!r} transforms={[m.identity for m in self._middleware]}>"
