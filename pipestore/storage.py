"""
Storage facade.

Owns the adapter for one destination and the registry of transforms that
pipelines built from it can use.
"""
import inspect
from typing import Any, Dict, Optional, Type, Union

from .core.adapters import builtin_adapters
from .core.exceptions import InvalidAdapterError
from .core.logging import get_logger
from .core.pipeline import Pipeline, TransferResult
from .core.registry import (
    ADAPTER_METHODS,
    AdapterRegistry,
    TransformRegistry,
    declared_identity,
    implements,
)
from .core.streams import ReadableStream, WritableStream
from .core.transforms import builtin_transforms

logger = get_logger('pipestore.storage')


class Storage:
    """
    Entry point for transfers against one storage backend.

    Example:
        >>> async with Storage('filesystem', {'root': '/srv/files'}) as storage:
        ...     storage.register_transform('checksum')
        ...     pipeline = storage.pipeline().use('checksum')
        ...     result = await pipeline.upload(FileSource('photo.jpg'), {'directory': 'images'})
        ...     print(result.location, result['checksum']['value'])
    """

    def __init__(
        self,
        adapter: Union[str, Type, Any],
        config: Optional[Any] = None,
        *,
        adapters: Optional[AdapterRegistry] = None,
        transforms: Optional[TransformRegistry] = None
    ):
        """
        Create a storage for a backend.

        Args:
            adapter: Adapter identity (e.g. 'filesystem'), adapter class or
                configured adapter instance
            config: Configuration passed to the adapter class
            adapters: Registry used to resolve identities (default: built-ins)
            transforms: Registry of transforms available to pipelines
                (default: empty, see register_transform)

        Raises:
            AdapterNotFoundError: If the identity is not registered
            InvalidAdapterError: If the adapter is not a valid adapter
            DeclarationError: If the adapter does not declare its identity
        """
        self._adapters = adapters if adapters is not None else builtin_adapters()
        self._transforms = transforms if transforms is not None else TransformRegistry()
        self._adapter = self._resolve_adapter(adapter, config)
        self._identity = declared_identity(self._adapter, 'Adapter')

        logger.debug(f"Storage ready with adapter {self._identity}")

    def _resolve_adapter(self, adapter: Any, config: Optional[Any]) -> Any:
        if isinstance(adapter, str):
            adapter = self._adapters.get(adapter)

        if inspect.isclass(adapter):
            if not implements(adapter, ADAPTER_METHODS):
                raise InvalidAdapterError(
                    f"{adapter.__name__} does not implement {', '.join(ADAPTER_METHODS)}"
                )
            declared_identity(adapter, 'Adapter')
            return adapter(config)

        if adapter is None or not implements(adapter, ADAPTER_METHODS):
            raise InvalidAdapterError(
                f"Invalid adapter: {adapter!r}. Expected an identity, an adapter class or instance"
            )

        if config is not None:
            logger.warning(f"Adapter instance given, ignoring config: {config!r}")
        return adapter

    @property
    def adapter(self) -> Any:
        return self._adapter

    @property
    def transforms(self) -> TransformRegistry:
        return self._transforms

    def register_transform(self, transformer: Union[str, Type]) -> 'Storage':
        """
        Make a transform available to this storage's pipelines.

        Args:
            transformer: Transform class, or the identity of a built-in transform

        Returns:
            self, for chaining

        Raises:
            NotRegisteredError: If a string names no built-in transform
            DeclarationError: If the class does not declare its identity
        """
        if isinstance(transformer, str):
            transformer = builtin_transforms().get(transformer)

        self._transforms.register(transformer)
        return self

    def pipeline(self) -> Pipeline:
        """Create a new pipeline sharing this storage's adapter and transforms."""
        return Pipeline(self._adapter, self._transforms)

    def upload(self, source: ReadableStream, options: Optional[Dict[str, Any]] = None):
        """Upload a stream without transforms. See Pipeline.upload."""
        return self.pipeline().upload(source, options)

    def download(
        self,
        location: str,
        destination: WritableStream,
        options: Optional[Dict[str, Any]] = None
    ):
        """Download a file without transforms. See Pipeline.download."""
        return self.pipeline().download(location, destination, options)

    def remove(self, location: str):
        """Remove a file. See Pipeline.remove."""
        return self.pipeline().remove(location)

    async def close(self) -> None:
        """Release the adapter's connections."""
        close = getattr(self._adapter, 'close', None)
        if callable(close):
            result = close()
            if inspect.isawaitable(result):
                await result
        logger.debug(f"Storage closed ({self._identity})")

    async def __aenter__(self) -> 'Storage':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return f"<Storage adapter={self._identity!r} transforms={self._transforms.identities()}>"


__all__ = ['Storage', 'TransferResult']
