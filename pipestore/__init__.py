"""
pipestore - Async file transfer pipelines over interchangeable storage backends.

Usage:
    >>> from pipestore import Storage, FileSource, FileSink
    >>>
    >>> async with Storage('filesystem', {'root': '/srv/files'}) as storage:
    ...     storage.register_transform('checksum')
    ...     pipeline = storage.pipeline().use('checksum', {'algorithm': 'sha256'})
    ...     result = await pipeline.upload(FileSource('report.pdf'), {'directory': 'reports'})
    ...     await storage.download(result.location, FileSink('copy.pdf'))
"""
import logging
from .storage import Storage
from .core.logging import configure_loggers

# Pipeline engine
from .core.pipeline import (
    Pipeline,
    TransferResult,
    StorageAdapter,
    Transform,
    BaseAdapter,
    BaseTransform,
)
from .core.registry import AdapterRegistry, TransformRegistry

# Streams
from .core.streams import (
    BytesSource,
    FileSource,
    BufferSink,
    FileSink,
    ErrorSignal,
)

# Configuration
from .core.config import FilesystemConfig, HttpConfig, SSLConfig, TimeoutConfig

# Built-in components
from .core.adapters import FilesystemAdapter, MemoryAdapter, HttpAdapter
from .core.transforms import (
    ChecksumTransform,
    CompressTransform,
    EncryptTransform,
    ProgressTransform,
    Stats,
)

# Exceptions
from .core.exceptions import (
    PipestoreException,
    ConfigurationError,
    InitializationError,
    InvalidAdapterError,
    DeclarationError,
    NotRegisteredError,
    AdapterNotFoundError,
    DuplicateTransformError,
    InvalidArgumentError,
    StorageError,
    StorageFileNotFoundError,
    TransformError,
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for pipestore modules.

    Sets the level of all pipestore loggers; records still propagate to
    the handlers of the root logger.

    Args:
        level: Logging level (default: logging.INFO)
    """
    configure_loggers(level)


__all__ = [
    'Storage',
    'Pipeline',
    'TransferResult',
    'StorageAdapter',
    'Transform',
    'BaseAdapter',
    'BaseTransform',
    'AdapterRegistry',
    'TransformRegistry',
    'BytesSource',
    'FileSource',
    'BufferSink',
    'FileSink',
    'ErrorSignal',
    'FilesystemConfig',
    'HttpConfig',
    'SSLConfig',
    'TimeoutConfig',
    'FilesystemAdapter',
    'MemoryAdapter',
    'HttpAdapter',
    'ChecksumTransform',
    'CompressTransform',
    'EncryptTransform',
    'ProgressTransform',
    'Stats',
    'PipestoreException',
    'ConfigurationError',
    'InitializationError',
    'InvalidAdapterError',
    'DeclarationError',
    'NotRegisteredError',
    'AdapterNotFoundError',
    'DuplicateTransformError',
    'InvalidArgumentError',
    'StorageError',
    'StorageFileNotFoundError',
    'TransformError',
    'setup_logging',
]
