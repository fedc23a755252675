"""
Core module - streams, pipeline engine, adapters and transforms.
"""
from .config import FilesystemConfig, HttpConfig, SSLConfig, TimeoutConfig
from .exceptions import (
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
from .pipeline import (
    Pipeline,
    TransferResult,
    StorageAdapter,
    Transform,
    BaseAdapter,
    BaseTransform,
)
from .registry import AdapterRegistry, TransformRegistry
from .adapters import FilesystemAdapter, MemoryAdapter, HttpAdapter, builtin_adapters
from .transforms import (
    ChecksumTransform,
    CompressTransform,
    EncryptTransform,
    ProgressTransform,
    Stats,
    builtin_transforms,
)

__all__ = [
    # Config
    'FilesystemConfig',
    'HttpConfig',
    'SSLConfig',
    'TimeoutConfig',

    # Exceptions
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

    # Pipeline
    'Pipeline',
    'TransferResult',
    'StorageAdapter',
    'Transform',
    'BaseAdapter',
    'BaseTransform',

    # Registries
    'AdapterRegistry',
    'TransformRegistry',

    # Adapters
    'FilesystemAdapter',
    'MemoryAdapter',
    'HttpAdapter',
    'builtin_adapters',

    # Transforms
    'ChecksumTransform',
    'CompressTransform',
    'EncryptTransform',
    'ProgressTransform',
    'Stats',
    'builtin_transforms',
]
