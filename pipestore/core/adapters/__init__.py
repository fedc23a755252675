"""
Storage adapters shipped with pipestore.

Each adapter implements the StorageAdapter contract and declares its
identity as a class attribute.
"""
from ..registry import AdapterRegistry
from .filesystem import FilesystemAdapter
from .http import HttpAdapter, HttpUploadStream
from .memory import MemoryAdapter

BUILTIN_ADAPTERS = (FilesystemAdapter, MemoryAdapter, HttpAdapter)


def builtin_adapters() -> AdapterRegistry:
    """Return a new registry holding the built-in adapters."""
    return AdapterRegistry(list(BUILTIN_ADAPTERS))


__all__ = [
    'FilesystemAdapter',
    'MemoryAdapter',
    'HttpAdapter',
    'HttpUploadStream',
    'BUILTIN_ADAPTERS',
    'builtin_adapters',
]
