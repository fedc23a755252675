"""
Pipeline module - the transform-composition engine.

Binds a storage adapter to an ordered list of transforms and runs uploads,
downloads and removals through them.
"""
from .pipeline import Pipeline, validate_location
from .chain import StreamChain, WatchedStream
from .outcome import Outcome
from .models import Middleware, OperationContext, TransferResult
from .base import BaseAdapter, BaseTransform
from .protocols import StorageAdapter, Transform

__all__ = [
    # Main classes
    'Pipeline',
    'StreamChain',
    'WatchedStream',
    'Outcome',
    'validate_location',

    # Models
    'Middleware',
    'OperationContext',
    'TransferResult',

    # Contracts
    'StorageAdapter',
    'Transform',
    'BaseAdapter',
    'BaseTransform',
]
