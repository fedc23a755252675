"""
Transforms shipped with pipestore.

Each transform implements the Transform contract and declares its
identity as a class attribute.
"""
from ..registry import TransformRegistry
from .checksum import ChecksumTransform
from .compress import CompressTransform
from .encrypt import EncryptTransform
from .progress import ProgressTransform
from .stats import Stats

BUILTIN_TRANSFORMS = (ChecksumTransform, CompressTransform, ProgressTransform, EncryptTransform)


def builtin_transforms() -> TransformRegistry:
    """Return a new registry holding the built-in transforms."""
    return TransformRegistry(list(BUILTIN_TRANSFORMS))


__all__ = [
    'ChecksumTransform',
    'CompressTransform',
    'EncryptTransform',
    'ProgressTransform',
    'Stats',
    'BUILTIN_TRANSFORMS',
    'builtin_transforms',
]
