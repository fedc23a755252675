"""Checksum transform - hashes the data flowing through it."""
import hashlib
from typing import Any, AsyncIterator, Dict, Optional

from ..exceptions import TransformError
from ..pipeline.base import BaseTransform
from ..streams import ReadableStream

DEFAULT_ALGORITHM = 'md5'


class ChecksumTransform(BaseTransform):
    """
    Computes a digest of the stream without altering it.

    Options:
        algorithm: Any algorithm known to hashlib (default: md5)
        buffer: Return the raw digest bytes instead of a hex string

    Results:
        {'algorithm': 'md5', 'value': '5eb63bbbe01eeed093cb22bb8f5acdc3'}
    """

    identity = 'checksum'

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        super().__init__(options)
        self._algorithm = self._options.get('algorithm', DEFAULT_ALGORITHM)
        self._buffer = bool(self._options.get('buffer', False))
        self._hash = None

    def transform(self, stream: ReadableStream, options: Optional[Dict[str, Any]] = None) -> AsyncIterator[bytes]:
        options = self.resolve_options(options)
        self._algorithm = options.get('algorithm', DEFAULT_ALGORITHM)
        self._buffer = bool(options.get('buffer', False))

        try:
            self._hash = hashlib.new(self._algorithm)
        except (ValueError, TypeError) as e:
            raise TransformError(f"Unsupported checksum algorithm: {self._algorithm!r}", self.identity) from e

        # Variable-length digests (shake_*) have no fixed value to report
        if self._hash.digest_size == 0:
            raise TransformError(f"Unsupported checksum algorithm: {self._algorithm!r}", self.identity)

        return self._digest(stream)

    async def _digest(self, stream: ReadableStream) -> AsyncIterator[bytes]:
        async for chunk in stream:
            self._hash.update(chunk)
            yield chunk

    def results(self) -> Dict[str, Any]:
        if self._hash is None:
            value = None
        elif self._buffer:
            value = self._hash.digest()
        else:
            value = self._hash.hexdigest()

        return {'algorithm': self._algorithm, 'value': value}
