"""
Compress transform.

gzip and deflate (zlib-wrapped or raw) in both directions, using zlib
stream objects so that data never has to fit in memory.
"""
import zlib
from typing import Any, AsyncIterator, Dict, Optional

from ..exceptions import TransformError
from ..pipeline.base import BaseTransform
from ..streams import ReadableStream

ALGORITHMS = ('gzip', 'deflate')
MODES = ('compress', 'decompress')


def _window_bits(algorithm: str, raw: bool) -> int:
    if algorithm == 'gzip':
        return 16 + zlib.MAX_WBITS
    if raw:
        return -zlib.MAX_WBITS
    return zlib.MAX_WBITS


class CompressTransform(BaseTransform):
    """
    Compresses or decompresses the stream.

    Registration options:
        algorithm: 'gzip' (default) or 'deflate'
        raw: Raw deflate stream without zlib header (deflate only)
        level: Compression level, -1 (zlib default) to 9

    Per-call options:
        mode: 'compress' or 'decompress', required. Usually 'compress' for
            uploads and 'decompress' for downloads.
    """

    identity = 'compress'

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        super().__init__(options)
        self._settings = self._validate(self._options)
        self._mode: Optional[str] = None
        self._bytes_in = 0
        self._bytes_out = 0

    def _validate(self, options: Dict[str, Any]) -> Dict[str, Any]:
        algorithm = options.get('algorithm', 'gzip')
        if algorithm not in ALGORITHMS:
            raise TransformError(
                f"Invalid compression algorithm {algorithm!r}, expected one of {ALGORITHMS}",
                self.identity
            )

        level = options.get('level', zlib.Z_DEFAULT_COMPRESSION)
        if not isinstance(level, int) or isinstance(level, bool) or not -1 <= level <= 9:
            raise TransformError(f"Invalid compression level: {level!r}", self.identity)

        return {'algorithm': algorithm, 'raw': bool(options.get('raw', False)), 'level': level}

    def transform(self, stream: ReadableStream, options: Optional[Dict[str, Any]] = None) -> AsyncIterator[bytes]:
        options = self.resolve_options(options)
        mode = options.get('mode')
        if mode not in MODES:
            raise TransformError(f"Invalid mode {mode!r}, expected one of {MODES}", self.identity)

        self._settings = self._validate(options)
        self._mode = mode
        wbits = _window_bits(self._settings['algorithm'], self._settings['raw'])

        if mode == 'compress':
            return self._compress(stream, zlib.compressobj(self._settings['level'], zlib.DEFLATED, wbits))
        return self._decompress(stream, zlib.decompressobj(wbits))

    async def _compress(self, stream: ReadableStream, compressor) -> AsyncIterator[bytes]:
        async for chunk in stream:
            self._bytes_in += len(chunk)
            data = compressor.compress(chunk)
            if data:
                self._bytes_out += len(data)
                yield data

        data = compressor.flush()
        self._bytes_out += len(data)
        yield data

    async def _decompress(self, stream: ReadableStream, decompressor) -> AsyncIterator[bytes]:
        try:
            async for chunk in stream:
                self._bytes_in += len(chunk)
                data = decompressor.decompress(chunk)
                if data:
                    self._bytes_out += len(data)
                    yield data

            data = decompressor.flush()
        except zlib.error as e:
            raise TransformError(f"Corrupt {self._settings['algorithm']} data: {e}", self.identity) from e

        if data:
            self._bytes_out += len(data)
            yield data

        if not decompressor.eof:
            raise TransformError(f"Truncated {self._settings['algorithm']} data", self.identity)

    def results(self) -> Dict[str, Any]:
        return {
            **self._settings,
            'mode': self._mode,
            'bytes_in': self._bytes_in,
            'bytes_out': self._bytes_out,
        }
