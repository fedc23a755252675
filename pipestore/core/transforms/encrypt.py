"""
Encrypt transform.

AES in CTR mode, which works on a stream of any length without padding.
The counter block is an 8 byte nonce followed by a 64 bit big-endian
block counter starting at zero.
"""
import os
from typing import Any, AsyncIterator, Dict, Optional, Union

from Crypto.Cipher import AES
from Crypto.Util import Counter

from ..exceptions import TransformError
from ..pipeline.base import BaseTransform
from ..streams import ReadableStream
from ..logging import get_logger

logger = get_logger('pipestore.transforms.encrypt')

MODES = ('encrypt', 'decrypt')


class EncryptTransform(BaseTransform):
    """
    Encrypts or decrypts the stream with AES-CTR.

    Options:
        mode: 'encrypt' or 'decrypt', required per call
        key: 16, 24 or 32 byte key, as bytes or hex. A random 32 byte key
            is generated for encryption when omitted.
        nonce: 8 byte nonce, as bytes or hex. Random for encryption when
            omitted, required for decryption.

    Results:
        {'algorithm': 'aes-ctr', 'key': '<hex>', 'nonce': '<hex>'}

    The key ends up in the transfer result; store it somewhere safer than
    next to the data.
    """

    identity = 'encrypt'

    KEY_SIZES = (16, 24, 32)
    NONCE_SIZE = 8

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        super().__init__(options)
        self._key = self._coerce(self._options.get('key'), 'key', self.KEY_SIZES)
        self._nonce = self._coerce(self._options.get('nonce'), 'nonce', (self.NONCE_SIZE,))
        self._mode: Optional[str] = None

    def _coerce(self, value: Optional[Union[bytes, str]], name: str, sizes: tuple) -> Optional[bytes]:
        if value is None:
            return None

        if isinstance(value, str):
            try:
                value = bytes.fromhex(value)
            except ValueError as e:
                raise TransformError(f"Option '{name}' is not valid hex", self.identity) from e
        elif isinstance(value, (bytes, bytearray, memoryview)):
            value = bytes(value)
        else:
            raise TransformError(
                f"Option '{name}' must be bytes or hex string, got: {type(value).__name__}",
                self.identity
            )

        if len(value) not in sizes:
            raise TransformError(
                f"Option '{name}' must be {' or '.join(map(str, sizes))} bytes, got {len(value)}",
                self.identity
            )
        return value

    def transform(self, stream: ReadableStream, options: Optional[Dict[str, Any]] = None) -> AsyncIterator[bytes]:
        options = self.resolve_options(options)
        mode = options.get('mode')
        if mode not in MODES:
            raise TransformError(f"Invalid mode {mode!r}, expected one of {MODES}", self.identity)

        key = self._coerce(options.get('key'), 'key', self.KEY_SIZES)
        nonce = self._coerce(options.get('nonce'), 'nonce', (self.NONCE_SIZE,))

        if mode == 'decrypt' and (key is None or nonce is None):
            raise TransformError("Decryption requires both 'key' and 'nonce'", self.identity)

        self._mode = mode
        self._key = key or os.urandom(32)
        self._nonce = nonce or os.urandom(self.NONCE_SIZE)

        counter = Counter.new(64, prefix=self._nonce, initial_value=0, little_endian=False)
        cipher = AES.new(self._key, AES.MODE_CTR, counter=counter)
        logger.debug(f"{mode} with AES-{len(self._key) * 8}-CTR")

        # CTR is symmetric: both directions apply the same keystream
        return self._apply(stream, cipher)

    async def _apply(self, stream: ReadableStream, cipher) -> AsyncIterator[bytes]:
        async for chunk in stream:
            yield cipher.encrypt(chunk)

    def results(self) -> Dict[str, Any]:
        return {
            'algorithm': 'aes-ctr',
            'key': self._key.hex() if self._key else None,
            'nonce': self._nonce.hex() if self._nonce else None,
        }
