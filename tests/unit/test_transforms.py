"""Tests for the built-in transforms."""
import gzip
import zlib

import pytest
from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes
from Crypto.Util import Counter

from pipestore import (
    BufferSink,
    BytesSource,
    ChecksumTransform,
    CompressTransform,
    EncryptTransform,
    Storage,
    TransformError,
)


class TestChecksumTransform:
    """Test suite for ChecksumTransform."""

    def test_identity(self):
        assert ChecksumTransform.identity == 'checksum'

    @pytest.mark.asyncio
    async def test_md5_default(self, reader):
        """Test md5 is the default and data passes unchanged."""
        checksum = ChecksumTransform()

        data = await reader(checksum.transform(BytesSource(b'hello world', chunk_size=2)))

        assert data == b'hello world'
        assert checksum.results() == {
            'algorithm': 'md5',
            'value': '5eb63bbbe01eeed093cb22bb8f5acdc3',
        }

    @pytest.mark.asyncio
    async def test_sha1(self, reader):
        checksum = ChecksumTransform({'algorithm': 'sha1'})

        await reader(checksum.transform(BytesSource(b'hello world')))

        assert checksum.results()['value'] == '2aae6c35c94fcfb415dbe95f408b9ce91ee846ed'

    @pytest.mark.asyncio
    async def test_per_call_override(self, reader):
        """Test per-call options override registration options."""
        checksum = ChecksumTransform({'algorithm': 'md5'})

        await reader(checksum.transform(BytesSource(b'hello world'), {'algorithm': 'sha1'}))

        assert checksum.results()['algorithm'] == 'sha1'

    @pytest.mark.asyncio
    async def test_buffer(self, reader):
        """Test buffer option returns raw digest bytes."""
        checksum = ChecksumTransform({'buffer': True})

        await reader(checksum.transform(BytesSource(b'hello world')))

        assert checksum.results()['value'] == bytes.fromhex('5eb63bbbe01eeed093cb22bb8f5acdc3')

    @pytest.mark.parametrize('algorithm', ['nope', 'shake_128', 42])
    def test_invalid_algorithm(self, algorithm):
        with pytest.raises(TransformError) as exc_info:
            ChecksumTransform({'algorithm': algorithm}).transform(BytesSource(b''))

        assert exc_info.value.identity == 'checksum'

    @pytest.mark.asyncio
    async def test_empty_stream(self, reader):
        checksum = ChecksumTransform()

        await reader(checksum.transform(BytesSource(b'')))

        assert checksum.results()['value'] == 'd41d8cd98f00b204e9800998ecf8427e'


class TestCompressTransform:
    """Test suite for CompressTransform."""

    def test_identity(self):
        assert CompressTransform.identity == 'compress'

    def test_defaults_to_gzip(self):
        assert CompressTransform().results()['algorithm'] == 'gzip'

    @pytest.mark.parametrize('options', [{'algorithm': 'test'}, {'level': 12}, {'level': 'high'}])
    def test_invalid_options(self, options):
        """Test invalid registration options fail at construction."""
        with pytest.raises(TransformError):
            CompressTransform(options)

    @pytest.mark.parametrize('options', [None, {}, {'mode': 'test'}])
    def test_invalid_mode(self, options):
        with pytest.raises(TransformError):
            CompressTransform().transform(BytesSource(b''), options)

    @pytest.mark.asyncio
    async def test_gzip(self, reader):
        data = b'hello world ' * 100
        compress = CompressTransform()

        compressed = await reader(compress.transform(BytesSource(data, chunk_size=50), {'mode': 'compress'}))

        assert gzip.decompress(compressed) == data
        results = compress.results()
        assert results['mode'] == 'compress'
        assert results['bytes_in'] == len(data)
        assert results['bytes_out'] == len(compressed)

    @pytest.mark.asyncio
    @pytest.mark.parametrize('raw, wbits', [(False, zlib.MAX_WBITS), (True, -zlib.MAX_WBITS)])
    async def test_deflate(self, reader, raw, wbits):
        """Test deflate with and without zlib header."""
        data = b'abc' * 1000
        compress = CompressTransform({'algorithm': 'deflate', 'raw': raw, 'level': 9})

        compressed = await reader(compress.transform(BytesSource(data), {'mode': 'compress'}))

        assert zlib.decompress(compressed, wbits) == data

    @pytest.mark.asyncio
    async def test_decompress(self, reader):
        data = b'hello world ' * 100
        compress = CompressTransform()

        result = await reader(compress.transform(BytesSource(gzip.compress(data), chunk_size=7), {'mode': 'decompress'}))

        assert result == data
        assert compress.results()['bytes_out'] == len(data)

    @pytest.mark.asyncio
    async def test_decompress_corrupt(self, reader):
        with pytest.raises(TransformError, match='Corrupt'):
            await reader(CompressTransform().transform(BytesSource(b'not gzip at all'), {'mode': 'decompress'}))

    @pytest.mark.asyncio
    async def test_decompress_truncated(self, reader):
        compressed = gzip.compress(b'hello world' * 100)

        with pytest.raises(TransformError, match='Truncated'):
            await reader(CompressTransform().transform(BytesSource(compressed[:20]), {'mode': 'decompress'}))

    @pytest.mark.asyncio
    async def test_pipeline_roundtrip(self):
        """Test compress on upload and decompress on download."""
        storage = Storage('memory').register_transform('compress')
        pipeline = storage.pipeline().use('compress', {'level': 6})
        data = b'x' * 10000

        uploaded = await pipeline.upload(BytesSource(data), {'name': 'f.gz', 'compress': {'mode': 'compress'}})
        sink = BufferSink()
        downloaded = await pipeline.download('f.gz', sink, {'compress': {'mode': 'decompress'}})

        assert gzip.decompress(storage.adapter.files['f.gz']) == data
        assert sink.getvalue() == data
        assert uploaded['compress']['bytes_in'] == len(data)
        assert downloaded['compress']['mode'] == 'decompress'


class TestEncryptTransform:
    """Test suite for EncryptTransform."""

    def test_identity(self):
        assert EncryptTransform.identity == 'encrypt'

    @pytest.mark.asyncio
    async def test_matches_aes_ctr(self, reader):
        """Test output equals AES-CTR with nonce prefix and zero counter."""
        key = get_random_bytes(16)
        nonce = get_random_bytes(8)
        data = b'secret data ' * 50
        encrypt = EncryptTransform({'key': key, 'nonce': nonce})

        encrypted = await reader(encrypt.transform(BytesSource(data, chunk_size=13), {'mode': 'encrypt'}))

        counter = Counter.new(64, prefix=nonce, initial_value=0)
        expected = AES.new(key, AES.MODE_CTR, counter=counter).encrypt(data)
        assert encrypted == expected
        assert encrypt.results() == {'algorithm': 'aes-ctr', 'key': key.hex(), 'nonce': nonce.hex()}

    @pytest.mark.asyncio
    async def test_roundtrip_with_generated_key(self, reader):
        """Test decrypting with the key and nonce from the results."""
        data = b'payload' * 100
        encrypt = EncryptTransform()

        encrypted = await reader(encrypt.transform(BytesSource(data), {'mode': 'encrypt'}))
        results = encrypt.results()
        decrypt = EncryptTransform({'key': results['key'], 'nonce': results['nonce']})
        decrypted = await reader(decrypt.transform(BytesSource(encrypted, chunk_size=5), {'mode': 'decrypt'}))

        assert encrypted != data
        assert len(bytes.fromhex(results['key'])) == 32
        assert decrypted == data

    @pytest.mark.parametrize('options', [
        {'key': b'short'},
        {'key': 'zz' * 16},
        {'key': 12345},
        {'nonce': b'\x00' * 16},
    ])
    def test_invalid_key_material(self, options):
        with pytest.raises(TransformError):
            EncryptTransform(options)

    @pytest.mark.parametrize('options', [None, {'mode': 'scramble'}])
    def test_invalid_mode(self, options):
        with pytest.raises(TransformError):
            EncryptTransform().transform(BytesSource(b''), options)

    def test_decrypt_requires_key_and_nonce(self):
        with pytest.raises(TransformError, match='requires'):
            EncryptTransform({'key': b'k' * 16}).transform(BytesSource(b''), {'mode': 'decrypt'})

    @pytest.mark.asyncio
    async def test_pipeline_roundtrip(self):
        """Test encrypting uploads and decrypting downloads through a pipeline."""
        key = get_random_bytes(32)
        storage = Storage('memory').register_transform('encrypt')
        pipeline = storage.pipeline().use('encrypt', {'key': key})

        uploaded = await pipeline.upload(BytesSource(b'top secret'), {'name': 's', 'encrypt': {'mode': 'encrypt'}})
        sink = BufferSink()
        await pipeline.download('s', sink, {'encrypt': {'mode': 'decrypt', 'nonce': uploaded['encrypt']['nonce']}})

        assert storage.adapter.files['s'] != b'top secret'
        assert sink.getvalue() == b'top secret'
