"""Tests for stream primitives, Outcome and StreamChain."""
import asyncio
import io

import pytest

from pipestore import (
    BufferSink,
    BytesSource,
    ErrorSignal,
    FileSink,
    FileSource,
    StorageFileNotFoundError,
    TransformError,
)
from pipestore.core.pipeline import Outcome, StreamChain
from pipestore.core.streams import is_readable, is_writable


class TestProtocols:
    """Test suite for stream type checks."""

    def test_readable(self):
        async def gen():
            yield b''

        assert is_readable(BytesSource(b''))
        assert is_readable(gen())
        assert not is_readable(b'bytes')
        assert not is_readable('text')
        assert not is_readable(BufferSink())

    def test_writable(self):
        assert is_writable(BufferSink())
        assert not is_writable(BytesSource(b''))
        assert not is_writable(None)

    def test_writable_requires_coroutines(self):
        """Test objects with plain write/close methods are not writable streams."""
        class HalfAsync:
            async def write(self, data):
                pass

            def close(self):
                pass

        assert not is_writable(io.BytesIO())
        assert not is_writable(HalfAsync())


class TestSources:
    """Test suite for BytesSource and FileSource."""

    @pytest.mark.asyncio
    async def test_bytes_source(self):
        chunks = [chunk async for chunk in BytesSource('hello world', chunk_size=5)]

        assert chunks == [b'hello', b' worl', b'd']

    def test_bytes_source_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            BytesSource(b'', chunk_size=0)

    @pytest.mark.asyncio
    async def test_bytes_source_is_reiterable(self, reader):
        source = BytesSource(b'abc')

        assert await reader(source) == await reader(source)
        assert len(source) == 3

    @pytest.mark.asyncio
    async def test_file_source(self, tmp_path, reader):
        path = tmp_path / 'file.bin'
        path.write_bytes(b'0123456789')

        assert await reader(FileSource(path, chunk_size=3)) == b'0123456789'
        assert await reader(FileSource(str(path), start=3, end=5)) == b'34'

    @pytest.mark.asyncio
    async def test_file_source_missing(self, tmp_path, reader):
        """Test a missing file fails on iteration, not construction."""
        source = FileSource(tmp_path / 'missing')

        with pytest.raises(StorageFileNotFoundError):
            await reader(source)

    def test_file_source_invalid_range(self, tmp_path):
        with pytest.raises(ValueError):
            FileSource(tmp_path / 'f', start=5, end=2)


class TestSinks:
    """Test suite for BufferSink and FileSink."""

    @pytest.mark.asyncio
    async def test_buffer_sink(self):
        received = []
        sink = BufferSink(on_close=received.append)

        await sink.write(b'ab')
        await sink.write(b'cd')
        await sink.close()
        await sink.close()

        assert sink.getvalue() == b'abcd'
        assert sink.bytes_written == 4
        assert received == [b'abcd']

    @pytest.mark.asyncio
    async def test_buffer_sink_async_callback(self):
        received = []

        async def on_close(data):
            received.append(data)

        sink = BufferSink(on_close=on_close)
        await sink.close()

        assert received == [b'']

    @pytest.mark.asyncio
    async def test_buffer_sink_write_after_close(self):
        sink = BufferSink()
        await sink.close()

        with pytest.raises(ValueError):
            await sink.write(b'x')

    @pytest.mark.asyncio
    async def test_file_sink(self, tmp_path):
        path = tmp_path / 'nested' / 'out.bin'
        sink = FileSink(path)

        await sink.write(b'data')
        await sink.close()

        assert path.read_bytes() == b'data'
        assert sink.closed

    @pytest.mark.asyncio
    async def test_file_sink_is_lazy(self, tmp_path):
        """Test nothing is created until data arrives."""
        path = tmp_path / 'lazy.bin'
        sink = FileSink(path)

        await sink.abort(RuntimeError('cancelled'))

        assert not path.exists()


class TestErrorSignal:
    """Test suite for ErrorSignal."""

    def test_first_failure_wins(self):
        signal = ErrorSignal()
        seen = []
        signal.on_error(seen.append)

        assert signal.fail(ValueError('first'))
        assert not signal.fail(ValueError('second'))
        assert [str(e) for e in seen] == ['first']

    def test_late_listener(self):
        """Test a listener added after the failure is called immediately."""
        signal = ErrorSignal()
        error = ValueError('early')
        signal.fail(error)
        seen = []

        signal.on_error(seen.append)

        assert seen == [error]
        assert signal.error is error


class TestOutcome:
    """Test suite for Outcome."""

    @pytest.mark.asyncio
    async def test_resolve_once(self):
        outcome = Outcome('test')

        assert outcome.resolve('value')
        assert not outcome.resolve('other')
        assert not outcome.reject(ValueError('late'))
        assert outcome.settled
        assert await outcome == 'value'

    @pytest.mark.asyncio
    async def test_reject_once(self):
        outcome = Outcome('test')
        first = ValueError('first')

        assert outcome.reject(first)
        assert not outcome.reject(ValueError('second'))
        assert not outcome.resolve()

        with pytest.raises(ValueError) as exc_info:
            await outcome

        assert exc_info.value is first


class TestStreamChain:
    """Test suite for StreamChain."""

    @pytest.mark.asyncio
    async def test_drain(self):
        outcome = Outcome('test')
        chain = StreamChain(outcome)
        chain.start(BytesSource(b'abc'))
        sink = BufferSink()

        await chain.drain(sink)

        assert sink.getvalue() == b'abc'
        assert sink.closed
        assert outcome.settled
        assert chain.stages == ['source']

    @pytest.mark.asyncio
    async def test_start_requires_readable(self):
        chain = StreamChain(Outcome('test'))

        with pytest.raises(TypeError):
            chain.start(b'not a stream')

    @pytest.mark.asyncio
    async def test_link_requires_readable_result(self):
        class Broken:
            identity = 'broken'

            def transform(self, stream, options=None):
                return None

        chain = StreamChain(Outcome('test'))
        chain.start(BytesSource(b''))

        with pytest.raises(TransformError):
            chain.link(Broken(), {})

    @pytest.mark.asyncio
    async def test_listens_to_error_signals(self):
        """Test out-of-band failures of a stage reject the outcome."""
        class SignallingSource(ErrorSignal):
            async def __aiter__(self):
                yield b''

        outcome = Outcome('test')
        source = SignallingSource()
        StreamChain(outcome).start(source)
        error = ConnectionError('lost')

        source.fail(error)

        with pytest.raises(ConnectionError):
            await asyncio.wait_for(outcome, timeout=1)
