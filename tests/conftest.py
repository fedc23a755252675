"""Pytest fixtures for pipestore tests."""
import pytest

from pipestore import BaseTransform, MemoryAdapter, Storage


async def read_all(stream) -> bytes:
    """Drain a readable stream."""
    return b''.join([chunk async for chunk in stream])


@pytest.fixture
def reader():
    """Returns a coroutine function draining a readable stream."""
    return read_all


@pytest.fixture
def memory_storage():
    """Storage backed by a fresh MemoryAdapter."""
    return Storage(MemoryAdapter())


@pytest.fixture
def counting_factory():
    """
    Returns a factory of transform classes counting their instances.

    Each call creates a new class, so counts never leak between tests.
    """
    def make(identity: str = 'counting'):
        class CountingTransform(BaseTransform):
            created = []

            def __init__(self, options=None):
                super().__init__(options)
                self.bytes = 0
                self.seen_options = None
                type(self).created.append(self)

            def transform(self, stream, options=None):
                self.seen_options = options
                return self._count(stream)

            async def _count(self, stream):
                async for chunk in stream:
                    self.bytes += len(chunk)
                    yield chunk

            def results(self):
                return {'bytes': self.bytes}

        CountingTransform.identity = identity
        return CountingTransform

    return make


@pytest.fixture
def tag_factory():
    """Returns a factory of transforms appending their tag after the data."""
    def make(identity: str, tag: bytes):
        class TagTransform(BaseTransform):
            def transform(self, stream, options=None):
                return self._tag(stream)

            async def _tag(self, stream):
                async for chunk in stream:
                    yield chunk
                yield tag

            def results(self):
                return tag.decode()

        TagTransform.identity = identity
        return TagTransform

    return make


@pytest.fixture
def failing_transform():
    """Transform raising RuntimeError once it has seen some data."""
    class FailingTransform(BaseTransform):
        identity = 'failing'
        error = None

        def transform(self, stream, options=None):
            return self._fail(stream)

        async def _fail(self, stream):
            async for chunk in stream:
                if chunk:
                    type(self).error = RuntimeError('transform failed')
                    raise type(self).error
                yield chunk

        def results(self):
            return None

    return FailingTransform
