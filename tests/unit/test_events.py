"""Tests for EventEmitter."""
from pipestore.core.events import EventEmitter


class TestEventEmitter:
    """Test suite for EventEmitter."""

    def test_on_and_emit(self):
        emitter = EventEmitter()
        received = []
        emitter.on('progress', lambda value: received.append(value))

        assert emitter.emit('progress', 1)
        assert emitter.emit('progress', 2)
        assert received == [1, 2]

    def test_emit_without_listeners(self):
        assert not EventEmitter().emit('nothing')

    def test_once(self):
        """Test once handlers are removed after the first call."""
        emitter = EventEmitter()
        received = []
        emitter.once('finish', received.append)

        emitter.emit('finish', 'a')
        emitter.emit('finish', 'b')

        assert received == ['a']
        assert emitter.listener_count('finish') == 0

    def test_off(self):
        emitter = EventEmitter()
        first, second = [], []
        emitter.on('event', first.append).on('event', second.append)

        emitter.off('event', first.append)
        emitter.emit('event', 1)

        assert first == []
        assert second == [1]

    def test_off_all(self):
        emitter = EventEmitter()
        emitter.on('event', print).on('event', repr)

        emitter.off('event')

        assert emitter.listener_count('event') == 0
        assert emitter.off('unknown') is emitter

    def test_kwargs(self):
        emitter = EventEmitter()
        received = {}
        emitter.on('event', lambda **kwargs: received.update(kwargs))

        emitter.emit('event', processed=10)

        assert received == {'processed': 10}
