"""Event emitter used by transforms that publish intermediate events."""
from .event_emitter import EventEmitter

__all__ = [
    'EventEmitter',
]
