"""
Byte stream primitives.

Readable streams are async iterables of bytes; writable streams expose
awaitable write() and close().
"""
from .protocols import ReadableStream, WritableStream, is_readable, is_writable
from .signals import ErrorSignal
from .sources import BytesSource, FileSource
from .sinks import BufferSink, FileSink

__all__ = [
    # Protocols
    'ReadableStream',
    'WritableStream',
    'is_readable',
    'is_writable',

    # Signals
    'ErrorSignal',

    # Implementations
    'BytesSource',
    'FileSource',
    'BufferSink',
    'FileSink',
]
