"""
Progress transform.

Counts the bytes flowing through it and emits intermediate Stats to its
listeners. The transfer result only carries the final Stats.
"""
import time
from typing import Any, AsyncIterator, Dict, Optional

from ..events import EventEmitter
from ..exceptions import TransformError
from ..pipeline.base import BaseTransform
from ..streams import ReadableStream
from .stats import Stats
from ..logging import get_logger

logger = get_logger('pipestore.transforms.progress')


class ProgressTransform(BaseTransform, EventEmitter):
    """
    Monitors transfer progress.

    Instances are created by the pipeline for every transfer, so listeners
    are normally passed as options.

    Options:
        total: Expected size in bytes, enables ``remaining`` and ``progress``
        on_progress: Called with a Stats snapshot for each chunk (throttled by
            ``interval``) and once more when the stream ends
        on_finish: Called with the final Stats
        interval: Minimum seconds between two progress events (default: 0)

    Events:
        progress: Stats snapshot
        finish: Final Stats

    Example:
        >>> pipeline.use('progress', {'on_progress': lambda s: print(f"{s.processed} bytes")})
        >>> await pipeline.upload(FileSource(path), {'progress': {'total': size}})
    """

    identity = 'progress'

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        BaseTransform.__init__(self, options)
        EventEmitter.__init__(self)
        self._stats: Optional[Stats] = None
        self._interval = 0.0

    @property
    def stats(self) -> Optional[Stats]:
        return self._stats

    def transform(self, stream: ReadableStream, options: Optional[Dict[str, Any]] = None) -> AsyncIterator[bytes]:
        options = self.resolve_options(options)

        for event, key in (('progress', 'on_progress'), ('finish', 'on_finish')):
            callback = options.get(key)
            if callback is None:
                continue
            if not callable(callback):
                raise TransformError(f"Option '{key}' must be callable", self.identity)
            self.on(event, callback)

        try:
            self._interval = float(options.get('interval', 0))
        except (TypeError, ValueError) as e:
            raise TransformError(f"Invalid interval: {options.get('interval')!r}", self.identity) from e

        self._stats = Stats(total=options.get('total'))
        return self._monitor(stream)

    async def _monitor(self, stream: ReadableStream) -> AsyncIterator[bytes]:
        stats = self._stats
        last_emit = None

        async for chunk in stream:
            stats.mark_progress(len(chunk))
            now = time.monotonic()
            if last_emit is None or now - last_emit >= self._interval:
                last_emit = now
                self.emit('progress', stats.snapshot())
            yield chunk

        stats.mark_finished()
        logger.debug(f"Processed {stats.processed} bytes in {stats.duration:.2f}s")
        self.emit('progress', stats.snapshot())
        self.emit('finish', stats.snapshot())

    def results(self) -> Stats:
        if self._stats is None:
            return Stats(total=self._options.get('total'))
        return self._stats
