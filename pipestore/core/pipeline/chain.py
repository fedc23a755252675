"""
Stream chain builder.

Wires source -> T1 -> ... -> Tn -> sink for one transfer and connects
every stage to the transfer's Outcome.
"""
import inspect
from typing import Any, AsyncIterator, Dict, List, Optional

from ..exceptions import TransformError
from ..logging import get_logger
from ..streams import ReadableStream, WritableStream, is_readable
from .outcome import Outcome

logger = get_logger('pipestore.pipeline')


class WatchedStream:
    """
    Pass-through around one readable stage.

    Reports any error raised while iterating the stage to the outcome
    before letting it propagate to the next stage.
    """

    def __init__(self, stream: ReadableStream, name: str, outcome: Outcome):
        self._stream = stream
        self._name = name
        self._outcome = outcome

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._stream:
                yield chunk
        except Exception as e:
            if self._outcome.reject(e):
                logger.debug(f"{self._outcome.label}: stage '{self._name}' failed: {e!r}")
            raise


class StreamChain:
    """
    Builds the stream graph of one transfer.

    Every readable stage is watched for errors raised while it is read,
    and every stage offering ``on_error`` (see ErrorSignal) reports its
    out-of-band failures to the same outcome.
    """

    def __init__(self, outcome: Outcome):
        self._outcome = outcome
        self._tail: Optional[WatchedStream] = None
        self._stages: List[str] = []

    @property
    def stages(self) -> List[str]:
        """Names of the linked stages, source first."""
        return list(self._stages)

    def listen(self, stream: Any) -> None:
        """Subscribe the outcome to a stream's out-of-band failures."""
        on_error = getattr(stream, 'on_error', None)
        if callable(on_error):
            on_error(self._outcome.reject)

    def start(self, source: ReadableStream, name: str = 'source') -> WatchedStream:
        """Set the first stage."""
        if not is_readable(source):
            raise TypeError(f"Stage '{name}' is not a readable stream: {source!r}")
        self.listen(source)
        self._tail = WatchedStream(source, name, self._outcome)
        self._stages = [name]
        return self._tail

    def link(self, transformer: Any, options: Dict[str, Any]) -> WatchedStream:
        """
        Append a transform stage.

        Args:
            transformer: Fresh transform instance
            options: Per-call options for the transform

        Returns:
            The new tail of the chain
        """
        if self._tail is None:
            raise RuntimeError("Chain has no source")

        identity = transformer.identity
        stream = transformer.transform(self._tail, options)
        if not is_readable(stream):
            raise TransformError(
                f"Transform {identity} did not return a readable stream",
                identity=identity
            )

        self.listen(stream)
        self._tail = WatchedStream(stream, identity, self._outcome)
        self._stages.append(identity)
        return self._tail

    async def drain(self, sink: WritableStream) -> None:
        """
        Pump the tail into the sink, close it and settle the outcome.

        Never raises: failures are reported to the outcome.
        """
        self.listen(sink)
        try:
            async for chunk in self._tail:
                if chunk:
                    await sink.write(chunk)
            await sink.close()
        except Exception as e:
            self._outcome.reject(e)
        else:
            self._outcome.resolve()

    async def abort(self, sink: Optional[WritableStream], exc: BaseException) -> None:
        """Let a sink release its resources after a failed transfer."""
        abort = getattr(sink, 'abort', None)
        if not callable(abort):
            return
        try:
            result = abort(exc)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"{self._outcome.label}: sink abort failed: {e!r}")
