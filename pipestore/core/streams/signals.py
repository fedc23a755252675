"""Out-of-band error signalling for streams."""
from typing import Callable, List, Optional

from ..logging import get_logger

logger = get_logger('pipestore.streams')

ErrorListener = Callable[[BaseException], object]


class ErrorSignal:
    """
    Mixin for streams that can fail outside of the caller's awaits.

    A stream doing work in a background task cannot raise into the code
    that drives it, so it reports the failure to its listeners instead.
    Only the first failure is reported.
    """

    def __init__(self):
        self._error_listeners: List[ErrorListener] = []
        self._error: Optional[BaseException] = None

    @property
    def error(self) -> Optional[BaseException]:
        """The failure reported by this stream, if any."""
        return self._error

    def on_error(self, callback: ErrorListener) -> 'ErrorSignal':
        """
        Register a failure listener.

        A listener registered after the failure is called immediately.
        """
        self._error_listeners.append(callback)
        if self._error is not None:
            callback(self._error)
        return self

    def fail(self, exc: BaseException) -> bool:
        """
        Report a failure to all listeners.

        Returns:
            False if a failure was already reported
        """
        if self._error is not None:
            logger.debug(f"{type(self).__name__}: ignoring second failure: {exc!r}")
            return False

        self._error = exc
        for callback in list(self._error_listeners):
            callback(exc)
        return True
