"""Single-assignment completion signal for one transfer."""
import asyncio
from typing import Any, Generator

from ..logging import get_logger

logger = get_logger('pipestore.pipeline')


class Outcome:
    """
    Settles exactly once with either a value or an error.

    Every stage of a transfer reports into the same outcome; the first
    report wins and later ones are ignored, so a transfer never resolves
    twice or fails after it has resolved.

    Example:
        >>> outcome = Outcome('upload photo.jpg')
        >>> outcome.reject(ValueError('first'))
        True
        >>> outcome.reject(ValueError('second'))
        False
        >>> await outcome
        Traceback (most recent call last):
        ValueError: first
    """

    def __init__(self, label: str = 'operation'):
        self._label = label
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()

    @property
    def label(self) -> str:
        return self._label

    @property
    def settled(self) -> bool:
        return self._future.done()

    def resolve(self, value: Any = None) -> bool:
        """
        Settle successfully.

        Returns:
            False if the outcome was already settled
        """
        if self._future.done():
            logger.debug(f"{self._label}: ignoring completion after settlement")
            return False
        self._future.set_result(value)
        return True

    def reject(self, exc: BaseException) -> bool:
        """
        Settle with an error.

        Returns:
            False if the outcome was already settled
        """
        if self._future.done():
            logger.debug(f"{self._label}: ignoring error after settlement: {exc!r}")
            return False
        self._future.set_exception(exc)
        return True

    def __await__(self) -> Generator[Any, None, Any]:
        return self._future.__await__()
