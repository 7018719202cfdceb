""" A collection of small helpers shared by the host list, the request builder and the api facade.

"""
from asyncio import Event
import logging

from typing import Generic, Iterable, Optional, TypeVar

from .errors import PrivateHostPending
from .targets import Target, TargetKind

logger = logging.getLogger(__name__)


def needs_private_host(targets: Iterable[Target]) -> bool:
    return any(target.kind == TargetKind.PRIVATE for target in targets)


T = TypeVar("T")
class ResolvedValue(Generic[T]):
    """ A value that starts out unset and can be assigned exactly once. Anyone awaiting it is woken up when the assignment happens.

    There is deliberately no clear. Once the private host is known, every subsequent request uses it, even if that server goes away later.
    Whoever is responsible for producing the value can instead report that it gave up; waiters are then woken with that error.
    A failure is not final: reset_failure puts the cell back to unset so another attempt can be made.
    """
    def __init__(self):
        self._event = Event()
        self._value: Optional[T] = None
        self._error: Optional[Exception] = None

    def set(self, value: T) -> bool:
        """ Store the value if nothing was stored yet. Returns whether this call was the one that stored it.
        """
        if self.is_set():
            if value != self._value:
                logger.debug("Ignoring late assignment %r, already resolved to %r", value, self._value)
            return False
        self._value = value
        self._error = None
        self._event.set()
        return True

    def fail(self, error: Exception) -> bool:
        """ Wake everyone waiting with error instead of a value. Does nothing once a value is stored.
        """
        if self.is_set():
            return False
        self._error = error
        self._event.set()
        return True

    def reset_failure(self) -> None:
        if self._error is not None:
            self._error = None
            self._event.clear()

    def get(self) -> T:
        if self._error is not None:
            raise self._error
        if not self._event.is_set():
            raise PrivateHostPending()
        return self._value  # type: ignore[return-value]

    async def wait(self) -> T:
        await self._event.wait()
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def is_set(self) -> bool:
        return self._event.is_set() and self._error is None

    def has_failed(self) -> bool:
        return self._error is not None
