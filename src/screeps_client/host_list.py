import asyncio
import logging
from typing import Optional, Sequence

from galaxy.api.errors import NetworkError

from .settings import ClientSettings
from .utils import ResolvedValue


logger = logging.getLogger(__name__)

HostName = str


async def _try_connect(host: HostName, port: int, timeout: float) -> HostName:
    """ Open a tcp connection to the host and close it again straight away, without sending anything. Returns the host on success.
    """
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
    except asyncio.TimeoutError:
        logger.info("Probe timeout for %s:%d", host, port)
        raise
    except OSError as e:
        logger.info("Probe error for %s:%d: %r", host, port, e)
        raise

    writer.close()
    try:
        await writer.wait_closed()
    except OSError as e:
        # the server is reachable, all we wanted to know. a reset on close does not change that.
        logger.debug("Error closing probe connection to %s:%d: %r", host, port, e)
    return host


async def probe(candidates: Sequence[HostName], port: int, timeout: float) -> Optional[HostName]:
    """ Try every candidate at the same time and return the first one that accepts a connection, or None if none of them do.

    Whichever connection completes first wins; if several hosts are reachable, the winner is whichever the network answers first.
    Attempts still in flight when a winner is found are cancelled, and the round only returns once they are all done, so no socket is left behind.
    """
    attempts = [asyncio.ensure_future(_try_connect(host, port, timeout)) for host in candidates]
    try:
        for next_attempt in asyncio.as_completed(attempts):
            try:
                return await next_attempt
            except (asyncio.TimeoutError, OSError):
                continue
        return None
    finally:
        for attempt in attempts:
            attempt.cancel()
        await asyncio.gather(*attempts, return_exceptions=True)


class PrivateHostResolver:
    """ Finds the private server among the candidate hosts and stores it in a ResolvedValue that the request builder reads from.

    One probe round is run per interval until a host answers. After that the resolver stops for good: there is no re-probing if the host disappears later.
    With max_probe_rounds set, the resolver gives up after that many rounds and fails the ResolvedValue, so requests waiting on it stop waiting.
    """
    def __init__(self, private_host: ResolvedValue[HostName], settings: Optional[ClientSettings] = None):
        self._private_host = private_host
        self._settings = settings or ClientSettings()
        self._task: Optional[asyncio.Task] = None

    @property
    def private_host(self) -> ResolvedValue[HostName]:
        return self._private_host

    async def resolve_if_needed(self, needed: bool = True) -> None:
        if not needed:
            return

        settings = self._settings
        rounds = 0
        while not self._private_host.is_set():
            host = await probe(settings.candidate_hosts, settings.private_port, settings.probe_timeout)
            if host is not None:
                if self._private_host.set(host):
                    logger.info("Private server found at %s:%d", host, settings.private_port)
                return

            rounds += 1
            logger.warning("No private host found to make connection with!")
            if settings.max_probe_rounds is not None and rounds >= settings.max_probe_rounds:
                logger.error("Giving up on finding a private server after %d probe rounds", rounds)
                error = NetworkError()
                self._private_host.fail(error)
                raise error
            logger.info("Probing again in %d seconds...", settings.probe_interval)
            await asyncio.sleep(settings.probe_interval)

    def start(self, needed: bool = True) -> Optional[asyncio.Task]:
        """ Run resolve_if_needed in the background. Returns None when there is nothing to resolve.
        """
        if not needed or self._private_host.is_set():
            return None
        if self._task is None or self._task.done():
            self._retrieve_result()
            if self._private_host.has_failed():
                logger.info("Looking for a private server again")
                self._private_host.reset_failure()
            self._task = asyncio.create_task(self.resolve_if_needed(needed))
        return self._task

    async def wait_for_host(self) -> HostName:
        return await self._private_host.wait()

    def _retrieve_result(self) -> None:
        # a loop that gave up has already reported its error through the cell
        if self._task is not None and self._task.done() and not self._task.cancelled():
            self._task.exception()

    async def close(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._retrieve_result()
        self._task = None
