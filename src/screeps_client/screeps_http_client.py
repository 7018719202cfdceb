import asyncio
import json
import logging
from enum import Enum
from typing import Any, NamedTuple, Optional

from aiohttp import ClientError
from aiohttp.client import ClientSession

from galaxy.api.errors import ApplicationError
from galaxy.http import create_client_session, handle_exception

from .request_options import RequestOptions
from .settings import ClientSettings

logger = logging.getLogger(__name__)
# every request gets exactly one entry here, see ScreepsHttpClient._classify
api_logger = logging.getLogger("screeps_client.api")


class OutcomeKind(Enum):
    SUCCESS = "success"
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"


class RequestOutcome(NamedTuple):
    kind: OutcomeKind
    body: Any = None  # parsed json, or the raw text when the response is not json
    error: Optional[BaseException] = None
    rate_limited: bool = False

    @property
    def value(self) -> Any:
        """ The body for successful requests, None for anything else. This is the only failure signal the api facade hands out.
        """
        return self.body if self.kind == OutcomeKind.SUCCESS else None


def _response_size_kb(body: Any) -> float:
    return len(json.dumps(body, separators=(",", ":"), ensure_ascii=False)) / 1000


class ScreepsHttpClient:
    """Wrapper for aiohttp.ClientSession that sends the requests described by RequestOptions, racing each one against a fixed deadline.

    Status codes are not checked: the body of any response is returned, parsed as json where possible. What happened is written to the api log,
    and transport errors and timeouts come back as outcomes instead of being raised.
    """
    def __init__(self, settings: Optional[ClientSettings] = None):
        self._settings = settings or ClientSettings()
        self._session: Optional[ClientSession] = None

    def _get_session(self) -> ClientSession:
        # the connector needs a running loop, so the session is created on first use instead of in __init__
        if self._session is None or self._session.closed:
            self._session = create_client_session(raise_for_status=False)
        return self._session

    async def close(self):
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def _exchange(self, options: RequestOptions) -> Any:
        with handle_exception():
            async with self._get_session().request(options.method, options.url, headers=options.headers, data=options.body) as response:
                text = await response.text(errors="replace")
        try:
            return json.loads(text)
        except ValueError:
            return text

    async def execute(self, options: RequestOptions) -> RequestOutcome:
        try:
            # wait_for cancels the exchange if the deadline wins, which releases its connection
            body = await asyncio.wait_for(self._exchange(options), self._settings.request_deadline)
        except asyncio.TimeoutError:
            outcome = RequestOutcome(OutcomeKind.TIMEOUT)
        except (ApplicationError, ClientError) as error:
            outcome = RequestOutcome(OutcomeKind.TRANSPORT_ERROR, error=error)
        else:
            rate_limited = isinstance(body, str) and body.startswith(self._settings.rate_limit_marker)
            outcome = RequestOutcome(OutcomeKind.SUCCESS, body, rate_limited=rate_limited)
        self._classify(options, outcome)
        return outcome

    @staticmethod
    def _classify(options: RequestOptions, outcome: RequestOutcome) -> None:
        metadata = options.log_metadata()
        if outcome.kind == OutcomeKind.TIMEOUT:
            api_logger.info("Timeout hit!", extra={"request": metadata})
        elif outcome.kind == OutcomeKind.TRANSPORT_ERROR:
            api_logger.error("Request failed: %r", outcome.error, extra={"request": metadata, "data": repr(outcome.error)})
        elif outcome.rate_limited:
            api_logger.error("Rate limited", extra={"request": metadata, "data": outcome.body})
        else:
            size = _response_size_kb(outcome.body)
            api_logger.info("Response %.3f KB", size, extra={"request": metadata, "data": f"{size} KB"})
