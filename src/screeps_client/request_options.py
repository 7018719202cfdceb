""" request_options.py

Turns a target and an api path into everything the http client needs to send a request: where to send it, which headers, and the exact bytes of the body.

Public targets always go to the official servers over https. Private targets go to whichever host the resolver found, over plain http.
The builder never waits for that host itself; build raises PrivateHostPending if it is not known yet, build_when_ready waits for it.
"""
import json
import logging
from typing import Any, Dict, NamedTuple, Optional

from yarl import URL

from .settings import ClientSettings
from .targets import Target
from .utils import ResolvedValue

logger = logging.getLogger(__name__)
LOG_SENSITIVE_DATA = False

CONTENT_TYPE = "application/json"
USERNAME_HEADER = "X-Username"
TOKEN_HEADER = "X-Token"


class RequestOptions(NamedTuple):
    host: str
    port: int
    path: str  # includes the query string
    method: str
    headers: Dict[str, str]
    body: bytes
    is_https: bool

    @property
    def url(self) -> URL:
        scheme = "https" if self.is_https else "http"
        return URL(f"{scheme}://{self.host}:{self.port}{self.path}", encoded=True)

    def log_metadata(self) -> Dict[str, Any]:
        """ What we put in the api log about this request. Never includes the body, and hides the token unless LOG_SENSITIVE_DATA is set.
        """
        headers = dict(self.headers)
        if TOKEN_HEADER in headers and not LOG_SENSITIVE_DATA:
            headers[TOKEN_HEADER] = "**"
        return {
            "host": self.host,
            "port": self.port,
            "path": self.path,
            "method": self.method,
            "headers": headers,
        }


def serialize_body(body: Optional[Any]) -> bytes:
    # an absent body is still sent as an empty json object
    return json.dumps({} if body is None else body, separators=(",", ":")).encode("utf-8")


def api_path(path: str, /, **query: str) -> str:
    """ Join a path with url encoded query parameters, keeping the order they were given in.
    """
    url = URL.build(path=path, query=query) if query else URL.build(path=path)
    return str(url)


class RequestBuilder:
    def __init__(self, private_host: ResolvedValue[str], settings: Optional[ClientSettings] = None):
        self._private_host = private_host
        self._settings = settings or ClientSettings()

    def build(self, target: Target, path: str, method: str = "GET", body: Optional[Any] = None) -> RequestOptions:
        if target.is_public:
            host = self._settings.public_host
            port = self._settings.public_port
        else:
            host = self._private_host.get()
            port = self._settings.private_port

        data = serialize_body(body)
        headers = {
            "Content-Type": CONTENT_TYPE,
            "Content-Length": str(len(data)),
        }
        if target.username:
            headers[USERNAME_HEADER] = target.username
        if target.token:
            headers[TOKEN_HEADER] = target.token

        return RequestOptions(host, port, path, method, headers, data, target.is_public)

    async def build_when_ready(self, target: Target, path: str, method: str = "GET", body: Optional[Any] = None) -> RequestOptions:
        """ Like build, but waits for the private host first. Raises whatever error the resolver gave up with.
        """
        if not target.is_public and not self._private_host.is_set():
            logger.info("Waiting for the private server host before sending %s %s", method, path)
            await self._private_host.wait()
        return self.build(target, path, method, body)
