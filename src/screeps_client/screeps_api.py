""" screeps_api.py

The operations the stats collector actually uses. Each one is a request built by RequestBuilder, sent through ScreepsHttpClient, and for memory, decoded from its compressed envelope.

If a private target is configured, start kicks off the host resolver in the background. Any private request made before it has found a host waits for it,
possibly for a long time, since the resolver keeps probing once a minute until something answers. If max_probe_rounds is set and runs out, the
waiting requests return None.

Every operation returns None when the request timed out or failed in transit. The reason is only in the api log. The one error callers must handle is
PayloadDecodeError from fetch_memory_snapshot.
"""
import logging
from typing import Any, Iterable, Optional

from galaxy.api.errors import NetworkError

from .errors import PayloadDecodeError
from .host_list import PrivateHostResolver
from .payload import decode_envelope_async
from .request_options import RequestBuilder, api_path
from .screeps_http_client import ScreepsHttpClient
from .settings import ClientSettings
from .targets import Target
from .utils import ResolvedValue, needs_private_host

logger = logging.getLogger(__name__)

LEADERBOARD_MODE = "world"


class ScreepsApi:
    def __init__(self, settings: Optional[ClientSettings] = None, targets: Iterable[Target] = (), http_client: Optional[ScreepsHttpClient] = None):
        self._settings: ClientSettings = settings or ClientSettings()
        self._targets = tuple(targets)
        self._private_host: ResolvedValue[str] = ResolvedValue()
        self._resolver = PrivateHostResolver(self._private_host, self._settings)
        self._builder = RequestBuilder(self._private_host, self._settings)
        self._http_client: ScreepsHttpClient = http_client or ScreepsHttpClient(self._settings)

    @property
    def private_host(self) -> ResolvedValue[str]:
        return self._private_host

    @property
    def resolver(self) -> PrivateHostResolver:
        return self._resolver

    def start(self):
        if self._resolver.start(needs_private_host(self._targets)) is not None:
            logger.info("Looking for a private server among %s", ", ".join(self._settings.candidate_hosts))

    async def close(self):
        await self._resolver.close()
        await self._http_client.close()

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _request(self, target: Target, path: str, method: str = "GET", body: Optional[Any] = None) -> Any:
        if not target.is_public:
            self._resolver.start()  # no-op once resolved or while a probe loop is already running
        try:
            options = await self._builder.build_when_ready(target, path, method, body)
        except NetworkError:
            logger.warning("No private server to send %s %s to", method, path)
            return None
        outcome = await self._http_client.execute(options)
        return outcome.value

    async def authenticate(self, username: str, password: str) -> Optional[str]:
        """ Sign in to the private server with the credentials set up through screepsmod-auth. Returns the token to send as X-Token.
        """
        res = await self._request(Target.private(username), "/api/auth/signin", "POST", {
            "email": username,
            "password": password,
        })
        if not isinstance(res, dict):
            return None
        return res.get("token")

    async def fetch_memory_snapshot(self, target: Target, shard: str, path: str = "stats") -> Any:
        res = await self._request(target, api_path("/api/user/memory", path=path, shard=shard))
        if res is None:
            return None
        data = res.get("data") if isinstance(res, dict) else None
        if not isinstance(data, str):
            logger.warning("Memory response for %s on %s has no compressed data", path, shard)
            raise PayloadDecodeError(f"Memory response for {path} on {shard} has no compressed data")
        return await decode_envelope_async(data)

    async def fetch_user_info(self, target: Target) -> Any:
        return await self._request(target, "/api/auth/me")

    async def fetch_leaderboard_entry(self, target: Target) -> Any:
        return await self._request(target, api_path("/api/leaderboard/find", username=target.username or "", mode=LEADERBOARD_MODE))

    async def fetch_global_user_stats(self) -> Any:
        return await self._request(Target.public(), "/api/stats/users")

    async def fetch_global_room_objects(self) -> Any:
        return await self._request(Target.public(), "/api/stats/rooms/objects")
