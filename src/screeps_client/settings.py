from typing import NamedTuple, Optional, Tuple

PUBLIC_HOST = "screeps.com"
PUBLIC_PORT = 443
PRIVATE_PORT = 21025

# order only matters for logging, every candidate is probed at the same time.
CANDIDATE_HOSTS: Tuple[str, ...] = (
    "localhost",
    "host.docker.internal",  # docker desktop alias for the host machine
    "172.17.0.1",  # default docker bridge gateway on linux
)

PROBE_TIMEOUT_SECONDS = 2.5
PROBE_INTERVAL_SECONDS = 60
REQUEST_DEADLINE_SECONDS = 10

RATE_LIMIT_MARKER = "Rate limit exceeded"


class ClientSettings(NamedTuple):
    public_host: str = PUBLIC_HOST
    public_port: int = PUBLIC_PORT
    private_port: int = PRIVATE_PORT
    candidate_hosts: Tuple[str, ...] = CANDIDATE_HOSTS
    probe_timeout: float = PROBE_TIMEOUT_SECONDS
    probe_interval: float = PROBE_INTERVAL_SECONDS
    max_probe_rounds: Optional[int] = None  # None keeps probing until a private server shows up
    request_deadline: float = REQUEST_DEADLINE_SECONDS
    rate_limit_marker: str = RATE_LIMIT_MARKER
