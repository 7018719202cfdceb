"""screeps_client package

Client for the Screeps game server api, either the official servers at screeps.com or a private server running somewhere nearby.

A private server's address is not configured. Instead a handful of likely hosts (localhost, the docker host alias, the docker bridge gateway) are probed
on the server port, and the first one to accept a connection is used from then on. Requests to either kind of server are bounded by a fixed deadline,
logged to the api log, and any failure reaches the caller as None.
"""
from .errors import PayloadDecodeError, PrivateHostPending
from .screeps_api import ScreepsApi
from .settings import ClientSettings
from .targets import Target, TargetKind

__all__ = ["ClientSettings", "PayloadDecodeError", "PrivateHostPending", "ScreepsApi", "Target", "TargetKind"]
