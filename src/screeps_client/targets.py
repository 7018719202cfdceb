from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional

logger = logging.getLogger(__name__)


class TargetKind(str, Enum):
    PUBLIC = "mmo"  # the official servers at screeps.com. "mmo" is the value used in user records.
    PRIVATE = "private"  # a self hosted server, address found by probing.


class Target(NamedTuple):
    kind: TargetKind
    username: Optional[str] = None  # sent as X-Username when present
    token: Optional[str] = None  # sent as X-Token when present. public servers hand these out, private servers via ScreepsApi.authenticate

    @property
    def is_public(self) -> bool:
        return self.kind == TargetKind.PUBLIC

    def with_token(self, token: Optional[str]) -> Target:
        return self._replace(token=token)

    @staticmethod
    def public(username: Optional[str] = None, token: Optional[str] = None) -> Target:
        return Target(TargetKind.PUBLIC, username, token)

    @staticmethod
    def private(username: Optional[str] = None, token: Optional[str] = None) -> Target:
        return Target(TargetKind.PRIVATE, username, token)

    @staticmethod
    def from_dict(lookup: Dict[str, Any]) -> Target:
        """ Build a target from a user record such as {"type": "mmo", "username": "...", "token": "..."}. Unknown keys (shards, password, ...) are ignored.
        """
        kind_value = lookup.get("type")
        try:
            kind = TargetKind(kind_value)
        except ValueError:
            raise ValueError(f"Unknown target type {kind_value!r}, expected one of {[k.value for k in TargetKind]}") from None

        username = lookup.get("username") or None
        token = lookup.get("token") or None
        if token is not None:
            logger.info("Loaded token for %s target %s", kind.value, username)
        return Target(kind, username, token)
