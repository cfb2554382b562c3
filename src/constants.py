"""Shared constant values used across the schema engine."""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Final

PROBE_SCRIPT: Final[str] = "DESC KEYSPACES"
ALL_KEYSPACES: Final[str] = "ALL"
REDACTED: Final[str] = "********"
DEFAULT_REPLICATION: Final[Mapping[str, str | int]] = MappingProxyType(
    {
        "class": "SimpleStrategy",
        "replication_factor": 1,
    }
)
