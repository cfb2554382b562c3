"""Load a desired-state YAML file into a connection config and descriptors."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from src import settings
from src.schema_engine.config import (
    ConnectionConfig,
    CredentialFile,
    Credentials,
    InlineCredentials,
    RetryPolicy,
)
from src.schema_engine.desired.builders import COLLECTION_KEYS, build_descriptors
from src.schema_engine.errors import ConfigError
from src.schema_engine.models import ResourceDescriptor

_CONNECTION_KEYS = (
    "connection_tries",
    "connection_try_sleep",
    "cqlsh_command",
    "cqlsh_host",
    "cqlsh_port",
    "cqlsh_user",
    "cqlsh_password",
    "cqlsh_client_config",
    "cqlsh_additional_options",
    "command_timeout",
)


@dataclass(frozen=True)
class DesiredState:
    """Everything one run needs: where to connect and what should exist."""

    config: ConnectionConfig
    descriptors: tuple[ResourceDescriptor, ...]


def load_desired_state(path: str | Path) -> DesiredState:
    """Read and parse the desired-state file at `path`."""
    config_path = Path(path)
    try:
        with config_path.open("r") as f:
            document = yaml.safe_load(f)
    except OSError as error:
        raise ConfigError(f"Cannot read desired state file {config_path}: {error}") from error
    except yaml.YAMLError as error:
        raise ConfigError(f"Invalid YAML in {config_path}: {error}") from error

    return parse_desired_state(document or {})


def parse_desired_state(document: Any) -> DesiredState:
    """Build a DesiredState from an already-parsed document."""
    if not isinstance(document, Mapping):
        raise ConfigError("Desired state must be a mapping at the top level.")

    unknown = sorted(set(document) - set(_CONNECTION_KEYS) - set(COLLECTION_KEYS))
    if unknown:
        raise ConfigError(f"Unknown desired state key(s): {unknown}")

    return DesiredState(
        config=build_connection_config(document),
        descriptors=tuple(build_descriptors(document)),
    )


def build_connection_config(document: Mapping[str, Any]) -> ConnectionConfig:
    """Connection settings from the document, falling back to environment defaults."""
    sleep = document.get("connection_try_sleep", settings.CONNECTION_TRY_SLEEP)
    if isinstance(sleep, bool) or not isinstance(sleep, (int, float)):
        raise ConfigError(f"connection_try_sleep must be a number of seconds, got {sleep!r}")
    # RetryPolicy rejects anything but a plain integer number of tries.
    retry = RetryPolicy(
        tries=document.get("connection_tries", settings.CONNECTION_TRIES),
        sleep=float(sleep),
    )
    try:
        port = int(document.get("cqlsh_port", settings.CQLSH_PORT))
        timeout = document.get("command_timeout")
        timeout = None if timeout is None else float(timeout)
    except (TypeError, ValueError) as error:
        raise ConfigError(f"Invalid connection setting: {error}") from error

    return ConnectionConfig(
        command=str(document.get("cqlsh_command", settings.CQLSH_COMMAND)),
        host=str(document.get("cqlsh_host", settings.CQLSH_HOST)),
        port=port,
        credentials=_credentials(document),
        additional_options=str(document.get("cqlsh_additional_options") or ""),
        retry=retry,
        command_timeout=timeout,
    )


def _credentials(document: Mapping[str, Any]) -> Credentials | None:
    """Credential file wins over inline user/password; neither means no auth options."""
    client_config = document.get("cqlsh_client_config")
    if client_config:
        return CredentialFile(path=str(client_config))
    user = document.get("cqlsh_user")
    password = document.get("cqlsh_password")
    if user and password is not None:
        return InlineCredentials(user=str(user), password=str(password))
    if user or password:
        raise ConfigError("cqlsh_user and cqlsh_password must be set together")
    return None
