"""
Adapters: desired-state mappings → engine descriptors

Why this exists
---------------
The desired-state file declares each collection as a mapping of
title → attributes. The engine works on typed descriptors. This module
centralises the mapping so the rest of the engine never sees raw dicts:

- name:
    The mapping key, unless the entry carries its own `name`.
- ensure:
    "present" (default) or "absent".
- permission_name ALL:
    Expanded into one descriptor per individual permission, so partial grants
    are detected and completed.
- table primary key:
    `primary_key: [a, b]` (first column is the partition key), explicit
    `partition_key` / `clustering_key` lists, or a "PRIMARY KEY" column entry
    such as "((a, b), c)".
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from src.constants import ALL_KEYSPACES, DEFAULT_REPLICATION
from src.enums import Ensure, PermissionName
from src.schema_engine.errors import ConfigError
from src.schema_engine.models import (
    Index,
    Keyspace,
    Permission,
    ResourceDescriptor,
    Table,
    User,
    UserType,
)

_PRIMARY_KEY_COLUMN = "PRIMARY KEY"
_PRIMARY_KEY_EXPRESSION = re.compile(
    r"^\(\s*(?:\((?P<composite>[^()]*)\)|(?P<single>[^,()]+))\s*(?:,(?P<rest>[^()]*))?\)$"
)


# ---------- tiny helpers ----------


def _split_names(text: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in text.split(",") if part.strip())


def _as_tuple(value: Any, what: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return _split_names(value)
    if isinstance(value, Sequence):
        return tuple(str(v) for v in value)
    raise ConfigError(f"{what} must be a list or comma-separated string, got {value!r}")


def _as_mapping(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{what} must be a mapping, got {value!r}")
    return {str(k): v for k, v in value.items()}


def _as_bool(value: Any, what: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ConfigError(f"{what} must be a boolean, got {value!r}")


def _parse_ensure(value: Any, where: str) -> Ensure:
    try:
        return Ensure(str(value or Ensure.PRESENT).lower())
    except ValueError:
        raise ConfigError(f"{where}: ensure must be 'present' or 'absent', got {value!r}") from None


def _require(attrs: Mapping[str, Any], key: str, where: str) -> str:
    value = attrs.get(key)
    if value in (None, ""):
        raise ConfigError(f"{where}: missing required attribute '{key}'")
    return str(value)


def _check_keys(attrs: Mapping[str, Any], allowed: Iterable[str], where: str) -> None:
    unknown = sorted(set(attrs) - set(allowed) - {"name", "ensure"})
    if unknown:
        raise ConfigError(f"{where}: unknown attribute(s) {unknown}")


def parse_primary_key(expression: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Parse "(a, b)" or "((a, b), c)" into (partition_key, clustering_key)."""
    match = _PRIMARY_KEY_EXPRESSION.match(expression.strip())
    if not match:
        raise ConfigError(f"Unrecognised primary key expression: {expression!r}")
    partition = (
        _split_names(match.group("composite"))
        if match.group("composite") is not None
        else (match.group("single").strip(),)
    )
    clustering = _split_names(match.group("rest") or "")
    if not partition:
        raise ConfigError(f"Primary key has no partition columns: {expression!r}")
    return partition, clustering


# ---------- per-kind builders ----------


def build_keyspace(title: str, attrs: Mapping[str, Any]) -> Keyspace:
    where = f"keyspaces.{title}"
    _check_keys(attrs, ("replication_map", "durable_writes"), where)
    replication = _as_mapping(attrs.get("replication_map"), f"{where}.replication_map")
    if "keyspace_class" in replication:
        replication["class"] = replication.pop("keyspace_class")
    return Keyspace(
        name=str(attrs.get("name") or title),
        replication=replication or dict(DEFAULT_REPLICATION),
        durable_writes=_as_bool(attrs.get("durable_writes", True), f"{where}.durable_writes"),
        ensure=_parse_ensure(attrs.get("ensure"), where),
    )


def build_user_type(title: str, attrs: Mapping[str, Any]) -> UserType:
    where = f"cql_types.{title}"
    _check_keys(attrs, ("keyspace", "fields"), where)
    fields = _as_mapping(attrs.get("fields"), f"{where}.fields")
    return UserType(
        keyspace=_require(attrs, "keyspace", where),
        name=str(attrs.get("name") or title),
        fields={k: str(v) for k, v in fields.items()},
        ensure=_parse_ensure(attrs.get("ensure"), where),
    )


def build_table(title: str, attrs: Mapping[str, Any]) -> Table:
    where = f"tables.{title}"
    _check_keys(
        attrs, ("keyspace", "columns", "primary_key", "partition_key", "clustering_key", "options"), where
    )
    columns = {k: str(v) for k, v in _as_mapping(attrs.get("columns"), f"{where}.columns").items()}
    partition, clustering = _table_key(columns, attrs, where)
    options = attrs.get("options") or ()
    return Table(
        keyspace=_require(attrs, "keyspace", where),
        name=str(attrs.get("name") or title),
        columns=columns,
        partition_key=partition,
        clustering_key=clustering,
        options=(options,) if isinstance(options, str) else tuple(str(o) for o in options),
        ensure=_parse_ensure(attrs.get("ensure"), where),
    )


def _table_key(
    columns: dict[str, str], attrs: Mapping[str, Any], where: str
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Resolve the primary key from the three accepted spellings (columns dict is mutated)."""
    inline = columns.pop(_PRIMARY_KEY_COLUMN, None)
    if inline is not None:
        return parse_primary_key(inline)
    primary_key = attrs.get("primary_key")
    if isinstance(primary_key, str) and primary_key.strip().startswith("("):
        return parse_primary_key(primary_key)
    if primary_key is not None:
        names = _as_tuple(primary_key, f"{where}.primary_key")
        return names[:1], names[1:]
    return (
        _as_tuple(attrs.get("partition_key"), f"{where}.partition_key"),
        _as_tuple(attrs.get("clustering_key"), f"{where}.clustering_key"),
    )


def build_index(title: str, attrs: Mapping[str, Any]) -> Index:
    where = f"indexes.{title}"
    _check_keys(attrs, ("keyspace", "table", "keys", "class_name", "options"), where)
    options = _as_mapping(attrs.get("options"), f"{where}.options")
    return Index(
        keyspace=_require(attrs, "keyspace", where),
        table=_require(attrs, "table", where),
        name=str(attrs.get("name") or title),
        keys=str(attrs.get("keys") or ""),
        class_name=attrs.get("class_name") or None,
        options={k: str(v) for k, v in options.items()},
        ensure=_parse_ensure(attrs.get("ensure"), where),
    )


def build_user(title: str, attrs: Mapping[str, Any]) -> User:
    where = f"users.{title}"
    _check_keys(attrs, ("password", "superuser", "login"), where)
    password = attrs.get("password")
    return User(
        name=str(attrs.get("name") or title),
        password=None if password is None else str(password),
        superuser=_as_bool(attrs.get("superuser", False), f"{where}.superuser"),
        login=_as_bool(attrs.get("login", True), f"{where}.login"),
        ensure=_parse_ensure(attrs.get("ensure"), where),
    )


def build_permissions(title: str, attrs: Mapping[str, Any]) -> list[Permission]:
    """One descriptor per individual permission (ALL is expanded)."""
    where = f"permissions.{title}"
    _check_keys(attrs, ("user_name", "keyspace_name", "table_name", "permission_name"), where)
    raw_permission = str(attrs.get("permission_name") or PermissionName.ALL).upper()
    try:
        permission = PermissionName(raw_permission)
    except ValueError:
        raise ConfigError(f"{where}: unknown permission_name {raw_permission!r}") from None

    keyspace = str(attrs.get("keyspace_name") or ALL_KEYSPACES)
    table = attrs.get("table_name") or None
    if table is not None and keyspace.upper() == ALL_KEYSPACES:
        raise ConfigError(f"{where}: table_name requires a keyspace_name")

    if permission is PermissionName.ALL:
        permissions = PermissionName.expand_all(on_table=table is not None)
    else:
        permissions = (permission,)

    user = _require(attrs, "user_name", where)
    ensure = _parse_ensure(attrs.get("ensure"), where)
    return [
        Permission(user=user, permission=p, keyspace=keyspace, table=table, ensure=ensure)
        for p in permissions
    ]


# ---------- collections ----------

_SINGLE_BUILDERS: dict[str, Callable[[str, Mapping[str, Any]], ResourceDescriptor]] = {
    "keyspaces": build_keyspace,
    "cql_types": build_user_type,
    "tables": build_table,
    "indexes": build_index,
    "users": build_user,
}

COLLECTION_KEYS: tuple[str, ...] = (*_SINGLE_BUILDERS, "permissions")


def build_descriptors(collections: Mapping[str, Any]) -> list[ResourceDescriptor]:
    """Turn every per-kind collection into descriptors, in file order."""
    descriptors: list[ResourceDescriptor] = []
    for collection in COLLECTION_KEYS:
        entries = _as_mapping(collections.get(collection), collection)
        for title, attrs in entries.items():
            attrs = _as_mapping(attrs, f"{collection}.{title}")
            if collection == "permissions":
                descriptors.extend(build_permissions(title, attrs))
            else:
                descriptors.append(_SINGLE_BUILDERS[collection](title, attrs))
    return descriptors
