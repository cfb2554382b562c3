"""
CQL string builders for schema objects.

All functions return fully-formed CQL scripts and take unquoted names; every
identifier, literal and type expression is routed through `identifiers` and
`utils` so quoting happens in one place.

Design guarantees
- Deterministic, side-effect free string generation.
- Proper identifier quoting and CQL literal escaping.
- No business rules: higher layers (validator/executor) decide policy.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from src.enums import PermissionName
from src.schema_engine.errors import ConfigError
from src.schema_engine.identifiers import quote_identifier, quote_qualified_name
from src.schema_engine.utils import (
    check_type_expression,
    format_cql_map,
    quote_cql_literal,
)

_INDEX_TARGET = re.compile(r"^\s*(keys|values|entries|full)\s*\(\s*(?P<column>[^()]+?)\s*\)\s*$", re.I)


# ----- introspection -----


def cql_describe_keyspaces() -> str:
    return "DESC KEYSPACES"


def cql_describe(object_type: str, keyspace: str, name: str) -> str:
    """DESC TYPE|TABLE|INDEX keyspace.name."""
    return f"DESC {object_type} {quote_qualified_name(keyspace, name)}"


def cql_list_roles() -> str:
    return "LIST ROLES"


def cql_list_permissions(
    permission: PermissionName, user: str, keyspace: str | None, table: str | None
) -> str:
    """LIST <permission> ON <resource> OF <role> NORECURSIVE (grants inherited from parent resources are left out)."""
    resource = cql_permission_resource(keyspace, table)
    return f"LIST {permission.grant_clause} ON {resource} OF {quote_identifier(user)} NORECURSIVE"


# ----- keyspaces -----


def cql_create_keyspace(
    keyspace: str, replication: Mapping[str, str | int], durable_writes: bool = True
) -> str:
    """CREATE KEYSPACE IF NOT EXISTS ks WITH REPLICATION = {...} AND DURABLE_WRITES = ..."""
    return (
        f"CREATE KEYSPACE IF NOT EXISTS {quote_identifier(keyspace)} "
        f"WITH REPLICATION = {format_cql_map(replication)} "
        f"AND DURABLE_WRITES = {quote_cql_literal(bool(durable_writes))}"
    )


def cql_drop_keyspace(keyspace: str) -> str:
    return f"DROP KEYSPACE {quote_identifier(keyspace)}"


# ----- types -----


def cql_create_type(keyspace: str, name: str, fields: Mapping[str, str]) -> str:
    """CREATE TYPE IF NOT EXISTS ks.name (field type, ...)."""
    return (
        f"CREATE TYPE IF NOT EXISTS {quote_qualified_name(keyspace, name)} "
        f"({format_field_list(fields)})"
    )


def cql_drop_type(keyspace: str, name: str) -> str:
    return f"DROP TYPE {quote_qualified_name(keyspace, name)}"


# ----- tables -----


def cql_create_table(
    keyspace: str,
    name: str,
    columns: Mapping[str, str],
    partition_key: Sequence[str],
    clustering_key: Sequence[str] = (),
    options: Sequence[str] = (),
) -> str:
    """CREATE TABLE IF NOT EXISTS ks.name (col type, ..., PRIMARY KEY (...)) [WITH ...]."""
    body = format_field_list(columns)
    if partition_key:
        body += f", {format_primary_key(partition_key, clustering_key)}"
    statement = f"CREATE TABLE IF NOT EXISTS {quote_qualified_name(keyspace, name)} ({body})"
    clauses = [option.strip() for option in options if option and option.strip()]
    if clauses:
        statement += " WITH " + " AND ".join(clauses)
    return statement


def cql_drop_table(keyspace: str, name: str) -> str:
    return f"DROP TABLE {quote_qualified_name(keyspace, name)}"


# ----- indexes -----


def cql_create_index(
    keyspace: str,
    table: str,
    name: str,
    keys: str,
    class_name: str | None = None,
    options: Mapping[str, str] | None = None,
) -> str:
    """CREATE [CUSTOM] INDEX IF NOT EXISTS name ON ks.table (target) [USING 'cls' [WITH OPTIONS = {...}]]."""
    custom = "CUSTOM " if class_name else ""
    statement = (
        f"CREATE {custom}INDEX IF NOT EXISTS {quote_identifier(name)} "
        f"ON {quote_qualified_name(keyspace, table)} ({format_index_target(keys)})"
    )
    if class_name:
        statement += f" USING {quote_cql_literal(class_name)}"
        if options:
            statement += f" WITH OPTIONS = {format_cql_map(options)}"
    return statement


def cql_drop_index(keyspace: str, name: str) -> str:
    return f"DROP INDEX {quote_qualified_name(keyspace, name)}"


# ----- roles -----


def cql_create_role(
    name: str, password: str | None, superuser: bool = False, login: bool = True
) -> str:
    """CREATE ROLE IF NOT EXISTS name WITH [PASSWORD = '...' AND] SUPERUSER = .. AND LOGIN = .."""
    clauses: list[str] = []
    if password is not None:
        clauses.append(f"PASSWORD = {quote_cql_literal(password)}")
    clauses.append(f"SUPERUSER = {quote_cql_literal(bool(superuser))}")
    clauses.append(f"LOGIN = {quote_cql_literal(bool(login))}")
    return f"CREATE ROLE IF NOT EXISTS {quote_identifier(name)} WITH " + " AND ".join(clauses)


def cql_drop_role(name: str) -> str:
    return f"DROP ROLE {quote_identifier(name)}"


# ----- permissions -----


def cql_grant(
    permission: PermissionName, user: str, keyspace: str | None, table: str | None
) -> str:
    resource = cql_permission_resource(keyspace, table)
    return f"GRANT {permission.grant_clause} ON {resource} TO {quote_identifier(user)}"


def cql_revoke(
    permission: PermissionName, user: str, keyspace: str | None, table: str | None
) -> str:
    resource = cql_permission_resource(keyspace, table)
    return f"REVOKE {permission.grant_clause} ON {resource} FROM {quote_identifier(user)}"


def cql_permission_resource(keyspace: str | None, table: str | None) -> str:
    """ALL KEYSPACES | KEYSPACE ks | TABLE ks.table. keyspace None means all keyspaces."""
    if keyspace is None:
        if table:
            raise ConfigError("A table-level permission requires a keyspace.")
        return "ALL KEYSPACES"
    if table:
        return f"TABLE {quote_qualified_name(keyspace, table)}"
    return f"KEYSPACE {quote_identifier(keyspace)}"


# ----- fragments -----


def format_field_list(fields: Mapping[str, str]) -> str:
    """`name type, name type` in declared order."""
    if not fields:
        raise ConfigError("At least one field is required.")
    return ", ".join(
        f"{quote_identifier(field_name)} {check_type_expression(type_name)}"
        for field_name, type_name in fields.items()
    )


def format_primary_key(partition_key: Sequence[str], clustering_key: Sequence[str] = ()) -> str:
    """PRIMARY KEY (a, c) or PRIMARY KEY ((a, b), c) for composite partition keys."""
    partition = [quote_identifier(c) for c in partition_key]
    head = partition[0] if len(partition) == 1 else "(" + ", ".join(partition) + ")"
    parts = [head, *(quote_identifier(c) for c in clustering_key)]
    return "PRIMARY KEY (" + ", ".join(parts) + ")"


def format_index_target(keys: str) -> str:
    """Quote an index target: a bare column or keys()/values()/entries()/full() of one."""
    match = _INDEX_TARGET.match(keys)
    if match:
        function = match.group(1).lower()
        return f"{function}({quote_identifier(match.group('column'))})"
    return quote_identifier(keys.strip())
