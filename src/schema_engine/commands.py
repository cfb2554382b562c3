"""
CommandBuilder: render a descriptor into its read and write scripts.

- build_read(descriptor)  → ReadCommand (introspection script + optional expected row)
- build_write(descriptor) → create script for PRESENT, drop/revoke script for ABSENT

Statement text comes from `cql`; this module only maps descriptor fields to it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from src.enums import Ensure, PermissionName
from src.schema_engine import cql
from src.schema_engine.models import (
    Index,
    Keyspace,
    Permission,
    ResourceDescriptor,
    Table,
    User,
    UserType,
)

# Cell positions in LIST result tables.
_ROLE_CELL = 0
_PERMISSION_CELL = 3


@dataclass(frozen=True)
class ReadCommand:
    """
    Introspection script for one descriptor.

    expect:
        None  → a zero exit status alone means "exists" (DESC-style).
        (...) → a zero exit status plus matching output.
    columns:
        None  → one whitespace-separated output line must contain every
                `expect` token (DESC KEYSPACES).
        (...) → one data row of the result table (header and separator
                skipped) must hold `expect[i]` in cell `columns[i]`
                (LIST ROLES, LIST ... OF role).
    """

    script: str
    expect: tuple[str, ...] | None = None
    columns: tuple[int, ...] | None = None


class CommandBuilder:
    """Renders read and write scripts for every resource kind."""

    def __init__(self) -> None:
        self._readers: dict[type, Callable] = {
            Keyspace: self._read_keyspace,
            UserType: self._read_type,
            Table: self._read_table,
            Index: self._read_index,
            User: self._read_user,
            Permission: self._read_permission,
        }
        self._creators: dict[type, Callable] = {
            Keyspace: self._create_keyspace,
            UserType: self._create_type,
            Table: self._create_table,
            Index: self._create_index,
            User: self._create_user,
            Permission: self._grant_permission,
        }
        self._droppers: dict[type, Callable] = {
            Keyspace: self._drop_keyspace,
            UserType: self._drop_type,
            Table: self._drop_table,
            Index: self._drop_index,
            User: self._drop_user,
            Permission: self._revoke_permission,
        }

    # ---------- public API ----------

    def build_read(self, descriptor: ResourceDescriptor) -> ReadCommand:
        """Introspection command scoped to the descriptor's kind and identity."""
        return self._dispatch(self._readers, descriptor)

    def build_write(self, descriptor: ResourceDescriptor) -> str:
        """Create statement when PRESENT is desired, drop statement when ABSENT."""
        table = self._creators if descriptor.ensure is Ensure.PRESENT else self._droppers
        return self._dispatch(table, descriptor)

    @staticmethod
    def _dispatch(table: dict[type, Callable], descriptor: ResourceDescriptor):
        try:
            render = table[type(descriptor)]
        except KeyError:
            raise TypeError(f"Unsupported descriptor type: {type(descriptor).__name__}") from None
        return render(descriptor)

    # ---------- reads ----------

    @staticmethod
    def _read_keyspace(descriptor: Keyspace) -> ReadCommand:
        # No per-keyspace describe that fails cleanly on absence; list and match instead.
        return ReadCommand(cql.cql_describe_keyspaces(), expect=(descriptor.name,))

    @staticmethod
    def _read_type(descriptor: UserType) -> ReadCommand:
        return ReadCommand(cql.cql_describe("TYPE", descriptor.keyspace, descriptor.name))

    @staticmethod
    def _read_table(descriptor: Table) -> ReadCommand:
        return ReadCommand(cql.cql_describe("TABLE", descriptor.keyspace, descriptor.name))

    @staticmethod
    def _read_index(descriptor: Index) -> ReadCommand:
        return ReadCommand(cql.cql_describe("INDEX", descriptor.keyspace, descriptor.name))

    @staticmethod
    def _read_user(descriptor: User) -> ReadCommand:
        # LIST ROLES columns: role | super | login | options
        return ReadCommand(cql.cql_list_roles(), expect=(descriptor.name,), columns=(_ROLE_CELL,))

    @staticmethod
    def _read_permission(descriptor: Permission) -> ReadCommand:
        keyspace, table = _permission_target(descriptor)
        script = cql.cql_list_permissions(descriptor.permission, descriptor.user, keyspace, table)
        expect, columns = _permission_row(descriptor)
        return ReadCommand(script, expect=expect, columns=columns)

    # ---------- creates ----------

    @staticmethod
    def _create_keyspace(descriptor: Keyspace) -> str:
        return cql.cql_create_keyspace(
            descriptor.name, descriptor.replication, descriptor.durable_writes
        )

    @staticmethod
    def _create_type(descriptor: UserType) -> str:
        return cql.cql_create_type(descriptor.keyspace, descriptor.name, descriptor.fields)

    @staticmethod
    def _create_table(descriptor: Table) -> str:
        return cql.cql_create_table(
            keyspace=descriptor.keyspace,
            name=descriptor.name,
            columns=descriptor.columns,
            partition_key=descriptor.partition_key,
            clustering_key=descriptor.clustering_key,
            options=descriptor.options,
        )

    @staticmethod
    def _create_index(descriptor: Index) -> str:
        return cql.cql_create_index(
            keyspace=descriptor.keyspace,
            table=descriptor.table,
            name=descriptor.name,
            keys=descriptor.keys,
            class_name=descriptor.class_name,
            options=descriptor.options,
        )

    @staticmethod
    def _create_user(descriptor: User) -> str:
        return cql.cql_create_role(
            descriptor.name, descriptor.password, descriptor.superuser, descriptor.login
        )

    @staticmethod
    def _grant_permission(descriptor: Permission) -> str:
        keyspace, table = _permission_target(descriptor)
        return cql.cql_grant(descriptor.permission, descriptor.user, keyspace, table)

    # ---------- drops ----------

    @staticmethod
    def _drop_keyspace(descriptor: Keyspace) -> str:
        return cql.cql_drop_keyspace(descriptor.name)

    @staticmethod
    def _drop_type(descriptor: UserType) -> str:
        return cql.cql_drop_type(descriptor.keyspace, descriptor.name)

    @staticmethod
    def _drop_table(descriptor: Table) -> str:
        return cql.cql_drop_table(descriptor.keyspace, descriptor.name)

    @staticmethod
    def _drop_index(descriptor: Index) -> str:
        return cql.cql_drop_index(descriptor.keyspace, descriptor.name)

    @staticmethod
    def _drop_user(descriptor: User) -> str:
        return cql.cql_drop_role(descriptor.name)

    @staticmethod
    def _revoke_permission(descriptor: Permission) -> str:
        keyspace, table = _permission_target(descriptor)
        return cql.cql_revoke(descriptor.permission, descriptor.user, keyspace, table)


# ---------- tiny helpers ----------


def _permission_target(descriptor: Permission) -> tuple[str | None, str | None]:
    """(keyspace, table) for the grant resource; keyspace None means ALL KEYSPACES.

    A table under ALL keyspaces is passed through so rendering rejects it.
    """
    if descriptor.on_all_keyspaces:
        return None, descriptor.table
    return descriptor.keyspace, descriptor.table


def _permission_row(descriptor: Permission) -> tuple[tuple[str, ...], tuple[int, ...]]:
    """
    (values, cells) a LIST ... OF row must hold for the grant to count as present.

    LIST columns: role | username | resource | permission. ALL matches any row
    of the role, since the store lists the individual permissions.
    """
    if descriptor.permission is PermissionName.ALL:
        return (descriptor.user,), (_ROLE_CELL,)
    return (descriptor.user, descriptor.permission.value), (_ROLE_CELL, _PERMISSION_CELL)
