"""Domain models for declaring schema objects (one frozen dataclass per kind)."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import ClassVar, TypeAlias

from src.constants import ALL_KEYSPACES, DEFAULT_REPLICATION
from src.enums import Ensure, PermissionName
from src.schema_engine.identifiers import format_qualified_name
from src.schema_engine.types import ResourceIdentity


class ResourceKind(StrEnum):
    """Category of schema object, in declaration order."""

    KEYSPACE = "keyspace"
    TYPE = "type"
    TABLE = "table"
    INDEX = "index"
    USER = "user"
    PERMISSION = "permission"


@dataclass(frozen=True)
class Keyspace:
    """Declarative keyspace definition."""

    kind: ClassVar[ResourceKind] = ResourceKind.KEYSPACE

    name: str
    replication: Mapping[str, str | int] = field(default_factory=lambda: dict(DEFAULT_REPLICATION))
    durable_writes: bool = True
    ensure: Ensure = Ensure.PRESENT

    @property
    def identity(self) -> ResourceIdentity:
        return (self.name,)

    @property
    def key(self) -> str:
        """Human-readable 'keyspace <name>' used in logs and errors."""
        return f"{self.kind} {self.name}"


@dataclass(frozen=True)
class UserType:
    """Declarative user-defined type: field name → type name."""

    kind: ClassVar[ResourceKind] = ResourceKind.TYPE

    keyspace: str
    name: str
    fields: Mapping[str, str] = field(default_factory=dict)
    ensure: Ensure = Ensure.PRESENT

    @property
    def identity(self) -> ResourceIdentity:
        return (self.keyspace, self.name)

    @property
    def key(self) -> str:
        return f"{self.kind} {format_qualified_name(*self.identity)}"


@dataclass(frozen=True)
class Table:
    """
    Declarative table definition.

    partition_key:
        One or more columns; more than one renders a composite partition key.
    clustering_key:
        Zero or more clustering columns, in order.
    options:
        Raw `WITH` clauses (e.g. "CLUSTERING ORDER BY (ts DESC)"), joined by AND.
    """

    kind: ClassVar[ResourceKind] = ResourceKind.TABLE

    keyspace: str
    name: str
    columns: Mapping[str, str] = field(default_factory=dict)
    partition_key: Sequence[str] = ()
    clustering_key: Sequence[str] = ()
    options: Sequence[str] = ()
    ensure: Ensure = Ensure.PRESENT

    @property
    def identity(self) -> ResourceIdentity:
        return (self.keyspace, self.name)

    @property
    def key(self) -> str:
        return f"{self.kind} {format_qualified_name(*self.identity)}"

    @property
    def primary_key_columns(self) -> tuple[str, ...]:
        """Partition key columns followed by clustering columns."""
        return tuple(self.partition_key) + tuple(self.clustering_key)


@dataclass(frozen=True)
class Index:
    """
    Declarative secondary index.

    keys is the indexed target: a column name, or one of
    keys(col) / values(col) / entries(col) / full(col) for collections.
    A class_name makes this a custom index.
    """

    kind: ClassVar[ResourceKind] = ResourceKind.INDEX

    keyspace: str
    table: str
    name: str
    keys: str = ""
    class_name: str | None = None
    options: Mapping[str, str] = field(default_factory=dict)
    ensure: Ensure = Ensure.PRESENT

    @property
    def identity(self) -> ResourceIdentity:
        # Index names are unique per keyspace, whatever table they index.
        return (self.keyspace, self.name)

    @property
    def key(self) -> str:
        return f"{self.kind} {format_qualified_name(self.keyspace, self.name)} on {self.table}"


@dataclass(frozen=True)
class User:
    """Declarative login role."""

    kind: ClassVar[ResourceKind] = ResourceKind.USER

    name: str
    password: str | None = field(default=None, repr=False)
    superuser: bool = False
    login: bool = True
    ensure: Ensure = Ensure.PRESENT

    @property
    def identity(self) -> ResourceIdentity:
        return (self.name,)

    @property
    def key(self) -> str:
        return f"{self.kind} {self.name}"


@dataclass(frozen=True)
class Permission:
    """
    Declarative grant of one permission to a role.

    keyspace == "ALL" targets every keyspace; a table narrows the grant to one table.
    """

    kind: ClassVar[ResourceKind] = ResourceKind.PERMISSION

    user: str
    permission: PermissionName = PermissionName.ALL
    keyspace: str = ALL_KEYSPACES
    table: str | None = None
    ensure: Ensure = Ensure.PRESENT

    @property
    def identity(self) -> ResourceIdentity:
        return (self.user, self.permission.value, self.keyspace, self.table or "")

    @property
    def key(self) -> str:
        target = format_qualified_name(self.keyspace, self.table or "")
        return f"{self.kind} {self.permission} on {target} for {self.user}"

    @property
    def on_all_keyspaces(self) -> bool:
        return self.keyspace.upper() == ALL_KEYSPACES


ResourceDescriptor: TypeAlias = Keyspace | UserType | Table | Index | User | Permission
