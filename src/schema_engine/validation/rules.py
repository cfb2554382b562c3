"""
Validation rules for desired descriptors.

Each rule inspects the full descriptor set and raises `ConfigError` on the
first violation. Rules run before the connectivity probe, so a malformed
desired state never reaches the store.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum

from src.enums import Ensure, ReplicationStrategy
from src.schema_engine.commands import CommandBuilder
from src.schema_engine.errors import ConfigError
from src.schema_engine.identifiers import check_identifier_length
from src.schema_engine.models import (
    Index,
    Keyspace,
    Permission,
    ResourceDescriptor,
    Table,
    User,
    UserType,
)


class RuleCode(StrEnum):
    """Stable identifiers prefixed to every rule violation message."""

    UNIQUE_IDENTITY = "UNIQUE_IDENTITY"
    REQUIRED_ATTRIBUTES = "REQUIRED_ATTRIBUTES"
    IDENTIFIER_LENGTH = "IDENTIFIER_LENGTH"
    RENDERABLE_STATEMENTS = "RENDERABLE_STATEMENTS"


class ValidationRule:
    """Base interface for a descriptor validation rule."""

    code: RuleCode

    def check(self, descriptors: Sequence[ResourceDescriptor]) -> None:
        """Validate the descriptors, raising ConfigError on violation."""
        raise NotImplementedError

    def fail(self, message: str) -> ConfigError:
        return ConfigError(f"[{self.code}] {message}")


class UniqueIdentityRule(ValidationRule):
    """Two descriptors of the same kind must not share an identity."""

    code = RuleCode.UNIQUE_IDENTITY

    def check(self, descriptors: Sequence[ResourceDescriptor]) -> None:
        seen: set[tuple[str, tuple[str, ...]]] = set()
        for descriptor in descriptors:
            key = (descriptor.kind.value, descriptor.identity)
            if key in seen:
                raise self.fail(f"Duplicate declaration of {descriptor.key}.")
            seen.add(key)


class RequiredAttributesRule(ValidationRule):
    """Every kind carries the attributes its statements need."""

    code = RuleCode.REQUIRED_ATTRIBUTES

    def check(self, descriptors: Sequence[ResourceDescriptor]) -> None:
        for descriptor in descriptors:
            for name, value in _identity_fields(descriptor):
                if not value:
                    raise self.fail(f"{descriptor.kind} is missing required attribute '{name}'.")
            if descriptor.ensure is Ensure.PRESENT:
                self._check_present(descriptor)

    def _check_present(self, descriptor: ResourceDescriptor) -> None:
        if isinstance(descriptor, Keyspace):
            self._check_replication(descriptor)
        elif isinstance(descriptor, UserType) and not descriptor.fields:
            raise self.fail(f"{descriptor.key} declares no fields.")
        elif isinstance(descriptor, Table):
            self._check_table(descriptor)
        elif isinstance(descriptor, Index) and not descriptor.keys:
            raise self.fail(f"{descriptor.key} declares no keys to index.")

    def _check_replication(self, keyspace: Keyspace) -> None:
        strategy = keyspace.replication.get("class")
        if not strategy:
            raise self.fail(f"{keyspace.key} replication is missing 'class'.")
        if strategy == ReplicationStrategy.SIMPLE and "replication_factor" not in keyspace.replication:
            raise self.fail(f"{keyspace.key} uses SimpleStrategy without 'replication_factor'.")
        if strategy == ReplicationStrategy.NETWORK_TOPOLOGY and len(keyspace.replication) < 2:
            raise self.fail(f"{keyspace.key} uses NetworkTopologyStrategy without datacenters.")

    def _check_table(self, table: Table) -> None:
        if not table.columns:
            raise self.fail(f"{table.key} declares no columns.")
        if not table.partition_key:
            raise self.fail(f"{table.key} declares no primary key.")
        unknown = [c for c in table.primary_key_columns if c not in table.columns]
        if unknown:
            raise self.fail(f"{table.key} primary key references unknown columns: {unknown}")


class IdentifierLengthRule(ValidationRule):
    """Keyspace and table names must fit the store's identifier limit."""

    code = RuleCode.IDENTIFIER_LENGTH

    def check(self, descriptors: Sequence[ResourceDescriptor]) -> None:
        for descriptor in descriptors:
            names: list[str] = []
            if isinstance(descriptor, Keyspace):
                names = [descriptor.name]
            elif isinstance(descriptor, Table):
                names = [descriptor.keyspace, descriptor.name]
            for name in names:
                if not check_identifier_length(name):
                    raise self.fail(f"{descriptor.key}: name {name!r} exceeds the length limit.")


class RenderableStatementsRule(ValidationRule):
    """Read and write statements render cleanly (identifiers, literals, type expressions)."""

    code = RuleCode.RENDERABLE_STATEMENTS

    def __init__(self, builder: CommandBuilder | None = None) -> None:
        self._builder = builder or CommandBuilder()

    def check(self, descriptors: Sequence[ResourceDescriptor]) -> None:
        for descriptor in descriptors:
            try:
                self._builder.build_read(descriptor)
                self._builder.build_write(descriptor)
            except ConfigError as error:
                raise self.fail(f"{descriptor.key}: {error}") from error


# ---------- helpers ----------


def _identity_fields(descriptor: ResourceDescriptor) -> list[tuple[str, str | None]]:
    """(attribute, value) pairs that must be non-empty for the descriptor's identity."""
    if isinstance(descriptor, (Keyspace, User)):
        return [("name", descriptor.name)]
    if isinstance(descriptor, (UserType, Table)):
        return [("keyspace", descriptor.keyspace), ("name", descriptor.name)]
    if isinstance(descriptor, Index):
        return [
            ("keyspace", descriptor.keyspace),
            ("table", descriptor.table),
            ("name", descriptor.name),
        ]
    if isinstance(descriptor, Permission):
        return [("user", descriptor.user), ("keyspace", descriptor.keyspace)]
    raise ConfigError(f"Unsupported descriptor type: {type(descriptor).__name__}")
