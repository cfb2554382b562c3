"""Enumerations used throughout the schema engine."""

from enum import StrEnum


class Ensure(StrEnum):
    """Desired existence of a schema object."""

    PRESENT = "present"
    ABSENT = "absent"


class ReplicationStrategy(StrEnum):
    """Keyspace replication strategy class."""

    SIMPLE = "SimpleStrategy"
    NETWORK_TOPOLOGY = "NetworkTopologyStrategy"


class PermissionName(StrEnum):
    """Permission that can be granted to a role."""

    ALL = "ALL"
    ALTER = "ALTER"
    AUTHORIZE = "AUTHORIZE"
    CREATE = "CREATE"
    DESCRIBE = "DESCRIBE"
    DROP = "DROP"
    EXECUTE = "EXECUTE"
    MODIFY = "MODIFY"
    SELECT = "SELECT"

    @property
    def grant_clause(self) -> str:
        """Permission as it appears in GRANT/REVOKE/LIST statements."""
        if self is PermissionName.ALL:
            return "ALL PERMISSIONS"
        return self.value

    @classmethod
    def expand_all(cls, on_table: bool = False) -> tuple["PermissionName", ...]:
        """Individual permissions that make up ALL on a keyspace (or table) resource."""
        names = (cls.ALTER, cls.AUTHORIZE, cls.CREATE, cls.DROP, cls.MODIFY, cls.SELECT)
        if on_table:
            return tuple(n for n in names if n is not cls.CREATE)
        return names
