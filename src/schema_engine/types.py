from typing import TypeAlias

# Identity of a descriptor within its kind, e.g. ("ks1", "users") for a table.
ResourceIdentity: TypeAlias = tuple[str, ...]
