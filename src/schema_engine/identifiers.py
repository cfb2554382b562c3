"""
Identifier utilities for the schema engine.

This module is the single place that decides how names reach a CQL script:
- Lower-case identifiers made of [a-z0-9_] (starting with a letter) render bare.
- Anything else is double-quoted, doubling any embedded double quotes.
- Qualified names are dot-joined, each part quoted independently.

Conventions:
- Verbs: quote_*, format_*, parse_*.
- `format_*` helpers return the unquoted form used in logs and identity keys.
"""

from __future__ import annotations

import re

from src.schema_engine.errors import ConfigError

_BARE_IDENTIFIER = re.compile(r"^[a-z][a-z0-9_]*$")
_MAX_IDENTIFIER_LEN = 48  # keyspace/table name limit enforced by the store


def quote_identifier(identifier: str) -> str:
    """Quote a single CQL identifier when it cannot be written bare."""
    text = str(identifier)
    if text == "":
        raise ConfigError("Identifiers must not be empty.")
    if _BARE_IDENTIFIER.match(text):
        return text
    return '"' + text.replace('"', '""') + '"'


def quote_qualified_name(*parts: str) -> str:
    """
    Return a dot-delimited qualified name from the provided parts.

    Examples:
        quote_qualified_name("ks1", "fullname")  -> "ks1.fullname"
        quote_qualified_name("ks1", "Mixed")     -> 'ks1."Mixed"'

    Rules:
    - Reject None or empty parts.
    - Strips surrounding double quotes on inputs to avoid double-quoting.
    """
    if not parts:
        raise ConfigError("At least one name part must be provided.")

    cleaned_parts: list[str] = []
    for raw_part in parts:
        if raw_part is None:
            raise ConfigError("Qualified name parts must not be None.")
        part = str(raw_part).strip()
        if part.startswith('"') and part.endswith('"') and len(part) >= 2:
            part = part[1:-1].replace('""', '"')
        if part == "":
            raise ConfigError("Qualified name parts must not be empty.")
        cleaned_parts.append(quote_identifier(part))
    return ".".join(cleaned_parts)


def format_qualified_name(*parts: str) -> str:
    """Unquoted: 'keyspace.name'. Empty parts are skipped."""
    return ".".join(str(p) for p in parts if p)


def parse_qualified_name(qualified_name: str) -> tuple[str, str]:
    """
    Parse 'keyspace.name' into its two parts.

    This is a simple parser: it strips double quotes and whitespace and splits on '.'.
    """
    cleaned = qualified_name.replace('"', "").strip()
    parts = [p.strip() for p in cleaned.split(".")]
    if len(parts) != 2 or any(p == "" for p in parts):
        raise ConfigError(f"Expected two-part name 'keyspace.name', got: {qualified_name!r}")
    return parts[0], parts[1]


def check_identifier_length(identifier: str) -> bool:
    """Whether `identifier` fits within the store's name length limit."""
    return 0 < len(identifier) <= _MAX_IDENTIFIER_LEN
