from __future__ import annotations

import re
from collections.abc import Iterator, Mapping

from src.constants import REDACTED
from src.schema_engine.errors import ConfigError

# Type expressions such as `text`, `frozen<fullname>`, `map<text, int>`, `ks.udt`.
_TYPE_EXPRESSION = re.compile(r"^[A-Za-z][A-Za-z0-9_<>, .]*$")
_CELL_SEPARATOR = re.compile(r"[|\s]+")
_TABLE_SEPARATOR = re.compile(r"^\s*-+(?:\+-+)*\s*$")
_ROW_COUNT = re.compile(r"^\s*\(\d+ rows?\)\s*$")


def escape_cql_literal(value: str) -> str:
    """
    Escape a Python string for use as a single-quoted CQL literal.
    Doubles single quotes per CQL rules. Empty/None → empty string.
    """
    return (value or "").replace("'", "''")


def quote_cql_literal(value: object) -> str:
    """
    Render a scalar as a CQL literal.

    Booleans render as `true`/`false`, integers bare, everything else as a
    single-quoted string.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    return f"'{escape_cql_literal(str(value))}'"


def format_cql_map(values: Mapping[str, object]) -> str:
    """
    Format a CQL map literal: `{'class': 'SimpleStrategy', 'replication_factor': 1}`.
    Keys are string literals; values go through `quote_cql_literal`.
    `class` is rendered first, remaining keys are sorted for deterministic output.
    """
    ordered = sorted(values.items(), key=lambda item: (item[0] != "class", item[0]))
    body = ", ".join(f"'{escape_cql_literal(str(k))}': {quote_cql_literal(v)}" for k, v in ordered)
    return "{" + body + "}"


def check_type_expression(type_name: str) -> str:
    """
    Return a stripped type expression, rejecting anything outside the type grammar.

    Commas are only allowed between the parameters of a `<...>` type, so a value
    cannot close the current field and declare another one.
    """
    text = str(type_name).strip()
    if not _TYPE_EXPRESSION.match(text) or not _well_nested(text):
        raise ConfigError(f"Invalid CQL type expression: {type_name!r}")
    return text


def _well_nested(text: str) -> bool:
    depth = 0
    for char in text:
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
            if depth < 0:
                return False
        elif char == "," and depth == 0:
            return False
    return depth == 0


def iter_rows(output: str) -> Iterator[frozenset[str]]:
    """Yield the names on each line of list-style cqlsh output (DESC KEYSPACES), with identifier quotes removed."""
    for line in output.splitlines():
        cells = frozenset(
            cell.strip('"') for cell in _CELL_SEPARATOR.split(line) if cell.strip('"')
        )
        if cells:
            yield cells


def iter_table_rows(output: str) -> Iterator[tuple[str, ...]]:
    """
    Yield the data rows of a cqlsh result table as tuples of stripped cells.

    Only lines after a `----+----` separator count; the header above it, blank
    lines and the `(N rows)` footer are skipped.
    """
    in_body = False
    for line in output.splitlines():
        if _TABLE_SEPARATOR.match(line):
            in_body = True
            continue
        if not line.strip():
            in_body = False
            continue
        if in_body and not _ROW_COUNT.match(line):
            yield tuple(cell.strip() for cell in line.split("|"))


_PASSWORD_LITERAL = re.compile(r"(PASSWORD\s*=\s*)'(?:[^']|'')*'", re.I)


def redact_secrets(script: str) -> str:
    """Mask password literals in a CQL script before it is logged or raised."""
    return _PASSWORD_LITERAL.sub(lambda m: f"{m.group(1)}'{REDACTED}'", script)
