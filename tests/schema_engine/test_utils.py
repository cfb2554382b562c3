import pytest

from src.schema_engine.errors import ConfigError
from src.schema_engine.utils import (
    check_type_expression,
    escape_cql_literal,
    format_cql_map,
    iter_rows,
    iter_table_rows,
    quote_cql_literal,
    redact_secrets,
)


def test_escape_doubles_single_quotes():
    assert escape_cql_literal("it's") == "it''s"
    assert escape_cql_literal("") == ""
    assert escape_cql_literal(None) == ""


def test_quote_literal_by_type():
    assert quote_cql_literal(True) == "true"
    assert quote_cql_literal(False) == "false"
    assert quote_cql_literal(3) == "3"
    assert quote_cql_literal("dc1") == "'dc1'"
    assert quote_cql_literal("o'neil") == "'o''neil'"


def test_cql_map_puts_class_first_then_sorted_keys():
    out = format_cql_map({"dc2": 2, "class": "NetworkTopologyStrategy", "dc1": 3})
    assert out == "{'class': 'NetworkTopologyStrategy', 'dc1': 3, 'dc2': 2}"


@pytest.mark.parametrize(
    "type_name", ["text", "frozen<fullname>", "map<text, int>", "ks1.address", " int "]
)
def test_type_expressions_accepted(type_name):
    assert check_type_expression(type_name) == type_name.strip()


@pytest.mark.parametrize(
    "type_name",
    [
        "text); DROP KEYSPACE ks1",
        "list<text",
        "'text'",
        "",
        "int -- comment",
        "text, admin boolean",
        "map<text, int>, extra int",
        "list>text<",
    ],
)
def test_type_expressions_rejected(type_name):
    with pytest.raises(ConfigError):
        check_type_expression(type_name)


def test_iter_rows_splits_tabular_output_and_strips_quotes():
    output = ' role | super\n-----+------\n alice | False\n "Bob" | True\n'
    rows = list(iter_rows(output))
    assert frozenset({"alice", "False"}) in rows
    assert frozenset({"Bob", "True"}) in rows


def test_redact_secrets_masks_password_literals():
    script = "CREATE ROLE IF NOT EXISTS alice WITH PASSWORD = 'se''cret' AND LOGIN = true"
    assert redact_secrets(script) == (
        "CREATE ROLE IF NOT EXISTS alice WITH PASSWORD = '********' AND LOGIN = true"
    )


def test_iter_table_rows_skips_header_separator_and_footer():
    output = (
        " role  | super | login | options\n"
        "-------+-------+-------+---------\n"
        " alice | False |  True |      {}\n"
        " login |  True |  True |      {}\n"
        "\n"
        "(2 rows)\n"
    )
    assert list(iter_table_rows(output)) == [
        ("alice", "False", "True", "{}"),
        ("login", "True", "True", "{}"),
    ]


def test_iter_table_rows_without_separator_yields_nothing():
    assert list(iter_table_rows("alice | False\n")) == []
