import pytest

from src.enums import Ensure, PermissionName
from src.schema_engine.desired.builders import (
    build_descriptors,
    build_index,
    build_keyspace,
    build_permissions,
    build_table,
    build_user,
    build_user_type,
    parse_primary_key,
)
from src.schema_engine.errors import ConfigError
from src.schema_engine.models import Keyspace, Permission, Table, User, UserType

# ---------- keyspaces ----------


def test_keyspace_title_is_the_name_and_class_alias_is_normalised():
    keyspace = build_keyspace(
        "ks1", {"replication_map": {"keyspace_class": "NetworkTopologyStrategy", "dc1": 3}}
    )

    assert keyspace.name == "ks1"
    assert keyspace.replication == {"class": "NetworkTopologyStrategy", "dc1": 3}
    assert keyspace.durable_writes is True
    assert keyspace.ensure is Ensure.PRESENT


def test_keyspace_defaults_to_simple_strategy():
    keyspace = build_keyspace("ks1", {})
    assert keyspace.replication == {"class": "SimpleStrategy", "replication_factor": 1}


def test_explicit_name_overrides_title_and_ensure_absent_is_parsed():
    keyspace = build_keyspace("old", {"name": "ks_old", "ensure": "Absent", "durable_writes": "false"})

    assert keyspace == Keyspace("ks_old", durable_writes=False, ensure=Ensure.ABSENT)


def test_bad_ensure_value_names_the_entry():
    with pytest.raises(ConfigError, match="keyspaces.ks1: ensure must be"):
        build_keyspace("ks1", {"ensure": "maybe"})


def test_unknown_attribute_is_rejected():
    with pytest.raises(ConfigError, match=r"keyspaces.ks1: unknown attribute\(s\) \['replication'\]"):
        build_keyspace("ks1", {"replication": {"class": "SimpleStrategy"}})


# ---------- types ----------


def test_user_type_fields_keep_declared_order():
    udt = build_user_type(
        "fullname", {"keyspace": "ks1", "fields": {"last": "text", "first": "text"}}
    )

    assert udt == UserType("ks1", "fullname", {"last": "text", "first": "text"})
    assert list(udt.fields) == ["last", "first"]


def test_user_type_needs_keyspace():
    with pytest.raises(ConfigError, match="cql_types.fullname: missing required attribute 'keyspace'"):
        build_user_type("fullname", {"fields": {"first": "text"}})


# ---------- tables ----------


def test_primary_key_list_uses_first_column_as_partition():
    table = build_table(
        "events",
        {
            "keyspace": "ks1",
            "columns": {"id": "uuid", "ts": "timestamp", "v": "text"},
            "primary_key": ["id", "ts"],
        },
    )

    assert table.partition_key == ("id",)
    assert table.clustering_key == ("ts",)


def test_primary_key_column_entry_is_removed_from_columns():
    table = build_table(
        "events",
        {
            "keyspace": "ks1",
            "columns": {"a": "int", "b": "int", "c": "int", "PRIMARY KEY": "((a, b), c)"},
        },
    )

    assert table.columns == {"a": "int", "b": "int", "c": "int"}
    assert table.partition_key == ("a", "b")
    assert table.clustering_key == ("c",)


def test_explicit_partition_and_clustering_keys_and_single_option():
    table = build_table(
        "events",
        {
            "keyspace": "ks1",
            "columns": {"a": "int", "b": "int", "ts": "timestamp"},
            "partition_key": ["a", "b"],
            "clustering_key": "ts",
            "options": "CLUSTERING ORDER BY (ts DESC)",
        },
    )

    assert table == Table(
        keyspace="ks1",
        name="events",
        columns={"a": "int", "b": "int", "ts": "timestamp"},
        partition_key=("a", "b"),
        clustering_key=("ts",),
        options=("CLUSTERING ORDER BY (ts DESC)",),
    )


@pytest.mark.parametrize(
    "expression, expected",
    [
        ("(id)", (("id",), ())),
        ("(id, ts)", (("id",), ("ts",))),
        ("((a, b), c, d)", (("a", "b"), ("c", "d"))),
    ],
)
def test_parse_primary_key(expression, expected):
    assert parse_primary_key(expression) == expected


def test_parse_primary_key_rejects_garbage():
    with pytest.raises(ConfigError, match="Unrecognised primary key"):
        parse_primary_key("id, ts")


# ---------- indexes / users ----------


def test_index_requires_table():
    with pytest.raises(ConfigError, match="indexes.by_email: missing required attribute 'table'"):
        build_index("by_email", {"keyspace": "ks1", "keys": "email"})


def test_custom_index_options_are_stringified():
    index = build_index(
        "by_name",
        {
            "keyspace": "ks1",
            "table": "users",
            "keys": "name",
            "class_name": "org.apache.cassandra.index.sasi.SASIIndex",
            "options": {"case_sensitive": False},
        },
    )

    assert index.class_name == "org.apache.cassandra.index.sasi.SASIIndex"
    assert index.options == {"case_sensitive": "False"}


def test_user_password_is_stringified_and_flags_default():
    user = build_user("alice", {"password": 1234})

    assert user == User("alice", password="1234", superuser=False, login=True)


# ---------- permissions ----------


def test_single_permission_on_keyspace():
    permissions = build_permissions(
        "alice_reads", {"user_name": "alice", "keyspace_name": "ks1", "permission_name": "select"}
    )

    assert permissions == [Permission("alice", PermissionName.SELECT, "ks1")]


def test_all_on_keyspace_expands_to_every_permission():
    permissions = build_permissions("alice_all", {"user_name": "alice", "keyspace_name": "ks1"})

    assert [p.permission for p in permissions] == list(PermissionName.expand_all())
    assert all(p.keyspace == "ks1" and p.table is None for p in permissions)


def test_all_on_table_omits_create():
    permissions = build_permissions(
        "alice_users",
        {"user_name": "alice", "keyspace_name": "ks1", "table_name": "users", "permission_name": "ALL"},
    )

    assert PermissionName.CREATE not in {p.permission for p in permissions}
    assert len(permissions) == 5


def test_keyspace_defaults_to_all_keyspaces():
    permissions = build_permissions("everything", {"user_name": "alice", "permission_name": "MODIFY"})
    assert permissions[0].on_all_keyspaces


def test_table_without_keyspace_is_rejected():
    with pytest.raises(ConfigError, match="table_name requires a keyspace_name"):
        build_permissions("bad", {"user_name": "alice", "table_name": "users"})


def test_unknown_permission_name_is_rejected():
    with pytest.raises(ConfigError, match="unknown permission_name 'READ'"):
        build_permissions("bad", {"user_name": "alice", "permission_name": "read"})


# ---------- collections ----------


def test_build_descriptors_follows_collection_order_then_file_order():
    descriptors = build_descriptors(
        {
            "users": {"alice": {"password": "pw"}},
            "keyspaces": {"ks2": {}, "ks1": {}},
            "permissions": {"p": {"user_name": "alice", "keyspace_name": "ks1", "permission_name": "SELECT"}},
        }
    )

    assert [d.key for d in descriptors] == [
        "keyspace ks2",
        "keyspace ks1",
        "user alice",
        "permission SELECT on ks1 for alice",
    ]


def test_collection_must_be_a_mapping():
    with pytest.raises(ConfigError, match="keyspaces must be a mapping"):
        build_descriptors({"keyspaces": ["ks1"]})
