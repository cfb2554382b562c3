import pytest

from src.enums import PermissionName
from src.schema_engine.commands import CommandBuilder
from src.schema_engine.execute.ports import CommandResult
from src.schema_engine.models import Keyspace, Permission, Table, User
from src.schema_engine.state.reader import StateReader

# ---------- helpers ----------


class CannedRunner:
    def __init__(self, exit_code=0, stdout=""):
        self.exit_code = exit_code
        self.stdout = stdout
        self.scripts = []

    def run(self, script):
        self.scripts.append(script)
        return CommandResult(command=script, exit_code=self.exit_code, stdout=self.stdout)


def exists(descriptor, **runner_kwargs):
    runner = CannedRunner(**runner_kwargs)
    return StateReader(runner, CommandBuilder()).exists(descriptor), runner


# ---------- tests ----------


def test_describe_success_means_exists():
    found, runner = exists(Table("ks1", "users"), exit_code=0, stdout="CREATE TABLE ...")
    assert found
    assert runner.scripts == ["DESC TABLE ks1.users"]


def test_non_zero_read_means_absent_not_error():
    found, _ = exists(Table("ks1", "users"), exit_code=2)
    assert not found


@pytest.mark.parametrize(
    "stdout, expected",
    [
        ("\nsystem  ks1  system_auth\n", True),
        ("\nsystem  ks10  system_auth\n", False),
        ("\nsystem  \"ks1\"\n", True),
        ("", False),
    ],
)
def test_keyspace_matched_as_whole_cell(stdout, expected):
    found, _ = exists(Keyspace("ks1"), stdout=stdout)
    assert found is expected


def test_keyspace_list_failure_means_absent():
    found, _ = exists(Keyspace("ks1"), exit_code=1, stdout="ks1")
    assert not found


ROLE_LISTING = (
    " role      | super | login | options\n"
    "-----------+-------+-------+---------\n"
    " cassandra |  True |  True |      {}\n"
    " alice     | False |  True |      {}\n"
    "\n"
    "(2 rows)\n"
)


def test_user_found_in_role_listing():
    assert exists(User("alice"), stdout=ROLE_LISTING)[0]
    assert not exists(User("bob"), stdout=ROLE_LISTING)[0]


@pytest.mark.parametrize("name", ["role", "super", "login", "options", "True", "False"])
def test_header_and_flag_cells_do_not_count_as_roles(name):
    found, _ = exists(User(name), stdout=ROLE_LISTING)
    assert not found


PERMISSION_LISTING = (
    " role  | username | resource       | permission\n"
    "-------+----------+----------------+------------\n"
    " alice |    alice | <keyspace ks1> |     SELECT\n"
    "   bob |      bob | <keyspace ks1> |     MODIFY\n"
    "\n"
    "(2 rows)\n"
)


def test_permission_requires_user_and_permission_on_same_row():
    assert exists(Permission("alice", PermissionName.SELECT, "ks1"), stdout=PERMISSION_LISTING)[0]
    assert not exists(Permission("alice", PermissionName.MODIFY, "ks1"), stdout=PERMISSION_LISTING)[0]


def test_permission_matches_role_cell_only():
    # a role named like a permission must not match the permission cell
    assert exists(Permission("bob", PermissionName.MODIFY, "ks1"), stdout=PERMISSION_LISTING)[0]
    assert not exists(Permission("SELECT", PermissionName.SELECT, "ks1"), stdout=PERMISSION_LISTING)[0]


def test_all_permissions_present_when_role_has_any_row():
    assert exists(Permission("bob", PermissionName.ALL, "ks1"), stdout=PERMISSION_LISTING)[0]
    assert not exists(Permission("carol", PermissionName.ALL, "ks1"), stdout=PERMISSION_LISTING)[0]
