import re
import shutil

import pytest

from src.schema_engine.execute.ports import CommandResult

# Names of fixtures that require a reachable store
_CQLSH_FIXTURE_NAME = "cqlsh_fixture"

_ALL_PERMISSIONS = ("ALTER", "AUTHORIZE", "CREATE", "DROP", "MODIFY", "SELECT")


class FakeStore:
    """
    In-memory stand-in for cqlsh that understands the statements the engine renders.

    Every script is recorded in `scripts`. Set `reachable = False` to make every
    call fail, or add a statement prefix to `fail_on` to make matching writes fail.
    """

    def __init__(self) -> None:
        self.scripts: list[str] = []
        self.keyspaces: set[str] = set()
        self.objects: set[tuple[str, str]] = set()  # ("TYPE"|"TABLE"|"INDEX", "ks.name")
        self.roles: set[str] = {"cassandra"}
        self.grants: set[tuple[str, str, str]] = set()  # (permission, resource, role)
        self.reachable = True
        self.fail_on: set[str] = set()

    # ----- runner protocol -----

    def run(self, script: str) -> CommandResult:
        self.scripts.append(script)
        if not self.reachable:
            return CommandResult(command=script, exit_code=1, stderr="Connection error")
        if any(script.startswith(prefix) for prefix in self.fail_on):
            return CommandResult(command=script, exit_code=2, stderr="InvalidRequest")
        return self._dispatch(script)

    @property
    def writes(self) -> list[str]:
        return [s for s in self.scripts if s.split()[0] in ("CREATE", "DROP", "GRANT", "REVOKE")]

    # ----- interpreter -----

    def _dispatch(self, script: str) -> CommandResult:
        if script == "DESC KEYSPACES":
            return self._ok(script, "\n" + "  ".join(sorted(self.keyspaces | {"system"})) + "\n")
        if script == "LIST ROLES":
            rows = [" role      | super | login | options", "-----------+-------+-------+--------"]
            rows += [f" {r} | False | True | {{}}" for r in sorted(self.roles)]
            return self._ok(script, "\n".join(rows) + f"\n\n({len(self.roles)} rows)\n")

        if m := re.match(r"^DESC (TYPE|TABLE|INDEX) (\S+)$", script):
            if (m.group(1), m.group(2)) in self.objects:
                return self._ok(script, f"CREATE {m.group(1)} {m.group(2)} ...")
            return CommandResult(command=script, exit_code=2, stderr=f"'{m.group(2)}' not found")

        if m := re.match(r"^CREATE KEYSPACE IF NOT EXISTS (\S+) ", script):
            self.keyspaces.add(m.group(1))
            return self._ok(script)
        if m := re.match(r"^CREATE (TYPE|TABLE) IF NOT EXISTS (\S+) ", script):
            self._require_keyspace(m.group(2))
            self.objects.add((m.group(1), m.group(2)))
            return self._ok(script)
        if m := re.match(r"^CREATE (?:CUSTOM )?INDEX IF NOT EXISTS (\S+) ON (\S+) ", script):
            keyspace = m.group(2).split(".")[0]
            self.objects.add(("INDEX", f"{keyspace}.{m.group(1)}"))
            return self._ok(script)
        if m := re.match(r"^CREATE ROLE IF NOT EXISTS (\S+) ", script):
            self.roles.add(m.group(1))
            return self._ok(script)

        if m := re.match(r"^DROP KEYSPACE (\S+)$", script):
            self.keyspaces.discard(m.group(1))
            self.objects = {o for o in self.objects if not o[1].startswith(m.group(1) + ".")}
            return self._ok(script)
        if m := re.match(r"^DROP (TYPE|TABLE|INDEX) (\S+)$", script):
            self.objects.discard((m.group(1), m.group(2)))
            return self._ok(script)
        if m := re.match(r"^DROP ROLE (\S+)$", script):
            self.roles.discard(m.group(1))
            return self._ok(script)

        if m := re.match(r"^GRANT (.+) ON (.+) TO (\S+)$", script):
            for permission in self._expand(m.group(1)):
                self.grants.add((permission, m.group(2), m.group(3)))
            return self._ok(script)
        if m := re.match(r"^REVOKE (.+) ON (.+) FROM (\S+)$", script):
            for permission in self._expand(m.group(1)):
                self.grants.discard((permission, m.group(2), m.group(3)))
            return self._ok(script)
        if m := re.match(r"^LIST (.+) ON (.+) OF (\S+?)( NORECURSIVE)?$", script):
            wanted = self._expand(m.group(1))
            # Without NORECURSIVE the store also lists grants on parent resources.
            resources = {m.group(2)} if m.group(4) else self._with_parents(m.group(2))
            rows = [" role | username | resource | permission", "------+----------+----------+-----------"]
            for permission, resource, role in sorted(self.grants):
                if role == m.group(3) and resource in resources and permission in wanted:
                    rows.append(f" {role} | {role} | <{resource.lower()}> | {permission}")
            return self._ok(script, "\n".join(rows) + "\n")

        return CommandResult(command=script, exit_code=2, stderr="SyntaxException")

    @staticmethod
    def _expand(permission: str) -> tuple[str, ...]:
        return _ALL_PERMISSIONS if permission == "ALL PERMISSIONS" else (permission,)

    @staticmethod
    def _with_parents(resource: str) -> set[str]:
        resources = {resource, "ALL KEYSPACES"}
        if resource.startswith("TABLE "):
            resources.add("KEYSPACE " + resource.split()[1].split(".")[0])
        return resources

    def _require_keyspace(self, qualified: str) -> None:
        keyspace = qualified.split(".")[0]
        if keyspace not in self.keyspaces:
            raise AssertionError(f"Keyspace {keyspace} used before it was created")

    @staticmethod
    def _ok(script: str, stdout: str = "") -> CommandResult:
        return CommandResult(command=script, exit_code=0, stdout=stdout)


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def cqlsh_fixture():
    """Path to a cqlsh binary for tests that talk to a real store."""
    path = shutil.which("cqlsh")
    if path is None:
        pytest.skip("cqlsh is not installed")
    return path


def _mark_tests_using_cqlsh_fixture(tests: list[pytest.Item]) -> None:
    """
    Adds the `requires_cqlsh` marker to tests that use the fixture requiring a
    reachable store.

    :param tests: list of tests collected by `pytest`
    """
    for test in tests:
        if _CQLSH_FIXTURE_NAME in getattr(test, "fixturenames", ()):
            test.add_marker(pytest.mark.requires_cqlsh)


def _skip_cqlsh_tests(test: pytest.Item) -> None:
    """
    Tell `pytest` to skip tests that require a reachable store.

    If the config argument `--include-cqlsh-tests` is present, this shouldn't be
    invoked.

    :param test: test collected by `pytest`
    """
    if list(test.iter_markers(name="requires_cqlsh")):
        pytest.skip("Skipped tests that require a reachable store")


def pytest_addoption(parser: pytest.Parser):
    parser.addoption(
        "--include-cqlsh-tests",
        action="store_true",
        default=False,
        help="Run tests against a live store through cqlsh.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]):
    if not config.getoption("--include-cqlsh-tests"):
        _mark_tests_using_cqlsh_fixture(tests=items)


def pytest_runtest_setup(item: pytest.Item):
    if not item.config.getoption("--include-cqlsh-tests"):
        _skip_cqlsh_tests(test=item)
