"""Entry point: converge the store's schema to a desired-state file."""

import sys
from argparse import ArgumentParser
from collections.abc import Sequence

from src.logger import LOGGER
from src.schema_engine.desired.loader import load_desired_state
from src.schema_engine.engine import Engine
from src.schema_engine.errors import (
    CommandError,
    ConfigError,
    ConnectivityError,
    SchemaEngineError,
)
from src.schema_engine.execute.ports import ExecutionPolicy

EXIT_CODES: dict[type[SchemaEngineError], int] = {
    ConfigError: 2,
    ConnectivityError: 3,
    CommandError: 4,
}


def _parse_args(argv: Sequence[str] | None) -> tuple[str, ExecutionPolicy]:
    p = ArgumentParser(description="Converge keyspaces, types, tables, indexes, users and permissions.")
    p.add_argument("desired_state", help="Path to the desired-state YAML file.")
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Read current state and report the statements that would run.",
    )
    p.add_argument(
        "--keep-going",
        action="store_true",
        help="Continue after a failed statement; still exit non-zero at the end.",
    )
    args = p.parse_args(argv)
    policy = ExecutionPolicy(dry_run=args.dry_run, stop_on_first_error=not args.keep_going)
    return args.desired_state, policy


def run_ddl(argv: Sequence[str] | None = None) -> int:
    """Orchestrate a convergence run and map failures to process exit codes."""
    path, policy = _parse_args(argv)
    try:
        desired = load_desired_state(path)
        Engine(desired.config).run(desired.descriptors, policy)
    except SchemaEngineError as error:
        LOGGER.error("Run failed during %s: %s", error.stage, error)
        return EXIT_CODES.get(type(error), 1)
    return 0


if __name__ == "__main__":
    sys.exit(run_ddl())
