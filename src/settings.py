"""Configuration values sourced from environment variables."""

import os
from typing import Final

LOG_LEVEL: Final[str] = os.getenv(key="LOG_LEVEL", default="INFO")
LOGGER_NAME: Final[str] = os.getenv(key="LOGGER_NAME", default="schema-engine")
LOG_COLOUR_ENABLED: Final[bool] = bool(
    os.getenv(key="LOG_COLOUR_ENABLED", default="True").upper() == "TRUE"
)

CQLSH_COMMAND: Final[str] = os.getenv(key="CQLSH_COMMAND", default="/usr/bin/cqlsh")
CQLSH_HOST: Final[str] = os.getenv(key="CQLSH_HOST", default="localhost")
CQLSH_PORT: Final[int] = int(os.getenv(key="CQLSH_PORT", default="9042"))
CONNECTION_TRIES: Final[int] = int(os.getenv(key="CONNECTION_TRIES", default="6"))
CONNECTION_TRY_SLEEP: Final[float] = float(os.getenv(key="CONNECTION_TRY_SLEEP", default="30"))
