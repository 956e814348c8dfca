"""Startup configuration.

Everything the run needs is read once from the environment (optionally
seeded from a ``.env`` file) and frozen into a :class:`Config`, which is then
handed explicitly to the scanner and the workflow engine.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError
from .models import PortRange, RetryPolicy

log = logging.getLogger("portwalker.config")

DEFAULT_USER         = "testUser"
DEFAULT_WORKERS      = 100
DEFAULT_SECRET_POLLS = 100


@dataclass(frozen=True)
class Config:
    target: PortRange
    workers: int = DEFAULT_WORKERS
    user: str = DEFAULT_USER
    secret_poll: RetryPolicy = RetryPolicy(max_attempts=DEFAULT_SECRET_POLLS)
    log_level: str = "WARNING"


def _required(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise ConfigurationError(f"{name} is not set")
    return value.strip()


def _integer(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _optional_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = _integer(name, raw.strip())
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def load_config(env_file: str | Path | None = None) -> Config:
    """Build the run configuration; raises ConfigurationError on bad input."""
    path = str(env_file) if env_file else find_dotenv(usecwd=True)
    if path and load_dotenv(path):
        log.debug("loaded %s", path)
    else:
        log.debug("no .env file loaded, using process environment only")

    host    = _required("IP")
    start   = _integer("START_PORT", _required("START_PORT"))
    end     = _integer("END_PORT", _required("END_PORT"))
    timeout = _integer("TIMEOUT", _required("TIMEOUT"))

    level = os.getenv("LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(f"LOG_LEVEL {level!r} is not a logging level")

    polls = _optional_int("SECRET_POLL_ATTEMPTS", DEFAULT_SECRET_POLLS)
    if polls == 0:
        log.warning("SECRET_POLL_ATTEMPTS=0: /getUserSecret will be polled until it answers")

    return Config(
        target=PortRange(host, start, end, timeout / 1000.0),
        workers=_optional_int("SCAN_WORKERS", DEFAULT_WORKERS, minimum=1),
        user=os.getenv("WALK_USER", "").strip() or DEFAULT_USER,
        secret_poll=RetryPolicy(
            max_attempts=polls,
            backoff=_optional_int("SECRET_POLL_BACKOFF_MS", 0) / 1000.0,
        ),
        log_level=level,
    )
