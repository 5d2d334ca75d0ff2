"""Runtime settings pulled from the environment."""

from __future__ import annotations

import logging
import os
import random
from pathlib import Path


logger = logging.getLogger(__name__)

DB_PATH_ENV = "SBASIM_DB_PATH"
BUSY_TIMEOUT_ENV = "SBASIM_BUSY_TIMEOUT"
SEED_ENV = "SBASIM_SEED"

_BUSY_TIMEOUT_DEFAULT = 5.0
DEFAULT_DB_PATH = Path(__file__).resolve().parent.parent / "sbasim.sqlite"


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %s", name, raw, default)
        return default


def busy_timeout() -> float:
    return _env_float(BUSY_TIMEOUT_ENV, _BUSY_TIMEOUT_DEFAULT, clamp_min=0.0)


def db_path_from_env() -> str | None:
    return os.getenv(DB_PATH_ENV) or None


def default_rng() -> random.Random:
    """Random source for production simulations, seeded when SBASIM_SEED is set."""

    seed = _env_int(SEED_ENV, None)
    if seed is None:
        return random.Random()
    return random.Random(seed)
