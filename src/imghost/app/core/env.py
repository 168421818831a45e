from __future__ import annotations

import os
import warnings
from enum import StrEnum
from functools import cache


class Env(StrEnum):
    LOCAL = "local"
    DEV   = "dev"
    TEST  = "test"
    PROD  = "prod"


# Map common aliases -> canonical
SYNONYMS: dict[str, Env] = {
    "development": Env.DEV,
    "dev": Env.DEV,
    "local": Env.LOCAL,
    "test": Env.TEST,
    "testing": Env.TEST,
    "prod": Env.PROD,
    "production": Env.PROD,
}


def _normalize(raw: str | None) -> Env | None:
    if not raw:
        return None
    val = raw.strip().lower()
    if val in (e.value for e in Env):
        return Env(val)
    return SYNONYMS.get(val)


@cache
def get_env() -> Env:
    """
    Resolve the current environment once.

    Precedence:
      1) IMGHOST_ENV
      2) APP_ENV
      3) "local" (default)

    Unknown values fall back to LOCAL with a one-time warning.
    """
    raw = os.getenv("IMGHOST_ENV") or os.getenv("APP_ENV")
    env = _normalize(raw)
    if env is None:
        if raw:
            warnings.warn(
                f"Unrecognized environment '{raw}', defaulting to 'local'.",
                RuntimeWarning,
                stacklevel=2,
            )
        env = Env.LOCAL
    return env


CURRENT_ENVIRONMENT: Env = get_env()
IS_LOCAL = CURRENT_ENVIRONMENT is Env.LOCAL
IS_DEV = CURRENT_ENVIRONMENT is Env.DEV
IS_TEST = CURRENT_ENVIRONMENT is Env.TEST
IS_PROD = CURRENT_ENVIRONMENT is Env.PROD
