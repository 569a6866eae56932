from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


def _bool_from_env(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _int_from_env(value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    return int(value)


def _require_env(key: str) -> str:
    value = os.getenv(key)
    if value is None or value == "":
        raise RuntimeError(f"Missing required environment variable: {key}")
    return value


@dataclass(frozen=True)
class SeedSourceSettings:
    url: str
    round_key: str = "round"
    randomness_key: str = "randomness"
    timeout_seconds: int = 10


@dataclass(frozen=True)
class OracleSettings:
    lottery_api_url: str
    admin_identity: str
    admin_api_key: Optional[str] = None
    poll_interval_seconds: int = 30
    submit_only_once: bool = False
    state_file: str = "seed_oracle_state.json"
    request_timeout_seconds: int = 10
    seedsource: SeedSourceSettings = SeedSourceSettings(url="")

    def copy(self, **updates) -> "OracleSettings":
        return replace(self, **updates)


def load_from_environment() -> OracleSettings:
    seedsource = SeedSourceSettings(
        url=os.getenv("SEEDSOURCE__URL", ""),
        round_key=os.getenv("SEEDSOURCE__ROUND_KEY", "round"),
        randomness_key=os.getenv("SEEDSOURCE__RANDOMNESS_KEY", "randomness"),
        timeout_seconds=_int_from_env(os.getenv("SEEDSOURCE__TIMEOUT_SECONDS"), 10),
    )

    return OracleSettings(
        lottery_api_url=_require_env("LOTTERY_API_URL").rstrip("/"),
        admin_identity=_require_env("ADMIN_IDENTITY"),
        admin_api_key=os.getenv("ADMIN_API_KEY") or None,
        poll_interval_seconds=_int_from_env(os.getenv("POLL_INTERVAL_SECONDS"), 30),
        submit_only_once=_bool_from_env(os.getenv("SUBMIT_ONCE"), False),
        state_file=os.getenv("STATE_FILE", "seed_oracle_state.json"),
        request_timeout_seconds=_int_from_env(os.getenv("LOTTERY_API_TIMEOUT_SECONDS"), 10),
        seedsource=seedsource,
    )


@lru_cache(maxsize=1)
def load_config(dotenv_path: Optional[str] = None) -> OracleSettings:
    if dotenv_path:
        load_dotenv(dotenv_path)
    else:
        default_path = pathlib.Path(".env")
        if default_path.exists():
            load_dotenv(default_path)
    return load_from_environment()
