from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

TOKEN_BACKENDS = ("sql", "erc20")


@dataclass(frozen=True)
class FlaskSettings:
    secret_key: str = "roundlottery-dev-secret"
    debug: bool = True


@dataclass(frozen=True)
class LotterySettings:
    pool_identity: str = "roundlottery-pool"
    generator: str = "sha256"
    token_backend: str = "sql"
    require_signatures: bool = False
    admin_identity: Optional[str] = None


@dataclass(frozen=True)
class Web3Settings:
    rpc_url: str
    token_address: str
    pool_signer_key: str


@dataclass(frozen=True)
class EventSettings:
    webhook_url: Optional[str] = None
    timeout_seconds: int = 5


@dataclass(frozen=True)
class AppSettings:
    flask: FlaskSettings
    lottery: LotterySettings
    database_url: str
    admin_api_key: Optional[str]
    events: EventSettings = EventSettings()
    web3: Optional[Web3Settings] = None


def _require(key: str) -> str:
    value = os.getenv(key)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {key}")
    return value


def _bool_from_env(key: str, default: bool = False) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def load_settings(dotenv_path: Optional[str] = None) -> AppSettings:
    if dotenv_path:
        load_dotenv(dotenv_path)
    else:
        load_dotenv()

    flask_settings = FlaskSettings(
        secret_key=os.getenv("FLASK_SECRET_KEY", "roundlottery-dev-secret"),
        debug=os.getenv("FLASK_DEBUG", "1") == "1",
    )

    token_backend = os.getenv("TOKEN_BACKEND", "sql").strip().lower()
    if token_backend not in TOKEN_BACKENDS:
        raise RuntimeError(f"TOKEN_BACKEND must be one of {', '.join(TOKEN_BACKENDS)}")

    lottery_settings = LotterySettings(
        pool_identity=os.getenv("POOL_IDENTITY", "roundlottery-pool"),
        generator=os.getenv("DRAW_GENERATOR", "sha256"),
        token_backend=token_backend,
        require_signatures=_bool_from_env("REQUIRE_SIGNATURES"),
        admin_identity=os.getenv("ADMIN_IDENTITY") or None,
    )

    web3_settings = None
    if token_backend == "erc20":
        web3_settings = Web3Settings(
            rpc_url=_require("RPC_URL"),
            token_address=_require("TOKEN_CONTRACT_ADDRESS"),
            pool_signer_key=_require("POOL_SIGNER_KEY"),
        )

    event_settings = EventSettings(
        webhook_url=os.getenv("EVENTS_WEBHOOK_URL") or None,
        timeout_seconds=int(os.getenv("EVENTS_WEBHOOK_TIMEOUT_SECONDS", "5")),
    )

    return AppSettings(
        flask=flask_settings,
        lottery=lottery_settings,
        database_url=os.getenv("DATABASE_URL", "sqlite:///roundlottery.db"),
        admin_api_key=os.getenv("ADMIN_API_KEY"),
        events=event_settings,
        web3=web3_settings,
    )
