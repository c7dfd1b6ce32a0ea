# supply_stats/config.py
import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

from .errors import ConfigError

# --- Defaults ---
DEFAULT_DENOM = "ujuno"
DEFAULT_INTERVAL_MS = 7200000  # 2 hours
DEFAULT_PORT = 3000
DEFAULT_SUPPLY_FILE = "circulating_supply.txt"
DEFAULT_DISPLAY_DECIMALS = 6  # 1 JUNO = 1,000,000 ujuno
DEFAULT_REQUEST_TIMEOUT = 30
# --- End Defaults ---


@dataclass(frozen=True)
class Settings:
    rest_api_endpoint: str
    denom: str = DEFAULT_DENOM
    interval_seconds: float = DEFAULT_INTERVAL_MS / 1000
    vesting_accounts: Tuple[str, ...] = field(default_factory=tuple)
    port: int = DEFAULT_PORT
    supply_file: str = DEFAULT_SUPPLY_FILE
    display_decimals: int = DEFAULT_DISPLAY_DECIMALS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    log_level: str = "INFO"

    @property
    def display_denom(self) -> str:
        """ujuno -> JUNO"""
        return self.denom[1:].upper() if self.denom.startswith("u") else self.denom.upper()


def _int_env(env, name, default):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}")
    return value


def parse_vesting_accounts(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return ()
    return tuple(a.strip() for a in raw.split(",") if a.strip())


def load_settings(env=None, dotenv=True) -> Settings:
    """Builds Settings from the environment, reading .env first if present."""
    if env is None:
        if dotenv:
            load_dotenv()
        env = os.environ

    endpoint = (env.get("REST_API_ENDPOINT") or "").strip().rstrip("/")
    if not endpoint:
        raise ConfigError("REST_API_ENDPOINT is not set")

    denom = (env.get("DENOM") or DEFAULT_DENOM).strip()
    interval_ms = _int_env(env, "INTERVAL", DEFAULT_INTERVAL_MS)
    if interval_ms == 0:
        raise ConfigError("INTERVAL must be greater than zero")
    request_timeout = _int_env(env, "REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)
    if request_timeout == 0:
        raise ConfigError("REQUEST_TIMEOUT must be greater than zero")
    log_level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"LOG_LEVEL {log_level!r} is not a logging level")

    return Settings(
        rest_api_endpoint=endpoint,
        denom=denom,
        interval_seconds=interval_ms / 1000,
        vesting_accounts=parse_vesting_accounts(env.get("VESTING_ACCOUNTS")),
        port=_int_env(env, "PORT", DEFAULT_PORT),
        supply_file=env.get("SUPPLY_FILE") or DEFAULT_SUPPLY_FILE,
        display_decimals=_int_env(env, "DISPLAY_DECIMALS", DEFAULT_DISPLAY_DECIMALS),
        request_timeout=request_timeout,
        log_level=log_level,
    )
