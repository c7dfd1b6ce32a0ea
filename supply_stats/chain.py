# supply_stats/chain.py
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List

import requests

from .errors import AccountNotFound, ChainQueryError, NetworkError

logger = logging.getLogger(__name__)

# --- Endpoints ---
SUPPLY_ENDPOINT = "/cosmos/bank/v1beta1/supply"
COMMUNITY_POOL_ENDPOINT = "/cosmos/distribution/v1beta1/community_pool"
POOL_ENDPOINT = "/cosmos/staking/v1beta1/pool"
INFLATION_ENDPOINT = "/cosmos/mint/v1beta1/inflation"
ACCOUNT_ENDPOINT = "/cosmos/auth/v1beta1/accounts/{address}"
# --- End Endpoints ---

SUPPLY_PAGE_LIMIT = 100000
MAX_SUPPLY_PAGES = 50

GRPC_NOT_FOUND = 5


@dataclass(frozen=True)
class Coin:
    denom: str
    amount: str  # integer string for Coin, decimal string for DecCoin


@dataclass(frozen=True)
class StakingPool:
    bonded_tokens: int


def _parse_decimal(endpoint, field_name, raw) -> Decimal:
    try:
        value = Decimal(raw)
    except (TypeError, ValueError, InvalidOperation):
        raise ChainQueryError(endpoint, f"malformed {field_name}: {raw!r}") from None
    if not value.is_finite():
        raise ChainQueryError(endpoint, f"malformed {field_name}: {raw!r}")
    return value


def _parse_coins(endpoint, items) -> List[Coin]:
    if not isinstance(items, list):
        raise ChainQueryError(endpoint, f"expected a list of coins, got {type(items).__name__}")
    coins = []
    for item in items:
        try:
            denom, amount = str(item["denom"]), str(item["amount"])
        except (KeyError, TypeError):
            raise ChainQueryError(endpoint, f"malformed coin entry: {item!r}") from None
        _parse_decimal(endpoint, f"{denom} amount", amount)
        coins.append(Coin(denom=denom, amount=amount))
    return coins


class ChainClient:
    """Read-only client for the node's REST (LCD) gateway."""

    def __init__(self, base_url, timeout=30, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_data(self, endpoint, params=None):
        """GETs an endpoint and returns decoded JSON, raising on any failure."""
        url = self.base_url + endpoint
        logger.debug("Fetching: %s %s", url, params or "")
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            raise NetworkError(f"{endpoint}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ChainQueryError(endpoint, str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            body = body if isinstance(body, dict) else {}
            raise ChainQueryError(endpoint, body.get("message") or response.reason or "request failed",
                                  status_code=response.status_code, code=body.get("code"))
        if not isinstance(body, dict):
            raise ChainQueryError(endpoint, "response is not a JSON object",
                                  status_code=response.status_code)
        return body

    def get_total_supply(self) -> List[Coin]:
        coins: List[Coin] = []
        params = {"pagination.limit": SUPPLY_PAGE_LIMIT}
        for _ in range(MAX_SUPPLY_PAGES):
            data = self.fetch_data(SUPPLY_ENDPOINT, params=params)
            coins.extend(_parse_coins(SUPPLY_ENDPOINT, data.get("supply", [])))
            next_key = (data.get("pagination") or {}).get("next_key")
            if not next_key:
                return coins
            params = {"pagination.limit": SUPPLY_PAGE_LIMIT, "pagination.key": next_key}
        logger.warning("Supply pagination stopped after %d pages", MAX_SUPPLY_PAGES)
        return coins

    def get_community_pool(self) -> List[Coin]:
        data = self.fetch_data(COMMUNITY_POOL_ENDPOINT)
        return _parse_coins(COMMUNITY_POOL_ENDPOINT, data.get("pool", []))

    def get_staking_pool(self) -> StakingPool:
        data = self.fetch_data(POOL_ENDPOINT)
        pool = data.get("pool")
        try:
            return StakingPool(bonded_tokens=int(pool["bonded_tokens"]))
        except (KeyError, TypeError, ValueError):
            raise ChainQueryError(POOL_ENDPOINT, f"malformed staking pool: {pool!r}") from None

    def get_inflation(self) -> Decimal:
        data = self.fetch_data(INFLATION_ENDPOINT)
        return _parse_decimal(INFLATION_ENDPOINT, "inflation", data.get("inflation"))

    def get_account(self, address):
        """Returns the account record (an Any with its @type tag)."""
        endpoint = ACCOUNT_ENDPOINT.format(address=address)
        try:
            data = self.fetch_data(endpoint)
        except ChainQueryError as e:
            if e.status_code == 404 or e.code == GRPC_NOT_FOUND:
                raise AccountNotFound(address) from e
            raise
        if "account" not in data:
            raise ChainQueryError(endpoint, "response has no account field")
        return data["account"]
