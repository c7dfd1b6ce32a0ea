from decimal import Decimal

import pytest
import requests

from supply_stats.chain import ChainClient, Coin, StakingPool
from supply_stats.errors import AccountNotFound, ChainQueryError, NetworkError


class FakeResponse:
    def __init__(self, body, status_code=200, reason="OK"):
        self._body = body
        self.status_code = status_code
        self.reason = reason

    def json(self):
        if self._body is None:
            raise ValueError("no JSON")
        return self._body


class FakeSession:
    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, dict(params or {}), timeout))
        handler = self.routes[url]
        if callable(handler):
            return handler(params or {})
        if isinstance(handler, Exception):
            raise handler
        return handler


BASE = "http://lcd.local"


def make_client(routes):
    session = FakeSession({BASE + path: r for path, r in routes.items()})
    return ChainClient(BASE + "/", timeout=7, session=session), session


def test_total_supply_follows_pagination() -> None:
    def supply(params):
        if "pagination.key" not in params:
            return FakeResponse({"supply": [{"denom": "uatom", "amount": "1"}],
                                 "pagination": {"next_key": "AAE=", "total": "0"}})
        assert params["pagination.key"] == "AAE="
        return FakeResponse({"supply": [{"denom": "ujuno", "amount": "1000"}],
                             "pagination": {"next_key": None}})

    client, session = make_client({"/cosmos/bank/v1beta1/supply": supply})
    assert client.get_total_supply() == [Coin("uatom", "1"), Coin("ujuno", "1000")]
    assert len(session.calls) == 2
    assert session.calls[0][1]["pagination.limit"] == 100000
    assert session.calls[0][2] == 7


def test_pool_inflation_and_community_pool() -> None:
    client, _ = make_client({
        "/cosmos/staking/v1beta1/pool": FakeResponse(
            {"pool": {"bonded_tokens": "400000", "not_bonded_tokens": "12"}}),
        "/cosmos/mint/v1beta1/inflation": FakeResponse({"inflation": "0.100000000000000000"}),
        "/cosmos/distribution/v1beta1/community_pool": FakeResponse(
            {"pool": [{"denom": "ujuno", "amount": "100000.500000000000000000"}]}),
    })
    assert client.get_staking_pool() == StakingPool(bonded_tokens=400000)
    assert client.get_inflation() == Decimal("0.1")
    assert client.get_community_pool() == [Coin("ujuno", "100000.500000000000000000")]


def test_connection_failure_is_network_error() -> None:
    client, _ = make_client({
        "/cosmos/mint/v1beta1/inflation": requests.exceptions.ConnectTimeout("timed out"),
    })
    with pytest.raises(NetworkError, match="inflation"):
        client.get_inflation()


def test_error_response_is_chain_query_error() -> None:
    client, _ = make_client({
        "/cosmos/staking/v1beta1/pool": FakeResponse(
            {"code": 13, "message": "internal error", "details": []}, status_code=500),
    })
    with pytest.raises(ChainQueryError) as excinfo:
        client.get_staking_pool()
    assert excinfo.value.status_code == 500
    assert excinfo.value.code == 13
    assert "internal error" in str(excinfo.value)


def test_non_json_body_is_chain_query_error() -> None:
    client, _ = make_client({"/cosmos/mint/v1beta1/inflation": FakeResponse(None)})
    with pytest.raises(ChainQueryError):
        client.get_inflation()


@pytest.mark.parametrize("inflation", ["abc", "NaN", "Infinity", None])
def test_malformed_inflation_is_chain_query_error(inflation) -> None:
    client, _ = make_client({"/cosmos/mint/v1beta1/inflation": FakeResponse({"inflation": inflation})})
    with pytest.raises(ChainQueryError):
        client.get_inflation()


@pytest.mark.parametrize("amount", ["garbage", "NaN", "-Infinity", "", None])
def test_non_numeric_coin_amount_is_chain_query_error(amount) -> None:
    client, _ = make_client({
        "/cosmos/bank/v1beta1/supply": FakeResponse(
            {"supply": [{"denom": "ujuno", "amount": amount}], "pagination": {"next_key": None}}),
        "/cosmos/distribution/v1beta1/community_pool": FakeResponse(
            {"pool": [{"denom": "ujuno", "amount": amount}]}),
    })
    with pytest.raises(ChainQueryError, match="ujuno amount"):
        client.get_total_supply()
    with pytest.raises(ChainQueryError, match="community_pool"):
        client.get_community_pool()


def test_get_account_returns_the_any_record() -> None:
    record = {"@type": "/cosmos.auth.v1beta1.BaseAccount", "address": "juno1abc"}
    client, _ = make_client({
        "/cosmos/auth/v1beta1/accounts/juno1abc": FakeResponse({"account": record}),
    })
    assert client.get_account("juno1abc") == record


@pytest.mark.parametrize("response", [
    FakeResponse({"code": 5, "message": "account juno1abc not found"}, status_code=404),
    FakeResponse({"code": 5, "message": "rpc error: code = NotFound"}, status_code=500),
])
def test_missing_account_is_account_not_found(response) -> None:
    client, _ = make_client({"/cosmos/auth/v1beta1/accounts/juno1abc": response})
    with pytest.raises(AccountNotFound) as excinfo:
        client.get_account("juno1abc")
    assert excinfo.value.address == "juno1abc"
