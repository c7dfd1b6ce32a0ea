from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Make the repo root importable (supply_stats/ and scripts/) without installing.
ROOT = Path(__file__).resolve().parents[1]

root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from supply_stats.chain import Coin, StakingPool  # noqa: E402
from supply_stats.errors import AccountNotFound  # noqa: E402


def periodic_account(address, original, delegated_free=None, denom="ujuno"):
    return {
        "@type": "/cosmos.vesting.v1beta1.PeriodicVestingAccount",
        "base_vesting_account": {
            "base_account": {"address": address, "account_number": "7", "sequence": "0"},
            "original_vesting": [{"denom": denom, "amount": str(original)}],
            "delegated_free": [{"denom": denom, "amount": str(delegated_free)}] if delegated_free else [],
            "delegated_vesting": [],
            "end_time": "1700000000",
        },
        "start_time": "1600000000",
        "vesting_periods": [],
    }


class FakeChain:
    """In-memory stand-in for ChainClient."""

    def __init__(self, supply=1_000_000, community_pool="100000.250000000000000000",
                 bonded=400_000, inflation="0.100000000000000000", accounts=None, denom="ujuno"):
        self.supply = [Coin("uother", "5"), Coin(denom, str(supply))]
        self.community_pool = [Coin(denom, community_pool)]
        self.pool = StakingPool(bonded_tokens=bonded)
        self.inflation = Decimal(inflation)
        self.accounts = accounts or {}
        self.fail = {}
        self.account_calls = []

    def _maybe_fail(self, name):
        if name in self.fail:
            raise self.fail[name]

    def get_total_supply(self):
        self._maybe_fail("supply")
        return list(self.supply)

    def get_community_pool(self):
        self._maybe_fail("community_pool")
        return list(self.community_pool)

    def get_staking_pool(self):
        self._maybe_fail("pool")
        return self.pool

    def get_inflation(self):
        self._maybe_fail("inflation")
        return self.inflation

    def get_account(self, address):
        self.account_calls.append(address)
        self._maybe_fail("account")
        if address not in self.accounts:
            raise AccountNotFound(address)
        return self.accounts[address]


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()
