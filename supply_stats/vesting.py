# supply_stats/vesting.py
"""Decodes auth account records into vesting accounts.

The auth module returns accounts as a ``google.protobuf.Any`` in JSON form:
an ``@type`` URL plus the variant's fields. Every vesting variant embeds the
same ``base_vesting_account`` payload, which carries the two amounts needed
for the locked balance:

- ``original_vesting``: everything the schedule will ever release
- ``delegated_free``: the part that has already unlocked and been delegated

Only the variants listed in ``VESTING_TYPES`` are treated as vesting; any other
``@type`` is a plain account and decodes to ``None``.
"""
import enum
from dataclasses import dataclass
from typing import Optional, Tuple

from .chain import Coin
from .errors import DecodeError


class VestingKind(enum.Enum):
    CONTINUOUS = "continuous"
    DELAYED = "delayed"
    PERIODIC = "periodic"
    PERMANENT_LOCKED = "permanent_locked"


VESTING_TYPES = {
    "/cosmos.vesting.v1beta1.ContinuousVestingAccount": VestingKind.CONTINUOUS,
    "/cosmos.vesting.v1beta1.DelayedVestingAccount": VestingKind.DELAYED,
    "/cosmos.vesting.v1beta1.PeriodicVestingAccount": VestingKind.PERIODIC,
    "/cosmos.vesting.v1beta1.PermanentLockedAccount": VestingKind.PERMANENT_LOCKED,
}


@dataclass(frozen=True)
class VestingAccount:
    kind: VestingKind
    address: str
    original_vesting: Tuple[Coin, ...]
    delegated_free: Tuple[Coin, ...]
    end_time: int = 0

    def locked_amount(self, denom: str) -> int:
        """original_vesting - delegated_free for `denom`, never below zero."""
        original = sum(int(c.amount) for c in self.original_vesting if c.denom == denom)
        free = sum(int(c.amount) for c in self.delegated_free if c.denom == denom)
        return max(0, original - free)


def _decode_coins(items, field_name, address) -> Tuple[Coin, ...]:
    if items is None:
        return ()
    if not isinstance(items, list):
        raise DecodeError(f"{field_name} is not a list", address=address)
    coins = []
    for item in items:
        try:
            denom = item["denom"]
            amount = str(item["amount"])
            int(amount)
        except (KeyError, TypeError, ValueError):
            raise DecodeError(f"malformed coin in {field_name}: {item!r}", address=address) from None
        coins.append(Coin(denom=denom, amount=amount))
    return tuple(coins)


def decode_account(record, address=None) -> Optional[VestingAccount]:
    """Returns a VestingAccount, or None when the record is not a vesting account."""
    if record is None:
        return None
    if not isinstance(record, dict) or "@type" not in record:
        raise DecodeError("account record has no @type", address=address)

    kind = VESTING_TYPES.get(record["@type"])
    if kind is None:
        return None

    base = record.get("base_vesting_account")
    if not isinstance(base, dict):
        raise DecodeError(f"{record['@type']} without base_vesting_account", address=address)

    base_account = base.get("base_account") or {}
    if not isinstance(base_account, dict):
        raise DecodeError(f"base_account is not an object: {base_account!r}", address=address)
    address = base_account.get("address") or address or ""
    try:
        end_time = int(base.get("end_time") or 0)
    except (TypeError, ValueError):
        raise DecodeError(f"bad end_time {base.get('end_time')!r}", address=address) from None

    return VestingAccount(
        kind=kind,
        address=address,
        original_vesting=_decode_coins(base.get("original_vesting"), "original_vesting", address),
        delegated_free=_decode_coins(base.get("delegated_free"), "delegated_free", address),
        end_time=end_time,
    )
