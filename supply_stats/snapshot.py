# supply_stats/snapshot.py
import os
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from .errors import PersistenceError


@dataclass(frozen=True)
class SupplySnapshot:
    """One consistent set of derived metrics. Amounts are in the base denom."""
    total_supply: int
    community_pool_amount: int
    circulating_supply: int
    total_staked: int
    bonded_ratio: Optional[float]  # None when total supply is zero
    apr: Optional[float]  # None when the bonded ratio is zero or undefined
    denom: str
    computed_at: datetime


def format_amount(amount: int, decimals: int = 6) -> str:
    """Scales a base-denom integer to display units, e.g. 1500000 -> '1.5'."""
    value = Decimal(int(amount)).scaleb(-decimals)
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class SnapshotStore:
    """Holds the live snapshot and the persisted circulating supply.

    Readers call current() from any thread. replace() swaps the reference under
    a lock, so a reader sees either the previous snapshot or the new one.
    """

    def __init__(self, supply_file: Optional[str] = None):
        self.supply_file = supply_file
        self._lock = threading.Lock()
        self._snapshot: Optional[SupplySnapshot] = None
        self._seed: Optional[int] = None

    def current(self) -> Optional[SupplySnapshot]:
        with self._lock:
            return self._snapshot

    def replace(self, snapshot: SupplySnapshot) -> None:
        with self._lock:
            self._snapshot = snapshot

    def circulating_supply(self) -> Optional[int]:
        """Latest computed value, else the value persisted by a previous run."""
        with self._lock:
            if self._snapshot is not None:
                return self._snapshot.circulating_supply
            return self._seed

    def load_persisted_circulating_supply(self) -> Optional[int]:
        if not self.supply_file:
            return None
        try:
            with open(self.supply_file, "r") as f:
                raw = f.read().strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(f"reading {self.supply_file}: {e}") from e

        if not raw:
            return None
        try:
            value = int(Decimal(raw))
        except InvalidOperation:
            raise PersistenceError(f"{self.supply_file} holds {raw!r}, not a number") from None

        with self._lock:
            self._seed = value
        return value

    def persist_circulating_supply(self, value: int) -> None:
        if not self.supply_file:
            return
        directory = os.path.dirname(os.path.abspath(self.supply_file))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".supply-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(str(int(value)))
                os.replace(tmp_path, self.supply_file)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise PersistenceError(f"writing {self.supply_file}: {e}") from e
