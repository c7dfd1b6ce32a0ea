# supply_stats/builder.py
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from decimal import Decimal, localcontext
from typing import Iterable, Optional, Sequence, Tuple

from .chain import Coin
from .errors import AccountNotFound, PersistenceError, StatsError
from .snapshot import SnapshotStore, SupplySnapshot
from .vesting import decode_account

logger = logging.getLogger(__name__)


def select_amount(coins: Iterable[Coin], denom: str) -> int:
    """Integer amount of `denom` in a coin list; DecCoin fractions are truncated."""
    for coin in coins:
        if coin.denom == denom:
            return int(Decimal(coin.amount))
    return 0


def staking_ratios(total_staked: int, total_supply: int,
                   inflation: Decimal) -> Tuple[Optional[float], Optional[float]]:
    """Returns (bonded_ratio, apr); either is None when it can't be computed."""
    if total_supply <= 0:
        return None, None
    with localcontext() as ctx:
        ctx.prec = 50
        bonded_ratio = Decimal(total_staked) / Decimal(total_supply)
        if bonded_ratio == 0:
            return 0.0, None
        return float(bonded_ratio), float(inflation / bonded_ratio)


class SnapshotBuilder:
    """Runs one refresh cycle: query the chain, derive the metrics, publish.

    Any chain or decode error aborts the cycle and is re-raised; the store is
    only touched once every value has been computed. A failed write of the
    persisted supply is logged and does not fail the cycle.
    """

    def __init__(self, client, store: SnapshotStore, denom: str,
                 vesting_accounts: Sequence[str] = (), now=None):
        self.client = client
        self.store = store
        self.denom = denom
        self.vesting_accounts = tuple(vesting_accounts)
        self._now = now or (lambda: datetime.now(timezone.utc))

    def _fetch_chain_state(self):
        with ThreadPoolExecutor(max_workers=4, thread_name_prefix="chain-query") as pool:
            supply = pool.submit(self.client.get_total_supply)
            community_pool = pool.submit(self.client.get_community_pool)
            staking_pool = pool.submit(self.client.get_staking_pool)
            inflation = pool.submit(self.client.get_inflation)
            return supply.result(), community_pool.result(), staking_pool.result(), inflation.result()

    def locked_vesting_amount(self, address: str) -> int:
        try:
            record = self.client.get_account(address)
        except AccountNotFound:
            logger.info("Vesting account %s has no account record, skipping", address)
            return 0
        account = decode_account(record, address=address)
        if account is None:
            logger.info("Account %s is not a vesting account, skipping", address)
            return 0
        locked = account.locked_amount(self.denom)
        logger.debug("%s (%s, ends %d): locked %d %s",
                     address, account.kind.value, account.end_time, locked, self.denom)
        return locked

    def refresh(self) -> SupplySnapshot:
        try:
            seed = self.store.load_persisted_circulating_supply()
            if seed is not None:
                logger.info("Loaded circulating supply: %d", seed)
        except PersistenceError as e:
            logger.warning("Could not load persisted circulating supply: %s", e)

        logger.info("Updating supply info")
        supply, community_pool, staking_pool, inflation = self._fetch_chain_state()

        total_supply = select_amount(supply, self.denom)
        community_pool_amount = select_amount(community_pool, self.denom)
        total_staked = staking_pool.bonded_tokens
        bonded_ratio, apr = staking_ratios(total_staked, total_supply, inflation)
        logger.info("Total supply: %d, community pool: %d, total staked: %d",
                    total_supply, community_pool_amount, total_staked)
        logger.info("Bonded ratio: %s, APR: %s", bonded_ratio, apr)

        circulating_supply = total_supply - community_pool_amount
        count = len(self.vesting_accounts)
        for i, address in enumerate(self.vesting_accounts, start=1):
            try:
                circulating_supply -= self.locked_vesting_amount(address)
            except StatsError:
                logger.error("Vesting account %s failed (%d/%d)", address, i, count)
                raise
            logger.info("Vesting accounts processed: %d/%d", i, count)

        snapshot = SupplySnapshot(
            total_supply=total_supply,
            community_pool_amount=community_pool_amount,
            circulating_supply=circulating_supply,
            total_staked=total_staked,
            bonded_ratio=bonded_ratio,
            apr=apr,
            denom=self.denom,
            computed_at=self._now(),
        )
        self.store.replace(snapshot)
        logger.info("Circulating supply: %d", circulating_supply)

        try:
            self.store.persist_circulating_supply(circulating_supply)
            logger.info("Circulating supply saved")
        except PersistenceError as e:
            logger.warning("Circulating supply not saved: %s", e)
        return snapshot
