# supply_stats/__main__.py
import logging
import sys

from .api import create_app
from .builder import SnapshotBuilder
from .chain import ChainClient
from .config import load_settings
from .errors import ConfigError, PersistenceError
from .scheduler import RefreshScheduler
from .snapshot import SnapshotStore

logger = logging.getLogger("supply_stats")


def build_service(settings):
    """Wires store, builder and scheduler together; nothing is started yet."""
    store = SnapshotStore(settings.supply_file)
    client = ChainClient(settings.rest_api_endpoint, timeout=settings.request_timeout)
    builder = SnapshotBuilder(client, store, settings.denom, settings.vesting_accounts)
    scheduler = RefreshScheduler(builder, settings.interval_seconds)
    return store, scheduler


def main():
    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    store, scheduler = build_service(settings)
    try:
        store.load_persisted_circulating_supply()
    except PersistenceError as e:
        logger.warning("Ignoring persisted circulating supply: %s", e)

    logger.info("Tracking %s with %d vesting accounts", settings.denom, len(settings.vesting_accounts))
    scheduler.start()

    app = create_app(store, settings)
    try:
        logger.info("Listening at http://0.0.0.0:%d", settings.port)
        app.run(host="0.0.0.0", port=settings.port)
    finally:
        scheduler.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
