# scripts/calculate_stats.py
"""Runs one supply refresh against the configured chain and writes it as JSON."""
import argparse
import json
import logging
import os
import sys
from datetime import datetime, timezone

from supply_stats.builder import SnapshotBuilder
from supply_stats.chain import ChainClient
from supply_stats.config import load_settings
from supply_stats.errors import ConfigError, StatsError
from supply_stats.snapshot import SnapshotStore, format_amount

# --- Configuration ---
# Output file path (relative to repository root)
OUTPUT_FILE = "public/data/supply_stats.json"
# --- End Configuration ---

logger = logging.getLogger("calculate_stats")


def stats_from_snapshot(snapshot, decimals):
    return {
        "apr": snapshot.apr,
        "bonded_ratio": snapshot.bonded_ratio,
        "circulating_supply": format_amount(snapshot.circulating_supply, decimals),
        "community_pool": format_amount(snapshot.community_pool_amount, decimals),
        "total_staked": format_amount(snapshot.total_staked, decimals),
        "total_supply": format_amount(snapshot.total_supply, decimals),
        "denom": snapshot.denom,
    }


def save_stats_to_file(stats_data, output_file=OUTPUT_FILE):
    """Saves the stats to a JSON file. Returns False when nothing changed."""
    output_dir = os.path.dirname(output_file)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    # Compare against the existing file, ignoring the timestamp, so unchanged
    # data doesn't produce a new write.
    try:
        with open(output_file, "r") as f:
            existing_data = json.load(f)
        if all(existing_data.get(k) == v for k, v in stats_data.items()):
            logger.info("Data unchanged. Skipping write to %s.", output_file)
            return False
    except (FileNotFoundError, json.JSONDecodeError):
        logger.info("No existing data file found or file is invalid. Writing new file.")

    stats_data = dict(stats_data, last_updated_utc=datetime.now(timezone.utc).isoformat())
    with open(output_file, "w") as f:
        json.dump(stats_data, f, indent=2)
    logger.info("Saved stats to %s", output_file)
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--output", default=OUTPUT_FILE, help="Where to write the JSON stats.")
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as e:
        parser.error(str(e))
    logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(levelname)s - %(message)s")

    store = SnapshotStore(settings.supply_file)
    client = ChainClient(settings.rest_api_endpoint, timeout=settings.request_timeout)
    builder = SnapshotBuilder(client, store, settings.denom, settings.vesting_accounts)
    try:
        snapshot = builder.refresh()
    except StatsError as e:
        logger.error("Refresh failed: %s", e)
        return 1

    save_stats_to_file(stats_from_snapshot(snapshot, settings.display_decimals), args.output)
    return 0


# --- Main Execution ---
if __name__ == "__main__":
    sys.exit(main())
