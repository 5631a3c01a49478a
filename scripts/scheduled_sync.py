#!/usr/bin/env python3
"""
Scheduled synchronization script for recordsync.

This script performs one end-to-end replication run:
- Delivers every source record to the target in pages
- Polls the synced records for changes a fixed number of times
- Logs synchronization statistics

Both stores are in memory, so the source is seeded from a YAML or JSON list
of records. Designed to be run on a schedule (e.g., via cron or Airflow).

Usage:
    python scripts/scheduled_sync.py [--config CONFIG_PATH] [--seed SEED_FILE]
        [--page-size N] [--poll-rounds N] [--no-paging]
"""

import argparse
import sys
from datetime import datetime

import structlog
import yaml

from recordsync.storage.record_store import InMemoryRecordStore, RecordStoreInterface
from recordsync.sync.sync_coordinator import SyncCoordinator
from recordsync.utils.config_loader import ConfigLoader
from recordsync.utils.logging_config import configure_logging_from_config

log = structlog.stdlib.get_logger()


def load_seed_records(source_store: RecordStoreInterface, seed_path: str) -> int:
    """
    Insert records from a YAML or JSON file into the source store.

    Args:
        source_store: Store to seed
        seed_path: File holding a list of record payloads

    Returns:
        Number of records inserted

    Raises:
        ValueError: If the file does not hold a list of mappings
    """
    with open(seed_path, "r") as f:
        # JSON is a subset of YAML, so one loader covers both formats
        payloads = yaml.safe_load(f) or []

    if not isinstance(payloads, list) or not all(isinstance(p, dict) for p in payloads):
        raise ValueError(f"Seed file must contain a list of mappings: {seed_path}")

    for payload in payloads:
        source_store.insert(payload)

    log.info("source_store_seeded", seed_path=seed_path, record_count=len(payloads))
    return len(payloads)


def perform_sync(
    config_path: str | None = None,
    seed_path: str | None = None,
    page_size: int | None = None,
    poll_rounds: int | None = None,
    no_paging: bool = False,
) -> dict:
    """
    Perform one synchronization run.

    Args:
        config_path: Optional path to configuration file
        seed_path: Optional file of records to load into the source store
        page_size: Override for the configured page size
        poll_rounds: Override for the configured number of poll rounds
        no_paging: If True, deliver the whole source as one batch and skip polling

    Returns:
        Dictionary with sync statistics
    """
    start_time = datetime.now()

    try:
        config_loader = ConfigLoader()
        config = config_loader.load_config(config_path)
        configure_logging_from_config(config.logging)
        config_loader.validate_config(config)

        log.info(
            "Starting synchronization",
            sync_type="no_paging" if no_paging else "paged",
            timestamp=start_time.isoformat(),
        )

        source_store = InMemoryRecordStore(name="source")
        target_store = InMemoryRecordStore(name="target")

        if seed_path:
            load_seed_records(source_store, seed_path)

        coordinator = SyncCoordinator(source_store, target_store, sync_config=config.sync)

        if no_paging:
            cursor = coordinator.sync_all_no_paging()
        else:
            cursor = coordinator.run(page_size=page_size, poll_rounds=poll_rounds)

        end_time = datetime.now()
        duration = (end_time - start_time).total_seconds()

        stats = {
            "success": True,
            "sync_type": "no_paging" if no_paging else "paged",
            "pages": cursor.page_index,
            "records_synced": len(cursor.seen),
            "deliveries": coordinator.counter.count,
            "target_records": target_store.count(),
            "start_time": start_time.isoformat(),
            "end_time": end_time.isoformat(),
            "duration_seconds": duration,
        }

        log.info("Synchronization completed successfully", **stats)

        return stats

    except Exception as e:
        end_time = datetime.now()
        duration = (end_time - start_time).total_seconds()

        log.error(
            "Synchronization failed",
            error=str(e),
            duration_seconds=duration,
        )

        return {
            "success": False,
            "error": str(e),
            "start_time": start_time.isoformat(),
            "end_time": end_time.isoformat(),
            "duration_seconds": duration,
        }


def main():
    """Main entry point for scheduled sync script."""
    parser = argparse.ArgumentParser(description="Scheduled synchronization for recordsync")
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "--seed",
        type=str,
        help="YAML or JSON file with records to load into the source store",
        default=None,
    )
    parser.add_argument(
        "--page-size",
        type=int,
        help="Records per page (overrides configuration)",
        default=None,
    )
    parser.add_argument(
        "--poll-rounds",
        type=int,
        help="Number of change polling rounds (overrides configuration)",
        default=None,
    )
    parser.add_argument(
        "--no-paging",
        action="store_true",
        help="Deliver the whole source store as one batch and skip polling",
    )

    args = parser.parse_args()

    stats = perform_sync(
        config_path=args.config,
        seed_path=args.seed,
        page_size=args.page_size,
        poll_rounds=args.poll_rounds,
        no_paging=args.no_paging,
    )

    print("\n" + "=" * 60)
    print("SYNCHRONIZATION SUMMARY")
    print("=" * 60)

    if stats.get("success"):
        print("Status: ✓ SUCCESS")
        print(f"Sync Type: {stats.get('sync_type', 'unknown')}")
        print(f"Pages: {stats.get('pages', 0)}")
        print(f"Records Synced: {stats.get('records_synced', 0)}")
        print(f"Deliveries: {stats.get('deliveries', 0)}")
        print(f"Target Records: {stats.get('target_records', 0)}")
        print(f"Duration: {stats.get('duration_seconds', 0):.2f} seconds")
    else:
        print("Status: ✗ FAILED")
        print(f"Error: {stats.get('error', 'Unknown error')}")
        print(f"Duration: {stats.get('duration_seconds', 0):.2f} seconds")

    print("=" * 60)

    sys.exit(0 if stats.get("success") else 1)


if __name__ == "__main__":
    main()
