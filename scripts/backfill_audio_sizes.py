#!/usr/bin/env python3
"""
Backfill audio_file_size for episodes that were created without it.

Sizes are read from the Content-Length header of each episode's audio URL
using HEAD requests, with a short pause between requests.
"""

import argparse
import logging
import sys
from pathlib import Path

# Make the src package importable when run from a checkout
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import Config
from src.db.factory import create_repository
from src.services.audio_size import backfill_audio_sizes, fetch_audio_file_size

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


def main():
    parser = argparse.ArgumentParser(description="Backfill missing episode audio file sizes.")
    parser.add_argument("--env-file", help="Path to a custom .env file", default=None)
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds to wait between requests (default: BACKFILL_DELAY_SECONDS)",
    )
    args = parser.parse_args()

    config = Config(env_file=args.env_file)
    repository = create_repository(config.DATABASE_URL)
    delay = args.delay if args.delay is not None else config.BACKFILL_DELAY_SECONDS

    print("Starting audio file size backfill...")
    try:
        counts = backfill_audio_sizes(
            repository,
            delay=delay,
            fetch=lambda url: fetch_audio_file_size(url, timeout=config.HTTP_TIMEOUT_SECONDS),
        )
    except Exception as e:
        print(f"\n❌ Backfill failed: {e}")
        return 1
    finally:
        repository.close()

    print("\nBackfill complete!")
    print(f"  Success: {counts['success']}")
    print(f"  Failures: {counts['failure']}")
    print(f"  Total: {counts['total']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
