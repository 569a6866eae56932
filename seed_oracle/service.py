from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .config import OracleSettings, load_config
from .lottery_client import LotteryClient
from .scheduler import OracleScheduler
from .seedsource import HttpBeaconSeedSource, HttpBeaconSeedSourceConfig


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )


def build_seedsource(settings: OracleSettings) -> HttpBeaconSeedSource:
    source_settings = settings.seedsource
    if not source_settings.url:
        raise RuntimeError("SEEDSOURCE__URL is not configured.")
    return HttpBeaconSeedSource(
        HttpBeaconSeedSourceConfig(
            url=source_settings.url,
            round_key=source_settings.round_key,
            randomness_key=source_settings.randomness_key,
            timeout_seconds=source_settings.timeout_seconds,
        )
    )


async def run(args: argparse.Namespace) -> Optional[int]:
    settings = load_config(args.env_file)
    configure_logging(args.verbose)
    logger = logging.getLogger("roundlottery.oracle")

    seedsource = build_seedsource(settings)
    client = LotteryClient(settings)
    scheduler = OracleScheduler(settings, seedsource, client, logger=logger)

    if args.once:
        result = await scheduler.run_once()
        if result:
            logger.info("Oracle drew round=%s seed=%s", result.round_id, result.seed)
            return result.round_id
        return None

    await scheduler.run_forever()
    return None


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="roundlottery seed oracle")
    parser.add_argument("--env-file", type=str, default=None, help="Path to .env file with settings")
    parser.add_argument("--once", action="store_true", help="Run only once and exit.")
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging (default INFO)."
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        print("Seed oracle stopped by user.")


if __name__ == "__main__":
    main()
