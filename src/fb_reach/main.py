#!/usr/bin/env python3
"""
Reach Estimate CLI

Requests reach estimates from the Facebook Marketing API for a set of
targeting specs and prints them as one table.

Examples:
    fb-reach estimate targeting_spec_01.json targeting_spec_02.json
    fb-reach countries US GB FR --base women_25_55.json
    fb-reach --csv states.csv states Washington Oregon
"""

import argparse
import logging
import sys
from typing import List, Optional

import requests

from fb_reach.config.settings import Settings, load_settings
from fb_reach.data_acquisition.apis.facebook_api import ReachEstimateClient
from fb_reach.data_acquisition.rate_limiter import build_rate_limiter
from fb_reach.data_acquisition.targeting_specs import (
    TargetingSpec,
    country_specs,
    load_region_keys,
    load_targeting_spec,
    load_targeting_specs,
    region_specs,
)
from fb_reach.data_collectors.reach_collector import ReachCollector
from fb_reach.errors import (
    ReachEstimateError,
    TargetingSpecError,
    redact_access_token,
)
from fb_reach.visualization.data_exporter import DataExporter, format_table

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fb-reach",
        description="Collect Facebook reach estimates for targeting specs",
    )
    parser.add_argument(
        "--config",
        help="YAML file with access_token and ad_account_id "
        "(default: facebook_config.yml)",
    )
    parser.add_argument(
        "--raw", action="store_true", help="Print each raw API response"
    )
    parser.add_argument("--csv", help="Write the table to this CSV file")
    parser.add_argument("--json", help="Write the table to this JSON file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from settings, INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    estimate = subparsers.add_parser(
        "estimate", help="Estimate reach for targeting spec files"
    )
    estimate.add_argument("specs", nargs="+", help="Targeting spec JSON files")

    countries = subparsers.add_parser(
        "countries", help="Estimate reach for each country in turn"
    )
    countries.add_argument(
        "countries", nargs="+", help="Two-letter country codes, e.g. US GB"
    )
    countries.add_argument(
        "--base", help="Spec file whose other filters apply to every country"
    )

    states = subparsers.add_parser(
        "states", help="Estimate reach for each region (US states by default)"
    )
    states.add_argument(
        "names", nargs="*", help="Region names to include (default: all)"
    )
    states.add_argument(
        "--base", help="Spec file whose other filters apply to every region"
    )
    states.add_argument(
        "--keys", help="JSON file mapping region names to region keys"
    )

    return parser


def select_specs(args: argparse.Namespace) -> List[TargetingSpec]:
    """Targeting specs for the chosen subcommand."""
    if args.command == "estimate":
        return load_targeting_specs(args.specs)

    base = load_targeting_spec(args.base) if args.base else None
    if args.command == "countries":
        return country_specs([code.upper() for code in args.countries], base=base)

    region_keys = load_region_keys(args.keys)
    if args.names:
        unknown = [name for name in args.names if name not in region_keys]
        if unknown:
            raise TargetingSpecError(f"Unknown regions: {', '.join(unknown)}")
        region_keys = {name: region_keys[name] for name in args.names}
    return region_specs(region_keys, base=base)


def build_client(settings: Settings) -> ReachEstimateClient:
    return ReachEstimateClient(
        settings.facebook,
        rate_limiter=build_rate_limiter(settings.throttle),
        timeout=settings.app.request_timeout,
    )


def run(args: argparse.Namespace, settings: Settings) -> int:
    if not args.log_level:
        logging.getLogger().setLevel(settings.app.log_level)

    specs = select_specs(args)
    logger.info(f"Collecting reach estimates for {len(specs)} targeting specs")

    with build_client(settings) as client:
        table = ReachCollector(client, show_raw=args.raw).collect(specs)

    print(format_table(table))

    exporter = DataExporter()
    if args.csv:
        exporter.export_to_csv(table, args.csv)
    if args.json:
        exporter.export_to_json(table, args.json)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function"""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level or logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    settings = None
    try:
        settings = load_settings(args.config)
        return run(args, settings)
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130
    except (ReachEstimateError, requests.RequestException, OSError) as e:
        # Transport errors quote the request URL, token included
        access_token = settings.facebook.access_token if settings else None
        logger.error(
            f"Reach estimate collection failed: {redact_access_token(str(e), access_token)}"
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
