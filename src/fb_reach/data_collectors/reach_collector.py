# Reach Estimate Collector
"""
Collects reach estimates for a series of targeting specs into one table.

Specs are requested one after another; each is throttled, requested and
processed before the next begins. A failure stops the collection.
"""

import logging
from datetime import datetime
from typing import Iterable, List

import pandas as pd

from fb_reach.data_acquisition.apis.facebook_api import (
    ReachEstimateClient,
    prettify_response,
)
from fb_reach.data_acquisition.targeting_specs import SpecLike, as_targeting_spec
from fb_reach.processing.data_formatters.facebook_formatter import (
    ResultRow,
    combine_rows,
    process_reach_response,
)

logger = logging.getLogger(__name__)


class ReachCollector:
    """Sequential reach estimate collector."""

    def __init__(self, client: ReachEstimateClient, show_raw: bool = False):
        """
        Initialize the collector.

        Args:
            client: Client used for every request
            show_raw: Print each raw response as indented JSON
        """
        self.client = client
        self.show_raw = show_raw

    def collect_rows(self, specs: Iterable[SpecLike]) -> List[ResultRow]:
        """Request and process every spec, in order."""
        targeting_specs = [as_targeting_spec(spec) for spec in specs]
        total = len(targeting_specs)
        rows = []

        for index, spec in enumerate(targeting_specs, start=1):
            label = spec.source or spec.minified
            logger.info(f"[{index}/{total}] Collecting reach estimate for {label}")

            response = self.client.request(spec)
            if self.show_raw:
                print(prettify_response(response))

            row = process_reach_response(spec, response)
            logger.info(f"[{index}/{total}] {label}: {row.users:,} users")
            rows.append(row)

        return rows

    def collect(self, specs: Iterable[SpecLike]) -> pd.DataFrame:
        """Collect reach estimates and combine them into one table."""
        start_time = datetime.now()
        logger.info("📊 Starting reach estimate collection")

        rows = self.collect_rows(specs)
        table = combine_rows(rows)

        duration = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"✅ Reach estimate collection completed: {len(rows)} rows in {duration:.1f}s"
        )
        return table
