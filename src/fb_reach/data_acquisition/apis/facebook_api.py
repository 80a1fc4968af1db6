"""
Facebook Marketing API client for reach estimates.
"""

import json
import logging
from typing import Dict, Optional

import requests

from fb_reach.config.constants import DEFAULT_CURRENCY, DEFAULT_OPTIMIZE_FOR
from fb_reach.config.settings import FacebookConfig, ThrottleConfig
from fb_reach.data_acquisition.rate_limiter import RateLimiter, build_rate_limiter
from fb_reach.data_acquisition.targeting_specs import SpecLike, as_targeting_spec
from fb_reach.processing.data_formatters.facebook_formatter import (
    ResultRow,
    parse_response_body,
    process_reach_response,
)

logger = logging.getLogger(__name__)


class ReachEstimateClient:
    """Client for the ad account ``reachestimate`` edge of the Graph API."""

    def __init__(
        self,
        config: FacebookConfig,
        rate_limiter: Optional[RateLimiter] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.config = config
        self.rate_limiter = rate_limiter or build_rate_limiter(ThrottleConfig())
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    @property
    def reach_estimate_url(self) -> str:
        return self.config.reach_estimate_url

    def build_query(self, spec: SpecLike) -> Dict[str, str]:
        """Query parameters for one reach estimate request."""
        targeting_spec = as_targeting_spec(spec)
        return {
            "access_token": self.config.access_token,
            "currency": DEFAULT_CURRENCY,
            "optimize_for": DEFAULT_OPTIMIZE_FOR,
            "targeting_spec": targeting_spec.minified,
        }

    def request(self, spec: SpecLike) -> requests.Response:
        """
        Request a reach estimate for one targeting spec.

        Waits on the rate limiter, then issues a single GET. The response is
        returned as-is; transport errors propagate to the caller.

        Args:
            spec: TargetingSpec, JSON text, or a mapping

        Returns:
            The raw requests.Response
        """
        # Builds (and validates) the query before waiting or sending anything
        query = self.build_query(spec)

        waited = self.rate_limiter.acquire()
        if waited:
            logger.debug(f"Waited {waited:.2f}s before requesting reach estimate")

        logger.info(
            f"Requesting reach estimate from {self.reach_estimate_url} "
            f"for {query['targeting_spec']}"
        )
        response = self.session.get(
            self.reach_estimate_url, params=query, timeout=self.timeout
        )
        logger.debug(f"Reach estimate response status: {response.status_code}")
        return response

    def fetch_estimate(self, spec: SpecLike) -> ResultRow:
        """Request an estimate and process it into a single result row."""
        targeting_spec = as_targeting_spec(spec)
        response = self.request(targeting_spec)
        return process_reach_response(targeting_spec, response)

    def close(self):
        """Close the session if this client created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def prettify_response(response: requests.Response) -> str:
    """Response body as indented JSON, for reading raw API output."""
    return json.dumps(parse_response_body(response), indent=2)
