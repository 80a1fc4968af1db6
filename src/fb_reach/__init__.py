"""
fb_reach: demographic reach estimates from the Facebook Marketing API.

Request an estimate per targeting spec and assemble the results into a table:

    settings = load_settings("facebook_config.yml")
    with ReachEstimateClient(settings.facebook) as client:
        table = ReachCollector(client).collect(
            [bundled_spec("targeting_spec_01"), bundled_spec("targeting_spec_02")]
        )
"""

from fb_reach.config.settings import FacebookConfig, Settings, load_settings
from fb_reach.data_acquisition.apis.facebook_api import (
    ReachEstimateClient,
    prettify_response,
)
from fb_reach.data_acquisition.rate_limiter import (
    FixedDelayRateLimiter,
    RateLimiter,
    TokenBucketRateLimiter,
)
from fb_reach.data_acquisition.targeting_specs import (
    TargetingSpec,
    build_targeting_spec,
    bundled_spec,
    country_specs,
    load_region_keys,
    load_targeting_spec,
    region_specs,
)
from fb_reach.data_collectors.reach_collector import ReachCollector
from fb_reach.errors import (
    ConfigurationError,
    MalformedResponseError,
    MissingEstimateError,
    ReachEstimateError,
    TargetingSpecError,
)
from fb_reach.processing.data_formatters.facebook_formatter import (
    ResultRow,
    Scalar,
    ValueList,
    combine_rows,
    process_reach_response,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "FacebookConfig",
    "FixedDelayRateLimiter",
    "MalformedResponseError",
    "MissingEstimateError",
    "RateLimiter",
    "ReachCollector",
    "ReachEstimateClient",
    "ReachEstimateError",
    "ResultRow",
    "Scalar",
    "Settings",
    "TargetingSpec",
    "TargetingSpecError",
    "TokenBucketRateLimiter",
    "ValueList",
    "build_targeting_spec",
    "bundled_spec",
    "combine_rows",
    "country_specs",
    "load_region_keys",
    "load_settings",
    "load_targeting_spec",
    "prettify_response",
    "process_reach_response",
    "region_specs",
]
