"""
Constants for the Facebook Marketing API reach estimate endpoint.
"""

# Graph API location
GRAPH_API_BASE_URL = "https://graph.facebook.com"
DEFAULT_API_VERSION = "v2.10"
REACH_ESTIMATE_EDGE = "reachestimate"

# Ad accounts are addressed as act_<numeric id>
AD_ACCOUNT_PREFIX = "act_"

# Required query parameters whose values do not affect the estimate
DEFAULT_CURRENCY = "USD"
DEFAULT_OPTIMIZE_FOR = "NONE"

# Throttling: one request every five seconds keeps clear of the rate limiter
DEFAULT_REQUESTS_PER_WINDOW = 1
DEFAULT_WINDOW_SECONDS = 5.0
THROTTLE_MODES = ("token_bucket", "fixed")

# Config file read when no path is given
DEFAULT_CONFIG_FILE = "facebook_config.yml"

# The one filter group whose entries become separate columns
GEO_LOCATIONS_KEY = "geo_locations"

# Response field holding the estimated number of matching users
USERS_FIELD = "users"
