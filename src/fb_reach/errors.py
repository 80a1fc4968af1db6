"""
Exception types raised by the reach estimate client and formatters.
"""

import re
from typing import Dict, Optional

# Graph API error codes that signal throttling rather than a bad request
RATE_LIMIT_ERROR_CODES = frozenset({4, 17, 32, 613, 80004})

_ACCESS_TOKEN_PARAM_RE = re.compile(r"(access_token=)[^&\s'\"]+")


class ReachEstimateError(Exception):
    """Base class for all fb_reach errors."""


class ConfigurationError(ReachEstimateError):
    """Raised when credentials or settings are missing or invalid."""


class TargetingSpecError(ReachEstimateError, ValueError):
    """Raised when a targeting spec is not valid JSON or not a JSON object."""


class MalformedResponseError(ReachEstimateError, ValueError):
    """Raised when a response body cannot be decoded as JSON."""


class MissingEstimateError(ReachEstimateError, LookupError):
    """
    Raised when a response carries no ``data.users`` estimate.

    This is what an API-level failure (bad spec, auth failure, throttling)
    looks like to the formatter: an ``error`` object in place of ``data``.
    """

    def __init__(
        self,
        message: str,
        api_error: Optional[Dict] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.api_error = api_error or {}
        self.status_code = status_code

    @property
    def error_code(self) -> Optional[int]:
        return self.api_error.get("code")

    @property
    def rate_limited(self) -> bool:
        """True when the API rejected the call for exceeding its rate limit."""
        return self.error_code in RATE_LIMIT_ERROR_CODES


class ExportError(ReachEstimateError):
    """Raised when a table cannot be written to disk."""


def redact_access_token(text: str, access_token: Optional[str] = None) -> str:
    """Mask access tokens in a message, e.g. one quoting a request URL."""
    redacted = _ACCESS_TOKEN_PARAM_RE.sub(r"\1***", str(text))
    if access_token:
        redacted = redacted.replace(access_token, "***")
    return redacted
