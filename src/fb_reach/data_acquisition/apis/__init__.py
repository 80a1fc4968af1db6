"""
External API clients.
"""

from .facebook_api import ReachEstimateClient, prettify_response

__all__ = ["ReachEstimateClient", "prettify_response"]
