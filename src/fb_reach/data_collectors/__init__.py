# Data Collectors Package
"""
Collectors that run reach estimate requests over many targeting specs.
"""

from .reach_collector import ReachCollector

__all__ = ["ReachCollector"]
