"""
Page fetching for the command line and web front ends.
"""

from .http_client import PageFetcher

__all__ = ["PageFetcher"]
