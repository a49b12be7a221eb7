"""
FishFish API client layer.

Provides async HTTP communication with the FishFish API.
"""

from fishfish.api.http_client import AsyncHttpClient, sanitize_for_log, validate_response

__all__ = ["AsyncHttpClient", "sanitize_for_log", "validate_response"]
