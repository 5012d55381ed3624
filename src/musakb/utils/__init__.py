"""Utility functions for musakb."""

from musakb.utils.identity import (
    content_hash,
    relative_source,
    stable_id,
    validate_relative_sources,
)

__all__ = ["stable_id", "content_hash", "relative_source", "validate_relative_sources"]
