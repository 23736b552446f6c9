"""
linkcanon: tracking parameter removal and deduplication keys for bookmark URLs.
"""

from linkcanon.canonicalizer import (
    UrlCanonicalizer,
    canonicalize,
    has_tracking_parameters,
    is_valid_url,
    list_tracking_parameters,
    strip_tracking_parameters,
)
from linkcanon.dedup import dedup_key, find_duplicates
from linkcanon.errors import InvalidUrlError
from linkcanon.params import (
    EXTENDED_TRACKING_PARAMETERS,
    TRACKING_PARAMETERS,
    TrackingParameterPolicy,
)

__all__ = [
    # Canonicalization
    "UrlCanonicalizer",
    "canonicalize",
    "has_tracking_parameters",
    "is_valid_url",
    "list_tracking_parameters",
    "strip_tracking_parameters",
    # Deduplication
    "dedup_key",
    "find_duplicates",
    # Denylist
    "EXTENDED_TRACKING_PARAMETERS",
    "TRACKING_PARAMETERS",
    "TrackingParameterPolicy",
    # Errors
    "InvalidUrlError",
]
