"""Request fingerprinting and the position result cache."""

from .canonical import CanonicalPayload, canonicalize_request, make_cache_key, request_fingerprint
from .results import ResultCache

__all__ = [
    "CanonicalPayload",
    "ResultCache",
    "canonicalize_request",
    "make_cache_key",
    "request_fingerprint",
]
