"""
Reference lookup: the bridge used by the combat tracker and the services it can talk to.
"""

from .bridge import LookupResult, ReferenceLookupBridge
from .service import (
    HttpReferenceService,
    ReferenceCacheError,
    ReferenceLookupError,
    ReferenceNotFound,
    ReferenceParseError,
    ReferenceService,
    ReferenceTimeout,
    StaticReferenceService,
    split_category,
    suggest,
)

__all__ = [
    "LookupResult",
    "ReferenceLookupBridge",
    "ReferenceService",
    "HttpReferenceService",
    "StaticReferenceService",
    "ReferenceLookupError",
    "ReferenceNotFound",
    "ReferenceTimeout",
    "ReferenceParseError",
    "ReferenceCacheError",
    "split_category",
    "suggest",
]
