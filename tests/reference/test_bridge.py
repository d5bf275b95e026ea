"""
Tests for the reference lookup bridge.
"""

import pytest

from combat_tracker.core.constants import LookupFailure
from combat_tracker.reference.bridge import ReferenceLookupBridge
from combat_tracker.reference.service import (
    ReferenceCacheError,
    ReferenceLookupError,
    ReferenceNotFound,
    ReferenceParseError,
    ReferenceTimeout,
)


class FailingService:
    def __init__(self, error):
        self.error = error
        self.calls = []

    def lookup(self, query, refresh=False):
        self.calls.append((query, refresh))
        raise self.error


def test_successful_lookup(reference_service):
    result = ReferenceLookupBridge(reference_service).lookup("Fireball")
    assert result.ok
    assert result.failure is None
    assert result.message == result.text
    assert result.text.startswith("Fireball. 3rd-level evocation.")


@pytest.mark.parametrize(
    "error, failure",
    [
        (ReferenceNotFound("missing"), LookupFailure.NOT_FOUND),
        (ReferenceTimeout("slow"), LookupFailure.NETWORK_TIMEOUT),
        (TimeoutError("slow"), LookupFailure.NETWORK_TIMEOUT),
        (ReferenceParseError("garbled"), LookupFailure.PARSE_ERROR),
        (ReferenceCacheError("disk full"), LookupFailure.CACHE_ERROR),
    ],
)
def test_failures_are_classified(error, failure):
    result = ReferenceLookupBridge(FailingService(error)).lookup("fireball")
    assert not result.ok
    assert result.failure == failure
    assert result.text is None
    assert result.message.startswith(failure.friendly_message)
    assert result.detail == str(error)


def test_query_is_forwarded_verbatim_with_refresh():
    service = FailingService(ReferenceNotFound("missing"))
    ReferenceLookupBridge(service, refresh=True).lookup("  Magic Missile ")
    assert service.calls == [("  Magic Missile ", True)]


def test_unexpected_errors_propagate():
    with pytest.raises(RuntimeError):
        ReferenceLookupBridge(FailingService(RuntimeError("bug"))).lookup("fireball")


def test_unclassified_service_error_is_not_found():
    result = ReferenceLookupBridge(FailingService(ReferenceLookupError("odd"))).lookup("fireball")
    assert result.failure == LookupFailure.NOT_FOUND
    assert result.detail == "odd"


def test_not_found_suggestions_are_shown():
    error = ReferenceNotFound("missing", ["fire-bolt", "fireball"])
    result = ReferenceLookupBridge(FailingService(error)).lookup("fire")
    assert result.suggestions == ["fire-bolt", "fireball"]
    assert result.message.endswith("Did you mean: fire-bolt, fireball?")


def test_not_found_without_suggestions_hints_at_categories():
    result = ReferenceLookupBridge(FailingService(ReferenceNotFound("missing"))).lookup("tarrasque")
    assert "search spell tarrasque" in result.message
    result = ReferenceLookupBridge(FailingService(ReferenceNotFound("missing"))).lookup("monster tarrasque")
    assert result.message == LookupFailure.NOT_FOUND.friendly_message
