"""
Reference lookup bridge.

The only door between the combat tracker and the reference service. It
forwards a query and turns every service failure into a typed value, so a
failed lookup can never reach encounter state.
"""

from typing import Optional

from catchery import log_warning
from pydantic import BaseModel, Field

from combat_tracker.core.constants import LookupFailure
from combat_tracker.reference.service import (
    ReferenceCacheError,
    ReferenceLookupError,
    ReferenceNotFound,
    ReferenceParseError,
    ReferenceService,
    ReferenceTimeout,
    split_category,
)


class LookupResult(BaseModel):
    """Either the display text of an entry or the reason there is none."""

    query: str
    text: Optional[str] = None
    failure: Optional[LookupFailure] = None
    detail: str = ""
    suggestions: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def message(self) -> str:
        """What to show the user."""
        if self.failure is None:
            return self.text or ""
        if self.suggestions:
            return f"{self.failure.friendly_message} Did you mean: {', '.join(self.suggestions)}?"
        if self.failure == LookupFailure.NOT_FOUND and split_category(self.query)[0] is None:
            return f"{self.failure.friendly_message} Try a category, e.g. 'search spell {self.query}'."
        return self.failure.friendly_message


class ReferenceLookupBridge:
    """Forwards queries to a reference service and classifies its failures."""

    def __init__(self, service: ReferenceService, refresh: bool = False) -> None:
        self.service = service
        self.refresh = refresh

    def lookup(self, query: str) -> LookupResult:
        """
        Looks a query up.

        Args:
            query (str): Free text, forwarded verbatim.

        Returns:
            LookupResult: The display text, or one of NOT_FOUND,
            NETWORK_TIMEOUT, PARSE_ERROR and CACHE_ERROR.

        """
        try:
            text = self.service.lookup(query, refresh=self.refresh)
        except ReferenceNotFound as e:
            return self._failed(query, LookupFailure.NOT_FOUND, e, e.suggestions)
        except (ReferenceTimeout, TimeoutError) as e:
            return self._failed(query, LookupFailure.NETWORK_TIMEOUT, e)
        except ReferenceParseError as e:
            return self._failed(query, LookupFailure.PARSE_ERROR, e)
        except ReferenceCacheError as e:
            return self._failed(query, LookupFailure.CACHE_ERROR, e)
        except ReferenceLookupError as e:
            # Services may raise the base class for failures they do not classify.
            return self._failed(query, LookupFailure.NOT_FOUND, e)
        return LookupResult(query=query, text=text)

    def _failed(
        self,
        query: str,
        failure: LookupFailure,
        error: Exception,
        suggestions: Optional[list[str]] = None,
    ) -> LookupResult:
        log_warning(
            f"Reference lookup failed: {failure.display_name}",
            {"query": query, "error": str(error), "context": "reference_lookup"},
        )
        return LookupResult(
            query=query,
            failure=failure,
            detail=str(error),
            suggestions=suggestions or [],
        )
