"""
Reference lookup service module.

The service turns a free-text query into display text for a rules entry,
spell or monster. `HttpReferenceService` fetches pages from the reference
site with a bounded timeout and keeps an on-disk cache of what it fetched;
`StaticReferenceService` serves entries held in memory.
"""

import html
import json
import re
from pathlib import Path
from typing import Iterable, Optional, Protocol

import httpx
from catchery import log_debug, log_warning

from combat_tracker.core.constants import SearchCategory
from combat_tracker.core.utils import slugify

ATTRIBUTION = "Source: {url} (community content, licensed CC BY-SA 3.0)"

# URL paths tried in order for a query slug without a category.
PAGE_PATTERNS = ("spell:{slug}", "monster:{slug}", "{slug}")

# Query keywords and the entries they usually point at.
KEYWORD_SUGGESTIONS = {
    "fire": ("fireball", "fire-bolt", "burning-hands"),
    "heal": ("cure-wounds", "healing-word", "heal"),
    "light": ("light", "dancing-lights", "lightning-bolt"),
}

COMMON_CLASSES = (
    "fighter", "wizard", "cleric", "rogue", "ranger", "paladin",
    "barbarian", "bard", "druid", "monk", "sorcerer", "warlock",
)

MAX_SUGGESTIONS = 5

_PAGE_CONTENT = re.compile(
    r'<div id="page-content"[^>]*>(.*?)(?:<div class="page-tags"|<div id="page-info"|</body>|\Z)',
    re.DOTALL | re.IGNORECASE,
)
_BLOCK_END = re.compile(r"<br\s*/?>|</(?:p|div|li|tr|h\d|table)>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_SCRIPT = re.compile(r"<(script|style)[^>]*>.*?</\1>", re.DOTALL | re.IGNORECASE)


class ReferenceLookupError(Exception):
    """Base class for failures inside the reference service."""


class ReferenceNotFound(ReferenceLookupError):
    """No entry matches the query; carries names the user may have meant."""

    def __init__(self, message: str, suggestions: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.suggestions: list[str] = suggestions or []


class ReferenceTimeout(ReferenceLookupError):
    """The network fetch timed out or could not reach the site."""


class ReferenceParseError(ReferenceLookupError):
    """The fetched page did not contain readable content."""


class ReferenceCacheError(ReferenceLookupError):
    """The on-disk cache could not be read or written."""


class ReferenceService(Protocol):
    """What the combat tracker needs from a reference service."""

    def lookup(self, query: str, refresh: bool = False) -> str:
        """Returns display text, attribution included, or raises ReferenceLookupError."""
        ...


def extract_page_text(page: str) -> str:
    """
    Extracts readable text from the content block of a reference page.

    Args:
        page (str): The HTML of the page.

    Returns:
        str: The text, one paragraph or list item per line.

    Raises:
        ReferenceParseError: If the page has no content block or it is empty.

    """
    match = _PAGE_CONTENT.search(page)
    if not match:
        raise ReferenceParseError("Could not find page content")
    body = _SCRIPT.sub("", match.group(1))
    body = _BLOCK_END.sub("\n", body)
    body = html.unescape(_TAG.sub("", body))
    lines = [re.sub(r"[ \t]+", " ", line).strip() for line in body.splitlines()]
    text = "\n".join(line for line in lines if line)
    if not text:
        raise ReferenceParseError("Page content is empty")
    return text


def split_category(query: str) -> tuple[Optional[SearchCategory], str]:
    """
    Splits a leading category word off a query.

    "spell fireball" becomes (SPELLS, "fireball"); a category word with
    nothing after it is the query itself.

    """
    word, _, rest = query.strip().partition(" ")
    category = SearchCategory.from_word(word)
    if category is None or not rest.strip():
        return None, query.strip()
    return category, rest.strip()


def suggest(query: str, known: Iterable[str] = ()) -> list[str]:
    """
    Returns up to MAX_SUGGESTIONS entry names close to a query that matched nothing.

    Args:
        query (str): The query, without its category word.
        known (Iterable[str]): Entry slugs the service can serve.

    """
    slug = slugify(query)
    found: set[str] = set()
    for keyword, entries in KEYWORD_SUGGESTIONS.items():
        if keyword in slug:
            found.update(entries)
    # Short queries are often a truncated class name.
    if len(slug) <= 8:
        found.update(c for c in COMMON_CLASSES if c.startswith(slug) or slug.startswith(c))
    found.update(k for k in known if slug in k or k in slug)
    return sorted(found)[:MAX_SUGGESTIONS]


class StaticReferenceService:
    """Serves reference entries from memory; queries match case-insensitively."""

    def __init__(self, entries: Optional[dict[str, str]] = None, source: str = "local notes") -> None:
        self.entries = {slugify(k): v for k, v in (entries or {}).items()}
        self.source = source

    def lookup(self, query: str, refresh: bool = False) -> str:
        _, term = split_category(query)
        text = self.entries.get(slugify(query)) or self.entries.get(slugify(term))
        if text is None:
            raise ReferenceNotFound(f"No entry for '{query}'", suggest(term, self.entries))
        return f"{text}\n\n{ATTRIBUTION.format(url=self.source)}"


class HttpReferenceService:
    """Fetches reference pages over HTTP, caching the extracted text on disk."""

    def __init__(
        self,
        base_url: str,
        cache_dir: Path,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.cache_dir = Path(cache_dir)
        self.timeout = timeout
        self.client = client if client is not None else httpx.Client(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )

    def close(self) -> None:
        self.client.close()

    def candidate_urls(self, query: str) -> list[str]:
        """Returns the page URLs tried for a query, restricted by its category word."""
        category, term = split_category(query)
        patterns = category.page_patterns if category is not None else PAGE_PATTERNS
        slug = slugify(term)
        return [f"{self.base_url}/{pattern.format(slug=slug)}" for pattern in patterns]

    # ============================================================================
    # CACHE
    # ============================================================================

    def _cache_path(self, query: str) -> Path:
        return self.cache_dir / f"{slugify(query)}.json"

    def _read_cache(self, query: str) -> Optional[str]:
        path = self._cache_path(query)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)["text"]
        except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
            raise ReferenceCacheError(f"Unreadable cache entry {path}: {e}") from e

    def _write_cache(self, query: str, url: str, text: str) -> None:
        path = self._cache_path(query)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"query": query, "url": url, "text": text}, f, indent=2)
        except OSError as e:
            raise ReferenceCacheError(f"Could not write cache entry {path}: {e}") from e

    # ============================================================================
    # LOOKUP
    # ============================================================================

    def lookup(self, query: str, refresh: bool = False) -> str:
        """
        Looks a query up, from the cache unless `refresh` is set.

        A leading category word, as in "spell fireball", restricts the pages
        tried. Redirect loops count as a missing page.

        Raises:
            ReferenceNotFound: If no candidate page exists.
            ReferenceTimeout: If the site does not answer within the timeout
                or the request fails.
            ReferenceParseError: If a page exists but has no readable content.
            ReferenceCacheError: If the cache cannot be read or written.

        """
        if not refresh:
            cached = self._read_cache(query)
            if cached is not None:
                log_debug("Reference served from cache", {"query": query})
                return cached

        for url in self.candidate_urls(query):
            try:
                response = self.client.get(url)
            except httpx.TimeoutException as e:
                raise ReferenceTimeout(f"Timed out after {self.timeout}s fetching {url}") from e
            except httpx.TooManyRedirects:
                log_warning("Redirect loop on reference site", {"url": url, "query": query})
                continue
            except httpx.DecodingError as e:
                raise ReferenceParseError(f"Could not decode the page at {url}: {e}") from e
            except httpx.HTTPError as e:
                raise ReferenceTimeout(f"Network request failed for {url}: {e}") from e

            if response.status_code == httpx.codes.NOT_FOUND:
                continue
            if not response.is_success:
                log_warning(
                    f"Unexpected status {response.status_code} from reference site",
                    {"url": url, "query": query},
                )
                continue

            text = f"{extract_page_text(response.text)}\n\n{ATTRIBUTION.format(url=url)}"
            self._write_cache(query, url, text)
            return text

        _, term = split_category(query)
        raise ReferenceNotFound(f"'{query}' not found", suggest(term))
