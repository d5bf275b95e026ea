"""
Tests for the reference services, with HTTP served by httpx.MockTransport.
"""

import json

import httpx
import pytest

from combat_tracker.core.constants import SearchCategory
from combat_tracker.reference.service import (
    HttpReferenceService,
    ReferenceCacheError,
    ReferenceNotFound,
    ReferenceParseError,
    ReferenceTimeout,
    StaticReferenceService,
    extract_page_text,
    split_category,
    suggest,
)

BASE_URL = "http://reference.test"

FIREBALL_PAGE = """
<html><body>
<div id="page-title">Fireball</div>
<div id="page-content">
<p>Source: Player's Handbook</p>
<p><em>3rd-level evocation</em></p>
<script>trackPage();</script>
<p>A bright streak flashes from your pointing finger &amp; blossoms.</p>
<ul><li>Range: 150 feet</li></ul>
</div>
<div class="page-tags">spells</div>
</body></html>
"""


def make_service(tmp_path, handler, follow_redirects=False):
    requests = []

    def record(request):
        requests.append(str(request.url))
        return handler(request)

    client = httpx.Client(transport=httpx.MockTransport(record), follow_redirects=follow_redirects)
    service = HttpReferenceService(BASE_URL, tmp_path / "cache", timeout=0.5, client=client)
    return service, requests


def spell_pages(request):
    if request.url.path == "/spell:fireball":
        return httpx.Response(200, text=FIREBALL_PAGE)
    return httpx.Response(404, text="not here")


def test_extract_page_text_keeps_content_block_only():
    text = extract_page_text(FIREBALL_PAGE)
    assert text.splitlines() == [
        "Source: Player's Handbook",
        "3rd-level evocation",
        "A bright streak flashes from your pointing finger & blossoms.",
        "Range: 150 feet",
    ]


@pytest.mark.parametrize("page", ["<html><body>nothing</body></html>", '<div id="page-content">  </div>'])
def test_extract_page_text_rejects_unreadable_pages(page):
    with pytest.raises(ReferenceParseError):
        extract_page_text(page)


def test_candidate_urls_use_slug(tmp_path):
    service, _ = make_service(tmp_path, spell_pages)
    assert service.candidate_urls("Magic Missile") == [
        f"{BASE_URL}/spell:magic-missile",
        f"{BASE_URL}/monster:magic-missile",
        f"{BASE_URL}/magic-missile",
    ]


def test_lookup_fetches_attributes_and_caches(tmp_path):
    service, requests = make_service(tmp_path, spell_pages)

    text = service.lookup("Fireball")

    assert text.startswith("Source: Player's Handbook")
    assert text.endswith(f"Source: {BASE_URL}/spell:fireball (community content, licensed CC BY-SA 3.0)")
    assert requests == [f"{BASE_URL}/spell:fireball"]
    with open(tmp_path / "cache" / "fireball.json", encoding="utf-8") as f:
        cached = json.load(f)
    assert cached["text"] == text
    assert cached["url"] == f"{BASE_URL}/spell:fireball"


def test_lookup_serves_cache_without_network(tmp_path):
    service, requests = make_service(tmp_path, spell_pages)
    first = service.lookup("fireball")
    second = service.lookup("FIREBALL")
    assert first == second
    assert len(requests) == 1


def test_refresh_bypasses_cache(tmp_path):
    service, requests = make_service(tmp_path, spell_pages)
    service.lookup("fireball")
    service.lookup("fireball", refresh=True)
    assert len(requests) == 2


def test_falls_through_to_monster_page(tmp_path):
    def monster_pages(request):
        if request.url.path == "/monster:goblin":
            return httpx.Response(200, text='<div id="page-content"><p>Goblin</p></div>')
        return httpx.Response(404)

    service, requests = make_service(tmp_path, monster_pages)
    assert service.lookup("goblin").startswith("Goblin")
    assert requests == [f"{BASE_URL}/spell:goblin", f"{BASE_URL}/monster:goblin"]


def test_missing_everywhere_is_not_found(tmp_path):
    service, requests = make_service(tmp_path, lambda request: httpx.Response(404))
    with pytest.raises(ReferenceNotFound):
        service.lookup("tarrasque")
    assert len(requests) == 3
    assert not (tmp_path / "cache" / "tarrasque.json").exists()


def test_server_errors_are_skipped(tmp_path):
    service, _ = make_service(tmp_path, lambda request: httpx.Response(503))
    with pytest.raises(ReferenceNotFound):
        service.lookup("fireball")


def test_timeout_is_reported(tmp_path):
    def slow(request):
        raise httpx.ReadTimeout("too slow", request=request)

    service, requests = make_service(tmp_path, slow)
    with pytest.raises(ReferenceTimeout):
        service.lookup("fireball")
    assert len(requests) == 1


def test_connection_failure_is_reported_as_timeout(tmp_path):
    def unreachable(request):
        raise httpx.ConnectError("no route", request=request)

    service, _ = make_service(tmp_path, unreachable)
    with pytest.raises(ReferenceTimeout):
        service.lookup("fireball")


def test_page_without_content_is_parse_error(tmp_path):
    service, _ = make_service(tmp_path, lambda request: httpx.Response(200, text="<html></html>"))
    with pytest.raises(ReferenceParseError):
        service.lookup("fireball")


def test_corrupt_cache_is_cache_error(tmp_path):
    service, requests = make_service(tmp_path, spell_pages)
    cache_dir = tmp_path / "cache"
    cache_dir.mkdir()
    (cache_dir / "fireball.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(ReferenceCacheError):
        service.lookup("fireball")
    assert requests == []

    assert "A bright streak" in service.lookup("fireball", refresh=True)


def test_static_service_matches_case_insensitively():
    service = StaticReferenceService({"Magic Missile": "Three darts."}, source="notes.json")
    assert service.lookup("magic missile") == (
        "Three darts.\n\nSource: notes.json (community content, licensed CC BY-SA 3.0)"
    )
    with pytest.raises(ReferenceNotFound):
        service.lookup("wish")


@pytest.mark.parametrize(
    "query, expected",
    [
        ("spell fireball", (SearchCategory.SPELLS, "fireball")),
        ("Creature giant spider", (SearchCategory.MONSTERS, "giant spider")),
        ("gear longsword", (SearchCategory.EQUIPMENT, "longsword")),
        ("spell", (None, "spell")),
        ("magic missile", (None, "magic missile")),
    ],
)
def test_split_category(query, expected):
    assert split_category(query) == expected


def test_category_restricts_candidate_urls(tmp_path):
    service, _ = make_service(tmp_path, spell_pages)
    assert service.candidate_urls("monster goblin") == [f"{BASE_URL}/monster:goblin"]
    assert service.candidate_urls("item long sword") == [
        f"{BASE_URL}/equipment:long-sword",
        f"{BASE_URL}/weapon:long-sword",
        f"{BASE_URL}/armor:long-sword",
    ]


def test_category_lookup_skips_other_pages(tmp_path):
    service, requests = make_service(tmp_path, spell_pages)
    with pytest.raises(ReferenceNotFound):
        service.lookup("monster fireball")
    assert requests == [f"{BASE_URL}/monster:fireball"]


def test_suggestions():
    assert suggest("heal") == ["cure-wounds", "heal", "healing-word"]
    assert suggest("wiz") == ["wizard"]
    assert suggest("prone", known=["prone-position", "grappled"]) == ["prone-position"]
    assert suggest("tarrasque") == []


def test_not_found_carries_suggestions(tmp_path):
    service, _ = make_service(tmp_path, lambda request: httpx.Response(404))
    with pytest.raises(ReferenceNotFound) as excinfo:
        service.lookup("spell firebal")
    assert "fireball" in excinfo.value.suggestions


def test_redirect_loop_is_not_found(tmp_path):
    def loop(request):
        return httpx.Response(302, headers={"Location": str(request.url)})

    service, _ = make_service(tmp_path, loop, follow_redirects=True)
    with pytest.raises(ReferenceNotFound):
        service.lookup("fireball")


def test_undecodable_page_is_parse_error(tmp_path):
    def garbled(request):
        raise httpx.DecodingError("bad gzip stream", request=request)

    service, _ = make_service(tmp_path, garbled)
    with pytest.raises(ReferenceParseError):
        service.lookup("fireball")


def test_other_request_errors_are_reported_as_timeout(tmp_path):
    def broken(request):
        raise httpx.RequestError("stream closed", request=request)

    service, _ = make_service(tmp_path, broken)
    with pytest.raises(ReferenceTimeout):
        service.lookup("fireball")
