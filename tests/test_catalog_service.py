import asyncio

import httpx
import pytest

from conftest import LEGACY_LISTING_PATH, PORTS_JSON_PATH, SAMPLE_PORTS
from portcheck.services.catalog_service import (
    CatalogService,
    clean_port_key,
    get_image_url,
    parse_legacy_listing,
    parse_ports_json,
)
from utils.cache import TTLCache
from utils.constants import NO_IMAGE_URL
from utils.errors import CatalogRateLimitError, CatalogUnavailableError


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(upstream, clock):
    return CatalogService(TTLCache(3600, clock=clock), transport=upstream.transport)


@pytest.mark.parametrize("port_key, expected", [
    ("stardew_valley.zip", "Stardew Valley"),
    ("HollowKnight", "Hollow Knight"),
    ("cave-story.ZIP", "Cave Story"),
    ("openttd", "Openttd"),
    ("  spaced__out  ", "Spaced Out"),
])
def test_clean_port_key(port_key, expected):
    assert clean_port_key(port_key) == expected


def test_parse_ports_json():
    entries = {entry.key: entry for entry in parse_ports_json(SAMPLE_PORTS)}

    assert set(entries) == {"celeste", "hollow_knight", "stardewvalley"}

    celeste = entries["celeste"]
    assert celeste.name == "Celeste"
    assert celeste.description == "Help Madeline survive her inner demons."
    assert celeste.genres == ("platformer",)
    assert celeste.image_ref == {'name': "celeste.zip", 'screenshot': "screenshot.png", 'repo': "main"}

    # no usable title, so the display name comes from the port key
    assert entries["hollow_knight"].name == "Hollow Knight"
    assert entries["hollow_knight"].description == ""
    assert entries["stardewvalley"].image_ref['repo'] == "multiverse"


@pytest.mark.parametrize("data", [None, [], {}, {"ports": []}, "ports"])
def test_parse_ports_json_rejects_unexpected_shapes(data):
    assert parse_ports_json(data) == []


def test_parse_ports_json_defaults_repo_to_main():
    entries = parse_ports_json({"ports": {"doom.zip": {"attr": {"title": "Doom"}}}})

    assert entries[0].image_ref == {'name': "doom.zip", 'screenshot': None, 'repo': "main"}


def test_parse_legacy_listing_keeps_only_zip_files():
    entries = parse_legacy_listing([
        {"name": "Cave_Story.zip", "type": "file"},
        {"name": "README.md", "type": "file"},
        {"name": "OpenTTD.zip", "type": "file"},
        "junk",
    ])

    assert [(entry.name, entry.key) for entry in entries] == [
        ("Cave Story", "Cave_Story"),
        ("Open TTD", "OpenTTD"),
    ]
    assert entries[0].image_ref == {'name': "Cave_Story.zip", 'screenshot': "screenshot.jpg", 'repo': "main"}
    assert parse_legacy_listing({"message": "Not Found"}) == []


def test_get_image_url():
    assert get_image_url({'name': "celeste.zip", 'screenshot': "screen shot.png", 'repo': "main"}) == \
        "https://raw.githubusercontent.com/PortsMaster/PortMaster-New/main/ports/celeste/screen%20shot.png"
    assert get_image_url({'name': "sv.zip", 'screenshot': "shot.jpg", 'repo': "multiverse"}) == \
        "https://raw.githubusercontent.com/PortsMaster-MV/PortMaster-MV-New/main/ports/sv/shot.jpg"


@pytest.mark.parametrize("image_ref", [
    None,
    {},
    {'name': "celeste.zip", 'screenshot': None, 'repo': "main"},
    {'name': "celeste.zip", 'screenshot': "shot.png", 'repo': "elsewhere"},
])
def test_get_image_url_placeholder(image_ref):
    assert get_image_url(image_ref) == NO_IMAGE_URL


def test_get_catalog_from_ports_json(service, upstream):
    games = asyncio.run(service.get_catalog())

    assert sorted(game.name for game in games) == ["Celeste", "Hollow Knight", "Stardew Valley"]
    assert upstream.calls(LEGACY_LISTING_PATH) == []
    assert upstream.calls(PORTS_JSON_PATH)[0].headers['Accept'] == "application/json"


def test_get_catalog_is_cached_until_ttl(service, upstream, clock):
    asyncio.run(service.get_catalog())
    clock.now = 3600
    asyncio.run(service.get_catalog())
    assert len(upstream.calls(PORTS_JSON_PATH)) == 1

    clock.now = 3601
    asyncio.run(service.get_catalog())
    assert len(upstream.calls(PORTS_JSON_PATH)) == 2


def test_ports_json_rate_limit(service, upstream):
    upstream.set(PORTS_JSON_PATH, 403, {"message": "API rate limit exceeded"})

    with pytest.raises(CatalogRateLimitError) as exc_info:
        asyncio.run(service.get_catalog())

    assert exc_info.value.status_code == 429
    assert exc_info.value.code == "CATALOG_RATE_LIMITED"
    assert upstream.calls(LEGACY_LISTING_PATH) == []


@pytest.mark.parametrize("broken", [
    (500, {"message": "Server Error"}),
    (200, "not json"),
    (200, {"ports": {}}),
])
def test_falls_back_to_legacy_listing(service, upstream, broken):
    upstream.set(PORTS_JSON_PATH, *broken)

    games = asyncio.run(service.get_catalog())

    assert [game.name for game in games] == ["Cave Story", "Open TTD"]


def test_falls_back_on_connection_error(service, upstream):
    upstream.fail(PORTS_JSON_PATH, httpx.ConnectTimeout("timed out"))

    assert len(asyncio.run(service.get_catalog())) == 2


def test_legacy_rate_limit(service, upstream):
    upstream.set(PORTS_JSON_PATH, 500)
    upstream.set(LEGACY_LISTING_PATH, 403, {"message": "API rate limit exceeded"})

    with pytest.raises(CatalogRateLimitError):
        asyncio.run(service.get_catalog())


def test_catalog_unavailable_when_both_sources_fail(service, upstream):
    upstream.set(PORTS_JSON_PATH, 500)
    upstream.fail(LEGACY_LISTING_PATH, httpx.ConnectError("connection refused"))

    with pytest.raises(CatalogUnavailableError) as exc_info:
        asyncio.run(service.get_catalog())

    assert exc_info.value.status_code == 503
    assert not isinstance(exc_info.value, CatalogRateLimitError)


def test_empty_catalog_is_not_cached(service, upstream):
    upstream.set(PORTS_JSON_PATH, 500)
    upstream.set(LEGACY_LISTING_PATH, 200, [])

    assert asyncio.run(service.get_catalog()) == []

    upstream.set(PORTS_JSON_PATH, 200, SAMPLE_PORTS)
    assert len(asyncio.run(service.get_catalog())) == 3
