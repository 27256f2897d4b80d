"""
Shared fixtures: fake upstream APIs behind httpx.MockTransport and a Flask app wired to them.
"""
import httpx
import pytest

from portcheck import create_app

PORTS_JSON_PATH = "/PortsMaster/PortMaster-Info/main/ports.json"
LEGACY_LISTING_PATH = "/repos/christianhaitian/PortMaster/contents"
RESOLVE_VANITY_PATH = "/ISteamUser/ResolveVanityURL/v0001/"
OWNED_GAMES_PATH = "/IPlayerService/GetOwnedGames/v0001/"

SAMPLE_PORTS = {
    "ports": {
        "celeste.zip": {
            "name": "celeste.zip",
            "attr": {
                "title": "Celeste",
                "desc": "Help Madeline survive her inner demons.",
                "genres": ["platformer"],
                "image": {"screenshot": "screenshot.png"},
            },
            "source": {"repo": "main"},
        },
        "hollow_knight.zip": {
            "name": "hollow_knight.zip",
            "attr": {"title": "", "desc": "", "image": {"screenshot": None}},
            "source": {"repo": "multiverse"},
        },
        "stardewvalley.zip": {
            "attr": {"title": "Stardew Valley", "desc": "Farming life.", "image": {"screenshot": "shot.jpg"}},
            "source": {"repo": "multiverse"},
        },
    }
}

SAMPLE_LEGACY_LISTING = [
    {"name": "Cave_Story.zip", "type": "file"},
    {"name": "README.md", "type": "file"},
    {"name": "OpenTTD.zip", "type": "file"},
]


class FakeUpstream:
    """Routes requests by path to canned responses and records what was asked."""

    def __init__(self):
        self.responses = {
            PORTS_JSON_PATH: (200, SAMPLE_PORTS),
            LEGACY_LISTING_PATH: (200, SAMPLE_LEGACY_LISTING),
            RESOLVE_VANITY_PATH: (200, {"response": {"success": 1, "steamid": "76561197960287930"}}),
            OWNED_GAMES_PATH: (200, {"response": {"game_count": 2, "games": [
                {"appid": 504230, "name": "Celeste", "playtime_forever": 150},
                {"appid": 70, "name": "Half-Life", "playtime_forever": 0},
            ]}}),
        }
        self.requests = []

    def set(self, path, status_code, payload=None):
        self.responses[path] = (status_code, payload)

    def fail(self, path, error):
        """Make requests to path raise a transport error."""
        self.responses[path] = error

    def calls(self, path):
        return [r for r in self.requests if r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.get(request.url.path)
        if response is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if isinstance(response, Exception):
            raise response
        status_code, payload = response
        if isinstance(payload, str):
            return httpx.Response(status_code, text=payload)
        return httpx.Response(status_code, json=payload)

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def app(upstream):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'WTF_CSRF_ENABLED': False,
        'STEAM_API_KEY': 'test-steam-key',
        'HTTP_TRANSPORT': upstream.transport,
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()
