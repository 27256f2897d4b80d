"""
Steam Web API client.

Resolves the many ways users identify a Steam profile (SteamID64, profile
URLs, vanity names) and fetches the profile's owned games.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

import httpx

from utils.cache import TTLCache
from utils.constants import (
    DEFAULT_HTTP_TIMEOUT,
    HTTP_USER_AGENT,
    STEAM_GAMES_CACHE_KEY,
    STEAM_OWNED_GAMES_URL,
    STEAM_RESOLVE_VANITY_URL,
)
from utils.errors import ConfigurationError, LibraryFetchError, PrivateProfileError

logger = logging.getLogger(__name__)

STEAM_ID64_RE = re.compile(r'\b(765611\d{11})\b')
VANITY_URL_RE = re.compile(r'steamcommunity\.com/id/([^/?]+)', re.IGNORECASE)


def parse_steam_input(raw: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Work out what kind of Steam identifier the user typed.

    Examples:
    - "76561197960287930"
    - "https://steamcommunity.com/profiles/76561197960287930"
    - "https://steamcommunity.com/id/gaben/"
    - "gaben"

    Returns:
        Tuple of (steam_id64, vanity_name); at most one is set
    """
    if not raw:
        return None, None

    cleaned = raw.strip()

    direct = STEAM_ID64_RE.search(cleaned)
    if direct:
        return direct.group(1), None

    vanity = VANITY_URL_RE.search(cleaned)
    if vanity:
        return None, vanity.group(1)

    # A bare word is taken to be a vanity name
    if '/' not in cleaned and '.' not in cleaned and len(cleaned) > 2:
        return None, cleaned

    return None, None


def _response_body(response: httpx.Response) -> Dict:
    """
    Return the "response" object of a Steam Web API reply.

    Raises:
        ValueError: If the body is not JSON or not shaped like a Steam reply
    """
    payload = response.json()
    if not isinstance(payload, dict):
        raise ValueError(f"Unexpected Steam API payload: {type(payload).__name__}")
    body = payload.get('response')
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValueError(f"Unexpected Steam API response field: {type(body).__name__}")
    return body


class SteamClient:
    """Fetches owned games for a Steam profile, caching results per SteamID64."""

    def __init__(self, api_key: Optional[str], cache: TTLCache,
                 timeout: float = DEFAULT_HTTP_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the client.

        Args:
            api_key: Steam Web API key
            cache: Cache shared with the rest of the application
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key
        self.cache = cache
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={'User-Agent': HTTP_USER_AGENT},
        )

    def _require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError('Steam API key not configured. Please contact the administrator.')
        return self.api_key

    async def resolve_steam_id(self, raw: Optional[str]) -> Optional[str]:
        """
        Resolve user input to a SteamID64.

        Returns:
            SteamID64 string, or None if the input cannot be resolved
        """
        steam_id, vanity = parse_steam_input(raw)
        if steam_id:
            return steam_id
        if not vanity:
            return None

        params = {'key': self._require_api_key(), 'vanityurl': vanity, 'format': 'json'}
        try:
            async with self._client() as client:
                response = await client.get(STEAM_RESOLVE_VANITY_URL, params=params)
                response.raise_for_status()
                data = _response_body(response)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error resolving custom Steam URL '{vanity}': {e}")
            return None

        if data.get('success') == 1:
            return data.get('steamid')

        logger.info(f"Steam vanity name '{vanity}' did not resolve")
        return None

    async def get_owned_games(self, steam_id: str) -> List[Dict]:
        """
        Fetch the games owned by a Steam profile.

        Args:
            steam_id: SteamID64 of the profile

        Returns:
            Raw game dictionaries from the Steam API (appid, name, playtime_forever, ...)

        Raises:
            ConfigurationError: If no API key is configured
            PrivateProfileError: If the profile hides its games or does not exist
            LibraryFetchError: If the request fails
        """
        api_key = self._require_api_key()

        cache_key = STEAM_GAMES_CACHE_KEY.format(steam_id=steam_id)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"Using cached Steam games for {steam_id} ({len(cached)} games)")
            return cached

        params = {
            'key': api_key,
            'steamid': steam_id,
            'include_appinfo': 1,
            'format': 'json',
        }
        try:
            async with self._client() as client:
                response = await client.get(STEAM_OWNED_GAMES_URL, params=params)
                response.raise_for_status()
                data = _response_body(response)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching Steam games for {steam_id}: {e}")
            raise LibraryFetchError(
                'Failed to fetch Steam games. Please check your Steam ID and try again.',
                platform='steam',
            ) from e

        games = data.get('games')
        if not games:
            raise PrivateProfileError(steam_id)
        if not isinstance(games, list):
            logger.error(f"Unexpected Steam games payload for {steam_id}: {type(games).__name__}")
            raise LibraryFetchError(
                'Failed to fetch Steam games. Please check your Steam ID and try again.',
                platform='steam',
            )

        self.cache.set(cache_key, games)
        logger.info(f"Fetched {len(games)} Steam games for {steam_id}")
        return games
