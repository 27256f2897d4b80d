"""
PortMaster catalog service.

Fetches the list of available ports from the official ports.json and turns
it into CatalogEntry records. When ports.json cannot be used, the legacy
repository's file listing is read instead. Results are kept in the injected
cache so repeated comparisons do not hit GitHub.
"""

import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from portcheck.models import CatalogEntry
from utils.cache import TTLCache
from utils.constants import (
    CATALOG_CACHE_KEY,
    DEFAULT_HTTP_TIMEOUT,
    FALLBACK_HTTP_TIMEOUT,
    HTTP_USER_AGENT,
    LEGACY_PORTS_LISTING_URL,
    NO_IMAGE_URL,
    PORT_IMAGE_URL_MAIN,
    PORT_IMAGE_URL_MULTIVERSE,
    PORTS_JSON_URL,
)
from utils.errors import CatalogRateLimitError, CatalogUnavailableError

logger = logging.getLogger(__name__)

ZIP_SUFFIX_RE = re.compile(r'\.zip$', re.IGNORECASE)

# encodeURIComponent leaves these unescaped as well
_URI_COMPONENT_SAFE = "!*'()"


def strip_zip(port_key: str) -> str:
    """Drop a trailing .zip from a port key."""
    return ZIP_SUFFIX_RE.sub('', port_key)


def clean_port_key(port_key: str) -> str:
    """
    Turn a port file name into a readable title.

    Examples:
    - "stardew_valley.zip" -> "Stardew Valley"
    - "HollowKnight" -> "Hollow Knight"
    """
    name = strip_zip(port_key)
    name = re.sub(r'[-_]', ' ', name)
    name = re.sub(r'([a-z])([A-Z])', r'\1 \2', name)
    name = re.sub(r'\s+', ' ', name).strip()
    return re.sub(r'\b\w', lambda m: m.group(0).upper(), name)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _display_name(port_key: str, port_data: Dict[str, Any]) -> str:
    """Prefer the title from the port metadata; fall back to the cleaned key."""
    attr = _as_dict(port_data.get('attr'))
    candidates = (attr.get('title'), port_data.get('name'), attr.get('desc'), port_data.get('description'))
    display_name = next((c for c in candidates if isinstance(c, str) and c), None)

    if display_name and display_name != port_key and not display_name.endswith('.zip'):
        return display_name.strip()
    return clean_port_key(port_key)


def parse_ports_json(data: Any) -> List[CatalogEntry]:
    """
    Build catalog entries from the ports.json document.

    Args:
        data: Decoded ports.json, expected to hold a "ports" mapping

    Returns:
        One CatalogEntry per port
    """
    ports = _as_dict(data).get('ports')
    if not isinstance(ports, dict):
        return []

    logger.info(f"Found {len(ports)} ports in official JSON")

    entries = []
    for port_key, raw_port in ports.items():
        port_data = _as_dict(raw_port)
        attr = _as_dict(port_data.get('attr'))
        image = _as_dict(attr.get('image'))
        source = _as_dict(port_data.get('source'))
        genres = attr.get('genres') if isinstance(attr.get('genres'), list) else []

        entries.append(CatalogEntry(
            name=_display_name(port_key, port_data),
            key=strip_zip(port_key),
            description=attr.get('desc') if isinstance(attr.get('desc'), str) else '',
            image_ref={
                'name': port_key,
                'screenshot': image.get('screenshot'),
                'repo': source.get('repo') or 'main',
            },
            genres=tuple(g for g in genres if isinstance(g, str)),
        ))

    return entries


def parse_legacy_listing(data: Any) -> List[CatalogEntry]:
    """Build catalog entries from the GitHub contents listing of the legacy repository."""
    if not isinstance(data, list):
        return []

    entries = []
    for item in data:
        file_name = _as_dict(item).get('name')
        if not isinstance(file_name, str) or not file_name.endswith('.zip'):
            continue
        entries.append(CatalogEntry(
            name=clean_port_key(file_name),
            key=strip_zip(file_name),
            image_ref={'name': file_name, 'screenshot': 'screenshot.jpg', 'repo': 'main'},
        ))

    return entries


def get_image_url(image_ref: Optional[Dict[str, Any]]) -> str:
    """
    Build the screenshot URL for a port, as portmaster.games does.

    Args:
        image_ref: {name, screenshot, repo} from a CatalogEntry

    Returns:
        Screenshot URL, or the placeholder image when there is none
    """
    image_ref = _as_dict(image_ref)
    image_name = image_ref.get('screenshot')
    port_name = image_ref.get('name')

    if image_name and port_name:
        parts = {
            'name': quote(strip_zip(port_name), safe=_URI_COMPONENT_SAFE),
            'image': quote(image_name, safe=_URI_COMPONENT_SAFE),
        }
        repo = image_ref.get('repo')
        if repo == 'main':
            return PORT_IMAGE_URL_MAIN.format(**parts)
        if repo == 'multiverse':
            return PORT_IMAGE_URL_MULTIVERSE.format(**parts)

    return NO_IMAGE_URL


class CatalogService:
    """Provides the PortMaster catalog, cached for the configured TTL."""

    def __init__(self, cache: TTLCache, timeout: float = DEFAULT_HTTP_TIMEOUT,
                 fallback_timeout: float = FALLBACK_HTTP_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the service.

        Args:
            cache: Cache shared with the rest of the application
            timeout: Timeout for the ports.json request in seconds
            fallback_timeout: Timeout for the legacy listing request in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.cache = cache
        self.timeout = timeout
        self.fallback_timeout = fallback_timeout
        self._transport = transport

    async def _get_json(self, url: str, timeout: float, headers: Dict[str, str]) -> Any:
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            response = await client.get(url, headers=headers)
            response.raise_for_status()
            return response.json()

    async def get_catalog(self) -> List[CatalogEntry]:
        """
        Get every port in the catalog.

        Returns:
            Catalog entries, possibly empty if the fallback source has none

        Raises:
            CatalogRateLimitError: If GitHub rate limits the requests
            CatalogUnavailableError: If neither source can be read
        """
        cached = self.cache.get(CATALOG_CACHE_KEY)
        if cached is not None:
            logger.info(f"Using cached Portmaster games ({len(cached)} games)")
            return cached

        games = await self._fetch_official()
        if not games:
            games = await self._fetch_legacy()

        if games:
            self.cache.set(CATALOG_CACHE_KEY, games)
        return games

    async def _fetch_official(self) -> List[CatalogEntry]:
        logger.info("Fetching Portmaster games from official ports.json...")
        headers = {'User-Agent': HTTP_USER_AGENT, 'Accept': 'application/json'}
        try:
            data = await self._get_json(PORTS_JSON_URL, self.timeout, headers)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 403:
                logger.error("GitHub API rate limit exceeded")
                raise CatalogRateLimitError() from e
            logger.error(f"Error fetching from official ports.json: {e}")
            return []
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching from official ports.json: {e}")
            return []

        games = parse_ports_json(data)
        if games:
            logger.info(f"Found {len(games)} Portmaster games from official source")
        else:
            logger.error("No games found in official ports.json")
        return games

    async def _fetch_legacy(self) -> List[CatalogEntry]:
        logger.warning("Trying fallback to original repository...")
        headers = {'User-Agent': HTTP_USER_AGENT}
        try:
            data = await self._get_json(LEGACY_PORTS_LISTING_URL, self.fallback_timeout, headers)
        except httpx.HTTPStatusError as e:
            logger.error(f"All GitHub sources failed: {e}")
            if e.response.status_code == 403:
                raise CatalogRateLimitError() from e
            raise CatalogUnavailableError() from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"All GitHub sources failed: {e}")
            raise CatalogUnavailableError() from e

        games = parse_legacy_listing(data)
        logger.info(f"Fallback: Found {len(games)} games from original repository")
        return games
