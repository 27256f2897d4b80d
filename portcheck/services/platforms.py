"""
Storefront library platforms.

Each platform turns the user's raw input (a Steam profile, a pasted Epic
launcher listing, a pasted GOG export) into LibraryEntry records and knows
how to phrase its own failures for the user.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote_plus

from portcheck.models import LibraryEntry
from portcheck.services.steam_service import SteamClient
from utils.constants import (
    EPIC_STORE_SEARCH_URL,
    GOG_STORE_SEARCH_URL,
    STEAM_STORE_APP_URL,
    STEAM_STORE_SEARCH_URL,
)
from utils.errors import AppError, EmptyLibraryError, ValidationError

logger = logging.getLogger(__name__)

EPIC_GAME_RE = re.compile(r'^\*\s*(.+?)\s*\(App name:')
EPIC_DLC_RE = re.compile(r'^\+\s*(.+?)\s*\(App name:')
LEADING_MARKER_RE = re.compile(r'^[*+]\s*')
BARE_NUMBER_RE = re.compile(r'^\d+\.?$')


def _is_header_line(line: str) -> bool:
    """Lines like "Available games:", "Total: 42" or a lone "12." carry no title."""
    lowered = line.lower()
    return 'available games:' in lowered or 'total:' in lowered or bool(BARE_NUMBER_RE.match(line))


def _unique_by_name(entries: Iterable[LibraryEntry]) -> List[LibraryEntry]:
    """Drop entries whose name repeats an earlier one, ignoring case."""
    seen = set()
    unique = []
    for entry in entries:
        folded = entry.name.lower()
        if folded in seen:
            continue
        seen.add(folded)
        unique.append(entry)
    return unique


def parse_epic_games(text: str) -> List[LibraryEntry]:
    """
    Parse an Epic Games list as printed by the legendary launcher.

    Accepted lines:
    - "* Celeste (App name: Salt | Version: 1.4)"
    - "+ Farewell (App name: SaltDLC | Version: 1.0)"
    - "Celeste"

    Returns:
        Entries in input order, case-insensitively unique
    """
    games = []
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed or _is_header_line(trimmed):
            continue

        game_name = None
        game_match = EPIC_GAME_RE.match(trimmed)
        if game_match:
            game_name = game_match.group(1).strip()
        elif not trimmed.startswith('*') and 'App name:' not in trimmed:
            game_name = trimmed
        elif trimmed.startswith('+'):
            dlc_match = EPIC_DLC_RE.match(trimmed)
            if dlc_match:
                game_name = dlc_match.group(1).strip()

        if game_name:
            game_name = LEADING_MARKER_RE.sub('', game_name).strip()
        if game_name:
            games.append(LibraryEntry(name=game_name, extra={'platform': 'Epic Games'}))

    return _unique_by_name(games)


def _parse_gog_json(text: str) -> Optional[List[LibraryEntry]]:
    """Parse a GOG export with a "products" array; None when the text is not one."""
    try:
        data = json.loads(text)
    except ValueError:
        logger.debug("GOG input is not JSON, falling back to line-by-line parsing")
        return None

    if not isinstance(data, dict) or not isinstance(data.get('products'), list):
        return None

    games = []
    for product in data['products']:
        if not isinstance(product, dict):
            continue
        title = product.get('title')
        if isinstance(title, str) and title.strip():
            games.append(LibraryEntry(
                name=title.strip(),
                source_id=str(product['id']) if product.get('id') is not None else None,
                extra={'platform': 'GOG'},
            ))
    return games


def parse_gog_games(text: str) -> List[LibraryEntry]:
    """
    Parse a GOG library, either the JSON export or one title per line.

    Returns:
        Entries in input order, case-insensitively unique
    """
    trimmed_input = text.strip()

    games = _parse_gog_json(trimmed_input)
    if games is None:
        games = []
        for line in trimmed_input.splitlines():
            trimmed = line.strip()
            if not trimmed or _is_header_line(trimmed):
                continue
            games.append(LibraryEntry(name=trimmed, extra={'platform': 'GOG'}))

    return _unique_by_name(games)


class LibraryPlatform(ABC):
    """A storefront whose library can be compared with the catalog."""

    key: str = ""
    display_name: str = ""
    input_field: str = ""

    @property
    def empty_input_message(self) -> str:
        return f"Please provide your {self.display_name} list."

    @abstractmethod
    async def fetch_library(self, raw_input: str) -> List[LibraryEntry]:
        """Turn non-empty raw input into library entries."""

    async def parse(self, raw_input: Optional[str]) -> List[LibraryEntry]:
        """
        Read the user's library from raw input.

        Raises:
            ValidationError: If the input is empty or unusable
            EmptyLibraryError: If no titles could be read
            AppError: Platform specific fetch failures
        """
        if not raw_input or not raw_input.strip():
            raise ValidationError(self.empty_input_message, field=self.input_field)

        entries = await self.fetch_library(raw_input)
        if not entries:
            raise EmptyLibraryError(self.key)

        logger.info(f"Found {len(entries)} {self.display_name} games")
        return entries

    def describe_error(self, error: Exception) -> str:
        """Message shown to the user when reading the library failed."""
        if isinstance(error, AppError):
            return error.message
        return f"An error occurred while comparing {self.display_name} games. Please try again."

    @abstractmethod
    def store_url(self, entry: LibraryEntry) -> str:
        """Link to the game on the storefront."""


class SteamPlatform(LibraryPlatform):
    key = "steam"
    display_name = "Steam"
    input_field = "steamid"

    def __init__(self, client: SteamClient):
        self.client = client

    @property
    def empty_input_message(self) -> str:
        return "Please provide your Steam ID, username, or profile URL."

    async def fetch_library(self, raw_input: str) -> List[LibraryEntry]:
        steam_id = await self.client.resolve_steam_id(raw_input)
        if not steam_id:
            raise ValidationError(
                'Invalid Steam ID format or unable to resolve Steam profile. '
                'Please check your Steam ID or profile URL.',
                field=self.input_field,
            )

        games = await self.client.get_owned_games(steam_id)
        entries = []
        for game in games:
            name = game.get('name')
            if not isinstance(name, str) or not name.strip():
                continue
            entries.append(LibraryEntry(
                name=name,
                source_id=str(game['appid']) if game.get('appid') is not None else None,
                extra={
                    'platform': 'Steam',
                    'playtime_hours': int((game.get('playtime_forever') or 0) / 60 + 0.5),
                },
            ))
        return entries

    def store_url(self, entry: LibraryEntry) -> str:
        if entry.source_id:
            return STEAM_STORE_APP_URL.format(appid=entry.source_id)
        return STEAM_STORE_SEARCH_URL.format(query=quote_plus(entry.name))


class EpicPlatform(LibraryPlatform):
    key = "epic"
    display_name = "Epic Games"
    input_field = "epicgames"

    async def fetch_library(self, raw_input: str) -> List[LibraryEntry]:
        return parse_epic_games(raw_input)

    def store_url(self, entry: LibraryEntry) -> str:
        return EPIC_STORE_SEARCH_URL.format(query=quote_plus(entry.name))


class GogPlatform(LibraryPlatform):
    key = "gog"
    display_name = "GOG"
    input_field = "goggames"

    async def fetch_library(self, raw_input: str) -> List[LibraryEntry]:
        return parse_gog_games(raw_input)

    def store_url(self, entry: LibraryEntry) -> str:
        return GOG_STORE_SEARCH_URL.format(query=quote_plus(entry.name))


def build_platforms(steam_client: SteamClient) -> Dict[str, LibraryPlatform]:
    """Create one instance of every supported platform, keyed by platform key."""
    platforms = [SteamPlatform(steam_client), EpicPlatform(), GogPlatform()]
    return {platform.key: platform for platform in platforms}


def get_platform(platforms: Dict[str, LibraryPlatform], key: str) -> LibraryPlatform:
    """
    Look up a platform by key.

    Raises:
        ValidationError: If the platform is not supported
    """
    platform = platforms.get((key or '').strip().lower())
    if platform is None:
        raise ValidationError(f"Unsupported platform: {key}", field='platform')
    return platform
