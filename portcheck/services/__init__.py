"""
Services package for business logic components.

This package contains the matcher and the adapters that feed it: storefront
platforms, the Steam API client and the PortMaster catalog.
"""

from .matcher import match, collapse_matches
from .steam_service import SteamClient, parse_steam_input
from .platforms import (
    LibraryPlatform,
    SteamPlatform,
    EpicPlatform,
    GogPlatform,
    build_platforms,
    get_platform,
    parse_epic_games,
    parse_gog_games,
)
from .catalog_service import CatalogService, get_image_url
from .report_service import build_report

__all__ = [
    # Matching
    'match',
    'collapse_matches',
    # Steam
    'SteamClient',
    'parse_steam_input',
    # Platforms
    'LibraryPlatform',
    'SteamPlatform',
    'EpicPlatform',
    'GogPlatform',
    'build_platforms',
    'get_platform',
    'parse_epic_games',
    'parse_gog_games',
    # Catalog
    'CatalogService',
    'get_image_url',
    # Report
    'build_report',
]
