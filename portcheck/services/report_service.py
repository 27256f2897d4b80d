"""
Comparison report builder.

Match records only carry names and the catalog key; this module looks the
key back up in the catalog to add the description, screenshot and links the
report page shows.
"""

from typing import Any, Dict, List, Sequence
from urllib.parse import quote

from portcheck.models import CatalogEntry, LibraryEntry, MatchRecord
from portcheck.services.catalog_service import get_image_url
from portcheck.services.platforms import LibraryPlatform
from utils.constants import PORT_DETAIL_URL


def port_detail_url(catalog_key: str) -> str:
    """Link to the port's page on portmaster.games."""
    return PORT_DETAIL_URL.format(key=quote(catalog_key, safe="!*'()"))


def build_report(platform: LibraryPlatform, library_entries: Sequence[LibraryEntry],
                 catalog_entries: Sequence[CatalogEntry], matches: Sequence[MatchRecord]) -> Dict[str, Any]:
    """
    Assemble everything the report page and the JSON API return.

    Args:
        platform: Platform the library came from
        library_entries: The user's library
        catalog_entries: The PortMaster catalog
        matches: Matcher output for the two lists

    Returns:
        Dictionary with counts and enriched match rows
    """
    catalog_by_key = {}
    for entry in catalog_entries:
        catalog_by_key.setdefault(entry.key, entry)

    library_by_name = {}
    for entry in library_entries:
        library_by_name.setdefault(entry.name, entry)

    rows: List[Dict[str, Any]] = []
    for record in matches:
        row = record.to_dict()

        catalog_entry = catalog_by_key.get(record.catalog_key)
        row['description'] = catalog_entry.description if catalog_entry else ''
        row['imageUrl'] = get_image_url(catalog_entry.image_ref if catalog_entry else None)
        row['portUrl'] = port_detail_url(record.catalog_key)

        library_entry = library_by_name.get(record.library_name)
        if library_entry is not None:
            row['storeUrl'] = platform.store_url(library_entry)
            if 'playtime_hours' in library_entry.extra:
                row['playtimeHours'] = library_entry.extra['playtime_hours']

        rows.append(row)

    return {
        'platform': platform.key,
        'platform_name': platform.display_name,
        'library_count': len(library_entries),
        'catalog_count': len(catalog_entries),
        'match_count': len(rows),
        'matches': rows,
    }
