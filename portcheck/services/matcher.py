"""
Game title matcher.

Pairs every library title with every catalog title and classifies the pair by
the strictest rule that accepts it:

1. exact                 case-folded names are equal
2. space-insensitive     case-folded names are equal once whitespace is removed
3. normalized            normalized names are equal
4. catalog-original-key  normalized library name equals the normalized port key
5. fuzzy                 normalized names are within a small edit distance

The matcher is pure: no I/O, no shared state, and it never raises.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from portcheck.models import MatchKind, MatchRecord
from utils.constants import (
    FUZZY_MAX_DISTANCE,
    FUZZY_MAX_LENGTH_DIFF,
    FUZZY_MIN_LENGTH,
    FUZZY_MIN_SIMILARITY,
)
from utils.fuzzy_matching import levenshtein_distance, normalize, similarity_percent, strip_whitespace

logger = logging.getLogger(__name__)


class _Title:
    """Comparison forms of one title, computed once per entry."""

    __slots__ = ('raw', 'folded', 'compact', 'normalized')

    def __init__(self, raw: str):
        self.raw = raw
        self.folded = raw.casefold()
        self.compact = strip_whitespace(self.folded)
        self.normalized = normalize(raw)


def _field(entry: Any, name: str) -> str:
    """Read a string field from a dataclass entry or a mapping; anything else reads as empty."""
    if isinstance(entry, Mapping):
        value = entry.get(name)
    else:
        value = getattr(entry, name, None)
    return value if isinstance(value, str) else ""


def _prepare_library(entries: Optional[Iterable[Any]]) -> List[_Title]:
    titles = []
    for entry in entries or ():
        name = _field(entry, 'name')
        if name.strip():
            titles.append(_Title(name))
    return titles


def _prepare_catalog(entries: Optional[Iterable[Any]]) -> List[Tuple[_Title, str, str]]:
    prepared = []
    for entry in entries or ():
        name = _field(entry, 'name')
        if not name.strip():
            continue
        key = _field(entry, 'key')
        prepared.append((_Title(name), key, normalize(key)))
    return prepared


def _fuzzy_similarity(left: str, right: str) -> Optional[int]:
    """Return the similarity percentage when two normalized names are close enough, else None."""
    if len(left) <= FUZZY_MIN_LENGTH or len(right) <= FUZZY_MIN_LENGTH:
        return None
    if abs(len(left) - len(right)) > FUZZY_MAX_LENGTH_DIFF:
        return None

    distance = levenshtein_distance(left, right)
    similarity = 1 - distance / max(len(left), len(right))

    # Both limits apply: titles over 40 characters can pass one and fail the other
    if distance <= FUZZY_MAX_DISTANCE and similarity >= FUZZY_MIN_SIMILARITY:
        return similarity_percent(similarity)
    return None


def _classify_pair(library: _Title, catalog: _Title,
                   normalized_key: str) -> Optional[Tuple[MatchKind, Optional[int]]]:
    """
    Classify a single library/catalog pair.

    Returns:
        (kind, similarity) for the first rule that fires, or None
    """
    if library.folded == catalog.folded:
        return MatchKind.EXACT, None

    if library.compact == catalog.compact:
        return MatchKind.SPACE_INSENSITIVE, None

    if not library.normalized:
        return None

    if library.normalized == catalog.normalized:
        return MatchKind.NORMALIZED, None

    if normalized_key and library.normalized == normalized_key:
        return MatchKind.CATALOG_ORIGINAL_KEY, None

    if catalog.normalized:
        similarity = _fuzzy_similarity(library.normalized, catalog.normalized)
        if similarity is not None:
            return MatchKind.FUZZY, similarity

    return None


def _sort_key(record: MatchRecord) -> Tuple[str, str, str, str]:
    return (
        record.library_name.casefold(),
        record.catalog_name.casefold(),
        record.library_name,
        record.catalog_name,
    )


def collapse_matches(records: Iterable[MatchRecord]) -> List[MatchRecord]:
    """
    Deduplicate and order match records.

    Keeps one record per (library name, catalog name), preferring the
    strictest kind and then the lowest catalog key, and sorts the result
    case-insensitively by library name, then catalog name.

    Args:
        records: Match records, possibly merged from several matcher runs

    Returns:
        Sorted list of unique match records
    """
    best: Dict[Tuple[str, str], MatchRecord] = {}
    for record in records:
        identity = (record.library_name, record.catalog_name)
        current = best.get(identity)
        if current is None or (record.kind.rank, record.catalog_key) < (current.kind.rank, current.catalog_key):
            best[identity] = record

    return sorted(best.values(), key=_sort_key)


def match(library_entries: Optional[Iterable[Any]], catalog_entries: Optional[Iterable[Any]]) -> List[MatchRecord]:
    """
    Match storefront library titles against catalog titles.

    Entries may be LibraryEntry/CatalogEntry instances or mappings with the
    same field names. Entries without a usable name never match.

    Args:
        library_entries: Titles the user owns
        catalog_entries: Ported games in the catalog

    Returns:
        Unique match records sorted by library name, then catalog name
    """
    library = _prepare_library(library_entries)
    catalog = _prepare_catalog(catalog_entries)

    records = []
    for library_title in library:
        for catalog_title, catalog_key, normalized_key in catalog:
            result = _classify_pair(library_title, catalog_title, normalized_key)
            if result is None:
                continue
            kind, similarity = result
            records.append(MatchRecord(
                library_name=library_title.raw,
                catalog_name=catalog_title.raw,
                catalog_key=catalog_key,
                kind=kind,
                similarity=similarity,
            ))

    matches = collapse_matches(records)
    logger.debug(f"Matched {len(library)} library titles against {len(catalog)} catalog titles: "
                 f"{len(matches)} matches")
    return matches
