"""
Common models and enums used across the application.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class MatchKind(Enum):
    """How a library title was judged to be the same game as a catalog title.

    Members are declared from strictest to loosest; ``rank`` follows that order.
    """
    EXACT = "exact"
    SPACE_INSENSITIVE = "space-insensitive"
    NORMALIZED = "normalized"
    CATALOG_ORIGINAL_KEY = "catalog-original-key"
    FUZZY = "fuzzy"

    @property
    def rank(self) -> int:
        return _KIND_ORDER.index(self)


_KIND_ORDER = list(MatchKind)


@dataclass(frozen=True)
class LibraryEntry:
    """One title owned by the user on a storefront."""
    name: str
    source_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class CatalogEntry:
    """One port in the PortMaster catalog."""
    name: str
    key: str
    description: str = ""
    image_ref: Optional[Dict[str, Any]] = field(default=None, compare=False, hash=False)
    genres: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'key': self.key,
            'description': self.description,
            'imageRef': self.image_ref,
            'genres': list(self.genres),
        }


@dataclass(frozen=True)
class MatchRecord:
    """A library title paired with the catalog title it matched."""
    library_name: str
    catalog_name: str
    catalog_key: str
    kind: MatchKind
    similarity: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'libraryName': self.library_name,
            'catalogName': self.catalog_name,
            'catalogKey': self.catalog_key,
            'kind': self.kind.value,
        }
        if self.similarity is not None:
            data['similarity'] = self.similarity
        return data
