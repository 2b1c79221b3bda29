"""Element Filter.

Typed filter shared by the query, takeoff and handover operations.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bim_ingest.domain.models.element import NormalizedElement


@dataclass(frozen=True)
class ElementFilter:
    """Element Filter.

    Inclusion lists match when the element's field equals any listed value;
    an empty list means no constraint. ``search`` is a case-insensitive
    substring match over name, guid, category and system, combined with OR.
    """

    categories: tuple[str, ...] = ()
    systems: tuple[str, ...] = ()
    levels: tuple[str, ...] = ()
    types: tuple[str, ...] = ()
    search: str | None = None

    SEARCH_FIELDS = ("name", "guid", "category", "system")

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ElementFilter:
        """Build a filter from loosely typed input.

        Accepts singular keys ("category") as well as list keys
        ("categories"), and scalars as well as lists.
        """
        if not data:
            return cls()

        def _values(plural: str, singular: str) -> tuple[str, ...]:
            raw = data.get(plural, data.get(singular))
            if raw is None:
                return ()
            if isinstance(raw, str):
                return (raw,)
            return tuple(str(v) for v in raw)

        search = data.get("search")
        return cls(
            categories=_values("categories", "category"),
            systems=_values("systems", "system"),
            levels=_values("levels", "level"),
            types=_values("types", "type"),
            search=str(search) if search else None,
        )

    @property
    def is_empty(self) -> bool:
        return not (self.categories or self.systems or self.levels or self.types or self.search)

    def matches(self, element: NormalizedElement) -> bool:
        """Check an element against all constraints."""
        if self.categories and element.category not in self.categories:
            return False
        if self.systems and element.system not in self.systems:
            return False
        if self.levels and element.level not in self.levels:
            return False
        if self.types and element.type not in self.types:
            return False
        if self.search:
            needle = self.search.lower()
            haystack = (getattr(element, name) for name in self.SEARCH_FIELDS)
            if not any(value and needle in value.lower() for value in haystack):
                return False
        return True

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "categories": list(self.categories),
            "systems": list(self.systems),
            "levels": list(self.levels),
            "types": list(self.types),
            "search": self.search,
        }
        return {k: v for k, v in data.items() if v}


NO_FILTER = ElementFilter()
