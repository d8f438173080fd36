"""
In-memory filtering and ordering of house listings by search criteria
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterable, List

from .models import SearchCriteria

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "address")
EXACT_FIELDS = ("rooms", "decoration", "orientation")


def _field(record: Any, name: str) -> Any:
    """Read a field from a model, plain object or mapping"""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


class ListingFilter:
    """
    Apply SearchCriteria to a sequence of listing records

    Records may be HouseListing models, database rows or plain dicts; any
    object exposing title, address, price, area, rooms, decoration,
    orientation and year works. The filter holds no state and never
    mutates its input, so one instance can serve any number of callers.
    """

    def predicate(self, criteria: SearchCriteria) -> Callable[[Any], bool]:
        """
        Build a record predicate for the criteria

        Text criteria are case-folded once here rather than per record.
        """
        text = [
            (name, getattr(criteria, name).casefold())
            for name in TEXT_FIELDS
            if getattr(criteria, name) is not None
        ]
        exact = [
            (name, getattr(criteria, name))
            for name in EXACT_FIELDS
            if getattr(criteria, name) is not None
        ]
        ranges = [
            (name, low, high)
            for name, low, high in criteria.ranges()
            if low is not None or high is not None
        ]

        def matches(record: Any) -> bool:
            for name, needle in text:
                value = _field(record, name)
                if value is None or needle not in str(value).casefold():
                    return False

            for name, expected in exact:
                if _field(record, name) != expected:
                    return False

            for name, low, high in ranges:
                value = _field(record, name)
                if value is None:
                    return False
                if low is not None and value < low:
                    return False
                if high is not None and value > high:
                    return False

            return True

        return matches

    def matches(self, criteria: SearchCriteria, record: Any) -> bool:
        """Check whether a single record satisfies every present constraint"""
        if criteria.crossed_ranges():
            return False
        return self.predicate(criteria)(record)

    def sort(self, criteria: SearchCriteria, records: Iterable[Any]) -> List[Any]:
        """
        Order records by the criteria's sort key

        Stable on ties; records missing the sort field keep their input
        order after the others. Unknown or absent keys leave order unchanged.
        """
        records = list(records)
        sort_key = criteria.sort_key()
        if sort_key is None:
            return records

        present = [r for r in records if _field(r, sort_key.field) is not None]
        missing = [r for r in records if _field(r, sort_key.field) is None]

        # sorted() stays stable with reverse=True
        ordered = sorted(
            present,
            key=lambda r: _field(r, sort_key.field),
            reverse=sort_key.descending,
        )
        return ordered + missing

    def apply(self, criteria: SearchCriteria, records: Iterable[Any]) -> List[Any]:
        """
        Filter and order records

        Args:
            criteria: Search criteria; absent fields impose no constraint
            records: Listing records in their original order

        Returns:
            New list of matching records in the requested order
        """
        crossed = criteria.crossed_ranges()
        if crossed:
            logger.debug(f"Crossed range on {', '.join(crossed)}; nothing can match")
            return []

        records = list(records)
        matches = self.predicate(criteria)
        matching = [record for record in records if matches(record)]
        logger.debug(f"Matched {len(matching)} of {len(records)} listings")

        return self.sort(criteria, matching)


def apply_filter(criteria: SearchCriteria, records: Iterable[Any]) -> List[Any]:
    """Filter and order records with the shared ListingFilter"""
    return listing_filter.apply(criteria, records)


# Shared stateless instance
listing_filter = ListingFilter()
