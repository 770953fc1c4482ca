"""Resolution of membership records (keyed by postal code) to region codes.

A record is matched by a chain of strategies, the first one returning a code
wins. The default chain is the postal code of the municipality, then the
municipality name taken from the record's note (``"Stadt Berlin"`` ->
``"Berlin"``). Other membership exports can plug in their own strategies.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol, Sequence

from mitgliederkarte.models import ExternalRecord, RegionFeature, ResolvedRecord
from mitgliederkarte.processing.cleaner import canon_postal_code

logger = logging.getLogger(__name__)

# Length of the locality label in front of the name, e.g. "Stadt ".
NOTE_PREFIX_LENGTH = 6


class ResolutionStrategy(Protocol):
    def match(self, record: ExternalRecord) -> str | None:
        """Return the region code for ``record`` or None."""
        ...


class PostalCodeStrategy:
    """Match on the municipality's declared postal code, leading zeros ignored.

    When several municipalities share a postal code the first one in
    collection order wins.
    """

    def __init__(self, features: Iterable[RegionFeature]):
        self._index: dict[str, str] = {}
        for feature in features:
            if feature.postal_code is None:
                continue
            key = canon_postal_code(feature.postal_code)
            if key and key not in self._index:
                self._index[key] = feature.code

    def match(self, record: ExternalRecord) -> str | None:
        key = canon_postal_code(record.postal_code)
        if not key:
            return None
        return self._index.get(key)


class NoteNameStrategy:
    """Match the note text, minus a fixed-length prefix, against municipality names."""

    def __init__(self, features: Iterable[RegionFeature], prefix_length: int = NOTE_PREFIX_LENGTH):
        self.prefix_length = prefix_length
        self._index: dict[str, str] = {}
        for feature in features:
            self._index.setdefault(feature.name, feature.code)

    def match(self, record: ExternalRecord) -> str | None:
        name = record.note[self.prefix_length:]
        if not name:
            return None
        return self._index.get(name)


def default_strategies(features: Sequence[RegionFeature]) -> list[ResolutionStrategy]:
    return [PostalCodeStrategy(features), NoteNameStrategy(features)]


class IdentifierResolver:
    """Resolve records against one municipality collection."""

    def __init__(self, strategies: Sequence[ResolutionStrategy]):
        if not strategies:
            raise ValueError("IdentifierResolver needs at least one strategy")
        self.strategies = list(strategies)

    @classmethod
    def for_features(cls, features: Iterable[RegionFeature]) -> IdentifierResolver:
        return cls(default_strategies(tuple(features)))

    def resolve(self, record: ExternalRecord) -> str | None:
        for strategy in self.strategies:
            code = strategy.match(record)
            if code is not None:
                return code
        logger.warning("No RS found for %s (%s).", record.note, record.postal_code)
        return None

    def resolve_all(self, records: Iterable[ExternalRecord]) -> tuple[ResolvedRecord, ...]:
        resolved = tuple(ResolvedRecord.from_record(r, self.resolve(r)) for r in records)
        unresolved = sum(1 for r in resolved if not r.resolved)
        logger.info(
            "Resolved %d of %d membership records (%d unresolved)",
            len(resolved) - unresolved,
            len(resolved),
            unresolved,
        )
        return resolved


def resolve(record: ExternalRecord, municipality_features: Iterable[RegionFeature]) -> str | None:
    """Region code of a single record, using the default strategies."""
    return IdentifierResolver.for_features(municipality_features).resolve(record)


def resolve_records(
    records: Iterable[ExternalRecord],
    municipality_features: Iterable[RegionFeature],
    strategies: Sequence[ResolutionStrategy] | None = None,
) -> tuple[ResolvedRecord, ...]:
    """Resolve a whole record set. Diagnostics follow the record order."""
    if strategies is None:
        resolver = IdentifierResolver.for_features(municipality_features)
    else:
        resolver = IdentifierResolver(strategies)
    return resolver.resolve_all(records)
