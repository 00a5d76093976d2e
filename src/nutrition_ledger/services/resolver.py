"""Resolution of caller-supplied entry identifiers."""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from nutrition_ledger.domain.errors import NotFoundError
from nutrition_ledger.domain.ledger import LedgerEntry

_logger = logging.getLogger(__name__)


class LookupStrategy(Protocol):
    """One way of matching an identifier to an entry position."""

    name: str

    def find(self, entries: Sequence[LedgerEntry], identifier: str) -> int | None:
        """Return the index of the matching entry, or None."""


@dataclass(frozen=True)
class ById:
    """Match the entry's own id."""

    name: str = "id"

    def find(self, entries: Sequence[LedgerEntry], identifier: str) -> int | None:
        for index, entry in enumerate(entries):
            if str(entry.id) == identifier:
                return index
        return None


@dataclass(frozen=True)
class BySourceRef:
    """Match the first entry whose catalog reference equals the identifier."""

    name: str = "source_ref"

    def find(self, entries: Sequence[LedgerEntry], identifier: str) -> int | None:
        for index, entry in enumerate(entries):
            if entry.source_ref is not None and str(entry.source_ref) == identifier:
                return index
        return None


@dataclass(frozen=True)
class ByIndex:
    """Treat a numeric identifier as a position in the entry list.

    Fractional numbers are truncated, so "1.0" and "1.7" both address
    position 1.
    """

    name: str = "index"

    def find(self, entries: Sequence[LedgerEntry], identifier: str) -> int | None:
        try:
            number = float(identifier)
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        index = int(number)
        if 0 <= index < len(entries):
            return index
        return None


def _default_strategies() -> list[LookupStrategy]:
    return [ById(), BySourceRef(), ByIndex()]


@dataclass
class EntryResolver:
    """Resolve an identifier by trying each strategy in order."""

    strategies: list[LookupStrategy] = field(default_factory=_default_strategies)

    def resolve(self, entries: Sequence[LedgerEntry], identifier: object) -> int:
        """Return the index of the entry addressed by identifier.

        Raises NotFoundError listing the available ids when nothing matches.
        """
        key = str(identifier).strip()
        for strategy in self.strategies:
            index = strategy.find(entries, key)
            if index is not None:
                _logger.debug(
                    "Resolved entry identifier %s by %s", key, strategy.name
                )
                return index
        available = ", ".join(str(entry.id) for entry in entries) or "none"
        raise NotFoundError(
            f"Entry not found for identifier {key!r}; available ids: {available}"
        )
