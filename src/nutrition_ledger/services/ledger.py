"""Daily ledger service: owns entries and running totals."""

import asyncio
import logging
import weakref
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Protocol
from uuid import UUID

from nutrition_ledger.domain.errors import NotFoundError, UpstreamFailure
from nutrition_ledger.domain.events import LedgerEvent
from nutrition_ledger.domain.ledger import EntryRequest, Ledger, LedgerEntry
from nutrition_ledger.domain.nutrition import MacroProfile
from nutrition_ledger.services.broadcast import Broadcaster
from nutrition_ledger.services.entries import EntryNormalizer
from nutrition_ledger.services.persistence import persist
from nutrition_ledger.services.resolver import EntryResolver
from nutrition_ledger.services.user_settings import (
    UserSettingsService,
    require_ordered_range,
)

_logger = logging.getLogger(__name__)


class LedgerRepository(Protocol):
    """Persistence interface for daily ledgers."""

    def find_ledger(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> Ledger | None:
        """Return the ledger whose day starts within [start, end)."""

    def create_ledger(self, user_id: UUID, day: date, day_start: datetime) -> Ledger:
        """Create an empty ledger with zero totals."""

    def get_ledger(self, ledger_id: UUID, user_id: UUID) -> Ledger | None:
        """Return a user's ledger by id."""

    def list_ledgers(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[Ledger]:
        """Return ledgers whose day starts within [start, end), newest first."""

    def insert_entry(self, ledger_id: UUID, entry: LedgerEntry) -> None:
        """Persist a new entry row."""

    def delete_entry(self, ledger_id: UUID, entry_id: UUID) -> None:
        """Delete an entry row."""

    def update_totals(self, ledger_id: UUID, totals: MacroProfile) -> None:
        """Overwrite the ledger's aggregate totals."""


def sum_nutrition(entries: Sequence[LedgerEntry]) -> MacroProfile:
    """Return the elementwise sum of the entries' nutrition, in entry order."""
    total = MacroProfile.zero()
    for entry in entries:
        total = total.plus(entry.nutrition)
    return total


@dataclass
class LedgerService:
    """Appends and removes entries while keeping totals consistent.

    Mutations for the same user and day are serialized with an in-process
    lock, so totals are never computed from a stale read. Totals are always
    the sum of the ledger's entries; when the second of a mutation's two
    writes fails, the first one is undone before the error is raised.
    """

    repository: LedgerRepository
    normalizer: EntryNormalizer
    user_settings: UserSettingsService
    broadcaster: Broadcaster
    resolver: EntryResolver = field(default_factory=EntryResolver)
    _locks: "weakref.WeakValueDictionary[tuple[UUID, date], asyncio.Lock]" = field(
        default_factory=weakref.WeakValueDictionary
    )

    def get_or_create(self, user_id: UUID, day: date | None = None) -> Ledger:
        """Return the user's ledger for the day, creating an empty one."""
        window = self.user_settings.day_window(user_id, day)
        existing = self.repository.find_ledger(user_id, window.start, window.end)
        if existing is not None:
            return existing
        _logger.info("Creating ledger for user %s on %s", user_id, window.day)
        return persist(
            "create ledger",
            lambda: self.repository.create_ledger(user_id, window.day, window.start),
        )

    def list_ledgers(self, user_id: UUID, start: date, end: date) -> list[Ledger]:
        """Return existing ledgers between two days, inclusive."""
        require_ordered_range(start, end)
        first = self.user_settings.day_window(user_id, start)
        last = self.user_settings.day_window(user_id, end)
        return self.repository.list_ledgers(user_id, first.start, last.end)

    async def add_entry(
        self, user_id: UUID, request: EntryRequest
    ) -> tuple[Ledger, LedgerEntry]:
        """Normalize and append an entry, then broadcast the new state."""
        entry = self.normalizer.normalize(request)
        day = request.day or self.user_settings.today(user_id)
        async with self._lock(user_id, day):
            ledger = self.get_or_create(user_id, day)
            entries = [*ledger.entries, entry]
            totals = sum_nutrition(entries)
            persist(
                "insert ledger entry",
                lambda: self.repository.insert_entry(ledger.id, entry),
            )
            self._update_totals_or_undo(
                ledger.id,
                totals,
                "delete inserted entry",
                lambda: self.repository.delete_entry(ledger.id, entry.id),
            )
            updated = replace(ledger, entries=entries, totals=totals)
        _logger.info(
            "Added %s entry %s to ledger %s",
            entry.source_kind,
            entry.id,
            ledger.id,
        )
        await self._emit(
            LedgerEvent(type="add", user_id=user_id, ledger=updated, entry=entry)
        )
        return updated, entry

    async def remove_entry(
        self, user_id: UUID, ledger_id: UUID, identifier: object
    ) -> Ledger:
        """Remove the entry addressed by identifier and broadcast the result."""
        current = self._require_ledger(ledger_id, user_id)
        async with self._lock(user_id, current.day):
            ledger = self._require_ledger(ledger_id, user_id)
            index = self.resolver.resolve(ledger.entries, identifier)
            entry = ledger.entries[index]
            remaining = [*ledger.entries[:index], *ledger.entries[index + 1 :]]
            # Summing the survivors restores the exact pre-add totals.
            totals = sum_nutrition(remaining)
            persist(
                "delete ledger entry",
                lambda: self.repository.delete_entry(ledger.id, entry.id),
            )
            self._update_totals_or_undo(
                ledger.id,
                totals,
                "restore deleted entry",
                lambda: self.repository.insert_entry(ledger.id, entry),
            )
            updated = replace(ledger, entries=remaining, totals=totals)
        negative = [name for name, value in totals.macros().items() if value < 0]
        if negative:
            _logger.warning(
                "Ledger %s totals below zero after removal: %s",
                ledger.id,
                ", ".join(negative),
            )
        _logger.info("Removed entry %s from ledger %s", entry.id, ledger.id)
        await self._emit(
            LedgerEvent(
                type="remove",
                user_id=user_id,
                ledger=updated,
                removed_id=str(identifier),
            )
        )
        return updated

    def _require_ledger(self, ledger_id: UUID, user_id: UUID) -> Ledger:
        ledger = self.repository.get_ledger(ledger_id, user_id)
        if ledger is None:
            raise NotFoundError(f"Daily ledger not found: {ledger_id}")
        return ledger

    def _update_totals_or_undo(
        self,
        ledger_id: UUID,
        totals: MacroProfile,
        undo_action: str,
        undo: Callable[[], None],
    ) -> None:
        try:
            persist(
                "update ledger totals",
                lambda: self.repository.update_totals(ledger_id, totals),
            )
        except UpstreamFailure:
            try:
                undo()
            except Exception:
                _logger.exception(
                    "Failed to %s; ledger %s needs repair", undo_action, ledger_id
                )
            raise

    def _lock(self, user_id: UUID, day: date) -> asyncio.Lock:
        key = (user_id, day)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def _emit(self, event: LedgerEvent) -> None:
        try:
            await self.broadcaster.publish(event)
        except Exception:
            _logger.exception(
                "Failed to broadcast %s event",
                event.type,
                extra={"user": event.user_id},
            )

