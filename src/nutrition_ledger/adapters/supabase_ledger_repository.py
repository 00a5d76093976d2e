"""Supabase repository for daily ledgers and their entries."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from nutrition_ledger.domain.errors import UpstreamFailure
from nutrition_ledger.domain.ledger import Ledger, LedgerEntry, MealType, SourceKind
from nutrition_ledger.domain.nutrition import MacroProfile
from nutrition_ledger.services.entries import parse_nutrition
from nutrition_ledger.services.ledger import LedgerRepository

_LEDGER_COLUMNS = (
    "id, user_id, day, day_start, total_calories, total_protein_g, "
    "total_carbs_g, total_fat_g, total_fiber_g"
)
_ENTRY_COLUMNS = (
    "id, ledger_id, source_kind, source_ref, name, quantity, meal_type, "
    "nutrition, logged_at"
)


@dataclass
class SupabaseLedgerRepository(LedgerRepository):
    """Supabase implementation for daily ledgers."""

    client: Client

    def find_ledger(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> Ledger | None:
        """Return the ledger whose day starts within [start, end)."""
        response = (
            self.client.table("daily_ledgers")
            .select(_LEDGER_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("day_start", start.isoformat())
            .lt("day_start", end.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return self._with_entries(response.data[0])

    def create_ledger(self, user_id: UUID, day: date, day_start: datetime) -> Ledger:
        """Create an empty ledger with zero totals."""
        response = (
            self.client.table("daily_ledgers")
            .insert(
                {
                    "user_id": str(user_id),
                    "day": day.isoformat(),
                    "day_start": day_start.isoformat(),
                    **_totals_payload(MacroProfile.zero()),
                }
            )
            .execute()
        )
        if not response.data:
            raise UpstreamFailure("Failed to create daily ledger")
        return _parse_ledger(response.data[0], [])

    def get_ledger(self, ledger_id: UUID, user_id: UUID) -> Ledger | None:
        """Return a user's ledger by id."""
        response = (
            self.client.table("daily_ledgers")
            .select(_LEDGER_COLUMNS)
            .eq("id", str(ledger_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return self._with_entries(response.data[0])

    def list_ledgers(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[Ledger]:
        """Return ledgers whose day starts within [start, end), newest first."""
        response = (
            self.client.table("daily_ledgers")
            .select(_LEDGER_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("day_start", start.isoformat())
            .lt("day_start", end.isoformat())
            .order("day_start", desc=True)
            .execute()
        )
        rows = response.data or []
        if not rows:
            return []
        entries = self._list_entries([row["id"] for row in rows])
        return [_parse_ledger(row, entries.get(str(row["id"]), [])) for row in rows]

    def insert_entry(self, ledger_id: UUID, entry: LedgerEntry) -> None:
        """Persist a new entry row."""
        response = (
            self.client.table("ledger_entries")
            .insert(
                {
                    "id": str(entry.id),
                    "ledger_id": str(ledger_id),
                    "source_kind": entry.source_kind.value,
                    "source_ref": entry.source_ref,
                    "name": entry.name,
                    "quantity": entry.quantity,
                    "meal_type": entry.meal_type.value,
                    "nutrition": _nutrition_payload(entry.nutrition),
                    "logged_at": entry.logged_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise UpstreamFailure("Failed to insert ledger entry")

    def delete_entry(self, ledger_id: UUID, entry_id: UUID) -> None:
        """Delete an entry row."""
        self.client.table("ledger_entries").delete().eq("id", str(entry_id)).eq(
            "ledger_id", str(ledger_id)
        ).execute()

    def update_totals(self, ledger_id: UUID, totals: MacroProfile) -> None:
        """Overwrite the ledger's aggregate totals."""
        self.client.table("daily_ledgers").update(_totals_payload(totals)).eq(
            "id", str(ledger_id)
        ).execute()

    def _with_entries(self, row: dict[str, object]) -> Ledger:
        ledger_id = str(row["id"])
        return _parse_ledger(row, self._list_entries([ledger_id]).get(ledger_id, []))

    def _list_entries(self, ledger_ids: list[str]) -> dict[str, list[LedgerEntry]]:
        response = (
            self.client.table("ledger_entries")
            .select(_ENTRY_COLUMNS)
            .in_("ledger_id", ledger_ids)
            .order("logged_at", desc=False)
            .execute()
        )
        grouped: dict[str, list[LedgerEntry]] = {}
        for row in response.data or []:
            grouped.setdefault(str(row["ledger_id"]), []).append(_parse_entry(row))
        return grouped


def _totals_payload(totals: MacroProfile) -> dict[str, float]:
    return {
        "total_calories": totals.calories,
        "total_protein_g": totals.protein_g,
        "total_carbs_g": totals.carbs_g,
        "total_fat_g": totals.fat_g,
        "total_fiber_g": totals.fiber_g,
    }


def _nutrition_payload(nutrition: MacroProfile) -> dict[str, float]:
    return {
        **nutrition.macros(),
        "sugar_g": nutrition.sugar_g,
        "sodium_mg": nutrition.sodium_mg,
    }


def _parse_ledger(row: dict[str, object], entries: list[LedgerEntry]) -> Ledger:
    return Ledger(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        day=date.fromisoformat(str(row["day"])),
        entries=entries,
        totals=MacroProfile(
            calories=float(row.get("total_calories") or 0.0),
            protein_g=float(row.get("total_protein_g") or 0.0),
            carbs_g=float(row.get("total_carbs_g") or 0.0),
            fat_g=float(row.get("total_fat_g") or 0.0),
            fiber_g=float(row.get("total_fiber_g") or 0.0),
        ),
    )


def _parse_entry(row: dict[str, object]) -> LedgerEntry:
    return LedgerEntry(
        id=UUID(str(row["id"])),
        source_kind=SourceKind(str(row["source_kind"])),
        source_ref=str(row["source_ref"]) if row.get("source_ref") else None,
        name=str(row.get("name") or ""),
        quantity=float(row.get("quantity") or 0.0),
        meal_type=MealType(str(row["meal_type"])),
        nutrition=parse_nutrition(row.get("nutrition") or {}),
        logged_at=datetime.fromisoformat(str(row["logged_at"])),
    )
