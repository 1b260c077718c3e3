"""Services for the food inventory."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from expiry_tracker.domain.foods import (
    NEARLY_EXPIRING_LIMIT,
    DeleteAck,
    FoodFilter,
    FoodRecord,
    InsertAck,
    Note,
    UpdateAck,
    nearly_expiring_window,
    normalize_expiry_date,
)
from expiry_tracker.errors import EmptyUpdateError

EXPIRY_FIELD = "expiryDate"
ID_FIELD = "_id"


class FoodRepository(Protocol):
    """Persistence interface for food records."""

    def list_foods(self, food_filter: FoodFilter) -> list[FoodRecord]:
        """Return filtered foods sorted by expiry date, one page at a time."""

    def list_expiring_between(
        self, start: datetime, end: datetime, limit: int
    ) -> list[FoodRecord]:
        """Return foods expiring in [start, end], soonest first."""

    def list_expired_before(self, moment: datetime) -> list[FoodRecord]:
        """Return foods that expired before a moment, most recent first."""

    def get_food(self, food_id: str) -> FoodRecord | None:
        """Return a food by id, if present."""

    def insert_food(self, document: dict[str, object]) -> InsertAck:
        """Insert a new food document."""

    def list_by_owner(self, user_email: str) -> list[FoodRecord]:
        """Return every food owned by an email."""

    def push_note(
        self, food_id: str, owner_email: str, note: Note
    ) -> FoodRecord | None:
        """Append a note to a food owned by owner_email and return it."""

    def upsert_food(self, food_id: str, fields: dict[str, object]) -> UpdateAck:
        """Merge fields into a food, creating it when absent."""

    def delete_food(self, food_id: str) -> DeleteAck:
        """Delete a food by id."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class FoodService:
    """Application service for food inventory operations."""

    repository: FoodRepository
    clock: Callable[[], datetime] = field(default=_utc_now)

    def list_foods(self, food_filter: FoodFilter) -> list[FoodRecord]:
        """List foods matching search/category filters, paginated."""
        return self.repository.list_foods(food_filter)

    def nearly_expiring(self) -> list[FoodRecord]:
        """Return up to six foods expiring within the next five days."""
        start, end = nearly_expiring_window(self.clock())
        return self.repository.list_expiring_between(
            start, end, NEARLY_EXPIRING_LIMIT
        )

    def expired(self) -> list[FoodRecord]:
        """Return every expired food, most recently expired first."""
        return self.repository.list_expired_before(self.clock())

    def get_food(self, food_id: str) -> FoodRecord | None:
        """Return a food by id, or None when it does not exist."""
        return self.repository.get_food(food_id)

    def create_food(self, payload: dict[str, object]) -> InsertAck:
        """Store a new food record."""
        return self.repository.insert_food(_prepare_fields(payload))

    def list_by_owner(self, user_email: str) -> list[FoodRecord]:
        """Return foods submitted by a user."""
        return self.repository.list_by_owner(user_email)

    def add_note(self, food_id: str, user_email: str, text: str) -> FoodRecord | None:
        """Append a note when user_email owns the food."""
        note = Note(user_email=user_email, text=text, created_at=self.clock())
        return self.repository.push_note(food_id, user_email, note)

    def update_food(self, food_id: str, payload: dict[str, object]) -> UpdateAck:
        """Merge the supplied fields into a food, inserting it if missing."""
        fields = _prepare_fields(payload)
        if not fields:
            raise EmptyUpdateError()
        return self.repository.upsert_food(food_id, fields)

    def delete_food(self, food_id: str) -> DeleteAck:
        """Delete a food; absent ids report zero deletions."""
        return self.repository.delete_food(food_id)


def _prepare_fields(payload: dict[str, object]) -> dict[str, object]:
    """Drop client-supplied ids and normalize a non-empty expiry date."""
    fields = {key: value for key, value in payload.items() if key != ID_FIELD}
    if fields.get(EXPIRY_FIELD):
        fields[EXPIRY_FIELD] = normalize_expiry_date(fields[EXPIRY_FIELD])
    return fields
