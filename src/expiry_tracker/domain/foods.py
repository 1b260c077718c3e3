"""Domain models for tracked food records."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from expiry_tracker.errors import InvalidExpiryDateError

NEARLY_EXPIRING_WINDOW = timedelta(days=5)
NEARLY_EXPIRING_LIMIT = 6
DEFAULT_PAGE_SIZE = 9
MAX_PAGE_SIZE = 100
MAX_PAGE = 1_000_000
ALL_CATEGORIES = "all"


@dataclass(frozen=True)
class Note:
    """Append-only note attached to a food record."""

    user_email: str
    text: str
    created_at: datetime | None


@dataclass(frozen=True)
class FoodRecord:
    """A tracked food item with known fields and opaque extras.

    Known fields hold whatever the client stored; only the expiry date is typed.
    """

    id: str
    title: object = None
    category: object = None
    expiry_date: datetime | None = None
    user_email: object = None
    notes: list[Note] = field(default_factory=list)
    extra: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class FoodFilter:
    """Filters and pagination for listing foods."""

    search: str | None = None
    category: str | None = None
    page: int = 0
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def skip(self) -> int:
        return self.page * self.limit

    @property
    def category_filter(self) -> str | None:
        """Return the category to match, or None when filtering is disabled."""
        if not self.category or self.category == ALL_CATEGORIES:
            return None
        return self.category


@dataclass(frozen=True)
class InsertAck:
    acknowledged: bool
    inserted_id: str


@dataclass(frozen=True)
class UpdateAck:
    acknowledged: bool
    matched_count: int
    modified_count: int
    upserted_id: str | None = None

    @property
    def upserted_count(self) -> int:
        return 1 if self.upserted_id is not None else 0


@dataclass(frozen=True)
class DeleteAck:
    acknowledged: bool
    deleted_count: int


def nearly_expiring_window(now: datetime) -> tuple[datetime, datetime]:
    """Return the inclusive (start, end) range of the nearly-expiring view."""
    return now, now + NEARLY_EXPIRING_WINDOW


def normalize_expiry_date(value: object) -> datetime | None:
    """Convert a client-supplied expiry value into a UTC timestamp.

    Strings are parsed as ISO-8601 (date-only and naive values are taken as
    UTC), numbers are milliseconds since the epoch.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidExpiryDateError(value)
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, int | float):
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError) as exc:
            raise InvalidExpiryDateError(value) from exc
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            return _as_utc(datetime.fromisoformat(raw))
        except ValueError as exc:
            raise InvalidExpiryDateError(value) from exc
    raise InvalidExpiryDateError(value)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
