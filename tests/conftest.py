"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest
from bson import ObjectId

from expiry_tracker.adapters.mongo_food_repository import parse_food_document
from expiry_tracker.config import Settings
from expiry_tracker.containers import AppContainer
from expiry_tracker.domain.foods import (
    DeleteAck,
    FoodFilter,
    FoodRecord,
    InsertAck,
    Note,
    UpdateAck,
)
from expiry_tracker.errors import InvalidFoodIdError, StorageError
from expiry_tracker.services.foods import FoodRepository, FoodService

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=UTC)


def _check_id(food_id: str) -> str:
    if not ObjectId.is_valid(food_id):
        raise InvalidFoodIdError(food_id)
    return food_id


def _expiry_key(document: dict[str, object]) -> tuple[bool, datetime]:
    expiry = document.get("expiryDate")
    if isinstance(expiry, datetime):
        return True, expiry
    return False, datetime.min.replace(tzinfo=UTC)


@dataclass
class InMemoryFoodRepository(FoodRepository):
    """In-memory food repository mirroring the MongoDB query semantics."""

    documents: dict[str, dict[str, object]] = field(default_factory=dict)

    def add(self, **fields: object) -> str:
        food_id = str(ObjectId())
        self.documents[food_id] = {"_id": food_id, **fields}
        return food_id

    def _records(self, documents: list[dict[str, object]]) -> list[FoodRecord]:
        return [parse_food_document(document) for document in documents]

    def list_foods(self, food_filter: FoodFilter) -> list[FoodRecord]:
        matches = list(self.documents.values())
        if food_filter.search:
            needle = food_filter.search.lower()
            matches = [
                document
                for document in matches
                if needle in str(document.get("foodTitle", "")).lower()
                or needle in str(document.get("foodCategory", "")).lower()
            ]
        category = food_filter.category_filter
        if category is not None:
            matches = [d for d in matches if d.get("foodCategory") == category]
        matches.sort(key=_expiry_key)
        page = matches[food_filter.skip : food_filter.skip + food_filter.limit]
        return self._records(page)

    def list_expiring_between(
        self, start: datetime, end: datetime, limit: int
    ) -> list[FoodRecord]:
        matches = [
            document
            for document in self.documents.values()
            if _expiry_key(document)[0] and start <= document["expiryDate"] <= end
        ]
        matches.sort(key=_expiry_key)
        return self._records(matches[:limit])

    def list_expired_before(self, moment: datetime) -> list[FoodRecord]:
        matches = [
            document
            for document in self.documents.values()
            if _expiry_key(document)[0] and document["expiryDate"] < moment
        ]
        matches.sort(key=_expiry_key, reverse=True)
        return self._records(matches)

    def get_food(self, food_id: str) -> FoodRecord | None:
        document = self.documents.get(_check_id(food_id))
        return parse_food_document(document) if document else None

    def insert_food(self, document: dict[str, object]) -> InsertAck:
        food_id = self.add(**document)
        return InsertAck(acknowledged=True, inserted_id=food_id)

    def list_by_owner(self, user_email: str) -> list[FoodRecord]:
        return self._records(
            [d for d in self.documents.values() if d.get("userEmail") == user_email]
        )

    def push_note(
        self, food_id: str, owner_email: str, note: Note
    ) -> FoodRecord | None:
        document = self.documents.get(_check_id(food_id))
        if document is None or document.get("userEmail") != owner_email:
            return None
        notes = document.setdefault("notes", [])
        notes.append(
            {
                "userEmail": note.user_email,
                "text": note.text,
                "createdAt": note.created_at,
            }
        )
        return parse_food_document(document)

    def upsert_food(self, food_id: str, fields: dict[str, object]) -> UpdateAck:
        document = self.documents.get(_check_id(food_id))
        if document is None:
            self.documents[food_id] = {"_id": food_id, **fields}
            return UpdateAck(
                acknowledged=True,
                matched_count=0,
                modified_count=0,
                upserted_id=food_id,
            )
        changed = any(document.get(key) != value for key, value in fields.items())
        document.update(fields)
        return UpdateAck(
            acknowledged=True, matched_count=1, modified_count=int(changed)
        )

    def delete_food(self, food_id: str) -> DeleteAck:
        removed = self.documents.pop(_check_id(food_id), None)
        return DeleteAck(acknowledged=True, deleted_count=int(removed is not None))


@dataclass
class FailingFoodRepository(InMemoryFoodRepository):
    """Repository whose reads fail like an unreachable database."""

    def list_foods(self, food_filter: FoodFilter) -> list[FoodRecord]:
        raise StorageError("Unable to fetch foods")

    def list_expired_before(self, moment: datetime) -> list[FoodRecord]:
        raise StorageError("Unable to fetch expired foods")


@dataclass
class FakeStorage:
    """Records ping/close calls made by the app lifespan."""

    reachable: bool = True
    pings: int = 0
    closed: bool = False

    def ping(self) -> None:
        self.pings += 1
        if not self.reachable:
            raise ConnectionError("MongoDB unreachable")

    async def close(self) -> None:
        self.closed = True


def make_container(
    settings: Settings,
    repository: FoodRepository,
    storage: FakeStorage | None = None,
) -> AppContainer:
    resolved_storage = storage or FakeStorage()
    return AppContainer(
        settings=settings,
        food_service=FoodService(repository, clock=lambda: NOW),
        ping_storage=resolved_storage.ping,
        close_resources=resolved_storage.close,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        mongodb_uri="mongodb://localhost:27017",
        mongodb_database="foodDB_test",
    )


@pytest.fixture
def food_repository() -> InMemoryFoodRepository:
    return InMemoryFoodRepository()


@pytest.fixture
def food_service(food_repository: InMemoryFoodRepository) -> FoodService:
    return FoodService(food_repository, clock=lambda: NOW)


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def container(
    settings: Settings,
    food_repository: InMemoryFoodRepository,
    storage: FakeStorage,
) -> AppContainer:
    return make_container(settings, food_repository, storage)
