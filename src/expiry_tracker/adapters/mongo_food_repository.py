"""MongoDB implementation for food records."""

import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from expiry_tracker.domain.foods import (
    DeleteAck,
    FoodFilter,
    FoodRecord,
    InsertAck,
    Note,
    UpdateAck,
)
from expiry_tracker.errors import InvalidFoodIdError, StorageError
from expiry_tracker.services.foods import FoodRepository

logger = logging.getLogger(__name__)

_KNOWN_FIELDS = frozenset(
    {"_id", "foodTitle", "foodCategory", "expiryDate", "userEmail", "notes"}
)


@dataclass
class MongoFoodRepository(FoodRepository):
    """pymongo-backed repository for the foods collection."""

    collection: Collection

    def list_foods(self, food_filter: FoodFilter) -> list[FoodRecord]:
        """Return a page of filtered foods sorted by expiry date."""
        with _storage_errors("Unable to fetch foods"):
            cursor = (
                self.collection.find(build_list_query(food_filter))
                .sort("expiryDate", ASCENDING)
                .skip(food_filter.skip)
                .limit(food_filter.limit)
            )
            return [parse_food_document(document) for document in cursor]

    def list_expiring_between(
        self, start: datetime, end: datetime, limit: int
    ) -> list[FoodRecord]:
        """Return foods expiring inside the inclusive window."""
        with _storage_errors("Unable to fetch nearly expiry foods"):
            cursor = (
                self.collection.find({"expiryDate": {"$gte": start, "$lte": end}})
                .sort("expiryDate", ASCENDING)
                .limit(limit)
            )
            return [parse_food_document(document) for document in cursor]

    def list_expired_before(self, moment: datetime) -> list[FoodRecord]:
        """Return foods whose expiry date is strictly before moment."""
        with _storage_errors("Unable to fetch expired foods"):
            cursor = self.collection.find({"expiryDate": {"$lt": moment}}).sort(
                "expiryDate", DESCENDING
            )
            return [parse_food_document(document) for document in cursor]

    def get_food(self, food_id: str) -> FoodRecord | None:
        """Return a food by id, if present."""
        object_id = parse_object_id(food_id)
        with _storage_errors("Unable to fetch food"):
            document = self.collection.find_one({"_id": object_id})
        if document is None:
            return None
        return parse_food_document(document)

    def insert_food(self, document: dict[str, object]) -> InsertAck:
        """Insert a food document and return the assigned id."""
        with _storage_errors("Unable to add food"):
            result = self.collection.insert_one(dict(document))
        return InsertAck(
            acknowledged=result.acknowledged, inserted_id=str(result.inserted_id)
        )

    def list_by_owner(self, user_email: str) -> list[FoodRecord]:
        """Return foods whose userEmail matches exactly."""
        with _storage_errors("Unable to fetch user foods"):
            cursor = self.collection.find({"userEmail": user_email})
            return [parse_food_document(document) for document in cursor]

    def push_note(
        self, food_id: str, owner_email: str, note: Note
    ) -> FoodRecord | None:
        """Atomically append a note to a food owned by owner_email."""
        object_id = parse_object_id(food_id)
        with _storage_errors("Unable to add note"):
            document = self.collection.find_one_and_update(
                {"_id": object_id, "userEmail": owner_email},
                {"$push": {"notes": _note_document(note)}},
                return_document=ReturnDocument.AFTER,
            )
        if document is None:
            return None
        return parse_food_document(document)

    def upsert_food(self, food_id: str, fields: dict[str, object]) -> UpdateAck:
        """Merge fields into a food, inserting it under food_id if absent."""
        object_id = parse_object_id(food_id)
        with _storage_errors("Unable to update food"):
            result = self.collection.update_one(
                {"_id": object_id}, {"$set": fields}, upsert=True
            )
        upserted_id = result.upserted_id
        return UpdateAck(
            acknowledged=result.acknowledged,
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_id=str(upserted_id) if upserted_id is not None else None,
        )

    def delete_food(self, food_id: str) -> DeleteAck:
        """Delete a food by id."""
        object_id = parse_object_id(food_id)
        with _storage_errors("Unable to delete food"):
            result = self.collection.delete_one({"_id": object_id})
        return DeleteAck(
            acknowledged=result.acknowledged, deleted_count=result.deleted_count
        )


def build_list_query(food_filter: FoodFilter) -> dict[str, object]:
    """Build the MongoDB filter for the foods listing."""
    query: dict[str, object] = {}
    if food_filter.search:
        pattern = re.escape(food_filter.search)
        query["$or"] = [
            {"foodTitle": {"$regex": pattern, "$options": "i"}},
            {"foodCategory": {"$regex": pattern, "$options": "i"}},
        ]
    category = food_filter.category_filter
    if category is not None:
        query["foodCategory"] = category
    return query


def parse_object_id(food_id: str) -> ObjectId:
    """Parse a 24-hex identifier, raising InvalidFoodIdError otherwise."""
    try:
        return ObjectId(food_id)
    except (InvalidId, TypeError) as exc:
        raise InvalidFoodIdError(food_id) from exc


@contextmanager
def _storage_errors(message: str) -> Iterator[None]:
    try:
        yield
    except (PyMongoError, OverflowError) as exc:
        logger.exception("MongoDB operation failed: %s", message)
        raise StorageError(message) from exc


def _note_document(note: Note) -> dict[str, object]:
    return {
        "userEmail": note.user_email,
        "text": note.text,
        "createdAt": note.created_at,
    }


def _parse_note(raw: dict[str, object]) -> Note:
    created_at = raw.get("createdAt")
    return Note(
        user_email=str(raw.get("userEmail", "")),
        text=str(raw.get("text", "")),
        created_at=_as_utc(created_at) if isinstance(created_at, datetime) else None,
    )


def parse_food_document(document: dict[str, object]) -> FoodRecord:
    """Parse a foods document into a domain model."""
    extra = {
        key: value for key, value in document.items() if key not in _KNOWN_FIELDS
    }
    expiry_raw = document.get("expiryDate")
    expiry_date = None
    if isinstance(expiry_raw, datetime):
        expiry_date = _as_utc(expiry_raw)
    elif expiry_raw is not None:
        extra["expiryDate"] = expiry_raw
    notes_raw = document.get("notes")
    notes = (
        [_parse_note(note) for note in notes_raw if isinstance(note, dict)]
        if isinstance(notes_raw, list)
        else []
    )
    return FoodRecord(
        id=str(document["_id"]),
        title=document.get("foodTitle"),
        category=document.get("foodCategory"),
        expiry_date=expiry_date,
        user_email=document.get("userEmail"),
        notes=notes,
        extra=extra,
    )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
