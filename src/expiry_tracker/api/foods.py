"""Food inventory endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Query, Request

from expiry_tracker.api.food_models import FoodPayload, NoteRequest
from expiry_tracker.domain.foods import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE,
    MAX_PAGE_SIZE,
    FoodFilter,
)
from expiry_tracker.services.foods import FoodService  # noqa: TC001

if TYPE_CHECKING:
    from expiry_tracker.containers import AppContainer
    from expiry_tracker.domain.foods import (
        DeleteAck,
        FoodRecord,
        InsertAck,
        Note,
        UpdateAck,
    )

router = APIRouter(tags=["foods"])


def get_food_service(request: Request) -> FoodService:
    container: AppContainer = request.app.state.container
    return container.food_service


@router.get("/foods")
def list_foods(
    search: str | None = None,
    category: str | None = None,
    page: int = Query(0, ge=0, le=MAX_PAGE),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: FoodService = Depends(get_food_service),
) -> list[dict[str, object]]:
    """List foods sorted by expiry date with optional search and category."""
    food_filter = FoodFilter(search=search, category=category, page=page, limit=limit)
    return [serialize_food(food) for food in service.list_foods(food_filter)]


@router.get("/nearly-expiry")
def nearly_expiry(
    service: FoodService = Depends(get_food_service),
) -> list[dict[str, object]]:
    """Return up to six foods expiring within five days."""
    return [serialize_food(food) for food in service.nearly_expiring()]


@router.get("/expired")
def expired(
    service: FoodService = Depends(get_food_service),
) -> list[dict[str, object]]:
    """Return expired foods, most recently expired first."""
    return [serialize_food(food) for food in service.expired()]


@router.get("/foods/{food_id}")
def get_food(
    food_id: str, service: FoodService = Depends(get_food_service)
) -> dict[str, object] | None:
    """Return one food, or null when it does not exist."""
    food = service.get_food(food_id)
    return serialize_food(food) if food else None


@router.post("/foods")
def create_food(
    body: FoodPayload, service: FoodService = Depends(get_food_service)
) -> dict[str, object]:
    """Store a new food and return the insert acknowledgment."""
    return _insert_ack(service.create_food(body.to_fields()))


@router.get("/my-items/{email}")
def my_items(
    email: str, service: FoodService = Depends(get_food_service)
) -> list[dict[str, object]]:
    """Return every food submitted by email."""
    return [serialize_food(food) for food in service.list_by_owner(email)]


@router.post("/foods/{food_id}/notes")
def add_note(
    food_id: str,
    body: NoteRequest,
    service: FoodService = Depends(get_food_service),
) -> dict[str, object] | None:
    """Append a note when the author owns the food; null otherwise."""
    food = service.add_note(food_id, body.user_email, body.text)
    return serialize_food(food) if food else None


@router.put("/foods/{food_id}")
def update_food(
    food_id: str,
    body: FoodPayload,
    service: FoodService = Depends(get_food_service),
) -> dict[str, object]:
    """Merge the supplied fields into a food, creating it when missing."""
    return _update_ack(service.update_food(food_id, body.to_fields()))


@router.delete("/foods/{food_id}")
def delete_food(
    food_id: str, service: FoodService = Depends(get_food_service)
) -> dict[str, object]:
    """Delete a food by id."""
    return _delete_ack(service.delete_food(food_id))


def serialize_food(food: FoodRecord) -> dict[str, object]:
    """Render a food record using its stored field names."""
    document: dict[str, object] = {"_id": food.id, **food.extra}
    if food.title is not None:
        document["foodTitle"] = food.title
    if food.category is not None:
        document["foodCategory"] = food.category
    if food.expiry_date is not None:
        document["expiryDate"] = food.expiry_date.isoformat()
    if food.user_email is not None:
        document["userEmail"] = food.user_email
    if food.notes:
        document["notes"] = [_serialize_note(note) for note in food.notes]
    return document


def _serialize_note(note: Note) -> dict[str, object]:
    return {
        "userEmail": note.user_email,
        "text": note.text,
        "createdAt": note.created_at.isoformat() if note.created_at else None,
    }


def _insert_ack(ack: InsertAck) -> dict[str, object]:
    return {"acknowledged": ack.acknowledged, "insertedId": ack.inserted_id}


def _update_ack(ack: UpdateAck) -> dict[str, object]:
    return {
        "acknowledged": ack.acknowledged,
        "matchedCount": ack.matched_count,
        "modifiedCount": ack.modified_count,
        "upsertedId": ack.upserted_id,
        "upsertedCount": ack.upserted_count,
    }


def _delete_ack(ack: DeleteAck) -> dict[str, object]:
    return {"acknowledged": ack.acknowledged, "deletedCount": ack.deleted_count}
