"""Pydantic models for food request payloads."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FoodPayload(BaseModel):
    """Food body for create and update requests.

    Values are not coerced; unknown keys are kept and stored as-is.
    """

    model_config = ConfigDict(extra="allow")

    food_title: Any = Field(default=None, alias="foodTitle")
    food_category: Any = Field(default=None, alias="foodCategory")
    expiry_date: Any = Field(default=None, alias="expiryDate")
    user_email: Any = Field(default=None, alias="userEmail")

    def to_fields(self) -> dict[str, object]:
        """Return only the keys the client actually sent, under their wire names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class NoteRequest(BaseModel):
    """Body for appending a note to a food."""

    user_email: str = Field(alias="userEmail")
    text: str
