"""
Slide - typed hero slide records as delivered by the content store.

Rows of the ``hero_services`` table are decoded into frozen :class:`Slide`
models. Any row that does not match the expected shape raises a
:class:`~scrollstag.exceptions.DecodeError` instead of being trusted as is.

Boundary schema (snake_case, as stored):
{
    "id": "uuid",
    "created_at": "2024-01-01T00:00:00+00:00",
    "title": "Passport renewal",
    "subtitle": null,
    "description": null,
    "image_folder_url": "https://cdn.example.org/hero/passport",
    "sort_order": 1,
    "active": true,
    "cta_text": "Book now",
    "cta_link": "/appointment",
    "theme_color": null
}
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import DecodeError


class Slide(BaseModel):
    """A single hero slide. Read-only for the renderer."""

    model_config = ConfigDict(
        # Accept both the store's column names and the python names
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    id: str
    title: str = ""
    subtitle: str = ""
    description: str = ""
    source_url: str = Field(default="", alias="image_folder_url")
    cta_text: str | None = None
    cta_link: str | None = None
    sort_order: int = 0
    active: bool = True
    created_at: datetime | None = None
    theme_color: str | None = None

    @field_validator("title", "subtitle", "description", "source_url", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        # Integer primary keys are used by some deployments
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def to_dict(self) -> dict:
        """Convert to dict for API response."""
        return {
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "description": self.description,
            "image_folder_url": self.source_url,
            "cta_text": self.cta_text,
            "cta_link": self.cta_link,
            "sort_order": self.sort_order,
            "active": self.active,
            "theme_color": self.theme_color,
        }


def decode_slide(raw: Any) -> Slide:
    """Decode one raw content row into a :class:`Slide`.

    :param raw: The row as returned by the content store (a mapping)
    :return: The validated slide
    :raises DecodeError: If the row does not match the slide schema
    """
    if not isinstance(raw, dict):
        raise DecodeError(f"Expected a slide object, got {type(raw).__name__}")
    try:
        return Slide.model_validate(raw)
    except ValidationError as e:
        raise DecodeError(f"Invalid slide record {raw.get('id')!r}: {e}") from e


def decode_slides(rows: Any) -> list[Slide]:
    """Decode a list of raw content rows.

    :param rows: JSON array as returned by the content store
    :return: Slides in the order supplied
    :raises DecodeError: If the payload is not a list or any row is invalid
    """
    if not isinstance(rows, list):
        raise DecodeError(f"Expected a list of slides, got {type(rows).__name__}")
    return [decode_slide(row) for row in rows]


def active_slides(slides: Iterable[Slide]) -> list[Slide]:
    """Filter inactive slides and order the rest by ``sort_order``."""
    return sorted((s for s in slides if s.active), key=lambda s: s.sort_order)
