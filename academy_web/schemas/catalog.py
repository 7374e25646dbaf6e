"""Course catalog schemas."""
import logging
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from typing import Optional, List

logger = logging.getLogger(__name__)


class BackendModel(BaseModel):
    """Base schema for payloads exchanged with the academy backend."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Course(BackendModel):
    """Schema for a course as published by the backend."""

    id: int
    name: str
    slug: Optional[str] = None
    sport_name: Optional[str] = None
    location: Optional[str] = None
    short_description: Optional[str] = None
    description: Optional[str] = None
    base_price_info: Optional[str] = None
    image_paths: Optional[List[str]] = None
    is_active: bool = False


class Category(BackendModel):
    """Schema for a course category."""

    category_id: int
    category_name: str
    is_publicly_visible: bool = False
    display_order: int = 0


class CourseCategoryMapping(BackendModel):
    """Schema for a course to category join row."""

    course_id: int
    category_id: int


class Sport(BackendModel):
    """Schema for a sport."""

    id: Optional[int] = None
    name: str
    description: Optional[str] = None
    is_active: Optional[bool] = None


class CategoryGroup(BackendModel):
    """Courses of one category, ready for display."""

    category_name: str
    order: int
    courses: List[Course] = Field(default_factory=list)


class ProgramPage(BackendModel):
    """Page model for a sport program page."""

    sport: Optional[str] = None
    groups: List[CategoryGroup] = Field(default_factory=list)


def parse_rows(model, rows) -> list:
    """Parse backend rows into ``model``, skipping the ones that do not fit."""
    parsed = []
    for row in rows or []:
        try:
            parsed.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning(f"Skipping malformed {model.__name__}: {e.error_count()} errors")
    return parsed
