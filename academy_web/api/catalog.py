"""Course catalog endpoints."""
import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from academy_web.api.errors import raise_for_detail
from academy_web.core.dependencies import get_backend_client
from academy_web.schemas.catalog import (
    Category,
    Course,
    CourseCategoryMapping,
    ProgramPage,
    Sport,
    parse_rows,
)
from academy_web.services.backend_client import BackendClient
from academy_web.services.catalog import SPORTS, build_program_page

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog"])


async def load_catalog(client: BackendClient):
    """
    Fetch courses, categories and mappings in parallel.

    A failing list degrades to an empty one, so the page still renders.

    Returns:
        Tuple of course, category and mapping lists
    """
    results = await asyncio.gather(
        client.list_courses(),
        client.list_categories(),
        client.list_course_category_mappings(),
        return_exceptions=True,
    )

    names = ("courses", "categories", "mappings")
    rows = []
    for name, result in zip(names, results):
        if isinstance(result, Exception):
            logger.error(f"Failed to fetch {name}: {result}")
            rows.append([])
        else:
            rows.append(result)

    return (
        parse_rows(Course, rows[0]),
        parse_rows(Category, rows[1]),
        parse_rows(CourseCategoryMapping, rows[2]),
    )


@router.get("/programs", response_model=ProgramPage)
async def get_all_programs(client: BackendClient = Depends(get_backend_client)):
    """
    Get the grouped catalog across all sports.

    Returns:
        Categories with their courses, in display order
    """
    courses, categories, mappings = await load_catalog(client)
    return build_program_page(None, courses, categories, mappings)


@router.get("/programs/{sport}", response_model=ProgramPage)
async def get_program(sport: str, client: BackendClient = Depends(get_backend_client)):
    """
    Get the grouped catalog of a sport program page.

    Args:
        sport: ``tennis`` or ``pickleball``

    Returns:
        Categories with their courses, in display order
    """
    sport = sport.lower()
    if sport not in SPORTS:
        raise HTTPException(status_code=404, detail="Program not found")

    courses, categories, mappings = await load_catalog(client)
    return build_program_page(sport, courses, categories, mappings)


@router.get("/courses/{course_id}", response_model=Course)
async def get_course(course_id: int, client: BackendClient = Depends(get_backend_client)):
    """Get a course detail page."""
    try:
        data = await client.get_course(course_id)
        return Course.model_validate(data)
    except Exception as e:
        raise_for_detail(e, "Course")


@router.get("/sports", response_model=List[Sport])
async def list_sports(client: BackendClient = Depends(get_backend_client)):
    """List sports, empty if the backend is unavailable."""
    try:
        rows = await client.list_sports()
    except Exception as e:
        logger.error(f"Failed to fetch sports: {e}")
        return []
    return parse_rows(Sport, rows)
