"""Course catalog assembly.

Joins the flat course, category and mapping lists published by the backend
into the grouped catalog shown on the program pages. Everything here is pure
so it can be recomputed on every page load.
"""
import logging
from typing import Dict, Iterable, List, Optional

from academy_web.schemas.catalog import (
    Category,
    CategoryGroup,
    Course,
    CourseCategoryMapping,
    ProgramPage,
)

logger = logging.getLogger(__name__)

SPORTS = ("tennis", "pickleball")


def group_courses_by_category(
    courses: Iterable[Course],
    categories: Iterable[Category],
    mappings: Iterable[CourseCategoryMapping],
) -> List[CategoryGroup]:
    """
    Group courses under their publicly visible categories.

    Mapping rows that point at an unknown course or at a hidden or unknown
    category are skipped. A course is listed at most once per category, and
    a category only appears once it holds a course.

    Args:
        courses: Courses, unique by ID
        categories: All categories; hidden ones are ignored
        mappings: Course to category join rows

    Returns:
        Category groups sorted by ascending display order
    """
    course_map: Dict[int, Course] = {course.id: course for course in courses}
    visible: Dict[int, Category] = {
        category.category_id: category
        for category in categories
        if category.is_publicly_visible
    }

    groups: Dict[str, CategoryGroup] = {}
    for mapping in mappings:
        category = visible.get(mapping.category_id)
        course = course_map.get(mapping.course_id)
        if category is None or course is None:
            continue

        group = groups.get(category.category_name)
        if group is None:
            group = CategoryGroup(
                category_name=category.category_name,
                order=category.display_order,
            )
            groups[category.category_name] = group

        if not any(existing.id == course.id for existing in group.courses):
            group.courses.append(course)

    # sorted() is stable, ties keep first-seen order
    return sorted(groups.values(), key=lambda group: group.order)


def filter_sport_courses(
    courses: Iterable[Course],
    mappings: Iterable[CourseCategoryMapping],
    sport: Optional[str] = None,
) -> List[Course]:
    """
    Keep the active courses of a sport that are mapped to any category.

    Args:
        courses: All published courses
        mappings: Course to category join rows
        sport: Sport name to match case-insensitively, or None for all sports

    Returns:
        Matching courses in their original order
    """
    mapped_ids = {mapping.course_id for mapping in mappings}
    wanted = sport.lower() if sport else None

    result = []
    for course in courses:
        if not course.is_active or course.id not in mapped_ids:
            continue
        if wanted is not None and (course.sport_name or "").lower() != wanted:
            continue
        result.append(course)
    return result


def build_program_page(
    sport: Optional[str],
    courses: List[Course],
    categories: List[Category],
    mappings: List[CourseCategoryMapping],
) -> ProgramPage:
    """Build the grouped catalog for a sport program page."""
    sport_courses = filter_sport_courses(courses, mappings, sport)
    groups = group_courses_by_category(sport_courses, categories, mappings)

    logger.debug(
        f"Program page for {sport or 'all sports'}: "
        f"{len(sport_courses)} courses in {len(groups)} categories"
    )
    return ProgramPage(sport=sport, groups=groups)
