"""Tests for course catalog grouping."""
from academy_web.schemas.catalog import Category, Course, CourseCategoryMapping, parse_rows
from academy_web.services.catalog import (
    build_program_page,
    filter_sport_courses,
    group_courses_by_category,
)
from tests.conftest import category, course, mapping


def parse(courses=(), categories=(), mappings=()):
    return (
        parse_rows(Course, courses),
        parse_rows(Category, categories),
        parse_rows(CourseCategoryMapping, mappings),
    )


def test_grouping_is_repeatable():
    inputs = parse(
        [course(1), course(2), course(3)],
        [category(10, "Juniors", 2), category(11, "Adults", 1)],
        [mapping(1, 10), mapping(2, 11), mapping(3, 10)],
    )

    first = group_courses_by_category(*inputs)
    second = group_courses_by_category(*inputs)

    assert [g.model_dump() for g in first] == [g.model_dump() for g in second]


def test_dangling_mappings_are_skipped():
    courses, categories, mappings = parse(
        [course(1)],
        [category(10, "Juniors", 0)],
        [mapping(1, 10), mapping(99, 10)],
    )

    groups = group_courses_by_category(courses, categories, mappings)

    assert len(groups) == 1
    assert [c.id for c in groups[0].courses] == [1]


def test_hidden_category_is_skipped():
    courses, categories, mappings = parse(
        [course(1), course(2)],
        [category(10, "Juniors", 0), category(11, "Staff only", 1, visible=False)],
        [mapping(1, 10), mapping(2, 11)],
    )

    groups = group_courses_by_category(courses, categories, mappings)

    assert [g.category_name for g in groups] == ["Juniors"]


def test_duplicate_mappings_list_course_once():
    courses, categories, mappings = parse(
        [course(1)],
        [category(10, "Juniors", 0)],
        [mapping(1, 10), mapping(1, 10), mapping(1, 10)],
    )

    groups = group_courses_by_category(courses, categories, mappings)

    assert len(groups[0].courses) == 1


def test_course_can_appear_in_several_categories():
    courses, categories, mappings = parse(
        [course(1)],
        [category(10, "Juniors", 0), category(11, "Summer", 1)],
        [mapping(1, 10), mapping(1, 11)],
    )

    groups = group_courses_by_category(courses, categories, mappings)

    assert [g.category_name for g in groups] == ["Juniors", "Summer"]
    assert all(g.courses[0].id == 1 for g in groups)


def test_groups_sorted_by_display_order():
    courses, categories, mappings = parse(
        [course(1), course(2), course(3)],
        [category(10, "Five", 5), category(11, "One", 1), category(12, "Three", 3)],
        [mapping(1, 10), mapping(2, 11), mapping(3, 12)],
    )

    groups = group_courses_by_category(courses, categories, mappings)

    assert [g.order for g in groups] == [1, 3, 5]
    assert [g.category_name for g in groups] == ["One", "Three", "Five"]


def test_equal_display_order_keeps_first_seen_order():
    courses, categories, mappings = parse(
        [course(1), course(2)],
        [category(10, "B", 0), category(11, "A", 0)],
        [mapping(2, 11), mapping(1, 10)],
    )

    groups = group_courses_by_category(courses, categories, mappings)

    assert [g.category_name for g in groups] == ["A", "B"]


def test_sport_filter_is_case_insensitive():
    courses, _, mappings = parse(
        [course(1, sport="Tennis"), course(2, sport="PICKLEBALL"), course(3, sport=None)],
        [],
        [mapping(1, 10), mapping(2, 10), mapping(3, 10)],
    )

    assert [c.id for c in filter_sport_courses(courses, mappings, "pickleball")] == [2]
    assert [c.id for c in filter_sport_courses(courses, mappings)] == [1, 2, 3]


def test_inactive_and_unmapped_courses_are_hidden():
    courses, _, mappings = parse(
        [course(1), course(2, active=False), course(3)],
        [],
        [mapping(1, 10), mapping(2, 10)],
    )

    assert [c.id for c in filter_sport_courses(courses, mappings, "tennis")] == [1]


def test_program_page():
    courses, categories, mappings = parse(
        [course(1, sport="Tennis"), course(2, sport="Pickleball")],
        [category(10, "Clinics", 0)],
        [mapping(1, 10), mapping(2, 10)],
    )

    page = build_program_page("tennis", courses, categories, mappings)

    assert page.sport == "tennis"
    assert len(page.groups) == 1
    assert [c.id for c in page.groups[0].courses] == [1]


def test_parse_rows_skips_malformed_rows():
    rows = [course(1), {"name": "no id"}, course(2)]

    assert [c.id for c in parse_rows(Course, rows)] == [1, 2]
    assert parse_rows(Course, None) == []
