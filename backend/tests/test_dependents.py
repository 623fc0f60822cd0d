import pytest

from catalog.core.exceptions import ResourceNotFoundError
from catalog.models.course import Course
from catalog.services.dependents import find_dependent_courses


def test_finds_courses_listing_the_target(add_course, store):
    cs101 = add_course("CS101", [])
    cs201 = add_course("CS201", ["CS101"], title="Data Structures")
    add_course("CS202", ["MATH101"])
    cs301 = add_course("CS301", ["CS201", "CS101"], title="Algorithms")

    dependents = find_dependent_courses(store, cs101)

    by_code = {item.code: item for item in dependents}
    assert set(by_code) == {"CS201", "CS301"}
    assert by_code["CS201"].id == cs201
    assert by_code["CS201"].title == "Data Structures"
    assert by_code["CS301"].id == cs301
    assert by_code["CS301"].matched == ["CS101"]


def test_matching_ignores_case_and_whitespace(add_course, store):
    cs201 = add_course("CS201", [])
    cs310 = add_course("CS310", ["cs201 ", "MATH101"])

    dependents = find_dependent_courses(store, cs201, "CS201")

    assert [(item.id, item.matched) for item in dependents] == [(cs310, ["cs201 "])]


def test_candidate_code_overrides_course_code(add_course, store):
    anchor = add_course("CS101", [])
    add_course("STAT200", ["MATH101"])
    add_course("CS150", ["CS101"])

    dependents = find_dependent_courses(store, anchor, "  math101  ")

    assert [item.code for item in dependents] == ["STAT200"]


def test_blank_candidate_falls_back_to_course_code(add_course, store):
    anchor = add_course("CS101", [])
    add_course("CS150", ["CS101"])

    dependents = find_dependent_courses(store, anchor, "   ")

    assert [item.code for item in dependents] == ["CS150"]


def test_course_itself_is_excluded(add_course, store):
    loop = add_course("LOOP1", ["LOOP1"])

    assert find_dependent_courses(store, loop) == []


def test_malformed_prerequisites_are_skipped(db, add_course, store):
    anchor = add_course("CS101", [])
    broken = add_course("BROKEN1", [])
    add_course("CS150", ["CS101"])
    record = db.get(Course, broken)
    record.prerequisites = "CS101"
    db.commit()

    dependents = find_dependent_courses(store, anchor)

    assert [item.code for item in dependents] == ["CS150"]


def test_unknown_course_raises(store):
    with pytest.raises(ResourceNotFoundError):
        find_dependent_courses(store, "missing")
