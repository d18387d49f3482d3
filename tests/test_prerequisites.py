"""
Tests for "can take next" eligibility.

Validates that:
- Pending courses without prerequisites are always eligible
- Prerequisites must be passed or active
- Courses already active or passed are never suggested
- Unknown prerequisite ids block eligibility
"""

import pytest

from conftest import make_course
from logic.course_graph import CourseGraph
from logic.prerequisites import blocking_prerequisites, can_take_next, get_eligible_courses
from models.data_models import CourseStatus

PENDING, ACTIVE, PASSED = CourseStatus.PENDING, CourseStatus.ACTIVE, CourseStatus.PASSED


# ============================================================================
# Fixtures - small engineering curriculum
# ============================================================================

@pytest.fixture
def curriculum():
    """
    Mock curriculum with two short chains and a course needing both:

        COE0001 -> COE0003 -> COE0010
        GED0001 ------------/
        GED0004 (no prerequisites)
    """
    return [
        make_course("COE0001"),
        make_course("COE0003", ["COE0001"]),
        make_course("GED0001"),
        make_course("COE0010", ["COE0003", "GED0001"]),
        make_course("GED0004"),
    ]


def with_status(courses, **statuses):
    return [
        make_course(c.id, c.prerequisites, status=statuses.get(c.id, c.status))
        for c in courses
    ]


# ============================================================================
# Test: Can take next
# ============================================================================

@pytest.mark.unit
class TestCanTakeNext:

    def test_no_prerequisites_always_eligible(self, curriculum):
        graph = CourseGraph(curriculum)
        assert can_take_next(graph.find_by_id("COE0001"), graph) is True
        assert can_take_next(graph.find_by_id("GED0004"), graph) is True

    def test_needs_prerequisite(self, curriculum):
        graph = CourseGraph(curriculum)
        assert can_take_next(graph.find_by_id("COE0003"), graph) is False

        graph = CourseGraph(with_status(curriculum, COE0001=PASSED))
        assert can_take_next(graph.find_by_id("COE0003"), graph) is True

    def test_active_prerequisite_counts(self, curriculum):
        graph = CourseGraph(with_status(curriculum, COE0001=ACTIVE))
        assert can_take_next(graph.find_by_id("COE0003"), graph) is True

    def test_needs_all_prerequisites(self, curriculum):
        graph = CourseGraph(with_status(curriculum, COE0003=PASSED))
        assert can_take_next(graph.find_by_id("COE0010"), graph) is False

        graph = CourseGraph(with_status(curriculum, COE0003=PASSED, GED0001=ACTIVE))
        assert can_take_next(graph.find_by_id("COE0010"), graph) is True

    def test_only_pending_courses(self, curriculum):
        graph = CourseGraph(with_status(curriculum, GED0004=ACTIVE, GED0001=PASSED))
        assert can_take_next(graph.find_by_id("GED0004"), graph) is False
        assert can_take_next(graph.find_by_id("GED0001"), graph) is False

    def test_unknown_prerequisite_blocks(self):
        course = make_course("X", ["MISSING"])
        assert can_take_next(course, [course]) is False


# ============================================================================
# Test: Blocking prerequisites
# ============================================================================

@pytest.mark.unit
class TestBlockingPrerequisites:

    def test_lists_unsatisfied_in_order(self, curriculum):
        graph = CourseGraph(curriculum)
        assert blocking_prerequisites(graph.find_by_id("COE0010"), graph) == ["COE0003", "GED0001"]

    def test_includes_unknown_ids(self):
        course = make_course("X", ["MISSING", "Y"])
        courses = [course, make_course("Y", status=PASSED)]
        assert blocking_prerequisites(course, courses) == ["MISSING"]

    def test_empty_when_satisfied(self, curriculum):
        graph = CourseGraph(with_status(curriculum, COE0001=PASSED))
        assert blocking_prerequisites(graph.find_by_id("COE0003"), graph) == []


# ============================================================================
# Test: Get Eligible Courses (Integration)
# ============================================================================

@pytest.mark.unit
class TestGetEligibleCourses:

    def test_new_student_sees_entry_courses(self, curriculum):
        eligible = [c.id for c in get_eligible_courses(curriculum)]
        assert eligible == ["COE0001", "GED0001", "GED0004"]

    def test_student_with_progress_sees_next(self, curriculum):
        courses = with_status(curriculum, COE0001=PASSED, COE0003=ACTIVE, GED0001=PASSED)
        eligible = [c.id for c in get_eligible_courses(courses)]
        assert eligible == ["COE0010", "GED0004"]

    def test_everything_passed(self, curriculum):
        courses = with_status(curriculum, **{c.id: PASSED for c in curriculum})
        assert get_eligible_courses(courses) == []
