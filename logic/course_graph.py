"""
Prerequisite graph over a snapshot of the course collection.

Edges point backward: a course lists the ids of the courses it requires.
The reverse index (course id -> courses that require it) is built once per
snapshot. Build a new CourseGraph whenever the collection changes.

Prerequisite ids that do not match any course are tolerated everywhere:
they are skipped when resolving and reported by unresolved_prerequisites().
"""

import logging
from collections import defaultdict

from models.data_models import Course

logger = logging.getLogger(__name__)


def build_dependent_index(courses: list) -> dict:
    """
    Map each prerequisite id to the courses that list it.

    Args:
        courses: List of Course objects

    Returns:
        dict: {prerequisite_id: [Course, ...]} in collection order, each
        dependent listed once per prerequisite
    """
    index = defaultdict(list)
    for course in courses:
        for prereq_id in dict.fromkeys(course.prerequisites):
            index[prereq_id].append(course)
    return dict(index)


class CourseGraph:
    """Read-only view of a course collection with id and dependent lookups."""

    def __init__(self, courses: list):
        self._courses = list(courses)
        self._by_id = {}
        for course in self._courses:
            if course.id in self._by_id:
                logger.warning(f"Duplicate course id {course.id!r}; keeping the later entry")
            self._by_id[course.id] = course
        self._dependents = build_dependent_index(self._courses)

    @property
    def courses(self) -> list:
        return list(self._courses)

    def __len__(self):
        return len(self._courses)

    def __iter__(self):
        return iter(self._courses)

    def __contains__(self, course_id):
        return course_id in self._by_id

    def find_by_id(self, course_id: str) -> Course | None:
        return self._by_id.get(course_id)

    def dependents_of(self, course_id: str) -> list:
        """Courses that list course_id as a prerequisite."""
        return list(self._dependents.get(course_id, []))

    def prerequisites_of(self, course: Course) -> list:
        """Resolve a course's prerequisite ids, skipping ids with no matching course."""
        resolved = []
        for prereq_id in dict.fromkeys(course.prerequisites):
            prereq = self._by_id.get(prereq_id)
            if prereq is None:
                logger.debug(f"{course.id}: prerequisite {prereq_id!r} not found, ignoring")
                continue
            resolved.append(prereq)
        return resolved

    def unresolved_prerequisites(self) -> dict:
        """
        Find prerequisite ids that don't match any course.

        Returns:
            dict: {course_id: [missing prerequisite ids]} for courses with at
            least one dangling edge
        """
        missing = {}
        for course in self._courses:
            unknown = [p for p in dict.fromkeys(course.prerequisites) if p not in self._by_id]
            if unknown:
                missing[course.id] = unknown
        return missing


def as_graph(courses) -> CourseGraph:
    """Accept either a CourseGraph or a plain list of courses."""
    if isinstance(courses, CourseGraph):
        return courses
    return CourseGraph(courses)
