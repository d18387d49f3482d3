"""
Prerequisite filtering for "what can I take next".

Ensures the tracker only suggests courses the student is eligible for.

Key concepts:
- A course is eligible when it is still pending and every prerequisite is
  either passed or currently active (taking a prerequisite concurrently with
  its dependent is allowed for planning purposes)
- A prerequisite id that matches no course blocks eligibility: there is no
  way to show it as satisfied
- This is looser than the cascade rules, which require passed prerequisites
  before a course can be marked active or passed
"""

from logic.course_graph import as_graph
from models.data_models import Course, CourseStatus

SATISFYING_STATUSES = (CourseStatus.PASSED, CourseStatus.ACTIVE)


def blocking_prerequisites(course: Course, courses) -> list:
    """
    Prerequisite ids that keep a course from being taken next.

    Args:
        course: The course to check
        courses: CourseGraph or list of all courses

    Returns:
        list: Ids that are unknown or not yet passed/active, in listed order
    """
    graph = as_graph(courses)
    blocking = []
    for prereq_id in dict.fromkeys(course.prerequisites):
        prereq = graph.find_by_id(prereq_id)
        if prereq is None or prereq.status not in SATISFYING_STATUSES:
            blocking.append(prereq_id)
    return blocking


def can_take_next(course: Course, courses) -> bool:
    """
    Check if a student can take a course next.

    A course can be taken next if:
    1. It is still pending, AND
    2. It has no prerequisites, or all of them are passed or active

    Args:
        course: The course to check
        courses: CourseGraph or list of all courses

    Returns:
        bool: True if the course can be taken next
    """
    if course.status != CourseStatus.PENDING:
        return False
    return not blocking_prerequisites(course, courses)


def get_eligible_courses(courses) -> list:
    """
    Filter the curriculum down to courses that can be taken next.

    Args:
        courses: CourseGraph or list of all courses

    Returns:
        list: Eligible Course objects in curriculum order
    """
    graph = as_graph(courses)
    return [course for course in graph if can_take_next(course, graph)]
