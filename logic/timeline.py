"""
Year/term ordering and attempt windows.

A slot (year, term) maps to a single ordinal, year * 3 + term index, which
gives a total order over the whole programme. The attempt window of a course
is every slot from the term after its last prerequisite was completed up to
the student's current position, which the caller passes in on every call.
"""

import logging

from config.settings import settings
from logic.course_graph import as_graph
from logic.grade_ledger import find_attempt, is_passing_grade, latest_passing_attempt
from models.data_models import Course, CourseStatus, Term, YearTerm

logger = logging.getLogger(__name__)

FIRST_SLOT = YearTerm(1, Term.TERM_1)


def ordinal(year: int, term: Term) -> int:
    return YearTerm(year, term).ordinal


def compare(a: YearTerm, b: YearTerm) -> int:
    """Sign of a - b by ordinal: -1, 0 or 1."""
    return (a.ordinal > b.ordinal) - (a.ordinal < b.ordinal)


def next_term(year: int, term: Term) -> YearTerm:
    """The slot after (year, term), rolling into the next year after the last term."""
    terms = list(Term)
    if term.index + 1 < len(terms):
        return YearTerm(year, terms[term.index + 1])
    return YearTerm(year + 1, terms[0])


def completion_point(course: Course) -> YearTerm | None:
    """
    Slot at which a course counts as completed.

    Uses the latest passing attempt. Without one, a course marked passed
    falls back to last_taken, unless the attempt recorded there is a fail.

    Returns:
        YearTerm: Completion slot, or None if it can't be determined
    """
    latest = latest_passing_attempt(course)
    if latest is not None:
        return latest.slot

    if course.status != CourseStatus.PASSED or course.last_taken is None:
        return None

    attempt = find_attempt(course, course.last_taken.year, course.last_taken.term)
    if attempt is not None and not is_passing_grade(attempt.grade):
        return None
    return course.last_taken


def window_start(course: Course, courses) -> YearTerm | None:
    """First slot a course can be attempted in, or None if a prerequisite isn't complete."""
    graph = as_graph(courses)
    prereqs = graph.prerequisites_of(course)
    if not prereqs:
        return FIRST_SLOT

    latest = None
    for prereq in prereqs:
        point = completion_point(prereq)
        if point is None:
            logger.debug(f"{course.id}: prerequisite {prereq.id} has no completion point")
            return None
        if latest is None or point > latest:
            latest = point
    return next_term(latest.year, latest.term)


def compute_attempt_window(course: Course, current_year: int, current_term: Term,
                           courses) -> list:
    """
    Every slot at which a grade for the course may be recorded.

    Args:
        course: The course being attempted
        current_year: Student's current year level
        current_term: Student's current term
        courses: CourseGraph or list of all courses

    Returns:
        list: YearTerm slots in order, from the term after the latest
        prerequisite completion to (current_year, current_term) inclusive.
        Empty if any prerequisite has no completion point or the start lies
        after the current position.
    """
    start = window_start(course, courses)
    if start is None:
        return []

    end = YearTerm(current_year, current_term)
    if current_year < start.year or end < start:
        return []

    window = []
    slot = start
    while slot <= end:
        window.append(slot)
        slot = next_term(slot.year, slot.term)
    return window


def is_within_window(course: Course, year: int, term: Term,
                     current_year: int, current_term: Term, courses) -> bool:
    """Whether (year, term) is a legal slot for recording an attempt of the course."""
    start = window_start(course, courses)
    if start is None:
        return False
    slot = YearTerm(year, term)
    return start <= slot <= YearTerm(current_year, current_term)


def academic_years(start_year: int, count: int | None = None) -> dict:
    """
    Calendar labels for each year level.

    Args:
        start_year: Calendar year the student started (e.g., 2025)
        count: Number of year levels, defaults to settings.ACADEMIC_YEAR_COUNT

    Returns:
        dict: {year_level: "2025-2026", ...}
    """
    if count is None:
        count = settings.ACADEMIC_YEAR_COUNT
    return {
        level: f"{start_year + level - 1}-{start_year + level}"
        for level in range(1, count + 1)
    }
