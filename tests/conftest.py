"""Pytest configuration and shared fixtures for tracker tests.

Provides:
- A course factory with sensible defaults
- Small curricula (chain, diamond) used across the cascade and timeline tests
- Helpers for building grade attempts at a given slot
"""

from __future__ import annotations

from datetime import datetime

import pytest

from models.data_models import Course, CourseStatus, GradeAttempt, Term, YearTerm


def make_course(course_id: str, prerequisites=(), status=CourseStatus.PENDING,
                year: int = 1, term: Term = Term.TERM_1, credits: int = 3,
                last_taken: YearTerm | None = None, attempts=()) -> Course:
    return Course(
        id=course_id,
        code=course_id,
        name=f"Course {course_id}",
        credits=credits,
        prerequisites=tuple(prerequisites),
        year=year,
        term=term,
        status=status,
        last_taken=last_taken,
        grade_attempts=tuple(attempts),
    )


def make_attempt(year: int, term: Term, grade: str, attempt_id: str | None = None) -> GradeAttempt:
    return GradeAttempt(
        id=attempt_id or f"att-{year}-{term.index + 1}",
        year=year,
        term=term,
        grade=grade,
        recorded_at=datetime(2025, 1, 1),
    )


def by_id(courses: list) -> dict:
    return {course.id: course for course in courses}


@pytest.fixture
def chain_courses():
    """A <- B <- C, all pending."""
    return [
        make_course("A"),
        make_course("B", ["A"], term=Term.TERM_2),
        make_course("C", ["B"], term=Term.TERM_3),
    ]


@pytest.fixture
def diamond_courses():
    """
    D requires B and C; B requires A. Everything passed, plus an unrelated E.

        A <- B <- D
             C <-/
    """
    passed = CourseStatus.PASSED
    return [
        make_course("A", status=passed),
        make_course("B", ["A"], status=passed),
        make_course("C", status=passed),
        make_course("D", ["B", "C"], status=passed),
        make_course("E", status=passed),
    ]


# Pytest configuration
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (filesystem, multi-module flows)"
    )
