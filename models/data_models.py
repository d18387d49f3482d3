from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import total_ordering


class Term(Enum):
    """Terms of an academic year, in calendar order."""

    TERM_1 = "Term 1"
    TERM_2 = "Term 2"
    TERM_3 = "Term 3"

    @property
    def index(self) -> int:
        return _TERM_SEQUENCE.index(self)

    @classmethod
    def parse(cls, value) -> Term | None:
        """Read a term from "Term 1", "term1", "TERM_1", "1" or 1. None if unrecognised."""
        if isinstance(value, Term):
            return value
        if isinstance(value, bool) or value is None:
            return None
        if isinstance(value, int):
            number = value
        elif isinstance(value, float):
            if not value.is_integer():
                return None
            number = int(value)
        else:
            text = str(value).strip().upper().replace("_", "").replace(" ", "")
            if text.startswith("TERM"):
                text = text[len("TERM"):]
            if not text.isdigit():
                return None
            number = int(text)
        if 1 <= number <= len(_TERM_SEQUENCE):
            return _TERM_SEQUENCE[number - 1]
        return None


_TERM_SEQUENCE = (Term.TERM_1, Term.TERM_2, Term.TERM_3)
TERMS_PER_YEAR = len(_TERM_SEQUENCE)


class CourseStatus(Enum):
    """
    Tracker state of a course.

    PENDING: not taken yet (also where a regressed course lands)
    ACTIVE: currently enrolled
    PASSED: completed
    """

    PENDING = "pending"
    ACTIVE = "active"
    PASSED = "passed"

    @property
    def rank(self) -> int:
        return {"pending": 0, "active": 1, "passed": 2}[self.value]

    def satisfies(self, required: CourseStatus) -> bool:
        return self.rank >= required.rank


@total_ordering
@dataclass(frozen=True)
class YearTerm:
    year: int
    term: Term

    @property
    def ordinal(self) -> int:
        return self.year * TERMS_PER_YEAR + self.term.index

    def __lt__(self, other):
        if not isinstance(other, YearTerm):
            return NotImplemented
        return self.ordinal < other.ordinal

    def __str__(self):
        return f"Year {self.year} {self.term.value}"


@dataclass(frozen=True)
class GradeAttempt:
    id: str
    year: int
    term: Term
    grade: str
    recorded_at: datetime

    @property
    def slot(self) -> YearTerm:
        return YearTerm(self.year, self.term)


@dataclass(frozen=True)
class Course:
    """
    A curriculum course together with the student's progress on it.

    Attributes:
        id: Stable identifier referenced by other courses' prerequisites
        code: Catalog code (e.g., "COE0001")
        name: Course title
        credits: Credit units (non-negative)
        prerequisites: Ids of courses that must be completed first
        year: Year level the curriculum places the course in (1-based)
        term: Term the curriculum places the course in
        status: Tracker status
        last_taken: Slot the course was last taken in, if known
        grade_attempts: Graded attempts, at most one per (year, term)
        description: Free text from the curriculum source
    """
    id: str
    code: str
    name: str
    credits: int
    prerequisites: tuple[str, ...]
    year: int
    term: Term
    status: CourseStatus = CourseStatus.PENDING
    last_taken: YearTerm | None = None
    grade_attempts: tuple[GradeAttempt, ...] = field(default_factory=tuple)
    description: str | None = None
