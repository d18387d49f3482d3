"""Pydantic models for course progress payloads.

These validate data crossing the process boundary (curriculum rows, saved
progress files) and convert it to the engine's dataclasses. Field names are
snake_case; the camelCase names used by older progress files
(`lastTaken`, `gradeAttempts`, `recordedAt`) are accepted on input. Attempt
grades are normalized to the configured grade scale.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from logic.grade_ledger import normalize_grade
from models.data_models import Course, CourseStatus, GradeAttempt, Term, YearTerm


def _parse_term(value: Any) -> Term:
    term = Term.parse(value)
    if term is None:
        raise ValueError(f"unknown term: {value!r}")
    return term


class YearTermRecord(BaseModel):
    """A (year, term) slot."""

    year: int = Field(..., ge=1)
    term: Term

    @field_validator("term", mode="before")
    @classmethod
    def parse_term(cls, value: Any) -> Term:
        return _parse_term(value)

    def to_year_term(self) -> YearTerm:
        return YearTerm(self.year, self.term)


class GradeAttemptRecord(BaseModel):
    """One graded attempt of a course."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    year: int = Field(..., ge=1)
    term: Term
    grade: str = Field(..., min_length=1)
    recorded_at: datetime = Field(
        default_factory=datetime.now,
        validation_alias=AliasChoices("recorded_at", "recordedAt"),
    )

    @field_validator("term", mode="before")
    @classmethod
    def parse_term(cls, value: Any) -> Term:
        return _parse_term(value)

    @field_validator("grade", mode="before")
    @classmethod
    def canonical_grade(cls, value: Any) -> str:
        grade = normalize_grade(value)
        if grade is None:
            raise ValueError(f"unknown grade: {value!r}")
        return grade

    def to_attempt(self) -> GradeAttempt:
        return GradeAttempt(
            id=self.id,
            year=self.year,
            term=self.term,
            grade=self.grade,
            recorded_at=self.recorded_at,
        )


class CourseRecord(BaseModel):
    """Course node plus progress, as stored or imported."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    credits: int = Field(0, ge=0)
    prerequisites: list[str] = Field(default_factory=list)
    year: int = Field(..., ge=1)
    term: Term
    status: CourseStatus = CourseStatus.PENDING
    last_taken: YearTermRecord | None = Field(
        None, validation_alias=AliasChoices("last_taken", "lastTaken")
    )
    grade_attempts: list[GradeAttemptRecord] = Field(
        default_factory=list,
        validation_alias=AliasChoices("grade_attempts", "gradeAttempts"),
    )
    description: str | None = None

    @field_validator("term", mode="before")
    @classmethod
    def parse_term(cls, value: Any) -> Term:
        return _parse_term(value)

    @field_validator("prerequisites")
    @classmethod
    def dedupe_prerequisites(cls, value: list[str]) -> list[str]:
        seen = set()
        result = []
        for prereq_id in value:
            prereq_id = prereq_id.strip()
            if prereq_id and prereq_id not in seen:
                seen.add(prereq_id)
                result.append(prereq_id)
        return result

    @model_validator(mode="after")
    def one_attempt_per_slot(self) -> CourseRecord:
        slots = [(attempt.year, attempt.term) for attempt in self.grade_attempts]
        if len(slots) != len(set(slots)):
            raise ValueError(f"course {self.id} has more than one attempt in the same term")
        return self

    def to_course(self) -> Course:
        return Course(
            id=self.id,
            code=self.code,
            name=self.name,
            credits=self.credits,
            prerequisites=tuple(self.prerequisites),
            year=self.year,
            term=self.term,
            status=self.status,
            last_taken=self.last_taken.to_year_term() if self.last_taken else None,
            grade_attempts=tuple(record.to_attempt() for record in self.grade_attempts),
            description=self.description,
        )

    @classmethod
    def from_course(cls, course: Course) -> CourseRecord:
        last_taken = None
        if course.last_taken is not None:
            last_taken = YearTermRecord(year=course.last_taken.year, term=course.last_taken.term)
        return cls(
            id=course.id,
            code=course.code,
            name=course.name,
            credits=course.credits,
            prerequisites=list(course.prerequisites),
            year=course.year,
            term=course.term,
            status=course.status,
            last_taken=last_taken,
            grade_attempts=[
                GradeAttemptRecord(
                    id=attempt.id,
                    year=attempt.year,
                    term=attempt.term,
                    grade=attempt.grade,
                    recorded_at=attempt.recorded_at,
                )
                for attempt in course.grade_attempts
            ],
            description=course.description,
        )


_course_list_adapter = TypeAdapter(list[CourseRecord])


def parse_course_list(data: Any) -> list[Course]:
    """Validate a decoded JSON payload (list of course dicts) into courses.

    Raises:
        pydantic.ValidationError: if the payload is not a list of valid courses
    """
    return [record.to_course() for record in _course_list_adapter.validate_python(data)]


def dump_course_list(courses: list[Course]) -> list[dict]:
    """Serialize courses to JSON-compatible dicts."""
    return [CourseRecord.from_course(course).model_dump(mode="json") for course in courses]
