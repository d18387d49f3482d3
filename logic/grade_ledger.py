"""
Per-course ledger of graded attempts.

Each course keeps at most one attempt per (year, term). Recording an attempt
through record_attempt() keeps the ledger chronologically consistent:

- Earlier pass superseded: a passing grade at (y, t) rewrites every earlier
  passing attempt to the superseded-fail grade (kept as history, not deleted).
- Back-dating truncates the future: any grade at (y, t) removes every attempt
  later than (y, t).

Both rules and the target write are resolved together and returned as a new
Course. preview_attempt() reports what record_attempt() would change so a
caller can ask for confirmation first.

Invalid grades never raise: the write is skipped and the course is returned
unchanged.
"""

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from config.settings import settings
from models.data_models import Course, GradeAttempt, Term, YearTerm

logger = logging.getLogger(__name__)


# ============================================================================
# Grade scale
# ============================================================================

def acceptable_grades() -> list:
    """Passing grades followed by failing grades, in configured order."""
    return list(settings.PASSING_GRADES) + list(settings.FAILING_GRADES)


def is_passing_grade(grade: str) -> bool:
    return grade in settings.PASSING_GRADES


def is_failing_grade(grade: str) -> bool:
    return grade in settings.FAILING_GRADES


def _round_1dp_half_up(value) -> str | None:
    try:
        rounded = Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None
    if rounded == 0:
        rounded = abs(rounded)
    return str(rounded)


def normalize_grade(value) -> str | None:
    """
    Convert a grade to its canonical form.

    Numbers (and numeric strings) are rounded half-up to one decimal place,
    so 3, "3" and "3.04" all become "3.0". Anything else is stripped and
    upper-cased ("inc" -> "INC").

    Args:
        value: Grade as entered

    Returns:
        str: Canonical grade, or None if it is not an acceptable grade
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        canonical = _round_1dp_half_up(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            Decimal(text)
            is_numeric = text.replace(".", "", 1).lstrip("+-").isdigit()
        except InvalidOperation:
            is_numeric = False
        canonical = _round_1dp_half_up(text) if is_numeric else text.upper()

    if canonical is None or canonical not in acceptable_grades():
        return None
    return canonical


# ============================================================================
# Lookups
# ============================================================================

def find_attempt(course: Course, year: int, term: Term) -> GradeAttempt | None:
    slot = YearTerm(year, term)
    for attempt in course.grade_attempts:
        if attempt.slot == slot:
            return attempt
    return None


def latest_passing_attempt(course: Course) -> GradeAttempt | None:
    """The passing attempt with the latest (year, term), or None."""
    passing = [a for a in course.grade_attempts if is_passing_grade(a.grade)]
    if not passing:
        return None
    return max(passing, key=lambda a: a.slot.ordinal)


def grade_choices(course: Course, year: int, term: Term) -> list:
    """
    Grades a caller should offer for an attempt at (year, term).

    A slot earlier than the latest passing attempt only gets failing grades:
    a student cannot pass retroactively before a later recorded pass. The
    write path does not enforce this; callers filter with this list.
    """
    latest = latest_passing_attempt(course)
    if latest is not None and YearTerm(year, term) < latest.slot:
        return list(settings.FAILING_GRADES)
    return acceptable_grades()


# ============================================================================
# Plain writes
# ============================================================================

def _new_attempt(year: int, term: Term, grade: str) -> GradeAttempt:
    return GradeAttempt(
        id=uuid.uuid4().hex,
        year=year,
        term=term,
        grade=grade,
        recorded_at=datetime.now(),
    )


def upsert_attempt(course: Course, year: int, term: Term, grade,
                   update_last_taken: bool = False) -> Course:
    """
    Write a grade at (year, term) without applying the conflict rules.

    An existing attempt at the slot keeps its id and gets the new grade;
    otherwise a new attempt is appended. With update_last_taken, last_taken
    moves to (year, term) unless it already points later.

    Returns:
        Course: Updated copy, or the same course if the grade is invalid
    """
    canonical = normalize_grade(grade)
    if canonical is None:
        logger.warning(f"{course.id}: ignoring invalid grade {grade!r} for year {year} {term.value}")
        return course

    slot = YearTerm(year, term)
    existing = find_attempt(course, year, term)
    if existing is not None:
        attempts = tuple(
            replace(a, grade=canonical) if a.id == existing.id else a
            for a in course.grade_attempts
        )
    else:
        attempts = course.grade_attempts + (_new_attempt(year, term, canonical),)

    last_taken = course.last_taken
    if update_last_taken and (last_taken is None or slot >= last_taken):
        last_taken = slot

    return replace(course, grade_attempts=attempts, last_taken=last_taken)


def remove_attempt(course: Course, year: int, term: Term) -> Course:
    """Delete the attempt at (year, term). Returns the same course if there is none."""
    existing = find_attempt(course, year, term)
    if existing is None:
        return course
    attempts = tuple(a for a in course.grade_attempts if a.id != existing.id)
    return replace(course, grade_attempts=attempts)


# ============================================================================
# Conflict-resolving writes
# ============================================================================

@dataclass(frozen=True)
class AttemptPreview:
    """What record_attempt() would do for one target attempt."""
    course_id: str
    slot: YearTerm
    grade: str
    replaced: GradeAttempt | None
    superseded: tuple
    removed: tuple

    @property
    def has_conflicts(self) -> bool:
        return bool(self.superseded or self.removed)


def preview_attempt(course: Course, year: int, term: Term, grade) -> AttemptPreview | None:
    """
    Work out the effects of recording a grade at (year, term).

    Returns:
        AttemptPreview: The attempt being replaced (if the slot is taken), the
        earlier passing attempts that would be superseded, and the later
        attempts that would be removed. None if the grade is invalid.
    """
    canonical = normalize_grade(grade)
    if canonical is None:
        return None

    target = YearTerm(year, term)
    passing = is_passing_grade(canonical)

    superseded = []
    removed = []
    for attempt in sorted(course.grade_attempts, key=lambda a: a.slot.ordinal):
        if attempt.slot > target:
            removed.append(attempt)
        elif passing and attempt.slot < target and is_passing_grade(attempt.grade):
            superseded.append(attempt)

    return AttemptPreview(
        course_id=course.id,
        slot=target,
        grade=canonical,
        replaced=find_attempt(course, year, term),
        superseded=tuple(superseded),
        removed=tuple(removed),
    )


def record_attempt(course: Course, year: int, term: Term, grade,
                   update_last_taken: bool = True) -> Course:
    """
    Record a grade at (year, term), resolving ledger conflicts in one pass.

    Earlier passing attempts are rewritten to settings.SUPERSEDED_FAIL_GRADE
    when the new grade passes, later attempts are removed, and the target slot
    is updated in place or appended. Attempts come back in chronological order.
    With update_last_taken, last_taken becomes (year, term); anything later
    has just been truncated.

    Returns:
        Course: Updated copy, or the same course if the grade is invalid
    """
    preview = preview_attempt(course, year, term, grade)
    if preview is None:
        logger.warning(f"{course.id}: ignoring invalid grade {grade!r} for year {year} {term.value}")
        return course

    superseded_ids = {a.id for a in preview.superseded}
    removed_ids = {a.id for a in preview.removed}

    attempts = []
    for attempt in course.grade_attempts:
        if attempt.id in removed_ids:
            continue
        if attempt.id in superseded_ids:
            attempt = replace(attempt, grade=settings.SUPERSEDED_FAIL_GRADE)
        elif attempt.slot == preview.slot:
            attempt = replace(attempt, grade=preview.grade)
        attempts.append(attempt)
    if preview.replaced is None:
        attempts.append(_new_attempt(year, term, preview.grade))
    attempts.sort(key=lambda a: a.slot.ordinal)

    if preview.has_conflicts:
        logger.info(
            f"{course.id}: recorded {preview.grade} at {preview.slot}, "
            f"superseded {len(superseded_ids)}, removed {len(removed_ids)}"
        )

    last_taken = preview.slot if update_last_taken else course.last_taken
    return replace(course, grade_attempts=tuple(attempts), last_taken=last_taken)
