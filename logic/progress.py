"""
Progress statistics and bulk status toggles.

Statistics are plain counts over course statuses; the per-year and per-term
breakdowns come back as DataFrames so callers can sort, filter or export them.
Bulk toggles go through cascade.set_statuses() so dependents outside the
toggled group still regress when their prerequisites do.
"""

from dataclasses import dataclass, replace

import pandas as pd

from logic.cascade import set_statuses
from models.data_models import CourseStatus, Term

PROGRESS_COLUMNS = ["total", "passed", "active", "pending", "percentage", "credits_passed"]


@dataclass
class ProgressStats:
    total: int
    passed: int
    active: int
    pending: int
    percentage: int


def calculate_progress(courses: list) -> ProgressStats:
    """Count courses by status; percentage is passed over total, rounded."""
    total = len(courses)
    passed = sum(1 for c in courses if c.status == CourseStatus.PASSED)
    active = sum(1 for c in courses if c.status == CourseStatus.ACTIVE)
    pending = sum(1 for c in courses if c.status == CourseStatus.PENDING)
    percentage = round(passed / total * 100) if total > 0 else 0
    return ProgressStats(total, passed, active, pending, percentage)


def group_courses(courses: list) -> dict:
    """
    Group courses by year level and term.

    Returns:
        dict: {year: {Term: [Course, ...]}} with years ascending, terms in
        calendar order and courses sorted by code
    """
    grouped = {}
    for course in sorted(courses, key=lambda c: (c.year, c.term.index, c.code)):
        grouped.setdefault(course.year, {}).setdefault(course.term, []).append(course)
    return grouped


def _courses_frame(courses: list) -> pd.DataFrame:
    rows = [
        {
            "year": c.year,
            "term": c.term.value,
            "term_index": c.term.index,
            "status": c.status.value,
            "credits": c.credits,
        }
        for c in courses
    ]
    return pd.DataFrame(rows, columns=["year", "term", "term_index", "status", "credits"])


def _summarize(df: pd.DataFrame, keys: list) -> pd.DataFrame:
    if df.empty:
        return pd.DataFrame(columns=keys + PROGRESS_COLUMNS)

    df = df.assign(
        is_passed=df["status"] == CourseStatus.PASSED.value,
        is_active=df["status"] == CourseStatus.ACTIVE.value,
        is_pending=df["status"] == CourseStatus.PENDING.value,
    )
    df["credits_passed"] = df["credits"].where(df["is_passed"], 0)

    summary = df.groupby(keys, sort=True).agg(
        total=("status", "size"),
        passed=("is_passed", "sum"),
        active=("is_active", "sum"),
        pending=("is_pending", "sum"),
        credits_passed=("credits_passed", "sum"),
    ).reset_index()
    summary["percentage"] = (summary["passed"] / summary["total"] * 100).round().astype(int)
    return summary


def progress_by_year(courses: list) -> pd.DataFrame:
    """
    Progress per year level.

    Returns:
        pd.DataFrame: columns year, total, passed, active, pending,
        percentage, credits_passed; one row per year, ascending
    """
    summary = _summarize(_courses_frame(courses), ["year"])
    return summary[["year"] + PROGRESS_COLUMNS]


def progress_by_term(courses: list) -> pd.DataFrame:
    """
    Progress per (year, term).

    Returns:
        pd.DataFrame: columns year, term, total, passed, active, pending,
        percentage, credits_passed; rows in calendar order
    """
    summary = _summarize(_courses_frame(courses), ["year", "term_index", "term"])
    return summary[["year", "term"] + PROGRESS_COLUMNS].reset_index(drop=True)


def credit_summary(courses: list) -> dict:
    """Credits per status plus the total."""
    summary = {"total": 0, "passed": 0, "active": 0, "pending": 0}
    for course in courses:
        summary["total"] += course.credits
        summary[course.status.value] += course.credits
    return summary


def are_all_passed(courses: list, year: int, term: Term = None) -> bool:
    """True if the year (or one term of it) has courses and all are passed."""
    group = [c for c in courses if c.year == year and (term is None or c.term == term)]
    return len(group) > 0 and all(c.status == CourseStatus.PASSED for c in group)


def _toggle_group(courses: list, group_ids: list) -> list:
    if not group_ids:
        return list(courses)
    group_set = set(group_ids)
    group = [c for c in courses if c.id in group_set]
    all_passed = all(c.status == CourseStatus.PASSED for c in group)
    status = CourseStatus.PENDING if all_passed else CourseStatus.PASSED
    return set_statuses(courses, {cid: status for cid in group_ids})


def mark_term_as_passed(courses: list, year: int, term: Term) -> list:
    """
    Toggle a term: all passed -> all pending, otherwise -> all passed.

    Returns:
        list: New course list
    """
    ids = [c.id for c in courses if c.year == year and c.term == term]
    return _toggle_group(courses, ids)


def mark_year_as_passed(courses: list, year: int) -> list:
    """Toggle a whole year level the same way as mark_term_as_passed()."""
    ids = [c.id for c in courses if c.year == year]
    return _toggle_group(courses, ids)


def reset_all_to_pending(courses: list) -> list:
    """Every course back to pending. Grade attempts and last_taken are kept."""
    return [replace(c, status=CourseStatus.PENDING) for c in courses]
