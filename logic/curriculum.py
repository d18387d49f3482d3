"""
Curriculum loading.

Reads the course list from a CSV file with columns:
    id, code, name, credits, prerequisites, year, term[, description]

`id` may be left blank, in which case the normalized course code is used.
`prerequisites` is free text ("COE0001, COE0003", "MATH 101 and PHYS 101",
"None"); course codes are pulled out of it and matched against the codes in
the file. Codes that match nothing are kept as-is so the graph can report them
as unresolved.
"""

import logging
import os
import re

import pandas as pd
from pydantic import ValidationError

from models.records import CourseRecord

logger = logging.getLogger(__name__)

CURRICULUM_COLUMNS = ["id", "code", "name", "credits", "prerequisites", "year", "term"]

COURSE_CODE_PATTERN = re.compile(r"[A-Z]{2,5}\s*\d{1,5}[A-Z]?", re.IGNORECASE)
EMPTY_DEPENDENCY_PATTERN = re.compile(
    r"^(?:none|n/a|tba|tbd|not applicable|no prereq|no prerequisites|nil|--|-|—|–)$",
    re.IGNORECASE,
)


def normalize_course_code(code: str) -> str:
    """Strip everything but letters and digits and upper-case ("coe 0001" -> "COE0001")."""
    if not code:
        return ""
    return re.sub(r"[^A-Za-z0-9]", "", code).upper()


def extract_course_codes(text) -> list:
    """
    Pull course codes out of a prerequisite cell.

    Args:
        text: Cell contents, may be None or a placeholder like "None" or "-"

    Returns:
        list: Normalized codes in order of appearance, without duplicates
    """
    if text is None or (isinstance(text, float) and pd.isna(text)):
        return []
    text = str(text).strip()
    if not text or EMPTY_DEPENDENCY_PATTERN.match(text):
        return []

    sanitized = re.sub(r"\band\b", ",", text.replace("&", ","), flags=re.IGNORECASE)
    codes = []
    for match in COURSE_CODE_PATTERN.findall(sanitized.upper()):
        code = normalize_course_code(match)
        if len(code) >= 3 and code not in codes:
            codes.append(code)
    return codes


def courses_from_records(rows: list) -> list:
    """
    Validate raw course dicts, skipping rows that don't validate.

    Args:
        rows: Dicts with CourseRecord fields

    Returns:
        list: Course objects for the valid rows, in input order
    """
    courses = []
    for position, row in enumerate(rows, start=1):
        try:
            courses.append(CourseRecord.model_validate(row).to_course())
        except ValidationError as e:
            logger.warning(f"Skipping curriculum row {position}: {e.error_count()} validation error(s)")
            logger.debug(f"Row {position} errors: {e}")
    return courses


def load_curriculum(path: str) -> list:
    """
    Load the curriculum CSV into Course objects (all pending, no attempts).

    Returns:
        list: Courses in file order, or [] if the file is missing or unreadable
    """
    if not os.path.exists(path):
        logger.warning(f"Curriculum file not found: {path}")
        return []

    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        logger.error(f"Error reading curriculum {path}: {e}")
        return []

    df.columns = [str(col).strip().lower() for col in df.columns]
    missing = [col for col in CURRICULUM_COLUMNS if col not in df.columns and col != "id"]
    if missing:
        logger.error(f"Curriculum {path} is missing columns: {missing}")
        return []

    rows = []
    for _, row in df.iterrows():
        code = str(row["code"]).strip()
        if not code:
            continue
        course_id = str(row.get("id", "")).strip() or normalize_course_code(code)
        rows.append({
            "id": course_id,
            "code": code,
            "name": str(row["name"]).strip(),
            "credits": str(row["credits"]).strip() or 0,
            "prerequisites": extract_course_codes(row["prerequisites"]),
            "year": str(row["year"]).strip(),
            "term": str(row["term"]).strip(),
            "description": str(row.get("description", "")).strip() or None,
        })

    # Prerequisites are written as codes; point them at course ids
    code_to_id = {normalize_course_code(r["code"]): r["id"] for r in rows}
    for r in rows:
        r["prerequisites"] = [code_to_id.get(code, code) for code in r["prerequisites"]]

    courses = courses_from_records(rows)
    logger.info(f"Loaded {len(courses)} courses from {path}")
    return courses
