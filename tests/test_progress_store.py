"""
Tests for the local progress store and the records it serializes through.
"""

import json
import os

import pytest
from pydantic import ValidationError

from conftest import make_attempt, make_course
from logic.grade_ledger import latest_passing_attempt
from logic.timeline import compute_attempt_window
from models.data_models import CourseStatus, Term, YearTerm
from models.records import CourseRecord, dump_course_list, parse_course_list
from storage.progress_store import (
    clear_progress,
    create_backup,
    delete_backup,
    get_store_info,
    list_backups,
    load_progress,
    restore_backup,
    save_progress,
)


@pytest.fixture
def courses():
    return [
        make_course("A", status=CourseStatus.PASSED, last_taken=YearTerm(1, Term.TERM_2),
                    attempts=[make_attempt(1, Term.TERM_1, "0.0"), make_attempt(1, Term.TERM_2, "3.0")]),
        make_course("B", ["A"], status=CourseStatus.ACTIVE, term=Term.TERM_3),
    ]


# ============================================================================
# Test: Records
# ============================================================================

@pytest.mark.unit
class TestRecords:

    def test_dump_uses_plain_values(self, courses):
        data = dump_course_list(courses)
        assert data[0]["status"] == "passed"
        assert data[0]["last_taken"] == {"year": 1, "term": "Term 2"}
        assert data[1]["prerequisites"] == ["A"]

    def test_parse_dump_restores_courses(self, courses):
        assert parse_course_list(dump_course_list(courses)) == courses

    def test_accepts_camel_case_fields(self):
        record = CourseRecord.model_validate({
            "id": "A", "code": "A", "name": "Course A", "credits": 3,
            "status": "passed", "prerequisites": [], "year": 1, "term": "Term 1",
            "lastTaken": {"year": 1, "term": "Term 1"},
            "gradeAttempts": [{"id": "x", "year": 1, "term": "Term 1", "grade": "3.0",
                               "recordedAt": "2025-01-01T00:00:00"}],
        })
        course = record.to_course()
        assert course.last_taken == YearTerm(1, Term.TERM_1)
        assert course.grade_attempts[0].grade == "3.0"

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            parse_course_list([{"id": "A", "code": "A", "name": "A", "year": 1,
                                "term": "Term 1", "status": "failed"}])

    def test_rejects_duplicate_slots(self):
        attempt = {"id": "x", "year": 1, "term": "Term 1", "grade": "3.0"}
        with pytest.raises(ValidationError):
            parse_course_list([{"id": "A", "code": "A", "name": "A", "year": 1, "term": "Term 1",
                                "grade_attempts": [attempt, dict(attempt, id="y")]}])

    def test_grades_normalized_on_load(self):
        saved = [
            {"id": "A", "code": "A", "name": "A", "year": 1, "term": "Term 1", "status": "passed",
             "grade_attempts": [{"id": "x", "year": 1, "term": "Term 1", "grade": "3"}]},
            {"id": "B", "code": "B", "name": "B", "year": 1, "term": "Term 2", "prerequisites": ["A"]},
        ]
        courses = parse_course_list(saved)
        assert courses[0].grade_attempts[0].grade == "3.0"
        assert latest_passing_attempt(courses[0]).slot == YearTerm(1, Term.TERM_1)
        assert compute_attempt_window(courses[1], 1, Term.TERM_3, courses) == [
            YearTerm(1, Term.TERM_2), YearTerm(1, Term.TERM_3)
        ]

    def test_rejects_unknown_grade(self):
        with pytest.raises(ValidationError):
            parse_course_list([{"id": "A", "code": "A", "name": "A", "year": 1, "term": "Term 1",
                                "grade_attempts": [{"id": "x", "year": 1, "term": "Term 2",
                                                    "grade": "bogus"}]}])

    def test_rejects_non_list(self):
        with pytest.raises(ValidationError):
            parse_course_list({"id": "A"})


# ============================================================================
# Test: Store
# ============================================================================

@pytest.mark.integration
class TestProgressStore:

    def test_save_and_load(self, tmp_path, courses):
        path = save_progress(courses, str(tmp_path))
        assert os.path.exists(path)
        assert load_progress(str(tmp_path)) == courses

    def test_load_nothing_saved(self, tmp_path):
        assert load_progress(str(tmp_path)) is None

    def test_load_invalid_file(self, tmp_path):
        (tmp_path / "progress.json").write_text("{not json")
        assert load_progress(str(tmp_path)) is None

    def test_load_invalid_courses(self, tmp_path):
        (tmp_path / "progress.json").write_text(json.dumps({"courses": [{"id": "A"}]}))
        assert load_progress(str(tmp_path)) is None

    def test_load_bare_list(self, tmp_path, courses):
        (tmp_path / "progress.json").write_text(json.dumps(dump_course_list(courses)))
        assert load_progress(str(tmp_path)) == courses

    def test_store_info(self, tmp_path, courses):
        assert get_store_info(str(tmp_path)) == {"exists": False}
        save_progress(courses, str(tmp_path))
        info = get_store_info(str(tmp_path))
        assert info["exists"] is True
        assert info["course_count"] == 2
        assert info["saved_at"]

    def test_clear(self, tmp_path, courses):
        save_progress(courses, str(tmp_path))
        clear_progress(str(tmp_path))
        assert load_progress(str(tmp_path)) is None

    def test_backups(self, tmp_path, courses):
        path = create_backup(courses, str(tmp_path))
        backups = list_backups(str(tmp_path))
        assert [b["filepath"] for b in backups] == [path]

        filename = backups[0]["filename"]
        assert restore_backup(filename, str(tmp_path)) == courses

        delete_backup(filename, str(tmp_path))
        assert list_backups(str(tmp_path)) == []

    def test_restore_missing_backup(self, tmp_path):
        assert restore_backup("backup_nope.json", str(tmp_path)) is None
