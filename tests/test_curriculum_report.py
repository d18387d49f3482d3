"""
Tests for the curriculum report script.
"""

import pytest

from conftest import make_course
from models.data_models import CourseStatus
from scripts.curriculum_report import main, merge_saved_progress, print_report
from storage.progress_store import save_progress


@pytest.mark.unit
def test_merge_saved_progress():
    curriculum = [make_course("A"), make_course("B", ["A"])]
    saved = [make_course("A", status=CourseStatus.PASSED), make_course("GONE")]
    merged = merge_saved_progress(curriculum, saved)
    assert [c.id for c in merged] == ["A", "B"]
    assert merged[0].status == CourseStatus.PASSED


@pytest.mark.unit
def test_print_report(capsys):
    courses = [make_course("A", status=CourseStatus.PASSED), make_course("B", ["A"]), make_course("C", ["X"])]
    print_report(courses)
    out = capsys.readouterr().out
    assert "UNRESOLVED PREREQUISITES (1 courses)" in out
    assert "C: X" in out
    assert "CAN TAKE NEXT (1)" in out


@pytest.mark.integration
def test_main_overlays_saved_progress(tmp_path, monkeypatch, capsys):
    curriculum = tmp_path / "curriculum.csv"
    curriculum.write_text(
        "code,name,credits,prerequisites,year,term\n"
        "COE0001,Math 1,3,,1,Term 1\n"
        "COE0003,Math 2,3,COE0001,1,Term 2\n"
    )
    store = tmp_path / "store"
    save_progress([make_course("COE0001", status=CourseStatus.PASSED)], str(store))

    monkeypatch.setattr("sys.argv", ["curriculum_report", str(curriculum), "--store-dir", str(store)])
    assert main() == 0
    out = capsys.readouterr().out
    assert "Progress: 50%" in out


@pytest.mark.integration
def test_main_does_not_reload_environment(tmp_path, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("environment must be loaded before settings are built")

    monkeypatch.setattr("scripts.curriculum_report.load_dotenv", fail)
    monkeypatch.setattr("sys.argv", ["curriculum_report", str(tmp_path / "missing.csv")])
    assert main() == 1


@pytest.mark.integration
def test_main_empty_curriculum(tmp_path, monkeypatch):
    monkeypatch.setattr("sys.argv", ["curriculum_report", str(tmp_path / "missing.csv")])
    assert main() == 1
