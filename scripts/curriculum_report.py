#!/usr/bin/env python3
"""
Print a progress report for a curriculum.

Loads the curriculum CSV, overlays saved progress from the local store when
there is any, then reports dangling prerequisites, progress by year and term,
and the courses that can be taken next.

Usage:
    python scripts/curriculum_report.py curriculum.csv [--store-dir cache]
"""

import argparse

from dotenv import load_dotenv

# Load environment variables before settings are built
load_dotenv()

from config.settings import configure_logging
from logic.course_graph import CourseGraph
from logic.curriculum import load_curriculum
from logic.prerequisites import blocking_prerequisites, get_eligible_courses
from logic.progress import calculate_progress, credit_summary, progress_by_term, progress_by_year
from models.data_models import CourseStatus
from storage.progress_store import load_progress


def merge_saved_progress(curriculum: list, saved: list) -> list:
    """Use saved entries for courses still in the curriculum, keep the rest as loaded."""
    saved_by_id = {course.id: course for course in saved}
    return [saved_by_id.get(course.id, course) for course in curriculum]


def print_report(courses: list):
    graph = CourseGraph(courses)

    print("=" * 80)
    print("CURRICULUM PROGRESS REPORT")
    print("=" * 80)

    stats = calculate_progress(courses)
    credits = credit_summary(courses)
    print(f"\n  Courses: {stats.total}  passed {stats.passed}, active {stats.active}, pending {stats.pending}")
    print(f"  Progress: {stats.percentage}%")
    print(f"  Credits passed: {credits['passed']} / {credits['total']}")

    unresolved = graph.unresolved_prerequisites()
    print("\n" + "=" * 80)
    print(f"UNRESOLVED PREREQUISITES ({len(unresolved)} courses)")
    print("=" * 80)
    for course_id, missing in sorted(unresolved.items()):
        print(f"  {course_id}: {', '.join(missing)}")

    print("\n" + "=" * 80)
    print("PROGRESS BY YEAR")
    print("=" * 80)
    print(progress_by_year(courses).to_string(index=False))

    print("\n" + "=" * 80)
    print("PROGRESS BY TERM")
    print("=" * 80)
    print(progress_by_term(courses).to_string(index=False))

    eligible = get_eligible_courses(graph)
    print("\n" + "=" * 80)
    print(f"CAN TAKE NEXT ({len(eligible)})")
    print("=" * 80)
    for course in eligible:
        print(f"  Year {course.year} {course.term.value}  {course.code}: {course.name}")

    blocked = [c for c in courses if c.status == CourseStatus.PENDING and blocking_prerequisites(c, graph)]
    if blocked:
        print(f"\n  Blocked by prerequisites: {len(blocked)} courses")


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("curriculum", help="Curriculum CSV file")
    parser.add_argument("--store-dir", default=None, help="Progress store directory")
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args()

    configure_logging(args.log_level)

    courses = load_curriculum(args.curriculum)
    if not courses:
        print(f"No courses loaded from {args.curriculum}")
        return 1

    saved = load_progress(args.store_dir)
    if saved:
        courses = merge_saved_progress(courses, saved)

    print_report(courses)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
