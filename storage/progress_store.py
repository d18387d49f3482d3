"""
Disk storage for course progress.

Saves the course collection (statuses, grade attempts, last taken) as JSON so
progress persists across sessions, with timestamped backup snapshots. The
engine never calls this module; callers save after each applied change.
"""

import json
import logging
import os
from datetime import datetime

from pydantic import ValidationError

from config.settings import settings
from models.records import dump_course_list, parse_course_list

logger = logging.getLogger(__name__)

PROGRESS_FILE = "progress.json"


def _store_dir(store_dir: str = None) -> str:
    return store_dir or settings.STORE_DIR


def _backup_dir(store_dir: str = None) -> str:
    return os.path.join(_store_dir(store_dir), "backups")


def _write(path: str, courses: list):
    payload = {
        "saved_at": datetime.now().isoformat(),
        "courses": dump_course_list(courses),
    }
    with open(path, "w") as f:
        json.dump(payload, f, indent=2)


def _read(path: str) -> list | None:
    if not os.path.exists(path):
        return None

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading progress from {path}: {e}")
        return None

    # Older files hold the bare course list
    courses = data.get("courses") if isinstance(data, dict) else data
    try:
        return parse_course_list(courses)
    except ValidationError as e:
        logger.error(f"Invalid course data in {path}: {e.error_count()} validation error(s)")
        return None


def save_progress(courses: list, store_dir: str = None) -> str:
    """
    Save the course collection to disk.

    Args:
        courses: List of Course objects
        store_dir: Directory to save in, defaults to settings.STORE_DIR

    Returns:
        str: Path to the saved file
    """
    directory = _store_dir(store_dir)
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, PROGRESS_FILE)
    _write(path, courses)
    logger.info(f"Saved {len(courses)} courses to {path}")
    return path


def load_progress(store_dir: str = None) -> list | None:
    """
    Load the saved course collection.

    Returns:
        list: Course objects, or None if nothing is saved or the file is invalid
    """
    return _read(os.path.join(_store_dir(store_dir), PROGRESS_FILE))


def clear_progress(store_dir: str = None):
    """Delete the saved progress file (backups are kept)."""
    path = os.path.join(_store_dir(store_dir), PROGRESS_FILE)
    if os.path.exists(path):
        os.remove(path)


def get_store_info(store_dir: str = None) -> dict:
    """Get information about the saved progress."""
    path = os.path.join(_store_dir(store_dir), PROGRESS_FILE)
    if not os.path.exists(path):
        return {"exists": False}

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        return {"exists": True, "error": str(e)}

    courses = data.get("courses", []) if isinstance(data, dict) else data
    return {
        "exists": True,
        "file_size": os.stat(path).st_size,
        "saved_at": data.get("saved_at") if isinstance(data, dict) else None,
        "course_count": len(courses) if isinstance(courses, list) else 0,
    }


def create_backup(courses: list, store_dir: str = None) -> str:
    """
    Create a timestamped backup snapshot of the course collection.

    Returns:
        str: Path to the created backup file
    """
    directory = _backup_dir(store_dir)
    os.makedirs(directory, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    path = os.path.join(directory, f"backup_{timestamp}.json")
    _write(path, courses)
    return path


def list_backups(store_dir: str = None) -> list:
    """
    List available backup snapshots, newest first.

    Returns:
        list: [{filename, filepath, timestamp, size}, ...]
    """
    directory = _backup_dir(store_dir)
    if not os.path.exists(directory):
        return []

    backups = []
    for filename in os.listdir(directory):
        if not (filename.startswith("backup_") and filename.endswith(".json")):
            continue
        filepath = os.path.join(directory, filename)

        timestamp_str = filename[len("backup_"):-len(".json")]
        try:
            timestamp = datetime.strptime(timestamp_str, "%Y%m%d_%H%M%S_%f")
            display_time = timestamp.strftime("%Y-%m-%d %H:%M:%S")
        except ValueError:
            display_time = timestamp_str

        backups.append({
            "filename": filename,
            "filepath": filepath,
            "timestamp": display_time,
            "size": os.stat(filepath).st_size,
        })

    # Filenames sort by timestamp
    backups.sort(key=lambda x: x["filename"], reverse=True)
    return backups


def restore_backup(backup_filename: str, store_dir: str = None) -> list | None:
    """
    Load the course collection from a backup snapshot.

    Returns:
        list: Course objects, or None if the backup is missing or invalid
    """
    return _read(os.path.join(_backup_dir(store_dir), os.path.basename(backup_filename)))


def delete_backup(backup_filename: str, store_dir: str = None):
    """Delete a specific backup file."""
    path = os.path.join(_backup_dir(store_dir), os.path.basename(backup_filename))
    if os.path.exists(path):
        os.remove(path)
