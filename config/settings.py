"""Configuration from environment variables.

Grade scale, local storage location and logging level for the course tracker.
Every value can be overridden through the environment or a `.env` file; list
values are given as JSON (e.g. PASSING_GRADES='["A", "B", "C"]').
"""

import logging

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Tracker settings from environment.

    PASSING_GRADES and FAILING_GRADES must be disjoint; together they are the
    acceptable grade set. SUPERSEDED_FAIL_GRADE is written over older passing
    attempts once a newer pass is recorded, so it has to be a failing grade.
    """

    # Grade scale (canonical, one decimal place for numeric grades)
    PASSING_GRADES: list[str] = ["4.0", "3.5", "3.0", "2.5", "2.0", "1.5", "1.0"]
    FAILING_GRADES: list[str] = ["0.0", "W", "INC"]
    SUPERSEDED_FAIL_GRADE: str = "0.0"

    # Academic calendar
    ACADEMIC_YEAR_COUNT: int = 4

    # Local progress store
    STORE_DIR: str = "cache"

    # Application settings
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    @model_validator(mode="after")
    def check_grade_scale(self) -> "Settings":
        overlap = set(self.PASSING_GRADES) & set(self.FAILING_GRADES)
        if overlap:
            raise ValueError(f"Grades cannot be both passing and failing: {sorted(overlap)}")
        if self.SUPERSEDED_FAIL_GRADE not in self.FAILING_GRADES:
            raise ValueError(
                f"SUPERSEDED_FAIL_GRADE {self.SUPERSEDED_FAIL_GRADE!r} is not a failing grade"
            )
        return self


settings = Settings()


def configure_logging(level: str | None = None):
    """Configure root logging for entry points (scripts, notebooks)."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
