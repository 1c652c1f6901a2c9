"""
Record Aggregator

Joins ratings rows and review-comment rows into one ProfessorRecord per
professor name. Ratings rows are consumed first; comment rows only create a
record when the name has not been seen. Insertion order of first appearance
is preserved.

Example Usage:
    from poly_summaries.agents.record_aggregator import aggregate_professors

    records = aggregate_professors(ratings_rows, comment_rows)
"""

import math
import re
from typing import Any, Mapping, Optional, Sequence

import structlog

from poly_summaries.models.professor import ProfessorRecord

logger = structlog.get_logger(__name__)

COMMENT_SEPARATOR = " | "
MAX_COMMENT_LENGTH = 2000
DEFAULT_SITE_BASE_URL = "https://polyratings.dev"

_WHITESPACE_RUN = re.compile(r"\s+")


def parse_float(value: Any) -> float:
    """Parse a float, returning 0.0 for missing, blank, unparseable or non-finite input."""
    if value is None:
        return 0.0
    try:
        parsed = float(str(value).strip())
    except ValueError:
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def parse_int(value: Any) -> int:
    """Parse a non-negative int; accepts "10" and "10.0". Returns 0 otherwise."""
    if value is None:
        return 0
    text = str(value).strip()
    try:
        parsed = int(text)
    except ValueError:
        as_float = parse_float(text)
        parsed = int(as_float)
    return parsed if parsed > 0 else 0


def slugify_name(name: str) -> str:
    """Lowercase the name and replace each whitespace run with one hyphen.

    Punctuation is kept: "Jane A. Doe" -> "jane-a.-doe".
    """
    return _WHITESPACE_RUN.sub("-", name.strip().lower())


def build_permalink(
    name: str, identifier: Optional[str], site_base_url: str = DEFAULT_SITE_BASE_URL
) -> str:
    """Professor page URL from the source id, or from the slugified name."""
    identifier = (identifier or "").strip()
    return f"{site_base_url.rstrip('/')}/professor/{identifier or slugify_name(name)}"


def bound_comments(
    joined: str,
    max_length: int = MAX_COMMENT_LENGTH,
    separator: str = COMMENT_SEPARATOR,
) -> str:
    """
    Bound a separator-joined comment string to max_length characters.

    Cuts at the start of the last separator that begins at or before
    max_length so no comment is split. Falls back to a hard cut when the
    first comment alone is longer than the limit.

    Args:
        joined: Comments joined with separator
        max_length: Maximum number of characters in the result
        separator: Separator between comments

    Returns:
        The original string if it fits, otherwise a prefix of at most max_length chars
    """
    if len(joined) <= max_length:
        return joined

    cut = joined.rfind(separator, 0, max_length + len(separator))
    if cut > 0:
        return joined[:cut]
    return joined[:max_length]


def _cell(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    return str(value).strip() if value is not None else ""


def _tag(row: Mapping[str, Any], key: str) -> str:
    value = _cell(row, key)
    return "" if value == "N/A" else value


def aggregate_professors(
    ratings_rows: Sequence[Mapping[str, Any]],
    comment_rows: Sequence[Mapping[str, Any]],
    max_comment_length: int = MAX_COMMENT_LENGTH,
    site_base_url: str = DEFAULT_SITE_BASE_URL,
) -> list[ProfessorRecord]:
    """
    Merge ratings and comment rows into per-professor records.

    Args:
        ratings_rows: Rows with fullName, overallRating, numEvals, id,
            materialClear, studentDifficulties, department, courses
        comment_rows: Rows with professor_name, rating_text and optional
            professor_id, professor_department, course_code, grade_level, grade
        max_comment_length: Bound applied to each joined comment string
        site_base_url: Base URL used for permalinks

    Returns:
        One record per distinct name, in order of first appearance
    """
    records: dict[str, ProfessorRecord] = {}
    comment_lists: dict[str, list[str]] = {}
    skipped_rows = 0

    for row in ratings_rows:
        name = _cell(row, "fullName")
        if not name:
            skipped_rows += 1
            continue

        # Last ratings row for a name wins; reinsert keeps first-seen order
        records[name] = ProfessorRecord(
            name=name,
            rating=parse_float(row.get("overallRating")),
            num_evals=parse_int(row.get("numEvals")),
            clarity=parse_float(row.get("materialClear")),
            helpfulness=parse_float(row.get("studentDifficulties")),
            department=_cell(row, "department"),
            courses=_cell(row, "courses"),
            link=build_permalink(name, _cell(row, "id"), site_base_url),
        )
        comment_lists.setdefault(name, [])

    for row in comment_rows:
        name = _cell(row, "professor_name")
        if not name:
            skipped_rows += 1
            continue

        record = records.get(name)
        if record is None:
            record = ProfessorRecord(
                name=name,
                department=_cell(row, "professor_department"),
                courses=_cell(row, "course_code"),
                link=build_permalink(name, _cell(row, "professor_id"), site_base_url),
            )
            records[name] = record
            comment_lists[name] = []

        comment = _cell(row, "rating_text")
        if comment:
            comment_lists[name].append(comment)

        grade_level = _tag(row, "grade_level")
        if grade_level:
            record.grade_levels.append(grade_level)
        grade = _tag(row, "grade")
        if grade:
            record.grades.append(grade)

    for name, record in records.items():
        record.comments = bound_comments(
            COMMENT_SEPARATOR.join(comment_lists[name]), max_comment_length
        )

    logger.info(
        "Aggregated professor records",
        total_professors=len(records),
        ratings_rows=len(ratings_rows),
        comment_rows=len(comment_rows),
        skipped_rows=skipped_rows,
    )

    return list(records.values())
