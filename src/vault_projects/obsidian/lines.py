"""Line classification for project notes."""

import re
from enum import Enum

NBSP = "\u00a0"

# Pipe row with a checklist bullet inside a cell: | ... - [ ] ... |
TABLE_TASK_RE = re.compile(r"^\s*\|.*-\s*\[[ xX/\-]\]")
# Checklist bullet at the start of a list item
LIST_TASK_RE = re.compile(r"^\s*[-*+]\s*\[[ xX/\-]\]")
# Leading checkbox marker, any of the five glyph variants
CHECKBOX_RE = re.compile(r"^\s*[-*+]\s*\[[\sxX/\-]\]\s*")

DONE_RE = re.compile(r"[-*+]\s*\[[xX]\]")
IN_PROGRESS_RE = re.compile(r"[-*+]\s*\[/\]")
ON_HOLD_RE = re.compile(r"[-*+]\s*\[-\]")

PIPE_ROW_RE = re.compile(r"^\s*\|")
TITLE_RE = re.compile(r"\bTitle\b", re.IGNORECASE)
DATE_WORD_RE = re.compile(r"\bDate\b", re.IGNORECASE)
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class LineKind(str, Enum):
    """What a single line of a note holds."""

    TABLE_TASK = "table-task"
    LIST_TASK = "list-task"
    MILESTONE_HEADER = "milestone-header"
    TEXT = "text"


def normalize(line: str) -> str:
    """Replace non-breaking spaces with plain spaces."""
    return line.replace(NBSP, " ")


def is_table_task(line: str) -> bool:
    """Check for a checklist bullet inside a pipe row."""
    return bool(TABLE_TASK_RE.match(normalize(line)))


def is_pipe_row(line: str) -> bool:
    """Check whether a line is part of a pipe table."""
    return bool(PIPE_ROW_RE.match(normalize(line)))


def is_milestone_header(line: str) -> bool:
    """Check for a pipe header row naming both Title and Date columns."""
    line = normalize(line)
    return bool(PIPE_ROW_RE.match(line) and TITLE_RE.search(line) and DATE_WORD_RE.search(line))


def classify(line: str, list_item: bool = False) -> LineKind:
    """Classify one raw line.

    Args:
        line: Line exactly as it appears in the note
        list_item: Whether the caller already knows the line opens a list item

    Returns:
        The first matching kind, TEXT when nothing matches
    """
    line = normalize(line)
    if TABLE_TASK_RE.match(line):
        return LineKind.TABLE_TASK
    if list_item and LIST_TASK_RE.match(line):
        return LineKind.LIST_TASK
    if is_milestone_header(line):
        return LineKind.MILESTONE_HEADER
    return LineKind.TEXT


def is_iso_date(value: str) -> bool:
    """Check a value against the strict YYYY-MM-DD shape."""
    return bool(ISO_DATE_RE.match(value.strip()))
