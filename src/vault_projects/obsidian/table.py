"""Positional heuristics for task rows in pipe tables.

Project notes keep epics, stories and sub-tasks in tables such as::

    | ID  | Epic | Story           | Depends | Assignee | Priority | Pts | Start      | Due        | Description |
    | S-1 | E-1  | - [ ] Design    |         | Ann      | high     | 1   | 2025-01-01 | 2025-02-01 | Onboarding  |

Column headers are free-form, so parent references, priority and the
description are inferred from cell position and cell shape. Each helper
works on the cell list returned by ``split_cells``.
"""

import re

from vault_projects.obsidian.lines import is_iso_date, normalize

EPIC_REF_RE = re.compile(r"^[Ee]-\d+$")
STORY_REF_RE = re.compile(r"^[Ss]-\d+$")

PRIORITY_TOKENS = frozenset(
    {
        "critical", "crit", "c", "p0",
        "highest", "high", "h", "1", "p1",
        "medium", "med", "m", "2", "p2",
        "low", "l", "3", "p3",
    }
)  # fmt: skip


def split_cells(row: str) -> list[str]:
    """Split a pipe row into trimmed cells, dropping boundary-pipe empties."""
    cells = [cell.strip() for cell in normalize(row).split("|")]
    if cells and cells[0] == "":
        cells.pop(0)
    if cells and cells[-1] == "":
        cells.pop()
    return cells


def infer_parent(cells: list[str]) -> dict[str, str]:
    """Read an epic (story rows) or story (sub-task rows) reference from cell 1."""
    if len(cells) < 2:
        return {}
    ref = cells[1]
    if EPIC_REF_RE.match(ref):
        return {"epic": ref}
    if STORY_REF_RE.match(ref):
        return {"story": ref}
    return {}


def infer_priority(cells: list[str]) -> str | None:
    """Return the first cell holding a known priority token, verbatim."""
    for cell in cells:
        if cell.lower() in PRIORITY_TOKENS:
            return cell
    return None


def infer_description(cells: list[str]) -> str | None:
    """Return the right-most non-empty, non-date cell past the id and summary columns."""
    for cell in reversed(cells[2:]):
        if cell and not is_iso_date(cell):
            return cell
    return None


def infer_row_properties(row: str) -> dict[str, str]:
    """Run every table heuristic over one row."""
    cells = split_cells(row)
    props = infer_parent(cells)
    priority = infer_priority(cells)
    if priority is not None:
        props["priority"] = priority
    description = infer_description(cells)
    if description is not None:
        props["description"] = description
    return props
