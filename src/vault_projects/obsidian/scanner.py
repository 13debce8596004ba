"""Scan one project note into tasks, milestones and rollups."""

import logging
from dataclasses import dataclass, field

from vault_projects.models import Milestone, ProjectEntry, Task
from vault_projects.obsidian.assembler import assemble_list_item, assemble_table_row
from vault_projects.obsidian.lines import (
    is_iso_date,
    is_milestone_header,
    is_pipe_row,
    is_table_task,
    normalize,
)
from vault_projects.obsidian.list_items import ListItem, extract_list_items

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Everything one note contributes to the index."""

    project: ProjectEntry
    milestones: list[Milestone] = field(default_factory=list)


def scan_tasks(
    lines: list[str], document_path: str, items: list[ListItem] | None = None
) -> list[Task]:
    """Collect tasks from list items, then from table rows the items missed.

    Args:
        lines: Note content split on newlines
        document_path: Vault-relative path of the note
        items: Host-supplied list items; extracted from ``lines`` when None

    Returns:
        Tasks in scan order, at most one per line
    """
    if items is None:
        items = extract_list_items(lines)

    tasks: list[Task] = []
    seen: set[int] = set()

    for item in items:
        if item.start_line in seen:
            continue
        task = assemble_list_item(lines, item, document_path)
        if task is None:
            continue
        tasks.append(task)
        seen.add(task.line)

    # Table-embedded tasks are often missing from the host's list items
    for idx, line in enumerate(lines):
        if idx in seen or not is_table_task(line):
            continue
        task = assemble_table_row(lines, idx, document_path)
        if task is None:
            continue
        tasks.append(task)
        seen.add(idx)

    return tasks


def scan_milestones(lines: list[str], document_path: str) -> list[Milestone]:
    """Collect rows of every table whose header names Title and Date columns.

    Rows need at least four cells (id, title, date, ...) and an ISO date in
    the date column; divider rows and anything else are skipped.
    """
    milestones: list[Milestone] = []
    for idx, line in enumerate(lines):
        if not is_milestone_header(line):
            continue
        for row in lines[idx + 1 :]:
            if not is_pipe_row(row):
                break
            cells = [cell.strip() for cell in normalize(row).split("|")]
            if len(cells) < 4:
                continue
            date = cells[3]
            if not is_iso_date(date):
                continue
            description = cells[4] if len(cells) > 4 and cells[4] else None
            milestones.append(
                Milestone(
                    id=cells[1],
                    title=cells[2],
                    date=date,
                    description=description,
                    document_path=document_path,
                )
            )
    return milestones


def build_project(document_path: str, tasks: list[Task], due_property: str = "due") -> ProjectEntry:
    """Compute completion and next-due rollups for a note's tasks."""
    done = sum(1 for task in tasks if task.checked)
    total = len(tasks)
    percent_complete = 1.0 if total == 0 else done / total

    due_key = due_property.lower()
    next_due: str | None = None
    for task in tasks:
        due = task.properties.get(due_key)
        if due and not task.checked and (next_due is None or due < next_due):
            next_due = due

    return ProjectEntry(
        document_path=document_path,
        tasks=tasks,
        percent_complete=percent_complete,
        next_due=next_due,
        completed_tasks=done,
        total_tasks=total,
    )


def scan_document(
    content: str,
    document_path: str,
    due_property: str = "due",
    items: list[ListItem] | None = None,
) -> ScanResult:
    """Scan a full note snapshot."""
    lines = content.split("\n")
    tasks = scan_tasks(lines, document_path, items=items)
    milestones = scan_milestones(lines, document_path)
    logger.debug(
        f"[Scanner] {document_path}: {len(tasks)} tasks, {len(milestones)} milestones"
    )
    return ScanResult(
        project=build_project(document_path, tasks, due_property=due_property),
        milestones=milestones,
    )
