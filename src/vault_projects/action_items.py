"""Text fragments for new epics, stories and sub-tasks.

Fragments use exactly the syntax the scanner reads back, either as a
checklist block::

    - [ ] E-3 Build API
      start:: 2025-07-01
      due:: 2025-08-01
      assignee:: Ann
      priority:: high
      depends:: FS:E-2

or as a row appended to the note's Epics / Stories / Sub-tasks table.
"""

import logging
import re
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, field_validator

from vault_projects.models import DEPENDENCY_TYPES, Task
from vault_projects.obsidian.frontmatter import frontmatter_end
from vault_projects.obsidian.lines import is_iso_date

if TYPE_CHECKING:
    from vault_projects.project_index import ProjectIndex

logger = logging.getLogger(__name__)


class ActionItemKind(str, Enum):
    """Kind of item to create."""

    EPIC = "epic"
    STORY = "story"
    SUBTASK = "subtask"


ID_PREFIX = {
    ActionItemKind.EPIC: "E",
    ActionItemKind.STORY: "S",
    ActionItemKind.SUBTASK: "SB",
}

SECTION_HEADINGS = {
    ActionItemKind.EPIC: "## 🗂️ Epics",
    ActionItemKind.STORY: "### 📄 Stories",
    ActionItemKind.SUBTASK: "#### 🔧 Sub-tasks",
}


class ActionItemDraft(BaseModel):
    """Fields collected for a new action item."""

    kind: ActionItemKind = ActionItemKind.EPIC
    title: str
    assignee: str
    start: str | None = None
    due: str | None = None
    priority: str | None = None
    description: str = ""
    parent_epic: str | None = None
    parent_story: str | None = None
    dependency: str | None = None
    dependency_type: str | None = None

    @field_validator("title", "assignee")
    @classmethod
    def _required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("start", "due")
    @classmethod
    def _iso_date(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        value = value.strip()
        if not is_iso_date(value):
            raise ValueError("dates must be YYYY-MM-DD")
        date.fromisoformat(value)  # Rejects impossible dates like 2025-02-30
        return value

    @field_validator("dependency_type")
    @classmethod
    def _link_type(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        value = value.strip().upper()
        if value not in DEPENDENCY_TYPES:
            raise ValueError(f"dependency type must be one of {', '.join(DEPENDENCY_TYPES)}")
        return value

    def dependency_value(self) -> str | None:
        """`TYPE:id` or bare id for the depends annotation."""
        if not self.dependency or not self.dependency.strip():
            return None
        dependency = self.dependency.strip()
        if self.dependency_type:
            return f"{self.dependency_type}:{dependency}"
        return dependency


def next_task_id(tasks: list[Task], kind: ActionItemKind) -> str:
    """Next free id for a kind: one past the highest existing number."""
    prefix = ID_PREFIX[kind]
    pattern = re.compile(rf"^{prefix.lower()}-(\d+)", re.IGNORECASE)
    next_number = 1
    for task in tasks:
        match = pattern.match(task.id)
        if match:
            next_number = max(next_number, int(match.group(1)) + 1)
    return f"{prefix}-{next_number}"


def build_task_block(task_id: str, draft: ActionItemDraft) -> str:
    """Checklist fragment with one annotation per line."""
    parts = [f"- [ ] {task_id} {draft.title}"]
    if draft.start:
        parts.append(f"  start:: {draft.start}")
    if draft.due:
        parts.append(f"  due:: {draft.due}")
    parts.append(f"  assignee:: {draft.assignee}")
    if draft.priority:
        parts.append(f"  priority:: {draft.priority}")
    dependency = draft.dependency_value()
    if dependency:
        parts.append(f"  depends:: {dependency}")
    return "\n".join(parts)


def build_table_row(task_id: str, draft: ActionItemDraft) -> str:
    """Pipe row in the column order of the kind's table."""
    title = f"- [ ] {draft.title}"
    assignee = f"assignee:: {draft.assignee}"
    start = f"start:: {draft.start}" if draft.start else ""
    due = f"due:: {draft.due}" if draft.due else ""
    priority = draft.priority or ""
    dependency = draft.dependency_value()
    depends = f"depends:: {dependency}" if dependency else ""
    description = draft.description

    if draft.kind == ActionItemKind.STORY:
        epic = draft.parent_epic or "E-1"
        cells = [task_id, epic, title, depends, assignee, priority, "1", start, due, description]
    elif draft.kind == ActionItemKind.SUBTASK:
        story = draft.parent_story or "S-1"
        cells = [task_id, story, title, depends, assignee, priority, start, due, description]
    else:
        cells = [task_id, title, assignee, priority, start, due, description]
    return "| " + " | ".join(cells) + " |"


def insert_into_document(lines: list[str], task_id: str, draft: ActionItemDraft) -> list[str]:
    """Insert a new item into a note's lines.

    The row goes after the last table row of the kind's section. Notes
    without that section get the checklist block right after the front
    matter instead.
    """
    new_lines = list(lines)
    heading = SECTION_HEADINGS[draft.kind]
    section_start = next((i for i, line in enumerate(new_lines) if heading in line), -1)

    if section_start == -1:
        insert_at = frontmatter_end(new_lines)
        new_lines[insert_at:insert_at] = build_task_block(task_id, draft).split("\n")
        return new_lines

    section_end = len(new_lines)
    for i in range(section_start + 1, len(new_lines)):
        if new_lines[i].startswith(("## ", "### ", "#### ")):
            section_end = i
            break

    insert_at = section_end
    for i in range(section_start, section_end):
        if "|" in new_lines[i] and "---" not in new_lines[i]:
            insert_at = i + 1

    new_lines.insert(insert_at, build_table_row(task_id, draft))
    return new_lines


async def create_action_item(
    index: "ProjectIndex", document_path: str, draft: ActionItemDraft
) -> str:
    """Write a new item into a project note and reindex.

    Returns:
        The new task id

    Raises:
        FileNotFoundError: If the note is not an indexed project
    """
    async with index.write_lock:
        if index.get_project(document_path) is None:
            raise FileNotFoundError(f"Project not found: {document_path}")

        task_id = next_task_id(index.get_project_tasks(document_path), draft.kind)
        store = index.store
        content = await store.read(document_path)
        lines = insert_into_document(content.split("\n"), task_id, draft)
        await store.write(document_path, "\n".join(lines))
        logger.info(f"[ActionItems] Created {draft.kind.value} {task_id} in {document_path}")

        await index.reindex()
    return task_id
