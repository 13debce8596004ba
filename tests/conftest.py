"""Test fixtures for VaultProjects."""

from collections.abc import Callable
from pathlib import Path

import pytest

from vault_projects.obsidian.vault import InMemoryDocumentStore

TABLE_PROJECT = """---
project: true
status: active
---
# Website relaunch

## 🗂️ Epics
| ID | Epic | Assignee | Priority | Start | Due | Description |
|----|------|----------|----------|-------|-----|-------------|
| E-1 | - [ ] Build API | assignee:: Ann | high | start:: 2025-07-01 | due:: 2025-08-01 | Public REST API |
| E-2 | - [x] Design system | assignee:: Bob | low | | due:: 2025-06-01 | |

### 📄 Stories
| ID | Epic | Story | Depends | Assignee | Priority | Pts | Start | Due | Description |
|----|------|-------|---------|----------|----------|-----|-------|-----|-------------|
| S-1 | E-1 | - [/] Design endpoints | depends:: FS:E-2 | Ann | medium | 1 | 2025-07-01 | 2025-07-15 | Endpoint list |

#### 🔧 Sub-tasks
| ID | Story | Sub-task | Depends | Assignee | Priority | Start | Due | Description |
|----|-------|----------|---------|----------|----------|-------|-----|-------------|
| SB-1 | S-1 | - [-] Auth endpoint | | Cy | p2 | 2025-07-02 | 2025-07-05 | OAuth |

## Milestones
| ID | Title | Date | Description |
|----|-------|------|-------------|
| M-1 | Beta | 2025-08-15 | Public beta |
| M-2 | Launch | TBD | |
"""

CHECKLIST_PROJECT = """---
project: true
---
# Checklist project

- [ ] E-1 Build API
  due:: 2025-08-01
  assignee:: Ann
- [x] E-2 Ship docs 📅 2025-02-02
  due:: 2025-01-01
- [/] Write tests ^t-1
- [-] Paused thing
- plain bullet
"""

NOT_A_PROJECT = """---
project: false
---
- [ ] E-9 Not indexed
"""


@pytest.fixture
def table_lines() -> list[str]:
    """Lines of the table-based project note."""
    return TABLE_PROJECT.split("\n")


@pytest.fixture
def checklist_lines() -> list[str]:
    """Lines of the checklist-based project note."""
    return CHECKLIST_PROJECT.split("\n")


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    """Store holding one table project, one checklist project and a plain note."""
    return InMemoryDocumentStore(
        {
            "Projects/Relaunch.md": TABLE_PROJECT,
            "Projects/Checklist.md": CHECKLIST_PROJECT,
            "Notes/Plain.md": NOT_A_PROJECT,
        }
    )


@pytest.fixture
def tmp_vault(tmp_path: Path) -> Path:
    """Create temporary vault with project notes."""
    vault = tmp_path / "vault"
    projects_dir = vault / "Projects"
    projects_dir.mkdir(parents=True)
    (projects_dir / "Relaunch.md").write_text(TABLE_PROJECT, encoding="utf-8")
    (projects_dir / "Checklist.md").write_text(CHECKLIST_PROJECT, encoding="utf-8")
    (vault / "Plain.md").write_text(NOT_A_PROJECT, encoding="utf-8")
    hidden = vault / ".obsidian"
    hidden.mkdir()
    (hidden / "workspace.md").write_text(CHECKLIST_PROJECT, encoding="utf-8")
    return vault


@pytest.fixture
def line_of() -> Callable[[list[str], str], int]:
    """Return a helper finding the first line index containing a fragment."""

    def find(lines: list[str], fragment: str) -> int:
        return next(i for i, line in enumerate(lines) if fragment in line)

    return find
