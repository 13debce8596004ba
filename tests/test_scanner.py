"""Tests for task assembly and document scanning."""

from collections.abc import Callable

import pytest

from vault_projects.models import TaskKind, TaskStatus
from vault_projects.obsidian.assembler import (
    PLACEHOLDER_TEXT,
    assemble_list_item,
    assemble_table_row,
    derive_status,
    parse_depends,
)
from vault_projects.obsidian.list_items import ListItem, extract_list_items
from vault_projects.obsidian.scanner import (
    build_project,
    scan_document,
    scan_milestones,
    scan_tasks,
)

LineOf = Callable[[list[str], str], int]


@pytest.mark.parametrize(
    ("glyph", "status", "checked"),
    [
        (" ", TaskStatus.NOT_STARTED, False),
        ("/", TaskStatus.IN_PROGRESS, False),
        ("-", TaskStatus.ON_HOLD, False),
        ("x", TaskStatus.DONE, True),
        ("X", TaskStatus.DONE, True),
    ],
)
def test_checkbox_state_mapping(glyph: str, status: TaskStatus, checked: bool) -> None:
    """Test status and checked flag for each glyph, list and table form."""
    list_lines = [f"- [{glyph}] E-1 Build API"]
    list_task = assemble_list_item(list_lines, extract_list_items(list_lines)[0], "p.md")
    assert list_task is not None
    assert list_task.status == status
    assert list_task.checked is checked

    table_task = assemble_table_row([f"| E-1 | - [{glyph}] Build API |"], 0, "p.md")
    assert table_task is not None
    assert table_task.status == status
    assert table_task.checked is checked


def test_derive_status_unknown_glyph() -> None:
    """Test that unrecognised markers read as not started."""
    assert derive_status("- [?] Something") == TaskStatus.NOT_STARTED


def test_parse_depends() -> None:
    """Test splitting, anchor stripping and lowercasing of depends values."""
    assert parse_depends("^E-1, ^S-2  SB-3") == ["e-1", "s-2", "sb-3"]
    assert parse_depends("FS:^E-2,SS:e-3") == ["fs:e-2", "ss:e-3"]
    assert parse_depends("") == []
    assert parse_depends(None) == []


def test_checklist_block_round_trip() -> None:
    """Test a creation-wizard fragment: id from text, annotations from continuation lines."""
    lines = ["- [ ] E-1 Build API", "  due:: 2025-08-01", "  assignee:: Ann"]
    item = extract_list_items(lines)[0]
    task = assemble_list_item(lines, item, "Projects/API.md")

    assert task is not None
    assert task.id == "e-1"
    assert task.kind == TaskKind.EPIC
    assert task.line == 0
    assert task.text == "E-1 Build API"
    assert task.properties == {"due": "2025-08-01", "assignee": "Ann"}
    assert task.status == TaskStatus.NOT_STARTED
    assert task.checked is False
    assert task.key == "Projects/API.md::e-1"


def test_block_anchor_is_the_id() -> None:
    """Test that a ^anchor beats the leading id token and is stripped from text."""
    lines = ["- [/] SB-4 Write tests ^Tests-1"]
    task = assemble_list_item(lines, extract_list_items(lines)[0], "p.md")
    assert task is not None
    assert task.id == "tests-1"
    assert task.text == "SB-4 Write tests"
    assert task.kind == TaskKind.UNKNOWN


def test_synthetic_id_and_placeholder_text() -> None:
    """Test the fallback id and the placeholder for empty text."""
    lines = ["intro", "- [ ] due:: 2025-01-01"]
    task = assemble_list_item(lines, extract_list_items(lines)[0], "Notes/P.md")
    assert task is not None
    assert task.id == "notes/p.md-1"
    assert task.kind == TaskKind.UNKNOWN
    assert task.text == PLACEHOLDER_TEXT


def test_plain_list_item_is_not_a_task() -> None:
    """Test that bullets without a checkbox are rejected."""
    lines = ["- just a note"]
    assert assemble_list_item(lines, extract_list_items(lines)[0], "p.md") is None


def test_table_row_caret_beats_id_cell() -> None:
    """Test id precedence on table rows."""
    task = assemble_table_row(["| S-1 | E-1 | - [ ] Design | Ann | ^story-one"], 0, "p.md")
    assert task is not None
    assert task.id == "story-one"

    task = assemble_table_row(["| S-1 | E-1 | - [ ] Design | Ann |"], 0, "p.md")
    assert task is not None
    assert task.id == "s-1"
    assert task.kind == TaskKind.STORY


def test_table_row_without_id_cell_gets_synthetic_id() -> None:
    """Test the synthetic row id when the first cell is not id-shaped."""
    lines = ["", "", "", "| - [ ] Loose task | Ann |"]
    task = assemble_table_row(lines, 3, "P.md")
    assert task is not None
    assert task.id == "p.md-row-3"


def test_story_row_properties() -> None:
    """Test table heuristics merged into a story task."""
    row = (
        "| S-1 | E-1 | - [ ] Design | | Ann | high | 1 "
        "| 2025-01-01 | 2025-02-01 | Improve onboarding |"
    )
    task = assemble_table_row([row], 0, "p.md")
    assert task is not None
    assert task.text == "Design"
    assert task.properties["epic"] == "E-1"
    assert task.properties["priority"] == "high"
    assert task.properties["description"] == "Improve onboarding"


def test_description_annotation_beats_table_cell() -> None:
    """Test that an explicit description:: wins over the inferred cell."""
    row = "| E-1 | - [ ] Build description:: From annotation | Ann | Cell text |"
    task = assemble_table_row([row], 0, "p.md")
    assert task is not None
    assert task.properties["description"] == "From annotation"
    assert task.text == "Build"


def test_table_emoji_due_beats_annotation() -> None:
    """Test emoji precedence inside a table row."""
    row = "| E-1 | - [ ] Build 📅 2025-02-02 | due:: 2025-01-01 |"
    task = assemble_table_row([row], 0, "p.md")
    assert task is not None
    assert task.properties["due"] == "2025-02-02"


def test_malformed_rows_are_ignored() -> None:
    """Test that odd input is skipped without raising."""
    lines = [
        "| just | a | table |",
        "|---|---|",
        "- [ ",
        "random text :: with colons",
        "",
        "| E-1 | - [ ] ok |",
    ]
    tasks = scan_tasks(lines, "p.md")
    assert [t.id for t in tasks] == ["e-1"]


def test_scan_table_project(table_lines: list[str], line_of: LineOf) -> None:
    """Test the full table-based note."""
    tasks = scan_tasks(table_lines, "Projects/Relaunch.md")

    assert [t.id for t in tasks] == ["e-1", "e-2", "s-1", "sb-1"]
    e1, e2, s1, sb1 = tasks

    assert e1.line == line_of(table_lines, "| E-1 |")
    assert e1.text == "Build API"
    assert e1.properties["assignee"] == "Ann"
    assert e1.properties["start"] == "2025-07-01"
    assert e1.properties["due"] == "2025-08-01"
    assert e1.properties["priority"] == "high"
    assert e1.properties["description"] == "Public REST API"

    assert e2.checked is True
    assert e2.status == TaskStatus.DONE

    assert s1.status == TaskStatus.IN_PROGRESS
    assert s1.properties["epic"] == "E-1"
    assert s1.properties["priority"] == "medium"
    assert s1.depends == ["fs:e-2"]

    assert sb1.kind == TaskKind.SUBTASK
    assert sb1.status == TaskStatus.ON_HOLD
    assert sb1.properties["story"] == "S-1"
    assert sb1.properties["priority"] == "p2"
    assert sb1.properties["description"] == "OAuth"


def test_scan_checklist_project(checklist_lines: list[str]) -> None:
    """Test the checklist-based note."""
    tasks = scan_tasks(checklist_lines, "Projects/Checklist.md")

    assert len(tasks) == 4
    e1, e2, t1, paused = tasks
    assert e1.id == "e-1"
    assert e1.properties == {"due": "2025-08-01", "assignee": "Ann"}
    assert e2.id == "e-2"
    assert e2.properties["due"] == "2025-02-02"
    assert t1.id == "t-1"
    assert t1.status == TaskStatus.IN_PROGRESS
    assert paused.status == TaskStatus.ON_HOLD
    assert paused.id.startswith("projects/checklist.md-")


def test_dedup_between_list_items_and_fallback(table_lines: list[str], line_of: LineOf) -> None:
    """Test that a table row seen by both walks yields one task."""
    row_idx = line_of(table_lines, "| S-1 |")
    host_items = [ListItem(start_line=row_idx, end_line=row_idx, block_id=None, task_marker="/")]

    tasks = scan_tasks(table_lines, "Projects/Relaunch.md", items=host_items)

    assert [t.line for t in tasks].count(row_idx) == 1
    assert len(tasks) == 4
    # Host items come first, then the fallback walk in line order
    assert tasks[0].id == "s-1"


def test_duplicate_host_items_dedup() -> None:
    """Test that repeated host items for one line collapse to one task."""
    lines = ["- [ ] E-1 Build"]
    item = ListItem(start_line=0, end_line=0, task_marker=" ")
    assert len(scan_tasks(lines, "p.md", items=[item, item])) == 1


def test_scan_milestones(table_lines: list[str]) -> None:
    """Test milestone rows: ISO dated rows only."""
    milestones = scan_milestones(table_lines, "Projects/Relaunch.md")

    assert len(milestones) == 1
    milestone = milestones[0]
    assert milestone.id == "M-1"
    assert milestone.title == "Beta"
    assert milestone.date == "2025-08-15"
    assert milestone.description == "Public beta"
    assert milestone.document_path == "Projects/Relaunch.md"


def test_milestone_table_ends_at_non_pipe_line() -> None:
    """Test that the sub-scan stops at the first non-pipe line."""
    lines = [
        "| ID | Title | Date |",
        "| M-1 | Alpha | 2025-01-01 |",
        "",
        "| M-2 | Orphan | 2025-02-01 |",
    ]
    milestones = scan_milestones(lines, "p.md")
    assert [m.id for m in milestones] == ["M-1"]
    assert milestones[0].description is None


def test_rollups(table_lines: list[str]) -> None:
    """Test completion ratio and next due date over open tasks."""
    result = scan_document("\n".join(table_lines), "Projects/Relaunch.md")
    project = result.project

    assert project.total_tasks == 4
    assert project.completed_tasks == 1
    assert project.percent_complete == 0.25
    # E-2 is due earlier but already done
    assert project.next_due == "2025-08-01"
    assert len(result.milestones) == 1


def test_empty_project_is_complete() -> None:
    """Test that a project without tasks reads as fully complete."""
    project = build_project("Empty.md", [])
    assert project.percent_complete == 1.0
    assert project.next_due is None
    assert project.title == "Empty"


def test_rollup_uses_configured_due_property() -> None:
    """Test next due with a custom due key."""
    content = "- [ ] E-1 A\n  deadline:: 2025-05-01\n- [ ] E-2 B\n  deadline:: 2025-04-01"
    project = scan_document(content, "p.md", due_property="Deadline").project
    assert project.next_due == "2025-04-01"
