"""Build Task records from list items and table rows."""

import logging
import re

from vault_projects.models import Task, TaskKind, TaskStatus
from vault_projects.obsidian.annotations import (
    INLINE_PROP_RE,
    parse_emoji_dates,
    parse_inline_properties,
)
from vault_projects.obsidian.lines import (
    CHECKBOX_RE,
    DONE_RE,
    IN_PROGRESS_RE,
    ON_HOLD_RE,
    is_table_task,
    normalize,
)
from vault_projects.obsidian.list_items import ListItem
from vault_projects.obsidian.table import infer_row_properties

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "(no text)"

CARET_ID_RE = re.compile(r"\^([A-Za-z0-9_-]+)\s*$")
BLOCK_ANCHOR_RE = re.compile(r"\s\^[A-Za-z0-9_-]+[ \t]*$", re.MULTILINE)
ID_CELL_RE = re.compile(r"^\s*\|\s*([A-Za-z0-9_-]+)\s*\|")
# `- [ ] E-1 Build API` carries its id as the first word
LEADING_ID_RE = re.compile(r"^(?:[Ss][Bb]|[Ss]|[Ee])-\d+\b")
# Everything up to and including the checkbox inside a table row
TABLE_CHECKBOX_RE = re.compile(r"^\s*\|.*?-\s*\[[\sxX/\-]\]\s*")
DEPENDENCY_SPLIT_RE = re.compile(r"[,\s]+")
DEPENDENCY_ANCHOR_RE = re.compile(r"^((?:ff|fs|sf|ss):)?\^", re.IGNORECASE)


def derive_status(line: str) -> TaskStatus:
    """Map the checkbox glyph on a task's first line to a status."""
    line = normalize(line)
    if DONE_RE.search(line):
        return TaskStatus.DONE
    if IN_PROGRESS_RE.search(line):
        return TaskStatus.IN_PROGRESS
    if ON_HOLD_RE.search(line):
        return TaskStatus.ON_HOLD
    return TaskStatus.NOT_STARTED


def is_done_glyph(line: str) -> bool:
    """Only [x] and [X] count as checked."""
    return bool(DONE_RE.search(normalize(line)))


def parse_depends(value: str | None) -> list[str]:
    """Split a `depends::` value into lowercased ids, keeping any FS/SS/FF/SF prefix."""
    if not value:
        return []
    depends = []
    for token in DEPENDENCY_SPLIT_RE.split(value):
        token = DEPENDENCY_ANCHOR_RE.sub(lambda m: m.group(1) or "", token.strip()).lower()
        if token:
            depends.append(token)
    return depends


def strip_block_text(block: str) -> str:
    """Display text for a checklist block: no pipe, checkbox or annotations."""
    text = re.sub(r"^\s*\|?\s*", "", block)
    text = CHECKBOX_RE.sub("", text, count=1)
    text = INLINE_PROP_RE.sub("", text)
    text = BLOCK_ANCHOR_RE.sub("", text)
    text = "\n".join(part.rstrip() for part in text.split("\n"))
    return text.strip()


def strip_row_text(row: str) -> str:
    """Display text for a table row: the checkbox cell minus annotations."""
    text = TABLE_CHECKBOX_RE.sub("", normalize(row), count=1)
    text = re.sub(r"\|.*", "", text)
    text = INLINE_PROP_RE.sub("", text)
    return text.strip()


def resolve_id(
    row: str,
    document_path: str,
    line: int,
    block_id: str | None = None,
    text: str = "",
) -> tuple[str, bool]:
    """Pick a task id by precedence.

    Order: host block id, trailing ^anchor on a table row, first table
    cell, leading E-/S-/SB- token of a checklist, synthetic path + line.

    Returns:
        The lowercased id and whether it is synthetic
    """
    row = normalize(row)
    table_row = is_table_task(row)
    if block_id:
        return block_id.lower(), False
    if table_row:
        caret = CARET_ID_RE.search(row)
        if caret:
            return caret.group(1).lower(), False
        cell = ID_CELL_RE.match(row)
        if cell:
            return cell.group(1).lower(), False
        return f"{document_path}-row-{line}".lower(), True
    leading = LEADING_ID_RE.match(text)
    if leading:
        return leading.group(0).lower(), False
    return f"{document_path}-{line}".lower(), True


def merge_table_properties(props: dict[str, str], row: str) -> None:
    """Fold positional table facts into annotation-derived properties.

    Parent refs and priority come from the table; an explicit
    `description::` annotation beats the inferred description.
    """
    inferred = infer_row_properties(row)
    if "description" in props:
        inferred.pop("description", None)
    props.update(inferred)


def _build(
    document_path: str,
    line: int,
    row: str,
    block: str,
    block_id: str | None = None,
    host_checked: bool = False,
) -> Task:
    row = normalize(row)
    table_row = is_table_task(row)

    props = parse_inline_properties(block)
    if table_row:
        merge_table_properties(props, row)
    props.update(parse_emoji_dates(block))

    text = strip_row_text(row) if table_row else strip_block_text(block)
    task_id, synthetic = resolve_id(row, document_path, line, block_id=block_id, text=text)

    return Task(
        id=task_id,
        document_path=document_path,
        line=line,
        text=text or PLACEHOLDER_TEXT,
        properties=props,
        checked=host_checked or is_done_glyph(row),
        status=derive_status(row),
        depends=parse_depends(props.get("depends")),
        kind=TaskKind.UNKNOWN if synthetic else TaskKind.from_id(task_id),
    )


def assemble_list_item(lines: list[str], item: ListItem, document_path: str) -> Task | None:
    """Build the task for a host-supplied list item.

    Returns None when the item is neither a checkbox item nor a table task row.
    """
    row = lines[item.start_line] if item.start_line < len(lines) else ""
    if not item.is_task and not is_table_task(row):
        logger.debug(f"[Assembler] Skipping non-task list item at line {item.start_line}")
        return None

    end = max(item.start_line, item.end_line)
    block = normalize("\n".join(lines[item.start_line : end + 1]))
    block = re.sub(r"\s+\n", "\n", block)
    return _build(
        document_path,
        item.start_line,
        row,
        block,
        block_id=item.block_id,
        host_checked=item.checked,
    )


def assemble_table_row(lines: list[str], line: int, document_path: str) -> Task | None:
    """Build the task for a raw pipe row found by the line walk."""
    row = lines[line]
    if not is_table_task(row):
        return None
    return _build(document_path, line, row, normalize(row))
