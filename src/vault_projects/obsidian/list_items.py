"""Markdown list-item extraction.

Produces the same shape of data Obsidian's metadata cache exposes for
list items: where each item starts and ends, its block anchor, and its
task marker. Pipe-table rows are never list items here; the scanner's
fallback walk picks those up.
"""

import re
from dataclasses import dataclass

from vault_projects.obsidian.frontmatter import frontmatter_end
from vault_projects.obsidian.lines import normalize

BULLET_RE = re.compile(r"^(?P<indent>\s*)(?:[-*+]|\d+[.)])\s+(?P<body>.*)$")
TASK_MARKER_RE = re.compile(r"^\[(?P<marker>.)\]")
BLOCK_ID_RE = re.compile(r"\s\^(?P<id>[A-Za-z0-9_-]+)\s*$")
FENCE_RE = re.compile(r"^\s*(```|~~~)")


@dataclass
class ListItem:
    """One list item, possibly spanning continuation lines."""

    start_line: int
    end_line: int  # Inclusive
    block_id: str | None = None
    task_marker: str | None = None  # Character inside [ ], None for plain bullets

    @property
    def is_task(self) -> bool:
        """Whether the item carries a checkbox."""
        return self.task_marker is not None

    @property
    def checked(self) -> bool:
        """Host-level checked flag, set only by the x marker."""
        return self.task_marker in ("x", "X")


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def extract_list_items(lines: list[str]) -> list[ListItem]:
    """Walk a note and return its list items in document order."""
    items: list[ListItem] = []
    current: ListItem | None = None
    current_indent = 0
    in_fence = False
    body_start = frontmatter_end(lines)

    for idx, raw in enumerate(lines):
        if idx < body_start:
            continue
        line = normalize(raw)

        if FENCE_RE.match(line):
            in_fence = not in_fence
            current = None
            continue
        if in_fence:
            continue

        if line.lstrip().startswith("|"):
            current = None
            continue

        match = BULLET_RE.match(line)
        if match:
            body = match.group("body")
            marker = TASK_MARKER_RE.match(body)
            block = BLOCK_ID_RE.search(line)
            current = ListItem(
                start_line=idx,
                end_line=idx,
                block_id=block.group("id") if block else None,
                task_marker=marker.group("marker") if marker else None,
            )
            current_indent = len(match.group("indent"))
            items.append(current)
            continue

        # Indented, non-bullet lines continue the open item
        if current is not None and line.strip() and _indent_width(line) > current_indent:
            current.end_line = idx
            continue

        current = None

    return items
