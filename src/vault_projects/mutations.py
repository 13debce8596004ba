"""Line-level rewrites for task updates.

The index never patches itself: callers rewrite the note text with
``rewrite_task_lines`` and then run a full reindex.
"""

import re
from typing import Any

from vault_projects.models import Task
from vault_projects.obsidian.lines import is_pipe_row, is_table_task, normalize

CHECKED_KEY = "checked"
TEXT_KEY = "text"

GLYPH_RE = re.compile(r"([-*+]\s*\[)[ xX/\-](\])")
TABLE_TEXT_RE = re.compile(r"^(\s*\|.*?[-*+]\s*\[[ xX/\-]\])([^|]*)(\|.*)?$")
LIST_TEXT_RE = re.compile(r"^(\s*[-*+]\s*\[[ xX/\-]\])(.*?)(\s\^[A-Za-z0-9_-]+\s*)?$")
LEADING_ID_RE = re.compile(r"^\s*((?:[Ss][Bb]|[Ss]|[Ee])-\d+)\b")
BULLET_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s")

EMOJI_FOR_KEY = {
    "start": "[\U0001F51C⏳\U0001F6EB]",
    "due": "\U0001F4C5",
    "done": "✅",
}


def _property_re(key: str) -> re.Pattern[str]:
    """Match `key:: value` with the same value grammar the parser uses."""
    return re.compile(
        rf"(?<![A-Za-z0-9_-]){re.escape(key)}::[ \t]*[^|\n]*?"
        r"(?=[ \t]+[A-Za-z0-9_-]+::|[ \t]+\^[A-Za-z0-9_-]+[ \t]*$|[ \t]*\||[ \t]*$)",
        re.IGNORECASE,
    )


def _emoji_re(key: str) -> re.Pattern[str] | None:
    glyphs = EMOJI_FOR_KEY.get(key.lower())
    if glyphs is None:
        return None
    return re.compile(rf"({glyphs})\uFE0F?[\u00A0 \t]*[0-9]{{4}}-[0-9]{{2}}-[0-9]{{2}}")


def set_checkbox(line: str, checked: bool) -> str:
    """Swap the first checkbox glyph on a line for x or a space."""
    glyph = "x" if checked else " "
    return GLYPH_RE.sub(lambda m: f"{m.group(1)}{glyph}{m.group(2)}", line, count=1)


def replace_text(line: str, text: str) -> str:
    """Replace a task's text segment, keeping its id token and ^anchor."""
    if is_table_task(line):
        match = TABLE_TEXT_RE.match(line)
        if not match:
            return line
        head, segment, tail = match.group(1), match.group(2), match.group(3) or ""
        return f"{head} {_keep_id(segment, text)} {tail}".rstrip()

    match = LIST_TEXT_RE.match(line)
    if not match:
        return line
    head, segment, anchor = match.group(1), match.group(2), match.group(3) or ""
    return f"{head} {_keep_id(segment, text)}{anchor.rstrip()}"


def _keep_id(segment: str, text: str) -> str:
    """Prefix the new text with the segment's leading E-/S-/SB- id if it lacks one."""
    text = text.strip()
    leading = LEADING_ID_RE.match(segment)
    if leading and not LEADING_ID_RE.match(text):
        return f"{leading.group(1)} {text}"
    return text


def continuation_end(lines: list[str], start: int) -> int:
    """Last line index of the list-item block opened at ``start``."""
    base = len(lines[start]) - len(lines[start].lstrip(" \t"))
    end = start
    for idx in range(start + 1, len(lines)):
        line = normalize(lines[idx])
        indent = len(line) - len(line.lstrip(" \t"))
        if not line.strip() or indent <= base or BULLET_RE.match(line) or is_pipe_row(line):
            break
        end = idx
    return end


def set_property(lines: list[str], task: Task, key: str, value: str) -> None:
    """Write one `key:: value` for a task, in place.

    An existing occurrence in the task's block is replaced (emoji dates
    too, since they win over annotations on parse). Otherwise the pair is
    appended to the attribute line following the primary line, or, for
    table rows, to the row itself.
    """
    table_row = is_table_task(lines[task.line])
    block_end = task.line if table_row else continuation_end(lines, task.line)
    pattern = _property_re(key)
    emoji = _emoji_re(key)
    replaced = False

    for idx in range(task.line, block_end + 1):
        line = lines[idx]
        if pattern.search(line):
            line = pattern.sub(lambda _: f"{key}:: {value}", line, count=1)
            replaced = True
        if emoji is not None and emoji.search(line):
            line = emoji.sub(lambda m: f"{m.group(1)} {value}", line)
            replaced = True
        lines[idx] = line

    if replaced:
        return

    if table_row:
        lines[task.line] = _append_to_table_cell(lines[task.line], f"{key}:: {value}")
    elif block_end > task.line:
        lines[task.line + 1] = f"{lines[task.line + 1].rstrip()}  {key}:: {value}"
    else:
        indent = lines[task.line][: len(lines[task.line]) - len(lines[task.line].lstrip(" \t"))]
        lines.insert(task.line + 1, f"{indent}  {key}:: {value}")


def _append_to_table_cell(row: str, token: str) -> str:
    """Append an annotation at the end of the checkbox cell."""
    match = TABLE_TEXT_RE.match(row)
    if not match:
        return f"{row.rstrip()} {token}"
    head, segment, tail = match.group(1), match.group(2), match.group(3) or ""
    return f"{head}{segment.rstrip()} {token} {tail}".rstrip()


def rewrite_task_lines(lines: list[str], task: Task, changes: dict[str, Any]) -> list[str]:
    """Apply field changes for one task to a copy of the note's lines.

    Args:
        lines: Current note lines
        task: Task as indexed from those lines
        changes: ``checked`` (bool), ``text`` (str), or property key -> value

    Returns:
        New list of lines; ``lines`` is left untouched
    """
    lines = list(lines)
    if task.line >= len(lines):
        raise ValueError(f"Task {task.id} points past the end of {task.document_path}")

    line = lines[task.line]
    checked = changes.get(CHECKED_KEY)
    if isinstance(checked, bool):
        line = set_checkbox(line, checked)
    text = changes.get(TEXT_KEY)
    if text is not None:
        line = replace_text(line, str(text))
    lines[task.line] = line

    for key, value in changes.items():
        if key in (CHECKED_KEY, TEXT_KEY) or value is None:
            continue
        set_property(lines, task, key.lower(), str(value))

    return lines
