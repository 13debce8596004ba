"""Inline `key:: value` and emoji date extraction."""

import re

from vault_projects.obsidian.lines import normalize

# Value stops at a pipe or the next key, so `due:: 2025-07-31 | ...` yields 2025-07-31
INLINE_PROP_RE = re.compile(
    r"([A-Za-z0-9_-]+)::[ \t]*([^|\n]*?)[ \t]*"
    r"(?=[ \t]+[A-Za-z0-9_-]+::|[ \t]+\^[A-Za-z0-9_-]+[ \t]*$|\||$)",
    re.MULTILINE,
)

# Tasks-plugin emoji dates, tolerating variation selectors, NBSPs, tabs and newlines
EMOJI_DATE_RE = re.compile(
    r"([\U0001F51C\u23F3\U0001F4C5\u2705\U0001F6EB])\uFE0F?"
    r"[\u00A0 \t\r\n]*([0-9]{4}-[0-9]{2}-[0-9]{2})"
)

EMOJI_FIELDS = {
    "🔜": "start",
    "⏳": "start",  # scheduled
    "🛫": "start",
    "📅": "due",
    "✅": "done",
}


def parse_inline_properties(text: str) -> dict[str, str]:
    """Collect every `key:: value` token; later keys overwrite earlier ones."""
    props: dict[str, str] = {}
    for match in INLINE_PROP_RE.finditer(normalize(text)):
        value = match.group(2).strip()
        props[match.group(1).lower()] = value
    return props


def parse_emoji_dates(block: str) -> dict[str, str]:
    """Map emoji date tokens in a (multi-line) block to start/due/done."""
    props: dict[str, str] = {}
    for icon, value in EMOJI_DATE_RE.findall(block):
        props[EMOJI_FIELDS[icon]] = value
    return props


def parse_annotations(row: str, block: str | None = None) -> dict[str, str]:
    """Merge inline properties from the row with emoji dates from the block.

    Emoji dates win over `start::`/`due::` annotations.
    """
    props = parse_inline_properties(row)
    props.update(parse_emoji_dates(block if block is not None else row))
    return props
