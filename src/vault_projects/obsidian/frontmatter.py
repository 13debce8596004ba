"""YAML front matter helpers."""

import logging
import re
from typing import Any

import yaml

logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---", re.DOTALL)


def extract_frontmatter(content: str) -> dict[str, Any]:
    """Extract YAML front matter from markdown content."""
    match = FRONTMATTER_RE.match(content)
    if not match:
        return {}

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        logger.debug(f"[Frontmatter] Ignoring invalid YAML: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def is_flagged(frontmatter: dict[str, Any], flag: str) -> bool:
    """Check whether the front matter sets the given boolean marker.

    Strings such as "false" or "no" count as unset.
    """
    value = frontmatter.get(flag)
    if isinstance(value, str):
        return value.strip().lower() not in ("", "false", "no", "off", "0")
    return bool(value)


def frontmatter_end(lines: list[str]) -> int:
    """Index of the first line after a leading front matter block, 0 if none."""
    if not lines or lines[0].strip() != "---":
        return 0
    for idx in range(1, len(lines)):
        if lines[idx].strip() == "---":
            return idx + 1
    return 0
