"""
Frontmatter parser for template pages.

A page may start with a YAML block delimited by '---' lines. Its keys become
page-level arguments (visible to the page body and its layout); the reserved
key 'layout' selects an alternative layout or disables it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import TemplateSyntaxError

_yaml = YAML(typ="safe")

# Pattern for YAML frontmatter: starts with ---, ends with ---
_FRONTMATTER_PATTERN = re.compile(
    r'^---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|$)',
    re.DOTALL
)

LAYOUT_KEY = "layout"

# Sentinel for "layout: false" / "layout: none"
NO_LAYOUT = ""


@dataclass
class PageFrontmatter:
    """
    Parsed frontmatter of a page.

    Contains page arguments; not rendered in the final output.
    """
    args: Dict[str, Any] = field(default_factory=dict)
    layout: Optional[str] = None      # None: default lookup, NO_LAYOUT: disabled
    line_count: int = 0               # Number of lines consumed by the block
    length: int = 0                   # Number of characters consumed by the block

    @classmethod
    def from_dict(cls, data: Dict[str, Any], *, line_count: int = 0, length: int = 0) -> PageFrontmatter:
        """Create from parsed YAML dictionary."""
        args = dict(data)
        layout = args.pop(LAYOUT_KEY, None)
        if layout is False or (isinstance(layout, str) and layout.strip().lower() == "none"):
            layout = NO_LAYOUT
        elif layout is not None:
            layout = str(layout).strip()
        return cls(args=args, layout=layout, line_count=line_count, length=length)

    def is_empty(self) -> bool:
        """Check if frontmatter has no meaningful content."""
        return not self.args and self.layout is None


def parse_frontmatter(text: str, page: Optional[str] = None) -> tuple[Optional[PageFrontmatter], str]:
    """
    Parse YAML frontmatter from page text.

    Args:
        text: Full text of the page
        page: Page id for error reporting

    Returns:
        Tuple of (frontmatter, remaining_text):
        - frontmatter: Parsed PageFrontmatter or None if no frontmatter
        - remaining_text: Text with frontmatter removed

    Raises:
        TemplateSyntaxError: If the block is present but is not a YAML mapping

    Examples:
        >>> fm, text = parse_frontmatter("---\\ntitle: Home\\n---\\n<h1>{{ title }}</h1>")
        >>> fm.args
        {'title': 'Home'}
        >>> text
        '<h1>{{ title }}</h1>'
    """
    if not text.startswith('---'):
        return None, text

    match = _FRONTMATTER_PATTERN.match(text)
    if not match:
        # Starts with --- but no closing ---, treat as no frontmatter
        return None, text

    yaml_content = match.group(1) or ""
    consumed = match.group(0)
    remaining_text = text[match.end():]
    line_count = consumed.count("\n")

    try:
        data = _yaml.load(yaml_content)
    except YAMLError as e:
        raise TemplateSyntaxError(
            f"Invalid frontmatter: {e}", line=1, column=1, position=0, page=page
        ) from e

    if data is None:
        # Empty frontmatter
        return PageFrontmatter(line_count=line_count, length=match.end()), remaining_text
    if not isinstance(data, dict):
        raise TemplateSyntaxError(
            "Frontmatter must be a mapping", line=1, column=1, position=0, page=page
        )

    frontmatter = PageFrontmatter.from_dict(data, line_count=line_count, length=match.end())
    return frontmatter, remaining_text


__all__ = [
    "PageFrontmatter",
    "parse_frontmatter",
    "LAYOUT_KEY",
    "NO_LAYOUT",
]
