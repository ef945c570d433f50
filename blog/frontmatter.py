from __future__ import annotations

import re
from pathlib import Path

import yaml

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---[ \t]*(?:\n|$)", re.DOTALL)


class FrontMatterError(ValueError):
    """Raised when a front matter block is not a YAML mapping."""


def parse_frontmatter_block(raw: str, origin: Path | None = None) -> dict:
    where = f"{origin}: " if origin else ""
    try:
        fm = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"{where}invalid front matter: {exc}") from exc
    if fm is None:
        return {}
    if not isinstance(fm, dict):
        raise FrontMatterError(f"{where}front matter must be a mapping")
    return fm


def split_frontmatter(content: str, origin: Path | None = None) -> tuple[dict, str]:
    content = content.lstrip("\ufeff")
    match = FRONTMATTER_RE.match(content)
    if not match:
        return {}, content
    fm = parse_frontmatter_block(match.group(1), origin)
    body = content[match.end() :].lstrip("\n")
    return fm, body


def read_file_with_metadata(path: Path) -> tuple[dict, str]:
    """Read a markdown file and split its front matter from the body."""
    return split_frontmatter(path.read_text(encoding="utf-8"), origin=path)
