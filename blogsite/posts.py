"""Split post files into front matter and rendered body."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from blogsite.markdown import markdown_to_html, split_lines

FRONT_MATTER_DELIMITER = "---"
FRONT_MATTER_KEYS = ("title", "date", "excerpt")
DEFAULT_SLUG = "untitled"


@dataclass
class Post:
    title: str
    slug: str
    date: str
    excerpt: str
    html_content: str

    def summary(self) -> Dict[str, str]:
        """Fields listed on the index page."""
        data = asdict(self)
        del data["html_content"]
        return data


def split_front_matter(raw: str) -> Optional[Tuple[List[str], List[str]]]:
    """Return ``(front_matter_lines, body_lines)`` or None when ``raw`` is not a post.

    Without a closing delimiter everything after the opening one is front matter.
    """
    lines = split_lines(raw)
    if not lines or lines[0] != FRONT_MATTER_DELIMITER:
        return None

    for idx in range(1, len(lines)):
        if lines[idx] == FRONT_MATTER_DELIMITER:
            return lines[1:idx], lines[idx + 1:]
    return lines[1:], []


def _strip_quotes(value: str) -> str:
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def parse_front_matter(lines: List[str]) -> Dict[str, str]:
    metadata = {key: "" for key in FRONT_MATTER_KEYS}
    for line in lines:
        for key in FRONT_MATTER_KEYS:
            prefix = f"{key}: "
            if line.startswith(prefix):
                metadata[key] = _strip_quotes(line[len(prefix):])
                break
    return metadata


def slug_from_path(path: Union[str, Path]) -> str:
    return Path(path).stem or DEFAULT_SLUG


def parse_post(path: Union[str, Path], content: str) -> Optional[Post]:
    parts = split_front_matter(content)
    if parts is None:
        return None
    front_lines, body_lines = parts
    metadata = parse_front_matter(front_lines)
    body = "".join(line + "\n" for line in body_lines)
    return Post(
        title=metadata["title"],
        slug=slug_from_path(path),
        date=metadata["date"],
        excerpt=metadata["excerpt"],
        html_content=markdown_to_html(body),
    )
