"""Article scaffolding: front-matter template plus one stub per tag."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from postkit.errors import VALIDATION, PostkitError
from postkit.frontmatter import render_article, render_tag_index, today_iso

if TYPE_CHECKING:
    from pathlib import Path

    from postkit.config import PostkitConfig

logger = logging.getLogger("postkit.articles")

_FILENAME_RE = re.compile(r"[a-zA-Z0-9_-]+", re.ASCII)


@dataclass
class NewArticle:
    title: str
    path: Path
    tag_paths: list[Path] = field(default_factory=list)


def require(value: str | None, label: str) -> str:
    if not value:
        raise PostkitError(f"{label} is required; aborting.", VALIDATION)
    return value


def validate_filename(filename: str | None) -> str:
    if not filename or not _FILENAME_RE.fullmatch(filename):
        msg = "Invalid file name: use only letters, digits, hyphens and underscores."
        raise PostkitError(msg, VALIDATION)
    return filename


def parse_tags(tag_input: str | None) -> list[str]:
    """Split space-separated tags. Empty or blank input means no tags."""
    if not tag_input:
        return []
    return tag_input.split()


def create_article(
    cfg: PostkitConfig,
    title: str | None,
    author: str | None,
    filename: str | None,
    tag_input: str | None = None,
    today: str | None = None,
) -> NewArticle:
    """Write <content_dir>/<filename>.md and <tags_dir>/<tag>.md for each tag.

    All input is validated before anything touches the disk. Tag stubs are
    overwritten unconditionally.
    """
    title = require(title, "Title")
    author = require(author, "Author")
    validate_filename(filename)
    tags = parse_tags(tag_input)
    today = today or today_iso()

    content_path = cfg.content_dir / f"{filename}.md"
    content_path.parent.mkdir(parents=True, exist_ok=True)
    content_path.write_text(
        render_article(title, author, today, tags, cfg.article.placeholder),
        encoding="utf-8",
    )
    logger.info("article written: %s", content_path)

    article = NewArticle(title=title, path=content_path)
    cfg.tags_dir.mkdir(parents=True, exist_ok=True)
    for tag in tags:
        tag_path = cfg.tags_dir / f"{tag}.md"
        tag_path.write_text(render_tag_index(tag), encoding="utf-8")
        article.tag_paths.append(tag_path)
        logger.debug("tag stub written: %s", tag_path)

    return article
