"""Image insertion: copy into img/<slug>/ under a free imgN name, reference it."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from postkit.errors import ENVIRONMENT, VALIDATION, PostkitError

if TYPE_CHECKING:
    from postkit.config import PostkitConfig

logger = logging.getLogger("postkit.images")


@dataclass
class InsertedImage:
    index: int
    name: str          # img<N><ext>
    path: Path         # where the copy landed
    markdown: str      # ![img<N>](./img/<slug>/<name>)


def next_image_name(image_dir: Path, ext: str) -> tuple[int, str]:
    """Smallest N >= 1 such that img<N><ext> doesn't exist in image_dir."""
    index = 1
    while (image_dir / f"img{index}{ext}").exists():
        index += 1
    return index, f"img{index}{ext}"


def image_markdown(index: int, slug: str, name: str) -> str:
    return f"![img{index}](./img/{slug}/{name})"


def insert_at_caret(text: str, snippet: str, line: int | None = None, column: int | None = None) -> str:
    """Insert snippet at a 1-based (line, column) caret; end of text when line is None.

    A missing column means the end of that line.
    """
    if line is None:
        return text + snippet

    rows = text.splitlines(keepends=True)
    if line < 1 or line > len(rows) + 1:
        msg = f"Line {line} is outside the document (1-{len(rows) + 1})."
        raise PostkitError(msg, VALIDATION)
    if line == len(rows) + 1 and rows and not rows[-1].endswith(("\n", "\r")):
        # the line after an unterminated last line has to be started first
        text += "\n"
        rows[-1] += "\n"

    start = sum(len(r) for r in rows[: line - 1])
    row = rows[line - 1].rstrip("\r\n") if line <= len(rows) else ""
    col = len(row) + 1 if column is None else column
    if col < 1 or col > len(row) + 1:
        msg = f"Column {col} is outside line {line} (1-{len(row) + 1})."
        raise PostkitError(msg, VALIDATION)

    offset = start + col - 1
    return text[:offset] + snippet + text[offset:]


def _check_source(cfg: PostkitConfig, source: str | Path | None) -> Path:
    if not source:
        raise PostkitError("No image selected.", VALIDATION)
    src = Path(source)
    ext = src.suffix.lower().lstrip(".")
    if ext not in cfg.images.extensions:
        allowed = ", ".join(cfg.images.extensions)
        msg = f"Not an image file: {src.name} (allowed: {allowed})"
        raise PostkitError(msg, VALIDATION)
    if not src.is_file():
        raise PostkitError(f"Image not found: {src}", VALIDATION)
    return src


def require_article(article: str | Path | None) -> Path:
    if not article:
        raise PostkitError("No article is open.", ENVIRONMENT)
    article_path = Path(article)
    if not article_path.is_file():
        raise PostkitError(f"Article not found: {article_path}", ENVIRONMENT)
    return article_path


def copy_image(cfg: PostkitConfig, article: str | Path | None, source: str | Path | None) -> InsertedImage:
    """Copy source into the article's image dir and build its Markdown reference."""
    article_path = require_article(article)
    slug = article_path.stem
    image_dir = cfg.image_dir(slug)
    image_dir.mkdir(parents=True, exist_ok=True)

    src = _check_source(cfg, source)
    index, name = next_image_name(image_dir, src.suffix)
    target = image_dir / name
    shutil.copyfile(src, target)
    logger.info("image copied: %s -> %s", src, target)

    return InsertedImage(index=index, name=name, path=target, markdown=image_markdown(index, slug, name))


def insert_image(
    cfg: PostkitConfig,
    article: str | Path | None,
    source: str | Path | None,
    line: int | None = None,
    column: int | None = None,
) -> InsertedImage:
    """Copy the image and insert its reference into the article at the caret."""
    article_path = require_article(article)
    text = article_path.read_text(encoding="utf-8")
    # Reject a bad caret before copying anything.
    insert_at_caret(text, "", line, column)

    image = copy_image(cfg, article_path, source)
    article_path.write_text(insert_at_caret(text, image.markdown, line, column), encoding="utf-8")
    return image
