"""PostkitConfig: project-local config for the blog workspace.

Default layout (all relative to the workspace root):

    postkit.toml          # project config (git-tracked, optional)
    docs/
        contents/         # articles
            <slug>.md
            img/
                <slug>/
                    img1.png
        tags/             # one stub per tag
            <tag>.md
    .git/
        COMMIT_EDITMSG    # scratch commit message

postkit.toml example:

    [site]
    content_dir = "docs/contents"
    tags_dir = "docs/tags"

    [article]
    author = "Jane Doe"
    placeholder = "Write the article body here."

    [images]
    extensions = ["png", "jpg", "jpeg", "gif", "svg"]

    [editor]
    command = "code"      # empty = $EDITOR, blocking

    [commit]
    save_timeout = 0      # seconds to wait for the message save, 0 = forever
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_CONFIG_FILENAME = "postkit.toml"
_DEFAULT_CONTENT_DIR = "docs/contents"
_DEFAULT_TAGS_DIR = "docs/tags"
_DEFAULT_PLACEHOLDER = "Write the article body here."
_DEFAULT_EXTENSIONS = ["png", "jpg", "jpeg", "gif", "svg"]


@dataclass
class ArticleConfig:
    author: str = ""
    placeholder: str = _DEFAULT_PLACEHOLDER


@dataclass
class ImagesConfig:
    extensions: list[str] = field(default_factory=lambda: list(_DEFAULT_EXTENSIONS))


@dataclass
class EditorConfig:
    command: str = ""   # launched without blocking; empty = click.edit ($EDITOR)


@dataclass
class CommitConfig:
    save_timeout: float = 0.0   # 0 = wait for the save forever


@dataclass
class PostkitConfig:
    """Resolved configuration for a blog workspace."""

    root: Path                      # workspace root (postkit.toml or .git lives here)
    content_dir: Path = field(default_factory=Path)
    tags_dir: Path = field(default_factory=Path)
    article: ArticleConfig = field(default_factory=ArticleConfig)
    images: ImagesConfig = field(default_factory=ImagesConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)
    commit: CommitConfig = field(default_factory=CommitConfig)

    @property
    def content_rel(self) -> str:
        """Content dir relative to root, POSIX form."""
        try:
            return self.content_dir.relative_to(self.root).as_posix()
        except ValueError:
            return self.content_dir.as_posix()

    def image_dir(self, slug: str) -> Path:
        return self.content_dir / "img" / slug


def load_config(root: Path | str | None = None) -> PostkitConfig:
    """Load postkit.toml from root (or search upward from cwd if root is None)."""
    root_path = Path(root).resolve() if root else _find_root(Path.cwd())
    config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("rb") as f:
            raw = tomllib.load(f)

    site_section = raw.get("site", {})
    art_section = raw.get("article", {})
    img_section = raw.get("images", {})
    ed_section = raw.get("editor", {})
    com_section = raw.get("commit", {})

    extensions = img_section.get("extensions", list(_DEFAULT_EXTENSIONS))

    return PostkitConfig(
        root=root_path,
        content_dir=root_path / site_section.get("content_dir", _DEFAULT_CONTENT_DIR),
        tags_dir=root_path / site_section.get("tags_dir", _DEFAULT_TAGS_DIR),
        article=ArticleConfig(
            author=str(art_section.get("author", "")),
            placeholder=str(art_section.get("placeholder", _DEFAULT_PLACEHOLDER)),
        ),
        images=ImagesConfig(
            extensions=[str(e).lower().lstrip(".") for e in extensions],
        ),
        editor=EditorConfig(
            command=str(ed_section.get("command", "")),
        ),
        commit=CommitConfig(
            save_timeout=float(com_section.get("save_timeout", 0.0)),
        ),
    )


def _find_root(start: Path) -> Path:
    """Walk upward from start looking for postkit.toml, then .git."""
    start = start.resolve()
    for marker in (_CONFIG_FILENAME, ".git"):
        for directory in (start, *start.parents):
            if (directory / marker).exists():
                return directory
    return start


def init_config(root: Path, author: str | None = None) -> Path:
    """Write a default postkit.toml at root. Raises if already exists."""
    config_path = root / _CONFIG_FILENAME
    if config_path.exists():
        msg = f"postkit.toml already exists at {config_path}"
        raise FileExistsError(msg)

    content = f"""\
[site]
# content_dir = "{_DEFAULT_CONTENT_DIR}"   # default
# tags_dir = "{_DEFAULT_TAGS_DIR}"           # default

[article]
author = "{author or ''}"
# placeholder = "{_DEFAULT_PLACEHOLDER}"

# [images]
# extensions = ["png", "jpg", "jpeg", "gif", "svg"]

# [editor]
# command = "code"    # launched without blocking; empty = $EDITOR

# [commit]
# save_timeout = 0    # seconds to wait for the commit message save (0 = forever)
"""
    config_path.write_text(content, encoding="utf-8")
    return config_path
