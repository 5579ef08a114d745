from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from postkit.config import PostkitConfig, load_config


def git(root: Path, *args: str) -> str:
    result = subprocess.run(["git", *args], cwd=root, capture_output=True, text=True, check=True)
    return result.stdout


@pytest.fixture
def workspace(tmp_path: Path) -> PostkitConfig:
    (tmp_path / "docs" / "contents").mkdir(parents=True)
    return load_config(tmp_path)


@pytest.fixture
def git_repo(workspace: PostkitConfig) -> PostkitConfig:
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    root = workspace.root
    git(root, "init", "-q")
    git(root, "config", "user.email", "author@example.com")
    git(root, "config", "user.name", "Author")
    git(root, "config", "commit.gpgsign", "false")
    (root / "README.md").write_text("blog\n")
    git(root, "add", "README.md")
    git(root, "commit", "-q", "-m", "init")
    return workspace


def write_article(cfg: PostkitConfig, name: str, text: str) -> Path:
    path = cfg.content_dir / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
