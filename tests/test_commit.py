from __future__ import annotations

import pytest

from postkit import commit as commit_mod
from postkit.commit import (
    MESSAGE_TEMPLATE,
    commit_with_stamp,
    compose_message,
    find_candidates,
    prepare_message_file,
    stamp_articles,
)
from postkit.config import load_config
from postkit.errors import PostkitError
from tests.conftest import git, write_article

TODAY = "2024-05-06"


@pytest.fixture
def staged(git_repo):
    """Three staged articles: one stale, one already current, one without front-matter."""
    stale = write_article(git_repo, "stale.md", "---\ntitle: Stale\ndate: 2020-01-01\n---\nbody\n---\nrule\n")
    current = write_article(
        git_repo, "current.md", f"---\ntitle: Current\ndate: 2020-01-01\nlastmod: {TODAY}\n---\nbody\n"
    )
    plain = write_article(git_repo, "plain.md", "# no front matter\n")
    write_article(git_repo, "notes.txt", "---\ntitle: x\n---\n")
    git(git_repo.root, "add", "docs")
    return {"stale": stale, "current": current, "plain": plain}


def test_compose_message():
    raw = "# comment\n\n  Fix typo  \n#another\nsecond line\n\n"
    assert compose_message(raw) == "Fix typo  \nsecond line"
    assert compose_message(MESSAGE_TEMPLATE) == ""


def test_prepare_message_file(git_repo):
    path = prepare_message_file(git_repo)
    assert path.resolve() == (git_repo.root / ".git" / "COMMIT_EDITMSG").resolve()
    assert path.read_text(encoding="utf-8") == MESSAGE_TEMPLATE
    assert prepare_message_file(git_repo, "hello").read_text(encoding="utf-8") == "hello\n"


def test_find_candidates(staged, git_repo):
    names = sorted(p.name for p in find_candidates(git_repo))
    assert names == ["current.md", "plain.md", "stale.md"]


def test_find_candidates_skips_deleted_files(staged, git_repo):
    staged["stale"].unlink()
    names = sorted(p.name for p in find_candidates(git_repo))
    assert "stale.md" not in names


def test_stamp_articles(staged, git_repo):
    before_current = staged["current"].read_bytes()
    before_plain = staged["plain"].read_bytes()

    updated = stamp_articles(git_repo, today=TODAY)

    assert updated == ["docs/contents/stale.md"]
    assert staged["stale"].read_text(encoding="utf-8") == (
        f"---\ntitle: Stale\ndate: 2020-01-01\nlastmod: {TODAY}\n---\nbody\n---\nrule\n"
    )
    assert staged["current"].read_bytes() == before_current
    assert staged["plain"].read_bytes() == before_plain


def test_stamp_articles_is_idempotent(staged, git_repo):
    assert stamp_articles(git_repo, today=TODAY) == ["docs/contents/stale.md"]
    snapshot = staged["stale"].read_bytes()
    assert stamp_articles(git_repo, today=TODAY) == []
    assert staged["stale"].read_bytes() == snapshot


def test_stamp_articles_dry_run(staged, git_repo):
    snapshot = staged["stale"].read_bytes()
    assert stamp_articles(git_repo, today=TODAY, dry_run=True) == ["docs/contents/stale.md"]
    assert staged["stale"].read_bytes() == snapshot


def test_missing_content_dir(tmp_path):
    with pytest.raises(PostkitError) as excinfo:
        stamp_articles(load_config(tmp_path))
    assert excinfo.value.kind == "environment"


def test_commit_with_message(staged, git_repo):
    outcome = commit_with_stamp(git_repo, message="Update stale post", today=TODAY)

    assert outcome.committed
    assert outcome.updated == ["docs/contents/stale.md"]
    assert git(git_repo.root, "log", "-1", "--format=%B").strip() == "Update stale post"
    committed = git(git_repo.root, "show", "--name-only", "--format=", "HEAD").split()
    assert committed == ["docs/contents/stale.md"]


def test_commit_with_editor_callback(staged, git_repo):
    seen = []

    def edit(path):
        seen.append(path)
        assert path.read_text(encoding="utf-8") == MESSAGE_TEMPLATE
        path.write_text(MESSAGE_TEMPLATE + "\nRefresh lastmod\n\n# trailing comment\n", encoding="utf-8")

    outcome = commit_with_stamp(git_repo, edit_message=edit, today=TODAY)

    assert [p.resolve() for p in seen] == [(git_repo.root / ".git" / "COMMIT_EDITMSG").resolve()]
    assert outcome.message == "Refresh lastmod"
    assert git(git_repo.root, "log", "-1", "--format=%B").strip() == "Refresh lastmod"


def test_empty_message_never_runs_git(staged, git_repo, monkeypatch):
    def boom(*args, **kwargs):
        raise AssertionError("git commit must not run")

    monkeypatch.setattr(commit_mod.git, "commit", boom)

    with pytest.raises(PostkitError, match="empty"):
        commit_with_stamp(git_repo, edit_message=lambda path: None, today=TODAY)


def test_nothing_to_update_skips_editor(git_repo):
    write_article(git_repo, "current.md", f"---\ndate: 2020-01-01\nlastmod: {TODAY}\n---\n")
    git(git_repo.root, "add", "docs")

    def edit(path):
        raise AssertionError("editor must not open")

    outcome = commit_with_stamp(git_repo, edit_message=edit, today=TODAY)
    assert outcome.updated == []
    assert not outcome.committed


def test_commit_failure_is_reported(staged, git_repo, monkeypatch):
    monkeypatch.setattr(
        commit_mod.git, "commit", lambda root, files, path: commit_mod.git.CommitResult(1, stderr="hook rejected\n")
    )
    with pytest.raises(PostkitError, match="hook rejected") as excinfo:
        commit_with_stamp(git_repo, message="msg", today=TODAY)
    assert excinfo.value.kind == "external"


def test_invalid_utf8_article_is_skipped(staged, git_repo):
    bad = git_repo.content_dir / "bad.md"
    raw = b"---\ntitle: \xff\n---\n"
    bad.write_bytes(raw)
    git(git_repo.root, "add", "docs")

    assert stamp_articles(git_repo, today=TODAY) == ["docs/contents/stale.md"]
    assert bad.read_bytes() == raw


def test_workspace_in_repo_subdirectory(git_repo):
    site = git_repo.root / "site"
    (site / "docs" / "contents").mkdir(parents=True)
    (site / "postkit.toml").write_text("")
    (site / "docs" / "contents" / "post.md").write_text("---\ntitle: Nested\n---\nbody\n", encoding="utf-8")
    git(git_repo.root, "add", "site")
    cfg = load_config(site)

    assert prepare_message_file(cfg).resolve() == (git_repo.root / ".git" / "COMMIT_EDITMSG").resolve()

    outcome = commit_with_stamp(cfg, message="Add nested post", today=TODAY)

    assert outcome.updated == ["docs/contents/post.md"]
    assert outcome.committed
    committed = git(git_repo.root, "show", "--name-only", "--format=", "HEAD").split()
    assert committed == ["site/docs/contents/post.md"]
    assert f"lastmod: {TODAY}" in (site / "docs" / "contents" / "post.md").read_text(encoding="utf-8")
