"""postkit CLI — blog authoring chores for a static-site workspace.

Commands:
    postkit init               create postkit.toml
    postkit new [TITLE]        scaffold an article (+ tag stubs)
    postkit image ARTICLE IMG  copy an image next to ARTICLE and reference it
    postkit commit             stamp date/lastmod on changed articles and commit
    postkit pending            list articles the next commit would stamp
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

import click

from postkit.articles import create_article, require, validate_filename
from postkit.commit import commit_with_stamp, find_candidates, stamp_article, stamp_articles
from postkit.config import PostkitConfig, init_config, load_config
from postkit.editor import open_and_wait
from postkit.errors import PostkitError
from postkit.frontmatter import today_iso
from postkit.images import copy_image, insert_image, require_article

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg(ctx: click.Context) -> PostkitConfig:
    try:
        return load_config(ctx.obj.get("root"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise click.ClickException(str(exc)) from exc


def _ask(text: str, value: str | None, default: str = "") -> str:
    """Prompt only when the value wasn't passed on the command line."""
    if value is not None:
        return value
    return click.prompt(text, default=default, show_default=bool(default))


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="postkit")
@click.option("--root", type=click.Path(file_okay=False), default=None, help="Workspace root (default: search upward)")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, root: str | None, verbose: bool) -> None:
    """postkit — article, image and commit helpers for a static blog."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["root"] = root


# ---------------------------------------------------------------------------
# postkit init
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--author", default=None, help="Default article author")
@click.option("--dir", "root", default=".", show_default=True, help="Workspace root")
def init(author: str | None, root: str) -> None:
    """Create postkit.toml in the workspace root."""
    root_path = Path(root).resolve()
    try:
        config_path = init_config(root_path, author=author)
        click.echo(f"Created {config_path}")
    except FileExistsError:
        click.echo("postkit.toml already exists — skipping init")

    cfg = load_config(root_path)
    click.echo(f"Content dir : {cfg.content_dir}")
    click.echo(f"Tags dir    : {cfg.tags_dir}")


# ---------------------------------------------------------------------------
# postkit new
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("title", required=False)
@click.option("--author", default=None, help="Article author")
@click.option("--filename", default=None, help="File name without .md (letters, digits, - and _)")
@click.option("--tags", default=None, help='Space-separated tags, e.g. "python blog"')
@click.pass_context
def new(ctx: click.Context, title: str | None, author: str | None, filename: str | None, tags: str | None) -> None:
    """Scaffold a new article with front-matter and tag stubs."""
    cfg = _load_cfg(ctx)
    try:
        title = require(_ask("Article title", title), "Title")
        author = require(_ask("Author", author, default=cfg.article.author), "Author")
        filename = validate_filename(_ask("File name (letters, digits, - and _; .md is added)", filename))
        tags = _ask("Tags (space-separated, may be empty)", tags)
        article = create_article(cfg, title, author, filename, tags)
    except PostkitError as exc:
        raise click.ClickException(exc.message) from exc

    click.echo(f'Created article "{article.title}": {article.path}')
    for tag_path in article.tag_paths:
        click.echo(f"  tag {tag_path}")


# ---------------------------------------------------------------------------
# postkit image
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("article", type=click.Path(dir_okay=False))
@click.argument("source", metavar="IMAGE", required=False, type=click.Path(dir_okay=False))
@click.option("--line", type=int, default=None, help="Caret line (1-based); default: end of article")
@click.option("--column", type=int, default=None, help="Caret column (1-based); default: end of line")
@click.option("--print-only", is_flag=True, help="Copy the image and print the reference; leave the article alone")
@click.pass_context
def image(
    ctx: click.Context,
    article: str,
    source: str | None,
    line: int | None,
    column: int | None,
    print_only: bool,
) -> None:
    """Copy IMAGE into img/<article>/ as imgN and insert a Markdown reference."""
    cfg = _load_cfg(ctx)
    try:
        require_article(article)
        source = _ask(f"Image file ({', '.join(cfg.images.extensions)})", source)
        if print_only:
            inserted = copy_image(cfg, article, source)
            click.echo(inserted.markdown)
        else:
            inserted = insert_image(cfg, article, source, line=line, column=column)
    except PostkitError as exc:
        raise click.ClickException(exc.message) from exc

    click.echo(f"Inserted image {inserted.name}", err=print_only)


# ---------------------------------------------------------------------------
# postkit commit
# ---------------------------------------------------------------------------


@cli.command()
@click.option("-m", "--message", default=None, help="Commit message (skips the editor)")
@click.option("--dry-run", is_flag=True, help="Show which articles would be stamped; change nothing")
@click.pass_context
def commit(ctx: click.Context, message: str | None, dry_run: bool) -> None:
    """Stamp date/lastmod on changed articles and commit them.

    Opens $GIT_DIR/COMMIT_EDITMSG in an editor; saving it runs the commit.
    """
    cfg = _load_cfg(ctx)

    def _edit(path: Path) -> None:
        timeout = cfg.commit.save_timeout or None
        open_and_wait(path, command=cfg.editor.command, timeout=timeout)

    try:
        if dry_run:
            updated = stamp_articles(cfg, dry_run=True)
            for rel in updated:
                click.echo(f"  would stamp {rel}")
            click.echo(f"dry-run: {len(updated)} article(s) would be updated")
            return
        outcome = commit_with_stamp(cfg, edit_message=_edit, message=message)
    except PostkitError as exc:
        raise click.ClickException(exc.message) from exc

    if not outcome.updated:
        click.echo("No articles updated.")
        return
    for rel in outcome.updated:
        click.echo(f"  stamped {rel}")
    click.secho(f"Committed {len(outcome.updated)} article(s).", fg="green")


# ---------------------------------------------------------------------------
# postkit pending
# ---------------------------------------------------------------------------


@cli.command()
@click.pass_context
def pending(ctx: click.Context) -> None:
    """List changed articles and whether the next commit would stamp them."""
    from rich.console import Console
    from rich.table import Table

    cfg = _load_cfg(ctx)
    try:
        candidates = find_candidates(cfg)
    except PostkitError as exc:
        raise click.ClickException(exc.message) from exc

    today = today_iso()
    table = Table(title=f"postkit — {cfg.content_rel}", show_header=True, header_style="bold")
    table.add_column("Article", no_wrap=True)
    table.add_column("Stamp", justify="right")
    for path in candidates:
        would = stamp_article(path, today, dry_run=True)
        table.add_row(
            path.relative_to(cfg.root).as_posix(),
            f"[yellow]lastmod → {today}[/yellow]" if would else "[dim]current / skipped[/dim]",
        )
    if not candidates:
        table.add_row("[dim]no changed articles[/dim]", "")
    Console().print(table)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    cli(standalone_mode=True)


if __name__ == "__main__":
    main()
