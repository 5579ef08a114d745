"""Front-matter parsing and rendering for articles and tag stubs.

An article is:

    ---
    title: Hello
    author: Jane
    date: 2024-01-01
    lastmod: 2024-01-02
    tags: [a, b]
    ---
    <body>

Parsing is two-phase: the text must open with a `---` line, and the block
ends at the next `---` line that is itself newline-terminated. Everything
after that line is the body and is never touched, so a `---` rule inside
the body cannot be mistaken for the closing delimiter. The block must hold
at least one line.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

DELIMITER = "---"


def today_iso() -> str:
    """Current calendar date in UTC, YYYY-MM-DD."""
    return datetime.now(UTC).date().isoformat()


@dataclass
class FrontMatter:
    """A split article: front-matter lines (without delimiters) and raw body."""

    lines: list[str]
    body: str

    def render(self) -> str:
        return f"{DELIMITER}\n" + "\n".join(self.lines) + f"\n{DELIMITER}\n" + self.body


@dataclass
class StampResult:
    lines: list[str]
    updated: bool


def split_front_matter(text: str) -> FrontMatter | None:
    """Split text into front-matter and body. None if the shape doesn't match."""
    opener = DELIMITER + "\n"
    if not text.startswith(opener):
        return None
    rest = text[len(opener):]
    segments = rest.split("\n")

    offset = 0
    # The last segment has no trailing newline, so it can't close the block.
    for i, line in enumerate(segments[:-1]):
        if line == DELIMITER:
            if i == 0:
                return None
            return FrontMatter(lines=segments[:i], body=rest[offset + len(line) + 1:])
        offset += len(line) + 1
    return None


def stamp_dates(lines: list[str], today: str) -> StampResult:
    """Rewrite `lastmod:` to today; add `date:`/`lastmod:` when missing.

    `date:` is never changed once present. `updated` is True only when the
    block differs from the input, so stamping twice on one day is a no-op.
    """
    new_lines: list[str] = []
    has_date = False
    has_lastmod = False

    for line in lines:
        if line.startswith("date:"):
            has_date = True
            new_lines.append(line)
        elif line.startswith("lastmod:"):
            has_lastmod = True
            new_lines.append(f"lastmod: {today}")
        else:
            new_lines.append(line)

    if not has_date:
        new_lines.insert(0, f"date: {today}")
    if not has_lastmod:
        new_lines.append(f"lastmod: {today}")

    return StampResult(lines=new_lines, updated=new_lines != lines)


def format_tags(tags: list[str]) -> str:
    return "[" + ", ".join(tags) + "]"


def render_article(title: str, author: str, today: str, tags: list[str], placeholder: str) -> str:
    lines = [
        DELIMITER,
        f"title: {title}",
        f"author: {author}",
        f"date: {today}",
        f"lastmod: {today}",
        f"tags: {format_tags(tags)}",
        DELIMITER,
        "",
        placeholder,
        "",
    ]
    return "\n".join(lines)


def render_tag_index(tag: str) -> str:
    return f"{DELIMITER}\nlayout: tag\ntitle: {tag}\ntag: {tag}\n{DELIMITER}\n"
