"""Authoring helpers for a static-site blog kept in git.

Three independent chores, each a plain function of explicit inputs:

    create_article     docs/contents/<slug>.md with front-matter,
                       docs/tags/<tag>.md stub per tag
    insert_image       docs/contents/img/<slug>/img<N>.<ext> + Markdown reference
    commit_with_stamp  date/lastmod on changed articles, then git commit with
                       a message edited in .git/COMMIT_EDITMSG

Front-matter is a `---` fenced block of `key: value` lines at the top of the
file; files without one are never rewritten.
"""

from postkit.articles import NewArticle, create_article
from postkit.commit import CommitOutcome, commit_with_stamp, stamp_articles
from postkit.config import PostkitConfig, init_config, load_config
from postkit.errors import PostkitError
from postkit.images import InsertedImage, insert_image

__all__ = [
    "CommitOutcome",
    "InsertedImage",
    "NewArticle",
    "PostkitConfig",
    "PostkitError",
    "commit_with_stamp",
    "create_article",
    "init_config",
    "insert_image",
    "load_config",
    "stamp_articles",
]
