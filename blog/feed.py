"""Atom feed for the blog articles."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from feedgen.feed import FeedGenerator

if TYPE_CHECKING:
    from feedgen.entry import FeedEntry

    from blog.content import Article

TITLE = "Joy's Beautiful Apple-themed Blog"
SITE_URL = "https://dev-joya.github.io"
DESCRIPTION = "My personal blog, built from markdown"
OWNER_NAME = "Joy Aruku"
OWNER_EMAIL = "joy.gold13@gmail.com"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def join_url(site_url: str, path: PurePosixPath | str) -> str:
    """Prefix an absolute URL path with the site origin."""
    path = PurePosixPath(path).as_posix()
    if path == "/":
        return site_url.rstrip("/") + "/"
    return site_url.rstrip("/") + "/" + path.lstrip("/")


def add_article(fg: FeedGenerator, site_url: str, link: PurePosixPath, article: "Article") -> "FeedEntry":
    """Append an Atom entry for one article."""
    content_url = join_url(site_url, link)
    fe = fg.add_entry(order="append")
    fe.id(content_url)
    fe.title(article.title)
    fe.link(href=content_url, rel="alternate", title=article.title)
    fe.updated(article.date)
    for category in article.tags:
        fe.category(term=category)
    if article.description:
        fe.summary(article.description)
    return fe


def make_feed(
    articles: list[tuple[PurePosixPath, "Article"]],
    site_url: str = SITE_URL,
    server_root: PurePosixPath | str = "/",
) -> str:
    """Render the Atom feed document for the given (link, article) pairs."""
    feed_url = join_url(site_url, server_root)

    fg = FeedGenerator()
    fg.id(feed_url)
    fg.title(TITLE)
    fg.subtitle(DESCRIPTION)
    fg.author(name=OWNER_NAME, email=OWNER_EMAIL, uri=feed_url)
    fg.link(href=join_url(site_url, PurePosixPath(server_root) / "atom.xml"), rel="self")
    fg.updated(max((article.date for _, article in articles), default=EPOCH))

    for link, article in articles:
        add_article(fg, site_url, link, article)

    return fg.atom_str(pretty=True).decode("utf-8")
