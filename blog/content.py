from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from blog.frontmatter import read_file_with_metadata
from blog.paths import SourceKind

if TYPE_CHECKING:
    from blog.paths import Resolver

MARKDOWN_EXTENSIONS = (".md", ".markdown", ".mdown")


class ContentError(ValueError):
    """Raised when a content file lacks required metadata."""


@dataclass(frozen=True)
class Page:
    title: str | None = None
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    charset: str = "utf-8"

    def to_context(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags),
            "charset": self.charset,
        }


@dataclass(frozen=True)
class Article:
    title: str
    date: datetime
    synopsis: str | None = None
    description: str | None = None
    tags: list[str] = field(default_factory=list)

    @property
    def page(self) -> Page:
        return Page(title=self.title, description=self.description, tags=self.tags)

    def to_context(self) -> dict:
        context = self.page.to_context()
        context.update(
            {
                "synopsis": self.synopsis,
                "date": self.date,
                "date_display": self.date.strftime("%Y-%m-%d"),
            }
        )
        return context


def is_markdown(path: Path) -> bool:
    return path.suffix.lower() in MARKDOWN_EXTENSIONS


def optional_str(fm: dict, key: str) -> str | None:
    value = fm.get(key)
    if value is None:
        return None
    return str(value).strip() or None


def parse_tags(value, origin: Path) -> list[str]:
    """Accept a YAML list or a comma separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    if isinstance(value, list):
        return [str(tag).strip() for tag in value if str(tag).strip()]
    raise ContentError(f"{origin}: tags must be a list or a string")


def as_utc(value: datetime) -> datetime:
    """Naive dates are read as UTC; aware ones are converted to it."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_date(value, origin: Path) -> datetime:
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            return as_utc(datetime.fromisoformat(value.strip()))
        except ValueError as exc:
            raise ContentError(f"{origin}: invalid date {value!r}") from exc
    raise ContentError(f"{origin}: missing date")


def page_from_frontmatter(fm: dict, origin: Path) -> Page:
    return Page(
        title=optional_str(fm, "title") or optional_str(fm, "page_title"),
        description=optional_str(fm, "description"),
        tags=parse_tags(fm.get("tags"), origin),
        charset=optional_str(fm, "charset") or "utf-8",
    )


def article_from_frontmatter(fm: dict, origin: Path) -> Article:
    title = optional_str(fm, "title")
    if not title:
        raise ContentError(f"{origin}: missing title")
    return Article(
        title=title,
        date=parse_date(fm.get("date"), origin),
        synopsis=optional_str(fm, "synopsis"),
        description=optional_str(fm, "description"),
        tags=parse_tags(fm.get("tags"), origin),
    )


def load_page(path: Path) -> tuple[Page, str]:
    """Load page metadata and markdown body from disk."""
    fm, body = read_file_with_metadata(path)
    return page_from_frontmatter(fm, path), body


def load_article(path: Path) -> tuple[Article, str]:
    """Load article metadata and markdown body from disk."""
    fm, body = read_file_with_metadata(path)
    return article_from_frontmatter(fm, path), body


def iter_markdown_files(directory: Path) -> list[Path]:
    if not directory.exists():
        return []
    return sorted(
        path for path in directory.iterdir() if path.is_file() and is_markdown(path)
    )


def fetch_articles(resolver: "Resolver") -> list[tuple[PurePosixPath, Article]]:
    """Collect every article with its served link, newest first."""
    articles: list[tuple[PurePosixPath, Article]] = []
    for path in iter_markdown_files(resolver.source_path(SourceKind.ARTICLES)):
        article, _ = load_article(path)
        articles.append((resolver.server_link(path), article))
    articles.sort(key=lambda item: item[0].as_posix())
    articles.sort(key=lambda item: item[1].date, reverse=True)
    return articles


def index_context(page: Page, articles: list[tuple[PurePosixPath, Article]]) -> dict:
    context = page.to_context()
    context["articles"] = [
        dict(article.to_context(), url=link.as_posix()) for link, article in articles
    ]
    return context
