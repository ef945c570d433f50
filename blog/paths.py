from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath, PurePosixPath

DEFAULT_SOURCE = Path("")
DEFAULT_TARGET = Path("_www")
DEFAULT_SERVER_ROOT = PurePosixPath("/")


class SourceKind(str, Enum):
    ASSETS = "assets"
    IMAGES = "images"
    CSS = "css"
    TEMPLATES = "templates"
    CONTENT = "content"
    PAGES = "pages"
    ARTICLES = "articles"
    INDEX = "index"


class TargetKind(str, Enum):
    CACHE = "cache"
    IMAGES = "images"
    STYLE_CSS = "style_css"
    PAGE = "page"
    ARTICLE = "article"
    INDEX = "index"
    ATOM = "atom"


SOURCE_LAYOUT = {
    SourceKind.ASSETS: ("assets",),
    SourceKind.IMAGES: ("assets", "images"),
    SourceKind.CSS: ("assets", "css"),
    SourceKind.TEMPLATES: ("assets", "templates"),
    SourceKind.CONTENT: ("content",),
    SourceKind.PAGES: ("content", "pages"),
    SourceKind.ARTICLES: ("content", "articles"),
    SourceKind.INDEX: ("content", "index.md"),
}

TARGET_LAYOUT = {
    TargetKind.CACHE: (".cache",),
    TargetKind.IMAGES: ("images",),
    TargetKind.STYLE_CSS: ("style.css",),
    TargetKind.INDEX: ("index.html",),
    TargetKind.ATOM: ("atom.xml",),
}

RELOCATED = {
    TargetKind.PAGE: (),
    TargetKind.ARTICLE: ("articles",),
}


def relocate(path: PurePath, into: PurePath, extension: str = "html") -> PurePath:
    """Move path under into, keeping its stem and swapping the extension."""
    name = PurePath(path).with_suffix(f".{extension}").name
    return into / name


@dataclass(frozen=True)
class Resolver:
    """Directory roots for sources, build output and served links."""

    source: Path = DEFAULT_SOURCE
    target: Path = DEFAULT_TARGET
    server_root: PurePosixPath = DEFAULT_SERVER_ROOT

    def __post_init__(self):
        object.__setattr__(self, "source", Path(self.source))
        object.__setattr__(self, "target", Path(self.target))
        server_root = PurePosixPath(self.server_root or "/")
        if not server_root.is_absolute():
            server_root = PurePosixPath("/") / server_root
        object.__setattr__(self, "server_root", server_root)

    def source_path(self, kind: SourceKind | str) -> Path:
        """Fixed location of a content category under the source root."""
        return self.source.joinpath(*SOURCE_LAYOUT[SourceKind(kind)])

    def target_path(
        self, kind: TargetKind | str, source: PurePath | str | None = None
    ) -> Path:
        """Location of a build artifact under the target root.

        Pages and articles are derived from their source file; every other
        artifact sits at a fixed place and takes no source.
        """
        kind = TargetKind(kind)
        if kind in RELOCATED:
            if source is None:
                raise ValueError(f"target path for {kind.value} needs a source")
            into = self.target.joinpath(*RELOCATED[kind])
            return relocate(Path(source), into)
        if source is not None:
            raise ValueError(f"target path for {kind.value} takes no source")
        return self.target.joinpath(*TARGET_LAYOUT[kind])

    def server_link(self, source: PurePath | str) -> PurePosixPath:
        """URL path of an article, derived from its source file."""
        return relocate(PurePath(source), self.server_root / "articles")
