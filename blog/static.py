from __future__ import annotations

import shutil
from pathlib import Path

from blog.paths import Resolver, SourceKind, TargetKind

IMAGE_EXTENSIONS = (".svg", ".png", ".jpg", ".gif")
STYLESHEETS = ("reset.css", "style.css")


def is_image(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in IMAGE_EXTENSIONS


def image_files(resolver: Resolver) -> list[tuple[Path, Path]]:
    """Pair each site image with its place in the build."""
    src_dir = resolver.source_path(SourceKind.IMAGES)
    if not src_dir.exists():
        return []
    dest_dir = resolver.target_path(TargetKind.IMAGES)
    return [(src, dest_dir / src.name) for src in sorted(src_dir.iterdir()) if is_image(src)]


def copy_file(src: Path, dst: Path) -> Path:
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)
    return dst


def stylesheet_sources(resolver: Resolver) -> list[Path]:
    css = resolver.source_path(SourceKind.CSS)
    return [css / name for name in STYLESHEETS]


def concat_css(resolver: Resolver) -> str:
    """Join the reset and site stylesheets into one document."""
    return "\n".join(
        path.read_text(encoding="utf-8") for path in stylesheet_sources(resolver)
    )


def remove_empty_parents(path: Path, root: Path):
    """Delete path and its ancestors while they are empty, never root itself."""
    for directory in [path, *path.parents]:
        if directory == root or root not in directory.parents:
            return
        if not directory.is_dir() or any(directory.iterdir()):
            return
        directory.rmdir()
