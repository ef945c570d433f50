"""Incremental build system for the blog."""

from __future__ import annotations

import argparse
import hashlib
import json
import logging
import shutil
import sys
from pathlib import Path
from typing import Iterable

from jinja2 import TemplateNotFound
from rich.console import Console
from rich.logging import RichHandler

from blog import feed
from blog.content import (
    fetch_articles,
    index_context,
    iter_markdown_files,
    load_article,
    load_page,
)
from blog.paths import (
    DEFAULT_SERVER_ROOT,
    DEFAULT_SOURCE,
    DEFAULT_TARGET,
    Resolver,
    SourceKind,
    TargetKind,
)
from blog.render import (
    apply_templates,
    build_markdown_renderer,
    get_template_env,
    render_markdown,
    template_files,
)
from blog.static import (
    concat_css,
    copy_file,
    image_files,
    remove_empty_parents,
    stylesheet_sources,
)

log = logging.getLogger("blog")

CACHE_FILE = "build_cache.json"
BUILD_SCRIPTS = sorted(Path(__file__).resolve().parent.glob("*.py"))

PAGE_TEMPLATES = ["page.html", "layout.html"]
ARTICLE_TEMPLATES = ["article.html", "layout.html"]
INDEX_TEMPLATES = ["index.html", "page.html", "layout.html"]


def new_cache() -> dict:
    """Create a fresh build cache with defaults."""
    return {"targets": {}}


def cache_file(resolver: Resolver) -> Path:
    return resolver.target_path(TargetKind.CACHE) / CACHE_FILE


def load_cache(resolver: Resolver) -> dict:
    """Load build cache, return defaults if missing/corrupt."""
    cache = new_cache()
    path = cache_file(resolver)
    if path.exists():
        try:
            loaded = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, TypeError):
            log.warning("Ignoring corrupt cache %s", path)
            loaded = None
        if isinstance(loaded, dict) and isinstance(loaded.get("targets"), dict):
            cache["targets"] = loaded["targets"]
    return cache


def save_cache(resolver: Resolver, cache: dict):
    """Persist cache to disk."""
    path = cache_file(resolver)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cache, indent=2, sort_keys=True), encoding="utf-8")


def dependencies(*groups: Iterable[Path]) -> list[Path]:
    """Dependency list of a target, always including the build scripts."""
    deps = set(BUILD_SCRIPTS)
    for group in groups:
        deps.update(group)
    return sorted(deps)


def deps_hash(deps: list[Path], settings: str = "") -> str:
    """Hash the dependency list together with any settings baked into output."""
    payload = "\n".join([settings, *(str(dep) for dep in deps)])
    return hashlib.md5(payload.encode()).hexdigest()


def deps_mtime(deps: list[Path]) -> float:
    return max((dep.stat().st_mtime for dep in deps if dep.exists()), default=0)


def needs_rebuild(cache: dict, target: Path, deps: list[Path], settings: str = "") -> bool:
    """Check if a target is missing or older than one of its dependencies."""
    if not target.exists():
        return True

    cached = cache.get("targets", {}).get(str(target))
    if not cached:
        return True

    if cached.get("deps_hash") != deps_hash(deps, settings):
        return True

    if deps_mtime(deps) > cached.get("mtime", 0):
        return True

    return False


def record_build(cache: dict, target: Path, deps: list[Path], settings: str = ""):
    cache.setdefault("targets", {})[str(target)] = {
        "mtime": deps_mtime(deps),
        "deps_hash": deps_hash(deps, settings),
    }


def write_file(target: Path, content: str) -> Path:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target


class Builder:
    """Runs the build steps against one resolver and cache."""

    def __init__(self, resolver: Resolver, cache: dict, force: bool = False):
        self.resolver = resolver
        self.cache = cache
        self.force = force
        self.env = get_template_env(resolver.source_path(SourceKind.TEMPLATES))
        self.renderer = build_markdown_renderer()
        # Links in generated markup depend on the server root.
        self.settings = resolver.server_root.as_posix()
        self.base_url = self.settings.rstrip("/")
        self.built: set[str] = set()

    def stale(self, target: Path, deps: list[Path]) -> bool:
        self.built.add(str(target))
        if self.force or needs_rebuild(self.cache, target, deps, self.settings):
            return True
        log.debug("Up to date: %s", target)
        return False

    def commit(self, target: Path, deps: list[Path], content: str) -> Path:
        write_file(target, content)
        record_build(self.cache, target, deps, self.settings)
        log.info("Built: %s", target)
        return target

    def copy_images(self) -> list[Path]:
        changed = []
        for source, target in image_files(self.resolver):
            deps = dependencies([source])
            if not self.stale(target, deps):
                continue
            copy_file(source, target)
            record_build(self.cache, target, deps, self.settings)
            log.info("Copied: %s", target)
            changed.append(target)
        return changed

    def create_css(self) -> list[Path]:
        target = self.resolver.target_path(TargetKind.STYLE_CSS)
        deps = dependencies(stylesheet_sources(self.resolver))
        if not self.stale(target, deps):
            return []
        return [self.commit(target, deps, concat_css(self.resolver))]

    def create_page(self, source: Path) -> list[Path]:
        target = self.resolver.target_path(TargetKind.PAGE, source)
        deps = dependencies([source], template_files(self.env, PAGE_TEMPLATES))
        if not self.stale(target, deps):
            return []
        log.debug("Creating page: %s -> %s", source, target)
        page, body = load_page(source)
        html = apply_templates(
            self.env,
            PAGE_TEMPLATES,
            render_markdown(self.renderer, body),
            base_url=self.base_url,
            **page.to_context(),
        )
        return [self.commit(target, deps, html)]

    def create_pages(self) -> list[Path]:
        changed = []
        for source in iter_markdown_files(self.resolver.source_path(SourceKind.PAGES)):
            changed.extend(self.create_page(source))
        return changed

    def create_article(self, source: Path) -> list[Path]:
        target = self.resolver.target_path(TargetKind.ARTICLE, source)
        deps = dependencies([source], template_files(self.env, ARTICLE_TEMPLATES))
        if not self.stale(target, deps):
            return []
        log.debug("Creating article: %s -> %s", source, target)
        article, body = load_article(source)
        html = apply_templates(
            self.env,
            ARTICLE_TEMPLATES,
            render_markdown(self.renderer, body),
            base_url=self.base_url,
            **article.to_context(),
        )
        return [self.commit(target, deps, html)]

    def create_articles(self) -> list[Path]:
        changed = []
        for source in self.article_sources():
            changed.extend(self.create_article(source))
        return changed

    def article_sources(self) -> list[Path]:
        return iter_markdown_files(self.resolver.source_path(SourceKind.ARTICLES))

    def create_index(self) -> list[Path]:
        source = self.resolver.source_path(SourceKind.INDEX)
        target = self.resolver.target_path(TargetKind.INDEX)
        deps = dependencies(
            [source],
            self.article_sources(),
            template_files(self.env, INDEX_TEMPLATES),
        )
        if not self.stale(target, deps):
            return []
        log.debug("Creating index page")
        page, body = load_page(source)
        articles = fetch_articles(self.resolver)
        html = apply_templates(
            self.env,
            INDEX_TEMPLATES,
            render_markdown(self.renderer, body),
            base_url=self.base_url,
            **index_context(page, articles),
        )
        return [self.commit(target, deps, html)]

    def create_feed(self) -> list[Path]:
        target = self.resolver.target_path(TargetKind.ATOM)
        deps = dependencies(self.article_sources())
        if not self.stale(target, deps):
            return []
        log.debug("Creating feed")
        articles = fetch_articles(self.resolver)
        xml = feed.make_feed(articles, server_root=self.resolver.server_root)
        return [self.commit(target, deps, xml)]

    def prune_removed(self) -> list[Path]:
        """Remove cached outputs whose source no longer exists."""
        removed = []
        for key in list(self.cache.get("targets", {})):
            if key in self.built:
                continue
            output = Path(key)
            if output.exists():
                output.unlink()
                remove_empty_parents(output.parent, self.resolver.target)
                removed.append(output)
                log.info("Removed: %s", output)
            del self.cache["targets"][key]
        return removed

    def run(self) -> list[Path]:
        changed: list[Path] = []
        changed.extend(self.copy_images())
        changed.extend(self.create_css())
        changed.extend(self.create_pages())
        changed.extend(self.create_articles())
        changed.extend(self.create_index())
        changed.extend(self.create_feed())
        changed.extend(self.prune_removed())
        return changed


def program(resolver: Resolver, force: bool = False) -> list[Path]:
    """Restore the cache, run every build step, store the cache."""
    cache = load_cache(resolver)
    changed = Builder(resolver, cache, force=force).run()
    save_cache(resolver, cache)
    return changed


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the blog")
    parser.add_argument(
        "mode",
        nargs="?",
        choices=["build", "server"],
        default="build",
        help="Build once, or build and serve with live reload",
    )
    parser.add_argument("--source", type=Path, default=DEFAULT_SOURCE, help="Source root")
    parser.add_argument("--target", type=Path, default=DEFAULT_TARGET, help="Build root")
    parser.add_argument(
        "--server-root",
        default=str(DEFAULT_SERVER_ROOT),
        help="URL path the site is served under, e.g. /yocaml_blog",
    )
    parser.add_argument("--port", type=int, default=8000, help="Dev server port")
    parser.add_argument("--all", action="store_true", help="Full rebuild")
    parser.add_argument("--clean", action="store_true", help="Remove build directory")
    parser.add_argument(
        "--json", action="store_true", help="Output changed files as JSON"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def log_layout(resolver: Resolver):
    log.info("WWW path: %s", resolver.target)
    log.info("Content path: %s", resolver.source_path(SourceKind.CONTENT))
    log.info("Articles path: %s", resolver.source_path(SourceKind.ARTICLES))
    log.info("Templates path: %s", resolver.source_path(SourceKind.TEMPLATES))


def main(argv: list[str] | None = None):
    args = parse_args(argv)
    setup_logging(args.verbose)
    resolver = Resolver(
        source=args.source, target=args.target, server_root=args.server_root
    )

    if args.clean:
        if resolver.target.exists():
            shutil.rmtree(resolver.target)
        print(f"Cleaned {resolver.target}/")
        return

    log_layout(resolver)

    if args.mode == "server":
        from blog.dev import serve

        serve(resolver, port=args.port)
        return

    try:
        changed_files = program(resolver, force=args.all)
    except (ValueError, OSError, TemplateNotFound) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps([str(p) for p in changed_files]))
    else:
        print(f"Built {len(changed_files)} file(s)")


if __name__ == "__main__":
    main()
