"""Live reload dev server with smart incremental builds."""

from __future__ import annotations

import logging

from livereload import Server

from blog.build import program
from blog.paths import Resolver, SourceKind

log = logging.getLogger("blog")


def watched_paths(resolver: Resolver) -> list[str]:
    """Files and directories whose changes trigger a rebuild."""
    return [
        str(resolver.source_path(SourceKind.INDEX)),
        str(resolver.source_path(SourceKind.PAGES)),
        str(resolver.source_path(SourceKind.ARTICLES)),
        str(resolver.source_path(SourceKind.ASSETS)),
    ]


def rebuild(resolver: Resolver) -> list[str]:
    """Incremental build, return list of changed files."""
    try:
        changed = program(resolver)
    except (ValueError, OSError) as exc:
        log.error("Build error: %s", exc)
        return []
    log.info("Incremental build: %d files", len(changed))
    return [str(path) for path in changed]


def serve(resolver: Resolver, port: int = 8000):
    log.info("Initial build...")
    rebuild(resolver)

    server = Server()
    for path in watched_paths(resolver):
        server.watch(path, lambda: rebuild(resolver))

    log.info("Starting dev server at http://localhost:%d", port)
    server.serve(root=str(resolver.target), port=port, open_url_delay=0.5)
