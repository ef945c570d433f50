from pathlib import Path

import pytest

from blog import dev
from blog.build import main
from blog.dev import rebuild, watched_paths
from blog.paths import Resolver


def test_watched_paths_cover_content_and_assets(resolver, site: Path):
    assert watched_paths(resolver) == [
        str(site / "content" / "index.md"),
        str(site / "content" / "pages"),
        str(site / "content" / "articles"),
        str(site / "assets"),
    ]


def test_rebuild_reports_changed_files(resolver):
    changed = rebuild(resolver)
    assert str(resolver.target / "index.html") in changed
    assert rebuild(resolver) == []


def test_rebuild_survives_bad_content(resolver, site: Path):
    (site / "content" / "articles" / "broken.md").write_text(
        "---\ntitle: [oops\n---\n", encoding="utf-8"
    )
    assert rebuild(resolver) == []


class RecordingServer:
    """Stands in for livereload.Server and records what it was asked to do"""

    instances = []

    def __init__(self):
        self.watched = []
        self.served = None
        RecordingServer.instances.append(self)

    def watch(self, path, func=None):
        self.watched.append((path, func))

    def serve(self, **kwargs):
        self.served = kwargs


@pytest.fixture
def recording_server(monkeypatch):
    RecordingServer.instances = []
    monkeypatch.setattr(dev, "Server", RecordingServer)
    return RecordingServer


def test_server_mode_builds_watches_and_serves(site: Path, tmp_path: Path, monkeypatch, recording_server):
    builds = []
    real_program = dev.program

    def counting_program(resolver, *args, **kwargs):
        builds.append(resolver)
        return real_program(resolver, *args, **kwargs)

    monkeypatch.setattr(dev, "program", counting_program)
    target = tmp_path / "out"
    main(["server", "--source", str(site), "--target", str(target), "--port", "9001"])

    resolver = Resolver(source=site, target=target)
    assert builds == [resolver]
    assert (target / "index.html").exists()

    (server,) = recording_server.instances
    assert [path for path, _ in server.watched] == watched_paths(resolver)
    assert server.served["root"] == str(target)
    assert server.served["port"] == 9001

    _, callback = server.watched[0]
    callback()
    assert len(builds) == 2


def test_server_mode_survives_bad_content(site: Path, tmp_path: Path, recording_server):
    (site / "content" / "articles" / "broken.md").write_text(
        "---\ndate: 2025-01-01\n---\n", encoding="utf-8"
    )
    target = tmp_path / "out"
    main(["server", "--source", str(site), "--target", str(target)])
    (server,) = recording_server.instances
    assert server.served["root"] == str(target)
    assert server.served["port"] == 8000
