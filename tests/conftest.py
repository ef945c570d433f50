"""
Pytest configuration and shared fixtures for the blog tests
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from blog.paths import Resolver


LAYOUT = """<html><head><title>{{ title }}</title>
<link rel="stylesheet" href="{{ base_url }}/style.css"></head>
<body>{{ content | safe }}</body></html>"""

PAGE = "<h1>{{ title }}</h1>{{ content | safe }}"

ARTICLE = """<article><h1>{{ title }}</h1><time>{{ date_display }}</time>
{{ content | safe }}</article>"""

INDEX = """{{ content | safe }}<ul>
{% for article in articles %}<li><a href="{{ article.url }}">{{ article.title }}</a></li>
{% endfor %}</ul>"""


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


# ============================================================================
# Site Fixtures
# ============================================================================

@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A minimal blog source tree"""
    root = tmp_path / "site"
    templates = root / "assets" / "templates"
    write(templates / "layout.html", LAYOUT)
    write(templates / "page.html", PAGE)
    write(templates / "article.html", ARTICLE)
    write(templates / "index.html", INDEX)

    write(root / "assets" / "css" / "reset.css", "* { margin: 0; }")
    write(root / "assets" / "css" / "style.css", "body { color: red; }")
    write(root / "assets" / "images" / "apple.svg", "<svg></svg>")
    write(root / "assets" / "images" / "notes.txt", "not an image")

    write(root / "content" / "index.md", "---\ntitle: Home\n---\n\nWelcome home.\n")
    write(
        root / "content" / "pages" / "about.md",
        "---\ntitle: About\n---\n\nAbout *me*.\n",
    )
    write(
        root / "content" / "articles" / "my-first-post.md",
        "---\ntitle: My first post\ndate: 2025-06-01\n"
        "description: The first one.\ntags: [intro, blog]\n---\n\nHello **world**.\n",
    )
    write(
        root / "content" / "articles" / "second-post.md",
        "---\ntitle: Second post\ndate: 2025-07-01\n---\n\nMore words.\n",
    )
    return root


@pytest.fixture
def resolver(site: Path, tmp_path: Path) -> Resolver:
    """Resolver reading from the site fixture and writing into tmp_path"""
    return Resolver(source=site, target=tmp_path / "_www")
