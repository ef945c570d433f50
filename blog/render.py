from __future__ import annotations

from pathlib import Path
from typing import Iterable

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markdown import Markdown

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "toc"]


def build_markdown_renderer() -> Markdown:
    """Create a Markdown renderer with site extensions."""
    return Markdown(extensions=MARKDOWN_EXTENSIONS, output_format="html")


def render_markdown(renderer: Markdown, content: str) -> str:
    """Render Markdown content into HTML."""
    renderer.reset()
    return renderer.convert(content)


def get_template_env(templates_dir: Path) -> Environment:
    """Create a Jinja environment for HTML templates."""
    return Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=select_autoescape(["html"]),
    )


def template_files(env: Environment, names: Iterable[str]) -> list[Path]:
    """Files backing the named templates, for dependency tracking."""
    files = []
    for name in names:
        template = env.get_template(name)
        if template.filename:
            files.append(Path(template.filename))
    return files


def apply_templates(env: Environment, names: Iterable[str], content: str, **context) -> str:
    """Render templates in order, each one wrapping the previous output.

    The innermost template comes first: ``["article.html", "layout.html"]``
    renders the article body, then places it inside the layout.
    """
    for name in names:
        content = env.get_template(name).render(content=content, **context)
    return content
