# src/hoist/components/rendering.py

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATES_DIR = Path(__file__).parent / "templates"


@lru_cache(maxsize=None)
def _environment(templates_dir: Path) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_config(template_name: str, templates_dir: Path = TEMPLATES_DIR, **context) -> str:
    """
    Render a component configuration file.

    Undefined variables raise instead of rendering as empty strings, so a
    missing setting fails the component install rather than the service.
    """
    return _environment(templates_dir).get_template(template_name).render(**context)
