"""Jinja2 rendering of bash templates.

Each template is bound to one pydantic properties model; rendering uses
StrictUndefined so a renamed or missing field fails loudly.
"""

from __future__ import annotations

import shlex
from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound
from pydantic import BaseModel

from platform_builder.errors import InternalConsistencyError

TEMPLATE_DIR = Path(__file__).parent / "templates"


def _shquote(value: object) -> str:
    return shlex.quote(str(value))


@lru_cache(maxsize=1)
def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["shquote"] = _shquote
    return env


def render(template_name: str, props: BaseModel) -> str:
    """Render *template_name* with the fields of *props*. Pure and deterministic."""
    try:
        template = _environment().get_template(template_name)
    except TemplateNotFound as exc:
        raise InternalConsistencyError(f"Unknown script template '{template_name}'") from exc
    return template.render(**props.model_dump())
