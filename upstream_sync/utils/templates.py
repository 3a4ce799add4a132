"""Contains utilities for rendering the Jinja2 templates packaged with the application."""

from functools import lru_cache
from pathlib import Path

import jinja2
import structlog
from pydantic import BaseModel

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

TEMPLATES_DIRECTORY = Path(__file__).parent.parent / "templates"


@lru_cache(maxsize=1)
def construct_jinja2_environment() -> jinja2.Environment:
    """Construct the Jinja2 environment for packaged templates.

    Undefined variables fail rendering instead of rendering as empty strings.
    """
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(TEMPLATES_DIRECTORY),
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )


def get_packaged_template(template_name: str) -> jinja2.Template:
    """Load a template from the packaged templates directory by file name."""
    try:
        return construct_jinja2_environment().get_template(template_name)
    except jinja2.TemplateNotFound:
        logger.error("Jinja2 template not found", template_name=template_name, templates_directory=str(TEMPLATES_DIRECTORY))
        raise


def render_template_with_model(model: BaseModel, template: jinja2.Template) -> str:
    """Render a Jinja2 template against a Pydantic model."""
    try:
        return template.render(model.model_dump())
    except jinja2.UndefinedError as exc:
        logger.error("Failed to render template with model", model_type=type(model).__name__, error=str(exc))
        raise
