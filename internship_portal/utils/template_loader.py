"""
Message templates.

Toast texts and invitation e-mails are Jinja2 templates under the package's
templates/ directory. Two filters are registered for them: ``dmy`` prints a
date the way the portal shows dates everywhere (12.01.2026) and
``pluralize`` picks the singular or plural noun for a count.

Usage:
    from internship_portal.utils.template_loader import render_template

    body = render_template(
        "invitation_email.j2",
        invited_by="Admin User",
        company_name="Acme Ltd",
        email="hr@acme.bg",
        program_phases=[],
    )
"""

from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import structlog
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, Undefined

logger = structlog.get_logger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
DATE_FORMAT = "%d.%m.%Y"


def dmy(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def pluralize(count: int, singular: str, plural: Optional[str] = None) -> str:
    """``{{ n | pluralize("company", "companies") }}``; plural defaults to singular + "s"."""
    if count == 1:
        return singular
    return plural if plural is not None else singular + "s"


class TemplateLoader:
    """Renders the bundled message templates (or those of another directory)."""

    def __init__(self, template_dir: Optional[Path] = None, strict_undefined: bool = True) -> None:
        """
        Args:
            template_dir: Where templates are looked up (defaults to the package templates/)
            strict_undefined: Fail on variables the caller did not pass instead of
                rendering them as empty text
        """
        self.template_dir = template_dir or TEMPLATE_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            undefined=StrictUndefined if strict_undefined else Undefined,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )
        self.env.filters.update(dmy=dmy, pluralize=pluralize)

    def render(self, template_name: str, correlation_id: Optional[str] = None, **variables: Any) -> str:
        """
        Render ``template_name`` with ``variables``.

        Raises:
            jinja2.TemplateNotFound, jinja2.TemplateSyntaxError, jinja2.UndefinedError:
                Logged with the template name, then re-raised
        """
        try:
            text = self.env.get_template(template_name).render(**variables)
        except TemplateError as e:
            logger.error(
                "template_render_failed",
                template_name=template_name,
                correlation_id=correlation_id,
                error_type=type(e).__name__,
                error=str(e),
                template_dir=str(self.template_dir),
                variables=sorted(variables),
            )
            raise

        logger.debug(
            "template_rendered",
            template_name=template_name,
            correlation_id=correlation_id,
            length=len(text),
        )
        return text


@lru_cache(maxsize=None)
def get_default_loader() -> TemplateLoader:
    """Shared loader over the bundled templates."""
    return TemplateLoader()


def render_template(template_name: str, correlation_id: Optional[str] = None, **variables: Any) -> str:
    return get_default_loader().render(template_name, correlation_id=correlation_id, **variables)
