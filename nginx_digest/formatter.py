"""Report rendering through a Jinja2 text template."""

import os

import jinja2

from nginx_digest.report import ReportData


class TemplateLoadError(Exception):
    """Raised when the output template cannot be read or compiled."""


class RenderError(Exception):
    """Raised when a loaded template fails while rendering."""


def _environment(directory: str) -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(directory),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )


def load_template(path: str) -> jinja2.Template:
    """Load a template file; relative paths resolve against the working directory."""
    full_path = os.path.abspath(path)
    if not os.path.isfile(full_path):
        raise TemplateLoadError(f"Template file not found: {path}")
    env = _environment(os.path.dirname(full_path))
    try:
        return env.get_template(os.path.basename(full_path))
    except jinja2.TemplateSyntaxError as exc:
        raise TemplateLoadError(f"Template {path} line {exc.lineno}: {exc.message}") from exc
    except (jinja2.TemplateError, OSError) as exc:
        raise TemplateLoadError(f"Failed to load template {path}: {exc}") from exc


def render_report(template: jinja2.Template, report: ReportData) -> str:
    try:
        return template.render(report.context())
    except jinja2.TemplateError as exc:
        raise RenderError(f"Failed to render report: {exc}") from exc
