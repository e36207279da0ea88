"""
Page Templates

Minimal placeholder substitution for the HTML pages (home, not found,
password gate, crawler preview). Placeholders look like `{{ code }}` or `{{ link.code }}`;
placeholders with no value are left in the output untouched.

Values are inserted as-is. Callers escape anything that did not come from
the service itself.
"""

import re
from pathlib import Path
from typing import Any, Mapping, Optional

from zye.core.exceptions import TemplateNotFoundError

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

TEMPLATE_NAMES = ("home", "not_found", "password", "preview")

PLACEHOLDER_PATTERN = re.compile(r"{{\s*([\w.]+)\s*}}")

_MISSING = object()


def render_template(template: str, data: Mapping[str, Any]) -> str:
    """
    Substitute `{{dotted.key}}` placeholders from a (possibly nested) mapping.

    Example:
        render_template("Hi {{ user.name }}", {"user": {"name": "Zye"}}) -> "Hi Zye"
        render_template("Hi {{ nobody }}", {}) -> "Hi {{ nobody }}"
    """
    def substitute(match: re.Match) -> str:
        value: Any = data
        for key in match.group(1).split("."):
            if isinstance(value, Mapping) and key in value:
                value = value[key]
            else:
                value = _MISSING
                break
        if value is _MISSING or value is None:
            return match.group(0)
        return str(value)

    return PLACEHOLDER_PATTERN.sub(substitute, template)


class TemplateRenderer:
    """
    Renders the packaged page templates by name.

    Templates are read from disk once, when the renderer is created.
    """

    def __init__(self, directory: Optional[Path] = None):
        directory = directory or TEMPLATES_DIR
        self._templates = {
            name: (directory / f"{name}.html").read_text(encoding="utf-8")
            for name in TEMPLATE_NAMES
        }

    def render(self, name: str, data: Optional[Mapping[str, Any]] = None) -> str:
        try:
            template = self._templates[name]
        except KeyError:
            raise TemplateNotFoundError(name)
        return render_template(template, data or {})
