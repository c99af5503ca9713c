"""
Comment body formatting for github-commenter.

Renders the raw comment text through an optional Jinja2 template and
strips terminal color codes from the result.
"""

import base64
import hashlib
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import jinja2

from .utils.exceptions import TemplateError
from .utils.logger import get_logger


# ANSI CSI/OSC escape sequences, as emitted by colorized tool output
ANSI_ESCAPE = re.compile(
    r"[\x1b\x9b][\[\]()#;?]*"
    r"(?:(?:(?:[a-zA-Z\d]*(?:;[a-zA-Z\d]*)*)?\x07)"
    r"|(?:(?:\d{1,4}(?:;\d{0,4})*)?[\dA-PRZcf-ntqry=><~]))"
)

# Go template dot reference: {{.}}, {{ . }}, {{- . -}}, {{ . | upper }}
GO_DOT_REFERENCE = re.compile(r"(\{\{-?\s*)\.(?=\s*(?:-?\}\}|\|))")

COMMENT_VARIABLE = "comment"


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    return ANSI_ESCAPE.sub("", text)


def _trim_prefix(value: str, prefix: str) -> str:
    return value[len(prefix):] if prefix and value.startswith(prefix) else value


def _trim_suffix(value: str, suffix: str) -> str:
    return value[:-len(suffix)] if suffix and value.endswith(suffix) else value


def _nindent(value: str, width: int) -> str:
    pad = " " * width
    return "\n" + "\n".join(pad + line for line in str(value).split("\n"))


def _abbrev(value: str, width: int) -> str:
    value = str(value)
    if width < 4 or len(value) <= width:
        return value
    return value[:width - 3] + "..."


def _b64dec(value: str) -> str:
    return base64.b64decode(value).decode("utf-8")


TEMPLATE_FILTERS: Dict[str, Callable[..., Any]] = {
    "trim_prefix": _trim_prefix,
    "trim_suffix": _trim_suffix,
    "quote": lambda value: '"' + str(value) + '"',
    "squote": lambda value: "'" + str(value) + "'",
    "nindent": _nindent,
    "abbrev": _abbrev,
    "b64enc": lambda value: base64.b64encode(str(value).encode("utf-8")).decode("ascii"),
    "b64dec": _b64dec,
    "sha256sum": lambda value: hashlib.sha256(str(value).encode("utf-8")).hexdigest(),
    "regex_replace": lambda value, pattern, replacement: re.sub(pattern, replacement, str(value)),
}

TEMPLATE_GLOBALS: Dict[str, Callable[..., Any]] = {
    "now": lambda: datetime.now(timezone.utc),
    "env": lambda name, default="": os.environ.get(name, default),
}


def translate_go_dot(source: str) -> str:
    """Rewrite Go-style ``{{.}}`` references to the ``comment`` variable."""
    return GO_DOT_REFERENCE.sub(lambda match: f"{match.group(1)}{COMMENT_VARIABLE}", source)


def create_environment() -> jinja2.Environment:
    """Create the Jinja2 environment used for comment templates."""
    env = jinja2.Environment(
        loader=jinja2.BaseLoader(),
        autoescape=False,
        keep_trailing_newline=True,
    )
    env.filters.update(TEMPLATE_FILTERS)
    env.globals.update(TEMPLATE_GLOBALS)
    return env


class CommentFormatter:
    """
    Formats comment bodies with an inline template or a template file.

    The inline template takes precedence when both are configured. Without
    a template the text is returned unchanged.
    """

    def __init__(self, template: Optional[str] = None, template_file: Optional[str] = None):
        self.template = template or None
        self.template_file = template_file or None
        self.logger = get_logger(__name__)
        self._env = create_environment()

    @classmethod
    def from_settings(cls, settings) -> "CommentFormatter":
        return cls(template=settings.template, template_file=settings.template_file)

    @property
    def enabled(self) -> bool:
        return bool(self.template or self.template_file)

    def _load_source(self) -> tuple:
        """Return ``(name, source)`` of the template to render."""
        if self.template:
            return "formatComment", self.template

        path = Path(self.template_file)
        try:
            return path.name, path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateError(
                f"Failed to read template file {self.template_file}: {e}",
                template_name=path.name
            ) from e

    def format(self, text: str) -> str:
        """
        Render the comment text through the configured template.

        Args:
            text: Raw comment text

        Returns:
            Formatted comment with ANSI escape sequences removed

        Raises:
            TemplateError: If the template cannot be loaded, parsed or rendered
        """
        if not self.enabled:
            return text

        name, source = self._load_source()

        try:
            compiled = self._env.from_string(translate_go_dot(source))
            rendered = compiled.render({COMMENT_VARIABLE: text})
        except (jinja2.TemplateError, re.error, ValueError, TypeError) as e:
            raise TemplateError(f"Failed to render template {name}: {e}", template_name=name) from e

        self.logger.debug(
            "Formatted comment",
            extra={
                "template_name": name,
                "input_length": len(text),
                "output_length": len(rendered)
            }
        )

        return strip_ansi(rendered)
