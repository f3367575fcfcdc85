"""
Template engine wrapper for code generation.

Provides a small interface over Jinja2 tuned for emitting source text:
no autoescaping, undefined variables are errors, and compiled templates
are cached in a private temporary directory that ``close`` removes.
"""

import hashlib
import re
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemBytecodeCache,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
)
from jinja2.exceptions import TemplateError as JinjaTemplateError

from ..logging_config import get_logger
from .errors import GeneratorError
from .literals import export_value

logger = get_logger(__name__)

_INLINE_PREFIX = "__inline__/"


class TemplateError(GeneratorError):
    """Exception raised for template-related errors."""

    pass


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(self, template_dir: Optional[Path] = None):
        """
        Initialize template engine.

        The environment, and with it the cache directory, is created on
        first use.

        Args:
            template_dir: Directory containing template files
        """
        self.template_dir = Path(template_dir) if template_dir else None
        self._templates: Dict[str, str] = {}
        self._env: Optional[Environment] = None
        self._cache_dir: Optional[Path] = None

    @property
    def environment(self) -> Environment:
        """The Jinja2 environment, created lazily."""
        if self._env is None:
            self._setup_environment()
        return self._env

    @property
    def cache_dir(self) -> Optional[Path]:
        """Bytecode cache directory, or None while not acquired."""
        return self._cache_dir

    def _setup_environment(self):
        """Setup Jinja2 environment with code generation utilities."""
        loaders = [DictLoader(self._templates)]
        if self.template_dir and self.template_dir.exists():
            loaders.append(FileSystemLoader(str(self.template_dir)))

        self._cache_dir = Path(tempfile.mkdtemp(prefix="classforge_"))
        logger.debug("Template cache directory created: %s", self._cache_dir)

        self._env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            bytecode_cache=FileSystemBytecodeCache(str(self._cache_dir)),
        )

        # Add custom filters for code generation
        self._env.filters["snake_case"] = self._snake_case_filter
        self._env.filters["camel_case"] = self._camel_case_filter
        self._env.filters["pascal_case"] = self._pascal_case_filter
        self._env.filters["indent"] = self._indent_filter
        self._env.filters["comment"] = self._comment_filter
        self._env.filters["export"] = export_value

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a named template with the given context.

        Args:
            template_name: Name of an in-memory template or template file
            context: Variables to pass to template

        Returns:
            Rendered template content
        """
        try:
            template = self.environment.get_template(template_name)
            return template.render(**context)
        except JinjaTemplateError as e:
            raise TemplateError(
                f"Failed to render template {template_name}: {e}"
            ) from e

    def render_string(self, template_string: str, context: Dict[str, Any]) -> str:
        """
        Render a template string with the given context.

        The string is registered under a content-derived name so its
        compiled form goes through the bytecode cache.

        Args:
            template_string: Template content as string
            context: Variables to pass to template

        Returns:
            Rendered content
        """
        digest = hashlib.sha1(template_string.encode("utf-8")).hexdigest()
        name = _INLINE_PREFIX + digest
        self._templates.setdefault(name, template_string)
        try:
            return self.environment.get_template(name).render(**context)
        except JinjaTemplateError as e:
            raise TemplateError(f"Failed to render template string: {e}") from e

    def render(self, template_string: str, variables: Dict[str, Any]) -> str:
        """Render capability used by the member extractor."""
        return self.render_string(template_string, variables)

    def add_template(self, name: str, content: str):
        """
        Add an in-memory template.

        Args:
            name: Template name
            content: Template content
        """
        self._templates[name] = content

    def template_exists(self, template_name: str) -> bool:
        """Check if a template exists."""
        try:
            self.environment.get_template(template_name)
        except TemplateNotFound:
            return False
        return True

    def close(self):
        """Drop the environment and remove the cache directory, if any."""
        cache_dir, self._cache_dir = self._cache_dir, None
        self._env = None
        if cache_dir is not None and cache_dir.exists():
            shutil.rmtree(cache_dir)
            logger.debug("Template cache directory removed: %s", cache_dir)

    def __enter__(self) -> "TemplateEngine":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # Template filters for code generation

    def _snake_case_filter(self, value: str) -> str:
        """Convert string to snake_case."""
        # Insert underscore before uppercase letters
        s1 = re.sub("([a-z0-9])([A-Z])", r"\1_\2", str(value))
        # Replace spaces and hyphens with underscores
        s2 = re.sub(r"[-\s]+", "_", s1)
        return s2.lower()

    def _camel_case_filter(self, value: str) -> str:
        """Convert string to camelCase."""
        snake = self._snake_case_filter(value)
        parts = snake.split("_")
        if not parts:
            return str(value)
        return parts[0].lower() + "".join(p.capitalize() for p in parts[1:])

    def _pascal_case_filter(self, value: str) -> str:
        """Convert string to PascalCase."""
        snake = self._snake_case_filter(value)
        parts = snake.split("_")
        return "".join(p.capitalize() for p in parts if p)

    def _indent_filter(self, value: str, spaces: int = 4) -> str:
        """Indent all lines in a string."""
        indent = " " * spaces
        lines = str(value).split("\n")
        return "\n".join(indent + line if line.strip() else line for line in lines)

    def _comment_filter(self, value: str, style: str = "//") -> str:
        """Add comment markers to each line."""
        lines = str(value).split("\n")
        return "\n".join(f"{style} {line}" if line.strip() else line for line in lines)


def create_template_engine(template_dir: Optional[Path] = None) -> TemplateEngine:
    """Create a template engine, optionally backed by a template directory."""
    return TemplateEngine(template_dir)
