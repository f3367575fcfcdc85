"""
Pluggable units of the generation pipeline.

``ClassExtension`` works on one config class at a time; ``Extension`` is a
global unit that additionally runs before and after the class phase. Every
hook is a no-op by default, so a concrete extension only overrides the
hooks it needs. Hooks receive a ``HookContext`` describing the call; no
per-call state is ever stored on the extension itself.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Sequence,
    TYPE_CHECKING,
)

from ..logging_config import get_logger
from .container import Container
from .definition import Definition
from .errors import ConfigurationError, MissingOptionsError, OptionNotFoundError
from .extractor import MemberExtractor
from .templates import TemplateEngine, create_template_engine

if TYPE_CHECKING:
    from jinja2 import Environment

logger = get_logger(__name__)

ConfigClass = MutableMapping[str, Any]
ConfigClasses = Mapping[str, ConfigClass]


class Phase(Enum):
    """Pipeline phases, in execution order."""

    NEW_CLASS_EXTENSIONS = "new_class_extensions"
    NEW_CONFIG_CLASSES = "new_config_classes"
    CONFIG_CLASS = "config_class"
    PRE_GLOBAL = "pre_global"
    CLASS = "class"
    POST_GLOBAL = "post_global"


@dataclass(frozen=True)
class HookContext:
    """Everything a hook may look at during one invocation.

    ``class_name`` and ``config_class`` are None for the global phases;
    ``chain`` is only set while class extensions are being expanded and
    ``container`` only for the class and global phases.
    """

    phase: Phase
    config_classes: ConfigClasses
    class_name: Optional[str] = None
    config_class: Optional[ConfigClass] = None
    chain: Optional[Sequence["ClassExtension"]] = None
    container: Optional[Container] = None


class ClassExtension:
    """Base class for class extensions."""

    def __init__(
        self,
        options: Optional[Mapping[str, Any]] = None,
        defaults: Optional[Mapping[str, Any]] = None,
    ):
        """
        Initialize extension with options.

        Args:
            options: Option values by name. Every name must have been
                declared in ``setup``; every required option must be given.
            defaults: Fallback values for declared options missing from
                ``options``. Names the extension does not declare are ignored.

        Raises:
            OptionNotFoundError: For an undeclared option name.
            MissingOptionsError: Listing all required options not given.
        """
        self._options: Dict[str, Any] = {}
        self._required_options: List[str] = []
        self._template_engine: Optional[TemplateEngine] = None

        self.setup()

        options = dict(options or {})
        for name, value in (defaults or {}).items():
            if name not in options and self.has_option(name):
                options[name] = value
        for name, value in options.items():
            self.set_option(name, value)

        missing = [name for name in self._required_options if name not in options]
        if missing:
            raise MissingOptionsError(type(self).__name__, missing)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def setup(self):
        """Declare options. Override in subclasses."""
        pass

    # Options

    def has_option(self, name: str) -> bool:
        return name in self._options

    def set_option(self, name: str, value: Any):
        if not self.has_option(name):
            raise OptionNotFoundError(name)
        self._options[name] = value

    def get_option(self, name: str) -> Any:
        if not self.has_option(name):
            raise OptionNotFoundError(name)
        return self._options[name]

    @property
    def options(self) -> Dict[str, Any]:
        return dict(self._options)

    def add_option(self, name: str, default: Any = None):
        self._options[name] = default

    def add_options(self, options: Mapping[str, Any]):
        for name, default in options.items():
            self.add_option(name, default)

    def add_required_option(self, name: str):
        self.add_option(name)
        self._required_options.append(name)

    def add_required_options(self, names: Iterable[str]):
        for name in names:
            self.add_required_option(name)

    # Hooks

    def new_class_extensions(
        self, ctx: HookContext
    ) -> Optional[Iterable["ClassExtension"]]:
        """Propose further class extensions for ``ctx.class_name``."""
        return None

    def new_config_classes(
        self, ctx: HookContext
    ) -> Optional[Mapping[str, Mapping[str, Any]]]:
        """Propose further config classes, by name."""
        return None

    def config_class_process(self, ctx: HookContext):
        """Modify ``ctx.config_class`` in place."""
        pass

    def class_process(self, ctx: HookContext):
        """Add definitions for ``ctx.class_name`` to ``ctx.container``."""
        pass

    # Templates

    def get_template_directory(self) -> Optional[Path]:
        """
        Return the directory containing templates for this extension.

        Return None to use in-memory templates only.
        """
        return None

    @property
    def template_engine(self) -> TemplateEngine:
        """Template engine of this extension, created on first use."""
        if self._template_engine is None:
            self._template_engine = create_template_engine(
                self.get_template_directory()
            )
            self.configure_template_engine(self._template_engine.environment)
        return self._template_engine

    def configure_template_engine(self, environment: "Environment"):
        """Add filters or globals to the Jinja2 environment."""
        pass

    def template_variables(self, ctx: HookContext) -> Dict[str, Any]:
        """Variables every template of this extension can use."""
        return {
            "extension": self,
            "options": self.options,
            "class": ctx.class_name,
            "class_name": ctx.class_name,
            "config_class": ctx.config_class,
            "config_classes": ctx.config_classes,
        }

    def process_template(
        self,
        definition: Definition,
        template: str,
        ctx: HookContext,
        variables: Optional[Mapping[str, Any]] = None,
    ):
        """
        Render ``template`` and add the members it declares to ``definition``.

        Args:
            definition: Definition receiving properties and methods
            template: Template source text
            ctx: Context of the running hook
            variables: Extra template variables
        """
        context = dict(variables or {})
        context.update(self.template_variables(ctx))
        extractor = MemberExtractor(self.template_engine.render)
        extractor.extract(definition, template, context)

    def close(self):
        """Release the template cache. Safe to call more than once."""
        if self._template_engine is not None:
            self._template_engine.close()
            self._template_engine = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # Helpers

    def create_class_extension(self, data: Mapping[str, Any]) -> "ClassExtension":
        """
        Build a class extension from a declaration.

        Args:
            data: ``{"class": ..., "options": {...}}`` where ``class`` is a
                class, a ``module:Class`` path or a registered name.
        """
        from ..registry import get_registry

        extension = get_registry().create(data)
        if not isinstance(extension, ClassExtension) or isinstance(
            extension, Extension
        ):
            raise ConfigurationError(
                f"{type(extension).__name__} is not a class extension"
            )
        return extension


class Extension(ClassExtension):
    """Base class for global extensions."""

    def pre_global_process(self, ctx: HookContext):
        """Runs once, before the class phase, with the global container."""
        pass

    def post_global_process(self, ctx: HookContext):
        """Runs once, after the class phase, with the global container."""
        pass
