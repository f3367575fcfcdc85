"""
Core generation components.

Definition model, containers, extensions, the pipeline that runs them and
the dumper/emitter that turn definitions into files.
"""

from .errors import (
    ConfigurationError,
    CycleError,
    DefinitionNotFoundError,
    EmissionError,
    GeneratorError,
    LiteralError,
    MissingOptionsError,
    NotFoundError,
    OptionNotFoundError,
)
from .definition import Constant, Definition, Method, Output, Property
from .container import Container
from .literals import export_value, parse_literal
from .templates import TemplateEngine, TemplateError, create_template_engine
from .extractor import MemberExtractor
from .extension import ClassExtension, Extension, HookContext, Phase
from .dumper import Dumper, dump_definition
from .emitter import EmissionReport, Emitter, LocalFileSystem
from .pipeline import GLOBAL, Pipeline
from .config import (
    ConfigError,
    ConfigManager,
    GeneratorConfig,
    load_config,
    load_config_classes,
)

__all__ = [
    # Errors
    "ConfigurationError",
    "ConfigError",
    "CycleError",
    "DefinitionNotFoundError",
    "EmissionError",
    "GeneratorError",
    "LiteralError",
    "MissingOptionsError",
    "NotFoundError",
    "OptionNotFoundError",
    "TemplateError",
    # Definition model
    "Constant",
    "Container",
    "Definition",
    "Method",
    "Output",
    "Property",
    # Literals and templates
    "export_value",
    "parse_literal",
    "TemplateEngine",
    "create_template_engine",
    "MemberExtractor",
    # Extensions and pipeline
    "ClassExtension",
    "Extension",
    "HookContext",
    "Phase",
    "GLOBAL",
    "Pipeline",
    # Output
    "Dumper",
    "dump_definition",
    "EmissionReport",
    "Emitter",
    "LocalFileSystem",
    # Configuration
    "ConfigManager",
    "GeneratorConfig",
    "load_config",
    "load_config_classes",
]
