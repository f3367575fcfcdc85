"""
classforge

Configuration-driven class generator: extensions turn config classes into
class definitions, which are dumped to source files.
"""

__version__ = "0.1.0"

from .core import (
    ClassExtension,
    ConfigurationError,
    Constant,
    Container,
    CycleError,
    Definition,
    Dumper,
    EmissionError,
    Emitter,
    Extension,
    GeneratorConfig,
    GeneratorError,
    HookContext,
    LiteralError,
    MemberExtractor,
    Method,
    NotFoundError,
    Output,
    Phase,
    Pipeline,
    Property,
    TemplateError,
    load_config,
    load_config_classes,
)
from .registry import ExtensionRegistry, create_extension, get_registry, register_extension


def generate(config_classes, extensions, max_depth=64):
    """
    Run the pipeline and return the containers without writing anything.

    Args:
        config_classes: Mapping of type name -> settings
        extensions: Global extensions (instances or declarations)

    Returns:
        Dict of unit name -> Container
    """
    extensions = [create_extension(extension) for extension in extensions]
    return Pipeline(extensions, config_classes, max_depth).generate_containers()


__all__ = [
    "ClassExtension",
    "ConfigurationError",
    "Constant",
    "Container",
    "CycleError",
    "Definition",
    "Dumper",
    "EmissionError",
    "Emitter",
    "Extension",
    "ExtensionRegistry",
    "GeneratorConfig",
    "GeneratorError",
    "HookContext",
    "LiteralError",
    "MemberExtractor",
    "Method",
    "NotFoundError",
    "Output",
    "Phase",
    "Pipeline",
    "Property",
    "TemplateError",
    "create_extension",
    "generate",
    "get_registry",
    "load_config",
    "load_config_classes",
    "register_extension",
]
