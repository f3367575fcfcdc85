"""
Skeleton extension: one class per config class.

Understands these config class keys:

    extends       parent type name
    implements    interface name or list of names
    abstract      bool
    final         bool
    doc           class doc text
    constants     {NAME: value}
    properties    {name: value} or {name: {value, visibility, static, doc}}
    methods       {name: {arguments, code, visibility, static, final,
                          abstract, doc}}
    embedded      {ClassName: config class}; added as new config classes
    templates     template source(s) whose members are added to the class
"""

from typing import Any, Dict, Mapping, Optional

from ..core.definition import (
    NAMESPACE_SEPARATOR,
    Constant,
    Definition,
    Method,
    Output,
    Property,
)
from ..core.errors import ConfigurationError
from ..core.extension import Extension, HookContext
from ..logging_config import get_logger
from .template_members import TemplateMembersExtension

logger = get_logger(__name__)

CLASS_NAME_SEPARATORS = ("::", ".", "/")


def doc_comment(text: str, indent: str = "") -> str:
    """Wrap ``text`` in a ``/** ... */`` block, unless it already is one."""
    if text.lstrip().startswith("/**"):
        return text
    lines = [f"{indent}/**"]
    lines.extend(f"{indent} * {line}".rstrip() for line in text.strip().splitlines())
    lines.append(f"{indent} */")
    return "\n".join(lines)


class SkeletonExtension(Extension):
    """Creates a class definition for every config class."""

    def setup(self):
        self.add_required_option("output_dir")
        self.add_options(
            {
                "overwrite": False,
                "namespace": None,
                "index_class": None,
                "template_dir": None,
            }
        )

    # Expansion

    def new_class_extensions(self, ctx: HookContext):
        templates = ctx.config_class.get("templates")
        if not templates:
            return None
        return [
            TemplateMembersExtension(
                {"templates": templates, "template_dir": self.get_option("template_dir")}
            )
        ]

    def new_config_classes(self, ctx: HookContext):
        embedded = _mapping(ctx, "embedded")
        for name, config_class in embedded.items():
            if not isinstance(config_class, Mapping):
                raise ConfigurationError(
                    f'The embedded class "{name}" of the config class '
                    f'"{ctx.class_name}" must be a mapping.'
                )
        return dict(embedded)

    def config_class_process(self, ctx: HookContext):
        config_class = ctx.config_class

        implements = config_class.get("implements")
        if isinstance(implements, str):
            config_class["implements"] = [implements]

        properties = _mapping(ctx, "properties")
        _mapping(ctx, "constants")
        for name, spec in _mapping(ctx, "methods").items():
            if spec is not None and not isinstance(spec, Mapping):
                raise ConfigurationError(
                    f'The method "{name}" of the config class "{ctx.class_name}" '
                    f"must be a mapping."
                )
        config_class["properties"] = {
            name: spec if isinstance(spec, Mapping) else {"value": spec}
            for name, spec in properties.items()
        }

    # Generation

    def class_process(self, ctx: HookContext):
        config_class = ctx.config_class
        definition = Definition(self.type_name(ctx.class_name), self._output())

        definition.set_parent(config_class.get("extends"))
        definition.set_interfaces(config_class.get("implements") or [])
        definition.abstract = bool(config_class.get("abstract", False))
        definition.final = bool(config_class.get("final", False))
        if config_class.get("doc"):
            definition.doc_comment = doc_comment(config_class["doc"])

        for name, value in (config_class.get("constants") or {}).items():
            definition.add_constant(Constant(name, value))

        for name, spec in config_class["properties"].items():
            definition.add_property(self._property(name, spec))

        for name, spec in (config_class.get("methods") or {}).items():
            definition.add_method(self._method(name, spec))

        ctx.container.set(ctx.class_name, definition)
        logger.debug("Created definition %s", definition.name)

    def post_global_process(self, ctx: HookContext):
        index_class = self.get_option("index_class")
        if not index_class:
            return

        definition = Definition(self.type_name(index_class), self._output())
        definition.final = True
        definition.doc_comment = doc_comment("Index of the generated classes.")
        definition.add_constant(
            Constant("CLASSES", [self.type_name(name) for name in ctx.config_classes])
        )
        ctx.container.set(index_class, definition)

    # Helpers

    def type_name(self, class_name: str) -> str:
        """Fully qualified type name for a config class name."""
        name = class_name
        for separator in CLASS_NAME_SEPARATORS:
            name = name.replace(separator, NAMESPACE_SEPARATOR)
        namespace = self.get_option("namespace")
        if namespace:
            name = namespace.rstrip(NAMESPACE_SEPARATOR) + NAMESPACE_SEPARATOR + name
        return name

    def _output(self) -> Output:
        return Output(self.get_option("output_dir"), self.get_option("overwrite"))

    def _property(self, name: str, spec: Mapping[str, Any]) -> Property:
        doc = spec.get("doc")
        return Property(
            spec.get("visibility", "protected"),
            name,
            spec.get("value"),
            static=bool(spec.get("static", False)),
            doc_comment=doc_comment(doc, "    ") if doc else None,
        )

    def _method(self, name: str, spec: Optional[Mapping[str, Any]]) -> Method:
        spec: Dict[str, Any] = dict(spec or {})
        doc = spec.get("doc")
        return Method(
            spec.get("visibility", "public"),
            name,
            spec.get("arguments", ""),
            spec.get("code", ""),
            final=bool(spec.get("final", False)),
            static=bool(spec.get("static", False)),
            abstract=bool(spec.get("abstract", False)),
            doc_comment=doc_comment(doc, "    ") if doc else None,
        )


def _mapping(ctx: HookContext, key: str) -> Mapping[str, Any]:
    """The ``key`` entry of the config class; absent or empty gives ``{}``."""
    value = ctx.config_class.get(key) or {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(
            f'The "{key}" key of the config class "{ctx.class_name}" must be a '
            f"mapping, got {type(value).__name__}."
        )
    return value
