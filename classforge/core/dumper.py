"""
Definition serializer.

Turns a ``Definition`` into the source text of a class. The layout is fixed
so that regenerating unchanged definitions yields byte-identical files.
"""

from typing import Optional

from .definition import NAMESPACE_SEPARATOR, Definition, Method, Property
from .literals import export_array, export_value

DEFAULT_HEADER = "<?php\n"

INDENT = "    "


class Dumper:
    """Renders one definition as source text."""

    def __init__(
        self,
        definition: Optional[Definition] = None,
        header: str = DEFAULT_HEADER,
        type_keyword: str = "class",
    ):
        self.definition = definition
        self.header = header
        self.type_keyword = type_keyword

    def dump(self, definition: Optional[Definition] = None) -> str:
        """
        Dump a definition.

        Args:
            definition: Definition to render; defaults to the one given at
                construction.

        Returns:
            The complete file content.
        """
        definition = definition or self.definition
        if definition is None:
            raise ValueError("No definition to dump")

        return (
            self.header
            + self._namespace(definition)
            + self._start_class(definition)
            + self._constants(definition)
            + self._properties(definition)
            + self._methods(definition)
            + self._end_class(definition)
        )

    def _namespace(self, definition: Definition) -> str:
        if not definition.namespace:
            return ""
        return f"\nnamespace {definition.namespace};\n"

    def _start_class(self, definition: Definition) -> str:
        code = "\n"
        if definition.doc_comment:
            code += definition.doc_comment + "\n"

        declaration = ""
        if definition.abstract:
            declaration += "abstract "
        declaration += f"{self.type_keyword} {definition.short_name}"
        if definition.parent:
            declaration += " extends " + NAMESPACE_SEPARATOR + definition.parent.lstrip(
                NAMESPACE_SEPARATOR
            )
        if definition.interfaces:
            declaration += " implements " + ", ".join(definition.interfaces)

        return code + declaration + "\n{"

    def _constants(self, definition: Definition) -> str:
        if not definition.constants:
            return ""
        code = ""
        for constant in definition.constants:
            code += f"\n{INDENT}const {constant.name} = {export_value(constant.value, 8)};"
        return code + "\n"

    def _properties(self, definition: Definition) -> str:
        code = ""
        for property in definition.properties:
            code += "\n"
            if property.doc_comment:
                code += property.doc_comment + "\n"
            code += self._property(property)
        if definition.properties:
            code += "\n"
        return code

    def _property(self, property: Property) -> str:
        static = "static " if property.static else ""
        declaration = f"{INDENT}{static}{property.visibility} ${property.name}"
        if property.value is None:
            return declaration + ";"
        if isinstance(property.value, (dict, list, tuple)):
            value = export_array(_as_mapping(property.value), 8)
        else:
            value = export_value(property.value)
        return f"{declaration} = {value};"

    def _methods(self, definition: Definition) -> str:
        code = ""
        for method in definition.methods:
            code += "\n"
            if method.doc_comment:
                code += method.doc_comment + "\n"
            code += self._method(method) + "\n"
        return code

    def _method(self, method: Method) -> str:
        static = "static " if method.static else ""
        signature = f"{method.visibility} function {method.name}({method.arguments})"
        if method.abstract:
            return f"{INDENT}abstract {static}{signature};"

        final = "final " if method.final else ""
        code = method.code.strip()
        if code:
            code = f"{INDENT}{code}\n{INDENT}"
        return f"{INDENT}{final}{static}{signature}\n{INDENT}{{\n{INDENT}{code}}}"

    def _end_class(self, definition: Definition) -> str:
        code = ""
        if not definition.properties and not definition.methods:
            # blank line before the brace; an empty body also needs its
            # opening line terminated
            code += "\n" if definition.constants else "\n\n"
        return code + "}"


def _as_mapping(value):
    if isinstance(value, dict):
        return value
    return dict(enumerate(value))


def dump_definition(definition: Definition, header: str = DEFAULT_HEADER) -> str:
    """Convenience wrapper around ``Dumper``."""
    return Dumper(header=header).dump(definition)
