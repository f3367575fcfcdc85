"""
In-memory model of a type to be emitted.

A ``Definition`` collects the pieces the dumper needs (inheritance, flags,
doc comment, constants, properties and methods). Extensions create and
populate definitions during the class phase; the engine itself never
interprets them.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from .errors import NotFoundError

NAMESPACE_SEPARATOR = "\\"

VISIBILITIES = ("public", "protected", "private")


def _check_visibility(visibility: str) -> str:
    if visibility not in VISIBILITIES:
        raise ValueError(
            f"Invalid visibility '{visibility}', expected one of: {', '.join(VISIBILITIES)}"
        )
    return visibility


@dataclass(frozen=True)
class Constant:
    """A class constant: a name bound to a literal value."""

    name: str
    value: Any


@dataclass
class Property:
    """A class property with an optional default value."""

    visibility: str
    name: str
    value: Any = None
    static: bool = False
    doc_comment: Optional[str] = None

    def __post_init__(self):
        _check_visibility(self.visibility)


@dataclass
class Method:
    """A class method.

    ``arguments`` is the parameter list exactly as it should appear between
    the parentheses. ``code`` is ignored when the method is abstract.
    """

    visibility: str
    name: str
    arguments: str = ""
    code: str = ""
    final: bool = False
    static: bool = False
    abstract: bool = False
    doc_comment: Optional[str] = None

    def __post_init__(self):
        _check_visibility(self.visibility)


@dataclass
class Output:
    """Where a definition is written and whether existing files are replaced."""

    dir: Union[str, Path]
    overwrite: bool = False

    def __post_init__(self):
        self.dir = Path(self.dir)
        self.overwrite = bool(self.overwrite)


class Definition:
    """Descriptor of one emitted type.

    Members are kept in insertion order. Names are not required to be
    unique; lookups and removals by name act on the first match.
    """

    def __init__(self, name: str, output: Optional[Output] = None):
        self.name = name
        self.output = output
        self.parent: Optional[str] = None
        self.interfaces: List[str] = []
        self.final = False
        self.abstract = False
        self.doc_comment: Optional[str] = None
        self.constants: List[Constant] = []
        self.properties: List[Property] = []
        self.methods: List[Method] = []

    def __repr__(self) -> str:
        return (
            f"Definition({self.name!r}, constants={len(self.constants)}, "
            f"properties={len(self.properties)}, methods={len(self.methods)})"
        )

    # Naming

    @property
    def namespace(self) -> Optional[str]:
        """Everything before the last namespace separator, if any."""
        namespace, sep, _ = self.name.rpartition(NAMESPACE_SEPARATOR)
        return namespace if sep else None

    @property
    def short_name(self) -> str:
        """The type name without its namespace."""
        return self.name.rpartition(NAMESPACE_SEPARATOR)[2]

    # Inheritance

    def set_parent(self, parent: Optional[str]):
        self.parent = parent

    def add_interface(self, interface: str):
        self.interfaces.append(interface)

    def set_interfaces(self, interfaces: Iterable[str]):
        self.interfaces = []
        for interface in interfaces:
            self.add_interface(interface)

    # Constants

    def add_constant(self, constant: Constant):
        self.constants.append(constant)

    def set_constants(self, constants: Iterable[Constant]):
        self.constants = []
        for constant in constants:
            self.add_constant(constant)

    def has_constant(self, name: str) -> bool:
        return any(constant.name == name for constant in self.constants)

    def get_constant(self, name: str) -> Constant:
        return self.constants[self._index_of(self.constants, "constant", name)]

    def remove_constant(self, name: str):
        del self.constants[self._index_of(self.constants, "constant", name)]

    # Properties

    def add_property(self, property: Property):
        self.properties.append(property)

    def set_properties(self, properties: Iterable[Property]):
        self.properties = []
        for property in properties:
            self.add_property(property)

    def has_property(self, name: str) -> bool:
        return any(property.name == name for property in self.properties)

    def get_property(self, name: str) -> Property:
        return self.properties[self._index_of(self.properties, "property", name)]

    def remove_property(self, name: str):
        del self.properties[self._index_of(self.properties, "property", name)]

    # Methods

    def add_method(self, method: Method):
        self.methods.append(method)

    def set_methods(self, methods: Iterable[Method]):
        self.methods = []
        for method in methods:
            self.add_method(method)

    def has_method(self, name: str) -> bool:
        return any(method.name == name for method in self.methods)

    def get_method(self, name: str) -> Method:
        return self.methods[self._index_of(self.methods, "method", name)]

    def remove_method(self, name: str):
        del self.methods[self._index_of(self.methods, "method", name)]

    @staticmethod
    def _index_of(members: list, kind: str, name: str) -> int:
        for index, member in enumerate(members):
            if member.name == name:
                return index
        raise NotFoundError(kind, name)
