"""
Named collection of definitions for one generation unit.
"""

from typing import Dict, Iterator, List, Tuple

from .definition import Definition
from .errors import DefinitionNotFoundError


class Container:
    """Plain name -> Definition store that iterates in insertion order."""

    def __init__(self):
        self._definitions: Dict[str, Definition] = {}

    def exists(self, name: str) -> bool:
        return name in self._definitions

    def set(self, name: str, definition: Definition):
        if not isinstance(definition, Definition):
            raise TypeError(
                f"Container entries must be Definition instances, got {type(definition).__name__}"
            )
        self._definitions[name] = definition

    def get(self, name: str) -> Definition:
        if name not in self._definitions:
            raise DefinitionNotFoundError(name)
        return self._definitions[name]

    def remove(self, name: str):
        if name not in self._definitions:
            raise DefinitionNotFoundError(name)
        del self._definitions[name]

    def clear(self):
        self._definitions.clear()

    def all(self) -> List[Tuple[str, Definition]]:
        return list(self._definitions.items())

    def size(self) -> int:
        return len(self._definitions)

    # Mapping-style access

    def __contains__(self, name: str) -> bool:
        return self.exists(name)

    def __getitem__(self, name: str) -> Definition:
        return self.get(name)

    def __setitem__(self, name: str, definition: Definition):
        self.set(name, definition)

    def __delitem__(self, name: str):
        self.remove(name)

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._definitions))

    def __repr__(self) -> str:
        return f"Container({list(self._definitions)!r})"
