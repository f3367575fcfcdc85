"""
Exception hierarchy shared by the generation engine.

Every error raised by classforge derives from ``GeneratorError`` so callers
can catch the whole family at once.
"""

from typing import Iterable, Optional


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class NotFoundError(GeneratorError, LookupError):
    """An element looked up by name does not exist."""

    def __init__(self, kind: str, name: str, message: Optional[str] = None):
        self.kind = kind
        self.name = name
        super().__init__(message or f'The {kind} "{name}" does not exist.')


class DefinitionNotFoundError(NotFoundError):
    """Raised by containers for unknown definition names."""

    def __init__(self, name: str):
        super().__init__("definition", name)


class OptionNotFoundError(NotFoundError):
    """Raised by extensions for unknown option names."""

    def __init__(self, name: str):
        super().__init__("option", name)


class ConfigurationError(GeneratorError):
    """Invalid extension setup or config input. Always fatal."""

    pass


class MissingOptionsError(ConfigurationError):
    """One or more required options were not given."""

    def __init__(self, owner: str, missing: Iterable[str]):
        self.owner = owner
        self.missing = list(missing)
        super().__init__(
            f'{owner} requires the options: "{", ".join(self.missing)}".'
        )


class CycleError(ConfigurationError):
    """Extension or config class expansion does not converge."""

    def __init__(self, message: str, path: Iterable[str] = ()):
        self.path = list(path)
        if self.path:
            message = f"{message} (path: {' -> '.join(self.path)})"
        super().__init__(message)


class LiteralError(GeneratorError, ValueError):
    """Text is not a literal the parser accepts."""

    def __init__(self, message: str, text: str = "", position: int = 0):
        self.text = text
        self.position = position
        super().__init__(message)


class EmissionError(GeneratorError, OSError):
    """Writing generated files failed."""

    pass
