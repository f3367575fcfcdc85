"""
Extension registry.

Maps short names to extension classes so that configuration files can
declare extensions as ``{"class": "skeleton", "options": {...}}``. Classes
can also be referenced by import path (``package.module:ClassName``).
"""

import importlib
from typing import Any, Dict, List, Mapping, Optional, Type, Union

from .core.errors import ConfigurationError
from .core.extension import ClassExtension, Extension


class RegistryError(ConfigurationError):
    """Exception raised for registry-related errors."""

    pass


class ExtensionRegistry:
    """Registry for managing available extensions."""

    def __init__(self):
        """Initialize empty registry."""
        self._extensions: Dict[str, Type[ClassExtension]] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        name: str,
        extension_class: Type[ClassExtension],
        aliases: Optional[List[str]] = None,
        replace: bool = False,
    ):
        """
        Register an extension class.

        Args:
            name: Primary name (e.g. 'skeleton')
            extension_class: Class deriving from ClassExtension
            aliases: Alternative names
            replace: If True, replace existing registration. If False, skip if exists.

        Raises:
            RegistryError: If the class is invalid or an alias conflicts
        """
        if not (
            isinstance(extension_class, type)
            and issubclass(extension_class, ClassExtension)
        ):
            raise RegistryError("Extension class must inherit from ClassExtension")

        key = name.lower()

        if key in self._extensions and not replace:
            return

        self._extensions[key] = extension_class

        for alias in aliases or []:
            alias_key = alias.lower()
            if alias_key == key:
                continue

            if not replace:
                if alias_key in self._extensions:
                    raise RegistryError(
                        f"Alias '{alias}' conflicts with an existing extension name"
                    )
                if alias_key in self._aliases and self._aliases[alias_key] != key:
                    raise RegistryError(
                        f"Alias '{alias}' already points to '{self._aliases[alias_key]}'"
                    )

            self._aliases[alias_key] = key

    def unregister(self, name: str):
        """Unregister an extension and its aliases."""
        key = name.lower()
        self._extensions.pop(key, None)
        for alias in [a for a, target in self._aliases.items() if target == key]:
            del self._aliases[alias]

    def is_registered(self, name: str) -> bool:
        key = name.lower()
        return key in self._extensions or key in self._aliases

    def list_extensions(self) -> List[str]:
        """List registered primary names."""
        return list(self._extensions)

    def get_aliases(self, name: str) -> List[str]:
        key = name.lower()
        return [alias for alias, target in self._aliases.items() if target == key]

    def get_extension_class(self, name: str) -> Type[ClassExtension]:
        """
        Resolve a registered name or an import path to an extension class.

        Raises:
            RegistryError: If nothing matches
        """
        key = name.lower()
        key = self._aliases.get(key, key)
        if key in self._extensions:
            return self._extensions[key]

        if ":" in name or "." in name:
            return self._import(name)

        available = ", ".join(self.list_extensions()) or "none"
        raise RegistryError(f"Unknown extension '{name}'. Available: {available}")

    def _import(self, path: str) -> Type[ClassExtension]:
        if ":" in path:
            module_name, _, attr = path.partition(":")
        else:
            module_name, _, attr = path.rpartition(".")

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise RegistryError(f"Cannot import extension module '{module_name}': {e}") from e

        extension_class = getattr(module, attr, None)
        if not (
            isinstance(extension_class, type)
            and issubclass(extension_class, ClassExtension)
        ):
            raise RegistryError(f"'{path}' is not a ClassExtension subclass")
        return extension_class

    def create(
        self,
        data: Union[str, Mapping[str, Any], ClassExtension],
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> ClassExtension:
        """
        Instantiate an extension from a declaration.

        Args:
            data: Extension instance, name/import path, or mapping with a
                ``class`` entry (class, name or import path) and optional
                ``options``
            defaults: Fallback option values, applied only to options the
                extension declares
        """
        if isinstance(data, ClassExtension):
            return data
        if isinstance(data, str):
            data = {"class": data}
        if not isinstance(data, Mapping) or not data.get("class"):
            raise RegistryError("The extension does not have class.")

        extension_class = data["class"]
        if isinstance(extension_class, str):
            extension_class = self.get_extension_class(extension_class)
        elif not (
            isinstance(extension_class, type)
            and issubclass(extension_class, ClassExtension)
        ):
            raise RegistryError(f"{extension_class!r} is not a ClassExtension subclass")

        return extension_class(data.get("options") or {}, defaults=defaults)

    def get_extension_info(self, name: str) -> Dict[str, Any]:
        """Describe a registered extension."""
        extension_class = self.get_extension_class(name)
        key = self._aliases.get(name.lower(), name.lower())
        doc = (extension_class.__doc__ or "").strip().splitlines()
        return {
            "name": key,
            "class": extension_class.__name__,
            "module": extension_class.__module__,
            "kind": "global" if issubclass(extension_class, Extension) else "class",
            "aliases": self.get_aliases(key),
            "description": doc[0] if doc else "",
        }


# Global registry instance - created once
_global_registry: Optional[ExtensionRegistry] = None


def get_registry() -> ExtensionRegistry:
    """Get the global extension registry, initializing if needed."""
    global _global_registry
    if _global_registry is None:
        _global_registry = ExtensionRegistry()
        _auto_register_extensions(_global_registry)
    return _global_registry


def _auto_register_extensions(registry: ExtensionRegistry):
    """Register the built-in extensions."""
    from .extensions import SkeletonExtension, TemplateMembersExtension

    registry.register("skeleton", SkeletonExtension)
    registry.register(
        "template_members", TemplateMembersExtension, aliases=["template-members"]
    )


def register_extension(
    name: str,
    extension_class: Type[ClassExtension],
    aliases: Optional[List[str]] = None,
):
    """Register an extension in the global registry."""
    get_registry().register(name, extension_class, aliases)


def create_extension(
    data: Union[str, Mapping[str, Any]], defaults: Optional[Mapping[str, Any]] = None
) -> ClassExtension:
    """Instantiate an extension declaration using the global registry."""
    return get_registry().create(data, defaults)


def list_extensions() -> List[str]:
    """List all extensions in the global registry."""
    return get_registry().list_extensions()
