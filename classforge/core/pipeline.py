"""
Generation pipeline.

Drives extensions over the config classes and collects the resulting
definitions into one container per config class plus a global one:

1. every config class gets a chain of class extensions, starting with the
   global extensions and grown depth-first with the extensions they
   propose;
2. the class extensions of each chain may propose further config classes,
   which are appended to the config class set; after every such call all
   config classes without a chain yet are expanded, in set order;
3. class extensions may then modify their config class;
4. global extensions run their pre-global hook on the global container;
5. class extensions fill a fresh container for their config class;
6. global extensions run their post-global hook.

Both expansions are driven by explicit worklists and stop with
``CycleError`` when a unit proposes one it descends from or when nesting
gets deeper than ``max_depth``.
"""

import copy
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from ..logging_config import get_logger
from .container import Container
from .emitter import EmissionReport, Emitter
from .errors import ConfigurationError, CycleError, NotFoundError
from .extension import ClassExtension, Extension, HookContext, Phase

logger = get_logger(__name__)

GLOBAL = "global"

DEFAULT_MAX_DEPTH = 64

_DONE = object()


class Pipeline:
    """Runs extensions over config classes and emits the definitions."""

    def __init__(
        self,
        extensions: Optional[Iterable[Extension]] = None,
        config_classes: Optional[Mapping[str, Mapping[str, Any]]] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        emitter: Optional[Emitter] = None,
    ):
        if max_depth < 1:
            raise ConfigurationError(f"max_depth must be at least 1, got {max_depth}")
        self.max_depth = max_depth
        self.emitter = emitter or Emitter()
        self._extensions: List[Extension] = []
        self._config_classes: Dict[str, Dict[str, Any]] = {}
        if extensions is not None:
            self.set_extensions(extensions)
        if config_classes is not None:
            self.set_config_classes(config_classes)

    # Config classes

    def set_config_class(self, name: str, config_class: Mapping[str, Any]):
        _check_class_name(name)
        self._config_classes[name] = dict(config_class)

    def set_config_classes(self, config_classes: Mapping[str, Mapping[str, Any]]):
        self._config_classes = {}
        for name, config_class in config_classes.items():
            self.set_config_class(name, config_class)

    def has_config_class(self, name: str) -> bool:
        return name in self._config_classes

    def get_config_class(self, name: str) -> Dict[str, Any]:
        if name not in self._config_classes:
            raise NotFoundError("config class", name)
        return self._config_classes[name]

    @property
    def config_classes(self) -> Dict[str, Dict[str, Any]]:
        return dict(self._config_classes)

    # Extensions

    def add_extension(self, extension: Extension):
        if not isinstance(extension, Extension):
            raise ConfigurationError(
                f"{type(extension).__name__} is not an Extension and cannot be used globally"
            )
        self._extensions.append(extension)

    def set_extensions(self, extensions: Iterable[Extension]):
        self._extensions = []
        for extension in extensions:
            self.add_extension(extension)

    @property
    def extensions(self) -> List[Extension]:
        return list(self._extensions)

    # Running

    def run(
        self,
        config_classes: Optional[Mapping[str, Mapping[str, Any]]] = None,
        extensions: Optional[Iterable[Extension]] = None,
    ) -> Dict[str, Container]:
        """Generate the containers, optionally replacing inputs first."""
        if config_classes is not None:
            self.set_config_classes(config_classes)
        if extensions is not None:
            self.set_extensions(extensions)
        return self.generate_containers()

    def process(self) -> EmissionReport:
        """Generate the containers and write every definition."""
        return self.dump_containers(self.generate_containers())

    def dump_containers(self, containers: Mapping[str, Container]) -> EmissionReport:
        return self.emitter.emit(containers)

    def generate_containers(self) -> Dict[str, Container]:
        """
        Run all phases and return the containers.

        Returns:
            ``"global"`` first, then one container per config class in
            expansion order.
        """
        extensions = list(self._extensions)
        config_classes = copy.deepcopy(self._config_classes)
        chains: Dict[str, List[ClassExtension]] = {}

        try:
            logger.info(
                "Expanding %d config classes with %d extensions",
                len(config_classes),
                len(extensions),
            )
            self._expand_config_classes(extensions, chains, config_classes)

            logger.info("Config class phase (%d classes)", len(chains))
            for name, chain in chains.items():
                for extension in chain:
                    ctx = HookContext(
                        Phase.CONFIG_CLASS,
                        config_classes,
                        class_name=name,
                        config_class=config_classes[name],
                    )
                    self._call(extension, "config_class_process", ctx)

            frozen = MappingProxyType(
                {name: MappingProxyType(config_classes[name]) for name in chains}
            )
            global_container = Container()
            containers = {GLOBAL: global_container}

            logger.info("Pre-global phase")
            for extension in extensions:
                ctx = HookContext(Phase.PRE_GLOBAL, frozen, container=global_container)
                self._call(extension, "pre_global_process", ctx)

            logger.info("Class phase")
            for name, chain in chains.items():
                container = containers[name] = Container()
                for extension in chain:
                    ctx = HookContext(
                        Phase.CLASS,
                        frozen,
                        class_name=name,
                        config_class=frozen[name],
                        container=container,
                    )
                    self._call(extension, "class_process", ctx)

            logger.info("Post-global phase")
            for extension in extensions:
                ctx = HookContext(Phase.POST_GLOBAL, frozen, container=global_container)
                self._call(extension, "post_global_process", ctx)

            return containers
        finally:
            self._release(extensions, chains)

    # Expansion

    def _expand_config_classes(
        self,
        extensions: List[Extension],
        chains: Dict[str, List[ClassExtension]],
        config_classes: Dict[str, Dict[str, Any]],
    ):
        """Build a chain for every config class, including proposed ones.

        The worklist holds ``("sweep", names)`` entries, which walk a
        snapshot of the config class names and expand each one without a
        chain yet, and ``("walk", name, iterator)`` entries, which ask the
        chain of ``name`` for new config classes. A sweep follows every
        ``new_config_classes`` call, so classes still pending come before
        the ones just proposed.

        ``lineage`` maps each class to the classes that proposed it, itself
        last. A class proposing one of its own ancestors is a cycle.
        """
        lineage: Dict[str, List[str]] = {name: [name] for name in config_classes}
        stack: List[Tuple] = [("sweep", iter(list(config_classes)))]

        while stack:
            entry = stack[-1]
            if entry[0] == "sweep":
                name = next(entry[1], _DONE)
                if name is _DONE:
                    stack.pop()
                elif name not in chains:
                    chains[name] = self._build_chain(name, extensions, config_classes)
                    stack.append(("walk", name, iter(list(chains[name]))))
                continue

            _, name, walker = entry
            extension = next(walker, _DONE)
            if extension is _DONE:
                stack.pop()
                continue

            ctx = HookContext(
                Phase.NEW_CONFIG_CLASSES,
                config_classes,
                class_name=name,
                config_class=config_classes[name],
                chain=tuple(chains[name]),
            )
            proposed = dict(self._call(extension, "new_config_classes", ctx) or {})

            trail = lineage[name]
            for new_name, new_config_class in proposed.items():
                _check_class_name(new_name)
                if new_name in trail:
                    raise CycleError(
                        f'{type(extension).__name__} proposed config class "{new_name}", '
                        f"which is already in its proposal lineage",
                        trail + [new_name],
                    )
                if new_name not in config_classes:
                    if len(trail) >= self.max_depth:
                        raise CycleError(
                            f"Config class expansion exceeded max depth {self.max_depth} "
                            f'at "{new_name}"',
                            trail + [new_name],
                        )
                    lineage[new_name] = trail + [new_name]
                config_classes[new_name] = dict(new_config_class)
            if proposed:
                logger.debug("Config class %s proposed %s", name, list(proposed))
            stack.append(("sweep", iter(list(config_classes))))

    def _build_chain(
        self,
        name: str,
        extensions: List[Extension],
        config_classes: Dict[str, Dict[str, Any]],
    ) -> List[ClassExtension]:
        """Global extensions plus everything they propose, depth-first."""
        chain: List[ClassExtension] = list(extensions)
        active: List[Tuple[ClassExtension, Iterator]] = []

        for root in extensions:
            active.append((root, self._ask_class_extensions(root, name, chain, config_classes)))
            while active:
                unit, proposals = active[-1]
                proposed = next(proposals, _DONE)
                if proposed is _DONE:
                    active.pop()
                    continue

                _check_class_extension(proposed, unit, name)
                trail = [repr(item) for item, _ in active] + [repr(proposed)]
                if any(proposed is item for item, _ in active):
                    raise CycleError(
                        f'{type(unit).__name__} proposed a class extension already being '
                        f'expanded for "{name}"',
                        trail,
                    )
                if any(proposed is item for item in chain):
                    raise CycleError(
                        f'{type(unit).__name__} proposed a class extension already in the '
                        f'chain of "{name}"',
                        trail,
                    )
                if len(active) >= self.max_depth:
                    raise CycleError(
                        f'Class extension expansion for "{name}" exceeded max depth '
                        f"{self.max_depth}",
                        trail,
                    )

                chain.append(proposed)
                active.append(
                    (proposed, self._ask_class_extensions(proposed, name, chain, config_classes))
                )

        logger.debug("Chain for %s: %s", name, chain)
        return chain

    def _ask_class_extensions(
        self,
        extension: ClassExtension,
        name: str,
        chain: List[ClassExtension],
        config_classes: Dict[str, Dict[str, Any]],
    ) -> Iterator:
        ctx = HookContext(
            Phase.NEW_CLASS_EXTENSIONS,
            config_classes,
            class_name=name,
            config_class=config_classes[name],
            chain=tuple(chain),
        )
        return iter(list(self._call(extension, "new_class_extensions", ctx) or ()))

    # Helpers

    def _call(self, extension: ClassExtension, hook: str, ctx: HookContext):
        logger.debug(
            "%s.%s(%s)", type(extension).__name__, hook, ctx.class_name or GLOBAL
        )
        return getattr(extension, hook)(ctx)

    def _release(
        self, extensions: List[Extension], chains: Mapping[str, List[ClassExtension]]
    ):
        """Close every extension that took part in the run, once each."""
        seen = set()
        units = list(extensions)
        for chain in chains.values():
            units.extend(chain)
        for unit in units:
            if id(unit) in seen:
                continue
            seen.add(id(unit))
            unit.close()


def _check_class_name(name: str):
    if not isinstance(name, str) or not name:
        raise ConfigurationError(f"Config class names must be non-empty strings, got {name!r}")
    if name == GLOBAL:
        raise ConfigurationError(f'"{GLOBAL}" is reserved for the global container')


def _check_class_extension(proposed: Any, proposer: ClassExtension, name: str):
    if not isinstance(proposed, ClassExtension):
        raise ConfigurationError(
            f'Some class extension of the class "{name}" in the extension '
            f'"{type(proposer).__name__}" is not an instance of ClassExtension.'
        )
    if isinstance(proposed, Extension):
        raise ConfigurationError(
            f'Some class extension of the class "{name}" in the extension '
            f'"{type(proposer).__name__}" is an instance of Extension, and it can '
            f"only be an instance of ClassExtension."
        )
