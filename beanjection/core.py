"""
BeanContainer

This module provides the container facade: the only component external
code calls. Each BeanContainer owns its own registry, singleton cache and
post-processor chain; there is no process-wide container.

Lifecycle:
    1. Register definitions, modules and post-processors
    2. ``refresh()`` (or the first ``get``) freezes the registry, creates
       post-processor beans, then eagerly creates ``created_at_start``
       singletons
    3. ``get`` / ``get_by_type`` / ``get_beans_of_type`` from any thread
    4. ``shutdown()`` destroys singletons newest first

Example::

    container = BeanContainer(modules=[movie_module])
    lister = container.get("movieLister")

    # Use as context manager for automatic shutdown
    with BeanContainer(modules=[movie_module]) as container:
        lister = container.get_by_type(MovieLister)
    # shutdown() is called automatically
"""

import threading
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, TypeVar, TYPE_CHECKING

from loguru import logger

from .container import BeanFactory
from .definition import BeanDefinition
from .exceptions import (
    BeanNotOfRequiredTypeError,
    ContainerClosedError,
    RegistryFrozenError,
    ShutdownReport,
)
from .lifecycle import InstanceState
from .post_processor import BeanPostProcessor
from .registry import Registry

if TYPE_CHECKING:
    from .module import BeanModule

T = TypeVar('T')


class BeanContainer:
    """Inversion-of-control container.

    Attributes:
        _registry: Bean definitions of this container
        _factory: Creation engine (BeanFactory)
        _closed: Flag indicating shutdown() has run
        _refreshed: Flag indicating startup completed

    Example::

        container = BeanContainer()
        container.register(BeanDefinition(names=("movieFinder",), declared_type=DefaultMovieFinder))
        finder = container.get("movieFinder")
    """

    def __init__(
        self,
        definitions: Optional[Iterable[BeanDefinition]] = None,
        *,
        modules: Optional[List['BeanModule']] = None,
        post_processors: Optional[Iterable[BeanPostProcessor]] = None,
        allow_circular_references: bool = True
    ):
        """Initialize a container.

        Args:
            definitions: Bean definitions to register (optional)
            modules: BeanModules whose definitions are registered after
                ``definitions`` (optional)
            post_processors: Post-processors, applied in the given order
            allow_circular_references: When False, setter/field cycles
                between singletons fail like constructor cycles

        Raises:
            DuplicateNameError: When two definitions share a name
            DuplicatePrimaryError: When two definitions of one type are primary
        """
        self._registry = Registry()
        self._factory = BeanFactory(self._registry, allow_circular_references)
        self._closed: bool = False
        self._refreshed: bool = False
        self._refreshing: bool = False
        self._refresh_lock = threading.RLock()

        for definition in definitions or ():
            self.register(definition)
        if modules:
            self.load_modules(modules)
        for processor in post_processors or ():
            self.add_post_processor(processor)

    def _ensure_not_closed(self) -> None:
        """Raise ContainerClosedError once shutdown() has run."""
        if self._closed:
            raise ContainerClosedError("This container is already shut down")

    def _ensure_started(self) -> None:
        self._ensure_not_closed()
        if not self._refreshed:
            self.refresh()

    # Registration

    def register(self, definition: BeanDefinition) -> BeanDefinition:
        """Register one definition.

        Returns:
            The registered definition

        Raises:
            ContainerClosedError: When the container has been shut down
            RegistryFrozenError: After the container began resolving
            DuplicateNameError: When a name is already taken
            DuplicatePrimaryError: When a second primary of the same type is added
        """
        self._ensure_not_closed()
        self._registry.register(definition)
        return definition

    def load_modules(self, modules: List['BeanModule']) -> None:
        """Register every definition of the given modules, in order.

        Example::

            container.load_modules([movie_module, lifecycle_module])
        """
        for module in modules:
            for definition in module.definitions:
                self.register(definition)

    def add_post_processor(self, processor: BeanPostProcessor) -> None:
        """Append a post-processor to the chain.

        Raises:
            RegistryFrozenError: After the container began resolving
        """
        self._ensure_not_closed()
        if self._registry.frozen:
            raise RegistryFrozenError(
                f"Cannot add {type(processor).__name__}: the container has already "
                f"started resolving beans"
            )
        self._factory.post_processors.add(processor)

    # Startup

    def refresh(self) -> None:
        """Freeze the registry and run startup.

        Post-processor beans are created first, then every singleton
        marked ``created_at_start``. Called implicitly by the first lookup.
        This method is idempotent.

        Raises:
            ContainerClosedError: When the container has been shut down
            BeanjectionError: Any creation error of an eager singleton
        """
        self._ensure_not_closed()
        with self._refresh_lock:
            # _refreshing guards re-entrant lookups made by eager beans
            if self._refreshed or self._refreshing:
                return
            self._refreshing = True
            try:
                self._registry.freeze()
                self._factory.register_processor_beans()
                self._factory.preinstantiate()
                self._refreshed = True
                logger.debug(f"Container started with {len(self._registry)} bean definition(s)")
            finally:
                self._refreshing = False

    # Lookups

    def get(self, name: str, required_type: Optional[Type[T]] = None) -> Any:
        """Get a bean by name or alias.

        Args:
            name: Bean name or alias
            required_type: When given, the bean must be an instance of it

        Returns:
            The singleton instance, or a fresh prototype instance

        Raises:
            NotFoundError: When no bean carries ``name``
            UnresolvedDependencyError: When a required slot has no match
            AmbiguousDependencyError: When a slot has several equal candidates
            CircularDependencyError: When an unresolvable cycle is found
            BeanCreationError: When construction or a lifecycle hook fails
            PostProcessingError: When a post-processor rejects the bean
            BeanNotOfRequiredTypeError: When ``required_type`` does not match
            ContainerClosedError: When the container has been shut down

        Example::

            lister = container.get("constructorMovieLister", ConstructorMovieLister)
        """
        self._ensure_started()
        instance = self._factory.get(name)
        if required_type is not None and not isinstance(instance, required_type):
            raise BeanNotOfRequiredTypeError(
                f"Bean '{name}' is a {type(instance).__name__}, "
                f"not a {required_type.__name__}"
            )
        return instance

    def get_by_type(self, tp: Type[T], qualifier: Optional[str] = None) -> T:
        """Get the single bean satisfying ``tp``.

        Applies the same primary/ambiguity rules as a dependency slot.

        Raises:
            NotFoundError: When no bean satisfies ``tp`` (and ``qualifier``)
            AmbiguousDependencyError: When several beans tie and none is primary
        """
        self._ensure_started()
        return self._factory.get_by_type(tp, qualifier)

    def get_beans_of_type(self, tp: Type[T]) -> Dict[str, T]:
        """Every bean satisfying ``tp`` keyed by name, in registration order."""
        self._ensure_started()
        return self._factory.get_beans_of_type(tp)

    def __getitem__(self, name: str) -> Any:
        """Support subscript syntax: container["movieLister"]."""
        return self.get(name)

    # Introspection

    def contains(self, name: str) -> bool:
        return self._registry.contains(name)

    def __contains__(self, name: str) -> bool:
        return self.contains(name)

    def is_singleton(self, name: str) -> bool:
        return self._registry.find_by_name(name).is_singleton

    def is_prototype(self, name: str) -> bool:
        return self._registry.find_by_name(name).is_prototype

    def get_aliases(self, name: str) -> Tuple[str, ...]:
        return self._registry.aliases(name)

    def get_type(self, name: str) -> type:
        return self._registry.find_by_name(name).declared_type

    def get_definition(self, name: str) -> BeanDefinition:
        return self._registry.find_by_name(name)

    def definition_names(self) -> List[str]:
        return self._registry.names()

    def state_of(self, name: str) -> Optional[InstanceState]:
        """Current state of a singleton, or None when not (yet) cached."""
        return self._factory.state_of(name)

    @property
    def post_processors(self) -> List[BeanPostProcessor]:
        return list(self._factory.post_processors)

    # Shutdown

    def shutdown(self) -> ShutdownReport:
        """Destroy every singleton in reverse creation order.

        Failures of one bean do not stop the teardown of the others; they
        are collected in the returned report. Prototypes are never
        destroyed by the container. This method is idempotent: a second
        call returns an empty report.

        Returns:
            ShutdownReport listing destroyed beans and failures

        Example::

            report = container.shutdown()
            report.raise_if_failed()
        """
        if self._closed:
            return ShutdownReport()
        self._closed = True
        report = self._factory.destroy_singletons()
        logger.debug(
            f"Container shut down: {len(report.destroyed)} destroyed, "
            f"{len(report.failures)} failed"
        )
        return report

    def close(self) -> ShutdownReport:
        """Alias of shutdown()."""
        return self.shutdown()

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __enter__(self) -> 'BeanContainer':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Shut the container down. Exceptions are not suppressed."""
        self.shutdown()
        return False
