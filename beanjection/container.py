"""
BeanFactory

This module provides the creation engine behind BeanContainer. It is
responsible for:

- Turning a chosen BeanDefinition into an instance (constructor or factory)
- Injecting setter and field slots after construction
- Running post-processors and lifecycle hooks in order
- Scope-aware caching through the ScopeStore
- Detecting cycles and exposing early singleton references when legal

The engine is typically not used directly. Use BeanContainer instead.
"""

from typing import Any, Dict, List, Optional, Set

from loguru import logger

from .definition import BeanDefinition, InjectionKind, Ref, _type_name
from .exceptions import (
    BeanCreationError,
    BeanjectionError,
    CircularDependencyError,
    NotFoundError,
    ShutdownReport,
    UnresolvedDependencyError,
)
from .lifecycle import InstanceState, LifecycleRunner, ResolvedInstance
from .post_processor import BeanPostProcessor, PostProcessorChain
from .registry import Registry, type_matches
from .resolution_context import ResolutionContext, _resolution_context
from .resolver import UNSET, DependencyResolver
from .scope import ScopeStore


class BeanFactory:
    """Creates, wires, initializes and caches beans.

    Attributes:
        registry: The definitions this factory produces
        store: Singleton cache
        post_processors: Hooks run around initialization
        lifecycle: Runs init and destroy hooks
        resolver: Chooses candidates for dependency slots
        allow_circular_references: When False, even setter/field cycles
            between singletons fail with CircularDependencyError
    """

    def __init__(self, registry: Registry, allow_circular_references: bool = True):
        self.registry = registry
        self.store = ScopeStore()
        self.post_processors = PostProcessorChain()
        self.lifecycle = LifecycleRunner()
        self.resolver = DependencyResolver(registry, self._provide)
        self.allow_circular_references = allow_circular_references
        # bean name -> singletons that received its early reference
        self._early_dependents: Dict[str, Set[str]] = {}
        self._processor_beans: Set[str] = set()

    # Lookups

    def get(self, name: str) -> Any:
        """Resolve a bean by name or alias."""
        definition = self.registry.find_by_name(name)
        return self._provide(definition, InjectionKind.LOOKUP)

    def get_by_type(self, tp: Any, qualifier: Optional[str] = None) -> Any:
        """Resolve exactly as a single required Ref slot of type ``tp``."""
        if qualifier is None and not self.registry.find_by_type(tp):
            raise NotFoundError(
                f"No bean of type {_type_name(tp)} is defined.\n"
                f"Registered beans: {', '.join(self.registry.names()) or 'None'}"
            )
        try:
            definition = self.resolver.select(Ref(tp, qualifier=qualifier))
        except UnresolvedDependencyError as e:
            raise NotFoundError(str(e)) from e
        return self._provide(definition, InjectionKind.LOOKUP)

    def get_beans_of_type(self, tp: Any) -> Dict[str, Any]:
        return self.resolver.resolve_collection(tp, InjectionKind.LOOKUP)

    def state_of(self, name: str) -> Optional[InstanceState]:
        definition = self.registry.find_by_name(name)
        resolved = self.store.lookup(definition.name)
        return resolved.state if resolved is not None else None

    # Startup

    def register_processor_beans(self) -> None:
        """Instantiate post-processor definitions and append them to the chain."""
        for definition in self.registry:
            if definition.name in self._processor_beans:
                continue
            if not type_matches(definition.declared_type, BeanPostProcessor):
                continue
            processor = self.get(definition.name)
            self.post_processors.add(processor)
            self._processor_beans.add(definition.name)

    def preinstantiate(self) -> None:
        """Create every singleton marked created_at_start, in registration order."""
        for definition in self.registry:
            if definition.is_singleton and definition.created_at_start:
                self.get(definition.name)

    # Creation

    def _provide(self, definition: BeanDefinition, kind: InjectionKind) -> Any:
        name = definition.name
        if definition.is_singleton:
            ready = self.store.get_ready(name)
            if ready is not None:
                return ready.instance

        ctx = _resolution_context.get()
        if ctx is not None and ctx.is_resolving(name):
            return self._resolve_cycle(definition, ctx, kind)

        if definition.is_singleton:
            resolved = self.store.get_or_create(name, lambda: self._create(definition, kind))
        else:
            resolved = self.store.create(lambda: self._create(definition, kind))
        return resolved.instance

    def _resolve_cycle(
        self,
        definition: BeanDefinition,
        ctx: ResolutionContext,
        kind: InjectionKind
    ) -> Any:
        name = definition.name
        cycle = ctx.cycle_from(name)
        path = " -> ".join(cycle)
        edges = ctx.edge_kinds_from(name) + [kind]

        prototypes = [n for n in cycle[:-1] if self.registry.find_by_name(n).is_prototype]
        if prototypes:
            raise CircularDependencyError(
                f"Circular dependency detected: {path}. "
                f"Prototype bean(s) {', '.join(prototypes)} cannot take part in a cycle.",
                cycle,
            )

        early = self.store.get_early(name)
        if early is None:
            if not any(edge.is_post_construction for edge in edges):
                raise CircularDependencyError(
                    f"Circular dependency detected: {path}. "
                    f"Every edge is a constructor or factory slot; break the cycle "
                    f"with a setter or field slot.",
                    cycle,
                )
            raise CircularDependencyError(
                f"Circular dependency detected: {path}. "
                f"Bean '{name}' is still being constructed, so no early reference "
                f"exists yet; request another bean of the cycle first or move the "
                f"constructor slot of '{name}' to a setter or field slot.",
                cycle,
            )
        if not self.allow_circular_references:
            raise CircularDependencyError(
                f"Circular dependency detected: {path}. "
                f"Circular references are disabled for this container.",
                cycle,
            )

        early.early_exposed = True
        # Every bean after ``name`` on the path ends up holding the raw object
        self._early_dependents.setdefault(name, set()).update(cycle[1:-1])
        logger.debug(f"Exposing early reference to '{name}' for cycle {path}")
        return early.instance

    def _create(self, definition: BeanDefinition, kind: InjectionKind) -> ResolvedInstance:
        name = definition.name
        parent_ctx = _resolution_context.get() or ResolutionContext()
        token = _resolution_context.set(parent_ctx.enter(name, kind))
        try:
            logger.debug(f"Creating {definition.scope.value.lower()} bean '{name}'")
            resolved = ResolvedInstance(name, definition, self._instantiate(definition))
            if definition.is_singleton:
                self.store.add_early(resolved)
            self._inject(resolved)
            self._initialize(resolved)
            return resolved
        except BaseException:
            self._early_dependents.pop(name, None)
            raise
        finally:
            _resolution_context.reset(token)

    def _instantiate(self, definition: BeanDefinition) -> Any:
        name = definition.name
        spec = definition.factory
        if spec is None:
            target = definition.constructor
        elif spec.function is not None:
            target = spec.function
        else:
            factory_definition = self.registry.get(spec.bean)
            if factory_definition is None:
                raise UnresolvedDependencyError(
                    f"Factory bean '{spec.bean}' of bean '{name}' is not defined"
                )
            factory_bean = self._provide(factory_definition, InjectionKind.FACTORY)
            target = getattr(factory_bean, spec.method, None)
            if not callable(target):
                raise BeanCreationError(
                    f"Factory bean '{spec.bean}' has no callable method '{spec.method}'",
                    name,
                )

        arguments = self.resolver.resolve_arguments(definition)
        try:
            instance = target(*arguments)
        except BeanjectionError:
            raise
        except Exception as e:
            raise BeanCreationError(
                f"Instantiation of bean '{name}' failed: {e}", name
            ) from e

        if instance is None:
            raise BeanCreationError(f"Factory of bean '{name}' returned None", name)

        declared = definition.declared_type
        try:
            mismatch = isinstance(declared, type) and not isinstance(instance, declared)
        except TypeError:
            # Non-runtime-checkable protocols
            mismatch = False
        if mismatch:
            raise BeanCreationError(
                f"Bean '{name}' produced {type(instance).__name__}, "
                f"expected {_type_name(declared)}",
                name,
            )
        return instance

    def _inject(self, resolved: ResolvedInstance) -> None:
        definition = resolved.definition
        for injection in definition.field_slots:
            value = self.resolver.resolve(injection.dependency, InjectionKind.FIELD, definition)
            if value is UNSET:
                continue
            try:
                setattr(resolved.instance, injection.target, value)
            except Exception as e:
                raise BeanCreationError(
                    f"Cannot inject field '{injection.target}' of bean '{resolved.name}': {e}",
                    resolved.name,
                ) from e

        for injection in definition.setter_slots:
            value = self.resolver.resolve(injection.dependency, InjectionKind.SETTER, definition)
            if value is UNSET:
                continue
            setter = getattr(resolved.instance, injection.target, None)
            if not callable(setter):
                raise BeanCreationError(
                    f"Bean '{resolved.name}' has no setter '{injection.target}'",
                    resolved.name,
                )
            try:
                setter(value)
            except Exception as e:
                raise BeanCreationError(
                    f"Setter {injection.target}() of bean '{resolved.name}' raised: {e}",
                    resolved.name,
                ) from e

        resolved.advance(InstanceState.DEPENDENCIES_INJECTED)

    def _initialize(self, resolved: ResolvedInstance) -> None:
        name = resolved.name
        raw = resolved.instance

        resolved.instance = self.post_processors.apply_before(resolved.instance, name)
        resolved.advance(InstanceState.BEFORE_INIT_PROCESSED)

        self.lifecycle.initialize(resolved)

        resolved.instance = self.post_processors.apply_after(resolved.instance, name)
        resolved.advance(InstanceState.AFTER_INIT_PROCESSED)

        if resolved.early_exposed and resolved.instance is not raw:
            holders = ", ".join(sorted(self._early_dependents.get(name, ()))) or "other beans"
            raise CircularDependencyError(
                f"Bean '{name}' was injected into {holders} in its raw version as part "
                f"of a circular reference, but a post-processor replaced it afterwards.",
                [name],
            )

        self._early_dependents.pop(name, None)
        resolved.advance(InstanceState.READY)

    # Shutdown

    def destroy_singletons(self) -> ShutdownReport:
        """Tear down every cached singleton, newest first, collecting failures."""
        report = ShutdownReport()
        instances: List[ResolvedInstance] = self.store.drain()
        for resolved in instances:
            failures = self.lifecycle.destroy(resolved)
            for failure in failures:
                logger.warning(f"Destroy of bean {failure}")
            if failures:
                report.failures.extend(failures)
            else:
                report.destroyed.append(resolved.name)
        self._early_dependents.clear()
        return report
