"""
DefinitionBuilder

This module provides the builder behind the type parameter syntax
(e.g., singleton[Type], prototype[Type]).

The DefinitionBuilder performs:
- Type parameter extraction via __getitem__
- Constructor/factory parameter analysis for slot inference
- Lifecycle hook discovery (capabilities, init/destroy methods)
- Definition creation and registration

BeanModule exposes one builder per scope as module.singleton and
module.prototype. It is the only place that inspects classes; the container
itself consumes the resulting BeanDefinition values as-is.
"""

import collections.abc
import inspect
import types
import typing
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, TypeVar, TYPE_CHECKING, Union

from .definition import (
    BeanDefinition,
    Collection,
    Dependency,
    FactorySpec,
    Injection,
    LifecycleHook,
    Ref,
    _type_name,
)
from .exceptions import InvalidDefinitionError
from .lifecycle import DisposableBean, InitializingBean
from .scope import BeanScope

if TYPE_CHECKING:
    from .module import BeanModule

T = TypeVar('T')

# Pick a public close() or shutdown() method as destroy hook
INFER_DESTROY_METHOD = "(inferred)"

_INFERRED_DESTROY_CANDIDATES = ("close", "shutdown")

SlotSpec = Union[Dependency, type]


class DefinitionBuilder:
    """Builds BeanDefinitions of one scope through subscript syntax.

    Attributes:
        module: The BeanModule to register definitions to
        scope: The BeanScope of created definitions

    Note:
        This class is not used directly. Reach it through
        module.singleton or module.prototype instead.
    """

    def __init__(self, module: 'BeanModule', scope: BeanScope):
        self.module = module
        self.scope = scope

    def __getitem__(self, declared_type: Type[T]) -> Callable[..., BeanDefinition]:
        """Enable subscript syntax: builder[Type](implementation, ...).

        Returns:
            A registration function that builds, registers and returns a
            BeanDefinition

        Example::

            # Constructor slots inferred from DefaultMovieFinder.__init__
            module.singleton[MovieFinder](DefaultMovieFinder, name="movieFinder")

            # Static factory with explicit slots
            module.singleton[SampleFactoryObject](factory=SampleFactoryObject.create)

            # Setter slot narrowed by a qualifier
            module.singleton[QualifierConfig](
                setters={"set_movie_catalog": Ref(MovieCatalog, qualifier="secondMovieCatalog")}
            )
        """

        def register(
            implementation: Optional[Callable[..., Any]] = None,
            *,
            name: Union[str, Sequence[str], None] = None,
            factory: Union[Callable[..., Any], FactorySpec, None] = None,
            args: Optional[Sequence[SlotSpec]] = None,
            setters: Optional[Dict[str, SlotSpec]] = None,
            fields: Optional[Dict[str, SlotSpec]] = None,
            primary: bool = False,
            qualifiers: Sequence[str] = (),
            init_method: Optional[str] = None,
            destroy_method: Optional[str] = INFER_DESTROY_METHOD,
            created_at_start: Optional[bool] = None
        ) -> BeanDefinition:
            # Module default applies to singletons only
            effective_created_at_start = (
                created_at_start if created_at_start is not None
                else self.module._created_at_start
            ) if self.scope == BeanScope.SINGLETON else False

            factory_spec = factory
            if factory is not None and not isinstance(factory, FactorySpec):
                factory_spec = FactorySpec(function=factory)

            if args is not None:
                dependencies = tuple(_as_dependency(a) for a in args)
            elif factory_spec is not None and factory_spec.function is not None:
                dependencies = tuple(DefinitionBuilder._infer_slots(factory_spec.function))
            elif factory_spec is None:
                dependencies = tuple(
                    DefinitionBuilder._infer_slots(implementation or declared_type)
                )
            else:
                dependencies = ()

            implementation_type = (
                implementation if isinstance(implementation, type) else declared_type
            )

            definition = BeanDefinition(
                names=DefinitionBuilder._names_for(name, implementation, factory_spec, declared_type),
                declared_type=declared_type,
                scope=self.scope,
                primary=primary,
                qualifiers=frozenset(qualifiers),
                dependencies=dependencies,
                constructor=implementation,
                factory=factory_spec,
                setter_slots=tuple(
                    Injection(target, _as_dependency(d)) for target, d in (setters or {}).items()
                ),
                field_slots=tuple(
                    Injection(target, _as_dependency(d)) for target, d in (fields or {}).items()
                ),
                init_hooks=DefinitionBuilder._init_hooks(implementation_type, init_method),
                destroy_hooks=DefinitionBuilder._destroy_hooks(implementation_type, destroy_method),
                created_at_start=effective_created_at_start,
            )
            self.module.add_definition(definition)
            return definition

        return register

    @staticmethod
    def _names_for(
        name: Union[str, Sequence[str], None],
        implementation: Optional[Callable[..., Any]],
        factory: Optional[FactorySpec],
        declared_type: Any
    ) -> tuple:
        if isinstance(name, str):
            return (name,)
        if name is not None:
            return tuple(name)
        if factory is not None and factory.function is not None:
            source = factory.function
        elif factory is not None:
            source = factory.method
        else:
            source = implementation or declared_type
        return (default_bean_name(source),)

    @staticmethod
    def _init_hooks(implementation_type: Any, init_method: Optional[str]) -> tuple:
        hooks = []
        if _is_subclass(implementation_type, InitializingBean):
            hooks.append(LifecycleHook("after_properties_set", capability=True))
        if init_method:
            hooks.append(LifecycleHook(init_method))
        return tuple(hooks)

    @staticmethod
    def _destroy_hooks(implementation_type: Any, destroy_method: Optional[str]) -> tuple:
        hooks = []
        if _is_subclass(implementation_type, DisposableBean):
            hooks.append(LifecycleHook("destroy", capability=True))
        if destroy_method == INFER_DESTROY_METHOD:
            for candidate in _INFERRED_DESTROY_CANDIDATES:
                if callable(getattr(implementation_type, candidate, None)):
                    hooks.append(LifecycleHook(candidate))
                    break
        elif destroy_method:
            hooks.append(LifecycleHook(destroy_method))
        return tuple(hooks)

    @staticmethod
    def _infer_slots(target: Callable[..., Any]) -> List[Dependency]:
        """Extract creation slots from a class constructor or factory function.

        Every parameter without a default becomes a slot:
        ``X`` -> Ref(X), ``Optional[X]`` -> optional Ref(X),
        ``Dict[str, X]`` -> Collection(X).

        Raises:
            InvalidDefinitionError: When a parameter has no type hint or the
                signature cannot be inspected
        """
        target_name = _type_name(target)
        is_class = isinstance(target, type)
        try:
            sig = inspect.signature(target.__init__ if is_class else target)
        except (ValueError, TypeError) as e:
            raise InvalidDefinitionError(
                f"Cannot inspect {target_name}: {e}. "
                f"Pass args=[...] explicitly for built-in or C extension types."
            ) from e

        resolved_hints = DefinitionBuilder._resolve_type_hints(target)

        slots: List[Dependency] = []
        for index, (param_name, param) in enumerate(sig.parameters.items()):
            if is_class and index == 0:
                # self
                continue
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            if param.default is not inspect.Parameter.empty:
                continue
            if param.annotation is inspect.Parameter.empty:
                raise InvalidDefinitionError(
                    f"Missing type hint for parameter '{param_name}' of {target_name}. "
                    f"Add a type hint or pass args=[...] explicitly."
                )

            annotation = resolved_hints.get(param_name, param.annotation)
            if isinstance(annotation, str):
                raise InvalidDefinitionError(
                    f"Cannot resolve forward reference '{annotation}' for parameter "
                    f"'{param_name}' of {target_name}. "
                    f"Hint: define '{annotation}' before building the definition."
                )
            slots.append(_dependency_for(annotation))
        return slots

    @staticmethod
    def _resolve_type_hints(target: Callable[..., Any]) -> Dict[str, Any]:
        """Resolve type hints, returning an empty dict when they cannot be evaluated.

        Unresolvable hints fall back to the raw annotations, which are then
        reported by _infer_slots.
        """
        hinted = target.__init__ if isinstance(target, type) else target
        try:
            return typing.get_type_hints(hinted)
        except (NameError, TypeError, RecursionError):
            return {}


def default_bean_name(source: Any) -> str:
    """lowerCamel name of a class or function: DefaultMovieFinder -> defaultMovieFinder."""
    raw = source if isinstance(source, str) else getattr(source, "__name__", str(source))
    if len(raw) > 1 and raw[1].isupper() and raw[0].isupper():
        # Keep acronyms as-is: URLFetcher stays URLFetcher
        return raw
    return raw[:1].lower() + raw[1:]


def _as_dependency(spec: SlotSpec) -> Dependency:
    if isinstance(spec, (Ref, Collection)):
        return spec
    return Ref(spec)


def _dependency_for(annotation: Any) -> Dependency:
    origin = typing.get_origin(annotation)
    arguments = typing.get_args(annotation)
    if origin in (Union, types.UnionType) and type(None) in arguments and len(arguments) == 2:
        inner = arguments[0] if arguments[1] is type(None) else arguments[1]
        return Ref(inner, required=False)
    if origin in (dict, collections.abc.Mapping) and len(arguments) == 2 and arguments[0] is str:
        return Collection(arguments[1])
    return Ref(annotation)


def _is_subclass(candidate: Any, parent: type) -> bool:
    return isinstance(candidate, type) and issubclass(candidate, parent)
