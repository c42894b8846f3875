"""
Definition

Data classes describing one producible bean and its dependency slots.

A BeanDefinition is a static description: it is built once (by hand, by
a BeanModule, or by any other producer) and never mutated afterwards.
The container consumes definitions as-is and never inspects classes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, FrozenSet, Iterable, Optional, Tuple, Union

from .exceptions import InvalidDefinitionError
from .scope import BeanScope


class InjectionKind(Enum):
    """How a dependency edge is satisfied. Used to classify cycles."""
    CONSTRUCTOR = "CONSTRUCTOR"
    FACTORY = "FACTORY"
    SETTER = "SETTER"
    FIELD = "FIELD"
    LOOKUP = "LOOKUP"

    @property
    def is_post_construction(self) -> bool:
        """True for slots filled after the instance exists."""
        return self in (InjectionKind.SETTER, InjectionKind.FIELD)


@dataclass(frozen=True)
class Ref:
    """Single reference to another bean.

    Resolved by declared type, optionally narrowed by a qualifier label or
    an explicit bean name. Qualifier and name are interchangeable
    disambiguators.

    Attributes:
        type: The declared type requested (may be None when name is given)
        qualifier: Label matching a bean name or one of its qualifiers
        name: Explicit bean name
        required: When False an unmatched slot is left unset
    """
    type: Optional[type] = None
    qualifier: Optional[str] = None
    name: Optional[str] = None
    required: bool = True

    def __post_init__(self):
        if self.type is None and self.name is None and self.qualifier is None:
            raise InvalidDefinitionError(
                "Ref needs a type, a name or a qualifier"
            )

    def describe(self) -> str:
        parts = []
        if self.type is not None:
            parts.append(_type_name(self.type))
        if self.name is not None:
            parts.append(f"name='{self.name}'")
        if self.qualifier is not None:
            parts.append(f"qualifier='{self.qualifier}'")
        return f"Ref({', '.join(parts)})"


@dataclass(frozen=True)
class Collection:
    """Every bean matching ``type``, delivered as a name -> instance dict."""
    type: type

    def describe(self) -> str:
        return f"Collection({_type_name(self.type)})"


Dependency = Union[Ref, Collection]


@dataclass(frozen=True)
class Injection:
    """Post-construction slot.

    ``target`` is a setter method name for setter slots and an attribute
    name for field slots.
    """
    target: str
    dependency: Dependency


@dataclass(frozen=True)
class FactorySpec:
    """Factory creation strategy.

    Either a static ``function``, or ``method`` called on the bean named
    ``bean``. Creation slots are passed positionally in both cases.
    """
    function: Optional[Callable[..., Any]] = None
    bean: Optional[str] = None
    method: Optional[str] = None

    def __post_init__(self):
        if self.function is not None:
            if self.bean is not None or self.method is not None:
                raise InvalidDefinitionError(
                    "FactorySpec takes either a function or bean + method, not both"
                )
        elif self.bean is None or self.method is None:
            raise InvalidDefinitionError(
                "FactorySpec needs a function, or both bean and method"
            )


@dataclass(frozen=True)
class LifecycleHook:
    """Zero-argument callback on the produced instance.

    Attributes:
        method: Method name invoked on the instance
        capability: True for the generic capability contract
            (after_properties_set / destroy). Capability hooks run before
            bean-specific named methods.
    """
    method: str
    capability: bool = False


@dataclass(frozen=True)
class BeanDefinition:
    """Static description of one producible bean.

    Attributes:
        names: One or more unique identifiers; the first is canonical
        declared_type: The type the produced instance satisfies
        scope: SINGLETON (default) or PROTOTYPE
        primary: Default pick among same-typed candidates
        qualifiers: Extra labels matched by Ref(qualifier=...)
        dependencies: Creation slots, passed positionally
        constructor: Callable invoked with the creation slots
        factory: Alternative creation strategy
        setter_slots: Setter injections run after construction
        field_slots: Attribute injections run after construction
        init_hooks: Lifecycle hooks run during initialization
        destroy_hooks: Lifecycle hooks run at shutdown (singletons only)
        created_at_start: Create the singleton eagerly on refresh()

    Example::

        BeanDefinition(
            names=("movieLister",),
            declared_type=ConstructorMovieLister,
            dependencies=(Ref(MovieFinder),),
        )
    """
    names: Tuple[str, ...]
    declared_type: type
    scope: BeanScope = BeanScope.SINGLETON
    primary: bool = False
    qualifiers: FrozenSet[str] = frozenset()
    dependencies: Tuple[Dependency, ...] = ()
    constructor: Optional[Callable[..., Any]] = None
    factory: Optional[FactorySpec] = None
    setter_slots: Tuple[Injection, ...] = ()
    field_slots: Tuple[Injection, ...] = ()
    init_hooks: Tuple[LifecycleHook, ...] = ()
    destroy_hooks: Tuple[LifecycleHook, ...] = ()
    created_at_start: bool = False

    def __post_init__(self):
        names = (self.names,) if isinstance(self.names, str) else tuple(self.names)
        if not names:
            raise InvalidDefinitionError(
                f"Definition for {_type_name(self.declared_type)} needs at least one name"
            )
        for name in names:
            if not isinstance(name, str) or not name:
                raise InvalidDefinitionError(
                    f"Invalid bean name {name!r} for {_type_name(self.declared_type)}"
                )
        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "names", tuple(dict.fromkeys(names)))
        object.__setattr__(self, "qualifiers", frozenset(self.qualifiers))
        object.__setattr__(self, "dependencies", tuple(self.dependencies))
        object.__setattr__(self, "setter_slots", tuple(self.setter_slots))
        object.__setattr__(self, "field_slots", tuple(self.field_slots))
        object.__setattr__(self, "init_hooks", tuple(self.init_hooks))
        object.__setattr__(self, "destroy_hooks", tuple(self.destroy_hooks))

        if self.constructor is not None and self.factory is not None:
            raise InvalidDefinitionError(
                f"Bean '{self.name}' declares both a constructor and a factory. "
                f"Exactly one creation strategy is allowed."
            )
        if self.constructor is None and self.factory is None:
            if not isinstance(self.declared_type, type):
                raise InvalidDefinitionError(
                    f"Bean '{self.name}' has no constructor or factory and its "
                    f"declared type {self.declared_type!r} is not a class."
                )
            object.__setattr__(self, "constructor", self.declared_type)

        if self.created_at_start and self.scope is BeanScope.PROTOTYPE:
            raise InvalidDefinitionError(
                f"Bean '{self.name}' is a prototype and cannot be created at start"
            )

    @property
    def name(self) -> str:
        """Canonical (first) name."""
        return self.names[0]

    @property
    def is_singleton(self) -> bool:
        return self.scope is BeanScope.SINGLETON

    @property
    def is_prototype(self) -> bool:
        return self.scope is BeanScope.PROTOTYPE

    def creation_slots(self) -> Iterable[Tuple[InjectionKind, Dependency]]:
        kind = InjectionKind.FACTORY if self.factory is not None else InjectionKind.CONSTRUCTOR
        for dependency in self.dependencies:
            yield kind, dependency

    def __repr__(self) -> str:
        return (
            f"BeanDefinition(names={list(self.names)}, "
            f"type={_type_name(self.declared_type)}, scope={self.scope.value})"
        )


def _type_name(tp: Any) -> str:
    return tp.__name__ if hasattr(tp, "__name__") else str(tp)
