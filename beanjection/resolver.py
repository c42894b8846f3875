"""
DependencyResolver

Determines the concrete instance to supply for each dependency slot of a
definition. The resolver picks candidate definitions; the container
engine (the instance provider) turns a chosen definition into an
instance and handles scope caching and cycle detection.

Resolution rules for a single Ref:

1. An explicit name or qualifier looks the bean up by name. A qualifier
   with no bean of that name falls back to the type candidates carrying
   that qualifier label. No match fails unless the slot is optional.
2. Otherwise candidates come from the declared type. Zero fails unless
   optional, one is used, several are narrowed to the single primary or
   reported as ambiguous.

Collection slots always succeed and bypass the primary/ambiguity rule.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence

from .definition import BeanDefinition, Collection, Dependency, InjectionKind, Ref, _type_name
from .exceptions import AmbiguousDependencyError, UnresolvedDependencyError
from .registry import Registry, type_matches


class _Unset:
    """Marker for an optional slot that found no match."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()

InstanceProvider = Callable[[BeanDefinition, InjectionKind], Any]


class DependencyResolver:
    """Resolves dependency slots against a Registry.

    Attributes:
        registry: The definitions to choose from
        provide: Callable turning a chosen definition into an instance,
            given the kind of edge being satisfied

    Example::

        resolver = DependencyResolver(registry, provide)
        args = resolver.resolve_arguments(definition)
    """

    def __init__(self, registry: Registry, provide: InstanceProvider):
        self.registry = registry
        self.provide = provide

    def resolve_arguments(self, definition: BeanDefinition) -> List[Any]:
        """Resolve the creation slots of ``definition``, in order.

        Optional slots without a match are passed as None.
        """
        arguments = []
        for kind, dependency in definition.creation_slots():
            value = self.resolve(dependency, kind, requester=definition)
            arguments.append(None if value is UNSET else value)
        return arguments

    def resolve(
        self,
        dependency: Dependency,
        kind: InjectionKind,
        requester: Optional[BeanDefinition] = None
    ) -> Any:
        """Resolve one slot.

        Returns:
            The instance, a name -> instance dict for Collection slots, or
            UNSET when an optional Ref has no match

        Raises:
            UnresolvedDependencyError: When a required Ref has no match
            AmbiguousDependencyError: When several candidates tie
        """
        if isinstance(dependency, Collection):
            return self.resolve_collection(dependency.type, kind, requester)

        definition = self.select(dependency, requester)
        if definition is None:
            return UNSET
        return self.provide(definition, kind)

    def resolve_collection(
        self,
        tp: Any,
        kind: InjectionKind,
        requester: Optional[BeanDefinition] = None
    ) -> Dict[str, Any]:
        """Every bean satisfying ``tp`` keyed by canonical name, registration order.

        The requesting bean is never part of its own collection.
        """
        result: Dict[str, Any] = {}
        for candidate in self.registry.find_by_type(tp):
            if requester is not None and candidate is requester:
                continue
            result[candidate.name] = self.provide(candidate, kind)
        return result

    def select(
        self,
        ref: Ref,
        requester: Optional[BeanDefinition] = None
    ) -> Optional[BeanDefinition]:
        """Pick the single definition satisfying ``ref``.

        Returns:
            The chosen definition, or None for an optional slot without match
        """
        label = ref.name if ref.name is not None else ref.qualifier
        if label is not None:
            return self._select_by_label(ref, label, requester)

        candidates = self.registry.find_by_type(ref.type)
        if requester is not None and len(candidates) > 1:
            # A bean only satisfies its own slot when nothing else does
            candidates = [c for c in candidates if c is not requester]
        return self._choose(ref, candidates, requester)

    def _select_by_label(
        self,
        ref: Ref,
        label: str,
        requester: Optional[BeanDefinition]
    ) -> Optional[BeanDefinition]:
        definition = self.registry.get(label)
        mismatched = None
        if definition is not None:
            if ref.type is None or type_matches(definition.declared_type, ref.type):
                return definition
            mismatched = definition

        if ref.name is None:
            # A label naming a bean of another type may still be a qualifier
            candidates = self.registry.find_by_qualifier(ref.type, label)
            if candidates:
                return self._choose(ref, candidates, requester)

        if not ref.required:
            return None
        if mismatched is not None:
            raise UnresolvedDependencyError(
                f"{self._describe(ref, requester)}: bean '{label}' is a "
                f"{_type_name(mismatched.declared_type)}, not a {_type_name(ref.type)}"
            )
        raise UnresolvedDependencyError(
            f"{self._describe(ref, requester)}: no bean named or qualified '{label}'.\n"
            f"Registered beans: {', '.join(self.registry.names()) or 'None'}"
        )

    def _choose(
        self,
        ref: Ref,
        candidates: Sequence[BeanDefinition],
        requester: Optional[BeanDefinition]
    ) -> Optional[BeanDefinition]:
        if not candidates:
            if not ref.required:
                return None
            raise UnresolvedDependencyError(
                f"{self._describe(ref, requester)}: no bean of type "
                f"{_type_name(ref.type)} is registered.\n"
                f"Hint: module.singleton[{_type_name(ref.type)}]()"
            )
        if len(candidates) == 1:
            return candidates[0]

        primaries = [c for c in candidates if c.primary]
        if len(primaries) == 1:
            return primaries[0]

        names = [c.name for c in candidates]
        raise AmbiguousDependencyError(
            f"{self._describe(ref, requester)}: expected a single bean of type "
            f"{_type_name(ref.type)} but found {len(names)}: {', '.join(names)}.\n"
            f"Hint: mark one primary=True or narrow the slot with qualifier=",
            names,
        )

    @staticmethod
    def _describe(ref: Ref, requester: Optional[BeanDefinition]) -> str:
        if requester is None:
            return f"Cannot resolve {ref.describe()}"
        return f"Cannot resolve {ref.describe()} for bean '{requester.name}'"
