"""
Registry

Holds every BeanDefinition of a container, indexed by name and
searchable by declared type. Registration is single-threaded and must
complete before the first resolution; the registry is frozen after that.
"""

from typing import Any, Dict, Iterator, List, Optional, Tuple

from loguru import logger

from .definition import BeanDefinition, _type_name
from .exceptions import (
    DuplicateNameError,
    DuplicatePrimaryError,
    NotFoundError,
    RegistryFrozenError,
)


def type_matches(declared: Any, requested: Any) -> bool:
    """True when a bean declared as ``declared`` satisfies ``requested``."""
    if declared is requested:
        return True
    if isinstance(declared, type) and isinstance(requested, type):
        try:
            return issubclass(declared, requested)
        except TypeError:
            return False
    return declared == requested


class Registry:
    """Name and type index of bean definitions.

    Attributes:
        _definitions: Definitions in registration order
        _by_name: Every name and alias mapped to its definition

    Example::

        registry = Registry()
        registry.register(BeanDefinition(names=("movieFinder",), declared_type=MovieFinder))
        registry.find_by_type(MovieFinder)  # [BeanDefinition(names=['movieFinder'], ...)]
    """

    def __init__(self):
        self._definitions: List[BeanDefinition] = []
        self._by_name: Dict[str, BeanDefinition] = {}
        self._frozen: bool = False

    def register(self, definition: BeanDefinition) -> None:
        """Add a definition.

        Raises:
            RegistryFrozenError: After the container began resolving
            DuplicateNameError: When any of the definition's names is taken
            DuplicatePrimaryError: When another primary definition exists
                for the same declared type
        """
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register '{definition.name}': the container has already "
                f"started resolving beans. Register every definition before the first get()."
            )

        for name in definition.names:
            existing = self._by_name.get(name)
            if existing is not None:
                raise DuplicateNameError(
                    f"Bean name '{name}' is already registered by {existing!r}"
                )

        if definition.primary:
            for existing in self._definitions:
                if existing.primary and existing.declared_type is definition.declared_type:
                    raise DuplicatePrimaryError(
                        f"Bean '{definition.name}' and bean '{existing.name}' are both "
                        f"primary for type {_type_name(definition.declared_type)}"
                    )

        self._definitions.append(definition)
        for name in definition.names:
            self._by_name[name] = definition
        logger.debug(
            f"Registered {definition.scope.value.lower()} bean '{definition.name}' "
            f"({_type_name(definition.declared_type)})"
        )

    def find_by_name(self, name: str) -> BeanDefinition:
        """Look up a definition by name or alias.

        Raises:
            NotFoundError: When no definition carries ``name``
        """
        definition = self._by_name.get(name)
        if definition is None:
            registered = ", ".join(d.name for d in self._definitions) or "None"
            raise NotFoundError(
                f"No bean named '{name}' is defined.\n"
                f"Registered beans: {registered}"
            )
        return definition

    def get(self, name: str) -> Optional[BeanDefinition]:
        return self._by_name.get(name)

    def find_by_type(self, tp: Any) -> List[BeanDefinition]:
        """All definitions whose declared type satisfies ``tp``, in registration order."""
        return [d for d in self._definitions if type_matches(d.declared_type, tp)]

    def find_by_qualifier(self, tp: Any, label: str) -> List[BeanDefinition]:
        """Definitions matching ``tp`` (any type when None) that carry the qualifier ``label``."""
        candidates = self._definitions if tp is None else self.find_by_type(tp)
        return [d for d in candidates if label in d.qualifiers]

    def contains(self, name: str) -> bool:
        return name in self._by_name

    def names(self) -> List[str]:
        """Canonical names in registration order."""
        return [d.name for d in self._definitions]

    def aliases(self, name: str) -> Tuple[str, ...]:
        """Every other name of the bean known as ``name``."""
        definition = self.find_by_name(name)
        return tuple(n for n in definition.names if n != name)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __iter__(self) -> Iterator[BeanDefinition]:
        return iter(list(self._definitions))

    def __len__(self) -> int:
        return len(self._definitions)
