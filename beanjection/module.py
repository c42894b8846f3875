"""
BeanModule

This module provides the DI module class for defining beans.
A BeanModule groups BeanDefinitions, which are then registered into a
BeanContainer. It is one possible producer of definitions; hand-built
BeanDefinition values work just as well.

Key features:
- Subscript syntax: module.singleton[Type](...) and module.prototype[Type](...)
- Creation slots inferred from constructor type hints when args is omitted
- Context manager support for cleaner definition blocks

Example::

    module = BeanModule()
    with module:
        module.singleton[MovieFinder](DefaultMovieFinder, name="movieFinder")
        module.prototype[ConstructorMovieLister](ConstructorMovieLister)

    container = BeanContainer(modules=[module])
"""

from typing import Iterator, List

from .definition import BeanDefinition
from .definition_builder import DefinitionBuilder
from .scope import BeanScope


class BeanModule:
    """DI Module for defining bean registrations.

    Attributes:
        singleton: Builder for singleton registrations
        prototype: Builder for prototype registrations
        _definitions: Internal list of built definitions

    Example::

        module = BeanModule()
        with module:
            # Singleton - same instance every time
            module.singleton[MovieCatalog](name="firstMovieCatalog", primary=True)
            module.singleton[MovieCatalog](name="secondMovieCatalog")

            # Prototype - new instance every time
            module.prototype[SampleObject](name="prototypeBean")
    """

    def __init__(self, created_at_start: bool = False):
        """Initialize a new module with empty definitions.

        Args:
            created_at_start: If True, all singleton definitions in this module
                are created eagerly when the container starts. Defaults to False.
        """
        self._definitions: List[BeanDefinition] = []
        self._created_at_start: bool = created_at_start
        self.singleton = DefinitionBuilder(self, BeanScope.SINGLETON)
        self.prototype = DefinitionBuilder(self, BeanScope.PROTOTYPE)

    def __enter__(self) -> 'BeanModule':
        """Enter context manager. Purely visual structure for definitions."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        return False

    @property
    def definitions(self) -> List[BeanDefinition]:
        """Built definitions, in the order they were added."""
        return list(self._definitions)

    def add_definition(self, definition: BeanDefinition) -> None:
        """Add a definition to the module.

        Note:
            This method does not check for duplicates. Duplicate checking
            is performed when the module is registered into a container.
        """
        self._definitions.append(definition)

    def __iter__(self) -> Iterator[BeanDefinition]:
        return iter(self.definitions)

    def __len__(self) -> int:
        return len(self._definitions)
