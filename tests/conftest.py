"""
Test Configuration and Utilities

Common base classes and helper functions for Beanjection tests
"""

import unittest
from typing import Optional, Type

from beanjection import BeanContainer, BeanDefinition, BeanModule, BeanScope


class BeanjectionTestCase(unittest.TestCase):
    """
    Base test case class for Beanjection tests.

    Tracks every container built through ``container()`` and shuts them
    down after each test.
    """

    def setUp(self):
        self._containers = []

    def tearDown(self):
        for container in self._containers:
            container.shutdown()

    def container(self, *definitions: BeanDefinition, **kwargs) -> BeanContainer:
        """Build a container from definitions and keyword options."""
        container = BeanContainer(definitions, **kwargs)
        self._containers.append(container)
        return container


def bean(
    name: str,
    declared_type: Type,
    scope: BeanScope = BeanScope.SINGLETON,
    constructor: Optional[object] = None,
    **kwargs
) -> BeanDefinition:
    """
    Shorthand for a hand-built BeanDefinition.

    Example:
        >>> bean("movieFinder", MovieFinder, constructor=DefaultMovieFinder)
    """
    return BeanDefinition(
        names=(name,),
        declared_type=declared_type,
        scope=scope,
        constructor=constructor,
        **kwargs
    )


def create_simple_module(*service_classes: Type) -> BeanModule:
    """
    Create a module with singleton registrations for the given classes.

    Classes must have no dependencies (no-arg constructor).

    Example:
        >>> module = create_simple_module(SampleObject, MovieCatalog)
        >>> container = BeanContainer(modules=[module])
    """
    module = BeanModule()
    with module:
        for cls in service_classes:
            module.singleton[cls]()
    return module
