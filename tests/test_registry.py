"""
Registry Tests

Tests for name uniqueness, primary uniqueness, type lookup and freezing.
"""

import sys
import os
import unittest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from beanjection import (
    BeanContainer,
    BeanDefinition,
    DefinitionConflictError,
    DuplicateNameError,
    DuplicatePrimaryError,
    NotFoundError,
    Registry,
    RegistryFrozenError,
)

from conftest import bean
from fixtures import ArchiveMovieFinder, DefaultMovieFinder, MovieCatalog, MovieFinder, SampleObject


class TestRegistration(unittest.TestCase):
    """Tests for register()"""

    def test_register_and_find_by_name(self):
        registry = Registry()
        definition = bean("sampleObject", SampleObject)
        registry.register(definition)

        self.assertIs(registry.find_by_name("sampleObject"), definition)
        self.assertEqual(len(registry), 1)

    def test_alias_finds_same_definition(self):
        registry = Registry()
        definition = BeanDefinition(names=("firstName", "secondName"), declared_type=SampleObject)
        registry.register(definition)

        self.assertIs(registry.find_by_name("secondName"), definition)
        self.assertEqual(registry.aliases("firstName"), ("secondName",))

    def test_duplicate_name_raises(self):
        registry = Registry()
        registry.register(bean("sampleObject", SampleObject))

        with self.assertRaises(DuplicateNameError) as ctx:
            registry.register(bean("sampleObject", MovieCatalog))

        self.assertIn("sampleObject", str(ctx.exception))

    def test_overlapping_alias_raises(self):
        """Any shared name is a conflict, not only the canonical one."""
        registry = Registry()
        registry.register(BeanDefinition(names=("a", "b"), declared_type=SampleObject))

        with self.assertRaises(DuplicateNameError):
            registry.register(BeanDefinition(names=("c", "b"), declared_type=SampleObject))

        # The failed definition left nothing behind
        self.assertFalse(registry.contains("c"))

    def test_duplicate_primary_raises(self):
        registry = Registry()
        registry.register(bean("first", MovieCatalog, primary=True))

        with self.assertRaises(DuplicatePrimaryError):
            registry.register(bean("second", MovieCatalog, primary=True))

    def test_primary_for_different_types_allowed(self):
        registry = Registry()
        registry.register(bean("catalog", MovieCatalog, primary=True))
        registry.register(bean("sample", SampleObject, primary=True))

        self.assertEqual(len(registry), 2)

    def test_conflicts_share_base_class(self):
        self.assertTrue(issubclass(DuplicateNameError, DefinitionConflictError))
        self.assertTrue(issubclass(DuplicatePrimaryError, DefinitionConflictError))

    def test_container_refuses_duplicate_definitions(self):
        """The container refuses to start with conflicting definitions."""
        with self.assertRaises(DuplicateNameError):
            BeanContainer([bean("x", SampleObject), bean("x", SampleObject)])


class TestLookup(unittest.TestCase):
    """Tests for find_by_name() and find_by_type()"""

    def setUp(self):
        self.registry = Registry()
        self.default = bean("defaultMovieFinder", MovieFinder, constructor=DefaultMovieFinder)
        self.archive = bean("archiveMovieFinder", ArchiveMovieFinder)
        self.sample = bean("sampleObject", SampleObject)
        for definition in (self.default, self.sample, self.archive):
            self.registry.register(definition)

    def test_find_by_name_not_found_lists_registered(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.registry.find_by_name("missing")

        message = str(ctx.exception)
        self.assertIn("missing", message)
        self.assertIn("defaultMovieFinder", message)

    def test_find_by_type_registration_order(self):
        """Subclass declarations match; order follows registration."""
        self.assertEqual(
            self.registry.find_by_type(MovieFinder),
            [self.default, self.archive],
        )

    def test_find_by_type_exact_subclass(self):
        self.assertEqual(self.registry.find_by_type(ArchiveMovieFinder), [self.archive])

    def test_find_by_type_empty_is_valid(self):
        self.assertEqual(self.registry.find_by_type(MovieCatalog), [])

    def test_find_by_qualifier(self):
        registry = Registry()
        tagged = bean("first", MovieCatalog, qualifiers={"main"})
        registry.register(tagged)
        registry.register(bean("second", MovieCatalog))

        self.assertEqual(registry.find_by_qualifier(MovieCatalog, "main"), [tagged])
        self.assertEqual(registry.find_by_qualifier(None, "main"), [tagged])

    def test_names_are_canonical(self):
        self.assertEqual(
            self.registry.names(),
            ["defaultMovieFinder", "sampleObject", "archiveMovieFinder"],
        )


class TestFreeze(unittest.TestCase):
    """Tests for freeze-on-first-use"""

    def test_register_after_freeze_raises(self):
        registry = Registry()
        registry.freeze()

        with self.assertRaises(RegistryFrozenError):
            registry.register(bean("sampleObject", SampleObject))

    def test_container_freezes_on_first_get(self):
        container = BeanContainer([bean("sampleObject", SampleObject)])
        container.get("sampleObject")

        with self.assertRaises(RegistryFrozenError):
            container.register(bean("movieCatalog", MovieCatalog))
        container.shutdown()


if __name__ == '__main__':
    unittest.main()
