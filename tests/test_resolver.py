"""
Resolver Tests

Tests for candidate selection: primary tie-break, ambiguity, qualifiers,
optional slots and collection slots.
"""

import sys
import os
import unittest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from beanjection import (
    UNSET,
    AmbiguousDependencyError,
    Collection,
    DependencyResolver,
    Injection,
    InjectionKind,
    Ref,
    Registry,
    UnresolvedDependencyError,
)

from conftest import BeanjectionTestCase, bean
from fixtures import (
    CustomerPreferenceDao,
    MovieCatalog,
    MovieRecommender,
    SampleObject,
)


class TestSelection(unittest.TestCase):
    """Tests for DependencyResolver.select() and resolve()"""

    def setUp(self):
        self.registry = Registry()
        self.provided = []

        def provide(definition, kind):
            self.provided.append((definition.name, kind))
            return definition.name

        self.resolver = DependencyResolver(self.registry, provide)

    def test_single_candidate_is_used(self):
        self.registry.register(bean("sampleObject", SampleObject))

        self.assertEqual(self.resolver.resolve(Ref(SampleObject), InjectionKind.CONSTRUCTOR), "sampleObject")
        self.assertEqual(self.provided, [("sampleObject", InjectionKind.CONSTRUCTOR)])

    def test_primary_breaks_tie(self):
        self.registry.register(bean("firstMovieCatalog", MovieCatalog))
        self.registry.register(bean("secondMovieCatalog", MovieCatalog, primary=True))

        self.assertEqual(
            self.resolver.resolve(Ref(MovieCatalog), InjectionKind.SETTER),
            "secondMovieCatalog",
        )

    def test_ambiguous_without_primary(self):
        self.registry.register(bean("firstMovieCatalog", MovieCatalog))
        self.registry.register(bean("secondMovieCatalog", MovieCatalog))

        with self.assertRaises(AmbiguousDependencyError) as ctx:
            self.resolver.resolve(Ref(MovieCatalog), InjectionKind.SETTER)

        self.assertEqual(ctx.exception.candidates, ("firstMovieCatalog", "secondMovieCatalog"))
        self.assertEqual(self.provided, [])

    def test_qualifier_matches_bean_name(self):
        """A qualifier picks the bean of that name even when another is primary."""
        self.registry.register(bean("firstMovieCatalog", MovieCatalog, primary=True))
        self.registry.register(bean("secondMovieCatalog", MovieCatalog))

        self.assertEqual(
            self.resolver.resolve(Ref(MovieCatalog, qualifier="secondMovieCatalog"), InjectionKind.SETTER),
            "secondMovieCatalog",
        )

    def test_qualifier_matches_label(self):
        self.registry.register(bean("firstMovieCatalog", MovieCatalog))
        self.registry.register(bean("secondMovieCatalog", MovieCatalog, qualifiers={"action"}))

        self.assertEqual(
            self.resolver.resolve(Ref(MovieCatalog, qualifier="action"), InjectionKind.FIELD),
            "secondMovieCatalog",
        )

    def test_qualifier_shadowed_by_bean_of_other_type(self):
        """A label that names a bean of another type still matches as a qualifier."""
        self.registry.register(bean("action", SampleObject))
        self.registry.register(bean("firstMovieCatalog", MovieCatalog))
        self.registry.register(bean("secondMovieCatalog", MovieCatalog, qualifiers={"action"}))

        self.assertEqual(
            self.resolver.resolve(Ref(MovieCatalog, qualifier="action"), InjectionKind.FIELD),
            "secondMovieCatalog",
        )

    def test_qualifier_naming_bean_of_other_type_fails_without_match(self):
        self.registry.register(bean("action", SampleObject))
        self.registry.register(bean("firstMovieCatalog", MovieCatalog))

        with self.assertRaises(UnresolvedDependencyError) as ctx:
            self.resolver.resolve(Ref(MovieCatalog, qualifier="action"), InjectionKind.FIELD)

        self.assertIn("is a SampleObject", str(ctx.exception))

    def test_unknown_qualifier_fails(self):
        self.registry.register(bean("firstMovieCatalog", MovieCatalog))

        with self.assertRaises(UnresolvedDependencyError) as ctx:
            self.resolver.resolve(Ref(MovieCatalog, qualifier="comedy"), InjectionKind.SETTER)

        self.assertIn("comedy", str(ctx.exception))

    def test_name_with_wrong_type_fails(self):
        self.registry.register(bean("sampleObject", SampleObject))

        with self.assertRaises(UnresolvedDependencyError):
            self.resolver.resolve(Ref(MovieCatalog, name="sampleObject"), InjectionKind.SETTER)

    def test_name_without_type(self):
        self.registry.register(bean("sampleObject", SampleObject))

        self.assertEqual(self.resolver.resolve(Ref(name="sampleObject"), InjectionKind.SETTER), "sampleObject")

    def test_missing_required_fails_with_hint(self):
        with self.assertRaises(UnresolvedDependencyError) as ctx:
            self.resolver.resolve(Ref(SampleObject), InjectionKind.CONSTRUCTOR)

        self.assertIn("Hint:", str(ctx.exception))
        self.assertIn("SampleObject", str(ctx.exception))

    def test_missing_optional_is_unset(self):
        result = self.resolver.resolve(Ref(SampleObject, required=False), InjectionKind.SETTER)

        self.assertIs(result, UNSET)
        self.assertFalse(result)

    def test_optional_creation_slot_becomes_none(self):
        definition = bean("lister", CustomerPreferenceDao, dependencies=(Ref(SampleObject, required=False),))
        self.registry.register(definition)

        self.assertEqual(self.resolver.resolve_arguments(definition), [None])

    def test_requester_excluded_when_others_match(self):
        """A decorator-style bean receives the other implementation, not itself."""
        inner = bean("inner", MovieCatalog)
        outer = bean("outer", MovieCatalog)
        self.registry.register(inner)
        self.registry.register(outer)

        self.assertIs(self.resolver.select(Ref(MovieCatalog), requester=outer), inner)


class TestCollectionSlots(unittest.TestCase):
    """Tests for Collection slots"""

    def setUp(self):
        self.registry = Registry()
        self.resolver = DependencyResolver(self.registry, lambda d, kind: d.name.upper())

    def test_collection_keyed_by_name_in_registration_order(self):
        self.registry.register(bean("firstMovieCatalog", MovieCatalog))
        self.registry.register(bean("secondMovieCatalog", MovieCatalog))

        result = self.resolver.resolve(Collection(MovieCatalog), InjectionKind.SETTER)

        self.assertEqual(list(result), ["firstMovieCatalog", "secondMovieCatalog"])
        self.assertEqual(result["secondMovieCatalog"], "SECONDMOVIECATALOG")

    def test_collection_ignores_primary_and_ambiguity(self):
        self.registry.register(bean("firstMovieCatalog", MovieCatalog, primary=True))
        self.registry.register(bean("secondMovieCatalog", MovieCatalog))

        self.assertEqual(len(self.resolver.resolve(Collection(MovieCatalog), InjectionKind.SETTER)), 2)

    def test_empty_collection_is_valid(self):
        self.assertEqual(self.resolver.resolve(Collection(MovieCatalog), InjectionKind.SETTER), {})

    def test_requester_excluded_from_own_collection(self):
        first = bean("firstMovieCatalog", MovieCatalog)
        self.registry.register(first)
        self.registry.register(bean("secondMovieCatalog", MovieCatalog))

        result = self.resolver.resolve_collection(MovieCatalog, InjectionKind.SETTER, requester=first)

        self.assertEqual(list(result), ["secondMovieCatalog"])


class TestResolutionThroughContainer(BeanjectionTestCase):
    """Resolution rules observed through BeanContainer"""

    def test_collection_setter_receives_every_catalog(self):
        container = self.container(
            bean("customerPreferenceDao", CustomerPreferenceDao),
            bean("firstMovieCatalog", MovieCatalog, primary=True),
            bean("secondMovieCatalog", MovieCatalog),
            bean(
                "movieRecommender",
                MovieRecommender,
                dependencies=(Ref(CustomerPreferenceDao),),
                setter_slots=(Injection("set_movie_catalogs", Collection(MovieCatalog)),),
            ),
        )
        recommender = container.get("movieRecommender")

        self.assertIs(recommender.customer_preference_dao, container.get("customerPreferenceDao"))
        self.assertEqual(list(recommender.movie_catalogs), ["firstMovieCatalog", "secondMovieCatalog"])
        self.assertIs(recommender.movie_catalogs["secondMovieCatalog"], container.get("secondMovieCatalog"))

    def test_ambiguity_surfaces_from_get(self):
        container = self.container(
            bean("firstMovieCatalog", MovieCatalog),
            bean("secondMovieCatalog", MovieCatalog),
            bean(
                "holder",
                SampleObject,
                field_slots=(Injection("catalog", Ref(MovieCatalog)),),
            ),
        )

        with self.assertRaises(AmbiguousDependencyError):
            container.get("holder")


if __name__ == '__main__':
    unittest.main()
