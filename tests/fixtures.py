"""
Test Fixtures

Sample classes used across test modules. They mirror the usual container
walkthrough: movie listers and finders, catalogs, lifecycle samples,
circular objects and an exchange-rate collaborator.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from beanjection import DisposableBean, InitializingBean


class MovieFinder(ABC):
    """Finder capability"""

    @abstractmethod
    def find_all(self) -> List[str]:
        pass


class DefaultMovieFinder(MovieFinder):
    """Finder returning a fixed list"""

    def find_all(self) -> List[str]:
        return ["Arrival", "Heat"]


class ArchiveMovieFinder(MovieFinder):
    """Second finder implementation for ambiguity tests"""

    def find_all(self) -> List[str]:
        return ["Metropolis"]


class ConstructorMovieLister:
    """Lister receiving its finder through the constructor"""

    def __init__(self, movie_finder: MovieFinder):
        self.movie_finder = movie_finder


class SetterMovieLister:
    """Lister receiving its finder through a setter"""

    def __init__(self):
        self.movie_finder: Optional[MovieFinder] = None

    def set_movie_finder(self, movie_finder: MovieFinder) -> None:
        self.movie_finder = movie_finder


class FieldMovieLister:
    """Lister receiving its finder through field injection"""
    movie_finder: Optional[MovieFinder] = None


class MovieCatalog:
    """Plain catalog, registered several times under different names"""
    pass


class CustomerPreferenceDao:
    """Leaf dependency"""
    pass


class MovieRecommender:
    """Constructor dependency plus a collection setter"""

    def __init__(self, customer_preference_dao: CustomerPreferenceDao):
        self.customer_preference_dao = customer_preference_dao
        self.movie_catalogs: Dict[str, MovieCatalog] = {}

    def set_movie_catalogs(self, movie_catalogs: Dict[str, MovieCatalog]) -> None:
        self.movie_catalogs = movie_catalogs


class SampleObject:
    """Dependency-free sample"""
    pass


class SampleFactoryObject:
    """Only constructible through its static factory"""

    def __init__(self, token: object):
        self.token = token

    @staticmethod
    def create() -> 'SampleFactoryObject':
        return SampleFactoryObject(token="created-by-factory")


class PrototypeIntoSingleton:
    """Singleton holding a prototype"""

    def __init__(self, prototype_bean: SampleObject):
        self.prototype_bean = prototype_bean


class SingletonIntoPrototype:
    """Prototype holding a singleton"""

    def __init__(self, singleton_bean: SampleObject):
        self.singleton_bean = singleton_bean


class ACircularObject:
    """Constructor side of a circular pair"""

    def __init__(self, b: 'BCircularObject'):
        self.b = b


class BCircularObject:
    """Constructor side of a circular pair"""

    def __init__(self, a: ACircularObject):
        self.a = a


class SetterCircularA:
    """Setter side of a circular pair"""

    def __init__(self):
        self.b = None

    def set_b(self, b: 'SetterCircularB') -> None:
        self.b = b


class SetterCircularB:
    """Setter side of a circular pair"""

    def __init__(self):
        self.a = None

    def set_a(self, a: SetterCircularA) -> None:
        self.a = a


class InitializingSampleObject(InitializingBean):
    """Generic capability plus a named init method"""

    def __init__(self):
        self.calls: List[str] = []
        self.message = ""

    def after_properties_set(self) -> None:
        self.calls.append("after_properties_set")
        self.message = "InitializingSampleObject.after_properties_set() called"

    def init(self) -> None:
        self.calls.append("init")


class PojoSampleObject:
    """Named init method and an inferable close() method"""

    def __init__(self):
        self.message = ""
        self.closed = False

    def init(self) -> None:
        self.message = "PojoSampleObject.init() called"

    def close(self) -> None:
        self.closed = True


class DisposableSampleObject(DisposableBean):
    """Generic destroy capability plus a named destroy method"""

    def __init__(self):
        self.calls: List[str] = []

    def destroy(self) -> None:
        self.calls.append("destroy")

    def cleanup(self) -> None:
        self.calls.append("cleanup")


class ExchangeRateProvider(ABC):
    """External collaborator, reached only through this interface"""

    @abstractmethod
    def get_rate(self, currency: str) -> float:
        pass


class FixedExchangeRateProvider(ExchangeRateProvider):
    """Offline provider"""

    def get_rate(self, currency: str) -> float:
        return {"USD": 1300.0, "EUR": 1400.0}.get(currency, 0.0)


class ExchangeRateRenderer:
    """Renders rates fetched from the provider"""

    def __init__(self, provider: ExchangeRateProvider):
        self.provider = provider

    def render(self, currency: str) -> str:
        return f"{currency}: {self.provider.get_rate(currency):.1f}"
