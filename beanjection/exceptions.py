"""
Beanjection Exceptions

Custom exception hierarchy for the Beanjection IoC container
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple


class BeanjectionError(Exception):
    """
    Base exception for all Beanjection errors.

    All Beanjection-specific exceptions inherit from this class.
    You can catch this to handle any container error generically.

    Example:
        >>> try:
        ...     lister = container.get("movieLister")
        ... except BeanjectionError as e:
        ...     print(f"DI error: {e}")
    """

    pass


class InvalidDefinitionError(BeanjectionError):
    """
    Raised when a BeanDefinition is malformed.

    Common causes:
        - A definition without any name
        - Both ``constructor`` and ``factory`` given
        - Neither given while the declared type is not a class
        - ``created_at_start=True`` on a prototype definition
    """

    pass


class DefinitionConflictError(BeanjectionError):
    """Base class for registration-time conflicts. The container refuses to start."""

    pass


class DuplicateNameError(DefinitionConflictError):
    """
    Raised when a bean name or alias is registered twice.

    Names are unique across every definition's ``names``; a second
    registration is never allowed to silently overwrite the first.

    Solution:
        Give each definition its own names::

            module.singleton[MovieCatalog](name="firstMovieCatalog")
            module.singleton[MovieCatalog](name="secondMovieCatalog")
    """

    pass


class DuplicatePrimaryError(DefinitionConflictError):
    """
    Raised when two definitions of the same declared type are both primary.

    Only one definition per declared type may be the default pick.
    """

    pass


class RegistryFrozenError(BeanjectionError):
    """
    Raised when registering after the container started resolving.

    The registry freezes on ``refresh()`` or on the first ``get`` call.
    Register every definition and post-processor before that point.
    """

    pass


class NotFoundError(BeanjectionError):
    """
    Raised when a requested name or type has no definition.

    Note:
        The error message includes the registered names to help
        identify available beans.
    """

    pass


class UnresolvedDependencyError(BeanjectionError):
    """
    Raised when a required dependency slot has no matching definition.

    Solution:
        Register a bean of the requested type, or mark the slot optional::

            Ref(MovieFinder, required=False)
    """

    pass


class AmbiguousDependencyError(BeanjectionError):
    """
    Raised when more than one equally-eligible candidate matches a slot.

    Attributes:
        candidates: Names of all matching definitions

    Solution:
        1. Mark one definition ``primary=True``
        2. Narrow the slot with ``qualifier=`` or ``name=``
        3. Ask for every candidate with ``Collection(Type)``
    """

    def __init__(self, message: str, candidates: Sequence[str] = ()):
        super().__init__(message)
        self.candidates: Tuple[str, ...] = tuple(candidates)


class CircularDependencyError(BeanjectionError):
    """
    Raised when an unresolvable dependency cycle is detected.

    A cycle is unresolvable when it only passes through constructor or
    factory slots, or when any participant is prototype-scoped.

    Attributes:
        path: The bean names forming the cycle, first name repeated last

    Example of an unresolvable cycle::

        class ACircularObject:
            def __init__(self, b: BCircularObject): ...

        class BCircularObject:
            def __init__(self, a: ACircularObject): ...  # Circular!

    Solution:
        Move one side of the cycle to a setter or field slot so that a
        singleton can be constructed before the other side needs it.
    """

    def __init__(self, message: str, path: Sequence[str] = ()):
        super().__init__(message)
        self.path: Tuple[str, ...] = tuple(path)


class BeanCreationError(BeanjectionError):
    """
    Raised when a constructor, factory or lifecycle hook fails.

    The original exception is chained as ``__cause__``.

    Attributes:
        bean_name: The bean whose creation failed
    """

    def __init__(self, message: str, bean_name: Optional[str] = None):
        super().__init__(message)
        self.bean_name = bean_name


class PostProcessingError(BeanCreationError):
    """
    Raised when a post-processor signals a fatal problem.

    Initialization of the bean is aborted and the error reaches the
    original ``get`` caller. A failed singleton is not cached, so a later
    ``get`` retries from scratch.

    Attributes:
        bean_name: The bean being processed
        processor: The post-processor that reported the failure
    """

    def __init__(self, message: str, bean_name: Optional[str] = None, processor: object = None):
        super().__init__(message, bean_name)
        self.processor = processor


class BeanNotOfRequiredTypeError(BeanjectionError):
    """Raised when ``get(name, required_type)`` finds a bean of another type."""

    pass


class ContainerClosedError(BeanjectionError):
    """
    Raised when attempting to use a container after ``shutdown()``.

    Solution:
        Create a new ``BeanContainer`` instead of reusing a closed one.
    """

    pass


class IllegalStateTransitionError(BeanjectionError):
    """Raised when an instance is moved backwards through its lifecycle."""

    pass


@dataclass(frozen=True)
class TeardownFailure:
    """A destroy hook that raised during shutdown."""
    bean_name: str
    error: BaseException
    method: Optional[str] = None

    def __str__(self) -> str:
        where = f"{self.bean_name}.{self.method}()" if self.method else self.bean_name
        return f"{where}: {type(self.error).__name__}: {self.error}"


class ShutdownError(BeanjectionError):
    """
    Aggregate of every teardown failure of one ``shutdown()`` call.

    Attributes:
        failures: The collected TeardownFailure records
    """

    def __init__(self, failures: Sequence[TeardownFailure]):
        self.failures: Tuple[TeardownFailure, ...] = tuple(failures)
        details = "; ".join(str(f) for f in self.failures)
        beans = len({f.bean_name for f in self.failures})
        super().__init__(f"{beans} bean(s) failed to shut down: {details}")


@dataclass
class ShutdownReport:
    """
    Result of ``BeanContainer.shutdown()``.

    Attributes:
        destroyed: Names of singletons torn down, in teardown order
        failures: Destroy hooks that raised (teardown continued past them)
    """
    destroyed: List[str] = field(default_factory=list)
    failures: List[TeardownFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_if_failed(self) -> None:
        """Raise ShutdownError when any teardown failed."""
        if self.failures:
            raise ShutdownError(self.failures)
