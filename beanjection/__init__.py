# Public API
from .core import BeanContainer
from .definition import (
    BeanDefinition,
    Collection,
    FactorySpec,
    Injection,
    InjectionKind,
    LifecycleHook,
    Ref,
)
from .definition_builder import INFER_DESTROY_METHOD
from .exceptions import (
    AmbiguousDependencyError,
    BeanCreationError,
    BeanjectionError,
    BeanNotOfRequiredTypeError,
    CircularDependencyError,
    ContainerClosedError,
    DefinitionConflictError,
    DuplicateNameError,
    DuplicatePrimaryError,
    IllegalStateTransitionError,
    InvalidDefinitionError,
    NotFoundError,
    PostProcessingError,
    RegistryFrozenError,
    ShutdownError,
    ShutdownReport,
    TeardownFailure,
    UnresolvedDependencyError,
)
from .lifecycle import DisposableBean, InitializingBean, InstanceState, LifecycleRunner, ResolvedInstance
from .module import BeanModule
from .post_processor import BeanPostProcessor, PostProcessorChain, ProcessingFailure
from .registry import Registry
from .resolver import UNSET, DependencyResolver
from .scope import BeanScope, ScopeStore

__all__ = [
    "BeanContainer",
    "BeanModule",
    "BeanScope",
    # Definitions
    "BeanDefinition",
    "Ref",
    "Collection",
    "Injection",
    "InjectionKind",
    "FactorySpec",
    "LifecycleHook",
    "INFER_DESTROY_METHOD",
    # Lifecycle
    "InitializingBean",
    "DisposableBean",
    "InstanceState",
    "ResolvedInstance",
    "LifecycleRunner",
    # Extension points
    "BeanPostProcessor",
    "PostProcessorChain",
    "ProcessingFailure",
    # Building blocks
    "Registry",
    "DependencyResolver",
    "ScopeStore",
    "UNSET",
    # Exceptions
    "BeanjectionError",
    "InvalidDefinitionError",
    "DefinitionConflictError",
    "DuplicateNameError",
    "DuplicatePrimaryError",
    "RegistryFrozenError",
    "NotFoundError",
    "UnresolvedDependencyError",
    "AmbiguousDependencyError",
    "CircularDependencyError",
    "BeanCreationError",
    "PostProcessingError",
    "BeanNotOfRequiredTypeError",
    "ContainerClosedError",
    "IllegalStateTransitionError",
    "ShutdownError",
    "ShutdownReport",
    "TeardownFailure",
]


__version__ = '0.1.0'
