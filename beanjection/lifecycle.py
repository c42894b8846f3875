"""
Lifecycle

Instance state machine, lifecycle capabilities and the LifecycleRunner.

Every created instance moves forward through::

    INSTANTIATED -> DEPENDENCIES_INJECTED -> BEFORE_INIT_PROCESSED
        -> INITIALIZED -> AFTER_INIT_PROCESSED -> READY

and singletons additionally through ``PRE_DESTROYED -> DESTROYED`` when
the container shuts down. Prototypes are handed to the caller at READY
and never see the destroy phase.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Tuple, TYPE_CHECKING

from loguru import logger

from .exceptions import BeanCreationError, IllegalStateTransitionError, TeardownFailure

if TYPE_CHECKING:
    from .definition import BeanDefinition, LifecycleHook


class InstanceState(Enum):
    """Lifecycle state of a created instance"""
    INSTANTIATED = 1
    DEPENDENCIES_INJECTED = 2
    BEFORE_INIT_PROCESSED = 3
    INITIALIZED = 4
    AFTER_INIT_PROCESSED = 5
    READY = 6
    PRE_DESTROYED = 7
    DESTROYED = 8


class InitializingBean(ABC):
    """Generic post-construct capability.

    ``after_properties_set`` runs once every dependency has been injected,
    before any bean-specific init method.
    """

    @abstractmethod
    def after_properties_set(self) -> None:
        pass


class DisposableBean(ABC):
    """Generic pre-destroy capability.

    ``destroy`` runs at container shutdown, before any bean-specific
    destroy method. Only called for singletons.
    """

    @abstractmethod
    def destroy(self) -> None:
        pass


@dataclass
class ResolvedInstance:
    """A produced object together with its definition and lifecycle state.

    Attributes:
        name: Canonical bean name
        definition: The BeanDefinition the object was produced from
        instance: Current object; post-processors may replace it
        state: Current InstanceState
        early_exposed: True once the raw object was handed out to
            satisfy a setter/field slot during a cycle
    """
    name: str
    definition: 'BeanDefinition'
    instance: Any
    state: InstanceState = InstanceState.INSTANTIATED
    early_exposed: bool = False

    def advance(self, state: InstanceState) -> None:
        """Move to a later state.

        Raises:
            IllegalStateTransitionError: When ``state`` is not after the current one
        """
        if state.value <= self.state.value:
            raise IllegalStateTransitionError(
                f"Bean '{self.name}' cannot move from {self.state.name} to {state.name}"
            )
        self.state = state

    @property
    def is_ready(self) -> bool:
        return self.state is InstanceState.READY


def _ordered(hooks: Tuple['LifecycleHook', ...]) -> List['LifecycleHook']:
    # Capability hooks first, then named methods; each method runs once
    ordered = [h for h in hooks if h.capability] + [h for h in hooks if not h.capability]
    seen = set()
    result = []
    for hook in ordered:
        if hook.method in seen:
            continue
        seen.add(hook.method)
        result.append(hook)
    return result


class LifecycleRunner:
    """Drives an instance through its init and destroy hooks.

    Example::

        runner = LifecycleRunner()
        runner.initialize(resolved)   # after_properties_set(), then init()
        ...
        runner.destroy(resolved)      # destroy(), then close()
    """

    def initialize(self, resolved: ResolvedInstance) -> None:
        """Run the definition's init hooks on the current instance.

        Raises:
            BeanCreationError: When a hook is missing or raises
        """
        for hook in _ordered(resolved.definition.init_hooks):
            callback = self._lookup(resolved, hook)
            logger.debug(f"Init hook {hook.method}() on bean '{resolved.name}'")
            try:
                callback()
            except Exception as e:
                raise BeanCreationError(
                    f"Init method {hook.method}() of bean '{resolved.name}' "
                    f"raised an exception: {e}",
                    resolved.name,
                ) from e
        resolved.advance(InstanceState.INITIALIZED)

    def destroy(self, resolved: ResolvedInstance) -> List[TeardownFailure]:
        """Run the definition's destroy hooks.

        Every hook is attempted and the instance always reaches DESTROYED.

        Returns:
            One TeardownFailure per hook that was missing or raised
        """
        resolved.advance(InstanceState.PRE_DESTROYED)
        failures: List[TeardownFailure] = []
        try:
            for hook in _ordered(resolved.definition.destroy_hooks):
                logger.debug(f"Destroy hook {hook.method}() on bean '{resolved.name}'")
                try:
                    self._lookup(resolved, hook)()
                except Exception as e:
                    failures.append(TeardownFailure(resolved.name, e, hook.method))
        finally:
            resolved.advance(InstanceState.DESTROYED)
        return failures

    @staticmethod
    def _lookup(resolved: ResolvedInstance, hook: 'LifecycleHook'):
        callback = getattr(resolved.instance, hook.method, None)
        if not callable(callback):
            raise BeanCreationError(
                f"Bean '{resolved.name}' ({type(resolved.instance).__name__}) "
                f"has no callable lifecycle method '{hook.method}'",
                resolved.name,
            )
        return callback
