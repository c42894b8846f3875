"""
Scope

Bean scopes and the ScopeStore that caches singleton instances.

Singletons are created at most once per container. Creation is
single-flight: concurrent first-time requests block on a container-wide
re-entrant lock until the one creating thread finishes, then all observe
the same instance. Prototypes are created on demand and never retained.
"""

import threading
from enum import Enum
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from .lifecycle import ResolvedInstance


class BeanScope(Enum):
    """Instance reuse policy of a bean"""
    SINGLETON = "SINGLETON"
    PROTOTYPE = "PROTOTYPE"


class ScopeStore:
    """Cache of singleton instances for one container.

    Singletons completed while an outer creation is still running are
    held back in ``_pending`` and published together once the outermost
    creation returns. Other threads therefore never observe a singleton
    that holds a reference to an unfinished bean.

    Attributes:
        _singletons: Published singletons keyed by canonical name, in
            completion order (used to reverse teardown)
        _pending: Singletons completed inside the running creation, in
            completion order. Only the creating thread (which holds the
            lock) reaches them.
        _early: Singletons constructed but not yet ready, keyed by name.
            Only reachable through the creating thread's resolution path.
        _lock: Re-entrant lock serializing singleton creation
        _depth: Nesting level of get_or_create calls creating under the lock

    Example::

        store = ScopeStore()
        resolved = store.get_or_create("movieFinder", create)
        assert store.get_or_create("movieFinder", create) is resolved
    """

    def __init__(self):
        self._singletons: Dict[str, 'ResolvedInstance'] = {}
        self._pending: Dict[str, 'ResolvedInstance'] = {}
        self._early: Dict[str, 'ResolvedInstance'] = {}
        self._lock = threading.RLock()
        self._depth = 0

    def get_ready(self, name: str) -> Optional['ResolvedInstance']:
        """Return the published singleton for ``name`` or None. Lock-free."""
        return self._singletons.get(name)

    def lookup(self, name: str) -> Optional['ResolvedInstance']:
        """Published, pending or early instance for ``name``, in that order."""
        for source in (self._singletons, self._pending, self._early):
            resolved = source.get(name)
            if resolved is not None:
                return resolved
        return None

    def get_or_create(
        self,
        name: str,
        create: Callable[[], 'ResolvedInstance']
    ) -> 'ResolvedInstance':
        """Return the cached singleton, creating it at most once.

        A creation that raises is not cached; a later call retries. When
        the failed singleton had already handed out its early reference,
        every singleton completed since its creation began is discarded
        too, since any of them may hold the raw object.

        Args:
            name: Canonical bean name
            create: Produces a READY ResolvedInstance

        Returns:
            The single ResolvedInstance for ``name``
        """
        resolved = self._singletons.get(name)
        if resolved is not None:
            return resolved

        with self._lock:
            # Another thread may have finished while we waited
            resolved = self._singletons.get(name)
            if resolved is None:
                resolved = self._pending.get(name)
            if resolved is not None:
                return resolved

            mark = len(self._pending)
            self._depth += 1
            try:
                resolved = create()
                self._pending[name] = resolved
            except BaseException:
                self._discard_since(name, mark)
                raise
            finally:
                self._early.pop(name, None)
                self._depth -= 1
                if self._depth == 0:
                    self._publish()
            return resolved

    def _discard_since(self, name: str, mark: int) -> None:
        early = self._early.get(name)
        if early is None or not early.early_exposed:
            return
        for dependent in list(self._pending)[mark:]:
            del self._pending[dependent]
            logger.warning(
                f"Discarded singleton '{dependent}': it may hold an early reference "
                f"to '{name}', whose creation failed"
            )

    def _publish(self) -> None:
        for name, resolved in self._pending.items():
            self._singletons[name] = resolved
            logger.debug(f"Cached singleton '{name}' (#{len(self._singletons)})")
        self._pending.clear()

    def create(self, create: Callable[[], 'ResolvedInstance']) -> 'ResolvedInstance':
        """Create a prototype instance. The store keeps no reference."""
        return create()

    def add_early(self, resolved: 'ResolvedInstance') -> None:
        """Expose a constructed, not yet ready singleton for cycle resolution."""
        self._early[resolved.name] = resolved

    def get_early(self, name: str) -> Optional['ResolvedInstance']:
        return self._early.get(name)

    def drain(self) -> List['ResolvedInstance']:
        """Remove every singleton and return them newest first."""
        with self._lock:
            instances = list(reversed(list(self._singletons.values())))
            self._singletons.clear()
            self._early.clear()
            return instances

    def contains(self, name: str) -> bool:
        return name in self._singletons

    def __len__(self) -> int:
        return len(self._singletons)
