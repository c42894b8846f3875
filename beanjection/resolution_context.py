"""
ResolutionContext

This module provides the context management for dependency resolution.
The ResolutionContext tracks the ordered path of beans currently being
created on this thread, together with the kind of edge that led into each
of them. The path is what cycle detection inspects.

The context is stored in a ContextVar so every thread sees only its own
path and is automatically managed during bean creation.
"""

from contextvars import ContextVar
from typing import List, Optional, Tuple

from .definition import InjectionKind


class ResolutionContext:
    """Creation path of the current thread.

    Attributes:
        path: (bean name, edge kind) pairs from the outermost bean being
            created to the innermost

    Example (internal usage)::

        ctx = ResolutionContext()
        child = ctx.enter("a", InjectionKind.LOOKUP)
        grandchild = child.enter("b", InjectionKind.SETTER)
        grandchild.cycle_from("a")  # ['a', 'b', 'a']
        grandchild.edge_kinds_from("a")  # [InjectionKind.SETTER]
    """

    def __init__(self, path: Optional[List[Tuple[str, InjectionKind]]] = None):
        self.path: List[Tuple[str, InjectionKind]] = path or []

    def enter(self, name: str, kind: InjectionKind) -> 'ResolutionContext':
        """Return a new context with ``name`` appended to the path."""
        return ResolutionContext(self.path + [(name, kind)])

    def is_resolving(self, name: str) -> bool:
        return any(entry == name for entry, _ in self.path)

    def cycle_from(self, name: str) -> List[str]:
        """Names from the first occurrence of ``name`` to the end, closed with ``name``."""
        names = [entry for entry, _ in self.path]
        start = names.index(name)
        return names[start:] + [name]

    def edge_kinds_from(self, name: str) -> List[InjectionKind]:
        """Kinds of the edges leaving ``name`` along the path.

        The edge that re-enters ``name`` is not on the path yet; callers
        append it themselves.
        """
        names = [entry for entry, _ in self.path]
        start = names.index(name)
        return [kind for _, kind in self.path[start + 1:]]

    @property
    def current(self) -> Optional[str]:
        """The bean being created right now, if any."""
        return self.path[-1][0] if self.path else None


# Resolution path of the current thread
_resolution_context: ContextVar[Optional[ResolutionContext]] = ContextVar(
    '_BEANJECTION_RESOLUTION_CONTEXT',
    default=None
)
