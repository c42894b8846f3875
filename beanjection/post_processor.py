"""
PostProcessor

Hooks invoked around bean initialization, able to observe or replace
the instance.

Contract:
    - ``before_init(instance, name)`` runs after dependency injection and
      before the init hooks; ``after_init(instance, name)`` runs after them.
    - Returning an object carries it forward in place of the instance.
      Returning ``None`` keeps the current instance.
    - A processor signals a fatal problem by returning
      ``ProcessingFailure(reason)``. That aborts the bean's creation with
      PostProcessingError. A processor that raises is treated the same way.

Example::

    class AuditPostProcessor(BeanPostProcessor):
        def before_init(self, instance, name):
            print(f"initializing {name}")
            return instance

    container.add_post_processor(AuditPostProcessor())
"""

from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

from loguru import logger

from .exceptions import PostProcessingError


@dataclass(frozen=True)
class ProcessingFailure:
    """Error result a post-processor returns to abort a bean's creation."""
    reason: str
    cause: Optional[BaseException] = None


class BeanPostProcessor:
    """Base post-processor. Both hooks default to identity."""

    def before_init(self, instance: Any, name: str) -> Any:
        return instance

    def after_init(self, instance: Any, name: str) -> Any:
        return instance


class PostProcessorChain:
    """Ordered list of post-processors, applied in registration order."""

    def __init__(self):
        self._processors: List[BeanPostProcessor] = []

    def add(self, processor: BeanPostProcessor) -> None:
        if not isinstance(processor, BeanPostProcessor):
            raise TypeError(
                f"{type(processor).__name__} is not a BeanPostProcessor"
            )
        self._processors.append(processor)
        logger.debug(f"Added post-processor {type(processor).__name__}")

    def apply_before(self, instance: Any, name: str) -> Any:
        return self._apply("before_init", instance, name)

    def apply_after(self, instance: Any, name: str) -> Any:
        return self._apply("after_init", instance, name)

    def _apply(self, hook: str, instance: Any, name: str) -> Any:
        current = instance
        for processor in self._processors:
            try:
                result = getattr(processor, hook)(current, name)
            except Exception as e:
                result = ProcessingFailure(f"{type(e).__name__}: {e}", e)

            if isinstance(result, ProcessingFailure):
                raise PostProcessingError(
                    f"{type(processor).__name__}.{hook}() rejected bean '{name}': {result.reason}",
                    name,
                    processor,
                ) from result.cause
            if result is None:
                continue
            if result is not current:
                logger.debug(
                    f"{type(processor).__name__}.{hook}() replaced bean '{name}' "
                    f"with {type(result).__name__}"
                )
            current = result
        return current

    def __iter__(self) -> Iterator[BeanPostProcessor]:
        return iter(list(self._processors))

    def __len__(self) -> int:
        return len(self._processors)
