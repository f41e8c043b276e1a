"""Best-effort helpers used where a failure should degrade to a default."""

from __future__ import annotations

from typing import Callable, Optional, Sequence, Tuple, Type, TypeVar

from .logging import get_logger

T = TypeVar("T")

_LOGGER = get_logger("failsafe")


def with_fallback(
    operation: Callable[[], T],
    default: T,
    *,
    errors: Tuple[Type[BaseException], ...] = (Exception,),
    label: str | None = None,
) -> T:
    """Run ``operation`` and return ``default`` when it raises one of ``errors``.

    Exceptions outside ``errors`` propagate unchanged, so callers can narrow the
    recovered set (for example to ``OSError``) and still surface programming
    errors.
    """
    try:
        return operation()
    except errors as exc:
        _LOGGER.debug(
            "%s failed, using fallback %r: %s",
            label or getattr(operation, "__name__", "operation"),
            default,
            exc,
        )
        return default


def first_available(
    operations: Sequence[Callable[[], Optional[T]]],
    *,
    label: str | None = None,
) -> Optional[T]:
    """Return the first truthy result from ``operations``; failing steps count as no answer."""
    for operation in operations:
        result = with_fallback(operation, None, label=label)
        if result:
            return result
    return None


__all__ = ["first_available", "with_fallback"]
