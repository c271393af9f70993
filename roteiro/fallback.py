from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Tuple, Type, TypeVar

T = TypeVar("T")

Attempt = Tuple[str, Callable[[], T]]

logger = logging.getLogger(__name__)


def is_present(value: object) -> bool:
    return value is not None and value != ""


def try_in_order(
    attempts: Iterable[Attempt],
    accept: Callable[[T], bool] = is_present,
    *,
    errors: Tuple[Type[BaseException], ...] = (Exception,),
    log: logging.Logger | logging.LoggerAdapter | None = None,
    label: str = "attempt",
) -> Optional[Tuple[str, T]]:
    """Run *attempts* in order and return ``(name, result)`` of the first
    acceptable one, or ``None`` once the list is exhausted.

    Exceptions listed in *errors* are logged and treated as "try the next
    one"; anything else propagates to the caller.
    """
    log = log or logger
    for name, attempt in attempts:
        try:
            result = attempt()
        except errors as exc:
            log.warning("%s %s failed: %s", label, name, exc)
            continue
        if accept(result):
            log.debug("%s %s succeeded", label, name)
            return name, result
        log.debug("%s %s gave no usable result", label, name)
    return None


__all__ = ["try_in_order", "is_present"]
