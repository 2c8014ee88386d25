# MIT License
# Copyright (c) 2025 Hashborn

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class Dispatch(Protocol):
    """
    Anything that executes a call on behalf of a caller.

    dispatch() returns None on success and raises a DispatchError subclass
    on failure. It must not leave partial writes behind when it raises.
    """

    def dispatch(self, caller: str, call: Any) -> None:
        ...


def checked_add(a: int, b: int, maximum: int) -> Optional[int]:
    """a + b, or None if the sum does not fit below `maximum`."""
    result = a + b
    if result > maximum:
        return None
    return result


def checked_sub(a: int, b: int) -> Optional[int]:
    """a - b, or None if it would go below zero."""
    if b > a:
        return None
    return a - b
