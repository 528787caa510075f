"""Suspension frames

A Frame is the paused state of one engine: where to continue, the local
bindings, and any signal to inject on the next resume. Frames are owned by
exactly one engine and never change once captured. Forking copies the frame
(value semantics), so two branches never share mutable locals.

"""

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Optional, Union


class External:
    """Wrap a value which is owned outside the coroutine

    External values are shared by reference between a frame and its clones,
    instead of being deep-copied. Use this for handles the body program does
    not own (clients, connections, sinks...). Mutating them from one branch is
    visible in all branches.

    """

    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value

    def __deepcopy__(self, memo):
        return self

    def __copy__(self):
        return self

    def __eq__(self, other):
        return isinstance(other, External) and other.value is self.value

    def __hash__(self):
        return id(self.value)

    def __repr__(self):
        return f"<External {self.value!r}>"


## Pending signals


@dataclass(frozen=True)
class ThrowValue:
    """Raise error inside the coroutine on next resume"""

    error: BaseException


@dataclass(frozen=True)
class ReturnValue:
    """Complete the coroutine with value on next resume"""

    value: Any = None


Signal = Union[ThrowValue, ReturnValue, None]


@dataclass(frozen=True)
class Frame:
    """Data local to one paused coroutine"""

    position: str
    _locals: Dict[str, Any] = field(default_factory=dict, repr=False)
    pending: Signal = None

    @property
    def locals(self):
        """Read-only view of the local bindings"""
        return MappingProxyType(self._locals)

    def with_pending(self, signal: Signal) -> "Frame":
        return Frame(self.position, self._locals, signal)

    def clone(self) -> "Frame":
        """Make a structurally independent copy (External values are shared)"""
        return Frame(self.position, copy.deepcopy(self._locals), self.pending)

    def serialise(self) -> dict:
        """A plain dict view, for logs and probes"""
        return dict(
            position=self.position,
            locals={name: repr(value) for name, value in self._locals.items()},
            pending=repr(self.pending) if self.pending else None,
        )

    def __str__(self):
        return f"<Frame {id(self)} position={self.position}>"


## Terminal markers


@dataclass(frozen=True)
class Completed:
    value: Any = None


@dataclass(frozen=True)
class Failed:
    error: BaseException


Outcome = Optional[Union[Completed, Failed]]
