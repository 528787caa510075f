"""Protocol signals yielded by body programs

A body program talks to the driver through exactly two kinds of yield:

- Receive: ready for the next external event. Becomes a history entry.
- Send: forward a payload to the driver's sink, then carry on.

"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union


@dataclass(frozen=True)
class Receive:
    limit: Optional[float] = None  # None -> inherit the parent's limit
    active: int = 0
    undo: Optional[Callable[[], Any]] = None
    redo: Optional[Callable[[], Any]] = None

    def __post_init__(self):
        if self.limit is not None and not (self.limit >= 0):
            raise ValueError(f"limit must be >= 0, got {self.limit}")
        if self.active < 0:
            raise ValueError(f"active must be >= 0, got {self.active}")

    def effective_limit(self, parent_limit: float = math.inf) -> float:
        """The limit for a node created here, min'd with its parent's limit"""
        if self.limit is None:
            return parent_limit
        return min(parent_limit, self.limit)


@dataclass(frozen=True)
class Send:
    payload: Any = None


ProtocolSignal = Union[Receive, Send]


def receive(limit=None, undo=None, redo=None, active=0) -> Receive:
    return Receive(limit=limit, active=active, undo=undo, redo=redo)


def send(payload) -> Send:
    return Send(payload)
