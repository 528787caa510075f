"""Fork nodes"""

import logging
import math
from typing import Any, Callable, Optional

from ..machine.engine import Engine

LOG = logging.getLogger(__name__)


class ForkNode:
    """One addressable branch: an engine plus admission bookkeeping

    limit is how many branches forked from this node may be in flight at
    once (1 means "drop events while one is running", math.inf means fully
    concurrent). active counts the in-flight ones.

    """

    def __init__(
        self,
        engine: Engine,
        label: Any = None,
        *,
        limit: float = math.inf,
        active: int = 0,
        undo: Optional[Callable[[], Any]] = None,
        redo: Optional[Callable[[], Any]] = None,
    ):
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        if active > limit:
            raise ValueError(f"active ({active}) is over the limit ({limit})")
        self.engine = engine
        self.label = label
        self.limit = limit
        self.active = active
        self.undo = undo
        self.redo = redo

    def fork(self) -> "ForkNode":
        """A new node with a cloned engine. This node is left untouched"""
        return ForkNode(
            self.engine.clone(),
            self.label,
            limit=self.limit,
            active=0,
            undo=self.undo,
            redo=self.redo,
        )

    def admit(self) -> bool:
        """Take an in-flight slot, if there's one free"""
        if self.active < self.limit:
            self.active += 1
            return True
        LOG.info("%s at limit (%s/%s)", self, self.active, self.limit)
        return False

    def release(self):
        self.active = max(0, self.active - 1)

    @property
    def saturated(self) -> bool:
        return self.active >= self.limit

    def __repr__(self):
        return f"<ForkNode {self.label!r} {self.active}/{self.limit}>"
