"""Undo/redo history of fork nodes"""

import logging
from typing import List

from ..exceptions import AtEndError, AtStartError
from .node import ForkNode

LOG = logging.getLogger(__name__)


class History:
    """An ordered list of nodes with a cursor

    entries[0] is the root (the state before the first event). Everything up
    to and including the cursor is the live path, anything after it can be
    redone. Pushing a new node discards the redo-able future.

    """

    def __init__(self, root: ForkNode):
        self.entries: List[ForkNode] = [root]
        self.cursor = 0

    def push(self, node: ForkNode):
        dropped = len(self.entries) - (self.cursor + 1)
        if dropped:
            LOG.info("Discarding %d future entries", dropped)
        del self.entries[self.cursor + 1 :]
        self.entries.append(node)
        self.cursor = len(self.entries) - 1

    def undo(self):
        """Step back, calling the current entry's undo callback"""
        if self.cursor == 0:
            raise AtStartError("Already at the first entry", "Nothing to undo.")
        node = self.entries[self.cursor]
        if node.undo is not None:
            node.undo()
        self.cursor -= 1
        LOG.debug("Undo %r -> cursor %d", node.label, self.cursor)

    def redo(self):
        """Step forward, calling the next entry's redo callback"""
        if self.cursor == len(self.entries) - 1:
            raise AtEndError("Already at the last entry", "Nothing to redo.")
        node = self.entries[self.cursor + 1]
        if node.redo is not None:
            node.redo()
        self.cursor += 1
        LOG.debug("Redo %r -> cursor %d", node.label, self.cursor)

    def current(self) -> ForkNode:
        return self.entries[self.cursor]

    @property
    def root(self) -> ForkNode:
        return self.entries[0]

    @property
    def labels(self) -> list:
        return [node.label for node in self.entries[1:]]

    @property
    def can_undo(self) -> bool:
        return self.cursor > 0

    @property
    def can_redo(self) -> bool:
        return self.cursor < len(self.entries) - 1

    def __len__(self):
        return len(self.entries)

    def __repr__(self):
        return f"<History {self.cursor + 1}/{len(self.entries)}>"
