"""The branch driver

A Driver owns one History. Each dispatched event forks the current node's
engine and runs the fork until it is ready for the next event (a Receive
yield), forwarding Send payloads to the sink on the way. Branches that get
to a Receive become new history entries; branches that finish don't.

Admission control: a node only lets `limit` branches forked from it run at
once. Events dispatched while it is saturated are dropped.

Drivers are plain values, so any number of them can coexist:

    driver = Driver(program, sink=print)
    await driver.dispatch({"type": "fetch", "id": 3})
    driver.undo()

"""

import asyncio
import logging
from functools import singledispatchmethod
from typing import Any, Callable, Optional

from .config_classes import DriverConfig
from .exceptions import (
    AtEndError,
    AtStartError,
    BranchError,
    ProtocolViolationError,
)
from .history import ForkNode, History
from .machine.engine import Done, Engine, Errored, Yielded
from .machine.probe import Probe
from .machine.program import Program
from .machine.signals import Receive, Send

LOG = logging.getLogger(__name__)

ROOT_BRANCH = 0


def event_label(event) -> Any:
    """The history label for an event: its type if it has one"""
    if isinstance(event, dict) and "type" in event:
        return event["type"]
    return getattr(event, "type", event)


def shortstr(obj, maxl=40) -> str:
    """Convert an object to string and truncate to a maximum length"""
    s = repr(obj)
    return (s[:maxl] + "...") if len(s) > maxl else s


class Driver:
    """Dispatch events into forked branches, with undo/redo"""

    def __init__(
        self,
        program: Program,
        sink: Callable[[Any], Any] = None,
        *,
        config: DriverConfig = None,
    ):
        self.program = program.freeze()
        self.sink = sink
        self.config = config or DriverConfig()
        self.probe = Probe(enabled=self.config.probe)
        self._history: Optional[History] = None
        self._starting: Optional[asyncio.Future] = None
        self._forks = 0  # always increasing branch counter

    ## Start-up

    async def start(self):
        """Run the root program to its first receive point

        Safe to call many times; dispatch calls it.
        """
        if self._history is not None:
            return
        if self._starting is None:
            self._starting = asyncio.ensure_future(self._boot())
        await self._starting

    async def _boot(self):
        LOG.info("Starting %s", self.program.name)
        self.probe.event(ROOT_BRANCH, "start", program=self.program.name)
        engine = Engine(self.program)
        signal = await self._run_branch(engine, None, ROOT_BRANCH, label=None)
        if signal is None:
            raise ProtocolViolationError(
                f"`{self.program.name}' finished before its first receive",
                "The root program must yield a Receive before it can take events.",
            )
        root = self._new_node(engine, None, signal, self.config.default_limit)
        self._history = History(root)
        LOG.info("Started: %s", root)

    @property
    def started(self) -> bool:
        return self._history is not None

    ## Events

    async def dispatch(self, event, label=None) -> bool:
        """Run event in a new branch of the current history entry

        Returns False if the event was dropped because the current node is at
        its limit. Errors raised by the branch come out as BranchError; the
        driver stays usable.

        """
        await self.start()
        if label is None:
            label = event_label(event)

        current = self._history.current()
        if not current.admit():
            LOG.info("Dropped %s: %s is at its limit", shortstr(label), current)
            self.probe.event(self._history.cursor, "drop", label=shortstr(label))
            return False

        self._forks += 1
        tag = self._forks
        try:
            branch = current.fork()
            self.probe.event(
                tag, "fork", label=shortstr(label), parent=self._history.cursor
            )
            signal = await self._run_branch(branch.engine, event, tag, label)
            if signal is None:
                self.probe.event(tag, "done", label=shortstr(label))
                return True

            node = self._new_node(branch.engine, label, signal, current.limit)
            self._history.push(node)
            self.probe.event(
                tag, "receive", label=shortstr(label), index=self._history.cursor
            )
            return True
        finally:
            current.release()

    def _new_node(self, engine, label, signal: Receive, parent_limit) -> ForkNode:
        """A history node for a branch that stopped at signal"""
        limit = signal.effective_limit(parent_limit)
        if signal.active > limit:
            raise ProtocolViolationError(
                f"Receive with active={signal.active} over its limit ({limit})",
                "A node can't start with more branches in flight than it allows.",
            )
        return ForkNode(
            engine,
            label,
            limit=limit,
            active=signal.active,
            undo=signal.undo,
            redo=signal.redo,
        )

    async def _run_branch(self, engine: Engine, value, tag, label) -> Optional[Receive]:
        """Resume engine until a Receive (returned) or the end (None)"""
        result = await engine.aresume(value)
        while isinstance(result, Yielded):
            if self._on_signal(result.value, tag):
                return result.value
            result = await engine.aresume(None)

        if isinstance(result, Errored):
            self.probe.event(tag, "error", error=repr(result.error))
            LOG.info("Branch %s failed: %r", shortstr(label), result.error)
            raise BranchError(label, result.error) from result.error

        assert isinstance(result, Done)
        return None

    @singledispatchmethod
    def _on_signal(self, signal, tag) -> bool:
        """Handle a yielded signal. True means the branch stops here"""
        raise ProtocolViolationError(
            f"Yielded {shortstr(signal)} ({type(signal).__name__})",
            "Body programs may only yield Receive or Send.",
        )

    @_on_signal.register
    def _(self, signal: Receive, tag) -> bool:
        return True

    @_on_signal.register
    def _(self, signal: Send, tag) -> bool:
        self.probe.event(tag, "send", payload=shortstr(signal.payload))
        if self.config.echo_sink:
            LOG.info("[%s] send %s", tag, shortstr(signal.payload))
        if self.sink is not None:
            self.sink(signal.payload)
        return False

    ## Navigation

    def undo(self):
        if self._history is None:
            raise AtStartError("Driver hasn't started", "Nothing to undo.")
        label = self._history.current().label
        self._history.undo()
        self.probe.event(self._history.cursor, "undo", label=shortstr(label))

    def redo(self):
        if self._history is None:
            raise AtEndError("Driver hasn't started", "Nothing to redo.")
        self._history.redo()
        label = self._history.current().label
        self.probe.event(self._history.cursor, "redo", label=shortstr(label))

    ## Views

    @property
    def history(self) -> Optional[History]:
        return self._history

    @property
    def labels(self) -> list:
        return self._history.labels if self._history else []

    @property
    def current(self):
        """Label of the current entry (None at the root)"""
        return self._history.current().label if self._history else None

    @property
    def current_index(self) -> int:
        return self._history.cursor if self._history else 0

    @property
    def can_undo(self) -> bool:
        return self._history is not None and self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history is not None and self._history.can_redo

    def __repr__(self):
        return f"<Driver {self.program.name} {self._history}>"
