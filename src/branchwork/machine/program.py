"""Body programs

A Program is a named set of steps. Each step is a Python callable (plain or
async) taking the frame locals and an input value, and returning a
Transition that tells the engine where to go next:

    prog = Program("counter")

    @prog.step("start", entry=True)
    def start(env, event):
        env["count"] = 0
        return Yield(receive(limit=1), then="loop")

    @prog.step("loop")
    def loop(env, event):
        env["count"] += 1
        return Yield(send(env["count"]), then="wait")

Programs are frozen before the first engine runs them and are shared,
never copied, between all clones of that engine.

"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..exceptions import ProgramError

LOG = logging.getLogger(__name__)


## Transitions


class Transition:
    """Base class for step results"""


@dataclass(frozen=True)
class Yield(Transition):
    """Suspend with value, continuing at then on resume"""

    value: Any
    then: str


@dataclass(frozen=True)
class Goto(Transition):
    """Continue at label immediately, passing value as its input"""

    label: str
    value: Any = None


@dataclass(frozen=True)
class Return(Transition):
    """Complete the coroutine"""

    value: Any = None


@dataclass(frozen=True)
class Step:
    label: str
    fn: Callable
    catch: Optional[str] = None

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.fn)

    def __repr__(self):
        kind = "async " if self.is_async else ""
        catch = f" catch->{self.catch}" if self.catch else ""
        return f"<Step {self.label}: {kind}{self.fn.__qualname__}{catch}>"


class Program:
    """An immutable (once frozen) body program"""

    def __init__(self, name: str, entry: str = None):
        self.name = name
        self.entry = entry
        self._steps: Dict[str, Step] = {}
        self._frozen = False

    def step(self, label: str = None, *, entry=False, catch: str = None):
        """Decorator: register fn as the step called label"""

        def _register(fn):
            self.add_step(label or fn.__name__, fn, entry=entry, catch=catch)
            return fn

        return _register

    def add_step(self, label: str, fn: Callable, *, entry=False, catch=None):
        if self._frozen:
            raise ProgramError(
                f"Program `{self.name}' is frozen",
                "Add all steps before creating an engine for it.",
            )
        if label in self._steps:
            raise ProgramError(f"Duplicate step `{label}' in `{self.name}'")
        if not callable(fn):
            raise ProgramError(f"Step `{label}' is not callable ({type(fn)})")
        self._steps[label] = Step(label, fn, catch)
        if entry or self.entry is None:
            self.entry = label

    def freeze(self) -> "Program":
        """Check the program is well formed, and stop further changes"""
        if self._frozen:
            return self
        if not self._steps:
            raise ProgramError(f"Program `{self.name}' has no steps")
        if self.entry not in self._steps:
            raise ProgramError(
                f"Entry step `{self.entry}' is not defined in `{self.name}'"
            )
        for s in self._steps.values():
            if s.catch is not None and s.catch not in self._steps:
                raise ProgramError(
                    f"Step `{s.label}' catches into `{s.catch}', which doesn't exist"
                )
        self._frozen = True
        LOG.debug("Froze %s: %s", self.name, list(self._steps))
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def labels(self) -> list:
        return list(self._steps)

    def __getitem__(self, label: str) -> Step:
        try:
            return self._steps[label]
        except KeyError:
            raise ProgramError(
                f"No step `{label}' in `{self.name}'",
                f"Defined steps: {', '.join(self._steps)}",
            )

    def __contains__(self, label):
        return label in self._steps

    def listing(self) -> str:
        """Get a listing of the program's steps"""
        lines = [f";; {self.name}:"]
        for i, s in enumerate(self._steps.values()):
            marker = ">" if s.label == self.entry else " "
            catch = f"  (catch -> {s.catch})" if s.catch else ""
            kind = "async " if s.is_async else ""
            lines.append(f" {marker}{i:3} | {s.label:<16} {kind}{s.fn.__qualname__}{catch}")
        return "\n".join(lines)

    def __repr__(self):
        return f"<Program {self.name} ({len(self._steps)} steps)>"
