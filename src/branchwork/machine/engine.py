"""The coroutine engine

An Engine runs one body Program, one step at a time, from a Frame. It stops
at every Yield, leaving a new Frame behind, until the program returns or
fails. Terminal states are absorbing.

Sync and async steps share one run loop (`_run`), a generator which yields
the awaitables produced by async steps. `resume` drives it without an event
loop (and refuses async steps), `aresume` drives it with one.

Forking is `clone()`: the suspended frame is deep-copied and the program is
shared.

"""

import copy
import enum
import inspect
import logging
from dataclasses import dataclass
from functools import singledispatchmethod
from typing import Any, Union

from ..exceptions import (
    AsyncStepError,
    CloneWhileRunningError,
    InvalidStateError,
    ProgramError,
    ProtocolViolationError,
)
from .frame import Completed, Failed, Frame, Outcome, ReturnValue, ThrowValue
from .program import Goto, Program, Return, Step, Yield

LOG = logging.getLogger(__name__)


class EngineStatus(enum.Enum):
    SUSPENDED = "suspended"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL = (EngineStatus.COMPLETED, EngineStatus.FAILED)


## Step results


@dataclass(frozen=True)
class Yielded:
    value: Any


@dataclass(frozen=True)
class Done:
    value: Any = None


@dataclass(frozen=True)
class Errored:
    error: BaseException


StepResult = Union[Yielded, Done, Errored]


def _discard(awaitable):
    """Close an awaitable that will never be awaited"""
    if inspect.iscoroutine(awaitable):
        awaitable.close()


class Engine:
    """Executes a body program, pausing at each Yield"""

    def __init__(self, program: Program, frame: Frame = None):
        self.program = program.freeze()
        self._frame = frame if frame is not None else Frame(program.entry)
        self._outcome: Outcome = None
        self.status = EngineStatus.SUSPENDED

    @property
    def frame(self) -> Frame:
        """The current frame (None once terminal)"""
        return None if self.status in TERMINAL else self._frame

    @property
    def outcome(self) -> Outcome:
        return self._outcome

    @property
    def suspended(self) -> bool:
        return self.status == EngineStatus.SUSPENDED

    @property
    def finished(self) -> bool:
        return self.status in TERMINAL

    def clone(self) -> "Engine":
        """Fork this engine: an independent copy of its frame, sharing the program"""
        if self.status != EngineStatus.SUSPENDED:
            raise CloneWhileRunningError(
                f"Engine is {self.status.value}",
                "Only suspended engines have a frame to copy.",
            )
        return Engine(self.program, self._frame.clone())

    ## Synchronous interface

    def resume(self, value=None) -> StepResult:
        """Run until the next yield, feeding value to the current step"""
        self._start(None)
        return self._drive(value)

    def throw(self, error: BaseException) -> StepResult:
        """Raise error inside the coroutine at its current position"""
        self._start(ThrowValue(error))
        return self._drive(None)

    def close(self, value=None) -> StepResult:
        """Complete the coroutine with value"""
        self._start(ReturnValue(value))
        return self._drive(None)

    ## Asynchronous interface

    async def aresume(self, value=None) -> StepResult:
        self._start(None)
        return await self._adrive(value)

    async def athrow(self, error: BaseException) -> StepResult:
        self._start(ThrowValue(error))
        return await self._adrive(None)

    async def aclose(self, value=None) -> StepResult:
        self._start(ReturnValue(value))
        return await self._adrive(None)

    ##

    def _start(self, signal):
        if self.status in TERMINAL:
            raise InvalidStateError(
                f"Engine is {self.status.value}", "Terminal engines can't be resumed."
            )
        if self.status == EngineStatus.RUNNING:
            raise InvalidStateError(
                "Engine is already running",
                "Wait for the current resume to finish first.",
            )
        if signal is not None:
            self._frame = self._frame.with_pending(signal)
        self.status = EngineStatus.RUNNING

    def _drive(self, value) -> StepResult:
        gen = self._run(value, can_await=False)
        try:
            gen.send(None)
        except StopIteration as stop:
            return stop.value
        # _run never yields when it can't await
        raise AssertionError("engine run loop yielded in sync mode")

    async def _adrive(self, value) -> StepResult:
        gen = self._run(value, can_await=True)
        sent, error = None, None
        while True:
            try:
                if error is not None:
                    awaitable = gen.throw(error)
                else:
                    awaitable = gen.send(sent)
            except StopIteration as stop:
                return stop.value
            try:
                sent, error = await awaitable, None
            except Exception as exc:
                sent, error = None, exc
            except BaseException as exc:
                # Cancelled mid-step: there's no consistent frame to go back to
                gen.close()
                self._finish(Failed(exc))
                raise

    def _run(self, value, can_await: bool):
        """The run loop. Yields awaitables, returns a StepResult"""
        pending = self._frame.pending
        position = self._frame.position
        self._frame = self._frame.with_pending(None)
        # Steps work on a private copy, so captured frames never change
        env = copy.deepcopy(self._frame._locals)

        try:
            if isinstance(pending, ReturnValue):
                LOG.debug("Closing at %s", position)
                return self._finish(Completed(pending.value))

            if isinstance(pending, ThrowValue):
                position, value = self._catch(self.program[position], pending.error)

            while True:
                step = self.program[position]
                LOG.debug("Step %s (%s)", position, self.program.name)

                try:
                    result = step.fn(env, value)
                except Exception as exc:
                    position, value = self._catch(step, exc)
                    continue

                if inspect.isawaitable(result):
                    if not can_await:
                        _discard(result)
                        raise AsyncStepError(
                            f"Step `{position}' is asynchronous",
                            "Use aresume/athrow/aclose for programs with async steps.",
                        )
                    try:
                        result = yield result
                    except Exception as exc:
                        position, value = self._catch(step, exc)
                        continue

                outcome = self.evalt(result, env)
                if isinstance(outcome, Goto):
                    position, value = outcome.label, outcome.value
                    continue
                return outcome

        except Exception as exc:
            LOG.debug("Failed at %s: %r", position, exc)
            return self._finish(Failed(exc))

    def _catch(self, step: Step, exc: BaseException):
        """Where to continue after step raised exc. Re-raises if uncaught"""
        if step.catch is None:
            raise exc
        LOG.debug("Step %s raised %r, catching in %s", step.label, exc, step.catch)
        return step.catch, exc

    def _finish(self, outcome) -> StepResult:
        self._outcome = outcome
        if isinstance(outcome, Completed):
            self.status = EngineStatus.COMPLETED
            return Done(outcome.value)
        self.status = EngineStatus.FAILED
        return Errored(outcome.error)

    @singledispatchmethod
    def evalt(self, t, env) -> Union[StepResult, Goto]:
        """Evaluate a step's transition"""
        raise ProtocolViolationError(
            f"Step returned {t!r} ({type(t).__name__})",
            "Steps must return Yield, Goto, Return or None.",
        )

    @evalt.register
    def _(self, t: Yield, env):
        if t.then not in self.program:
            raise ProgramError(f"Can't yield into unknown step `{t.then}'")
        self._frame = Frame(t.then, env)
        self.status = EngineStatus.SUSPENDED
        return Yielded(t.value)

    @evalt.register
    def _(self, t: Goto, env):
        return t

    @evalt.register
    def _(self, t: Return, env):
        return self._finish(Completed(t.value))

    @evalt.register(type(None))
    def _(self, t, env):
        return self._finish(Completed(None))

    def __repr__(self):
        where = self._frame.position if self.suspended else self.status.value
        return f"<Engine {id(self)} {self.program.name}@{where}>"
