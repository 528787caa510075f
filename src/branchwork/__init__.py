"""Forkable coroutines with undo/redo branch history"""

__version__ = "0.1.0"

from .driver import Driver
from .history import ForkNode, History
from .machine import (
    Done,
    Engine,
    EngineStatus,
    Errored,
    External,
    Frame,
    Goto,
    Program,
    Receive,
    Return,
    Send,
    Yield,
    Yielded,
    receive,
    send,
)
