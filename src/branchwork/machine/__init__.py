from .engine import Done, Engine, EngineStatus, Errored, StepResult, Yielded
from .frame import External, Frame
from .program import Goto, Program, Return, Yield
from .signals import Receive, Send, receive, send
