from .history import History
from .node import ForkNode
