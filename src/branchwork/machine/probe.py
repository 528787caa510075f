"""Driver Probe"""

import logging
from dataclasses import dataclass

from .serialisable import Serialisable, now_str

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeEvent(Serialisable):
    branch: int
    time: str
    event: str
    data: dict


class Probe:
    """A small interface for storing driver events

    Each event is tagged with the branch (history entry index, or the fork
    sequence number for in-flight branches) it came from.

    """

    def __init__(self, enabled=True):
        self.enabled = enabled
        self.events = []

    def event(self, branch: int, etype: str, **data):
        LOG.debug("[%s] %s %s", branch, etype, data)
        if self.enabled:
            e = ProbeEvent(branch=branch, time=now_str(), event=etype, data=data)
            self.events.append(e)

    def event_names(self) -> list:
        return [e.event for e in self.events]
