"""Serialisable mixin"""
import datetime
from dataclasses import asdict


class Serialisable:
    """A basic serialisation mixin.

    The inheriting class must be a dataclass.

    """

    def serialise(self):
        """Produce a JSON-serialisable object"""
        return asdict(self)


def now_str() -> str:
    return datetime.datetime.now().isoformat()
