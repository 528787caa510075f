"""Branchwork configuration data, usually stored in branchwork.toml"""

import math
from dataclasses import dataclass
from typing import Union

# Constants
DEFAULT_PROGRAM_NAME = "program"


@dataclass(unsafe_hash=True)
class DriverConfig:
    # Limit for the root node, when its first Receive doesn't give one
    default_limit: Union[int, float] = math.inf
    # Record probe events and logs
    probe: bool = True
    # Log every sink payload at INFO
    echo_sink: bool = False

    def __post_init__(self):
        # TOML has no infinity literal that everyone agrees on
        if self.default_limit is None or str(self.default_limit).lower() in (
            "inf",
            "infinity",
            "none",
        ):
            self.default_limit = math.inf
        if self.default_limit != math.inf:
            self.default_limit = int(self.default_limit)
        if self.default_limit < 0:
            raise ValueError(f"default_limit must be >= 0, got {self.default_limit}")


@dataclass(unsafe_hash=True)
class ProgramConfig:
    # Module attribute holding the Program, for the CLI
    name: str = DEFAULT_PROGRAM_NAME
