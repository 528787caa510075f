"""Load branchwork configuration"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import toml

from .config_classes import DriverConfig, ProgramConfig
from .exceptions import UserResolvableError

LOG = logging.getLogger(__name__)

DEFAULT_CONFIG_FILEPATH = Path("branchwork.toml")


class ConfigError(UserResolvableError):
    """Error loading configuration"""


@dataclass
class Config:
    root: Path
    config_file: Union[Path, None]
    driver: DriverConfig = field(default_factory=DriverConfig)
    program: ProgramConfig = field(default_factory=ProgramConfig)


def load(config_file: Union[str, Path, None] = None, *, required=False) -> Config:
    """Load the configuration

    With no config_file, look for branchwork.toml in the working directory.
    A missing file is only an error if required is set; otherwise defaults are
    used.

    """
    config_file = Path(config_file) if config_file else DEFAULT_CONFIG_FILEPATH

    try:
        data = toml.load(config_file)
    except FileNotFoundError:
        if required:
            raise ConfigError(
                f"{config_file} not found",
                "Check the path, or run without --config to use the defaults.",
            )
        LOG.info("No %s, using defaults", config_file)
        return Config(root=Path.cwd(), config_file=None)
    except toml.TomlDecodeError as exc:
        raise ConfigError(f"Can't parse {config_file}", str(exc)) from exc

    try:
        driver_config = DriverConfig(**data.pop("driver", {}))
        program_config = ProgramConfig(**data.pop("program", {}))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Bad configuration in {config_file}", str(exc)) from exc

    if data:
        LOG.warning("Ignoring unknown sections in %s: %s", config_file, list(data))

    return Config(
        root=config_file.parent.resolve(),
        config_file=config_file,
        driver=driver_config,
        program=program_config,
    )
