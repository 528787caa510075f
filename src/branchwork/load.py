"""Load body programs from Python modules"""

import importlib
import importlib.util
import logging
import sys
import traceback
from pathlib import Path

from .exceptions import UserResolvableError
from .machine.program import Program

LOG = logging.getLogger(__name__)


class LoadError(UserResolvableError):
    """Error loading a program"""


def _exec(modname, fn):
    try:
        return fn()
    except LoadError:
        raise
    except Exception as exc:
        tb = "".join(traceback.format_exception(*sys.exc_info()))
        raise LoadError(f"Could not load Python module `{modname}'.", tb) from exc


def _load_file(path: Path):
    spec = importlib.util.spec_from_file_location(path.stem, path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module


def _load_module(modname: str):
    """Import a module by dotted name, or from a path to a .py file"""
    if modname.endswith(".py"):
        path = Path(modname)
        if not path.exists():
            raise LoadError(f"Cannot find `{modname}'", "Check the file path.")
        return _exec(modname, lambda: _load_file(path))

    try:
        spec = importlib.util.find_spec(modname)
    except ModuleNotFoundError:
        spec = None
    if not spec:
        raise LoadError(
            f"Cannot find Python module `{modname}'", "Is it on the PYTHONPATH?"
        )
    return _exec(modname, lambda: importlib.import_module(modname))


def load_program(modname: str, name: str = "program") -> Program:
    """Get the Program called name from a module"""
    LOG.info(f"Loading {modname}:{name}")
    m = _load_module(modname)
    try:
        program = getattr(m, name)
    except AttributeError as exc:
        raise LoadError(
            f"Could not find {name} in {modname}.",
            f"Use --program to pick another attribute.",
        ) from exc

    if not isinstance(program, Program):
        raise LoadError(
            f"{modname}:{name} is a {type(program).__name__}, not a Program", ""
        )
    LOG.info(f"Loaded {program}")
    return program.freeze()
