"""
Waypoint API: Raw Environment Snapshot
======================================

What:  Takes the one-time snapshot of environment input the validator runs on.
How:   Reads an optional .env file with python-dotenv (`${VAR}` references are
       expanded), then overlays the process environment. Process variables win
       over file values, so deployment platforms can override a checked-in file.
When:  Once per startup, inside load_config().
"""

import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union

from dotenv import dotenv_values

logger = logging.getLogger("waypoint.config")

RawEnvironment = Mapping[str, str]

DEFAULT_ENV_FILE = ".env"


def read_env_file(env_file: Union[str, Path, None]) -> Dict[str, str]:
    """
    Parse a dotenv file into a plain dict.

    A missing file is not an error: production hosts usually inject variables
    directly. Keys declared without a value are dropped.
    """
    if env_file is None:
        return {}
    path = Path(env_file)
    if not path.is_file():
        logger.debug("No env file at %s, using process environment only", path)
        return {}

    parsed = dotenv_values(path, interpolate=True, encoding="utf-8")
    values = {key: value for key, value in parsed.items() if value is not None}
    logger.debug("Loaded %d variables from %s", len(values), path)
    return values


def snapshot_environment(
    environ: Optional[Mapping[str, str]] = None,
    env_file: Union[str, Path, None] = DEFAULT_ENV_FILE,
) -> RawEnvironment:
    """
    Build the immutable RawEnvironment for this startup.

    Args:
        environ:   Source of process variables. Defaults to os.environ; tests
                   pass plain dicts so no process state is touched.
        env_file:  Optional dotenv file, or None to skip file loading.
    """
    merged = read_env_file(env_file)
    merged.update(os.environ if environ is None else environ)
    return MappingProxyType(merged)
