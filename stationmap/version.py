"""
Version retrieval module.

This module provides a way to get the project version, preferring the installed
distribution metadata and falling back to pyproject.toml for source checkouts.
"""

from importlib.metadata import PackageNotFoundError, version

import tomli
from pydantic import validate_call

from stationmap import BASE_PATH
from stationmap.configs.logging_init import logger


@validate_call(validate_return=True)
def get_version() -> str:
    """
    Retrieve the project version.

    Returns:
        str: Project version
    """
    try:
        return version("stationmap")
    except PackageNotFoundError:
        pyproject_path = BASE_PATH / "pyproject.toml"

    with open(pyproject_path, "rb") as f:
        pyproject_data = tomli.load(f)

    project_version = pyproject_data["project"]["version"]
    logger.debug(f"Project version: {project_version}")

    return project_version
