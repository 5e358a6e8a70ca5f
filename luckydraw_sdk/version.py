"""
Version information for the LuckyDraw SDK.
"""
import importlib.metadata
import pathlib

import tomli

try:
    __version__ = importlib.metadata.version("luckydraw-sdk")
except importlib.metadata.PackageNotFoundError:
    # Source checkout without an install
    try:
        with (pathlib.Path(__file__).parent.parent / "pyproject.toml").open("rb") as f:
            __version__ = tomli.load(f)["project"]["version"]
    except (OSError, KeyError, tomli.TOMLDecodeError):
        __version__ = "0.0.0"
