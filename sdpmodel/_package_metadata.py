"""Package metadata, from the installed distribution or from the source tree's pyproject.toml."""

from __future__ import annotations

import functools
import importlib.metadata as importlib_metadata
import warnings
from email.message import Message
from pathlib import Path
from typing import Any, Mapping

import toml


_PYPROJECT_PATH: Path = Path(__file__).resolve().parent.parent / "pyproject.toml"


@functools.lru_cache(maxsize=None)
def _load_metadata() -> Message | Mapping[str, Any] | None:
    try:
        return importlib_metadata.metadata(__package__ or __name__)
    except importlib_metadata.PackageNotFoundError:
        pass
    # running from a source checkout, without an installed distribution
    if _PYPROJECT_PATH.exists():
        return toml.load(_PYPROJECT_PATH)
    warnings.warn("No distribution info nor pyproject.toml found for package metadata", stacklevel=2)
    return None


def get_metadata(distinfo_key: str, *toml_path: str | int) -> Any:
    """
    Look up a metadata value.

    :param distinfo_key: the key in the installed distribution metadata, e.g. ``Version``.
    :param toml_path: the keys (or list indices) leading to the same value in pyproject.toml.
    :return: the value, or None if it's not defined.
    """
    metadata = _load_metadata()
    if isinstance(metadata, Message):
        return metadata.get(distinfo_key)
    value: Any = metadata
    for key in toml_path:
        try:
            value = value[key]
        except (KeyError, IndexError, TypeError):
            return None
    return value
