"""Reads ``.sidecar.yaml`` into a validated :class:`SidecarConfig`.

Lookup order is an explicit ``--path``, then ``$SIDECAR_CONFIG``, then the
nearest ``.sidecar.yaml`` in the working directory or one of its parents.
String values may reference the environment as ``${NAME}`` or
``${NAME:-fallback}``; ``$${...}`` is kept literally.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Iterator

import yaml
from pydantic import ValidationError

from sidecar_registry.config.models import SidecarConfig

CONFIG_FILENAME = ".sidecar.yaml"
CONFIG_ENV_VAR = "SIDECAR_CONFIG"

_REFERENCE = re.compile(
    r"(?P<escape>\$)?\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<fallback>[^}]*))?\}"
)
# top-level keys whose value is a nested section
_SECTIONS = ("sidecar", "discovery", "registry")


def _expand_env(text: str) -> str:
    """Substitute environment references in *text*.

    An unset variable with no fallback is left untouched so validation can
    point at it.
    """

    def _substitute(match: re.Match[str]) -> str:
        if match.group("escape"):
            return match.group(0)[1:]
        value = os.environ.get(match.group("name"))
        if value is not None:
            return value
        fallback = match.group("fallback")
        return match.group(0) if fallback is None else fallback

    return _REFERENCE.sub(_substitute, text)


def _expand(node: Any) -> Any:
    if isinstance(node, str):
        return _expand_env(node)
    if isinstance(node, list):
        return [_expand(item) for item in node]
    if isinstance(node, dict):
        return {key: _expand(value) for key, value in node.items()}
    return node


def _read_yaml(path: Path) -> dict[str, Any]:
    document = yaml.safe_load(path.read_text(encoding="utf-8"))
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ValueError(f"Invalid configuration in {path}: expected a mapping at the top level")
    # "discovery:" with nothing under it parses as None
    for section in _SECTIONS:
        if section in document and document[section] is None:
            document[section] = {}
    return document


def _candidates(start: Path | None) -> Iterator[Path]:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        yield Path(override)
        return
    here = (start or Path.cwd()).resolve()
    yield here / CONFIG_FILENAME
    for parent in here.parents:
        yield parent / CONFIG_FILENAME


def find_config_file(start: Path | None = None) -> Path | None:
    """Where the config would be read from, or None when there is no file.

    ``$SIDECAR_CONFIG`` is returned as given, even if it does not exist, so
    that :func:`load_config` can report the bad path.
    """
    for candidate in _candidates(start):
        if os.environ.get(CONFIG_ENV_VAR) or candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None) -> SidecarConfig:
    config_path = path or find_config_file()
    if config_path is None or not config_path.is_file():
        raise FileNotFoundError(
            f"Could not find {config_path or CONFIG_FILENAME}. "
            f"Create {CONFIG_FILENAME}, set ${CONFIG_ENV_VAR} or pass --path."
        )
    document = _expand(_read_yaml(config_path))
    try:
        return SidecarConfig.model_validate(document)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration in {config_path}: {exc}") from exc


def load_config_or_default(path: Path | None = None) -> SidecarConfig:
    """Same as :func:`load_config`, except that having no file gives the defaults."""
    try:
        return load_config(path)
    except FileNotFoundError:
        return SidecarConfig()
