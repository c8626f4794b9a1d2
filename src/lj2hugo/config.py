"""Conversion settings loaded from .lj2hugo.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel

from lj2hugo.loader import COMMENT_MARKER, PRIMARY_MARKER
from lj2hugo.publisher import CommentVisibility

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".lj2hugo.toml"
GLOBAL_CONFIG = Path.home() / ".config" / "lj2hugo" / "config.toml"

_TRUTHY = {"1", "true", "yes", "on"}


class ConvertConfig(BaseModel):
    """[convert] section."""

    show_comments: bool = True
    show_spam: bool = False
    show_banned: bool = False
    show_deleted: bool = False
    resolve_mood_ids: bool = False
    keep_going: bool = False
    primary_marker: str = PRIMARY_MARKER
    comment_marker: str = COMMENT_MARKER

    @property
    def visibility(self) -> CommentVisibility:
        return CommentVisibility(
            show_spam=self.show_spam,
            show_banned=self.show_banned,
            show_deleted=self.show_deleted,
        )


def load_config(path: Path | str | None = None) -> ConvertConfig:
    """Load config from TOML, then overlay environment variables.

    Search order:
    1. Explicit path (if provided)
    2. .lj2hugo.toml in CWD
    3. ~/.config/lj2hugo/config.toml

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged ConvertConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for candidate in (Path(".") / CONFIG_FILENAME, GLOBAL_CONFIG):
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break

    section = data.get("convert", {})
    config = ConvertConfig.model_validate(section) if section else ConvertConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: ConvertConfig, **cli_kwargs: object) -> ConvertConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None). Unknown keys are ignored.
    """
    data = config.model_dump()
    for key, value in cli_kwargs.items():
        if value is None or key not in data:
            continue
        data[key] = value
    return ConvertConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: ConvertConfig) -> ConvertConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, str] = {
        "LJ2HUGO_SHOW_COMMENTS": "show_comments",
        "LJ2HUGO_SHOW_SPAM": "show_spam",
        "LJ2HUGO_SHOW_BANNED": "show_banned",
        "LJ2HUGO_SHOW_DELETED": "show_deleted",
        "LJ2HUGO_RESOLVE_MOOD_IDS": "resolve_mood_ids",
        "LJ2HUGO_KEEP_GOING": "keep_going",
    }

    for env_var, field in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[field] = value.strip().lower() in _TRUTHY

    return ConvertConfig.model_validate(data)
