"""Environment driven configuration for revdiff."""
from __future__ import annotations

import logging
import os
from typing import Callable, Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv

from .presets import EngineConfig, get_preset

logger = logging.getLogger(__name__)

ENV_PREFIX = "REVDIFF_"

# field name -> (environment suffix, parser)
_ENV_FIELDS: Dict[str, Tuple[str, Callable[[str], float]]] = {
    "page_number": ("PAGE", int),
    "scale": ("SCALE", float),
    "poll_interval": ("POLL_INTERVAL", float),
    "max_poll_attempts": ("MAX_POLL_ATTEMPTS", int),
    "extraction_retries": ("EXTRACTION_RETRIES", int),
    "extraction_backoff": ("EXTRACTION_BACKOFF", float),
    "quantization_step": ("QUANTIZATION_STEP", float),
    "fallback_width": ("FALLBACK_WIDTH", float),
    "min_highlight_chars": ("MIN_HIGHLIGHT_CHARS", int),
    "diff_timeout": ("DIFF_TIMEOUT", float),
    "diff_edit_cost": ("DIFF_EDIT_COST", int),
}


def config_from_mapping(base: EngineConfig, environ: Mapping[str, str]) -> EngineConfig:
    """Apply ``REVDIFF_*`` overrides found in ``environ`` on top of ``base``."""

    overrides = {}
    for field_name, (suffix, parser) in _ENV_FIELDS.items():
        raw = environ.get(ENV_PREFIX + suffix)
        if raw is None or not raw.strip():
            continue
        try:
            overrides[field_name] = parser(raw.strip())
        except ValueError as exc:
            raise ValueError(f"Invalid value for {ENV_PREFIX + suffix}: {raw!r}") from exc
    if overrides:
        logger.debug("configuration overrides from environment: %s", overrides)
    return base.copy(**overrides)


def load_config(preset: Optional[str] = None, *, env_file: Optional[str] = None) -> EngineConfig:
    """Build an :class:`EngineConfig` from a preset, a ``.env`` file and the environment.

    The preset name is taken from ``preset`` or ``REVDIFF_PRESET`` and
    defaults to ``balanced``.  Variables already set in the process
    environment win over the ``.env`` file.
    """

    load_dotenv(env_file)
    name = preset or os.getenv(ENV_PREFIX + "PRESET") or "balanced"
    return config_from_mapping(get_preset(name).config, os.environ)
