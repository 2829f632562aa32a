"""Engine parameter presets and color helpers."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Mapping, Optional, Tuple

Color = Tuple[float, float, float]


@dataclass(frozen=True)
class ColorScheme:
    """RGB palette for diff highlights and painted annotations."""

    added: Color = (0.0, 0.73, 0.0)
    deleted: Color = (0.84, 0.0, 0.0)
    modified: Color = (0.93, 0.63, 0.0)
    highlight: Color = (1.0, 1.0, 0.0)
    note: Color = (1.0, 1.0, 0.8)
    redaction: Color = (0.0, 0.0, 0.0)
    text: Color = (0.0, 0.0, 0.0)

    def with_overrides(
        self,
        *,
        added: Optional[Color] = None,
        deleted: Optional[Color] = None,
        modified: Optional[Color] = None,
    ) -> "ColorScheme":
        return replace(
            self,
            added=added or self.added,
            deleted=deleted or self.deleted,
            modified=modified or self.modified,
        )

    def for_highlight(self, kind: str) -> Color:
        return {"added": self.added, "deleted": self.deleted, "modified": self.modified}[kind]

    def to_dict(self) -> Dict[str, Color]:
        return {
            "added": self.added,
            "deleted": self.deleted,
            "modified": self.modified,
            "highlight": self.highlight,
            "note": self.note,
            "redaction": self.redaction,
            "text": self.text,
        }


@dataclass(frozen=True)
class EngineConfig:
    """Budgets and tuning for revision comparison."""

    page_number: int = 1
    scale: float = 1.0
    poll_interval: float = 0.2
    max_poll_attempts: int = 20
    extraction_retries: int = 3
    extraction_backoff: float = 0.5
    quantization_step: float = 10.0
    fallback_width: float = 100.0
    min_highlight_chars: int = 1
    diff_timeout: float = 2.0
    diff_edit_cost: int = 4

    def to_dict(self) -> Dict[str, float]:
        return {
            "page_number": self.page_number,
            "scale": self.scale,
            "poll_interval": self.poll_interval,
            "max_poll_attempts": self.max_poll_attempts,
            "extraction_retries": self.extraction_retries,
            "extraction_backoff": self.extraction_backoff,
            "quantization_step": self.quantization_step,
            "fallback_width": self.fallback_width,
            "min_highlight_chars": self.min_highlight_chars,
            "diff_timeout": self.diff_timeout,
            "diff_edit_cost": self.diff_edit_cost,
        }

    def copy(self, **overrides: float) -> "EngineConfig":
        return replace(self, **overrides)


@dataclass(frozen=True)
class Preset:
    """Bundle of engine parameters, overlay styling and metadata."""

    name: str
    description: str
    config: EngineConfig
    colors: ColorScheme
    fill_opacity: float = 0.3

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "config": self.config.to_dict(),
            "colors": self.colors.to_dict(),
            "fill_opacity": self.fill_opacity,
        }


_DEFAULT_COLORS = ColorScheme()

PRESETS: Mapping[str, Preset] = {
    "fast": Preset(
        name="fast",
        description="In-process renderers; short waits and a single extraction retry.",
        config=EngineConfig(
            poll_interval=0.01,
            max_poll_attempts=10,
            extraction_retries=1,
            extraction_backoff=0.01,
        ),
        colors=_DEFAULT_COLORS,
    ),
    "balanced": Preset(
        name="balanced",
        description="Default budgets for an interactive viewer.",
        config=EngineConfig(),
        colors=_DEFAULT_COLORS,
    ),
    "patient": Preset(
        name="patient",
        description="Slow renderers; long readiness budget and more retries.",
        config=EngineConfig(
            poll_interval=0.2,
            max_poll_attempts=40,
            extraction_retries=5,
            extraction_backoff=1.5,
            diff_timeout=5.0,
        ),
        colors=_DEFAULT_COLORS,
        fill_opacity=0.25,
    ),
}


def get_preset(name: str) -> Preset:
    key = name.lower()
    if key not in PRESETS:
        raise KeyError(f"Unknown preset '{name}'. Available: {', '.join(sorted(PRESETS))}")
    return PRESETS[key]


def iter_presets() -> Iterable[Preset]:
    return PRESETS.values()


def parse_color(value: Optional[str]) -> Optional[Color]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if value.startswith("#"):
        hex_value = value[1:]
        if len(hex_value) == 3:
            hex_value = "".join(ch * 2 for ch in hex_value)
        if len(hex_value) not in (6, 8):
            raise ValueError("Hex colors must be #RGB, #RRGGBB or #RRGGBBAA")
        rgb = tuple(int(hex_value[i : i + 2], 16) for i in range(0, 6, 2))
        return tuple(channel / 255.0 for channel in rgb)  # type: ignore[return-value]
    if value.lower().startswith("rgb"):
        value = value[value.find("(") + 1 : value.rfind(")")]
        parts = value.split(",")[:3]
    else:
        parts = value.replace(";", ",").split(",")
    if len(parts) != 3:
        raise ValueError("RGB colors must provide three comma separated numbers")
    rgb = tuple(float(p.strip()) for p in parts)
    if any(channel > 1.0 for channel in rgb):
        rgb = tuple(channel / 255.0 for channel in rgb)  # type: ignore[assignment]
    return rgb  # type: ignore[return-value]
