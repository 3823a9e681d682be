# schemas/mind_map_config.py
from __future__ import annotations
import math
import os
from typing import Dict, List, Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from utils.color import is_hex_color, normalize_hex

LEVELS = (0, 1, 2, 3, 4)

DEFAULT_PALETTE = [
    "#10B981", "#8B5CF6", "#F59E0B", "#EF4444",
    "#06B6D4", "#EC4899", "#84CC16", "#F97316",
]


def _require_levels(table: Dict[int, object], levels=LEVELS) -> None:
    missing = [lvl for lvl in levels if lvl not in table]
    if missing:
        raise ValueError(f"Missing entries for levels {missing}")


def _env_number(name: str, cast):
    """Read a numeric environment variable; unset or blank gives None."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        return cast(value.strip())
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


# ---------- Normalizer ----------

class NormalizerConfig(BaseModel):
    # Keyed by the PARENT level: center may hold 8 branches, a branch 5 concepts, ...
    max_children: Dict[int, int] = Field(
        default_factory=lambda: {0: 8, 1: 5, 2: 5, 3: 3}
    )
    placeholder_labels: Dict[int, str] = Field(
        default_factory=lambda: {
            0: "Untitled Topic",
            1: "Untitled Branch",
            2: "Untitled Concept",
            3: "Untitled Point",
            4: "Untitled Detail",
        }
    )
    fallback_label: str = "Mind Map"

    @field_validator("max_children")
    @classmethod
    def check_max_children(cls, value: Dict[int, int]) -> Dict[int, int]:
        _require_levels(value, levels=(0, 1, 2, 3))
        for level, cap in value.items():
            if cap < 0:
                raise ValueError(f"max_children for level {level} must be >= 0")
        return value

    @field_validator("placeholder_labels")
    @classmethod
    def check_placeholders(cls, value: Dict[int, str]) -> Dict[int, str]:
        _require_levels(value)
        return value


# ---------- Layout ----------

class LayoutConfig(BaseModel):
    # Level 1 (branches)
    branch_min_radius: float = 450
    branch_radius_per_sibling: float = 70

    # Level 2 (concepts)
    concept_min_radius: float = 280
    concept_radius_per_sibling: float = 40
    concept_fan_step: float = math.pi / 6

    # Level 3 (points), placed in rings
    point_ring_size: int = Field(default=4, ge=1)
    point_min_radius: float = 180
    point_ring_base: float = 80
    point_ring_step: float = 90
    point_max_spread: float = 0.8 * math.pi
    point_spread_per_item: float = 0.5

    # Level 4 (details)
    detail_distance: float = 120
    detail_fan_step: float = math.pi / 8

    # Collision repair
    clearance: float = Field(default=20, ge=0)
    max_attempts: int = Field(default=50, ge=0)
    jitter_angle: float = Field(default=math.pi / 4, ge=0)
    jitter_min_distance: float = Field(default=50, ge=0)
    jitter_max_distance: float = Field(default=150, ge=0)

    seed: Optional[int] = None

    @model_validator(mode="after")
    def check_jitter_range(self) -> "LayoutConfig":
        if self.jitter_min_distance > self.jitter_max_distance:
            raise ValueError("jitter_min_distance must not exceed jitter_max_distance")
        return self


# ---------- Style ----------

class StyleConfig(BaseModel):
    palette: List[str] = Field(default_factory=lambda: list(DEFAULT_PALETTE))
    radii: Dict[int, float] = Field(
        default_factory=lambda: {0: 50, 1: 40, 2: 32, 3: 24, 4: 18}
    )
    text_sizes: Dict[int, int] = Field(
        default_factory=lambda: {0: 11, 1: 9, 2: 8, 3: 7, 4: 6}
    )
    max_label_lengths: Dict[int, int] = Field(
        default_factory=lambda: {0: 15, 1: 12, 2: 10, 3: 8, 4: 8}
    )
    # Opacity applied to the branch color below level 1
    fade_alpha: Dict[int, float] = Field(
        default_factory=lambda: {2: 0.8, 3: 0.65, 4: 0.5}
    )
    ellipsis: str = "..."
    center_fill: str = "#1F2937"
    default_color: str = "#3B82F6"
    stroke_color: str = "#FFFFFF"
    stroke_width: float = 1.5
    light_text_color: str = "#FFFFFF"
    dark_text_color: str = "#1F2937"
    edge_opacity: float = Field(default=0.3, ge=0, le=1)

    @field_validator("palette")
    @classmethod
    def check_palette(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("palette must contain at least one color")
        bad = [c for c in value if not is_hex_color(c)]
        if bad:
            raise ValueError(f"palette entries must be hex colors: {bad}")
        return [normalize_hex(c) for c in value]

    @field_validator("radii", "text_sizes", "max_label_lengths")
    @classmethod
    def check_level_tables(cls, value):
        _require_levels(value)
        return value

    @field_validator("fade_alpha")
    @classmethod
    def check_fade_alpha(cls, value: Dict[int, float]) -> Dict[int, float]:
        _require_levels(value, levels=(2, 3, 4))
        for level, alpha in value.items():
            if not 0 <= alpha <= 1:
                raise ValueError(f"fade_alpha for level {level} must be within 0-1")
        return value

    @field_validator("center_fill", "default_color", "stroke_color",
                     "light_text_color", "dark_text_color")
    @classmethod
    def check_hex(cls, value: str) -> str:
        if not is_hex_color(value):
            raise ValueError(f"Invalid hex color: {value!r}")
        return normalize_hex(value)

    def radius_for(self, level: int) -> float:
        return float(self.radii[int(level)])

    def text_size_for(self, level: int) -> int:
        return self.text_sizes[int(level)]

    def max_label_length_for(self, level: int) -> int:
        return self.max_label_lengths[int(level)]

    def branch_color(self, branch_index: int) -> str:
        return self.palette[branch_index % len(self.palette)]


# ---------- Viewer ----------

class ViewerConfig(BaseModel):
    zoom_factor: float = Field(default=1.2, gt=1)
    min_scale: float = Field(default=0.1, gt=0)
    max_scale: float = Field(default=10.0, gt=0)
    initial_scale: float = Field(default=1.0, gt=0)
    fit_padding: float = Field(default=0.9, gt=0, le=1)

    @model_validator(mode="after")
    def check_scale_range(self) -> "ViewerConfig":
        if self.min_scale > self.max_scale:
            raise ValueError("min_scale must not exceed max_scale")
        return self


# ---------- Aggregate ----------

class MindMapSettings(BaseModel):
    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    style: StyleConfig = Field(default_factory=StyleConfig)
    viewer: ViewerConfig = Field(default_factory=ViewerConfig)

    @classmethod
    def from_env(cls) -> "MindMapSettings":
        """
        Build settings from MINDMAP_* environment variables (a .env file is
        honoured). Unset variables keep their defaults.
        """
        load_dotenv()

        layout_overrides = {}
        seed = _env_number("MINDMAP_SEED", int)
        if seed is not None:
            layout_overrides["seed"] = seed
        clearance = _env_number("MINDMAP_CLEARANCE", float)
        if clearance is not None:
            layout_overrides["clearance"] = clearance
        max_attempts = _env_number("MINDMAP_MAX_ATTEMPTS", int)
        if max_attempts is not None:
            layout_overrides["max_attempts"] = max_attempts

        normalizer = NormalizerConfig()
        max_branches = _env_number("MINDMAP_MAX_BRANCHES", int)
        if max_branches is not None:
            caps = dict(normalizer.max_children)
            caps[0] = max_branches
            normalizer = NormalizerConfig(max_children=caps)

        return cls(normalizer=normalizer, layout=LayoutConfig(**layout_overrides))
