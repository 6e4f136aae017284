"""Pipeline configuration.

All tunables of the filter, comparison and layout stages live on one
``PipelineConfig`` so the near-duplicate chart variants (different
highlight policies, different top-N bounds) are expressed as settings
rather than code paths.

Configs can be read from a sectioned CSV (``section,key,value``)::

    section,key,value
    pipeline,top_n,30
    pipeline,require_both_filters_for_pair,true
    forces,alpha_decay,0.03
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

import pandas as pd

# Upper bounds of the budget tiers; 0 is the "no limit" sentinel.
BUDGET_BANDS: Tuple[int, ...] = (25, 40, 60, 80, 120, 200, 0)

CONFIG_SECTIONS = ("pipeline", "layout", "forces")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class PipelineConfig:
    """Settings shared by every stage of the pipeline."""

    # pipeline
    top_n: int = 20
    tie_tolerance: float = 0.1
    highlight_epsilon: float = 1e-6
    require_both_filters_for_pair: bool = False
    budget_bands: Tuple[int, ...] = BUDGET_BANDS

    # layout
    width: float = 1100.0
    height: float = 750.0
    margin_x: float = 60.0
    axis_offset: float = 80.0
    grid_height_offset: float = 160.0
    min_radius: float = 10.0
    max_radius: float = 60.0
    collide_padding: float = 3.0
    min_price_padding: float = 10.0
    price_padding_ratio: float = 0.10

    # forces
    x_strength: float = 0.4
    y_strength: float = 0.12
    alpha_decay: float = 0.05
    alpha_min: float = 0.001
    velocity_decay: float = 0.4
    max_ticks: int = 300
    pin_x: bool = True
    seed: int = 7

    def __post_init__(self) -> None:
        if self.top_n < 1:
            raise ValueError(f"top_n must be >= 1 (got {self.top_n})")
        if self.tie_tolerance < 0 or self.highlight_epsilon < 0:
            raise ValueError("tie_tolerance and highlight_epsilon must be >= 0")
        bands = tuple(int(b) for b in self.budget_bands)
        finite = [b for b in bands if b]
        if not finite:
            raise ValueError("budget_bands needs at least one finite band")
        if finite != sorted(finite) or (0 in bands and bands[-1] != 0):
            raise ValueError(f"budget_bands must ascend with 0 last: {bands}")
        object.__setattr__(self, "budget_bands", bands)
        if not 0 < self.alpha_decay < 1:
            raise ValueError(f"alpha_decay must be in (0, 1) (got {self.alpha_decay})")
        if self.max_ticks < 1:
            raise ValueError(f"max_ticks must be >= 1 (got {self.max_ticks})")
        if self.min_radius > self.max_radius:
            raise ValueError("min_radius must not exceed max_radius")

    # Derived geometry -------------------------------------------------
    @property
    def axis_y(self) -> float:
        return self.height - self.axis_offset

    @property
    def grid_height(self) -> float:
        return self.height - self.grid_height_offset

    @property
    def radius_range(self) -> Tuple[float, float]:
        return (self.min_radius, self.max_radius)

    # Construction -----------------------------------------------------
    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "PipelineConfig":
        """Build a config from loosely typed ``key -> value`` pairs."""
        return cls().updated(values)

    def updated(self, values: Mapping[str, Any]) -> "PipelineConfig":
        """Return a copy with *values* coerced to the field types and applied."""
        known = {f.name: f for f in fields(self)}
        changes: Dict[str, Any] = {}
        for key, raw in values.items():
            key = str(key).strip()
            if key not in known:
                raise ValueError(f"Unknown config key: {key}")
            changes[key] = _coerce(getattr(self, key), raw, key)
        return replace(self, **changes)


def _coerce(current: Any, raw: Any, key: str) -> Any:
    """Coerce *raw* to the type of the field's current value."""
    if isinstance(current, bool):
        if isinstance(raw, bool):
            return raw
        token = str(raw).strip().lower()
        if token in _TRUE:
            return True
        if token in _FALSE:
            return False
        raise ValueError(f"Config key {key} expects a boolean (got {raw!r})")
    if isinstance(current, tuple):
        if isinstance(raw, str):
            parts = [p for p in raw.replace("|", ",").split(",") if p.strip()]
            return tuple(int(float(p)) for p in parts)
        return tuple(int(v) for v in raw)
    try:
        if isinstance(current, int):
            return int(float(raw))
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Config key {key} expects a number (got {raw!r})") from exc


def read_config(config_path: Path | str) -> PipelineConfig:
    """Read a sectioned CSV into a ``PipelineConfig``.

    Rows of other sections are ignored; rows with an empty key are
    skipped.
    """
    df = pd.read_csv(config_path, dtype=str).fillna("")
    missing = sorted({"section", "key", "value"} - set(df.columns))
    if missing:
        raise ValueError(f"{config_path} missing required columns: {missing}")

    values: Dict[str, str] = {}
    for _, r in df.iterrows():
        section = str(r.get("section", "")).strip().lower()
        if section not in CONFIG_SECTIONS:
            continue
        key = str(r.get("key", "")).strip()
        if not key:
            continue
        values[key] = str(r.get("value", ""))

    return PipelineConfig.from_mapping(values)
