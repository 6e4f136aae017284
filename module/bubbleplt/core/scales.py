"""Scales mapping data values onto pixels.

- ``price_scale``: linear price -> x, with a padded domain so the
  largest bubble is never clipped at either edge.
- ``size_scale``: square-root price -> radius (bubble *area* grows
  with price), over the whole catalog so radii do not jump as filters
  change.
- ``rating_domain``: the (min, max) the relative rating color scale
  spans for a view.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Sequence, Tuple

from .config import PipelineConfig

if TYPE_CHECKING:
    from .dataset import Catalog, Product
    from .layout import PlotBounds

# Fallback color domain when a view has no usable ratings.
DEFAULT_RATING_DOMAIN = (3.0, 5.0)
RATING_CEILING = 5.0
RATING_WIDEN = 0.2

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def _tick_step(span: float, count: int) -> float:
    """1, 2 or 5 times a power of ten, close to span / count."""
    raw = span / max(1, count)
    power = 10 ** math.floor(math.log10(raw))
    error = raw / power
    if error >= _E10:
        factor = 10
    elif error >= _E5:
        factor = 5
    elif error >= _E2:
        factor = 2
    else:
        factor = 1
    return factor * power


@dataclass(frozen=True)
class LinearScale:
    domain: Tuple[float, float]
    range: Tuple[float, float]

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2
        return r0 + (value - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, pixel: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if r1 == r0:
            return (d0 + d1) / 2
        return d0 + (pixel - r0) / (r1 - r0) * (d1 - d0)

    def ticks(self, count: int = 6) -> List[float]:
        """Round values across the domain, roughly *count* of them."""
        lo, hi = sorted(self.domain)
        if hi == lo:
            return [lo]
        step = _tick_step(hi - lo, count)
        start, stop = math.ceil(lo / step), math.floor(hi / step)
        return [round(i * step, 10) for i in range(start, stop + 1)]


@dataclass(frozen=True)
class SqrtScale:
    """Power scale with exponent 0.5. A zero-width domain maps to the mid-range."""

    domain: Tuple[float, float]
    range: Tuple[float, float]

    def __call__(self, value: float) -> float:
        d0, d1 = (math.sqrt(max(0.0, d)) for d in self.domain)
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2
        t = (math.sqrt(max(0.0, value)) - d0) / (d1 - d0)
        return r0 + t * (r1 - r0)


def size_scale(catalog: "Catalog", config: PipelineConfig | None = None) -> SqrtScale:
    config = config or PipelineConfig()
    return SqrtScale(domain=catalog.price_extent, range=config.radius_range)


def price_domain(
    prices: Sequence[float],
    config: PipelineConfig | None = None,
) -> Tuple[float, float]:
    """Padded (low, high) price domain; never zero-width."""
    config = config or PipelineConfig()
    finite = [p for p in prices if math.isfinite(p)]
    if finite:
        lo, hi = min(finite), max(finite)
    else:
        lo, hi = 0.0, 1.0
    if lo == hi:
        center = hi or 1.0
        lo, hi = center - 1, center + 1
    pad = max(config.min_price_padding, (hi - lo) * config.price_padding_ratio)
    return (lo - pad, hi + pad)


def price_scale(
    view: Sequence["Product"],
    size: SqrtScale,
    bounds: "PlotBounds",
    config: PipelineConfig | None = None,
) -> LinearScale:
    """Price -> x over *view*, inset by the largest bubble radius."""
    config = config or PipelineConfig()
    bubble_max = max((size(p.price) for p in view), default=config.max_radius)
    return LinearScale(
        domain=price_domain([p.price for p in view], config),
        range=(bounds.x + bubble_max, bounds.right - bubble_max),
    )


def rating_domain(view: Sequence["Product"]) -> Tuple[float, float]:
    """Color domain for the view's ratings, widened when they are all equal."""
    ratings = [p.rating for p in view if math.isfinite(p.rating) and p.rating >= 0]
    if not ratings:
        return DEFAULT_RATING_DOMAIN
    lo, hi = min(ratings), max(ratings)
    if lo == hi:
        lo, hi = max(0.0, lo - RATING_WIDEN), min(RATING_CEILING, hi + RATING_WIDEN)
        if hi <= lo:
            lo, hi = ratings[0] - RATING_WIDEN, ratings[0] + RATING_WIDEN
    return (lo, hi)
