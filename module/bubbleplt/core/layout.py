"""Layout engine: price-pinned x, force-relaxed y.

Each bubble's x is fixed to ``price_scale(price)``; only y moves. A
relaxation step combines three forces and then integrates velocities:

1. collision: overlapping circles (radius + padding) are pushed apart
   along the line between their predicted centres, the smaller circle
   taking the larger share of the push;
2. an x pull toward the price target;
3. a y pull toward the vertical centre of the plot.

The pulls scale with ``alpha``, which decays every step, so the run
always ends (``alpha < alpha_min`` or ``max_ticks``). ``tick`` is a
pure function over a tuple of ``Body`` values; ``LayoutSimulation``
wraps it in a small state machine the pipeline can step, run to the
end or cancel. Reported positions are clamped to the plot rectangle.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .config import PipelineConfig
from .dataset import Product
from .scales import LinearScale, SqrtScale

logger = logging.getLogger(__name__)

INITIAL_RADIUS = 10.0
GOLDEN_ANGLE = math.pi * (3 - math.sqrt(5))
JIGGLE = 1e-6


class LayoutState(str, Enum):
    INITIALIZING = "initializing"
    RELAXING = "relaxing"
    CONVERGED = "converged"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PlotBounds:
    """Plotting rectangle in pixels."""

    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    @property
    def center_y(self) -> float:
        return self.y + self.h / 2

    def clamp(self, x: float, y: float) -> Tuple[float, float]:
        return (
            max(self.x, min(self.right, x)),
            max(self.y, min(self.bottom, y)),
        )

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.right and self.y <= y <= self.bottom

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "PlotBounds":
        grid_height = config.grid_height
        return cls(
            x=config.margin_x,
            y=config.axis_y - grid_height,
            w=config.width - 2 * config.margin_x,
            h=grid_height,
        )


@dataclass(frozen=True)
class Body:
    """Simulation state of one bubble."""

    x: float
    y: float
    tx: float
    radius: float
    vx: float = 0.0
    vy: float = 0.0


@dataclass(frozen=True)
class Position:
    """Clamped centre and display radius; labels share the bubble's centre."""

    x: float
    y: float
    radius: float


@dataclass(frozen=True)
class LayoutFrame:
    """Snapshot after one step, aligned with ``LayoutSimulation.products``."""

    tick: int
    alpha: float
    state: LayoutState
    products: Tuple[Product, ...]
    positions: Tuple[Position, ...]

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.products)

    def by_product(self) -> Dict[Product, Position]:
        """One entry per record; same-named products of different brands stay apart."""
        return dict(zip(self.products, self.positions))


def _jiggle(seed: int, i: int, j: int, n: int) -> float:
    """Tiny deterministic offset for coincident centres."""
    h = (seed * 1_000_003 + i * 7_919 + j * 104_729 + n * 1_299_709) % 1_000
    return (h / 1_000 - 0.5) * JIGGLE or JIGGLE


def initial_bodies(
    targets: Sequence[float],
    radii: Sequence[float],
    center_y: float,
    seed_y: Sequence[Optional[float]] | None = None,
) -> Tuple[Body, ...]:
    """Bodies at their price targets, y spread on a spiral around *center_y*.

    Index 0 sits exactly on the centre. A non-None ``seed_y[i]`` (the
    bubble's previous y) is used instead of the spiral.
    """
    bodies: List[Body] = []
    for i, (tx, r) in enumerate(zip(targets, radii)):
        y = seed_y[i] if seed_y is not None and i < len(seed_y) else None
        if y is None or not math.isfinite(y):
            y = center_y + INITIAL_RADIUS * math.sqrt(0.5 + i) * math.sin(i * GOLDEN_ANGLE)
        bodies.append(Body(x=tx, y=y, tx=tx, radius=r))
    return tuple(bodies)


def tick(
    bodies: Sequence[Body],
    alpha: float,
    center_y: float,
    config: PipelineConfig,
    n: int = 0,
) -> Tuple[Body, ...]:
    """One relaxation step at the given *alpha*; returns new bodies."""
    count = len(bodies)
    x = [b.x for b in bodies]
    y = [b.y for b in bodies]
    vx = [b.vx for b in bodies]
    vy = [b.vy for b in bodies]
    r = [b.radius for b in bodies]

    # collision
    for i in range(count):
        ri = r[i]
        ri2 = ri * ri
        xi = x[i] + vx[i]
        yi = y[i] + vy[i]
        for j in range(i + 1, count):
            rj = r[j]
            rr = ri + rj
            dx = xi - x[j] - vx[j]
            dy = yi - y[j] - vy[j]
            dist2 = dx * dx + dy * dy
            if dist2 >= rr * rr:
                continue
            if dx == 0:
                dx = _jiggle(config.seed, i, j, n)
                dist2 += dx * dx
            if dy == 0:
                dy = _jiggle(config.seed, j, i, n)
                dist2 += dy * dy
            dist = math.sqrt(dist2)
            push = (rr - dist) / dist
            dx *= push
            dy *= push
            rj2 = rj * rj
            share = rj2 / (ri2 + rj2) if ri2 + rj2 else 0.5
            vx[i] += dx * share
            vy[i] += dy * share
            vx[j] -= dx * (1 - share)
            vy[j] -= dy * (1 - share)

    out: List[Body] = []
    keep = 1 - config.velocity_decay
    for i, b in enumerate(bodies):
        bvx = vx[i] + (b.tx - x[i]) * config.x_strength * alpha
        bvy = vy[i] + (center_y - y[i]) * config.y_strength * alpha
        bvy *= keep
        if config.pin_x:
            nx, bvx = b.tx, 0.0
        else:
            bvx *= keep
            nx = x[i] + bvx
        out.append(replace(b, x=nx, y=y[i] + bvy, vx=bvx, vy=bvy))
    return tuple(out)


class LayoutSimulation:
    """Stepwise relaxation of one filtered view.

    States: INITIALIZING -> RELAXING -> CONVERGED, or CANCELLED when
    the caller abandons the run (e.g. a newer filter request arrived).
    """

    def __init__(
        self,
        view: Sequence[Product],
        x_scale: LinearScale,
        size: SqrtScale,
        bounds: PlotBounds,
        config: PipelineConfig | None = None,
        previous: Mapping[Product, Position] | None = None,
    ) -> None:
        self.state = LayoutState.INITIALIZING
        self.config = config or PipelineConfig()
        self.products: Tuple[Product, ...] = tuple(view)
        self.names: Tuple[str, ...] = tuple(p.name for p in self.products)
        self.bounds = bounds
        self.x_scale = x_scale
        self.alpha = 1.0
        self.ticks = 0

        self.radii = tuple(size(p.price) for p in self.products)
        seed_y = None
        # a lone bubble always starts (and stays) on the centre line
        if previous and len(self.products) > 1:
            seed_y = [previous[p].y if p in previous else None for p in self.products]
        self.bodies = initial_bodies(
            [x_scale(p.price) for p in self.products],
            [r + self.config.collide_padding for r in self.radii],
            bounds.center_y,
            seed_y,
        )
        self.state = LayoutState.RELAXING if self.products else LayoutState.CONVERGED

    @property
    def done(self) -> bool:
        return self.state in (LayoutState.CONVERGED, LayoutState.CANCELLED)

    def frame(self) -> LayoutFrame:
        positions = []
        for b, radius in zip(self.bodies, self.radii):
            cx, cy = self.bounds.clamp(b.x, b.y)
            positions.append(Position(x=cx, y=cy, radius=radius))
        return LayoutFrame(
            tick=self.ticks,
            alpha=self.alpha,
            state=self.state,
            products=self.products,
            positions=tuple(positions),
        )

    def step(self) -> Optional[LayoutFrame]:
        """Advance one tick; None once converged or cancelled."""
        if self.done:
            return None
        cfg = self.config
        self.alpha += (0.0 - self.alpha) * cfg.alpha_decay
        self.bodies = tick(self.bodies, self.alpha, self.bounds.center_y, cfg, self.ticks)
        self.ticks += 1
        if self.alpha < cfg.alpha_min or self.ticks >= cfg.max_ticks:
            self.state = LayoutState.CONVERGED
            logger.debug("Layout of %d bubbles converged after %d ticks", len(self.bodies), self.ticks)
        return self.frame()

    def run(self, on_tick: Callable[[LayoutFrame], None] | None = None) -> LayoutFrame:
        """Step until done, calling *on_tick* after every step."""
        while not self.done:
            frame = self.step()
            if frame is not None and on_tick is not None:
                on_tick(frame)
        return self.frame()

    def cancel(self) -> None:
        if not self.done:
            self.state = LayoutState.CANCELLED
            logger.debug("Layout cancelled at tick %d", self.ticks)


def layout(
    view: Sequence[Product],
    x_scale: LinearScale,
    bounds: PlotBounds,
    size: SqrtScale,
    config: PipelineConfig | None = None,
) -> Dict[Product, Position]:
    """Run a full relaxation and return the final clamped positions per product."""
    sim = LayoutSimulation(view, x_scale, size, bounds, config)
    return sim.run().by_product()


def overlap_fraction(positions: Sequence[Position], tolerance: float = 0.0) -> float:
    """Share of bubble pairs whose circles overlap by more than *tolerance*."""
    pairs = overlaps = 0
    for i in range(len(positions)):
        a = positions[i]
        for b in positions[i + 1:]:
            pairs += 1
            if math.hypot(a.x - b.x, a.y - b.y) + tolerance < a.radius + b.radius:
                overlaps += 1
    return overlaps / pairs if pairs else 0.0
