"""Query interface: filter -> compare -> layout -> annotate.

``BubbleExplorer`` owns the loaded catalog and lookups, and answers
``set_filters`` / ``reset`` with a fresh ``ExplorerResult``. A
``Renderer`` receives each result, every layout step (when animating)
and any error; the explorer itself never draws.

Loading is the only asynchronous part: ``BubbleExplorer.open`` fetches
the three sources concurrently and refuses to build an explorer when
any of them fails.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

from .annotations import AnnotationBundle, compose
from .compare import ComparisonPair, highlighted_products, pair_allowed, pick_comparison_pair
from .config import PipelineConfig
from .dataset import ALL, Catalog, LoadedSources, Product, load_sources
from .errors import CriteriaError, LoadError
from .filters import ControlOptions, FilterCriteria, FilteredView, control_options, filter_products
from .layout import LayoutFrame, LayoutSimulation, PlotBounds, Position
from .lookups import BrandLookup, ProductLookup
from .scales import LinearScale, price_scale, rating_domain, size_scale
from .state import ViewRegister

logger = logging.getLogger(__name__)


class Renderer:
    """Presentation collaborator. Override the hooks you need."""

    def render(self, result: "ExplorerResult") -> None:
        """A new result became authoritative."""

    def tick(self, result: "ExplorerResult", frame: LayoutFrame) -> None:
        """One layout step of *result* finished."""

    def error(self, message: str) -> None:
        """A request was rejected; the previous result stays on screen."""

    def fatal(self, message: str) -> None:
        """The session cannot start."""


@dataclass(frozen=True, eq=False)
class ExplorerResult:
    """Everything derived for one filter request."""

    generation: int
    criteria: FilterCriteria
    view: FilteredView
    pair: Optional[ComparisonPair]
    highlighted: FrozenSet[Product]
    x_scale: LinearScale
    rating_domain: Tuple[float, float]
    annotations: AnnotationBundle
    simulation: LayoutSimulation

    @property
    def positions(self) -> Dict[Product, Position]:
        """Latest clamped positions, one per product in the view."""
        return self.simulation.frame().by_product()

    @property
    def highlights(self) -> FrozenSet[str]:
        return frozenset(p.name for p in self.highlighted)

    @property
    def settled(self) -> bool:
        return self.simulation.done

    def is_highlighted(self, product: Product) -> bool:
        return product in self.highlighted


class BubbleExplorer:
    """Filtered, laid-out and annotated views over one catalog."""

    def __init__(
        self,
        catalog: Catalog,
        brand_lookup: BrandLookup,
        product_lookup: ProductLookup,
        config: PipelineConfig | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        self.catalog = catalog
        self.brand_lookup = brand_lookup
        self.product_lookup = product_lookup
        self.config = config or PipelineConfig()
        self.renderer = renderer or Renderer()
        self.options: ControlOptions = control_options(catalog)
        self.bounds = PlotBounds.from_config(self.config)
        self.size = size_scale(catalog, self.config)
        self.register: ViewRegister[ExplorerResult] = ViewRegister()

    # Construction ---------------------------------------------------
    @classmethod
    def from_sources(
        cls,
        sources: LoadedSources,
        config: PipelineConfig | None = None,
        renderer: Renderer | None = None,
    ) -> "BubbleExplorer":
        return cls(
            sources.catalog,
            BrandLookup(sources.best_brand),
            ProductLookup(sources.best_products),
            config=config,
            renderer=renderer,
        )

    @classmethod
    async def open(
        cls,
        catalog_path: Path | str,
        best_brand_path: Path | str,
        best_products_path: Path | str,
        config: PipelineConfig | None = None,
        renderer: Renderer | None = None,
    ) -> "BubbleExplorer":
        """Load all sources, then build the explorer.

        A ``LoadError`` is logged, reported to ``renderer.fatal`` and
        re-raised; nothing is rendered.
        """
        try:
            sources = await load_sources(catalog_path, best_brand_path, best_products_path)
        except LoadError as exc:
            logger.error("Fatal load error: %s", exc)
            if renderer is not None:
                renderer.fatal(str(exc))
            raise
        return cls.from_sources(sources, config=config, renderer=renderer)

    # Public API -----------------------------------------------------
    @property
    def current(self) -> Optional[ExplorerResult]:
        return self.register.current

    def set_filters(
        self,
        category: str = ALL,
        skin_type: str = ALL,
        max_price: float | None = None,
        price_range: Tuple[float, float] | None = None,
        settle: bool = True,
    ) -> ExplorerResult:
        """Derive and publish the result for these filters.

        ``max_price=None`` means the catalog's highest price. With
        ``settle=False`` the layout is left at its starting positions
        for ``animate`` to relax progressively.
        """
        try:
            criteria = FilterCriteria(
                category=category,
                skin_type=skin_type,
                max_price=self.options.max_price if max_price is None else max_price,
                price_range=price_range,
            )
        except CriteriaError as exc:
            logger.warning("Rejected filters: %s", exc)
            self.renderer.error(str(exc))
            raise
        return self.apply(criteria, settle=settle)

    def reset(self, settle: bool = True) -> ExplorerResult:
        """Back to All / All / highest price."""
        return self.apply(self.options.default_criteria(), settle=settle)

    def apply(self, criteria: FilterCriteria, settle: bool = True) -> ExplorerResult:
        previous = self.register.current
        if previous is not None:
            previous.simulation.cancel()
        generation = self.register.claim()

        result = self._derive(generation, criteria, previous)
        if settle:
            result.simulation.run()
        self.register.publish(generation, result)
        logger.debug("Published generation %d with %d products", generation, len(result.view))
        self.renderer.render(result)
        return result

    async def animate(self, result: ExplorerResult) -> LayoutFrame:
        """Relax *result*'s layout one step at a time.

        The renderer's ``tick`` hook runs after every step and control
        returns to the event loop in between. The run is cancelled as
        soon as a newer result becomes authoritative.
        """
        sim = result.simulation
        while not sim.done:
            if not self.register.is_current(result.generation):
                sim.cancel()
                break
            frame = sim.step()
            if frame is not None:
                self.renderer.tick(result, frame)
            await asyncio.sleep(0)
        return sim.frame()

    # Internal helpers -----------------------------------------------
    def _derive(
        self,
        generation: int,
        criteria: FilterCriteria,
        previous: Optional[ExplorerResult],
    ) -> ExplorerResult:
        config = self.config
        view = filter_products(self.catalog, criteria, config)

        pair = pick_comparison_pair(view, config) if pair_allowed(criteria, config) else None
        highlighted = highlighted_products(pair, view, config)

        x_scale = price_scale(view, self.size, self.bounds, config)
        seed: Mapping[Product, Position] | None = previous.positions if previous is not None else None
        simulation = LayoutSimulation(view, x_scale, self.size, self.bounds, config, previous=seed)

        annotations = compose(view, criteria, pair, self.brand_lookup, self.product_lookup, config)
        return ExplorerResult(
            generation=generation,
            criteria=criteria,
            view=view,
            pair=pair,
            highlighted=highlighted,
            x_scale=x_scale,
            rating_domain=rating_domain(view),
            annotations=annotations,
            simulation=simulation,
        )
