"""Comparison pair and highlight resolution.

The pair is the two best-rated products of a view, preferring a
near-equal rating (within ``tie_tolerance``) so the comparison is
between equals; the highlight set then expands the pair to every
tied-best product of the two brands involved.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Sequence

from .config import PipelineConfig
from .dataset import ALL, Product
from .filters import FilterCriteria


@dataclass(frozen=True)
class ComparisonPair:
    primary: Product
    secondary: Product

    @property
    def brands(self) -> FrozenSet[str]:
        return frozenset({self.primary.brand, self.secondary.brand})

    @property
    def cheaper(self) -> Product:
        """The cheaper of the two; the primary wins a price tie."""
        if self.primary.price <= self.secondary.price:
            return self.primary
        return self.secondary

    @property
    def pricier(self) -> Product:
        return self.secondary if self.cheaper is self.primary else self.primary


def canonical_order(view: Sequence[Product]) -> List[Product]:
    """Rating descending, then price ascending (stable otherwise)."""
    return sorted(view, key=lambda p: (-p.rating, p.price))


def pair_allowed(criteria: FilterCriteria, config: PipelineConfig | None = None) -> bool:
    """Whether the current filters are narrow enough to form a pair."""
    config = config or PipelineConfig()
    if criteria.category == ALL:
        return False
    if config.require_both_filters_for_pair and criteria.skin_type == ALL:
        return False
    return True


def pick_comparison_pair(
    view: Sequence[Product],
    config: PipelineConfig | None = None,
) -> Optional[ComparisonPair]:
    """Return the comparison pair for *view*, or None for fewer than 2 products."""
    if len(view) < 2:
        return None
    tolerance = (config or PipelineConfig()).tie_tolerance
    ordered = canonical_order(view)
    primary = ordered[0]
    secondary = next(
        (p for p in ordered[1:] if abs(p.rating - primary.rating) <= tolerance),
        ordered[1],
    )
    return ComparisonPair(primary=primary, secondary=secondary)


def highlighted_products(
    pair: Optional[ComparisonPair],
    view: Sequence[Product],
    config: PipelineConfig | None = None,
) -> FrozenSet[Product]:
    """The best-rated products of each brand in *pair*.

    Every product within ``highlight_epsilon`` of its brand's maximum
    rating (inside *view*) is included, so duplicate bests all light up.
    """
    if pair is None:
        return frozenset()
    epsilon = (config or PipelineConfig()).highlight_epsilon

    by_brand: Dict[str, List[Product]] = defaultdict(list)
    for p in view:
        if p.brand in pair.brands:
            by_brand[p.brand].append(p)

    chosen = set()
    for items in by_brand.values():
        best = max(p.rating for p in items)
        chosen.update(p for p in items if abs(p.rating - best) <= epsilon)
    return frozenset(chosen)


def expand_highlights(
    pair: Optional[ComparisonPair],
    view: Sequence[Product],
    config: PipelineConfig | None = None,
) -> FrozenSet[str]:
    """Names of ``highlighted_products``."""
    return frozenset(p.name for p in highlighted_products(pair, view, config))
