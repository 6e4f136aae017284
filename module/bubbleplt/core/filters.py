"""Filter engine: category / skin type / price predicates plus top-N.

``filter_products`` is a pure function of (catalog, criteria): it never
mutates the catalog and derives a fresh ``FilteredView`` on every call.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence, Tuple

import pandas as pd

from .config import PipelineConfig
from .dataset import ALL, SKIN_TYPES, Catalog, Product
from .errors import CriteriaError

logger = logging.getLogger(__name__)


def _price(value: Any, what: str) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError) as exc:
        raise CriteriaError(f"{what} must be a number (got {value!r})") from exc
    if math.isnan(out) or out < 0:
        raise CriteriaError(f"{what} must be >= 0 (got {value!r})")
    return out


@dataclass(frozen=True)
class FilterCriteria:
    """One filter request.

    ``price_range`` (inclusive ``(low, high)``) replaces the
    ``max_price`` ceiling when supplied.
    """

    category: str = ALL
    skin_type: str = ALL
    max_price: float = math.inf
    price_range: Optional[Tuple[float, float]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", str(self.category or ALL))
        object.__setattr__(self, "skin_type", str(self.skin_type or ALL))
        object.__setattr__(self, "max_price", _price(self.max_price, "max_price"))
        if self.price_range is not None:
            low, high = self.price_range
            low, high = _price(low, "price_range low"), _price(high, "price_range high")
            if low > high:
                raise CriteriaError(f"price_range is inverted: ({low}, {high})")
            object.__setattr__(self, "price_range", (low, high))

    @property
    def price_ceiling(self) -> float:
        return self.price_range[1] if self.price_range else self.max_price

    def matches(self, product: Product) -> bool:
        """Scalar form of the predicate used by ``filter_products``."""
        if self.category != ALL and product.category != self.category:
            return False
        if not product.matches_skin(self.skin_type):
            return False
        if self.price_range is not None:
            low, high = self.price_range
            return low <= product.price <= high
        return product.price <= self.max_price


@dataclass(frozen=True)
class FilteredView:
    """Products passing the filter, best rated first."""

    products: Tuple[Product, ...] = ()

    def __len__(self) -> int:
        return len(self.products)

    def __iter__(self) -> Iterator[Product]:
        return iter(self.products)

    def __getitem__(self, index: int) -> Product:
        return self.products[index]

    def __bool__(self) -> bool:
        return bool(self.products)

    def names(self) -> List[str]:
        return [p.name for p in self.products]


def _mask(frame: pd.DataFrame, criteria: FilterCriteria) -> pd.Series:
    mask = pd.Series(True, index=frame.index)
    if criteria.category != ALL:
        mask &= frame["category"] == criteria.category
    if criteria.skin_type != ALL:
        if criteria.skin_type in frame.columns:
            mask &= frame[criteria.skin_type].astype(bool)
        else:
            mask &= False
    if criteria.price_range is not None:
        low, high = criteria.price_range
        mask &= frame["price"].between(low, high, inclusive="both")
    else:
        mask &= frame["price"] <= criteria.max_price
    return mask


def filter_products(
    catalog: Catalog | None,
    criteria: FilterCriteria,
    config: PipelineConfig | None = None,
) -> FilteredView:
    """Return the top-N products matching every predicate of *criteria*.

    Survivors are sorted by rating, descending; ties keep catalog order.
    An absent or empty catalog yields an empty view.
    """
    if catalog is None or catalog.empty:
        return FilteredView()
    top_n = (config or PipelineConfig()).top_n

    frame = catalog.frame
    kept = frame.loc[_mask(frame, criteria)]
    ranked = kept.sort_values("rating", ascending=False, kind="stable").head(top_n)
    view = FilteredView(tuple(catalog.products[i] for i in ranked.index))
    logger.debug(
        "Filter %s/%s <= %s kept %d of %d (showing %d)",
        criteria.category,
        criteria.skin_type,
        criteria.price_ceiling,
        len(kept),
        len(frame),
        len(view),
    )
    return view


@dataclass(frozen=True)
class ControlOptions:
    """Values a renderer needs to build its filter controls."""

    categories: Tuple[str, ...]
    skin_types: Tuple[str, ...]
    max_price: float

    def default_criteria(self) -> FilterCriteria:
        return FilterCriteria(category=ALL, skin_type=ALL, max_price=self.max_price)


def control_options(catalog: Catalog, skin_types: Sequence[str] = SKIN_TYPES) -> ControlOptions:
    return ControlOptions(
        categories=tuple(catalog.categories()),
        skin_types=tuple(skin_types),
        max_price=catalog.max_price,
    )
