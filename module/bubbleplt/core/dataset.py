"""Catalog loading and normalization.

The product table is a CSV with one row per product::

    brand,name,Label,price,rank,Combination,Dry,Normal,Oily,Sensitive

``normalize_catalog`` maps the loosely typed frame onto immutable
``Product`` records: numeric cells are coerced to finite non-negative
floats (anything unparseable becomes 0) and the five skin columns
become a set of skin-type flags (a flag is set only for the value 1).

``load_sources`` fetches the catalog and the two recommendation tables
concurrently; the session cannot start unless all three arrive.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, FrozenSet, Iterable, Iterator, List, Mapping, Tuple

import pandas as pd

from .errors import LoadError

logger = logging.getLogger(__name__)

ALL = "All"

# Control order; also the order used when listing a product's skin types.
SKIN_TYPES: Tuple[str, ...] = ("Combination", "Dry", "Normal", "Oily", "Sensitive")

# Accepted spellings per normalized column, first match wins.
COLUMN_ALIASES = {
    "name": ("name", "product", "Name"),
    "brand": ("brand", "Brand"),
    "category": ("Label", "category", "label"),
    "price": ("price", "Price"),
    "rating": ("rank", "rating", "Rank"),
}


@dataclass(frozen=True)
class Product:
    """One catalog row after normalization."""

    name: str
    brand: str
    category: str
    price: float
    rating: float
    skin_flags: FrozenSet[str] = field(default_factory=frozenset)

    def matches_skin(self, skin: str) -> bool:
        return skin == ALL or skin in self.skin_flags

    def skin_list(self) -> List[str]:
        """Skin types this product is flagged for, in control order."""
        return [s for s in SKIN_TYPES if s in self.skin_flags]


@dataclass(frozen=True, eq=False)
class Catalog:
    """Normalized product table.

    ``frame`` has the columns name, brand, category, price, rating and
    one boolean column per skin type; row ``i`` of the frame is
    ``products[i]``.
    """

    frame: pd.DataFrame
    products: Tuple[Product, ...]

    def __len__(self) -> int:
        return len(self.products)

    def __iter__(self) -> Iterator[Product]:
        return iter(self.products)

    @property
    def empty(self) -> bool:
        return not self.products

    @property
    def max_price(self) -> float:
        return float(self.frame["price"].max()) if self.products else 0.0

    @property
    def price_extent(self) -> Tuple[float, float]:
        if not self.products:
            return (0.0, 0.0)
        return (float(self.frame["price"].min()), float(self.frame["price"].max()))

    def categories(self) -> List[str]:
        """Sorted distinct non-empty categories."""
        return sorted({p.category for p in self.products if p.category})

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "Catalog":
        return normalize_catalog(pd.DataFrame(list(records)))


# -----------------------------
# Normalization
# -----------------------------
def _first_column(df: pd.DataFrame, key: str) -> str | None:
    for name in COLUMN_ALIASES[key]:
        if name in df.columns:
            return name
    return None


def _text(df: pd.DataFrame, key: str) -> pd.Series:
    col = _first_column(df, key)
    if col is None:
        return pd.Series([""] * len(df), index=df.index, dtype=object)
    return df[col].fillna("").astype(str).str.strip()


def _numeric(df: pd.DataFrame, *columns: str) -> pd.Series:
    """First parseable value across *columns*; otherwise 0."""
    out = pd.Series(float("nan"), index=df.index, dtype=float)
    for col in columns:
        if col in df.columns:
            values = pd.to_numeric(df[col], errors="coerce").astype(float)
            out = out.combine_first(values)
    out = out.replace([float("inf"), float("-inf")], float("nan")).fillna(0.0)
    return out.where(out >= 0, 0.0)


def normalize_catalog(df: pd.DataFrame | None) -> Catalog:
    """Return a ``Catalog`` built from a raw product frame."""
    if df is None or df.empty:
        empty = pd.DataFrame(columns=["name", "brand", "category", "price", "rating", *SKIN_TYPES])
        return Catalog(frame=empty, products=())

    df = df.reset_index(drop=True)
    frame = pd.DataFrame(
        {
            "name": _text(df, "name"),
            "brand": _text(df, "brand"),
            "category": _text(df, "category"),
            "price": _numeric(df, *COLUMN_ALIASES["price"]),
            "rating": _numeric(df, *COLUMN_ALIASES["rating"]),
        }
    )
    for skin in SKIN_TYPES:
        frame[skin] = _numeric(df, skin) == 1

    products = tuple(
        Product(
            name=r.name,
            brand=r.brand,
            category=r.category,
            price=float(r.price),
            rating=float(r.rating),
            skin_flags=frozenset(s for s in SKIN_TYPES if bool(getattr(r, s))),
        )
        for r in frame.itertuples(index=False)
    )
    return Catalog(frame=frame, products=products)


def read_catalog(catalog_path: Path | str) -> Catalog:
    """Read and normalize the product CSV."""
    df = pd.read_csv(catalog_path)
    return normalize_catalog(df)


# -----------------------------
# Source loading
# -----------------------------
@dataclass(frozen=True, eq=False)
class LoadedSources:
    catalog: Catalog
    best_brand: Any
    best_products: Any


def _load_catalog(path: Path) -> Catalog:
    try:
        catalog = read_catalog(path)
    except (OSError, ValueError) as exc:
        # pandas' EmptyDataError and ParserError are ValueErrors.
        raise LoadError(str(path), str(exc)) from exc
    if catalog.empty:
        raise LoadError(str(path), "no rows")
    return catalog


def _load_json(path: Path) -> Any:
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise LoadError(str(path), str(exc)) from exc
    if not payload:
        raise LoadError(str(path), "empty table")
    return payload


async def load_sources(
    catalog_path: Path | str,
    best_brand_path: Path | str,
    best_products_path: Path | str,
) -> LoadedSources:
    """Load all three sources concurrently.

    Raises ``LoadError`` for the first source that failed; partial
    results are discarded.
    """
    logger.info("Loading catalog %s with lookups %s, %s", catalog_path, best_brand_path, best_products_path)
    results = await asyncio.gather(
        asyncio.to_thread(_load_catalog, Path(catalog_path)),
        asyncio.to_thread(_load_json, Path(best_brand_path)),
        asyncio.to_thread(_load_json, Path(best_products_path)),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    catalog, best_brand, best_products = results
    logger.info("Loaded %d products", len(catalog))
    return LoadedSources(catalog=catalog, best_brand=best_brand, best_products=best_products)
