"""Recommendation lookup tables.

Two auxiliary tables ship next to the catalog and each may arrive in
one of two shapes:

- best brand per (skin type, category): a list of
  ``{skin|skin_type, category|Label, brand|Brand}`` rows, or a nested
  mapping ``skin -> category -> brand``;
- best product per brand: a list of
  ``{brand|Brand, name|product, rank|rating, Label|category, price}``
  rows, or a mapping ``brand -> row | [rows]``.

Keys are matched exactly first, then case-insensitively. Anything
that does not resolve (including an unrecognized shape) is ``None``;
lookups never raise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

from .utils import optional_number, to_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductRecommendation:
    """A brand's top product; price/rating are None when absent."""

    name: str
    rating: Optional[float]
    category: Optional[str]
    price: Optional[float]


def _get(row: Mapping[str, Any], *keys: str) -> Any:
    """First truthy value among *keys*."""
    for key in keys:
        value = row.get(key)
        if value:
            return value
    return None


def _fold(value: Any) -> str:
    return str(value).casefold() if value is not None else ""


def _lookup_key(node: Mapping[str, Any], key: str) -> Any:
    """``node[key]``, falling back to a case-insensitive match."""
    if key in node:
        return node[key]
    folded = _fold(key)
    for k, v in node.items():
        if _fold(k) == folded:
            return v
    return None


def _rows(source: Any) -> List[Mapping[str, Any]]:
    return [r for r in source if isinstance(r, Mapping)]


class BrandLookup:
    """Best brand for a (skin type, category) combination."""

    def __init__(self, source: Any) -> None:
        self.source = source
        if source is not None and not isinstance(source, (list, tuple, Mapping)):
            logger.warning("Unrecognized best-brand table shape: %s", type(source).__name__)

    def find(self, skin: str, category: str) -> Optional[str]:
        src = self.source
        if isinstance(src, (list, tuple)):
            rows = _rows(src)
            for same in (lambda a, b: a == b, lambda a, b: _fold(a) == _fold(b)):
                for r in rows:
                    skin_ok = same(r.get("skin"), skin) or same(r.get("skin_type"), skin)
                    cat_ok = same(r.get("category"), category) or same(r.get("Label"), category)
                    if skin_ok and cat_ok:
                        brand = _get(r, "brand", "Brand")
                        return str(brand) if brand else None
            return None
        if isinstance(src, Mapping):
            node = _lookup_key(src, skin)
            if isinstance(node, Mapping):
                brand = _lookup_key(node, category)
                return str(brand) if brand else None
        return None

    __call__ = find


def _number(row: Mapping[str, Any], *keys: str) -> float:
    """First positive numeric value among *keys*; a "0" rank falls through."""
    for key in keys:
        value = to_number(row.get(key))
        if value:
            return value
    return 0.0


def _score(row: Mapping[str, Any]) -> float:
    return _number(row, "rank", "rating")


def _top(rows: Iterable[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """Highest-rated row; the first one wins a tie."""
    best = None
    for r in rows:
        if best is None or _score(r) > _score(best):
            best = r
    return best


def _recommendation(row: Mapping[str, Any]) -> ProductRecommendation:
    category = _get(row, "Label", "category")
    return ProductRecommendation(
        name=str(_get(row, "name", "product") or ""),
        rating=optional_number(_score(row)),
        category=str(category) if category else None,
        price=optional_number(row.get("price")),
    )


class ProductLookup:
    """Top product for a brand."""

    def __init__(self, source: Any) -> None:
        self.source = source
        if source is not None and not isinstance(source, (list, tuple, Mapping)):
            logger.warning("Unrecognized best-product table shape: %s", type(source).__name__)

    def find(self, brand: str) -> Optional[ProductRecommendation]:
        src = self.source
        top = None
        if isinstance(src, (list, tuple)):
            rows = _rows(src)
            matches = [r for r in rows if _get(r, "brand", "Brand") == brand]
            if not matches:
                matches = [r for r in rows if _fold(_get(r, "brand", "Brand")) == _fold(brand)]
            top = _top(matches)
        elif isinstance(src, Mapping):
            node = _lookup_key(src, brand)
            if isinstance(node, (list, tuple)):
                top = _top(_rows(node))
            elif isinstance(node, Mapping):
                top = node
        return _recommendation(top) if top is not None else None

    __call__ = find
