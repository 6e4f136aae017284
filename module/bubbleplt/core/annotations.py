"""Insight panel text.

``compose`` turns the filtered view, the comparison pair and the two
recommendation lookups into an ``AnnotationBundle``. Strings are small
HTML fragments (``<strong>`` emphasis only); every data-supplied value
goes through ``esc()``. All functions here are pure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .compare import ComparisonPair, pair_allowed
from .config import BUDGET_BANDS, PipelineConfig
from .dataset import ALL, Product
from .filters import FilterCriteria
from .lookups import BrandLookup, ProductLookup
from .utils import esc, money

SKIN_TIPS = {
    "Dry": (
        "Look for <strong>hyaluronic acid</strong> or <strong>glycerin</strong>; "
        "<strong>ceramides</strong> help seal moisture."
    ),
    "Oily": (
        "<strong>Salicylic acid</strong> clears pores; <strong>niacinamide</strong> "
        "helps oil balance; gels avoid heaviness."
    ),
    "Combination": (
        "Light hydration (<strong>HA</strong>) without heavy creams; a touch of "
        "salicylic acid helps a shiny T-zone."
    ),
    "Sensitive": (
        "Keep it simple and fragrance-free. <strong>Centella</strong>, "
        "<strong>aloe</strong>, or <strong>oat</strong> can be calming."
    ),
    "Normal": (
        "Pick by goal: brightening (<strong>vitamin C</strong>), smoothing "
        "(<strong>centella</strong>), or hydration (<strong>HA/glycerin</strong>)."
    ),
}

BUDGET_NOTES = {
    "entry": "You can get gentle, well-rated options without going luxury here.",
    "mid": "Mid-range often adds brighteners or pore helpers without luxury pricing.",
    "premium": "This tier usually adds more actives and polish. Consider whether ratings justify the spend.",
    "unlimited": (
        "Higher prices often bundle multiple actives or luxe textures. "
        "Check rating, not just price."
    ),
}


@dataclass(frozen=True)
class AnnotationBundle:
    """Panel content; ``hidden`` bundles carry no text."""

    hidden: bool = True
    head: str = ""
    tip: str = ""
    budget_note: str = ""
    compare_line: str = ""
    cross_ref_line: str = ""

    @property
    def body(self) -> str:
        """Comparison and cross-reference lines joined for one paragraph."""
        return "<br>".join(line for line in (self.compare_line, self.cross_ref_line) if line)


def band_for(price: float, bands: Sequence[int] = BUDGET_BANDS) -> int:
    """Smallest finite band >= *price*; 0 (no limit) when none is."""
    for band in bands:
        if band and price <= band:
            return band
    return 0


def budget_note(band: int) -> str:
    if band == 0:
        return BUDGET_NOTES["unlimited"]
    if band <= 40:
        return BUDGET_NOTES["entry"]
    if band <= 80:
        return BUDGET_NOTES["mid"]
    return BUDGET_NOTES["premium"]


def skin_phrase(skin: str) -> str:
    return "All skin types" if skin == ALL else f"{skin} Skin"


def head_text(criteria: FilterCriteria, band: int) -> str:
    limit = money(band) if band else "no price limit"
    return f"For {esc(skin_phrase(criteria.skin_type))}: {esc(criteria.category)}s under {limit}"


def tip_text(skin: str) -> str:
    return SKIN_TIPS.get(skin, "")


def compare_line(pair: Optional[ComparisonPair]) -> str:
    """Both-similarly-rated sentence naming the cheaper product; '' without a pair."""
    if pair is None:
        return ""
    a, b = pair.primary, pair.secondary
    left, right = pair.cheaper, pair.pricier
    return (
        f"Both <strong>{esc(a.brand.upper())}</strong> and <strong>{esc(b.brand.upper())}</strong> "
        f"are highly rated ({a.rating:.2f}), but <strong>{esc(left.brand.upper())}</strong>'s "
        f"{esc(left.name)} is the more budget-friendly pick "
        f"({money(left.price)} vs {money(right.price)})."
    )


def cross_ref_line(
    criteria: FilterCriteria,
    brand_lookup: Optional[BrandLookup],
    product_lookup: Optional[ProductLookup],
) -> str:
    """Best brand/product sentence for the selected skin type and category."""
    skin, category = criteria.skin_type, criteria.category
    if skin == ALL or category == ALL or brand_lookup is None:
        return ""
    brand = brand_lookup.find(skin, category)
    if not brand:
        return ""
    lead = f"For {esc(skin.lower())} skin in {esc(category.lower())}, "
    best = product_lookup.find(brand) if product_lookup is not None else None
    if best is None:
        return f"{lead}<strong>{esc(brand)}</strong> frequently appears among top brands."
    price_part = f" for about {money(best.price)}" if best.price is not None else ""
    rating_part = f" (rated {best.rating:.2f})" if best.rating is not None else ""
    return (
        f"{lead}<strong>{esc(brand)}</strong>'s top pick is "
        f"<strong>{esc(best.name)}</strong>{price_part}{rating_part}."
    )


def panel_visible(
    view: Sequence[Product],
    criteria: FilterCriteria,
    config: PipelineConfig | None = None,
) -> bool:
    return bool(view) and pair_allowed(criteria, config)


def compose(
    view: Sequence[Product],
    criteria: FilterCriteria,
    pair: Optional[ComparisonPair],
    brand_lookup: Optional[BrandLookup],
    product_lookup: Optional[ProductLookup],
    config: PipelineConfig | None = None,
) -> AnnotationBundle:
    config = config or PipelineConfig()
    if not panel_visible(view, criteria, config):
        return AnnotationBundle()

    band = band_for(criteria.price_ceiling, config.budget_bands)
    return AnnotationBundle(
        hidden=False,
        head=head_text(criteria, band),
        tip=tip_text(criteria.skin_type),
        budget_note=budget_note(band),
        compare_line=compare_line(pair),
        cross_ref_line=cross_ref_line(criteria, brand_lookup, product_lookup),
    )
