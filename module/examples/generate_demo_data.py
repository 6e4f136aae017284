#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Generate a small dummy cosmetics catalog for bubbleplt demos.

Writes under examples/data/ the three files ``open_explorer`` expects:

- cosmetic_p.csv: brand, name, Label, price, rank, Combination, Dry,
  Normal, Oily, Sensitive. One row per product; the skin columns are
  0/1 flags. A few cells are left blank or unparseable on purpose so
  the normalizer has something to coerce.

- best_brand_for_skin_types.json: nested mapping
  skin type -> category -> brand (best average rating per combination).

- best_products_for_brand.json: list of rows
  {brand, name, rank, Label, price}, every product of every brand; the
  lookup picks the top one per brand.

Run from repo root with PYTHONPATH including module/:
  PYTHONPATH=module python module/examples/generate_demo_data.py
"""

import json
import random
from pathlib import Path

import pandas as pd

from bubbleplt.core.dataset import SKIN_TYPES, normalize_catalog

# Default seed for reproducible dummy data
DEFAULT_SEED = 42
PRODUCTS_PER_BRAND = 9

BRANDS = ("CLINIQUE", "KIEHL'S", "LANEIGE", "ORIGINS", "FRESH", "DRUNK ELEPHANT", "TATCHA")
CATEGORIES = ("Cleanser", "Eye cream", "Face Mask", "Moisturizer", "Sun protect", "Treatment")

# Typical price band per category (low, high)
CATEGORY_PRICES = {
    "Cleanser": (12, 45),
    "Eye cream": (25, 95),
    "Face Mask": (15, 70),
    "Moisturizer": (20, 160),
    "Sun protect": (18, 60),
    "Treatment": (30, 220),
}

_NAME_WORDS = (
    "Hydrating Gentle Daily Balancing Radiance Calming Renewal Clarifying "
    "Water Silk Cloud Dew Barrier Overnight Brightening Ultra Pure"
).split()


def _data_dir() -> Path:
    return Path(__file__).resolve().parent / "data"


def _product_name(category: str) -> str:
    return f"{' '.join(random.sample(_NAME_WORDS, 2))} {category}"


def make_catalog_df(seed: int = DEFAULT_SEED) -> pd.DataFrame:
    """Catalog: one row per product with price, rank and skin flags."""
    random.seed(seed)
    rows = []
    for brand in BRANDS:
        for _ in range(PRODUCTS_PER_BRAND):
            category = random.choice(CATEGORIES)
            low, high = CATEGORY_PRICES[category]
            row = {
                "brand": brand,
                "name": _product_name(category),
                "Label": category,
                "price": random.randint(low, high),
                "rank": round(random.uniform(3.4, 5.0), 1),
            }
            for skin in SKIN_TYPES:
                row[skin] = int(random.random() < 0.6)
            rows.append(row)
    # Messy cells the loader must tolerate.
    rows[3]["rank"] = ""
    rows[11]["price"] = "n/a"
    return pd.DataFrame(rows)


def make_best_brand(df: pd.DataFrame) -> dict[str, dict[str, str]]:
    """Nested mapping skin -> category -> brand with the best mean rating."""
    frame = normalize_catalog(df).frame
    out: dict[str, dict[str, str]] = {}
    for skin in SKIN_TYPES:
        sub = frame[frame[skin]]
        if sub.empty:
            continue
        means = sub.groupby(["category", "brand"])["rating"].mean().reset_index()
        best = means.sort_values("rating", ascending=False, kind="stable").drop_duplicates("category")
        out[skin] = {str(r.category): str(r.brand) for r in best.itertuples(index=False)}
    return out


def make_best_products(df: pd.DataFrame) -> list[dict]:
    """Row-shaped product table (all rows; the lookup selects the top per brand)."""
    frame = normalize_catalog(df).frame
    return [
        {
            "brand": r.brand,
            "name": r.name,
            "rank": r.rating,
            "Label": r.category,
            "price": r.price,
        }
        for r in frame.itertuples(index=False)
    ]


def get_demo_data(seed: int = DEFAULT_SEED) -> dict:
    """Return catalog frame and both lookup payloads for programmatic use."""
    df = make_catalog_df(seed=seed)
    return {
        "catalog": df,
        "best_brand": make_best_brand(df),
        "best_products": make_best_products(df),
    }


def main() -> None:
    out_dir = _data_dir()
    out_dir.mkdir(parents=True, exist_ok=True)
    data = get_demo_data()

    path = out_dir / "cosmetic_p.csv"
    data["catalog"].to_csv(path, index=False)
    print(f"Wrote {path} ({len(data['catalog'])} rows)")

    for name, key in (
        ("best_brand_for_skin_types.json", "best_brand"),
        ("best_products_for_brand.json", "best_products"),
    ):
        path = out_dir / name
        path.write_text(json.dumps(data[key], indent=2), encoding="utf-8")
        print(f"Wrote {path}")


if __name__ == "__main__":
    main()
