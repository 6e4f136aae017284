"""Shared fixtures: small catalogs and lookup tables."""

import sys
from pathlib import Path

import pytest


def ensure_module_on_path() -> None:
    root = Path(__file__).resolve().parent.parent
    module_path = root / "module"
    if str(module_path) not in sys.path:
        sys.path.insert(0, str(module_path))


ensure_module_on_path()

from bubbleplt.core.dataset import Catalog  # noqa: E402


def row(name, brand, price, rank, label="Cleanser", **skins):
    out = {"name": name, "brand": brand, "Label": label, "price": price, "rank": rank}
    for skin in ("Combination", "Dry", "Normal", "Oily", "Sensitive"):
        out[skin] = skins.get(skin, 0)
    return out


@pytest.fixture
def scenario_rows():
    """A(X, $20, 4.5), B(Y, $50, 4.5), C(X, $10, 3.0); all Dry cleansers."""
    return [
        row("A", "X", 20, 4.5, Dry=1),
        row("B", "Y", 50, 4.5, Dry=1),
        row("C", "X", 10, 3.0, Dry=1),
    ]


@pytest.fixture
def scenario_catalog(scenario_rows):
    return Catalog.from_records(scenario_rows)


@pytest.fixture
def mixed_rows():
    return [
        row("Gel Wash", "CLINIQUE", 24, 4.2, Oily=1, Combination=1),
        row("Milk Cleanser", "FRESH", 38, 4.6, Dry=1, Sensitive=1),
        row("Foam Cleanser", "LANEIGE", 22, 4.6, Oily=1, Normal=1),
        row("Oat Cleanser", "ORIGINS", 28, 3.9, Sensitive=1, Dry=1),
        row("Water Cream", "TATCHA", 69, 4.7, label="Moisturizer", Dry=1, Normal=1),
        row("Dewy Cream", "LANEIGE", 33, 4.7, label="Moisturizer", Dry=1, Combination=1),
        row("Ultra Facial", "KIEHL'S", 32, 4.4, label="Moisturizer", Dry=1, Normal=1, Oily=1),
        row("Protini", "DRUNK ELEPHANT", 68, 4.1, label="Moisturizer", Combination=1, Oily=1),
        row("Sleeping Mask", "LANEIGE", 25, 4.5, label="Face Mask", Dry=1),
        row("Rose Mask", "FRESH", 62, 4.5, label="Face Mask", Normal=1, Sensitive=1),
        row("Eye Balm", "ORIGINS", 40, 3.8, label="Eye cream", Sensitive=1),
        row("Avocado Eye", "KIEHL'S", 50, 4.3, label="Eye cream", Dry=1),
    ]


@pytest.fixture
def mixed_catalog(mixed_rows):
    return Catalog.from_records(mixed_rows)


@pytest.fixture
def best_brand_rows():
    return [
        {"skin": "Dry", "category": "Moisturizer", "brand": "LANEIGE"},
        {"skin_type": "Oily", "Label": "Cleanser", "Brand": "CLINIQUE"},
        {"skin": "Sensitive", "category": "Cleanser", "brand": "ORIGINS"},
    ]


@pytest.fixture
def best_brand_mapping():
    return {
        "Dry": {"Moisturizer": "LANEIGE", "Cleanser": "FRESH"},
        "oily": {"cleanser": "CLINIQUE"},
        "Normal": {"Moisturizer": "UNKNOWN BRAND"},
    }


@pytest.fixture
def best_product_rows():
    return [
        {"brand": "LANEIGE", "name": "Sleeping Mask", "rank": 4.5, "Label": "Face Mask", "price": 25},
        {"brand": "LANEIGE", "name": "Dewy Cream", "rank": 4.7, "Label": "Moisturizer", "price": 33},
        {"Brand": "CLINIQUE", "product": "Gel Wash", "rating": 4.2, "category": "Cleanser", "price": 24},
        {"brand": "FRESH", "name": "Milk Cleanser", "rank": 4.6, "Label": "Cleanser", "price": 38},
    ]


@pytest.fixture
def make_row():
    return row
