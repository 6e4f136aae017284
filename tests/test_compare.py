"""Tests for comparison-pair selection and highlight expansion."""

import pytest

from bubbleplt.core.compare import (
    canonical_order,
    expand_highlights,
    highlighted_products,
    pair_allowed,
    pick_comparison_pair,
)
from bubbleplt.core.config import PipelineConfig
from bubbleplt.core.dataset import Catalog, Product
from bubbleplt.core.filters import FilterCriteria, filter_products


def product(name, brand, price, rating):
    return Product(name=name, brand=brand, category="Cleanser", price=price, rating=rating)


class TestPickComparisonPair:
    def test_scenario(self, scenario_catalog):
        view = filter_products(scenario_catalog, FilterCriteria("Cleanser", "Dry", 100))
        pair = pick_comparison_pair(view)
        assert (pair.primary.name, pair.secondary.name) == ("A", "B")
        assert pair.cheaper.name == "A"
        assert pair.pricier.name == "B"

    def test_fewer_than_two(self):
        assert pick_comparison_pair([]) is None
        assert pick_comparison_pair([product("a", "x", 1, 4)]) is None

    def test_cheaper_tie_comes_first(self):
        view = [product("dear", "x", 40, 4.8), product("cheap", "y", 10, 4.8)]
        pair = pick_comparison_pair(view)
        assert pair.primary.name == "cheap"
        assert pair.secondary.name == "dear"

    def test_within_tolerance(self):
        view = [product("a", "x", 30, 4.9), product("b", "y", 12, 4.85), product("c", "z", 5, 4.5)]
        pair = pick_comparison_pair(view)
        assert (pair.primary.name, pair.secondary.name) == ("a", "b")

    def test_falls_back_to_second_when_no_tie(self):
        view = [product("a", "x", 30, 4.9), product("b", "y", 12, 4.0), product("c", "z", 5, 3.0)]
        pair = pick_comparison_pair(view)
        assert (pair.primary.name, pair.secondary.name) == ("a", "b")

    def test_distinct_records_even_when_identical(self):
        twin = [product("same", "x", 10, 4.0), product("same", "x", 10, 4.0)]
        pair = pick_comparison_pair(twin)
        assert pair.primary is twin[0]
        assert pair.secondary is twin[1]

    def test_members_come_from_view(self, mixed_catalog):
        view = filter_products(mixed_catalog, FilterCriteria())
        pair = pick_comparison_pair(view)
        assert pair.primary in view.products
        assert pair.secondary in view.products
        assert pair.primary is not pair.secondary

    def test_canonical_order(self):
        view = [product("a", "x", 30, 4.0), product("b", "y", 12, 4.5), product("c", "z", 5, 4.5)]
        assert [p.name for p in canonical_order(view)] == ["c", "b", "a"]


class TestExpandHighlights:
    def test_scenario_excludes_lower_rated_same_brand(self, scenario_catalog):
        view = filter_products(scenario_catalog, FilterCriteria("Cleanser", "Dry", 100))
        pair = pick_comparison_pair(view)
        assert expand_highlights(pair, view) == frozenset({"A", "B"})

    def test_keeps_duplicate_bests(self):
        view = [
            product("x1", "X", 20, 4.5),
            product("y1", "Y", 50, 4.5),
            product("x2", "X", 25, 4.5),
            product("x3", "X", 5, 4.4),
            product("z1", "Z", 15, 4.5),
        ]
        pair = pick_comparison_pair(view)
        highlights = expand_highlights(pair, view)
        assert (pair.primary.name, pair.secondary.name) == ("z1", "x1")
        assert highlights == frozenset({"x1", "x2", "z1"})

    def test_highlights_are_brand_maxima(self, mixed_catalog):
        view = filter_products(mixed_catalog, FilterCriteria())
        pair = pick_comparison_pair(view)
        highlights = expand_highlights(pair, view)
        for brand in pair.brands:
            items = [p for p in view if p.brand == brand]
            best = max(p.rating for p in items)
            expected = {p.name for p in items if abs(p.rating - best) <= 1e-6}
            assert expected <= highlights
        by_name = {p.name: p for p in view}
        assert all(by_name[n].brand in pair.brands for n in highlights)

    def test_epsilon_from_config(self):
        view = [product("a", "X", 1, 4.5), product("b", "X", 2, 4.45), product("c", "Y", 3, 4.5)]
        pair = pick_comparison_pair(view)
        assert expand_highlights(pair, view) == frozenset({"a", "c"})
        loose = PipelineConfig(highlight_epsilon=0.1)
        assert expand_highlights(pair, view, loose) == frozenset({"a", "b", "c"})

    def test_no_pair(self):
        assert expand_highlights(None, [product("a", "x", 1, 1)]) == frozenset()


class TestPairPolicy:
    @pytest.mark.parametrize(
        "category, skin, default, strict",
        [
            ("All", "All", False, False),
            ("All", "Dry", False, False),
            ("Cleanser", "All", True, False),
            ("Cleanser", "Dry", True, True),
        ],
    )
    def test_pair_allowed(self, category, skin, default, strict):
        criteria = FilterCriteria(category=category, skin_type=skin)
        assert pair_allowed(criteria) is default
        assert pair_allowed(criteria, PipelineConfig(require_both_filters_for_pair=True)) is strict

    def test_identical_records_from_catalog(self, make_row):
        catalog = Catalog.from_records([make_row("p", "b", 5, 4), make_row("p", "b", 5, 4)])
        pair = pick_comparison_pair(catalog.products)
        assert pair.primary is catalog.products[0]
        assert pair.secondary is catalog.products[1]


def test_same_name_outside_pair_is_not_highlighted():
    mine = product("Cream", "X", 20, 4.5)
    rival = product("Serum", "Y", 30, 4.5)
    namesake = product("Cream", "Z", 40, 3.0)
    view = [mine, rival, namesake]
    pair = pick_comparison_pair(view)
    chosen = highlighted_products(pair, view)
    assert chosen == frozenset({mine, rival})
    assert namesake not in chosen
    assert expand_highlights(pair, view) == frozenset({"Cream", "Serum"})
