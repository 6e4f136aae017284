"""Tests for the best-brand / best-product lookups."""

from bubbleplt.core.lookups import BrandLookup, ProductLookup, ProductRecommendation


class TestBrandLookup:
    def test_rows_shape(self, best_brand_rows):
        lookup = BrandLookup(best_brand_rows)
        assert lookup.find("Dry", "Moisturizer") == "LANEIGE"
        assert lookup.find("Oily", "Cleanser") == "CLINIQUE"
        assert lookup.find("Dry", "Cleanser") is None

    def test_rows_case_insensitive_fallback(self, best_brand_rows):
        assert BrandLookup(best_brand_rows).find("dry", "moisturizer") == "LANEIGE"

    def test_mapping_shape(self, best_brand_mapping):
        lookup = BrandLookup(best_brand_mapping)
        assert lookup.find("Dry", "Cleanser") == "FRESH"
        assert lookup.find("Oily", "Cleanser") == "CLINIQUE"
        assert lookup("Dry", "Moisturizer") == "LANEIGE"
        assert lookup.find("Sensitive", "Cleanser") is None

    def test_unrecognized_shapes_resolve_to_none(self):
        for source in (None, 42, "LANEIGE", {"Dry": "not a mapping"}, [1, 2, 3]):
            assert BrandLookup(source).find("Dry", "Cleanser") is None


class TestProductLookup:
    def test_rows_pick_highest_rating(self, best_product_rows):
        best = ProductLookup(best_product_rows).find("LANEIGE")
        assert best == ProductRecommendation(
            name="Dewy Cream", rating=4.7, category="Moisturizer", price=33.0
        )

    def test_rows_alternate_keys(self, best_product_rows):
        best = ProductLookup(best_product_rows).find("CLINIQUE")
        assert best.name == "Gel Wash"
        assert best.rating == 4.2
        assert best.category == "Cleanser"

    def test_rows_tie_keeps_first(self):
        rows = [
            {"brand": "Z", "name": "first", "rank": 4.0},
            {"brand": "Z", "name": "second", "rank": 4.0},
        ]
        assert ProductLookup(rows).find("Z").name == "first"

    def test_mapping_single_record(self):
        lookup = ProductLookup({"FRESH": {"product": "Rose Mask", "rating": "4.5", "price": "62"}})
        best = lookup.find("FRESH")
        assert best.name == "Rose Mask"
        assert best.rating == 4.5
        assert best.price == 62.0
        assert best.category is None

    def test_mapping_list_of_records(self):
        lookup = ProductLookup(
            {"fresh": [{"name": "a", "rank": 3.1}, {"name": "b", "rank": 4.9}, {"name": "c"}]}
        )
        assert lookup.find("FRESH").name == "b"

    def test_zero_rank_falls_back_to_rating(self):
        rows = [
            {"brand": "Q", "name": "a", "rank": "0", "rating": 4.8},
            {"brand": "Q", "name": "b", "rank": "4.0"},
        ]
        best = ProductLookup(rows).find("Q")
        assert best.name == "a"
        assert best.rating == 4.8

    def test_missing_numbers_are_none(self):
        best = ProductLookup([{"brand": "Q", "name": "Plain"}]).find("Q")
        assert best.rating is None
        assert best.price is None

    def test_unknown_brand_or_shape(self, best_product_rows):
        assert ProductLookup(best_product_rows).find("NOPE") is None
        assert ProductLookup(None).find("LANEIGE") is None
        assert ProductLookup(3.5).find("LANEIGE") is None
        assert ProductLookup({"LANEIGE": 7}).find("LANEIGE") is None
