"""
Tests for the Phrase Categorizer
"""

import pytest

from hts_ambiguity.categorizer import (
    CATEGORY_ORDER,
    CATEGORY_PROFILES,
    categorize_phrase,
    check_profiles,
    keyword_matches,
    profile_for,
)
from hts_ambiguity.models import Category


class TestNumericPhrases:
    def test_currency_is_value(self):
        assert categorize_phrase("valued not over $0.60") == Category.VALUE

    def test_length_figure_is_size(self):
        assert categorize_phrase("exceeding 15 cm") == Category.SIZE

    def test_weight_figure_is_weight(self):
        assert categorize_phrase("over 2 kg") == Category.WEIGHT

    def test_bare_comparator_is_value(self):
        assert categorize_phrase("not exceeding") == Category.VALUE


class TestSubMaterialPriority:
    def test_handle_of_wood_not_general_material(self):
        assert categorize_phrase("with handles of wood") == Category.HANDLE_MATERIAL

    def test_plating(self):
        assert categorize_phrase("silver-plated") == Category.PLATING

    def test_blade_material(self):
        assert categorize_phrase("stainless steel blades") == Category.BLADE_MATERIAL

    def test_multi_handle_is_construction(self):
        assert categorize_phrase("two-handled") == Category.CONSTRUCTION

    def test_plain_material(self):
        assert categorize_phrase("cotton") == Category.MATERIAL


class TestKeywordProfiles:
    @pytest.mark.parametrize("phrase,expected", [
        ("having folding blades", Category.CONSTRUCTION),
        ("women's", Category.DEMOGRAPHIC),
        ("undershirts", Category.GARMENT_TYPE),
        ("kitchen knives", Category.USE),
        ("electric", Category.POWER),
        ("polished", Category.FINISH),
        ("forged", Category.ORIGIN),
    ])
    def test_category(self, phrase, expected):
        assert categorize_phrase(phrase) == expected

    def test_unknown_is_other(self):
        assert categorize_phrase("zorbix") == Category.OTHER


class TestKeywordMatches:
    def test_short_keyword_needs_word_boundary(self):
        assert keyword_matches("under", "undershirts") is False

    def test_short_keyword_on_boundary(self):
        assert keyword_matches("under", "valued under $5") is True

    def test_long_keyword_substring(self):
        assert keyword_matches("folding", "non-folding knife") is True

    def test_case_insensitive(self):
        assert keyword_matches("Table", "table knives") is True


class TestProfiles:
    def test_every_category_has_profile(self):
        assert set(CATEGORY_PROFILES) == set(Category)

    def test_missing_profile_raises(self):
        partial = {c: p for c, p in CATEGORY_PROFILES.items() if c != Category.OTHER}
        with pytest.raises(RuntimeError, match="other"):
            check_profiles(partial)

    def test_order_excludes_other(self):
        assert Category.OTHER not in CATEGORY_ORDER

    def test_sub_materials_always_significant(self):
        for category in (Category.BLADE_MATERIAL, Category.HANDLE_MATERIAL, Category.PLATING):
            assert profile_for(category).always_significant is True
        assert profile_for(Category.MATERIAL).always_significant is False

    def test_other_has_no_configured_question(self):
        assert profile_for(Category.OTHER).question is None
