"""
Tests for the Differentiator Extractor
"""

import pytest

from hts_ambiguity.differentiators import (
    extract_tokens,
    find_differentiating_phrases,
    is_stop_word,
)
from hts_ambiguity.models import Category, LeafEntry


# ═══════════════════════════════════════════
#  TOKENIZATION
# ═══════════════════════════════════════════

class TestExtractTokens:
    def test_catalogue_phrase_kept_whole(self):
        tokens = extract_tokens("Knives having folding blades")
        assert "having folding blades" in tokens
        assert "folding" not in tokens

    def test_longer_comparator_consumed_first(self):
        tokens = extract_tokens("Knives valued not over $0.60 per dozen")
        assert "valued not over $0.60" in tokens
        assert "over $0.60" not in tokens
        assert "valued over $0.60" not in tokens

    def test_sub_material_before_generic_material(self):
        tokens = extract_tokens("Table knives with stainless steel blades")
        assert "stainless steel blades" in tokens
        assert "stainless steel" not in tokens

    def test_handle_phrase(self):
        tokens = extract_tokens("Table knives, with handles of wood")
        assert "with handles of wood" in tokens
        assert "wood" not in tokens

    def test_boilerplate_dropped(self):
        assert extract_tokens("Other articles, nesoi") == []

    def test_short_words_dropped(self):
        assert extract_tokens("Of tin") == []

    def test_numerals_dropped(self):
        assert "2024" not in extract_tokens("Widgets 2024")

    def test_tokens_unique_in_order(self):
        tokens = extract_tokens("Widgets zorbix widgets zorbix")
        assert tokens == ["widgets", "zorbix"]

    def test_empty_description(self):
        assert extract_tokens("") == []
        assert extract_tokens(None) == []

    def test_womens_before_mens(self):
        tokens = extract_tokens("Women's cotton t-shirts")
        assert "women's" in tokens
        assert "men's" not in tokens


class TestIsStopWord:
    def test_stop_word(self):
        assert is_stop_word("Other") is True

    def test_numeric(self):
        assert is_stop_word("0.60") is True

    def test_content_word(self):
        assert is_stop_word("folding") is False


# ═══════════════════════════════════════════
#  DIFFERENTIATORS
# ═══════════════════════════════════════════

class TestFindDifferentiatingPhrases:
    def test_some_but_not_all(self, knife_construction_leaves):
        phrases = find_differentiating_phrases(knife_construction_leaves)
        by_text = {p.phrase: p for p in phrases}
        assert set(by_text) == {"having fixed blades", "having folding blades"}
        assert by_text["having fixed blades"].codes == ("8211930010",)
        assert by_text["having folding blades"].category == Category.CONSTRUCTION

    def test_token_in_every_leaf_is_not_a_differentiator(self, knife_construction_leaves):
        phrases = find_differentiating_phrases(knife_construction_leaves)
        assert "knives" not in [p.phrase for p in phrases]

    def test_symmetry_on_material_cube(self, material_cube_leaves):
        total = len(material_cube_leaves)
        for phrase in find_differentiating_phrases(material_cube_leaves):
            assert 0 < len(phrase.codes) < total

    def test_material_cube_categories(self, material_cube_leaves):
        phrases = find_differentiating_phrases(material_cube_leaves)
        categories = {p.phrase: p.category for p in phrases}
        assert categories == {
            "stainless steel blades": Category.BLADE_MATERIAL,
            "with handles of wood": Category.HANDLE_MATERIAL,
            "silver-plated": Category.PLATING,
        }

    def test_single_leaf_has_no_differentiators(self):
        assert find_differentiating_phrases([LeafEntry("8211930010", "Knives")]) == []

    def test_identical_descriptions(self):
        leaves = [
            LeafEntry("8211930010", "Knives having fixed blades"),
            LeafEntry("8211930020", "Knives having fixed blades"),
        ]
        assert find_differentiating_phrases(leaves) == []

    def test_deterministic_order(self, material_cube_leaves):
        first = [p.phrase for p in find_differentiating_phrases(material_cube_leaves)]
        second = [p.phrase for p in find_differentiating_phrases(material_cube_leaves)]
        assert first == second
