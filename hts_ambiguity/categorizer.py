"""
Phrase Categorizer — assign a differentiating phrase to a decision dimension.

Priority order:
  1. Numeric comparisons: currency figure -> value, figure + length unit ->
     size, figure + weight unit -> weight.
  2. Comparator words (word-boundary) -> value.
  3. Sub-material shapes checked before the generic material bucket:
     handle + material word -> handle_material, "two-handled" style ->
     construction, plated/clad -> plating, blade + steel/ceramic ->
     blade_material.
  4. Keyword profiles in CATEGORY_ORDER. Keywords of 5 characters or fewer
     only match on word boundaries ("under" must not hit "undershirts").
  5. Anything else -> other.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from .models import Category

logger = logging.getLogger(__name__)


@dataclass
class CategoryProfile:
    """Display metadata and keyword rules for one decision dimension"""
    category: Category
    name: str
    question: Optional[str]
    keywords: List[str] = field(default_factory=list)
    always_significant: bool = False   # keep even with one literal option
    residual_label: str = "Other / Not Listed"


CATEGORY_PROFILES = {
    Category.BLADE_MATERIAL: CategoryProfile(
        Category.BLADE_MATERIAL, "Blade Material", "What is the blade material?",
        ["stainless steel", "carbon steel", "high carbon", "ceramic blade", "steel blade", "blade of"],
        always_significant=True, residual_label="Other / Standard",
    ),
    Category.HANDLE_MATERIAL: CategoryProfile(
        Category.HANDLE_MATERIAL, "Handle Material", "What is the handle material?",
        ["handle of wood", "handles of wood", "wooden handle", "handle of rubber",
         "handles of rubber", "handle of plastic", "handles of plastic", "with handle", "with handles"],
        always_significant=True, residual_label="Other / Standard",
    ),
    Category.PLATING: CategoryProfile(
        Category.PLATING, "Plating", "What is the plating/finish?",
        ["silver-plated", "silverplated", "gold-plated", "goldplated", "plated with", "clad with"],
        always_significant=True, residual_label="Not Plated / Standard",
    ),
    Category.MATERIAL: CategoryProfile(
        Category.MATERIAL, "Material", "What is the primary material?",
        ["steel", "metal", "plastic", "rubber", "wood", "cotton", "polyester", "ceramic", "glass",
         "leather", "textile", "aluminum", "aluminium", "copper", "iron", "titanium", "brass",
         "bronze", "nickel", "zinc", "gold", "silver", "precious", "base metal", "alloy",
         "stainless", "carbon", "synthetic", "natural", "organic", "silk", "wool", "linen",
         "nylon", "acrylic", "polycarbonate", "fiberglass", "concrete", "stone", "marble",
         "granite", "paper", "cardboard", "man-made", "fibers"],
    ),
    Category.VALUE: CategoryProfile(
        Category.VALUE, "Value", "What is the unit value?",
        ["valued", "value", "price", "cost"],
    ),
    Category.SIZE: CategoryProfile(
        Category.SIZE, "Size", "What are the dimensions?",
        ["length", "width", "height", "diameter", "size", "dimension", "inch", "cm", "mm",
         "meter", "feet", "ft", "blade length", "overall length"],
    ),
    Category.WEIGHT: CategoryProfile(
        Category.WEIGHT, "Weight", "What is the weight?",
        ["kg", "gram", "pound", "lb", "oz", "ounce", "weight", "mass", "chief weight"],
    ),
    Category.COUNT: CategoryProfile(
        Category.COUNT, "Count", "What is the quantity/packaging?",
        ["dozen", "gross", "pair", "pairs", "set", "sets", "piece", "each", "count", "single",
         "multiple", "assorted"],
    ),
    Category.USE: CategoryProfile(
        Category.USE, "Use", "What is the intended use?",
        ["kitchen", "table", "industrial", "commercial", "household", "domestic", "professional",
         "consumer", "medical", "surgical", "agricultural", "automotive", "marine", "aviation",
         "military", "sports", "recreational", "outdoor", "indoor", "butcher", "pocket"],
    ),
    Category.POWER: CategoryProfile(
        Category.POWER, "Power", "Is it powered or manual?",
        ["electric", "electrical", "manual", "powered", "battery", "cordless", "corded", "volt",
         "watt", "motor", "hand-operated", "hand operated", "mechanical"],
    ),
    Category.CONSTRUCTION: CategoryProfile(
        Category.CONSTRUCTION, "Construction", "What is the construction type?",
        ["fixed", "folding", "retractable", "telescoping", "adjustable", "permanent", "removable",
         "assembled", "unassembled", "kit", "complete", "partial", "serrated", "smooth",
         "without handle", "without handles"],
    ),
    Category.FINISH: CategoryProfile(
        Category.FINISH, "Finish", "What is the finish/coating?",
        ["plated", "coated", "painted", "lacquered", "polished", "matte", "chrome", "enamel",
         "enameled", "anodized", "raw", "unfinished", "treated", "untreated"],
    ),
    Category.ORIGIN: CategoryProfile(
        Category.ORIGIN, "Manufacture", "How is it manufactured?",
        ["handmade", "machine-made", "manufactured", "hand-forged", "forged", "cast", "molded",
         "extruded", "stamped", "welded"],
    ),
    Category.DEMOGRAPHIC: CategoryProfile(
        Category.DEMOGRAPHIC, "Demographic", "Who is this product for?",
        ["men's", "women's", "boys'", "girls'", "infants'", "children's", "mens", "womens",
         "boys", "girls", "infant", "infants", "children", "unisex", "adult", "youth", "toddler",
         "baby"],
    ),
    Category.GARMENT_TYPE: CategoryProfile(
        Category.GARMENT_TYPE, "Garment Type", "What type of garment is this?",
        ["t-shirt", "t-shirts", "tshirt", "shirt", "shirts", "blouse", "sweater", "pullover",
         "cardigan", "vest", "jacket", "coat", "pants", "trousers", "shorts", "skirt", "dress",
         "underwear", "undershirt", "undershirts", "thermal", "tank top", "sweatshirt", "hoodie",
         "sleepwear", "nightwear", "pajamas", "briefs", "boxers", "bra", "panties", "socks",
         "stockings"],
    ),
    Category.OTHER: CategoryProfile(
        Category.OTHER, "Product Specification", None,
    ),
}

def check_profiles(profiles):
    """Raise RuntimeError unless every Category has a profile."""
    missing = [c.value for c in Category if c not in profiles]
    if missing:
        raise RuntimeError(f"No category profile for: {', '.join(missing)}")


check_profiles(CATEGORY_PROFILES)

CATEGORY_ORDER = [
    Category.BLADE_MATERIAL, Category.HANDLE_MATERIAL, Category.PLATING,
    Category.DEMOGRAPHIC, Category.GARMENT_TYPE, Category.USE, Category.POWER,
    Category.CONSTRUCTION, Category.FINISH, Category.COUNT, Category.SIZE,
    Category.WEIGHT, Category.ORIGIN, Category.MATERIAL, Category.VALUE,
]

# ── Numeric and structural rules ──

_CURRENCY_RE = re.compile(r"\$\s?\d")
_SIZE_FIGURE_RE = re.compile(r"\d+(?:\.\d+)?\s*(?:cm|mm|inch(?:es)?|in|ft|feet|m)\b", re.IGNORECASE)
_WEIGHT_FIGURE_RE = re.compile(r"\d+(?:\.\d+)?\s*(?:kg|g|grams?|lbs?|pounds?|oz|ounces?)\b", re.IGNORECASE)

_VALUE_WORD_RES = [
    re.compile(p, re.IGNORECASE) for p in (
        r"\bnot\s+over\b",
        r"\bover\b",
        r"\bunder\b(?!wear|shirt|pants|garment)",
        r"\bnot\s+exceeding\b",
        r"\bexceeding\b",
        r"\bvalued\b",
        r"\bvalue\b",
        r"\bless\s+than\b",
        r"\bmore\s+than\b",
    )
]

_HANDLE_RE = re.compile(r"handles?", re.IGNORECASE)
_HANDLE_MATERIAL_RE = re.compile(
    r"wood|rubber|plastic|metal|steel|bone|ivory|horn|mother.?of.?pearl", re.IGNORECASE
)
_MULTI_HANDLE_RE = re.compile(r"\b(?:one|two|three|single|double|multi|multiple)-?handle", re.IGNORECASE)
_PLATED_RE = re.compile(r"plated|clad\b", re.IGNORECASE)
_BLADE_RE = re.compile(r"blade", re.IGNORECASE)
_BLADE_MATERIAL_RE = re.compile(r"steel|ceramic|carbon|stainless", re.IGNORECASE)


def keyword_matches(keyword, text):
    """Word-boundary match for short keywords, substring match for long ones."""
    if len(keyword) <= 5:
        return re.search(rf"(?<!\w){re.escape(keyword)}(?!\w)", text, re.IGNORECASE) is not None
    return keyword.lower() in text.lower()


def categorize_phrase(phrase):
    """Assign a differentiating phrase to a Category."""
    text = phrase.lower()

    if _CURRENCY_RE.search(text):
        return Category.VALUE
    if _SIZE_FIGURE_RE.search(text):
        return Category.SIZE
    if _WEIGHT_FIGURE_RE.search(text):
        return Category.WEIGHT

    for pattern in _VALUE_WORD_RES:
        if pattern.search(text):
            return Category.VALUE

    if _HANDLE_RE.search(text) and _HANDLE_MATERIAL_RE.search(text):
        return Category.HANDLE_MATERIAL
    if _MULTI_HANDLE_RE.search(text):
        return Category.CONSTRUCTION
    if _PLATED_RE.search(text):
        return Category.PLATING
    if _BLADE_RE.search(text) and _BLADE_MATERIAL_RE.search(text):
        return Category.BLADE_MATERIAL

    for category in CATEGORY_ORDER:
        for keyword in CATEGORY_PROFILES[category].keywords:
            if keyword_matches(keyword, text):
                return category

    return Category.OTHER


def profile_for(category):
    return CATEGORY_PROFILES[category]
