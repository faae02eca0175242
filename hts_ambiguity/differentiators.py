"""
Differentiator Extractor — structural diff of sibling legal descriptions.
==========================================================================

Given every leaf under a branch, find the text fragments that separate them.
No domain vocabulary is hardcoded per heading: a fragment matters only because
it shows up in some leaves and not in others.

Tokenization (per leaf, on the lower-cased description)
-------------------------------------------------------
1. PHRASES   Ordered catalogue of multi-word patterns (handle/blade/plating
             materials, comparators with figures, demographic and garment
             words, construction). Each match is consumed from the text so a
             later, shorter pattern cannot re-match inside it
             ("over $0.60" never fires inside "not over $0.60").
2. WORDS     Remaining whitespace tokens, punctuation stripped, kept when
             >= 4 characters, not numeric, not schedule boilerplate.

Differentiator rule
-------------------
A token is a differentiator iff 0 < (#leaves containing it) < (#leaves).
Tokens in every leaf or in none carry no discriminating information.

Output order is first appearance (leaf order, then token order), so repeated
runs over the same leaves yield identical lists.
"""

import logging
import re

from .categorizer import categorize_phrase
from .config import MIN_SINGLE_WORD_LENGTH
from .models import DifferentiatingPhrase

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════════

_UNIT_FRAGMENT = (
    r"(?:\s*(?:cm|mm|m|inch(?:es)?|in|ft|feet|kg|g|grams?|lbs?|pounds?|oz|ounces?)(?![\w]))?"
)

# Comparator followed by a figure, with an optional currency sign and unit
_COMPARATOR_FRAGMENT = (
    r"\b(?:valued\s+)?(?:not\s+over|not\s+exceeding|not\s+more\s+than|"
    r"over|exceeding|under|less\s+than|more\s+than)\s+\$?\d[\d,]*(?:\.\d+)?" + _UNIT_FRAGMENT
)

# Order matters: most specific first, each match consumed before the next
_PHRASE_PATTERNS = [
    # Handle material
    r"\bwith\s+handles?\s+of\s+wood\b",
    r"\bwith\s+handles?\s+of\s+rubber\b",
    r"\bwith\s+handles?\s+of\s+plastics?\b",
    r"\bwith\s+handles?\s+of\s+[a-z][a-z\s-]*[a-z]",
    r"\bwooden\s+handles?\b",
    r"\brubber\s+handles?\b",
    r"\bplastic\s+handles?\b",

    # Plating
    r"\bsilver-?plated\b",
    r"\bgold-?plated\b",
    r"\bplated\s+with\s+\w+",
    r"\bclad\s+with\s+\w+",

    # Blade material
    r"\bstainless\s+steel\s+blades?\b",
    r"\bcarbon\s+steel\s+blades?\b",
    r"\bceramic\s+blades?\b",
    r"\bblades?\s+of\s+\w+(?:\s+steel)?",

    # General material
    r"\bstainless\s+steel\b",
    r"\bcarbon\s+steel\b",
    r"\bhigh\s+carbon\b",
    r"\bbase\s+metal\b",
    r"\bprecious\s+metal\b",
    r"\bwholly\s+of\s+cotton\b",
    r"\bcontaining\s+(?:[\w%]+\s+){0,8}?(?:cotton|polyester|wool|silk)\b",
    r"\bchief\s+weight\b",
    r"\b(?:100\s*%?\s*)?cotton\b",
    r"\b(?:100\s*%?\s*)?polyester\b",
    r"\bman-?made\s+fibers?\b",
    r"\bsynthetic\s+fibers?\b",

    # Value / size / weight comparators
    _COMPARATOR_FRAGMENT,
    r"\bnot\s+exceeding\b",
    r"\bper\s+(?:dozen|kg|piece|pair|gross|unit)\b",
    r"\bblade\s+length\b",
    r"\boverall\s+length\b",

    # Construction
    r"\bhaving\s+fixed\s+blades?\b",
    r"\bhaving\s+folding\s+blades?\b",
    r"\bfixed\s+blades?\b",
    r"\bfolding\s+blades?\b",
    r"\bwithout\s+handles?\b",
    r"\bwith\s+handles?\b",
    r"\bhand[\s-]operated\b",

    # Product types
    r"\btable\s+knives\b",
    r"\bkitchen\s+knives\b",
    r"\bbutcher\s+knives\b",
    r"\bpocket\s+knives\b",
    r"\bpen\s+knives\b",

    # Apparel
    r"\bwomen'?s(?!\w)",
    r"\bmen'?s(?!\w)",
    r"\bboys'?(?!\w)",
    r"\bgirls'?(?!\w)",
    r"\binfants'?(?!\w)",
    r"\bchildren'?s(?!\w)",
    r"\bunisex\b",
    r"\bundershirts?\b",
    r"\bunderwear\b",
    r"\bsweatshirts?\b",
    r"\bt-?shirts?\b",
    r"\btank\s+tops?\b",
    r"\bpullovers?\b",
    r"\bcardigans?\b",
    r"\bthermal\b",
]

PHRASE_CATALOGUE = [re.compile(p, re.IGNORECASE) for p in _PHRASE_PATTERNS]

# Schedule boilerplate and descriptive noise that never makes a good question
STOP_WORDS = {
    # Connectors
    "with", "without", "which", "that", "such", "also", "only", "from",
    "than", "their", "these", "those", "each", "into", "being", "whether",
    "having", "other", "others",
    # Schedule boilerplate
    "nesoi", "nesi", "thereof", "thereto", "therefrom", "articles", "article",
    "parts", "part", "made", "described", "heading", "headings", "subheading",
    "subheadings", "chapter", "note", "notes", "including", "excluding",
    "similar", "type", "types", "kinds", "kind", "used",
    # Too generic product parts
    "handle", "handles", "blade", "blades", "body", "bodies",
    # Colors
    "white", "black", "blue", "green", "yellow", "brown", "grey", "gray",
    "colored", "coloured",
    # Clothing description noise
    "hemmed", "sleeves", "sleeve", "bottom", "neckline", "seam", "center",
    "pockets", "pocket", "trim", "neck", "collar", "cuff", "cuffs",
    "mitered", "embroidery", "printed", "woven", "knit", "knitted",
    # Size/count noise
    "short", "long", "small", "medium", "large", "round", "square",
    # Incomplete threshold references
    "valued", "under", "over", "exceeding", "overall", "length",
}

_NUMERIC_RE = re.compile(r"^[\d.,%]+$")
_WORD_STRIP_RE = re.compile(r"[^\w-]")
_WORD_SPLIT_RE = re.compile(r"[\s,;:()\[\]]+")


# ═══════════════════════════════════════════════════════════════════════════════
# TOKENIZATION
# ═══════════════════════════════════════════════════════════════════════════════

def _clean_phrase(text):
    return " ".join(text.split()).strip(" ,;:.")


def is_stop_word(word):
    w = word.lower().strip("-")
    if not w or _NUMERIC_RE.match(w):
        return True
    return w in STOP_WORDS


def extract_tokens(description):
    """Tokenize one legal description into catalogue phrases + single words.

    Returns a list of unique tokens in order of appearance (phrases first).
    """
    remaining = (description or "").lower()
    tokens = []

    for pattern in PHRASE_CATALOGUE:
        for match in list(pattern.finditer(remaining)):
            phrase = _clean_phrase(match.group(0))
            if phrase:
                tokens.append(phrase)
        # Consume spans so shorter patterns cannot re-match inside them
        remaining = pattern.sub(" ", remaining)

    for raw in _WORD_SPLIT_RE.split(remaining):
        word = _WORD_STRIP_RE.sub("", raw).strip("-")
        if len(word) < MIN_SINGLE_WORD_LENGTH or is_stop_word(word):
            continue
        tokens.append(word)

    unique = []
    for token in tokens:
        if token not in unique:
            unique.append(token)
    return unique


# ═══════════════════════════════════════════════════════════════════════════════
# DIFFERENTIATORS
# ═══════════════════════════════════════════════════════════════════════════════

def find_differentiating_phrases(leaves):
    """Return DifferentiatingPhrase list for tokens in some-but-not-all leaves."""
    total = len(leaves)
    if total <= 1:
        return []

    occurrences = {}  # token -> [codes]
    for leaf in leaves:
        for token in extract_tokens(leaf.legal_description):
            codes = occurrences.setdefault(token, [])
            if leaf.code not in codes:
                codes.append(leaf.code)

    phrases = []
    for token, codes in occurrences.items():
        if 0 < len(codes) < total:
            phrases.append(DifferentiatingPhrase(
                phrase=token,
                category=categorize_phrase(token),
                codes=tuple(codes),
            ))

    logger.debug(
        f"Differentiators: {len(phrases)} of {len(occurrences)} tokens across {total} leaves"
    )
    return phrases
