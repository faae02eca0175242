"""
Decision Variable Builder — categorized phrases -> questions with options.

For each category with surviving phrases:
  - near-duplicate phrasings are merged ("having folding blades" and
    "folding blade" are both the option "folding");
  - one Option per normalized phrase, compatible with every leaf any of its
    source phrases came from;
  - categories with a single literal option are dropped unless they are an
    always-significant sub-material dimension (blade/handle/plating);
  - leaves no option claims go to a residual "Other" option, so every
    variable covers the whole branch;
  - more than MAX_OPTIONS options, residual included, is noise: the value
    category degrades to a numeric-bracket question, anything else is
    dropped.

Each option carries a "Found in: ..." note naming the leaves it came from.

The threshold detector runs over the same leaves. A bracket it emits for
value/size/weight replaces the generic variable of that category.
"""

import logging
import re

from .categorizer import profile_for
from .config import MAX_OPTIONS
from .differentiators import find_differentiating_phrases
from .models import Category, DecisionVariable, Option, VariableKind, found_in
from .thresholds import detect_threshold_variables

logger = logging.getLogger(__name__)

GENERIC_QUESTION = "Which of these applies to your product?"
VALUE_BRACKET_QUESTION = "What is the unit value?"

# Near-duplicate phrasings -> canonical option value
_REWRITES = {
    "folding_blade": "folding",
    "folding_blades": "folding",
    "having_folding_blade": "folding",
    "having_folding_blades": "folding",
    "fixed_blade": "fixed",
    "fixed_blades": "fixed",
    "having_fixed_blade": "fixed",
    "having_fixed_blades": "fixed",
    "stainless_steel": "stainless",
    "carbon_steel": "carbon",
    "with_handle": "with_handles",
    "without_handle": "without_handles",
    "mens": "men",
    "womens": "women",
    "boys": "boy",
    "girls": "girl",
    "infants": "infant",
    "childrens": "children",
    "tshirts": "tshirt",
    "sweatshirts": "sweatshirt",
    "undershirts": "undershirt",
    "pullovers": "pullover",
    "cardigans": "cardigan",
    "tank_tops": "tank_top",
}

# Fragments of a comparison that say nothing on their own
_INCOMPLETE_PHRASES = {
    "valued", "under", "over", "exceeding", "not", "overall", "length",
    "overall length", "not exceeding", "not over",
}

_NON_WORD_RE = re.compile(r"[^\w\s]")


def normalize_phrase(phrase):
    normalized = _NON_WORD_RE.sub("", phrase.lower()).strip()
    normalized = re.sub(r"\s+", "_", normalized)
    return _REWRITES.get(normalized, normalized)


def human_label(phrase):
    return " ".join(w[:1].upper() + w[1:].lower() for w in phrase.split())


def is_meaningful(phrase):
    p = phrase.lower().strip()
    if len(p) < 3 or re.fullmatch(r"[\d.,%()]+", p):
        return False
    return p not in _INCOMPLETE_PHRASES


def _group_by_category(phrases):
    groups = {}
    for phrase in phrases:
        groups.setdefault(phrase.category, []).append(phrase)
    return groups


def _build_options(phrases):
    options = []
    by_value = {}
    for phrase in phrases:
        value = normalize_phrase(phrase.phrase)
        if value in by_value:
            option = by_value[value]
            for code in phrase.codes:
                if code not in option.compatible_codes:
                    option.compatible_codes.append(code)
            continue
        option = Option(value=value, label=human_label(phrase.phrase), compatible_codes=list(phrase.codes))
        by_value[value] = option
        options.append(option)
    for option in options:
        option.description = found_in(option.compatible_codes)
    return options


def _question_for(category, options):
    profile = profile_for(category)
    if profile.question:
        return profile.question
    literal = [o for o in options if not o.is_residual]
    if len(options) == 2 and len(literal) == 1:
        return f"Is this {literal[0].label.lower()}?"
    return GENERIC_QUESTION


def _create_variable(category, phrases, all_codes):
    profile = profile_for(category)
    options = _build_options(phrases)
    kind = VariableKind.SINGLE_CHOICE
    question = None

    claimed = {code for option in options for code in option.compatible_codes}
    unclaimed = [code for code in all_codes if code not in claimed]
    if unclaimed:
        options.append(Option(
            value="standard" if profile.always_significant else "other",
            label=profile.residual_label,
            compatible_codes=unclaimed,
            is_residual=True,
            description=f"No listed option named in: {', '.join(unclaimed)}",
        ))

    # The noise limit counts the residual option too
    if len(options) > MAX_OPTIONS:
        if category != Category.VALUE:
            logger.debug(f"Dropping {category.value}: {len(options)} options looks like noise")
            return None
        kind = VariableKind.NUMERIC_BRACKET
        question = VALUE_BRACKET_QUESTION

    if len(options) < 2:
        return None

    return DecisionVariable(
        id=f"{category.value}_decision",
        name=profile.name,
        kind=kind,
        question=question or _question_for(category, options),
        options=options,
        category=category,
    )


def build_phrase_variables(leaves, phrases):
    """Generic pipeline: one DecisionVariable per usable category."""
    all_codes = [leaf.code for leaf in leaves]
    variables = []
    for category, group in _group_by_category(phrases).items():
        meaningful = [p for p in group if is_meaningful(p.phrase)]
        if not meaningful:
            continue
        if len(meaningful) < 2 and not profile_for(category).always_significant:
            continue
        variable = _create_variable(category, meaningful, all_codes)
        if variable is not None:
            variables.append(variable)
    return variables


def build_decision_variables(leaves):
    """Run the phrase pipeline and the threshold detector, then merge."""
    if len(leaves) <= 1:
        return []

    phrases = find_differentiating_phrases(leaves)
    phrase_variables = build_phrase_variables(leaves, phrases)
    brackets = detect_threshold_variables(leaves)

    bracket_categories = {v.category for v in brackets}
    kept = [v for v in phrase_variables if v.category not in bracket_categories]
    superseded = len(phrase_variables) - len(kept)
    if superseded:
        logger.debug(f"{superseded} phrase variable(s) superseded by threshold brackets")

    variables = kept + brackets
    logger.debug(f"Decision variables: {[v.id for v in variables]}")
    return variables
