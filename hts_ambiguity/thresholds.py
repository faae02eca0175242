"""
Threshold Variable Detector — numeric brackets parsed straight from the text.

Runs beside the generic phrase pipeline. Each leaf description is scanned for
monetary ("not over $0.60 per dozen"), length ("exceeding 15 cm") and weight
("over 2 kg") comparisons. Leaves are grouped by (kind, threshold, unit); a
group with at least one leaf on each side becomes a two-option bracket
variable. Leaves that never mention that threshold are compatible with both
sides.

A bracket is resolved only by evidence: the caller's numeric value (monetary),
a measurement in the free text (length/weight), or a previous answer. There is
no default assumption for brackets.
"""

import logging
import re

from .config import CONFIDENCE_DIRECT_MATCH, CONFIDENCE_NUMERIC_STATED
from .models import Category, DecisionVariable, DetectionSource, Option, VariableKind, found_in

logger = logging.getLogger(__name__)

UNDER = "under_threshold"
OVER = "over_threshold"

_COMPARATOR = (
    r"(?P<cmp>not\s+over|not\s+exceeding|not\s+more\s+than|over|exceeding|"
    r"more\s+than|under|less\s+than)"
)
_NUMBER = r"(?P<num>\d+(?:,\d{3})*(?:\.\d+)?)"

_MONEY_RE = re.compile(_COMPARATOR + r"\s+\$\s?" + _NUMBER, re.IGNORECASE)
_LENGTH_RE = re.compile(
    _COMPARATOR + r"\s+" + _NUMBER + r"\s*(?P<unit>(?:cm|mm|meters?|m|inch(?:es)?|feet|ft)\b|in\.)",
    re.IGNORECASE,
)
_WEIGHT_RE = re.compile(
    _COMPARATOR + r"\s+" + _NUMBER + r"\s*(?P<unit>kg|grams?|g|lbs?|pounds?|oz|ounces?)\b",
    re.IGNORECASE,
)
_PER_UNIT_RE = re.compile(r"\bper\s+(dozen|doz|kg|piece|pair|gross|unit|each)\b", re.IGNORECASE)
_CLAUSE_BREAK_RE = re.compile(r"[,;:]")

# Inches need "inch", "in." or '"'; one-letter units must touch the number ("300g", "2m")
_MEASUREMENT_RE = re.compile(
    r"(?P<num>\d+(?:\.\d+)?)(?:"
    r"\s*(?P<unit>(?:cm|mm|kg|lbs?|oz|ft|feet|inch(?:es)?|meters?|grams?|pounds?|ounces?)\b|in\.|\")"
    r"|(?P<short>[gm])\b)",
    re.IGNORECASE,
)

_AT_OR_UNDER_WORDS = {"not over", "not exceeding", "not more than", "under", "less than"}

_UNIT_ALIASES = {
    "doz": "dozen", "piece": "each", "unit": "each", "pc": "each", "pcs": "each",
    "meter": "m", "meters": "m", "inches": "inch", "in": "inch", '"': "inch", "feet": "ft",
    "gram": "g", "grams": "g", "lbs": "lb", "pound": "lb", "pounds": "lb",
    "ounce": "oz", "ounces": "oz",
}

# Conversion factors to a base unit within each dimension
_COUNT_FACTORS = {"each": 1, "pair": 2, "dozen": 12, "gross": 144}
_LENGTH_FACTORS = {"mm": 0.1, "cm": 1.0, "m": 100.0, "inch": 2.54, "ft": 30.48}
_WEIGHT_FACTORS = {"g": 1.0, "kg": 1000.0, "lb": 453.592, "oz": 28.3495}

_KINDS = (
    (Category.VALUE, _MONEY_RE),
    (Category.SIZE, _LENGTH_RE),
    (Category.WEIGHT, _WEIGHT_RE),
)

_NAMES = {
    Category.VALUE: "Value Bracket",
    Category.SIZE: "Size Bracket",
    Category.WEIGHT: "Weight Bracket",
}


def normalize_unit(unit):
    if not unit:
        return ""
    u = str(unit).lower().strip()
    if u.startswith("per "):
        u = u[4:].strip()
    u = u.replace("per_", "").rstrip(".")
    return _UNIT_ALIASES.get(u, u)


def _parse_number(raw):
    try:
        return float(raw.replace(",", "").rstrip("."))
    except ValueError:
        return None


def _side(comparator):
    words = " ".join(comparator.lower().split())
    return UNDER if words in _AT_OR_UNDER_WORDS else OVER


def _format_number(value):
    return f"{value:g}"


# ═══════════════════════════════════════════
#  DETECTION
# ═══════════════════════════════════════════

def parse_comparisons(description):
    """Return [(category, threshold, unit, side)] found in one description."""
    text = description or ""
    found = []
    for category, pattern in _KINDS:
        for match in pattern.finditer(text):
            threshold = _parse_number(match.group("num"))
            if threshold is None:
                continue
            if category == Category.VALUE:
                # The rate unit must sit in the same clause as the figure
                clause = _CLAUSE_BREAK_RE.split(text[match.end():], maxsplit=1)[0]
                per = _PER_UNIT_RE.search(clause)
                unit = normalize_unit(per.group(1)) if per else "each"
            else:
                unit = normalize_unit(match.group("unit"))
            found.append((category, threshold, unit, _side(match.group("cmp"))))
    return found


def _bracket_labels(category, threshold, unit):
    t = _format_number(threshold)
    if category == Category.VALUE:
        return f"At or under ${t} per {unit}", f"Over ${t} per {unit}"
    return f"At or under {t} {unit}", f"Over {t} {unit}"


def _bracket_question(category, threshold, unit):
    t = _format_number(threshold)
    if category == Category.VALUE:
        return f"What is the unit value? (threshold: ${t} per {unit})"
    if category == Category.SIZE:
        return f"What is the size? (threshold: {t} {unit})"
    return f"What is the weight? (threshold: {t} {unit})"


def detect_threshold_variables(leaves):
    """Emit numeric-bracket DecisionVariables for thresholds that split the leaves."""
    groups = {}  # (category, threshold, unit) -> {code: side}
    for leaf in leaves:
        for category, threshold, unit, side in parse_comparisons(leaf.legal_description):
            sides = groups.setdefault((category, threshold, unit), {})
            sides.setdefault(leaf.code, side)

    all_codes = [leaf.code for leaf in leaves]
    variables = []
    counters = {}
    for (category, threshold, unit), sides in groups.items():
        under_codes = [c for c in all_codes if sides.get(c) == UNDER]
        over_codes = [c for c in all_codes if sides.get(c) == OVER]
        if not under_codes or not over_codes:
            continue

        unmentioned = [c for c in all_codes if c not in sides]
        under_label, over_label = _bracket_labels(category, threshold, unit)
        counters[category] = counters.get(category, 0) + 1
        base_id = f"{category.value}_bracket"
        var_id = base_id if counters[category] == 1 else f"{base_id}_{counters[category]}"

        variables.append(DecisionVariable(
            id=var_id,
            name=_NAMES[category],
            kind=VariableKind.NUMERIC_BRACKET,
            question=_bracket_question(category, threshold, unit),
            options=[
                Option(UNDER, under_label, under_codes + unmentioned,
                       description=found_in(under_codes, unmentioned)),
                Option(OVER, over_label, over_codes + unmentioned,
                       description=found_in(over_codes, unmentioned)),
            ],
            category=category,
            threshold=threshold,
            threshold_unit=f"per_{unit}" if category == Category.VALUE else unit,
        ))
        logger.debug(
            f"Threshold {var_id}: {_format_number(threshold)} {unit} "
            f"under={under_codes} over={over_codes}"
        )
    return variables


# ═══════════════════════════════════════════
#  RESOLUTION
# ═══════════════════════════════════════════

def _convert(value, from_unit, to_unit):
    """Convert value between units of one dimension; None when incompatible."""
    if from_unit == to_unit:
        return value
    for factors in (_LENGTH_FACTORS, _WEIGHT_FACTORS):
        if from_unit in factors and to_unit in factors:
            return value * factors[from_unit] / factors[to_unit]
    return None


def _convert_price(value, from_unit, to_unit):
    """Price per from_unit -> price per to_unit (count units only)."""
    if from_unit == to_unit:
        return value
    if from_unit in _COUNT_FACTORS and to_unit in _COUNT_FACTORS:
        return value * _COUNT_FACTORS[to_unit] / _COUNT_FACTORS[from_unit]
    return None


def _bracket_unit(variable):
    return normalize_unit(variable.threshold_unit)


def resolve_bracket(variable, request):
    """Set detected value/source/confidence on a bracket from explicit evidence.

    Returns True when the bracket was resolved.
    """
    if variable.threshold is None:
        return False
    unit = _bracket_unit(variable)

    if variable.category == Category.VALUE:
        if request.explicit_numeric_value is None:
            return False
        source_unit = normalize_unit(request.numeric_unit) or unit
        value = _convert_price(float(request.explicit_numeric_value), source_unit, unit)
        if value is None:
            logger.debug(f"{variable.id}: cannot compare per {source_unit} with per {unit}")
            return False
        confidence = CONFIDENCE_NUMERIC_STATED
    else:
        value = None
        for match in _MEASUREMENT_RE.finditer(request.combined_input):
            measured_unit = normalize_unit(match.group("unit") or match.group("short"))
            converted = _convert(float(match.group("num")), measured_unit, unit)
            if converted is not None:
                value = converted
                break
        if value is None:
            return False
        confidence = CONFIDENCE_DIRECT_MATCH

    variable.detected_value = OVER if value > variable.threshold else UNDER
    variable.detected_source = DetectionSource.STATED
    variable.confidence = confidence
    return True
