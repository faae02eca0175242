"""
Input Matcher — decide, per decision variable, what the input says.

Evidence ladder (first hit wins):
  0. previous answer for this variable id          stated   100
  1. numeric brackets: caller value / measurement  stated   95 / 90
  2. option value or label inside the free text    stated   90
  3. synonym table ("18/8", "inox" -> stainless)   stated   75
  4. default policy (single-choice only)           assumed  40
  5. nothing                                       none     0

The default in step 4 is a swappable DefaultPolicy: MostCommonOptionPolicy
picks the first literal option (schedules list the common case first),
HighestDutyPolicy picks the option whose leaves carry the highest base rate.
"""

import logging
from typing import List, Optional

from .categorizer import keyword_matches
from .config import (
    CONFIDENCE_ASSUMED,
    CONFIDENCE_DIRECT_MATCH,
    CONFIDENCE_NONE,
    CONFIDENCE_PREVIOUS_ANSWER,
    CONFIDENCE_SYNONYM_MATCH,
)
from .duty_range import parse_duty_rate
from .models import Assumption, DecisionVariable, DetectionSource, Option, VariableKind
from .thresholds import resolve_bracket

logger = logging.getLogger(__name__)

# Canonical option token -> words a product description uses instead
SYNONYMS = {
    "stainless": ["18/8", "18/10", "18-8", "18-10", "inox", "304 steel", "316 steel"],
    "carbon": ["high carbon", "tool steel", "1095"],
    "plastic": ["polymer", "polypropylene", "polyethylene", "abs", "pvc", "nylon", "acrylic"],
    "rubber": ["silicone", "latex", "neoprene", "elastomer"],
    "ceramic": ["zirconia", "porcelain"],
    "wood": ["wooden", "bamboo", "hardwood", "rosewood", "oak", "maple", "walnut", "pakkawood"],
    "fixed": ["non-folding", "full tang", "fixed-blade"],
    "folding": ["foldable", "folder", "pocket knife", "flip knife"],
    "kitchen": ["culinary", "cooking", "chef"],
    "table": ["dining", "dinner", "cutlery", "steak knife"],
    "silverplated": ["silver plated", "silver-plate", "epns"],
    "goldplated": ["gold plated", "gold-plate"],
    "men": ["male", "gentlemen"],
    "women": ["female", "ladies"],
    "cotton": ["100% cotton", "pure cotton"],
    "polyester": ["poly", "pet fiber"],
    "electric": ["plug-in", "mains powered", "battery powered", "rechargeable"],
}


def synonyms_for(value):
    """Synonyms whose canonical token appears as a word run inside value."""
    parts = value.split("_")
    found = []
    for key, words in SYNONYMS.items():
        key_parts = key.split("_")
        n = len(key_parts)
        if any(parts[i:i + n] == key_parts for i in range(len(parts) - n + 1)):
            found.extend(words)
    return found


# ═══════════════════════════════════════════
#  DEFAULT POLICIES
# ═══════════════════════════════════════════

class DefaultPolicy:
    """Chooses the assumed option when the input carries no evidence."""

    name = "none"

    def choose(self, variable: DecisionVariable, leaves) -> Optional[Option]:
        return None

    def reason(self, variable: DecisionVariable, option: Option) -> str:
        return "Not specified in description"


class MostCommonOptionPolicy(DefaultPolicy):
    name = "most_common"

    def choose(self, variable, leaves):
        for option in variable.options:
            if not option.is_residual:
                return option
        return None

    def reason(self, variable, option):
        return (
            f"{variable.name} not specified in description; assumed '{option.label}', "
            f"the most common schedule option"
        )


class HighestDutyPolicy(DefaultPolicy):
    """Conservative: assume the option that leads to the highest base rate."""

    name = "highest_duty"

    def choose(self, variable, leaves):
        rates = {leaf.code: parse_duty_rate(leaf.base_duty_rate_text) for leaf in leaves}
        best, best_rate = None, None
        for option in variable.options:
            if option.is_residual:
                continue
            option_rates = [rates[c] for c in option.compatible_codes if rates.get(c) is not None]
            top = max(option_rates) if option_rates else None
            if best is None or (top is not None and (best_rate is None or top > best_rate)):
                best, best_rate = option, top
        return best

    def reason(self, variable, option):
        return (
            f"{variable.name} not specified in description; assumed '{option.label}', "
            f"the option with the highest duty rate"
        )


# ═══════════════════════════════════════════
#  MATCHER
# ═══════════════════════════════════════════

class InputMatcher:
    """
    Sets detected_value / detected_source / confidence on each variable.

    Usage:
        matcher = InputMatcher(MostCommonOptionPolicy())
        assumptions = matcher.match(variables, request, leaves)
    """

    def __init__(self, policy: Optional[DefaultPolicy] = None):
        self.policy = policy or MostCommonOptionPolicy()

    def match(self, variables, request, leaves) -> List[Assumption]:
        assumptions = []
        text = request.combined_input
        for variable in variables:
            if self._apply_previous_answer(variable, request):
                continue

            if variable.kind == VariableKind.NUMERIC_BRACKET:
                if not resolve_bracket(variable, request):
                    self._leave_undetected(variable)
                continue

            if self._match_direct(variable, text) or self._match_synonym(variable, text):
                continue

            option = self.policy.choose(variable, leaves)
            if option is None:
                self._leave_undetected(variable)
                continue
            variable.detected_value = option.value
            variable.detected_source = DetectionSource.ASSUMED
            variable.confidence = CONFIDENCE_ASSUMED
            assumptions.append(Assumption(
                variable_id=variable.id,
                variable_name=variable.name,
                assumed_value=option.value,
                reason=self.policy.reason(variable, option),
            ))
        return assumptions

    def _apply_previous_answer(self, variable, request):
        if variable.id not in request.previous_answers:
            return False
        answer = str(request.previous_answers[variable.id])
        if variable.find_option(answer) is None:
            logger.warning(f"Ignoring previous answer {answer!r} for {variable.id}: not an option")
            return False
        variable.detected_value = answer
        variable.detected_source = DetectionSource.STATED
        variable.confidence = CONFIDENCE_PREVIOUS_ANSWER
        return True

    def _match_direct(self, variable, text):
        if not text:
            return False
        for option in variable.options:
            if option.is_residual:
                continue
            candidates = (option.value.replace("_", " "), option.label.lower())
            if any(keyword_matches(c, text) for c in candidates if c):
                self._set_stated(variable, option, CONFIDENCE_DIRECT_MATCH)
                return True
        return False

    def _match_synonym(self, variable, text):
        if not text:
            return False
        for option in variable.options:
            if option.is_residual:
                continue
            for synonym in synonyms_for(option.value):
                if keyword_matches(synonym.lower(), text):
                    self._set_stated(variable, option, CONFIDENCE_SYNONYM_MATCH)
                    return True
        return False

    @staticmethod
    def _set_stated(variable, option, confidence):
        variable.detected_value = option.value
        variable.detected_source = DetectionSource.STATED
        variable.confidence = confidence

    @staticmethod
    def _leave_undetected(variable):
        variable.detected_value = None
        variable.detected_source = DetectionSource.NONE
        variable.confidence = CONFIDENCE_NONE
        logger.debug(f"{variable.id}: no evidence, left unresolved")
