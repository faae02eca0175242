"""
Candidate Scorer, Ambiguity Classifier and Confidence Aggregator.

Scoring (per leaf, per variable that has an option compatible with it):
  Requirement(required_value, met = detected value is that option, source)
  is_likely    = every requirement met, none with unknown source
  is_confirmed = is_likely and every requirement stated (never assumed)

When a leaf is compatible with several options of one variable (overlapping
phrases, or a bracket the leaf never mentions) the requirement uses the
detected option if it is among them, so the leaf is satisfied by any of its
compatible values.
"""

import logging

from .config import (
    ASSUMPTION_PENALTY,
    CONFIDENCE_CEILING,
    CONFIDENCE_CONFIRMED,
    CONFIDENCE_FLOOR,
    CONFIDENCE_NEUTRAL,
    LOW_AMBIGUITY_MIN_CONFIDENCE,
)
from .models import (
    AmbiguityLevel,
    CandidateResult,
    DetectionSource,
    Requirement,
    RequirementSource,
    VariableKind,
)

logger = logging.getLogger(__name__)

_REQUIREMENT_SOURCES = {
    DetectionSource.STATED: RequirementSource.STATED,
    DetectionSource.ASSUMED: RequirementSource.ASSUMED,
    DetectionSource.NONE: RequirementSource.UNKNOWN,
}


def _requirement_for(variable, code):
    options = variable.options_for_code(code)
    if not options:
        return None
    chosen = options[0]
    for option in options:
        if option.value == variable.detected_value:
            chosen = option
            break
    return Requirement(
        variable_id=variable.id,
        required_value=chosen.value,
        met=variable.is_resolved and variable.detected_value == chosen.value,
        source=_REQUIREMENT_SOURCES[variable.detected_source],
    )


def _match_reason(requirements):
    if not requirements:
        return "No distinguishing requirements"
    parts = []
    for r in requirements:
        status = "met" if r.met else "not met"
        parts.append(f"{r.variable_id}={r.required_value} ({status}, {r.source.value})")
    return "; ".join(parts)


def score_candidates(leaves, variables):
    """Build a CandidateResult for every leaf, in leaf order."""
    candidates = []
    for leaf in leaves:
        requirements = []
        for variable in variables:
            requirement = _requirement_for(variable, leaf.code)
            if requirement is not None:
                requirements.append(requirement)

        all_met = all(r.met for r in requirements)
        has_unknown = any(r.source == RequirementSource.UNKNOWN for r in requirements)
        is_likely = all_met and not has_unknown
        is_confirmed = (
            is_likely
            and bool(requirements)
            and all(r.source == RequirementSource.STATED for r in requirements)
        )
        candidates.append(CandidateResult(
            leaf=leaf,
            requirements=requirements,
            is_likely=is_likely,
            is_confirmed=is_confirmed,
            match_reason=_match_reason(requirements),
        ))
    return candidates


def select_questions(variables):
    """Variables to show the user: any multi-option variable (so assumptions
    stay overridable) plus unresolved numeric brackets."""
    return [
        v for v in variables
        if len(v.options) >= 2
        or (v.kind == VariableKind.NUMERIC_BRACKET and not v.is_resolved)
    ]


def pick_likely_code(candidates):
    for candidate in candidates:
        if candidate.is_likely:
            return candidate
    return candidates[0] if candidates else None


def classify_ambiguity(leaf_count, questions, candidates):
    if leaf_count <= 1 or not questions:
        return AmbiguityLevel.NONE

    confirmed = [c for c in candidates if c.is_confirmed]
    if len(confirmed) == 1:
        return AmbiguityLevel.NONE

    likely = [c for c in candidates if c.is_likely]
    if len(likely) == 1 and all(q.confidence >= LOW_AMBIGUITY_MIN_CONFIDENCE for q in questions):
        return AmbiguityLevel.LOW

    if len(questions) == 1:
        return AmbiguityLevel.MEDIUM

    return AmbiguityLevel.HIGH


def aggregate_confidence(variables, likely_code):
    """Overall 0-100 confidence for the analysis."""
    if likely_code is None:
        return CONFIDENCE_NEUTRAL
    if likely_code.is_confirmed:
        return CONFIDENCE_CONFIRMED

    met_ids = {r.variable_id for r in likely_code.requirements if r.met}
    relevant = [v for v in variables if v.is_resolved and v.id in met_ids]
    if not relevant:
        return CONFIDENCE_NEUTRAL

    average = sum(v.confidence for v in relevant) / len(relevant)
    penalty = ASSUMPTION_PENALTY * sum(
        1 for v in variables if v.detected_source == DetectionSource.ASSUMED
    )
    score = max(CONFIDENCE_FLOOR, min(CONFIDENCE_CEILING, average - penalty))
    return int(round(score))
