"""
Ambiguity Resolution Engine — one branch of the schedule, one analysis.
========================================================================

Pipeline (executed in order, all state local to the call)
---------------------------------------------------------
Step 0  FETCH             Candidate source returns the leaves under the branch.
                          Any source failure is raised as UpstreamLookupFailure.
Step 1  SHORT-CIRCUIT     0 leaves -> "no data" (confidence 30); 1 leaf ->
                          unambiguous (confidence 95).
Step 2  VARIABLES         Differentiators -> categories -> decision variables,
                          plus numeric brackets from the threshold detector.
Step 3  MATCH             Previous answers, numeric evidence, free text,
                          synonyms, then the default policy.
Step 4  SCORE             Requirements per leaf; likely / confirmed flags.
Step 5  AGGREGATE         Questions to ask, likely code, duty range,
                          ambiguity level, overall confidence.

The engine never raises for anything found in the leaf text; unparseable
rates and undetectable variables only lower the confidence.
"""

import logging

from .config import CONFIDENCE_NO_LEAVES, CONFIDENCE_SINGLE_LEAF
from .duty_range import calculate_duty_range, country_surcharge
from .errors import AmbiguityEngineError, UpstreamLookupFailure
from .input_matcher import InputMatcher
from .models import AmbiguityAnalysis, AmbiguityLevel, CandidateResult, DutyRange, canonical_code
from .scoring import (
    aggregate_confidence,
    classify_ambiguity,
    pick_likely_code,
    score_candidates,
    select_questions,
)
from .variable_builder import build_decision_variables

logger = logging.getLogger(__name__)


def _unambiguous_result(branch, leaves, request, surcharges):
    """Trivial analysis for an empty or single-leaf branch."""
    surcharge = country_surcharge(request.country_of_origin, surcharges)
    if not leaves:
        return AmbiguityAnalysis(
            branch=branch,
            is_ambiguous=False,
            ambiguity_level=AmbiguityLevel.NONE,
            possible_codes=[],
            decision_variables=[],
            questions_to_ask=[],
            likely_code=None,
            duty_range=DutyRange(),
            assumptions=[],
            confidence=CONFIDENCE_NO_LEAVES,
            country_surcharge=surcharge,
        )

    only = CandidateResult(
        leaf=leaves[0],
        requirements=[],
        is_likely=True,
        is_confirmed=True,
        match_reason="Only leaf under branch",
    )
    return AmbiguityAnalysis(
        branch=branch,
        is_ambiguous=False,
        ambiguity_level=AmbiguityLevel.NONE,
        possible_codes=[only],
        decision_variables=[],
        questions_to_ask=[],
        likely_code=only,
        duty_range=calculate_duty_range(leaves, request.country_of_origin, surcharges),
        assumptions=[],
        confidence=CONFIDENCE_SINGLE_LEAF,
        country_surcharge=surcharge,
    )


def analyze_leaves(leaves, request, policy=None, surcharges=None):
    """Analyse an already-fetched leaf set.

    Args:
        leaves: list of LeafEntry under request.branch_prefix
        request: AnalysisRequest
        policy: DefaultPolicy for unevidenced variables (MostCommonOptionPolicy)
        surcharges: country -> percent watch-list (config default when None)

    Returns:
        AmbiguityAnalysis
    """
    leaves = list(leaves)
    branch = canonical_code(request.branch_prefix)

    if len(leaves) <= 1:
        logger.info(f"Ambiguity engine: branch {branch} has {len(leaves)} leaf, short-circuit")
        return _unambiguous_result(branch, leaves, request, surcharges)

    # Step 2: VARIABLES
    variables = build_decision_variables(leaves)

    # Step 3: MATCH
    assumptions = InputMatcher(policy).match(variables, request, leaves)

    # Step 4: SCORE
    candidates = score_candidates(leaves, variables)

    # Step 5: AGGREGATE
    questions = select_questions(variables)
    likely = pick_likely_code(candidates)
    duty = calculate_duty_range(leaves, request.country_of_origin, surcharges)
    level = classify_ambiguity(len(leaves), questions, candidates)
    confidence = aggregate_confidence(variables, likely)

    confirmed = [c.code for c in candidates if c.is_confirmed]
    if len(confirmed) > 1:
        # Two mutually exclusive options fully satisfied by stated input
        logger.warning(f"Branch {branch}: {len(confirmed)} confirmed candidates {confirmed}")

    logger.info(
        f"Ambiguity engine: branch {branch}, {len(leaves)} leaves, "
        f"{len(variables)} variables, {len(questions)} questions, "
        f"level={level.value}, confidence={confidence}"
    )

    return AmbiguityAnalysis(
        branch=branch,
        is_ambiguous=level != AmbiguityLevel.NONE,
        ambiguity_level=level,
        possible_codes=candidates,
        decision_variables=variables,
        questions_to_ask=questions,
        likely_code=likely,
        duty_range=duty,
        assumptions=assumptions,
        confidence=confidence,
        country_surcharge=country_surcharge(request.country_of_origin, surcharges),
    )


def analyze_ambiguity(request, source, policy=None, surcharges=None):
    """Fetch the branch from a candidate source and analyse it.

    Raises:
        UpstreamLookupFailure: the source failed; never reported as an empty branch.
    """
    branch = canonical_code(request.branch_prefix)
    try:
        leaves = source.fetch_leaves_under_branch(branch)
    except AmbiguityEngineError:
        raise
    except Exception as e:
        logger.warning(f"Candidate source failed for branch {branch}: {e}")
        raise UpstreamLookupFailure(
            f"Candidate lookup failed for branch {branch}", branch_prefix=branch, cause=e
        ) from e

    if leaves is None:
        raise UpstreamLookupFailure(
            f"Candidate source returned no result for branch {branch}", branch_prefix=branch
        )
    return analyze_leaves(leaves, request, policy=policy, surcharges=surcharges)
