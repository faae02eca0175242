"""
Tests for candidate scoring, ambiguity classification and confidence
"""

import pytest

from hts_ambiguity.models import (
    AmbiguityLevel,
    CandidateResult,
    DecisionVariable,
    DetectionSource,
    LeafEntry,
    Option,
    Requirement,
    RequirementSource,
    VariableKind,
)
from hts_ambiguity.scoring import (
    aggregate_confidence,
    classify_ambiguity,
    pick_likely_code,
    score_candidates,
    select_questions,
)


LEAVES = [
    LeafEntry("0000000001", "Alpha", "1%"),
    LeafEntry("0000000002", "Beta", "2%"),
    LeafEntry("0000000003", "Gamma", "3%"),
]


def _variable(detected=None, source=DetectionSource.NONE, confidence=0,
              kind=VariableKind.SINGLE_CHOICE, var_id="v1"):
    return DecisionVariable(
        id=var_id,
        name="Test",
        kind=kind,
        question="?",
        options=[
            Option("a", "A", ["0000000001"]),
            Option("b", "B", ["0000000002"]),
            Option("other", "Other", ["0000000003"], is_residual=True),
        ],
        detected_value=detected,
        detected_source=source,
        confidence=confidence,
    )


def _candidate(likely=False, confirmed=False, code="0000000001"):
    return CandidateResult(leaf=LeafEntry(code, "x"), is_likely=likely, is_confirmed=confirmed)


class TestScoreCandidates:
    def test_stated_match_confirmed(self):
        variable = _variable("a", DetectionSource.STATED, 90)
        candidates = score_candidates(LEAVES, [variable])
        assert [c.is_confirmed for c in candidates] == [True, False, False]
        assert [c.is_likely for c in candidates] == [True, False, False]
        assert candidates[0].requirements[0].source == RequirementSource.STATED

    def test_assumed_match_likely_not_confirmed(self):
        variable = _variable("a", DetectionSource.ASSUMED, 40)
        candidates = score_candidates(LEAVES, [variable])
        assert candidates[0].is_likely is True
        assert candidates[0].is_confirmed is False

    def test_undetected_never_likely(self):
        candidates = score_candidates(LEAVES, [_variable()])
        assert not any(c.is_likely for c in candidates)
        assert candidates[0].requirements[0].source == RequirementSource.UNKNOWN

    def test_leaf_compatible_with_several_options_uses_detected(self):
        variable = _variable("b", DetectionSource.STATED, 90)
        variable.options[0].compatible_codes.append("0000000002")
        candidates = score_candidates(LEAVES, [variable])
        assert candidates[1].requirements[0].required_value == "b"
        assert candidates[1].requirements[0].met is True

    def test_no_variables_not_confirmed(self):
        candidates = score_candidates(LEAVES, [])
        assert all(c.is_likely for c in candidates)
        assert not any(c.is_confirmed for c in candidates)

    def test_match_reason(self):
        candidates = score_candidates(LEAVES, [_variable("a", DetectionSource.STATED, 90)])
        assert candidates[0].match_reason == "v1=a (met, stated)"


class TestSelectQuestions:
    def test_multi_option_always_asked(self):
        assert len(select_questions([_variable("a", DetectionSource.STATED, 90)])) == 1

    def test_single_option_not_asked(self):
        variable = _variable()
        variable.options = variable.options[:1]
        assert select_questions([variable]) == []


class TestPickLikelyCode:
    def test_first_likely(self):
        candidates = [_candidate(code="0000000001"), _candidate(True, code="0000000002")]
        assert pick_likely_code(candidates).code == "0000000002"

    def test_falls_back_to_first(self):
        candidates = [_candidate(code="0000000001"), _candidate(code="0000000002")]
        assert pick_likely_code(candidates).code == "0000000001"

    def test_empty(self):
        assert pick_likely_code([]) is None


class TestClassifyAmbiguity:
    def test_single_leaf(self):
        assert classify_ambiguity(1, [_variable()], []) == AmbiguityLevel.NONE

    def test_no_questions(self):
        assert classify_ambiguity(3, [], [_candidate()]) == AmbiguityLevel.NONE

    def test_one_confirmed(self):
        candidates = [_candidate(True, True), _candidate(code="0000000002")]
        assert classify_ambiguity(3, [_variable(), _variable()], candidates) == AmbiguityLevel.NONE

    def test_low(self):
        questions = [
            _variable("a", DetectionSource.STATED, 90),
            _variable("a", DetectionSource.STATED, 85, var_id="v2"),
        ]
        candidates = [_candidate(True), _candidate(code="0000000002")]
        assert classify_ambiguity(3, questions, candidates) == AmbiguityLevel.LOW

    def test_low_needs_confident_questions(self):
        questions = [
            _variable("a", DetectionSource.STATED, 90),
            _variable("a", DetectionSource.STATED, 75, var_id="v2"),
        ]
        candidates = [_candidate(True), _candidate(code="0000000002")]
        assert classify_ambiguity(3, questions, candidates) == AmbiguityLevel.HIGH

    def test_medium(self):
        questions = [_variable("a", DetectionSource.ASSUMED, 40)]
        candidates = [_candidate(True), _candidate(code="0000000002")]
        assert classify_ambiguity(3, questions, candidates) == AmbiguityLevel.MEDIUM

    def test_high(self):
        questions = [_variable(), _variable(var_id="v2")]
        assert classify_ambiguity(3, questions, [_candidate()]) == AmbiguityLevel.HIGH


class TestAggregateConfidence:
    def test_no_likely_code(self):
        assert aggregate_confidence([], None) == 50

    def test_confirmed(self):
        assert aggregate_confidence([], _candidate(True, True)) == 98

    def test_mean_minus_assumption_penalty(self):
        stated = _variable("a", DetectionSource.STATED, 90, var_id="v1")
        assumed = _variable("a", DetectionSource.ASSUMED, 40, var_id="v2")
        likely = CandidateResult(
            leaf=LEAVES[0],
            requirements=[
                Requirement("v1", "a", True, RequirementSource.STATED),
                Requirement("v2", "a", True, RequirementSource.ASSUMED),
            ],
            is_likely=True,
        )
        # (90 + 40) / 2 - 10
        assert aggregate_confidence([stated, assumed], likely) == 55

    def test_clamped_to_floor(self):
        assumed = [_variable("a", DetectionSource.ASSUMED, 40, var_id=f"v{i}") for i in range(3)]
        likely = CandidateResult(
            leaf=LEAVES[0],
            requirements=[Requirement(v.id, "a", True, RequirementSource.ASSUMED) for v in assumed],
            is_likely=True,
        )
        assert aggregate_confidence(assumed, likely) == 30

    def test_no_met_requirements_is_neutral(self):
        assert aggregate_confidence([_variable()], _candidate()) == 50
