"""
Data structures for the ambiguity engine.

File: hts_ambiguity/models.py

Everything here is owned by a single analysis call. LeafEntry is immutable;
the derived structures (phrases, variables, candidates) are built fresh per
call and serialized with to_dict(), which only emits JSON-safe primitives in
a deterministic order.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# =============================================================================
# ENUMS
# =============================================================================

class Category(Enum):
    """Decision dimensions a differentiating phrase can belong to"""
    BLADE_MATERIAL = "blade_material"
    HANDLE_MATERIAL = "handle_material"
    PLATING = "plating"
    MATERIAL = "material"
    VALUE = "value"
    SIZE = "size"
    WEIGHT = "weight"
    COUNT = "count"
    USE = "use"
    POWER = "power"
    CONSTRUCTION = "construction"
    FINISH = "finish"
    ORIGIN = "origin"
    DEMOGRAPHIC = "demographic"
    GARMENT_TYPE = "garment_type"
    OTHER = "other"


class VariableKind(Enum):
    SINGLE_CHOICE = "single_choice"
    NUMERIC_BRACKET = "numeric_bracket"


class DetectionSource(Enum):
    """Provenance of a variable's detected value"""
    STATED = "stated"       # explicit input: text, numeric value, prior answer
    ASSUMED = "assumed"     # default policy, no evidence
    NONE = "none"           # nothing detected


class RequirementSource(Enum):
    STATED = "stated"
    ASSUMED = "assumed"
    UNKNOWN = "unknown"


class AmbiguityLevel(Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# =============================================================================
# INPUT TYPES
# =============================================================================

def canonical_code(code) -> str:
    """Strip dots/slashes/whitespace from a schedule code."""
    return "".join(str(code).replace(".", "").replace("/", "").split())


def found_in(codes, unstated=()) -> str:
    """Provenance note for an option: the leaves whose text names it."""
    note = f"Found in: {', '.join(codes) or 'none'}"
    if unstated:
        note += f"; not stated in: {', '.join(unstated)}"
    return note


@dataclass(frozen=True)
class LeafEntry:
    """One finest-grain schedule entry under analysis"""
    code: str
    legal_description: str
    base_duty_rate_text: str = ""

    def __post_init__(self):
        object.__setattr__(self, "code", canonical_code(self.code))
        object.__setattr__(self, "legal_description", str(self.legal_description or ""))
        object.__setattr__(self, "base_duty_rate_text", str(self.base_duty_rate_text or ""))

    def to_dict(self) -> Dict[str, str]:
        return {
            "code": self.code,
            "legal_description": self.legal_description,
            "base_duty_rate_text": self.base_duty_rate_text,
        }


@dataclass
class AnalysisRequest:
    """Caller-supplied analysis request (see request.parse_analysis_request)"""
    branch_prefix: str
    free_text: str = ""
    explicit_material: Optional[str] = None
    explicit_numeric_value: Optional[float] = None
    numeric_unit: Optional[str] = None
    country_of_origin: Optional[str] = None
    previous_answers: Dict[str, str] = field(default_factory=dict)

    @property
    def combined_input(self) -> str:
        """Lower-cased free text plus explicit material, for matching."""
        return f"{self.free_text or ''} {self.explicit_material or ''}".lower().strip()


# =============================================================================
# DERIVED TYPES
# =============================================================================

@dataclass
class DifferentiatingPhrase:
    """A token present in some but not all leaves of a branch"""
    phrase: str
    category: Category
    codes: Tuple[str, ...]


@dataclass
class Option:
    value: str
    label: str
    compatible_codes: List[str]
    is_residual: bool = False
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "label": self.label,
            "compatible_codes": list(self.compatible_codes),
            "is_residual": self.is_residual,
            "description": self.description,
        }


@dataclass
class DecisionVariable:
    """A discovered product attribute with options mapped to leaves"""
    id: str
    name: str
    kind: VariableKind
    question: str
    options: List[Option]
    category: Category = Category.OTHER
    detected_value: Optional[str] = None
    detected_source: DetectionSource = DetectionSource.NONE
    confidence: int = 0
    threshold: Optional[float] = None
    threshold_unit: Optional[str] = None

    def find_option(self, value) -> Optional[Option]:
        for option in self.options:
            if option.value == value:
                return option
        return None

    def options_for_code(self, code) -> List[Option]:
        return [o for o in self.options if code in o.compatible_codes]

    def covered_codes(self) -> List[str]:
        seen = []
        for option in self.options:
            for code in option.compatible_codes:
                if code not in seen:
                    seen.append(code)
        return seen

    @property
    def is_resolved(self) -> bool:
        return self.detected_value is not None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "category": self.category.value,
            "question": self.question,
            "options": [o.to_dict() for o in self.options],
            "detected_value": self.detected_value,
            "detected_source": self.detected_source.value,
            "confidence": self.confidence,
        }
        if self.kind == VariableKind.NUMERIC_BRACKET:
            result["threshold"] = self.threshold
            result["threshold_unit"] = self.threshold_unit
        return result


@dataclass
class Requirement:
    variable_id: str
    required_value: str
    met: bool
    source: RequirementSource

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variable_id": self.variable_id,
            "required_value": self.required_value,
            "met": self.met,
            "source": self.source.value,
        }


@dataclass
class CandidateResult:
    leaf: LeafEntry
    requirements: List[Requirement] = field(default_factory=list)
    is_likely: bool = False
    is_confirmed: bool = False
    match_reason: str = ""

    @property
    def code(self) -> str:
        return self.leaf.code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.leaf.code,
            "description": self.leaf.legal_description,
            "base_duty_rate_text": self.leaf.base_duty_rate_text,
            "requirements": [r.to_dict() for r in self.requirements],
            "is_likely": self.is_likely,
            "is_confirmed": self.is_confirmed,
            "match_reason": self.match_reason,
        }


@dataclass
class DutyRange:
    min: float = 0.0
    max: float = 0.0
    min_code: str = ""
    max_code: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min": self.min,
            "max": self.max,
            "min_code": self.min_code,
            "max_code": self.max_code,
        }


@dataclass
class Assumption:
    variable_id: str
    variable_name: str
    assumed_value: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "variable_id": self.variable_id,
            "variable_name": self.variable_name,
            "assumed_value": self.assumed_value,
            "reason": self.reason,
        }


@dataclass
class AmbiguityAnalysis:
    """Externally visible result of one analysis call"""
    branch: str
    is_ambiguous: bool
    ambiguity_level: AmbiguityLevel
    possible_codes: List[CandidateResult]
    decision_variables: List[DecisionVariable]
    questions_to_ask: List[DecisionVariable]
    likely_code: Optional[CandidateResult]
    duty_range: DutyRange
    assumptions: List[Assumption]
    confidence: int
    country_surcharge: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "branch": self.branch,
            "is_ambiguous": self.is_ambiguous,
            "ambiguity_level": self.ambiguity_level.value,
            "possible_codes": [c.to_dict() for c in self.possible_codes],
            "decision_variables": [v.to_dict() for v in self.decision_variables],
            "questions_to_ask": [v.to_dict() for v in self.questions_to_ask],
            "likely_code": self.likely_code.to_dict() if self.likely_code else None,
            "duty_range": self.duty_range.to_dict(),
            "assumptions": [a.to_dict() for a in self.assumptions],
            "confidence": self.confidence,
            "country_surcharge": self.country_surcharge,
        }
