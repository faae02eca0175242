"""
HTS Ambiguity Engine
====================

Finds what separates the sibling leaves of a tariff branch, turns it into
questions, and scores every leaf against whatever the caller already knows.

Modules:
- differentiators: tokens present in some but not all leaf descriptions
- categorizer: phrase -> decision dimension
- variable_builder: dimensions -> decision variables with options
- thresholds: numeric value/size/weight brackets
- input_matcher: stated / synonym / assumed detection, default policies
- scoring: candidate requirements, ambiguity level, confidence
- duty_range: min/max base rate plus country surcharge
- candidate_source: Firestore, USITC and in-memory leaf sources
- request: payload validation
- engine: the pipeline

Usage:
    from hts_ambiguity.engine import analyze_ambiguity
    from hts_ambiguity.request import parse_analysis_request
    from hts_ambiguity.candidate_source import UsitcCandidateSource
"""

from .candidate_source import (
    CandidateSource,
    FirestoreCandidateSource,
    StaticCandidateSource,
    UsitcCandidateSource,
)
from .engine import analyze_ambiguity, analyze_leaves
from .errors import AmbiguityEngineError, InvalidAnalysisRequest, UpstreamLookupFailure
from .input_matcher import DefaultPolicy, HighestDutyPolicy, InputMatcher, MostCommonOptionPolicy
from .models import (
    AmbiguityAnalysis,
    AmbiguityLevel,
    AnalysisRequest,
    DecisionVariable,
    DetectionSource,
    LeafEntry,
    Option,
)
from .request import parse_analysis_request

__version__ = "1.0.0"
