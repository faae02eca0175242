"""
HTS Ambiguity - Firebase Cloud Functions
HTTP endpoint over the ambiguity engine.

POST /analyze_ambiguity
    {"branch_prefix": "8211.92", "free_text": "...", "explicit_numeric_value": 0.75,
     "numeric_unit": "dozen", "country_of_origin": "CN",
     "previous_answers": {"value_bracket": "over_threshold"},
     "source": "firestore" | "usitc", "policy": "most_common" | "highest_duty"}
"""
import firebase_admin
from firebase_admin import firestore
from firebase_functions import https_fn, options
import json
import logging

from hts_ambiguity.candidate_source import FirestoreCandidateSource, UsitcCandidateSource
from hts_ambiguity.engine import analyze_ambiguity as run_analysis
from hts_ambiguity.errors import InvalidAnalysisRequest, UpstreamLookupFailure
from hts_ambiguity.input_matcher import HighestDutyPolicy, MostCommonOptionPolicy
from hts_ambiguity.request import parse_analysis_request

logger = logging.getLogger("hts.main")


# Initialize Firebase
firebase_admin.initialize_app()
db = None

def get_db():
    global db
    if db is None:
        db = firestore.client()
    return db


POLICIES = {
    MostCommonOptionPolicy.name: MostCommonOptionPolicy,
    HighestDutyPolicy.name: HighestDutyPolicy,
}


def _json_response(body, status=200):
    return https_fn.Response(json.dumps(body, default=str), status=status, content_type="application/json")


def _source_for(name):
    if name == "usitc":
        return UsitcCandidateSource()
    if name in (None, "", "firestore"):
        return FirestoreCandidateSource(get_db())
    raise InvalidAnalysisRequest(f"Unknown candidate source: {name}", field="source", value=name)


def _policy_for(name):
    if name in (None, ""):
        return MostCommonOptionPolicy()
    if name not in POLICIES:
        raise InvalidAnalysisRequest(f"Unknown default policy: {name}", field="policy", value=name)
    return POLICIES[name]()


def handle_analysis(payload):
    """Run one analysis for a JSON payload. Returns (body, status)."""
    try:
        request = parse_analysis_request(payload)
        source = _source_for(payload.get("source"))
        policy = _policy_for(payload.get("policy"))
        analysis = run_analysis(request, source, policy=policy)
    except InvalidAnalysisRequest as e:
        logger.warning(f"Rejected analysis request: {e}")
        return e.to_dict(), 400
    except UpstreamLookupFailure as e:
        logger.error(f"Candidate lookup failed: {e}")
        return e.to_dict(), 502
    return analysis.to_dict(), 200


# ============================================================
# HTTP API
# ============================================================
@https_fn.on_request(cors=options.CorsOptions(cors_origins="*", cors_methods=["GET", "POST"]))
def analyze_ambiguity(req: https_fn.Request) -> https_fn.Response:
    """Ambiguity analysis for one tariff branch"""

    if req.method == "GET":
        return _json_response({"status": "ok", "service": "HTS Ambiguity Engine"})

    if req.method != "POST":
        return _json_response({"error": "Method not allowed"}, status=405)

    payload = req.get_json(silent=True)
    if payload is None:
        return _json_response(InvalidAnalysisRequest("Request body must be JSON").to_dict(), status=400)

    body, status = handle_analysis(payload)
    return _json_response(body, status=status)
