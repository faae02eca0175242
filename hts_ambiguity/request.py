"""
Inbound request validation.

Turns an untyped payload (HTTP JSON body, queue message) into an
AnalysisRequest. Malformed fields are rejected with InvalidAnalysisRequest,
never silently defaulted.

Accepted keys (camelCase aliases accepted for the web app):
    branch_prefix / branchPrefix              required, non-empty
    free_text / freeText                      string
    explicit_material / explicitMaterial      string
    explicit_numeric_value / explicitNumericValue   number (or numeric string)
    numeric_unit / numericUnit                string, e.g. "dozen"
    country_of_origin / countryOfOrigin       string, ISO-2 preferred
    previous_answers / previousAnswers        {variable_id: option_value}
"""

import logging
import math
import re

from .errors import InvalidAnalysisRequest
from .models import AnalysisRequest, canonical_code

logger = logging.getLogger(__name__)

_BRANCH_RE = re.compile(r"^\d{2,10}$")

_ALIASES = {
    "branch_prefix": "branchPrefix",
    "free_text": "freeText",
    "explicit_material": "explicitMaterial",
    "explicit_numeric_value": "explicitNumericValue",
    "numeric_unit": "numericUnit",
    "country_of_origin": "countryOfOrigin",
    "previous_answers": "previousAnswers",
}


def _get(payload, key):
    if key in payload:
        return payload[key]
    return payload.get(_ALIASES[key])


def _optional_str(payload, key):
    value = _get(payload, key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidAnalysisRequest(f"{key} must be a string", field=key, value=value)
    value = value.strip()
    return value or None


def _optional_number(payload, key):
    value = _get(payload, key)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidAnalysisRequest(f"{key} must be a number", field=key, value=value)
    if isinstance(value, str):
        try:
            value = float(value.replace("$", "").replace(",", "").strip())
        except ValueError:
            raise InvalidAnalysisRequest(f"{key} must be a number", field=key, value=value)
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidAnalysisRequest(f"{key} must be a finite number", field=key, value=value)
    if value < 0:
        raise InvalidAnalysisRequest(f"{key} must not be negative", field=key, value=value)
    return float(value)


def _previous_answers(payload):
    value = _get(payload, "previous_answers")
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidAnalysisRequest(
            "previous_answers must be a mapping of variable id to option value",
            field="previous_answers", value=value,
        )
    answers = {}
    for variable_id, option_value in value.items():
        if not isinstance(variable_id, str) or not isinstance(option_value, str):
            raise InvalidAnalysisRequest(
                "previous_answers keys and values must be strings",
                field="previous_answers", value={variable_id: option_value},
            )
        answers[variable_id] = option_value
    return answers


def parse_analysis_request(payload):
    """Validate a raw payload and build an AnalysisRequest."""
    if not isinstance(payload, dict):
        raise InvalidAnalysisRequest("Request body must be a JSON object", field="", value=payload)

    raw_branch = _get(payload, "branch_prefix")
    if raw_branch is None or not isinstance(raw_branch, (str, int)) or isinstance(raw_branch, bool):
        raise InvalidAnalysisRequest("branch_prefix is required", field="branch_prefix", value=raw_branch)
    branch = canonical_code(raw_branch)
    if not _BRANCH_RE.match(branch):
        raise InvalidAnalysisRequest(
            "branch_prefix must be 2-10 digits (dots allowed)", field="branch_prefix", value=raw_branch
        )

    free_text = _get(payload, "free_text")
    if free_text is None:
        free_text = ""
    if not isinstance(free_text, str):
        raise InvalidAnalysisRequest("free_text must be a string", field="free_text", value=free_text)

    country = _optional_str(payload, "country_of_origin")

    request = AnalysisRequest(
        branch_prefix=branch,
        free_text=free_text.strip(),
        explicit_material=_optional_str(payload, "explicit_material"),
        explicit_numeric_value=_optional_number(payload, "explicit_numeric_value"),
        numeric_unit=_optional_str(payload, "numeric_unit"),
        country_of_origin=country.upper() if country else None,
        previous_answers=_previous_answers(payload),
    )
    logger.debug(f"Parsed analysis request for branch {branch}")
    return request
