"""
Tests for inbound request validation and the error hierarchy
"""

import pytest

from hts_ambiguity.errors import AmbiguityEngineError, InvalidAnalysisRequest, UpstreamLookupFailure
from hts_ambiguity.request import parse_analysis_request


class TestParseAnalysisRequest:
    def test_full_payload(self):
        request = parse_analysis_request({
            "branch_prefix": "8211.91",
            "free_text": "  Steak knives  ",
            "explicit_material": "stainless",
            "explicit_numeric_value": 0.75,
            "numeric_unit": "dozen",
            "country_of_origin": "cn",
            "previous_answers": {"value_bracket": "over_threshold"},
        })
        assert request.branch_prefix == "821191"
        assert request.free_text == "Steak knives"
        assert request.explicit_material == "stainless"
        assert request.explicit_numeric_value == 0.75
        assert request.numeric_unit == "dozen"
        assert request.country_of_origin == "CN"
        assert request.previous_answers == {"value_bracket": "over_threshold"}

    def test_camel_case_aliases(self):
        request = parse_analysis_request({
            "branchPrefix": "8211",
            "freeText": "knife",
            "explicitNumericValue": "1,200.50",
            "previousAnswers": {},
        })
        assert request.branch_prefix == "8211"
        assert request.explicit_numeric_value == 1200.5

    def test_minimal_payload(self):
        request = parse_analysis_request({"branch_prefix": "8211"})
        assert request.free_text == ""
        assert request.explicit_numeric_value is None
        assert request.previous_answers == {}

    def test_integer_branch(self):
        assert parse_analysis_request({"branch_prefix": 8211}).branch_prefix == "8211"

    @pytest.mark.parametrize("payload,field", [
        ({}, "branch_prefix"),
        ({"branch_prefix": ""}, "branch_prefix"),
        ({"branch_prefix": "knives"}, "branch_prefix"),
        ({"branch_prefix": True}, "branch_prefix"),
        ({"branch_prefix": "8211", "free_text": 42}, "free_text"),
        ({"branch_prefix": "8211", "explicit_numeric_value": "cheap"}, "explicit_numeric_value"),
        ({"branch_prefix": "8211", "explicit_numeric_value": -1}, "explicit_numeric_value"),
        ({"branch_prefix": "8211", "explicit_numeric_value": float("nan")}, "explicit_numeric_value"),
        ({"branch_prefix": "8211", "explicit_numeric_value": False}, "explicit_numeric_value"),
        ({"branch_prefix": "8211", "previous_answers": ["over_threshold"]}, "previous_answers"),
        ({"branch_prefix": "8211", "previous_answers": {"value_bracket": 1}}, "previous_answers"),
        ({"branch_prefix": "8211", "country_of_origin": 86}, "country_of_origin"),
    ])
    def test_malformed_rejected(self, payload, field):
        with pytest.raises(InvalidAnalysisRequest) as exc:
            parse_analysis_request(payload)
        assert exc.value.field == field

    def test_non_dict_rejected(self):
        with pytest.raises(InvalidAnalysisRequest):
            parse_analysis_request(["8211"])


class TestErrors:
    def test_invalid_request_to_dict(self):
        error = InvalidAnalysisRequest("bad value", field="free_text", value=42)
        body = error.to_dict()
        assert body["error_type"] == "InvalidAnalysisRequest"
        assert body["error_code"] == "AE200"
        assert body["details"] == {"field": "free_text", "value": "42"}

    def test_upstream_failure_details(self):
        cause = TimeoutError("slow")
        error = UpstreamLookupFailure("lookup failed", branch_prefix="8211", cause=cause)
        assert isinstance(error, AmbiguityEngineError)
        assert error.details == {"branch_prefix": "8211", "cause": "TimeoutError: slow"}
        assert error.cause is cause
