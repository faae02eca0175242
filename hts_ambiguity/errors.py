"""
Exception hierarchy for the ambiguity engine.

Only boundary failures are raised: the candidate source failing, or a caller
payload that cannot be turned into an AnalysisRequest. Everything inside the
analysis degrades to lower confidence instead of raising.
"""

from typing import Any, Dict, Optional


class AmbiguityEngineError(Exception):
    """Base exception for all engine errors"""

    def __init__(self, message: str, error_code: str = "AE000", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": str(self),
            "details": self.details,
        }


class UpstreamLookupFailure(AmbiguityEngineError):
    """The candidate source failed or timed out for a branch"""

    def __init__(self, message: str, branch_prefix: str = "", cause: Optional[BaseException] = None):
        details = {"branch_prefix": branch_prefix}
        if cause is not None:
            details["cause"] = f"{type(cause).__name__}: {cause}"
        super().__init__(message, error_code="AE100", details=details)
        self.branch_prefix = branch_prefix
        self.cause = cause


class InvalidAnalysisRequest(AmbiguityEngineError):
    """A caller payload failed validation at the boundary"""

    def __init__(self, message: str, field: str = "", value: Any = None):
        super().__init__(
            message,
            error_code="AE200",
            details={"field": field, "value": repr(value)},
        )
        self.field = field
