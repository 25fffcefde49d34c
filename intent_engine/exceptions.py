"""
Exceptions for the Lead Intent Scoring Engine
"""

from typing import Any, Dict, Optional


class ScoringEngineError(Exception):
    """Base exception for all scoring engine errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}


class PreconditionError(ScoringEngineError):
    """Scoring cannot start: no active offer or no leads."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="PRECONDITION_FAILED", status_code=400, details=details)


class LeadUploadError(ScoringEngineError):
    """Uploaded CSV cannot be turned into leads."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="INVALID_LEAD_UPLOAD", status_code=400, details=details)


class ClassificationCallError(ScoringEngineError):
    """The intent service was unreachable, errored, timed out or is not configured."""

    def __init__(self, message: str):
        super().__init__(message, code="CLASSIFICATION_CALL_FAILED", status_code=502)


class ClassificationFormatError(ScoringEngineError):
    """The intent service replied, but not with a usable {intent, reasoning} object."""

    def __init__(self, message: str):
        super().__init__(message, code="CLASSIFICATION_FORMAT_INVALID", status_code=502)
