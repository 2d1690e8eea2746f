"""
Custom Exceptions for the IPD Portal
====================================

Raise these from services instead of HTTPException so the API layer can
render them uniformly (see the handler registered in app.main).

Usage:
    from app.core.exceptions import EvaluationNotFoundError, ScoreExceedsMaxError

    if not evaluation:
        raise EvaluationNotFoundError(evaluation_id)

    if invalid_scores:
        raise ScoreExceedsMaxError(invalid_scores)
"""

from typing import Optional, Any, Dict, List


class PortalError(Exception):
    """Base exception for all portal errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(PortalError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(PortalError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(PortalError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class EvaluationNotFoundError(ResourceNotFoundError):
    """Evaluation not found"""

    def __init__(self, evaluation_id: str):
        super().__init__("Evaluation", evaluation_id)


class ProjectNotFoundError(ResourceNotFoundError):
    """Project not found"""

    def __init__(self, project_id: str):
        super().__init__("Project", project_id)


class TeamNotFoundError(ResourceNotFoundError):
    """Team not found"""

    def __init__(self, team_id: str):
        super().__init__("Team", team_id)


class ResourceConflictError(PortalError):
    """Request conflicts with the current state of a resource"""

    status_code = 409

    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(PortalError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class InvalidSpreadsheetError(ValidationError):
    """Uploaded spreadsheet is unreadable or has no usable rows"""

    def __init__(self, message: str = "Spreadsheet could not be read"):
        super().__init__(message)
        self.code = "INVALID_FORMAT"


class InvalidFileTypeError(ValidationError):
    """File type not allowed"""

    def __init__(self, file_type: str, allowed_types: list):
        super().__init__(
            f"File type '{file_type}' not allowed. Allowed: {', '.join(allowed_types)}"
        )
        self.code = "INVALID_FILE_TYPE"
        self.details = {"file_type": file_type, "allowed_types": allowed_types}


class FileTooLargeError(ValidationError):
    """Uploaded file exceeds the size limit"""

    status_code = 413

    def __init__(self, size_bytes: int, max_bytes: int):
        super().__init__(
            f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB"
        )
        self.code = "FILE_TOO_LARGE"
        self.details = {"size_bytes": size_bytes, "max_bytes": max_bytes}


# ============================================
# Scoring Errors
# ============================================

class ScoringError(PortalError):
    """Score submission rejected"""

    status_code = 400

    def __init__(self, message: str, code: str = "SCORING_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class ScoresAlreadySubmittedError(ScoringError):
    """The role has already submitted scores for this evaluation"""

    status_code = 409

    def __init__(self, role: str, evaluation_id: str):
        super().__init__(
            f"{role.capitalize()} scores already submitted",
            code="ALREADY_SUBMITTED",
            details={"role": role, "evaluation_id": evaluation_id}
        )


class ScoreExceedsMaxError(ScoringError):
    """One or more scores are above the item's ceiling"""

    def __init__(self, invalid_scores: List[Dict[str, Any]]):
        super().__init__(
            "Some scores exceed the maximum allowed value",
            code="SCORE_EXCEEDS_MAX",
            details={"invalid_scores": invalid_scores}
        )


class FacultySubmissionRequiredError(ScoringError):
    """Reviewer tried to submit before faculty"""

    def __init__(self, evaluation_id: str):
        super().__init__(
            "Faculty must submit scores before reviewer",
            code="FACULTY_SUBMISSION_REQUIRED",
            details={"evaluation_id": evaluation_id}
        )


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: PortalError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
