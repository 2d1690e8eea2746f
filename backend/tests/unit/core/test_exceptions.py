"""
Unit Tests for the portal error hierarchy
"""
from app.core.exceptions import (
    PortalError,
    EvaluationNotFoundError,
    InvalidSpreadsheetError,
    ValidationError,
    ScoresAlreadySubmittedError,
    ScoreExceedsMaxError,
    FacultySubmissionRequiredError,
    FileTooLargeError,
    error_response,
)


class TestPortalErrors:

    def test_not_found(self):
        error = EvaluationNotFoundError("abc")

        assert error.status_code == 404
        assert error.code == "EVALUATION_NOT_FOUND"
        assert error.details["resource_id"] == "abc"

    def test_invalid_spreadsheet_is_a_validation_error(self):
        error = InvalidSpreadsheetError()

        assert isinstance(error, ValidationError)
        assert error.code == "INVALID_FORMAT"
        assert error.status_code == 400

    def test_already_submitted(self):
        error = ScoresAlreadySubmittedError("faculty", "eval-1")

        assert error.status_code == 409
        assert error.code == "ALREADY_SUBMITTED"
        assert error.message == "Faculty scores already submitted"

    def test_score_exceeds_max_carries_all_offenders(self):
        offenders = [
            {"criterion": "Design", "max_score": 5, "submitted_score": 6},
            {"criterion": "Demo", "max_score": 20, "submitted_score": 25},
        ]

        error = ScoreExceedsMaxError(offenders)

        assert error.code == "SCORE_EXCEEDS_MAX"
        assert error.details["invalid_scores"] == offenders

    def test_faculty_submission_required(self):
        error = FacultySubmissionRequiredError("eval-1")

        assert error.code == "FACULTY_SUBMISSION_REQUIRED"
        assert error.status_code == 400

    def test_file_too_large(self):
        error = FileTooLargeError(6 * 1024 * 1024, 5 * 1024 * 1024)

        assert error.status_code == 413
        assert "5MB" in error.message

    def test_error_response_shape(self):
        body = error_response(PortalError("boom", code="X"))

        assert body == {"success": False, "error": {"code": "X", "message": "boom", "details": {}}}
