"""Typed failures raised by the approval workflow.

Every error is returned to the immediate caller; nothing here is retried
internally. The HTTP layer maps ``status_code`` onto the response.
"""


class ReviewGateError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(ReviewGateError):
    """Unknown approval id or snapshot version."""

    kind = "not_found"
    status_code = 404


class InvalidState(ReviewGateError):
    """Operation illegal for the approval's current status."""

    kind = "invalid_state"
    status_code = 409


class InvalidTransition(ReviewGateError):
    """Decision attempted on an approval that is no longer pending."""

    kind = "invalid_transition"
    status_code = 409


class ValidationError(ReviewGateError):
    kind = "validation_error"
    status_code = 422


class IOFailure(ReviewGateError):
    """Artifact missing or unreadable while snapshotting or diffing."""

    kind = "io_failure"
    status_code = 500
