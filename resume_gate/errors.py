# resume_gate/errors.py


class ResumeGateError(Exception):
    """Base error; ``message`` is safe to show to the caller."""

    status_code = 500
    message = "Server error"

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(ResumeGateError):
    status_code = 400
    message = "All fields are required"

    def __init__(self, message=None, missing=()):
        self.missing = tuple(missing)
        super().__init__(message)


class NotFoundError(ResumeGateError):
    status_code = 404
    message = "Request not found"


class ForbiddenError(ResumeGateError):
    status_code = 403
    message = "Request not approved."


class ExpiredError(ForbiddenError):
    message = "Your approval has expired. Please request again."


class PersistenceError(ResumeGateError):
    pass


class NotificationError(ResumeGateError):
    message = "Notification failed"


class DocumentError(ResumeGateError):
    message = "Document unavailable"
