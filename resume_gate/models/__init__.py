from resume_gate.models.resume_request import (
    ResumeRequest,
    STATUS_APPROVED,
    STATUS_EXPIRED,
    STATUS_NONE,
    STATUS_PENDING,
    utcnow,
)

__all__ = [
    "ResumeRequest",
    "STATUS_APPROVED",
    "STATUS_EXPIRED",
    "STATUS_NONE",
    "STATUS_PENDING",
    "utcnow",
]
