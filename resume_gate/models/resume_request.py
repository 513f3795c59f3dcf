# resume_gate/models/resume_request.py

from datetime import datetime, timezone
from resume_gate import db

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_EXPIRED = "expired"
STATUS_NONE = "none"


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ResumeRequest(db.Model):
    __tablename__ = "resume_requests"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.Text, nullable=False)
    email = db.Column(db.Text, nullable=False, index=True)
    reason = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), default=STATUS_PENDING, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    approved_at = db.Column(db.DateTime, nullable=True)

    def is_pending(self):
        return self.status == STATUS_PENDING

    def is_approved(self):
        return self.status == STATUS_APPROVED

    def is_expired(self):
        return self.status == STATUS_EXPIRED

    def to_status_dict(self):
        return {
            "status": self.status,
            "id": self.id,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
        }

    def __repr__(self):
        return f"<ResumeRequest {self.id} {self.email} {self.status}>"
