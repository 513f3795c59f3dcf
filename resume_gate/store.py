# resume_gate/store.py
# Persistence for resume requests. Every SQLAlchemy failure is rolled back
# and re-raised as PersistenceError so callers never see driver errors.

import logging
from functools import wraps

from sqlalchemy.exc import SQLAlchemyError

from resume_gate import db
from resume_gate.errors import PersistenceError
from resume_gate.models import (
    ResumeRequest,
    STATUS_APPROVED,
    STATUS_EXPIRED,
    STATUS_PENDING,
    utcnow,
)

logger = logging.getLogger(__name__)


def _guarded(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error("%s failed: %s", fn.__name__, exc)
            raise PersistenceError() from exc
    return wrapper


class RequestStore:

    @_guarded
    def insert(self, name: str, email: str, reason: str) -> int:
        req = ResumeRequest(
            name=name,
            email=email,
            reason=reason,
            status=STATUS_PENDING,
            created_at=utcnow(),
            approved_at=None,
        )
        db.session.add(req)
        db.session.commit()
        return req.id

    @_guarded
    def find_latest_by_email(self, email: str):
        return (
            ResumeRequest.query.filter_by(email=email)
            .order_by(ResumeRequest.id.desc())
            .first()
        )

    @_guarded
    def find_by_id(self, request_id: int):
        return db.session.get(ResumeRequest, request_id)

    @_guarded
    def update(self, request_id: int, status: str, approved_at) -> bool:
        count = ResumeRequest.query.filter_by(id=request_id).update(
            {"status": status, "approved_at": approved_at}
        )
        db.session.commit()
        return count > 0

    @_guarded
    def expire_if_stale(self, request_id: int, cutoff) -> bool:
        """Expire the row only if it is still approved and approved before ``cutoff``."""
        count = (
            ResumeRequest.query.filter(
                ResumeRequest.id == request_id,
                ResumeRequest.status == STATUS_APPROVED,
                ResumeRequest.approved_at.isnot(None),
                ResumeRequest.approved_at < cutoff,
            )
            .update({"status": STATUS_EXPIRED, "approved_at": None}, synchronize_session=False)
        )
        db.session.commit()
        return count > 0

    @_guarded
    def stale_approved_ids(self, cutoff) -> list:
        rows = (
            db.session.query(ResumeRequest.id)
            .filter(
                ResumeRequest.status == STATUS_APPROVED,
                ResumeRequest.approved_at.isnot(None),
                ResumeRequest.approved_at < cutoff,
            )
            .order_by(ResumeRequest.id)
            .all()
        )
        return [r[0] for r in rows]

    @_guarded
    def list_recent(self, limit: int = 20) -> list:
        return ResumeRequest.query.order_by(ResumeRequest.id.desc()).limit(limit).all()
