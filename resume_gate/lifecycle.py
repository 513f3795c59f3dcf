# resume_gate/lifecycle.py
"""
Request lifecycle: submit -> approve -> download, with a fixed download
window after approval.

    pending --approve--> approved --download after window--> expired
                                  `--timer after window-----> expired

Download recomputes the window from the stored ``approved_at`` on every
call; the timer only tidies up. Notifications are best-effort and are sent
after the state change has been committed.
"""

import logging
from collections import namedtuple
from datetime import timedelta

from resume_gate.errors import (
    ExpiredError,
    ForbiddenError,
    NotFoundError,
    NotificationError,
    ValidationError,
)
from resume_gate.models import STATUS_APPROVED, STATUS_EXPIRED, STATUS_NONE, utcnow

logger = logging.getLogger(__name__)

StatusView = namedtuple("StatusView", ["status", "id", "approved_at"])

REQUIRED_FIELDS = ("name", "email", "reason")


class RequestLifecycle:

    def __init__(self, store, mailer, documents, scheduler=None,
                 expiry_ms: int = 3 * 60 * 1000,
                 backend_url: str = "http://localhost:5000",
                 clock=utcnow):
        self.store = store
        self.mailer = mailer
        self.documents = documents
        self.scheduler = scheduler
        self.expiry_ms = int(expiry_ms)
        self.backend_url = backend_url.rstrip("/")
        self.clock = clock

    # ------------------------------------------------------
    # Window helpers
    # ------------------------------------------------------
    @property
    def window(self) -> timedelta:
        return timedelta(milliseconds=self.expiry_ms)

    @property
    def validity_minutes(self) -> int:
        return self.expiry_ms // 60000

    def approve_link(self, request_id: int) -> str:
        return f"{self.backend_url}/admin-approve/{request_id}"

    def download_link(self, request_id: int) -> str:
        return f"{self.backend_url}/download-resume/{request_id}"

    def _cutoff(self):
        return self.clock() - self.window

    # ------------------------------------------------------
    # Operations
    # ------------------------------------------------------
    def submit(self, name, email, reason) -> int:
        values = {
            "name": (name or "").strip(),
            "email": (email or "").strip(),
            "reason": (reason or "").strip(),
        }
        missing = [field for field in REQUIRED_FIELDS if not values[field]]
        if missing:
            raise ValidationError(missing=missing)
        if "\r" in values["email"] or "\n" in values["email"]:
            raise ValidationError("Invalid email address")

        request_id = self.store.insert(values["name"], values["email"], values["reason"])
        logger.info("Resume request %s submitted by %s", request_id, values["email"])

        req = self.store.find_by_id(request_id)
        try:
            self.mailer.notify_admin(req, self.approve_link(request_id))
        except NotificationError as exc:
            logger.warning("Admin notification for request %s failed: %s", request_id, exc.message)
        return request_id

    def get_status(self, email) -> StatusView:
        req = self.store.find_latest_by_email((email or "").strip())
        if req is None:
            return StatusView(STATUS_NONE, None, None)
        return StatusView(req.status, req.id, req.approved_at)

    def approve(self, request_id: int) -> str:
        req = self.store.find_by_id(request_id)
        if req is None:
            raise NotFoundError()

        # No status guard: approving again re-stamps approved_at.
        self.store.update(request_id, STATUS_APPROVED, self.clock())
        logger.info("Resume request %s approved", request_id)

        try:
            self.mailer.notify_requester(req, self.download_link(request_id), self.validity_minutes)
        except NotificationError as exc:
            logger.warning("Requester notification for request %s failed: %s", request_id, exc.message)

        if self.scheduler is not None:
            self.scheduler.schedule(request_id, self.expiry_ms / 1000.0, self.check_expiry)

        return (
            "Request approved. User was notified. "
            f"Download link valid for {self.validity_minutes} minutes."
        )

    def download(self, request_id: int):
        req = self.store.find_by_id(request_id)
        if req is None:
            raise NotFoundError()
        if req.status == STATUS_EXPIRED:
            raise ExpiredError()
        if req.status != STATUS_APPROVED:
            raise ForbiddenError()
        if req.approved_at is None:
            raise ForbiddenError("Approval timestamp missing.")

        elapsed = self.clock() - req.approved_at
        if elapsed > self.window:
            self.store.expire_if_stale(request_id, self._cutoff())
            logger.info("Resume request %s expired at download (%ss after approval)",
                        request_id, int(elapsed.total_seconds()))
            raise ExpiredError()

        return self.documents.fetch()

    def check_expiry(self, request_id: int) -> bool:
        """Expire ``request_id`` if its window has elapsed. Safe to call any number of times."""
        return self.store.expire_if_stale(request_id, self._cutoff())

    def expire_stale(self) -> int:
        expired = 0
        for request_id in self.store.stale_approved_ids(self._cutoff()):
            if self.check_expiry(request_id):
                expired += 1
        if expired:
            logger.info("Expired %s stale approval(s)", expired)
        return expired
