# resume_gate/mailer.py

import logging
import smtplib
import ssl
from email.errors import MessageError
from email.message import EmailMessage

from markupsafe import escape

from resume_gate.errors import NotificationError

logger = logging.getLogger(__name__)


def smtp_config(config):
    return {
        "host": config.get("SMTP_HOST"),
        "port": int(config.get("SMTP_PORT") or 587),
        "user": config.get("SMTP_USERNAME"),
        "password": config.get("SMTP_PASSWORD"),
        "sender": config.get("SMTP_FROM") or config.get("SMTP_USERNAME"),
        "alias": config.get("SMTP_FROM_ALIAS"),
        "use_tls": str(config.get("SMTP_USE_TLS", "true")).lower() != "false",
    }


def _one_line(value) -> str:
    return " ".join(str(value or "").split())


def admin_html(req, approve_link: str) -> str:
    return f"""
      <div style="font-family:Arial,sans-serif">
        <h2>New Resume Request</h2>
        <div style="background:#f1f5f9;padding:12px;border-radius:8px;">
          <p><strong>Name:</strong> {escape(req.name)}</p>
          <p><strong>Email:</strong> {escape(req.email)}</p>
          <p><strong>Reason:</strong> {escape(req.reason)}</p>
        </div>
        <p style="margin-top:12px">
          <a href="{escape(approve_link)}" style="display:inline-block;padding:10px 16px;background:#ff6b6b;color:white;border-radius:6px;text-decoration:none;">Approve Request</a>
        </p>
      </div>
    """


def requester_html(req, download_link: str, validity_minutes: int) -> str:
    return f"""
      <div style="font-family:Arial,sans-serif">
        <h2 style="color:#4B6CB7">Request Approved</h2>
        <div style="background:#f1f5f9;padding:12px;border-radius:8px;">
          <p><strong>Name:</strong> {escape(req.name)}</p>
          <p><strong>Email:</strong> {escape(req.email)}</p>
          <p><strong>Reason:</strong> {escape(req.reason or "N/A")}</p>
        </div>
        <p style="margin-top:12px">
          <a href="{escape(download_link)}" style="display:inline-block;padding:12px 18px;background:linear-gradient(90deg,#4B6CB7,#182848);color:#fff;border-radius:8px;text-decoration:none;font-weight:bold;">Download Resume</a>
        </p>
        <p style="font-size:12px;color:#666">Link valid for {validity_minutes} minutes.</p>
      </div>
    """


class Mailer:
    """SMTP notifications. Every failure is raised as NotificationError."""

    def __init__(self, cfg: dict, admin_email=None):
        self.cfg = cfg
        self.admin_email = admin_email

    @classmethod
    def from_config(cls, config):
        return cls(smtp_config(config), admin_email=config.get("ADMIN_EMAIL"))

    def is_configured(self) -> bool:
        cfg = self.cfg
        return all([cfg["host"], cfg["port"], cfg["user"], cfg["password"], cfg["sender"]])

    def build_message(self, to_email: str, subject: str, html=None, text=None) -> EmailMessage:
        from_header = self.cfg["sender"]
        if self.cfg["alias"]:
            from_header = f"{self.cfg['alias']} <{self.cfg['sender']}>"

        # Header values come from user input; malformed ones are a notification failure.
        try:
            message = EmailMessage()
            message["From"] = from_header
            message["To"] = to_email
            message["Subject"] = _one_line(subject)
            if html is not None:
                message.set_content(text or "This message requires an HTML capable mail client.")
                message.add_alternative(html, subtype="html")
            else:
                message.set_content(text or "")
        except (ValueError, TypeError) as exc:
            raise NotificationError(f"Cannot build message for {to_email!r}: {exc}") from exc
        return message

    def send(self, message: EmailMessage):
        cfg = self.cfg
        if not self.is_configured():
            raise NotificationError("SMTP not configured")
        try:
            context = ssl.create_default_context()
            with smtplib.SMTP(cfg["host"], cfg["port"], timeout=30) as server:
                if cfg["use_tls"]:
                    server.starttls(context=context)
                server.login(cfg["user"], cfg["password"])
                server.send_message(message)
        except (smtplib.SMTPException, OSError, ValueError, MessageError) as exc:
            raise NotificationError(str(exc)) from exc

    def notify_admin(self, req, approve_link: str) -> bool:
        """Send the approval link to ADMIN_EMAIL. Returns False when no admin is configured."""
        if not self.admin_email:
            logger.warning("ADMIN_EMAIL not set; admin notification skipped for request %s", req.id)
            return False
        message = self.build_message(
            self.admin_email,
            f"New Resume Request: {req.name}",
            html=admin_html(req, approve_link),
            text=f"{req.name} <{req.email}> requested your resume.\nApprove: {approve_link}\n",
        )
        self.send(message)
        return True

    def notify_requester(self, req, download_link: str, validity_minutes: int) -> bool:
        if not req.email:
            logger.warning("No email for request %s; user notification skipped", req.id)
            return False
        message = self.build_message(
            req.email,
            "Your Resume Request is Approved!",
            html=requester_html(req, download_link, validity_minutes),
            text=f"Download: {download_link}\nLink valid for {validity_minutes} minutes.\n",
        )
        self.send(message)
        return True

    def send_test(self, to_email=None):
        to_email = to_email or self.cfg["user"]
        message = self.build_message(
            to_email,
            "SMTP Test",
            text="SMTP test successful. Resume Gate is ready for email sending.",
        )
        self.send(message)
        return to_email
