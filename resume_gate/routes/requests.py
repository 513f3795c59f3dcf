import io
import logging

from flask import Blueprint, current_app, jsonify, request, send_file
from markupsafe import escape

from resume_gate import limiter
from resume_gate.errors import ResumeGateError, ValidationError
from resume_gate.forms import ResumeRequestForm

logger = logging.getLogger(__name__)

requests_bp = Blueprint("requests", __name__)


def get_lifecycle():
    return current_app.extensions["resume_gate"]


def _submit_limit():
    return current_app.config["SUBMIT_RATE_LIMIT"]


def _html(body: str) -> str:
    return f"<html><body>{body}</body></html>"


# ---------- SUBMIT ----------
@requests_bp.route("/request-resume", methods=["POST"])
@limiter.limit(_submit_limit)
def request_resume():
    try:
        if request.is_json and not isinstance(request.get_json(silent=True), dict):
            raise ValidationError()

        form = ResumeRequestForm()
        if not form.validate():
            raise ValidationError(missing=form.missing_fields())

        request_id = get_lifecycle().submit(
            str(form.name.data), str(form.email.data), str(form.reason.data)
        )
        return jsonify({"message": "Request submitted", "id": request_id}), 201
    except ResumeGateError as exc:
        if exc.status_code >= 500:
            logger.error("request-resume error: %s", exc)
        return jsonify({"message": exc.message}), exc.status_code
    except Exception:
        logger.exception("request-resume error")
        return jsonify({"message": "Server error"}), 500


# ---------- STATUS ----------
@requests_bp.route("/request-status/<path:email>")
def request_status(email):
    try:
        view = get_lifecycle().get_status(email)
        if view.id is None:
            return jsonify({"status": view.status})
        return jsonify({
            "status": view.status,
            "id": view.id,
            "approved_at": view.approved_at.isoformat() if view.approved_at else None,
        })
    except Exception:
        logger.exception("request-status error")
        return jsonify({"status": "error", "message": "Server error"}), 500


# ---------- APPROVE (admin link) ----------
@requests_bp.route("/admin-approve/<int:request_id>")
def admin_approve(request_id):
    try:
        confirmation = get_lifecycle().approve(request_id)
        return _html(f"<h3>Request approved.</h3><p>{escape(confirmation)}</p>")
    except ResumeGateError as exc:
        if exc.status_code >= 500:
            logger.error("admin-approve error: %s", exc)
            return "Server error", 500
        return exc.message, exc.status_code
    except Exception:
        logger.exception("admin-approve error")
        return "Server error", 500


# ---------- DOWNLOAD ----------
@requests_bp.route("/download-resume/<int:request_id>")
def download_resume(request_id):
    try:
        document = get_lifecycle().download(request_id)
        return send_file(
            io.BytesIO(document.data),
            mimetype=document.mimetype,
            as_attachment=True,
            download_name=document.filename,
        )
    except ResumeGateError as exc:
        if exc.status_code >= 500:
            logger.error("download-resume error: %s", exc)
            return "Server error", 500
        return exc.message, exc.status_code
    except Exception:
        logger.exception("download-resume error")
        return "Server error", 500
