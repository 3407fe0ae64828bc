import re

from flask import Blueprint, current_app

from ..errors import ApiError
from ..services.otp_store import create_otp_session, otp_store, verify_otp
from ..utils.generators import random_token
from ..utils.params import json_body, require_fields
from ..utils.responses import success_response

bp = Blueprint("auth_api", __name__)

PHONE_RE = re.compile(r"^\+\d{6,15}$")


@bp.post("/auth/send-otp")
def send_otp():
    payload = json_body()
    require_fields(payload, ["phone_or_email"])
    target = str(payload["phone_or_email"])
    if "@" not in target and not PHONE_RE.match(target):
        raise ApiError("VALIDATION_ERROR",
                       "phone_or_email must be a valid email address or phone number (E.164 format)",
                       {"field": "phone_or_email"})

    session_id, expires_in = create_otp_session(current_app.config.get("OTP_TTL_SECONDS", 300))
    # nothing is actually sent; the code goes to the log for manual testing
    current_app.logger.info("[MOCK] Sending OTP %s to %s", otp_store.code_for(session_id), target)
    return success_response({"otp_session_id": session_id, "expires_in": expires_in})


@bp.post("/auth/verify-otp")
def verify():
    payload = json_body()
    require_fields(payload, ["otp_session_id", "code"])
    valid, reason = verify_otp(payload["otp_session_id"], str(payload["code"]))
    if not valid:
        raise ApiError("VALIDATION_ERROR", reason or "Invalid OTP")
    return success_response({"success": True, "token": f"mock_jwt_{random_token(16)}"})
