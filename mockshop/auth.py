import base64
import binascii
import hmac

from flask import current_app, request

from .errors import ApiError

PUBLIC_ROUTES = ("/api/docs", "/api-spec.json")
ADMIN_PREFIX = "/api/admin/"
BASIC_FORMAT = {"required_format": "Basic base64(username:password)"}


def is_public(path: str) -> bool:
    return any(path == route or path.startswith(route + "/") for route in PUBLIC_ROUTES)


def _check_basic_auth():
    header = request.headers.get("Authorization", "")
    if not header.startswith("Basic "):
        raise ApiError("UNAUTHORIZED", "Missing or invalid Authorization header", BASIC_FORMAT)
    try:
        decoded = base64.b64decode(header.split(" ", 1)[1], validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise ApiError("UNAUTHORIZED", "Invalid Authorization format", BASIC_FORMAT)

    username, _, password = decoded.partition(":")
    ok_user = hmac.compare_digest(username.encode(), current_app.config["API_USERNAME"].encode())
    ok_pass = hmac.compare_digest(password.encode(), current_app.config["API_PASSWORD"].encode())
    if not (ok_user and ok_pass):
        raise ApiError("UNAUTHORIZED", "Invalid credentials")


def _check_admin_key():
    expected = current_app.config.get("ADMIN_KEY") or ""
    supplied = request.headers.get("X-Admin-Key", "")
    if not expected or not hmac.compare_digest(supplied.encode(), expected.encode()):
        raise ApiError("UNAUTHORIZED", "Valid X-Admin-Key header required for admin operations")


def guard_request():
    """before_request hook: basic auth on /api, admin key for admin routes in production."""
    path = request.path
    if request.method == "OPTIONS" or not path.startswith("/api") or is_public(path):
        return None
    if current_app.config.get("AUTH_ENABLED", True):
        _check_basic_auth()
    if path.startswith(ADMIN_PREFIX) and current_app.config.get("APP_ENV") == "production":
        _check_admin_key()
    return None


def register_auth(app):
    app.before_request(guard_request)
