"""
API documentation.

``/api/docs`` serves the Swagger UI page and ``/api-spec.json`` the OpenAPI
document it loads. The document is built from the registered URL rules, so
it always matches the routes the app actually serves.
"""
import re

from flask import Blueprint, current_app, jsonify, render_template

from ..auth import is_public

bp = Blueprint("docs_api", __name__)

API_TITLE = "E-Commerce Store API"
API_VERSION = "1.0.0"
OPENAPI_URL = "/api-spec.json"

_PATH_ARG = re.compile(r"<(?:[^:<>]+:)?([^<>]+)>")
_HIDDEN_METHODS = {"HEAD", "OPTIONS"}


def _summary(view) -> str:
    doc = (view.__doc__ or "").strip()
    if doc:
        return doc.splitlines()[0]
    return view.__name__.replace("_", " ").capitalize()


def _operation(rule, method: str, view, public: bool) -> dict:
    op = {
        "tags": [rule.endpoint.split(".", 1)[0].removesuffix("_api")],
        "summary": _summary(view),
        "operationId": f"{method.lower()}_{rule.endpoint.replace('.', '_')}",
        "responses": {
            "default": {"description": "JSON envelope: {data, meta} on success, {error} on failure"},
        },
    }
    args = _PATH_ARG.findall(rule.rule)
    if args:
        op["parameters"] = [
            {"name": name, "in": "path", "required": True, "schema": {"type": "string"}}
            for name in args
        ]
    if method in ("POST", "PUT", "PATCH"):
        op["requestBody"] = {
            "required": False,
            "content": {"application/json": {"schema": {"type": "object"}}},
        }
    if public:
        op["security"] = []
    return op


def build_openapi(app) -> dict:
    """OpenAPI 3 document for every route under /api."""
    paths = {}
    for rule in sorted(app.url_map.iter_rules(), key=lambda r: r.rule):
        if not rule.rule.startswith("/api/"):
            continue
        view = app.view_functions[rule.endpoint]
        path = _PATH_ARG.sub(r"{\1}", rule.rule)
        entry = paths.setdefault(path, {})
        for method in sorted(rule.methods - _HIDDEN_METHODS):
            entry[method.lower()] = _operation(rule, method, view, is_public(rule.rule))

    return {
        "openapi": "3.0.3",
        "info": {"title": API_TITLE, "version": API_VERSION},
        "servers": [{"url": "/"}],
        "components": {"securitySchemes": {"basicAuth": {"type": "http", "scheme": "basic"}}},
        "security": [{"basicAuth": []}],
        "paths": paths,
    }


@bp.get("/api/docs")
def swagger_ui():
    """Swagger UI page"""
    return render_template("swagger.html", title=API_TITLE, openapi_url=OPENAPI_URL)


@bp.get(OPENAPI_URL)
def openapi_document():
    """OpenAPI document"""
    return jsonify(build_openapi(current_app))
