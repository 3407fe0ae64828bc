from flask import current_app
from werkzeug.exceptions import HTTPException

from .errors import ApiError, BackendIOError, DuplicateKeyError, UnsupportedOperation
from .utils.responses import error_response

_HTTP_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def _api_error(err: ApiError):
    return error_response(err.code, err.message, err.details)


def _unsupported(err: UnsupportedOperation):
    return error_response(
        "WRITE_NOT_ENABLED",
        "Write operations are disabled while serving static snapshot data",
        {"collection": err.collection, "operation": err.operation},
    )


def _duplicate(err: DuplicateKeyError):
    return error_response(
        "RESOURCE_EXISTS",
        f"A {err.collection} record with this {err.field} already exists",
        {"field": err.field, "value": err.value},
    )


def _backend_io(err: BackendIOError):
    current_app.logger.exception("Storage failure on %s (%s)", err.collection, err.operation)
    return error_response("INTERNAL_SERVER_ERROR", "Storage backend failure",
                          {"collection": err.collection, "operation": err.operation})


def _http_error(err: HTTPException):
    code = _HTTP_CODES.get(err.code, "INTERNAL_SERVER_ERROR")
    response, _ = error_response(code, err.description or err.name)
    return response, err.code


def _unexpected(err: Exception):
    current_app.logger.exception("Unhandled error")
    return error_response("INTERNAL_SERVER_ERROR", "An unexpected error occurred")


def register_error_handlers(app):
    app.register_error_handler(ApiError, _api_error)
    app.register_error_handler(UnsupportedOperation, _unsupported)
    app.register_error_handler(DuplicateKeyError, _duplicate)
    app.register_error_handler(BackendIOError, _backend_io)
    app.register_error_handler(HTTPException, _http_error)
    app.register_error_handler(Exception, _unexpected)
