from flask import Blueprint, request

from ..errors import ApiError
from ..services.entity_services import notification_service
from ..utils.params import flag_arg, page_args
from ..utils.queries import build_query
from ..utils.responses import not_found, result_response, success_response

bp = Blueprint("notifications_api", __name__)


@bp.get("/notifications")
def list_notifications():
    customer_id = request.args.get("customer_id")
    if not customer_id:
        raise ApiError("VALIDATION_ERROR", "customer_id parameter is required", {"parameter": "customer_id"})
    page, limit = page_args()
    read = request.args.get("read")
    query = build_query(
        exact={"customer_id": customer_id},
        ci={"type": request.args.get("type")},
        read=flag_arg("read") if read is not None else None,
    )
    return result_response(notification_service.get_all({**query, "page": page, "limit": limit}))


@bp.post("/notifications/<notification_id>/read")
def mark_notification_read(notification_id):
    updated = notification_service.update(notification_id, {"read": True})
    if updated is None:
        raise not_found("notification", notification_id)
    return success_response(updated)
