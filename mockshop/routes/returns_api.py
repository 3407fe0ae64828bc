from flask import Blueprint, request

from ..errors import ApiError
from ..services.entity_services import customer_service, order_service, return_service
from ..utils.params import json_body, page_args, require_fields
from ..utils.queries import build_query
from ..utils.responses import created_response, not_found, result_response, success_response

bp = Blueprint("returns_api", __name__)


def _validate_items(items):
    if not isinstance(items, list) or not items:
        raise ApiError("VALIDATION_ERROR", "items is required and must be a non-empty array", {"field": "items"})
    for item in items:
        if not isinstance(item, dict) or not item.get("product_id"):
            raise ApiError("VALIDATION_ERROR", "product_id is required for each item", {"field": "items"})
        quantity = item.get("quantity")
        if not isinstance(quantity, (int, float)) or quantity <= 0:
            raise ApiError("VALIDATION_ERROR", "quantity is required and must be greater than 0", {"field": "items"})
        if not item.get("reason"):
            raise ApiError("VALIDATION_ERROR", "reason is required for each item", {"field": "items"})


@bp.get("/returns")
def list_returns():
    page, limit = page_args()
    query = build_query(
        exact={"customer_id": request.args.get("customer_id"), "order_id": request.args.get("order_id")},
        ci={"status": request.args.get("status")},
    )
    return result_response(return_service.get_all({**query, "page": page, "limit": limit}))


@bp.post("/returns")
def create_return():
    payload = json_body()
    require_fields(payload, ["order_id", "customer_id", "items"])
    _validate_items(payload["items"])

    order = order_service.get_by_id(payload["order_id"])
    if order is None:
        raise not_found("order", payload["order_id"])
    if customer_service.get_by_id(payload["customer_id"]) is None:
        raise not_found("customer", payload["customer_id"])
    if order.get("customer_id") != payload["customer_id"]:
        raise ApiError("VALIDATION_ERROR", "Order does not belong to the specified customer",
                       {"order_id": payload["order_id"], "customer_id": payload["customer_id"]})

    record = {
        "order_id": payload["order_id"],
        "customer_id": payload["customer_id"],
        "items": payload["items"],
        "status": "PENDING",
    }
    if payload.get("refund_amount"):
        record["refund_amount"] = payload["refund_amount"]
    return created_response(return_service.create(record))


@bp.get("/returns/<return_id>")
def get_return(return_id):
    record = return_service.get_by_id(return_id)
    if record is None:
        raise not_found("return", return_id)
    return success_response(record)
