from flask import Blueprint, request

from ..errors import ApiError
from ..services.entity_services import customer_service, order_service, product_service
from ..utils.params import json_body, page_args, require_fields
from ..utils.queries import build_query
from ..utils.responses import created_response, not_found, result_response, success_response

bp = Blueprint("orders_api", __name__)

STATUS_TRANSITIONS = {
    "PENDING": ["PROCESSING", "CANCELLED"],
    "PROCESSING": ["SHIPPED", "CANCELLED"],
    "SHIPPED": ["DELIVERED", "CANCELLED"],
    "DELIVERED": [],
    "CANCELLED": [],
}
ITEM_STATUSES = ["PENDING", "SHIPPED", "DELIVERED", "CANCELLED"]


def _order_or_404(order_id: str):
    order = order_service.get_by_id(order_id)
    if order is None:
        raise not_found("order", order_id)
    return order


def check_stock(product: dict, quantity: int, already: int = 0):
    """Raises VALIDATION_ERROR when ``quantity`` more units cannot be supplied."""
    available = product.get("stock_quantity", 0)
    if not product.get("in_stock") or available < quantity + already:
        details = {
            "product_id": product["id"],
            "requested_quantity": quantity,
            "available_quantity": available,
        }
        if already:
            details["current_quantity"] = already
        raise ApiError("VALIDATION_ERROR",
                       f"Product '{product.get('name')}' is not available in the requested quantity", details)


def _order_items(items):
    if not isinstance(items, list) or not items:
        raise ApiError("VALIDATION_ERROR", "Order must contain at least one item", {"field": "items"})

    lines, total = [], 0.0
    for item in items:
        quantity = item.get("quantity") if isinstance(item, dict) else None
        if not isinstance(item, dict) or not item.get("product_id") or not isinstance(quantity, int) \
                or isinstance(quantity, bool) or quantity < 1:
            raise ApiError("VALIDATION_ERROR", "Each item must have a product_id and quantity", {"field": "items"})
        product = product_service.get_by_id(item["product_id"])
        if product is None:
            raise not_found("product", item["product_id"])
        check_stock(product, quantity)

        price = product["price"]
        total += price["amount"] * quantity
        lines.append({
            "id": f"item_{len(lines) + 1}",
            "product_id": product["id"],
            "quantity": quantity,
            "price": {"amount": price["amount"], "currency": price.get("currency", "USD")},
            "status": "PENDING",
        })
    return lines, round(total, 2)


@bp.get("/orders")
def list_orders():
    page, limit = page_args()
    query = build_query(exact={"customer_id": request.args.get("customer_id")},
                        ci={"status": request.args.get("status")})
    return result_response(order_service.get_all({**query, "page": page, "limit": limit}))


@bp.post("/orders")
def create_order():
    payload = json_body()
    require_fields(payload, ["customer_id", "items", "shipping_address"])
    if customer_service.get_by_id(payload["customer_id"]) is None:
        raise not_found("customer", payload["customer_id"])
    items, total = _order_items(payload["items"])

    order = order_service.create({
        "customer_id": payload["customer_id"],
        "status": "PENDING",
        "items": items,
        "total_amount": {"amount": total, "currency": "USD"},
        "shipping_address": payload["shipping_address"],
        "billing_address": payload.get("billing_address") or payload["shipping_address"],
        "payment_method": payload.get("payment_method") or "CREDIT_CARD",
    })
    return created_response(order)


@bp.get("/orders/<order_id>")
def get_order(order_id):
    return success_response(_order_or_404(order_id))


@bp.put("/orders/<order_id>")
def update_order(order_id):
    order = _order_or_404(order_id)
    payload = json_body()
    current = order.get("status")
    status = payload.get("status")
    if status and status != current:
        allowed = STATUS_TRANSITIONS.get(current, [])
        if status not in allowed:
            raise ApiError("VALIDATION_ERROR", f"Invalid status transition from '{current}' to '{status}'", {
                "current_status": current,
                "requested_status": status,
                "allowed_transitions": allowed,
            })

    changes = {k: payload[k] for k in ("status", "tracking_number", "estimated_delivery") if k in payload}
    if isinstance(payload.get("items"), list):
        item_status = {i["id"]: i["status"] for i in payload["items"]
                       if isinstance(i, dict) and i.get("id") and i.get("status") in ITEM_STATUSES}
        if item_status:
            changes["items"] = [
                {**item, "status": item_status.get(item.get("id"), item.get("status"))}
                for item in order.get("items") or []
            ]
    return success_response(order_service.update(order_id, changes))


@bp.delete("/orders/<order_id>")
def delete_order(order_id):
    order = _order_or_404(order_id)
    if order.get("status") != "PENDING":
        raise ApiError("VALIDATION_ERROR", f"Cannot delete order with status '{order.get('status')}'", {
            "current_status": order.get("status"),
            "allowed_status": ["PENDING"],
        })
    order_service.delete(order_id)
    return success_response({"message": "Order deleted successfully"})
