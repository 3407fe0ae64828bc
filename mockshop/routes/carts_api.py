from datetime import timedelta

from flask import Blueprint, request

from ..errors import ApiError
from ..services.entity_services import cart_service, customer_service, product_service
from ..utils.generators import to_iso, utc_now
from ..utils.params import json_body, page_args, require_fields
from ..utils.queries import build_query
from ..utils.responses import created_response, not_found, result_response, success_response
from .orders_api import check_stock

bp = Blueprint("carts_api", __name__)

CART_TTL = timedelta(hours=24)


def _cart_or_404(cart_id: str):
    cart = cart_service.get_by_id(cart_id)
    if cart is None:
        raise not_found("cart", cart_id)
    return cart


def cart_total(items) -> float:
    return round(sum(i["price"]["amount"] * i["quantity"] for i in items), 2)


def _save_items(cart: dict, items):
    currency = (cart.get("total_amount") or {}).get("currency", "USD")
    return cart_service.update(cart["id"], {
        "items": items,
        "total_amount": {"amount": cart_total(items), "currency": currency},
    })


@bp.get("/carts")
def list_carts():
    page, limit = page_args()
    query = build_query(exact={"customer_id": request.args.get("customer_id")})
    return result_response(cart_service.get_all({**query, "page": page, "limit": limit}))


@bp.post("/carts")
def create_cart():
    payload = request.get_json(silent=True) or {}
    customer_id = payload.get("customer_id")
    if customer_id:
        existing = cart_service.find_one({"customer_id": customer_id})
        if existing:
            raise ApiError("RESOURCE_EXISTS", f"Customer with ID '{customer_id}' already has a cart",
                           {"customer_id": customer_id, "cart_id": existing["id"]})
        if customer_service.get_by_id(customer_id) is None:
            raise not_found("customer", customer_id)

    cart = cart_service.create({
        "customer_id": customer_id,
        "items": [],
        "total_amount": {"amount": 0, "currency": "USD"},
        "expires_at": to_iso(utc_now() + CART_TTL),
    })
    return created_response(cart)


@bp.get("/carts/<cart_id>")
def get_cart(cart_id):
    return success_response(_cart_or_404(cart_id))


@bp.delete("/carts/<cart_id>")
def delete_cart(cart_id):
    _cart_or_404(cart_id)
    cart_service.delete(cart_id)
    return success_response({"message": "Cart deleted successfully"})


@bp.get("/carts/<cart_id>/items")
def list_cart_items(cart_id):
    return success_response(_cart_or_404(cart_id).get("items") or [])


@bp.post("/carts/<cart_id>/items")
def add_cart_item(cart_id):
    cart = _cart_or_404(cart_id)
    payload = json_body()
    require_fields(payload, ["product_id", "quantity"])
    quantity = payload["quantity"]
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
        raise ApiError("VALIDATION_ERROR", "quantity must be a positive integer", {"field": "quantity"})
    product = product_service.get_by_id(payload["product_id"])
    if product is None:
        raise not_found("product", payload["product_id"])

    items = list(cart.get("items") or [])
    price = {"amount": product["price"]["amount"], "currency": product["price"].get("currency", "USD")}
    existing = next((i for i in items if i.get("product_id") == product["id"]), None)
    if existing is None:
        check_stock(product, quantity)
        items.append({
            "id": f"item_{len(items) + 1:03d}",
            "product_id": product["id"],
            "quantity": quantity,
            "price": price,
        })
    else:
        check_stock(product, quantity, already=existing["quantity"])
        existing["quantity"] += quantity
        existing["price"] = price
    return success_response(_save_items(cart, items))


@bp.delete("/carts/<cart_id>/items")
def clear_cart_items(cart_id):
    return success_response(_save_items(_cart_or_404(cart_id), []))
