from datetime import timedelta

from flask import Blueprint, request

from ..errors import ApiError
from ..services.entity_services import (
    cart_service,
    customer_service,
    notification_service,
    order_service,
    product_service,
    return_service,
    review_service,
    support_ticket_service,
    wishlist_service,
)
from ..services.loyalty import loyalty_summary
from ..utils.generators import iso_now, prefixed_id, to_iso, utc_now
from ..utils.params import flag_arg, int_arg, json_body, page_args, require_choice, require_fields
from ..utils.queries import build_query, text_query
from ..utils.responses import created_response, not_found, result_response, success_response

bp = Blueprint("customers_api", __name__)

ADDRESS_FIELDS = ["street", "city", "state", "zip", "country", "type"]
ADDRESS_TYPES = ["SHIPPING", "BILLING"]
CUSTOMER_TIERS = ["BRONZE", "SILVER", "GOLD", "PLATINUM"]


def _customer_or_404(customer_id: str):
    customer = customer_service.get_by_id(customer_id)
    if customer is None:
        raise not_found("customer", customer_id)
    return customer


def _list(service, query):
    page, limit = page_args()
    return result_response(service.get_all({**query, "page": page, "limit": limit}))


@bp.get("/customers")
def list_customers():
    query = build_query(ci={"tier": request.args.get("tier")})
    search = request.args.get("search")
    if search:
        query.update(text_query(search, ("name", "email")))
    return _list(customer_service, query)


@bp.post("/customers")
def create_customer():
    payload = json_body()
    require_fields(payload, ["email", "name"])
    require_choice(payload, "tier", CUSTOMER_TIERS)
    if customer_service.find_one({"email": payload["email"]}):
        raise ApiError("RESOURCE_EXISTS", "A customer with this email already exists", {"email": payload["email"]})

    prefs = payload.get("preferences") or {}
    customer = customer_service.create({
        "email": payload["email"],
        "name": payload["name"],
        "phone": payload.get("phone", ""),
        "addresses": payload.get("addresses", []),
        "preferences": {
            "language": prefs.get("language") or "en",
            "currency": prefs.get("currency") or "USD",
            "marketing_emails": prefs.get("marketing_emails", True),
        },
        "loyalty_points": payload.get("loyalty_points", 0),
        "tier": payload.get("tier") or "BRONZE",
    })
    return created_response(customer)


@bp.get("/customers/<customer_id>")
def get_customer(customer_id):
    return success_response(_customer_or_404(customer_id))


@bp.put("/customers/<customer_id>")
def update_customer(customer_id):
    customer = _customer_or_404(customer_id)
    payload = json_body()
    require_choice(payload, "tier", CUSTOMER_TIERS)
    # email is the login identity and stays fixed
    payload.pop("email", None)
    if isinstance(payload.get("preferences"), dict):
        payload["preferences"] = {**(customer.get("preferences") or {}), **payload["preferences"]}
    return success_response(customer_service.update(customer_id, payload))


@bp.delete("/customers/<customer_id>")
def delete_customer(customer_id):
    _customer_or_404(customer_id)
    customer_service.delete(customer_id)
    return success_response({"message": "Customer deleted successfully"})


# --- addresses ------------------------------------------------------------

def _validated_address(payload: dict) -> dict:
    require_fields(payload, ADDRESS_FIELDS)
    if payload["type"] not in ADDRESS_TYPES:
        raise ApiError("VALIDATION_ERROR", "Invalid address type", {"allowed_values": ADDRESS_TYPES})
    return {f: payload[f] for f in ADDRESS_FIELDS}


def _find_address(customer: dict, address_id: str) -> int:
    for index, address in enumerate(customer.get("addresses") or []):
        if address.get("id") == address_id:
            return index
    raise not_found("address", address_id)


def _clear_defaults(addresses, address_type, keep_id=None):
    return [
        {**a, "is_default": False} if a.get("type") == address_type and a.get("id") != keep_id else a
        for a in addresses
    ]


@bp.get("/customers/<customer_id>/addresses")
def list_addresses(customer_id):
    return success_response(_customer_or_404(customer_id).get("addresses") or [])


@bp.post("/customers/<customer_id>/addresses")
def add_address(customer_id):
    customer = _customer_or_404(customer_id)
    payload = json_body()
    address = _validated_address(payload)
    address["id"] = prefixed_id("addr")
    address["is_default"] = bool(payload.get("is_default", False))

    addresses = list(customer.get("addresses") or [])
    if address["is_default"]:
        addresses = _clear_defaults(addresses, address["type"])
    addresses.append(address)
    customer_service.update(customer_id, {"addresses": addresses})
    return created_response(address)


@bp.get("/customers/<customer_id>/addresses/<address_id>")
def get_address(customer_id, address_id):
    customer = _customer_or_404(customer_id)
    return success_response(customer["addresses"][_find_address(customer, address_id)])


@bp.put("/customers/<customer_id>/addresses/<address_id>")
def update_address(customer_id, address_id):
    customer = _customer_or_404(customer_id)
    index = _find_address(customer, address_id)
    payload = json_body()
    address = _validated_address(payload)
    addresses = list(customer["addresses"])
    address["id"] = address_id
    address["is_default"] = bool(payload.get("is_default", addresses[index].get("is_default", False)))

    if address["is_default"]:
        addresses = _clear_defaults(addresses, address["type"], keep_id=address_id)
    addresses[index] = address
    customer_service.update(customer_id, {"addresses": addresses})
    return success_response(address)


@bp.delete("/customers/<customer_id>/addresses/<address_id>")
def delete_address(customer_id, address_id):
    customer = _customer_or_404(customer_id)
    index = _find_address(customer, address_id)
    addresses = list(customer["addresses"])
    del addresses[index]
    customer_service.update(customer_id, {"addresses": addresses})
    return success_response({"message": "Address deleted successfully"})


# --- related collections ----------------------------------------------------

@bp.get("/customers/<customer_id>/orders")
def list_customer_orders(customer_id):
    _customer_or_404(customer_id)
    page, limit = page_args()
    result = order_service.get_all({
        **build_query(exact={"customer_id": customer_id}, ci={"status": request.args.get("status")}),
        "page": page,
        "limit": limit,
    })
    names = {}
    for order in result.items:
        for item in order.get("items") or []:
            pid = item.get("product_id")
            if pid not in names:
                product = product_service.get_by_id(pid)
                names[pid] = product["name"] if product else "Unknown Product"
            item["product_name"] = names[pid]
    return result_response(result)


@bp.get("/customers/<customer_id>/reviews")
def list_customer_reviews(customer_id):
    _customer_or_404(customer_id)
    rating = {"$gte": int_arg("rating_min", 0), "$lte": int_arg("rating_max", 5)}
    return _list(review_service, build_query(
        exact={"customer_id": customer_id, "product_id": request.args.get("product_id")},
        ci={"status": request.args.get("status")},
        rating=rating,
    ))


@bp.get("/customers/<customer_id>/cart")
def get_customer_cart(customer_id):
    _customer_or_404(customer_id)
    cart = cart_service.find_one({"customer_id": customer_id})
    if cart is None:
        now = iso_now()
        # placeholder only; nothing is stored until a cart is created
        cart = {
            "id": prefixed_id("cart"),
            "customer_id": customer_id,
            "items": [],
            "total_amount": {"amount": 0, "currency": "USD"},
            "expires_at": to_iso(utc_now() + timedelta(days=30)),
            "created_at": now,
            "updated_at": now,
        }
    return success_response(cart)


@bp.get("/customers/<customer_id>/wishlist")
def get_customer_wishlist(customer_id):
    _customer_or_404(customer_id)
    wishlist = wishlist_service.find_one({"customer_id": customer_id})
    if wishlist is None:
        now = iso_now()
        wishlist = {
            "id": prefixed_id("wish"),
            "customer_id": customer_id,
            "items": [],
            "created_at": now,
            "updated_at": now,
        }
    return success_response(wishlist)


@bp.get("/customers/<customer_id>/returns")
def list_customer_returns(customer_id):
    _customer_or_404(customer_id)
    return _list(return_service, build_query(
        exact={"customer_id": customer_id, "order_id": request.args.get("order_id")},
        ci={"status": request.args.get("status")},
    ))


@bp.get("/customers/<customer_id>/notifications")
def list_customer_notifications(customer_id):
    _customer_or_404(customer_id)
    read = request.args.get("read")
    return _list(notification_service, build_query(
        exact={"customer_id": customer_id},
        ci={"type": request.args.get("type")},
        read=flag_arg("read") if read is not None else None,
    ))


@bp.get("/customers/<customer_id>/support-tickets")
def list_customer_tickets(customer_id):
    _customer_or_404(customer_id)
    return _list(support_ticket_service, build_query(
        exact={"customer_id": customer_id},
        ci={"status": request.args.get("status"), "priority": request.args.get("priority")},
    ))


@bp.get("/customers/<customer_id>/loyalty")
def get_customer_loyalty(customer_id):
    return success_response(loyalty_summary(_customer_or_404(customer_id)))
