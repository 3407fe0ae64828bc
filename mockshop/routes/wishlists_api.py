from flask import Blueprint, request

from ..errors import ApiError
from ..services.entity_services import customer_service, product_service, wishlist_service
from ..utils.generators import iso_now, prefixed_id
from ..utils.params import flag_arg, json_body, page_args, require_fields
from ..utils.queries import build_query
from ..utils.responses import created_response, not_found, result_response, success_response

bp = Blueprint("wishlists_api", __name__)


def _wishlist_or_404(wishlist_id: str):
    wishlist = wishlist_service.get_by_id(wishlist_id)
    if wishlist is None:
        raise not_found("wishlist", wishlist_id)
    return wishlist


@bp.get("/wishlists")
def list_wishlists():
    page, limit = page_args()
    query = build_query(exact={"customer_id": request.args.get("customer_id")})
    return result_response(wishlist_service.get_all({**query, "page": page, "limit": limit}))


@bp.post("/wishlists")
def create_wishlist():
    payload = json_body()
    require_fields(payload, ["customer_id"])
    customer_id = payload["customer_id"]
    existing = wishlist_service.find_one({"customer_id": customer_id})
    if existing:
        raise ApiError("RESOURCE_EXISTS", "A wishlist already exists for this customer",
                       {"existing_wishlist_id": existing["id"]})
    if customer_service.get_by_id(customer_id) is None:
        raise not_found("customer", customer_id)
    return created_response(wishlist_service.create({"customer_id": customer_id, "items": []}))


@bp.get("/wishlists/<wishlist_id>")
def get_wishlist(wishlist_id):
    return success_response(_wishlist_or_404(wishlist_id))


@bp.delete("/wishlists/<wishlist_id>")
def delete_wishlist(wishlist_id):
    _wishlist_or_404(wishlist_id)
    wishlist_service.delete(wishlist_id)
    return success_response({"message": "Wishlist deleted successfully"})


@bp.get("/wishlists/<wishlist_id>/items")
def list_wishlist_items(wishlist_id):
    return success_response(_wishlist_or_404(wishlist_id).get("items") or [])


@bp.post("/wishlists/<wishlist_id>/items")
def add_wishlist_item(wishlist_id):
    wishlist = _wishlist_or_404(wishlist_id)
    payload = json_body()
    require_fields(payload, ["product_id"])
    product_id = payload["product_id"]
    if product_service.get_by_id(product_id) is None:
        raise not_found("product", product_id)

    items = list(wishlist.get("items") or [])
    if any(item.get("product_id") == product_id for item in items):
        raise ApiError("VALIDATION_ERROR", "Product is already in the wishlist", {"product_id": product_id})
    now = iso_now()
    items.append({
        "id": prefixed_id("item"),
        "product_id": product_id,
        "added_at": now,
        "created_at": now,
        "updated_at": now,
    })
    return success_response(wishlist_service.update(wishlist_id, {"items": items}))


@bp.delete("/wishlists/<wishlist_id>/items")
def remove_wishlist_items(wishlist_id):
    """``?product_id=`` removes one product, ``?clear_all=true`` empties the list."""
    wishlist = _wishlist_or_404(wishlist_id)
    items = list(wishlist.get("items") or [])
    product_id = request.args.get("product_id")

    if flag_arg("clear_all"):
        items = []
    elif product_id:
        if not any(item.get("product_id") == product_id for item in items):
            raise ApiError("VALIDATION_ERROR", "Product not found in the wishlist", {"product_id": product_id})
        items = [item for item in items if item.get("product_id") != product_id]
    else:
        raise ApiError("VALIDATION_ERROR", "Either product_id or clear_all parameter is required")
    return success_response(wishlist_service.update(wishlist_id, {"items": items}))
