from flask import Blueprint, request

from ..errors import ApiError
from ..services.entity_services import product_service, review_service
from ..services.products import get_all_products
from ..utils.params import int_arg, json_body, page_args, require_fields, sort_args
from ..utils.queries import build_query
from ..utils.responses import created_response, not_found, result_response, success_response

bp = Blueprint("products_api", __name__)

REQUIRED_PRODUCT_FIELDS = ["name", "description", "price", "category"]
REVIEW_SORTS = {
    "helpful": ("helpful_votes", "desc"),
    "recent": ("created_at", "desc"),
    "rating_high": ("rating", "desc"),
    "rating_low": ("rating", "asc"),
}


def _product_or_404(product_id: str):
    product = product_service.get_by_id(product_id)
    if product is None:
        raise not_found("product", product_id)
    return product


def _normalize_price(payload: dict, current=None):
    # bare numbers become {amount, currency}; partial dicts merge over the stored price
    price = payload.get("price")
    base = current if isinstance(current, dict) else {"currency": "USD"}
    if isinstance(price, (int, float)) and not isinstance(price, bool):
        payload["price"] = {**base, "amount": price}
    elif isinstance(price, dict):
        payload["price"] = {**base, **price}


@bp.get("/products")
def list_products():
    page, limit = page_args(default_limit=10)
    sort_by, sort_order = sort_args()
    result = get_all_products(
        page=page,
        limit=limit,
        category=request.args.get("category") or None,
        search=request.args.get("search") or None,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return result_response(result)


@bp.post("/products")
def create_product():
    payload = json_body()
    require_fields(payload, REQUIRED_PRODUCT_FIELDS)
    _normalize_price(payload)
    payload.setdefault("in_stock", bool(payload.get("stock_quantity", 0)))
    payload.setdefault("stock_quantity", 0)
    payload.setdefault("images", [])
    payload.setdefault("tags", [])
    payload.setdefault("rating", 0)
    payload.setdefault("review_count", 0)
    return created_response(product_service.create(payload))


@bp.get("/products/<product_id>")
def get_product(product_id):
    return success_response(_product_or_404(product_id))


@bp.put("/products/<product_id>")
def update_product(product_id):
    product = _product_or_404(product_id)
    payload = json_body()
    _normalize_price(payload, product.get("price"))
    return success_response(product_service.update(product_id, payload))


@bp.delete("/products/<product_id>")
def delete_product(product_id):
    _product_or_404(product_id)
    product_service.delete(product_id)
    return success_response({"message": "Product deleted successfully"})


@bp.get("/products/<product_id>/reviews")
def list_product_reviews(product_id):
    _product_or_404(product_id)
    page, limit = page_args()
    rating = {"$gte": int_arg("rating_min", 0), "$lte": int_arg("rating_max", 5)}
    sort_by, sort_order = REVIEW_SORTS.get(request.args.get("sort"), ("created_at", "desc"))
    query = build_query(
        exact={"product_id": product_id},
        ci={"status": request.args.get("status")},
        rating=rating,
    )
    result = review_service.get_all({
        **query, "page": page, "limit": limit, "sort_by": sort_by, "sort_order": sort_order,
    })
    return result_response(result)


@bp.post("/products/<product_id>/reviews")
def create_product_review(product_id):
    _product_or_404(product_id)
    payload = json_body()
    require_fields(payload, ["customer_id", "rating", "content"])
    rating = payload["rating"]
    if not isinstance(rating, (int, float)) or isinstance(rating, bool) or not 1 <= rating <= 5:
        raise ApiError("VALIDATION_ERROR", "Rating must be between 1 and 5",
                       {"field": "rating", "value": rating, "allowed_range": "1-5"})

    review = review_service.create({
        "product_id": product_id,
        "customer_id": payload["customer_id"],
        "rating": rating,
        "title": payload.get("title", ""),
        "content": payload["content"],
        "images": payload.get("images", []),
        "verified_purchase": bool(payload.get("verified_purchase", False)),
        "helpful_votes": 0,
        "status": "PENDING",
    })
    return created_response(review)
