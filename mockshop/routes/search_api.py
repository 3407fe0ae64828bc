from flask import Blueprint, request

from ..errors import ApiError
from ..services.categories import search_categories
from ..services.products import search_products
from ..utils.params import float_arg, page_args
from ..utils.responses import result_response, success_response

bp = Blueprint("search_api", __name__)


def _required(name: str) -> str:
    value = (request.args.get(name) or "").strip()
    if not value:
        raise ApiError("VALIDATION_ERROR", f"{name} parameter is required", {"parameter": name})
    return value


@bp.get("/search/products")
def search_product_catalogue():
    text = _required("query")
    page, limit = page_args()
    return success_response(search_products(
        text,
        category=request.args.get("category") or None,
        price_min=float_arg("price_min"),
        price_max=float_arg("price_max"),
        sort=request.args.get("sort"),
        page=page,
        limit=limit,
    ))


@bp.get("/search/categories")
def search_category_list():
    text = _required("q")
    page, limit = page_args(default_limit=10)
    return result_response(search_categories(text, page=page, limit=limit))
