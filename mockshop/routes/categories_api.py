from flask import Blueprint, request

from ..services import categories as category_svc
from ..services.entity_services import category_service
from ..utils.params import json_body, page_args, require_fields, sort_args
from ..utils.responses import created_response, not_found, result_response, success_response

bp = Blueprint("categories_api", __name__)


def _stored_category_or_404(category_id: str):
    category = category_service.get_by_id(category_id)
    if category is None:
        raise not_found("category", category_id)
    return category


@bp.get("/categories")
def list_categories():
    page, limit = page_args(default_limit=10)
    sort_by, sort_order = sort_args()
    result = category_svc.get_all_categories(
        page=page,
        limit=limit,
        parent_id=request.args.get("parent_id") or None,
        search=request.args.get("search") or None,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return result_response(result)


@bp.post("/categories")
def create_category():
    payload = json_body()
    require_fields(payload, ["name", "description", "slug"])
    payload.setdefault("parent_id", None)
    return created_response(category_service.create(payload))


@bp.get("/categories/<category_id>")
def get_category(category_id):
    category = category_svc.get_category(category_id)
    if category is None:
        raise not_found("category", category_id)
    return success_response(category)


@bp.put("/categories/<category_id>")
def update_category(category_id):
    _stored_category_or_404(category_id)
    return success_response(category_service.update(category_id, json_body()))


@bp.delete("/categories/<category_id>")
def delete_category(category_id):
    _stored_category_or_404(category_id)
    category_service.delete(category_id)
    return success_response({"message": "Category deleted successfully"})


@bp.get("/categories/<category_id>/products")
def list_category_products(category_id):
    page, limit = page_args(default_limit=10)
    sort_by, sort_order = sort_args()
    result = category_svc.get_products_for_category(
        category_id, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order,
    )
    if result is None:
        raise not_found("category", category_id)
    return result_response(result)
