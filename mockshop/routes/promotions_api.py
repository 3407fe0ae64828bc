from flask import Blueprint, request

from ..errors import ApiError
from ..services.entity_services import promotion_service
from ..utils.generators import iso_now
from ..utils.params import flag_arg, json_body, page_args, require_choice, require_fields
from ..utils.queries import build_query
from ..utils.responses import created_response, not_found, result_response, success_response

bp = Blueprint("promotions_api", __name__)

PROMOTION_TYPES = ["PERCENTAGE", "FIXED_AMOUNT", "BUY_X_GET_Y"]
PROMOTION_FIELDS = [
    "name", "description", "type", "value", "start_date", "end_date",
    "applicable_products", "min_purchase_amount", "max_discount_amount",
]


def _promotion_or_404(promotion_id: str):
    promotion = promotion_service.get_by_id(promotion_id)
    if promotion is None:
        raise not_found("promotion", promotion_id)
    return promotion


@bp.get("/promotions")
def list_promotions():
    page, limit = page_args()
    extra = {}
    if flag_arg("active"):
        now = iso_now()
        extra = {"start_date": {"$lte": now}, "end_date": {"$gte": now}}
    query = build_query(
        exact={"applicable_products": request.args.get("product_id")},
        ci={"type": request.args.get("type")},
        **extra,
    )
    return result_response(promotion_service.get_all({
        **query, "page": page, "limit": limit, "sort_by": "start_date",
    }))


@bp.post("/promotions")
def create_promotion():
    payload = json_body()
    require_fields(payload, ["name", "type", "start_date", "end_date"])
    require_choice(payload, "type", PROMOTION_TYPES)
    if payload.get("value") is None:
        raise ApiError("VALIDATION_ERROR", "value is required", {"field": "value"})
    if not isinstance(payload.get("applicable_products"), list):
        raise ApiError("VALIDATION_ERROR", "applicable_products is required and must be an array",
                       {"field": "applicable_products"})

    promotion = {f: payload.get(f) for f in PROMOTION_FIELDS if payload.get(f) is not None}
    promotion.setdefault("description", "")
    return created_response(promotion_service.create(promotion))


@bp.get("/promotions/<promotion_id>")
def get_promotion(promotion_id):
    return success_response(_promotion_or_404(promotion_id))


@bp.put("/promotions/<promotion_id>")
def update_promotion(promotion_id):
    _promotion_or_404(promotion_id)
    payload = json_body()
    require_choice(payload, "type", PROMOTION_TYPES)
    changes = {f: payload[f] for f in PROMOTION_FIELDS if payload.get(f) is not None}
    return success_response(promotion_service.update(promotion_id, changes))


@bp.delete("/promotions/<promotion_id>")
def delete_promotion(promotion_id):
    _promotion_or_404(promotion_id)
    promotion_service.delete(promotion_id)
    return success_response({"message": "Promotion deleted successfully"})
