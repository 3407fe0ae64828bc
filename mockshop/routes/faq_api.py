import re

from flask import Blueprint, request

from ..errors import ApiError
from ..services.entity_services import faq_service
from ..utils.params import page_args
from ..utils.queries import build_query, text_query
from ..utils.responses import result_response, success_response

bp = Blueprint("faq_api", __name__)

FALLBACK_ANSWER = ("We couldn't find a specific answer to your question. "
                   "Please contact our support team for assistance.")


def score_faq(faq: dict, words) -> int:
    """2 points per keyword in the question, 1 per keyword in the answer; words under 3 chars ignored."""
    question = str(faq.get("question", "")).lower()
    answer = str(faq.get("answer", "")).lower()
    score = 0
    for word in words:
        if len(word) <= 2:
            continue
        if word in question:
            score += 2
        if word in answer:
            score += 1
    return score


def best_answer(faqs, text: str) -> dict:
    words = re.split(r"\s+", text.strip().lower())
    best, best_score = None, 0
    for faq in faqs:
        score = score_faq(faq, words)
        if score > best_score:
            best, best_score = faq, score

    if best is None:
        return {"answer": FALLBACK_ANSWER, "confidence": 0, "source": "Default Response"}
    confidence = min(best_score / (len(words) * 3), 1)
    return {"answer": best.get("answer"), "confidence": round(confidence, 2), "source": f"FAQ {best.get('id')}"}


@bp.get("/faq")
def list_faq():
    page, limit = page_args()
    query = build_query(ci={"category": request.args.get("category")})
    search = request.args.get("search")
    if search:
        query.update(text_query(search, ("question", "answer")))
    # fixture order is the curated reading order
    return result_response(faq_service.get_all({
        **query, "page": page, "limit": limit, "sort_by": "id", "sort_order": "asc",
    }))


@bp.get("/faq/lookup")
def lookup_faq():
    text = request.args.get("query")
    if not text:
        raise ApiError("VALIDATION_ERROR", "query parameter is required", {"parameter": "query"})
    return success_response(best_answer(faq_service.find_all(), text))
