from flask import Blueprint, request

from ..services.entity_services import customer_service, support_ticket_service
from ..utils.params import json_body, page_args, require_choice, require_fields
from ..utils.queries import build_query
from ..utils.responses import created_response, not_found, result_response, success_response

bp = Blueprint("support_api", __name__)

TICKET_STATUSES = ["OPEN", "IN_PROGRESS", "RESOLVED", "CLOSED"]
TICKET_PRIORITIES = ["LOW", "MEDIUM", "HIGH"]


def _ticket_or_404(ticket_id: str):
    ticket = support_ticket_service.get_by_id(ticket_id)
    if ticket is None:
        raise not_found("support ticket", ticket_id)
    return ticket


@bp.get("/support/tickets")
def list_tickets():
    page, limit = page_args()
    query = build_query(
        exact={"customer_id": request.args.get("customer_id")},
        ci={"status": request.args.get("status"), "priority": request.args.get("priority")},
    )
    return result_response(support_ticket_service.get_all({**query, "page": page, "limit": limit}))


@bp.post("/support/tickets")
def create_ticket():
    payload = json_body()
    require_fields(payload, ["customer_id", "subject", "message"])
    require_choice(payload, "priority", TICKET_PRIORITIES)
    if customer_service.get_by_id(payload["customer_id"]) is None:
        raise not_found("customer", payload["customer_id"])

    ticket = {
        "customer_id": payload["customer_id"],
        "subject": payload["subject"],
        "message": payload["message"],
        "status": "OPEN",
        "priority": payload.get("priority") or "MEDIUM",
    }
    if payload.get("order_id"):
        ticket["order_id"] = payload["order_id"]
    return created_response(support_ticket_service.create(ticket))


@bp.get("/support/tickets/<ticket_id>")
def get_ticket(ticket_id):
    return success_response(_ticket_or_404(ticket_id))


@bp.put("/support/tickets/<ticket_id>")
def update_ticket(ticket_id):
    _ticket_or_404(ticket_id)
    payload = json_body()
    require_choice(payload, "status", TICKET_STATUSES)
    require_choice(payload, "priority", TICKET_PRIORITIES)
    changes = {f: payload[f] for f in ("subject", "message", "status", "priority", "order_id")
               if payload.get(f) is not None}
    return success_response(support_ticket_service.update(ticket_id, changes))


@bp.delete("/support/tickets/<ticket_id>")
def delete_ticket(ticket_id):
    _ticket_or_404(ticket_id)
    support_ticket_service.delete(ticket_id)
    return success_response({"message": "Support ticket deleted successfully"})
