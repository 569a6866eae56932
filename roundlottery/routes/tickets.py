from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..auth import claimed_identity
from ..extensions import get_service, request_authorizer
from ..schemas import ParticipantTicketsResponse, TicketPurchaseRequest, TicketPurchaseResponse

bp = Blueprint("tickets", __name__)


@bp.post("")
def purchase_ticket():
    participant = claimed_identity(request)
    if participant is None:
        return jsonify({"error": "X-Lottery-Identity header is required"}), 400

    payload = request.get_json(force=True, silent=True) or {}
    data = TicketPurchaseRequest(**payload)
    round_id, count = get_service().buy_ticket(request_authorizer(), participant, data.numbers)

    response = TicketPurchaseResponse(round_id=round_id, participant=participant, ticket_count=count)
    return jsonify(response.dict()), 201


@bp.post("/register")
def register():
    participant = claimed_identity(request)
    if participant is None:
        return jsonify({"error": "X-Lottery-Identity header is required"}), 400
    get_service().register(request_authorizer(), participant)
    return jsonify({"participant": participant, "registered": True})


@bp.get("/<participant>")
def list_tickets(participant: str):
    round_id, tickets = get_service().participant_tickets(
        participant, request.args.get("round_id", type=int)
    )
    response = ParticipantTicketsResponse(round_id=round_id, participant=participant, tickets=tickets)
    return jsonify(response.dict())
