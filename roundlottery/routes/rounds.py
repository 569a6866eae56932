from __future__ import annotations

from flask import Blueprint, jsonify

from ..engine import StaticAuthorizer
from ..extensions import get_service
from ..schemas import AuditResponse, ResultsResponse, RoundSummaryResponse

bp = Blueprint("rounds", __name__)


@bp.get("/current")
def current_round():
    summary = get_service().current_round()
    return jsonify(RoundSummaryResponse(**summary).dict())


@bp.get("/<int:round_id>/results")
def check_results(round_id: int):
    # Results are public; no identity is needed.
    numbers = get_service().check_results(StaticAuthorizer(), round_id)
    return jsonify(ResultsResponse(round_id=round_id, winning_numbers=list(numbers)).dict())


@bp.get("/<int:round_id>/audit")
def audit(round_id: int):
    result = get_service().verify_draw(round_id)
    response = AuditResponse(
        round_id=result.round_id,
        seed=str(result.seed),
        generator=result.generator,
        recorded=list(result.recorded),
        replayed=list(result.replayed),
        verified=result.verified,
    )
    return jsonify(response.dict())


@bp.get("/<int:round_id>/payouts")
def payouts(round_id: int):
    return jsonify(get_service().payouts(round_id))
