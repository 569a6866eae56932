from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from ..auth import admin_token_valid
from ..extensions import get_service, get_settings, request_authorizer
from ..schemas import (
    BalanceResponse,
    DepositRequest,
    DrawRequest,
    DrawResponse,
    InitializeRequest,
    PoolBalanceResponse,
    RoundConfigRequest,
    RoundCreatedResponse,
)

bp = Blueprint("admin", __name__)


@bp.before_request
def verify_admin():
    if not admin_token_valid(request, get_settings()):
        return jsonify({"error": "unauthorized"}), 401
    return None


@bp.post("/initialize")
def initialize():
    payload = request.get_json(force=True, silent=True) or {}
    data = InitializeRequest(**payload)
    round_id = get_service().initialize(
        request_authorizer(),
        admin=data.admin,
        token=data.token,
        ticket_price=data.ticket_price,
        number_of_numbers=data.number_of_numbers,
        max_range=data.max_range,
        thresholds=data.thresholds,
        min_players_count=data.min_players_count,
    )
    return jsonify(RoundCreatedResponse(round_id=round_id).dict()), 201


@bp.post("/rounds")
def create_round():
    payload = request.get_json(force=True, silent=True) or {}
    data = RoundConfigRequest(**payload)
    round_id = get_service().create_round(
        request_authorizer(),
        ticket_price=data.ticket_price,
        number_of_numbers=data.number_of_numbers,
        max_range=data.max_range,
        thresholds=data.thresholds,
        min_players_count=data.min_players_count,
    )
    return jsonify(RoundCreatedResponse(round_id=round_id).dict()), 201


@bp.post("/draws")
def execute_draw():
    payload = request.get_json(force=True, silent=True) or {}
    data = DrawRequest(**payload)
    report = get_service().execute_draw(request_authorizer(), data.seed)
    current_app.logger.info(
        "Draw for round %s: %s (paid %s)", report.round_id, report.numbers, report.total_paid
    )
    response = DrawResponse(
        round_id=report.round_id,
        seed=str(report.seed),
        winning_numbers=list(report.numbers),
        pool_balance=report.pool_balance,
        total_paid=report.total_paid,
        winners={tier: list(addresses) for tier, addresses in report.winners.items()},
        thresholds=dict(report.thresholds),
        prizes=dict(report.prizes),
    )
    return jsonify(response.dict())


@bp.get("/pool")
def pool_balance():
    service = get_service()
    balance = service.pool_balance(request_authorizer())
    return jsonify(PoolBalanceResponse(pool_identity=service.pool_identity, balance=balance).dict())


@bp.post("/accounts/<identity>/deposit")
def deposit(identity: str):
    payload = request.get_json(force=True, silent=True) or {}
    data = DepositRequest(**payload)
    balance = get_service().deposit(identity, data.amount)
    return jsonify(BalanceResponse(identity=identity, balance=balance).dict())
