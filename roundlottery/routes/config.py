from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify

from ..auth import ADMIN_TOKEN_HEADER, IDENTITY_HEADER, SIGNATURE_HEADER, proof_message
from ..engine import DEFAULT_GENERATORS
from ..extensions import get_service, get_settings

bp = Blueprint("config", __name__)


def _public_config() -> Dict[str, Any]:
    settings = get_settings()
    service = get_service()
    payload: Dict[str, Any] = {
        "pool_identity": service.pool_identity,
        "generator": service.generator_key,
        "available_generators": sorted(DEFAULT_GENERATORS.available()),
        "token_backend": settings.lottery.token_backend,
        "require_signatures": settings.lottery.require_signatures,
        "headers": {
            "identity": IDENTITY_HEADER,
            "signature": SIGNATURE_HEADER,
            "admin_token": ADMIN_TOKEN_HEADER,
        },
        "proof_message_template": proof_message("{identity}"),
    }
    if settings.web3 is not None:
        payload["rpc_url"] = settings.web3.rpc_url
        payload["token_contract_address"] = settings.web3.token_address
    return payload


@bp.get("/config")
def get_config():
    return jsonify(_public_config())
