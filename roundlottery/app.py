from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from .config import AppSettings, load_settings
from .db import make_engine, make_session_scope
from .engine import AuthorizationError, ErrorCategory, LotteryError, TransferError
from .extensions import EXTENSION_KEY
from .models import Base
from .routes.admin import bp as admin_bp
from .routes.config import bp as config_bp
from .routes.health import bp as health_bp
from .routes.rounds import bp as rounds_bp
from .routes.tickets import bp as tickets_bp
from .services.accounts import SqlTokenLedger
from .services.events import build_event_sink
from .services.lottery import LotteryService

logger = logging.getLogger("roundlottery.service")

STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.FUNDS: 402,
    ErrorCategory.LOOKUP: 404,
    ErrorCategory.SETUP: 409,
    ErrorCategory.LIFECYCLE: 409,
}


def build_service(settings: AppSettings) -> LotteryService:
    engine = make_engine(settings.database_url)
    Base.metadata.create_all(engine)
    session_scope = make_session_scope(engine)

    pool_identity = settings.lottery.pool_identity
    ledger_factory = SqlTokenLedger
    if settings.lottery.token_backend == "erc20":
        from .services.blockchain import Erc20TokenLedger

        web3 = settings.web3
        if web3 is None:
            raise RuntimeError("TOKEN_BACKEND=erc20 requires web3 settings")
        erc20 = Erc20TokenLedger.connect(web3.rpc_url, web3.token_address, web3.pool_signer_key)
        pool_identity = erc20.pool_address
        ledger_factory = lambda _session: erc20  # noqa: E731
        logger.info("Using ERC-20 token %s, pool %s", web3.token_address, pool_identity)

    return LotteryService(
        session_scope,
        pool_identity=pool_identity,
        generator_key=settings.lottery.generator,
        ledger_factory=ledger_factory,
        event_sink=build_event_sink(settings.events),
    )


def create_app(settings: Optional[AppSettings] = None, service: Optional[LotteryService] = None) -> Flask:
    settings = settings or load_settings()
    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.flask.secret_key
    app.config["DEBUG"] = settings.flask.debug

    if service is None:
        service = build_service(settings)
    app.extensions[EXTENSION_KEY] = {"service": service, "settings": settings}

    app.register_blueprint(health_bp)
    app.register_blueprint(config_bp)
    app.register_blueprint(tickets_bp, url_prefix="/tickets")
    app.register_blueprint(rounds_bp, url_prefix="/rounds")
    app.register_blueprint(admin_bp, url_prefix="/admin/api")

    @app.errorhandler(LotteryError)
    def handle_lottery_error(exc: LotteryError):
        status = STATUS_BY_CATEGORY.get(exc.category, 400)
        body = {
            "error": exc.code.name,
            "code": int(exc.code),
            "category": exc.category.value,
            "message": exc.message,
        }
        return jsonify(body), status

    @app.errorhandler(AuthorizationError)
    def handle_authorization_error(exc: AuthorizationError):
        return jsonify({"error": "unauthorized", "message": str(exc)}), 401

    @app.errorhandler(TransferError)
    def handle_transfer_error(exc: TransferError):
        app.logger.warning("Token transfer failed: %s", exc)
        return jsonify({"error": "transfer_failed", "message": str(exc)}), 502

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        details = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()]
        return jsonify({"error": "invalid_request", "details": details}), 400

    @app.errorhandler(Exception)
    def handle_error(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        app.logger.exception("Unhandled error: %s", exc)
        return jsonify({"error": str(exc)}), 500

    return app


if __name__ == "__main__":  # pragma: no cover
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    _settings = load_settings()
    create_app(_settings).run(debug=_settings.flask.debug)
