from __future__ import annotations

from flask import current_app, request

from .auth import RequestAuthorizer, authorizer_for_request
from .config import AppSettings
from .services.lottery import LotteryService

EXTENSION_KEY = "roundlottery"


def get_service() -> LotteryService:
    return current_app.extensions[EXTENSION_KEY]["service"]


def get_settings() -> AppSettings:
    return current_app.extensions[EXTENSION_KEY]["settings"]


def request_authorizer() -> RequestAuthorizer:
    return authorizer_for_request(request, get_settings())
