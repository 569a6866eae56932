from __future__ import annotations

import hmac
import logging
from typing import Iterable, Optional

from flask import Request

from .config import AppSettings
from .engine import AuthorizationError

IDENTITY_HEADER = "X-Lottery-Identity"
SIGNATURE_HEADER = "X-Lottery-Signature"
ADMIN_TOKEN_HEADER = "X-Admin-Token"

logger = logging.getLogger("roundlottery.auth")


class RequestAuthorizer:
    """Authorizes exactly the identities the current request has proven."""

    def __init__(self, identities: Iterable[str] = ()) -> None:
        self._identities = frozenset(identities)

    @property
    def identities(self) -> frozenset:
        return self._identities

    def require_authorization(self, identity: Optional[str]) -> None:
        if identity is None or identity not in self._identities:
            raise AuthorizationError(identity)


def proof_message(identity: str) -> str:
    return f"roundlottery:{identity}"


def verify_identity_signature(identity: str, signature: str) -> bool:
    """Check an EIP-191 personal-message signature of :func:`proof_message`."""
    from eth_account import Account
    from eth_account.messages import encode_defunct

    if not signature:
        return False
    try:
        recovered = Account.recover_message(encode_defunct(text=proof_message(identity)), signature=signature)
    except Exception as exc:  # malformed signatures raise several eth-keys error types
        logger.debug("Signature for %s rejected: %s", identity, exc)
        return False
    return recovered.lower() == identity.lower()


def admin_token_valid(request: Request, settings: AppSettings) -> bool:
    api_key = settings.admin_api_key
    if not api_key:
        return True
    provided = request.headers.get(ADMIN_TOKEN_HEADER, "")
    return hmac.compare_digest(provided, api_key)


def claimed_identity(request: Request) -> Optional[str]:
    value = request.headers.get(IDENTITY_HEADER, "").strip()
    return value or None


def authorizer_for_request(request: Request, settings: AppSettings) -> RequestAuthorizer:
    identity = claimed_identity(request)
    if identity is None:
        return RequestAuthorizer()
    # The operator token only ever speaks for the operator identity.
    if (
        settings.admin_api_key
        and identity == settings.lottery.admin_identity
        and admin_token_valid(request, settings)
    ):
        return RequestAuthorizer([identity])
    if not settings.lottery.require_signatures:
        return RequestAuthorizer([identity])
    if verify_identity_signature(identity, request.headers.get(SIGNATURE_HEADER, "")):
        return RequestAuthorizer([identity])
    return RequestAuthorizer()
