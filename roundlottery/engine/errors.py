"""Error taxonomy shared by the engine, the service layer and the HTTP API."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Dict, Optional, Type


class ErrorCode(IntEnum):
    ALREADY_INITIALIZED = 1
    INSUFFICIENT_FUNDS = 2
    NOT_INITIALIZED = 3
    MIN_PARTICIPANTS_NOT_SATISFIED = 4
    MAX_RANGE_TOO_LOW = 5
    NUMBER_OF_NUMBERS_TOO_LOW = 6
    NUMBER_OF_THRESHOLDS_TOO_LOW = 7
    NOT_ENOUGH_OR_TOO_MANY_NUMBERS = 8
    INVALID_NUMBERS = 9
    WRONG_LOTTERY_NUMBER = 10
    NO_LOTTERY_RESULTS_AVAILABLE = 11
    ALREADY_ACTIVE = 12
    NOT_ACTIVE = 13
    INVALID_THRESHOLDS = 14
    INVALID_TICKET_PRICE = 15
    INVALID_SEED = 16


class ErrorCategory(str, Enum):
    SETUP = "setup"
    VALIDATION = "validation"
    FUNDS = "funds"
    LIFECYCLE = "lifecycle"
    LOOKUP = "lookup"


_CATEGORY_BY_CODE: Dict[ErrorCode, ErrorCategory] = {
    ErrorCode.ALREADY_INITIALIZED: ErrorCategory.SETUP,
    ErrorCode.NOT_INITIALIZED: ErrorCategory.SETUP,
    ErrorCode.ALREADY_ACTIVE: ErrorCategory.SETUP,
    ErrorCode.MAX_RANGE_TOO_LOW: ErrorCategory.VALIDATION,
    ErrorCode.NUMBER_OF_NUMBERS_TOO_LOW: ErrorCategory.VALIDATION,
    ErrorCode.NUMBER_OF_THRESHOLDS_TOO_LOW: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_THRESHOLDS: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_TICKET_PRICE: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_SEED: ErrorCategory.VALIDATION,
    ErrorCode.NOT_ENOUGH_OR_TOO_MANY_NUMBERS: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_NUMBERS: ErrorCategory.VALIDATION,
    ErrorCode.INSUFFICIENT_FUNDS: ErrorCategory.FUNDS,
    ErrorCode.NOT_ACTIVE: ErrorCategory.LIFECYCLE,
    ErrorCode.MIN_PARTICIPANTS_NOT_SATISFIED: ErrorCategory.LIFECYCLE,
    ErrorCode.WRONG_LOTTERY_NUMBER: ErrorCategory.LOOKUP,
    ErrorCode.NO_LOTTERY_RESULTS_AVAILABLE: ErrorCategory.LOOKUP,
}


class LotteryError(Exception):
    """Typed failure of a lottery operation.

    Callers branch on :attr:`code`; :attr:`category` groups codes by the kind
    of misuse (setup, validation, funds, lifecycle or lookup).
    """

    def __init__(self, code: ErrorCode, message: Optional[str] = None) -> None:
        self.code = ErrorCode(code)
        self.message = message or self.code.name.replace("_", " ").lower()
        super().__init__(f"{self.code.name}: {self.message}")

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORY_BY_CODE[self.code]


class SetupError(LotteryError):
    pass


class InvalidRequestError(LotteryError):
    pass


class FundsError(LotteryError):
    pass


class LifecycleError(LotteryError):
    pass


class ResultLookupError(LotteryError):
    pass


_CLASS_BY_CATEGORY: Dict[ErrorCategory, Type[LotteryError]] = {
    ErrorCategory.SETUP: SetupError,
    ErrorCategory.VALIDATION: InvalidRequestError,
    ErrorCategory.FUNDS: FundsError,
    ErrorCategory.LIFECYCLE: LifecycleError,
    ErrorCategory.LOOKUP: ResultLookupError,
}


def lottery_error(code: ErrorCode, message: Optional[str] = None) -> LotteryError:
    """Build the :class:`LotteryError` subclass matching ``code``'s category."""
    cls = _CLASS_BY_CATEGORY[_CATEGORY_BY_CODE[ErrorCode(code)]]
    return cls(code, message)


class AuthorizationError(Exception):
    """Raised when the caller cannot prove control of an identity."""

    def __init__(self, identity: Optional[str]) -> None:
        self.identity = identity
        super().__init__(f"caller is not authorized to act as {identity!r}")


class TransferError(RuntimeError):
    """Raised by a token ledger when a balance read or transfer fails."""


__all__ = [
    "AuthorizationError",
    "ErrorCategory",
    "ErrorCode",
    "FundsError",
    "InvalidRequestError",
    "LifecycleError",
    "LotteryError",
    "ResultLookupError",
    "SetupError",
    "TransferError",
    "lottery_error",
]
