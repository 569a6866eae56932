from __future__ import annotations

from sqlalchemy.orm import Session

from ..engine import TransferError
from ..models import AccountRow


class SqlTokenLedger:
    """Token ledger kept in the ``accounts`` table of the lottery database.

    Transfers share the caller's session, so they commit or roll back with
    the lottery operation that made them.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def _account(self, identity: str, create: bool = False):
        account = self._session.get(AccountRow, identity)
        if account is None and create:
            account = AccountRow(identity=identity, balance=0)
            self._session.add(account)
            self._session.flush()
        return account

    def balance(self, identity: str) -> int:
        account = self._account(identity)
        return int(account.balance) if account is not None else 0

    def transfer(self, from_: str, to: str, amount: int) -> None:
        if amount < 0:
            raise TransferError(f"cannot transfer a negative amount ({amount})")
        source = self._account(from_)
        available = int(source.balance) if source is not None else 0
        if available < amount:
            raise TransferError(f"{from_} holds {available}, cannot transfer {amount}")
        if amount == 0:
            return
        target = self._account(to, create=True)
        source.balance = available - amount
        target.balance = int(target.balance) + amount
        self._session.flush()

    def deposit(self, identity: str, amount: int) -> int:
        if amount <= 0:
            raise TransferError(f"deposit must be positive, got {amount}")
        account = self._account(identity, create=True)
        account.balance = int(account.balance) + amount
        self._session.flush()
        return int(account.balance)
