from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional, TYPE_CHECKING

from ..engine import TransferError

if TYPE_CHECKING:  # pragma: no cover
    from web3 import Web3
    from web3.contract import Contract

logger = logging.getLogger("roundlottery.blockchain")

ERC20_ABI = [
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "transfer",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "to", "type": "address"}, {"name": "amount", "type": "uint256"}],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "transferFrom",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "from", "type": "address"},
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]


class Erc20TokenLedger:
    """Token ledger backed by an ERC-20 contract.

    The pool is the account of the configured signer. Paying out uses
    ``transfer`` from that account; escrowing a ticket uses ``transferFrom``,
    so participants must have approved the pool address as a spender.
    """

    def __init__(self, web3: "Web3", contract: "Contract", signer_key: str) -> None:
        self._web3 = web3
        self._contract = contract
        self._account = web3.eth.account.from_key(signer_key)  # type: ignore[attr-defined]

    @classmethod
    def connect(cls, rpc_url: str, token_address: str, signer_key: str) -> "Erc20TokenLedger":
        from web3 import Web3
        from web3.middleware import ExtraDataToPOAMiddleware

        web3 = Web3(Web3.HTTPProvider(rpc_url))
        if not web3.is_connected():
            raise ConnectionError(f"Cannot connect to RPC endpoint: {rpc_url}")

        # PoA chains (Hardhat, Polygon) put extra data in block headers.
        web3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

        contract = web3.eth.contract(address=Web3.to_checksum_address(token_address), abi=ERC20_ABI)
        return cls(web3, contract, signer_key)

    @property
    def pool_address(self) -> str:
        return self._account.address

    @property
    def chain_id(self) -> Optional[int]:
        try:
            return int(self._web3.eth.chain_id)
        except Exception:  # pragma: no cover - provider without chain id
            return None

    def _checksum(self, identity: str) -> str:
        from web3 import Web3

        try:
            return Web3.to_checksum_address(identity)
        except ValueError as exc:
            raise TransferError(f"{identity!r} is not an address") from exc

    def balance(self, identity: str) -> int:
        try:
            return int(self._contract.functions.balanceOf(self._checksum(identity)).call())
        except TransferError:
            raise
        except Exception as exc:
            raise TransferError(f"balanceOf({identity}) failed: {exc}") from exc

    def transfer(self, from_: str, to: str, amount: int) -> None:
        if amount < 0:
            raise TransferError(f"cannot transfer a negative amount ({amount})")
        if amount == 0:
            return
        recipient = self._checksum(to)
        if self._checksum(from_) == self.pool_address:
            fn = self._contract.functions.transfer(recipient, int(amount))
        else:
            fn = self._contract.functions.transferFrom(self._checksum(from_), recipient, int(amount))
        tx_hash = self._send_transaction(fn)
        logger.info("Transferred %s from %s to %s: %s", amount, from_, to, tx_hash)

    def _send_transaction(self, fn) -> str:
        account = self._account
        tx_params: Dict[str, Any] = {"from": account.address}

        try:
            gas_estimate = fn.estimate_gas(tx_params)
        except Exception as exc:
            raise TransferError(f"transaction would revert: {exc}") from exc

        tx = fn.build_transaction(
            {
                **tx_params,
                "nonce": self._web3.eth.get_transaction_count(account.address),
                "gas": max(int(math.ceil(gas_estimate * 1.2)), 60000),
                "gasPrice": self._web3.eth.gas_price,
            }
        )
        chain_id = self.chain_id
        if chain_id is not None:
            tx["chainId"] = chain_id

        signed = account.sign_transaction(tx)
        tx_hash = self._web3.eth.send_raw_transaction(signed.raw_transaction)
        receipt = self._web3.eth.wait_for_transaction_receipt(tx_hash, timeout=180, poll_latency=2)
        if receipt["status"] != 1:
            raise TransferError(f"Transaction reverted: {tx_hash.hex()}")
        return tx_hash.hex()
