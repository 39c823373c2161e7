"""Solana chain adapter.

JSON-RPC against a Solana node. Amounts are integer lamports, addresses are
base58 encoded 32-byte public keys. The freshness token is the latest
blockhash, which does not depend on the sender.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx
from solders.pubkey import Pubkey

from swapsolver.adapters.base import Balance, ChainAdapter, SolanaFee, TransactionRecord
from swapsolver.adapters.rpc import DEFAULT_TIMEOUT, JsonRpcClient
from swapsolver.chains import Chain
from swapsolver.errors import (
    AddressParseError,
    RPCUnavailable,
    Stage,
    SubmissionRejected,
    TransactionNotFound,
)
from swapsolver.units import lamports_to_sol

logger = logging.getLogger(__name__)

LAMPORTS_PER_SIGNATURE = 5000
DEFAULT_COMMITMENT = "confirmed"


@dataclass(frozen=True)
class SolanaTransactionRecord(TransactionRecord):
    """Result of getTransaction."""

    tx_hash: str
    slot: int
    fee: int
    block_time: Optional[int] = None
    err: Optional[object] = None
    pre_balances: tuple[int, ...] = ()
    post_balances: tuple[int, ...] = ()
    account_keys: tuple[str, ...] = ()
    recent_blockhash: Optional[str] = None
    log_messages: tuple[str, ...] = field(default=(), repr=False)
    chain: Chain = Chain.SOLANA

    @classmethod
    def from_rpc(cls, tx_id: str, data: dict) -> "SolanaTransactionRecord":
        meta = data.get("meta") or {}
        message = (data.get("transaction") or {}).get("message") or {}
        signatures = (data.get("transaction") or {}).get("signatures") or [tx_id]

        account_keys = []
        for key in message.get("accountKeys", []):
            # jsonParsed encoding returns objects, json encoding plain strings
            account_keys.append(key["pubkey"] if isinstance(key, dict) else key)

        return cls(
            tx_hash=signatures[0],
            slot=int(data["slot"]),
            fee=int(meta.get("fee", 0)),
            block_time=data.get("blockTime"),
            err=meta.get("err"),
            pre_balances=tuple(int(b) for b in meta.get("preBalances", [])),
            post_balances=tuple(int(b) for b in meta.get("postBalances", [])),
            account_keys=tuple(account_keys),
            recent_blockhash=message.get("recentBlockhash"),
            log_messages=tuple(meta.get("logMessages") or ()),
        )

    @property
    def is_pending(self) -> bool:
        # getTransaction only returns transactions that reached a commitment level
        return False

    @property
    def failed(self) -> bool:
        return self.err is not None

    @property
    def transferred_amount(self) -> int:
        """Lamports that left the fee payer, excluding the fee."""
        if not self.pre_balances or not self.post_balances:
            return 0
        spent = self.pre_balances[0] - self.post_balances[0] - self.fee
        return max(spent, 0)

    def to_dict(self) -> dict:
        return {
            "signature": self.tx_hash,
            "slot": self.slot,
            "blockTime": self.block_time,
            "fee": self.fee,
            "err": self.err,
            "preBalances": list(self.pre_balances),
            "postBalances": list(self.post_balances),
            "accountKeys": list(self.account_keys),
            "recentBlockhash": self.recent_blockhash,
        }


class SolanaAdapter(ChainAdapter):
    """Solana JSON-RPC adapter."""

    chain = Chain.SOLANA

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
        commitment: str = DEFAULT_COMMITMENT,
    ):
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.rpc = JsonRpcClient(rpc_url, self.chain.value, timeout=timeout, client=client)

    def validate_address(self, address: str) -> str:
        """Validate a base58 public key."""
        try:
            return str(Pubkey.from_string(address))
        except (ValueError, TypeError):
            raise AddressParseError(
                f"Invalid Solana address: {address!r}", chain=self.chain.value
            )

    async def get_transaction(
        self, tx_id: str, timeout: Optional[float] = None
    ) -> SolanaTransactionRecord:
        result = await self.rpc.result(
            "getTransaction",
            [
                tx_id,
                {
                    "encoding": "json",
                    "commitment": self.commitment,
                    "maxSupportedTransactionVersion": 0,
                },
            ],
            stage=Stage.LOOKUP,
            timeout=timeout,
        )
        if result is None:
            raise TransactionNotFound(
                f"Transaction {tx_id} not found", chain=self.chain.value, stage=Stage.LOOKUP
            )
        try:
            return SolanaTransactionRecord.from_rpc(tx_id, result)
        except (KeyError, TypeError, ValueError) as e:
            raise RPCUnavailable(
                f"Malformed transaction {tx_id}: {e}", chain=self.chain.value, stage=Stage.LOOKUP
            )

    async def get_nonce_or_blockhash(
        self, address: Optional[str] = None, timeout: Optional[float] = None
    ) -> str:
        """Latest blockhash; ``address`` is ignored."""
        result = await self.rpc.result(
            "getLatestBlockhash",
            [{"commitment": self.commitment}],
            stage=Stage.PREPARE,
            timeout=timeout,
        )
        try:
            return result["value"]["blockhash"]
        except (KeyError, TypeError):
            raise RPCUnavailable(
                "getLatestBlockhash returned no blockhash",
                chain=self.chain.value,
                stage=Stage.PREPARE,
            )

    async def estimate_fee(self, timeout: Optional[float] = None) -> SolanaFee:
        return SolanaFee(lamports_per_signature=LAMPORTS_PER_SIGNATURE)

    async def submit(self, raw_signed_tx: str, timeout: Optional[float] = None) -> str:
        response = await self.rpc.call(
            "sendTransaction",
            [raw_signed_tx, {"encoding": "base58"}],
            stage=Stage.SUBMIT,
            timeout=timeout,
        )
        if not response.ok:
            logger.error(f"Broadcast error: {response.error}")
            raise SubmissionRejected(
                f"Node rejected transaction: {response.error_message}",
                chain=self.chain.value,
                node_message=response.error_message,
            )
        if not isinstance(response.result, str) or not response.result:
            raise RPCUnavailable(
                "sendTransaction returned no signature",
                chain=self.chain.value,
                stage=Stage.SUBMIT,
            )
        return response.result

    async def get_balance(self, address: str, timeout: Optional[float] = None) -> Balance:
        address = self.validate_address(address)
        result = await self.rpc.result(
            "getBalance",
            [address, {"commitment": "finalized"}],
            stage=Stage.BALANCE,
            timeout=timeout,
        )
        try:
            lamports = int(result["value"])
        except (KeyError, TypeError, ValueError):
            raise RPCUnavailable(
                "getBalance returned no value", chain=self.chain.value, stage=Stage.BALANCE
            )
        return Balance(
            chain=self.chain,
            address=address,
            amount=lamports_to_sol(lamports),
            symbol="SOL",
            native_amount=lamports,
        )

    async def request_airdrop(
        self, address: str, lamports: int, timeout: Optional[float] = None
    ) -> str:
        """Ask a dev/test validator to mint lamports to ``address``."""
        address = self.validate_address(address)
        response = await self.rpc.call(
            "requestAirdrop",
            [address, lamports, {"commitment": "finalized"}],
            stage=Stage.FAUCET,
            timeout=timeout,
        )
        if not response.ok:
            raise SubmissionRejected(
                f"Airdrop rejected: {response.error_message}",
                chain=self.chain.value,
                stage=Stage.FAUCET,
                node_message=response.error_message,
            )
        return response.result
