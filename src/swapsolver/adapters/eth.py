"""Ethereum chain adapter.

Talks to the node over JSON-RPC (eth_* methods). Amounts are integer wei,
addresses are 20-byte hex strings.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

import httpx
from eth_utils import is_address, to_checksum_address

from swapsolver.adapters.base import Balance, ChainAdapter, EthereumFee, TransactionRecord
from swapsolver.adapters.rpc import DEFAULT_TIMEOUT, JsonRpcClient, parse_hex_int
from swapsolver.chains import Chain
from swapsolver.errors import (
    AddressParseError,
    RPCUnavailable,
    Stage,
    SubmissionRejected,
    TransactionNotFound,
)
from swapsolver.units import wei_to_eth

logger = logging.getLogger(__name__)

# Gas used by a plain value transfer
TRANSFER_GAS_LIMIT = 21000


@dataclass(frozen=True)
class EthereumTransactionRecord(TransactionRecord):
    """Result of eth_getTransactionByHash."""

    tx_hash: str
    from_address: str
    to_address: Optional[str]
    value: int
    gas: int
    gas_price: Optional[int]
    nonce: int
    input: str
    block_hash: Optional[str] = None
    block_number: Optional[int] = None
    transaction_index: Optional[int] = None
    status: Optional[int] = None  # receipt status, 1 success / 0 reverted
    chain: Chain = Chain.ETHEREUM

    @classmethod
    def from_rpc(cls, data: dict) -> "EthereumTransactionRecord":
        return cls(
            tx_hash=data["hash"],
            from_address=data["from"],
            to_address=data.get("to"),
            value=parse_hex_int(data["value"], "value"),
            gas=parse_hex_int(data["gas"], "gas"),
            gas_price=parse_hex_int(data.get("gasPrice"), "gasPrice"),
            nonce=parse_hex_int(data["nonce"], "nonce"),
            input=data.get("input", "0x"),
            block_hash=data.get("blockHash"),
            block_number=parse_hex_int(data.get("blockNumber"), "blockNumber"),
            transaction_index=parse_hex_int(data.get("transactionIndex"), "transactionIndex"),
        )

    @property
    def is_pending(self) -> bool:
        return self.block_number is None

    @property
    def failed(self) -> bool:
        # unknown until the receipt has been read
        return self.status == 0

    @property
    def transferred_amount(self) -> int:
        return self.value

    def to_dict(self) -> dict:
        return {
            "hash": self.tx_hash,
            "from": self.from_address,
            "to": self.to_address,
            "value": str(self.value),
            "gas": self.gas,
            "gasPrice": str(self.gas_price) if self.gas_price is not None else None,
            "nonce": self.nonce,
            "blockHash": self.block_hash,
            "blockNumber": self.block_number,
            "isPending": self.is_pending,
            "status": self.status,
        }


class EthereumAdapter(ChainAdapter):
    """Ethereum JSON-RPC adapter."""

    chain = Chain.ETHEREUM

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self.rpc = JsonRpcClient(rpc_url, self.chain.value, timeout=timeout, client=client)

    def validate_address(self, address: str) -> str:
        """Validate and checksum an Ethereum address."""
        if not isinstance(address, str) or not is_address(address):
            raise AddressParseError(
                f"Invalid Ethereum address: {address!r}", chain=self.chain.value
            )
        return to_checksum_address(address)

    async def get_transaction(
        self, tx_id: str, timeout: Optional[float] = None
    ) -> EthereumTransactionRecord:
        result = await self.rpc.result(
            "eth_getTransactionByHash", [tx_id], stage=Stage.LOOKUP, timeout=timeout
        )
        if result is None:
            raise TransactionNotFound(
                f"Transaction {tx_id} not found", chain=self.chain.value, stage=Stage.LOOKUP
            )
        try:
            return EthereumTransactionRecord.from_rpc(result)
        except (KeyError, TypeError, ValueError) as e:
            raise RPCUnavailable(
                f"Malformed transaction {tx_id}: {e}", chain=self.chain.value, stage=Stage.LOOKUP
            )

    async def fetch_outcome(
        self, record: EthereumTransactionRecord, timeout: Optional[float] = None
    ) -> EthereumTransactionRecord:
        """Attach the receipt status to a mined transaction."""
        if record.is_pending:
            return record
        receipt = await self.rpc.result(
            "eth_getTransactionReceipt", [record.tx_hash], stage=Stage.LOOKUP, timeout=timeout
        )
        if receipt is None:
            return record
        try:
            status = parse_hex_int(receipt.get("status"), "status")
        except (AttributeError, ValueError) as e:
            raise RPCUnavailable(
                f"Malformed receipt for {record.tx_hash}: {e}",
                chain=self.chain.value,
                stage=Stage.LOOKUP,
            )
        return replace(record, status=status)

    async def get_nonce_or_blockhash(self, address: str, timeout: Optional[float] = None) -> int:
        """Pending nonce for ``address``."""
        address = self.validate_address(address)
        result = await self.rpc.result(
            "eth_getTransactionCount", [address, "pending"], stage=Stage.PREPARE, timeout=timeout
        )
        return self._quantity(result, "eth_getTransactionCount", Stage.PREPARE)

    async def estimate_fee(self, timeout: Optional[float] = None) -> EthereumFee:
        result = await self.rpc.result("eth_gasPrice", [], stage=Stage.PREPARE, timeout=timeout)
        return EthereumFee(gas_price=self._quantity(result, "eth_gasPrice", Stage.PREPARE))

    async def get_chain_id(self, timeout: Optional[float] = None) -> int:
        result = await self.rpc.result("eth_chainId", [], stage=Stage.FAUCET, timeout=timeout)
        return self._quantity(result, "eth_chainId", Stage.FAUCET)

    async def submit(self, raw_signed_tx: str, timeout: Optional[float] = None) -> str:
        if not raw_signed_tx.startswith("0x"):
            raw_signed_tx = f"0x{raw_signed_tx}"

        response = await self.rpc.call(
            "eth_sendRawTransaction", [raw_signed_tx], stage=Stage.SUBMIT, timeout=timeout
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
                "eth_sendRawTransaction returned no transaction hash",
                chain=self.chain.value,
                stage=Stage.SUBMIT,
            )
        return response.result

    async def get_balance(self, address: str, timeout: Optional[float] = None) -> Balance:
        address = self.validate_address(address)
        result = await self.rpc.result(
            "eth_getBalance", [address, "latest"], stage=Stage.BALANCE, timeout=timeout
        )
        wei = self._quantity(result, "eth_getBalance", Stage.BALANCE)
        return Balance(
            chain=self.chain,
            address=address,
            amount=wei_to_eth(wei),
            symbol="ETH",
            native_amount=wei,
        )

    def _quantity(self, result, method: str, stage: Stage) -> int:
        try:
            value = parse_hex_int(result, method)
        except ValueError as e:
            raise RPCUnavailable(str(e), chain=self.chain.value, stage=stage)
        if value is None:
            raise RPCUnavailable(f"{method} returned null", chain=self.chain.value, stage=stage)
        return value
