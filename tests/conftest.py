"""Pytest configuration and fixtures."""

import json
import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

import httpx
import pytest
import pytest_asyncio
from bip_utils import Base58Decoder
from eth_utils import keccak
from solders.hash import Hash
from solders.transaction import Transaction

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"

from swapsolver.config import Settings
from swapsolver.context import AppContext
from swapsolver.hdwallet import derive_keypairs
from swapsolver.utils.locks import clear_address_locks

TEST_MNEMONIC = "indoor dish desk flag debris potato excuse depart ticket judge file exit"

ETH_RPC = "http://eth.test"
SOL_RPC = "http://sol.test"
SOLVER_URL = "http://solver.test/"

BLOCKHASH = str(Hash.default())
GAS_PRICE = 20 * 10**9
ETH_DESTINATION = "0x" + "22" * 20


@dataclass
class RpcError:
    """Scripted JSON-RPC error reply."""

    message: str
    code: int = -32000


def rpc_error(message: str, code: int = -32000) -> RpcError:
    return RpcError(message=message, code=code)


def eth_tx_hash(params: list) -> str:
    """What a node answers to eth_sendRawTransaction."""
    return "0x" + keccak(hexstr=params[0]).hex()


def sol_signature(params: list) -> str:
    """What a node answers to sendTransaction."""
    tx = Transaction.from_bytes(Base58Decoder.Decode(params[0]))
    return str(tx.signatures[0])


class FakeNode:
    """Scripted JSON-RPC node behind an httpx.MockTransport.

    Replies are queued per method; the last queued reply repeats. A reply is
    a result value, an RpcError, an httpx.Response, or a callable taking the
    request params and returning one of those.
    """

    def __init__(self):
        self.replies: dict[str, list] = {}
        self.calls: list[tuple[str, list]] = []

    def on(self, method: str, *replies) -> "FakeNode":
        self.replies[method] = list(replies)
        return self

    def count(self, method: str) -> int:
        return sum(1 for m, _ in self.calls if m == method)

    def params(self, method: str) -> list:
        return [p for m, p in self.calls if m == method]

    def handle(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        method, params = payload["method"], payload.get("params", [])
        self.calls.append((method, params))

        queue = self.replies.get(method)
        if not queue:
            reply: Any = rpc_error(f"Method not found: {method}", code=-32601)
        elif len(queue) > 1:
            reply = queue.pop(0)
        else:
            reply = queue[0]

        if callable(reply):
            reply = reply(params)
        if isinstance(reply, httpx.Response):
            return reply
        if isinstance(reply, RpcError):
            body = {"jsonrpc": "2.0", "id": payload["id"],
                    "error": {"code": reply.code, "message": reply.message}}
        else:
            body = {"jsonrpc": "2.0", "id": payload["id"], "result": reply}
        return httpx.Response(200, json=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))


def eth_transaction(
    tx_hash: str = "0x" + "ab" * 32,
    value: int = 10**18,
    block_number: Optional[int] = 16,
    sender: str = "0x" + "11" * 20,
) -> dict:
    """eth_getTransactionByHash result."""
    return {
        "hash": tx_hash,
        "from": sender,
        "to": ETH_DESTINATION,
        "value": hex(value),
        "gas": hex(21000),
        "gasPrice": hex(GAS_PRICE),
        "nonce": "0x0",
        "input": "0x",
        "blockHash": "0x" + "cd" * 32 if block_number is not None else None,
        "blockNumber": hex(block_number) if block_number is not None else None,
        "transactionIndex": "0x0" if block_number is not None else None,
    }


def eth_receipt(tx_hash: str = "0x" + "ab" * 32, status: int = 1, block_number: int = 16) -> dict:
    """eth_getTransactionReceipt result."""
    return {
        "transactionHash": tx_hash,
        "blockHash": "0x" + "cd" * 32,
        "blockNumber": hex(block_number),
        "gasUsed": hex(21000),
        "status": hex(status),
    }


def sol_transaction(
    signature: str = "sig1",
    pre: tuple = (3_000_005_000, 0, 1),
    post: tuple = (1_000_000_000, 2_000_000_000, 1),
    err: Any = None,
) -> dict:
    """getTransaction result (json encoding)."""
    return {
        "slot": 123,
        "blockTime": 1_700_000_000,
        "meta": {
            "err": err,
            "fee": 5000,
            "preBalances": list(pre),
            "postBalances": list(post),
            "logMessages": [],
        },
        "transaction": {
            "signatures": [signature],
            "message": {
                "accountKeys": ["sender", "receiver", "11111111111111111111111111111111"],
                "recentBlockhash": BLOCKHASH,
            },
        },
    }


@pytest.fixture(autouse=True)
def clear_locks():
    """Clear address locks before each test."""
    clear_address_locks()
    yield
    clear_address_locks()


@pytest.fixture(scope="session")
def keys():
    """Keys derived from the regression mnemonic."""
    return derive_keypairs(TEST_MNEMONIC)


@pytest.fixture
def node() -> FakeNode:
    """Fake node with a healthy default script for both chains."""
    return (
        FakeNode()
        .on("eth_getTransactionCount", "0x0")
        .on("eth_gasPrice", hex(GAS_PRICE))
        .on("eth_chainId", hex(1337))
        .on("eth_sendRawTransaction", eth_tx_hash)
        .on("eth_getBalance", hex(5 * 10**18))
        .on("eth_getTransactionReceipt", eth_receipt())
        .on("getLatestBlockhash", {"context": {"slot": 1},
                                   "value": {"blockhash": BLOCKHASH, "lastValidBlockHeight": 100}})
        .on("sendTransaction", sol_signature)
        .on("getBalance", {"context": {"slot": 1}, "value": 2_500_000_000})
        .on("requestAirdrop", "airdrop-signature")
    )


def make_settings(keys, **overrides) -> Settings:
    values: dict[str, Any] = dict(
        environment="test",
        seed_phrase=TEST_MNEMONIC,
        ethereum_rpc=ETH_RPC,
        solana_rpc=SOL_RPC,
        solver_url=SOLVER_URL,
        lookup_max_attempts=3,
        lookup_delay=0,
        pool_addresses={
            "ethereum": keys.address("ethereum"),
            "solana": keys.address("solana"),
        },
        quote_rates={"SOL:ETH": Decimal("0.05")},
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(keys) -> Settings:
    return make_settings(keys)


@pytest_asyncio.fixture
async def context(settings, keys, node):
    """Application context wired to the fake node."""
    ctx = AppContext.build(settings, keys=keys, client=node.client())
    yield ctx
    await ctx.aclose()


@pytest_asyncio.fixture
async def context_factory(keys, node):
    """Build contexts with custom settings."""
    built = []

    def factory(**overrides) -> AppContext:
        ctx = AppContext.build(make_settings(keys, **overrides), keys=keys, client=node.client())
        built.append(ctx)
        return ctx

    yield factory
    for ctx in built:
        await ctx.aclose()
