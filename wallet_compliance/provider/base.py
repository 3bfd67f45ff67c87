"""Provider capability consumed by the harness.

The provider is an opaque wallet endpoint. Everything the harness needs is
expressed through ``request(method, params)``; the convenience getters below
are thin wrappers over standard JSON-RPC methods so a provider only has to
implement ``request`` and ``get_signer``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

# EIP-3085/3326: the wallet does not know the requested chain.
CHAIN_NOT_ADDED = 4902


class ProviderError(Exception):
    """A provider rejected a call."""

    def __init__(self, message: str = "", code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data

    def __str__(self) -> str:
        return self.message

    @classmethod
    def from_rpc_error(cls, error: Any) -> "ProviderError":
        if not isinstance(error, dict):
            return cls(message=f"Malformed JSON-RPC error: {error!r}", data=error)
        return cls(
            message=str(error.get("message") or ""),
            code=error.get("code"),
            data=error.get("data"),
        )


@dataclass(frozen=True)
class Network:
    chain_id: int
    name: str = "unknown"


@dataclass(frozen=True)
class FeeData:
    gas_price: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None


KNOWN_NETWORKS = {
    1: "mainnet",
    10: "optimism",
    56: "bnb",
    137: "matic",
    8453: "base",
    42161: "arbitrum",
    11155111: "sepolia",
}


def to_int(value: Any) -> Optional[int]:
    """Decode a JSON-RPC quantity (hex string) or pass through an int."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value, 16) if value.startswith(("0x", "0X")) else int(value)
    raise ValueError(f"Not a quantity: {value!r}")


class TransactionResponse:
    """A submitted transaction; ``wait()`` polls for its receipt."""

    def __init__(
        self,
        hash: str,
        provider: "Provider",
        request: Optional[dict] = None,
        poll_interval: float = 1.0,
    ):
        self.hash = hash
        self.provider = provider
        self.request = dict(request or {})
        self.poll_interval = poll_interval

    @property
    def to(self) -> Optional[str]:
        return self.request.get("to")

    async def wait(self, timeout: Optional[float] = None) -> dict:
        """Poll eth_getTransactionReceipt until mined.

        There is no bound unless ``timeout`` is given.
        """
        start = time.monotonic()
        while True:
            receipt = await self.provider.request("eth_getTransactionReceipt", [self.hash])
            if receipt:
                return receipt
            if timeout is not None and time.monotonic() - start >= timeout:
                raise TimeoutError(f"No receipt for {self.hash} after {timeout:.0f}s")
            await asyncio.sleep(self.poll_interval)


class Signer(ABC):
    @abstractmethod
    async def get_address(self) -> str: ...

    @abstractmethod
    async def sign_message(self, message: str) -> str: ...

    @abstractmethod
    async def sign_typed_data(self, domain: dict, types: dict, value: dict) -> str: ...

    @abstractmethod
    async def send_transaction(self, request: dict) -> TransactionResponse: ...

    @abstractmethod
    async def sign_transaction(self, request: dict) -> str: ...


class Provider(ABC):
    """Abstract wallet provider (window.ethereum or a remote JSON-RPC wallet)."""

    @abstractmethod
    async def request(self, method: str, params: Any = None) -> Any:
        """Send one RPC call. Raises ProviderError on rejection."""

    @abstractmethod
    async def get_signer(self) -> Signer: ...

    def on(self, event: str, callback: Callable) -> None:
        """Account/chain change notifications. The harness never relies on them."""
        logger.debug("Ignoring subscription to provider event %s", event)

    async def close(self) -> None:
        return None

    async def get_network(self) -> Network:
        chain_id = to_int(await self.request("eth_chainId", []))
        return Network(chain_id=chain_id, name=KNOWN_NETWORKS.get(chain_id, "unknown"))

    async def get_balance(self, address: str) -> int:
        return to_int(await self.request("eth_getBalance", [address, "latest"]))

    async def get_block(self, tag: str | int = "latest") -> Optional[dict]:
        if isinstance(tag, int):
            tag = hex(tag)
        if isinstance(tag, str) and tag.startswith("0x") and len(tag) == 66:
            return await self.request("eth_getBlockByHash", [tag, False])
        return await self.request("eth_getBlockByNumber", [tag, False])

    async def get_fee_data(self) -> FeeData:
        gas_price = to_int(await self.request("eth_gasPrice", []))
        block = await self.get_block("latest")
        base_fee = to_int((block or {}).get("baseFeePerGas"))
        if base_fee is None:
            return FeeData(gas_price=gas_price)
        try:
            priority = to_int(await self.request("eth_maxPriorityFeePerGas", []))
        except ProviderError:
            priority = 1_000_000_000
        return FeeData(
            gas_price=gas_price,
            max_fee_per_gas=base_fee * 2 + priority,
            max_priority_fee_per_gas=priority,
        )

    async def get_transaction_count(self, address: str, tag: str = "latest") -> int:
        return to_int(await self.request("eth_getTransactionCount", [address, tag]))


def receipt_status(receipt: dict) -> Optional[int]:
    return to_int(receipt.get("status")) if receipt else None
