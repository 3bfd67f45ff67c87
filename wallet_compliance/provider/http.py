"""JSON-RPC over HTTP provider for wallets and nodes that expose an HTTP endpoint."""

from __future__ import annotations

import itertools
import json
import logging
from typing import Any, Optional

import httpx

from .base import Provider, ProviderError, Signer, TransactionResponse
from .typed_data import build_typed_data

logger = logging.getLogger(__name__)

# TransactionRequest keys that go over the wire as hex quantities
_QUANTITY_FIELDS = (
    "value", "gasPrice", "maxFeePerGas", "maxPriorityFeePerGas", "nonce", "chainId", "type",
)


def to_rpc_transaction(request: dict, sender: Optional[str] = None) -> dict:
    """Convert a TransactionRequest into eth_sendTransaction params."""
    tx: dict[str, Any] = {}
    if sender:
        tx["from"] = sender
    for key, value in request.items():
        if value is None:
            continue
        if key == "gasLimit":
            tx["gas"] = hex(int(value))
        elif key in _QUANTITY_FIELDS:
            tx[key] = hex(int(value))
        else:
            tx[key] = value
    return tx


class HttpProvider(Provider):
    def __init__(
        self,
        url: str,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    async def request(self, method: str, params: Any = None) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": [] if params is None else params,
        }
        logger.debug("RPC -> %s %s", method, json.dumps(payload["params"], default=str)[:200])
        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(f"HTTP {e.response.status_code} from {self.url}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Transport error calling {method}: {e}") from e
        except ValueError as e:
            raise ProviderError(f"Invalid JSON-RPC response for {method}: {e}") from e

        if not isinstance(body, dict):
            raise ProviderError(
                f"Invalid JSON-RPC response for {method}: expected an object, got {type(body).__name__}"
            )
        if body.get("error") is not None:
            error = ProviderError.from_rpc_error(body["error"])
            logger.debug("RPC <- %s error code=%s: %s", method, error.code, error.message)
            raise error
        return body.get("result")

    async def get_signer(self) -> Signer:
        accounts = await self.request("eth_accounts", [])
        if not accounts:
            raise ProviderError("Provider exposes no accounts", code=4100)
        return JsonRpcSigner(self, accounts[0])

    async def close(self) -> None:
        await self._client.aclose()


class JsonRpcSigner(Signer):
    """Signer that delegates every operation to the wallet behind the provider."""

    def __init__(self, provider: Provider, address: str):
        self.provider = provider
        self.address = address

    async def get_address(self) -> str:
        return self.address

    async def sign_message(self, message: str) -> str:
        data = "0x" + message.encode("utf-8").hex()
        return await self.provider.request("personal_sign", [data, self.address])

    async def sign_typed_data(self, domain: dict, types: dict, value: dict) -> str:
        document = build_typed_data(domain, types, value)
        return await self.provider.request(
            "eth_signTypedData_v4", [self.address, json.dumps(document)]
        )

    async def send_transaction(self, request: dict) -> TransactionResponse:
        tx_hash = await self.provider.request(
            "eth_sendTransaction", [to_rpc_transaction(request, self.address)]
        )
        return TransactionResponse(tx_hash, self.provider, request)

    async def sign_transaction(self, request: dict) -> str:
        return await self.provider.request(
            "eth_signTransaction", [to_rpc_transaction(request, self.address)]
        )
