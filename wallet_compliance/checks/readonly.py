"""Idempotent read-only checks.

Failures are reported per test as "<name> failed: <reason>" so a full run
reads like a checklist; nothing here raises into the runner.
"""

from __future__ import annotations

import logging
from typing import Any

from wallet_compliance.executor.context import CheckOutcome, ExecutionContext, error_message
from wallet_compliance.models.catalog import TestDescriptor
from wallet_compliance.models.config import USDC_MAINNET

logger = logging.getLogger(__name__)

ZERO_HASH = "0x" + "00" * 32
LATEST_RANGE = {"fromBlock": "latest", "toBlock": "latest"}

# Methods whose params are fixed and need nothing from the session
_STATIC_PARAMS: dict[str, list] = {
    "eth_blockNumber": [],
    "eth_chainId": [],
    "eth_gasPrice": [],
    "eth_getCode": [USDC_MAINNET, "latest"],
    "eth_getStorageAt": [USDC_MAINNET, "0x0", "latest"],
    "eth_getBlockByNumber": ["latest", False],
    "eth_getTransactionReceipt": [ZERO_HASH],
    "eth_getLogs": [LATEST_RANGE],
    "eth_feeHistory": [4, "latest", [25, 50, 75]],
    "eth_syncing": [],
    "eth_coinbase": [],
    "eth_getUncleCountByBlockNumber": ["latest"],
    "eth_getBlockTransactionCountByNumber": ["latest"],
    "eth_getTransactionByBlockNumberAndIndex": ["latest", "0x0"],
    "eth_getTransactionByHash": [ZERO_HASH],
    "web3_clientVersion": [],
}

# Methods that take the latest block hash
_BLOCK_HASH_PARAMS: dict[str, list] = {
    "eth_getBlockByHash": [False],
    "eth_getUncleCountByBlockHash": [],
    "eth_getBlockTransactionCountByHash": [],
    "eth_getTransactionByBlockHashAndIndex": ["0x0"],
}


async def _latest_block_hash(ctx: ExecutionContext) -> str:
    block = await ctx.provider.get_block("latest")
    if not block or not block.get("hash"):
        raise ValueError("latest block has no hash")
    return block["hash"]


async def _unsubscribe(ctx: ExecutionContext) -> bool:
    try:
        handle = await ctx.lifecycle.create("subscription", topic="newHeads")
        await ctx.lifecycle.release(handle)
    except Exception as e:
        raise RuntimeError("Subscriptions not supported") from e
    return True


async def _execute(method: str, ctx: ExecutionContext) -> Any:
    provider = ctx.provider
    lifecycle = ctx.lifecycle

    if method in _STATIC_PARAMS:
        return await provider.request(method, _STATIC_PARAMS[method])
    if method in _BLOCK_HASH_PARAMS:
        block_hash = await _latest_block_hash(ctx)
        return await provider.request(method, [block_hash, *_BLOCK_HASH_PARAMS[method]])

    match method:
        case "eth_getBalance" | "eth_getTransactionCount":
            return await provider.request(method, [ctx.account, "latest"])
        case "eth_getProof":
            return await provider.request(method, [ctx.account, [], "latest"])
        case "eth_getFilterChanges":
            return await lifecycle.with_filter(
                "blockFilter", lambda fid: provider.request(method, [fid]),
            )
        case "eth_getFilterLogs":
            return await lifecycle.with_filter(
                "filter", lambda fid: provider.request(method, [fid]), filter_spec=dict(LATEST_RANGE),
            )
        case "eth_uninstallFilter":
            handle = await lifecycle.create("blockFilter")
            await lifecycle.release(handle)
            return True
        case "eth_unsubscribe":
            return await _unsubscribe(ctx)
        case _:
            raise ValueError(f"No read-only call defined for {method}")


async def run_readonly_check(descriptor: TestDescriptor, ctx: ExecutionContext) -> CheckOutcome:
    try:
        result = await _execute(descriptor.method, ctx)
    except Exception as e:
        logger.debug("%s failed: %s", descriptor.method, e)
        return CheckOutcome(
            "error", f"{descriptor.name} failed: {error_message(e, type(e).__name__)}",
        )
    return CheckOutcome("success", f"{descriptor.name} passed", data=result)
