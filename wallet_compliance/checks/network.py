"""Network management checks and the network info snapshot."""

from __future__ import annotations

import logging
from typing import Any

from eth_utils import from_wei

from wallet_compliance.executor.chain_switch import switch_chain
from wallet_compliance.executor.context import CheckOutcome, ExecutionContext
from wallet_compliance.models.catalog import TestDescriptor
from wallet_compliance.provider.base import Provider, to_int

from .wallet import get_permissions, watch_asset

logger = logging.getLogger(__name__)


def _gwei(value: int | None) -> str | None:
    return None if value is None else str(from_wei(value, "gwei"))


async def network_snapshot(provider: Provider, account: str) -> dict[str, Any]:
    """Chain, latest block, fee data, balance and nonce for ``account``."""
    network = await provider.get_network()
    block = await provider.get_block("latest") or {}
    fees = await provider.get_fee_data()
    balance = await provider.get_balance(account)
    nonce = await provider.get_transaction_count(account)
    return {
        "chainId": str(network.chain_id),
        "name": network.name,
        "blockNumber": to_int(block.get("number")),
        "blockTimestamp": to_int(block.get("timestamp")),
        "gasPrice": _gwei(fees.gas_price),
        "maxFeePerGas": _gwei(fees.max_fee_per_gas),
        "maxPriorityFeePerGas": _gwei(fees.max_priority_fee_per_gas),
        "balance": str(from_wei(balance, "ether")),
        "nonce": nonce,
    }


async def run_network_check(descriptor: TestDescriptor, ctx: ExecutionContext) -> CheckOutcome:
    config = ctx.config

    match descriptor.test_id:
        case "switch":
            return await switch_chain(
                ctx.provider, config.switch_chain, verify=config.verify_chain_after_switch,
            )
        case "asset":
            return await watch_asset(ctx.provider, config.watch_asset)
        case "permissions":
            return await get_permissions(ctx.provider)
        case _:
            raise ValueError(f"Unknown network test: {descriptor.test_id}")
