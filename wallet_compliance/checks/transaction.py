"""Transaction checks: plain transfer, legacy and EIP-1559 fee models, contract call.

These send real transactions. Point the harness at a test network.
"""

from __future__ import annotations

import logging

from eth_utils import to_wei

from wallet_compliance.executor.context import CheckOutcome, ExecutionContext
from wallet_compliance.executor.fee_builder import (
    Eip1559Fee,
    LegacyFee,
    build_contract_call,
    build_transfer,
    encode_erc20_transfer,
    gwei_to_wei,
)
from wallet_compliance.models.catalog import TestDescriptor
from wallet_compliance.provider.base import receipt_status, to_int

logger = logging.getLogger(__name__)

CONTRACT_CALL_GAS_LIMIT = 100_000


def _auto(value) -> str:
    return "auto" if value is None else str(value)


async def _basic_transaction(ctx: ExecutionContext) -> CheckOutcome:
    config = ctx.config
    signer = await ctx.provider.get_signer()
    request = build_transfer(ctx.transfer_recipient, config.send_amount)
    tx = await signer.send_transaction(request)
    data = {"hash": tx.hash, "to": tx.to, "value": config.send_amount}

    if not config.wait_for_receipt:
        return CheckOutcome("success", f"Transaction sent: {tx.hash}", data=data)

    logger.info("Waiting for receipt of %s", tx.hash)
    receipt = await tx.wait(timeout=config.receipt_timeout_seconds)
    data["receipt"] = receipt
    block = to_int(receipt.get("blockNumber"))
    if receipt_status(receipt) == 1:
        return CheckOutcome("success", f"Transaction confirmed in block {block}", data=data)
    return CheckOutcome("error", f"Transaction failed in block {block}", data=data)


async def _legacy_gas(ctx: ExecutionContext) -> CheckOutcome:
    config = ctx.config
    fee = LegacyFee(gas_price=gwei_to_wei(config.gas_price_gwei), gas_limit=config.gas_limit)
    signer = await ctx.provider.get_signer()
    tx = await signer.send_transaction(
        build_transfer(ctx.transfer_recipient, config.send_amount, fee)
    )
    return CheckOutcome(
        "success", f"Legacy transaction sent: {tx.hash}",
        data={
            "hash": tx.hash,
            "gasPrice": _auto(config.gas_price_gwei),
            "gasLimit": _auto(config.gas_limit),
        },
    )


async def _eip1559(ctx: ExecutionContext) -> CheckOutcome:
    config = ctx.config
    fee = Eip1559Fee(
        max_fee_per_gas=gwei_to_wei(config.max_fee_per_gas_gwei),
        max_priority_fee_per_gas=gwei_to_wei(config.max_priority_fee_per_gas_gwei),
        gas_limit=config.gas_limit,
    )
    signer = await ctx.provider.get_signer()
    tx = await signer.send_transaction(
        build_transfer(ctx.transfer_recipient, config.send_amount, fee)
    )
    return CheckOutcome(
        "success", f"EIP-1559 transaction sent: {tx.hash}",
        data={
            "hash": tx.hash,
            "maxFeePerGas": _auto(config.max_fee_per_gas_gwei),
            "maxPriorityFeePerGas": _auto(config.max_priority_fee_per_gas_gwei),
        },
    )


async def _contract_call(ctx: ExecutionContext) -> CheckOutcome:
    # ERC-20 transfer of one whole token (18 decimals)
    call_data = encode_erc20_transfer(ctx.transfer_recipient, to_wei(1, "ether"))
    request = build_contract_call(
        ctx.config.token_contract, call_data, gas_limit=CONTRACT_CALL_GAS_LIMIT,
    )
    signer = await ctx.provider.get_signer()
    tx = await signer.send_transaction(request)
    return CheckOutcome(
        "success", f"Contract call sent: {tx.hash}",
        data={"hash": tx.hash, "data": call_data[:10] + "..."},
    )


async def run_transaction_check(descriptor: TestDescriptor, ctx: ExecutionContext) -> CheckOutcome:
    match descriptor.test_id:
        case "basic_tx":
            return await _basic_transaction(ctx)
        case "legacy_gas":
            return await _legacy_gas(ctx)
        case "eip1559":
            return await _eip1559(ctx)
        case "contract":
            return await _contract_call(ctx)
        case _:
            raise ValueError(f"Unknown transaction test: {descriptor.test_id}")
