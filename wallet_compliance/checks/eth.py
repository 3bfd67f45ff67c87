"""Core eth_* method checks."""

from __future__ import annotations

import logging

from wallet_compliance.executor.context import CheckOutcome, ExecutionContext, HarnessError
from wallet_compliance.executor.fee_builder import (
    Eip1559Fee,
    build_transfer,
    encode_erc20_balance_of,
    gwei_to_wei,
)
from wallet_compliance.models.catalog import TestDescriptor
from wallet_compliance.provider.base import to_int

logger = logging.getLogger(__name__)

# Fixed parameters for the signed raw transaction
RAW_TX_AMOUNT = "0.000001"
RAW_TX_GAS_LIMIT = 21000
RAW_TX_MAX_FEE_GWEI = "20"
RAW_TX_PRIORITY_FEE_GWEI = "1"

_FILTER_LABELS = {
    "newFilter": ("filter", "filter"),
    "blockFilter": ("blockFilter", "block filter"),
    "pendingFilter": ("pendingTxFilter", "pending tx filter"),
}


async def _filter_check(test_id: str, ctx: ExecutionContext) -> CheckOutcome:
    """Create the filter, poll it once, then uninstall it."""
    kind, label = _FILTER_LABELS[test_id]
    filter_spec = None
    if kind == "filter":
        filter_spec = {"fromBlock": "latest", "toBlock": "latest", "address": ctx.account}

    seen = {}

    async def poll(filter_id: str):
        seen["filterId"] = filter_id
        return await ctx.provider.request("eth_getFilterChanges", [filter_id])

    changes = await ctx.lifecycle.with_filter(kind, poll, filter_spec=filter_spec)
    filter_id = seen["filterId"]
    return CheckOutcome(
        "success", f"Created {label}: {filter_id}",
        data={"filterId": filter_id, "changes": changes},
    )


async def _send_raw(ctx: ExecutionContext) -> CheckOutcome:
    provider = ctx.provider
    signer = await provider.get_signer()
    network = await provider.get_network()
    request = build_transfer(
        ctx.account,
        RAW_TX_AMOUNT,
        Eip1559Fee(
            max_fee_per_gas=gwei_to_wei(RAW_TX_MAX_FEE_GWEI),
            max_priority_fee_per_gas=gwei_to_wei(RAW_TX_PRIORITY_FEE_GWEI),
        ),
        gas_limit=RAW_TX_GAS_LIMIT,
    )
    request["nonce"] = await provider.get_transaction_count(ctx.account)
    request["chainId"] = network.chain_id
    signed = await signer.sign_transaction(request)
    tx_hash = await provider.request("eth_sendRawTransaction", [signed])
    return CheckOutcome("success", f"Raw transaction sent: {tx_hash}", data={"hash": tx_hash})


async def run_eth_check(descriptor: TestDescriptor, ctx: ExecutionContext) -> CheckOutcome:
    provider = ctx.provider
    config = ctx.config

    match descriptor.test_id:
        case "accounts":
            accounts = await provider.request("eth_accounts", [])
            return CheckOutcome("success", f"Found {len(accounts or [])} account(s)", data=accounts)

        case "requestAccounts":
            accounts = await provider.request("eth_requestAccounts", [])
            return CheckOutcome("success", f"Requested {len(accounts or [])} account(s)", data=accounts)

        case "sendTransaction":
            tx_hash = await provider.request("eth_sendTransaction", [{
                "from": ctx.account,
                "to": ctx.recipient,
                "value": "0x1",
                "data": "0x",
            }])
            return CheckOutcome("success", f"Transaction sent: {tx_hash}", data={"hash": tx_hash})

        case "sendRaw":
            return await _send_raw(ctx)

        case "estimateGas":
            estimate = await provider.request("eth_estimateGas", [{
                "from": ctx.account,
                "to": ctx.recipient,
                "value": "0x1",
            }])
            return CheckOutcome(
                "success", f"Estimated gas: {to_int(estimate)}", data={"gasEstimate": estimate},
            )

        case "call":
            result = await provider.request("eth_call", [{
                "to": config.token_contract,
                "data": encode_erc20_balance_of(ctx.account),
            }, "latest"])
            return CheckOutcome("success", "Contract call successful", data={"result": result})

        case "encryptionKey":
            public_key = await provider.request("eth_getEncryptionPublicKey", [ctx.account])
            return CheckOutcome(
                "success", "Retrieved encryption public key", data={"publicKey": public_key},
            )

        case "decrypt":
            if not config.encrypted_message:
                raise HarnessError("eth_decrypt needs an encrypted message (set encrypted_message)")
            decrypted = await provider.request("eth_decrypt", [config.encrypted_message, ctx.account])
            return CheckOutcome("success", "Decrypted message", data={"decrypted": decrypted})

        case "subscribe":
            handle = await ctx.lifecycle.subscribe_with_delayed_release(
                "newHeads", config.unsubscribe_delay_seconds,
            )
            return CheckOutcome(
                "success", f"Subscribed with ID: {handle.resource_id}",
                data={"subscriptionId": handle.resource_id},
            )

        case "newFilter" | "blockFilter" | "pendingFilter":
            return await _filter_check(descriptor.test_id, ctx)

        case _:
            raise ValueError(f"Unknown eth test: {descriptor.test_id}")
