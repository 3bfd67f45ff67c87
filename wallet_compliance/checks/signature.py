"""Signing method checks. Signatures are verified locally against the account."""

from __future__ import annotations

import logging

from eth_utils import keccak

from wallet_compliance.executor.context import CheckOutcome, ExecutionContext
from wallet_compliance.executor.verifier import (
    recover_personal_signer,
    recover_typed_data_signer,
    verify_personal_signature,
    verify_typed_data_signature,
)
from wallet_compliance.models.catalog import TestDescriptor
from wallet_compliance.models.config import ZERO_ADDRESS

logger = logging.getLogger(__name__)

MAIL_TYPES = {
    "Person": [
        {"name": "name", "type": "string"},
        {"name": "wallet", "type": "address"},
    ],
    "Mail": [
        {"name": "from", "type": "Person"},
        {"name": "to", "type": "Person"},
        {"name": "contents", "type": "string"},
    ],
}


def mail_domain(chain_id: int) -> dict:
    return {
        "name": "Web3 Wallet Tester",
        "version": "1",
        "chainId": chain_id,
        "verifyingContract": ZERO_ADDRESS,
    }


def mail_message(sender: str) -> dict:
    return {
        "from": {"name": "Alice", "wallet": sender},
        "to": {"name": "Bob", "wallet": ZERO_ADDRESS},
        "contents": "Hello, Bob!",
    }


async def _personal_sign(ctx: ExecutionContext) -> CheckOutcome:
    message = ctx.config.custom_message or "Test message for personal_sign"
    signer = await ctx.provider.get_signer()
    signature = await signer.sign_message(message)
    recovered = recover_personal_signer(message, signature)
    data = {"message": message, "signature": signature, "recoveredAddress": recovered}
    if verify_personal_signature(message, signature, ctx.account):
        return CheckOutcome("success", "Signature verified successfully", data=data)
    return CheckOutcome("error", "Signature verification failed", data=data)


async def _typed_data_v4(ctx: ExecutionContext) -> CheckOutcome:
    network = await ctx.provider.get_network()
    domain = mail_domain(network.chain_id)
    value = mail_message(ctx.account)
    signer = await ctx.provider.get_signer()
    signature = await signer.sign_typed_data(domain, MAIL_TYPES, value)
    data = {
        "domain": domain,
        "types": MAIL_TYPES,
        "value": value,
        "signature": signature,
        "recoveredAddress": recover_typed_data_signer(domain, MAIL_TYPES, value, signature),
    }
    if verify_typed_data_signature(domain, MAIL_TYPES, value, signature, ctx.account):
        return CheckOutcome("success", "Typed data signature verified", data=data)
    return CheckOutcome("error", "Typed data verification failed", data=data)


async def _eth_sign(ctx: ExecutionContext) -> CheckOutcome:
    # eth_sign signs a raw 32-byte hash; a successful call is still a warning
    text = ctx.config.custom_message or "Test message for eth_sign"
    digest = "0x" + keccak(text=text).hex()
    signature = await ctx.provider.request("eth_sign", [ctx.account, digest])
    return CheckOutcome(
        "warning", "eth_sign completed but is deprecated and unsafe",
        data={"message": digest, "signature": signature},
    )


async def run_signature_check(descriptor: TestDescriptor, ctx: ExecutionContext) -> CheckOutcome:
    match descriptor.test_id:
        case "personal_sign":
            return await _personal_sign(ctx)
        case "eth_signTypedData_v4":
            return await _typed_data_v4(ctx)
        case "eth_sign":
            return await _eth_sign(ctx)
        case _:
            raise ValueError(f"Unknown signature test: {descriptor.test_id}")
