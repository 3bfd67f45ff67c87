"""Signature verifier: recovers signers locally, never trusting the provider."""

from __future__ import annotations

import logging
from typing import Optional

from eth_account import Account
from eth_account.messages import encode_defunct, encode_typed_data

from wallet_compliance.provider.typed_data import build_typed_data

logger = logging.getLogger(__name__)


def _same_address(recovered: Optional[str], claimed: str) -> bool:
    if not recovered or not claimed:
        return False
    return recovered.lower() == claimed.lower()


def recover_personal_signer(message: str, signature: str | bytes) -> Optional[str]:
    """EIP-191 personal_sign recovery. Returns None for malformed input."""
    if not signature:
        return None
    try:
        return Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception as e:
        logger.debug("personal signature recovery failed: %s", e)
        return None


def recover_typed_data_signer(
    domain: dict, types: dict, value: dict, signature: str | bytes,
) -> Optional[str]:
    """EIP-712 recovery over the domain separator and struct hash."""
    if not signature:
        return None
    try:
        signable = encode_typed_data(full_message=build_typed_data(domain, types, value))
        return Account.recover_message(signable, signature=signature)
    except Exception as e:
        logger.debug("typed data signature recovery failed: %s", e)
        return None


def verify_personal_signature(message: str, signature: str | bytes, claimed_address: str) -> bool:
    return _same_address(recover_personal_signer(message, signature), claimed_address)


def verify_typed_data_signature(
    domain: dict, types: dict, value: dict, signature: str | bytes, claimed_address: str,
) -> bool:
    return _same_address(
        recover_typed_data_signer(domain, types, value, signature), claimed_address
    )
