"""Chain switch with add-chain fallback (EIP-3326 / EIP-3085).

Only error code 4902 distinguishes "chain unknown to the wallet" from a user
rejection or an unsupported method, so it is the only rejection that leads
to an add-chain attempt.
"""

from __future__ import annotations

import logging

from wallet_compliance.models.config import ChainSpec
from wallet_compliance.provider.base import CHAIN_NOT_ADDED, Provider, ProviderError, to_int

from .context import CheckOutcome, error_message

logger = logging.getLogger(__name__)

SWITCH_TEST = "Network Switch"
ADD_TEST = "Add Network"


async def switch_chain(
    provider: Provider,
    chain_spec: ChainSpec,
    verify: bool = True,
) -> CheckOutcome:
    """Switch to ``chain_spec``, adding it first if the wallet does not know it."""
    try:
        await provider.request("wallet_switchEthereumChain", [{"chainId": chain_spec.chain_id}])
    except ProviderError as e:
        if e.code != CHAIN_NOT_ADDED:
            return CheckOutcome("error", error_message(e, "Failed to switch network"), test_name=SWITCH_TEST)
        logger.info("Chain %s not added (code %d), trying wallet_addEthereumChain",
                    chain_spec.chain_id, CHAIN_NOT_ADDED)
        return await _add_chain(provider, chain_spec)
    except Exception as e:
        return CheckOutcome("error", error_message(e, "Failed to switch network"), test_name=SWITCH_TEST)

    if verify:
        return await _confirm_active_chain(provider, chain_spec)
    return CheckOutcome(
        "success", "Successfully requested network switch",
        data={"chainId": chain_spec.chain_id}, test_name=SWITCH_TEST,
    )


async def _add_chain(provider: Provider, chain_spec: ChainSpec) -> CheckOutcome:
    try:
        await provider.request("wallet_addEthereumChain", [chain_spec.to_params()])
    except Exception as e:
        return CheckOutcome("error", error_message(e, "Failed to add network"), test_name=ADD_TEST)
    return CheckOutcome(
        "success", "Successfully added new network",
        data=chain_spec.to_params(), test_name=ADD_TEST,
    )


async def _confirm_active_chain(provider: Provider, chain_spec: ChainSpec) -> CheckOutcome:
    try:
        active = to_int(await provider.request("eth_chainId", []))
    except Exception as e:
        return CheckOutcome(
            "error", f"Switch resolved but the active chain could not be read: {error_message(e, 'eth_chainId failed')}",
            test_name=SWITCH_TEST,
        )
    data = {"requested": chain_spec.chain_id, "active": hex(active) if active is not None else None}
    if active != chain_spec.chain_id_int:
        return CheckOutcome(
            "error",
            f"Switch resolved but wallet reports chain {data['active']}, expected {chain_spec.chain_id}",
            data=data, test_name=SWITCH_TEST,
        )
    return CheckOutcome(
        "success", "Successfully requested network switch", data=data, test_name=SWITCH_TEST,
    )
