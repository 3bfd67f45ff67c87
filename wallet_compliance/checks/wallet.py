"""wallet_* method checks (EIP-3085, EIP-3326, EIP-747, EIP-2255, EIP-5792)."""

from __future__ import annotations

import logging
from typing import Any

from wallet_compliance.executor.context import CheckOutcome, ExecutionContext, HarnessError
from wallet_compliance.models.catalog import TestDescriptor
from wallet_compliance.models.config import WatchAssetConfig
from wallet_compliance.provider.base import KNOWN_NETWORKS, Provider, to_int

logger = logging.getLogger(__name__)

ETH_ACCOUNTS_PERMISSION = {"eth_accounts": {}}


async def watch_asset(provider: Provider, asset: WatchAssetConfig) -> CheckOutcome:
    """A ``false`` answer means the user declined, which is a warning, not a failure."""
    # EIP-747 takes a bare object, not a positional list
    was_added = await provider.request("wallet_watchAsset", asset.to_params())
    if was_added:
        return CheckOutcome("success", "Asset added successfully", data=was_added)
    return CheckOutcome("warning", "User declined to add asset", data=was_added)


async def get_permissions(provider: Provider) -> CheckOutcome:
    permissions = await provider.request("wallet_getPermissions", [])
    return CheckOutcome(
        "success", f"Retrieved {len(permissions or [])} permission(s)", data=permissions,
    )


def _bundle_id(result: Any) -> str | None:
    # EIP-5792 v1 returned the id directly; later drafts wrap it in an object
    if isinstance(result, dict):
        return result.get("id")
    return result if isinstance(result, str) and result else None


async def run_wallet_check(descriptor: TestDescriptor, ctx: ExecutionContext) -> CheckOutcome:
    provider = ctx.provider
    config = ctx.config

    match descriptor.test_id:
        case "addChain":
            chain = config.add_chain
            await provider.request("wallet_addEthereumChain", [chain.to_params()])
            return CheckOutcome("success", f"Successfully added {chain.chain_name}")

        case "switchChain":
            chain_id = config.wallet_switch_chain_id
            await provider.request("wallet_switchEthereumChain", [{"chainId": chain_id}])
            name = KNOWN_NETWORKS.get(to_int(chain_id), chain_id)
            return CheckOutcome("success", f"Successfully switched to {name}")

        case "watchAsset":
            return await watch_asset(provider, config.watch_asset)

        case "getPermissions":
            return await get_permissions(provider)

        case "requestPermissions":
            permissions = await provider.request(
                "wallet_requestPermissions", [ETH_ACCOUNTS_PERMISSION]
            )
            return CheckOutcome("success", "Permissions requested successfully", data=permissions)

        case "revokePermissions":
            await provider.request("wallet_revokePermissions", [ETH_ACCOUNTS_PERMISSION])
            return CheckOutcome("success", "Permissions revoked successfully")

        case "getCapabilities":
            capabilities = await provider.request("wallet_getCapabilities", [ctx.account])
            return CheckOutcome("success", "Retrieved wallet capabilities", data=capabilities)

        case "scanQR":
            result = await provider.request("wallet_scanQRCode", [])
            return CheckOutcome("success", "QR code scanned", data=result)

        case "registerOnboarding":
            await provider.request("wallet_registerOnboarding", [])
            return CheckOutcome("success", "Onboarding registered")

        case "sendCalls":
            network = await provider.get_network()
            result = await provider.request("wallet_sendCalls", [{
                "version": "1.0",
                "chainId": hex(network.chain_id),
                "from": ctx.account,
                "calls": [{"to": ctx.account, "value": "0x0", "data": "0x"}],
            }])
            ctx.call_bundle_id = _bundle_id(result)
            logger.debug("Call bundle id: %s", ctx.call_bundle_id)
            return CheckOutcome("success", "Batch calls sent", data=result)

        case "getCallsStatus":
            if not ctx.call_bundle_id:
                raise HarnessError("No call bundle id; run wallet_sendCalls first")
            result = await provider.request("wallet_getCallsStatus", [ctx.call_bundle_id])
            return CheckOutcome("success", "Retrieved calls status", data=result)

        case _:
            raise ValueError(f"Unknown wallet test: {descriptor.test_id}")
