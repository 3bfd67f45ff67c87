"""Static, ordered catalog of provider tests."""

from __future__ import annotations

from typing import Optional

from wallet_compliance.models.catalog import Category, TestDescriptor


def _wallet(test_id: str, name: str, method: str, description: str, fallback: str) -> TestDescriptor:
    return TestDescriptor(
        test_id=test_id, name=name, category="wallet", method=method,
        description=description, fallback_message=fallback,
    )


def _eth(test_id: str, name: str, method: str, description: str, fallback: str = "Request failed") -> TestDescriptor:
    return TestDescriptor(
        test_id=test_id, name=name, category="eth", method=method,
        description=description, fallback_message=fallback,
    )


def _readonly(name: str, method: str) -> TestDescriptor:
    # Read-only ids are the method names themselves
    return TestDescriptor(
        test_id=method, name=name, category="readonly", method=method,
        fallback_message=f"{name} failed",
    )


WALLET_TESTS = (
    _wallet("addChain", "Add Chain", "wallet_addEthereumChain",
            "Add Polygon to wallet", "Failed to add chain"),
    _wallet("switchChain", "Switch Chain", "wallet_switchEthereumChain",
            "Switch to Ethereum Mainnet", "Failed to switch chain"),
    _wallet("watchAsset", "Watch Asset", "wallet_watchAsset",
            "Add USDC token", "Failed to add asset"),
    _wallet("getPermissions", "Get Permissions", "wallet_getPermissions",
            "Get current permissions", "Failed to get permissions"),
    _wallet("requestPermissions", "Request Permissions", "wallet_requestPermissions",
            "Request eth_accounts permission", "Failed to request permissions"),
    _wallet("revokePermissions", "Revoke Permissions", "wallet_revokePermissions",
            "Revoke permissions", "Method may not be supported"),
    _wallet("getCapabilities", "Get Capabilities", "wallet_getCapabilities",
            "Get wallet capabilities", "Method may not be supported"),
    _wallet("scanQR", "Scan QR Code", "wallet_scanQRCode",
            "Scan QR code", "QR scanning not supported"),
    _wallet("registerOnboarding", "Register Onboarding", "wallet_registerOnboarding",
            "Register for onboarding", "Method may not be supported"),
    _wallet("sendCalls", "Send Calls", "wallet_sendCalls",
            "Send batch calls (EIP-5792)", "Method may not be supported (EIP-5792)"),
    _wallet("getCallsStatus", "Get Calls Status", "wallet_getCallsStatus",
            "Get batch calls status", "Method may not be supported (EIP-5792)"),
)

ETH_TESTS = (
    _eth("accounts", "Get Accounts", "eth_accounts", "Get connected accounts"),
    _eth("requestAccounts", "Request Accounts", "eth_requestAccounts", "Request account access"),
    _eth("sendTransaction", "Send Transaction", "eth_sendTransaction", "Send 1 wei to self"),
    _eth("sendRaw", "Send Raw Transaction", "eth_sendRawTransaction", "Send signed transaction"),
    _eth("estimateGas", "Estimate Gas", "eth_estimateGas", "Estimate transaction gas"),
    _eth("call", "Call Contract", "eth_call", "Call USDC balanceOf"),
    _eth("encryptionKey", "Get Encryption Key", "eth_getEncryptionPublicKey",
         "Get public encryption key", "Method may not be supported"),
    _eth("decrypt", "Decrypt", "eth_decrypt", "Decrypt message", "Method requires encrypted data"),
    _eth("subscribe", "Subscribe", "eth_subscribe", "Subscribe to new blocks",
         "Subscriptions may not be supported"),
    _eth("newFilter", "New Filter", "eth_newFilter", "Create event filter"),
    _eth("blockFilter", "Block Filter", "eth_newBlockFilter", "Create block filter"),
    _eth("pendingFilter", "Pending TX Filter", "eth_newPendingTransactionFilter",
         "Create pending tx filter"),
)

SIGNATURE_TESTS = (
    TestDescriptor(
        test_id="personal_sign", name="Personal Sign", category="signature",
        method="personal_sign", description="Standard message signing (personal_sign)",
        fallback_message="Failed to sign message",
    ),
    TestDescriptor(
        test_id="eth_signTypedData_v4", name="Typed Data v4", category="signature",
        method="eth_signTypedData_v4", description="EIP-712 structured data signing",
        fallback_message="Failed to sign typed data",
    ),
    TestDescriptor(
        test_id="eth_sign", name="ETH Sign (Deprecated)", category="signature",
        method="eth_sign", description="Legacy signing method (unsafe)",
        fallback_message="Failed to execute eth_sign", result_name="eth_sign (Deprecated)",
    ),
)

TRANSACTION_TESTS = (
    TestDescriptor(
        test_id="basic_tx", name="Basic Transaction", category="transaction",
        method="eth_sendTransaction", description="Standard ETH transfer",
        fallback_message="Transaction failed", result_name="Basic Transaction",
    ),
    TestDescriptor(
        test_id="legacy_gas", name="Legacy Gas", category="transaction",
        method="eth_sendTransaction", description="Type 0 transaction",
        fallback_message="Legacy transaction failed", result_name="Legacy Gas Transaction",
    ),
    TestDescriptor(
        test_id="eip1559", name="EIP-1559", category="transaction",
        method="eth_sendTransaction", description="Type 2 transaction",
        fallback_message="EIP-1559 transaction failed", result_name="EIP-1559 Transaction",
    ),
    TestDescriptor(
        test_id="contract", name="Contract Call", category="transaction",
        method="eth_sendTransaction", description="Smart contract interaction",
        fallback_message="Contract interaction failed", result_name="Contract Interaction",
    ),
)

READONLY_TESTS = (
    _readonly("Block Number", "eth_blockNumber"),
    _readonly("Chain ID", "eth_chainId"),
    _readonly("Gas Price", "eth_gasPrice"),
    _readonly("Get Balance", "eth_getBalance"),
    _readonly("Transaction Count", "eth_getTransactionCount"),
    _readonly("Get Code", "eth_getCode"),
    _readonly("Get Storage At", "eth_getStorageAt"),
    _readonly("Get Block By Number", "eth_getBlockByNumber"),
    _readonly("Get Block By Hash", "eth_getBlockByHash"),
    _readonly("Get Transaction Receipt", "eth_getTransactionReceipt"),
    _readonly("Get Logs", "eth_getLogs"),
    _readonly("Fee History", "eth_feeHistory"),
    _readonly("Get Proof", "eth_getProof"),
    _readonly("Syncing", "eth_syncing"),
    _readonly("Coinbase", "eth_coinbase"),
    _readonly("Get Uncle Count By Block Hash", "eth_getUncleCountByBlockHash"),
    _readonly("Get Uncle Count By Block Number", "eth_getUncleCountByBlockNumber"),
    _readonly("Get Block Transaction Count By Hash", "eth_getBlockTransactionCountByHash"),
    _readonly("Get Block Transaction Count By Number", "eth_getBlockTransactionCountByNumber"),
    _readonly("Get Transaction By Block Hash And Index", "eth_getTransactionByBlockHashAndIndex"),
    _readonly("Get Transaction By Block Number And Index", "eth_getTransactionByBlockNumberAndIndex"),
    _readonly("Get Transaction By Hash", "eth_getTransactionByHash"),
    _readonly("Get Filter Changes", "eth_getFilterChanges"),
    _readonly("Get Filter Logs", "eth_getFilterLogs"),
    _readonly("Uninstall Filter", "eth_uninstallFilter"),
    _readonly("Unsubscribe", "eth_unsubscribe"),
    _readonly("Client Version", "web3_clientVersion"),
)

NETWORK_TESTS = (
    TestDescriptor(
        test_id="switch", name="Switch Network", category="network",
        method="wallet_switchEthereumChain", description="Switch to Sepolia, adding it if unknown",
        fallback_message="Failed to switch network", result_name="Network Switch",
    ),
    TestDescriptor(
        test_id="asset", name="Watch Asset", category="network",
        method="wallet_watchAsset", description="Add USDC token",
        fallback_message="Failed to add asset", result_name="Watch Asset",
    ),
    TestDescriptor(
        test_id="permissions", name="Get Permissions", category="network",
        method="wallet_getPermissions", description="Get current permissions",
        fallback_message="Failed to get permissions", result_name="Get Permissions",
    ),
)

CATALOG: tuple[TestDescriptor, ...] = (
    WALLET_TESTS + ETH_TESTS + SIGNATURE_TESTS + TRANSACTION_TESTS + READONLY_TESTS + NETWORK_TESTS
)

_BY_KEY = {d.key: d for d in CATALOG}


def descriptors_for(category: Category) -> list[TestDescriptor]:
    """Catalog entries for one category, in catalog order."""
    return [d for d in CATALOG if d.category == category]


def get_descriptor(category: str, test_id: str) -> Optional[TestDescriptor]:
    return _BY_KEY.get(f"{category}:{test_id}")


def resolve(selector: str) -> TestDescriptor:
    """Look up a ``category:test_id`` selector, raising KeyError if unknown."""
    category, _, test_id = selector.partition(":")
    descriptor = get_descriptor(category, test_id)
    if descriptor is None:
        raise KeyError(f"Unknown test: {selector}")
    return descriptor
