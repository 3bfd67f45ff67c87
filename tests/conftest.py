"""Pytest configuration and shared fixtures."""

from typing import Any

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct, encode_typed_data
from eth_utils import keccak

from wallet_compliance.executor.context import ExecutionContext
from wallet_compliance.executor.runner import TestRunner
from wallet_compliance.ledger import ResultLedger
from wallet_compliance.models.config import HarnessConfig
from wallet_compliance.provider.base import Provider, ProviderError, Signer, TransactionResponse
from wallet_compliance.provider.typed_data import build_typed_data

# Well-known throwaway key (hardhat account #0); never holds real funds
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
OTHER_PRIVATE_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"

BLOCK_HASH = "0x" + "ab" * 32
TX_HASH = "0x" + "cd" * 32
SEPOLIA_CHAIN_ID = 11155111


# ============================================================================
# Fake wallet provider
# ============================================================================


class FakeSigner(Signer):
    """Signs with a real local key so signatures verify end-to-end."""

    def __init__(self, provider: "FakeProvider", account):
        self.provider = provider
        self.account = account

    async def get_address(self) -> str:
        return self.account.address

    async def sign_message(self, message: str) -> str:
        self.provider.calls.append(("personal_sign", [message, self.account.address]))
        signed = self.account.sign_message(encode_defunct(text=message))
        return "0x" + bytes(signed.signature).hex()

    async def sign_typed_data(self, domain: dict, types: dict, value: dict) -> str:
        self.provider.calls.append(("eth_signTypedData_v4", [self.account.address, domain]))
        signable = encode_typed_data(full_message=build_typed_data(domain, types, value))
        signed = self.account.sign_message(signable)
        return "0x" + bytes(signed.signature).hex()

    async def send_transaction(self, request: dict) -> TransactionResponse:
        tx_hash = await self.provider.request("eth_sendTransaction", [dict(request)])
        return TransactionResponse(tx_hash, self.provider, request, poll_interval=0)

    async def sign_transaction(self, request: dict) -> str:
        self.provider.calls.append(("eth_signTransaction", [dict(request)]))
        return "0x02" + keccak(text=repr(sorted(request.items()))).hex()


class FakeProvider(Provider):
    """Scriptable in-memory provider that records every call."""

    def __init__(self, account=None, chain_id: int = SEPOLIA_CHAIN_ID):
        self.account = account or Account.from_key(TEST_PRIVATE_KEY)
        self.calls: list[tuple[str, Any]] = []
        self.failures: dict[str, Exception] = {}
        self.closed = False
        block = {
            "number": "0x10",
            "hash": BLOCK_HASH,
            "timestamp": "0x6553f100",
            "baseFeePerGas": "0x3b9aca00",
        }
        self.responses: dict[str, Any] = {
            "eth_chainId": hex(chain_id),
            "eth_accounts": [self.account.address],
            "eth_requestAccounts": [self.account.address],
            "eth_blockNumber": "0x10",
            "eth_gasPrice": "0x3b9aca00",
            "eth_maxPriorityFeePerGas": "0x3b9aca00",
            "eth_getBlockByNumber": block,
            "eth_getBlockByHash": block,
            "eth_getBalance": "0xde0b6b3a7640000",
            "eth_getTransactionCount": "0x5",
            "eth_estimateGas": "0x5208",
            "eth_sendTransaction": TX_HASH,
            "eth_sendRawTransaction": TX_HASH,
            "eth_getTransactionReceipt": {
                "status": "0x1", "blockNumber": "0x11", "transactionHash": TX_HASH,
            },
            "eth_newFilter": "0x1",
            "eth_newBlockFilter": "0x2",
            "eth_newPendingTransactionFilter": "0x3",
            "eth_subscribe": "0x9cef478923ff08bf67fde6c64013158d",
            "eth_uninstallFilter": True,
            "eth_unsubscribe": True,
            "eth_getFilterChanges": [],
            "eth_getFilterLogs": [],
            "eth_getLogs": [],
            "eth_getEncryptionPublicKey": "mtrHp1WHZM9rxF2Ilot9Hie5XmQcKCf7oDQ1DpGkTSI=",
            "wallet_watchAsset": True,
            "wallet_getPermissions": [{"parentCapability": "eth_accounts"}],
            "wallet_requestPermissions": [{"parentCapability": "eth_accounts"}],
            "wallet_sendCalls": {"id": "0xbundle01"},
            "wallet_getCallsStatus": {"status": 200},
            "web3_clientVersion": "FakeWallet/v1.0.0",
        }

    def fail(self, method: str, message: str = "", code: int | None = None) -> None:
        self.failures[method] = ProviderError(message, code=code)

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def params_for(self, method: str) -> list:
        return [params for m, params in self.calls if m == method]

    async def request(self, method: str, params: Any = None) -> Any:
        self.calls.append((method, params))
        if method in self.failures:
            raise self.failures[method]
        response = self.responses.get(method)
        if callable(response):
            return response(params)
        return response

    async def get_signer(self) -> Signer:
        return FakeSigner(self, self.account)

    async def close(self) -> None:
        self.closed = True


# ============================================================================
# Harness Fixtures
# ============================================================================


@pytest.fixture
def test_account():
    """Local account the fake wallet signs with."""
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def other_account():
    """A second account, for signatures that must not verify."""
    return Account.from_key(OTHER_PRIVATE_KEY)


@pytest.fixture
def fake_provider(test_account) -> FakeProvider:
    return FakeProvider(account=test_account)


@pytest.fixture
def harness_config() -> HarnessConfig:
    """Config with short delays so lifecycle tests finish quickly."""
    return HarnessConfig(
        rpc_url="http://127.0.0.1:8545",
        readonly_spacing_seconds=0.1,
        unsubscribe_delay_seconds=0.01,
        receipt_timeout_seconds=1.0,
    )


@pytest.fixture
def context(fake_provider, test_account, harness_config) -> ExecutionContext:
    return ExecutionContext(fake_provider, test_account.address, harness_config)


@pytest.fixture
def ledger() -> ResultLedger:
    return ResultLedger()


@pytest.fixture
def runner(context, ledger) -> TestRunner:
    return TestRunner(context, ledger)
