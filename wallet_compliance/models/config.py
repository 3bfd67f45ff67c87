"""Configuration models for the wallet compliance harness."""

from __future__ import annotations

import json
import os
from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ALL_CATEGORIES = ["wallet", "eth", "signature", "transaction", "readonly", "network"]

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
USDC_MAINNET = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


class NativeCurrency(BaseModel):
    name: str
    symbol: str
    decimals: int = 18


class ChainSpec(BaseModel):
    """Parameters for wallet_addEthereumChain (EIP-3085)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    chain_id: str = Field(alias="chainId")
    chain_name: str = Field(alias="chainName")
    native_currency: NativeCurrency = Field(alias="nativeCurrency")
    rpc_urls: list[str] = Field(default_factory=list, alias="rpcUrls")
    block_explorer_urls: list[str] = Field(default_factory=list, alias="blockExplorerUrls")

    @field_validator("chain_id", mode="before")
    @classmethod
    def canonical_chain_id(cls, v):
        if isinstance(v, bool):
            raise ValueError("chainId must be an integer or hex string")
        if isinstance(v, int):
            return hex(v)
        if isinstance(v, str):
            text = v.strip().lower()
            if not text.startswith("0x"):
                raise ValueError(f"chainId must be 0x-prefixed hex: {v!r}")
            return hex(int(text, 16))
        raise ValueError(f"Unsupported chainId value: {v!r}")

    @property
    def chain_id_int(self) -> int:
        return int(self.chain_id, 16)

    def to_params(self) -> dict:
        """Render the camelCase object the wallet expects."""
        return self.model_dump(by_alias=True)


def _sepolia() -> ChainSpec:
    return ChainSpec(
        chainId="0xaa36a7",
        chainName="Sepolia Testnet",
        nativeCurrency=NativeCurrency(name="Sepolia ETH", symbol="ETH", decimals=18),
        rpcUrls=["https://sepolia.infura.io/v3/"],
        blockExplorerUrls=["https://sepolia.etherscan.io"],
    )


def _polygon() -> ChainSpec:
    return ChainSpec(
        chainId="0x89",
        chainName="Polygon Mainnet",
        nativeCurrency=NativeCurrency(name="MATIC", symbol="MATIC", decimals=18),
        rpcUrls=["https://polygon-rpc.com"],
        blockExplorerUrls=["https://polygonscan.com"],
    )


class WatchAssetConfig(BaseModel):
    type: str = "ERC20"
    address: str = USDC_MAINNET
    symbol: str = "USDC"
    decimals: int = 6
    image: Optional[str] = "https://cryptologos.cc/logos/usd-coin-usdc-logo.png"

    def to_params(self) -> dict:
        options = {"address": self.address, "symbol": self.symbol, "decimals": self.decimals}
        if self.image:
            options["image"] = self.image
        return {"type": self.type, "options": options}


class HarnessConfig(BaseModel):
    # Provider
    rpc_url: str = "http://127.0.0.1:1248"
    account: Optional[str] = None
    request_timeout_seconds: float = 60.0

    # Which catalog categories `run` executes by default
    categories: list[str] = Field(default_factory=lambda: list(ALL_CATEGORIES))

    # User-entered test parameters
    custom_message: str = "Hello Web3!"
    recipient: Optional[str] = None  # None = self for eth tests, zero address for transfers
    send_amount: str = "0.0001"  # ether
    gas_limit: Optional[int] = None
    gas_price_gwei: Optional[Decimal] = None
    max_fee_per_gas_gwei: Optional[Decimal] = None
    max_priority_fee_per_gas_gwei: Optional[Decimal] = None
    encrypted_message: Optional[str] = None

    # Chain management
    switch_chain: ChainSpec = Field(default_factory=_sepolia)
    add_chain: ChainSpec = Field(default_factory=_polygon)
    wallet_switch_chain_id: str = "0x1"
    verify_chain_after_switch: bool = True

    # Assets and contracts
    watch_asset: WatchAssetConfig = Field(default_factory=WatchAssetConfig)
    token_contract: str = USDC_MAINNET

    # Pacing and lifecycle policy
    readonly_spacing_seconds: float = 0.1
    unsubscribe_delay_seconds: float = 5.0

    # Transactions
    wait_for_receipt: bool = True
    receipt_timeout_seconds: Optional[float] = 120.0

    # Reporting
    report_formats: list[str] = Field(default_factory=lambda: ["json"])
    report_output_dir: str = "./wallet-reports"

    @field_validator("rpc_url", mode="before")
    @classmethod
    def resolve_env_rpc_url(cls, v: str) -> str:
        # RPC URLs often embed API keys
        if isinstance(v, str) and v.startswith("env:"):
            env_var = v[4:]
            resolved = os.environ.get(env_var)
            if resolved is None:
                raise ValueError(f"Environment variable '{env_var}' not set")
            return resolved
        return v

    @field_validator(
        "account", "recipient", "encrypted_message", "gas_limit", "gas_price_gwei",
        "max_fee_per_gas_gwei", "max_priority_fee_per_gas_gwei",
        mode="before",
    )
    @classmethod
    def blank_is_absent(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("categories")
    @classmethod
    def known_categories(cls, v: list[str]) -> list[str]:
        unknown = [c for c in v if c not in ALL_CATEGORIES]
        if unknown:
            raise ValueError(f"Unknown categories: {', '.join(unknown)}")
        return v

    @field_validator("readonly_spacing_seconds")
    @classmethod
    def minimum_spacing(cls, v: float) -> float:
        if v < 0.1:
            raise ValueError("readonly_spacing_seconds must be at least 0.1")
        return v

    @classmethod
    def load(cls, path: str | Path) -> "HarnessConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(mode="json", by_alias=True), f, indent=2)
