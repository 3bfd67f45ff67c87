"""Transaction request builder honoring legacy and EIP-1559 fee models.

Absent fee fields stay absent so the wallet estimates them; nothing here
fills in zeros or derives one EIP-1559 field from the other.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from typing import Optional, TypedDict, Union

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_wei


class TransactionRequest(TypedDict, total=False):
    to: str
    value: int
    data: str
    type: int
    gasPrice: int
    maxFeePerGas: int
    maxPriorityFeePerGas: int
    gasLimit: int
    nonce: int
    chainId: int


@dataclass(frozen=True)
class LegacyFee:
    gas_price: Optional[int] = None  # wei
    gas_limit: Optional[int] = None


@dataclass(frozen=True)
class Eip1559Fee:
    max_fee_per_gas: Optional[int] = None  # wei
    max_priority_fee_per_gas: Optional[int] = None  # wei
    gas_limit: Optional[int] = None


FeeModel = Union[LegacyFee, Eip1559Fee]


def _to_wei(value: str | int | Decimal, unit: str, decimals: int, label: str) -> int:
    """Exact conversion; anything that is not a whole number of wei is rejected."""
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid {label}: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid {label}: {value!r}")
    if amount < 0:
        raise ValueError(f"{label} must not be negative: {value!r}")
    with localcontext() as ctx:
        ctx.prec = 999
        scaled = amount.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{label} is not a whole number of wei: {value!r}")
    return to_wei(amount, unit)


def ether_to_wei(amount: str | int | Decimal) -> int:
    return _to_wei(amount, "ether", 18, "amount")


def gwei_to_wei(value: str | int | Decimal | None) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _to_wei(value, "gwei", 9, "gas price")


def _apply_fee_model(
    request: TransactionRequest, fee_model: Optional[FeeModel], gas_limit: Optional[int],
) -> TransactionRequest:
    match fee_model:
        case None:
            pass  # wallet picks the type and fees
        case LegacyFee(gas_price=gas_price):
            request["type"] = 0
            if gas_price is not None:
                request["gasPrice"] = int(gas_price)
        case Eip1559Fee(max_fee_per_gas=max_fee, max_priority_fee_per_gas=priority):
            request["type"] = 2
            if max_fee is not None:
                request["maxFeePerGas"] = int(max_fee)
            if priority is not None:
                request["maxPriorityFeePerGas"] = int(priority)
        case _:
            raise TypeError(f"Unknown fee model: {fee_model!r}")

    limit = gas_limit if gas_limit is not None else getattr(fee_model, "gas_limit", None)
    if limit is not None:
        if isinstance(limit, bool) or int(limit) != limit or limit <= 0:
            raise ValueError(f"gas limit must be a positive integer: {limit!r}")
        request["gasLimit"] = int(limit)
    return request


def build_transfer(
    recipient: str,
    amount: str | int | Decimal,
    fee_model: Optional[FeeModel] = None,
    gas_limit: Optional[int] = None,
) -> TransactionRequest:
    """Plain value transfer; ``amount`` is in ether."""
    request: TransactionRequest = {"to": recipient, "value": ether_to_wei(amount)}
    return _apply_fee_model(request, fee_model, gas_limit)


def build_contract_call(
    contract: str,
    data: str,
    fee_model: Optional[FeeModel] = None,
    gas_limit: Optional[int] = None,
    value: int = 0,
) -> TransactionRequest:
    """Contract call with caller-encoded ``data``; the data is not checked against any ABI."""
    request: TransactionRequest = {"to": contract, "data": data}
    if value:
        request["value"] = int(value)
    return _apply_fee_model(request, fee_model, gas_limit)


def encode_erc20_transfer(to: str, amount: int) -> str:
    selector = function_signature_to_4byte_selector("transfer(address,uint256)")
    return "0x" + (selector + encode(["address", "uint256"], [to, amount])).hex()


def encode_erc20_balance_of(owner: str) -> str:
    selector = function_signature_to_4byte_selector("balanceOf(address)")
    return "0x" + (selector + encode(["address"], [owner])).hex()
