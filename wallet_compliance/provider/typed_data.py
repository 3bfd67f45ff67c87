"""EIP-712 payload assembly shared by the JSON-RPC signer and the verifier."""

from __future__ import annotations

# Canonical EIP712Domain member order
_DOMAIN_FIELDS = (
    ("name", "string"),
    ("version", "string"),
    ("chainId", "uint256"),
    ("verifyingContract", "address"),
    ("salt", "bytes32"),
)


def domain_type(domain: dict) -> list[dict]:
    return [{"name": n, "type": t} for n, t in _DOMAIN_FIELDS if domain.get(n) is not None]


def primary_type(types: dict) -> str:
    """The one struct no other struct references."""
    candidates = [t for t in types if t != "EIP712Domain"]
    referenced = {
        field["type"].split("[")[0]
        for name in candidates
        for field in types[name]
    }
    roots = [t for t in candidates if t not in referenced]
    if len(roots) != 1:
        raise ValueError(f"Ambiguous primary type, candidates: {roots}")
    return roots[0]


def build_typed_data(domain: dict, types: dict, value: dict) -> dict:
    """Full eth_signTypedData_v4 document."""
    clean_domain = {k: v for k, v in domain.items() if v is not None}
    all_types = {"EIP712Domain": domain_type(clean_domain)}
    all_types.update({k: v for k, v in types.items() if k != "EIP712Domain"})
    return {
        "types": all_types,
        "primaryType": primary_type(types),
        "domain": clean_domain,
        "message": value,
    }
