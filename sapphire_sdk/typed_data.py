"""
Typed-data builder for Sapphire signed calls.

The schema tables below are the wire contract with the runtime: field order
determines the hash layout, so reordering any entry invalidates signatures.
"""
import copy
from typing import Any, Dict, List, Optional, Union

from .constants import DOMAIN_NAME, DOMAIN_VERSION, ZERO_ADDRESS
from .exceptions import HashingError
from .leash import Leash

AddressLike = Union[bytes, bytearray, str]

EIP712_DOMAIN_FIELDS: List[Dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
]

CALL_FIELDS: List[Dict[str, str]] = [
    {"name": "from", "type": "address"},
    {"name": "to", "type": "address"},
    {"name": "gasLimit", "type": "uint64"},
    {"name": "gasPrice", "type": "uint256"},
    {"name": "value", "type": "uint256"},
    {"name": "data", "type": "bytes"},
    {"name": "leash", "type": "Leash"},
]

LEASH_FIELDS: List[Dict[str, str]] = [
    {"name": "nonce", "type": "uint64"},
    {"name": "blockNumber", "type": "uint64"},
    {"name": "blockHash", "type": "bytes32"},
    {"name": "blockRange", "type": "uint64"},
]

SIGNED_CALL_TYPES: Dict[str, List[Dict[str, str]]] = {
    "EIP712Domain": EIP712_DOMAIN_FIELDS,
    "Call": CALL_FIELDS,
    "Leash": LEASH_FIELDS,
}

PRIMARY_TYPE = "Call"


def format_address(address: AddressLike) -> str:
    """
    Render an address as ``0x``-prefixed lowercase hex.

    No checksum casing is applied; EIP-712 hashes the 20 raw bytes, so the
    casing only matters to validators that insist on checksums.

    Raises:
        HashingError: If the address is neither bytes nor a string
    """
    if isinstance(address, (bytes, bytearray)):
        return "0x" + bytes(address).hex()
    if isinstance(address, str):
        body = address[2:] if address[:2].lower() == "0x" else address
        return "0x" + body.lower()
    raise HashingError(
        f"address must be bytes or a hex string, got {type(address).__name__}",
        stage="message",
    )


def build_domain(chain_id: int) -> Dict[str, Any]:
    # verifyingContract and salt are intentionally left out
    return {
        "name": DOMAIN_NAME,
        "version": DOMAIN_VERSION,
        "chainId": chain_id,
    }


def build_signable_call(
    chain_id: int,
    caller: AddressLike,
    callee: Optional[AddressLike],
    gas_limit: int,
    gas_price: Optional[int],
    value: Optional[int],
    data: Optional[bytes],
    leash: Leash,
) -> Dict[str, Any]:
    """
    Assemble the EIP-712 document that authorizes a signed call.

    Args:
        chain_id: EVM chain ID of the runtime
        caller: Address of the signing account
        callee: Target contract, or None for contract creation
        gas_limit: Gas limit of the call
        gas_price: Gas price in base units (None means 0)
        value: Value transferred in base units (None means 0)
        data: Plaintext call data (selector and arguments)
        leash: Freshness token binding the call to a block window

    Returns:
        A typed-data document (``types``, ``primaryType``, ``domain``,
        ``message``) in the ``eth_signTypedData_v4`` shape
    """
    to_addr = ZERO_ADDRESS if callee is None else format_address(callee)

    return {
        "types": copy.deepcopy(SIGNED_CALL_TYPES),
        "primaryType": PRIMARY_TYPE,
        "domain": build_domain(chain_id),
        "message": {
            "from": format_address(caller),
            "to": to_addr,
            "gasLimit": gas_limit,
            "gasPrice": 0 if gas_price is None else gas_price,
            "value": 0 if value is None else value,
            "data": b"" if data is None else bytes(data),
            "leash": leash.to_message(),
        },
    }
