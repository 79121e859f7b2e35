"""
EIP-712 structured-data hashing over schema tables.

Types are described as ``{type_name: [{"name": ..., "type": ...}, ...]}``,
the same shape used by ``eth_signTypedData_v4``. Field order inside each list
is the encoding order.
"""
import re
from typing import Any, Dict, List, Sequence, Set

from eth_abi import encode as abi_encode
from eth_abi.exceptions import EncodingError
from eth_utils import keccak, to_bytes

from .constants import ADDRESS_LENGTH

Types = Dict[str, Sequence[Dict[str, str]]]

_ARRAY_RE = re.compile(r"^(.*)\[(\d*)\]$")
_INT_RE = re.compile(r"^(u?)int(\d+)$")
_FIXED_BYTES_RE = re.compile(r"^bytes(\d+)$")


def _base_type(type_name: str) -> str:
    match = _ARRAY_RE.match(type_name)
    while match:
        type_name = match.group(1)
        match = _ARRAY_RE.match(type_name)
    return type_name


def _find_dependencies(primary: str, types: Types, found: Set[str]) -> Set[str]:
    primary = _base_type(primary)
    if primary in found or primary not in types:
        return found
    found.add(primary)
    for field in types[primary]:
        _find_dependencies(field["type"], types, found)
    return found


def encode_type(primary: str, types: Types) -> str:
    """
    Encode a struct type and the struct types it references.

    >>> encode_type("Leash", {"Leash": [{"name": "nonce", "type": "uint64"}]})
    'Leash(uint64 nonce)'
    """
    if primary not in types:
        raise ValueError(f"Unknown struct type '{primary}'")
    deps = _find_dependencies(primary, types, set())
    deps.discard(primary)
    result = []
    for name in [primary] + sorted(deps):
        fields = ",".join(f"{f['type']} {f['name']}" for f in types[name])
        result.append(f"{name}({fields})")
    return "".join(result)


def type_hash(primary: str, types: Types) -> bytes:
    return keccak(text=encode_type(primary, types))


def _as_bytes(value: Any, type_name: str) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        if not value.startswith("0x"):
            raise ValueError(f"{type_name} string values must be 0x-prefixed hex, got {value!r}")
        return to_bytes(hexstr=value)
    raise TypeError(f"{type_name} expects bytes, got {type(value).__name__}")


def _as_int(value: Any, type_name: str) -> int:
    if isinstance(value, bool):
        raise TypeError(f"{type_name} expects an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 16) if value.lower().startswith("0x") else int(value, 10)
        except ValueError:
            raise ValueError(f"{type_name} expects a number, got {value!r}")
    raise TypeError(f"{type_name} expects an integer, got {type(value).__name__}")


def encode_value(type_name: str, value: Any, types: Types) -> bytes:
    """Encode a single field value into its 32-byte EIP-712 word."""
    if type_name in types:
        if not isinstance(value, dict):
            raise TypeError(f"{type_name} expects a mapping, got {type(value).__name__}")
        return hash_struct(type_name, types, value)

    array = _ARRAY_RE.match(type_name)
    if array:
        item_type, length = array.group(1), array.group(2)
        if not isinstance(value, (list, tuple)):
            raise TypeError(f"{type_name} expects a list, got {type(value).__name__}")
        if length and len(value) != int(length):
            raise ValueError(f"{type_name} expects {length} items, got {len(value)}")
        return keccak(b"".join(encode_value(item_type, item, types) for item in value))

    if type_name == "bytes":
        return keccak(_as_bytes(value, type_name))
    if type_name == "string":
        if not isinstance(value, str):
            raise TypeError(f"string expects str, got {type(value).__name__}")
        return keccak(text=value)

    fixed = _FIXED_BYTES_RE.match(type_name)
    if fixed:
        size = int(fixed.group(1))
        raw = _as_bytes(value, type_name)
        if len(raw) != size:
            raise ValueError(f"{type_name} expects exactly {size} bytes, got {len(raw)}")
        return abi_encode([type_name], [raw])

    if _INT_RE.match(type_name):
        return abi_encode([type_name], [_as_int(value, type_name)])

    if type_name == "address":
        if isinstance(value, (bytes, bytearray)) and len(value) != ADDRESS_LENGTH:
            raise ValueError(f"address expects {ADDRESS_LENGTH} bytes, got {len(value)}")
        return abi_encode(["address"], [value])

    if type_name == "bool":
        if not isinstance(value, bool):
            raise TypeError(f"bool expects bool, got {type(value).__name__}")
        return abi_encode(["bool"], [value])

    raise ValueError(f"Unsupported EIP-712 type '{type_name}'")


def encode_data(primary: str, types: Types, data: Dict[str, Any]) -> bytes:
    """typeHash followed by every field word, in schema order."""
    words: List[bytes] = [type_hash(primary, types)]
    for field in types[primary]:
        name = field["name"]
        if name not in data:
            raise ValueError(f"{primary}.{name} is missing")
        try:
            words.append(encode_value(field["type"], data[name], types))
        except TypeError as e:
            raise TypeError(f"{primary}.{name}: {e}") from e
        except (ValueError, EncodingError) as e:
            raise ValueError(f"{primary}.{name}: {e}") from e
    return b"".join(words)


def hash_struct(primary: str, types: Types, data: Dict[str, Any]) -> bytes:
    return keccak(encode_data(primary, types, data))
