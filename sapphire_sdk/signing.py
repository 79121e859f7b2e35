"""
Digest computation and signer adapter for signed calls.
"""
import logging
from typing import Any, Callable, Dict, NamedTuple, Union

from eth_abi.exceptions import EncodingError
from eth_utils import keccak

from .constants import EIP712_PREFIX, RECOVERY_ID, SIGNATURE_LENGTH
from .eip712 import hash_struct
from .exceptions import HashingError, SigningError
from .signer import Signer, as_signer

logger = logging.getLogger(__name__)


class TypedDataHashes(NamedTuple):
    domain_separator: bytes
    message_hash: bytes
    digest: bytes


def hash_typed_data(document: Dict[str, Any]) -> TypedDataHashes:
    """
    Hash a typed-data document.

    Args:
        document: Document with ``types``, ``primaryType``, ``domain`` and
            ``message`` entries

    Returns:
        Domain separator, message hash and the final EIP-712 digest

    Raises:
        HashingError: If the domain or the message fails to encode
    """
    types = document["types"]

    try:
        domain_separator = hash_struct("EIP712Domain", types, document["domain"])
    except (ValueError, TypeError, EncodingError) as e:
        raise HashingError(f"failed to hash EIP712Domain: {e}", stage="domain") from e

    try:
        message_hash = hash_struct(document["primaryType"], types, document["message"])
    except (ValueError, TypeError, EncodingError) as e:
        raise HashingError(f"failed to hash typed data: {e}", stage="message") from e

    digest = keccak(EIP712_PREFIX + domain_separator + message_hash)
    return TypedDataHashes(domain_separator, message_hash, digest)


def sign_typed_data(
    signer: Union[Signer, Callable[[bytes], bytes]],
    document: Dict[str, Any]
) -> bytes:
    """
    Sign a typed-data document with an injected signer.

    The recovery byte of the returned signature is always 28, whatever the
    signer produced.

    Raises:
        HashingError: If the document cannot be hashed
        SigningError: If the signer fails or returns a malformed signature
    """
    digest = hash_typed_data(document).digest
    logger.debug(f"Signing typed data digest 0x{digest.hex()}")

    try:
        signature = as_signer(signer).sign(digest)
    except Exception as e:
        logger.error(f"Signer failed: {e}")
        raise SigningError(f"failed to sign typed data: {e}") from e

    if signature is None or len(signature) != SIGNATURE_LENGTH:
        got = "nothing" if signature is None else f"{len(signature)} bytes"
        raise SigningError(f"signer returned {got}, expected {SIGNATURE_LENGTH} bytes")

    signature = bytearray(signature)
    signature[64] = RECOVERY_ID
    return bytes(signature)
