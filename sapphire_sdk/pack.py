"""
Signed call data packs.

A :class:`SignedCallDataPack` carries the call body, the leash and the
EIP-712 signature over both. It is built once per call attempt and encoded
straight away for the ``data`` field of an ``eth_call``.
"""
import logging
from typing import Any, Callable, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from .cipher import Cipher
from .constants import SIGNATURE_LENGTH
from .envelope import DataEnvelope, cbor_dumps, cbor_loads
from .exceptions import EncryptionError, EnvelopeError, SapphireError
from .leash import Leash
from .signer import Signer
from .signing import sign_typed_data
from .typed_data import AddressLike, build_signable_call

logger = logging.getLogger(__name__)


class Data(BaseModel):
    """Plaintext part of the pack."""

    model_config = ConfigDict(frozen=True)

    body: bytes = b""


class SignedCallDataPack(BaseModel):
    """Signed call, ready to be encoded."""

    model_config = ConfigDict(frozen=True)

    data: Data
    leash: Leash
    signature: bytes

    @field_validator("signature")
    @classmethod
    def _signature_length(cls, v: bytes) -> bytes:
        if len(v) != SIGNATURE_LENGTH:
            raise ValueError(f"signature must be {SIGNATURE_LENGTH} bytes, got {len(v)}")
        return v

    def encode(self) -> bytes:
        """
        CBOR-encode the call body alone.

        Leash and signature are not part of the output; use
        :meth:`encode_full` when the receiver expects the whole pack.
        """
        return cbor_dumps(self.data.body)

    def encrypt_encode(self, cipher: Cipher) -> bytes:
        """
        Encrypt the body with ``cipher``, or fall back to :meth:`encode`.

        An empty body is never passed to the cipher.

        Raises:
            EncryptionError: If the cipher fails
        """
        if not self.data.body:
            return self.encode()

        try:
            return cipher.encrypt_encode(self.data.body)
        except EncryptionError:
            raise
        except Exception as e:
            logger.error(f"Cipher failed: {e}")
            raise EncryptionError(f"failed to encrypt call body: {e}") from e

    def encode_full(self, cipher: Optional[Cipher] = None) -> bytes:
        """
        CBOR-encode the whole pack: call envelope, leash and signature.

        Args:
            cipher: Cipher for the body; None sends the body in a plain
                envelope

        Raises:
            EncryptionError: If the cipher fails
            EnvelopeError: If the cipher output is not a CBOR call envelope
        """
        if cipher is None or not self.data.body:
            data_map: Any = DataEnvelope(body=self.data.body).to_cbor_map()
        else:
            data_map = cbor_loads(self.encrypt_encode(cipher))
            if not isinstance(data_map, dict) or "body" not in data_map:
                raise EnvelopeError("Cipher output is not a call envelope")

        return cbor_dumps({
            "data": data_map,
            "leash": self.leash.to_cbor_map(),
            "signature": self.signature,
        })

    def to_dict(self) -> Dict[str, Any]:
        """Hex-encoded view for logs and debugging."""
        return {
            "data": {"body": "0x" + self.data.body.hex()},
            "leash": {
                "nonce": self.leash.nonce,
                "block_number": self.leash.block_number,
                "block_hash": "0x" + self.leash.block_hash.hex(),
                "block_range": self.leash.block_range,
            },
            "signature": "0x" + self.signature.hex(),
        }


def new_data_pack(
    signer: Union[Signer, Callable[[bytes], bytes]],
    chain_id: int,
    caller: AddressLike,
    callee: Optional[AddressLike],
    gas_limit: int,
    gas_price: Optional[int],
    value: Optional[int],
    data: Optional[bytes],
    leash: Leash,
) -> SignedCallDataPack:
    """
    Sign a call and wrap it into a pack.

    The body is not encrypted here; use :meth:`SignedCallDataPack.encrypt_encode`.

    Raises:
        HashingError: If the typed-data document cannot be hashed
        SigningError: If the signer fails
    """
    try:
        signable = build_signable_call(chain_id, caller, callee, gas_limit, gas_price, value, data, leash)
        signature = sign_typed_data(signer, signable)
    except SapphireError as e:
        raise type(e)(f"failed to sign call: {e}", stage=e.stage) from e

    pack = SignedCallDataPack(
        data=Data(body=b"" if data is None else bytes(data)),
        leash=leash,
        signature=signature,
    )
    logger.debug(
        f"Built signed call pack for chain {chain_id}: "
        f"{len(pack.data.body)} byte body, leash block {leash.block_number}+{leash.block_range}"
    )
    return pack
