"""
CBOR call envelopes understood by the runtime.

A plain call is ``{"body": <bytes>}``; an encrypted call is
``{"body": {"pk": ..., "data": ..., "nonce": ...}, "format": <n>}``.
"""
from typing import Any, Dict, Union

import cbor2
from pydantic import BaseModel, ConfigDict

from .constants import FORMAT_ENCRYPTED_X25519, FORMAT_PLAIN
from .exceptions import EnvelopeError


def cbor_dumps(obj: Any) -> bytes:
    """Deterministic CBOR encoding (canonical map key order)."""
    return cbor2.dumps(obj, canonical=True)


def cbor_loads(data: bytes) -> Any:
    try:
        return cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError, TypeError) as e:
        raise EnvelopeError(f"Invalid CBOR: {e}") from e


class DataEnvelope(BaseModel):
    """Runtime call without encryption."""

    model_config = ConfigDict(frozen=True)

    body: bytes
    format: int = FORMAT_PLAIN

    def to_cbor_map(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"body": self.body}
        if self.format != FORMAT_PLAIN:
            result["format"] = self.format
        return result

    def encode(self) -> bytes:
        return cbor_dumps(self.to_cbor_map())


class EncryptedBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    pk: bytes
    data: bytes
    nonce: bytes

    def to_cbor_map(self) -> Dict[str, Any]:
        return {"pk": self.pk, "data": self.data, "nonce": self.nonce}


class EncryptedBodyEnvelope(BaseModel):
    """Runtime call whose body is sealed to the runtime's public key."""

    model_config = ConfigDict(frozen=True)

    body: EncryptedBody
    format: int = FORMAT_ENCRYPTED_X25519

    def to_cbor_map(self) -> Dict[str, Any]:
        return {"body": self.body.to_cbor_map(), "format": self.format}

    def encode(self) -> bytes:
        return cbor_dumps(self.to_cbor_map())


CallEnvelope = Union[DataEnvelope, EncryptedBodyEnvelope]


def envelope_from_map(value: Any) -> CallEnvelope:
    """
    Build an envelope model from a decoded CBOR map.

    Raises:
        EnvelopeError: If the map has neither envelope shape
    """
    if not isinstance(value, dict) or "body" not in value:
        raise EnvelopeError("Call envelope must be a map with a 'body' entry")

    body = value["body"]
    fmt = value.get("format", FORMAT_PLAIN)
    if not isinstance(fmt, int):
        raise EnvelopeError(f"Envelope format must be an integer, got {type(fmt).__name__}")

    if isinstance(body, bytes):
        return DataEnvelope(body=body, format=fmt)
    if isinstance(body, dict):
        missing = [k for k in ("pk", "data", "nonce") if not isinstance(body.get(k), bytes)]
        if missing:
            raise EnvelopeError(f"Encrypted body missing byte fields: {', '.join(missing)}")
        if fmt == FORMAT_PLAIN:
            raise EnvelopeError("Encrypted body requires a non-plain format")
        return EncryptedBodyEnvelope(
            body=EncryptedBody(pk=body["pk"], data=body["data"], nonce=body["nonce"]),
            format=fmt,
        )
    raise EnvelopeError(f"Unsupported envelope body type {type(body).__name__}")


def decode_envelope(data: bytes) -> CallEnvelope:
    """Decode CBOR bytes produced by :meth:`DataEnvelope.encode` or
    :meth:`EncryptedBodyEnvelope.encode`."""
    return envelope_from_map(cbor_loads(data))
