"""
Cipher capability for call bodies.

The pack only needs ``encrypt_encode(plaintext) -> bytes``. Two
implementations ship here: :class:`PlainCipher`, which wraps the body in a
plain envelope, and :class:`X25519Cipher`, a reference cipher that seals the
body to a peer X25519 key with a NaCl box. The production runtime uses a
Deoxys-II based box instead; such a cipher plugs in through the same
protocol.
"""
import logging
from typing import Protocol, Union, runtime_checkable

import nacl.exceptions
import nacl.public
import nacl.utils

from .constants import FORMAT_ENCRYPTED_X25519
from .envelope import (
    DataEnvelope, EncryptedBody, EncryptedBodyEnvelope,
    cbor_dumps, cbor_loads, decode_envelope,
)
from .exceptions import EncryptionError, EnvelopeError

logger = logging.getLogger(__name__)


@runtime_checkable
class Cipher(Protocol):
    """Protocol for call body ciphers"""

    def encrypt_encode(self, plaintext: bytes) -> bytes:
        """Encrypt ``plaintext`` and return the encoded call envelope"""
        ...


class PlainCipher:
    """Cipher that does not encrypt; emits a plain call envelope."""

    def encrypt_encode(self, plaintext: bytes) -> bytes:
        return DataEnvelope(body=plaintext).encode()


class X25519Cipher:
    """
    Seal call bodies to a peer's X25519 public key.

    Every call uses a fresh ephemeral key pair and a random nonce, so
    encrypting the same body twice gives unrelated ciphertexts.
    """

    def __init__(self, peer_public_key: Union[bytes, nacl.public.PublicKey]):
        if isinstance(peer_public_key, nacl.public.PublicKey):
            self.peer_public_key = peer_public_key
        else:
            try:
                self.peer_public_key = nacl.public.PublicKey(bytes(peer_public_key))
            except (nacl.exceptions.CryptoError, TypeError, ValueError) as e:
                raise EncryptionError(f"Invalid X25519 public key: {e}") from e

    def encrypt(self, plaintext: bytes) -> EncryptedBodyEnvelope:
        """
        Seal ``plaintext`` and return the envelope model.

        Raises:
            EncryptionError: If sealing fails
        """
        ephemeral = nacl.public.PrivateKey.generate()
        nonce = nacl.utils.random(nacl.public.Box.NONCE_SIZE)
        try:
            box = nacl.public.Box(ephemeral, self.peer_public_key)
            sealed = box.encrypt(cbor_dumps({"body": bytes(plaintext)}), nonce).ciphertext
        except (nacl.exceptions.CryptoError, TypeError) as e:
            raise EncryptionError(f"Failed to encrypt call body: {e}") from e

        logger.debug(f"Sealed {len(plaintext)} byte call body into {len(sealed)} bytes")
        return EncryptedBodyEnvelope(
            body=EncryptedBody(pk=bytes(ephemeral.public_key), data=sealed, nonce=nonce),
            format=FORMAT_ENCRYPTED_X25519,
        )

    def encrypt_encode(self, plaintext: bytes) -> bytes:
        return self.encrypt(plaintext).encode()

    @staticmethod
    def open(envelope: bytes, private_key: Union[bytes, nacl.public.PrivateKey]) -> bytes:
        """
        Recover the plaintext body of an envelope sealed to ``private_key``.

        Raises:
            EnvelopeError: If the bytes are not an encrypted envelope
            EncryptionError: If authentication or decryption fails
        """
        decoded = decode_envelope(envelope)
        if not isinstance(decoded, EncryptedBodyEnvelope):
            raise EnvelopeError("Envelope is not encrypted")
        if not isinstance(private_key, nacl.public.PrivateKey):
            private_key = nacl.public.PrivateKey(bytes(private_key))

        try:
            box = nacl.public.Box(private_key, nacl.public.PublicKey(decoded.body.pk))
            inner = box.decrypt(decoded.body.data, decoded.body.nonce)
        except nacl.exceptions.CryptoError as e:
            raise EncryptionError(f"Failed to decrypt call body: {e}") from e

        inner_map = cbor_loads(inner)
        if not isinstance(inner_map, dict) or not isinstance(inner_map.get("body"), bytes):
            raise EnvelopeError("Decrypted call has no body")
        return inner_map["body"]
