"""
Local private-key signer backed by eth_account.
"""
import logging
from typing import Union

from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..constants import HASH_LENGTH

logger = logging.getLogger(__name__)


class LocalSigner:
    """
    Signs raw digests with an in-memory secp256k1 key.

    Intended for tests and development tooling; production callers usually
    bring a wallet or hardware signer that implements the same ``sign``.
    """

    def __init__(self, private_key: Union[str, bytes, LocalAccount]):
        if isinstance(private_key, LocalAccount):
            self._account = private_key
        else:
            self._account = Account.from_key(private_key)
        logger.debug(f"Initialized local signer for {self._account.address}")

    @property
    def address(self) -> str:
        """Checksummed address of the signing key"""
        return self._account.address

    def sign(self, digest: bytes) -> bytes:
        """
        Sign a 32-byte digest.

        Args:
            digest: Hash to sign, used as-is (no EIP-191 prefix is added)

        Returns:
            65-byte signature as R || S || V with V in {27, 28}
        """
        if len(digest) != HASH_LENGTH:
            raise ValueError(f"digest must be {HASH_LENGTH} bytes, got {len(digest)}")
        signed = self._account.unsafe_sign_hash(digest)
        return bytes(signed.signature)
