"""
Sapphire SDK - signed, confidential calls for the Sapphire EVM runtime.
"""
from .cipher import Cipher, PlainCipher, X25519Cipher
from .client import SignedCallClient
from .config import NetworkConfig
from .constants import DOMAIN_NAME, DOMAIN_VERSION, RECOVERY_ID, ZERO_ADDRESS
from .envelope import DataEnvelope, EncryptedBody, EncryptedBodyEnvelope, decode_envelope
from .exceptions import (
    SapphireError, HashingError, SigningError, EncryptionError,
    LeashError, EnvelopeError, NetworkError,
)
from .leash import Leash, check_leash, new_leash
from .pack import Data, SignedCallDataPack, new_data_pack
from .signer import LocalSigner, Signer
from .signing import TypedDataHashes, hash_typed_data, sign_typed_data
from .typed_data import build_signable_call
from .version import __version__

__all__ = [
    "Cipher",
    "PlainCipher",
    "X25519Cipher",
    "SignedCallClient",
    "NetworkConfig",
    "DOMAIN_NAME",
    "DOMAIN_VERSION",
    "RECOVERY_ID",
    "ZERO_ADDRESS",
    "DataEnvelope",
    "EncryptedBody",
    "EncryptedBodyEnvelope",
    "decode_envelope",
    "SapphireError",
    "HashingError",
    "SigningError",
    "EncryptionError",
    "LeashError",
    "EnvelopeError",
    "NetworkError",
    "Leash",
    "check_leash",
    "new_leash",
    "Data",
    "SignedCallDataPack",
    "new_data_pack",
    "LocalSigner",
    "Signer",
    "TypedDataHashes",
    "hash_typed_data",
    "sign_typed_data",
    "build_signable_call",
    "__version__",
]
