"""
Constants for Sapphire signed calls.

These literals are shared with the verifying runtime. Changing any of them
breaks signature verification on the node side.
"""

# EIP-712 domain of the signed query scheme
DOMAIN_NAME = "oasis-runtime-sdk/evm: signed query"
DOMAIN_VERSION = "1.0.0"

# Placeholder callee for contract-creation calls
ZERO_ADDRESS = "0x" + "0" * 40

# EIP-191 version byte 0x01 (structured data)
EIP712_PREFIX = b"\x19\x01"

# Eth wallets use a high recovery ID
RECOVERY_ID = 28

SIGNATURE_LENGTH = 65
ADDRESS_LENGTH = 20
HASH_LENGTH = 32

UINT64_MAX = 2**64 - 1
UINT256_MAX = 2**256 - 1

# EVM chain IDs of the Sapphire ParaTime
SAPPHIRE_MAINNET_CHAIN_ID = 0x5AFE
SAPPHIRE_TESTNET_CHAIN_ID = 0x5AFF
SAPPHIRE_LOCALNET_CHAIN_ID = 0x5AFD

# Leash defaults: reference block is latest - 1, valid for this many blocks
DEFAULT_BLOCK_RANGE = 15
DEFAULT_MAX_BLOCK_RANGE = 256

# Call formats of the runtime `Call` envelope
FORMAT_PLAIN = 0
FORMAT_ENCRYPTED_X25519 = 1
