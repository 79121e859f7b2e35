"""
Pytest fixtures for the Sapphire SDK tests.
"""
import cbor2
import pytest
from unittest.mock import MagicMock

from sapphire_sdk import Leash, LocalSigner, new_leash
from sapphire_sdk._rate_limited_log import reset_rate_limited_log
from sapphire_sdk.config import NetworkConfig

TEST_RPC_URL = "https://rpc.example.com"
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_CHAIN_ID = 1
TEST_CALLER = b"\x00" * 19 + b"\x01"
TEST_CALLEE = bytes.fromhex("1234567890123456789012345678901234567890")
TEST_DATA = bytes.fromhex("deadbeef")
TEST_GAS_LIMIT = 21000


@pytest.fixture(autouse=True)
def _reset_module_state():
    """Network cache and rate-limited log are module-level; isolate tests."""
    NetworkConfig._networks_cache = None
    reset_rate_limited_log()
    yield
    NetworkConfig._networks_cache = None
    reset_rate_limited_log()


@pytest.fixture
def test_signer():
    """Deterministic local signer"""
    return LocalSigner(TEST_PRIV_KEY)


@pytest.fixture
def test_leash() -> Leash:
    """Leash of the reference scenario"""
    return new_leash(nonce=0, block_number=100, block_hash=b"\x00" * 32, block_range=5)


@pytest.fixture
def call_args(test_leash):
    """Arguments of the reference scenario, in builder order"""
    return dict(
        chain_id=TEST_CHAIN_ID,
        caller=TEST_CALLER,
        callee=None,
        gas_limit=TEST_GAS_LIMIT,
        gas_price=None,
        value=None,
        data=TEST_DATA,
        leash=test_leash,
    )


@pytest.fixture
def mock_cipher():
    """Cipher that records its input and returns a fixed envelope"""
    cipher = MagicMock()
    cipher.encrypt_encode.return_value = cbor2.dumps({"body": b"sealed", "format": 1})
    return cipher


@pytest.fixture
def mock_w3():
    """Web3 stand-in serving a chain at height 120"""
    w3 = MagicMock()
    w3.eth.chain_id = TEST_CHAIN_ID
    w3.eth.block_number = 120
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.get_block.side_effect = lambda n: {"number": n, "hash": bytes([n % 256]) * 32}
    w3.eth.call.return_value = b"\x00" * 32
    return w3
