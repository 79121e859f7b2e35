"""
Tests for the digest and signer adapter.
"""
import pytest
from unittest.mock import MagicMock

from eth_account import Account
from eth_account.messages import encode_typed_data

from sapphire_sdk import (
    HashingError, LocalSigner, SigningError, build_signable_call,
    hash_typed_data, sign_typed_data,
)
from conftest import TEST_PRIV_KEY


class TestHashTypedData:
    """Test hash_typed_data."""

    def test_digest_layout(self, call_args):
        from eth_utils import keccak
        hashes = hash_typed_data(build_signable_call(**call_args))
        assert len(hashes.digest) == 32
        assert hashes.digest == keccak(b"\x19\x01" + hashes.domain_separator + hashes.message_hash)

    def test_deterministic(self, call_args):
        first = hash_typed_data(build_signable_call(**call_args))
        second = hash_typed_data(build_signable_call(**call_args))
        assert first == second

    def test_chain_id_is_bound(self, call_args):
        first = hash_typed_data(build_signable_call(**call_args))
        call_args["chain_id"] = 0x5AFE
        second = hash_typed_data(build_signable_call(**call_args))
        assert first.domain_separator != second.domain_separator
        assert first.message_hash == second.message_hash

    def test_short_block_hash_fails_message_stage(self, call_args):
        from sapphire_sdk import new_leash
        call_args["leash"] = new_leash(0, 100, b"\x00" * 31, 5)
        with pytest.raises(HashingError) as exc_info:
            hash_typed_data(build_signable_call(**call_args))
        assert exc_info.value.stage == "message"
        assert "blockHash" in str(exc_info.value)

    def test_bad_chain_id_fails_domain_stage(self, call_args):
        call_args["chain_id"] = "not-a-chain"
        with pytest.raises(HashingError) as exc_info:
            hash_typed_data(build_signable_call(**call_args))
        assert exc_info.value.stage == "domain"

    def test_negative_value_fails(self, call_args):
        call_args["value"] = -1
        with pytest.raises(HashingError, match="failed to hash typed data"):
            hash_typed_data(build_signable_call(**call_args))

    def test_gas_limit_above_uint64_fails(self, call_args):
        call_args["gas_limit"] = 2**64
        with pytest.raises(HashingError):
            hash_typed_data(build_signable_call(**call_args))


# Reference call: chain 1, caller 0x00..01, no callee, gas 21000, data deadbeef,
# leash (0, 100, zero hash, 5), signed with TEST_PRIV_KEY
REFERENCE_DOMAIN_SEPARATOR = "30de939492c5ce1bb46ac5f97a36d47ff6be46d794a7238aa536a9f7763e643e"
REFERENCE_MESSAGE_HASH = "dcf7be33cad6a9682d5658b4b8a03491f6f94ce9dd61bdda2742aaa877eca7f1"
REFERENCE_DIGEST = "bc820a5c96644e829849f58a0cbe11e0af2dd8517a80ea6b27b16d22f195099f"
REFERENCE_SIGNATURE = (
    "d144ed0e22e299f59d893f877e26f0f057e810632d175eea29a1bb970f8faf85"
    "39b52872137adf2caefae7d6c4c028db1bc33a8ca884922fbe8d5e9c3a89f8db"
    "1c"
)


class TestReferenceCall:
    """Known answers for the reference call."""

    def test_hashes(self, call_args):
        hashes = hash_typed_data(build_signable_call(**call_args))
        assert hashes.domain_separator.hex() == REFERENCE_DOMAIN_SEPARATOR
        assert hashes.message_hash.hex() == REFERENCE_MESSAGE_HASH
        assert hashes.digest.hex() == REFERENCE_DIGEST

    def test_signature(self, test_signer, call_args):
        assert sign_typed_data(test_signer, build_signable_call(**call_args)).hex() == REFERENCE_SIGNATURE

    def test_signer_address(self, test_signer):
        assert test_signer.address.lower() == "0xfcad0b19bb29d4674531d6f115237e16afce377c"


class TestSignTypedData:
    """Test sign_typed_data."""

    def test_signature_shape(self, test_signer, call_args):
        signature = sign_typed_data(test_signer, build_signable_call(**call_args))
        assert len(signature) == 65
        assert signature[64] == 28

    def test_reproducible(self, test_signer, call_args):
        doc = build_signable_call(**call_args)
        assert sign_typed_data(test_signer, doc) == sign_typed_data(LocalSigner(TEST_PRIV_KEY), doc)

    def test_r_and_s_come_from_signer(self, test_signer, call_args):
        doc = build_signable_call(**call_args)
        raw = test_signer.sign(hash_typed_data(doc).digest)
        assert sign_typed_data(test_signer, doc)[:64] == raw[:64]

    def test_raw_signature_recovers_signer(self, test_signer, call_args):
        """The digest is the standard EIP-712 one, so wallets recover the caller"""
        doc = build_signable_call(**call_args)
        raw = test_signer.sign(hash_typed_data(doc).digest)
        recovered = Account.recover_message(encode_typed_data(full_message=doc), signature=raw)
        assert recovered == test_signer.address

    @pytest.mark.parametrize("v", [0, 1, 27, 28, 255])
    def test_recovery_id_normalized(self, call_args, v):
        signer = MagicMock()
        signer.sign.return_value = b"\x11" * 32 + b"\x22" * 32 + bytes([v])
        signature = sign_typed_data(signer, build_signable_call(**call_args))
        assert signature == b"\x11" * 32 + b"\x22" * 32 + b"\x1c"

    def test_signer_receives_digest(self, call_args):
        doc = build_signable_call(**call_args)
        signer = MagicMock()
        signer.sign.return_value = bytes(65)
        sign_typed_data(signer, doc)
        signer.sign.assert_called_once_with(hash_typed_data(doc).digest)

    def test_callable_signer(self, test_signer, call_args):
        doc = build_signable_call(**call_args)
        assert sign_typed_data(test_signer.sign, doc) == sign_typed_data(test_signer, doc)

    def test_signer_failure(self, call_args):
        signer = MagicMock()
        signer.sign.side_effect = IOError("hardware token unplugged")
        with pytest.raises(SigningError, match="hardware token unplugged") as exc_info:
            sign_typed_data(signer, build_signable_call(**call_args))
        assert exc_info.value.stage == "signer"
        assert isinstance(exc_info.value.__cause__, IOError)

    @pytest.mark.parametrize("result", [None, b"", bytes(64), bytes(66)])
    def test_malformed_signature(self, call_args, result):
        signer = MagicMock()
        signer.sign.return_value = result
        with pytest.raises(SigningError, match="expected 65 bytes"):
            sign_typed_data(signer, build_signable_call(**call_args))

    def test_hashing_error_skips_signer(self, call_args):
        signer = MagicMock()
        call_args["gas_limit"] = -5
        with pytest.raises(HashingError):
            sign_typed_data(signer, build_signable_call(**call_args))
        signer.sign.assert_not_called()


class TestLocalSigner:
    """Test the eth_account backed signer."""

    def test_address(self, test_signer):
        assert test_signer.address == Account.from_key(TEST_PRIV_KEY).address

    def test_accepts_account(self):
        account = Account.from_key(TEST_PRIV_KEY)
        assert LocalSigner(account).address == account.address

    def test_rejects_wrong_digest_length(self, test_signer):
        with pytest.raises(ValueError, match="32 bytes"):
            test_signer.sign(b"\x00" * 31)

    def test_recovery_byte(self, test_signer):
        assert test_signer.sign(b"\x42" * 32)[64] in (27, 28)
