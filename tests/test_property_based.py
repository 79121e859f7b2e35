"""
Property-based tests for the Sapphire SDK.

These tests verify that properties hold true across many random inputs.
"""
import cbor2
from hypothesis import given, strategies as st, settings

from sapphire_sdk import (
    LocalSigner, build_signable_call, hash_typed_data, new_data_pack, new_leash,
)
from sapphire_sdk.constants import UINT64_MAX, UINT256_MAX, ZERO_ADDRESS
from conftest import TEST_PRIV_KEY

# One signer for every example; key generation is not what is under test
SIGNER = LocalSigner(TEST_PRIV_KEY)

address_strategy = st.binary(min_size=20, max_size=20)
uint64_strategy = st.integers(min_value=0, max_value=UINT64_MAX)
uint256_strategy = st.integers(min_value=0, max_value=UINT256_MAX)
leash_strategy = st.builds(
    new_leash,
    nonce=uint64_strategy,
    block_number=uint64_strategy,
    block_hash=st.binary(min_size=32, max_size=32),
    block_range=uint64_strategy,
)
call_strategy = st.fixed_dictionaries({
    "chain_id": uint256_strategy,
    "caller": address_strategy,
    "callee": st.one_of(st.none(), address_strategy),
    "gas_limit": uint64_strategy,
    "gas_price": st.one_of(st.none(), uint256_strategy),
    "value": st.one_of(st.none(), uint256_strategy),
    "data": st.one_of(st.none(), st.binary(max_size=512)),
    "leash": leash_strategy,
})


@settings(max_examples=50)
@given(call=call_strategy)
def test_signed_pack_properties(call):
    """Every valid call signs, carries V = 28 and encodes its body"""
    pack = new_data_pack(SIGNER, **call)

    assert len(pack.signature) == 65
    assert pack.signature[64] == 28
    assert pack.leash == call["leash"]
    assert cbor2.loads(pack.encode()) == (call["data"] or b"")


@settings(max_examples=50)
@given(call=call_strategy)
def test_digest_is_deterministic(call):
    """Building the document twice gives the same digest"""
    first = hash_typed_data(build_signable_call(**call))
    second = hash_typed_data(build_signable_call(**call))
    assert first == second


@settings(max_examples=50)
@given(call=call_strategy)
def test_document_shape(call):
    """Absent fields take their placeholders, addresses are lowercase hex"""
    message = build_signable_call(**call)["message"]

    assert list(message) == ["from", "to", "gasLimit", "gasPrice", "value", "data", "leash"]
    assert message["from"] == "0x" + call["caller"].hex()
    if call["callee"] is None:
        assert message["to"] == ZERO_ADDRESS
    assert message["gasPrice"] == (call["gas_price"] or 0)
    assert message["value"] == (call["value"] or 0)
    assert message["data"] == (call["data"] or b"")


@settings(max_examples=25)
@given(call=call_strategy, other_range=uint64_strategy)
def test_leash_is_signed(call, other_range):
    """Changing the leash window changes the digest"""
    leash = call["leash"]
    if other_range == leash.block_range:
        return
    original = hash_typed_data(build_signable_call(**call)).digest
    call["leash"] = new_leash(leash.nonce, leash.block_number, leash.block_hash, other_range)
    assert hash_typed_data(build_signable_call(**call)).digest != original
