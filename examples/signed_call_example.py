#!/usr/bin/env python3
"""
Example of making a signed call against Sapphire.
"""
import os

from eth_utils import keccak

from sapphire_sdk import (
    LocalSigner,
    NetworkConfig,
    SignedCallClient,
    X25519Cipher,
    build_signable_call,
    hash_typed_data,
)


def main():
    """
    Demonstrate usage of the SignedCallClient.

    This example shows how to:
    1. Initialize the client from a network configuration
    2. Build and inspect a signed call pack
    3. Submit the call with eth_call
    """
    PRIVATE_KEY = os.environ.get("PRIVATE_KEY")
    CONTRACT_ADDRESS = os.environ.get("CONTRACT_ADDRESS")
    NETWORK = os.environ.get("SAPPHIRE_NETWORK", "sapphire-testnet")
    RUNTIME_PUBLIC_KEY = os.environ.get("RUNTIME_PUBLIC_KEY")

    if not PRIVATE_KEY:
        print("ERROR: PRIVATE_KEY environment variable is required")
        return

    if not CONTRACT_ADDRESS:
        print("ERROR: CONTRACT_ADDRESS environment variable is required")
        return

    print("Available networks:")
    for network_name in NetworkConfig.load_networks().keys():
        print(f"  - {network_name}")

    signer = LocalSigner(PRIVATE_KEY)
    cipher = X25519Cipher(bytes.fromhex(RUNTIME_PUBLIC_KEY)) if RUNTIME_PUBLIC_KEY else None

    client = SignedCallClient(signer, network=NETWORK, cipher=cipher)
    client.assert_chain_id()
    print(f"Caller: {client.address} on chain {client.chain_id}")

    # balanceOf(caller): only the signer may read it on a confidential token
    selector = keccak(text="balanceOf(address)")[:4]
    calldata = selector + bytes(12) + bytes.fromhex(client.address[2:])

    pack = client.new_pack(CONTRACT_ADDRESS, calldata, gas_limit=30_000_000)
    print("Signed pack:")
    for key, value in pack.to_dict().items():
        print(f"  {key}: {value}")

    document = build_signable_call(
        client.chain_id, client.address, CONTRACT_ADDRESS,
        30_000_000, None, None, calldata, pack.leash,
    )
    print(f"Digest: 0x{hash_typed_data(document).digest.hex()}")

    result = client.call(CONTRACT_ADDRESS, calldata, gas_limit=30_000_000, leash=pack.leash)
    print(f"Result: 0x{result.hex()}")


if __name__ == "__main__":
    main()
