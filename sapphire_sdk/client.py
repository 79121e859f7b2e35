"""
SignedCallClient - builds and submits signed calls against a Sapphire node.
"""
import logging
import urllib.parse
from typing import Any, Dict, Optional

from web3 import Web3
from web3.exceptions import Web3Exception

from .cipher import Cipher
from .config import NetworkConfig, get_default_block_range
from .exceptions import NetworkError
from .leash import Leash, check_leash, new_leash
from .pack import SignedCallDataPack, new_data_pack
from .signer import Signer
from .typed_data import AddressLike


class SignedCallClient:
    """
    Client that turns plain ``eth_call`` parameters into signed calls.

    It fetches the leash from the node, signs the call with the injected
    signer and encodes the full pack (encrypted when a cipher is set).

    To use this client, you'll need:
    - A signer with an ``address`` attribute, or an explicit ``address``
    - An RPC URL or the name of a bundled network
    """

    def __init__(
        self,
        signer: Signer,
        rpc_url: Optional[str] = None,
        network: Optional[str] = None,
        cipher: Optional[Cipher] = None,
        address: Optional[str] = None,
        expected_chain_id: Optional[int] = None,
        block_range: Optional[int] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the SignedCallClient

        Args:
            signer: Digest signer used for every call
            rpc_url: Node RPC URL (overrides the network's URL)
            network: Name of a network in the bundled configuration
            cipher: Cipher for call bodies; None sends plaintext envelopes
            address: Caller address (defaults to ``signer.address``)
            expected_chain_id: Chain ID the node must report
                (defaults to the network's chain ID)
            block_range: Leash window in blocks (defaults to configuration)
            logger: Optional logger instance

        Raises:
            ValueError: If no RPC URL can be resolved, the URL is not https
                (unless local), or no caller address is available
        """
        self.logger = logger or logging.getLogger(__name__)
        self._network_name = network

        if network:
            rpc_url = NetworkConfig.get_rpc_url(network, override=rpc_url)
            if expected_chain_id is None:
                expected_chain_id = NetworkConfig.get_chain_id(network)
        if not rpc_url:
            raise ValueError("Either rpc_url or network must be provided")

        parsed = urllib.parse.urlparse(rpc_url)
        host = parsed.hostname or ""
        if parsed.scheme != "https" and host not in ("localhost", "127.0.0.1"):
            raise ValueError(f"rpc_url must use https:// for security (got: {parsed.scheme}://)")

        address = address or getattr(signer, "address", None)
        if not address:
            raise ValueError("Caller address required: pass address or use a signer with .address")

        self.rpc_url = rpc_url
        self.signer = signer
        self.cipher = cipher
        self.address = Web3.to_checksum_address(address)
        self.expected_chain_id = expected_chain_id
        self.block_range = block_range if block_range is not None else get_default_block_range()
        self.w3 = Web3(Web3.HTTPProvider(rpc_url))

    @property
    def chain_id(self) -> int:
        """Chain ID used in the signed domain"""
        if self.expected_chain_id is not None:
            return self.expected_chain_id
        try:
            return int(self.w3.eth.chain_id)
        except Exception as e:
            raise NetworkError(f"Failed to query chain ID: {e}") from e

    def assert_chain_id(self) -> None:
        """
        Check that the node serves the expected chain.

        Raises:
            NetworkError: On mismatch or if the node cannot be queried
        """
        if self.expected_chain_id is None:
            self.logger.warning("No expected chain ID set, skipping chain ID check")
            return

        try:
            actual = int(self.w3.eth.chain_id)
        except Exception as e:
            raise NetworkError(f"Failed to query chain ID: {e}") from e

        if actual != self.expected_chain_id:
            network = f" for network '{self._network_name}'" if self._network_name else ""
            raise NetworkError(
                f"Chain ID mismatch{network}: expected {self.expected_chain_id}, node reports {actual}"
            )

    def current_height(self) -> int:
        try:
            return int(self.w3.eth.block_number)
        except Exception as e:
            raise NetworkError(f"Failed to query block number: {e}") from e

    def make_leash(self, block_range: Optional[int] = None) -> Leash:
        """
        Build a leash from live chain state.

        The reference block is ``latest - 1`` so that every node serving the
        call has already seen it.

        Raises:
            NetworkError: If the node cannot be queried
        """
        try:
            nonce = self.w3.eth.get_transaction_count(self.address)
            height = int(self.w3.eth.block_number)
            block = self.w3.eth.get_block(max(height - 1, 0))
        except Exception as e:
            self.logger.error(f"Failed to fetch leash from node: {e}")
            raise NetworkError(f"Failed to fetch leash from node: {e}") from e

        leash = new_leash(
            nonce=nonce,
            block_number=int(block["number"]),
            block_hash=bytes(block["hash"]),
            block_range=self.block_range if block_range is None else block_range,
        )
        self.logger.debug(f"Made leash at block {leash.block_number} (nonce {nonce})")
        return leash

    def new_pack(
        self,
        to: Optional[AddressLike],
        data: Optional[bytes],
        gas_limit: int,
        gas_price: Optional[int] = None,
        value: Optional[int] = None,
        leash: Optional[Leash] = None
    ) -> SignedCallDataPack:
        """
        Sign a call, fetching a fresh leash unless one is given.

        Raises:
            LeashError: If a supplied leash does not fit the current height
            NetworkError: If the node cannot be queried
            HashingError, SigningError: If signing fails
        """
        if leash is None:
            leash = self.make_leash()
        else:
            check_leash(leash, self.current_height())

        return new_data_pack(
            self.signer, self.chain_id, self.address, to,
            gas_limit, gas_price, value, data, leash,
        )

    def build_call_data(
        self,
        to: Optional[AddressLike],
        data: Optional[bytes],
        gas_limit: int,
        gas_price: Optional[int] = None,
        value: Optional[int] = None,
        leash: Optional[Leash] = None,
        encrypt: bool = True
    ) -> bytes:
        """Signed, optionally encrypted ``data`` field for an ``eth_call``."""
        pack = self.new_pack(to, data, gas_limit, gas_price, value, leash)
        return pack.encode_full(self.cipher if encrypt else None)

    def call(
        self,
        to: AddressLike,
        data: Optional[bytes],
        gas_limit: int,
        gas_price: Optional[int] = None,
        value: Optional[int] = None,
        leash: Optional[Leash] = None
    ) -> bytes:
        """
        Submit a signed call with ``eth_call``.

        Returns:
            Raw return data from the node

        Raises:
            NetworkError: If the node rejects the call
        """
        call_data = self.build_call_data(to, data, gas_limit, gas_price, value, leash)
        tx: Dict[str, Any] = {
            "from": Web3.to_checksum_address(self.address),
            "to": Web3.to_checksum_address(to),
            "gas": gas_limit,
            "gasPrice": gas_price or 0,
            "value": value or 0,
            "data": "0x" + call_data.hex(),
        }
        try:
            result = self.w3.eth.call(tx)
        except (Web3Exception, ValueError) as e:
            self.logger.error(f"Signed call failed: {e}")
            raise NetworkError(f"Signed call failed: {e}") from e
        return bytes(result)
