"""
Network and leash configuration for the Sapphire SDK.

Network definitions ship with the package in ``networks.json``. RPC URLs can
be overridden per network with ``<NETWORK_NAME>_RPC_URL`` environment
variables, e.g. ``SAPPHIRE_TESTNET_RPC_URL``.
"""
import json
import logging
import os
from importlib import resources
from typing import Any, Dict, Optional

from .constants import DEFAULT_BLOCK_RANGE, DEFAULT_MAX_BLOCK_RANGE

logger = logging.getLogger(__name__)

BLOCK_RANGE_ENV = "SAPPHIRE_LEASH_BLOCK_RANGE"
MAX_BLOCK_RANGE_ENV = "SAPPHIRE_MAX_BLOCK_RANGE"


class NetworkConfig:
    """Access to the bundled network table, cached after first load."""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load network definitions from the package data.

        Returns:
            Mapping of network name to its configuration
        """
        if cls._networks_cache is not None:
            return cls._networks_cache

        data = resources.files("sapphire_sdk").joinpath("networks.json").read_text(encoding="utf-8")
        cls._networks_cache = json.loads(data)
        logger.debug(f"Loaded {len(cls._networks_cache)} network definitions")
        return cls._networks_cache

    @classmethod
    def get_network(cls, network_name: str) -> Dict[str, Any]:
        """
        Get the configuration of one network.

        Raises:
            ValueError: If the network is not defined
        """
        networks = cls.load_networks()
        if network_name not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Unknown network '{network_name}'. Available networks: {available}")
        return networks[network_name]

    @classmethod
    def get_chain_id(cls, network_name: str) -> int:
        return int(cls.get_network(network_name)["chainId"])

    @classmethod
    def get_rpc_url(cls, network_name: str, override: Optional[str] = None) -> str:
        """
        Resolve the RPC URL of a network.

        Precedence: explicit override, then ``<NAME>_RPC_URL`` environment
        variable, then the bundled value.
        """
        if override:
            return override

        env_var = f"{network_name.upper().replace('-', '_')}_RPC_URL"
        env_url = os.environ.get(env_var)
        if env_url:
            logger.debug(f"Using RPC URL from {env_var}")
            return env_url

        return cls.get_network(network_name)["rpc"]


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default
    if value < 0:
        logger.warning(f"Ignoring negative {name}={raw!r}, using {default}")
        return default
    return value


def get_default_block_range() -> int:
    """Number of blocks a freshly made leash stays valid."""
    return _int_from_env(BLOCK_RANGE_ENV, DEFAULT_BLOCK_RANGE)


def get_max_block_range() -> int:
    """Widest leash window accepted by :func:`sapphire_sdk.leash.check_leash`."""
    return _int_from_env(MAX_BLOCK_RANGE_ENV, DEFAULT_MAX_BLOCK_RANGE)
