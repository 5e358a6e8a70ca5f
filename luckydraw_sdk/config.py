"""
Network and environment configuration for the LuckyDraw SDK.
"""
import importlib.resources
import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "mainnet"


class NetworkConfig:
    """Access to the bundled network table (``data/networks.json``)."""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load network definitions, cached after the first read.

        Returns:
            Mapping of network name to its settings
        """
        if cls._networks_cache is None:
            resource = importlib.resources.files("luckydraw_sdk").joinpath("data/networks.json")
            with resource.open("r", encoding="utf-8") as f:
                cls._networks_cache = json.load(f)
            logger.debug(f"Loaded {len(cls._networks_cache)} network definitions")
        return cls._networks_cache

    @classmethod
    def get_network(cls, name: str) -> Dict[str, Any]:
        """
        Get one network's settings.

        Raises:
            ValueError: If the network is unknown
        """
        networks = cls.load_networks()
        if name not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Unknown network '{name}'. Available networks: {available}")
        return networks[name]

    @classmethod
    def get_rpc_url(cls, name: str, override: Optional[str] = None) -> str:
        """
        Resolve the RPC URL for a network.

        Precedence: ``override``, then ``<NAME>_RPC_URL`` from the environment,
        then the bundled default.
        """
        if override:
            return override
        env_key = f"{name.upper().replace('-', '_')}_RPC_URL"
        env_value = os.environ.get(env_key)
        if env_value:
            return env_value
        return cls.get_network(name)["rpc"]

    @classmethod
    def get_prefix(cls, name: str) -> str:
        """Address network prefix ("f" or "t")."""
        return cls.get_network(name)["prefix"]

    @classmethod
    def get_init_actor(cls, name: str) -> str:
        """Address of the builtin Init actor."""
        return cls.get_network(name)["initActor"]


def setup_from_env() -> Dict[str, Optional[str]]:
    """
    Read wizard Setup defaults from the environment.

    Reads ``LUCKYDRAW_ACTOR``, ``LUCKYDRAW_RPC_URL`` and ``LUCKYDRAW_RPC_TOKEN``;
    when no URL is set, falls back to the network named by ``LUCKYDRAW_NETWORK``.
    """
    network = os.environ.get("LUCKYDRAW_NETWORK", DEFAULT_NETWORK)
    rpc_url = os.environ.get("LUCKYDRAW_RPC_URL")
    if not rpc_url:
        try:
            rpc_url = NetworkConfig.get_rpc_url(network)
        except ValueError as e:
            logger.warning(f"Ignoring LUCKYDRAW_NETWORK: {e}")
            rpc_url = None
    return {
        "network": network,
        "actor": os.environ.get("LUCKYDRAW_ACTOR"),
        "rpc_url": rpc_url,
        "rpc_token": os.environ.get("LUCKYDRAW_RPC_TOKEN"),
    }


def rpc_timeout_from_env(default: int = 30) -> int:
    """HTTP timeout from ``LUCKYDRAW_RPC_TIMEOUT`` in seconds."""
    raw = os.environ.get("LUCKYDRAW_RPC_TIMEOUT")
    if raw is None:
        return default
    try:
        timeout = int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid LUCKYDRAW_RPC_TIMEOUT {raw!r}, using {default}s")
        return default
    if timeout <= 0:
        logger.warning(f"Ignoring non-positive LUCKYDRAW_RPC_TIMEOUT {raw!r}, using {default}s")
        return default
    return timeout
