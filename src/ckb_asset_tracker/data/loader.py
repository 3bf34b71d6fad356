"""Network configuration loader."""

from pathlib import Path
from typing import Any

import yaml

DEFAULT_NETWORKS_PATH = Path(__file__).parent / "networks.yaml"


def load_networks(path: Path | None = None) -> dict[str, Any]:
    """
    Load network configuration from networks.yaml.

    Parameters
    ----------
    path : Path | None
        Alternative configuration file. Uses the bundled file if None.

    Returns
    -------
    dict[str, Any]
        Mapping of network name to its configuration

    """
    with open(path or DEFAULT_NETWORKS_PATH, encoding="utf-8") as f:
        return yaml.safe_load(f)["networks"]


def get_network_config(network: str, path: Path | None = None) -> dict[str, Any]:
    """
    Get configuration for a specific network.

    Parameters
    ----------
    network : str
        Network name (e.g., 'mainnet', 'testnet')
    path : Path | None
        Alternative configuration file

    Returns
    -------
    dict[str, Any]
        Network configuration including RPC endpoints and script deployments

    Raises
    ------
    KeyError
        If network is not found in configuration

    """
    return load_networks(path)[network]


def get_all_supported_networks(path: Path | None = None) -> list[str]:
    """Get list of all configured network names."""
    return list(load_networks(path).keys())


def get_rpc_endpoints(network: str, path: Path | None = None) -> list[str]:
    """Get list of RPC endpoint URLs for a network."""
    return get_network_config(network, path)["rpc_endpoints"]


def get_address_prefix(network: str, path: Path | None = None) -> str:
    """Get the bech32 human-readable prefix for addresses on a network."""
    return get_network_config(network, path)["address_prefix"]


def get_script_deployments(network: str, standard: str, path: Path | None = None) -> list[dict[str, str]]:
    """
    Get all deployments of a script standard on a network.

    Parameters
    ----------
    network : str
        Network name
    standard : str
        Standard name (e.g., 'xudt', 'spore')
    path : Path | None
        Alternative configuration file

    Returns
    -------
    list[dict[str, str]]
        ``{code_hash, hash_type}`` entries; empty if the standard is not deployed

    """
    try:
        scripts = get_network_config(network, path)["scripts"]
    except KeyError:
        return []
    return scripts.get(standard) or []


def get_token_metadata(network: str, path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Get configured display metadata for tokens, keyed by lowercase token id.

    Returns
    -------
    dict[str, dict[str, Any]]
        Mapping of token id to ``{name, symbol, decimals}``

    """
    tokens = get_network_config(network, path).get("tokens") or {}
    return {token_id.lower(): metadata for token_id, metadata in tokens.items()}
