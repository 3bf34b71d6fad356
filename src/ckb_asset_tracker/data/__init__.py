"""Network configuration loading."""

from ckb_asset_tracker.data.loader import (
    get_address_prefix,
    get_all_supported_networks,
    get_network_config,
    get_rpc_endpoints,
    get_script_deployments,
    get_token_metadata,
    load_networks,
)

__all__ = [
    "get_address_prefix",
    "get_all_supported_networks",
    "get_network_config",
    "get_rpc_endpoints",
    "get_script_deployments",
    "get_token_metadata",
    "load_networks",
]
