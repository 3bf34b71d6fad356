"""RPC layer with provider, retry logic, caching, and batch support."""

from ckb_asset_tracker.rpc.batch import RequestBatcher
from ckb_asset_tracker.rpc.cache import CacheEntry, RPCCache
from ckb_asset_tracker.rpc.provider import CkbRPCError, CkbRPCProvider
from ckb_asset_tracker.rpc.retry import RetryableHTTPStatusError, RetryConfig, call_with_retry

__all__ = [
    "CacheEntry",
    "CkbRPCError",
    "CkbRPCProvider",
    "RPCCache",
    "RequestBatcher",
    "RetryConfig",
    "RetryableHTTPStatusError",
    "call_with_retry",
]
