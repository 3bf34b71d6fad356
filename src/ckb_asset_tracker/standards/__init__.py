"""Script standards recognized on CKB."""

# Import all standards to trigger auto-registration
from ckb_asset_tracker.standards.base import BaseScriptStandard, LockScriptStandard, TypeScriptStandard
from ckb_asset_tracker.standards.locks import (
    AnyoneCanPayStandard,
    BtcTimeLockStandard,
    MultisigStandard,
    OmnilockStandard,
    RgbppLockStandard,
    Secp256k1Standard,
)
from ckb_asset_tracker.standards.spore import ClusterStandard, SporeStandard
from ckb_asset_tracker.standards.udt import SudtStandard, UdtStandard, XudtStandard

__all__ = [
    "AnyoneCanPayStandard",
    "BaseScriptStandard",
    "BtcTimeLockStandard",
    "ClusterStandard",
    "LockScriptStandard",
    "MultisigStandard",
    "OmnilockStandard",
    "RgbppLockStandard",
    "Secp256k1Standard",
    "SporeStandard",
    "SudtStandard",
    "TypeScriptStandard",
    "UdtStandard",
    "XudtStandard",
]
