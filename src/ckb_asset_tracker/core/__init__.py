"""Core functionality: models, extraction, classification, lookups and registry."""

from ckb_asset_tracker.core.aggregator import TransactionAssetAggregator
from ckb_asset_tracker.core.classifier import TokenGroup, TransactionAssetClassifier, classify_records
from ckb_asset_tracker.core.extractor import CellAssetExtractor
from ckb_asset_tracker.core.models import (
    AssetRecord,
    Block,
    Cell,
    EventType,
    IsomorphicLink,
    NftData,
    Script,
    ScriptMode,
    TokenData,
    Transaction,
    TransactionAssetRecord,
)
from ckb_asset_tracker.core.registry import StandardRegistry
from ckb_asset_tracker.core.service import AssetLookup, ChainAssetLookup

__all__ = [
    "AssetLookup",
    "AssetRecord",
    "Block",
    "Cell",
    "CellAssetExtractor",
    "ChainAssetLookup",
    "EventType",
    "IsomorphicLink",
    "NftData",
    "Script",
    "ScriptMode",
    "StandardRegistry",
    "TokenData",
    "TokenGroup",
    "Transaction",
    "TransactionAssetAggregator",
    "TransactionAssetClassifier",
    "TransactionAssetRecord",
    "classify_records",
]
