"""Binary codecs: hex quantities, Molecule tables, and CKB addresses."""

from ckb_asset_tracker.codec.address import decode_address, encode_address
from ckb_asset_tracker.codec.hexutil import bytes_to_hex, hex_to_bytes, hex_to_int
from ckb_asset_tracker.codec.molecule import (
    ckb_hash,
    decode_cluster_data,
    decode_spore_data,
    serialize_script,
)

__all__ = [
    "bytes_to_hex",
    "ckb_hash",
    "decode_address",
    "decode_cluster_data",
    "decode_spore_data",
    "encode_address",
    "hex_to_bytes",
    "hex_to_int",
    "serialize_script",
]
