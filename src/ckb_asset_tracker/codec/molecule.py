"""Molecule decoding for Spore/Cluster data and script hashing."""

import hashlib
import struct
from typing import Any

from ckb_asset_tracker.codec.hexutil import bytes_to_hex, hex_to_bytes
from ckb_asset_tracker.errors import MoleculeError

CKB_HASH_PERSONALIZATION = b"ckb-default-hash"

HASH_TYPE_BYTES = {
    "data": 0,
    "type": 1,
    "data1": 2,
    "data2": 4,
}

_U32 = struct.Struct("<I")


def ckb_hash(data: bytes) -> bytes:
    """
    Compute the CKB default hash (blake2b-256 with CKB personalization).

    Parameters
    ----------
    data : bytes
        Bytes to hash

    Returns
    -------
    bytes
        32-byte digest

    """
    return hashlib.blake2b(data, digest_size=32, person=CKB_HASH_PERSONALIZATION).digest()


def _read_u32(data: bytes, offset: int) -> int:
    if offset + 4 > len(data):
        msg = f"Truncated u32 at offset {offset} (length {len(data)})"
        raise MoleculeError(msg)
    return _U32.unpack_from(data, offset)[0]


def encode_bytes(data: bytes) -> bytes:
    """Encode a Molecule ``Bytes`` (fixvec<byte>)."""
    return _U32.pack(len(data)) + data


def encode_table(fields: list[bytes]) -> bytes:
    """Encode already-serialized fields as a Molecule table."""
    header_size = 4 * (len(fields) + 1)
    offsets = []
    cursor = header_size
    for field in fields:
        offsets.append(cursor)
        cursor += len(field)
    header = _U32.pack(cursor) + b"".join(_U32.pack(offset) for offset in offsets)
    return header + b"".join(fields)


def decode_table(data: bytes, min_fields: int) -> list[bytes]:
    """
    Split a Molecule table into its raw fields.

    Extra trailing fields are returned as well, so newer table versions
    remain readable by older readers.

    Parameters
    ----------
    data : bytes
        Serialized table
    min_fields : int
        Minimum number of fields the schema requires

    Returns
    -------
    list[bytes]
        Raw field payloads

    Raises
    ------
    MoleculeError
        If the header is inconsistent or too few fields are present

    """
    total_size = _read_u32(data, 0)
    if total_size != len(data):
        msg = f"Table size mismatch: header says {total_size}, got {len(data)}"
        raise MoleculeError(msg)
    if total_size == 4:
        field_count = 0
        offsets: list[int] = []
    else:
        first_offset = _read_u32(data, 4)
        if first_offset % 4 != 0 or first_offset < 8 or first_offset > total_size:
            msg = f"Invalid first offset {first_offset}"
            raise MoleculeError(msg)
        field_count = first_offset // 4 - 1
        offsets = [_read_u32(data, 4 * (i + 1)) for i in range(field_count)]

    if field_count < min_fields:
        msg = f"Table has {field_count} fields, expected at least {min_fields}"
        raise MoleculeError(msg)

    offsets.append(total_size)
    fields = []
    for start, end in zip(offsets, offsets[1:], strict=False):
        if start > end:
            msg = f"Offsets out of order: {start} > {end}"
            raise MoleculeError(msg)
        fields.append(data[start:end])
    return fields


def decode_bytes(data: bytes) -> bytes:
    """Decode a Molecule ``Bytes`` (fixvec<byte>)."""
    length = _read_u32(data, 0)
    if 4 + length != len(data):
        msg = f"Bytes length mismatch: header says {length}, got {len(data) - 4}"
        raise MoleculeError(msg)
    return data[4:]


def decode_bytes_opt(data: bytes) -> bytes | None:
    """Decode a Molecule ``BytesOpt``; an empty payload means None."""
    if not data:
        return None
    return decode_bytes(data)


def serialize_script(script: Any) -> bytes:
    """
    Serialize a script as a Molecule ``Script`` table.

    Parameters
    ----------
    script : Script
        Any object with ``code_hash``, ``hash_type`` and ``args`` attributes

    Returns
    -------
    bytes
        Serialized script

    """
    code_hash = hex_to_bytes(script.code_hash)
    if len(code_hash) != 32:
        msg = f"code_hash must be 32 bytes, got {len(code_hash)}"
        raise MoleculeError(msg)
    hash_type = HASH_TYPE_BYTES[str(script.hash_type)]
    return encode_table([code_hash, bytes([hash_type]), encode_bytes(hex_to_bytes(script.args))])


def script_hash(script: Any) -> str:
    """Return the 0x-prefixed CKB hash of a serialized script."""
    return bytes_to_hex(ckb_hash(serialize_script(script)))


def _decode_text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def decode_spore_data(data: bytes) -> dict[str, str | None]:
    """
    Decode a ``SporeData`` table.

    Returns
    -------
    dict[str, str | None]
        ``content_type`` (text), ``content`` (0x hex) and ``cluster_id``
        (0x hex or None)

    """
    fields = decode_table(data, min_fields=3)
    cluster_id = decode_bytes_opt(fields[2])
    return {
        "content_type": _decode_text(decode_bytes(fields[0])),
        "content": bytes_to_hex(decode_bytes(fields[1])),
        "cluster_id": bytes_to_hex(cluster_id) if cluster_id is not None else None,
    }


def decode_cluster_data(data: bytes) -> dict[str, str]:
    """Decode a ``ClusterData`` table (v1 or v2) into its name and description."""
    fields = decode_table(data, min_fields=2)
    return {
        "name": _decode_text(decode_bytes(fields[0])),
        "description": _decode_text(decode_bytes(fields[1])),
    }
