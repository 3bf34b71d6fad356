"""CKB full-format address encoding (bech32m payload of a lock script)."""

from ckb_asset_tracker.codec.hexutil import bytes_to_hex, hex_to_bytes
from ckb_asset_tracker.codec.molecule import HASH_TYPE_BYTES

FULL_FORMAT = 0x00

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
BECH32M_CONST = 0x2BC830A3
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_HASH_TYPES_BY_BYTE = {value: name for name, value in HASH_TYPE_BYTES.items()}


def _polymod(values: list[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i, generator in enumerate(_GENERATOR):
            if (top >> i) & 1:
                chk ^= generator
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _checksum(hrp: str, data: list[int]) -> list[int]:
    polymod = _polymod(_hrp_expand(hrp) + data + [0] * 6) ^ BECH32M_CONST
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]


def _convert_bits(data: bytes | list[int], from_bits: int, to_bits: int, *, pad: bool) -> list[int]:
    acc = 0
    bits = 0
    result = []
    max_value = (1 << to_bits) - 1
    for value in data:
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            result.append((acc >> bits) & max_value)
    if pad:
        if bits:
            result.append((acc << (to_bits - bits)) & max_value)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & max_value):
        msg = "Invalid padding in address payload"
        raise ValueError(msg)
    return result


def encode_address(code_hash: str, hash_type: str, args: str, prefix: str = "ckb") -> str:
    """
    Encode a lock script as a full-format CKB address.

    Parameters
    ----------
    code_hash : str
        Lock script code hash (0x hex, 32 bytes)
    hash_type : str
        One of ``data``, ``type``, ``data1``, ``data2``
    args : str
        Lock script args (0x hex)
    prefix : str
        Human-readable part: ``ckb`` for mainnet, ``ckt`` for testnet

    Returns
    -------
    str
        Bech32m address

    """
    payload = bytes([FULL_FORMAT]) + hex_to_bytes(code_hash) + bytes([HASH_TYPE_BYTES[str(hash_type)]])
    payload += hex_to_bytes(args)
    data = _convert_bits(payload, 8, 5, pad=True)
    return prefix + "1" + "".join(CHARSET[d] for d in data + _checksum(prefix, data))


def decode_address(address: str) -> tuple[str, str, str, str]:
    """
    Decode a full-format CKB address.

    Returns
    -------
    tuple[str, str, str, str]
        ``(prefix, code_hash, hash_type, args)``

    Raises
    ------
    ValueError
        If the address is malformed, has a bad checksum, or is not full format

    """
    address = address.lower()
    separator = address.rfind("1")
    if separator < 1 or separator + 7 > len(address):
        msg = f"Malformed address: {address}"
        raise ValueError(msg)
    prefix = address[:separator]
    try:
        data = [CHARSET.index(c) for c in address[separator + 1 :]]
    except ValueError as e:
        msg = f"Invalid character in address: {address}"
        raise ValueError(msg) from e
    if _polymod(_hrp_expand(prefix) + data) != BECH32M_CONST:
        msg = f"Invalid bech32m checksum: {address}"
        raise ValueError(msg)

    payload = bytes(_convert_bits(data[:-6], 5, 8, pad=False))
    if len(payload) < 34 or payload[0] != FULL_FORMAT:
        msg = f"Not a full-format address: {address}"
        raise ValueError(msg)
    hash_type = _HASH_TYPES_BY_BYTE.get(payload[33])
    if hash_type is None:
        msg = f"Unknown hash type byte {payload[33]:#x}"
        raise ValueError(msg)
    return prefix, bytes_to_hex(payload[1:33]), hash_type, bytes_to_hex(payload[34:])
