"""Helpers for the 0x-prefixed hex encoding used throughout the CKB JSON-RPC."""


def strip_prefix(value: str) -> str:
    """Return ``value`` without a leading ``0x``."""
    return value[2:] if value.startswith(("0x", "0X")) else value


def hex_to_bytes(value: str) -> bytes:
    """
    Decode a 0x-prefixed hex string into bytes.

    Parameters
    ----------
    value : str
        Hex string, with or without the ``0x`` prefix

    Returns
    -------
    bytes
        Decoded bytes

    Raises
    ------
    ValueError
        If the string is not valid hex

    """
    return bytes.fromhex(strip_prefix(value))


def bytes_to_hex(data: bytes) -> str:
    """Encode bytes as a lowercase 0x-prefixed hex string."""
    return "0x" + data.hex()


def hex_to_int(value: str | int) -> int:
    """
    Decode a JSON-RPC quantity (``"0x1a"``) into an int.

    Ints are returned unchanged so models accept both wire and Python values.

    """
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        msg = f"Expected a hex quantity, got {value!r}"
        raise ValueError(msg)
    body = strip_prefix(value)
    if not body:
        msg = f"Empty hex quantity: {value!r}"
        raise ValueError(msg)
    return int(body, 16)
