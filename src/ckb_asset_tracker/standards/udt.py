"""User-defined token standards (sUDT and xUDT)."""

from typing import Any

from ckb_asset_tracker.codec.molecule import script_hash
from ckb_asset_tracker.core.models import Cell, ScriptMode, TokenBalance, TokenInfo
from ckb_asset_tracker.core.registry import StandardRegistry
from ckb_asset_tracker.standards.base import TypeScriptStandard

# Balance is a u128 little-endian prefix of the cell data
UDT_AMOUNT_SIZE = 16


class UdtStandard(TypeScriptStandard):
    """
    Common behavior of UDT type scripts.

    The token id is the hash of the type script; every cell sharing the
    same type script holds the same token.

    """

    def decode_balance(
        self,
        cell: Cell,
        token_metadata: dict[str, dict[str, Any]] | None = None,
    ) -> TokenBalance | None:
        """
        Decode the token balance held by a cell.

        Parameters
        ----------
        cell : Cell
            Cell to decode
        token_metadata : dict[str, dict[str, Any]] | None
            Display metadata keyed by lowercase token id

        Returns
        -------
        TokenBalance | None
            Token and balance, or None if the cell is not a UDT cell of this
            standard or its data is too short to hold an amount

        """
        if not self.matches_cell(cell):
            return None

        data = self._cell_data(cell)
        if len(data) < UDT_AMOUNT_SIZE:
            return None

        token_id = script_hash(cell.output.type_script)
        metadata = (token_metadata or {}).get(token_id, {})
        token_info = TokenInfo(
            token_id=token_id,
            name=metadata.get("name"),
            symbol=metadata.get("symbol"),
            decimals=metadata.get("decimals"),
        )
        return TokenBalance(
            token_info=token_info,
            balance=int.from_bytes(data[:UDT_AMOUNT_SIZE], "little"),
        )


@StandardRegistry.register
class SudtStandard(UdtStandard):
    """Simple UDT (RFC-0025)."""

    name = "sudt"
    mode = ScriptMode.SUDT


@StandardRegistry.register
class XudtStandard(UdtStandard):
    """Extensible UDT (RFC-0052)."""

    name = "xudt"
    mode = ScriptMode.XUDT
