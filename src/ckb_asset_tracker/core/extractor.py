"""Per-cell asset extraction."""

from ckb_asset_tracker.core.models import AssetRecord, Cell, EventType, NftData, ScriptMode, TokenData
from ckb_asset_tracker.core.service import AssetLookup

# Lock script modes that bind a cell to an output on another ledger
ISOMORPHIC_MODES = frozenset({ScriptMode.RGBPP})


class CellAssetExtractor:
    """
    Builds the asset record of a single cell.

    Parameters
    ----------
    lookup : AssetLookup
        Script classification, address, token and NFT lookups

    """

    def __init__(self, lookup: AssetLookup) -> None:
        self.lookup = lookup

    def extract(self, cell: Cell, index: int, event_type: EventType) -> AssetRecord:
        """
        Extract the asset held by a cell.

        An NFT item found on the cell replaces any cluster data found on it.

        Parameters
        ----------
        cell : Cell
            Resolved input or output cell
        index : int
            Position of the cell in the transaction's input or output list
        event_type : EventType
            Provisional event (BURN for inputs, MINT for outputs)

        Returns
        -------
        AssetRecord
            Record with token and/or NFT data populated when present

        Raises
        ------
        CollaboratorError
            If any lookup fails

        """
        lock = cell.output.lock
        script_mode = self.lookup.script_mode(lock)
        isomorphic_link = self.lookup.extract_isomorphic_link(lock) if script_mode in ISOMORPHIC_MODES else None

        record = AssetRecord(
            index=index,
            capacity=cell.output.capacity,
            event_type=event_type,
            address=self.lookup.script_to_address(lock),
            script_type=script_mode,
            isomorphic_link=isomorphic_link,
        )

        token = self.lookup.get_token_from_cell(cell)
        if token is not None:
            record.token_data = TokenData(
                token_id=token.token_info.token_id,
                name=token.token_info.name,
                symbol=token.token_info.symbol,
                decimals=token.token_info.decimals,
                amount=token.balance,
            )

        cluster = self.lookup.get_cluster_from_cell(cell)
        if cluster is not None:
            record.nft_data = NftData(
                cluster_id=cluster.cluster_id,
                cluster_name=cluster.name,
                cluster_description=cluster.description,
            )

        spore = self.lookup.get_spore_from_cell(cell)
        if spore is not None:
            record.nft_data = NftData(
                token_id=spore.spore_id,
                cluster_id=spore.cluster_id,
                content=spore.content,
                content_type=spore.content_type,
            )

        return record
