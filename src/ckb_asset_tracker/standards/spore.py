"""Spore NFT standards: item cells and cluster (collection) cells."""

from ckb_asset_tracker.codec.molecule import decode_cluster_data, decode_spore_data
from ckb_asset_tracker.core.models import Cell, ClusterInfo, ScriptMode, SporeInfo
from ckb_asset_tracker.core.registry import StandardRegistry
from ckb_asset_tracker.standards.base import TypeScriptStandard


@StandardRegistry.register
class SporeStandard(TypeScriptStandard):
    """
    Spore item cell.

    The spore id is the type script args; content and cluster linkage live
    in the ``SporeData`` table stored as cell data.

    """

    name = "spore"
    mode = ScriptMode.SPORE

    def decode_spore(self, cell: Cell) -> SporeInfo | None:
        """
        Decode the spore held by a cell.

        Parameters
        ----------
        cell : Cell
            Cell to decode

        Returns
        -------
        SporeInfo | None
            Spore item, or None if the cell is not a spore cell

        Raises
        ------
        MoleculeError
            If the cell data is not a valid ``SporeData`` table

        """
        if not self.matches_cell(cell):
            return None

        spore_data = decode_spore_data(self._cell_data(cell))
        return SporeInfo(
            spore_id=cell.output.type_script.args,
            cluster_id=spore_data["cluster_id"],
            content=spore_data["content"],
            content_type=spore_data["content_type"],
        )


@StandardRegistry.register
class ClusterStandard(TypeScriptStandard):
    """Spore cluster cell defining a collection."""

    name = "cluster"
    mode = ScriptMode.CLUSTER

    def decode_cluster(self, cell: Cell) -> ClusterInfo | None:
        """Decode the cluster defined by a cell, or None if it is not a cluster cell."""
        if not self.matches_cell(cell):
            return None

        cluster_data = decode_cluster_data(self._cell_data(cell))
        return ClusterInfo(
            cluster_id=cell.output.type_script.args,
            name=cluster_data["name"],
            description=cluster_data["description"],
        )
