"""Lookup collaborators used by the extractor and classifier."""

import logging
from pathlib import Path
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from ckb_asset_tracker import standards
from ckb_asset_tracker.codec.address import encode_address
from ckb_asset_tracker.core.models import (
    Block,
    BlockHeader,
    Cell,
    ClusterInfo,
    IsomorphicLink,
    OutPoint,
    Script,
    ScriptMode,
    SporeInfo,
    TokenBalance,
    Transaction,
    TransactionWithBlock,
    TxStatus,
)
from ckb_asset_tracker.core.registry import StandardRegistry
from ckb_asset_tracker.data import get_address_prefix, get_token_metadata
from ckb_asset_tracker.errors import CellResolutionError
from ckb_asset_tracker.rpc.batch import RequestBatcher
from ckb_asset_tracker.rpc.provider import CkbRPCError, CkbRPCProvider

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _parse(model: type[M], payload: Any, description: str) -> M:
    """
    Validate a node payload against a model.

    Raises
    ------
    CkbRPCError
        If the payload does not have the expected shape

    """
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        msg = f"Malformed {description}: {e}"
        raise CkbRPCError(msg) from e


class AssetLookup(Protocol):
    """
    Lookups the classification engine depends on.

    Every method may raise a ``CollaboratorError``; the engine propagates it
    unchanged and never returns a partial result.

    """

    def script_mode(self, script: Script) -> ScriptMode:
        """Classify a script into the standard it implements."""
        ...

    def script_to_address(self, script: Script) -> str:
        """Resolve a lock script to an address."""
        ...

    def extract_isomorphic_link(self, script: Script) -> IsomorphicLink | None:
        """Extract the external output an isomorphic lock is bound to."""
        ...

    def get_token_from_cell(self, cell: Cell) -> TokenBalance | None:
        """Return the fungible token balance a cell holds, if any."""
        ...

    def get_cluster_from_cell(self, cell: Cell) -> ClusterInfo | None:
        """Return the cluster a cell defines, if any."""
        ...

    def get_spore_from_cell(self, cell: Cell) -> SporeInfo | None:
        """Return the NFT item a cell holds, if any."""
        ...

    def resolve_input_cells(self, tx: Transaction) -> list[Cell]:
        """Resolve a transaction's inputs into the cells they consume, in input order."""
        ...

    def resolve_output_cells(self, tx: Transaction) -> list[Cell]:
        """Return the cells a transaction creates, in output order."""
        ...

    def get_transaction_with_block(self, tx_hash: str) -> TransactionWithBlock | None:
        """Fetch a transaction and its block context, or None if unknown."""
        ...

    def get_block(self, block_hash: str) -> Block | None:
        """Fetch a block, or None if unknown."""
        ...


class ChainAssetLookup:
    """
    AssetLookup backed by a CKB node and the registered script standards.

    Parameters
    ----------
    rpc_provider : CkbRPCProvider
        JSON-RPC provider for the node
    network : str
        Network name in networks.yaml (e.g., 'mainnet', 'testnet')
    config_path : Path | None
        Alternative networks.yaml
    token_metadata : dict[str, dict[str, Any]] | None
        Token display metadata keyed by token id; read from the network
        configuration if None
    max_batch_size : int
        Maximum previous transactions fetched per batch request

    """

    def __init__(
        self,
        rpc_provider: CkbRPCProvider,
        network: str = "mainnet",
        config_path: Path | None = None,
        token_metadata: dict[str, dict[str, Any]] | None = None,
        max_batch_size: int = 100,
    ) -> None:
        self.rpc_provider = rpc_provider
        self.network = network
        self.max_batch_size = max_batch_size
        self.address_prefix = get_address_prefix(network, config_path)
        if token_metadata is None:
            token_metadata = get_token_metadata(network, config_path)
        self.token_metadata = {token_id.lower(): metadata for token_id, metadata in token_metadata.items()}

        self.standards = StandardRegistry.instantiate_all(network, config_path=config_path)
        self._udt_standards = [s for s in self.standards if isinstance(s, standards.UdtStandard)]
        self._spore_standards = [s for s in self.standards if isinstance(s, standards.SporeStandard)]
        self._cluster_standards = [s for s in self.standards if isinstance(s, standards.ClusterStandard)]
        self._rgbpp_standards = [s for s in self.standards if isinstance(s, standards.RgbppLockStandard)]

    def script_mode(self, script: Script) -> ScriptMode:
        """Return the mode of the first standard the script is a deployment of."""
        for standard in self.standards:
            if standard.matches(script):
                return standard.mode
        return ScriptMode.UNKNOWN

    def script_to_address(self, script: Script) -> str:
        """Encode a lock script as a full-format address for this network."""
        return encode_address(script.code_hash, script.hash_type, script.args, self.address_prefix)

    def extract_isomorphic_link(self, script: Script) -> IsomorphicLink | None:
        for standard in self._rgbpp_standards:
            if standard.matches(script):
                return standard.extract_isomorphic_link(script)
        return None

    def get_token_from_cell(self, cell: Cell) -> TokenBalance | None:
        for standard in self._udt_standards:
            token = standard.decode_balance(cell, self.token_metadata)
            if token is not None:
                return token
        return None

    def get_cluster_from_cell(self, cell: Cell) -> ClusterInfo | None:
        for standard in self._cluster_standards:
            cluster = standard.decode_cluster(cell)
            if cluster is not None:
                return cluster
        return None

    def get_spore_from_cell(self, cell: Cell) -> SporeInfo | None:
        for standard in self._spore_standards:
            spore = standard.decode_spore(cell)
            if spore is not None:
                return spore
        return None

    def resolve_input_cells(self, tx: Transaction) -> list[Cell]:
        """
        Resolve the cells consumed by a transaction.

        Previous transactions are fetched in batch requests, each distinct
        hash once. A cellbase transaction consumes no cells.

        Parameters
        ----------
        tx : Transaction
            Transaction whose inputs are resolved

        Returns
        -------
        list[Cell]
            Consumed cells in input order

        Raises
        ------
        CellResolutionError
            If a previous transaction or output does not exist
        CkbRPCError
            If fetching previous transactions fails

        """
        if tx.is_cellbase():
            return []

        out_points = [cell_input.previous_output for cell_input in tx.inputs]
        tx_hashes = list(dict.fromkeys(out_point.tx_hash for out_point in out_points))

        batcher = RequestBatcher(self.rpc_provider, max_batch_size=self.max_batch_size)
        for tx_hash in tx_hashes:
            batcher.add_call("get_transaction", [tx_hash])
        logger.debug("Resolving %d inputs from %d previous transactions", len(out_points), batcher.call_count)

        previous: dict[str, Transaction] = {}
        for tx_hash, result in zip(tx_hashes, batcher.execute(), strict=True):
            payload = result.get("transaction") if isinstance(result, dict) else None
            if payload is None:
                msg = f"Previous transaction not found: {tx_hash}"
                raise CellResolutionError(msg)
            previous[tx_hash] = _parse(Transaction, payload, f"transaction {tx_hash}")

        cells = []
        for out_point in out_points:
            previous_tx = previous[out_point.tx_hash]
            if out_point.index >= len(previous_tx.outputs):
                msg = f"Output {out_point.index} does not exist in {out_point.tx_hash}"
                raise CellResolutionError(msg)
            cells.append(self._cell_at(previous_tx, out_point))
        return cells

    def resolve_output_cells(self, tx: Transaction) -> list[Cell]:
        return [self._cell_at(tx, OutPoint(tx_hash=tx.hash, index=index)) for index in range(len(tx.outputs))]

    @staticmethod
    def _cell_at(tx: Transaction, out_point: OutPoint) -> Cell:
        index = out_point.index
        output_data = tx.outputs_data[index] if index < len(tx.outputs_data) else "0x"
        return Cell(output=tx.outputs[index], output_data=output_data, out_point=out_point)

    def get_transaction_with_block(self, tx_hash: str) -> TransactionWithBlock | None:
        """
        Fetch a transaction and the block it was committed in.

        Parameters
        ----------
        tx_hash : str
            Transaction hash

        Returns
        -------
        TransactionWithBlock | None
            Transaction with block hash and number (None while pending),
            or None if the node does not know the transaction

        Raises
        ------
        CkbRPCError
            If the node fails or returns a malformed transaction or header

        """
        result = self.rpc_provider.get_transaction(tx_hash)
        if not result:
            return None
        if not isinstance(result, dict):
            msg = f"Malformed get_transaction result for {tx_hash}: {result!r}"
            raise CkbRPCError(msg)
        if result.get("transaction") is None:
            return None

        tx = _parse(Transaction, result["transaction"], f"transaction {tx_hash}")
        tx_status = _parse(TxStatus, result.get("tx_status") or {}, f"status of {tx_hash}")
        block_number = tx_status.block_number

        # Older nodes report only the block hash
        if tx_status.block_hash and block_number is None:
            header = self.rpc_provider.get_header(tx_status.block_hash)
            if header:
                block_number = _parse(BlockHeader, header, f"header {tx_status.block_hash}").number

        return TransactionWithBlock(transaction=tx, block_hash=tx_status.block_hash, block_number=block_number)

    def get_block(self, block_hash: str) -> Block | None:
        result = self.rpc_provider.get_block(block_hash)
        if result is None:
            return None
        return _parse(Block, result, f"block {block_hash}")
