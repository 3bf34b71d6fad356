"""Transaction-level asset event classification: NFT lineage and token netting."""

import logging
from collections.abc import Callable, Sequence

from pydantic import BaseModel, Field

from ckb_asset_tracker.core.extractor import CellAssetExtractor
from ckb_asset_tracker.core.models import AssetRecord, EventType, NftData, Transaction, TransactionAssetRecord
from ckb_asset_tracker.core.service import AssetLookup

logger = logging.getLogger(__name__)

# A rule returns the event type it assigns to a record, or None if it does not apply
EventRule = Callable[[AssetRecord], EventType | None]


class TokenGroup(BaseModel):
    """
    Input and output totals of one token within a transaction.

    Attributes
    ----------
    token_id : str
        Token shared by every record in the group
    input_total : int
        Sum of input amounts
    input_indices : list[int]
        Positions of the group's input records
    output_total : int
        Sum of output amounts
    output_indices : list[int]
        Positions of the group's output records

    """

    token_id: str
    input_total: int = 0
    input_indices: list[int] = Field(default_factory=list)
    output_total: int = 0
    output_indices: list[int] = Field(default_factory=list)

    def net_event_type(self) -> EventType | None:
        """
        Event type implied by the group's net balance.

        Returns
        -------
        EventType | None
            None when either side totals zero (pure mint or pure burn, which
            keeps the per-cell classification)

        """
        if self.input_total == 0 or self.output_total == 0:
            return None
        if self.input_total > self.output_total:
            return EventType.BURN_AND_TRANSFER
        if self.input_total == self.output_total:
            return EventType.TRANSFER
        return EventType.MINT_AND_TRANSFER


def group_tokens(inputs: Sequence[AssetRecord], outputs: Sequence[AssetRecord]) -> dict[str, TokenGroup]:
    """
    Fold input and output records into per-token totals.

    Parameters
    ----------
    inputs : Sequence[AssetRecord]
        Input records in transaction order
    outputs : Sequence[AssetRecord]
        Output records in transaction order

    Returns
    -------
    dict[str, TokenGroup]
        Groups keyed by token id, in order of first appearance

    """
    groups: dict[str, TokenGroup] = {}
    for record in inputs:
        if record.token_data is None:
            continue
        group = groups.setdefault(record.token_data.token_id, TokenGroup(token_id=record.token_data.token_id))
        group.input_total += record.token_data.amount
        group.input_indices.append(record.index)
    for record in outputs:
        if record.token_data is None:
            continue
        group = groups.setdefault(record.token_data.token_id, TokenGroup(token_id=record.token_data.token_id))
        group.output_total += record.token_data.amount
        group.output_indices.append(record.index)
    return groups


class LineageIndex:
    """
    Index of NFT-bearing inputs by item id and by cluster id.

    Each id maps to the earliest input carrying it, so a lookup returns the
    same record a first-match scan over the inputs would.

    Parameters
    ----------
    inputs : Sequence[AssetRecord]
        Input records in transaction order

    """

    def __init__(self, inputs: Sequence[AssetRecord]) -> None:
        self.by_token_id: dict[str, int] = {}
        self.by_cluster_id: dict[str, int] = {}
        for record in inputs:
            if record.nft_data is None:
                continue
            if record.nft_data.token_id is not None:
                self.by_token_id.setdefault(record.nft_data.token_id, record.index)
            if record.nft_data.cluster_id is not None:
                self.by_cluster_id.setdefault(record.nft_data.cluster_id, record.index)

    def match(self, nft_data: NftData) -> int | None:
        """
        Find the input an NFT-bearing output continues.

        Parameters
        ----------
        nft_data : NftData
            NFT data of an output record

        Returns
        -------
        int | None
            Index of the earliest input sharing the output's item id or
            cluster id, or None for a newly minted NFT

        """
        candidates = []
        if nft_data.token_id is not None and nft_data.token_id in self.by_token_id:
            candidates.append(self.by_token_id[nft_data.token_id])
        if nft_data.cluster_id is not None and nft_data.cluster_id in self.by_cluster_id:
            candidates.append(self.by_cluster_id[nft_data.cluster_id])
        return min(candidates) if candidates else None


def match_lineage(inputs: Sequence[AssetRecord], outputs: Sequence[AssetRecord]) -> tuple[set[int], set[int]]:
    """
    Pair NFT-bearing outputs with the inputs they carry forward.

    An input may be claimed by several outputs.

    Returns
    -------
    tuple[set[int], set[int]]
        Indices of matched inputs and of matched outputs

    """
    index = LineageIndex(inputs)
    matched_inputs: set[int] = set()
    matched_outputs: set[int] = set()
    for record in outputs:
        if record.nft_data is None:
            continue
        input_index = index.match(record.nft_data)
        if input_index is not None:
            matched_inputs.add(input_index)
            matched_outputs.add(record.index)
    return matched_inputs, matched_outputs


def lineage_rule(matched_indices: set[int]) -> EventRule:
    """Rule assigning TRANSFER to records that continue an NFT across the transaction."""

    def rule(record: AssetRecord) -> EventType | None:
        return EventType.TRANSFER if record.index in matched_indices else None

    return rule


def net_balance_rule(groups: dict[str, TokenGroup]) -> EventRule:
    """Rule assigning the token group's net event to every token-bearing record."""

    def rule(record: AssetRecord) -> EventType | None:
        if record.token_data is None:
            return None
        return groups[record.token_data.token_id].net_event_type()

    return rule


def apply_rules(records: Sequence[AssetRecord], rules: Sequence[EventRule]) -> list[AssetRecord]:
    """
    Evaluate an ordered rule chain for every record.

    The record's current event type is the default; each applicable rule
    replaces it, so the last applicable rule wins.

    """
    classified = []
    for record in records:
        event_type = record.event_type
        for rule in rules:
            assigned = rule(record)
            if assigned is not None:
                event_type = assigned
        classified.append(record.model_copy(update={"event_type": event_type}))
    return classified


def classify_records(
    inputs: Sequence[AssetRecord],
    outputs: Sequence[AssetRecord],
) -> tuple[list[AssetRecord], list[AssetRecord]]:
    """
    Assign final event types to extracted input and output records.

    Rule chain, in precedence order: provisional default (BURN/MINT),
    NFT lineage match, token net balance.

    Parameters
    ----------
    inputs : Sequence[AssetRecord]
        Input records with provisional BURN events
    outputs : Sequence[AssetRecord]
        Output records with provisional MINT events

    Returns
    -------
    tuple[list[AssetRecord], list[AssetRecord]]
        New input and output records with final event types

    """
    matched_inputs, matched_outputs = match_lineage(inputs, outputs)
    groups = group_tokens(inputs, outputs)
    balance = net_balance_rule(groups)
    return (
        apply_rules(inputs, [lineage_rule(matched_inputs), balance]),
        apply_rules(outputs, [lineage_rule(matched_outputs), balance]),
    )


class TransactionAssetClassifier:
    """
    Classifies the asset events of every cell in a transaction.

    Parameters
    ----------
    lookup : AssetLookup
        Collaborators for cell resolution and asset lookups
    extractor : CellAssetExtractor | None
        Per-cell extractor; built from ``lookup`` if None

    """

    def __init__(self, lookup: AssetLookup, extractor: CellAssetExtractor | None = None) -> None:
        self.lookup = lookup
        self.extractor = extractor or CellAssetExtractor(lookup)

    def classify(
        self,
        tx: Transaction,
        block_hash: str | None = None,
        block_height: int | None = None,
    ) -> TransactionAssetRecord:
        """
        Classify a transaction.

        Parameters
        ----------
        tx : Transaction
            Transaction to classify
        block_hash : str | None
            Hash of the containing block, if committed
        block_height : int | None
            Number of the containing block, if committed

        Returns
        -------
        TransactionAssetRecord
            One record per input and output, in transaction order

        Raises
        ------
        CollaboratorError
            If any lookup fails; no partial result is returned

        """
        input_cells = self.lookup.resolve_input_cells(tx)
        inputs = [self.extractor.extract(cell, index, EventType.BURN) for index, cell in enumerate(input_cells)]

        output_cells = self.lookup.resolve_output_cells(tx)
        outputs = [self.extractor.extract(cell, index, EventType.MINT) for index, cell in enumerate(output_cells)]

        inputs, outputs = classify_records(inputs, outputs)
        logger.debug("Classified %s: %d inputs, %d outputs", tx.hash, len(inputs), len(outputs))

        return TransactionAssetRecord(
            tx_id=tx.hash,
            block_hash=block_hash,
            block_height=block_height,
            inputs=inputs,
            outputs=outputs,
        )
