"""Caller-facing queries: classify a transaction or every transaction of a block."""

import logging
from concurrent.futures import ThreadPoolExecutor

from ckb_asset_tracker.core.classifier import TransactionAssetClassifier
from ckb_asset_tracker.core.models import Block, TransactionAssetRecord
from ckb_asset_tracker.core.service import AssetLookup
from ckb_asset_tracker.errors import BlockNotFoundError, TransactionNotFoundError

logger = logging.getLogger(__name__)


class TransactionAssetAggregator:
    """
    Orchestrates classification of transactions fetched by hash.

    Workflow:
    1. Fetch the transaction (or block) via the lookup
    2. Classify each transaction independently
    3. Return records in transaction (block-declared) order

    Parameters
    ----------
    lookup : AssetLookup
        Lookup collaborators
    classifier : TransactionAssetClassifier | None
        Classifier; built from ``lookup`` if None
    max_workers : int
        Maximum transactions of one block classified concurrently

    """

    def __init__(
        self,
        lookup: AssetLookup,
        classifier: TransactionAssetClassifier | None = None,
        max_workers: int = 4,
    ) -> None:
        self.lookup = lookup
        self.classifier = classifier or TransactionAssetClassifier(lookup)
        self.max_workers = max_workers

    def query_by_tx_hash(self, tx_hash: str) -> TransactionAssetRecord:
        """
        Classify the transaction with the given hash.

        Parameters
        ----------
        tx_hash : str
            Transaction hash

        Returns
        -------
        TransactionAssetRecord
            Classified transaction with its block context

        Raises
        ------
        TransactionNotFoundError
            If the node does not know the transaction
        CollaboratorError
            If any lookup fails

        """
        found = self.lookup.get_transaction_with_block(tx_hash)
        if found is None:
            raise TransactionNotFoundError(tx_hash)
        return self.classifier.classify(found.transaction, found.block_hash, found.block_number)

    def query_by_block_hash(self, block_hash: str) -> list[TransactionAssetRecord]:
        """
        Classify every transaction of the block with the given hash.

        Parameters
        ----------
        block_hash : str
            Block hash

        Returns
        -------
        list[TransactionAssetRecord]
            One record per transaction, in block order

        Raises
        ------
        BlockNotFoundError
            If the node does not know the block
        CollaboratorError
            If classifying any transaction fails

        """
        block = self.lookup.get_block(block_hash)
        if block is None:
            raise BlockNotFoundError(block_hash)
        return self.classify_block(block)

    def classify_block(self, block: Block) -> list[TransactionAssetRecord]:
        """
        Classify every transaction of a block in parallel.

        The first failing transaction's error is raised and transactions not
        yet started are cancelled; no transaction is silently dropped.

        Parameters
        ----------
        block : Block
            Block to classify

        Returns
        -------
        list[TransactionAssetRecord]
            One record per transaction, in block order

        """
        transactions = block.transactions
        if not transactions:
            return []

        header = block.header
        logger.debug("Classifying %d transactions of block %s", len(transactions), header.hash)

        with ThreadPoolExecutor(max_workers=max(1, min(len(transactions), self.max_workers))) as executor:
            # map yields in submission order and re-raises worker exceptions
            results = executor.map(lambda tx: self.classifier.classify(tx, header.hash, header.number), transactions)
            try:
                return list(results)
            except Exception:
                logger.debug("Block %s failed, cancelling queued transactions", header.hash)
                executor.shutdown(wait=False, cancel_futures=True)
                raise
