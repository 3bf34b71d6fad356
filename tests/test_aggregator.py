"""Tests for transaction and block queries."""

import time

import pytest
from conftest import CellSpec, FakeLookup, token

from ckb_asset_tracker.core.aggregator import TransactionAssetAggregator
from ckb_asset_tracker.core.models import EventType, TransactionWithBlock
from ckb_asset_tracker.errors import BlockNotFoundError, CollaboratorError, TransactionNotFoundError

TOKEN_T = "0x" + "aa" * 32


def test_query_by_tx_hash_returns_block_context(lookup):
    """A committed transaction is classified with its block hash and height."""
    tx = lookup.build_transaction([token(TOKEN_T, 10)], [token(TOKEN_T, 10)])
    lookup.transactions[tx.hash] = TransactionWithBlock(transaction=tx, block_hash="0xb10c", block_number=7)

    result = TransactionAssetAggregator(lookup).query_by_tx_hash(tx.hash)

    assert result.tx_id == tx.hash
    assert result.block_hash == "0xb10c"
    assert result.block_height == 7
    assert result.outputs[0].event_type == EventType.TRANSFER


def test_query_by_tx_hash_pending_transaction(lookup):
    """A pending transaction has no block context."""
    tx = lookup.build_transaction([CellSpec()], [CellSpec()])
    lookup.transactions[tx.hash] = TransactionWithBlock(transaction=tx)

    result = TransactionAssetAggregator(lookup).query_by_tx_hash(tx.hash)

    assert result.block_hash is None
    assert result.block_height is None


def test_query_by_tx_hash_not_found(lookup):
    """Unknown transaction hashes raise TransactionNotFoundError."""
    with pytest.raises(TransactionNotFoundError, match="0xmissing") as exc_info:
        TransactionAssetAggregator(lookup).query_by_tx_hash("0xmissing")

    assert exc_info.value.tx_hash == "0xmissing"


def test_query_by_block_hash_not_found(lookup):
    """Unknown block hashes raise BlockNotFoundError."""
    with pytest.raises(BlockNotFoundError) as exc_info:
        TransactionAssetAggregator(lookup).query_by_block_hash("0xnoblock")

    assert exc_info.value.block_hash == "0xnoblock"


@pytest.mark.parametrize("max_workers", [1, 4, 16])
def test_block_results_follow_block_order(lookup, max_workers):
    """Records come back in block order whatever the worker count."""
    transactions = [lookup.build_transaction([CellSpec()], [CellSpec()] * (i + 1)) for i in range(6)]
    block = lookup.add_block(transactions, number=321)

    results = TransactionAssetAggregator(lookup, max_workers=max_workers).query_by_block_hash(block.header.hash)

    assert [result.tx_id for result in results] == [tx.hash for tx in transactions]
    assert [len(result.outputs) for result in results] == [1, 2, 3, 4, 5, 6]
    for result in results:
        assert result.block_hash == block.header.hash
        assert result.block_height == 321


def test_empty_block(lookup):
    """A block without transactions yields an empty list."""
    block = lookup.add_block([])

    assert TransactionAssetAggregator(lookup).query_by_block_hash(block.header.hash) == []


def test_block_failure_propagates(lookup):
    """One failing transaction fails the whole block query."""
    transactions = [lookup.build_transaction([CellSpec()], [CellSpec()]) for _ in range(3)]
    lookup.failing_transactions.add(transactions[1].hash)
    block = lookup.add_block(transactions)

    with pytest.raises(CollaboratorError, match=transactions[1].hash):
        TransactionAssetAggregator(lookup).query_by_block_hash(block.header.hash)


class SlowLookup(FakeLookup):
    """Lookup that stalls while resolving one transaction."""

    def __init__(self) -> None:
        super().__init__()
        self.slow: str | None = None

    def resolve_input_cells(self, tx):
        if tx.hash == self.slow:
            time.sleep(0.2)
        return super().resolve_input_cells(tx)


def test_block_failure_cancels_queued_transactions():
    """Transactions still queued when one fails are never classified."""
    lookup = SlowLookup()
    transactions = [lookup.build_transaction([CellSpec()], [CellSpec()]) for _ in range(10)]
    lookup.failing_transactions.add(transactions[0].hash)
    lookup.slow = transactions[1].hash
    block = lookup.add_block(transactions)

    with pytest.raises(CollaboratorError, match=transactions[0].hash):
        TransactionAssetAggregator(lookup, max_workers=1).query_by_block_hash(block.header.hash)

    assert set(lookup.resolved) <= {transactions[0].hash, transactions[1].hash}


def test_block_query_matches_single_queries(lookup):
    """Classifying a block equals classifying each of its transactions."""
    transactions = [
        lookup.build_transaction([token(TOKEN_T, 5)], [token(TOKEN_T, 3)]),
        lookup.build_transaction([CellSpec()], [token(TOKEN_T, 1)]),
    ]
    block = lookup.add_block(transactions, number=9)
    for tx in transactions:
        lookup.transactions[tx.hash] = TransactionWithBlock(
            transaction=tx,
            block_hash=block.header.hash,
            block_number=9,
        )
    aggregator = TransactionAssetAggregator(lookup)

    from_block = aggregator.query_by_block_hash(block.header.hash)

    assert from_block == [aggregator.query_by_tx_hash(tx.hash) for tx in transactions]
