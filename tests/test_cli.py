"""Tests for the command-line interface."""

import pytest
from conftest import token
from rich.console import Console
from typer.testing import CliRunner

from ckb_asset_tracker.cli import main
from ckb_asset_tracker.core.aggregator import TransactionAssetAggregator
from ckb_asset_tracker.core.models import ScriptMode, TransactionWithBlock
from ckb_asset_tracker.core.registry import StandardRegistry
from ckb_asset_tracker.rpc import CkbRPCError, CkbRPCProvider
from ckb_asset_tracker.standards import LockScriptStandard

runner = CliRunner()

TOKEN_T = "0x" + "aa" * 32


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Render tables without wrapping."""
    monkeypatch.setattr(main, "console", Console(width=200))


@pytest.fixture
def offline(monkeypatch, lookup):
    """Route commands to the in-memory lookup instead of a node."""

    def build(network, rpc_url, workers):
        return TransactionAssetAggregator(lookup, max_workers=workers), CkbRPCProvider("http://localhost:8114")

    monkeypatch.setattr(main, "_build_aggregator", build)
    return lookup


def test_list_networks():
    result = runner.invoke(main.app, ["list-networks"])

    assert result.exit_code == 0
    assert "mainnet" in result.output
    assert "testnet" in result.output


def test_list_standards():
    result = runner.invoke(main.app, ["list-standards", "--network", "testnet"])

    assert result.exit_code == 0
    assert "xudt" in result.output
    assert "rgbpp_lock" in result.output


def test_list_standards_marks_missing_deployments(monkeypatch):
    monkeypatch.setattr(StandardRegistry, "_standards", {})

    @StandardRegistry.register
    class CustomLock(LockScriptStandard):
        name = "custom_lock"
        mode = ScriptMode.SECP256K1

    result = runner.invoke(main.app, ["list-standards"])

    assert result.exit_code == 0
    assert "custom_lock" in result.output
    assert "not deployed" in result.output


def test_unknown_network():
    result = runner.invoke(main.app, ["tx", "0x01", "--network", "devnet"])

    assert result.exit_code == 1
    assert "Unknown network" in result.output


def test_tx_json(offline):
    tx = offline.build_transaction([token(TOKEN_T, 10)], [token(TOKEN_T, 10)])
    offline.transactions[tx.hash] = TransactionWithBlock(transaction=tx, block_hash="0xb", block_number=3)

    result = runner.invoke(main.app, ["tx", tx.hash, "--format", "json"])

    assert result.exit_code == 0
    assert f'"txId": "{tx.hash}"' in result.output
    assert '"eventType": "transfer"' in result.output


def test_tx_table(offline):
    tx = offline.build_transaction([token(TOKEN_T, 10)], [token(TOKEN_T, 4), token(TOKEN_T, 6)])
    offline.transactions[tx.hash] = TransactionWithBlock(transaction=tx)

    result = runner.invoke(main.app, ["tx", tx.hash])

    assert result.exit_code == 0
    assert "(pending)" in result.output
    assert "transfer" in result.output
    assert "TKN" in result.output


def test_tx_not_found(offline):
    result = runner.invoke(main.app, ["tx", "0xmissing"])

    assert result.exit_code == 1
    assert "Transaction not found" in result.output


def test_tx_malformed_node_payload(offline, monkeypatch):
    def malformed(tx_hash):
        msg = f"Malformed transaction {tx_hash}: hash field required"
        raise CkbRPCError(msg)

    monkeypatch.setattr(offline, "get_transaction_with_block", malformed)

    result = runner.invoke(main.app, ["tx", "0x01"])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "Malformed transaction 0x01" in result.output


def test_block_json(offline):
    transactions = [offline.build_transaction([token(TOKEN_T, 5)], [token(TOKEN_T, 3)]) for _ in range(2)]
    block = offline.add_block(transactions, number=77)

    result = runner.invoke(main.app, ["block", block.header.hash, "--format", "json", "--workers", "2"])

    assert result.exit_code == 0
    assert result.output.count('"blockHeight": 77') == 2
    assert '"eventType": "burn_and_transfer"' in result.output


def test_empty_block_table(offline):
    block = offline.add_block([])

    result = runner.invoke(main.app, ["block", block.header.hash])

    assert result.exit_code == 0
    assert "no transactions" in result.output
