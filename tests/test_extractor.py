"""Tests for per-cell asset extraction."""

from conftest import CellSpec, cluster, spore, token

from ckb_asset_tracker.core.extractor import CellAssetExtractor
from ckb_asset_tracker.core.models import ClusterInfo, EventType, IsomorphicLink, ScriptMode, SporeInfo

TOKEN_T = "0x" + "aa" * 32
SPORE_X = "0x" + "01" * 32
CLUSTER_C = "0x" + "0c" * 32


def _extract(lookup, spec, event_type=EventType.MINT):
    tx = lookup.build_transaction([], [spec])
    (cell,) = lookup.resolve_output_cells(tx)
    return CellAssetExtractor(lookup).extract(cell, 3, event_type)


def test_plain_cell(lookup):
    """A cell without payload yields only the common fields."""
    record = _extract(lookup, CellSpec(capacity=61 * 10**8, lock_args="0xabcd"))

    assert record.index == 3
    assert record.capacity == 61 * 10**8
    assert record.event_type == EventType.MINT
    assert record.address == "ckt1-0xabcd"
    assert record.script_type == ScriptMode.SECP256K1
    assert record.isomorphic_link is None
    assert record.token_data is None
    assert record.nft_data is None


def test_token_cell(lookup):
    """Token balance and metadata are copied into token_data."""
    record = _extract(lookup, token(TOKEN_T, 1_000), EventType.BURN)

    assert record.event_type == EventType.BURN
    assert record.token_data.token_id == TOKEN_T
    assert record.token_data.amount == 1_000
    assert record.token_data.symbol == "TKN"
    assert record.token_data.decimals == 8
    assert record.nft_data is None


def test_cluster_cell(lookup):
    """A cluster cell carries cluster id, name and description but no item id."""
    record = _extract(lookup, cluster(CLUSTER_C, name="Art"))

    assert record.nft_data.token_id is None
    assert record.nft_data.cluster_id == CLUSTER_C
    assert record.nft_data.cluster_name == "Art"
    assert record.nft_data.cluster_description == "test cluster"


def test_spore_cell(lookup):
    """A spore cell carries item id, cluster id and content."""
    record = _extract(lookup, spore(SPORE_X, cluster_id=CLUSTER_C))

    assert record.nft_data.token_id == SPORE_X
    assert record.nft_data.cluster_id == CLUSTER_C
    assert record.nft_data.content == "0x68"
    assert record.nft_data.content_type == "text/plain"
    assert record.nft_data.cluster_name is None


def test_spore_replaces_cluster_data(lookup):
    """When a cell reports both, the item wins."""
    spec = CellSpec(
        cluster=ClusterInfo(cluster_id=CLUSTER_C, name="Art"),
        spore=SporeInfo(spore_id=SPORE_X),
    )

    record = _extract(lookup, spec)

    assert record.nft_data.token_id == SPORE_X
    assert record.nft_data.cluster_id is None
    assert record.nft_data.cluster_name is None


def test_isomorphic_lock_gets_link(lookup):
    """Isomorphic lock modes have their external binding extracted."""
    link = IsomorphicLink(external_tx_id="0x" + "ef" * 32, external_output_index=0)
    spec = token(TOKEN_T, 5, lock_args="0x5555", mode=ScriptMode.RGBPP, link=link)

    record = _extract(lookup, spec)

    assert record.script_type == ScriptMode.RGBPP
    assert record.isomorphic_link == link
    assert lookup.calls == ["extract_isomorphic_link"]


def test_other_locks_skip_link_extraction(lookup):
    """Only isomorphic modes consult the link extractor."""
    spec = CellSpec(lock_args="0x6666", mode=ScriptMode.OMNILOCK)

    record = _extract(lookup, spec)

    assert record.script_type == ScriptMode.OMNILOCK
    assert record.isomorphic_link is None
    assert lookup.calls == []


def test_isomorphic_lock_with_unparseable_args(lookup):
    """An isomorphic lock whose args yield no link has no link on the record."""
    spec = CellSpec(lock_args="0x7777", mode=ScriptMode.RGBPP)

    record = _extract(lookup, spec)

    assert record.isomorphic_link is None
    assert lookup.calls == ["extract_isomorphic_link"]
