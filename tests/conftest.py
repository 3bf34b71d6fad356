"""Shared fixtures for ckb-asset-tracker tests."""

import itertools
from dataclasses import dataclass

import pytest

from ckb_asset_tracker.core.models import (
    Block,
    BlockHeader,
    Cell,
    CellInput,
    CellOutput,
    ClusterInfo,
    IsomorphicLink,
    OutPoint,
    Script,
    ScriptMode,
    SporeInfo,
    TokenBalance,
    TokenInfo,
    Transaction,
    TransactionWithBlock,
)
from ckb_asset_tracker.errors import CellResolutionError, CollaboratorError

LOCK_CODE_HASH = "0x9bd7e06f3ecf4be0f2fcd2188b23f1b9fcc88e5d4b65a8637b17723bbda3cce8"

_hashes = itertools.count(1)


def next_hash() -> str:
    """Return a fresh, unique 32-byte hash."""
    return f"0x{next(_hashes):064x}"


def make_lock(args: str = "0x01") -> Script:
    """Build a lock script with the default lock code hash."""
    return Script(code_hash=LOCK_CODE_HASH, hash_type="type", args=args)


@dataclass
class CellSpec:
    """Describes a test cell and the asset the fake lookup reports for it."""

    capacity: int = 142 * 10**8
    lock_args: str = "0x01"
    mode: ScriptMode = ScriptMode.SECP256K1
    token: tuple[str, int] | None = None
    cluster: ClusterInfo | None = None
    spore: SporeInfo | None = None
    link: IsomorphicLink | None = None


def token(token_id: str, amount: int, **kwargs) -> CellSpec:
    """Cell holding ``amount`` of ``token_id``."""
    return CellSpec(token=(token_id, amount), **kwargs)


def spore(spore_id: str, cluster_id: str | None = None) -> CellSpec:
    """Cell holding a spore item."""
    return CellSpec(spore=SporeInfo(spore_id=spore_id, cluster_id=cluster_id, content="0x68", content_type="text/plain"))


def cluster(cluster_id: str, name: str = "cluster") -> CellSpec:
    """Cell defining a cluster."""
    return CellSpec(cluster=ClusterInfo(cluster_id=cluster_id, name=name, description="test cluster"))


class FakeLookup:
    """
    In-memory AssetLookup.

    Assets are keyed by out point, so a cell keeps its asset when a
    transaction built by ``build_transaction`` consumes it.

    """

    def __init__(self) -> None:
        self.cells: dict[tuple[str, int], Cell] = {}
        self.specs: dict[tuple[str, int], CellSpec] = {}
        self.transactions: dict[str, TransactionWithBlock] = {}
        self.blocks: dict[str, Block] = {}
        self.failing_transactions: set[str] = set()
        self.calls: list[str] = []
        self.resolved: list[str] = []

    def _spec(self, cell: Cell) -> CellSpec:
        return self.specs[(cell.out_point.tx_hash, cell.out_point.index)]

    def _add_output(self, tx_hash: str, index: int, spec: CellSpec) -> CellOutput:
        output = CellOutput(capacity=spec.capacity, lock=make_lock(spec.lock_args))
        key = (tx_hash, index)
        self.cells[key] = Cell(output=output, output_data="0x", out_point=OutPoint(tx_hash=tx_hash, index=index))
        self.specs[key] = spec
        return output

    def build_transaction(self, inputs: list[CellSpec], outputs: list[CellSpec]) -> Transaction:
        """Create a transaction consuming freshly created cells for ``inputs``."""
        cell_inputs = []
        for spec in inputs:
            previous_hash = next_hash()
            self._add_output(previous_hash, 0, spec)
            cell_inputs.append(CellInput(previous_output=OutPoint(tx_hash=previous_hash, index=0)))

        tx_hash = next_hash()
        cell_outputs = [self._add_output(tx_hash, index, spec) for index, spec in enumerate(outputs)]
        return Transaction(
            hash=tx_hash,
            inputs=cell_inputs,
            outputs=cell_outputs,
            outputs_data=["0x"] * len(cell_outputs),
        )

    def add_block(self, transactions: list[Transaction], number: int = 100) -> Block:
        """Register a block containing ``transactions``."""
        block = Block(header=BlockHeader(hash=next_hash(), number=number), transactions=transactions)
        self.blocks[block.header.hash] = block
        return block

    def script_mode(self, script: Script) -> ScriptMode:
        for spec_key, cell in self.cells.items():
            if cell.output.lock == script:
                return self.specs[spec_key].mode
        return ScriptMode.UNKNOWN

    def script_to_address(self, script: Script) -> str:
        return f"ckt1-{script.args}"

    def extract_isomorphic_link(self, script: Script) -> IsomorphicLink | None:
        self.calls.append("extract_isomorphic_link")
        for spec_key, cell in self.cells.items():
            if cell.output.lock == script and self.specs[spec_key].link is not None:
                return self.specs[spec_key].link
        return None

    def get_token_from_cell(self, cell: Cell) -> TokenBalance | None:
        spec = self._spec(cell)
        if spec.token is None:
            return None
        token_id, amount = spec.token
        return TokenBalance(token_info=TokenInfo(token_id=token_id, symbol="TKN", decimals=8), balance=amount)

    def get_cluster_from_cell(self, cell: Cell) -> ClusterInfo | None:
        return self._spec(cell).cluster

    def get_spore_from_cell(self, cell: Cell) -> SporeInfo | None:
        return self._spec(cell).spore

    def resolve_input_cells(self, tx: Transaction) -> list[Cell]:
        self.resolved.append(tx.hash)
        if tx.hash in self.failing_transactions:
            msg = f"lookup failed for {tx.hash}"
            raise CollaboratorError(msg)
        cells = []
        for cell_input in tx.inputs:
            key = (cell_input.previous_output.tx_hash, cell_input.previous_output.index)
            if key not in self.cells:
                msg = f"unknown out point {key}"
                raise CellResolutionError(msg)
            cells.append(self.cells[key])
        return cells

    def resolve_output_cells(self, tx: Transaction) -> list[Cell]:
        return [self.cells[(tx.hash, index)] for index in range(len(tx.outputs))]

    def get_transaction_with_block(self, tx_hash: str) -> TransactionWithBlock | None:
        return self.transactions.get(tx_hash)

    def get_block(self, block_hash: str) -> Block | None:
        return self.blocks.get(block_hash)


@pytest.fixture
def lookup() -> FakeLookup:
    """Fresh in-memory lookup."""
    return FakeLookup()
