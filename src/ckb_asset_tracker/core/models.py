"""Data models for chain primitives, lookup results, and classified asset records."""

from enum import StrEnum
from typing import Annotated

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ckb_asset_tracker.codec.hexutil import hex_to_bytes, hex_to_int

NULL_HASH = "0x" + "00" * 32
NULL_INDEX = 0xFFFFFFFF

# JSON-RPC quantities arrive as 0x-prefixed hex strings
HexInt = Annotated[int, BeforeValidator(hex_to_int)]


def _check_hex(value: str) -> str:
    hex_to_bytes(value)
    return value


# Byte strings (script args, cell data) must be valid 0x hex
HexBytes = Annotated[str, AfterValidator(_check_hex)]


class HashType(StrEnum):
    """How a script's code_hash is matched against cell deps."""

    DATA = "data"
    TYPE = "type"
    DATA1 = "data1"
    DATA2 = "data2"


class ScriptMode(StrEnum):
    """Known script standard a lock or type script implements."""

    UNKNOWN = "unknown"
    SECP256K1 = "secp256k1"
    MULTISIG = "multisig"
    ACP = "acp"
    OMNILOCK = "omnilock"
    SUDT = "sudt"
    XUDT = "xudt"
    SPORE = "spore"
    CLUSTER = "cluster"
    RGBPP = "rgbpp"
    BTC_TIME_LOCK = "btc_time_lock"


class EventType(StrEnum):
    """What happened to the asset held by a cell."""

    MINT = "mint"
    BURN = "burn"
    TRANSFER = "transfer"
    BURN_AND_TRANSFER = "burn_and_transfer"
    MINT_AND_TRANSFER = "mint_and_transfer"


class Script(BaseModel):
    """
    Lock or type script attached to a cell output.

    Attributes
    ----------
    code_hash : str
        32-byte hash identifying the script code (0x-prefixed hex)
    hash_type : HashType
        How ``code_hash`` is interpreted
    args : str
        Script arguments (0x-prefixed hex)

    """

    model_config = ConfigDict(frozen=True)

    code_hash: HexBytes
    hash_type: HashType
    args: HexBytes = "0x"


class OutPoint(BaseModel):
    """Reference to a transaction output."""

    tx_hash: str
    index: HexInt

    def is_null(self) -> bool:
        """Return True for the placeholder out point used by cellbase inputs."""
        return self.tx_hash == NULL_HASH and self.index == NULL_INDEX


class CellInput(BaseModel):
    """Transaction input pointing at a previous output."""

    previous_output: OutPoint
    since: HexInt = 0


class CellOutput(BaseModel):
    """
    Cell output as declared in a transaction.

    Attributes
    ----------
    capacity : int
        Native value in shannons
    lock : Script
        Ownership script
    type_script : Script | None
        Optional type script (``type`` on the wire)

    """

    model_config = ConfigDict(populate_by_name=True)

    capacity: HexInt
    lock: Script
    type_script: Script | None = Field(default=None, alias="type")


class Cell(BaseModel):
    """
    A cell output together with its data.

    Attributes
    ----------
    output : CellOutput
        Capacity, lock and type script
    output_data : str
        Cell data (0x-prefixed hex)
    out_point : OutPoint | None
        Where the cell was created, when known

    """

    output: CellOutput
    output_data: HexBytes = "0x"
    out_point: OutPoint | None = None


class Transaction(BaseModel):
    """Transaction view as returned by ``get_transaction`` and ``get_block``."""

    hash: str
    version: HexInt = 0
    inputs: list[CellInput] = Field(default_factory=list)
    outputs: list[CellOutput] = Field(default_factory=list)
    outputs_data: list[HexBytes] = Field(default_factory=list)

    def is_cellbase(self) -> bool:
        """Return True if this is a block reward transaction with no real inputs."""
        return len(self.inputs) == 1 and self.inputs[0].previous_output.is_null()


class BlockHeader(BaseModel):
    """Subset of the block header needed to locate transactions."""

    hash: str
    number: HexInt
    timestamp: HexInt = 0


class Block(BaseModel):
    """Block with its transactions in declared order."""

    header: BlockHeader
    transactions: list[Transaction] = Field(default_factory=list)


class TxStatus(BaseModel):
    """
    Commitment status reported alongside a transaction.

    ``block_number`` is only reported by recent nodes.

    """

    status: str | None = None
    block_hash: str | None = None
    block_number: HexInt | None = None


class TransactionWithBlock(BaseModel):
    """
    Transaction plus the block it was committed in.

    ``block_hash`` and ``block_number`` are None while the transaction is pending.

    """

    transaction: Transaction
    block_hash: str | None = None
    block_number: int | None = None


class TokenInfo(BaseModel):
    """
    Fungible token identity and display metadata.

    Attributes
    ----------
    token_id : str
        Hash of the token's type script
    name : str | None
        Display name
    symbol : str | None
        Ticker symbol
    decimals : int | None
        Number of decimal places

    """

    token_id: str
    name: str | None = None
    symbol: str | None = None
    decimals: int | None = None


class TokenBalance(BaseModel):
    """Token carried by a single cell."""

    token_info: TokenInfo
    balance: int


class ClusterInfo(BaseModel):
    """Cluster (NFT collection) definition carried by a cell."""

    cluster_id: str
    name: str | None = None
    description: str | None = None


class SporeInfo(BaseModel):
    """Spore (NFT item) carried by a cell."""

    spore_id: str
    cluster_id: str | None = None
    content: str | None = None
    content_type: str | None = None


class AssetModel(BaseModel):
    """Base for output records, serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IsomorphicLink(AssetModel):
    """
    Binding of a cell to an output on an external ledger.

    Attributes
    ----------
    external_tx_id : str
        External transaction id in display byte order
    external_output_index : int
        Output index within the external transaction

    """

    external_tx_id: str
    external_output_index: int


class TokenData(AssetModel):
    """Fungible token balance held by a cell."""

    token_id: str
    name: str | None = None
    symbol: str | None = None
    decimals: int | None = None
    amount: int


class NftData(AssetModel):
    """NFT item or cluster definition held by a cell."""

    token_id: str | None = None
    cluster_id: str | None = None
    cluster_name: str | None = None
    cluster_description: str | None = None
    content: str | None = None
    content_type: str | None = None


class AssetRecord(AssetModel):
    """
    Classified asset event for one input or output cell.

    Attributes
    ----------
    index : int
        Position of the cell in the transaction's input or output list
    capacity : int
        Cell capacity in shannons
    event_type : EventType
        Classified event
    address : str
        Owner address resolved from the lock script
    script_type : ScriptMode
        Standard implemented by the lock script
    isomorphic_link : IsomorphicLink | None
        External ledger binding for isomorphic locks
    token_data : TokenData | None
        Fungible token balance, if any
    nft_data : NftData | None
        NFT item or cluster, if any

    """

    index: int
    capacity: int
    event_type: EventType
    address: str
    script_type: ScriptMode
    isomorphic_link: IsomorphicLink | None = None
    token_data: TokenData | None = None
    nft_data: NftData | None = None


class TransactionAssetRecord(AssetModel):
    """
    Classified asset events for every cell of one transaction.

    ``inputs`` and ``outputs`` follow the transaction's declared order.

    """

    tx_id: str
    block_hash: str | None = None
    block_height: int | None = None
    inputs: list[AssetRecord] = Field(default_factory=list)
    outputs: list[AssetRecord] = Field(default_factory=list)
