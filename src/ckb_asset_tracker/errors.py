"""Exception hierarchy for asset lookups and classification."""


class AssetTrackerError(Exception):
    """Base exception for all ckb-asset-tracker errors."""


class NotFoundError(AssetTrackerError):
    """Raised when a requested transaction or block does not exist on the node."""


class TransactionNotFoundError(NotFoundError):
    """Raised when a transaction hash has no corresponding transaction."""

    def __init__(self, tx_hash: str) -> None:
        super().__init__(f"Transaction not found: {tx_hash}")
        self.tx_hash = tx_hash


class BlockNotFoundError(NotFoundError):
    """Raised when a block hash has no corresponding block."""

    def __init__(self, block_hash: str) -> None:
        super().__init__(f"Block not found: {block_hash}")
        self.block_hash = block_hash


class CollaboratorError(AssetTrackerError):
    """Raised when an external lookup (RPC, decoding, resolution) fails."""


class CellResolutionError(CollaboratorError):
    """Raised when a transaction input references an output that cannot be resolved."""


class MoleculeError(CollaboratorError):
    """Raised when a Molecule-encoded payload is malformed."""
