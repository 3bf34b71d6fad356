"""Lock script standards, including the RGB++ isomorphic lock."""

import logging

from ckb_asset_tracker.codec.hexutil import hex_to_bytes
from ckb_asset_tracker.core.models import IsomorphicLink, Script, ScriptMode
from ckb_asset_tracker.core.registry import StandardRegistry
from ckb_asset_tracker.standards.base import LockScriptStandard

logger = logging.getLogger(__name__)

# out_index (u32 LE) followed by the BTC txid in internal byte order
RGBPP_LOCK_ARGS_SIZE = 36


@StandardRegistry.register
class Secp256k1Standard(LockScriptStandard):
    """Default single-signature lock (secp256k1 + blake160)."""

    name = "secp256k1_blake160"
    mode = ScriptMode.SECP256K1


@StandardRegistry.register
class MultisigStandard(LockScriptStandard):
    """M-of-N multisig lock."""

    name = "multisig"
    mode = ScriptMode.MULTISIG


@StandardRegistry.register
class AnyoneCanPayStandard(LockScriptStandard):
    """Anyone-can-pay lock accepting unsolicited deposits."""

    name = "anyone_can_pay"
    mode = ScriptMode.ACP


@StandardRegistry.register
class OmnilockStandard(LockScriptStandard):
    """Omnilock universal lock."""

    name = "omnilock"
    mode = ScriptMode.OMNILOCK


@StandardRegistry.register
class RgbppLockStandard(LockScriptStandard):
    """
    RGB++ lock binding a cell to a Bitcoin UTXO.

    The lock args carry the Bitcoin output the cell is isomorphic to.

    """

    name = "rgbpp_lock"
    mode = ScriptMode.RGBPP

    def extract_isomorphic_link(self, script: Script) -> IsomorphicLink | None:
        """
        Extract the Bitcoin output a RGB++ lock is bound to.

        Parameters
        ----------
        script : Script
            RGB++ lock script

        Returns
        -------
        IsomorphicLink | None
            Bitcoin txid (display order) and output index, or None if the
            args do not have the RGB++ layout

        """
        args = hex_to_bytes(script.args)
        if len(args) != RGBPP_LOCK_ARGS_SIZE:
            logger.debug("RGB++ lock args have %d bytes, expected %d", len(args), RGBPP_LOCK_ARGS_SIZE)
            return None

        out_index = int.from_bytes(args[:4], "little")
        btc_txid = args[4:][::-1].hex()
        return IsomorphicLink(external_tx_id=btc_txid, external_output_index=out_index)


@StandardRegistry.register
class BtcTimeLockStandard(LockScriptStandard):
    """Time lock releasing a RGB++ leap after enough BTC confirmations."""

    name = "btc_time_lock"
    mode = ScriptMode.BTC_TIME_LOCK
