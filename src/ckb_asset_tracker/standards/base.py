"""Base script standard classes with deployment matching."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar

from ckb_asset_tracker.codec.hexutil import hex_to_bytes
from ckb_asset_tracker.core.models import Cell, Script, ScriptMode
from ckb_asset_tracker.data import get_script_deployments


class BaseScriptStandard(ABC):
    """
    Abstract base class for script standards.

    Subclasses declare which script of a cell they govern (lock or type) and
    are matched against the deployments listed in networks.yaml.

    Attributes
    ----------
    name : str
        Unique standard identifier (must be set in subclass)
    mode : ScriptMode
        Script mode reported for matching scripts (must be set in subclass)

    """

    name: ClassVar[str] = ""
    mode: ClassVar[ScriptMode] = ScriptMode.UNKNOWN

    def __init__(self, network: str = "mainnet", config_path: Path | None = None) -> None:
        """
        Initialize the standard for a network.

        Parameters
        ----------
        network : str
            Network whose deployments are matched
        config_path : Path | None
            Alternative networks.yaml

        """
        if not self.name:
            msg = f"{self.__class__.__name__} must define 'name' attribute"
            raise ValueError(msg)
        if self.mode == ScriptMode.UNKNOWN:
            msg = f"{self.__class__.__name__} must define 'mode' attribute"
            raise ValueError(msg)
        self.network = network
        self._deployments = {
            (deployment["code_hash"].lower(), deployment["hash_type"])
            for deployment in get_script_deployments(network, self.name, config_path)
        }

    def matches(self, script: Script | None) -> bool:
        """
        Check if a script is a deployment of this standard.

        Parameters
        ----------
        script : Script | None
            Script to check

        Returns
        -------
        bool
            True if code hash and hash type match a configured deployment

        """
        if script is None:
            return False
        return (script.code_hash.lower(), str(script.hash_type)) in self._deployments

    def matches_cell(self, cell: Cell) -> bool:
        """Check if the script this standard governs on ``cell`` matches."""
        return self.matches(self.script_of(cell))

    @property
    def deployments(self) -> list[tuple[str, str]]:
        """Configured (code_hash, hash_type) pairs, sorted."""
        return sorted(self._deployments)

    def is_deployed(self) -> bool:
        """Return True if the standard has at least one deployment on this network."""
        return bool(self._deployments)

    @abstractmethod
    def script_of(self, cell: Cell) -> Script | None:
        """
        Return the script of ``cell`` this standard governs.

        Must be implemented by subclasses.

        """
        ...

    @staticmethod
    def _cell_data(cell: Cell) -> bytes:
        return hex_to_bytes(cell.output_data)


class LockScriptStandard(BaseScriptStandard):
    """Standard implemented by lock scripts (ownership)."""

    def script_of(self, cell: Cell) -> Script | None:
        """Return the cell's lock script."""
        return cell.output.lock


class TypeScriptStandard(BaseScriptStandard):
    """Standard implemented by type scripts (asset payload)."""

    def script_of(self, cell: Cell) -> Script | None:
        """Return the cell's type script, if any."""
        return cell.output.type_script
