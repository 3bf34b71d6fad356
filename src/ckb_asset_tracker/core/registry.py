"""Script standard registry with auto-registration pattern."""

from typing import Any, Protocol

from ckb_asset_tracker.core.models import ScriptMode


class ScriptStandardInterface(Protocol):
    """
    Interface that all script standards must implement.

    Attributes
    ----------
    name : str
        Unique standard identifier, also its key in networks.yaml (e.g., 'xudt')
    mode : ScriptMode
        Script mode reported for scripts implementing this standard

    Methods
    -------
    matches(script)
        Check if a script is a deployment of this standard
    matches_cell(cell)
        Check if the script this standard governs on a cell matches

    """

    name: str
    mode: ScriptMode

    def matches(self, script: Any) -> bool:
        """
        Check if a script is a deployment of this standard.

        Parameters
        ----------
        script : Script
            Lock or type script

        Returns
        -------
        bool
            True if code hash and hash type match a known deployment

        """
        ...

    def matches_cell(self, cell: Any) -> bool:
        """
        Check if the cell's lock or type script (whichever this standard governs) matches.

        Parameters
        ----------
        cell : Cell
            Cell to check

        Returns
        -------
        bool
            True if the governed script matches

        """
        ...


class StandardRegistry:
    """
    Registry for script standards with auto-registration.

    Standards register themselves using the @StandardRegistry.register decorator.
    Lookup adapters instantiate every registered standard for their network.

    """

    _standards: dict[str, type] = {}

    @classmethod
    def register(cls, standard_class: type) -> type:
        """
        Decorator to register a script standard.

        Parameters
        ----------
        standard_class : type
            Standard class to register

        Returns
        -------
        type
            The standard class (for decorator chaining)

        Examples
        --------
        >>> @StandardRegistry.register
        ... class XudtStandard(UdtStandard):
        ...     name = "xudt"
        ...     mode = ScriptMode.XUDT

        """
        if not getattr(standard_class, "name", None):
            msg = f"Standard {standard_class.__name__} must define 'name' attribute"
            raise ValueError(msg)

        cls._standards[standard_class.name] = standard_class
        return standard_class

    @classmethod
    def instantiate_all(cls, network: str, **kwargs: Any) -> list[Any]:
        """
        Instantiate every registered standard for a network.

        Parameters
        ----------
        network : str
            Network name passed to each standard
        **kwargs : Any
            Extra constructor arguments (e.g., ``config_path``)

        Returns
        -------
        list
            Standard instances

        """
        return [standard_class(network=network, **kwargs) for standard_class in cls._standards.values()]
