"""Batching of JSON-RPC calls into chunked batch requests."""

from typing import Any

from ckb_asset_tracker.rpc.provider import CkbRPCProvider


class RequestBatcher:
    """
    Collects JSON-RPC calls and sends them as batch requests.

    Used to fetch every previous transaction referenced by a transaction's
    inputs in one round trip instead of one request per input.

    Parameters
    ----------
    provider : CkbRPCProvider
        Provider exposing ``make_batch_request``
    max_batch_size : int
        Maximum calls per HTTP request; larger batches are split

    """

    def __init__(self, provider: CkbRPCProvider, max_batch_size: int = 100) -> None:
        if max_batch_size < 1:
            msg = "max_batch_size must be at least 1"
            raise ValueError(msg)
        self.provider = provider
        self.max_batch_size = max_batch_size
        self._calls: list[tuple[str, list[Any]]] = []

    def add_call(self, method: str, params: list[Any]) -> None:
        """
        Add a call to the batch.

        Parameters
        ----------
        method : str
            RPC method name (e.g., 'get_transaction')
        params : list[Any]
            Method parameters

        """
        self._calls.append((method, params))

    def execute(self) -> list[Any]:
        """
        Execute all batched calls.

        Returns
        -------
        list[Any]
            Results for each call in the order they were added

        Raises
        ------
        CkbRPCError
            If any chunk fails; pending calls are discarded either way

        """
        calls, self._calls = self._calls, []
        results: list[Any] = []
        for start in range(0, len(calls), self.max_batch_size):
            results.extend(self.provider.make_batch_request(calls[start : start + self.max_batch_size]))
        return results

    @property
    def call_count(self) -> int:
        """Number of pending calls."""
        return len(self._calls)
