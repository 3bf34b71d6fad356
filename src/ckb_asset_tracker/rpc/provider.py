"""JSON-RPC provider for a CKB node over httpx."""

import itertools
import logging
from typing import Any

import httpx

from ckb_asset_tracker.errors import CollaboratorError
from ckb_asset_tracker.rpc.cache import RPCCache
from ckb_asset_tracker.rpc.retry import RetryableHTTPStatusError, RetryConfig, call_with_retry

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class CkbRPCError(CollaboratorError):
    """
    Exception raised for failed CKB JSON-RPC calls.

    Attributes
    ----------
    code : int | None
        JSON-RPC error code, when the node returned an error object

    """

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class CkbRPCProvider:
    """
    JSON-RPC client for a CKB node.

    Transport failures and 5xx responses are retried with exponential
    backoff, rotating through the configured endpoints. JSON-RPC error
    objects are deterministic and raised immediately.

    Parameters
    ----------
    endpoints : list[str] | str
        One or more node URLs
    retry_config : RetryConfig | None
        Retry behavior; defaults to 3 retries with exponential backoff
    cache : RPCCache | None
        Cache for immutable results (committed transactions, blocks, headers)
    timeout : float
        Request timeout in seconds
    transport : httpx.BaseTransport | None
        Custom transport (e.g., ``httpx.MockTransport`` in tests)

    """

    # Results of these methods never change once returned
    CACHEABLE_METHODS = frozenset({"get_block", "get_header"})

    def __init__(
        self,
        endpoints: list[str] | str,
        retry_config: RetryConfig | None = None,
        cache: RPCCache | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.endpoints = [endpoints] if isinstance(endpoints, str) else list(endpoints)
        if not self.endpoints:
            msg = "At least one RPC endpoint is required"
            raise ValueError(msg)
        self.retry_config = retry_config or RetryConfig()
        self.cache = cache
        self.client = httpx.Client(timeout=timeout, transport=transport)
        self._endpoint_index = 0
        self._ids = itertools.count(1)

    @property
    def endpoint(self) -> str:
        """Currently selected endpoint URL."""
        return self.endpoints[self._endpoint_index]

    def rotate_endpoint(self) -> None:
        """Switch to the next configured endpoint."""
        self._endpoint_index = (self._endpoint_index + 1) % len(self.endpoints)

    def _on_retry(self, error: Exception) -> None:
        previous = self.endpoint
        self.rotate_endpoint()
        if self.endpoint != previous:
            logger.debug("Request to %s failed (%s), rotating to %s", previous, error, self.endpoint)

    def _post(self, payload: Any) -> Any:
        response = self.client.post(self.endpoint, json=payload)
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise RetryableHTTPStatusError(response)
        response.raise_for_status()
        return response.json()

    def _send(self, payload: Any) -> Any:
        try:
            return call_with_retry(lambda: self._post(payload), self.retry_config, on_retry=self._on_retry)
        except RetryableHTTPStatusError as e:
            msg = f"HTTP error {e.response.status_code}: {e}"
            raise CkbRPCError(msg) from e
        except httpx.TimeoutException as e:
            msg = f"Request timeout: {e}"
            raise CkbRPCError(msg) from e
        except httpx.HTTPStatusError as e:
            msg = f"HTTP error {e.response.status_code}: {e}"
            raise CkbRPCError(msg) from e
        except httpx.HTTPError as e:
            msg = f"HTTP request failed: {e}"
            raise CkbRPCError(msg) from e
        except ValueError as e:
            msg = f"Malformed JSON-RPC response: {e}"
            raise CkbRPCError(msg) from e

    def _request_body(self, method: str, params: list[Any]) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}

    @staticmethod
    def _unwrap(method: str, body: Any) -> Any:
        if not isinstance(body, dict):
            msg = f"{method}: unexpected response {body!r}"
            raise CkbRPCError(msg)
        error = body.get("error")
        if error:
            if not isinstance(error, dict):
                error = {"message": str(error)}
            msg = f"{method}: {error.get('message', error)}"
            raise CkbRPCError(msg, code=error.get("code"))
        return body.get("result")

    def _is_cacheable(self, method: str, result: Any) -> bool:
        if self.cache is None or result is None:
            return False
        if method == "get_transaction":
            status = result.get("tx_status") if isinstance(result, dict) else None
            return isinstance(status, dict) and status.get("status") == "committed"
        return method in self.CACHEABLE_METHODS

    def make_request(self, method: str, params: list[Any]) -> Any:
        """
        Make a JSON-RPC request.

        Parameters
        ----------
        method : str
            RPC method name (e.g., 'get_transaction', 'get_block')
        params : list[Any]
            Method parameters

        Returns
        -------
        Any
            The ``result`` member of the response (None for unknown hashes)

        Raises
        ------
        CkbRPCError
            If the call fails after retries or the node returns an error

        """
        if self.cache is not None:
            cached = self.cache.get(method, params)
            if cached is not None:
                logger.debug("Cache hit for %s %s", method, params)
                return cached

        result = self._unwrap(method, self._send(self._request_body(method, params)))
        if self._is_cacheable(method, result):
            self.cache.set(method, params, result)
        return result

    def make_batch_request(self, calls: list[tuple[str, list[Any]]]) -> list[Any]:
        """
        Make several JSON-RPC requests in one HTTP round trip.

        Parameters
        ----------
        calls : list[tuple[str, list[Any]]]
            ``(method, params)`` pairs

        Returns
        -------
        list[Any]
            Results in the order of ``calls``

        Raises
        ------
        CkbRPCError
            If the batch fails or any call returns an error

        """
        results: list[Any] = [None] * len(calls)
        pending: dict[int, int] = {}
        payload = []
        for position, (method, params) in enumerate(calls):
            cached = self.cache.get(method, params) if self.cache is not None else None
            if cached is not None:
                results[position] = cached
                continue
            body = self._request_body(method, params)
            pending[body["id"]] = position
            payload.append(body)

        if not payload:
            return results

        responses = self._send(payload)
        if not isinstance(responses, list):
            # A batch-level failure is reported as one error object with a null id
            self._unwrap("batch", responses)
            responses = [responses]
        by_id = {response.get("id"): response for response in responses if isinstance(response, dict)}

        for request_id, position in pending.items():
            method, params = calls[position]
            if request_id not in by_id:
                msg = f"{method}: missing response for request id {request_id}"
                raise CkbRPCError(msg)
            result = self._unwrap(method, by_id[request_id])
            if self._is_cacheable(method, result):
                self.cache.set(method, params, result)
            results[position] = result

        return results

    def get_transaction(self, tx_hash: str) -> dict[str, Any] | None:
        """Fetch a transaction with its status, or None if the node does not know it."""
        return self.make_request("get_transaction", [tx_hash])

    def get_block(self, block_hash: str) -> dict[str, Any] | None:
        """Fetch a block by hash, or None if it does not exist."""
        return self.make_request("get_block", [block_hash])

    def get_header(self, block_hash: str) -> dict[str, Any] | None:
        """Fetch a block header by hash, or None if it does not exist."""
        return self.make_request("get_header", [block_hash])

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "CkbRPCProvider":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object | None) -> None:
        """Context manager exit."""
        self.close()
