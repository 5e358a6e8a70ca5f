"""
Lotus JSON-RPC wallet implementation.

This module talks to a Lotus full node over HTTP. The node holds the keys,
so signing is delegated to ``Filecoin.WalletSignMessage``.
"""
import asyncio
import itertools
import logging
import os
import urllib.parse
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..models import CallReceipt, MessageDescriptor
from .exceptions import RpcConnectionError, RpcResponseError, RpcTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


def validate_rpc_url(url: str) -> None:
    """
    Validate that the RPC URL is secure.

    Plain http is accepted for local nodes, or anywhere when
    ``LUCKYDRAW_INSECURE_RPC=1`` is set.

    Raises:
        ValueError: If the URL is malformed or uses insecure http
    """
    parsed = urllib.parse.urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ValueError(f"Invalid RPC URL {url!r}: expected http(s)://host[:port]/path")

    is_local = parsed.hostname in ("localhost", "127.0.0.1", "::1")
    if parsed.scheme != "https" and not is_local:
        if os.environ.get("LUCKYDRAW_INSECURE_RPC") != "1":
            raise ValueError(
                f"RPC URL must use https:// for security (got: {parsed.scheme}://). "
                "Set LUCKYDRAW_INSECURE_RPC=1 to allow http for development."
            )


class LotusClient:
    """
    Blocking JSON-RPC client for a Lotus node.

    Only connection failures are retried; a request that reached the node is
    never sent twice, so a pushed message cannot be duplicated by the client.
    """

    def __init__(
        self,
        rpc_url: str,
        token: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
        wait_timeout: Optional[float] = None,
        retry_count: int = 3,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the Lotus client

        Args:
            rpc_url: Lotus API endpoint (e.g., "http://127.0.0.1:1234/rpc/v0")
            token: API token sent as a bearer credential
            timeout: Timeout for ordinary requests in seconds
            wait_timeout: Timeout for ``StateWaitMsg`` (None waits indefinitely)
            retry_count: Number of retries for connection errors
            logger: Optional logger instance

        Raises:
            ValueError: If the URL is invalid or insecure
        """
        validate_rpc_url(rpc_url)
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.wait_timeout = wait_timeout
        self.logger = logger or logging.getLogger(__name__)
        self._ids = itertools.count(1)

        self.session = requests.Session()
        self.session.headers["Content-Type"] = "application/json"
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

        retries = Retry(
            total=retry_count,
            connect=retry_count,
            read=0,
            status=0,
            other=0,
            backoff_factor=0.5,
            raise_on_status=False,
        )
        self.session.mount("http://", HTTPAdapter(max_retries=retries))
        self.session.mount("https://", HTTPAdapter(max_retries=retries))

    def __repr__(self) -> str:
        return f"LotusClient(rpc_url={self.rpc_url!r}, token=[REDACTED])"

    @property
    def api_version(self) -> str:
        """API version segment of the endpoint path, "v0" or "v1"."""
        path = urllib.parse.urlparse(self.rpc_url).path.rstrip("/")
        return "v0" if path.endswith("/v0") else "v1"

    def call(self, method: str, *params: Any, timeout: Optional[float] = None) -> Any:
        """
        Invoke a ``Filecoin.*`` JSON-RPC method.

        Args:
            method: Method name without the ``Filecoin.`` prefix
            *params: Positional parameters
            timeout: Per-call timeout override

        Returns:
            The ``result`` member of the response

        Raises:
            RpcConnectionError: If the node cannot be reached
            RpcTimeoutError: If the request times out
            RpcResponseError: If the node returns an error or an invalid body
        """
        request_id = next(self._ids)
        body = {
            "jsonrpc": "2.0",
            "method": f"Filecoin.{method}",
            "params": list(params),
            "id": request_id,
        }
        self.logger.debug(f"RPC request #{request_id}: Filecoin.{method}")

        try:
            response = self.session.post(
                self.rpc_url,
                json=body,
                timeout=self.timeout if timeout is None else timeout
            )
        except requests.Timeout as e:
            raise RpcTimeoutError(f"Filecoin.{method} timed out: {str(e)}")
        except requests.RequestException as e:
            self.logger.error(f"RPC request Filecoin.{method} failed: {e}")
            raise RpcConnectionError(f"Failed to reach Lotus node: {str(e)}")

        if response.status_code == 401:
            raise RpcResponseError("Lotus node rejected the API token", code=401)
        if response.status_code >= 400:
            raise RpcResponseError(
                f"Filecoin.{method} failed with HTTP {response.status_code}: {response.text}",
                code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise RpcResponseError(f"Invalid JSON response from Lotus node: {str(e)}")

        if not isinstance(payload, dict):
            raise RpcResponseError(f"Unexpected JSON-RPC response: {payload!r}")
        if payload.get("error"):
            error = payload["error"]
            if isinstance(error, dict):
                raise RpcResponseError(
                    error.get("message", "unknown error"),
                    code=error.get("code"),
                    data=error.get("data")
                )
            raise RpcResponseError(str(error))
        if "result" not in payload:
            raise RpcResponseError(f"Missing result in JSON-RPC response: {payload}")

        return payload["result"]

    def chain_head(self) -> Dict[str, Any]:
        return self.call("ChainHead")

    def wallet_default_address(self) -> str:
        return self.call("WalletDefaultAddress")

    def mpool_get_nonce(self, address: str) -> int:
        return self.call("MpoolGetNonce", address)

    def gas_estimate_message_gas(self, message: Dict[str, Any]) -> Dict[str, Any]:
        return self.call("GasEstimateMessageGas", message, {"MaxFee": "0"}, [])

    def wallet_sign_message(self, address: str, message: Dict[str, Any]) -> Dict[str, Any]:
        return self.call("WalletSignMessage", address, message)

    def mpool_push(self, signed: Dict[str, Any]) -> str:
        result = self.call("MpoolPush", signed)
        if isinstance(result, dict) and "/" in result:
            return result["/"]
        raise RpcResponseError(f"MpoolPush returned an unexpected CID: {result!r}")

    def state_wait_msg(self, message_cid: str, confidence: int) -> Dict[str, Any]:
        params: List[Any] = [{"/": message_cid}, confidence]
        if self.api_version == "v1":
            # lookback limit, allow replaced
            params.extend([-1, True])
        result = self.call("StateWaitMsg", *params, timeout=self.wait_timeout)
        if not isinstance(result, dict) or "Receipt" not in result:
            raise RpcResponseError(f"StateWaitMsg returned no receipt: {result!r}")
        return result


class LotusWalletProvider:
    """
    Wallet provider backed by a Lotus node.

    Blocking HTTP requests run in a worker thread so the event loop stays free.
    """

    def __init__(self, client: LotusClient):
        self.client = client

    async def chain_height(self) -> int:
        head = await asyncio.to_thread(self.client.chain_head)
        return int(head["Height"])

    async def get_default_address(self) -> str:
        return await asyncio.to_thread(self.client.wallet_default_address)

    async def create_message(self, descriptor: MessageDescriptor) -> Dict[str, Any]:
        message = {
            "Version": 0,
            "Nonce": 0,
            "GasLimit": 0,
            "GasFeeCap": "0",
            "GasPremium": "0",
            **descriptor.to_lotus(),
        }
        message["Nonce"] = await asyncio.to_thread(self.client.mpool_get_nonce, descriptor.from_address)
        estimated = await asyncio.to_thread(self.client.gas_estimate_message_gas, message)
        logger.debug(
            f"Prepared message nonce={estimated.get('Nonce')} gas_limit={estimated.get('GasLimit')}"
        )
        return estimated

    async def sign_message(self, message: Dict[str, Any]) -> Dict[str, Any]:
        return await asyncio.to_thread(self.client.wallet_sign_message, message["From"], message)

    async def send_signed_message(self, signed: Dict[str, Any]) -> str:
        return await asyncio.to_thread(self.client.mpool_push, signed)

    async def wait_for_confirmation(self, message_cid: str, confirmations: int) -> CallReceipt:
        lookup = await asyncio.to_thread(self.client.state_wait_msg, message_cid, confirmations)
        return CallReceipt.from_lookup(lookup)
