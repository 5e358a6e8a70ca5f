"""
Exceptions for the wallet module.
"""
from typing import Any, Optional


class RpcError(Exception):
    """Base exception for Lotus JSON-RPC errors."""
    pass


class RpcConnectionError(RpcError):
    """Raised when the node cannot be reached."""
    pass


class RpcResponseError(RpcError):
    """Raised when the node answers with a JSON-RPC error object or a bad payload."""

    def __init__(self, message: str, code: Optional[int] = None, data: Optional[Any] = None):
        self.code = code
        self.data = data
        super().__init__(message)


class RpcTimeoutError(RpcError):
    """Raised when a node request exceeds its timeout."""
    pass
