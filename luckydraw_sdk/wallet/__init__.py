"""
Wallet module for the LuckyDraw SDK.

Defines the wallet/RPC collaborator interface and a Lotus-node implementation.
"""
from .exceptions import RpcConnectionError, RpcError, RpcResponseError, RpcTimeoutError
from .lotus import LotusClient, LotusWalletProvider, validate_rpc_url
from .provider import WalletProvider

__all__ = [
    'WalletProvider',
    'LotusClient',
    'LotusWalletProvider',
    'validate_rpc_url',
    'RpcError',
    'RpcConnectionError',
    'RpcResponseError',
    'RpcTimeoutError',
]
