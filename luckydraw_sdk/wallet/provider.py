"""
Interface of the wallet/RPC collaborator.
"""
from typing import Any, Dict, Protocol

from ..models import CallReceipt, MessageDescriptor


class WalletProvider(Protocol):
    """
    Protocol for wallet implementations.

    Key custody, signing and chain transport live behind this interface.
    Every method is a coroutine and may raise.
    """

    async def get_default_address(self) -> str:
        """Default wallet address used as the caller"""
        ...

    async def create_message(self, descriptor: MessageDescriptor) -> Dict[str, Any]:
        """Fill nonce and gas fields, returning an unsigned message"""
        ...

    async def sign_message(self, message: Dict[str, Any]) -> Dict[str, Any]:
        """Sign an unsigned message"""
        ...

    async def send_signed_message(self, signed: Dict[str, Any]) -> str:
        """Push a signed message to the mempool and return its CID"""
        ...

    async def wait_for_confirmation(self, message_cid: str, confirmations: int) -> CallReceipt:
        """Block until the message has the given confirmation depth"""
        ...
