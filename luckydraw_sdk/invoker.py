"""
ActorCallInvoker - composes, signs, submits and confirms actor calls.
"""
import logging
from typing import Optional

from .address import Address
from .exceptions import SigningError, SubmissionError, TransactionFailed
from .models import CallReceipt, EncodedEnvelope, MessageDescriptor
from .wallet.provider import WalletProvider

DEFAULT_CONFIRMATIONS = 1


class ActorCallInvoker:
    """
    Invokes numbered methods on a remote actor through a wallet provider.

    Each call goes through four suspension points (prepare, sign, submit,
    wait). A failure at any of them raises ``TransactionFailed`` carrying the
    stage; nothing is retried here. Once a message CID exists the message is
    never pushed again.
    """

    def __init__(
        self,
        wallet: WalletProvider,
        confirmations: int = DEFAULT_CONFIRMATIONS,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the invoker

        Args:
            wallet: Wallet/RPC collaborator
            confirmations: Confirmation depth to wait for
            logger: Optional logger instance
        """
        if confirmations < 1:
            raise ValueError("confirmations must be at least 1")
        self.wallet = wallet
        self.confirmations = confirmations
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def build_descriptor(
        target: Address,
        caller: Address,
        method: int,
        params: Optional[EncodedEnvelope] = None
    ) -> MessageDescriptor:
        """
        Build the unsigned call descriptor.

        Value is always zero; methods without parameters get an empty Params string.
        """
        if not isinstance(target, Address) or not isinstance(caller, Address):
            raise TypeError("target and caller must be validated Address objects")
        return MessageDescriptor(
            to=str(target),
            from_address=str(caller),
            value="0",
            method=int(method),
            params=params.base64 if params is not None else "",
        )

    async def invoke(
        self,
        target: Address,
        caller: Address,
        method: int,
        params: Optional[EncodedEnvelope] = None
    ) -> CallReceipt:
        """
        Call a method on an actor and wait for its receipt.

        Args:
            target: Actor address
            caller: Sending account
            method: Method number
            params: Encoded parameters, or None for no-arg methods

        Returns:
            The receipt of the confirmed message

        Raises:
            TransactionFailed: If preparation fails
            SigningError: If the wallet cannot sign
            SubmissionError: If pushing or waiting fails
        """
        descriptor = self.build_descriptor(target, caller, method, params)
        self.logger.info(f"Calling method {descriptor.method} on {descriptor.to} from {descriptor.from_address}")

        try:
            unsigned = await self.wallet.create_message(descriptor)
        except Exception as e:
            self.logger.error(f"Failed to prepare message: {e}")
            raise TransactionFailed("prepare", e) from e

        try:
            signed = await self.wallet.sign_message(unsigned)
        except Exception as e:
            self.logger.error(f"Message signing failed: {e}")
            raise SigningError(e) from e

        try:
            message_cid = await self.wallet.send_signed_message(signed)
        except Exception as e:
            self.logger.error(f"Failed to push message: {e}")
            raise SubmissionError("submit", e) from e
        self.logger.info(f"Message sent: {message_cid}")

        try:
            receipt = await self.wallet.wait_for_confirmation(message_cid, self.confirmations)
        except Exception as e:
            # The message may still land; it is not resubmitted
            self.logger.error(f"Waiting for message {message_cid} failed: {e}")
            raise SubmissionError("wait", e) from e

        if receipt.message_cid is None:
            receipt = receipt.model_copy(update={"message_cid": message_cid})
        self.logger.info(f"Message {message_cid} confirmed with exit code {receipt.exit_code}")
        return receipt
