"""
Exceptions for the LuckyDraw SDK.
"""
from typing import Optional


class LuckyDrawError(Exception):
    """Base exception for all LuckyDraw SDK errors."""
    pass


class ValidationError(LuckyDrawError):
    """Raised when local input is rejected before any network call."""
    pass


class InvalidAddressFormat(ValidationError):
    """Raised when a string is not a well-formed Filecoin address."""

    def __init__(self, value: str, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid address {value!r}: {reason}")


class EnvelopeError(ValidationError):
    """Raised when parameter envelope data or a CID cannot be encoded or decoded."""
    pass


class WalletError(LuckyDrawError):
    """Raised when the wallet cannot resolve an address or sign a message."""
    pass


class TransactionFailed(LuckyDrawError):
    """
    Raised when an actor call fails before a receipt is obtained.

    Attributes:
        stage: One of "prepare", "sign", "submit" or "wait"
        cause: The underlying exception
    """

    def __init__(self, stage: str, cause: Optional[BaseException] = None):
        self.stage = stage
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Transaction failed during {stage}{detail}")


class SigningError(TransactionFailed, WalletError):
    """Raised when the wallet fails to sign a prepared message."""

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__("sign", cause)


class SubmissionError(TransactionFailed):
    """Raised when pushing a signed message or waiting for it fails."""
    pass


class ActorCallRejected(LuckyDrawError):
    """
    Raised when a confirmed call finished with a non-zero exit code.

    The raw return payload is kept verbatim; no decoding is attempted.
    """

    def __init__(self, exit_code: int, raw_return: Optional[str] = None):
        self.exit_code = exit_code
        self.raw_return = raw_return
        message = f"Actor call rejected with exit code {exit_code}"
        if raw_return:
            message += f": {raw_return}"
        super().__init__(message)


class CallInProgressError(LuckyDrawError):
    """Raised when a call is attempted while another one is still in flight."""
    pass
