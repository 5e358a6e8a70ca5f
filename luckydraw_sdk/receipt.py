"""
Receipt interpretation for lucky draw actor calls.
"""
import io
import logging
from typing import Optional, Tuple

import cbor2

from .address import Address, MAINNET_PREFIX
from .exceptions import ActorCallRejected, EnvelopeError
from .models import ActorMethod, CallReceipt, DecodedResult, InitActorMethod
from .utils import b64decode_str

logger = logging.getLogger(__name__)

_CBOR_TEXT_MAJOR_TYPE = 3

# Enclosing characters left around a value by the actor's debug formatting
_ENCLOSING_PAIRS = {
    ('"', '"'),
    ("'", "'"),
    ("[", "]"),
    ("(", ")"),
    ("{", "}"),
}
_WINNER_LABEL = "winner:"


def decode_return_text(return_data: Optional[str]) -> str:
    """
    Turn a base64 return payload into display text.

    Payloads that hold exactly one CBOR text string are unwrapped; anything
    else is read as UTF-8.
    """
    if not return_data:
        return ""
    data = b64decode_str(return_data)
    if data and data[0] >> 5 == _CBOR_TEXT_MAJOR_TYPE:
        stream = io.BytesIO(data)
        try:
            value = cbor2.CBORDecoder(stream).decode()
        except (cbor2.CBORDecodeError, ValueError):
            value = None
        if isinstance(value, str) and stream.tell() == len(data):
            return value
    return data.decode("utf-8", errors="replace")


def trim_enclosing(text: str) -> str:
    """
    Strip the ``Winner:`` label and enclosing quote/bracket characters.

    The transform is applied until nothing changes, so
    ``trim_enclosing(trim_enclosing(x)) == trim_enclosing(x)``.
    """
    result = text.strip()
    while True:
        previous = result
        if result.lower().startswith(_WINNER_LABEL):
            result = result[len(_WINNER_LABEL):].strip()
        if len(result) >= 2 and (result[0], result[-1]) in _ENCLOSING_PAIRS:
            result = result[1:-1].strip()
        if result == previous:
            return result


def decode_exec_return(return_data: Optional[str], network: str = MAINNET_PREFIX) -> Tuple[Address, Address]:
    """
    Decode the Init actor's exec return value.

    Returns:
        ``(id_address, robust_address)`` of the new actor

    Raises:
        EnvelopeError: If the payload is not a pair of address byte strings
    """
    data = b64decode_str(return_data or "")
    try:
        value = cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError) as e:
        raise EnvelopeError(f"Invalid exec return payload: {str(e)}")
    if (
        not isinstance(value, list)
        or len(value) != 2
        or not all(isinstance(item, bytes) for item in value)
    ):
        raise EnvelopeError(f"Exec return must be a pair of addresses, got {value!r}")
    return Address.from_bytes(value[0], network), Address.from_bytes(value[1], network)


class ReceiptInterpreter:
    """
    Classifies receipts and decodes success payloads per method.

    Exit code 0 is the only success; anything else raises
    ``ActorCallRejected`` with the raw return value untouched.
    """

    def __init__(self, network: str = MAINNET_PREFIX):
        self.network = network

    def interpret(self, receipt: CallReceipt, method: int) -> DecodedResult:
        """
        Interpret a confirmed call's receipt.

        Args:
            receipt: Receipt from the invoker
            method: Method number that was invoked; pass ``InitActorMethod.EXEC``
                for deployments

        Returns:
            DecodedResult whose value is None for methods without a return,
            a string for draw/read-state, or an address pair for exec

        Raises:
            ActorCallRejected: If the exit code is non-zero
        """
        if receipt.exit_code != 0:
            logger.warning(f"Method {int(method)} failed with exit code {receipt.exit_code}")
            raise ActorCallRejected(receipt.exit_code, receipt.return_data)

        if method is InitActorMethod.EXEC:
            value = decode_exec_return(receipt.return_data, self.network)
        elif method == ActorMethod.LUCKY_DRAW:
            value = trim_enclosing(decode_return_text(receipt.return_data))
        elif method == ActorMethod.READ_CURRENT_STATE:
            value = decode_return_text(receipt.return_data)
        else:
            value = None

        return DecodedResult(method=int(method), value=value, receipt=receipt)
