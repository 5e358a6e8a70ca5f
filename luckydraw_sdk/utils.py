"""
Utility functions for the LuckyDraw SDK.
"""
import base64
import binascii
from typing import Union

import base58

from .exceptions import EnvelopeError

CIDV1_VERSION = 0x01
# sha2-256 multihash header of a CIDv0
CIDV0_PREFIX = b"\x12\x20"
CIDV0_LENGTH = 34


def b64encode_str(data: bytes) -> str:
    """Standard base64 text for a transaction parameter slot."""
    return base64.b64encode(data).decode("ascii")


def b64decode_str(text: Union[str, bytes]) -> bytes:
    """
    Decode standard base64 text.

    Raises:
        EnvelopeError: If the text is not valid base64
    """
    if text is None:
        raise EnvelopeError("Cannot decode empty base64 payload")
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EnvelopeError(f"Invalid base64 payload: {str(e)}")


def _is_cid(raw: bytes) -> bool:
    if raw.startswith(CIDV0_PREFIX):
        return len(raw) == CIDV0_LENGTH
    return len(raw) > 1 and raw[0] == CIDV1_VERSION


def cid_to_bytes(cid: str) -> bytes:
    """
    Convert a CID string to its binary form.

    Supports:
        - CIDv1 in multibase base32 (``bafy...``, ``bafk...``)
        - CIDv1 in multibase base58btc (``z...``)
        - CIDv0 (``Qm...``, plain base58btc multihash)
        - Hex strings with a ``0x`` prefix, holding either of the above

    Args:
        cid: CID string

    Returns:
        CID bytes

    Raises:
        EnvelopeError: If the CID cannot be decoded
    """
    if not isinstance(cid, str):
        raise EnvelopeError(f"CID must be a string, got {type(cid).__name__}")
    if not cid:
        raise EnvelopeError("CID must not be empty")

    try:
        if cid.startswith("0x"):
            raw = bytes.fromhex(cid[2:])
        elif cid.startswith("Qm") and len(cid) == 46:
            raw = base58.b58decode(cid)
        elif cid[0] == "b":
            body = cid[1:]
            if body != body.lower():
                raise ValueError("base32 CID must be lowercase")
            raw = base64.b32decode(body.upper() + "=" * (-len(body) % 8))
        elif cid[0] == "z":
            raw = base58.b58decode(cid[1:])
        else:
            raise ValueError(f"unsupported multibase prefix {cid[0]!r}")
    except (ValueError, binascii.Error) as e:
        raise EnvelopeError(f"Failed to decode CID {cid!r}: {str(e)}")

    if not _is_cid(raw):
        raise EnvelopeError(f"Failed to decode CID {cid!r}: not a CIDv0 or CIDv1")
    return raw


def bytes_to_cid(raw: bytes) -> str:
    """
    Render CID bytes as text.

    CIDv0 multihashes come back as ``Qm...`` and CIDv1 as multibase
    base32 (``b...``), so ``cid_to_bytes(bytes_to_cid(raw)) == raw``.
    """
    if not _is_cid(raw):
        raise EnvelopeError("Only CIDv0 or CIDv1 bytes can be rendered")
    if raw.startswith(CIDV0_PREFIX):
        return base58.b58encode(raw).decode("ascii")
    return "b" + base64.b32encode(raw).decode("ascii").rstrip("=").lower()
