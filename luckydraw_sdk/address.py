"""
Filecoin address codec.

Validates address strings and converts them to and from the binary layout
used inside actor parameters (``protocol byte || payload``). Everything here
is purely syntactic; no network access happens.
"""
import base64
import binascii
import hashlib
import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .exceptions import InvalidAddressFormat

logger = logging.getLogger(__name__)

MAINNET_PREFIX = "f"
TESTNET_PREFIX = "t"
NETWORK_PREFIXES = (MAINNET_PREFIX, TESTNET_PREFIX)

PROTOCOL_ID = 0
PROTOCOL_SECP256K1 = 1
PROTOCOL_ACTOR = 2
PROTOCOL_BLS = 3
PROTOCOL_DELEGATED = 4

CHECKSUM_LEN = 4
MAX_SUBADDRESS_LEN = 54
MAX_U64 = 2 ** 64 - 1

# Fixed payload lengths for the hash/key based protocols
_PAYLOAD_LEN = {
    PROTOCOL_SECP256K1: 20,
    PROTOCOL_ACTOR: 20,
    PROTOCOL_BLS: 48,
}

_BASE32_ALPHABET = set("abcdefghijklmnopqrstuvwxyz234567")


def _leb128_encode(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _leb128_decode(data: bytes) -> Tuple[int, int]:
    """Decode an unsigned LEB128 varint, returning (value, bytes consumed)."""
    value = 0
    shift = 0
    for i, byte in enumerate(data):
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            if i > 0 and byte == 0:
                raise ValueError("non-minimal varint")
            return value, i + 1
        shift += 7
        if shift > 63:
            raise ValueError("varint overflows u64")
    raise ValueError("truncated varint")


def _base32_encode(data: bytes) -> str:
    return base64.b32encode(data).decode("ascii").rstrip("=").lower()


def _base32_decode(text: str) -> bytes:
    if not text or any(c not in _BASE32_ALPHABET for c in text):
        raise ValueError("payload is not lowercase base32")
    padded = text.upper() + "=" * (-len(text) % 8)
    return base64.b32decode(padded)


def checksum(protocol: int, payload: bytes) -> bytes:
    """4-byte blake2b checksum over ``protocol || payload``."""
    return hashlib.blake2b(bytes([protocol]) + payload, digest_size=CHECKSUM_LEN).digest()


@dataclass(frozen=True)
class Address:
    """
    A validated Filecoin address.

    Attributes:
        network: "f" for mainnet, "t" for testnets
        protocol: Address protocol (0 = ID, 1 = secp256k1, 2 = actor, 3 = BLS, 4 = delegated)
        payload: Protocol-specific payload, without the protocol byte
    """
    network: str
    protocol: int
    payload: bytes

    @property
    def id(self) -> int:
        """Actor ID of an ID address"""
        if self.protocol != PROTOCOL_ID:
            raise ValueError(f"{self} is not an ID address")
        return _leb128_decode(self.payload)[0]

    def to_bytes(self) -> bytes:
        """Binary layout used in actor parameters."""
        return bytes([self.protocol]) + self.payload

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __str__(self) -> str:
        head = f"{self.network}{self.protocol}"
        if self.protocol == PROTOCOL_ID:
            return f"{head}{self.id}"
        if self.protocol == PROTOCOL_DELEGATED:
            namespace, used = _leb128_decode(self.payload)
            subaddress = self.payload[used:]
            return f"{head}{namespace}f{_base32_encode(subaddress + checksum(self.protocol, self.payload))}"
        return f"{head}{_base32_encode(self.payload + checksum(self.protocol, self.payload))}"

    @classmethod
    def from_bytes(cls, raw: bytes, network: str = MAINNET_PREFIX) -> "Address":
        """
        Parse the binary address layout.

        Args:
            raw: ``protocol byte || payload``
            network: Network prefix to attach to the result

        Returns:
            Address instance

        Raises:
            InvalidAddressFormat: If the bytes are not a valid address
        """
        shown = binascii.hexlify(bytes(raw)).decode("ascii")
        if network not in NETWORK_PREFIXES:
            raise InvalidAddressFormat(shown, f"unknown network prefix {network!r}")
        if not raw:
            raise InvalidAddressFormat(shown, "empty address bytes")

        protocol, payload = raw[0], bytes(raw[1:])
        try:
            if protocol == PROTOCOL_ID:
                value, used = _leb128_decode(payload)
                if used != len(payload):
                    raise ValueError("trailing bytes after actor ID")
            elif protocol in _PAYLOAD_LEN:
                if len(payload) != _PAYLOAD_LEN[protocol]:
                    raise ValueError(f"expected {_PAYLOAD_LEN[protocol]} byte payload, got {len(payload)}")
            elif protocol == PROTOCOL_DELEGATED:
                _, used = _leb128_decode(payload)
                if len(payload) - used > MAX_SUBADDRESS_LEN:
                    raise ValueError("delegated sub-address too long")
            else:
                raise ValueError(f"unknown protocol {protocol}")
        except ValueError as e:
            raise InvalidAddressFormat(shown, str(e))

        return cls(network=network, protocol=protocol, payload=payload)


def validate(value: str) -> Address:
    """
    Validate and normalize an address string.

    Args:
        value: Address string such as ``f1abc...`` or ``t01003``

    Returns:
        The parsed Address; ``str()`` of it is the canonical form

    Raises:
        InvalidAddressFormat: If the string is not a well-formed address
    """
    if not isinstance(value, str):
        raise InvalidAddressFormat(repr(value), "address must be a string")

    text = value.strip()
    if len(text) < 3:
        raise InvalidAddressFormat(value, "too short")

    network, proto_char, rest = text[0], text[1], text[2:]
    if network not in NETWORK_PREFIXES:
        raise InvalidAddressFormat(value, f"unknown network prefix {network!r}")
    if not proto_char.isdigit():
        raise InvalidAddressFormat(value, f"unknown protocol {proto_char!r}")
    protocol = int(proto_char)

    if protocol == PROTOCOL_ID:
        if not (rest.isascii() and rest.isdigit()) or len(rest) > 20:
            raise InvalidAddressFormat(value, "actor ID must be a decimal number")
        actor_id = int(rest)
        if actor_id > MAX_U64 or str(actor_id) != rest:
            raise InvalidAddressFormat(value, "actor ID out of range or not canonical")
        return Address(network, protocol, _leb128_encode(actor_id))

    if protocol == PROTOCOL_DELEGATED:
        namespace_text, sep, encoded = rest.partition("f")
        if not sep or not (namespace_text.isascii() and namespace_text.isdigit()) or str(int(namespace_text)) != namespace_text:
            raise InvalidAddressFormat(value, "delegated address needs '<namespace>f<subaddress>'")
        namespace = int(namespace_text)
        if namespace > MAX_U64:
            raise InvalidAddressFormat(value, "namespace out of range")
        try:
            raw = _base32_decode(encoded)
        except (ValueError, binascii.Error) as e:
            raise InvalidAddressFormat(value, str(e))
        if len(raw) < CHECKSUM_LEN or len(raw) - CHECKSUM_LEN > MAX_SUBADDRESS_LEN:
            raise InvalidAddressFormat(value, "invalid sub-address length")
        subaddress, check = raw[:-CHECKSUM_LEN], raw[-CHECKSUM_LEN:]
        payload = _leb128_encode(namespace) + subaddress
        if checksum(protocol, payload) != check:
            raise InvalidAddressFormat(value, "checksum mismatch")
        address = Address(network, protocol, payload)
        if str(address) != text:
            raise InvalidAddressFormat(value, "address is not in canonical form")
        return address

    if protocol not in _PAYLOAD_LEN:
        raise InvalidAddressFormat(value, f"unknown protocol {protocol}")

    try:
        raw = _base32_decode(rest)
    except (ValueError, binascii.Error) as e:
        raise InvalidAddressFormat(value, str(e))
    expected = _PAYLOAD_LEN[protocol] + CHECKSUM_LEN
    if len(raw) != expected:
        raise InvalidAddressFormat(value, f"expected {expected} decoded bytes, got {len(raw)}")

    payload, check = raw[:-CHECKSUM_LEN], raw[-CHECKSUM_LEN:]
    if checksum(protocol, payload) != check:
        raise InvalidAddressFormat(value, "checksum mismatch")

    address = Address(network, protocol, payload)
    if str(address) != text:
        raise InvalidAddressFormat(value, "address is not in canonical form")
    return address


def validate_many(values: Iterable[str]) -> List[Address]:
    """Validate every address in order, failing on the first bad one."""
    return [validate(v) for v in values]


def split_address_list(text: str) -> List[str]:
    """Split a comma-separated address list, dropping empty items."""
    return [item.strip() for item in text.strip().split(",") if item.strip()]
