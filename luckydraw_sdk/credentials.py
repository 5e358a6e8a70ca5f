"""
Lotus API token inspection.

Lotus issues HS256 JWTs whose ``Allow`` claim lists the granted permissions.
The node holds the signing secret, so the token is only inspected here,
never verified.
"""
import logging
from typing import List, Optional, Sequence

import jwt

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

REQUIRED_PERMISSIONS = ("write", "sign")


def token_permissions(token: str) -> Optional[List[str]]:
    """
    Read the ``Allow`` claim of a Lotus API token.

    Args:
        token: API token

    Returns:
        The permission list, or None if the token is not a readable JWT
    """
    if not token:
        return None
    try:
        header = jwt.get_unverified_header(token)
    except jwt.DecodeError:
        logger.debug("RPC token is not a JWT; skipping permission check")
        return None

    algorithm = header.get("alg") or ""
    if str(algorithm).lower() in ("none", ""):
        logger.warning(f"Unsafe JWT algorithm in RPC token: {algorithm!r}")

    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        logger.warning(f"Failed to read RPC token claims: {e}")
        return None

    allow = claims.get("Allow")
    if not isinstance(allow, list):
        return None
    return [str(p) for p in allow]


def check_token_permissions(token: str, required: Sequence[str] = REQUIRED_PERMISSIONS) -> None:
    """
    Reject a Lotus token that cannot send messages.

    Tokens that are not JWTs are let through; the node has the final say.

    Raises:
        ValidationError: If the token lists permissions but lacks a required one
    """
    granted = token_permissions(token)
    if granted is None:
        return
    missing = [p for p in required if p not in granted]
    if missing:
        raise ValidationError(f"RPC token lacks required permissions: {', '.join(missing)}")
