"""
JWT creation and verification.

Tokens are compact JWS strings, ``header.payload.signature``, each part
base64url-encoded without padding and signed with HMAC-SHA256 (``HS256``).
Secret key is loaded from ``config.jwt_secret`` (env var: ``JWT_SECRET``).
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional

from config.settings import config
from utils.schemas import Identity

_ALGORITHM = "HS256"
_HEADER = {"alg": _ALGORITHM, "typ": "JWT"}


class InvalidTokenError(ValueError):
    """Token is malformed, tampered with, or expired."""


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode())


def _sign(signing_input: str, secret: str) -> str:
    digest = hmac.new(secret.encode(), signing_input.encode(), hashlib.sha256).digest()
    return _b64encode(digest)


def _encode_json(data: Dict[str, Any]) -> str:
    return _b64encode(json.dumps(data, separators=(",", ":")).encode())


def create_token(
    user_id: str,
    email: str,
    *,
    secret: Optional[str] = None,
    ttl_seconds: Optional[int] = None,
    now: Optional[float] = None,
) -> str:
    """Create a signed token containing ``userId``, ``email`` and expiry."""
    issued_at = int(now if now is not None else time.time())
    ttl = ttl_seconds if ttl_seconds is not None else config.jwt_expiry_seconds
    payload = {
        "userId": str(user_id),
        "email": email,
        "iat": issued_at,
        "exp": issued_at + ttl,
    }
    signing_input = _encode_json(_HEADER) + "." + _encode_json(payload)
    return signing_input + "." + _sign(signing_input, secret or config.jwt_secret)


def verify_token(
    token: str,
    *,
    secret: Optional[str] = None,
    now: Optional[float] = None,
) -> Identity:
    """
    Verify token and return the identity it carries.

    Raises ``InvalidTokenError`` on a bad structure, an unexpected algorithm,
    a signature mismatch, missing claims, or an expiry in the past.
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise InvalidTokenError("bad format")
    header_b64, payload_b64, signature = parts

    expected_sig = _sign(header_b64 + "." + payload_b64, secret or config.jwt_secret)
    if not hmac.compare_digest(signature.encode(), expected_sig.encode()):
        raise InvalidTokenError("bad signature")

    try:
        header = json.loads(_b64decode(header_b64))
        payload = json.loads(_b64decode(payload_b64))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidTokenError("bad encoding") from exc

    if not isinstance(header, dict) or header.get("alg") != _ALGORITHM:
        raise InvalidTokenError("unsupported algorithm")
    if not isinstance(payload, dict):
        raise InvalidTokenError("bad payload")

    exp = payload.get("exp")
    if not isinstance(exp, (int, float)):
        raise InvalidTokenError("missing expiry")
    current = now if now is not None else time.time()
    if exp <= current:
        raise InvalidTokenError("token expired")

    try:
        return Identity(user_id=payload["userId"], email=payload["email"])
    except (KeyError, ValueError) as exc:
        raise InvalidTokenError("missing claims") from exc
