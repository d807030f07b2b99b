"""
sms_inspector/core/security.py

Purpose: Credentials and signed session tokens

- PBKDF2 password hashing and verification
- HMAC-SHA256 signed tokens for the `token` and `admin_session` cookies
- Constant-time comparisons everywhere a secret is checked
"""

import base64
import hashlib
import hmac
import json
import secrets
import time
from typing import Any, Dict, Optional

from sms_inspector.core.config import settings

PASSWORD_ALGORITHM = "pbkdf2_sha256"
PASSWORD_ITERATIONS = 260_000

TOKEN_TYPE_USER = "user"
TOKEN_TYPE_ADMIN = "admin"


def _pbkdf2_hex(value: str, salt: str, iterations: int) -> str:
    dk = hashlib.pbkdf2_hmac(
        "sha256",
        value.encode("utf-8"),
        salt.encode("utf-8"),
        iterations,
    )
    return dk.hex()


def hash_password(password: str) -> str:
    """
    Hashes a password for storage.

    Returns:
        String of the form ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``
    """
    salt = secrets.token_hex(16)
    digest = _pbkdf2_hex(password, salt, PASSWORD_ITERATIONS)
    return f"{PASSWORD_ALGORITHM}${PASSWORD_ITERATIONS}${salt}${digest}"


def verify_password(password: str, stored: Optional[str]) -> bool:
    """
    Checks a plaintext password against a stored hash.
    Malformed or missing hashes never verify.
    """
    if not stored:
        return False
    try:
        algorithm, iterations, salt, digest = stored.split("$")
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != PASSWORD_ALGORITHM:
        return False
    computed = _pbkdf2_hex(password, salt, rounds)
    return hmac.compare_digest(computed, digest)


def credentials_match(username: str, password: str, expected_username: str, expected_password: str) -> bool:
    # Evaluate both comparisons so timing does not reveal which one failed
    username_ok = hmac.compare_digest(username.encode("utf-8"), expected_username.encode("utf-8"))
    password_ok = hmac.compare_digest(password.encode("utf-8"), expected_password.encode("utf-8"))
    return username_ok and password_ok


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(raw: str) -> bytes:
    padding = "=" * (-len(raw) % 4)
    return base64.urlsafe_b64decode(raw + padding)


def _signature(signing_input: bytes) -> bytes:
    return hmac.new(
        settings.SECRET_KEY.encode("utf-8"),
        signing_input,
        hashlib.sha256,
    ).digest()


def create_token(subject: str, token_type: str, ttl_seconds: int, **claims: Any) -> str:
    """
    Creates a signed, expiring token.

    Args:
        subject: Identifier the token is issued for (user id)
        token_type: TOKEN_TYPE_USER or TOKEN_TYPE_ADMIN
        ttl_seconds: Lifetime from now
        **claims: Extra claims copied into the payload

    Returns:
        ``<payload>.<signature>``, both base64url without padding
    """
    now = int(time.time())
    payload = {"sub": subject, "typ": token_type, "iat": now, "exp": now + ttl_seconds}
    payload.update(claims)
    body = _b64encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signature = _b64encode(_signature(body.encode("ascii")))
    return f"{body}.{signature}"


def decode_token(token: Optional[str], token_type: str) -> Optional[Dict[str, Any]]:
    """
    Verifies a token's signature, type and expiry.

    Returns:
        The payload dict, or None when the token is invalid or expired
    """
    if not token:
        return None
    try:
        body, signature = token.split(".")
        provided = _b64decode(signature)
        expected = _signature(body.encode("ascii"))
    except ValueError:
        return None

    if not hmac.compare_digest(expected, provided):
        return None

    try:
        payload = json.loads(_b64decode(body).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None

    if not isinstance(payload, dict) or payload.get("typ") != token_type:
        return None

    exp = payload.get("exp")
    if not isinstance(exp, int) or exp <= int(time.time()):
        return None

    return payload
