"""
Symmetric encryption for DNIT credentials stored in the database.

Values are encrypted with Fernet (AES-128-CBC + HMAC-SHA256). The Fernet key is
derived from the DNIT_ENCRYPTION_KEY setting with SHA-256, so operators can
configure any sufficiently long passphrase instead of a raw Fernet key.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import re
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from carwash_api.core.settings import get_app_settings

logger = logging.getLogger(__name__)

_DEV_SECRET = "dev-default-key-not-secure-change-in-production!"
_PLACEHOLDER_RE = re.compile(r"^•+$")


class EncryptionKeyError(Exception):
    """Raised when the configured encryption secret is unusable."""


def _get_fernet() -> Fernet:
    secret = get_app_settings().DNIT_ENCRYPTION_KEY
    if not secret:
        logger.warning("DNIT_ENCRYPTION_KEY not set. Using development key; NOT SECURE FOR PRODUCTION.")
        secret = _DEV_SECRET
    elif len(secret) < 32:
        raise EncryptionKeyError("DNIT_ENCRYPTION_KEY must be at least 32 characters long")
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


# PUBLIC_INTERFACE
def encrypt_secret(value: Optional[str]) -> Optional[str]:
    """Encrypt a secret string. Empty values are stored as-is."""
    if value is None or value.strip() == "":
        return value
    return _get_fernet().encrypt(value.encode("utf-8")).decode("ascii")


# PUBLIC_INTERFACE
def decrypt_secret(token: Optional[str]) -> Optional[str]:
    """
    Decrypt a value produced by encrypt_secret.

    Raises:
        EncryptionKeyError: when the token was encrypted with a different key or is corrupt.
    """
    if token is None or token.strip() == "":
        return token
    try:
        return _get_fernet().decrypt(token.encode("ascii")).decode("utf-8")
    except InvalidToken as exc:
        raise EncryptionKeyError("Stored secret cannot be decrypted with the configured key") from exc


# PUBLIC_INTERFACE
def is_placeholder(value: Optional[str]) -> bool:
    """True for the masked value ('••••') clients send back for an unchanged secret."""
    return bool(value) and bool(_PLACEHOLDER_RE.match(value))
