"""
Token codec -- obscures the admin's upstream credential at rest.

The encrypted token lives inside the shared document so any admin
session can reuse it. It is sealed with Fernet (AES-128-CBC +
HMAC-SHA256) under a key stretched from the configured passphrase.

Be honest about what this buys: the passphrase ships with every
client config, so anyone who can read the config can read the token.
Real custody of the credential belongs on a server.

Ciphertext layout:
    <urlsafe-b64 salt>$<fernet token>
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives.hashes import SHA256
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger("revolico.codec")

SALT_BYTES = 16
KDF_ITERATIONS = 200_000
SEPARATOR = "$"


def _derive_fernet_key(passphrase: str, salt: bytes) -> bytes:
    """Stretch a passphrase into a urlsafe-b64 Fernet key.

    Args:
        passphrase: Static passphrase from client configuration.
        salt: Random per-ciphertext salt.

    Returns:
        32-byte key, base64-url-encoded as Fernet expects.
    """
    kdf = PBKDF2HMAC(
        algorithm=SHA256(),
        length=32,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(passphrase.encode("utf-8")))


def encrypt(plaintext: str, passphrase: str) -> str:
    """Encrypt the upstream credential.

    Args:
        plaintext: The personal access token.
        passphrase: Static passphrase from client configuration.

    Returns:
        Printable ciphertext safe to embed in the JSON document.
    """
    salt = os.urandom(SALT_BYTES)
    token = Fernet(_derive_fernet_key(passphrase, salt)).encrypt(
        plaintext.encode("utf-8")
    )
    salt_text = base64.urlsafe_b64encode(salt).decode("ascii")
    return f"{salt_text}{SEPARATOR}{token.decode('ascii')}"


def decrypt(ciphertext: Optional[str], passphrase: str) -> Optional[str]:
    """Decrypt the upstream credential.

    Never raises. Wrong passphrase, corrupt or empty ciphertext all
    return None, meaning the admin must enter the credential again.
    """
    if not ciphertext or SEPARATOR not in ciphertext:
        return None

    salt_text, _, token = ciphertext.partition(SEPARATOR)
    try:
        salt = base64.urlsafe_b64decode(salt_text.encode("ascii"))
        key = _derive_fernet_key(passphrase, salt)
        plaintext = Fernet(key).decrypt(token.encode("ascii"))
        return plaintext.decode("utf-8")
    except (InvalidToken, binascii.Error, ValueError) as exc:
        logger.info("Token decryption failed: %s", exc.__class__.__name__)
        return None


def encode_password(password: str) -> str:
    """Reversibly encode the admin password (base64, as stored in the document)."""
    return base64.b64encode(password.encode("utf-8")).decode("ascii")


def password_matches(password: str, encoded: Optional[str]) -> bool:
    """Check a plain password against its stored encoding."""
    if not encoded:
        return False
    return encode_password(password) == encoded
