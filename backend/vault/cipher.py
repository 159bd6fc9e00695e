# vault/cipher.py
"""
Field-level authenticated encryption for sensitive strings.

Stored format (one opaque string):

    enc:aes256gcm:<nonce hex>:<ciphertext+tag hex>

The algorithm tag is bound as associated data, so a value cannot be
relabelled without failing authentication. Values without the ``enc:``
prefix are treated as legacy plaintext and returned unchanged by decrypt.
"""
import logging
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from vault.exceptions import DecryptionError

logger = logging.getLogger(__name__)

ENCRYPTED_PREFIX = "enc:"
ALGORITHM_TAG = "aes256gcm"
NONCE_SIZE = 12
KEY_SIZE = 32


def is_encrypted(value: Optional[str]) -> bool:
    """Check if a stored value carries the encrypted prefix."""
    return bool(value) and value.startswith(ENCRYPTED_PREFIX)


class FieldCipher:
    """
    AES-256-GCM cipher for a single sensitive field value.

    Built with a 32-byte key. A cipher built with ``key=None`` runs in
    degraded mode: encrypt passes plaintext through (with a warning) and
    decrypt cannot open encrypted values.
    """

    def __init__(self, key: Optional[bytes]):
        if key is not None and len(key) != KEY_SIZE:
            raise ValueError(f"Field encryption key must be {KEY_SIZE} bytes, got {len(key)}")
        self._aead = AESGCM(key) if key else None

    @property
    def available(self) -> bool:
        return self._aead is not None

    def encrypt(self, plaintext: Optional[str]) -> Optional[str]:
        """
        Encrypt a plaintext value.

        Empty or missing input yields None so the field can be cleared.
        Every other value is sealed, including one that already looks like
        ciphertext, so ``decrypt(encrypt(s)) == s`` for any non-empty ``s``.
        """
        if not plaintext:
            return None
        if self._aead is None:
            logger.warning("Field encryption key not configured; value stored without encryption")
            return plaintext

        nonce = os.urandom(NONCE_SIZE)
        sealed = self._aead.encrypt(nonce, plaintext.encode("utf-8"), ALGORITHM_TAG.encode())
        return f"{ENCRYPTED_PREFIX}{ALGORITHM_TAG}:{nonce.hex()}:{sealed.hex()}"

    def decrypt(self, value: Optional[str]) -> Optional[str]:
        """
        Decrypt a stored value.

        Raises:
            DecryptionError: malformed value, unknown algorithm, wrong key,
                tampered ciphertext, or no key configured.
        """
        if not value:
            return None
        if not is_encrypted(value):
            return value
        if self._aead is None:
            raise DecryptionError("Field encryption key not configured")

        parts = value[len(ENCRYPTED_PREFIX):].split(":")
        if len(parts) != 3:
            raise DecryptionError("Malformed encrypted value")
        tag, nonce_hex, sealed_hex = parts
        if tag != ALGORITHM_TAG:
            raise DecryptionError(f"Unsupported algorithm tag {tag!r}")

        try:
            nonce = bytes.fromhex(nonce_hex)
            sealed = bytes.fromhex(sealed_hex)
            return self._aead.decrypt(nonce, sealed, tag.encode()).decode("utf-8")
        except (InvalidTag, ValueError) as exc:
            raise DecryptionError("Encrypted value failed authentication") from exc
