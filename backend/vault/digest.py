# vault/digest.py
"""
Deterministic keyed digest for equality search on encrypted fields.

The digest is HMAC-SHA256 over the normalized value. It is only ever
compared for equality; it cannot be reversed and is never decrypted.

Degraded mode: with no FIELD_DIGEST_KEY the indexer returns None for
every value. No digest is stored, so TFN uniqueness is NOT enforced and
identifier search finds nothing until a key is configured and the
affected profiles are saved again.
"""
import hashlib
import hmac
import logging
from typing import Optional

logger = logging.getLogger(__name__)

DIGEST_LENGTH = 64


def normalize_identifier(value: Optional[str]) -> str:
    """Strip all whitespace so "123 456 789" and "123456789" are one identity."""
    if value is None:
        return ""
    return "".join(str(value).split())


class DeterministicIndexer:
    """HMAC-SHA256 indexer keyed with a secret distinct from the cipher key."""

    def __init__(self, key: Optional[bytes]):
        self._key = key or None

    @property
    def available(self) -> bool:
        return self._key is not None

    def digest(self, value: Optional[str]) -> Optional[str]:
        """
        Return the 64-char hex digest of the normalized value.

        Empty input gives None. Without a key the indexer is degraded and
        also returns None (logged), which disables uniqueness checks.
        """
        normalized = normalize_identifier(value)
        if not normalized:
            return None
        if self._key is None:
            logger.warning("Field digest key not configured; identifier digest skipped")
            return None
        return hmac.new(self._key, normalized.encode("utf-8"), hashlib.sha256).hexdigest()
