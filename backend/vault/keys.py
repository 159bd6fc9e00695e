# vault/keys.py
"""
Process-wide cipher and indexer built from settings.

Keys come from FIELD_ENCRYPTION_KEY and FIELD_DIGEST_KEY (at least 32
characters each) and are stretched to 32 bytes with SHA-256. Instances
are cached and rebuilt when those settings change (override_settings,
pytest-django's ``settings`` fixture).
"""
import hashlib
from functools import lru_cache
from typing import List, Optional

from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver

from vault.cipher import FieldCipher
from vault.digest import DeterministicIndexer

MIN_KEY_LENGTH = 32

KEY_SETTINGS = ("FIELD_ENCRYPTION_KEY", "FIELD_DIGEST_KEY")


def derive_key(raw: Optional[str]) -> Optional[bytes]:
    """Derive a 32-byte key from configured key material, or None if unusable."""
    if not raw or len(raw) < MIN_KEY_LENGTH:
        return None
    return hashlib.sha256(raw.encode("utf-8")).digest()


def key_configuration_errors() -> List[str]:
    """Describe what is wrong with the configured keys (empty list when fine)."""
    errors = []
    for name in KEY_SETTINGS:
        value = getattr(settings, name, "")
        if not value:
            errors.append(f"{name} is not set")
        elif len(value) < MIN_KEY_LENGTH:
            errors.append(f"{name} must be at least {MIN_KEY_LENGTH} characters")
    if not errors and settings.FIELD_ENCRYPTION_KEY == settings.FIELD_DIGEST_KEY:
        errors.append("FIELD_DIGEST_KEY must differ from FIELD_ENCRYPTION_KEY")
    return errors


@lru_cache(maxsize=1)
def get_field_cipher() -> FieldCipher:
    return FieldCipher(derive_key(getattr(settings, "FIELD_ENCRYPTION_KEY", "")))


@lru_cache(maxsize=1)
def get_indexer() -> DeterministicIndexer:
    return DeterministicIndexer(derive_key(getattr(settings, "FIELD_DIGEST_KEY", "")))


@receiver(setting_changed)
def _reset_cached_keys(setting, **kwargs):
    if setting in KEY_SETTINGS:
        get_field_cipher.cache_clear()
        get_indexer.cache_clear()
