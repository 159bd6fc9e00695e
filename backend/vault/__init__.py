# vault/__init__.py
"""
Protection for sensitive profile fields (tax file numbers).

- FieldCipher: AES-256-GCM encryption at rest
- DeterministicIndexer: keyed HMAC digest for equality lookups
- mask: partial redaction for owner-facing display

Components take their key at construction. Use vault.keys for the
process-wide instances built from settings.
"""
