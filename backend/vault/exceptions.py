# vault/exceptions.py


class DecryptionError(Exception):
    """
    Stored ciphertext could not be turned back into plaintext.

    Raised for corrupt or truncated values, tampering, or a wrong key.
    Read paths treat this as "value unavailable", never as fatal.
    """

    code = "decryption_failed"
