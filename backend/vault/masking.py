# vault/masking.py
from typing import Optional

VISIBLE_SUFFIX = 2


def mask(value: Optional[str], mask_char: str = "*") -> Optional[str]:
    """
    Redact all but the last two characters: "987654321" -> "*******21".

    Values of two characters or fewer carry nothing to hide and are
    returned unchanged.
    """
    if value is None:
        return None
    if len(value) <= VISIBLE_SUFFIX:
        return value
    return mask_char * (len(value) - VISIBLE_SUFFIX) + value[-VISIBLE_SUFFIX:]
