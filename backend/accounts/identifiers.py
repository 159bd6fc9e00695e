# accounts/identifiers.py
"""
Tax identifier protection and system-wide uniqueness.

A TFN may be linked to only one non-closed account at a time, across all
four profile types. Because values are encrypted with a random nonce the
check runs on the deterministic digest, never on ciphertext.

The guard is check-then-write: two concurrent writes of the same TFN to
different accounts can both pass. There is no storage-level constraint
backing it (a partial unique index cannot see the owning account's
status, which lives in another table).
"""
import logging
from typing import List, Optional, Tuple

from django.db.models import Q

from accounts.models import PROFILE_MODELS, PROFILE_RELATED_NAMES, Account
from ops import metrics
from vault.digest import normalize_identifier
from vault.exceptions import DecryptionError
from vault.keys import get_field_cipher, get_indexer

logger = logging.getLogger(__name__)


class DuplicateIdentifierError(Exception):
    """The TFN is already linked to another account that is not closed."""

    code = "duplicate_identifier"

    def __init__(self, account_id: str, account_name: str, account_status: str):
        self.account_id = account_id
        self.account_name = account_name
        self.account_status = account_status
        super().__init__(
            f'This TFN is already linked to account "{account_name}" ({account_status}). '
            "Only one open account can use the same TFN. Close that account first, "
            "then add the TFN here."
        )

    def to_dict(self) -> dict:
        return {
            "existing_account_id": self.account_id,
            "existing_account_name": self.account_name,
            "existing_account_status": self.account_status,
        }


def check_identifier_available(digest: Optional[str], account: Account) -> None:
    """
    Reject a digest already held by a different, non-closed account.

    Raises:
        DuplicateIdentifierError: carrying the conflicting account's
            public id, name and status.
    """
    if not digest:
        return

    for model in PROFILE_MODELS.values():
        matches = (
            model.objects
            .filter(tfn_digest=digest)
            .exclude(account_id=account.pk)
            .select_related("account")
        )
        for profile in matches:
            holder = profile.account
            if holder.is_closed:
                # A closed account has relinquished the identifier.
                continue

            metrics.identifier_conflicts.inc()
            logger.warning(
                "TFN already linked to another account",
                extra={
                    "account_id": str(account.public_id),
                    "existing_account_id": str(holder.public_id),
                },
            )
            raise DuplicateIdentifierError(
                account_id=str(holder.public_id),
                account_name=holder.name,
                account_status=holder.status,
            )


def protect_identifier(raw: Optional[str], account: Account) -> Tuple[Optional[str], Optional[str]]:
    """
    Normalize, check and seal a TFN for ``account``.

    Returns (ciphertext, digest). Blank input returns (None, None), which
    clears the stored field.
    """
    normalized = normalize_identifier(raw)
    if not normalized:
        return None, None

    digest = get_indexer().digest(normalized)
    check_identifier_available(digest, account)
    return get_field_cipher().encrypt(normalized), digest


def reveal_identifier(profile) -> Tuple[Optional[str], bool]:
    """
    Decrypt a profile's TFN.

    Returns (plaintext, unavailable). A value that cannot be decrypted
    yields (None, True) so one bad row never breaks a listing.
    """
    try:
        return get_field_cipher().decrypt(profile.tfn_ciphertext), False
    except DecryptionError:
        metrics.decryption_failures.inc()
        logger.warning(
            "Stored TFN could not be decrypted",
            extra={"account_id": str(profile.account.public_id)},
        )
        return None, True


def find_accounts_by_identifier(search: str) -> List[Account]:
    """
    Exact-match account lookup by TFN (admin search).

    Partial matching is impossible by construction: only the digest of the
    whole normalized term is compared.
    """
    digest = get_indexer().digest(search)
    if not digest:
        return []

    condition = Q()
    for related_name in PROFILE_RELATED_NAMES.values():
        condition |= Q(**{f"{related_name}__tfn_digest": digest})

    return list(
        Account.objects.filter(condition)
        .select_related("owner")
        .order_by("-created_at")
    )
