# parties/tokens.py
"""
Invitation tokens.

Tokens are:
- Generated using secrets.token_hex(32) (256 bits entropy)
- Stored as a salted bcrypt hash (raw token never stored)
- Set to expire INVITATION_EXPIRY_DAYS after issue
- Single use: an accepted invitation never verifies again

Because each hash is salted, verification cannot look the token up. It
scans the live invitations for the email and checks each in turn, so the
cost is linear in the number of outstanding invitations for that address.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, Optional

from django.conf import settings
from django.contrib.auth.hashers import BCryptSHA256PasswordHasher
from django.utils import timezone

from ops import metrics
from parties.types import PartyTypeDescriptor, all_party_types, get_party_type

logger = logging.getLogger(__name__)


class InvitationTokenHasher(BCryptSHA256PasswordHasher):
    """bcrypt with the work factor taken from INVITATION_TOKEN_BCRYPT_ROUNDS."""

    @property
    def rounds(self):
        return getattr(settings, "INVITATION_TOKEN_BCRYPT_ROUNDS", 10)


_hasher = InvitationTokenHasher()


@dataclass
class IssuedInvitation:
    invitation: object
    # Raw token. Only ever available here, at issue time.
    token: str

    @property
    def expires_at(self):
        return self.invitation.expires_at


def _generate_token() -> str:
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return _hasher.encode(token, _hasher.salt())


def token_matches(invitation, token: str) -> bool:
    """Constant-time comparison of a raw token against a stored hash."""
    if not token or not invitation.token_hash:
        return False
    return _hasher.verify(token, invitation.token_hash)


def issue_invitation(
    party_type,
    account,
    email: str,
    name: str = "",
    role: str = "",
    percentage=None,
) -> IssuedInvitation:
    """
    Mint a token and persist its hash as a new invitation.

    Earlier invitations for the same (account, email) stay valid until
    they expire or one of them is accepted.
    """
    descriptor = get_party_type(party_type)
    raw_token = _generate_token()
    expiry_days = getattr(settings, "INVITATION_EXPIRY_DAYS", 7)

    invitation = descriptor.invitation_model.objects.create(
        account=account,
        email=email.lower(),
        name=name or "",
        role=role or "",
        percentage=percentage,
        token_hash=hash_token(raw_token),
        expires_at=timezone.now() + timedelta(days=expiry_days),
    )

    metrics.invitations_issued.labels(party_type=descriptor.key).inc()
    logger.info(
        "Invitation issued",
        extra={"party_type": descriptor.key, "account_id": str(account.public_id)},
    )
    return IssuedInvitation(invitation=invitation, token=raw_token)


def live_invitations(party_type, email: str = None, account=None):
    """Unaccepted, unexpired invitations, newest first."""
    descriptor = get_party_type(party_type)
    queryset = descriptor.invitation_model.objects.filter(
        accepted_at__isnull=True,
        expires_at__gt=timezone.now(),
    )
    if email is not None:
        queryset = queryset.filter(email=email.lower())
    if account is not None:
        queryset = queryset.filter(account=account)
    return queryset.select_related("account", "account__owner")


def revoke_invitations(party_type, account, email: str) -> int:
    """Delete the unaccepted invitations for (account, email). Returns the count."""
    descriptor = get_party_type(party_type)
    deleted, _ = descriptor.invitation_model.objects.filter(
        account=account,
        email=email.lower(),
        accepted_at__isnull=True,
    ).delete()
    if deleted:
        logger.info(
            "Invitations revoked",
            extra={"party_type": descriptor.key, "account_id": str(account.public_id), "count": deleted},
        )
    return deleted


def verify_invitation(party_type, email: str, token: str):
    """
    Find the live invitation for ``email`` whose hash matches ``token``.

    Returns the invitation, or None when nothing matches.
    """
    if not email or not token:
        return None

    for invitation in live_invitations(party_type, email=email):
        if token_matches(invitation, token):
            return invitation
    return None


def find_invitation(email: str, token: str, party_type=None):
    """
    Verify across one or all party types.

    Returns (descriptor, invitation) or (None, None).
    """
    descriptors = [get_party_type(party_type)] if party_type else all_party_types()
    for descriptor in descriptors:
        invitation = verify_invitation(descriptor, email, token)
        if invitation is not None:
            return descriptor, invitation
    return None, None


def purge_expired_invitations(dry_run: bool = False) -> Dict[str, int]:
    """
    Delete expired invitations that were never accepted.

    Accepted invitations are kept as the record of who joined and when.

    Returns:
        Count per party type (what would be deleted, when dry_run)
    """
    now = timezone.now()
    counts = {}
    for descriptor in all_party_types():
        expired = descriptor.invitation_model.objects.filter(
            accepted_at__isnull=True,
            expires_at__lte=now,
        )
        if dry_run:
            counts[descriptor.key] = expired.count()
            continue

        deleted, _ = expired.delete()
        counts[descriptor.key] = deleted
        if deleted:
            metrics.invitations_purged.labels(party_type=descriptor.key).inc(deleted)

    logger.info("Expired invitation sweep", extra={"dry_run": dry_run, "counts": counts})
    return counts


def describe(descriptor: PartyTypeDescriptor, invitation) -> dict:
    """Preview shown to the invitee before they register or sign in."""
    account = invitation.account
    return {
        "party_type": descriptor.key,
        "email": invitation.email,
        "name": invitation.name,
        "role": invitation.role,
        "percentage": str(invitation.percentage) if invitation.percentage is not None else None,
        "account_id": str(account.public_id),
        "account_name": account.display_name,
        "account_type": account.account_type,
        "invited_by": account.owner.display_name,
        "invited_by_email": account.owner.email,
        "expires_at": invitation.expires_at.isoformat(),
    }
