# parties/lifecycle.py
"""
Party status rules.

    PENDING  -> APPROVED | REJECTED   (invited person responds)
    any      -> PENDING               (owner changes the email)
    any      -> REMOVED               (owner removes a trust party)

Company and partnership removals delete the row instead of moving it to
REMOVED. A REMOVED row is terminal.
"""
from django.utils import timezone

from parties.exceptions import InvalidStateTransition
from parties.models import PartyStatus

RESPONSE_STATUSES = {
    True: PartyStatus.APPROVED,
    False: PartyStatus.REJECTED,
}


def ensure_not_removed(party) -> None:
    if party.status == PartyStatus.REMOVED:
        raise InvalidStateTransition("This party has been removed from the account.")


def ensure_can_respond(party) -> None:
    if party.status != PartyStatus.PENDING:
        raise InvalidStateTransition("This request has already been responded to.")


def ensure_can_resend(party) -> None:
    if party.status != PartyStatus.PENDING:
        raise InvalidStateTransition("Invitations can only be resent to parties awaiting a response.")


def apply_response(party, approve: bool, user=None) -> None:
    """Record the invited person's answer. The caller saves."""
    ensure_can_respond(party)
    party.status = RESPONSE_STATUSES[bool(approve)]
    party.responded_at = timezone.now()
    if user is not None:
        party.user = user


def reset_for_new_email(party, email: str, existing_user=None, name_given: bool = False) -> None:
    """
    Point the row at a different person; their answer starts over.

    If the new email belongs to a registered user the row is linked to
    them, and takes their name unless the owner supplied one.
    """
    ensure_not_removed(party)
    party.email = email
    party.status = PartyStatus.PENDING
    party.responded_at = None
    party.user = existing_user
    if existing_user is not None and not name_given and existing_user.name:
        party.name = existing_user.name


def mark_removed(party) -> None:
    ensure_not_removed(party)
    party.status = PartyStatus.REMOVED
