# parties/commands.py
"""
Command layer for account parties and their invitations.

Owner operations (account owner only):
- add_party, list_parties, get_party, update_party, remove_party,
  resend_invitation

Invitee operations:
- respond_to_invitation (signed-in invitee, by email or linked user)
- verify_invitation_token (anonymous preview before registering)
- accept_invitation (signed-in invitee holding the emailed token)

link_pending_parties runs when a user registers.

Every operation returns a CommandResult. Errors raised below this layer
(PartyError subclasses, PermissionDenied, missing accounts) are turned
into CommandResult.fail with a stable code.
"""
import logging
from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from functools import wraps
from typing import Any, Dict, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from django.db import transaction
from django.utils import timezone

from accounts.authz import ActorContext, get_owned_account, require_account_owner
from accounts.commands import CommandResult
from accounts.models import Account
from accounts.profiles import UNSET
from ops import metrics
from parties import lifecycle, tokens
from parties.email_service import send_party_invitation_email
from parties.exceptions import (
    DuplicatePartyError,
    IdentityMismatch,
    InvalidStateTransition,
    InvitationExpiredOrInvalid,
    PartyError,
    PartyLimitReached,
    PartyNotFound,
    WrongAccountType,
)
from parties.models import PartyStatus
from parties.types import PartyTypeDescriptor, all_party_types, get_party_type, party_type_for_account

logger = logging.getLogger(__name__)

User = get_user_model()

PERCENT_FIELDS = ("ownership_percent", "beneficiary_percent")


@dataclass
class PartyUpdate:
    """Owner edits to a party row. Fields left at UNSET are not touched."""

    email: str = UNSET
    name: str = UNSET
    role: str = UNSET
    is_director: bool = UNSET
    is_shareholder: bool = UNSET
    share_count: Optional[int] = UNSET
    ownership_percent: Any = UNSET
    beneficiary_percent: Any = UNSET

    def changes(self) -> Dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


def _command(func):
    """Convert domain errors raised inside a command into failures."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Account.DoesNotExist:
            return CommandResult.fail("Account not found.", code="not_found")
        except PermissionDenied as exc:
            return CommandResult.fail(str(exc) or "Access denied.", code="access_denied")
        except PartyError as exc:
            return CommandResult.from_exception(exc)

    return wrapper


# =============================================================================
# Helpers
# =============================================================================

def _normalize_email(email: Optional[str]) -> str:
    email = (email or "").strip().lower()
    if not email or "@" not in email:
        raise PartyError("A valid email address is required.")
    return email


def _find_user(email: str):
    return User.objects.filter(email__iexact=email).first()


def _clean_attributes(descriptor: PartyTypeDescriptor, attributes: Dict[str, Any]) -> Dict[str, Any]:
    """Reject fields the party type does not carry and range-check the rest."""
    unknown = set(attributes) - set(descriptor.extra_fields)
    if unknown:
        raise PartyError(
            f"{descriptor.label} parties do not take: {', '.join(sorted(unknown))}."
        )

    cleaned = dict(attributes)
    for name in PERCENT_FIELDS:
        if name in cleaned and cleaned[name] is not None:
            try:
                value = Decimal(str(cleaned[name]))
            except InvalidOperation:
                raise PartyError(f"{name} must be a number.") from None
            if value < 0 or value > 100:
                raise PartyError(f"{name} must be between 0 and 100.")
            cleaned[name] = value

    if cleaned.get("share_count") is not None:
        try:
            cleaned["share_count"] = int(cleaned["share_count"])
        except (TypeError, ValueError):
            raise PartyError("share_count must be a whole number.") from None
        if cleaned["share_count"] < 0:
            raise PartyError("share_count cannot be negative.")
    return cleaned


def _ensure_no_duplicate(descriptor, account, email, exclude_pk=None):
    queryset = descriptor.party_model.objects.filter(account=account, email=email).exclude(
        status=PartyStatus.REMOVED
    )
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)
    if queryset.exists():
        raise DuplicatePartyError()


def _ensure_below_limit(descriptor, account):
    if descriptor.max_parties is None:
        return
    count = descriptor.party_model.objects.filter(account=account).exclude(status=PartyStatus.REMOVED).count()
    if count >= descriptor.max_parties:
        raise PartyLimitReached(
            f"This account already has a {descriptor.label.lower()}. Remove them before adding another."
            if descriptor.max_parties == 1
            else f"This account already has {count} {descriptor.label.lower()} parties."
        )


def _load_party(descriptor, party_public_id, for_update=False):
    queryset = descriptor.party_model.objects.select_related("account", "account__owner", "user")
    if for_update:
        queryset = queryset.select_for_update(of=("self",))
    try:
        return queryset.get(public_id=party_public_id)
    except (descriptor.party_model.DoesNotExist, ValueError, TypeError):
        raise PartyNotFound() from None


def _load_owned_party(actor, descriptor, party_public_id, for_update=False):
    party = _load_party(descriptor, party_public_id, for_update=for_update)
    require_account_owner(actor, party.account)
    return party


def _issue_for(descriptor, party):
    percentage = getattr(party, descriptor.percentage_field) if descriptor.percentage_field else None
    return tokens.issue_invitation(
        descriptor,
        party.account,
        party.email,
        name=party.name,
        role=party.display_role,
        percentage=percentage,
    )


def party_to_dict(descriptor: PartyTypeDescriptor, party) -> Dict[str, Any]:
    data = {
        "id": str(party.public_id),
        "party_type": descriptor.key,
        "account_id": str(party.account.public_id),
        "email": party.email,
        "name": party.name,
        "role": party.display_role,
        "status": party.status,
        "user_id": str(party.user.public_id) if party.user_id else None,
        "responded_at": party.responded_at.isoformat() if party.responded_at else None,
        "created_at": party.created_at.isoformat() if party.created_at else None,
    }
    for name in descriptor.extra_fields:
        value = getattr(party, name)
        data[name] = str(value) if isinstance(value, Decimal) else value
    return data


def invitation_to_dict(descriptor: PartyTypeDescriptor, invitation) -> Dict[str, Any]:
    return {
        "party_type": descriptor.key,
        "email": invitation.email,
        "name": invitation.name,
        "role": invitation.role,
        "percentage": str(invitation.percentage) if invitation.percentage is not None else None,
        "expires_at": invitation.expires_at.isoformat(),
        "created_at": invitation.created_at.isoformat() if invitation.created_at else None,
    }


# =============================================================================
# Owner operations
# =============================================================================

@_command
def add_party(
    actor: ActorContext,
    account_public_id,
    party_type: str,
    email: str,
    name: str = "",
    role: str = "",
    **attributes,
) -> CommandResult:
    """
    Add a co-owner to an account and invite them.

    The row starts PENDING and an invitation is issued in the same
    transaction. If the email already belongs to a registered user the
    row is linked to them and takes their name when none was given.

    Args:
        actor: The account owner
        account_public_id: Public id of the account
        party_type: "company", "partnership", "trust" or "spouse"
        email: Invitee email
        name: Invitee display name
        role: Free-text role
        **attributes: Type-specific fields (is_director, ownership_percent, ...)

    Returns:
        CommandResult with the party, ``is_existing_user``,
        ``invitation_sent`` and the raw ``token`` (returned only here).
    """
    descriptor = get_party_type(party_type)
    email = _normalize_email(email)
    attributes = _clean_attributes(descriptor, attributes)

    with transaction.atomic():
        # Lock the account so concurrent adds of the same email serialize.
        account = get_owned_account(actor, account_public_id, for_update=True)
        if account.account_type != descriptor.account_type:
            raise WrongAccountType(
                f"{descriptor.label} parties can only be added to "
                f"{Account.AccountType(descriptor.account_type).label.lower()} accounts."
            )

        _ensure_no_duplicate(descriptor, account, email)
        _ensure_below_limit(descriptor, account)

        existing_user = _find_user(email)
        party = descriptor.party_model.objects.create(
            account=account,
            email=email,
            name=name or (existing_user.name if existing_user else ""),
            role=role or "",
            status=PartyStatus.PENDING,
            user=existing_user,
            **attributes,
        )
        issued = _issue_for(descriptor, party)

    sent = send_party_invitation_email(
        descriptor, account, party, issued.token, is_existing_user=existing_user is not None
    )
    logger.info(
        "Party added",
        extra={
            "party_type": descriptor.key,
            "party_id": str(party.public_id),
            "account_id": str(account.public_id),
        },
    )
    return CommandResult.ok({
        "party": party_to_dict(descriptor, party),
        "is_existing_user": existing_user is not None,
        "invitation_sent": sent,
        "token": issued.token,
        "expires_at": issued.expires_at,
    })


@_command
def list_parties(
    actor: ActorContext,
    account_public_id,
    party_type: Optional[str] = None,
    include_removed: bool = False,
) -> CommandResult:
    """
    Parties on an account, oldest first, with the account's live invitations.

    The party type defaults to the one matching the account type.
    """
    account = get_owned_account(actor, account_public_id)
    descriptor = get_party_type(party_type) if party_type else party_type_for_account(account)
    if descriptor is None or descriptor.account_type != account.account_type:
        raise WrongAccountType("This account type does not have parties.")

    parties = descriptor.party_model.objects.filter(account=account).select_related("account", "user")
    if not include_removed:
        parties = parties.exclude(status=PartyStatus.REMOVED)

    invitations = tokens.live_invitations(descriptor, account=account)
    return CommandResult.ok({
        "parties": [party_to_dict(descriptor, party) for party in parties.order_by("created_at", "id")],
        "invitations": [invitation_to_dict(descriptor, invitation) for invitation in invitations],
    })


@_command
def get_party(actor: ActorContext, party_type: str, party_public_id) -> CommandResult:
    descriptor = get_party_type(party_type)
    party = _load_owned_party(actor, descriptor, party_public_id)
    return CommandResult.ok({"party": party_to_dict(descriptor, party)})


@_command
def update_party(actor: ActorContext, party_type: str, party_public_id, update: PartyUpdate) -> CommandResult:
    """
    Edit a party row.

    Changing the email points the row at a different person: status goes
    back to PENDING, the user link is cleared (or re-pointed at an existing
    user with the new email) and a fresh invitation is issued.
    """
    descriptor = get_party_type(party_type)
    changes = update.changes()
    unknown = set(changes) - set(descriptor.editable_fields)
    if unknown:
        raise PartyError(
            f"{descriptor.label} parties do not take: {', '.join(sorted(unknown))}."
        )

    new_email = _normalize_email(changes.pop("email")) if "email" in changes else None
    attributes = _clean_attributes(
        descriptor, {k: v for k, v in changes.items() if k in descriptor.extra_fields}
    )
    changes.update(attributes)

    issued = None
    with transaction.atomic():
        party = _load_owned_party(actor, descriptor, party_public_id, for_update=True)
        lifecycle.ensure_not_removed(party)

        email_changed = new_email is not None and new_email != party.email
        if email_changed:
            _ensure_no_duplicate(descriptor, party.account, new_email, exclude_pk=party.pk)
            tokens.revoke_invitations(descriptor, party.account, party.email)
            lifecycle.reset_for_new_email(
                party,
                new_email,
                existing_user=_find_user(new_email),
                name_given=bool(changes.get("name")),
            )

        for field_name, value in changes.items():
            if field_name in ("name", "role"):
                value = value or ""
                if field_name == "name" and not value and email_changed:
                    # keep the name taken from the re-linked user
                    continue
            setattr(party, field_name, value)

        party.save()

        if email_changed:
            issued = _issue_for(descriptor, party)

    sent = False
    if issued is not None:
        sent = send_party_invitation_email(
            descriptor, party.account, party, issued.token, is_existing_user=party.user_id is not None
        )

    data = {
        "party": party_to_dict(descriptor, party),
        "email_changed": issued is not None,
        "invitation_sent": sent,
    }
    if issued is not None:
        data["token"] = issued.token
    return CommandResult.ok(data)


@_command
def remove_party(actor: ActorContext, party_type: str, party_public_id) -> CommandResult:
    """
    Remove a party from an account.

    Trust parties are kept as REMOVED; other rows are deleted. Either way
    the party's outstanding invitations are revoked.
    """
    descriptor = get_party_type(party_type)
    with transaction.atomic():
        party = _load_owned_party(actor, descriptor, party_public_id, for_update=True)
        public_id = str(party.public_id)
        if descriptor.soft_remove:
            lifecycle.mark_removed(party)
            party.save(update_fields=["status", "updated_at"])
        else:
            party.delete()
        revoked = tokens.revoke_invitations(descriptor, party.account, party.email)

    logger.info(
        "Party removed",
        extra={"party_type": descriptor.key, "party_id": public_id, "soft": descriptor.soft_remove},
    )
    return CommandResult.ok({
        "id": public_id,
        "soft_removed": descriptor.soft_remove,
        "invitations_revoked": revoked,
    })


@_command
def resend_invitation(actor: ActorContext, party_type: str, party_public_id) -> CommandResult:
    """Issue a fresh invitation to a PENDING party. Older tokens stay valid."""
    descriptor = get_party_type(party_type)
    with transaction.atomic():
        party = _load_owned_party(actor, descriptor, party_public_id, for_update=True)
        lifecycle.ensure_can_resend(party)
        issued = _issue_for(descriptor, party)

    sent = send_party_invitation_email(
        descriptor, party.account, party, issued.token, is_existing_user=party.user_id is not None
    )
    return CommandResult.ok({
        "invitation_sent": sent,
        "token": issued.token,
        "expires_at": issued.expires_at,
    })


# =============================================================================
# Invitee operations
# =============================================================================

@_command
def respond_to_invitation(actor: ActorContext, party_type: str, party_public_id, approve: bool) -> CommandResult:
    """
    Approve or reject a PENDING party row addressed to the actor.

    The actor must be the invited person: their email matches the row or
    the row is already linked to them.
    """
    descriptor = get_party_type(party_type)
    with transaction.atomic():
        try:
            party = _load_party(descriptor, party_public_id, for_update=True)
        except PartyNotFound:
            raise PartyNotFound("Invitation not found.") from None

        if party.email != actor.email and party.user_id != actor.user.pk:
            raise PermissionDenied("This invitation is not for you.")

        lifecycle.apply_response(party, approve, user=actor.user)
        party.save(update_fields=["status", "responded_at", "user", "updated_at"])

    logger.info(
        "Party responded",
        extra={"party_type": descriptor.key, "party_id": str(party.public_id), "status": party.status},
    )
    return CommandResult.ok({"status": party.status, "party": party_to_dict(descriptor, party)})


@_command
def verify_invitation_token(email: str, token: str, party_type: Optional[str] = None) -> CommandResult:
    """
    Check an emailed token without consuming it.

    Used by the registration flow to show who sent the invitation.
    """
    email = _normalize_email(email)
    descriptor, invitation = tokens.find_invitation(email, token, party_type=party_type)
    if invitation is None:
        raise InvitationExpiredOrInvalid()
    return CommandResult.ok({"valid": True, **tokens.describe(descriptor, invitation)})


@_command
def accept_invitation(actor: ActorContext, email: str, token: str, party_type: Optional[str] = None) -> CommandResult:
    """
    Consume an invitation token as the signed-in invitee.

    All-or-nothing: the invitation is marked accepted, every party row on
    that account with this email (in every party table) is linked to the
    actor, and the PENDING ones become APPROVED. REMOVED rows are left
    alone. A token works once, and only while a party row that is not
    REMOVED still exists for it.
    """
    email = _normalize_email(email)
    if actor.email != email:
        raise IdentityMismatch()

    descriptor, invitation = tokens.find_invitation(email, token, party_type=party_type)
    if invitation is None:
        raise InvitationExpiredOrInvalid()

    now = timezone.now()
    with transaction.atomic():
        invitation = descriptor.invitation_model.objects.select_for_update().get(pk=invitation.pk)
        if invitation.accepted_at is not None:
            raise InvalidStateTransition("This invitation has already been accepted.")
        if invitation.is_expired:
            raise InvitationExpiredOrInvalid()

        party_rows = [
            other.party_model.objects
            .filter(account_id=invitation.account_id, email=email)
            .exclude(status=PartyStatus.REMOVED)
            for other in all_party_types()
        ]
        if not any(rows.exists() for rows in party_rows):
            # The party was removed after the invitation went out.
            raise InvitationExpiredOrInvalid()

        invitation.accepted_at = now
        invitation.save(update_fields=["accepted_at"])

        approved = 0
        for rows in party_rows:
            rows.update(user=actor.user, updated_at=now)
            approved += rows.filter(status=PartyStatus.PENDING).update(
                status=PartyStatus.APPROVED,
                responded_at=now,
                updated_at=now,
            )

    metrics.invitations_accepted.labels(party_type=descriptor.key).inc()
    logger.info(
        "Invitation accepted",
        extra={
            "party_type": descriptor.key,
            "account_id": str(invitation.account.public_id),
            "approved": approved,
        },
    )
    return CommandResult.ok({
        "party_type": descriptor.key,
        "account_id": str(invitation.account.public_id),
        "approved": approved,
    })


def link_pending_parties(user) -> CommandResult:
    """
    Attach party rows addressed to ``user.email`` that have no user yet.

    Runs on registration. Status is left alone: linking is not consent.
    """
    email = (user.email or "").strip().lower()
    linked = {}
    if email:
        for descriptor in all_party_types():
            linked[descriptor.key] = descriptor.party_model.objects.filter(
                email=email, user__isnull=True
            ).update(user=user)

    total = sum(linked.values())
    if total:
        logger.info("Linked party rows to new user", extra={"user_id": str(user.public_id), "linked": linked})
    return CommandResult.ok({"linked": linked, "total": total})
