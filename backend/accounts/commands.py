# accounts/commands.py
"""
Command layer for account profile operations.

ALL writes of sensitive identifiers MUST go through these commands:
- Profile create/update (TFN encryption + uniqueness)
- Profile reads (masked for owners, unmasked for staff)
- Identifier search (staff only)

This ensures:
1. Consistent ownership checks
2. The ciphertext and digest are always written together
3. Failures reach callers as CommandResult, never as raw exceptions
"""
import logging

from django.core.exceptions import PermissionDenied

from accounts import profiles
from accounts.authz import ActorContext, get_owned_account, require_staff
from accounts.identifiers import DuplicateIdentifierError, find_accounts_by_identifier
from accounts.models import Account

logger = logging.getLogger(__name__)


class CommandResult:
    def __init__(self, success: bool, data=None, error: str = None, code: str = None):
        self.success = success
        self.data = data
        self.error = error
        # Stable machine-readable reason on failure
        self.code = code

    @classmethod
    def ok(cls, data=None):
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, code: str = "invalid", data=None):
        return cls(success=False, error=error, code=code, data=data)

    @classmethod
    def from_exception(cls, exc: Exception, data=None):
        """Build a failure from an exception carrying a ``code`` attribute."""
        return cls.fail(str(exc), code=getattr(exc, "code", "invalid"), data=data)

    def __repr__(self):
        if self.success:
            return "<CommandResult ok>"
        return f"<CommandResult fail code={self.code!r} error={self.error!r}>"


def upsert_profile(actor: ActorContext, account_public_id, update: profiles.ProfileUpdate) -> CommandResult:
    """
    Create or update the profile of an account the actor owns.

    Args:
        actor: The actor context
        account_public_id: Public id of the account
        update: The typed update matching the account type

    Returns:
        CommandResult with the rendered (masked) profile and ``created``.
        On a TFN conflict, ``data`` describes the conflicting account.
    """
    try:
        account = get_owned_account(actor, account_public_id)
    except Account.DoesNotExist:
        return CommandResult.fail("Account not found.", code="not_found")
    except PermissionDenied as exc:
        return CommandResult.fail(str(exc), code="access_denied")

    try:
        profile, created = profiles.upsert_profile(account, update)
    except DuplicateIdentifierError as exc:
        return CommandResult.from_exception(exc, data=exc.to_dict())
    except TypeError as exc:
        return CommandResult.fail(str(exc), code="wrong_account_type")

    return CommandResult.ok({
        "profile": profiles.profile_to_dict(profile),
        "created": created,
    })


def get_profile(actor: ActorContext, account_public_id, reveal: bool = False) -> CommandResult:
    """
    Read an account profile.

    Owners get the TFN masked. ``reveal=True`` returns it unmasked and is
    restricted to staff, who may read any account.
    """
    try:
        if reveal:
            require_staff(actor)
            account = Account.objects.get(public_id=account_public_id)
        else:
            account = get_owned_account(actor, account_public_id)
    except Account.DoesNotExist:
        return CommandResult.fail("Account not found.", code="not_found")
    except PermissionDenied as exc:
        return CommandResult.fail(str(exc), code="access_denied")

    profile = account.profile
    if profile is None:
        return CommandResult.ok({"profile": None})

    if reveal:
        logger.info(
            "Unmasked profile read",
            extra={"account_id": str(account.public_id), "actor_id": str(actor.user.public_id)},
        )
    return CommandResult.ok({"profile": profiles.profile_to_dict(profile, reveal=reveal)})


def search_accounts_by_identifier(actor: ActorContext, search: str) -> CommandResult:
    """Staff-only exact-match account lookup by TFN."""
    try:
        require_staff(actor)
    except PermissionDenied as exc:
        return CommandResult.fail(str(exc), code="access_denied")

    accounts = find_accounts_by_identifier(search)
    return CommandResult.ok({
        "accounts": [
            {
                "account_id": str(account.public_id),
                "name": account.name,
                "account_type": account.account_type,
                "status": account.status,
                "owner_email": account.owner.email,
            }
            for account in accounts
        ],
    })
