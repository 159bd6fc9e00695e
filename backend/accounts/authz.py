# accounts/authz.py
"""
Authorization utilities.

Provides:
- ActorContext: Immutable context for the caller of a command
- resolve_actor: Extract actor context from a request
- require_account_owner / require_staff: raise if not allowed

Account-scoped operations are owner-only. The single full-privilege path
(unmasked identifiers, identifier search) is gated on ``is_staff``.
"""

from dataclasses import dataclass

from django.core.exceptions import PermissionDenied

from accounts.models import Account


@dataclass(frozen=True)
class ActorContext:
    """
    Immutable context for the current actor.

    Attributes:
        user: The authenticated user
    """
    user: object  # User model

    @property
    def is_authenticated(self) -> bool:
        """Mirror Django's user.is_authenticated for compatibility."""
        return bool(getattr(self.user, "is_authenticated", False))

    @property
    def is_staff(self) -> bool:
        return bool(getattr(self.user, "is_staff", False))

    @property
    def email(self) -> str:
        return (self.user.email or "").lower()

    def owns(self, account: Account) -> bool:
        return account.owner_id == self.user.pk


def resolve_actor(request) -> ActorContext:
    """
    Extract ActorContext from the current request.

    Raises:
        PermissionDenied: If user is not authenticated
    """
    user = getattr(request, "user", None)
    if not user or not user.is_authenticated:
        raise PermissionDenied("Authentication required.")
    return ActorContext(user=user)


def require_account_owner(actor: ActorContext, account: Account) -> None:
    """
    Require that the actor owns ``account``.

    Raises:
        PermissionDenied: If the account belongs to someone else
    """
    if not actor.owns(account):
        raise PermissionDenied("You do not have access to this account.")


def require_staff(actor: ActorContext) -> None:
    if not actor.is_staff:
        raise PermissionDenied("Permission denied: staff only.")


def get_owned_account(actor: ActorContext, account_public_id, for_update: bool = False) -> Account:
    """
    Load an account by public id and check the actor owns it.

    Raises:
        Account.DoesNotExist: no account with that id
        PermissionDenied: the account belongs to someone else
    """
    queryset = Account.objects.select_related("owner")
    if for_update:
        queryset = queryset.select_for_update()
    account = queryset.get(public_id=account_public_id)
    require_account_owner(actor, account)
    return account
