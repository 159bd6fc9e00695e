# parties/email_service.py
"""
Email service for party invitations.

Invitation emails carry the raw token in a link to the frontend. They are
fire-and-forget: a delivery failure is logged and reported as False, and
never rolls back the invitation that was already issued.
"""

import logging
from urllib.parse import urlencode

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils.html import strip_tags

logger = logging.getLogger(__name__)


def build_invitation_url(email: str, token: str, party_type: str) -> str:
    query = urlencode({"email": email, "token": token, "type": party_type})
    return f"{settings.FRONTEND_URL}/accept-invitation?{query}"


def send_party_invitation_email(descriptor, account, party, token: str, is_existing_user: bool = False) -> bool:
    """
    Send an invitation to join ``account`` as a party.

    Args:
        descriptor: PartyTypeDescriptor for the party
        account: The account the party is invited to
        party: The party row (provides email, name, role)
        token: Raw invitation token (not the hash)
        is_existing_user: Whether the invitee already has a login

    Returns:
        True if email was sent successfully, False otherwise
    """
    inviter = account.owner
    context = {
        "party_name": party.name or party.email.split("@")[0],
        "role": party.display_role,
        "account_name": account.display_name,
        "account_type": account.get_account_type_display(),
        "inviter_name": inviter.display_name,
        "inviter_email": inviter.email,
        "is_existing_user": is_existing_user,
        "invitation_url": build_invitation_url(party.email, token, descriptor.key),
        "expiry_days": settings.INVITATION_EXPIRY_DAYS,
    }

    try:
        html_message = render_to_string("emails/party_invitation.html", context)
        plain_message = strip_tags(html_message)

        send_mail(
            subject=f"{inviter.display_name} invited you to {account.display_name}",
            message=plain_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[party.email],
            html_message=html_message,
            fail_silently=False,
        )
        logger.info(f"Invitation email sent for {descriptor.key} party {party.public_id}")
        return True
    except Exception as e:
        logger.error(f"Failed to send invitation email for {descriptor.key} party {party.public_id}: {e}")
        return False
