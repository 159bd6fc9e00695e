# parties/queries.py
"""
Read models across the party types.

get_pending_requests_for_user answers "what is waiting for me?" for a
signed-in person: every PENDING party row addressed to them, either by a
user link or by their email, grouped by party type.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from django.contrib.auth import get_user_model
from django.db.models import Q

from parties.models import PartyStatus
from parties.types import COMPANY, PARTNERSHIP, SPOUSE, TRUST, PartyTypeDescriptor

User = get_user_model()


@dataclass(frozen=True)
class InvitationSummary:
    party_id: str
    party_type: str
    account_id: str
    account_name: str
    account_type: str
    # Entity name from the account's profile, falling back to the account name
    entity_name: str
    inviter_name: str
    inviter_email: str
    role: str
    email: str
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "party_id": self.party_id,
            "party_type": self.party_type,
            "account_id": self.account_id,
            "account_name": self.account_name,
            "account_type": self.account_type,
            "entity_name": self.entity_name,
            "inviter_name": self.inviter_name,
            "inviter_email": self.inviter_email,
            "role": self.role,
            "email": self.email,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class PendingRequests:
    company: List[InvitationSummary] = field(default_factory=list)
    partnership: List[InvitationSummary] = field(default_factory=list)
    trust: List[InvitationSummary] = field(default_factory=list)
    spouse: List[InvitationSummary] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.company) + len(self.partnership) + len(self.trust) + len(self.spouse)

    def to_dict(self) -> dict:
        return {
            "company": [s.to_dict() for s in self.company],
            "partnership": [s.to_dict() for s in self.partnership],
            "trust": [s.to_dict() for s in self.trust],
            "spouse": [s.to_dict() for s in self.spouse],
        }


def _summaries(descriptor: PartyTypeDescriptor, user) -> List[InvitationSummary]:
    rows = (
        descriptor.party_model.objects
        .filter(Q(user=user) | Q(email=user.email.lower()), status=PartyStatus.PENDING)
        .select_related("account", "account__owner")
        .order_by("created_at")
    )
    summaries = []
    for party in rows:
        account = party.account
        owner = account.owner
        summaries.append(InvitationSummary(
            party_id=str(party.public_id),
            party_type=descriptor.key,
            account_id=str(account.public_id),
            account_name=account.name,
            account_type=account.account_type,
            entity_name=account.display_name,
            inviter_name=owner.display_name,
            inviter_email=owner.email,
            role=party.display_role,
            email=party.email,
            created_at=party.created_at,
        ))
    return summaries


def get_pending_requests_for_user(user_id) -> PendingRequests:
    """
    PENDING party rows for a user across every party type.

    An unknown user yields empty lists.
    """
    user: Optional[User] = User.objects.filter(pk=user_id).first()
    if user is None:
        return PendingRequests()

    return PendingRequests(
        company=_summaries(COMPANY, user),
        partnership=_summaries(PARTNERSHIP, user),
        trust=_summaries(TRUST, user),
        spouse=_summaries(SPOUSE, user),
    )
