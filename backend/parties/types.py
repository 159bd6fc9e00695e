# parties/types.py
"""
Party-type descriptors.

The four party kinds differ only in data: which account type they attach
to, which models hold their rows and invitations, which extra fields they
carry, whether removal is soft, and how many one account may hold.
Everything else (add, edit, respond, resend, accept) is shared code in
parties.commands driven by these.
"""
from dataclasses import dataclass
from typing import Optional, Tuple, Type

from accounts.models import Account
from parties.exceptions import UnknownPartyType
from parties.models import (
    CompanyInvitation,
    CompanyPartner,
    PartnershipInvitation,
    PartnershipPartner,
    SpouseInvitation,
    SpousePartner,
    TrustInvitation,
    TrustPartner,
)


@dataclass(frozen=True)
class PartyTypeDescriptor:
    key: str
    label: str
    account_type: str
    party_model: Type[CompanyPartner]
    invitation_model: Type[CompanyInvitation]
    # Type-specific attributes an owner may set besides email/name/role
    extra_fields: Tuple[str, ...] = ()
    # Field copied onto the invitation as its percentage snapshot
    percentage_field: Optional[str] = None
    soft_remove: bool = False
    # Non-removed rows allowed per account (None: unlimited)
    max_parties: Optional[int] = None

    @property
    def editable_fields(self) -> Tuple[str, ...]:
        return ("email", "name", "role") + self.extra_fields


COMPANY = PartyTypeDescriptor(
    key="company",
    label="Company",
    account_type=Account.AccountType.COMPANY,
    party_model=CompanyPartner,
    invitation_model=CompanyInvitation,
    extra_fields=("is_director", "is_shareholder", "share_count", "ownership_percent"),
    percentage_field="ownership_percent",
)

PARTNERSHIP = PartyTypeDescriptor(
    key="partnership",
    label="Partnership",
    account_type=Account.AccountType.PARTNERSHIP,
    party_model=PartnershipPartner,
    invitation_model=PartnershipInvitation,
    extra_fields=("ownership_percent",),
    percentage_field="ownership_percent",
)

TRUST = PartyTypeDescriptor(
    key="trust",
    label="Trust",
    account_type=Account.AccountType.TRUST,
    party_model=TrustPartner,
    invitation_model=TrustInvitation,
    extra_fields=("beneficiary_percent",),
    percentage_field="beneficiary_percent",
    soft_remove=True,
)

SPOUSE = PartyTypeDescriptor(
    key="spouse",
    label="Spouse",
    account_type=Account.AccountType.INDIVIDUAL,
    party_model=SpousePartner,
    invitation_model=SpouseInvitation,
    max_parties=1,
)

_REGISTRY = {descriptor.key: descriptor for descriptor in (COMPANY, PARTNERSHIP, TRUST, SPOUSE)}


def all_party_types() -> Tuple[PartyTypeDescriptor, ...]:
    return tuple(_REGISTRY.values())


def get_party_type(key) -> PartyTypeDescriptor:
    """Look up a descriptor by key ("company", "partnership", "trust", "spouse")."""
    if isinstance(key, PartyTypeDescriptor):
        return key
    try:
        return _REGISTRY[key]
    except KeyError:
        raise UnknownPartyType(key) from None


def party_type_for_account(account: Account) -> Optional[PartyTypeDescriptor]:
    for descriptor in _REGISTRY.values():
        if descriptor.account_type == account.account_type:
            return descriptor
    return None
