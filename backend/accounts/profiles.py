# accounts/profiles.py
"""
Typed profile updates and the profile read paths.

Each account type has its own update struct. Fields left at UNSET are not
touched; ``tfn=None`` or a blank string clears the stored TFN (ciphertext
and digest together).
"""
import logging
from dataclasses import dataclass, fields
from datetime import date
from typing import Any, Dict, Optional

from django.db import transaction
from django.forms.models import model_to_dict

from accounts.identifiers import protect_identifier, reveal_identifier
from accounts.models import PROFILE_MODELS, Account
from vault.masking import mask

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET: Any = _Unset()


@dataclass
class ProfileUpdate:
    tfn: Optional[str] = UNSET

    def changes(self) -> Dict[str, Any]:
        """Plain attribute changes (everything except the TFN)."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "tfn" and getattr(self, f.name) is not UNSET
        }


@dataclass
class IndividualProfileUpdate(ProfileUpdate):
    first_name: str = UNSET
    middle_name: str = UNSET
    last_name: str = UNSET
    date_of_birth: Optional[date] = UNSET
    occupation: str = UNSET
    address: str = UNSET
    suburb: str = UNSET
    state: str = UNSET
    postcode: str = UNSET


@dataclass
class CompanyProfileUpdate(ProfileUpdate):
    company_name: str = UNSET
    trading_name: str = UNSET
    abn: str = UNSET
    acn: str = UNSET
    business_address: str = UNSET
    industry: str = UNSET
    financial_year_end: str = UNSET


@dataclass
class TrustProfileUpdate(ProfileUpdate):
    trust_name: str = UNSET
    trust_type: str = UNSET
    abn: str = UNSET
    established_date: Optional[date] = UNSET
    address: str = UNSET


@dataclass
class PartnershipProfileUpdate(ProfileUpdate):
    partnership_name: str = UNSET
    trading_name: str = UNSET
    abn: str = UNSET
    business_address: str = UNSET
    industry: str = UNSET
    established_date: Optional[date] = UNSET


PROFILE_UPDATE_TYPES = {
    Account.AccountType.INDIVIDUAL: IndividualProfileUpdate,
    Account.AccountType.COMPANY: CompanyProfileUpdate,
    Account.AccountType.TRUST: TrustProfileUpdate,
    Account.AccountType.PARTNERSHIP: PartnershipProfileUpdate,
}


def upsert_profile(account: Account, update: ProfileUpdate):
    """
    Create or update the account's type-specific profile.

    Returns (profile, created).

    Raises:
        TypeError: the update struct does not match the account type.
        DuplicateIdentifierError: the TFN belongs to another open account.
    """
    expected = PROFILE_UPDATE_TYPES[account.account_type]
    if not isinstance(update, expected):
        raise TypeError(
            f"{account.get_account_type_display()} accounts take {expected.__name__}, "
            f"got {type(update).__name__}"
        )

    model = PROFILE_MODELS[account.account_type]
    with transaction.atomic():
        profile = model.objects.select_for_update().filter(account=account).first()
        created = profile is None
        if created:
            profile = model(account=account)

        for name, value in update.changes().items():
            setattr(profile, name, value)

        if update.tfn is not UNSET:
            ciphertext, digest = protect_identifier(update.tfn, account)
            profile.tfn_ciphertext = ciphertext
            profile.tfn_digest = digest

        profile.save()

    logger.info(
        "Profile %s for account %s",
        "created" if created else "updated",
        account.public_id,
    )
    return profile, created


def profile_to_dict(profile, reveal: bool = False) -> Dict[str, Any]:
    """
    Render a profile for callers.

    Owner-facing reads get a masked TFN; ``reveal=True`` is the
    full-privilege (admin) path and returns it unmasked.
    """
    data = model_to_dict(profile, exclude=["id", "account", "tfn_ciphertext", "tfn_digest"])
    data["account_id"] = str(profile.account.public_id)

    plaintext, unavailable = reveal_identifier(profile)
    data["tfn"] = plaintext if reveal else mask(plaintext)
    data["tfn_unavailable"] = unavailable
    return data
