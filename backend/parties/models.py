# parties/models.py
"""
Party rows and their invitations.

A party row (PartyRecord) is a co-owner of an account: a company director
or shareholder, a partnership partner, a trust trustee/beneficiary, or
the spouse on an individual account.
It is created PENDING together with an Invitation, and moves to APPROVED
or REJECTED when the invited person responds.

Invitations store only a slow salted hash of the single-use token. Rows
are never edited after creation except to set ``accepted_at``; expired
unaccepted rows are deleted by the purge sweep, and a party's unaccepted
rows are revoked when the party is removed or re-addressed.
"""
import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

from accounts.models import Account


class PartyStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"
    REMOVED = "REMOVED", "Removed"


class PartyRecord(models.Model):
    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    email = models.EmailField()
    name = models.CharField(max_length=200, blank=True, default="")
    role = models.CharField(max_length=100, blank=True, default="")
    status = models.CharField(max_length=20, choices=PartyStatus.choices, default=PartyStatus.PENDING)
    # Weak reference: the person may not have registered yet.
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    responded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.email} ({self.status})"

    @property
    def is_pending(self) -> bool:
        return self.status == PartyStatus.PENDING

    @property
    def display_role(self) -> str:
        return self.role


class CompanyPartner(PartyRecord):
    """Director and/or shareholder of a company account."""

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="company_partners")
    is_director = models.BooleanField(default=False)
    is_shareholder = models.BooleanField(default=False)
    share_count = models.PositiveIntegerField(null=True, blank=True)
    ownership_percent = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    class Meta(PartyRecord.Meta):
        indexes = [
            models.Index(fields=["account", "email"], name="company_partner_acct_email_idx"),
            models.Index(fields=["email", "status"], name="company_partner_email_st_idx"),
        ]

    @property
    def display_role(self) -> str:
        if self.is_director and self.is_shareholder:
            return "Director & Shareholder"
        if self.is_director:
            return "Director"
        if self.is_shareholder:
            return "Shareholder"
        return self.role


class PartnershipPartner(PartyRecord):
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="partnership_partners")
    ownership_percent = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    class Meta(PartyRecord.Meta):
        indexes = [
            models.Index(fields=["account", "email"], name="partnership_partner_acct_idx"),
            models.Index(fields=["email", "status"], name="partnership_partner_st_idx"),
        ]


class TrustPartner(PartyRecord):
    """Trustee or beneficiary of a trust account. Removal is a soft delete."""

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="trust_partners")
    beneficiary_percent = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    class Meta(PartyRecord.Meta):
        indexes = [
            models.Index(fields=["account", "email"], name="trust_partner_acct_email_idx"),
            models.Index(fields=["email", "status"], name="trust_partner_email_st_idx"),
        ]


class SpousePartner(PartyRecord):
    """Spouse linked to an individual account. At most one per account."""

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="spouse_partners")

    class Meta(PartyRecord.Meta):
        indexes = [
            models.Index(fields=["account", "email"], name="spouse_partner_acct_email_idx"),
            models.Index(fields=["email", "status"], name="spouse_partner_email_st_idx"),
        ]

    @property
    def display_role(self) -> str:
        return self.role or "Spouse"


class Invitation(models.Model):
    email = models.EmailField()
    name = models.CharField(max_length=200, blank=True, default="")
    role = models.CharField(max_length=100, blank=True, default="")
    # Ownership / beneficiary share at the time of invite
    percentage = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    token_hash = models.CharField(max_length=255)
    expires_at = models.DateTimeField()
    accepted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    def __str__(self):
        return f"Invitation for {self.email}"

    @property
    def is_expired(self) -> bool:
        return timezone.now() >= self.expires_at

    @property
    def is_accepted(self) -> bool:
        return self.accepted_at is not None

    @property
    def is_live(self) -> bool:
        return not self.is_accepted and not self.is_expired


class CompanyInvitation(Invitation):
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="company_invitations")

    class Meta(Invitation.Meta):
        indexes = [
            models.Index(fields=["email", "expires_at"], name="company_invite_email_exp_idx"),
        ]


class PartnershipInvitation(Invitation):
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="partnership_invitations")

    class Meta(Invitation.Meta):
        indexes = [
            models.Index(fields=["email", "expires_at"], name="partnership_invite_email_idx"),
        ]


class TrustInvitation(Invitation):
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="trust_invitations")

    class Meta(Invitation.Meta):
        indexes = [
            models.Index(fields=["email", "expires_at"], name="trust_invite_email_exp_idx"),
        ]


class SpouseInvitation(Invitation):
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="spouse_invitations")

    class Meta(Invitation.Meta):
        indexes = [
            models.Index(fields=["email", "expires_at"], name="spouse_invite_email_exp_idx"),
        ]
