# accounts/models.py
"""
Users, their legal accounts, and the per-type profiles behind them.

One User owns many Accounts. Each Account has exactly one profile whose
variant is selected by ``account_type`` (see PROFILE_MODELS). Every
profile can carry a tax file number, stored only as:

- tfn_ciphertext: FieldCipher output (never plaintext)
- tfn_digest: keyed HMAC of the normalized TFN, for equality lookups

Both are written together by accounts.profiles.upsert_profile.
"""
import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.exceptions import ObjectDoesNotExist
from django.db import models
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The given email must be set")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    username = None
    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    email = models.EmailField("email address", unique=True)
    name = models.CharField(max_length=150, blank=True, default="")

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    objects = UserManager()

    def __str__(self):
        return self.email

    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@")[0]


class Account(models.Model):
    """A legal entity (person, company, trust or partnership) owned by one user."""

    class AccountType(models.TextChoices):
        INDIVIDUAL = "INDIVIDUAL", "Individual"
        COMPANY = "COMPANY", "Company"
        TRUST = "TRUST", "Trust"
        PARTNERSHIP = "PARTNERSHIP", "Partnership"

    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        PENDING = "PENDING", "Pending"
        ACTIVE = "ACTIVE", "Active"
        SUSPENDED = "SUSPENDED", "Suspended"
        CLOSED = "CLOSED", "Closed"

    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="accounts",
    )
    account_type = models.CharField(max_length=20, choices=AccountType.choices)
    name = models.CharField(max_length=200)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Account")
        verbose_name_plural = _("Accounts")
        indexes = [
            models.Index(fields=["owner", "status"], name="account_owner_status_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_account_type_display()})"

    @property
    def is_closed(self) -> bool:
        return self.status == self.Status.CLOSED

    @property
    def profile(self):
        """The type-specific profile, or None if it has not been written yet."""
        related_name = PROFILE_RELATED_NAMES.get(self.account_type)
        if related_name is None:
            return None
        try:
            return getattr(self, related_name)
        except ObjectDoesNotExist:
            return None

    @property
    def display_name(self) -> str:
        profile = self.profile
        if profile is not None and profile.display_name:
            return profile.display_name
        return self.name


class SensitiveIdentifierMixin(models.Model):
    """Encrypted TFN plus its lookup digest. Present together or not at all."""

    tfn_ciphertext = models.TextField(null=True, blank=True)
    tfn_digest = models.CharField(max_length=64, null=True, blank=True, db_index=True)

    class Meta:
        abstract = True

    @property
    def has_tfn(self) -> bool:
        return bool(self.tfn_ciphertext)

    def clear_tfn(self):
        self.tfn_ciphertext = None
        self.tfn_digest = None


class Profile(SensitiveIdentifierMixin):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    @property
    def display_name(self) -> str:
        return ""


class IndividualProfile(Profile):
    account = models.OneToOneField(Account, on_delete=models.CASCADE, related_name="individual_profile")
    first_name = models.CharField(max_length=100, blank=True, default="")
    middle_name = models.CharField(max_length=100, blank=True, default="")
    last_name = models.CharField(max_length=100, blank=True, default="")
    date_of_birth = models.DateField(null=True, blank=True)
    occupation = models.CharField(max_length=150, blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")
    suburb = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=10, blank=True, default="")
    postcode = models.CharField(max_length=10, blank=True, default="")

    @property
    def display_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p)


class CompanyProfile(Profile):
    account = models.OneToOneField(Account, on_delete=models.CASCADE, related_name="company_profile")
    company_name = models.CharField(max_length=200, blank=True, default="")
    trading_name = models.CharField(max_length=200, blank=True, default="")
    abn = models.CharField(max_length=14, blank=True, default="")
    acn = models.CharField(max_length=11, blank=True, default="")
    business_address = models.CharField(max_length=255, blank=True, default="")
    industry = models.CharField(max_length=150, blank=True, default="")
    financial_year_end = models.CharField(max_length=5, blank=True, default="")

    @property
    def display_name(self) -> str:
        return self.trading_name or self.company_name


class TrustProfile(Profile):
    class TrustType(models.TextChoices):
        DISCRETIONARY = "DISCRETIONARY", "Discretionary"
        UNIT = "UNIT", "Unit"
        HYBRID = "HYBRID", "Hybrid"
        SMSF = "SMSF", "Self-managed super fund"
        TESTAMENTARY = "TESTAMENTARY", "Testamentary"
        OTHER = "OTHER", "Other"

    account = models.OneToOneField(Account, on_delete=models.CASCADE, related_name="trust_profile")
    trust_name = models.CharField(max_length=200, blank=True, default="")
    trust_type = models.CharField(max_length=20, choices=TrustType.choices, blank=True, default="")
    abn = models.CharField(max_length=14, blank=True, default="")
    established_date = models.DateField(null=True, blank=True)
    address = models.CharField(max_length=255, blank=True, default="")

    @property
    def display_name(self) -> str:
        return self.trust_name


class PartnershipProfile(Profile):
    account = models.OneToOneField(Account, on_delete=models.CASCADE, related_name="partnership_profile")
    partnership_name = models.CharField(max_length=200, blank=True, default="")
    trading_name = models.CharField(max_length=200, blank=True, default="")
    abn = models.CharField(max_length=14, blank=True, default="")
    business_address = models.CharField(max_length=255, blank=True, default="")
    industry = models.CharField(max_length=150, blank=True, default="")
    established_date = models.DateField(null=True, blank=True)

    @property
    def display_name(self) -> str:
        return self.trading_name or self.partnership_name


PROFILE_MODELS = {
    Account.AccountType.INDIVIDUAL: IndividualProfile,
    Account.AccountType.COMPANY: CompanyProfile,
    Account.AccountType.TRUST: TrustProfile,
    Account.AccountType.PARTNERSHIP: PartnershipProfile,
}

PROFILE_RELATED_NAMES = {
    Account.AccountType.INDIVIDUAL: "individual_profile",
    Account.AccountType.COMPANY: "company_profile",
    Account.AccountType.TRUST: "trust_profile",
    Account.AccountType.PARTNERSHIP: "partnership_profile",
}
