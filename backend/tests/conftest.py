# tests/conftest.py
"""
Pytest fixtures for the practice backend tests.

- Field keys are injected per test through pytest-django's ``settings``
  fixture; vault.keys rebuilds its cached cipher/indexer on change.
- bcrypt rounds are dropped to the minimum so token hashing stays fast.
"""

import pytest
from uuid import uuid4

from django.contrib.auth import get_user_model

from accounts.authz import ActorContext
from accounts.models import Account

User = get_user_model()

TEST_ENCRYPTION_KEY = "test-encryption-key-0123456789abcdefghijklmnop"
TEST_DIGEST_KEY = "test-digest-key-0123456789abcdefghijklmnopqrstu"


@pytest.fixture(autouse=True)
def _field_keys(settings):
    """Configure both field keys and cheap token hashing for every test."""
    settings.FIELD_ENCRYPTION_KEY = TEST_ENCRYPTION_KEY
    settings.FIELD_DIGEST_KEY = TEST_DIGEST_KEY
    settings.INVITATION_TOKEN_BCRYPT_ROUNDS = 4
    settings.INVITATION_EXPIRY_DAYS = 7
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
    settings.FRONTEND_URL = "https://portal.test"


# =============================================================================
# User Fixtures
# =============================================================================

def make_user(email, name="", **extra):
    return User.objects.create_user(email=email, password="testpass123", name=name, **extra)


@pytest.fixture
def owner(db):
    """The user who owns the accounts under test."""
    return make_user("owner@test.com", name="Olivia Owner")


@pytest.fixture
def other_owner(db):
    return make_user("other@test.com", name="Oscar Other")


@pytest.fixture
def invitee(db):
    """A registered user who gets invited onto accounts."""
    return make_user("invitee@test.com", name="Ivy Invitee")


@pytest.fixture
def staff_user(db):
    return make_user("staff@test.com", name="Sam Staff", is_staff=True)


# =============================================================================
# Actor Context Fixtures
# =============================================================================

@pytest.fixture
def owner_actor(owner):
    return ActorContext(user=owner)


@pytest.fixture
def other_actor(other_owner):
    return ActorContext(user=other_owner)


@pytest.fixture
def invitee_actor(invitee):
    return ActorContext(user=invitee)


@pytest.fixture
def staff_actor(staff_user):
    return ActorContext(user=staff_user)


# =============================================================================
# Account Fixtures
# =============================================================================

def make_account(owner, account_type, name, status=Account.Status.ACTIVE):
    return Account.objects.create(
        public_id=uuid4(),
        owner=owner,
        account_type=account_type,
        name=name,
        status=status,
    )


@pytest.fixture
def individual_account(owner):
    return make_account(owner, Account.AccountType.INDIVIDUAL, "Olivia Owner")


@pytest.fixture
def company_account(owner):
    return make_account(owner, Account.AccountType.COMPANY, "Acme Pty Ltd")


@pytest.fixture
def partnership_account(owner):
    return make_account(owner, Account.AccountType.PARTNERSHIP, "Owner & Co")


@pytest.fixture
def trust_account(owner):
    return make_account(owner, Account.AccountType.TRUST, "Owner Family Trust")


@pytest.fixture
def other_company_account(other_owner):
    return make_account(other_owner, Account.AccountType.COMPANY, "Other Holdings Pty Ltd")


@pytest.fixture
def account_factory(db):
    """Build extra accounts: account_factory(owner, account_type, name, status=...)."""
    return make_account
