# tests/test_pending_requests.py
"""
Tests for the cross-type pending request view.
"""

import pytest
from django.contrib.auth import get_user_model

from accounts.models import CompanyProfile
from parties import commands
from parties.models import CompanyPartner
from parties.queries import PendingRequests, get_pending_requests_for_user


def add(actor, account, party_type, email, **kwargs):
    result = commands.add_party(actor, account.public_id, party_type, email, **kwargs)
    assert result.success, result.error
    return result.data["party"]["id"]


@pytest.mark.django_db
class TestPendingRequests:
    def test_groups_by_party_type(
        self, owner_actor, invitee, company_account, partnership_account, trust_account
    ):
        add(owner_actor, company_account, "company", "invitee@test.com", is_shareholder=True)
        add(owner_actor, partnership_account, "partnership", "invitee@test.com")
        add(owner_actor, trust_account, "trust", "invitee@test.com", role="Trustee")

        pending = get_pending_requests_for_user(invitee.pk)

        assert pending.total == 3
        assert [s.account_name for s in pending.company] == ["Acme Pty Ltd"]
        assert [s.account_name for s in pending.partnership] == ["Owner & Co"]
        assert [s.role for s in pending.trust] == ["Trustee"]
        summary = pending.company[0]
        assert summary.party_type == "company"
        assert summary.role == "Shareholder"
        assert summary.inviter_name == "Olivia Owner"
        assert summary.inviter_email == "owner@test.com"
        assert summary.email == "invitee@test.com"

    def test_spouse_requests_are_listed(self, owner_actor, invitee, individual_account):
        add(owner_actor, individual_account, "spouse", "invitee@test.com")

        pending = get_pending_requests_for_user(invitee.pk)

        assert pending.total == 1
        summary = pending.spouse[0]
        assert summary.party_type == "spouse"
        assert summary.role == "Spouse"
        assert summary.account_name == "Olivia Owner"
        assert pending.to_dict()["spouse"][0]["email"] == "invitee@test.com"

    def test_matches_by_email_before_link(self, owner_actor, company_account):
        add(owner_actor, company_account, "company", "later@example.com")

        user = get_user_model().objects.create_user(email="later@example.com", password="pw12345678")
        CompanyPartner.objects.update(user=None)
        pending = get_pending_requests_for_user(user.pk)

        assert len(pending.company) == 1

    def test_matches_by_link_after_email_change(self, owner_actor, invitee, company_account):
        add(owner_actor, company_account, "company", "invitee@test.com")
        invitee.email = "ivy@elsewhere.com"
        invitee.save()

        assert len(get_pending_requests_for_user(invitee.pk).company) == 1

    def test_only_pending_rows(self, owner_actor, invitee_actor, invitee, company_account, trust_account):
        party_id = add(owner_actor, company_account, "company", "invitee@test.com")
        trust_party = add(owner_actor, trust_account, "trust", "invitee@test.com")
        commands.respond_to_invitation(invitee_actor, "company", party_id, approve=True)
        commands.remove_party(owner_actor, "trust", trust_party)

        assert get_pending_requests_for_user(invitee.pk).total == 0

    def test_entity_name_comes_from_profile(self, owner_actor, invitee, company_account):
        CompanyProfile.objects.create(account=company_account, company_name="Acme", trading_name="Acme Widgets")
        add(owner_actor, company_account, "company", "invitee@test.com")

        summary = get_pending_requests_for_user(invitee.pk).company[0]

        assert summary.entity_name == "Acme Widgets"
        assert summary.account_name == "Acme Pty Ltd"

    def test_unknown_user_gets_empty_lists(self, db):
        pending = get_pending_requests_for_user(999999)

        assert pending == PendingRequests()
        assert pending.to_dict() == {"company": [], "partnership": [], "trust": [], "spouse": []}

    def test_other_peoples_requests_are_excluded(self, owner_actor, other_owner, company_account):
        add(owner_actor, company_account, "company", "invitee@test.com")
        assert get_pending_requests_for_user(other_owner.pk).total == 0
